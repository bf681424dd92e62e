from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from aurelane.models.storage_slot import StorageSlot


class InMemorySlotStorage:
    """
    String-keyed storage slots held in a plain dict.
    Slots are scoped by session id, like the browser's per-origin storage.
    """

    def __init__(self):
        self._slots: Dict[Tuple[str, str], str] = {}

    def get(self, session_id: str, key: str) -> Optional[str]:
        return self._slots.get((session_id, key))

    def set(self, session_id: str, key: str, value: str) -> None:
        self._slots[(session_id, key)] = value

    def remove(self, session_id: str, key: str) -> None:
        self._slots.pop((session_id, key), None)

    def drop_sessions(self, session_ids) -> None:
        ids = set(session_ids)
        for k in [k for k in self._slots if k[0] in ids]:
            del self._slots[k]

    def ping(self) -> bool:
        return True


class SlotRepository:
    """
    SQLAlchemy-backed storage slots. Writes commit immediately so a slot is
    durable as soon as `set` returns.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find(self, session_id: str, key: str) -> Optional[StorageSlot]:
        return (
            self.db.query(StorageSlot)
            .filter(StorageSlot.session_id == session_id, StorageSlot.key == key)
            .first()
        )

    def get(self, session_id: str, key: str) -> Optional[str]:
        slot = self._find(session_id, key)
        return slot.value if slot else None

    def set(self, session_id: str, key: str, value: str) -> None:
        try:
            slot = self._find(session_id, key)
            if slot:
                slot.value = value
                slot.updated_at = datetime.now(timezone.utc)
            else:
                self.db.add(StorageSlot(session_id=session_id, key=key, value=value))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def remove(self, session_id: str, key: str) -> None:
        slot = self._find(session_id, key)
        if slot:
            self.db.delete(slot)
            self.db.commit()

    def ping(self) -> bool:
        # raises if the table or connection is unusable
        self.db.query(StorageSlot.id).limit(1).all()
        return True

    def purge_stale(self, ttl_seconds: int) -> List[str]:
        """
        Delete every slot untouched for `ttl_seconds` and return the session
        ids that lost at least one slot.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)
        try:
            stale = (
                self.db.query(StorageSlot)
                .filter(StorageSlot.updated_at < cutoff)
                .all()
            )
            sessions = sorted({s.session_id for s in stale})
            for s in stale:
                self.db.delete(s)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return sessions


class WriteBackSlotStorage:
    """
    Durable slot storage fronted by an in-process copy of every slot whose
    durable write failed. Reads prefer that copy, so a session keeps seeing
    its latest value until a later write reaches the backing storage.
    `set` still raises when the backing write fails.
    """

    def __init__(self, backing, pending: InMemorySlotStorage):
        self.backing = backing
        self.pending = pending

    def get(self, session_id: str, key: str) -> Optional[str]:
        value = self.pending.get(session_id, key)
        if value is not None:
            return value
        return self.backing.get(session_id, key)

    def set(self, session_id: str, key: str, value: str) -> None:
        self.pending.set(session_id, key, value)
        self.backing.set(session_id, key, value)
        # durable now, the backing storage is authoritative again
        self.pending.remove(session_id, key)

    def remove(self, session_id: str, key: str) -> None:
        self.pending.remove(session_id, key)
        self.backing.remove(session_id, key)

    def ping(self) -> bool:
        return self.backing.ping()

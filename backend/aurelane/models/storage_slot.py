from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from aurelane.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class StorageSlot(Base):
    __tablename__ = "storage_slots"
    __table_args__ = (UniqueConstraint("session_id", "key", name="uq_slot_session_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), nullable=False, index=True)
    key = Column(String(128), nullable=False)
    value = Column(Text, nullable=False)  # opaque string, JSON for the cart slot
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<StorageSlot session={self.session_id} key={self.key}>"

from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from aurelane.config import settings
from aurelane.models.line_item import LineItem, discount_from_fields, discount_to_fields
from aurelane.schemas.cart_schema import StoredLineItem
from aurelane.utils.logger import get_logger

logger = get_logger(__name__)

_SNAPSHOT = TypeAdapter(List[StoredLineItem])


def serialize_items(items: Sequence[LineItem]) -> str:
    stored = []
    for it in items:
        discount, discount_type = discount_to_fields(it.discount)
        stored.append(
            StoredLineItem(
                id=it.id,
                unit_price=it.unit_price,
                quantity=it.quantity,
                name=it.name,
                category=it.category,
                discount=discount,
                discount_type=discount_type,
                image=it.image,
            )
        )
    return _SNAPSHOT.dump_json(stored, by_alias=True).decode("utf-8")


def deserialize_items(raw: str) -> List[LineItem]:
    """
    Parse a stored snapshot. Raises ValueError (pydantic's ValidationError
    included) for bad JSON, mis-shaped entries or duplicate ids.
    """
    stored = _SNAPSHOT.validate_json(raw)
    seen = set()
    items = []
    for s in stored:
        if s.id in seen:
            raise ValueError(f"Duplicate line item id in snapshot: {s.id!r}")
        seen.add(s.id)
        items.append(
            LineItem(
                id=s.id,
                unit_price=s.unit_price,
                quantity=s.quantity,
                name=s.name,
                category=s.category,
                discount=discount_from_fields(s.discount, s.discount_type),
                image=s.image,
            )
        )
    return items


class CartSnapshotRepository:
    """
    Reads and writes the cart snapshot in one storage slot of one session.
    `storage` is any object with get/set(session_id, key[, value]).
    """

    def __init__(self, storage, session_id: str, key: str = None):
        self.storage = storage
        self.session_id = session_id
        self.key = key or settings.CART_STORAGE_KEY

    def load(self) -> List[LineItem]:
        raw = self.storage.get(self.session_id, self.key)
        if raw is None:
            return []
        try:
            return deserialize_items(raw)
        except (ValidationError, ValueError) as e:
            logger.warning(
                "Discarding unreadable cart snapshot for session %s: %s",
                self.session_id,
                e,
            )
            return []

    def save(self, items: Sequence[LineItem]) -> None:
        self.storage.set(self.session_id, self.key, serialize_items(items))

from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from aurelane.models.line_item import GemId, LineItem, discount_from_fields
from aurelane.schemas.cart_schema import MAX_LINE_QUANTITY, GemIn
from aurelane.services.pricing import CartSummary, CartTotals, compute_summary, compute_totals
from aurelane.utils.logger import get_logger

logger = get_logger(__name__)

CartSnapshot = Tuple[LineItem, ...]
Listener = Callable[[CartSnapshot], None]


class CartStoreException(Exception):
    pass


class InvalidQuantity(CartStoreException):
    """Quantity is not a positive integer within MAX_LINE_QUANTITY."""


class ItemNotFound(CartStoreException):
    """No line item with the given gem id."""


class PersistenceWriteFailed(CartStoreException):
    """Writing the snapshot to storage failed; in-memory state is kept."""


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_quantity(quantity) -> int:
    if not _is_int(quantity) or quantity <= 0:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}")
    return _check_limit(quantity)


def _check_limit(quantity: int) -> int:
    if quantity > MAX_LINE_QUANTITY:
        raise InvalidQuantity(f"Quantity may not exceed {MAX_LINE_QUANTITY}, got {quantity}")
    return quantity


class CartStore:
    """
    In-memory cart for one session.

    Line items keep insertion order and each gem id appears once. Every
    successful mutation is written to the snapshot repository (best effort)
    and then announced to subscribers. Rejected calls change nothing.
    """

    def __init__(self, repository=None, items: Optional[List[LineItem]] = None):
        self.repository = repository
        self._listeners: List[Listener] = []
        self.last_persistence_error: Optional[PersistenceWriteFailed] = None
        if items is not None:
            self._items = list(items)
        elif repository is not None:
            self._items = repository.load()
        else:
            self._items = []

    # --- queries ---

    @property
    def items(self) -> CartSnapshot:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _index_of(self, gem_id: GemId) -> int:
        for i, it in enumerate(self._items):
            if it.id == gem_id:
                return i
        return -1

    def is_in_cart(self, gem_id: GemId) -> bool:
        return self._index_of(gem_id) >= 0

    def get_item_quantity(self, gem_id: GemId) -> int:
        i = self._index_of(gem_id)
        return self._items[i].quantity if i >= 0 else 0

    def compute_totals(self) -> CartTotals:
        return compute_totals(self._items)

    def summary(self) -> CartSummary:
        return compute_summary(self._items)

    # --- mutations ---

    def add_item(self, gem, quantity=1) -> CartSnapshot:
        quantity = _check_quantity(quantity)
        if not isinstance(gem, GemIn):
            gem = GemIn.model_validate(gem)

        i = self._index_of(gem.id)
        if i >= 0:
            existing = self._items[i]
            total = _check_limit(existing.quantity + quantity)
            self._items[i] = replace(existing, quantity=total)
        else:
            self._items.append(
                LineItem(
                    id=gem.id,
                    unit_price=gem.price,
                    quantity=quantity,
                    name=gem.name,
                    category=gem.category,
                    discount=discount_from_fields(gem.discount, gem.discount_type),
                    image=gem.display_image(),
                )
            )
        self._changed()
        return self.items

    def update_quantity(self, gem_id: GemId, quantity) -> CartSnapshot:
        """
        Set the quantity of a line item. Zero or less removes the item (never an
        error, even when absent); a positive quantity for an unknown id raises
        ItemNotFound.
        """
        if not _is_int(quantity):
            raise InvalidQuantity(f"Quantity must be an integer, got {quantity!r}")
        if quantity <= 0:
            return self.remove_item(gem_id)
        _check_limit(quantity)

        i = self._index_of(gem_id)
        if i < 0:
            raise ItemNotFound(f"Gem {gem_id!r} is not in the cart")
        if self._items[i].quantity != quantity:
            self._items[i] = replace(self._items[i], quantity=quantity)
            self._changed()
        return self.items

    def remove_item(self, gem_id: GemId) -> CartSnapshot:
        i = self._index_of(gem_id)
        if i >= 0:
            del self._items[i]
            self._changed()
        return self.items

    def clear(self) -> CartSnapshot:
        self._items = []
        self._changed()
        return self.items

    # --- observers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- internals ---

    def _changed(self):
        self._persist()
        snapshot = self.items
        for listener in list(self._listeners):
            # listener errors are logged, never raised to the caller
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Cart listener %r failed", listener)

    def _persist(self):
        if self.repository is None:
            return
        try:
            self.repository.save(self._items)
        except Exception as e:
            err = PersistenceWriteFailed(str(e))
            err.__cause__ = e
            self.last_persistence_error = err
            logger.warning("Cart persistence failed, keeping in-memory state: %s", e)
        else:
            self.last_persistence_error = None

import uuid
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from aurelane.adapters.mock_order_gateway import MockOrderGateway
from aurelane.config import settings
from aurelane.db import get_db
from aurelane.repositories.cart_snapshot_repo import CartSnapshotRepository
from aurelane.repositories.storage_repo import InMemorySlotStorage, SlotRepository, WriteBackSlotStorage
from aurelane.services.cart_store import CartStore

_order_gateway: Optional[MockOrderGateway] = None

# process-wide copies of cart slots whose durable write failed
pending_slots = InMemorySlotStorage()


def get_cart_session(request: Request, response: Response) -> str:
    """Cart session id from the cookie; a new one is issued on first use."""
    session_id = request.cookies.get(settings.CART_SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(settings.CART_SESSION_COOKIE, session_id, httponly=True, samesite="Lax")
    return session_id


def get_slot_storage(db: Session = Depends(get_db)):
    return SlotRepository(db)


def get_cart_store(
    session_id: str = Depends(get_cart_session),
    storage=Depends(get_slot_storage),
) -> CartStore:
    repo = CartSnapshotRepository(WriteBackSlotStorage(storage, pending_slots), session_id)
    return CartStore(repository=repo)


def get_order_gateway() -> MockOrderGateway:
    global _order_gateway
    if _order_gateway is None:
        _order_gateway = MockOrderGateway(delay_ms=settings.ORDER_MOCK_DELAY_MS)
    return _order_gateway

from fastapi import APIRouter, Depends
from sqlalchemy import text

from aurelane.api.deps import get_order_gateway
from aurelane.db import SessionLocal, engine
from aurelane.repositories.storage_repo import SlotRepository
from aurelane.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", tags=["health"])
def health(gateway=Depends(get_order_gateway)):
    db_ok = False
    storage_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", e)

    db = SessionLocal()
    try:
        storage_ok = SlotRepository(db).ping()
    except Exception as e:
        logger.warning("Health check: cart storage unusable: %s", e)
    finally:
        db.close()

    gateway_ok = gateway.health_check()

    return {
        "status": "ok" if db_ok and storage_ok and gateway_ok else "degraded",
        "db": db_ok,
        "cart_storage": storage_ok,
        "order_gateway": gateway_ok,
    }

from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aurelane.api.deps import pending_slots
from aurelane.api.health import router as health_router
from aurelane.api.routes_cart import router as cart_router
from aurelane.api.routes_checkout import router as checkout_router
from aurelane.config import settings
from aurelane.db import SessionLocal, init_db
from aurelane.repositories.storage_repo import SlotRepository
from aurelane.utils.logger import get_logger

logger = get_logger(__name__)


def purge_idle_sessions():
    db = SessionLocal()
    try:
        sessions = SlotRepository(db).purge_stale(settings.CART_SESSION_TTL_SECONDS)
        pending_slots.drop_sessions(sessions)
        if sessions:
            logger.info("Purged storage for %d idle cart session(s)", len(sessions))
    except Exception:
        logger.exception("Idle cart session purge failed")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_idle_sessions,
        "interval",
        seconds=settings.SESSION_PURGE_INTERVAL_SECONDS,
        id="purge_idle_cart_sessions",
    )
    scheduler.start()

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Aurelane - Cart Service", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(cart_router, tags=["cart"])

app.include_router(checkout_router, prefix="/api/checkout", tags=["checkout"])

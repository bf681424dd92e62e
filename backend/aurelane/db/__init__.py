import importlib
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from aurelane.config import settings
from aurelane.utils.logger import get_logger

logger = get_logger(__name__)

DATABASE_URL = settings.DATABASE_URL
engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=False,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# model modules must be imported before create_all so metadata is populated
MODEL_MODULES = [
    "aurelane.models.storage_slot",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    If `reset` is true, or the RESET_DB env var is set to 1/true/yes, drop and
    recreate all tables. Otherwise existing tables are left in place.
    """
    env_reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")

    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset or env_reset:
        logger.info("Resetting database at %s", DATABASE_URL)
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized.")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

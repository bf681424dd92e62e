from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./aurelane.db"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    CART_STORAGE_KEY: str = "cart"
    CART_SESSION_COOKIE: str = "cart_session"
    CART_SESSION_TTL_SECONDS: int = 7 * 24 * 3600
    SESSION_PURGE_INTERVAL_SECONDS: int = 300

    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("50000")
    SHIPPING_FEE: Decimal = Decimal("500")
    CURRENCY_SYMBOL: str = "₹"
    CURRENCY_DECIMALS: int = 0

    ORDER_MOCK_DELAY_MS: int = 0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()

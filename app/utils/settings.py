# app/utils/settings.py
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cart.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CART_LOCK_ENABLED = _flag("CART_LOCK_ENABLED", "true")
CART_LOCK_TTL_SECONDS = int(os.getenv("CART_LOCK_TTL_SECONDS", 10))
#rate used when a cart has more distinct products than the tier table covers
DISCOUNT_FALLBACK_RATE = Decimal(os.getenv("DISCOUNT_FALLBACK_RATE", "1"))
PRODUCTS_PAGE_SIZE = int(os.getenv("PRODUCTS_PAGE_SIZE", 7))
SEED_CATALOG = _flag("SEED_CATALOG", "false")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# app/data/seed.py
from decimal import Decimal

from app.data.database import SessionLocal
from app.data.models.product import ProductModel
from app.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"name": "Keyboard", "price": Decimal("199.99")},
    {"name": "Mouse", "price": Decimal("49.50")},
    {"name": "Monitor", "price": Decimal("899.00")},
]


def seed(session_factory=SessionLocal) -> int:
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return 0
        db.add_all(ProductModel(**p) for p in PRODUCTS)
        db.commit()
        logger.info(f"Seeded catalog with {len(PRODUCTS)} products")
        return len(PRODUCTS)
    finally:
        db.close()

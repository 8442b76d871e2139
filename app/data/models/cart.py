#app/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)

    is_confirmed = Column(Boolean, nullable=False, default=False)
    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    #optimistic locking stamp, bumped on every write to the cart row
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    open_items = relationship(
        "OpenCartItemModel",
        back_populates="cart",
        order_by="OpenCartItemModel.id",
    )
    confirmed_items = relationship(
        "ConfirmedCartItemModel",
        back_populates="cart",
        order_by="ConfirmedCartItemModel.id",
    )

from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.data.database import Base


class OpenCartItemModel(Base):
    __tablename__ = "open_cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)

    cart = relationship("CartModel", back_populates="open_items")
    product = relationship("ProductModel")

    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="u_open_cart_product"),)


class ConfirmedCartItemModel(Base):
    __tablename__ = "confirmed_cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), nullable=False, index=True)
    # no FK: the snapshot has to outlive the product row
    product_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False)

    cart = relationship("CartModel", back_populates="confirmed_items")

#all models imported here so SQLAlchemy registers them in Base.metadata

from app.data.models.product import ProductModel
from app.data.models.cart import CartModel
from app.data.models.cart_item import OpenCartItemModel, ConfirmedCartItemModel

__all__ = ["ProductModel", "CartModel", "OpenCartItemModel", "ConfirmedCartItemModel"]

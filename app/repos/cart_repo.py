# app/repos/cart_repo.py
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session, selectinload

from app.data.models.cart import CartModel
from app.data.models.cart_item import OpenCartItemModel, ConfirmedCartItemModel
from app.data.models.product import ProductModel
from app.services.pricing import PricedLine


class CartRepo:
    """
    Cart store: carts plus their open and confirmed item collections.
    Writes are flushed, never committed; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # CARTS
    # =====================================================
    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_open_cart(self, cart_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(
                CartModel.id == cart_id,
                CartModel.is_confirmed.is_(False),
            )
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def update_cart_version(self, cart_id: int, old_version: int, new_data: Dict[str, Any]) -> int:
        #update carts set ... where id = :id and version = :old_version
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
        )
        return result.rowcount

    def list_carts_with_open_items(self) -> List[CartModel]:
        stmt = (
            select(CartModel)
            .where(CartModel.open_items.any())
            .options(selectinload(CartModel.open_items))
            .order_by(CartModel.created_at.desc(), CartModel.id.desc())
        )
        return self.db.execute(stmt).scalars().all()

    # =====================================================
    # OPEN ITEMS
    # =====================================================
    def get_open_items(
        self,
        cart_id: int,
        product_ids: Optional[Iterable[int]] = None,
    ) -> List[OpenCartItemModel]:
        stmt = select(OpenCartItemModel).where(OpenCartItemModel.cart_id == cart_id)
        if product_ids is not None:
            stmt = stmt.where(OpenCartItemModel.product_id.in_(set(product_ids)))
        return self.db.execute(stmt.order_by(OpenCartItemModel.id)).scalars().all()

    def get_priced_lines(self, cart_id: int) -> List[PricedLine]:
        rows = self.db.execute(
            select(
                OpenCartItemModel.product_id,
                OpenCartItemModel.quantity,
                ProductModel.price,
            )
            .join(ProductModel, ProductModel.id == OpenCartItemModel.product_id)
            .where(OpenCartItemModel.cart_id == cart_id)
        ).all()
        return [PricedLine(product_id, quantity, Decimal(str(price))) for product_id, quantity, price in rows]

    def add_open_item(self, item: OpenCartItemModel) -> OpenCartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def save_open_item(self, item: OpenCartItemModel) -> OpenCartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_open_item(self, item: OpenCartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_open_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(OpenCartItemModel).where(OpenCartItemModel.cart_id == cart_id)
        )
        return result.rowcount

    # =====================================================
    # CONFIRMED ITEMS
    # =====================================================
    def add_confirmed_item(self, item: ConfirmedCartItemModel) -> ConfirmedCartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def get_confirmed_items(self, cart_id: int) -> List[ConfirmedCartItemModel]:
        return self.db.execute(
            select(ConfirmedCartItemModel)
            .where(ConfirmedCartItemModel.cart_id == cart_id)
            .order_by(ConfirmedCartItemModel.id)
        ).scalars().all()

    # =====================================================
    # TRANSACTION
    # =====================================================
    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

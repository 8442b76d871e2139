# app/repos/product_repo.py
from typing import Iterable, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.data.models.cart_item import OpenCartItemModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def _name_filter(self, query: str):
        return ProductModel.name.contains(query, autoescape=True)

    def list_products(self, page: int, limit: int, query: str = "") -> Tuple[List[ProductModel], int]:
        stmt = (
            select(ProductModel)
            .where(self._name_filter(query))
            .order_by(ProductModel.name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        products = self.db.execute(stmt).scalars().all()

        total = self.db.execute(
            select(func.count(ProductModel.id)).where(self._name_filter(query))
        ).scalar_one()

        return products, total

    def search_products(self, query: str) -> List[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(self._name_filter(query))
            .order_by(ProductModel.name.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_name(self, name: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.name == name)
        ).scalar_one_or_none()

    def get_products(self, product_ids: Iterable[int]) -> List[ProductModel]:
        ids = set(product_ids)
        if not ids:
            return []
        return self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(ids))
        ).scalars().all()

    def is_in_open_cart(self, product_id: int) -> bool:
        found = self.db.execute(
            select(OpenCartItemModel.id)
            .where(OpenCartItemModel.product_id == product_id)
            .limit(1)
        ).first()
        return found is not None

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, product: ProductModel) -> ProductModel:
        self.db.refresh(product)
        return product

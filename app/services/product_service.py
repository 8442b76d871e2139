import math
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain import errors
from app.domain.schemas import ProductCreate, ProductUpdate, ProductRead
from app.repos.product_repo import ProductRepo
from app.utils.settings import PRODUCTS_PAGE_SIZE
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def _commit(self, action: str, conflict_message: str = "Product already exists") -> None:
        try:
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise errors.ConflictError(conflict_message) from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to {action} product: {e}")
            raise errors.StoreError(f"Failed to {action} product") from e

    def list_products(self, page: int = 1, limit: int = PRODUCTS_PAGE_SIZE, query: str = "") -> Dict[str, Any]:
        if page < 1 or limit < 1:
            raise errors.ValidationError("page and limit must be greater than 0")

        products, total = self.repo.list_products(page, limit, query or "")
        return {
            "products": [ProductRead.model_validate(p) for p in products],
            "total_items": total,
            "total_pages": math.ceil(total / limit),
            "current_page": page,
        }

    def search_products(self, query: str) -> List[ProductRead]:
        return [ProductRead.model_validate(p) for p in self.repo.search_products(query or "")]

    def get_product(self, product_id: int) -> ProductRead:
        product = self.repo.get_product(product_id)
        if not product:
            raise errors.NotFoundError("Product not found")
        return ProductRead.model_validate(product)

    def create_product(self, payload: ProductCreate) -> ProductRead:
        #store has a unique index too, this check just gives a nicer error
        if self.repo.get_by_name(payload.name):
            raise errors.ConflictError("Product already exists")

        product = self.repo.add_product(ProductModel(name=payload.name, price=payload.price))
        self._commit("create")
        self.repo.refresh(product)

        logger.info(f"Created product {product.id} ({product.name})")
        return ProductRead.model_validate(product)

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductRead:
        product = self.repo.get_product(product_id)
        if not product:
            raise errors.NotFoundError("Product not found")

        if payload.name is not None and payload.name != product.name:
            if self.repo.get_by_name(payload.name):
                raise errors.ConflictError("Product name already exist")
            product.name = payload.name

        if payload.price is not None:
            product.price = payload.price

        self._commit("update", "Product name already exist")
        self.repo.refresh(product)

        logger.info(f"Updated product {product.id}")
        return ProductRead.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        product = self.repo.get_product(product_id)
        if not product:
            raise errors.NotFoundError("Product not found")

        if self.repo.is_in_open_cart(product_id):
            raise errors.ConflictError("Product is in an open cart and cannot be deleted")

        self.repo.delete_product(product)
        self._commit("delete")

        logger.info(f"Deleted product {product_id}")

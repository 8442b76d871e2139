# app/services/cart_service.py
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from redis.exceptions import RedisError

from app.data.models.cart import CartModel
from app.data.models.cart_item import OpenCartItemModel, ConfirmedCartItemModel
from app.domain import errors
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services import pricing
from app.services.lock_service import LockService
from app.utils.settings import DISCOUNT_FALLBACK_RATE
from app.utils.logging import get_logger

logger = get_logger(__name__)

Line = Tuple[int, int]


def _item_dict(item) -> Dict[str, Any]:
    return {
        "id": item.id,
        "cart_id": item.cart_id,
        "product_id": item.product_id,
        "quantity": item.quantity,
    }


def _cart_dict(cart: CartModel, items) -> Dict[str, Any]:
    return {
        "id": cart.id,
        "is_confirmed": cart.is_confirmed,
        "total_price": cart.total_price,
        "created_at": cart.created_at,
        "cart_item": [_item_dict(i) for i in items],
    }


class CartService:
    """
    Cart lifecycle: create -> add/edit items -> confirm.

    commands (create, add, edit, confirm) change state, each one runs as a
    single unit of work: cart lock, mutations, total recompute, versioned
    cart update, one commit. Anything failing rolls the whole session back.
    queries (get, history) only read.
    """

    def __init__(
        self,
        db: Session,
        lock_service: Optional[LockService] = None,
        fallback_rate: Decimal = DISCOUNT_FALLBACK_RATE,
    ):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service
        self.fallback_rate = fallback_rate

    # =====================================================
    # HELPERS
    # =====================================================
    @staticmethod
    def _validate_lines(items: Sequence[Line], allow_zero: bool) -> List[Line]:
        if not isinstance(items, (list, tuple)):
            raise errors.ValidationError("Items must be a list")
        if len(items) == 0:
            raise errors.ValidationError("No items in the request payload")

        lines = []
        for entry in items:
            try:
                product_id, quantity = entry
            except (TypeError, ValueError):
                raise errors.ValidationError(f"Malformed item {entry!r}") from None

            if not all(isinstance(v, int) and not isinstance(v, bool) for v in (product_id, quantity)):
                raise errors.ValidationError(f"Malformed item {entry!r}")
            if quantity < 0 or (quantity == 0 and not allow_zero):
                raise errors.ValidationError(
                    f"Quantity must be greater than 0 for productId {product_id}"
                )
            lines.append((product_id, quantity))
        return lines

    def _require_products(self, product_ids: List[int]):
        found = self.products.get_products(product_ids)
        if len(found) != len(set(product_ids)):
            raise errors.NotFoundError("Some products do not exist in the database")
        return {p.id: p for p in found}

    def _recompute_total(self, cart_id: int) -> Decimal:
        lines = self.repo.get_priced_lines(cart_id)
        return pricing.compute_total(lines, self.fallback_rate)

    def _write_cart(self, cart: CartModel, new_data: Dict[str, Any]) -> None:
        # Optimistic locking
        # update carts set ..., version = 2 where id = 1 and version = 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={**new_data, "version": cart.version + 1},
        )
        if rowcount == 0:
            raise errors.ConcurrencyError(
                "Cart was modified by another request"
            )

    @contextmanager
    def _unit_of_work(self, cart_id: Optional[int]):
        token = None
        if self.lock_service is not None and cart_id is not None:
            token = self.lock_service.new_token()
            try:
                locked = self.lock_service.acquire_cart_lock(cart_id, token)
            except RedisError as e:
                raise errors.StoreError("Cart lock is unavailable") from e
            if not locked:
                raise errors.ConcurrencyError(
                    f"Cart {cart_id} is being modified by another request"
                )

        try:
            yield
            self.repo.commit()
        except IntegrityError as e:
            # another request inserted the same (cart, product) row first
            self.repo.rollback()
            logger.error(f"Rolled back cart {cart_id} operation: {e}")
            raise errors.ConcurrencyError(
                "Cart was modified by another request"
            ) from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Rolled back cart {cart_id} operation: {e}")
            raise errors.StoreError("Could not save the cart") from e
        except Exception as e:
            self.repo.rollback()
            logger.error(f"Rolled back cart {cart_id} operation: {e}")
            raise
        finally:
            if token is not None:
                try:
                    self.lock_service.release_cart_lock(cart_id, token)
                except RedisError as e:
                    # lock expires on its own after the ttl
                    logger.warning(f"Failed to release lock for cart {cart_id}: {e}")

    # =====================================================
    # QUERIES
    # =====================================================
    def get_cart(self, cart_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise errors.NotFoundError("Cart not found")

        data = _cart_dict(cart, self.repo.get_open_items(cart_id))
        data["confirmed_items"] = [_item_dict(i) for i in self.repo.get_confirmed_items(cart_id)]
        return data

    def list_carts_with_items(self) -> List[Dict[str, Any]]:
        carts = self.repo.list_carts_with_open_items()
        return [_cart_dict(c, c.open_items) for c in carts]

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_cart(self) -> CartModel:
        try:
            cart = self.repo.create_cart(
                CartModel(is_confirmed=False, total_price=Decimal("0.00"), version=1)
            )
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise errors.StoreError("Failed to create cart") from e

        logger.info(f"Created cart {cart.id}")
        return cart

    def add_items(self, cart_id: Optional[int], items: Sequence[Line]) -> Dict[str, Any]:
        """
        Adds quantities to a cart, merging with what is already there.

        An absent, unknown or confirmed cart_id falls back to a brand new
        cart. All products must exist or nothing is written.
        """
        lines = self._validate_lines(items, allow_zero=False)
        product_ids = list(dict.fromkeys(pid for pid, _ in lines))

        with self._unit_of_work(cart_id):
            products = self._require_products(product_ids)

            cart = self.repo.get_open_cart(cart_id) if cart_id else None
            if cart is None:
                if cart_id:
                    logger.warning(f"Cart {cart_id} is missing or confirmed, using a new cart")
                cart = self.repo.create_cart(
                    CartModel(is_confirmed=False, total_price=Decimal("0.00"), version=1)
                )

            existing = {i.product_id: i for i in self.repo.get_open_items(cart.id, product_ids)}

            for product_id, quantity in lines:
                item = existing.get(product_id)
                if item:
                    logger.info(
                        f"Product {product_id} already in cart {cart.id}, quantity "
                        f"{item.quantity} -> {item.quantity + quantity}"
                    )
                    item.quantity += quantity
                    self.repo.save_open_item(item)
                else:
                    existing[product_id] = self.repo.add_open_item(
                        OpenCartItemModel(
                            cart_id=cart.id,
                            product_id=product_id,
                            quantity=quantity,
                        )
                    )

            total = self._recompute_total(cart.id)
            self._write_cart(cart, {"total_price": total})
            resolved_id = cart.id
            touched = [
                {"name": products[pid].name, "price": products[pid].price}
                for pid in product_ids
            ]

        logger.info(f"Added {len(lines)} item(s) to cart {resolved_id}, total {total}")

        return {
            "message": "Products added to cart successfully",
            "total_price": total,
            "cart_id": resolved_id,
            "items": touched,
        }

    def edit_items(self, cart_id: int, items: Sequence[Line]) -> Dict[str, Any]:
        """
        Sets absolute quantities for products already in the cart.
        0 removes the item, products not in the cart are skipped.
        """
        lines = self._validate_lines(items, allow_zero=True)
        product_ids = [pid for pid, _ in lines]
        if len(product_ids) != len(set(product_ids)):
            raise errors.ValidationError("Duplicate productId in the request payload")

        with self._unit_of_work(cart_id):
            cart = self.repo.get_cart(cart_id)
            if not cart:
                raise errors.NotFoundError("Cart not found")
            if cart.is_confirmed:
                raise errors.ConflictError("Cart is already confirmed")

            self._require_products(product_ids)

            existing = {i.product_id: i for i in self.repo.get_open_items(cart_id, product_ids)}
            update_items = []
            delete_items = []

            for product_id, quantity in lines:
                item = existing.get(product_id)
                if not item:
                    continue

                if quantity > 0:
                    item.quantity = quantity
                    self.repo.save_open_item(item)
                    update_items.append(_item_dict(item))
                else:
                    self.repo.delete_open_item(item)
                    delete_items.append(product_id)

            total = self._recompute_total(cart_id)
            self._write_cart(cart, {"total_price": total})

        logger.info(
            f"Edited cart {cart_id}: {len(update_items)} updated, "
            f"{len(delete_items)} removed, total {total}"
        )

        return {
            "message": "Cart items updated successfully",
            "update_items": update_items,
            "delete_items": delete_items,
            "total_price": total,
        }

    def confirm_cart(self, cart_id: int) -> Dict[str, Any]:
        with self._unit_of_work(cart_id):
            cart = self.repo.get_cart(cart_id)
            if not cart:
                raise errors.NotFoundError("Cart not found")
            if cart.is_confirmed:
                raise errors.ConflictError("Cart is already confirmed")

            items = self.repo.get_open_items(cart_id)
            if not items:
                raise errors.ValidationError("No items to confirm in this cart")

            for item in items:
                self.repo.add_confirmed_item(
                    ConfirmedCartItemModel(
                        cart_id=cart_id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                    )
                )

            total = self._recompute_total(cart_id)
            self._write_cart(cart, {"total_price": total, "is_confirmed": True})
            self.repo.delete_open_items(cart_id)

        logger.info(f"Cart {cart_id} confirmed with {len(items)} item(s), total {total}")

        return {
            "message": "Cart confirmed successfully",
            "cart_id": cart_id,
            "total_price": total,
        }

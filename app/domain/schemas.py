# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

#money stays Decimal in python, goes out as a json number
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =====================================================
# PRODUCTS
# =====================================================
class ProductCreate(CamelModel):
    """Schema for creating a product."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Unique product name")
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Unit price (> 0)")


class ProductUpdate(CamelModel):
    """Schema for updating a product, every field optional."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)


class ProductRead(CamelModel):
    id: int
    name: str
    price: Money
    created_at: datetime
    updated_at: datetime


class ProductPage(CamelModel):
    products: List[ProductRead]
    total_items: int
    total_pages: int
    current_page: int


class ProductList(CamelModel):
    products: List[ProductRead]


class ProductMessage(CamelModel):
    message: str
    product: ProductRead


# =====================================================
# CART
# =====================================================
class ItemIn(CamelModel):
    """Schema for adding a product to a cart."""

    product_id: int = Field(..., gt=0, description="Product ID (> 0)")
    quantity: int = Field(..., gt=0, description="Quantity to add (> 0)")


class EditItemIn(CamelModel):
    """Schema for setting the quantity of a product already in a cart."""

    product_id: int = Field(..., gt=0, description="Product ID (> 0)")
    quantity: int = Field(..., ge=0, description="New quantity, 0 removes the item")


class AddItemsIn(CamelModel):
    cart_id: Optional[int] = Field(None, description="Cart to add to, a new one is created when missing")
    items: List[ItemIn]


class EditItemsIn(CamelModel):
    cart_id: int = Field(..., gt=0)
    items: List[EditItemIn]


class CartCreatedOut(CamelModel):
    message: str
    cart_id: int


class TouchedProductOut(CamelModel):
    name: str
    price: Money


class AddItemsOut(CamelModel):
    message: str
    total_price: Money
    cart_id: int
    items: List[TouchedProductOut]


class CartItemOut(CamelModel):
    id: int
    cart_id: int
    product_id: int
    quantity: int


class EditItemsOut(CamelModel):
    message: str
    update_items: List[CartItemOut]
    delete_items: List[int]
    total_price: Money


class ConfirmCartOut(CamelModel):
    message: str
    cart_id: int
    total_price: Money


class CartOut(CamelModel):
    id: int
    is_confirmed: bool
    total_price: Money
    created_at: datetime
    cart_item: List[CartItemOut]


class CartDetailOut(CartOut):
    confirmed_items: List[CartItemOut]


class CartHistoryOut(CamelModel):
    cart_items_details: List[CartOut]

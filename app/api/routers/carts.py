#app/api/routers/carts.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ShopError
from app.domain.schemas import (
    AddItemsIn,
    AddItemsOut,
    EditItemsIn,
    EditItemsOut,
    CartCreatedOut,
    ConfirmCartOut,
    CartDetailOut,
    CartHistoryOut,
)
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.utils.settings import CART_LOCK_ENABLED

router = APIRouter(prefix="/cart", tags=["cart"])


def get_lock_service() -> Optional[LockService]:
    return LockService() if CART_LOCK_ENABLED else None


def get_service(
    db: Session = Depends(get_db),
    lock_service: Optional[LockService] = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


@router.post("", response_model=CartCreatedOut, status_code=201)
def create_cart(svc: CartService = Depends(get_service)):
    try:
        cart = svc.create_cart()
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Create cart success", "cart_id": cart.id}


@router.post("/items", response_model=AddItemsOut, status_code=201)
def add_items(payload: AddItemsIn, svc: CartService = Depends(get_service)):
    try:
        return svc.add_items(
            cart_id=payload.cart_id,
            items=[(i.product_id, i.quantity) for i in payload.items],
        )
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/items", response_model=EditItemsOut)
def edit_items(payload: EditItemsIn, svc: CartService = Depends(get_service)):
    try:
        return svc.edit_items(
            cart_id=payload.cart_id,
            items=[(i.product_id, i.quantity) for i in payload.items],
        )
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/history", response_model=CartHistoryOut)
def cart_history(svc: CartService = Depends(get_service)):
    return {"cart_items_details": svc.list_carts_with_items()}


@router.get("/{cart_id}", response_model=CartDetailOut)
def get_cart(cart_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.get_cart(cart_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{cart_id}/confirm", response_model=ConfirmCartOut)
def confirm_cart(cart_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.confirm_cart(cart_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

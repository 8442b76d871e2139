# app/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ShopError
from app.domain.schemas import (
    ProductCreate,
    ProductUpdate,
    ProductRead,
    ProductPage,
    ProductList,
    ProductMessage,
)
from app.services.product_service import ProductService
from app.utils.settings import PRODUCTS_PAGE_SIZE

router = APIRouter(prefix="/products", tags=["products"])


def get_service(db: Session):
    return ProductService(db)


@router.get("", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(PRODUCTS_PAGE_SIZE, ge=1),
    query: str = Query(""),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.list_products(page, limit, query)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/search", response_model=ProductList)
def search_products(query: str = Query(""), db: Session = Depends(get_db)):
    svc = get_service(db)
    return {"products": svc.search_products(query)}


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_product(product_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("", response_model=ProductMessage, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        product = svc.create_product(payload)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Created new product", "product": product}


@router.put("/{product_id}", response_model=ProductMessage)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        product = svc.update_product(product_id, payload)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Update product success", "product": product}


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.delete_product(product_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Delete product success"}

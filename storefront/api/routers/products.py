# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import ApiResponse, ProductOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ApiResponse[List[ProductOut]])
def list_products(db: Session = Depends(get_db)):
    return {"success": True, "data": ProductService(db).list_products()}


@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(product_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": ProductService(db).get_product(product_id)}

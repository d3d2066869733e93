#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_token, get_lock_service
from storefront.data.database import get_db
from storefront.domain.schemas import (
    AddItemIn,
    ApiResponse,
    ApplyCouponIn,
    CartOut,
    RemoveItemIn,
    UpdateItemIn,
)
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService | None = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(token: str = Depends(get_cart_token), svc: CartService = Depends(get_service)):
    return {"success": True, "data": svc.get_cart(token)}


@router.post("/add", response_model=ApiResponse[CartOut])
def add_item(
    payload: AddItemIn,
    token: str = Depends(get_cart_token),
    svc: CartService = Depends(get_service),
):
    cart = svc.add_item(
        token,
        product_id=payload.product_id,
        quantity=payload.quantity,
        variation_id=payload.product_variation_id,
    )
    return {"success": True, "message": "Produkt dodany do koszyka", "data": cart}


@router.post("/update", response_model=ApiResponse[CartOut])
def update_item(
    payload: UpdateItemIn,
    token: str = Depends(get_cart_token),
    svc: CartService = Depends(get_service),
):
    return {"success": True, "data": svc.update_item(token, payload.item_index, payload.quantity)}


@router.post("/remove", response_model=ApiResponse[CartOut])
def remove_item(
    payload: RemoveItemIn,
    token: str = Depends(get_cart_token),
    svc: CartService = Depends(get_service),
):
    return {"success": True, "data": svc.remove_item(token, payload.item_index)}


@router.get("/clear", response_model=ApiResponse[CartOut])
def clear_cart(token: str = Depends(get_cart_token), svc: CartService = Depends(get_service)):
    return {"success": True, "data": svc.clear(token)}


@router.post("/apply-coupon", response_model=ApiResponse[CartOut])
def apply_coupon(
    payload: ApplyCouponIn,
    token: str = Depends(get_cart_token),
    svc: CartService = Depends(get_service),
):
    cart = svc.apply_coupon(token, payload.coupon_code)
    return {"success": True, "message": "Kupon zastosowany", "data": cart}


@router.get("/remove-coupon", response_model=ApiResponse[CartOut])
def remove_coupon(token: str = Depends(get_cart_token), svc: CartService = Depends(get_service)):
    return {"success": True, "data": svc.remove_coupon(token)}

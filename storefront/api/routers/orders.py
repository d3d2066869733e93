# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.order_status import ADMIN_STATUSES
from storefront.domain.schemas import ApiResponse, OrderOut, OrderPageOut, OrderStatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/admin/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


@router.get("", response_model=ApiResponse[OrderPageOut])
def list_orders(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=100),
    svc: OrderService = Depends(get_service),
):
    return {"success": True, "data": svc.list_orders(status=status, page=page, per_page=per_page)}


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(order_id: int, svc: OrderService = Depends(get_service)):
    return {"success": True, "data": svc.get_order(order_id)}


@router.put("/{order_id}/status", response_model=ApiResponse[OrderOut])
def update_status(order_id: int, payload: OrderStatusIn, svc: OrderService = Depends(get_service)):
    """
    Zmiana statusu z panelu.
    cancelled przechodzi przez pelne anulowanie (zwrot stanow, licznik kuponu).
    """
    order = svc.change_status(order_id, payload.status, allowed=ADMIN_STATUSES)
    return {"success": True, "message": "Status zamowienia zaktualizowany", "data": order}

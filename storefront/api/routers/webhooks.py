# storefront/api/routers/webhooks.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.order_status import WEBHOOK_STATUSES
from storefront.domain.schemas import ApiResponse, OrderOut, WebhookStatusIn
from storefront.services.order_service import OrderService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post("/order-status", response_model=ApiResponse[OrderOut])
def order_status(payload: WebhookStatusIn, db: Session = Depends(get_db)):
    logger.info(f"Webhook: zamowienie {payload.order_id} -> {payload.status}")

    order = OrderService(db).change_status(payload.order_id, payload.status, allowed=WEBHOOK_STATUSES)
    return {"success": True, "message": "Status zamowienia zaktualizowany", "data": order}

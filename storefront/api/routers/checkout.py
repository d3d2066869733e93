# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_address_client, get_cart_token, get_notifier
from storefront.data.database import get_db
from storefront.domain.errors import NotFound
from storefront.domain.schemas import (
    AddressOut,
    ApiResponse,
    CheckoutOut,
    CustomerInfo,
    OrderOut,
    ZipcodeIn,
)
from storefront.services.address_client import AddressClient
from storefront.services.checkout_service import CheckoutService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> CheckoutService:
    return CheckoutService(db=db, notifier=notifier)


@router.post("/process", response_model=ApiResponse[CheckoutOut], status_code=201)
def process(
    payload: CustomerInfo,
    token: str = Depends(get_cart_token),
    svc: CheckoutService = Depends(get_service),
):
    """
    Tworzy zamowienie z koszyka wskazanego tokenem.
    Potwierdzenie wysylane asynchronicznie.
    """
    order = svc.process(token, payload)
    return {
        "success": True,
        "message": "Zamowienie zlozone pomyslnie!",
        "data": {"order": order, "order_number": order["order_number"]},
    }


@router.get("/success/{order_id}", response_model=ApiResponse[OrderOut])
def order_details(order_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": OrderService(db).get_order(order_id)}


@router.post("/fetch-address", response_model=ApiResponse[AddressOut])
def fetch_address(payload: ZipcodeIn, client: AddressClient = Depends(get_address_client)):
    address = client.lookup(payload.zipcode)
    if address is None:
        raise NotFound("Nie znaleziono kodu pocztowego")
    return {"success": True, "data": address}

# storefront/api/deps.py
import uuid

from fastapi import Cookie, Query, Response

from storefront.services.address_client import AddressClient
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import CART_COOKIE_MAX_AGE, CART_LOCKS_ENABLED

CART_COOKIE = "cart_token"


def generate_cart_token() -> str:
    return f"cart_{uuid.uuid4().hex}"


def get_cart_token(
    response: Response,
    cart_id: str | None = Query(None, min_length=1, max_length=100),
    cart_token: str | None = Cookie(None),
) -> str:
    """
    Token koszyka: najpierw parametr ?cart_id= (frontend trzyma go w localStorage),
    potem stare cookie cart_token, a gdy nie ma zadnego - nowy token w cookie.
    """
    if cart_id:
        return cart_id
    if cart_token:
        return cart_token

    token = generate_cart_token()
    response.set_cookie(CART_COOKIE, token, max_age=CART_COOKIE_MAX_AGE, httponly=True, samesite="lax")
    return token


def get_lock_service() -> LockService | None:
    if not CART_LOCKS_ENABLED:
        return None
    return LockService()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_address_client() -> AddressClient:
    return AddressClient()

# storefront/domain/errors.py
from typing import Any, Dict, List


class ShopError(Exception):
    """
    Bazowy blad domeny sklepu.
    status_code mapowany na odpowiedz HTTP przez handlery z storefront.api
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        errors: Dict[str, List[str]] | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.errors = errors
        self.detail = detail


class ValidationError(ShopError):
    status_code = 422


class NotFound(ShopError):
    status_code = 404


class ItemNotFound(NotFound):
    pass


class InsufficientStock(ShopError):
    def __init__(
        self,
        message: str,
        product_id: int,
        variation_id: int | None,
        requested: int,
        available: int,
        item_name: str | None = None,
    ):
        super().__init__(message)
        self.product_id = product_id
        self.variation_id = variation_id
        self.requested = requested
        self.available = available
        self.item_name = item_name


class InvalidVariation(ShopError):
    pass


class CouponInvalid(ShopError):
    pass


class EmptyCart(ShopError):
    pass


class IllegalStateTransition(ShopError):
    pass


class UnknownOrderStatus(ShopError):
    pass


class InvalidZipcode(ShopError):
    pass


class CartLocked(ShopError):
    status_code = 409


class TransactionFailure(ShopError):
    status_code = 500


class DependencyFailure(ShopError):
    status_code = 500


def error_body(exc: ShopError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": exc.message}
    if exc.errors:
        body["errors"] = exc.errors
    if exc.detail:
        body["error"] = exc.detail
    return body

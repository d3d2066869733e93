# storefront/services/coupon_engine.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain.pricing import ZERO, to_money
from storefront.repos.coupon_repo import CouponRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PERCENTAGE = "percentage"
FIXED = "fixed"


def _as_utc(value: datetime) -> datetime:
    # sqlite zwraca naiwne daty - traktujemy je jako UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class CouponEngine:
    """
    Reguly kuponow.
    is_valid / calculate_discount sa czystymi funkcjami na rekordzie kuponu,
    licznik uzyc zmieniaja tylko checkout i anulowanie zamowienia.
    """

    def __init__(self, db: Session):
        self.repo = CouponRepo(db)

    # ---- query

    @staticmethod
    def is_valid(coupon: CouponModel, subtotal, now: datetime | None = None) -> bool:
        if not coupon.active:
            return False

        now = now or datetime.now(timezone.utc)
        if coupon.valid_from and now < _as_utc(coupon.valid_from):
            return False
        if coupon.valid_until and now > _as_utc(coupon.valid_until):
            return False

        # 0 traktujemy jak brak limitu
        if coupon.max_uses and (coupon.used_times or 0) >= coupon.max_uses:
            return False

        if coupon.min_value and to_money(subtotal) < to_money(coupon.min_value):
            return False

        return True

    @staticmethod
    def calculate_discount(coupon: CouponModel, subtotal, now: datetime | None = None) -> Decimal:
        if not CouponEngine.is_valid(coupon, subtotal, now):
            return ZERO

        subtotal = to_money(subtotal)
        value = to_money(coupon.value)

        if coupon.type == PERCENTAGE:
            discount = to_money(subtotal * value / Decimal(100))
        else:
            # rabat kwotowy nigdy nie przekracza wartosci koszyka
            discount = min(value, subtotal)

        return max(discount, ZERO)

    @staticmethod
    def rejection_message(coupon: CouponModel, subtotal) -> str:
        if coupon.min_value and to_money(subtotal) < to_money(coupon.min_value):
            return (
                f"Minimalna wartosc zamowienia dla kuponu {coupon.code} to "
                f"{to_money(coupon.min_value)}. Dodaj wiecej produktow."
            )
        return "Kupon jest niewazny dla tego zamowienia"

    def get(self, coupon_id: int) -> CouponModel | None:
        return self.repo.get_coupon(coupon_id)

    def find_active(self, code: str) -> CouponModel | None:
        return self.repo.get_active_by_code(normalize_code(code))

    # ---- commands (checkout / anulowanie)

    def increment_usage(self, coupon_id: int) -> bool:
        ok = self.repo.increment_usage(coupon_id) == 1
        if ok:
            logger.info(f"Kupon {coupon_id}: licznik uzyc +1")
        else:
            logger.warning(f"Kupon {coupon_id}: limit uzyc wyczerpany")
        return ok

    def decrement_usage(self, coupon_id: int) -> None:
        if self.repo.decrement_usage(coupon_id):
            logger.info(f"Kupon {coupon_id}: licznik uzyc -1")

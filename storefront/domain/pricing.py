# storefront/domain/pricing.py
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

FREE_SHIPPING_FROM = Decimal("200.00")
REDUCED_SHIPPING_FROM = Decimal("52.00")
REDUCED_SHIPPING_TO = Decimal("166.59")
REDUCED_SHIPPING = Decimal("15.00")
DEFAULT_SHIPPING = Decimal("20.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_shipping(subtotal) -> Decimal:
    """
    Koszt dostawy wg progow:
    - od 200.00 darmowa
    - 52.00 - 166.59 -> 15.00
    - wszystko inne -> 20.00 (rowniez przedzial 166.60 - 199.99)
    """
    subtotal = to_money(subtotal)

    if subtotal >= FREE_SHIPPING_FROM:
        return ZERO
    if REDUCED_SHIPPING_FROM <= subtotal <= REDUCED_SHIPPING_TO:
        return REDUCED_SHIPPING
    return DEFAULT_SHIPPING


def line_total(price, quantity: int) -> Decimal:
    return to_money(to_money(price) * quantity)


def order_total(subtotal, discount, shipping) -> Decimal:
    return to_money(to_money(subtotal) - to_money(discount) + to_money(shipping))

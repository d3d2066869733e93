# storefront/services/checkout_service.py
import secrets
import string
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import CouponInvalid, EmptyCart, ShopError, TransactionFailure
from storefront.domain.order_status import OrderStatus
from storefront.domain.pricing import ZERO, order_total, to_money
from storefront.domain.schemas import CustomerInfo
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.coupon_engine import CouponEngine
from storefront.services.order_service import order_to_dict
from storefront.services.stock_ledger import StockLedger
from storefront.utils.settings import DEFAULT_SHIPPING_COUNTRY, STRICT_CHECKOUT_COUPONS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number() -> str:
    return "ORD-" + "".join(secrets.choice(_ORDER_NUMBER_ALPHABET) for _ in range(10))


class CheckoutService:
    """
    Zamiana koszyka w zamowienie.
    Zamowienie, pozycje, stany magazynowe i licznik kuponu zapisywane w jednej transakcji,
    powiadomienie wysylane dopiero po commicie.
    """

    def __init__(self, db: Session, notifier=None, strict_coupons: bool | None = None):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.stock = StockLedger(db)
        self.coupons = CouponEngine(db)
        self.notifier = notifier
        self.strict_coupons = STRICT_CHECKOUT_COUPONS if strict_coupons is None else strict_coupons

    def process(self, token: str, customer: CustomerInfo) -> Dict[str, Any]:
        """
        Use Case: checkout.

        1. Koszyk musi istniec i miec pozycje
        2. Tworzy zamowienie ze snapshotem sum koszyka
        3. Kupon: ponowna walidacja + licznik uzyc
        4. Pozycje zamowienia + zmniejszenie stanow
        5. Czysci koszyk, commit
        6. Powiadomienie (best effort)
        """
        cart = self.carts.get_by_token(token)

        if cart is None or not cart.items:
            raise EmptyCart("Koszyk jest pusty! Dodaj produkty przed zlozeniem zamowienia.")

        logger.info(f"Checkout koszyka {token} ({len(cart.items)} pozycji)")

        try:
            order = self._create_order(cart, customer)

            for item in cart.items:
                order.items.append(
                    OrderItemModel(
                        product_id=item.product_id,
                        product_variation_id=item.product_variation_id,
                        quantity=item.quantity,
                        price=to_money(item.price),
                    )
                )
                label = item.name if not item.variation_name else f"{item.name} ({item.variation_name})"
                self.stock.decrease(item.product_id, item.product_variation_id, item.quantity, label)

            self.db.flush()
            self.carts.reset(cart)
            self.db.commit()

        except ShopError:
            self.db.rollback()
            logger.info(f"Checkout koszyka {token} przerwany, rollback")
            raise
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Checkout koszyka {token} nieudany, rollback")
            raise TransactionFailure("Blad podczas przetwarzania zamowienia", detail=str(e)) from e

        logger.info(f"Zamowienie {order.order_number} utworzone z koszyka {token}")

        self._notify(order)

        return order_to_dict(order)

    def _create_order(self, cart: CartModel, customer: CustomerInfo) -> OrderModel:
        subtotal = to_money(cart.subtotal)
        discount = to_money(cart.discount)
        shipping = to_money(cart.shipping)
        total = to_money(cart.total)
        coupon_id = None

        if cart.coupon_id:
            coupon = self.coupons.get(cart.coupon_id)
            if coupon and CouponEngine.is_valid(coupon, subtotal) and self.coupons.increment_usage(coupon.id):
                coupon_id = coupon.id
            else:
                if self.strict_coupons:
                    raise CouponInvalid(
                        f"Kupon {cart.coupon_code} nie jest juz wazny. Usun go z koszyka i sprobuj ponownie."
                    )
                #jak w koszyku - niewazny kupon jest odpinany, zamowienie bez rabatu
                logger.info(f"Kupon {cart.coupon_code} niewazny przy checkoucie, zamowienie bez rabatu")
                discount = ZERO
                total = order_total(subtotal, discount, shipping)

        order = OrderModel(
            order_number=self._next_order_number(),
            coupon_id=coupon_id,
            status=OrderStatus.PENDING.value,
            subtotal=subtotal,
            discount=discount,
            shipping=shipping,
            total=total,
            customer_name=customer.customer_name,
            customer_email=str(customer.customer_email),
            shipping_address=customer.shipping_address,
            shipping_city=customer.shipping_city,
            shipping_state=customer.shipping_state,
            shipping_zipcode=customer.shipping_zipcode,
            shipping_country=customer.shipping_country or DEFAULT_SHIPPING_COUNTRY,
            notes=customer.notes,
        )
        return self.orders.add_order(order)

    def _next_order_number(self) -> str:
        number = generate_order_number()
        while self.orders.order_number_exists(number):
            number = generate_order_number()
        return number

    def _notify(self, order: OrderModel) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.send_order_confirmation(order)
        except Exception as e:
            #zamowienie zostaje, tylko log
            logger.error(f"Nie udalo sie wyslac potwierdzenia zamowienia {order.order_number}: {e}")

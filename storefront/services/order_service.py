# storefront/services/order_service.py
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import (
    IllegalStateTransition,
    NotFound,
    ShopError,
    TransactionFailure,
    UnknownOrderStatus,
)
from storefront.domain.order_status import OrderStatus, can_be_cancelled, can_transition, parse_status
from storefront.domain.pricing import to_money
from storefront.repos.order_repo import OrderRepo
from storefront.services.coupon_engine import CouponEngine
from storefront.services.stock_ledger import StockLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "coupon_id": order.coupon_id,
        "subtotal": to_money(order.subtotal),
        "discount": to_money(order.discount),
        "shipping": to_money(order.shipping),
        "total": to_money(order.total),
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "shipping_address": order.shipping_address,
        "shipping_city": order.shipping_city,
        "shipping_state": order.shipping_state,
        "shipping_zipcode": order.shipping_zipcode,
        "shipping_country": order.shipping_country,
        "notes": order.notes,
        "created_at": order.created_at,
        "items": [
            {
                "product_id": i.product_id,
                "product_variation_id": i.product_variation_id,
                "quantity": i.quantity,
                "price": to_money(i.price),
                "total": to_money(i.total),
            }
            for i in order.items
        ],
    }


class OrderService:
    """
    Zamowienia po checkoucie: odczyt i cykl zycia statusu.
    pending -> processing -> completed | shipped
    pending | processing -> cancelled (ze zwrotem stanow i licznika kuponu)
    completed | shipped -> refunded, poza tym statusy koncowe sa zamkniete
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.stock = StockLedger(db)
        self.coupons = CouponEngine(db)

    # ---- query

    def get_order(self, order_id: int) -> Dict[str, Any]:
        return order_to_dict(self._get(order_id))

    def get_by_number(self, order_number: str) -> Dict[str, Any]:
        order = self.repo.get_by_number(order_number)
        if not order:
            raise NotFound("Zamowienie nie istnieje")
        return order_to_dict(order)

    def list_orders(self, status: str | None = None, page: int = 1, per_page: int = 15) -> Dict[str, Any]:
        orders, total = self.repo.list_orders(status, page, per_page)
        return {
            "items": [order_to_dict(o) for o in orders],
            "total": total,
            "page": page,
            "per_page": per_page,
        }

    # ---- commands

    def cancel(self, order_id: int) -> Dict[str, Any]:
        """
        Anulowanie zamowienia.
        Status, zwrot stanow magazynowych i licznik kuponu w jednej transakcji.
        """
        order = self._get(order_id)

        if not can_be_cancelled(order.status):
            raise IllegalStateTransition(
                f"Zamowienie {order.order_number} w statusie '{order.status}' nie moze byc anulowane"
            )

        try:
            #warunkowy update - dwa rownolegle anulowania nie zwroca towaru dwa razy
            if self.repo.mark_cancelled(order.id) == 0:
                raise IllegalStateTransition(
                    f"Zamowienie {order.order_number} zmienilo status w miedzyczasie"
                )

            for item in order.items:
                self.stock.increase(item.product_id, item.product_variation_id, item.quantity)

            if order.coupon_id:
                self.coupons.decrement_usage(order.coupon_id)

            self.repo.commit()

        except ShopError:
            self.repo.rollback()
            raise
        except Exception as e:
            self.repo.rollback()
            logger.exception(f"Anulowanie zamowienia {order_id} nieudane, rollback")
            raise TransactionFailure("Blad podczas anulowania zamowienia", detail=str(e)) from e

        logger.info(f"Zamowienie {order.order_number} anulowane, stany przywrocone")

        self.db.refresh(order)
        return order_to_dict(order)

    def change_status(self, order_id: int, status: str, allowed=frozenset(OrderStatus)) -> Dict[str, Any]:
        """
        Jedyne wejscie dla zmian statusu (panel admina, webhook).
        cancelled zawsze idzie przez cancel(), reszta to zwykly zapis pola.
        """
        new_status = parse_status(status, allowed)
        if new_status is None:
            raise UnknownOrderStatus(f"Nieznany status zamowienia: {status}")

        if new_status is OrderStatus.CANCELLED:
            return self.cancel(order_id)

        order = self._get(order_id)
        old_status = order.status

        if not can_transition(old_status, new_status):
            raise IllegalStateTransition(
                f"Zamowienie {order.order_number} w statusie '{old_status}' "
                f"nie moze przejsc do '{new_status.value}'"
            )

        if self.repo.update_order_status(order.id, old_status, new_status.value) == 0:
            self.repo.rollback()
            raise IllegalStateTransition(
                f"Zamowienie {order.order_number} zmienilo status w miedzyczasie"
            )
        self.repo.commit()

        logger.info(f"Zamowienie {order.order_number}: status {old_status} -> {new_status.value}")

        self.db.refresh(order)
        return order_to_dict(order)

    def _get(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Zamowienie nie istnieje")
        return order

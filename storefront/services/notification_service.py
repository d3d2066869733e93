# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.data.models.order import OrderModel
from storefront.domain.pricing import to_money
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Potwierdzenie zamowienia wysylane asynchronicznie przez Celery.
    Blad kolejkowania rzuca wyjatek - checkout go loguje i nie przerywa zamowienia.
    """

    def send_order_confirmation(self, order: OrderModel) -> None:
        send_order_confirmation_task.delay(order.id, order.customer_email)
        logger.info(f"Zakolejkowano potwierdzenie zamowienia {order.order_number}")


def build_confirmation(order: OrderModel) -> str:
    lines = [
        f"Zamowienie {order.order_number} potwierdzone",
        f"Klient: {order.customer_name} <{order.customer_email}>",
        f"Adres: {order.shipping_address}, {order.shipping_city}/{order.shipping_state} "
        f"{order.shipping_zipcode}, {order.shipping_country}",
    ]
    for item in order.items:
        lines.append(
            f"  produkt {item.product_id} (wariant {item.product_variation_id}) "
            f"{item.quantity} x {to_money(item.price)} = {to_money(item.total)}"
        )
    lines.append(f"Subtotal: {to_money(order.subtotal)}")
    lines.append(f"Rabat: {to_money(order.discount)}")
    lines.append(f"Dostawa: {to_money(order.shipping)}")
    lines.append(f"Razem: {to_money(order.total)}")
    return "\n".join(lines)


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(order_id: int, recipient: str):
    """
    Celery task - w prawdziwym systemie wysylalby email.
    Teraz skladamy tresc potwierdzenia i logujemy.
    """
    db = SessionLocal()
    try:
        order = OrderRepo(db).get_order(order_id)
        if not order:
            logger.warning(f"[NOTIFICATION] Zamowienie {order_id} nie istnieje, pomijam")
            return {"order_id": order_id, "status": "skipped"}

        logger.info(f"[NOTIFICATION] do {recipient}:\n{build_confirmation(order)}")
        return {"order_id": order_id, "order_number": order.order_number, "status": "sent"}
    finally:
        db.close()

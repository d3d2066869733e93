from storefront.services import notification_service
from storefront.services.notification_service import (
    NotificationService,
    build_confirmation,
    send_order_confirmation_task,
)
from storefront.repos.order_repo import OrderRepo

from tests.conftest import checkout, fill_cart


class QueuedTask:
    def __init__(self):
        self.calls = []

    def delay(self, *args):
        self.calls.append(args)


def test_confirmation_is_queued_with_order_id(monkeypatch, db, session_factory, catalog):
    fill_cart(session_factory, "cart_mail", (catalog.mug, 1, None))
    placed = checkout(session_factory, "cart_mail")
    task = QueuedTask()
    monkeypatch.setattr(notification_service, "send_order_confirmation_task", task)

    NotificationService().send_order_confirmation(OrderRepo(db).get_order(placed["id"]))

    assert task.calls == [(placed["id"], "ana@example.com")]


def test_confirmation_body_lists_totals(db, session_factory, catalog):
    fill_cart(session_factory, "cart_mail", (catalog.mug, 2, None))
    placed = checkout(session_factory, "cart_mail")

    body = build_confirmation(OrderRepo(db).get_order(placed["id"]))

    assert placed["order_number"] in body
    assert "2 x 30.00 = 60.00" in body
    assert "Razem: 75.00" in body


def test_task_reads_order_from_database(monkeypatch, session_factory, catalog):
    fill_cart(session_factory, "cart_mail", (catalog.mug, 1, None))
    placed = checkout(session_factory, "cart_mail")
    monkeypatch.setattr(notification_service, "SessionLocal", session_factory)

    result = send_order_confirmation_task(placed["id"], "ana@example.com")
    assert result == {"order_id": placed["id"], "order_number": placed["order_number"], "status": "sent"}

    assert send_order_confirmation_task(9999, "ana@example.com")["status"] == "skipped"

import pytest
from sqlalchemy import update

from storefront.data.models import CouponModel
from storefront.domain.errors import IllegalStateTransition, NotFound, UnknownOrderStatus
from storefront.domain.order_status import ADMIN_STATUSES, WEBHOOK_STATUSES
from storefront.services.order_service import OrderService

from tests.conftest import checkout, fill_cart, stock_of, used_times


@pytest.fixture
def placed_order(session_factory, catalog):
    fill_cart(
        session_factory,
        "cart_order",
        (catalog.mug, 3, None),
        (catalog.shirt, 2, catalog.shirt_m),
        coupon="TEN",
    )
    return checkout(session_factory, "cart_order")


def test_cancel_restores_stock_and_coupon(db, session_factory, catalog, placed_order):
    assert stock_of(session_factory, catalog.mug) == 7
    assert used_times(session_factory, catalog.ten) == 1

    order = OrderService(db).cancel(placed_order["id"])

    assert order["status"] == "cancelled"
    assert stock_of(session_factory, catalog.mug) == 10
    assert stock_of(session_factory, catalog.shirt, catalog.shirt_m) == 5
    assert used_times(session_factory, catalog.ten) == 0


def test_cancel_twice_is_rejected(db, session_factory, catalog, placed_order):
    service = OrderService(db)
    service.cancel(placed_order["id"])

    with pytest.raises(IllegalStateTransition):
        service.cancel(placed_order["id"])

    assert stock_of(session_factory, catalog.mug) == 10


def test_shipped_order_cannot_be_cancelled(db, session_factory, catalog, placed_order):
    service = OrderService(db)
    service.change_status(placed_order["id"], "shipped")

    with pytest.raises(IllegalStateTransition):
        service.cancel(placed_order["id"])

    assert service.get_order(placed_order["id"])["status"] == "shipped"
    assert stock_of(session_factory, catalog.mug) == 7


def test_coupon_counter_never_goes_below_zero(db, session_factory, catalog, placed_order):
    db.execute(update(CouponModel).where(CouponModel.id == catalog.ten).values(used_times=0))
    db.commit()

    OrderService(db).cancel(placed_order["id"])

    assert used_times(session_factory, catalog.ten) == 0


def test_processing_order_can_be_cancelled(db, session_factory, catalog, placed_order):
    service = OrderService(db)
    service.change_status(placed_order["id"], "processing")

    order = service.change_status(placed_order["id"], "cancelled", allowed=WEBHOOK_STATUSES)

    assert order["status"] == "cancelled"
    assert stock_of(session_factory, catalog.mug) == 10


def test_plain_status_change_keeps_stock(db, session_factory, catalog, placed_order):
    order = OrderService(db).change_status(placed_order["id"], "completed", allowed=ADMIN_STATUSES)

    assert order["status"] == "completed"
    assert stock_of(session_factory, catalog.mug) == 7


def test_cancelled_order_cannot_be_reopened(db, session_factory, catalog, placed_order):
    service = OrderService(db)
    service.cancel(placed_order["id"])
    assert stock_of(session_factory, catalog.mug) == 10

    with pytest.raises(IllegalStateTransition):
        service.change_status(placed_order["id"], "processing", allowed=WEBHOOK_STATUSES)
    with pytest.raises(IllegalStateTransition):
        service.change_status(placed_order["id"], "cancelled", allowed=WEBHOOK_STATUSES)

    assert service.get_order(placed_order["id"])["status"] == "cancelled"
    assert stock_of(session_factory, catalog.mug) == 10
    assert stock_of(session_factory, catalog.shirt, catalog.shirt_m) == 5
    assert used_times(session_factory, catalog.ten) == 0


def test_finished_order_only_moves_to_refunded(db, session_factory, catalog, placed_order):
    service = OrderService(db)
    service.change_status(placed_order["id"], "shipped")

    with pytest.raises(IllegalStateTransition):
        service.change_status(placed_order["id"], "processing")
    with pytest.raises(IllegalStateTransition):
        service.change_status(placed_order["id"], "completed")

    order = service.change_status(placed_order["id"], "refunded", allowed=WEBHOOK_STATUSES)
    assert order["status"] == "refunded"

    with pytest.raises(IllegalStateTransition):
        service.change_status(placed_order["id"], "pending")
    assert stock_of(session_factory, catalog.mug) == 7


def test_unknown_or_disallowed_status(db, catalog, placed_order):
    service = OrderService(db)

    with pytest.raises(UnknownOrderStatus):
        service.change_status(placed_order["id"], "lost")
    with pytest.raises(UnknownOrderStatus):
        service.change_status(placed_order["id"], "refunded", allowed=ADMIN_STATUSES)

    order = service.change_status(placed_order["id"], "refunded", allowed=WEBHOOK_STATUSES)
    assert order["status"] == "refunded"


def test_missing_order(db, catalog):
    service = OrderService(db)

    with pytest.raises(NotFound):
        service.get_order(404)
    with pytest.raises(NotFound):
        service.cancel(404)
    with pytest.raises(NotFound):
        service.change_status(404, "shipped")


def test_get_by_number(db, catalog, placed_order):
    order = OrderService(db).get_by_number(placed_order["order_number"])
    assert order["id"] == placed_order["id"]

    with pytest.raises(NotFound):
        OrderService(db).get_by_number("ORD-NOPE")


def test_list_orders_filters_by_status(db, session_factory, catalog, placed_order):
    fill_cart(session_factory, "cart_other", (catalog.lamp, 1, None))
    other = checkout(session_factory, "cart_other")

    service = OrderService(db)
    service.change_status(other["id"], "shipped")

    page = service.list_orders()
    assert page["total"] == 2
    assert {o["id"] for o in page["items"]} == {placed_order["id"], other["id"]}

    shipped = service.list_orders(status="shipped")
    assert shipped["total"] == 1
    assert shipped["items"][0]["id"] == other["id"]

    second_page = service.list_orders(page=2, per_page=1)
    assert second_page["total"] == 2
    assert len(second_page["items"]) == 1

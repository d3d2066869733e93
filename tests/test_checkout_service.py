import re
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storefront.data.models import OrderItemModel, OrderModel
from storefront.domain.errors import CouponInvalid, EmptyCart, InsufficientStock
from storefront.services.checkout_service import generate_order_number

from tests.conftest import RecordingNotifier, checkout, fill_cart, set_stock, stock_of, used_times

TOKEN = "cart_checkout"


def count(session_factory, model):
    db = session_factory()
    try:
        return db.execute(select(func.count()).select_from(model)).scalar_one()
    finally:
        db.close()


def test_order_number_format():
    assert re.fullmatch(r"ORD-[A-Z0-9]{10}", generate_order_number())


def test_checkout_creates_order_from_cart(session_factory, catalog):
    notifier = RecordingNotifier()
    fill_cart(
        session_factory,
        TOKEN,
        (catalog.mug, 2, None),
        (catalog.shirt, 1, catalog.shirt_gg),
        coupon="TEN",
    )

    order = checkout(session_factory, TOKEN, notifier=notifier)

    assert re.fullmatch(r"ORD-[A-Z0-9]{10}", order["order_number"])
    assert order["status"] == "pending"
    assert order["subtotal"] == Decimal("115.00")
    assert order["discount"] == Decimal("11.50")
    assert order["shipping"] == Decimal("15.00")
    assert order["total"] == Decimal("118.50")
    assert order["coupon_id"] == catalog.ten
    assert order["shipping_country"] == "Brasil"
    assert [(i["quantity"], i["price"], i["total"]) for i in order["items"]] == [
        (2, Decimal("30.00"), Decimal("60.00")),
        (1, Decimal("55.00"), Decimal("55.00")),
    ]

    assert stock_of(session_factory, catalog.mug) == 8
    assert stock_of(session_factory, catalog.shirt, catalog.shirt_gg) == 1
    assert used_times(session_factory, catalog.ten) == 1
    assert notifier.sent == [order["order_number"]]

    cart = fill_cart(session_factory, TOKEN)
    assert cart["items"] == []
    assert cart["coupon_code"] is None
    assert cart["total"] == Decimal("0.00")


def test_empty_or_missing_cart_is_rejected(session_factory, catalog):
    with pytest.raises(EmptyCart):
        checkout(session_factory, "cart_missing")

    fill_cart(session_factory, TOKEN)
    with pytest.raises(EmptyCart):
        checkout(session_factory, TOKEN)

    assert count(session_factory, OrderModel) == 0


def test_failure_on_any_line_rolls_back_everything(session_factory, catalog):
    fill_cart(
        session_factory,
        TOKEN,
        (catalog.mug, 2, None),
        (catalog.shirt, 1, catalog.shirt_m),
        (catalog.lamp, 1, None),
        coupon="TEN",
    )
    db = session_factory()
    set_stock(db, catalog.lamp, None, 0)
    db.close()

    with pytest.raises(InsufficientStock) as exc:
        checkout(session_factory, TOKEN)

    assert "Lamp" in exc.value.message
    assert count(session_factory, OrderModel) == 0
    assert count(session_factory, OrderItemModel) == 0
    assert stock_of(session_factory, catalog.mug) == 10
    assert stock_of(session_factory, catalog.shirt, catalog.shirt_m) == 5
    assert used_times(session_factory, catalog.ten) == 0
    assert len(fill_cart(session_factory, TOKEN)["items"]) == 3


def test_no_oversell_across_carts(session_factory, catalog):
    # lampa ma stan 3, o ostatnia sztuke walczy jeden koszyk za duzo
    tokens = [f"cart_{n}" for n in range(4)]
    for token in tokens:
        fill_cart(session_factory, token, (catalog.lamp, 1, None))

    barrier = threading.Barrier(len(tokens))

    def place(token):
        barrier.wait()
        try:
            checkout(session_factory, token)
            return True
        except InsufficientStock:
            return False

    with ThreadPoolExecutor(max_workers=len(tokens)) as pool:
        results = list(pool.map(place, tokens))

    assert results.count(True) == 3
    assert results.count(False) == 1
    assert stock_of(session_factory, catalog.lamp) == 0
    assert count(session_factory, OrderModel) == 3


def test_coupon_exhausted_before_checkout_is_dropped(session_factory, catalog):
    fill_cart(session_factory, "cart_first", (catalog.mug, 2, None), coupon="ONCE")
    fill_cart(session_factory, "cart_second", (catalog.mug, 2, None), coupon="ONCE")

    first = checkout(session_factory, "cart_first")
    second = checkout(session_factory, "cart_second")

    assert first["coupon_id"] == catalog.once
    assert first["discount"] == Decimal("5.00")
    assert first["total"] == Decimal("70.00")

    assert second["coupon_id"] is None
    assert second["discount"] == Decimal("0.00")
    assert second["total"] == Decimal("75.00")

    assert used_times(session_factory, catalog.once) == 1


def test_strict_mode_rejects_exhausted_coupon(session_factory, catalog):
    fill_cart(session_factory, "cart_first", (catalog.mug, 1, None), coupon="ONCE")
    fill_cart(session_factory, "cart_second", (catalog.mug, 1, None), coupon="ONCE")
    checkout(session_factory, "cart_first", strict_coupons=True)

    with pytest.raises(CouponInvalid):
        checkout(session_factory, "cart_second", strict_coupons=True)

    assert count(session_factory, OrderModel) == 1
    assert stock_of(session_factory, catalog.mug) == 9
    assert len(fill_cart(session_factory, "cart_second")["items"]) == 1


def test_notification_failure_does_not_undo_order(session_factory, catalog):
    fill_cart(session_factory, TOKEN, (catalog.mug, 1, None))

    order = checkout(session_factory, TOKEN, notifier=RecordingNotifier(fail=True))

    assert order["id"]
    assert count(session_factory, OrderModel) == 1
    assert stock_of(session_factory, catalog.mug) == 9


def test_order_line_total_is_always_recomputed(db, catalog):
    order = OrderModel(
        order_number="ORD-TESTLINE01",
        subtotal=Decimal("60.00"),
        total=Decimal("75.00"),
        customer_name="Ana",
        customer_email="ana@example.com",
        shipping_address="Rua 1",
        shipping_city="Sao Paulo",
        shipping_state="SP",
        shipping_zipcode="01310100",
    )
    item = OrderItemModel(product_id=catalog.mug, quantity=2, price=Decimal("30.00"), total=Decimal("999.00"))
    order.items.append(item)
    db.add(order)
    db.flush()

    assert item.total == Decimal("60.00")

    item.quantity = 3
    db.flush()

    assert item.total == Decimal("90.00")

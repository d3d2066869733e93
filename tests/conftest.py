from contextlib import contextmanager
from decimal import Decimal
from types import SimpleNamespace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

import storefront.data.models  # noqa: F401
from storefront.api.deps import get_address_client, get_lock_service, get_notifier
from storefront.data.database import Base, get_db, make_engine
from storefront.data.models import CouponModel, ProductModel, ProductVariationModel, StockModel
from storefront.domain.schemas import CustomerInfo
from storefront.main import create_app
from storefront.repos.stock_repo import StockRepo
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_order_confirmation(self, order):
        if self.fail:
            raise ConnectionError("broker niedostepny")
        self.sent.append(order.order_number)


class InMemoryLockService:
    def __init__(self):
        self.tokens = []

    @contextmanager
    def cart_lock(self, token, **kwargs):
        self.tokens.append(token)
        yield


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'storefront-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def catalog(session_factory):
    """
    mug      30.00, stock 10
    shirt    50.00, warianty M (+0, stock 5) i GG (+5.00, stock 2)
    lamp    100.00, stock 3
    kupony: TEN 10%, BIG fixed 500, MIN100 10% od 100.00, ONCE fixed 5 max 1 uzycie,
            EXPIRED, INACTIVE
    """
    db = session_factory()
    now = datetime.now(timezone.utc)

    mug = ProductModel(name="Mug", price=Decimal("30.00"), has_variations=False, active=True)
    shirt = ProductModel(name="Shirt", price=Decimal("50.00"), has_variations=True, active=True)
    lamp = ProductModel(name="Lamp", price=Decimal("100.00"), has_variations=False, active=True)
    db.add_all([mug, shirt, lamp])
    db.flush()

    medium = ProductVariationModel(product_id=shirt.id, name="M", price_adjustment=Decimal("0.00"), active=True)
    large = ProductVariationModel(product_id=shirt.id, name="GG", price_adjustment=Decimal("5.00"), active=True)
    db.add_all([medium, large])
    db.flush()

    db.add_all([
        StockModel(product_id=mug.id, product_variation_id=None, quantity=10),
        StockModel(product_id=shirt.id, product_variation_id=medium.id, quantity=5),
        StockModel(product_id=shirt.id, product_variation_id=large.id, quantity=2),
        StockModel(product_id=lamp.id, product_variation_id=None, quantity=3),
    ])

    coupons = {
        "ten": CouponModel(code="TEN", type="percentage", value=Decimal("10"), used_times=0, active=True),
        "big": CouponModel(code="BIG", type="fixed", value=Decimal("500.00"), used_times=0, active=True),
        "min100": CouponModel(
            code="MIN100", type="percentage", value=Decimal("10"), min_value=Decimal("100.00"),
            used_times=0, active=True,
        ),
        "once": CouponModel(code="ONCE", type="fixed", value=Decimal("5.00"), max_uses=1, used_times=0, active=True),
        "expired": CouponModel(
            code="EXPIRED", type="fixed", value=Decimal("5.00"), used_times=0, active=True,
            valid_until=now - timedelta(days=1),
        ),
        "inactive": CouponModel(code="INACTIVE", type="fixed", value=Decimal("5.00"), used_times=0, active=False),
    }
    db.add_all(coupons.values())
    db.commit()

    ids = SimpleNamespace(
        mug=mug.id,
        shirt=shirt.id,
        shirt_m=medium.id,
        shirt_gg=large.id,
        lamp=lamp.id,
        **{name: coupon.id for name, coupon in coupons.items()},
    )
    db.close()
    return ids


def set_stock(db, product_id, variation_id, quantity):
    condition = StockModel.product_variation_id.is_(None) if variation_id is None \
        else StockModel.product_variation_id == variation_id
    db.execute(
        update(StockModel)
        .where(StockModel.product_id == product_id, condition)
        .values(quantity=quantity)
    )
    db.commit()


def stock_of(session_factory, product_id, variation_id=None):
    db = session_factory()
    try:
        return StockRepo(db).get_quantity(product_id, variation_id)
    finally:
        db.close()


CUSTOMER = CustomerInfo(
    customer_name="Ana Souza",
    customer_email="ana@example.com",
    shipping_address="Rua das Flores, 10",
    shipping_city="Sao Paulo",
    shipping_state="SP",
    shipping_zipcode="01310-100",
)


def fill_cart(session_factory, token, *lines, coupon=None):
    db = session_factory()
    try:
        service = CartService(db)
        for product_id, quantity, variation_id in lines:
            service.add_item(token, product_id, quantity, variation_id=variation_id)
        if coupon:
            service.apply_coupon(token, coupon)
        return service.get_cart(token)
    finally:
        db.close()


def checkout(session_factory, token, notifier=None, strict_coupons=False):
    db = session_factory()
    try:
        return CheckoutService(db, notifier=notifier, strict_coupons=strict_coupons).process(token, CUSTOMER)
    finally:
        db.close()


def used_times(session_factory, coupon_id):
    db = session_factory()
    try:
        return db.execute(select(CouponModel.used_times).where(CouponModel.id == coupon_id)).scalar_one()
    finally:
        db.close()


@pytest.fixture
def client(session_factory, notifier):
    app = create_app()

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_lock_service] = lambda: None
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_address_client] = lambda: None
    return TestClient(app)

# storefront/data/seed.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import CouponModel, ProductModel, ProductVariationModel, StockModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def seed(db=None):
    own_session = db is None
    db = db or SessionLocal()
    try:
        # tylko gdy katalog pusty
        if db.query(ProductModel).first():
            logger.info("Katalog nie jest pusty, pomijam seed")
            return

        mug = ProductModel(name="Caneca", price=Decimal("30.00"), description="Caneca de ceramica 300ml")
        db.add(mug)
        db.flush()
        db.add(StockModel(product_id=mug.id, quantity=50))

        shirt = ProductModel(
            name="Camiseta",
            price=Decimal("59.90"),
            description="Camiseta 100% algodao",
            has_variations=True,
        )
        db.add(shirt)
        db.flush()
        for name, adjustment, quantity in (("P", "0.00", 10), ("M", "0.00", 15), ("GG", "5.00", 5)):
            variation = ProductVariationModel(
                product_id=shirt.id,
                name=name,
                price_adjustment=Decimal(adjustment),
            )
            db.add(variation)
            db.flush()
            db.add(StockModel(product_id=shirt.id, product_variation_id=variation.id, quantity=quantity))

        now = datetime.now(timezone.utc)
        db.add_all([
            CouponModel(code="BEMVINDO10", type="percentage", value=Decimal("10"), active=True),
            CouponModel(
                code="FRETE20",
                type="fixed",
                value=Decimal("20.00"),
                min_value=Decimal("100.00"),
                max_uses=100,
                active=True,
                valid_from=now,
                valid_until=now + timedelta(days=30),
            ),
        ])

        db.commit()
        logger.info("Seed katalogu zakonczony")
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()

# storefront/data/models/product.py
from sqlalchemy import Column, Integer, ForeignKey, String, Text, Boolean, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)

    has_variations = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)

    variations = relationship(
        "ProductVariationModel",
        back_populates="product",
        order_by="ProductVariationModel.id",
        cascade="all, delete-orphan",
    )
    stocks = relationship(
        "StockModel",
        back_populates="product",
        cascade="all, delete-orphan",
    )


class ProductVariationModel(Base):
    __tablename__ = "product_variations"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    # doliczane do ceny bazowej produktu
    price_adjustment = Column(Numeric(10, 2), nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)

    product = relationship("ProductModel", back_populates="variations")

# storefront/data/models/stock.py
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class StockModel(Base):
    """
    Stan magazynowy dla pary (produkt, wariant).
    product_variation_id = NULL -> produkt prosty, bez wariantow.
    """

    __tablename__ = "stocks"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    product_variation_id = Column(
        Integer,
        ForeignKey("product_variations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    quantity = Column(Integer, nullable=False, default=0)

    product = relationship("ProductModel", back_populates="stocks")

    __table_args__ = (
        UniqueConstraint("product_id", "product_variation_id", name="u_stock_product_variation"),
    )

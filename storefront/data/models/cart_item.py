from sqlalchemy import Column, Integer, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_variation_id = Column(Integer, ForeignKey("product_variations.id"), nullable=True)

    quantity = Column(Integer, nullable=False)
    # cena i nazwy zapisane w momencie dodania do koszyka
    price = Column(Numeric(10, 2), nullable=False)
    name = Column(String(255), nullable=False)
    variation_name = Column(String(255), nullable=True)

    cart = relationship("CartModel", back_populates="items")

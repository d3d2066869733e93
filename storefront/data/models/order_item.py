from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, Numeric, event
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_variation_id = Column(Integer, ForeignKey("product_variations.id"), nullable=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")

    def calculate_total(self) -> Decimal:
        return Decimal(str(self.price)) * int(self.quantity)


@event.listens_for(OrderItemModel, "before_insert")
@event.listens_for(OrderItemModel, "before_update")
def _recalculate_line_total(mapper, connection, target):
    # total nigdy nie pochodzi z inputu
    target.total = target.calculate_total()

# storefront/repos/order_repo.py
from typing import List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.domain.order_status import CANCELLABLE, OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def get_by_number(self, order_number: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.order_number == order_number)
        ).scalar_one_or_none()

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number)
        ).first() is not None

    def list_orders(self, status: str | None, page: int, per_page: int) -> Tuple[List[OrderModel], int]:
        query = select(OrderModel).options(selectinload(OrderModel.items))
        count_query = select(func.count(OrderModel.id))
        if status:
            query = query.where(OrderModel.status == status)
            count_query = count_query.where(OrderModel.status == status)

        total = self.db.execute(count_query).scalar_one()
        orders = self.db.execute(
            query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        ).scalars().all()
        return list(orders), total

    def mark_cancelled(self, order_id: int) -> int:
        """
        Warunkowy update statusu - tylko z pending/processing.
        rowcount 0 -> ktos juz zmienil status (np. drugi webhook)
        """
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status.in_([s.value for s in CANCELLABLE]),
            )
            .values(status=OrderStatus.CANCELLED.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def update_order_status(self, order_id: int, expected_status: str, status: str) -> int:
        """
        Zapis statusu tylko gdy zamowienie jest nadal w expected_status.
        rowcount 0 -> status zmieniony w miedzyczasie
        """
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected_status)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

# storefront/repos/stock_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.stock import StockModel


def _pair(product_id: int, variation_id: int | None):
    # produkt prosty ma variation_id = NULL i nie moze byc trafiony zapytaniem o wariant
    if variation_id is None:
        return (
            StockModel.product_id == product_id,
            StockModel.product_variation_id.is_(None),
        )
    return (
        StockModel.product_id == product_id,
        StockModel.product_variation_id == variation_id,
    )


class StockRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_quantity(self, product_id: int, variation_id: int | None) -> int | None:
        # zapytanie o kolumne, nie encje - zawsze swiezy odczyt z bazy
        return self.db.execute(
            select(StockModel.quantity).where(*_pair(product_id, variation_id))
        ).scalar_one_or_none()

    def decrement_if_available(self, product_id: int, variation_id: int | None, quantity: int) -> int:
        """
        Atomowe sprawdz-i-zmniejsz:
        update stocks set quantity = quantity - q where ... and quantity >= q
        zwraca rowcount (0 = za malo towaru albo brak wiersza)
        """
        result = self.db.execute(
            update(StockModel)
            .where(*_pair(product_id, variation_id), StockModel.quantity >= quantity)
            .values(quantity=StockModel.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def increment(self, product_id: int, variation_id: int | None, quantity: int) -> int:
        result = self.db.execute(
            update(StockModel)
            .where(*_pair(product_id, variation_id))
            .values(quantity=StockModel.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def create_stock(self, product_id: int, variation_id: int | None, quantity: int) -> StockModel:
        stock = StockModel(
            product_id=product_id,
            product_variation_id=variation_id,
            quantity=quantity,
        )
        self.db.add(stock)
        self.db.flush()
        return stock

    def totals_for_product(self, product_id: int) -> dict:
        rows = self.db.execute(
            select(StockModel.product_variation_id, StockModel.quantity)
            .where(StockModel.product_id == product_id)
        ).all()
        return {variation_id: quantity for variation_id, quantity in rows}

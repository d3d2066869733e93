# storefront/services/stock_ledger.py
from sqlalchemy.orm import Session

from storefront.domain.errors import InsufficientStock
from storefront.repos.stock_repo import StockRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StockLedger:
    """
    Stany magazynowe per (produkt, wariant).
    Nie robi commitow - dziala w transakcji wywolujacego (koszyk, checkout, anulowanie).
    """

    def __init__(self, db: Session):
        self.repo = StockRepo(db)

    def available(self, product_id: int, variation_id: int | None = None) -> int | None:
        return self.repo.get_quantity(product_id, variation_id)

    def ensure_available(
        self,
        product_id: int,
        variation_id: int | None,
        quantity: int,
        item_name: str | None = None,
        message: str = "Niewystarczajacy stan magazynowy",
    ) -> int:
        available = self.available(product_id, variation_id)

        if available is None or available < quantity:
            raise InsufficientStock(
                message,
                product_id=product_id,
                variation_id=variation_id,
                requested=quantity,
                available=available or 0,
                item_name=item_name,
            )
        return available

    def decrease(
        self,
        product_id: int,
        variation_id: int | None,
        quantity: int,
        item_name: str | None = None,
    ) -> None:
        rowcount = self.repo.decrement_if_available(product_id, variation_id, quantity)

        if rowcount == 0:
            available = self.available(product_id, variation_id) or 0
            label = item_name or f"#{product_id}"
            logger.warning(
                f"Brak towaru dla {label} (produkt {product_id}, wariant {variation_id}): "
                f"potrzeba {quantity}, dostepne {available}"
            )
            raise InsufficientStock(
                f"Niewystarczajacy stan magazynowy dla produktu: {label}",
                product_id=product_id,
                variation_id=variation_id,
                requested=quantity,
                available=available,
                item_name=item_name,
            )

        logger.info(f"Stan produktu {product_id} (wariant {variation_id}) zmniejszony o {quantity}")

    def increase(self, product_id: int, variation_id: int | None, quantity: int) -> None:
        rowcount = self.repo.increment(product_id, variation_id, quantity)

        if rowcount == 0:
            # wiersz stanu zniknal (np. produkt przebudowany) - odtwarzamy dokladna pare
            logger.warning(
                f"Brak wiersza stanu dla produktu {product_id} (wariant {variation_id}), tworze nowy"
            )
            self.repo.create_stock(product_id, variation_id, quantity)

        logger.info(f"Stan produktu {product_id} (wariant {variation_id}) zwiekszony o {quantity}")

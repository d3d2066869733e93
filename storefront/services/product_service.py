from decimal import Decimal
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound
from storefront.domain.pricing import to_money
from storefront.repos.product_repo import ProductRepo
from storefront.repos.stock_repo import StockRepo


class ProductService:
    """Katalog tylko do odczytu - dostepnosc i ceny koncowe wariantow."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.stock = StockRepo(db)

    def list_products(self) -> List[Dict[str, Any]]:
        return [self._to_dict(p) for p in self.repo.list_active()]

    def get_product(self, product_id: int) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product or not product.active:
            raise NotFound("Produkt nie istnieje")
        return self._to_dict(product)

    def _to_dict(self, product: ProductModel) -> Dict[str, Any]:
        stocks = self.stock.totals_for_product(product.id)
        base_price = Decimal(str(product.price))

        variations = []
        for v in product.variations:
            if not v.active:
                continue
            quantity = stocks.get(v.id, 0)
            variations.append({
                "id": v.id,
                "name": v.name,
                "price_adjustment": to_money(v.price_adjustment),
                "final_price": to_money(base_price + Decimal(str(v.price_adjustment or 0))),
                "stock": quantity,
                "is_available": quantity > 0,
            })

        if product.has_variations:
            total_stock = sum(q for vid, q in stocks.items() if vid is not None)
        else:
            total_stock = stocks.get(None, 0)

        return {
            "id": product.id,
            "name": product.name,
            "price": to_money(product.price),
            "description": product.description,
            "has_variations": product.has_variations,
            "is_available": total_stock > 0,
            "total_stock": total_stock,
            "variations": variations,
        }

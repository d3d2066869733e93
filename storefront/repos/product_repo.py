# storefront/repos/product_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.product import ProductModel, ProductVariationModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_variation(self, variation_id: int) -> ProductVariationModel | None:
        return self.db.get(ProductVariationModel, variation_id)

    def list_active(self) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .options(selectinload(ProductModel.variations))
                .where(ProductModel.active.is_(True))
                .order_by(ProductModel.name)
            ).scalars()
        )

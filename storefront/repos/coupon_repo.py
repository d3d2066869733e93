# storefront/repos/coupon_repo.py
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_coupon(self, coupon_id: int) -> CouponModel | None:
        return self.db.get(CouponModel, coupon_id)

    def get_active_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(
                CouponModel.code == code,
                CouponModel.active.is_(True),
            )
        ).scalar_one_or_none()

    def increment_usage(self, coupon_id: int) -> int:
        # limit sprawdzany w tym samym update, dwa rownolegle checkouty nie przekrocza max_uses
        result = self.db.execute(
            update(CouponModel)
            .where(
                CouponModel.id == coupon_id,
                or_(
                    CouponModel.max_uses.is_(None),
                    CouponModel.max_uses == 0,
                    CouponModel.used_times < CouponModel.max_uses,
                ),
            )
            .values(used_times=CouponModel.used_times + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def decrement_usage(self, coupon_id: int) -> int:
        result = self.db.execute(
            update(CouponModel)
            .where(CouponModel.id == coupon_id, CouponModel.used_times > 0)
            .values(used_times=CouponModel.used_times - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

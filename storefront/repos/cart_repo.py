# storefront/repos/cart_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.pricing import ZERO


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_token(self, token: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .options(selectinload(CartModel.items))
            .where(CartModel.cart_id == token)
        ).scalar_one_or_none()

    def create_cart(self, token: str) -> CartModel:
        cart = CartModel(
            cart_id=token,
            subtotal=ZERO,
            discount=ZERO,
            shipping=ZERO,
            total=ZERO,
        )
        self.db.add(cart)
        self.db.flush()
        return cart

    def add_cart_item(self, cart: CartModel, item: CartItemModel) -> CartItemModel:
        cart.items.append(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart: CartModel, index: int) -> CartItemModel:
        # delete-orphan usuwa wiersz przy flush
        item = cart.items.pop(index)
        self.db.flush()
        return item

    def reset(self, cart: CartModel) -> CartModel:
        cart.items.clear()
        cart.coupon_code = None
        cart.coupon_id = None
        cart.subtotal = ZERO
        cart.discount = ZERO
        cart.shipping = ZERO
        cart.total = ZERO
        self.db.flush()
        return cart

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

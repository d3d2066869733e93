from contextlib import nullcontext
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    CouponInvalid,
    InvalidVariation,
    ItemNotFound,
    NotFound,
    ValidationError,
)
from storefront.domain.pricing import ZERO, calculate_shipping, line_total, order_total, to_money
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.coupon_engine import CouponEngine, normalize_code
from storefront.services.lock_service import LockService
from storefront.services.stock_ledger import StockLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cart_to_dict(cart: CartModel) -> Dict[str, Any]:
    return {
        "cart_id": cart.cart_id,
        "items": [
            {
                "product_id": i.product_id,
                "product_variation_id": i.product_variation_id,
                "quantity": i.quantity,
                "price": to_money(i.price),
                "name": i.name,
                "variation_name": i.variation_name,
                "total": line_total(i.price, i.quantity),
            }
            for i in cart.items
        ],
        "subtotal": to_money(cart.subtotal),
        "discount": to_money(cart.discount),
        "shipping": to_money(cart.shipping),
        "total": to_money(cart.total),
        "coupon_code": cart.coupon_code,
        "coupon_id": cart.coupon_id,
    }


class CartService:
    """
    Use case'y koszyka identyfikowanego tokenem od klienta.
    commands (add, update, remove, clear, kupony) modyfikuja stan i przeliczaja sumy
    query (get) tylko odczyt (+ leniwe utworzenie pustego koszyka)
    """

    def __init__(self, db: Session, lock_service: LockService | None = None):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.stock = StockLedger(db)
        self.coupons = CouponEngine(db)
        self.lock_service = lock_service

    #query - odczyt
    def get_cart(self, token: str) -> Dict[str, Any]:
        cart = self._get_or_create(token)
        return cart_to_dict(cart)

    #commands
    def add_item(
        self,
        token: str,
        product_id: int,
        quantity: int,
        variation_id: int | None = None,
    ) -> Dict[str, Any]:

        if quantity < 1:
            raise ValidationError(
                "Ilosc musi byc wieksza niz 0",
                errors={"quantity": ["Ilosc musi byc wieksza niz 0"]},
            )

        product = self.products.get_product(product_id)
        if not product or not product.active:
            raise NotFound("Produkt nie istnieje")

        variation = None
        if variation_id is not None:
            variation = self.products.get_variation(variation_id)
            if not variation:
                raise NotFound("Wariant produktu nie istnieje")
            if variation.product_id != product.id or not variation.active:
                raise InvalidVariation("Nieprawidlowy wariant produktu")

        with self._locked(token):
            cart = self._get_or_create(token)
            existing_item = self._find_item(cart, product_id, variation_id)

            #sprawdzamy ilosc koncowa, przy scaleniu suma z tym co juz jest w koszyku
            if existing_item:
                new_quantity = existing_item.quantity + quantity
                self.stock.ensure_available(
                    product_id,
                    variation_id,
                    new_quantity,
                    product.name,
                    message="Niewystarczajacy stan magazynowy dla zadanej ilosci",
                )
                logger.info(
                    f"Produkt {product_id} juz jest w koszyku {token}, zwiekszam ilosc "
                    f"z {existing_item.quantity} do {new_quantity}"
                )
                existing_item.quantity = new_quantity
            else:
                self.stock.ensure_available(product_id, variation_id, quantity, product.name)

                price = Decimal(str(product.price))
                if variation:
                    price += Decimal(str(variation.price_adjustment or 0))

                logger.info(f"Dodaje nowy produkt {product_id} (wariant {variation_id}) do koszyka {token}")
                self.repo.add_cart_item(
                    cart,
                    CartItemModel(
                        product_id=product_id,
                        product_variation_id=variation_id,
                        quantity=quantity,
                        price=to_money(price),
                        name=product.name,
                        variation_name=variation.name if variation else None,
                    ),
                )

            return self._save(cart)

    def update_item(self, token: str, item_index: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValidationError(
                "Ilosc musi byc wieksza niz 0",
                errors={"quantity": ["Ilosc musi byc wieksza niz 0"]},
            )

        with self._locked(token):
            cart = self._get_or_create(token)
            item = self._item_at(cart, item_index)

            #produkt mogl zostac wylaczony od czasu dodania do koszyka
            product = self.products.get_product(item.product_id)
            if not product or not product.active:
                raise NotFound("Produkt nie istnieje")
            if item.product_variation_id is not None:
                variation = self.products.get_variation(item.product_variation_id)
                if not variation or variation.product_id != product.id or not variation.active:
                    raise InvalidVariation("Nieprawidlowy wariant produktu")

            self.stock.ensure_available(item.product_id, item.product_variation_id, quantity, item.name)

            logger.info(f"Koszyk {token}: pozycja {item_index} ilosc {item.quantity} -> {quantity}")
            item.quantity = quantity

            return self._save(cart)

    def remove_item(self, token: str, item_index: int) -> Dict[str, Any]:
        with self._locked(token):
            cart = self._get_or_create(token)
            self._item_at(cart, item_index)

            removed = self.repo.delete_cart_item(cart, item_index)
            logger.info(f"Koszyk {token}: usunieto pozycje {item_index} (produkt {removed.product_id})")

            return self._save(cart)

    def clear(self, token: str) -> Dict[str, Any]:
        with self._locked(token):
            cart = self._get_or_create(token)
            self.repo.reset(cart)
            self.repo.commit()

            logger.info(f"Koszyk {token} wyczyszczony")
            return cart_to_dict(cart)

    def apply_coupon(self, token: str, code: str) -> Dict[str, Any]:
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError(
                "Podaj kod kuponu",
                errors={"coupon_code": ["Kod kuponu jest wymagany"]},
            )

        with self._locked(token):
            cart = self._get_or_create(token)

            coupon = self.coupons.find_active(normalized)
            if not coupon:
                raise CouponInvalid("Kupon niewazny lub wygasl")

            if not CouponEngine.is_valid(coupon, cart.subtotal):
                raise CouponInvalid(CouponEngine.rejection_message(coupon, cart.subtotal))

            cart.coupon_code = coupon.code
            cart.coupon_id = coupon.id
            logger.info(f"Koszyk {token}: zastosowano kupon {coupon.code}")

            return self._save(cart)

    def remove_coupon(self, token: str) -> Dict[str, Any]:
        with self._locked(token):
            cart = self._get_or_create(token)
            cart.coupon_code = None
            cart.coupon_id = None

            return self._save(cart)

    def recalculate(self, cart: CartModel) -> CartModel:
        """
        subtotal -> rabat -> dostawa -> total.
        Kupon ktory przestal byc wazny (np. subtotal spadl ponizej minimum) jest po cichu odpinany.
        """
        if not cart.items:
            #pusty koszyk = wartosci domyslne, jak po clear()
            cart.coupon_code = None
            cart.coupon_id = None
            cart.subtotal = ZERO
            cart.discount = ZERO
            cart.shipping = ZERO
            cart.total = ZERO
            return cart

        subtotal = to_money(sum((line_total(i.price, i.quantity) for i in cart.items), ZERO))
        discount = ZERO

        if cart.coupon_id:
            coupon = self.coupons.get(cart.coupon_id)
            if coupon and CouponEngine.is_valid(coupon, subtotal):
                discount = CouponEngine.calculate_discount(coupon, subtotal)
            else:
                logger.info(f"Koszyk {cart.cart_id}: kupon {cart.coupon_code} nie jest juz wazny, odpinam")
                cart.coupon_code = None
                cart.coupon_id = None

        shipping = calculate_shipping(subtotal)

        cart.subtotal = subtotal
        cart.discount = discount
        cart.shipping = shipping
        cart.total = order_total(subtotal, discount, shipping)
        return cart

    # ---- helpers

    def _get_or_create(self, token: str) -> CartModel:
        cart = self.repo.get_by_token(token)
        if cart:
            return cart

        try:
            cart = self.repo.create_cart(token)
            self.repo.commit()
        except IntegrityError:
            #druga karta utworzyla ten sam koszyk w miedzyczasie
            self.repo.rollback()
            cart = self.repo.get_by_token(token)
            if cart is None:
                raise
            return cart

        logger.info(f"Utworzono nowy koszyk {token}")
        return cart

    def _save(self, cart: CartModel) -> Dict[str, Any]:
        self.recalculate(cart)
        self.repo.commit()
        return cart_to_dict(cart)

    def _locked(self, token: str):
        if self.lock_service is None:
            return nullcontext()
        return self.lock_service.cart_lock(token)

    @staticmethod
    def _find_item(cart: CartModel, product_id: int, variation_id: int | None) -> CartItemModel | None:
        for item in cart.items:
            if item.product_id == product_id and item.product_variation_id == variation_id:
                return item
        return None

    @staticmethod
    def _item_at(cart: CartModel, item_index: int) -> CartItemModel:
        if not cart.items:
            raise ItemNotFound("Koszyk jest pusty, brak pozycji do zmiany")
        if item_index < 0 or item_index >= len(cart.items):
            raise ItemNotFound("Nie znaleziono pozycji w koszyku. Odswiez strone.")
        return cart.items[item_index]

# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Wspolna koperta odpowiedzi: {success, message, data}."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


# ---------------------------------------------------------------- cart

class AddItemIn(BaseModel):
    product_id: int = Field(..., gt=0, description="ID produktu")
    product_variation_id: Optional[int] = Field(None, gt=0, description="ID wariantu produktu")
    quantity: int = Field(..., ge=1, description="Ilosc (min. 1)")


class UpdateItemIn(BaseModel):
    item_index: int = Field(..., ge=0, description="Pozycja w koszyku (od 0)")
    quantity: int = Field(..., ge=1, description="Nowa ilosc (min. 1)")


class RemoveItemIn(BaseModel):
    item_index: int = Field(..., ge=0, description="Pozycja w koszyku (od 0)")


class ApplyCouponIn(BaseModel):
    coupon_code: str = Field(..., min_length=1, max_length=20)


class CartItemOut(BaseModel):
    product_id: int
    product_variation_id: Optional[int] = None
    quantity: int
    price: Decimal
    name: str
    variation_name: Optional[str] = None
    total: Decimal


class CartOut(BaseModel):
    cart_id: str
    items: List[CartItemOut]
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    coupon_id: Optional[int] = None


# ---------------------------------------------------------------- catalog

class VariationOut(BaseModel):
    id: int
    name: str
    price_adjustment: Decimal
    final_price: Decimal
    stock: int
    is_available: bool


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    description: Optional[str] = None
    has_variations: bool
    is_available: bool
    total_stock: int
    variations: List[VariationOut] = []


# ---------------------------------------------------------------- checkout

class CustomerInfo(BaseModel):
    """Dane klienta i adres dostawy wysylane z formularza checkoutu."""

    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: EmailStr
    shipping_address: str = Field(..., min_length=1, max_length=255)
    shipping_city: str = Field(..., min_length=1, max_length=100)
    shipping_state: str = Field(..., min_length=1, max_length=100)
    shipping_zipcode: str = Field(..., min_length=1, max_length=20)
    shipping_country: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ZipcodeIn(BaseModel):
    zipcode: str = Field(..., min_length=8, max_length=9)


class AddressOut(BaseModel):
    address: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: str


class OrderItemOut(BaseModel):
    product_id: int
    product_variation_id: Optional[int] = None
    quantity: int
    price: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    order_number: str
    status: str
    coupon_id: Optional[int] = None
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    total: Decimal
    customer_name: str
    customer_email: str
    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_zipcode: str
    shipping_country: str
    notes: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class CheckoutOut(BaseModel):
    order: OrderOut
    order_number: str


class OrderPageOut(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    per_page: int


# ---------------------------------------------------------------- status

class OrderStatusIn(BaseModel):
    status: str = Field(..., min_length=1)


class WebhookStatusIn(BaseModel):
    order_id: int = Field(..., gt=0)
    status: str = Field(..., min_length=1)

# easybuy/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List
from decimal import Decimal
from datetime import datetime


# =====================================================
# CATALOG
# =====================================================
class ProductRecord(BaseModel):
    """Snapshot produktu z katalogu."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    image_url: str | None = Field(default=None, alias="imageUrl")
    price: Decimal


class CouponRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    discount: Decimal


class ShippingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    fee: Decimal = Field(..., ge=0)


# =====================================================
# AUTH
# =====================================================
class RegisterIn(BaseModel):
    email: EmailStr
    # bcrypt bierze max 72 bajty
    password: str = Field(..., min_length=1, max_length=72)


class LoginIn(BaseModel):
    email: str
    password: str


class LogoutIn(BaseModel):
    token: str = Field(..., min_length=1)


class TokenPairOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MessageOut(BaseModel):
    message: str


# =====================================================
# CART
# =====================================================
class ItemIn(BaseModel):
    """Pozycja w requescie koszyka/zamowienia."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Ilosc produktu (musi byc > 0)")


class CartAddIn(BaseModel):
    products: List[ItemIn] = Field(..., min_length=1)


class CartRemoveIn(BaseModel):
    product_ids: List[str] = Field(..., min_length=1)


class QuantityIn(BaseModel):
    # bez gt=0, InvalidQuantity rzuca serwis
    quantity: int


class LineItemOut(BaseModel):
    product_id: str
    name: str
    image_url: str | None = None
    price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    items: List[LineItemOut]
    total: Decimal


class CartRemovedOut(BaseModel):
    message: str
    deleted: int


# =====================================================
# ORDERS
# =====================================================
class CouponIn(BaseModel):
    code: str
    discount: Decimal


class OrderCreateIn(BaseModel):
    products: List[ItemIn] = Field(..., min_length=1)
    shipping_id: str
    coupon_id: str | None = None


class OrderUpdateIn(BaseModel):
    products: List[ItemIn] = Field(..., min_length=1)
    shipping_method: str
    shipping_fee: Decimal = Field(..., ge=0)
    coupon: CouponIn | None = None


class OrderCreatedOut(BaseModel):
    message: str = "Order created"
    order_id: str


class ReviewOut(BaseModel):
    comment: str
    rating: int | None
    image_urls: List[str]


class OrderOut(BaseModel):
    id: str
    products: List[LineItemOut]
    shipping_method: str
    shipping_fee: Decimal
    coupon: CouponIn | None = None
    total_amount: Decimal
    created_at: datetime
    review: ReviewOut | None = None


class ProfileOut(BaseModel):
    id: int
    email: str
    orders: List[OrderOut]
    cart: List[LineItemOut]

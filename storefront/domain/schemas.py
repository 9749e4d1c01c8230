# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from storefront.data.models.order import OrderStatus

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Every response: success flag, human readable message, payload."""

    success: bool = True
    message: str
    data: Optional[T] = None


# ---- requests ----

class PayerIn(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address: str = Field(..., min_length=1, max_length=300)
    phone: str = Field(..., min_length=3, max_length=30)


class InitiatePaymentIn(PayerIn):
    """Checkout request, amount in the major currency unit."""

    amount: int = Field(..., gt=0)


class VerifyPaymentIn(BaseModel):
    reference: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_-]+$")
    order_id: Optional[str] = Field(None, min_length=1, max_length=64)


class ItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0)


class PriceIn(BaseModel):
    price: int = Field(..., gt=0)


class StatusIn(BaseModel):
    status: OrderStatus


class BulkDeleteIn(BaseModel):
    product_ids: List[int] = Field(..., min_length=1)


# ---- responses ----

class CheckoutOut(BaseModel):
    redirect_url: str
    reference: str


class CartItemOut(BaseModel):
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    amount: int


class CartOut(BaseModel):
    cart_id: Optional[int] = None
    user_id: int
    items: List[CartItemOut]
    total: int


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    product_available: bool
    quantity: int
    amount: int
    paid: bool


class OrderOut(BaseModel):
    order_id: str
    user_id: int
    full_name: str
    first_name: str
    last_name: str
    email: str
    address: Optional[str] = None
    phone: Optional[str] = None
    amount: Decimal
    transaction_id: str
    status: str
    created_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


class DeletionOut(BaseModel):
    deleted: List[int] = []
    blocked: dict[str, Any] = {}
    missing: List[int] = []

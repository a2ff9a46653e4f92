"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept apart from the internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-001", "quantity": 2}]}}


class CartLineResponse(BaseModel):
    line_id: str


class CartQuantityResponse(BaseModel):
    line_id: str
    quantity: int
    removed: bool = False


class RemoveFromCartResponse(BaseModel):
    removed: bool


class CheckoutLineSchema(BaseModel):
    line_id: str
    product_id: str
    name: str
    category: str | None = None
    unit_price: float
    quantity: int
    requested_quantity: int
    subtotal: float
    adjusted: bool


class CheckoutResponse(BaseModel):
    lines: list[CheckoutLineSchema]
    adjusted: bool
    subtotal: float


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddressRequest(BaseModel):
    street: str = Field(max_length=100)
    additional_info: str | None = Field(default=None, max_length=100)
    city: str = Field(max_length=50)
    state: str = Field(max_length=50)
    postal_code: str = Field(max_length=20)
    country: str = Field(max_length=50)
    is_default: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "street": "Rue de Paris 12",
                    "city": "Djibouti",
                    "state": "Djibouti",
                    "postal_code": "DJ1000",
                    "country": "Djibouti",
                    "is_default": True,
                }
            ]
        }
    }


class UpdateAddressRequest(BaseModel):
    street: str | None = Field(default=None, max_length=100)
    additional_info: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=50)
    state: str | None = Field(default=None, max_length=50)
    postal_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=50)
    is_default: bool | None = None


class AddressIdResponse(BaseModel):
    address_id: str


class AddressResponse(BaseModel):
    address_id: str
    street: str
    additional_info: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool


class RemoveAddressResponse(BaseModel):
    new_default_set: bool
    new_default_id: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PaymentInfoSchema(BaseModel):
    channel: str
    account_number: str = Field(max_length=50)
    account_name: str = Field(max_length=100)
    amount_paid: float
    paid_on: datetime | None = None


class FinalizeOrderRequest(BaseModel):
    payment: PaymentInfoSchema
    shipping_address_id: str | None = None
    tax_amount: float = Field(default=0.0, ge=0)
    shipping_amount: float = Field(default=0.0, ge=0)
    total_amount: float | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "payment": {
                        "channel": "WAAFI",
                        "account_number": "77123456",
                        "account_name": "Amina Hassan",
                        "amount_paid": 105.0,
                    },
                    "shipping_address_id": None,
                    "tax_amount": 0.0,
                    "shipping_amount": 5.0,
                    "total_amount": 105.0,
                }
            ]
        }
    }


class OrderPlacedResponse(BaseModel):
    order_id: str
    order_number: str
    cart_adjusted: bool = False


class CancelOrderRequest(BaseModel):
    reason: str = Field(max_length=200)


class PaymentStatusRequest(BaseModel):
    payment_status: str


class OrderHistoryEntry(BaseModel):
    order_id: str
    order_number: str
    order_status: str
    payment_status: str
    item_count: int
    total_amount: float
    created_at: datetime | None = None


class OrderHistoryResponse(BaseModel):
    orders: list[OrderHistoryEntry]
    total: int
    page: int
    limit: int

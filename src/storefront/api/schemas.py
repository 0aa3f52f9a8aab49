"""Pydantic request schemas for the storefront API.

These are external contracts, separate from the internal Protean commands.
Fields are read in camelCase, the way clients send them; snake_case names
are accepted too.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    phone: str | None = None


class TrackingSchema(CamelModel):
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None


class PaymentDetailsSchema(CamelModel):
    transaction_id: str | None = None
    payment_intent_id: str | None = None
    last4: str | None = None
    brand: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    product_id: str
    quantity: int = 1
    variant: str | None = None


class UpdateCartItemRequest(CamelModel):
    quantity: int


class MergeCartRequest(CamelModel):
    guest_session_id: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class OrderLineRequest(CamelModel):
    product_id: str
    quantity: int
    variant: str | None = None


class CreateOrderRequest(CamelModel):
    items: list[OrderLineRequest]
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    customer_notes: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "items": [{"productId": "prod-001", "quantity": 2}],
                    "shippingAddress": {
                        "firstName": "Jane",
                        "lastName": "Doe",
                        "address1": "1 Main St",
                        "city": "Springfield",
                        "postalCode": "12345",
                        "country": "US",
                    },
                    "paymentMethod": "credit_card",
                }
            ]
        },
    )


class CheckoutRequest(CamelModel):
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    customer_notes: str | None = None


class UpdateOrderStatusRequest(CamelModel):
    status: str
    note: str | None = None
    tracking: TrackingSchema | None = None


class UpdatePaymentStatusRequest(CamelModel):
    payment_status: str
    payment_details: PaymentDetailsSchema | None = None


class CancelOrderRequest(CamelModel):
    reason: str | None = None


class RecordRefundRequest(CamelModel):
    amount: float
    reason: str | None = None
    transaction_id: str | None = None


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(CamelModel):
    name: str
    price: float = Field(ge=0)
    description: str | None = None
    sku: str | None = None
    slug: str | None = None
    quantity: int = Field(ge=0, default=0)
    track_quantity: bool = True
    is_available: bool = True


class UpdateProductRequest(CamelModel):
    name: str | None = None
    price: float | None = Field(ge=0, default=None)
    description: str | None = None
    sku: str | None = None
    slug: str | None = None
    quantity: int | None = Field(ge=0, default=None)
    track_quantity: bool | None = None
    is_available: bool | None = None

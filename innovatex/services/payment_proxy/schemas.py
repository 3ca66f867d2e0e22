"""Request/response schemas for the create-order endpoints."""

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Upper bound keeps the amount a finite JSON number.
MAX_ORDER_AMOUNT = Decimal("10000000")


class CustomerDetails(BaseModel):
    """Customer identity forwarded to the gateway as-is."""

    model_config = ConfigDict(extra="allow")

    customer_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None


class OrderMeta(BaseModel):
    """Optional checkout metadata; unknown gateway fields pass through."""

    model_config = ConfigDict(extra="allow")

    return_url: str | None = None
    notify_url: str | None = None
    payment_methods: str | None = None


class CreatePaymentOrderRequest(BaseModel):
    """Payload accepted by `POST /api/create-payment-order` and its aliases.

    `amount` is accepted in place of `order_amount`.
    """

    model_config = ConfigDict(populate_by_name=True)

    order_amount: Decimal = Field(
        gt=0,
        le=MAX_ORDER_AMOUNT,
        decimal_places=2,
        validation_alias=AliasChoices("order_amount", "amount"),
    )
    customer_details: CustomerDetails
    order_id: str | None = Field(default=None, min_length=1, max_length=50)
    order_currency: str | None = Field(default=None, min_length=3, max_length=3)
    order_meta: OrderMeta | None = None


class GatewayOrderPayload(BaseModel):
    """Body sent to the gateway `POST /orders` call."""

    order_id: str
    order_amount: float
    order_currency: str
    customer_details: dict
    order_meta: dict


class HealthResponse(BaseModel):
    status: str = "ok"

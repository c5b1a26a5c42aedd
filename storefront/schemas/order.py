# storefront/schemas/order.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

PaymentMethod = Literal["card", "paypal", "cash_on_delivery"]
PAYMENT_METHODS: tuple[str, ...] = ("card", "paypal", "cash_on_delivery")

OrderStatus = Literal["pending", "confirmed", "shipped", "canceled"]
PaymentStatus = Literal["pending", "paid", "failed"]

ADDRESS_FIELDS: tuple[str, ...] = ("street", "city", "state", "zip_code", "country")


class ShippingAddressIn(SQLModel):
    """
    Postal address as submitted.

    Every field is optional at parse time; completeness is checked by
    the checkout service so that failures come back in checkout order
    (empty cart first, then address, then payment method).
    """

    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class CheckoutItemIn(SQLModel):
    """
    Ad hoc line for checking out without a cart.

    expected_price: the price the client displayed; when present it is
    compared with the live price before anything is charged.
    """

    product_id: uuid.UUID
    quantity: int
    expected_price: Decimal | None = None


class CheckoutRequest(SQLModel):
    """
    Payload for placing an order.

    User provides:
      - items (optional; omitted => checkout the current cart)
      - shipping_address
      - payment_method
      - discount_code (optional)

    Backend derives:
      - user_id from token
      - status = 'pending', payment_status = 'pending'
      - frozen prices and totals from the product ledger
    """

    model_config = ConfigDict(extra="forbid")

    items: list[CheckoutItemIn] | None = None
    shipping_address: ShippingAddressIn | None = None
    payment_method: str | None = None
    discount_code: str | None = None


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    total_amount: Decimal
    discount_code: str | None
    discount_amount: Decimal
    amount_due: Decimal
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    status: OrderStatus
    created_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    quantity: int
    price_at_order: Decimal
    line_total: Decimal


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class CheckoutResponse(SQLModel):
    message: str
    order_number: uuid.UUID
    order: OrderWithItemsRead

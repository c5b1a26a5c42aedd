# storefront/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Committed customer order.

    Append-only: created exactly once per successful checkout.
    The id doubles as the order number shown to the customer.

    Amounts:
      - total_amount    = sum(quantity * price_at_order) over the items
      - discount_amount = reduction from an applied discount code (0 if none)
      - amount_due      = total_amount - discount_amount
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    total_amount: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="Sum of line totals at order time",
    )

    discount_code: str | None = Field(default=None)

    discount_amount: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=12,
        decimal_places=2,
    )

    amount_due: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="What the customer pays (total minus discount)",
    )

    # Shipping address
    street: str
    city: str
    state: str
    zip_code: str
    country: str

    # card | paypal | cash_on_delivery
    payment_method: str

    # pending | paid | failed
    payment_status: str = Field(default="pending")

    # pending | confirmed | shipped | canceled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order. Price is frozen at commit time.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    product_name: str

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price_at_order: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Unit price at time of order",
    )

    line_position: int = Field(default=0)

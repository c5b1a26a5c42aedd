# storefront/models/discount.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Discount(SQLModel, table=True):
    """
    Discount code.

    discount_type:
      - "fixed"      : subtract `amount` from the subtotal (floored at 0)
      - "percentage" : take `amount` percent off the subtotal
    """

    __tablename__ = "discounts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    code: str = Field(
        unique=True,
        index=True,
        max_length=50,
    )

    discount_type: str = Field(description="fixed | percentage")

    amount: Decimal = Field(
        ge=0,
        max_digits=10,
        decimal_places=2,
    )

    expires_at: datetime

    is_active: bool = Field(default=True)

# storefront/schemas/cart.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import field_validator
from sqlmodel import SQLModel, Field


class CartItemBase(SQLModel):
    """
    Base fields for create/update payloads.
    """

    product_id: uuid.UUID
    quantity: int = Field(gt=0)


class CartItemCreate(CartItemBase):
    """
    Payload for adding to cart.
    """

    pass


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    quantity: int = Field(gt=0)


class CartItemRead(SQLModel):
    """
    Read model for a single cart line, including line_total.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    snapshot_price: Decimal
    line_total: Decimal
    created_at: datetime


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItemRead]
    total_quantity: int
    total_price: Decimal


class DiscountQuoteRequest(SQLModel):
    code: str

    @field_validator("code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("code cannot be empty")
        return v


class DiscountQuoteRead(SQLModel):
    """
    Quote only: nothing is persisted when a code is evaluated.
    """

    code: str
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal

# storefront/services/discount_service.py
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlmodel import Session

from storefront.core.errors import NotFoundError, ValidationError
from storefront.models.discount import Discount
from storefront.repositories.discount_repo import DiscountRepository
from storefront.schemas.cart import DiscountQuoteRead

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value: Decimal) -> Decimal:
    """Quantize to cents, half-up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class DiscountEvaluator:
    """
    Validates discount codes and computes adjusted totals.

    Quote-only: evaluating a code never writes anything. The checkout
    service is the only caller that turns a quote into order amounts.
    """

    def __init__(self, repo: DiscountRepository):
        self.repo = repo

    @staticmethod
    def _aware(dt: datetime) -> datetime:
        # SQLite hands datetimes back without tzinfo; stored values are UTC.
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    @staticmethod
    def apply(discount: Discount, subtotal: Decimal) -> Decimal:
        """
        Adjusted total for `subtotal`:
          - fixed      -> subtotal - amount, floored at 0
          - percentage -> subtotal * (1 - amount/100), floored at 0
        """
        amount = Decimal(discount.amount)
        if discount.discount_type == "fixed":
            adjusted = subtotal - amount
        elif discount.discount_type == "percentage":
            adjusted = subtotal * (Decimal(1) - amount / HUNDRED)
        else:
            raise ValidationError(
                "Discount code is misconfigured",
                details={"code": discount.code},
            )
        return to_money(max(adjusted, ZERO))

    def get_valid_discount(
        self,
        session: Session,
        code: str,
        now: datetime | None = None,
    ) -> Discount:
        """
        Look up a code and ensure it is active and unexpired.

        Raises:
            NotFoundError: unknown code.
            ValidationError: inactive or expired code.
        """
        discount = self.repo.get_by_code(session, code)
        if discount is None:
            raise NotFoundError(
                "Discount code not found",
                details={"code": code},
            )

        now = now or datetime.now(timezone.utc)
        if not discount.is_active or self._aware(discount.expires_at) <= now:
            raise ValidationError(
                "Discount code is inactive or expired",
                details={"code": code},
            )
        return discount

    def evaluate(
        self,
        session: Session,
        code: str,
        subtotal: Decimal,
        now: datetime | None = None,
    ) -> DiscountQuoteRead:
        discount = self.get_valid_discount(session, code, now)
        subtotal = to_money(subtotal)
        total = self.apply(discount, subtotal)
        return DiscountQuoteRead(
            code=discount.code,
            subtotal=subtotal,
            discount_amount=subtotal - total,
            total=total,
        )

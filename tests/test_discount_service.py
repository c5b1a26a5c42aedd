"""Tests for discount code validation and quote maths."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.core.errors import NotFoundError, ValidationError
from storefront.models.discount import Discount
from storefront.services.discount_service import DiscountEvaluator


class TestApply:
    def _discount(self, discount_type, amount):
        return Discount(
            code="X",
            discount_type=discount_type,
            amount=Decimal(amount),
            expires_at=datetime.now(timezone.utc) + timedelta(days=1),
        )

    def test_percentage(self):
        total = DiscountEvaluator.apply(self._discount("percentage", "10"), Decimal("100"))
        assert total == Decimal("90.00")

    def test_percentage_rounds_to_cents(self):
        total = DiscountEvaluator.apply(self._discount("percentage", "15"), Decimal("19.99"))
        assert total == Decimal("16.99")

    def test_fixed(self):
        total = DiscountEvaluator.apply(self._discount("fixed", "5"), Decimal("20.00"))
        assert total == Decimal("15.00")

    def test_fixed_is_floored_at_zero(self):
        total = DiscountEvaluator.apply(self._discount("fixed", "50"), Decimal("20.00"))
        assert total == Decimal("0.00")

    def test_percentage_over_hundred_is_floored_at_zero(self):
        total = DiscountEvaluator.apply(self._discount("percentage", "150"), Decimal("20.00"))
        assert total == Decimal("0.00")

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            DiscountEvaluator.apply(self._discount("bogo", "1"), Decimal("20.00"))


class TestEvaluate:
    def test_save10_on_100(self, session, discounts, make_discount):
        make_discount(code="SAVE10", discount_type="percentage", amount="10")

        quote = discounts.evaluate(session, "SAVE10", Decimal("100"))

        assert quote.code == "SAVE10"
        assert quote.subtotal == Decimal("100.00")
        assert quote.total == Decimal("90.00")
        assert quote.discount_amount == Decimal("10.00")

    def test_unknown_code(self, session, discounts):
        with pytest.raises(NotFoundError) as exc_info:
            discounts.evaluate(session, "NOPE", Decimal("100"))
        assert exc_info.value.details == {"code": "NOPE"}

    def test_inactive_code(self, session, discounts, make_discount):
        make_discount(code="OFF", is_active=False)

        with pytest.raises(ValidationError):
            discounts.evaluate(session, "OFF", Decimal("100"))

    def test_expired_code(self, session, discounts, make_discount):
        make_discount(code="OLD", expires_in=timedelta(days=-1))

        with pytest.raises(ValidationError):
            discounts.evaluate(session, "OLD", Decimal("100"))

    def test_expiry_is_checked_against_given_now(self, session, discounts, make_discount):
        make_discount(code="SOON", expires_in=timedelta(hours=1))
        later = datetime.now(timezone.utc) + timedelta(hours=2)

        with pytest.raises(ValidationError):
            discounts.evaluate(session, "SOON", Decimal("100"), now=later)

    def test_evaluate_does_not_write(self, session, discounts, make_discount):
        discount = make_discount(code="SAVE10")

        discounts.evaluate(session, "SAVE10", Decimal("100"))

        assert not session.dirty
        assert not session.new
        session.refresh(discount)
        assert discount.is_active is True

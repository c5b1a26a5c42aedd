# storefront/services/checkout_service.py
import logging
import uuid
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from storefront.core.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from storefront.models.order import Order, OrderItem
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import (
    ADDRESS_FIELDS,
    PAYMENT_METHODS,
    CheckoutItemIn,
    CheckoutRequest,
    CheckoutResponse,
    ShippingAddressIn,
)
from storefront.services.discount_service import DiscountEvaluator, to_money
from storefront.services.order_service import build_order_with_items

logger = logging.getLogger(__name__)


class PricedLine(SQLModel):
    """A line that passed validation, priced from the live product."""

    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: Decimal


class CheckoutService:
    """
    Turns a cart (or an explicit item list) into a committed order.

    Two phases:

      1. Validation, read-only. Fails fast, in this order:
           lines present -> shipping address -> payment method
           -> per line: product exists, active, enough stock, price unchanged
           -> discount code (if any)
      2. Mutation, one transaction owned by this service:
           conditional stock decrement per line (in supplied order)
           -> order + items with frozen prices -> delete cart -> commit

    Any failure in phase 2 rolls the whole transaction back, so stock is
    never decremented without an order and an order never exists without
    its decrements. The cart is only removed by the same commit that
    creates the order.
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        cart_repo: CartRepository,
        order_repo: OrderRepository,
        discounts: DiscountEvaluator,
        enforce_price_check: bool = True,
    ):
        self.product_repo = product_repo
        self.cart_repo = cart_repo
        self.order_repo = order_repo
        self.discounts = discounts
        self.enforce_price_check = enforce_price_check

    # -------- Public entry point --------

    def checkout(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CheckoutRequest,
    ) -> CheckoutResponse:
        from_cart = payload.items is None

        lines = self._collect_lines(session, user_id, payload)
        address = self._validate_address(payload.shipping_address)
        payment_method = self._validate_payment_method(payload.payment_method)
        priced = self._validate_lines(session, lines)

        total = to_money(sum((ln.quantity * ln.unit_price for ln in priced), Decimal("0")))
        discount_code, discount_amount = self._resolve_discount(
            session, payload.discount_code, total
        )

        order, items = self._place_order(
            session,
            user_id=user_id,
            priced=priced,
            address=address,
            payment_method=payment_method,
            total=total,
            discount_code=discount_code,
            discount_amount=discount_amount,
            clear_cart=from_cart,
        )

        logger.info(
            "Order %s placed by user %s: %d line(s), total %s, due %s",
            order.id,
            user_id,
            len(items),
            order.total_amount,
            order.amount_due,
        )

        return CheckoutResponse(
            message="Order placed successfully",
            order_number=order.id,
            order=build_order_with_items(order, items),
        )

    # -------- Phase 1: validation --------

    def _collect_lines(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CheckoutRequest,
    ) -> list[CheckoutItemIn]:
        """
        Explicit items win over the cart. Cart lines carry their
        snapshot price as the expected price.
        """
        if payload.items is not None:
            lines = list(payload.items)
        else:
            lines = [
                CheckoutItemIn(
                    product_id=ci.product_id,
                    quantity=ci.quantity,
                    expected_price=ci.snapshot_price,
                )
                for ci in self.cart_repo.list_for_user(session, user_id)
            ]

        if not lines:
            raise ValidationError("Cart is empty")

        for line in lines:
            if line.quantity < 1:
                raise ValidationError(
                    "Quantity must be at least 1",
                    details={"product_id": str(line.product_id), "quantity": line.quantity},
                )
        return lines

    def _validate_address(self, address: ShippingAddressIn | None) -> dict[str, str]:
        raw = address.model_dump() if address is not None else {}
        cleaned = {name: (raw.get(name) or "").strip() for name in ADDRESS_FIELDS}
        missing = [name for name, value in cleaned.items() if not value]
        if missing:
            raise ValidationError(
                "Shipping address is incomplete",
                details={"missing_fields": missing},
            )
        return cleaned

    def _validate_payment_method(self, payment_method: str | None) -> str:
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                "Invalid payment method",
                details={"allowed": list(PAYMENT_METHODS)},
            )
        return payment_method

    def _validate_lines(
        self,
        session: Session,
        lines: list[CheckoutItemIn],
    ) -> list[PricedLine]:
        """
        Check every line against the live product state, in order.

        Quantities for a product listed more than once are summed before
        comparing with stock.
        """
        priced: list[PricedLine] = []
        requested: dict[uuid.UUID, int] = {}

        for line in lines:
            product = self.product_repo.get_fresh(session, line.product_id)
            if product is None:
                raise NotFoundError(
                    f"Product not found for ID: {line.product_id}",
                    details={"product_id": str(line.product_id)},
                )

            if not product.is_active:
                raise ConflictError(
                    f"{product.name} is no longer available",
                    details={"product_id": str(product.id)},
                )

            wanted = requested.get(product.id, 0) + line.quantity
            if product.stock < wanted:
                raise ConflictError(
                    f"Not enough stock for {product.name}",
                    details={
                        "product_id": str(product.id),
                        "product_name": product.name,
                        "available": product.stock,
                        "requested": wanted,
                    },
                )
            requested[product.id] = wanted

            if (
                self.enforce_price_check
                and line.expected_price is not None
                and Decimal(line.expected_price) != Decimal(product.price)
            ):
                raise ConflictError(
                    f"Price has changed for {product.name}. Please update your cart.",
                    details={
                        "product_id": str(product.id),
                        "expected_price": str(line.expected_price),
                        "current_price": str(product.price),
                    },
                )

            priced.append(
                PricedLine(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=line.quantity,
                    unit_price=product.price,
                )
            )

        return priced

    def _resolve_discount(
        self,
        session: Session,
        code: str | None,
        total: Decimal,
    ) -> tuple[str | None, Decimal]:
        if code is None or not code.strip():
            return None, Decimal("0.00")
        quote = self.discounts.evaluate(session, code.strip(), total)
        return quote.code, quote.discount_amount

    # -------- Phase 2: mutation --------

    def _place_order(
        self,
        session: Session,
        *,
        user_id: uuid.UUID,
        priced: list[PricedLine],
        address: dict[str, str],
        payment_method: str,
        total: Decimal,
        discount_code: str | None,
        discount_amount: Decimal,
        clear_cart: bool,
    ) -> tuple[Order, list[OrderItem]]:
        try:
            order = Order(
                user_id=user_id,
                total_amount=total,
                discount_code=discount_code,
                discount_amount=discount_amount,
                amount_due=total - discount_amount,
                payment_method=payment_method,
                payment_status="pending",
                status="pending",
                **address,
            )

            items: list[OrderItem] = []
            for position, line in enumerate(priced):
                taken = self.product_repo.decrement_stock_if_available(
                    session, line.product_id, line.quantity
                )
                if not taken:
                    # Another checkout got there between validation and now.
                    available = self.product_repo.get_current_stock(session, line.product_id)
                    raise ConflictError(
                        f"Not enough stock for {line.product_name}",
                        details={
                            "product_id": str(line.product_id),
                            "product_name": line.product_name,
                            "available": available or 0,
                            "requested": line.quantity,
                        },
                    )

                items.append(
                    OrderItem(
                        order_id=order.id,
                        product_id=line.product_id,
                        product_name=line.product_name,
                        quantity=line.quantity,
                        price_at_order=line.unit_price,
                        line_position=position,
                    )
                )

            self.order_repo.create_order(session, order)
            self.order_repo.create_items(session, items)

            if clear_cart:
                self.cart_repo.clear_for_user(session, user_id)

            session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Checkout for user %s failed while persisting", user_id)
            self._rollback(session, user_id)
            raise PersistenceError() from exc
        except Exception:
            self._rollback(session, user_id)
            raise

        return order, items

    def _rollback(self, session: Session, user_id: uuid.UUID) -> None:
        try:
            session.rollback()
        except SQLAlchemyError as exc:
            logger.critical(
                "LEDGER INTEGRITY RISK: rollback failed during checkout for user %s; "
                "stock decrements may have been applied without an order",
                user_id,
                exc_info=True,
            )
            raise PersistenceError() from exc

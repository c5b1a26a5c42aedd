# storefront/services/cart_service.py
import uuid
from decimal import Decimal

from sqlmodel import Session

from storefront.core.errors import ConflictError, NotFoundError, ValidationError
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartSummary,
    DiscountQuoteRead,
)
from storefront.services.discount_service import DiscountEvaluator


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - upsert the user's cart on first add
      - validate product existence and active flag
      - enforce quantity <= stock at add time (checkout re-checks)
      - snapshot_price from Product.price, refreshed on quantity update
      - compute line totals and cart totals
      - quote discount codes against the cart subtotal
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        discounts: DiscountEvaluator,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.discounts = discounts

    # ---- internal helpers ----

    def _get_valid_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError(
                "Product not found",
                details={"product_id": str(product_id)},
            )
        if not product.is_active:
            raise ConflictError(
                f"{product.name} is no longer available",
                details={"product_id": str(product_id)},
            )
        return product

    def _ensure_stock(self, product: Product, quantity: int) -> None:
        if quantity > product.stock:
            raise ConflictError(
                f"Not enough stock for {product.name}",
                details={
                    "product_id": str(product.id),
                    "available": product.stock,
                    "requested": quantity,
                },
            )

    # ---- public operations ----

    def get_cart_summary(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Return full cart summary:
          - list of CartItemRead (with line_total)
          - total_quantity
          - total_price
        """
        items = self.cart_repo.list_for_user(session, user_id)

        item_reads: list[CartItemRead] = []
        total_qty = 0
        total_price = Decimal("0.00")

        for it in items:
            line_total = it.quantity * it.snapshot_price
            total_qty += it.quantity
            total_price += line_total

            item_reads.append(
                CartItemRead(
                    id=it.id,
                    product_id=it.product_id,
                    quantity=it.quantity,
                    snapshot_price=it.snapshot_price,
                    line_total=line_total,
                    created_at=it.created_at,
                )
            )

        return CartSummary(
            items=item_reads,
            total_quantity=total_qty,
            total_price=total_price,
        )

    def add_to_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the user's cart, creating the cart if needed.

        Rules:
          - product must exist and be active
          - quantity + existing_quantity <= stock
          - snapshot_price is taken from current product.price for new lines
        """
        product = self._get_valid_product(session, payload.product_id)
        self._ensure_stock(product, payload.quantity)

        cart = self.cart_repo.get_or_create_for_user(session, user_id)
        existing = self.cart_repo.get_item(session, cart.id, payload.product_id)

        if existing:
            new_qty = existing.quantity + payload.quantity
            self._ensure_stock(product, new_qty)
            existing.quantity = new_qty
            self.cart_repo.update_item(session, existing)
        else:
            item = CartItem(
                cart_id=cart.id,
                product_id=payload.product_id,
                quantity=payload.quantity,
                snapshot_price=product.price,
                position=self.cart_repo.next_position(session, cart.id),
            )
            self.cart_repo.add_item(session, item)

        return self.get_cart_summary(session, user_id)

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Set the quantity of a line and re-snapshot its price.

        This is how a buyer refreshes a line after a "price changed"
        checkout rejection.
        """
        product = self._get_valid_product(session, product_id)
        cart = self.cart_repo.get_for_user(session, user_id)
        item = self.cart_repo.get_item(session, cart.id, product_id) if cart else None

        if not item:
            raise NotFoundError(
                "Item not in cart",
                details={"product_id": str(product_id)},
            )

        self._ensure_stock(product, payload.quantity)

        item.quantity = payload.quantity
        item.snapshot_price = product.price
        self.cart_repo.update_item(session, item)

        return self.get_cart_summary(session, user_id)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartSummary:
        """
        Remove a product from the cart (if present),
        and return updated summary.
        """
        cart = self.cart_repo.get_for_user(session, user_id)
        item = self.cart_repo.get_item(session, cart.id, product_id) if cart else None
        if not item:
            raise NotFoundError(
                "Item not found in cart",
                details={"product_id": str(product_id)},
            )

        self.cart_repo.delete_item(session, item)
        return self.get_cart_summary(session, user_id)

    def clear_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Clear all items from the cart and return an empty summary.
        """
        self.cart_repo.clear_for_user(session, user_id)
        session.commit()
        return CartSummary(items=[], total_quantity=0, total_price=Decimal("0.00"))

    def quote_discount(
        self,
        session: Session,
        user_id: uuid.UUID,
        code: str,
    ) -> DiscountQuoteRead:
        """
        Price the current cart with a discount code. Nothing is saved;
        the code has to be sent again with the checkout request.
        """
        summary = self.get_cart_summary(session, user_id)
        if not summary.items:
            raise ValidationError("Cart is empty")
        return self.discounts.evaluate(session, code, summary.total_price)

"""Tests for the cart store: upsert, snapshots, discount quotes."""

import uuid
from decimal import Decimal

import pytest
from sqlmodel import Session, select

from storefront.core.errors import ConflictError, NotFoundError, ValidationError
from storefront.models.cart import Cart
from storefront.models.product import Product
from storefront.schemas.cart import CartItemCreate, CartItemUpdate


class TestAddToCart:
    def test_first_add_creates_cart(self, session, cart_service, make_user, make_product):
        user = make_user()
        product = make_product(price="7.25")

        summary = cart_service.add_to_cart(
            session, user.id, CartItemCreate(product_id=product.id, quantity=2)
        )

        assert summary.total_quantity == 2
        assert summary.total_price == Decimal("14.50")
        carts = session.exec(select(Cart).where(Cart.user_id == user.id)).all()
        assert len(carts) == 1

    def test_second_add_reuses_cart_and_merges_line(
        self, session, cart_service, make_user, make_product, add_to_cart
    ):
        user = make_user()
        product = make_product(stock=10)
        add_to_cart(user, product, 2)

        summary = add_to_cart(user, product, 3)

        assert len(summary.items) == 1
        assert summary.items[0].quantity == 5
        assert len(session.exec(select(Cart).where(Cart.user_id == user.id)).all()) == 1

    def test_lines_keep_insertion_order(
        self, session, cart_service, make_user, make_product, add_to_cart
    ):
        user = make_user()
        products = [make_product(name=f"P{i}") for i in range(3)]
        for p in reversed(products):
            add_to_cart(user, p, 1)

        summary = cart_service.get_cart_summary(session, user.id)

        assert [i.product_id for i in summary.items] == [p.id for p in reversed(products)]

    def test_unknown_product(self, session, cart_service, make_user):
        user = make_user()
        with pytest.raises(NotFoundError):
            cart_service.add_to_cart(
                session, user.id, CartItemCreate(product_id=uuid.uuid4(), quantity=1)
            )

    def test_inactive_product(self, session, cart_service, make_user, make_product):
        user = make_user()
        product = make_product(is_active=False)
        with pytest.raises(ConflictError):
            cart_service.add_to_cart(
                session, user.id, CartItemCreate(product_id=product.id, quantity=1)
            )

    def test_more_than_stock(self, session, make_user, make_product, add_to_cart):
        user = make_user()
        product = make_product(stock=2)
        add_to_cart(user, product, 2)
        with pytest.raises(ConflictError):
            add_to_cart(user, product, 1)


class TestUpdateQuantity:
    def test_refreshes_snapshot_price(
        self, engine, session, cart_service, make_user, make_product, add_to_cart
    ):
        user = make_user()
        product = make_product(price="10.00", stock=5)
        add_to_cart(user, product, 1)
        with Session(engine) as other:
            row = other.get(Product, product.id)
            row.price = Decimal("11.00")
            other.add(row)
            other.commit()
        session.expire_all()

        summary = cart_service.update_quantity(
            session, user.id, product.id, CartItemUpdate(quantity=2)
        )

        assert summary.items[0].snapshot_price == Decimal("11.00")
        assert summary.total_price == Decimal("22.00")

    def test_item_not_in_cart(self, session, cart_service, make_user, make_product):
        user = make_user()
        product = make_product()
        with pytest.raises(NotFoundError):
            cart_service.update_quantity(
                session, user.id, product.id, CartItemUpdate(quantity=1)
            )


class TestRemoveAndClear:
    def test_remove_item(self, session, cart_service, make_user, make_product, add_to_cart):
        user = make_user()
        keep = make_product(name="Keep")
        drop = make_product(name="Drop")
        add_to_cart(user, keep, 1)
        add_to_cart(user, drop, 1)

        summary = cart_service.remove_item(session, user.id, drop.id)

        assert [i.product_id for i in summary.items] == [keep.id]

    def test_clear_cart(self, session, cart_service, make_user, make_product, add_to_cart):
        user = make_user()
        add_to_cart(user, make_product(), 1)

        summary = cart_service.clear_cart(session, user.id)

        assert summary.items == []
        assert cart_service.get_cart_summary(session, user.id).items == []


class TestQuoteDiscount:
    def test_quote_does_not_change_cart(
        self, session, cart_service, make_user, make_product, make_discount, add_to_cart
    ):
        user = make_user()
        add_to_cart(user, make_product(price="50.00", stock=5), 2)
        make_discount(code="SAVE10", discount_type="percentage", amount="10")

        quote = cart_service.quote_discount(session, user.id, "SAVE10")

        assert quote.total == Decimal("90.00")
        assert cart_service.get_cart_summary(session, user.id).total_price == Decimal("100.00")

    def test_quote_on_empty_cart(self, session, cart_service, make_user, make_discount):
        user = make_user()
        make_discount(code="SAVE10")
        with pytest.raises(ValidationError):
            cart_service.quote_discount(session, user.id, "SAVE10")

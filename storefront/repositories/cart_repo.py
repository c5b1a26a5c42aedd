# storefront/repositories/cart_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.cart import Cart, CartItem


class CartRepository:

    # Cart header
    def get_for_user(self, session: Session, user_id: uuid.UUID) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def get_or_create_for_user(self, session: Session, user_id: uuid.UUID) -> Cart:
        """
        Upsert-on-first-add: return the user's cart, creating it if needed.
        Flushes but does not commit.
        """
        cart = self.get_for_user(session, user_id)
        if cart is None:
            cart = Cart(user_id=user_id)
            session.add(cart)
            session.flush()
        return cart

    # Lines
    def list_items(self, session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.position)
        )
        return session.exec(stmt).all()

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        cart = self.get_for_user(session, user_id)
        if cart is None:
            return []
        return self.list_items(session, cart.id)

    def get_item(
        self, session: Session, cart_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def next_position(self, session: Session, cart_id: uuid.UUID) -> int:
        stmt = select(func.max(CartItem.position)).where(CartItem.cart_id == cart_id)
        current = session.exec(stmt).first()
        return 0 if current is None else current + 1

    # CRUD
    def add_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_for_user(self, session: Session, user_id: uuid.UUID) -> None:
        """
        Delete the user's cart and all its lines.

        No commit here: checkout calls this inside its own transaction so
        the cart only disappears together with the order commit.
        """
        cart = self.get_for_user(session, user_id)
        if cart is None:
            return
        for row in self.list_items(session, cart.id):
            session.delete(row)
        session.flush()
        session.delete(cart)
        session.flush()

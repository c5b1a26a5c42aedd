# storefront/repositories/product_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.models.product import Product


class ProductRepository:
    """
    Data access layer for the product ledger.

    - Pure DB operations, no FastAPI, no business logic.
    - Stock is never written with read-modify-write from Python.
      The only mutation is `decrement_stock_if_available`, which the
      database evaluates as a single conditional UPDATE.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_fresh(self, session: Session, product_id: uuid.UUID) -> Product | None:
        """
        Load a product, overwriting any copy already in the session so
        checkout validates against current stock and price.
        """
        stmt = (
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        return session.exec(stmt).first()

    def get_current_stock(self, session: Session, product_id: uuid.UUID) -> int | None:
        """
        Read stock straight from the database (column select, so the
        session identity map cannot serve a stale value).
        """
        stmt = select(Product.stock).where(Product.id == product_id)
        return session.exec(stmt).first()

    def decrement_stock_if_available(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
    ) -> bool:
        """
        Atomically take `quantity` units if and only if enough are left.

        Emits:
            UPDATE products SET stock = stock - :q
            WHERE id = :id AND stock >= :q AND is_active

        Runs on the session's connection, so it joins the caller's
        transaction and is undone by `session.rollback()`. Does not commit.

        Returns:
            True if the row was decremented, False if stock was short
            (or the product vanished / was deactivated) at write time.
        """
        stmt = (
            update(Product)
            .where(
                Product.id == product_id,
                Product.stock >= quantity,
                Product.is_active == True,  # noqa: E712
            )
            .values(stock=Product.stock - quantity)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

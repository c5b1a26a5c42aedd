# storefront/services/order_service.py
import uuid

from sqlmodel import Session

from storefront.core.errors import NotFoundError
from storefront.models.order import Order, OrderItem
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.order import (
    OrderRead,
    OrderWithItemsRead,
    OrderItemRead,
)


def build_order_with_items(order: Order, items: list[OrderItem]) -> OrderWithItemsRead:
    """
    Compose OrderWithItemsRead from ORM rows.

    Line totals come from the frozen price_at_order, never from the
    live product price.
    """
    item_dtos = [
        OrderItemRead(
            id=it.id,
            order_id=it.order_id,
            product_id=it.product_id,
            product_name=it.product_name,
            quantity=it.quantity,
            price_at_order=it.price_at_order,
            line_total=it.quantity * it.price_at_order,
        )
        for it in items
    ]

    return OrderWithItemsRead(
        id=order.id,
        user_id=order.user_id,
        total_amount=order.total_amount,
        discount_code=order.discount_code,
        discount_amount=order.discount_amount,
        amount_due=order.amount_due,
        street=order.street,
        city=order.city,
        state=order.state,
        zip_code=order.zip_code,
        country=order.country,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        status=order.status,
        created_at=order.created_at,
        items=item_dtos,
    )


class OrderService:
    """
    Read side of the order ledger for the order owner.
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user (without items), newest first.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return [OrderRead.model_validate(o) for o in orders]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - NotFoundError if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise NotFoundError(
                "Order not found",
                details={"order_id": str(order_id)},
            )

        items = self.order_repo.list_items_for_order(session, order.id)
        return build_order_with_items(order, items)

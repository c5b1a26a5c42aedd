# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_user
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.discount_repo import DiscountRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    OrderRead,
    OrderWithItemsRead,
)
from storefront.services.checkout_service import CheckoutService
from storefront.services.discount_service import DiscountEvaluator
from storefront.services.order_service import OrderService

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
checkout_service = CheckoutService(
    product_repo,
    cart_repo,
    order_repo,
    DiscountEvaluator(DiscountRepository()),
    enforce_price_check=settings.ENFORCE_PRICE_CHECK,
)
order_service = OrderService(order_repo)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Place an order from the current user's cart, or from `items` if given.

    Sync handler: runs in the worker threadpool, so a client disconnect
    does not interrupt a checkout that has started writing.
    """
    return checkout_service.checkout(session, current_user.id, payload)


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders (without items).
    """
    return order_service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return order_service.get_user_order(session, current_user.id, order_id)

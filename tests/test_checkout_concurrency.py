"""Concurrent checkouts against the same product must never oversell."""

import threading

from sqlmodel import Session, select

from storefront.core.errors import ConflictError
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.schemas.order import CheckoutRequest, CheckoutResponse


def _run_concurrently(engine, checkout_service, user_ids, address):
    barrier = threading.Barrier(len(user_ids))
    results = []
    lock = threading.Lock()

    def worker(user_id):
        payload = CheckoutRequest.model_validate(
            {"shipping_address": address, "payment_method": "card"}
        )
        with Session(engine) as session:
            barrier.wait()
            try:
                outcome = checkout_service.checkout(session, user_id, payload)
            except Exception as exc:  # collected and asserted on below
                outcome = exc
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(uid,)) for uid in user_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return results


class TestConcurrentCheckout:
    def test_last_unit_goes_to_exactly_one_buyer(
        self, engine, checkout_service, make_user, make_product, add_to_cart, address
    ):
        product = make_product(stock=1)
        buyers = [make_user(), make_user()]
        for buyer in buyers:
            add_to_cart(buyer, product, 1)

        results = _run_concurrently(
            engine, checkout_service, [b.id for b in buyers], address
        )

        successes = [r for r in results if isinstance(r, CheckoutResponse)]
        conflicts = [r for r in results if isinstance(r, ConflictError)]
        assert len(successes) == 1
        assert len(conflicts) == 1
        assert conflicts[0].details["available"] == 0

        with Session(engine) as fresh:
            assert fresh.get(Product, product.id).stock == 0
            assert len(fresh.exec(select(Order)).all()) == 1

    def test_final_stock_matches_successful_orders(
        self, engine, checkout_service, make_user, make_product, add_to_cart, address
    ):
        initial = 3
        product = make_product(stock=initial)
        buyers = [make_user() for _ in range(6)]
        for buyer in buyers:
            add_to_cart(buyer, product, 1)

        results = _run_concurrently(
            engine, checkout_service, [b.id for b in buyers], address
        )

        successes = [r for r in results if isinstance(r, CheckoutResponse)]
        assert len(results) == 6
        assert all(isinstance(r, (CheckoutResponse, ConflictError)) for r in results)
        assert len(successes) == initial

        with Session(engine) as fresh:
            stock = fresh.get(Product, product.id).stock
            assert stock == initial - sum(
                item.quantity for r in successes for item in r.order.items
            )
            assert stock == 0

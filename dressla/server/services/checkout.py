"""
Checkout: turn a user's cart into an order and register it with BOG.

The order is stored as PENDING before the gateway is called so that BOG can
reference it by id. When the gateway call fails the order is removed again.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

from fastapi import status

from dressla.core.database.entities.carts import CartItem
from dressla.core.database.entities.catalog import Product
from dressla.core.database.entities.orders import Order, OrderItem
from dressla.core.database.entities.users import User
from dressla.core.database.repositories import SqlRepoBundle
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import OrderStatus, PaymentMethod
from dressla.core.models.io.orders import CheckoutRequest, CheckoutResult
from dressla.core.monitoring import log_payment_event
from dressla.marketplace.discounts import discounted_price, process_expired_discount
from dressla.marketplace.payments import SellerShare, build_basket, calculate_split_payments
from dressla.server.core.config import settings
from dressla.server.errors import MarketplaceError

from .payment_gateway import BogPaymentGateway, PaymentGatewayError
from .seller_transactions import record_seller_transactions

logger = get_logger(__name__)

BLOCKED_ACCOUNT_MESSAGE = "Your account requires identity verification. Please upload a document."

PAYMENT_METHOD_LABELS = {
    PaymentMethod.card: "BOG Card Payment",
    PaymentMethod.google_pay: "Google Pay",
}


def _order_item(item: CartItem, product: Optional[Product]) -> OrderItem:
    discount = product.discount if product is not None else None
    return OrderItem(
        product_id=item.product_id,
        product_name=item.product_name,
        image=item.image,
        size=item.size,
        price=round(discounted_price(item.price, discount), 2),
        quantity=item.quantity,
        is_rental=item.is_rental,
        rental_start_date=item.rental_start_date,
        rental_end_date=item.rental_end_date,
        rental_days=item.rental_days,
        deposit=item.deposit,
    )


async def _split_instructions(repos: SqlRepoBundle, items: List[OrderItem], total: float) -> Optional[List[dict]]:
    """Per-seller payout instructions, or None when splitting is off or nobody can be paid."""
    if not settings.payment_gateway.enable_split:
        return None
    seller_by_product = await repos.products.seller_map([item.product_id for item in items if item.product_id])
    amounts: Dict[str, float] = defaultdict(float)
    for item in items:
        seller_id = seller_by_product.get(item.product_id) if item.product_id else None
        if seller_id:
            amounts[seller_id] += item.price * item.quantity
    sellers = {user.id: user for user in await repos.users.get_many(list(amounts))}
    shares = [
        SellerShare(seller_id=seller_id, iban=getattr(sellers.get(seller_id), "iban", None), amount=amount)
        for seller_id, amount in amounts.items()
    ]
    split = calculate_split_payments(shares, total, settings.marketplace.platform_commission_percent)
    return split or None


async def create_order(
    repos: SqlRepoBundle,
    user: User,
    request: CheckoutRequest,
    gateway: BogPaymentGateway,
) -> CheckoutResult:
    """Check out ``user``'s cart.

    Raises:
        MarketplaceError: 403 blocked account, 400 empty cart, unknown delivery
            city or non-positive total, 502 payment gateway failure.
    """
    if user.blocked:
        raise MarketplaceError(status.HTTP_403_FORBIDDEN, BLOCKED_ACCOUNT_MESSAGE, extra={"blocked": True})

    cart = await repos.carts.get_for_user(user.id)
    cart_items = await repos.carts.items(cart.id) if cart is not None else []  # type: ignore[arg-type]
    if cart is None or not cart_items:
        raise MarketplaceError(status.HTTP_400_BAD_REQUEST, "Cart not found or empty")

    products = {product.id: product for product in await repos.products.get_many([i.product_id for i in cart_items])}
    for product in products.values():
        process_expired_discount(product)
    items = [_order_item(item, products.get(item.product_id)) for item in cart_items]

    total = sum(item.price * item.quantity for item in items)
    city_name: Optional[str] = None
    delivery_price = 0.0
    if request.delivery_city_id is not None:
        city = await repos.delivery_cities.get_by_id(request.delivery_city_id)
        if city is None or not city.is_active:
            raise MarketplaceError(status.HTTP_400_BAD_REQUEST, "Delivery city not available")
        delivery_price = city.price
        total += delivery_price
        city_name = city.name
    total = round(total, 2)
    if total <= 0:
        raise MarketplaceError(status.HTTP_400_BAD_REQUEST, f"Invalid total amount: {total}")

    try:
        basket = build_basket(items)
        if delivery_price > 0:
            basket.append({"quantity": 1, "unit_price": delivery_price, "product_id": "delivery"})
    except ValueError as e:
        raise MarketplaceError(status.HTTP_400_BAD_REQUEST, str(e)) from e

    address = request.address
    order = Order(
        user_id=user.id,
        customer_name=f"{address.first_name} {address.last_name}" if address else (user.name or "Customer"),
        phone=(address.phone if address and address.phone else user.phone) or "",
        email=address.email if address else user.email,
        address=address.address if address else None,
        city=city_name,
        delivery_city_id=request.delivery_city_id,
        payment_method=PAYMENT_METHOD_LABELS[request.payment_method],
        total=total,
        status=OrderStatus.PENDING,
    )
    await repos.orders.stage_with_items(order, items)
    await repos.session.commit()
    log_payment_event("order_created", order.id, total=total, payment_method=request.payment_method.value)

    try:
        split = await _split_instructions(repos, items, total)
        gateway_order = await gateway.create_order(
            external_order_id=str(order.id),
            total=total,
            basket=basket,
            google_pay_token=request.google_pay_token if request.payment_method == PaymentMethod.google_pay else None,
            split=split,
        )
    except (PaymentGatewayError, ValueError) as e:
        logger.error(f"Payment registration failed for order {order.id}, rolling back: {e}")
        await repos.orders.delete_with_items(order)
        await repos.session.commit()
        log_payment_event("order_rolled_back", order.id, reason=str(e))
        raise MarketplaceError(status.HTTP_502_BAD_GATEWAY, f"Payment gateway error: {e}") from e

    order.payment_id = gateway_order.get("id")
    repos.session.add(order)
    await repos.carts.clear(cart.id)  # type: ignore[arg-type]
    await repos.session.commit()

    if gateway_order.get("status") == "completed" and request.payment_method == PaymentMethod.google_pay:
        order.status = OrderStatus.PAID
        repos.session.add(order)
        await repos.session.commit()
        await record_seller_transactions(repos.session, order.id)  # type: ignore[arg-type]
        log_payment_event("order_paid", order.id, payment_id=order.payment_id)
        return CheckoutResult(order_id=order.id, payment_id=order.payment_id, status=OrderStatus.PAID)  # type: ignore[arg-type]

    return CheckoutResult(
        order_id=order.id,  # type: ignore[arg-type]
        payment_id=order.payment_id,
        redirect_url=gateway_order.get("redirect_url"),
        status=order.status,
    )

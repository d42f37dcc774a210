"""
API endpoints for Bank of Georgia payment notifications and status lookups.

BOG calls ``/payment-callback`` whenever an order changes state. The request
body is signed with the bank's private key; the signature in the
``Callback-Signature`` header is checked against the raw body before anything
else is read.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import ValidationError

from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import OrderStatus
from dressla.core.models.io.payments import CallbackResult, PaymentCallback
from dressla.core.monitoring import log_payment_event
from dressla.marketplace.payments import (
    PAYMENT_EVENTS,
    map_gateway_status,
    summarize_split,
    verify_callback_signature,
)
from dressla.server.core.config import settings
from dressla.server.services.deps import CurrentUserDep, PaymentGatewayDep, ReposDep
from dressla.server.services.payment_gateway import PaymentGatewayError
from dressla.server.services.seller_transactions import record_seller_transactions

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])

SIGNATURE_HEADER = "Callback-Signature"


@router.post(
    "/payment-callback",
    response_model=CallbackResult,
    summary="BOG Payment Callback",
    description="Receive a signed payment notification from Bank of Georgia and update the matching order.",
    responses={
        200: {"description": "Notification accepted"},
        400: {"description": "Missing signature header, malformed body or unsupported event"},
        401: {"description": "Signature verification failed"},
    },
)
async def payment_callback(request: Request, repos: ReposDep) -> CallbackResult:
    """
    Handle a BOG callback.

    - **order_payment**: the gateway status is mapped onto the order; moving
      to PAID books the seller transactions.
    - **split_payment**: the split outcome is logged only.

    Once the signature is valid the endpoint answers 200 even when no order
    matches, so the bank does not keep retrying.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    if not signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing Callback-Signature header")

    raw_body = await request.body()
    if not verify_callback_signature(signature, raw_body, settings.payment_gateway.public_key):
        logger.warning("Rejected BOG callback with an invalid signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    try:
        callback = PaymentCallback.model_validate_json(raw_body)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid callback body") from e
    if callback.event not in PAYMENT_EVENTS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported event: {callback.event}")

    body = callback.body
    if callback.event == "split_payment":
        summary = summarize_split(body.split.model_dump() if body.split else None)
        logger.info(f"BOG split payment update for {body.order_id}: {summary}")
        return CallbackResult(message="Split payment event logged", details=summary)

    gateway_status = body.order_status.key if body.order_status else body.status
    new_status = map_gateway_status(gateway_status)
    order = await repos.orders.get_by_payment_id(body.order_id)
    if order is None:
        logger.warning(f"BOG callback for unknown payment {body.order_id} (status={gateway_status})")
        return CallbackResult(success=False, message="Order not found", status=new_status.value)

    previous = order.status
    if previous != new_status:
        order.status = new_status
        await repos.orders.update(order)
    log_payment_event(
        "callback_received", order.id, gateway_status=gateway_status, previous=previous.value, status=new_status.value
    )
    if new_status == OrderStatus.PAID and previous != OrderStatus.PAID:
        await record_seller_transactions(repos.session, order.id)  # type: ignore[arg-type]

    return CallbackResult(message="Order status updated", order_id=order.id, status=new_status.value)


@router.get(
    "/payments/bog-status/{order_id}",
    summary="BOG Payment Status",
    description="Proxy the BOG receipt of a gateway order.",
    responses={
        200: {"description": "Receipt returned by BOG"},
        401: {"description": "BOG rejected the platform credentials"},
        404: {"description": "BOG does not know the order"},
        502: {"description": "BOG request failed"},
    },
)
async def bog_status(order_id: str, user: CurrentUserDep, gateway: PaymentGatewayDep) -> dict[str, Any]:
    try:
        return await gateway.get_receipt(order_id)
    except PaymentGatewayError as e:
        if e.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_404_NOT_FOUND):
            raise HTTPException(status_code=e.status_code, detail=str(e)) from e
        logger.error(f"BOG receipt lookup failed for {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

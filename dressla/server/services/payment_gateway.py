"""
Bank of Georgia (BOG) online payments client.

The API is protected by OAuth2 client credentials. :class:`BogTokenManager`
keeps one access token cached until shortly before it expires and retries a
request once with a fresh token when BOG answers 401.
"""

from __future__ import annotations

import asyncio
import time
from functools import lru_cache
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx

from dressla.core.logging_config import get_logger
from dressla.marketplace.payments import extract_redirect_url
from dressla.server.core.config import PaymentGatewayConfig, settings

logger = get_logger(__name__)

# Tokens are refreshed this many seconds before BOG says they expire.
TOKEN_EXPIRY_MARGIN = 60


class PaymentGatewayError(Exception):
    """A BOG call failed. ``status_code`` is the upstream HTTP status when there was one."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or fallback
    return fallback


def _json_object(response: httpx.Response, what: str) -> dict[str, Any]:
    """Decode a successful BOG response; anything but a JSON object is a gateway error."""
    try:
        body = response.json()
    except ValueError as e:
        raise PaymentGatewayError(f"Malformed {what} from BOG", status_code=502, payload=response.text) from e
    if not isinstance(body, dict):
        raise PaymentGatewayError(f"Malformed {what} from BOG", status_code=502, payload=response.text)
    return body


class _HttpMixin:
    config: PaymentGatewayConfig
    _client: Optional[httpx.AsyncClient]

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.request(method, url, **kwargs)
            async with httpx.AsyncClient(timeout=self.config.request_timeout) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"BOG request {method} {url} failed: {e}")
            raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e


class BogTokenManager(_HttpMixin):
    """Caches the client-credentials access token."""

    def __init__(self, config: PaymentGatewayConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config
        self._client = client
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    def _is_valid(self) -> bool:
        return self._token is not None and time.monotonic() < self._expires_at - TOKEN_EXPIRY_MARGIN

    async def get_token(self, force_refresh: bool = False) -> str:
        async with self._lock:
            if force_refresh:
                self.invalidate()
            if not self._is_valid():
                await self._fetch_token()
            if self._token is None:
                raise PaymentGatewayError("No BOG access token available", status_code=502)
            return self._token

    async def _fetch_token(self) -> None:
        if not self.config.client_id or not self.config.client_secret:
            raise PaymentGatewayError("BOG credentials are not configured", status_code=500)
        response = await self._send(
            "POST",
            self.config.token_url,
            data={"grant_type": "client_credentials"},
            auth=(self.config.client_id, self.config.client_secret),
        )
        if response.is_error:
            raise PaymentGatewayError(
                _error_message(response, "Failed to obtain BOG access token"),
                status_code=response.status_code,
                payload=response.text,
            )
        body = _json_object(response, "token response")
        token = body.get("access_token")
        if not isinstance(token, str) or not token:
            raise PaymentGatewayError("BOG token response has no access_token", status_code=502, payload=body)
        try:
            expires_in = float(body.get("expires_in") or 0)
        except (TypeError, ValueError) as e:
            raise PaymentGatewayError(
                "BOG token response has an invalid expires_in", status_code=502, payload=body
            ) from e
        self._token = token
        self._expires_at = time.monotonic() + expires_in
        logger.debug(f"Obtained BOG access token valid for {body.get('expires_in')}s")

    async def make_authenticated_request(
        self, request: Callable[[str], Awaitable[httpx.Response]]
    ) -> httpx.Response:
        """Run ``request`` with a bearer token, retrying once on 401 with a new token."""
        response = await request(await self.get_token())
        if response.status_code == 401:
            logger.info("BOG rejected the cached token, retrying with a fresh one")
            response = await request(await self.get_token(force_refresh=True))
        return response


class BogPaymentGateway(_HttpMixin):
    """Creates payment orders and reads receipts."""

    def __init__(
        self,
        config: PaymentGatewayConfig,
        token_manager: Optional[BogTokenManager] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._client = client
        self.token_manager = token_manager or BogTokenManager(config, client=client)

    @property
    def callback_url(self) -> str:
        return f"{self.config.site_url}{self.config.callback_path}"

    def build_order_request(
        self,
        external_order_id: str,
        total: float,
        basket: Sequence[dict],
        google_pay_token: Optional[str] = None,
        split: Optional[Sequence[dict]] = None,
    ) -> dict[str, Any]:
        site = self.config.site_url
        body: dict[str, Any] = {
            "callback_url": self.callback_url,
            "external_order_id": external_order_id,
            "purchase_units": {
                "currency": self.config.currency,
                "total_amount": total,
                "basket": list(basket),
            },
            "redirect_urls": {
                "success": f"{site}/order-confirmation?status=success&orderId={external_order_id}",
                "fail": f"{site}/payment-fail?orderId={external_order_id}",
            },
        }
        if google_pay_token:
            body["payment_method"] = ["google_pay"]
            body["config"] = {"google_pay": {"external": True, "google_pay_token": google_pay_token}}
        if split:
            body.setdefault("config", {})["split"] = {"split_payments": list(split)}
        return body

    async def create_order(
        self,
        external_order_id: str,
        total: float,
        basket: Sequence[dict],
        google_pay_token: Optional[str] = None,
        split: Optional[Sequence[dict]] = None,
    ) -> dict[str, Any]:
        """Register an order with BOG.

        Returns:
            ``{"id", "status", "redirect_url"}``. ``redirect_url`` is ``None`` when
            the payment already completed (Google Pay).

        Raises:
            PaymentGatewayError: BOG rejected the order or was unreachable.
        """
        body = self.build_order_request(external_order_id, total, basket, google_pay_token, split)
        url = f"{self.config.api_base_url}/ecommerce/orders"

        async def _post(token: str) -> httpx.Response:
            return await self._send(
                "POST",
                url,
                json=body,
                headers={"Authorization": f"Bearer {token}", "Accept-Language": "ka"},
            )

        response = await self.token_manager.make_authenticated_request(_post)
        if response.is_error:
            raise PaymentGatewayError(
                _error_message(response, "BOG API error"), status_code=response.status_code, payload=response.text
            )
        data = _json_object(response, "order response")
        gateway_id = data.get("id") or data.get("order_id")
        gateway_status = data.get("status")
        redirect_url: Optional[str] = None
        if gateway_status != "completed":
            try:
                redirect_url = extract_redirect_url(data, self.config.site_url)
            except ValueError as e:
                raise PaymentGatewayError(str(e), status_code=502, payload=data) from e
        logger.info(f"BOG order {gateway_id} created for order {external_order_id} (status={gateway_status})")
        return {"id": gateway_id, "status": gateway_status, "redirect_url": redirect_url}

    async def get_receipt(self, order_id: str) -> dict[str, Any]:
        """Payment details of a BOG order.

        Raises:
            PaymentGatewayError: carrying the upstream status (404 unknown order, 401 auth failure).
        """
        url = f"{self.config.api_base_url}/receipt/{order_id}"

        async def _get(token: str) -> httpx.Response:
            return await self._send("GET", url, headers={"Authorization": f"Bearer {token}"})

        response = await self.token_manager.make_authenticated_request(_get)
        if response.is_error:
            raise PaymentGatewayError(
                _error_message(response, "BOG API error"), status_code=response.status_code, payload=response.text
            )
        return _json_object(response, "receipt")


@lru_cache(maxsize=1)
def get_payment_gateway() -> BogPaymentGateway:
    """Process-wide gateway so the token cache is shared between requests."""
    return BogPaymentGateway(settings.payment_gateway)

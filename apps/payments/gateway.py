# apps/payments/gateway.py

"""
HTTP client for the Mercado Pago REST API.

Only the three calls the storefront needs are wrapped: creating a payment,
reading a payment back and creating a checkout preference.
"""

import uuid

import requests
import structlog
from django.conf import settings
from requests import RequestException

from apps.payments.exceptions import GatewayError

logger = structlog.get_logger(__name__)


class MercadoPagoGateway:
    """
    Thin wrapper around the Mercado Pago API.

    Every call raises ``GatewayError`` on transport failures and on non-2xx
    answers, carrying the gateway's own message when it sent one.
    """

    def __init__(
        self,
        access_token,
        base_url="https://api.mercadopago.com",
        timeout=5.0,
        session=None,
    ):
        if not access_token:
            raise GatewayError("Missing MERCADO_PAGO_ACCESS_TOKEN")
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, idempotency_key=None) -> dict:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    def _request(self, method, path, payload=None, idempotency_key=None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(idempotency_key),
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(
                "gateway_request_failed", method=method, path=path, error=str(e)
            )
            raise GatewayError(f"Gateway request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text[:800]}

        if 200 <= resp.status_code < 300:
            return data

        message = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("error")
        message = message or f"HTTP {resp.status_code}"
        logger.warning(
            "gateway_error_response",
            method=method,
            path=path,
            gateway_status=resp.status_code,
            message=message,
        )
        raise GatewayError(message, gateway_status=resp.status_code, payload=data)

    def create_payment(self, payload: dict, idempotency_key: str = None) -> dict:
        """Create a payment. Each call uses a fresh idempotency key unless given one."""
        return self._request(
            "POST",
            "/v1/payments",
            payload=payload,
            idempotency_key=idempotency_key or uuid.uuid4().hex,
        )

    def get_payment(self, payment_id) -> dict:
        return self._request("GET", f"/v1/payments/{payment_id}")

    def create_preference(self, payload: dict) -> dict:
        """Create a hosted checkout preference for an order."""
        return self._request("POST", "/checkout/preferences", payload=payload)


def get_gateway() -> MercadoPagoGateway:
    """Build the gateway client from settings."""
    return MercadoPagoGateway(
        access_token=settings.MERCADO_PAGO_ACCESS_TOKEN,
        base_url=settings.MERCADO_PAGO_BASE_URL,
        timeout=settings.MERCADO_PAGO_TIMEOUT,
    )

# apps/payments/services.py

"""
Payment flows between the storefront and Mercado Pago.

- ``PaymentProcessor`` charges an order from the checkout payment form.
- ``WebhookHandler`` applies the gateway's payment notifications.
- ``apply_gateway_payment`` is the single place where a payment read from
  the gateway changes an order; the webhook and the reconciliation job both
  go through it.
"""

import hashlib
import hmac
from dataclasses import asdict, dataclass, field
from datetime import timedelta

import structlog
from django.conf import settings
from django.db import transaction

from apps.core.utils import cents_to_reais, only_digits, quantize_cents
from apps.orders.enums import FAILURE_STATUSES, OrderStatus, PaymentStatus
from apps.orders.models import Order
from apps.payments.exceptions import (
    GatewayError,
    InvalidWebhookSignature,
    OrderNotFound,
    OrderNotPayable,
    PaymentValidationError,
)

logger = structlog.get_logger(__name__)

PLACEHOLDER_CPF = "00000000000"


def notification_url() -> str:
    return f"{settings.SITE_URL.rstrip('/')}/api/v1/webhooks/mercadopago/"


def summarize_gateway_payment(payment: dict) -> dict:
    """The part of a gateway payment kept on the order."""
    return {
        "payment_id": payment.get("id"),
        "payment_method": (payment.get("payment_method") or {}).get("type"),
        "payment_type": payment.get("payment_type_id"),
        "status": payment.get("status"),
        "status_detail": payment.get("status_detail"),
        "date_approved": payment.get("date_approved"),
        "transaction_amount": payment.get("transaction_amount"),
        "fee_details": payment.get("fee_details") or [],
    }


@dataclass
class PaymentResult:
    """Normalized answer to a payment submission."""

    id: object
    status: str
    status_detail: str = None
    payment_method_id: str = None
    external_reference: str = None
    transaction_amount: float = None
    point_of_interaction: dict = field(default_factory=dict)

    @classmethod
    def from_gateway(cls, payment: dict) -> "PaymentResult":
        interaction = payment.get("point_of_interaction") or {}
        transaction_data = interaction.get("transaction_data") or {}
        if transaction_data:
            # Only the PIX presentation data is forwarded to the browser
            interaction = {
                "type": interaction.get("type"),
                "transaction_data": {
                    "qr_code": transaction_data.get("qr_code"),
                    "qr_code_base64": transaction_data.get("qr_code_base64"),
                    "ticket_url": transaction_data.get("ticket_url"),
                },
            }
        return cls(
            id=payment.get("id"),
            status=payment.get("status"),
            status_detail=payment.get("status_detail"),
            payment_method_id=payment.get("payment_method_id"),
            external_reference=payment.get("external_reference"),
            transaction_amount=payment.get("transaction_amount"),
            point_of_interaction=interaction,
        )

    def to_dict(self) -> dict:
        return asdict(self)


class PaymentProcessor:
    """
    Creates gateway payments for orders from the checkout payment form.

    The gateway client is passed in; see ``apps.payments.gateway.get_gateway``.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def process(
        self, form_data, additional_data, preference_id, amount
    ) -> PaymentResult:
        if not preference_id or not amount:
            raise PaymentValidationError("Missing required fields")

        order = Order.objects.find_by_payment_reference(preference_id)
        if order is None:
            logger.warning(
                "payment_order_not_found", preference_id=str(preference_id)
            )
            raise OrderNotFound()

        if order.status == OrderStatus.CANCELLED or PaymentStatus.is_terminal(
            order.payment_status
        ):
            logger.warning(
                "payment_order_not_payable",
                order_id=str(order.id),
                status=order.status,
                payment_status=order.payment_status,
            )
            raise OrderNotPayable()

        form_data = form_data or {}
        if isinstance(form_data.get("formData"), dict):
            form_data = form_data["formData"]

        payment_method_id = form_data.get("payment_method_id")
        if not payment_method_id:
            raise PaymentValidationError("Missing payment method ID")

        payload = self.build_payment_request(
            order, form_data, str(preference_id), amount
        )

        log = logger.bind(order_id=str(order.id), preference_id=str(preference_id))
        log.info(
            "payment_submission_started",
            payment_method_id=payment_method_id,
            transaction_amount=payload["transaction_amount"],
            device_id=(additional_data or {}).get("deviceId"),
        )

        # GatewayError propagates untouched; the order has not been written yet
        payment = self.gateway.create_payment(payload)

        order, _ = apply_gateway_payment(order, payment)
        log.info(
            "payment_submission_completed",
            payment_id=str(payment.get("id")),
            gateway_status=payment.get("status"),
            payment_status=order.payment_status,
        )
        return PaymentResult.from_gateway(payment)

    def build_payment_request(self, order, form_data, token, amount) -> dict:
        payer_form = form_data.get("payer") or {}
        customer = order.user

        customer_name = (
            (customer.full_name if customer else "")
            or order.customer_name
            or "Cliente"
        )
        name_parts = customer_name.split()
        first_name = name_parts[0] if name_parts else "Cliente"
        last_name = " ".join(name_parts[1:]) or settings.STORE_NAME

        email = (
            payer_form.get("email")
            or (customer.email if customer else "")
            or order.email
        )
        if not email:
            name = order.customer_name or customer_name
            local_part = ".".join(name.lower().split())
            email = f"{local_part}@{settings.STORE_EMAIL_DOMAIN}"

        payer = {
            "email": email,
            "first_name": payer_form.get("first_name") or first_name,
            "last_name": payer_form.get("last_name") or last_name,
        }

        identification = payer_form.get("identification") or {}
        number = only_digits(
            identification.get("number") or (customer.cpf_cnpj if customer else "")
        )
        if number and number != PLACEHOLDER_CPF:
            payer["identification"] = {
                "type": identification.get("type")
                or ("CNPJ" if len(number) == 14 else "CPF"),
                "number": number,
            }

        return {
            "transaction_amount": cents_to_reais(
                amount, minimum_cents=settings.PAYMENT_MINIMUM_AMOUNT_CENTS
            ),
            "payment_method_id": form_data["payment_method_id"],
            "description": f"Pedido {settings.STORE_NAME} #{token[-8:]}",
            "payer": payer,
            "external_reference": token,
            "notification_url": notification_url(),
        }


def build_checkout_preference(order) -> dict:
    """Hosted checkout preference for ``order``, restricted to PIX."""
    site_url = settings.SITE_URL.rstrip("/")
    item_count = order.items.count()
    return {
        "items": [
            {
                "id": str(order.id),
                "title": f"Pedido #{order.short_reference}",
                "description": f"{item_count} item(ns)",
                "quantity": 1,
                "currency_id": settings.DEFAULT_CURRENCY,
                "unit_price": float(order.total_amount),
            }
        ],
        "payer": {
            "name": order.customer_name,
            "email": order.email,
        },
        "payment_methods": {
            "excluded_payment_types": [
                {"id": "credit_card"},
                {"id": "debit_card"},
                {"id": "ticket"},
            ],
            "installments": 1,
        },
        "back_urls": {
            "success": f"{site_url}/checkout/sucesso/{order.id}",
            "failure": f"{site_url}/checkout?error=payment_failed",
            "pending": f"{site_url}/checkout/sucesso/{order.id}?status=pending",
        },
        "notification_url": notification_url(),
        "external_reference": str(order.id),
        "statement_descriptor": settings.STORE_NAME.upper()[:22],
    }


def create_checkout_preference(order, gateway) -> str:
    """
    Register ``order`` with the gateway's hosted checkout and return the
    preference id, which becomes the order's correlation token.
    """
    preference = gateway.create_preference(build_checkout_preference(order))
    preference_id = preference.get("id")
    if not preference_id:
        raise GatewayError("Erro ao criar preferência de pagamento")

    order.payment_external_id = str(preference_id)
    order.payment_details = {"preference_id": str(preference_id)}
    order.save(update_fields=["payment_external_id", "payment_details", "updated_at"])
    logger.info(
        "checkout_preference_created",
        order_id=str(order.id),
        preference_id=preference_id,
    )
    return str(preference_id)


def paid_amount(payment: dict):
    """Amount the gateway says was charged, in reais, or None if absent."""
    amount = payment.get("transaction_amount")
    if amount in (None, ""):
        return None
    return quantize_cents(amount)


@transaction.atomic
def apply_gateway_payment(order, payment: dict):
    """
    Bring ``order`` in line with a payment read from the gateway.

    The payment status goes through ``PaymentStatus.can_transition``; a
    stale payment that would move the order backwards is logged and
    ignored, and nothing from it is written. An approved or authorized
    payment confirms the order only when it covers the order total;
    otherwise the order is flagged with ``payment_review_required``.
    Returns ``(order, changed)``.
    """
    from apps.orders.tasks import send_payment_confirmed_email_task

    order = Order.objects.select_for_update().get(pk=order.pk)
    new_status = PaymentStatus.from_gateway(payment.get("status"))
    log = logger.bind(
        order_id=str(order.id),
        payment_id=str(payment.get("id")),
        gateway_status=payment.get("status"),
    )

    if new_status != order.payment_status and not PaymentStatus.can_transition(
        order.payment_status, new_status
    ):
        log.warning("stale_gateway_payment_ignored", current=order.payment_status)
        return order, False

    changed = order.set_payment_status(new_status)
    order.payment_external_id = str(payment.get("id") or order.payment_external_id)
    order.payment_method = payment.get("payment_method_id") or order.payment_method
    details = summarize_gateway_payment(payment)
    if order.payment_details.get("preference_id"):
        details["preference_id"] = order.payment_details["preference_id"]
    order.payment_details = details
    order.save(
        update_fields=[
            "payment_status",
            "payment_external_id",
            "payment_method",
            "payment_details",
            "updated_at",
        ]
    )

    if (
        PaymentStatus.is_success(order.payment_status)
        or order.payment_status == PaymentStatus.AUTHORIZED
    ):
        if order.status == OrderStatus.PENDING:
            amount = paid_amount(payment)
            if amount is None or amount < order.total_amount:
                log.warning(
                    "payment_below_order_total",
                    paid=str(amount),
                    total=str(order.total_amount),
                )
                if not order.payment_review_required:
                    order.payment_review_required = True
                    order.save(update_fields=["payment_review_required", "updated_at"])
                    changed = True
            elif order.confirm():
                order.commit_stock()
                transaction.on_commit(
                    lambda: send_payment_confirmed_email_task.delay(str(order.id))
                )
                changed = True
                log.info("order_confirmed_by_payment")
        elif order.status == OrderStatus.CANCELLED:
            log.warning("payment_approved_for_cancelled_order")
    elif order.payment_status in FAILURE_STATUSES and order.can_be_cancelled():
        order.cancel(reason=f"payment {order.payment_status}")
        changed = True

    log.info(
        "gateway_payment_applied", payment_status=order.payment_status, changed=changed
    )
    return order, changed


class WebhookHandler:
    """
    Handles Mercado Pago notifications.

    Signatures follow the gateway's ``x-signature`` scheme: an HMAC-SHA256,
    keyed with the webhook secret, over the manifest
    ``id:<data.id>;request-id:<x-request-id>;ts:<ts>;``.
    """

    def __init__(self, gateway, secret=""):
        self.gateway = gateway
        self.secret = secret

    def verify_signature(self, x_signature, x_request_id, data_id) -> None:
        if not self.secret:
            logger.warning("webhook_signature_not_checked", reason="no secret")
            return

        parts = {}
        for part in (x_signature or "").split(","):
            key, _, value = part.strip().partition("=")
            parts[key] = value
        ts, received = parts.get("ts"), parts.get("v1")
        if not ts or not received:
            raise InvalidWebhookSignature()

        manifest = ""
        if data_id:
            manifest += f"id:{str(data_id).lower()};"
        if x_request_id:
            manifest += f"request-id:{x_request_id};"
        manifest += f"ts:{ts};"

        expected = hmac.new(
            self.secret.encode(), manifest.encode(), hashlib.sha256
        ).hexdigest()
        if not hmac.compare_digest(expected, received):
            logger.warning("webhook_signature_mismatch", data_id=str(data_id))
            raise InvalidWebhookSignature()

    def handle(
        self, body, query_params=None, x_signature=None, x_request_id=None
    ) -> dict:
        body = body or {}
        query_params = query_params or {}
        topic = (
            body.get("type") or query_params.get("type") or query_params.get("topic")
        )
        data_id = (body.get("data") or {}).get("id") or query_params.get("data.id")

        self.verify_signature(x_signature, x_request_id, data_id)

        if topic != "payment":
            logger.info("webhook_ignored", topic=topic)
            return {"status": "ignored"}

        if not data_id:
            raise PaymentValidationError("No payment ID")

        try:
            payment = self.gateway.get_payment(data_id)
        except GatewayError as e:
            logger.error(
                "webhook_payment_fetch_failed",
                payment_id=str(data_id),
                error=e.message,
            )
            raise GatewayError(
                "Failed to fetch payment from Mercado Pago",
                gateway_status=e.gateway_status,
                payload=e.payload,
            ) from e

        external_reference = payment.get("external_reference")
        if not external_reference:
            raise PaymentValidationError("No external reference")

        order = Order.objects.find_for_gateway_payment(data_id, external_reference)
        if order is None:
            logger.warning(
                "webhook_order_not_found",
                payment_id=str(data_id),
                external_reference=external_reference,
            )
            raise OrderNotFound()

        order, _ = apply_gateway_payment(order, payment)
        return {
            "status": "success",
            "order_id": str(order.id),
            "payment_status": order.payment_status,
        }


def reconcile_order(order, gateway) -> bool:
    """Re-read ``order``'s payment from the gateway. Returns True if it changed."""
    payment = gateway.get_payment(order.payment_external_id)
    _, changed = apply_gateway_payment(order, payment)
    return changed


def reconcile_pending(gateway, limit=100, dry_run=False, older_than=None) -> dict:
    """
    Re-read open payments nobody has heard about for a while.

    Gateway errors are logged per order and do not stop the batch.
    """
    older_than = older_than or timedelta(
        minutes=settings.PAYMENT_RECONCILE_AFTER_MINUTES
    )
    orders = list(Order.objects.awaiting_reconciliation(older_than)[:limit])
    summary = {"checked": 0, "updated": 0, "failed": 0}

    for order in orders:
        summary["checked"] += 1
        if dry_run:
            logger.info(
                "reconcile_dry_run",
                order_id=str(order.id),
                payment_id=order.payment_external_id,
                payment_status=order.payment_status,
            )
            continue
        try:
            if reconcile_order(order, gateway):
                summary["updated"] += 1
        except GatewayError as e:
            summary["failed"] += 1
            logger.warning(
                "reconcile_order_failed",
                order_id=str(order.id),
                payment_id=order.payment_external_id,
                error=e.message,
            )

    logger.info("reconcile_finished", dry_run=dry_run, **summary)
    return summary

# apps/orders/enums.py

"""
Enums for the orders app.

PaymentStatus also owns the translation from the gateway's status
vocabulary and the rules deciding which payment status updates may be
applied to an order.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """Order status choices."""

    PENDING = "pending", "Pendente"
    CONFIRMED = "confirmed", "Confirmado"
    PROCESSING = "processing", "Em preparação"
    SHIPPED = "shipped", "Enviado"
    DELIVERED = "delivered", "Entregue"
    CANCELLED = "cancelled", "Cancelado"


class PaymentStatus(models.TextChoices):
    """Payment status choices."""

    PENDING = "pending", "Pendente"
    APPROVED = "approved", "Aprovado"
    AUTHORIZED = "authorized", "Autorizado"
    PROCESSING = "processing", "Em processamento"
    IN_MEDIATION = "in_mediation", "Em mediação"
    REJECTED = "rejected", "Recusado"
    CANCELLED = "cancelled", "Cancelado"
    REFUNDED = "refunded", "Reembolsado"
    CHARGED_BACK = "charged_back", "Estornado"
    # Written by older releases; read as APPROVED.
    PAID = "paid", "Pago"

    @classmethod
    def from_gateway(cls, gateway_status) -> "PaymentStatus":
        """
        Translate a Mercado Pago payment status into ours.

        Unknown, empty or missing statuses map to PENDING.

        >>> PaymentStatus.from_gateway("in_process")
        <PaymentStatus.PROCESSING: 'processing'>
        >>> PaymentStatus.from_gateway(None)
        <PaymentStatus.PENDING: 'pending'>
        """
        return GATEWAY_STATUS_MAP.get(gateway_status, cls.PENDING)

    @classmethod
    def is_success(cls, value) -> bool:
        """Whether the payment has been approved (including legacy ``paid``)."""
        return value in SUCCESS_STATUSES

    @classmethod
    def is_terminal(cls, value) -> bool:
        return value in TERMINAL_STATUSES

    @classmethod
    def can_transition(cls, current, new) -> bool:
        """
        Whether an order whose payment is ``current`` may move to ``new``.

        Terminal statuses never move, except an approved payment being
        refunded or charged back by the gateway. Non-terminal statuses only
        move forward (pending, then processing/in_mediation, then
        authorized, then a terminal status). Repeating the current status
        is not a transition.
        """
        if current == new:
            return False
        if cls.is_terminal(current):
            return cls.is_success(current) and new in REVERSAL_STATUSES
        return PROGRESS_RANK[new] >= PROGRESS_RANK[current]


GATEWAY_STATUS_MAP = {
    "approved": PaymentStatus.APPROVED,
    "pending": PaymentStatus.PENDING,
    "authorized": PaymentStatus.AUTHORIZED,
    "in_process": PaymentStatus.PROCESSING,
    "in_mediation": PaymentStatus.IN_MEDIATION,
    "rejected": PaymentStatus.REJECTED,
    "cancelled": PaymentStatus.CANCELLED,
    "refunded": PaymentStatus.REFUNDED,
    "charged_back": PaymentStatus.CHARGED_BACK,
}

SUCCESS_STATUSES = frozenset({PaymentStatus.APPROVED, PaymentStatus.PAID})

FAILURE_STATUSES = frozenset(
    {
        PaymentStatus.REJECTED,
        PaymentStatus.CANCELLED,
        PaymentStatus.REFUNDED,
        PaymentStatus.CHARGED_BACK,
    }
)

TERMINAL_STATUSES = SUCCESS_STATUSES | FAILURE_STATUSES

REVERSAL_STATUSES = frozenset({PaymentStatus.REFUNDED, PaymentStatus.CHARGED_BACK})

PROGRESS_RANK = {
    PaymentStatus.PENDING: 0,
    PaymentStatus.PROCESSING: 1,
    PaymentStatus.IN_MEDIATION: 1,
    PaymentStatus.AUTHORIZED: 2,
    PaymentStatus.APPROVED: 3,
    PaymentStatus.PAID: 3,
    PaymentStatus.REJECTED: 3,
    PaymentStatus.CANCELLED: 3,
    PaymentStatus.REFUNDED: 4,
    PaymentStatus.CHARGED_BACK: 4,
}

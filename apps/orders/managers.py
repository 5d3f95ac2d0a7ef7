# apps/orders/managers.py

import re
import uuid
from datetime import timedelta

from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.orders.enums import (
    FAILURE_STATUSES,
    SUCCESS_STATUSES,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentStatus,
)

COLLECTOR_PREFIX = re.compile(r"^\d+-")


def _as_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class OrderQuerySet(models.QuerySet):
    def for_user(self, user):
        """Get orders for a specific user."""
        return self.filter(user=user)

    def by_status(self, status):
        return self.filter(status=status)

    def paid(self):
        """Orders whose payment was approved."""
        return self.filter(payment_status__in=SUCCESS_STATUSES)

    def unpaid(self):
        return self.filter(payment_status=PaymentStatus.PENDING)

    def payment_failed(self):
        return self.filter(payment_status__in=FAILURE_STATUSES)

    def recent(self, days=30):
        """Get orders from the last N days."""
        cutoff = timezone.now() - timedelta(days=days)
        return self.filter(created_at__gte=cutoff)

    def needs_shipping(self):
        """Get orders that are paid and waiting to be shipped."""
        return self.filter(
            status__in=[OrderStatus.CONFIRMED, OrderStatus.PROCESSING],
            payment_status__in=SUCCESS_STATUSES,
        )

    def awaiting_reconciliation(self, older_than: timedelta):
        """
        Orders with a gateway payment that still needs reading back and that
        have not been touched for ``older_than``: payments whose outcome is
        open, and approved payments whose order was never confirmed.

        Checkout preference ids are not payment ids and cannot be looked up
        on the payments API, so only numeric external ids are returned.
        """
        cutoff = timezone.now() - older_than
        open_payment = ~Q(payment_status__in=TERMINAL_STATUSES)
        approved_not_confirmed = Q(
            payment_status__in=SUCCESS_STATUSES,
            status=OrderStatus.PENDING,
            payment_review_required=False,
        )
        return (
            self.filter(open_payment | approved_not_confirmed)
            .exclude(status=OrderStatus.CANCELLED)
            .filter(updated_at__lte=cutoff, payment_external_id__regex=r"^\d+$")
            .order_by("updated_at")
        )

    def expired_unpaid(self, older_than: timedelta):
        """Pending orders nobody paid for within ``older_than``."""
        cutoff = timezone.now() - older_than
        return self.filter(
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            created_at__lte=cutoff,
        )


class OrderManager(models.Manager.from_queryset(OrderQuerySet)):
    """Custom manager for Order model."""

    def find_by_payment_reference(self, token):
        """
        Locate the order a payment submission refers to.

        ``token`` is normally the gateway preference id stored on the order
        at checkout; the order's own id is accepted as a fallback.
        """
        if not token:
            return None

        order = self.filter(payment_external_id=str(token)).first()
        if order is not None:
            return order

        # The preference id is kept after a payment id replaces it
        order = self.filter(payment_details__preference_id=str(token)).first()
        if order is not None:
            return order

        order_id = _as_uuid(token)
        if order_id is None:
            return None
        return self.filter(id=order_id).first()

    def find_for_gateway_payment(self, payment_id, external_reference=None):
        """
        Locate the order a gateway payment belongs to.

        Tries the stored payment id first, then the payment's
        ``external_reference``, which is the order id optionally prefixed
        with ``<collector id>-``.
        """
        if payment_id:
            order = self.filter(payment_external_id=str(payment_id)).first()
            if order is not None:
                return order

        if not external_reference:
            return None

        order_id = _as_uuid(external_reference) or _as_uuid(
            COLLECTOR_PREFIX.sub("", str(external_reference), count=1)
        )
        if order_id is None:
            return None
        return self.filter(id=order_id).first()


class CouponQuerySet(models.QuerySet):
    def available(self):
        """Active coupons inside their validity window with uses left."""
        now = timezone.now()
        return self.filter(is_active=True, start_date__lte=now).filter(
            models.Q(end_date__isnull=True) | models.Q(end_date__gte=now),
            models.Q(usage_limit__isnull=True)
            | models.Q(used_count__lt=models.F("usage_limit")),
        )

    def not_used_by(self, user):
        return self.exclude(usages__user=user)


CouponManager = models.Manager.from_queryset(CouponQuerySet)

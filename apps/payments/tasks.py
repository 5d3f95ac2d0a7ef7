# apps/payments/tasks.py

import structlog
from celery import shared_task

from apps.payments.exceptions import GatewayError
from apps.payments.gateway import get_gateway
from apps.payments.services import reconcile_pending

logger = structlog.get_logger(__name__)


@shared_task
def reconcile_pending_payments(limit=100):
    """
    Fallback for gateway notifications that never arrived: re-read open
    payments from Mercado Pago and apply them.
    """
    try:
        gateway = get_gateway()
    except GatewayError as exc:
        logger.error("reconcile_skipped", error=exc.message)
        return {"checked": 0, "updated": 0, "failed": 0}

    return reconcile_pending(gateway, limit=limit)

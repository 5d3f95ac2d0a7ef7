# apps/orders/tasks.py

from datetime import timedelta

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

from apps.orders.models import Order

logger = structlog.get_logger(__name__)


def _send_order_email(order, subject, template):
    context = {
        "order": order,
        "store_name": settings.STORE_NAME,
        "site_url": settings.SITE_URL,
    }

    html_message = render_to_string(f"emails/{template}.html", context)
    plain_message = render_to_string(f"emails/{template}.txt", context)

    send_mail(
        subject=subject,
        message=plain_message,
        html_message=html_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[order.email],
        fail_silently=False,
    )


@shared_task(bind=True, max_retries=3)
def send_order_confirmation_email_task(self, order_id):
    """Send order confirmation email asynchronously."""
    try:
        order = Order.objects.prefetch_related("items").get(id=order_id)
        _send_order_email(
            order,
            f"Pedido recebido - {order.order_number}",
            "order_confirmation",
        )
        logger.info("order_confirmation_email_sent", order_number=order.order_number)

    except Order.DoesNotExist:
        logger.error("order_confirmation_email_order_missing", order_id=order_id)
    except Exception as exc:
        logger.error(
            "order_confirmation_email_failed", order_id=order_id, error=str(exc)
        )
        # Retry with exponential backoff
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_payment_confirmed_email_task(self, order_id):
    """Tell the customer their payment was approved."""
    try:
        order = Order.objects.prefetch_related("items").get(id=order_id)
        _send_order_email(
            order,
            f"Pagamento aprovado - {order.order_number}",
            "payment_confirmed",
        )
        logger.info("payment_confirmed_email_sent", order_number=order.order_number)

    except Order.DoesNotExist:
        logger.error("payment_confirmed_email_order_missing", order_id=order_id)
    except Exception as exc:
        logger.error(
            "payment_confirmed_email_failed", order_id=order_id, error=str(exc)
        )
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_shipping_notification_task(self, order_id):
    """Send shipping notification email asynchronously."""
    try:
        order = Order.objects.get(id=order_id)
        _send_order_email(
            order,
            f"Seu pedido foi enviado - {order.order_number}",
            "shipping_notification",
        )
        logger.info("shipping_notification_sent", order_number=order.order_number)

    except Order.DoesNotExist:
        logger.error("shipping_notification_order_missing", order_id=order_id)
    except Exception as exc:
        logger.error("shipping_notification_failed", order_id=order_id, error=str(exc))
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task
def expire_unpaid_orders():
    """Cancel pending orders whose payment never arrived."""
    ttl = timedelta(hours=settings.UNPAID_ORDER_TTL_HOURS)

    try:
        cancelled = 0
        for order in Order.objects.expired_unpaid(older_than=ttl):
            order.cancel("Cancelado automaticamente por falta de pagamento")
            cancelled += 1

        logger.info("unpaid_orders_expired", count=cancelled)
        return cancelled

    except Exception as exc:
        logger.error("unpaid_orders_expiry_failed", error=str(exc))
        raise

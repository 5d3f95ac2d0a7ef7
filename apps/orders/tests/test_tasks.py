from datetime import timedelta

from django.core import mail
from django.test import TestCase
from django.utils import timezone

from apps.orders.models import Order
from apps.orders.tasks import (
    expire_unpaid_orders,
    send_order_confirmation_email_task,
    send_payment_confirmed_email_task,
    send_shipping_notification_task,
)
from apps.orders.tests.factories import make_order, make_product, make_user


class OrderEmailTaskTests(TestCase):
    def setUp(self):
        self.order = make_order(make_user(), lines=[(make_product(), 1)])

    def test_order_confirmation(self):
        send_order_confirmation_email_task.delay(str(self.order.id))

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ["maria@example.com"])
        self.assertEqual(
            message.subject, f"Pedido recebido - {self.order.order_number}"
        )
        self.assertIn("Produto HP-001", message.body)
        self.assertEqual(message.alternatives[0][1], "text/html")

    def test_payment_confirmed(self):
        send_payment_confirmed_email_task.delay(str(self.order.id))

        self.assertEqual(
            mail.outbox[0].subject, f"Pagamento aprovado - {self.order.order_number}"
        )
        self.assertIn(f"/checkout/sucesso/{self.order.id}", mail.outbox[0].body)

    def test_shipping_notification(self):
        self.order.tracking_number = "BR123456789BR"
        self.order.carrier = "Correios"
        self.order.save()

        send_shipping_notification_task.delay(str(self.order.id))

        self.assertIn("BR123456789BR (Correios)", mail.outbox[0].body)

    def test_missing_order_sends_nothing(self):
        send_order_confirmation_email_task.delay(
            "00000000-0000-4000-8000-000000000000"
        )

        self.assertEqual(mail.outbox, [])


class ExpireUnpaidOrdersTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.product = make_product(stock=4)

    def _backdate(self, order, hours):
        Order.objects.filter(pk=order.pk).update(
            created_at=timezone.now() - timedelta(hours=hours)
        )

    def test_cancels_old_unpaid_orders_only(self):
        old = make_order(self.user, lines=[(self.product, 1)])
        recent = make_order(self.user)
        old_processing = make_order(self.user, payment_status="processing")
        self._backdate(old, 30)
        self._backdate(old_processing, 30)

        cancelled = expire_unpaid_orders()

        self.assertEqual(cancelled, 1)
        old.refresh_from_db()
        recent.refresh_from_db()
        old_processing.refresh_from_db()
        self.assertEqual(old.status, "cancelled")
        self.assertEqual(recent.status, "pending")
        self.assertEqual(old_processing.status, "pending")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 4)

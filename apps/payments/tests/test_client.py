from unittest.mock import Mock

from django.test import SimpleTestCase

from apps.payments.client import (
    OrderStatusPoller,
    PaymentSubmitter,
    Scheduler,
    StorefrontClient,
    ThreadingScheduler,
)


class FakeScheduler(Scheduler):
    """Runs scheduled callbacks when the test advances the clock."""

    def __init__(self):
        self.now = 0.0
        self.pending = []

    def call_later(self, delay, callback):
        handle = Mock(cancelled=False)
        handle.cancel.side_effect = lambda: setattr(handle, "cancelled", True)
        self.pending.append((self.now + delay, callback, handle))
        return handle

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [
                entry
                for entry in self.pending
                if entry[0] <= target and not entry[2].cancelled
            ]
            if not due:
                break
            entry = min(due, key=lambda e: e[0])
            self.pending.remove(entry)
            self.now = entry[0]
            entry[1]()
        self.now = target

    @property
    def active(self):
        return [entry for entry in self.pending if not entry[2].cancelled]


class OrderStatusPollerTests(SimpleTestCase):
    def setUp(self):
        self.scheduler = FakeScheduler()
        self.fetch = Mock()
        self.navigate = Mock()
        self.on_change = Mock()

    def make_poller(self, payment_status="pending", order_id="order-1"):
        return OrderStatusPoller(
            order_id,
            payment_status,
            fetch_status=self.fetch,
            navigate=self.navigate,
            on_status_change=self.on_change,
            scheduler=self.scheduler,
        )

    def test_polls_until_approved_then_navigates(self):
        self.fetch.side_effect = [
            {"paymentStatus": "pending"},
            {"paymentStatus": "approved"},
        ]
        poller = self.make_poller().start()

        self.scheduler.advance(5)
        self.assertEqual(self.fetch.call_count, 1)
        self.navigate.assert_not_called()
        self.assertTrue(poller.is_polling)

        self.scheduler.advance(5)
        self.assertEqual(self.fetch.call_count, 2)
        self.on_change.assert_called_once_with("approved")
        self.assertFalse(poller.is_polling)
        self.navigate.assert_not_called()

        self.scheduler.advance(1.5)
        self.navigate.assert_not_called()
        self.scheduler.advance(0.5)
        self.navigate.assert_called_once_with("/checkout/sucesso/order-1")

        self.scheduler.advance(30)
        self.assertEqual(self.fetch.call_count, 2)

    def test_already_approved_redirects_without_polling(self):
        self.make_poller(payment_status="approved").start()

        self.scheduler.advance(0.5)
        self.navigate.assert_not_called()
        self.scheduler.advance(0.5)

        self.navigate.assert_called_once_with("/checkout/sucesso/order-1")
        self.fetch.assert_not_called()

    def test_legacy_paid_status_redirects(self):
        self.make_poller(payment_status="paid").start()

        self.scheduler.advance(1)

        self.navigate.assert_called_once()
        self.fetch.assert_not_called()

    def test_other_statuses_do_nothing(self):
        for status in ("rejected", "processing", "cancelled", None):
            with self.subTest(status=status):
                self.make_poller(payment_status=status).start()
                self.scheduler.advance(60)
        self.fetch.assert_not_called()
        self.navigate.assert_not_called()

    def test_fetch_errors_keep_polling(self):
        self.fetch.side_effect = [
            ConnectionError("offline"),
            {"paymentStatus": "approved"},
        ]
        self.make_poller().start()

        self.scheduler.advance(10)
        self.scheduler.advance(2)

        self.assertEqual(self.fetch.call_count, 2)
        self.navigate.assert_called_once_with("/checkout/sucesso/order-1")

    def test_stop_cancels_next_tick(self):
        self.fetch.return_value = {"paymentStatus": "pending"}
        poller = self.make_poller().start()
        self.scheduler.advance(5)

        poller.stop()
        self.scheduler.advance(60)

        self.assertEqual(self.fetch.call_count, 1)
        self.assertEqual(self.scheduler.active, [])

    def test_close_cancels_pending_navigation(self):
        self.fetch.return_value = {"paymentStatus": "approved"}
        with self.make_poller():
            self.scheduler.advance(5)
        self.scheduler.advance(10)

        self.on_change.assert_called_once_with("approved")
        self.navigate.assert_not_called()

    def test_callback_is_optional(self):
        self.fetch.return_value = {"paymentStatus": "approved"}
        OrderStatusPoller(
            "order-9",
            "pending",
            fetch_status=self.fetch,
            navigate=self.navigate,
            scheduler=self.scheduler,
        ).start()

        self.scheduler.advance(7)

        self.navigate.assert_called_once_with("/checkout/sucesso/order-9")


class PaymentSubmitterTests(SimpleTestCase):
    def setUp(self):
        self.scheduler = FakeScheduler()
        self.submit = Mock(return_value={"success": True})
        self.submitter = PaymentSubmitter(self.submit, scheduler=self.scheduler)

    def test_duplicate_calls_are_suppressed(self):
        first = self.submitter({"payment_method_id": "pix"})
        second = self.submitter({"payment_method_id": "pix"})

        self.assertEqual(first, {"success": True})
        self.assertIsNone(second)
        self.submit.assert_called_once()
        self.assertTrue(self.submitter.in_flight)

    def test_released_after_cooldown(self):
        self.submitter({})
        self.scheduler.advance(1.5)
        self.assertIsNone(self.submitter({}))

        self.scheduler.advance(0.5)
        self.submitter({})

        self.assertEqual(self.submit.call_count, 2)

    def test_released_after_failure(self):
        self.submit.side_effect = [RuntimeError("network"), {"success": True}]

        with self.assertRaises(RuntimeError):
            self.submitter({})
        self.scheduler.advance(2)

        self.assertEqual(self.submitter({}), {"success": True})


class StorefrontClientTests(SimpleTestCase):
    def test_get_order_status(self):
        session = Mock()
        session.get.return_value.json.return_value = {"paymentStatus": "pending"}
        client = StorefrontClient("https://loja.example.com/", session=session)

        data = client.get_order_status("abc")

        self.assertEqual(data, {"paymentStatus": "pending"})
        session.get.assert_called_once_with(
            "https://loja.example.com/api/v1/orders/abc/status/", timeout=5.0
        )
        session.get.return_value.raise_for_status.assert_called_once()

    def test_process_payment(self):
        session = Mock()
        session.post.return_value.json.return_value = {"success": True}
        client = StorefrontClient("https://loja.example.com", session=session)

        client.process_payment({"payment_method_id": "pix"}, {}, "pref-abc", 12990)

        _, kwargs = session.post.call_args
        self.assertEqual(
            kwargs["json"],
            {
                "formData": {"payment_method_id": "pix"},
                "additionalData": {},
                "preferenceId": "pref-abc",
                "amount": 12990,
            },
        )


class SchedulerTests(SimpleTestCase):
    def test_scheduler_cannot_be_used_without_call_later(self):
        with self.assertRaises(TypeError):
            Scheduler()

    def test_threading_scheduler_timer_can_be_cancelled(self):
        callback = Mock()

        handle = ThreadingScheduler().call_later(60, callback)
        handle.cancel()

        self.assertTrue(handle.daemon)
        callback.assert_not_called()

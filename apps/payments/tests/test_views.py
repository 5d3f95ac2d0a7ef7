import json
from unittest.mock import Mock, patch

from django.test import TestCase
from django.urls import reverse

from apps.orders.tests.factories import make_order, make_product, make_user
from apps.payments.exceptions import GatewayError


class ProcessPaymentViewTests(TestCase):
    def setUp(self):
        self.url = reverse("payments:payment-process")
        self.order = make_order(
            make_user(),
            lines=[(make_product(), 1)],
            payment_external_id="pref-abc",
            payment_details={"preference_id": "pref-abc"},
        )
        self.gateway = Mock()
        self.gateway.create_payment.return_value = {
            "id": 1319000001,
            "status": "pending",
            "status_detail": "pending_waiting_transfer",
            "payment_method_id": "pix",
            "external_reference": "pref-abc",
            "transaction_amount": 100.0,
            "point_of_interaction": {
                "type": "PIX",
                "transaction_data": {"qr_code": "000201", "qr_code_base64": "aVZC"},
            },
        }
        patcher = patch("apps.payments.views.get_gateway", return_value=self.gateway)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _post(self, payload):
        return self.client.post(
            self.url, data=json.dumps(payload), content_type="application/json"
        )

    def test_get_reports_api_is_running(self):
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(), {"status": "ok", "message": "Payment processing API is running"}
        )

    def test_successful_submission(self):
        resp = self._post(
            {
                "formData": {"payment_method_id": "pix"},
                "additionalData": {"deviceId": "abc"},
                "preferenceId": "pref-abc",
                "amount": 10000,
            }
        )

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["payment"]["id"], 1319000001)
        self.assertEqual(body["payment"]["status"], "pending")
        self.assertEqual(
            body["payment"]["point_of_interaction"]["transaction_data"]["qr_code"],
            "000201",
        )
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_external_id, "1319000001")

    def test_missing_fields(self):
        resp = self._post({"formData": {"payment_method_id": "pix"}})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json(), {"success": False, "error": "Missing required fields"}
        )
        self.gateway.create_payment.assert_not_called()

    def test_unknown_order(self):
        resp = self._post(
            {
                "formData": {"payment_method_id": "pix"},
                "preferenceId": "does-not-exist",
                "amount": 10000,
            }
        )

        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"success": False, "error": "Order not found"})

    def test_gateway_error_message_is_returned(self):
        self.gateway.create_payment.side_effect = GatewayError(
            "payer.email must be a valid email", gateway_status=400
        )

        resp = self._post(
            {
                "formData": {"payment_method_id": "pix"},
                "preferenceId": "pref-abc",
                "amount": 10000,
            }
        )

        self.assertEqual(resp.status_code, 502)
        self.assertEqual(
            resp.json(),
            {"success": False, "error": "payer.email must be a valid email"},
        )
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, "pending")

    def test_unexpected_error_is_generic(self):
        self.gateway.create_payment.side_effect = RuntimeError("boom")

        resp = self._post(
            {
                "formData": {"payment_method_id": "pix"},
                "preferenceId": "pref-abc",
                "amount": 10000,
            }
        )

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(), {"success": False, "error": "Error processing payment"}
        )

    def test_paid_order_is_refused(self):
        self.order.payment_status = "approved"
        self.order.status = "confirmed"
        self.order.save()

        resp = self._post(
            {
                "formData": {"payment_method_id": "pix"},
                "preferenceId": "pref-abc",
                "amount": 10000,
            }
        )

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json(), {"success": False, "error": "Order is not awaiting payment"}
        )
        self.gateway.create_payment.assert_not_called()

from unittest.mock import Mock

import requests
from django.test import SimpleTestCase, override_settings

from apps.payments.exceptions import GatewayError
from apps.payments.gateway import MercadoPagoGateway, get_gateway


def fake_response(status_code, body=None, text=""):
    resp = Mock(status_code=status_code, text=text)
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class MercadoPagoGatewayTests(SimpleTestCase):
    def setUp(self):
        self.session = Mock()
        self.gateway = MercadoPagoGateway(
            "APP_USR-token",
            base_url="https://api.mercadopago.test/",
            timeout=3,
            session=self.session,
        )

    def test_create_payment_sends_auth_and_idempotency_key(self):
        self.session.request.return_value = fake_response(
            201, {"id": 1, "status": "pending"}
        )

        payment = self.gateway.create_payment({"transaction_amount": 10.0})

        self.assertEqual(payment, {"id": 1, "status": "pending"})
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("POST", "https://api.mercadopago.test/v1/payments"))
        self.assertEqual(kwargs["json"], {"transaction_amount": 10.0})
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer APP_USR-token")
        self.assertTrue(kwargs["headers"]["X-Idempotency-Key"])

    def test_each_payment_gets_a_new_idempotency_key(self):
        self.session.request.return_value = fake_response(201, {"id": 1})

        self.gateway.create_payment({})
        self.gateway.create_payment({})

        keys = [
            c.kwargs["headers"]["X-Idempotency-Key"]
            for c in self.session.request.call_args_list
        ]
        self.assertNotEqual(keys[0], keys[1])

    def test_get_payment(self):
        self.session.request.return_value = fake_response(200, {"id": 42})

        self.gateway.get_payment(42)

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", "https://api.mercadopago.test/v1/payments/42"))
        self.assertNotIn("X-Idempotency-Key", kwargs["headers"])

    def test_create_preference(self):
        self.session.request.return_value = fake_response(201, {"id": "123-abc"})

        preference = self.gateway.create_preference({"items": []})

        self.assertEqual(preference["id"], "123-abc")
        args, _ = self.session.request.call_args
        self.assertEqual(args[1], "https://api.mercadopago.test/checkout/preferences")

    def test_error_response_carries_gateway_message(self):
        body = {"message": "invalid payer email", "status": 400}
        self.session.request.return_value = fake_response(400, body)

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.create_payment({})

        self.assertEqual(ctx.exception.message, "invalid payer email")
        self.assertEqual(ctx.exception.gateway_status, 400)
        self.assertEqual(ctx.exception.payload, body)

    def test_error_response_without_body(self):
        self.session.request.return_value = fake_response(503, text="unavailable")

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.get_payment(1)

        self.assertEqual(ctx.exception.message, "HTTP 503")

    def test_error_response_with_list_body(self):
        body = [{"code": 4020, "description": "notification_url attribute must be url valid"}]
        self.session.request.return_value = fake_response(400, body)

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.create_payment({})

        self.assertEqual(ctx.exception.message, "HTTP 400")
        self.assertEqual(ctx.exception.payload, body)

    def test_transport_failure(self):
        self.session.request.side_effect = requests.Timeout("read timed out")

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.get_payment(1)

        self.assertIn("read timed out", ctx.exception.message)

    def test_access_token_is_required(self):
        with self.assertRaises(GatewayError):
            MercadoPagoGateway("")

    @override_settings(
        MERCADO_PAGO_ACCESS_TOKEN="APP_USR-live",
        MERCADO_PAGO_BASE_URL="https://api.mercadopago.com",
        MERCADO_PAGO_TIMEOUT=7.5,
    )
    def test_get_gateway_reads_settings(self):
        gateway = get_gateway()

        self.assertEqual(gateway.access_token, "APP_USR-live")
        self.assertEqual(gateway.base_url, "https://api.mercadopago.com")
        self.assertEqual(gateway.timeout, 7.5)

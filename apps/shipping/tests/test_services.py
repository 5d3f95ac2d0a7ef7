from decimal import Decimal
from unittest.mock import Mock

import requests
from django.test import SimpleTestCase, override_settings

from apps.shipping.exceptions import InvalidZipCode, ShippingError
from apps.shipping.services import (
    MELHOR_ENVIO_SANDBOX_URL,
    MelhorEnvioClient,
    ShippingCalculator,
    format_delivery_time,
    get_shipping_calculator,
)

BOX = {"length": 20.0, "width": 15.0, "height": 10.0, "value": 129.9}


def item(weight):
    return {"weight": weight, **BOX}


def fake_response(status_code, body=None, text=""):
    resp = Mock(status_code=status_code, text=text)
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class EstimatedShippingTests(SimpleTestCase):
    def setUp(self):
        self.calculator = ShippingCalculator()

    def test_same_city_adds_store_pickup(self):
        options = self.calculator.calculate("01310-100", "01310-200", [item(1.0)])

        self.assertEqual(
            [(o.method, o.price, o.delivery_time_days) for o in options],
            [
                ("pickup", Decimal("0.00"), 0),
                ("standard", Decimal("13.50"), 3),
                ("express", Decimal("20.30"), 1),
            ],
        )
        self.assertEqual(options[0].delivery_time_description, "Imediato")
        self.assertEqual(options[0].carrier, "Loja")
        self.assertEqual(options[1].name, "Correios PAC")
        self.assertEqual(options[2].delivery_time_description, "1 dia útil")

    def test_distance_and_weight_raise_price_and_time(self):
        options = self.calculator.calculate("01310100", "90010-000", [item(3.0), item(4.0)])

        self.assertEqual(
            [(o.method, o.price, o.delivery_time_days) for o in options],
            [
                ("standard", Decimal("28.97"), 15),
                ("express", Decimal("48.15"), 7),
            ],
        )
        self.assertEqual(options[0].delivery_time_description, "15 dias úteis")

    def test_invalid_zip_code(self):
        for origin, destination in (("0131010", "01310200"), ("01310100", "abc")):
            with self.subTest(origin=origin, destination=destination):
                with self.assertRaises(InvalidZipCode) as ctx:
                    self.calculator.calculate(origin, destination, [item(1.0)])

                self.assertEqual(
                    ctx.exception.message, "CEP inválido. Use o formato 12345678"
                )

    def test_delivery_time_text(self):
        self.assertEqual(format_delivery_time(0), "Imediato")
        self.assertEqual(format_delivery_time(1), "1 dia útil")
        self.assertEqual(format_delivery_time(4), "4 dias úteis")


class CarrierShippingTests(SimpleTestCase):
    def setUp(self):
        self.carrier = Mock()
        self.carrier.calculate.return_value = [
            {
                "id": 2,
                "name": "SEDEX",
                "price": "25.40",
                "delivery_time": 2,
                "company": {"name": "Correios"},
            },
            {
                "id": 1,
                "name": "PAC",
                "price": "18.10",
                "delivery_time": 6,
                "company": {"name": "Correios"},
            },
        ]
        self.calculator = ShippingCalculator(
            carrier=self.carrier,
            from_address={"city": "São Paulo", "state_abbr": "SP"},
        )

    def test_carrier_quotes_with_markup_cheapest_first(self):
        options = self.calculator.calculate("01310-100", "20040-020", [item(0.5)])

        self.assertEqual(
            [(o.method, o.name, o.price) for o in options],
            [
                ("service-1", "Correios PAC", Decimal("23.10")),
                ("service-2", "Correios SEDEX", Decimal("30.40")),
            ],
        )
        self.assertEqual(options[1].delivery_time_description, "2 dias úteis")

    def test_builds_carrier_request(self):
        self.calculator.calculate("01310-100", "20040-020", [item(0.5), item(1.5)])

        payload = self.carrier.calculate.call_args.args[0]
        self.assertEqual(payload["from"]["postal_code"], "01310100")
        self.assertEqual(payload["from"]["city"], "São Paulo")
        self.assertEqual(payload["to"]["postal_code"], "20040020")
        self.assertEqual(payload["services"], "1,2,3,17")
        self.assertEqual(
            payload["products"][1],
            {
                "id": "item-1",
                "width": 15.0,
                "height": 10.0,
                "length": 20.0,
                "weight": 1.5,
                "insurance_value": 129.9,
                "quantity": 1,
            },
        )

    def test_carrier_failure_falls_back_to_estimate(self):
        self.carrier.calculate.side_effect = ShippingError("HTTP 401")

        options = self.calculator.calculate("01310-100", "01310-200", [item(1.0)])

        self.assertEqual(
            [o.method for o in options], ["pickup", "standard", "express"]
        )

    def test_malformed_quote_falls_back_to_estimate(self):
        self.carrier.calculate.return_value = [{"id": 3, "name": "SEDEX 10"}]

        options = self.calculator.calculate("01310-100", "20040-020", [item(1.0)])

        self.assertEqual([o.method for o in options], ["standard", "express"])

    def test_invalid_zip_code_never_reaches_carrier(self):
        with self.assertRaises(InvalidZipCode):
            self.calculator.calculate("01310-100", "2004", [item(1.0)])

        self.carrier.calculate.assert_not_called()


class MelhorEnvioClientTests(SimpleTestCase):
    def setUp(self):
        self.session = Mock()
        self.carrier_client = MelhorEnvioClient(
            "me-token", user_agent="Loja (loja@example.com)", timeout=4, session=self.session
        )

    def test_calculate_sends_auth_and_drops_failed_services(self):
        self.session.request.return_value = fake_response(
            200,
            [
                {"id": 1, "name": "PAC", "price": "18.10"},
                {"id": 3, "name": "SEDEX 10", "error": "Serviço indisponível"},
            ],
        )

        quotes = self.carrier_client.calculate({"services": "1,3"})

        self.assertEqual(quotes, [{"id": 1, "name": "PAC", "price": "18.10"}])
        args, kwargs = self.session.request.call_args
        self.assertEqual(
            args, ("POST", "https://melhorenvio.com.br/api/v2/me/shipment/calculate")
        )
        self.assertEqual(kwargs["json"], {"services": "1,3"})
        self.assertEqual(kwargs["timeout"], 4)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer me-token")
        self.assertEqual(kwargs["headers"]["User-Agent"], "Loja (loja@example.com)")

    def test_error_response(self):
        self.session.request.return_value = fake_response(
            401, {"message": "Unauthenticated."}
        )

        with self.assertRaises(ShippingError) as ctx:
            self.carrier_client.calculate({})

        self.assertEqual(ctx.exception.message, "Unauthenticated.")
        self.assertEqual(ctx.exception.carrier_status, 401)

    def test_unexpected_body(self):
        self.session.request.return_value = fake_response(200, {"data": []})

        with self.assertRaises(ShippingError):
            self.carrier_client.calculate({})

    def test_transport_failure(self):
        self.session.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(ShippingError) as ctx:
            self.carrier_client.calculate({})

        self.assertIn("refused", ctx.exception.message)

    def test_access_token_is_required(self):
        with self.assertRaises(ShippingError):
            MelhorEnvioClient("")


class GetShippingCalculatorTests(SimpleTestCase):
    def test_estimates_without_token(self):
        self.assertIsNone(get_shipping_calculator().carrier)

    @override_settings(
        MELHOR_ENVIO_ACCESS_TOKEN="me-token",
        MELHOR_ENVIO_SANDBOX=True,
        MELHOR_ENVIO_TIMEOUT=2.5,
    )
    def test_uses_carrier_when_configured(self):
        calculator = get_shipping_calculator()

        self.assertEqual(calculator.carrier.base_url, MELHOR_ENVIO_SANDBOX_URL)
        self.assertEqual(calculator.carrier.timeout, 2.5)
        self.assertEqual(calculator.markup, Decimal("5.00"))

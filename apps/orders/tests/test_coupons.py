from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.orders.models import Coupon, CouponUsage
from apps.orders.tests.factories import make_coupon, make_order, make_user
from apps.orders.utils import CouponError, CouponValidator, OrderCalculator

VALIDATE_URL = "/api/v1/coupons/validate/"


class OrderCalculatorTests(TestCase):
    def test_percentage_discount(self):
        coupon = Coupon(type="percentage", value=Decimal("15"))

        discount = OrderCalculator.calculate_discount(coupon, Decimal("199.90"))

        self.assertEqual(discount, Decimal("29.99"))

    def test_percentage_discount_is_capped(self):
        coupon = Coupon(
            type="percentage", value=Decimal("50"), max_discount=Decimal("30.00")
        )

        discount = OrderCalculator.calculate_discount(coupon, Decimal("200.00"))

        self.assertEqual(discount, Decimal("30.00"))

    def test_fixed_discount_never_exceeds_subtotal(self):
        coupon = Coupon(type="fixed", value=Decimal("80.00"))

        discount = OrderCalculator.calculate_discount(coupon, Decimal("50.00"))

        self.assertEqual(discount, Decimal("50.00"))

    def test_order_totals(self):
        totals = OrderCalculator.calculate_order_totals(
            Decimal("100.00"),
            shipping_cost=Decimal("20.00"),
            discount_amount=Decimal("10.00"),
        )

        self.assertEqual(totals["total"], Decimal("110.00"))


class CouponValidatorTests(TestCase):
    def setUp(self):
        self.user = make_user()

    def assertRejected(self, message, code="BEMVINDO10", total=Decimal("100.00")):
        with self.assertRaises(CouponError) as ctx:
            CouponValidator.validate(code, total, self.user)
        self.assertEqual(str(ctx.exception), message)

    def test_valid_coupon(self):
        make_coupon(code="BEMVINDO10")

        coupon, discount = CouponValidator.validate(
            " bemvindo10 ", Decimal("100.00"), self.user
        )

        self.assertEqual(coupon.code, "BEMVINDO10")
        self.assertEqual(discount, Decimal("10.00"))

    def test_missing_data(self):
        self.assertRejected("Dados obrigatórios ausentes", code="")
        self.assertRejected("Dados obrigatórios ausentes", total=None)

    def test_unknown_or_inactive(self):
        make_coupon(code="INATIVO", is_active=False)

        self.assertRejected("Cupom não encontrado ou inativo")
        self.assertRejected("Cupom não encontrado ou inativo", code="INATIVO")

    def test_not_started(self):
        make_coupon(start_date=timezone.now() + timedelta(days=1))

        self.assertRejected("Cupom ainda não está ativo")

    def test_expired(self):
        make_coupon(
            start_date=timezone.now() - timedelta(days=10),
            end_date=timezone.now() - timedelta(days=1),
        )

        self.assertRejected("Cupom expirado")

    def test_usage_limit_reached(self):
        make_coupon(usage_limit=5, used_count=5)

        self.assertRejected("Cupom atingiu o limite de uso")

    def test_minimum_order_value(self):
        make_coupon(min_order_value=Decimal("150.00"))

        self.assertRejected("Pedido mínimo de R$ 150.00 para este cupom")

    def test_one_use_per_customer(self):
        coupon = make_coupon()
        CouponValidator.redeem(coupon, self.user, make_order(self.user), Decimal("10"))

        self.assertRejected("Cupom já foi utilizado por este cliente")

    def test_redeem_records_usage(self):
        coupon = make_coupon()
        order = make_order(self.user)

        usage = CouponValidator.redeem(coupon, self.user, order, Decimal("10.00"))

        self.assertEqual(usage.order, order)
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)
        self.assertEqual(CouponUsage.objects.count(), 1)


class CouponEndpointTests(APITestCase):
    def setUp(self):
        self.user = make_user()
        self.client.force_authenticate(self.user)

    def test_valid_coupon(self):
        make_coupon(code="FRETE20", type="fixed", value=Decimal("20.00"))

        resp = self.client.post(
            VALIDATE_URL, {"code": "frete20", "order_total": "120.00"}, format="json"
        )

        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data["valid"])
        self.assertEqual(resp.data["discount_amount"], "20.00")
        self.assertEqual(resp.data["coupon"]["code"], "FRETE20")

    def test_invalid_coupon_answers_200(self):
        resp = self.client.post(
            VALIDATE_URL, {"code": "NAOEXISTE", "order_total": "120.00"}, format="json"
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.data, {"valid": False, "error": "Cupom não encontrado ou inativo"}
        )

    def test_missing_fields(self):
        resp = self.client.post(VALIDATE_URL, {}, format="json")

        self.assertEqual(
            resp.data, {"valid": False, "error": "Dados obrigatórios ausentes"}
        )

    def test_lists_coupons_still_available_to_customer(self):
        make_coupon(code="BEMVINDO10")
        used = make_coupon(code="JAUSADO")
        make_coupon(code="ESGOTADO", usage_limit=1, used_count=1)
        make_coupon(code="VENCIDO", end_date=timezone.now() - timedelta(days=1))
        CouponValidator.redeem(used, self.user, None, Decimal("5.00"))

        resp = self.client.get(VALIDATE_URL)

        self.assertTrue(resp.data["success"])
        self.assertEqual([c["code"] for c in resp.data["coupons"]], ["BEMVINDO10"])

    def test_requires_authentication(self):
        self.client.force_authenticate(None)

        resp = self.client.post(VALIDATE_URL, {"code": "X"}, format="json")

        self.assertEqual(resp.status_code, 401)

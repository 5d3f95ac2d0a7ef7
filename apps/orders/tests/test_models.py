from django.test import TestCase

from apps.orders.models import Order
from apps.orders.tests.factories import make_order, make_product, make_user
from apps.orders.utils import InventoryManager, OrderStatusManager


class OrderModelTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.product = make_product(stock=5)
        self.order = make_order(self.user, lines=[(self.product, 2)])

    def test_order_number_is_generated(self):
        self.assertRegex(self.order.order_number, r"^HP-\d{8}-[A-Z0-9]{5}$")

    def test_item_snapshot(self):
        item = self.order.items.get()

        self.assertEqual(item.product_name, self.product.name)
        self.assertEqual(item.product_sku, self.product.sku)
        self.assertEqual(item.total_price, self.product.retail_price * 2)

    def test_set_payment_status_follows_transition_rules(self):
        self.assertTrue(self.order.set_payment_status("processing"))
        self.assertTrue(self.order.set_payment_status("approved"))
        self.assertFalse(self.order.set_payment_status("pending"))
        self.assertEqual(self.order.payment_status, "approved")
        self.assertTrue(self.order.is_paid)

    def test_commit_stock_runs_once(self):
        self.assertTrue(self.order.commit_stock())
        self.assertFalse(self.order.commit_stock())

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_commit_stock_never_goes_below_zero(self):
        self.product.stock_quantity = 1
        self.product.save()

        self.order.commit_stock()

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)

    def test_cancel_releases_committed_stock(self):
        self.order.commit_stock()

        self.order.cancel("cliente desistiu")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)
        self.assertFalse(self.order.stock_committed)
        self.assertEqual(self.order.status, "cancelled")

    def test_cancel_without_committed_stock_leaves_stock(self):
        self.order.cancel()

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_cancelled_order_cannot_be_cancelled_again(self):
        self.order.cancel()

        with self.assertRaises(ValueError):
            self.order.cancel()

    def test_confirm_only_from_pending(self):
        self.assertTrue(self.order.confirm())
        self.assertFalse(self.order.confirm())
        self.assertTrue(self.order.is_confirmed)

    def test_full_shipping_address(self):
        self.order.shipping_recipient_name = "Maria Silva"
        self.order.shipping_street = "Rua das Flores"
        self.order.shipping_number = "123"
        self.order.shipping_complement = "Apto 4"
        self.order.shipping_neighborhood = "Centro"
        self.order.shipping_city = "São Paulo"
        self.order.shipping_state = "SP"
        self.order.shipping_zip_code = "01001000"

        self.assertEqual(
            self.order.get_full_shipping_address(),
            "Maria Silva\nRua das Flores, 123 - Apto 4\nCentro - São Paulo/SP\n"
            "CEP 01001-000",
        )


class OrderLookupTests(TestCase):
    def setUp(self):
        self.order = make_order(
            make_user(),
            payment_external_id="1319000001",
            payment_details={"preference_id": "123-pref"},
        )

    def test_find_by_payment_reference(self):
        for token in ("1319000001", "123-pref", str(self.order.id)):
            with self.subTest(token=token):
                self.assertEqual(
                    Order.objects.find_by_payment_reference(token), self.order
                )

    def test_find_by_payment_reference_misses(self):
        for token in ("", None, "unknown", "00000000-0000-4000-8000-000000000000"):
            with self.subTest(token=token):
                self.assertIsNone(Order.objects.find_by_payment_reference(token))

    def test_find_for_gateway_payment(self):
        self.assertEqual(
            Order.objects.find_for_gateway_payment("1319000001"), self.order
        )
        self.assertEqual(
            Order.objects.find_for_gateway_payment("2", str(self.order.id)),
            self.order,
        )
        self.assertEqual(
            Order.objects.find_for_gateway_payment("2", f"98765-{self.order.id}"),
            self.order,
        )
        self.assertIsNone(Order.objects.find_for_gateway_payment("2", "abc"))


class InventoryAndStatusTests(TestCase):
    def test_check_availability_reports_shortages(self):
        product = make_product(stock=1)

        shortages = InventoryManager.check_availability(
            [{"product": product, "quantity": 3}]
        )

        self.assertEqual(shortages[0]["requested"], 3)
        self.assertEqual(shortages[0]["available"], 1)

    def test_allowed_transitions(self):
        self.assertTrue(OrderStatusManager.can_transition("pending", "confirmed"))
        self.assertTrue(OrderStatusManager.can_transition("confirmed", "shipped"))
        self.assertFalse(OrderStatusManager.can_transition("delivered", "cancelled"))
        self.assertEqual(OrderStatusManager.get_allowed_transitions("cancelled"), [])

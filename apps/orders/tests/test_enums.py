from django.test import SimpleTestCase

from apps.orders.enums import PaymentStatus


class GatewayStatusMappingTests(SimpleTestCase):
    def test_known_gateway_statuses(self):
        expected = {
            "approved": "approved",
            "pending": "pending",
            "authorized": "authorized",
            "in_process": "processing",
            "in_mediation": "in_mediation",
            "rejected": "rejected",
            "cancelled": "cancelled",
            "refunded": "refunded",
            "charged_back": "charged_back",
        }
        for gateway_status, internal in expected.items():
            with self.subTest(gateway_status=gateway_status):
                self.assertEqual(PaymentStatus.from_gateway(gateway_status), internal)

    def test_unknown_or_missing_status_is_pending(self):
        for value in (None, "", "expired", "APPROVED"):
            with self.subTest(value=value):
                self.assertEqual(PaymentStatus.from_gateway(value), "pending")

    def test_legacy_paid_counts_as_success(self):
        self.assertTrue(PaymentStatus.is_success("paid"))
        self.assertTrue(PaymentStatus.is_success("approved"))
        self.assertFalse(PaymentStatus.is_success("authorized"))


class PaymentStatusTransitionTests(SimpleTestCase):
    def test_forward_progress_is_allowed(self):
        self.assertTrue(PaymentStatus.can_transition("pending", "processing"))
        self.assertTrue(PaymentStatus.can_transition("processing", "approved"))
        self.assertTrue(PaymentStatus.can_transition("authorized", "approved"))
        self.assertTrue(PaymentStatus.can_transition("pending", "rejected"))

    def test_non_terminal_status_cannot_move_back(self):
        self.assertFalse(PaymentStatus.can_transition("processing", "pending"))
        self.assertFalse(PaymentStatus.can_transition("authorized", "in_mediation"))

    def test_terminal_statuses_do_not_move(self):
        self.assertFalse(PaymentStatus.can_transition("approved", "pending"))
        self.assertFalse(PaymentStatus.can_transition("approved", "rejected"))
        self.assertFalse(PaymentStatus.can_transition("rejected", "approved"))
        self.assertFalse(PaymentStatus.can_transition("refunded", "approved"))

    def test_approved_payment_can_be_reversed(self):
        self.assertTrue(PaymentStatus.can_transition("approved", "refunded"))
        self.assertTrue(PaymentStatus.can_transition("paid", "charged_back"))

    def test_same_status_is_not_a_transition(self):
        self.assertFalse(PaymentStatus.can_transition("pending", "pending"))

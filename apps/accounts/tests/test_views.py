from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import CustomerAddress, User
from apps.orders.tests.factories import make_address, make_user

REGISTER_URL = "/api/v1/accounts/register/"
ME_URL = "/api/v1/accounts/me/"
ADDRESSES_URL = "/api/v1/accounts/addresses/"


class RegistrationTests(APITestCase):
    def _payload(self, **overrides):
        payload = {
            "email": "Ana@Example.com",
            "password": "Pix-Segura-2024",
            "password_confirm": "Pix-Segura-2024",
            "first_name": "Ana",
            "last_name": "Souza",
            "cpf_cnpj": "123.456.789-09",
        }
        payload.update(overrides)
        return payload

    def test_register_customer(self):
        resp = self.client.post(REGISTER_URL, self._payload(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email="ana@example.com")
        self.assertEqual(user.cpf_cnpj, "12345678909")
        self.assertEqual(user.user_type, "CUSTOMER")
        self.assertTrue(user.check_password("Pix-Segura-2024"))

    def test_password_confirmation_must_match(self):
        resp = self.client.post(
            REGISTER_URL, self._payload(password_confirm="outra-senha-123"), format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", resp.data["errors"])

    def test_document_must_be_cpf_or_cnpj(self):
        resp = self.client.post(
            REGISTER_URL, self._payload(cpf_cnpj="1234"), format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("cpf_cnpj", resp.data["errors"])

    def test_document_is_unique(self):
        make_user(email="outra@example.com", cpf_cnpj="12345678909")

        resp = self.client.post(REGISTER_URL, self._payload(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class ProfileAndAddressTests(APITestCase):
    def setUp(self):
        self.user = make_user()
        self.client.force_authenticate(self.user)

    def test_me(self):
        resp = self.client.get(ME_URL)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["email"], "maria@example.com")

    def test_create_address_normalizes_zip_code(self):
        resp = self.client.post(
            ADDRESSES_URL,
            {
                "label": "Trabalho",
                "recipient_name": "Maria Silva",
                "street": "Av. Paulista",
                "number": "1000",
                "neighborhood": "Bela Vista",
                "city": "São Paulo",
                "state": "SP",
                "zip_code": "01310-100",
            },
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        address = CustomerAddress.objects.get(id=resp.data["id"])
        self.assertEqual(address.zip_code, "01310100")
        self.assertTrue(address.is_default)

    def test_addresses_of_other_customers_are_hidden(self):
        make_address(make_user(email="joao@example.com"))
        mine = make_address(self.user)

        resp = self.client.get(ADDRESSES_URL)

        self.assertEqual([a["id"] for a in resp.data], [str(mine.id)])

    def test_new_default_address_replaces_previous(self):
        first = make_address(self.user)
        second = make_address(self.user, label="Trabalho", is_default=True)

        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)

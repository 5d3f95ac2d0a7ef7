from rest_framework import status
from rest_framework.test import APITestCase

from apps.orders.tests.factories import make_product, make_user
from apps.products.models import Product

PRODUCTS_URL = "/api/v1/products/"


class ProductCatalogTests(APITestCase):
    def setUp(self):
        self.product = make_product(
            sku="HP-100", name="Camiseta Básica", retail="59.90", wholesale="39.90"
        )
        make_product(sku="HP-101", status=Product.Status.INACTIVE)

    def test_lists_only_available_products(self):
        resp = self.client.get(PRODUCTS_URL)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([p["sku"] for p in resp.data["results"]], ["HP-100"])

    def test_retail_price_for_anonymous_visitors(self):
        resp = self.client.get(PRODUCTS_URL)

        self.assertEqual(resp.data["results"][0]["price"], "59.90")

    def test_wholesale_price_for_wholesale_customers(self):
        self.client.force_authenticate(make_user(customer_type="wholesale"))

        resp = self.client.get(PRODUCTS_URL)

        self.assertEqual(resp.data["results"][0]["price"], "39.90")

    def test_in_stock_filter(self):
        make_product(sku="HP-102", stock=0)

        resp = self.client.get(PRODUCTS_URL, {"in_stock": "true"})

        self.assertEqual(resp.data["count"], 1)


class ProductStockTests(APITestCase):
    def test_reduce_stock_refuses_to_oversell(self):
        product = make_product(stock=2)

        self.assertFalse(product.reduce_stock(3))
        self.assertTrue(product.reduce_stock(2))
        self.assertEqual(product.stock_quantity, 0)

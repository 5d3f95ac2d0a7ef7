# apps/products/serializers.py

from typing import ClassVar

from rest_framework import serializers

from apps.core.serializers import BaseModelSerializer
from apps.products.models import Product


class ProductListSerializer(BaseModelSerializer):
    """
    Lightweight serializer for product listings.
    The price shown depends on whether the caller is a wholesale customer.
    """

    price = serializers.SerializerMethodField()
    is_in_stock = serializers.ReadOnlyField()

    class Meta(BaseModelSerializer.Meta):
        model = Product
        fields: ClassVar[list] = [
            *BaseModelSerializer.Meta.fields,
            "name",
            "slug",
            "sku",
            "brand",
            "category",
            "price",
            "retail_price",
            "stock_quantity",
            "is_in_stock",
        ]

    def get_price(self, obj: Product) -> str:
        request = self.context.get("request")
        user = getattr(request, "user", None)
        return str(obj.price_for(user))


class ProductDetailSerializer(ProductListSerializer):
    """Serializer for the product detail page."""

    class Meta(ProductListSerializer.Meta):
        fields: ClassVar[list] = [
            *ProductListSerializer.Meta.fields,
            "description",
            "weight",
            "status",
        ]

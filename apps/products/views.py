# apps/products/views.py

"""
Public catalog endpoints.
"""

from typing import ClassVar

from django.db.models import QuerySet
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, permissions

from apps.core.views import BaseReadOnlyViewSet
from apps.products.filters import ProductFilter
from apps.products.models import Product
from apps.products.serializers import ProductDetailSerializer, ProductListSerializer


@extend_schema_view(
    list=extend_schema(summary="List products", tags=["Products"]),
    retrieve=extend_schema(summary="Get a product", tags=["Products"]),
)
class ProductViewSet(BaseReadOnlyViewSet):
    """
    Public read-only ViewSet for products.

    Allows anonymous users to browse active products without authentication.
    """

    serializer_class = ProductListSerializer
    permission_classes: ClassVar[list] = [permissions.AllowAny]
    filterset_class = ProductFilter
    filter_backends: ClassVar[list] = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    search_fields: ClassVar[list[str]] = ["name", "brand", "sku", "description"]
    ordering_fields: ClassVar[list[str]] = ["name", "retail_price", "created_at"]
    ordering: ClassVar[list[str]] = ["name"]

    def get_queryset(self) -> QuerySet[Product]:
        return Product.objects.available()

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ProductDetailSerializer
        return ProductListSerializer

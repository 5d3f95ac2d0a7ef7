# apps/products/filters.py

import django_filters

from apps.products.models import Product


class ProductFilter(django_filters.FilterSet):
    """
    FilterSet for the public product listing.
    """

    brand = django_filters.CharFilter(lookup_expr="iexact")
    category = django_filters.CharFilter(lookup_expr="iexact")
    min_price = django_filters.NumberFilter(
        field_name="retail_price",
        lookup_expr="gte",
        help_text="Filter by minimum retail price",
    )
    max_price = django_filters.NumberFilter(
        field_name="retail_price",
        lookup_expr="lte",
        help_text="Filter by maximum retail price",
    )
    in_stock = django_filters.BooleanFilter(
        method="filter_in_stock",
        help_text="Filter products that are in stock",
    )

    class Meta:
        model = Product
        fields = ["brand", "category", "min_price", "max_price", "in_stock"]

    def filter_in_stock(self, queryset, name, value):
        if value is True:
            return queryset.filter(stock_quantity__gt=0)
        if value is False:
            return queryset.filter(stock_quantity=0)
        return queryset

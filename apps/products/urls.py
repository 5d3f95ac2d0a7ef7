# apps/products/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.products.views import ProductViewSet

router = DefaultRouter()
router.register(r"", ProductViewSet, basename="product")

app_name = "products"

urlpatterns = [
    path("", include(router.urls)),
]

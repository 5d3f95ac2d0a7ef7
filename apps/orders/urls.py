# apps/orders/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.orders.views import CouponValidateView, OrderViewSet

router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")

app_name = "orders"

urlpatterns = [
    path("coupons/validate/", CouponValidateView.as_view(), name="coupon-validate"),
    path("", include(router.urls)),
]

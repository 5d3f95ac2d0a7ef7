# apps/shipping/urls.py

from django.urls import path

from apps.shipping.views import ShippingCalculateView

app_name = "shipping"

urlpatterns = [
    path(
        "shipping/calculate/",
        ShippingCalculateView.as_view(),
        name="shipping-calculate",
    ),
]

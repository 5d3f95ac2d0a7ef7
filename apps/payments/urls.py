# apps/payments/urls.py

from django.urls import path

from apps.payments.views import MercadoPagoWebhookView, ProcessPaymentView

app_name = "payments"

urlpatterns = [
    path("payments/process/", ProcessPaymentView.as_view(), name="payment-process"),
    path(
        "webhooks/mercadopago/",
        MercadoPagoWebhookView.as_view(),
        name="mercadopago-webhook",
    ),
]

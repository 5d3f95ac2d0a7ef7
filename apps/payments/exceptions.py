# apps/payments/exceptions.py

"""
Exceptions raised while talking to the payment gateway.

Each carries the HTTP status the API answers with when it reaches a view.
"""

from rest_framework import status


class PaymentError(Exception):
    """Base class for payment failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Error processing payment"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PaymentValidationError(PaymentError):
    """The request is missing data required to charge the customer."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class OrderNotPayable(PaymentValidationError):
    """The order was already paid or cancelled; charging it again is refused."""

    default_message = "Order is not awaiting payment"


class OrderNotFound(PaymentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"


class GatewayError(PaymentError):
    """
    The gateway rejected a call or could not be reached.

    ``gateway_status`` is the HTTP status returned by the gateway, if any,
    and ``payload`` its decoded error body.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment gateway unavailable"

    def __init__(self, message=None, gateway_status=None, payload=None):
        super().__init__(message)
        self.gateway_status = gateway_status
        self.payload = payload or {}


class InvalidWebhookSignature(PaymentError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid webhook signature"

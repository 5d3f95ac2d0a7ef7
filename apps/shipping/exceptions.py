# apps/shipping/exceptions.py

from rest_framework import status


class ShippingError(Exception):
    """A shipping quote could not be produced."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Erro ao calcular frete"

    def __init__(self, message=None, carrier_status=None, payload=None):
        self.message = message or self.default_message
        self.carrier_status = carrier_status
        self.payload = payload
        super().__init__(self.message)


class InvalidZipCode(ShippingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "CEP inválido. Use o formato 12345678"

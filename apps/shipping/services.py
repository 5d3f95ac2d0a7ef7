# apps/shipping/services.py

"""
Shipping quotes for the checkout page.

Quotes come from the Melhor Envio API when an access token is configured.
Without one, or when the API call fails, prices and delivery times are
estimated from the distance between ZIP code regions and the package weight.
A store pickup option is added whenever both ZIP codes are in the same city.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal, InvalidOperation
from typing import List

import requests
import structlog
from django.conf import settings
from requests import RequestException

from apps.core.utils import only_digits, quantize_cents
from apps.shipping.exceptions import InvalidZipCode, ShippingError

logger = structlog.get_logger(__name__)

MELHOR_ENVIO_URL = "https://melhorenvio.com.br/api/v2/me"
MELHOR_ENVIO_SANDBOX_URL = "https://sandbox.melhorenvio.com.br/api/v2/me"
# PAC, SEDEX, SEDEX 10 and PAC Mini
MELHOR_ENVIO_SERVICES = "1,2,3,17"

MINIMUM_BASE_PRICE = Decimal("8.50")


@dataclass
class ShippingOption:
    method: str
    name: str
    price: Decimal
    delivery_time_days: int
    delivery_time_description: str
    carrier: str

    def to_dict(self) -> dict:
        return asdict(self)


def clean_zip_code(value) -> str:
    """
    Digits of a CEP, which must be exactly eight.

    >>> clean_zip_code("01310-100")
    '01310100'
    """
    digits = only_digits(value)
    if len(digits) != 8:
        raise InvalidZipCode()
    return digits


def format_delivery_time(days: int) -> str:
    if days == 0:
        return "Imediato"
    if days == 1:
        return "1 dia útil"
    return f"{days} dias úteis"


def same_city(origin: str, destination: str) -> bool:
    """CEPs sharing the first five digits belong to the same city."""
    return origin[:5] == destination[:5]


def store_pickup_option() -> ShippingOption:
    return ShippingOption(
        method="pickup",
        name="Retirada na loja",
        price=Decimal("0.00"),
        delivery_time_days=0,
        delivery_time_description=format_delivery_time(0),
        carrier="Loja",
    )


class MelhorEnvioClient:
    """
    Wrapper around the Melhor Envio freight quote endpoint.

    Raises ``ShippingError`` on transport failures, non-2xx answers and
    bodies that are not a list of quotes.
    """

    def __init__(
        self,
        access_token,
        sandbox=False,
        user_agent="HPMarcas (contato@hpmarcas.com.br)",
        timeout=5.0,
        session=None,
    ):
        if not access_token:
            raise ShippingError("Missing MELHOR_ENVIO_ACCESS_TOKEN")
        self.access_token = access_token
        self.base_url = MELHOR_ENVIO_SANDBOX_URL if sandbox else MELHOR_ENVIO_URL
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def _request(self, method, path, payload=None):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method, url, json=payload, headers=self._headers(), timeout=self.timeout
            )
        except RequestException as e:
            logger.error(
                "carrier_request_failed", method=method, path=path, error=str(e)
            )
            raise ShippingError(f"Carrier request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text[:800]}

        if 200 <= resp.status_code < 300:
            return data

        message = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("error")
        message = message or f"HTTP {resp.status_code}"
        logger.warning(
            "carrier_error_response",
            method=method,
            path=path,
            carrier_status=resp.status_code,
            message=message,
        )
        raise ShippingError(message, carrier_status=resp.status_code, payload=data)

    def calculate(self, payload: dict) -> list:
        """Quotes for ``payload``, leaving out services that answered with an error."""
        quotes = self._request("POST", "/shipment/calculate", payload=payload)
        if not isinstance(quotes, list):
            raise ShippingError("Unexpected carrier response", payload=quotes)
        return [q for q in quotes if isinstance(q, dict) and not q.get("error")]


class ShippingCalculator:
    """
    Builds the shipping options shown at checkout.

    Every paid option carries ``markup`` on top of the carrier (or estimated)
    price. Options are returned cheapest first.
    """

    def __init__(self, carrier=None, markup=Decimal("5.00"), from_address=None):
        self.carrier = carrier
        self.markup = quantize_cents(markup)
        self.from_address = from_address or {}

    def calculate(self, origin_zip_code, destination_zip_code, items) -> List[ShippingOption]:
        origin = clean_zip_code(origin_zip_code)
        destination = clean_zip_code(destination_zip_code)
        log = logger.bind(origin=origin, destination=destination, items=len(items))

        options = None
        if self.carrier is not None:
            try:
                options = self._carrier_options(origin, destination, items)
            except ShippingError as e:
                log.warning("carrier_quote_failed_using_estimate", error=e.message)
        if options is None:
            options = self._estimated_options(origin, destination, items)

        if same_city(origin, destination):
            options.append(store_pickup_option())

        options.sort(key=lambda option: option.price)
        log.info("shipping_quoted", options=[option.method for option in options])
        return options

    def _carrier_options(self, origin, destination, items) -> List[ShippingOption]:
        payload = {
            "from": {
                "postal_code": origin,
                "address": self.from_address.get("address", ""),
                "number": self.from_address.get("number", ""),
                "district": self.from_address.get("district", ""),
                "city": self.from_address.get("city", ""),
                "state_abbr": self.from_address.get("state_abbr", ""),
                "country_id": self.from_address.get("country_id") or "BR",
            },
            "to": {"postal_code": destination, "country_id": "BR"},
            "products": [
                {
                    "id": f"item-{index}",
                    "width": item["width"],
                    "height": item["height"],
                    "length": item["length"],
                    "weight": item["weight"],
                    "insurance_value": item["value"],
                    "quantity": 1,
                }
                for index, item in enumerate(items)
            ],
            "services": MELHOR_ENVIO_SERVICES,
        }

        options = []
        for quote in self.carrier.calculate(payload):
            company = (quote.get("company") or {}).get("name") or ""
            try:
                price = quantize_cents(Decimal(str(quote["price"])))
                days = int(quote.get("delivery_time") or 0)
            except (KeyError, InvalidOperation, TypeError, ValueError) as e:
                raise ShippingError("Unexpected carrier quote", payload=quote) from e
            options.append(
                ShippingOption(
                    method=f"service-{quote.get('id')}",
                    name=f"{company} {quote.get('name', '')}".strip(),
                    price=price + self.markup,
                    delivery_time_days=days,
                    delivery_time_description=format_delivery_time(days),
                    carrier=company,
                )
            )
        return options

    def _estimated_options(self, origin, destination, items) -> List[ShippingOption]:
        weight = sum((Decimal(str(item["weight"])) for item in items), Decimal("0"))
        # CEP regions are the tens of the first two digits
        distance = abs(int(origin[:2]) // 10 - int(destination[:2]) // 10)

        base_price = max(MINIMUM_BASE_PRICE, weight * Decimal("0.5"))
        distance_multiplier = 1 + distance * Decimal("0.15")
        weight_multiplier = 1 + (weight - 5) * Decimal("0.1") if weight > 5 else 1

        standard_price = quantize_cents(base_price * distance_multiplier * weight_multiplier)
        standard_days = max(3, min(15, 3 + distance + int(weight // 2)))
        express_price = quantize_cents(standard_price * Decimal("1.8"))
        express_days = max(1, standard_days // 2)

        return [
            ShippingOption(
                method="standard",
                name="Correios PAC",
                price=standard_price + self.markup,
                delivery_time_days=standard_days,
                delivery_time_description=format_delivery_time(standard_days),
                carrier="Correios",
            ),
            ShippingOption(
                method="express",
                name="Correios SEDEX",
                price=express_price + self.markup,
                delivery_time_days=express_days,
                delivery_time_description=format_delivery_time(express_days),
                carrier="Correios",
            ),
        ]


def carrier_configured() -> bool:
    return bool(settings.MELHOR_ENVIO_ACCESS_TOKEN)


def get_shipping_calculator() -> ShippingCalculator:
    """Build the calculator from settings, with the carrier client when configured."""
    carrier = None
    if carrier_configured():
        carrier = MelhorEnvioClient(
            access_token=settings.MELHOR_ENVIO_ACCESS_TOKEN,
            sandbox=settings.MELHOR_ENVIO_SANDBOX,
            user_agent=settings.MELHOR_ENVIO_USER_AGENT,
            timeout=settings.MELHOR_ENVIO_TIMEOUT,
        )
    return ShippingCalculator(
        carrier=carrier,
        markup=settings.SHIPPING_MARKUP,
        from_address=settings.SHIPPING_FROM_ADDRESS,
    )

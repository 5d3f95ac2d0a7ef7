# apps/core/utils.py

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

import structlog
from django.conf import settings
from djmoney.money import Money

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def clean_price_value(price: Union[str, Money, Decimal, float, int, None]) -> Decimal:
    """
    Clean price value and convert to Decimal.

    Accepts Brazilian formatted strings ("R$ 1.234,56") as well as plain
    numbers ("1234.56").

    Raises:
        ValueError: If price cannot be converted to Decimal
    """
    if price is None:
        return Decimal("0.00")

    if isinstance(price, Money):
        return price.amount

    if isinstance(price, Decimal):
        return price

    if isinstance(price, (float, int)):
        return Decimal(str(price))

    if isinstance(price, str):
        price_str = price.strip()
        if not price_str:
            return Decimal("0.00")

        # Strip currency symbols and whitespace
        clean_str = re.sub(r"[^\d.,-]", "", price_str)
        if not clean_str or clean_str in {".", ",", "-"}:
            return Decimal("0.00")

        # A comma after the last dot is the decimal separator (pt-BR)
        if "," in clean_str and clean_str.rfind(",") > clean_str.rfind("."):
            clean_str = clean_str.replace(".", "").replace(",", ".")
        else:
            clean_str = clean_str.replace(",", "")

        try:
            return Decimal(clean_str)
        except InvalidOperation as e:
            logger.warning("price_value_unparseable", value=price_str)
            raise ValueError(f"Could not convert {price!r} to Decimal") from e

    if hasattr(price, "amount"):
        return clean_price_value(price.amount)

    raise ValueError(f"Could not convert {type(price).__name__} to Decimal")


def create_money_from_price(
    price: Union[str, Money, Decimal, float, int, None], currency: str = None
) -> Money:
    """
    Create a Money object from various price formats.

    Args:
        price: Price value in various formats
        currency: Currency code (default: settings.DEFAULT_CURRENCY)
    """
    currency = currency or settings.DEFAULT_CURRENCY
    if isinstance(price, Money):
        if str(price.currency) == currency:
            return price
        return Money(price.amount, currency)

    return Money(clean_price_value(price), currency)


def quantize_cents(value: Union[Decimal, float, int, str]) -> Decimal:
    """Round a monetary value to two decimal places."""
    return clean_price_value(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def cents_to_reais(cents: Union[int, float, str], minimum_cents: int = 0) -> float:
    """
    Convert an integer amount in cents to reais, enforcing a minimum.

    >>> cents_to_reais(12990)
    129.9
    >>> cents_to_reais(100, minimum_cents=500)
    5.0
    """
    rounded = int(Decimal(str(cents)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(rounded, minimum_cents) / 100


def only_digits(value) -> str:
    """Return only the digits of a document or phone number."""
    return re.sub(r"\D", "", str(value or ""))


def get_client_ip(request):
    """Get the client's IP address from a Django/DRF request."""
    if request is None:
        return None
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")

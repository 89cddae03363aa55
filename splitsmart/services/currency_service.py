"""Currency metadata, amount rules and exchange rates.

Single source of truth for how monetary values are parsed, checked, compared
and displayed. Money is handled as Decimal; floats are converted through
str() so that the digits the user typed are the digits that get checked.

Example:
    >>> validate_amount(100.001, "USD").kind
    <ErrorKind.TOO_MANY_DECIMALS: 'TooManyDecimals'>
    >>> format_amount(Decimal("1234.5"), "USD")
    '$1,234.50'
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional, Tuple

from babel.numbers import format_currency as babel_format_currency
from babel.numbers import get_currency_name as babel_get_currency_name
from babel.numbers import get_currency_symbol as babel_get_currency_symbol

from splitsmart.services.errors import CurrencyError, ErrorKind, Result

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en_US"

# Absolute tolerance for "do two monetary totals match"
EPSILON = Decimal("0.01")

MAX_AMOUNT = Decimal("1000000000")

SUPPORTED_CURRENCY_CODES = (
    "USD",
    "EUR",
    "JPY",
    "GBP",
    "AUD",
    "CAD",
    "CHF",
    "CNY",
    "INR",
    "BRL",
    "VND",
    "KRW",
    "IDR",
)

# Currencies without a fractional sub-unit in everyday use
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW", "VND", "IDR"})

# Static rates relative to USD
MOCK_RATES: dict[str, Decimal] = {
    "USD": Decimal("1.0"),
    "EUR": Decimal("0.92"),
    "JPY": Decimal("157.0"),
    "GBP": Decimal("0.78"),
    "AUD": Decimal("1.5"),
    "CAD": Decimal("1.37"),
    "CHF": Decimal("0.89"),
    "CNY": Decimal("7.25"),
    "INR": Decimal("83.5"),
    "BRL": Decimal("5.4"),
    "VND": Decimal("25000"),
}


@dataclass(frozen=True)
class Currency:
    """Display metadata for a supported currency."""

    code: str
    symbol: str
    name: str


def _build_currency_table(codes: Iterable[str], locale: str) -> list[Currency]:
    return [
        Currency(
            code=code,
            symbol=babel_get_currency_symbol(code, locale=locale),
            name=babel_get_currency_name(code, locale=locale),
        )
        for code in codes
    ]


# Module-level table (computed once at import)
CURRENCIES: list[Currency] = _build_currency_table(SUPPORTED_CURRENCY_CODES, DEFAULT_LOCALE)


def is_zero_decimal(currency_code: str) -> bool:
    """Return True if the currency has no fractional sub-unit."""
    return (currency_code or "").upper() in ZERO_DECIMAL_CURRENCIES


def is_supported_currency(currency_code: str) -> bool:
    return (currency_code or "").upper() in SUPPORTED_CURRENCY_CODES


def get_currency(currency_code: str) -> Optional[Currency]:
    code = (currency_code or "").upper()
    for currency in CURRENCIES:
        if currency.code == code:
            return currency
    return None


def get_currency_symbol(currency_code: str) -> str:
    """Get display symbol for a currency.

    Args:
        currency_code: ISO 4217 code

    Returns:
        Symbol from the currency table, or the code itself when unknown
    """
    currency = get_currency(currency_code)
    return currency.symbol if currency else currency_code


def to_decimal(value) -> Decimal:
    """Convert user or stored input to Decimal.

    Args:
        value: int, float, str or Decimal

    Returns:
        Finite Decimal

    Raises:
        CurrencyError: INVALID_AMOUNT if the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise CurrencyError(ErrorKind.INVALID_AMOUNT, "Please enter a valid number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # str() keeps the shortest repr, so 100.001 stays 100.001
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise CurrencyError(ErrorKind.INVALID_AMOUNT, "Please enter a valid number") from e
    if not result.is_finite():
        raise CurrencyError(ErrorKind.INVALID_AMOUNT, "Please enter a valid number")
    return result


def decimal_places(value: Decimal) -> int:
    """Number of significant digits after the decimal point."""
    exponent = value.normalize().as_tuple().exponent
    return -exponent if exponent < 0 else 0


def check_amount_bounds(value) -> Decimal:
    """Check an amount is a number in (0, MAX_AMOUNT], whatever its currency.

    Raises:
        CurrencyError: INVALID_AMOUNT or AMOUNT_TOO_LARGE
    """
    amount = to_decimal(value)
    if amount <= 0:
        raise CurrencyError(ErrorKind.INVALID_AMOUNT, "Amount must be greater than zero")
    if amount > MAX_AMOUNT:
        raise CurrencyError(
            ErrorKind.AMOUNT_TOO_LARGE, "Amount is too large (maximum: 1 billion)"
        )
    return amount


def check_amount(value, currency_code: str) -> Decimal:
    """Apply amount rules, raising on the first violation.

    Raises:
        CurrencyError: INVALID_AMOUNT, AMOUNT_TOO_LARGE or TOO_MANY_DECIMALS
    """
    amount = check_amount_bounds(value)
    if is_zero_decimal(currency_code):
        if amount != amount.to_integral_value():
            raise CurrencyError(
                ErrorKind.TOO_MANY_DECIMALS,
                f"{currency_code.upper()} does not support decimal places",
            )
    elif decimal_places(amount) > 2:
        raise CurrencyError(
            ErrorKind.TOO_MANY_DECIMALS, "Amount cannot have more than 2 decimal places"
        )
    return amount


def validate_amount(value, currency_code: str) -> Result[Decimal]:
    """Validate a monetary amount for a currency.

    Args:
        value: Amount as entered (int, float, str or Decimal)
        currency_code: ISO 4217 code deciding the decimal rule

    Returns:
        Result with the amount as Decimal, or the first violated rule
    """
    try:
        return Result.success(check_amount(value, currency_code))
    except CurrencyError as e:
        logger.debug(f"Rejected amount {value!r} for {currency_code}: {e.kind.value}")
        return Result.failure(e)


def amounts_match(first, second) -> bool:
    """Compare two monetary totals within EPSILON."""
    return abs(to_decimal(first) - to_decimal(second)) <= EPSILON


def format_amount(amount, currency_code: str, locale: str = DEFAULT_LOCALE) -> str:
    """Format a monetary amount for display.

    Zero-decimal currencies are shown without fraction digits.

    Example:
        >>> format_amount(1500, "JPY")
        '¥1,500'
    """
    value = to_decimal(amount)
    if is_zero_decimal(currency_code):
        return babel_format_currency(
            value, currency_code, format="¤#,##0", locale=locale, currency_digits=False
        )
    return babel_format_currency(value, currency_code, locale=locale)


def format_plain(amount) -> str:
    """Two-decimal rendering used in user-facing error messages."""
    return f"{to_decimal(amount):.2f}"


class ExchangeRateService:
    """Exchange-rate lookup backed by a static rate table.

    Rates are expressed relative to a common base (USD), so any pair of
    known currencies can be converted.
    """

    def __init__(self, rates: Optional[Mapping[str, Decimal]] = None):
        """Initialize with a rate table.

        Args:
            rates: Mapping of currency code to units per base unit
                (defaults to MOCK_RATES)
        """
        self.rates = {code: to_decimal(rate) for code, rate in (rates or MOCK_RATES).items()}

    def get_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        """Get conversion rate from one currency to another.

        Args:
            from_currency: Currency the amount is in
            to_currency: Currency to convert into

        Returns:
            Rate as Decimal, or None if either currency is unknown
        """
        from_rate = self.rates.get((from_currency or "").upper())
        to_rate = self.rates.get((to_currency or "").upper())
        if not from_rate or not to_rate:
            logger.warning(f"No exchange rate for {from_currency} -> {to_currency}")
            return None
        return to_rate / from_rate

    def convert(
        self, amount, from_currency: str, to_currency: str
    ) -> Tuple[Decimal, Optional[Decimal]]:
        """Convert an amount into another currency.

        Args:
            amount: Amount in from_currency
            from_currency: Source currency
            to_currency: Target currency

        Returns:
            Tuple of (converted amount, rate used). The rate is None when both
            currencies are the same.

        Raises:
            CurrencyError: EXCHANGE_RATE_UNAVAILABLE if no rate is known
        """
        value = to_decimal(amount)
        if (from_currency or "").upper() == (to_currency or "").upper():
            return value, None
        rate = self.get_rate(from_currency, to_currency)
        if rate is None:
            raise CurrencyError(
                ErrorKind.EXCHANGE_RATE_UNAVAILABLE,
                f"Could not fetch rate for {from_currency}.",
            )
        converted = value * rate
        logger.debug(f"Converted {value} {from_currency} -> {converted} {to_currency} @ {rate}")
        return converted, rate


__all__ = [
    "EPSILON",
    "MAX_AMOUNT",
    "CURRENCIES",
    "ZERO_DECIMAL_CURRENCIES",
    "SUPPORTED_CURRENCY_CODES",
    "MOCK_RATES",
    "Currency",
    "is_zero_decimal",
    "is_supported_currency",
    "get_currency",
    "get_currency_symbol",
    "to_decimal",
    "decimal_places",
    "check_amount_bounds",
    "check_amount",
    "validate_amount",
    "amounts_match",
    "format_amount",
    "format_plain",
    "ExchangeRateService",
]

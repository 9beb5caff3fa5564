"""Currency -- ISO 4217 registry and precision-derived rounding."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str
    symbol: str
    thousands_separator: str = ","
    decimal_separator: str = "."


class CurrencyRegistry:
    """Registry of the currencies documents may be denominated in.

    Every installation runs in a single currency; the registry only exists
    so that precision and display conventions are derived, never hardcoded.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "BRL": CurrencyInfo("BRL", 2, "Brazilian Real", "R$", ".", ","),
        "USD": CurrencyInfo("USD", 2, "US Dollar", "$"),
        "EUR": CurrencyInfo("EUR", 2, "Euro", "€", ".", ","),
        "ARS": CurrencyInfo("ARS", 2, "Argentine Peso", "$", ".", ","),
        "CLP": CurrencyInfo("CLP", 0, "Chilean Peso", "$", ".", ","),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen", "¥"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check whether the code is registered."""
        if not code:
            return False
        return code.upper() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information, or None for unknown codes."""
        if not code:
            return None
        return cls._CURRENCIES.get(code.upper())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for the currency (2 when unknown)."""
        info = cls.get_info(code)
        return info.decimal_places if info else 2

    @classmethod
    def validate(cls, code: str) -> str:
        """
        Validate and normalize a currency code.

        Raises:
            ValueError: If the code is not registered.
        """
        normalized = code.upper().strip() if code else ""
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Unsupported currency code: {code}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Mapping, Optional, Set

from finhealth.entities import coerce_amount

logger = logging.getLogger(__name__)

DEFAULT_RATES: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "INR": Decimal("83.10"),
    "JPY": Decimal("147.50"),
    "CAD": Decimal("1.34"),
    "AUD": Decimal("1.52"),
    "NZD": Decimal("1.64"),
    "CHF": Decimal("0.88"),
    "SEK": Decimal("10.45"),
}

Converter = Callable[[Decimal, str, str], Decimal]


@dataclass(frozen=True)
class StaticRateProvider:
    """Deterministic, in-memory FX rates.

    Rates are expressed as target currency per 1 USD.
    """

    rates: Mapping[str, Decimal] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", dict(self.rates or DEFAULT_RATES))

    def get_rate(self, currency: str) -> Decimal:
        normalized = normalize_currency(currency)
        try:
            return self.rates[normalized]
        except KeyError as exc:
            raise ValueError(f"Unsupported currency: {normalized}") from exc


def convert_amount(
    amount: Decimal | int | float | str,
    source_currency: str,
    target_currency: str,
    rate_provider: StaticRateProvider | None = None,
) -> Decimal:
    """Convert a monetary amount into the reporting currency."""
    provider = rate_provider or StaticRateProvider()
    normalized_source = normalize_currency(source_currency)
    normalized_target = normalize_currency(target_currency)
    coerced_amount = coerce_amount(amount)

    if normalized_source == normalized_target:
        return coerced_amount

    source_rate = provider.get_rate(normalized_source)
    target_rate = provider.get_rate(normalized_target)
    return coerced_amount / source_rate * target_rate


def build_converter(rate_provider: StaticRateProvider | None = None) -> Converter:
    """Bind a rate provider into the ``convert(amount, from, to)`` shape the engine consumes."""
    provider = rate_provider or StaticRateProvider()

    def convert(amount: Decimal, source_currency: str, target_currency: str) -> Decimal:
        return convert_amount(amount, source_currency, target_currency, rate_provider=provider)

    return convert


def identity_converter(amount: Decimal, source_currency: str, target_currency: str) -> Decimal:
    return coerce_amount(amount)


class ReportingConversion:
    """Converts entries into one reporting currency, skipping those it cannot.

    An entry whose currency the converter rejects yields ``None``; its
    currency is recorded in ``skipped_currencies`` and the caller leaves the
    entry out of its totals.
    """

    def __init__(self, convert: Converter, reporting_currency: str) -> None:
        self.convert = convert
        self.reporting_currency = reporting_currency
        self._skipped: Set[str] = set()

    def __call__(self, amount, currency: Optional[str]) -> Optional[Decimal]:
        source = currency or self.reporting_currency
        try:
            return self.convert(coerce_amount(amount), source, self.reporting_currency)
        except ValueError as exc:
            if source not in self._skipped:
                logger.warning(
                    "Leaving %s amounts out of %s totals: %s",
                    source,
                    self.reporting_currency,
                    exc,
                )
            self._skipped.add(source)
            return None

    @property
    def skipped_currencies(self) -> List[str]:
        return sorted(self._skipped)


def normalize_currency(value: str) -> str:
    normalized = value.strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValueError("Currency must be a 3-letter ISO 4217 code.")
    return normalized

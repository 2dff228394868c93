"""Static currency conversion for displayed prices (stored prices are USD)."""

from __future__ import annotations

from typing import Dict

BASE_CURRENCY = "USD"

# Static table, refreshed by hand; not live market data.
EXCHANGE_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "CAD": 1.36,
    "AUD": 1.52,
    "JPY": 156.0,
    "INR": 83.3,
    "BRL": 5.08,
    "ZAR": 18.5,
    "NZD": 1.63,
    "CHF": 0.90,
    "SGD": 1.35,
    "HKD": 7.8,
    "SEK": 10.8,
    "NOK": 10.8,
    "DKK": 6.8,
    "PLN": 3.9,
    "MXN": 16.6,
    "AED": 3.67,
    "SAR": 3.75,
    "RUB": 89.0,
    "TRY": 32.2,
    "THB": 36.6,
    "IDR": 16200,
    "MYR": 4.7,
    "PHP": 58.5,
    "VND": 25400,
    "KRW": 1360,
    "EGP": 47.7,
}

SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "KRW": "₩",
}


def rate_for(currency: str) -> float:
    try:
        return EXCHANGE_RATES[currency]
    except KeyError:
        raise ValueError(f"Unsupported currency: {currency}") from None


def convert(price: float, currency: str = BASE_CURRENCY) -> float:
    return price * rate_for(currency)


def convert_between(amount: float, source: str, target: str) -> float:
    return amount / rate_for(source) * rate_for(target)


def format_price(price: float | None, currency: str = BASE_CURRENCY) -> str:
    if price is None:
        return "Price on request"
    value = convert(price, currency)
    symbol = SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{value:,.0f}"
    return f"{currency} {value:,.0f}"


__all__ = ["BASE_CURRENCY", "EXCHANGE_RATES", "convert", "convert_between", "format_price", "rate_for"]

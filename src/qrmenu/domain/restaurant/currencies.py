from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


CURRENCIES: dict[str, Currency] = {
    "USD": Currency("USD", "$", "US Dollar"),
    "EUR": Currency("EUR", "€", "Euro"),
    "JPY": Currency("JPY", "¥", "Japanese Yen"),
    "GBP": Currency("GBP", "£", "British Pound"),
    "INR": Currency("INR", "₹", "Indian Rupee"),
    "AUD": Currency("AUD", "A$", "Australian Dollar"),
    "CAD": Currency("CAD", "C$", "Canadian Dollar"),
    "CHF": Currency("CHF", "Fr", "Swiss Franc"),
    "CNY": Currency("CNY", "¥", "Chinese Yuan"),
    "SEK": Currency("SEK", "kr", "Swedish Krona"),
    "NZD": Currency("NZD", "NZ$", "New Zealand Dollar"),
    "BRL": Currency("BRL", "R$", "Brazilian Real"),
    "RUB": Currency("RUB", "₽", "Russian Ruble"),
}

DEFAULT_CURRENCY = CURRENCIES["USD"]


def currency_for(code: str | None) -> Currency:
    if not code:
        return DEFAULT_CURRENCY
    return CURRENCIES.get(code.upper(), DEFAULT_CURRENCY)


def symbol_for(code: str) -> str:
    currency = CURRENCIES.get(code.upper())
    return currency.symbol if currency is not None else code

"""Domain constants for the exchange rate job."""

from typing import Tuple

DEFAULT_SUPPORTED_CURRENCIES: Tuple[str, ...] = (
    "EUR",
    "GBP",
    "CHF",
    "SEK",
    "NOK",
    "DKK",
    "PLN",
    "CZK",
    "HUF",
    "RON",
    "UAH",
    "BYN",
    "RUB",
)

# Singleton record identifying key
SUPPORTED_CURRENCIES_KEY = "SupportedCurrencies"
SUPPORTED_CURRENCIES_SORT_KEY = "-"

DATE_FORMAT = "%Y-%m-%d"

# printcart/domain/stores.py
import re

#vendor's legacy numeric store codes
VENDOR_STORE_CODES = {"US": 9, "CA": 6}

_CAD_ALIASES = {"CAD", "CA", "CANADA", "EN_CA", "6"}
_USD_ALIASES = {"USD", "US", "USA", "EN_US", "9"}


def _clean(value) -> str:
    return re.sub(r"[^A-Z0-9_]", "", str(value or "").strip().upper())


def store_to_currency(value) -> str:
    """Accepts store (US/CA), currency (USD/CAD), locale (en_us/en_ca) or a vendor numeric code."""
    v = _clean(value)
    if v in _CAD_ALIASES or v.endswith("_CA"):
        return "CAD"
    if v in _USD_ALIASES or v.endswith("_US"):
        return "USD"
    return "USD"


def currency_to_store(value) -> str:
    return "CA" if store_to_currency(value) == "CAD" else "US"


def vendor_store_code(store) -> int:
    return VENDOR_STORE_CODES[currency_to_store(store)]

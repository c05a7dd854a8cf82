# printcart/services/vendor_pricing.py
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

import requests
from redis.exceptions import RedisError

from printcart.domain.errors import InvalidVendorPriceError
from printcart.domain.schemas import VendorCost
from printcart.domain.stores import currency_to_store, vendor_store_code
from printcart.utils.retry import http_retry
from printcart.utils.settings import (
    VENDOR_API_URL,
    VENDOR_API_TOKEN,
    VENDOR_TIMEOUT_SECONDS,
    VENDOR_PRICE_CACHE_TTL_SECONDS,
)
from printcart.utils.logging import get_logger

logger = get_logger(__name__)

_STRICT_DOLLARS = re.compile(r"^\d+\.\d{2}$")
_ONE = Decimal(1)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str, Decimal)):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        d = Decimal(text)
    except InvalidOperation:
        return None
    if not d.is_finite() or d < 0:
        return None
    return d


def cents_field(value: Any) -> Optional[int]:
    d = _decimal(value)
    if d is None:
        return None
    return int(d.quantize(_ONE, rounding=ROUND_HALF_UP))


def dollars_field(value: Any) -> Optional[int]:
    """
    "38.95" -> 3895 exactly. Strict two-decimal strings are split on the dot
    and never pass through a float; anything else goes through Decimal.
    """
    if isinstance(value, str) and _STRICT_DOLLARS.match(value.strip()):
        whole, frac = value.strip().split(".")
        return int(whole) * 100 + int(frac)
    d = _decimal(value)
    if d is None:
        return None
    return int((d * 100).quantize(_ONE, rounding=ROUND_HALF_UP))


#(path, "line" | "unit", parser) in priority order: cents before dollars, line before unit
_FIELDS: List[Tuple[Tuple[str, ...], str, Callable[[Any], Optional[int]]]] = [
    (("linePriceCents",), "line", cents_field),
    (("response", "linePriceCents"), "line", cents_field),
    (("lineCostCents",), "line", cents_field),
    (("line_cost",), "line", cents_field),
    (("unitPriceCents",), "unit", cents_field),
    (("response", "unitPriceCents"), "unit", cents_field),
    (("unitCostCents",), "unit", cents_field),
    (("unit_cost",), "unit", cents_field),
    (("linePrice",), "line", dollars_field),
    (("response", "linePrice"), "line", dollars_field),
    (("price",), "line", dollars_field),
    (("response", "price"), "line", dollars_field),
    (("unitPrice",), "unit", dollars_field),
    (("response", "unitPrice"), "unit", dollars_field),
]


def _lookup(raw: Mapping, path: Tuple[str, ...]) -> Any:
    node: Any = raw
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _cost(kind: str, cents: int, quantity: int, source: str) -> VendorCost:
    if kind == "line":
        unit = int((Decimal(cents) / quantity).quantize(_ONE, rounding=ROUND_HALF_UP))
        return VendorCost(unit_cost_cents=unit, line_cost_cents=cents, source=source)
    return VendorCost(unit_cost_cents=cents, line_cost_cents=cents * quantity, source=source)


def parse_vendor_price_response(raw: Any, quantity: int) -> VendorCost:
    """
    Normalize the vendor's price payload into trade cost cents.

    The first positive value in priority order wins. A field that is present
    and explicitly zero counts as a zero-cost price only when no field carries
    a positive value. Raises InvalidVendorPriceError when nothing is usable.
    """
    if quantity < 1:
        raise ValueError("quantity must be >= 1")
    if not isinstance(raw, Mapping):
        raise InvalidVendorPriceError(f"Vendor price response is not an object: {type(raw).__name__}")

    explicit_zero: Optional[VendorCost] = None

    for path, kind, parse in _FIELDS:
        cents = parse(_lookup(raw, path))
        if cents is None:
            continue
        source = ".".join(path)
        if cents > 0:
            return _cost(kind, cents, quantity, source)
        if explicit_zero is None:
            explicit_zero = VendorCost(unit_cost_cents=0, line_cost_cents=0, source=source)

    if explicit_zero is not None:
        return explicit_zero

    raise InvalidVendorPriceError(f"No usable cost field in vendor response (keys: {sorted(raw.keys())})")


def price_cache_key(product_id: int, option_ids: Iterable[int], quantity: int, store: str) -> str:
    #option order does not change the price
    opts = ",".join(str(o) for o in sorted(int(o) for o in option_ids))
    return f"{currency_to_store(store)}:{product_id}:{quantity}:{opts}"


class VendorPricingClient:
    """
    Trade-price lookup against the vendor API.
    Retries transient HTTP errors; caches raw responses when a cache is given.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        cache=None,
        cache_ttl: int | None = None,
    ):
        self.base_url = (base_url or VENDOR_API_URL).rstrip("/")
        self.token = token if token is not None else VENDOR_API_TOKEN
        self.timeout = timeout or VENDOR_TIMEOUT_SECONDS
        self.cache = cache
        self.cache_ttl = cache_ttl or VENDOR_PRICE_CACHE_TTL_SECONDS

    def fetch_trade_price(
        self,
        product_id: int,
        option_ids: List[int],
        quantity: int,
        store: str,
    ) -> dict:
        key = price_cache_key(product_id, option_ids, quantity, store)

        if self.cache is not None:
            try:
                cached = self.cache.get(key)
            except RedisError as e:
                logger.warning(f"Price cache read failed for {key}: {e}")
                cached = None
            if cached is not None:
                logger.info(f"Vendor price cache hit {key}")
                return cached

        raw = self._post_price(product_id, vendor_store_code(store), option_ids)

        if self.cache is not None:
            try:
                self.cache.put(key, raw, self.cache_ttl)
            except RedisError as e:
                logger.warning(f"Price cache write failed for {key}: {e}")

        return raw

    def _headers(self) -> dict:
        headers = {"content-type": "application/json"}
        token = (self.token or "").strip()
        if token:
            headers["authorization"] = token if token.lower().startswith("bearer ") else f"Bearer {token}"
        return headers

    @http_retry()
    def _post_price(self, product_id: int, store_code: int, option_ids: List[int]) -> dict:
        url = f"{self.base_url}/price/{product_id}/{store_code}"
        logger.info(f"VendorPricingClient POST {url}")

        resp = requests.post(
            url,
            json={"productOptions": [str(o) for o in option_ids]},
            headers=self._headers(),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

# printcart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime

Store = Literal["US", "CA"]
Currency = Literal["USD", "CAD"]


# =====================================================
# pricing core values
# =====================================================
class PriceTier(BaseModel):
    """Markup rule for a quantity range; max_qty None means open ended."""

    scope: Literal["global", "category", "product"] = "global"
    scope_id: Optional[int] = None
    store: Store
    min_qty: int = Field(..., ge=1)
    max_qty: Optional[int] = None
    mult: Decimal = Field(..., gt=0)
    floor_pct: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class MarkupResult(BaseModel):
    unit_sell_cents: int
    line_sell_cents: int

    model_config = ConfigDict(frozen=True)


class VendorCost(BaseModel):
    """Normalized vendor trade cost; source names the response field it came from."""

    unit_cost_cents: int
    line_cost_cents: int
    source: str

    model_config = ConfigDict(frozen=True)


class LinePrice(BaseModel):
    currency: Currency
    quantity: int
    unit_sell_cents: int
    line_sell_cents: int
    unit_cost_cents: int
    line_cost_cents: int


class CartTotals(BaseModel):
    cart_id: int
    sid: str
    user_id: Optional[str] = None
    currency: Currency
    subtotal_cents: int
    shipping_cents: int
    tax_cents: int
    credits_cents: int
    total_cents: int

    model_config = ConfigDict(frozen=True)


class FreeCheckout(BaseModel):
    kind: Literal["free"] = "free"
    order_id: int
    totals: CartTotals


class PaidCheckout(BaseModel):
    kind: Literal["paid"] = "paid"
    totals: CartTotals


class PaymentIntentHandle(BaseModel):
    payment_intent_id: str
    client_secret: str
    amount_cents: int
    currency: Currency


# =====================================================
# request / response
# =====================================================
class PriceIn(BaseModel):
    """Schema for a price quote request."""

    product_id: int = Field(..., gt=0)
    store: Store = "US"
    quantity: int = Field(..., gt=0)
    option_ids: List[int] = Field(..., min_length=1)
    category_id: Optional[int] = None


class CreateCartIn(BaseModel):
    """Schema for opening (or reusing) the cart of a session."""

    sid: str = Field(..., min_length=1)
    currency: Currency = "USD"
    user_id: Optional[str] = None


class LineIn(BaseModel):
    """Schema for adding a product line to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    option_ids: List[int] = Field(..., min_length=1)
    category_id: Optional[int] = None


class SelectedShipping(BaseModel):
    """Shipping choice as the UI sends it; cost is in dollars."""

    carrier: str = Field(..., min_length=1)
    method: str = Field(..., min_length=1)
    cost: Decimal = Field(..., ge=0)
    days: Optional[int] = Field(None, ge=0)
    currency: Currency = "USD"
    country: Store = "US"
    state: str = ""
    zip: str = ""


class RedeemIn(BaseModel):
    """Loyalty points to redeem into cart credit (min 100, multiples of 100)."""

    points: int = Field(..., gt=0)
    note: Optional[str] = Field(None, max_length=500)


class CartLineOut(BaseModel):
    id: int
    product_id: int
    option_ids: List[int]
    quantity: int
    unit_price_cents: int
    line_total_cents: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    cart_id: int
    sid: str
    status: str
    currency: Currency
    selected_shipping: Optional[dict] = None
    lines: List[CartLineOut]
    totals: Optional[CartTotals] = None


class RedeemOut(BaseModel):
    cart_id: int
    redeemed_points: int
    applied_cents: int
    points_balance: int
    totals: CartTotals


class FinalizeIn(BaseModel):
    """Schema for finalizing checkout; expected_total_cents is the total the client displayed."""

    sid: str = Field(..., min_length=1)
    expected_total_cents: Optional[int] = Field(None, ge=0)
    user_id: Optional[str] = None


class CheckoutOut(BaseModel):
    kind: Literal["free", "paid"]
    totals: CartTotals
    order_id: Optional[int] = None
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None


class OrderItemOut(BaseModel):
    product_id: int
    option_ids: List[int]
    quantity: int
    unit_price_cents: int
    line_total_cents: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    cart_id: int
    user_id: str
    status: str
    payment_status: str
    provider: str
    provider_reference: Optional[str] = None
    currency: Currency
    subtotal_cents: int
    shipping_cents: int
    tax_cents: int
    credits_cents: int
    total_cents: int
    placed_at: Optional[datetime] = None
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)

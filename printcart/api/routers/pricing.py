# printcart/api/routers/pricing.py
from fastapi import APIRouter, Depends, HTTPException
from requests import RequestException

from printcart.api.deps import get_pricing_service
from printcart.domain.errors import PricingError
from printcart.domain.schemas import PriceIn, LinePrice
from printcart.services.pricing_service import PricingService

router = APIRouter(prefix="/price", tags=["pricing"])


@router.post("/", response_model=LinePrice)
def quote_price(payload: PriceIn, pricing: PricingService = Depends(get_pricing_service)):
    """
    Sell price for one product/option chain/quantity, in cents.
    """
    try:
        return pricing.compute_line_price(
            payload.product_id,
            payload.store,
            payload.quantity,
            payload.option_ids,
            category_id=payload.category_id,
        )
    except PricingError as e:
        raise HTTPException(status_code=503, detail=f"Pricing unavailable: {e}")
    except RequestException as e:
        raise HTTPException(status_code=502, detail=f"Vendor pricing failed: {e}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

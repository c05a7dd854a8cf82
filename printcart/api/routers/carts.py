#printcart/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from requests import RequestException
from sqlalchemy.orm import Session

from printcart.api.deps import get_pricing_service
from printcart.data.database import get_db
from printcart.domain.errors import CartNotFoundError, PricingError
from printcart.domain.schemas import (
    CreateCartIn,
    LineIn,
    CartOut,
    CartTotals,
    SelectedShipping,
    RedeemIn,
    RedeemOut,
)
from printcart.services.cart_service import CartService
from printcart.services.pricing_service import PricingService
from printcart.services.totals_service import CartTotalsService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session, pricing: PricingService | None = None):
    return CartService(db=db, pricing=pricing)


@router.post("/", response_model=CartOut)
def ensure_cart(payload: CreateCartIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.ensure_cart(payload.sid, payload.currency, payload.user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/{sid}", response_model=CartOut)
def get_cart(sid: str, db: Session = Depends(get_db)):
    cart = get_service(db).get_cart(sid)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart


@router.get("/{sid}/totals", response_model=CartTotals)
def get_totals(sid: str, db: Session = Depends(get_db)):
    totals = CartTotalsService(db).compute_cart_totals(sid=sid)
    if not totals:
        raise HTTPException(status_code=404, detail="Cart not found")
    return totals


@router.post("/{sid}/lines", response_model=CartOut)
def add_line(
    sid: str,
    payload: LineIn,
    db: Session = Depends(get_db),
    pricing: PricingService = Depends(get_pricing_service),
):
    svc = get_service(db, pricing)
    try:
        return svc.add_line(
            sid,
            product_id=payload.product_id,
            quantity=payload.quantity,
            option_ids=payload.option_ids,
            category_id=payload.category_id,
        )
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PricingError as e:
        raise HTTPException(status_code=503, detail=f"Pricing unavailable: {e}")
    except RequestException as e:
        raise HTTPException(status_code=502, detail=f"Vendor pricing failed: {e}")
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{sid}/lines/{line_id}", response_model=CartOut)
def remove_line(sid: str, line_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.remove_line(sid, line_id)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{sid}/lines/reprice", response_model=CartOut)
def reprice_lines(
    sid: str,
    db: Session = Depends(get_db),
    pricing: PricingService = Depends(get_pricing_service),
):
    svc = get_service(db, pricing)
    try:
        return svc.reprice_lines(sid)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PricingError as e:
        raise HTTPException(status_code=503, detail=f"Pricing unavailable: {e}")
    except RequestException as e:
        raise HTTPException(status_code=502, detail=f"Vendor pricing failed: {e}")
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{sid}/shipping", response_model=CartOut)
def choose_shipping(sid: str, payload: SelectedShipping, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.choose_shipping(sid, payload)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{sid}/shipping", response_model=CartOut)
def clear_shipping(sid: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.clear_shipping(sid)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{sid}/credits", response_model=RedeemOut)
def redeem_points(sid: str, payload: RedeemIn, db: Session = Depends(get_db)):
    """
    Redeem loyalty points of the cart owner into a credit on the cart.
    """
    svc = get_service(db)
    try:
        return svc.redeem_points(sid, payload.points, note=payload.note)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except RuntimeError as e:
        #wallet balance or cart version changed since it was read
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

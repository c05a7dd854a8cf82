# printcart/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from printcart.data.database import get_db
from printcart.domain.schemas import OrderOut
from printcart.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db=db)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_order(order_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

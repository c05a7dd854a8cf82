# printcart/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from printcart.data.database import get_db
from printcart.services.notification_service import NotificationService
from printcart.services.payment_gateway import PaymentGateway
from printcart.services.price_cache import RedisPriceCache
from printcart.services.pricing_service import PricingService
from printcart.services.vendor_pricing import VendorPricingClient


def get_vendor_client() -> VendorPricingClient:
    return VendorPricingClient(cache=RedisPriceCache())


def get_pricing_service(
    db: Session = Depends(get_db),
    vendor=Depends(get_vendor_client),
) -> PricingService:
    return PricingService(db=db, vendor=vendor)


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def get_notifier() -> NotificationService:
    return NotificationService()

#import all models so SQLAlchemy registers them in Base.metadata

from printcart.data.models.cart import CartModel
from printcart.data.models.cart_line import CartLineModel
from printcart.data.models.cart_credit import CartCreditModel
from printcart.data.models.order import OrderModel
from printcart.data.models.order_item import OrderItemModel
from printcart.data.models.price_tier import PriceTierModel
from printcart.data.models.loyalty_wallet import LoyaltyWalletModel
from printcart.data.models.loyalty_transaction import LoyaltyTransactionModel

__all__ = [
    "CartModel",
    "CartLineModel",
    "CartCreditModel",
    "OrderModel",
    "OrderItemModel",
    "PriceTierModel",
    "LoyaltyWalletModel",
    "LoyaltyTransactionModel",
]

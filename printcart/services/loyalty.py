# printcart/services/loyalty.py
from typing import Optional

from sqlalchemy.orm import Session

from printcart.data.models.loyalty_transaction import LoyaltyTransactionModel
from printcart.data.models.loyalty_wallet import LoyaltyWalletModel
from printcart.repos.cart_repo import CartRepo
from printcart.repos.loyalty_repo import LoyaltyRepo
from printcart.utils.logging import get_logger

logger = get_logger(__name__)

#100 points = $1.00 store credit, redeemed in steps of 100
REDEEM_POINTS_PER_DOLLAR = 100
REDEEM_MIN_POINTS = 100
REDEEM_INCREMENT = 100

EARN_POINTS_PER_DOLLAR = {"USD": 10, "CAD": 10}


def normalize_redeem_points(requested_points: int) -> int:
    """0 below the minimum, otherwise rounded down to the increment."""
    pts = max(0, int(requested_points or 0))
    if pts < REDEEM_MIN_POINTS:
        return 0
    return (pts // REDEEM_INCREMENT) * REDEEM_INCREMENT


def validate_redeem_points(points: int) -> int:
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValueError("points must be an integer")
    if points < REDEEM_MIN_POINTS or points % REDEEM_INCREMENT:
        raise ValueError(f"Invalid points. Min {REDEEM_MIN_POINTS}, multiples of {REDEEM_INCREMENT}.")
    return points


def points_to_credit_cents(points: int) -> int:
    pts = normalize_redeem_points(points)
    return pts * 100 // REDEEM_POINTS_PER_DOLLAR


def points_to_cover(amount_cents: int) -> int:
    """Smallest redeemable number of points worth at least amount_cents."""
    if amount_cents <= 0:
        return 0
    pts = -(-amount_cents * REDEEM_POINTS_PER_DOLLAR // 100)
    pts = -(-pts // REDEEM_INCREMENT) * REDEEM_INCREMENT
    return max(REDEEM_MIN_POINTS, pts)


def earn_points_for_amount(amount_cents: int, currency: str) -> int:
    rate = EARN_POINTS_PER_DOLLAR.get(currency, 0)
    return max(0, (max(0, int(amount_cents)) * rate + 50) // 100)


class LoyaltyService:
    """
    Wallet balances and point awards. Redemption into cart credit lives in
    CartService.redeem_points, in the same transaction as the credit row.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = LoyaltyRepo(db)
        self.cart_repo = CartRepo(db)

    def get_balance(self, user_id: str) -> int:
        wallet = self.repo.get_wallet(user_id)
        return wallet.points_balance if wallet else 0

    def award_points(
        self,
        user_id: str,
        points: int,
        reason: str = "earn",
        order_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        """Add points to the user's wallet (created on first award). Returns the new balance."""
        if points <= 0:
            raise ValueError("points must be positive")

        try:
            wallet = self.repo.get_wallet(user_id)
            if not wallet:
                wallet = self.repo.add_wallet(LoyaltyWalletModel(user_id=user_id, points_balance=0))

            self.repo.credit_points(wallet.id, points)
            self.repo.add_transaction(
                LoyaltyTransactionModel(
                    wallet_id=wallet.id,
                    user_id=user_id,
                    order_id=order_id,
                    delta=points,
                    reason=reason,
                    note=note,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Awarded {points} points to {user_id} ({reason}, order={order_id})")
        return self.get_balance(user_id)

    def award_for_order(self, order) -> int:
        """
        Earn points for a placed order. Anonymous carts earn nothing; an
        order earns at most once.
        """
        cart = self.cart_repo.get_cart(order.cart_id)
        user_id = (cart.user_id or "").strip() if cart else ""
        if not user_id or user_id == cart.sid:
            return 0

        points = earn_points_for_amount(order.total_cents, order.currency)
        if points <= 0 or self.repo.has_order_transaction(order.id, "earn"):
            return 0

        self.award_points(user_id, points, reason="earn", order_id=order.id)
        return points

# printcart/repos/loyalty_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from printcart.data.models.loyalty_wallet import LoyaltyWalletModel
from printcart.data.models.loyalty_transaction import LoyaltyTransactionModel


class LoyaltyRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_wallet(self, user_id: str) -> LoyaltyWalletModel | None:
        return self.db.execute(
            select(LoyaltyWalletModel).where(LoyaltyWalletModel.user_id == user_id)
        ).scalar_one_or_none()

    def add_wallet(self, wallet: LoyaltyWalletModel) -> LoyaltyWalletModel:
        self.db.add(wallet)
        self.db.flush()
        return wallet

    def debit_points(self, wallet_id: int, points: int) -> int:
        #UPDATE ... WHERE id = :id AND points_balance >= :points
        result = self.db.execute(
            update(LoyaltyWalletModel)
            .where(LoyaltyWalletModel.id == wallet_id, LoyaltyWalletModel.points_balance >= points)
            .values(
                points_balance=LoyaltyWalletModel.points_balance - points,
                lifetime_redeemed=LoyaltyWalletModel.lifetime_redeemed + points,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def credit_points(self, wallet_id: int, points: int) -> int:
        result = self.db.execute(
            update(LoyaltyWalletModel)
            .where(LoyaltyWalletModel.id == wallet_id)
            .values(
                points_balance=LoyaltyWalletModel.points_balance + points,
                lifetime_earned=LoyaltyWalletModel.lifetime_earned + points,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def add_transaction(self, txn: LoyaltyTransactionModel) -> LoyaltyTransactionModel:
        self.db.add(txn)
        return txn

    def get_transactions(self, wallet_id: int) -> list[LoyaltyTransactionModel]:
        return list(
            self.db.execute(
                select(LoyaltyTransactionModel)
                .where(LoyaltyTransactionModel.wallet_id == wallet_id)
                .order_by(LoyaltyTransactionModel.id)
            ).scalars().all()
        )

    def has_order_transaction(self, order_id: int, reason: str) -> bool:
        return self.db.execute(
            select(LoyaltyTransactionModel.id)
            .where(LoyaltyTransactionModel.order_id == order_id, LoyaltyTransactionModel.reason == reason)
            .limit(1)
        ).scalar_one_or_none() is not None

# printcart/repos/cart_repo.py
from typing import List

from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import Session

from printcart.data.models.cart import CartModel
from printcart.data.models.cart_line import CartLineModel
from printcart.data.models.cart_credit import CartCreditModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    #carts
    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_open_cart(self, cart_id: int, for_update: bool = False) -> CartModel | None:
        stmt = select(CartModel).where(CartModel.id == cart_id, CartModel.status != "closed")
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_open_cart_by_sid(self, sid: str) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.sid == sid, CartModel.status != "closed")
            .order_by(CartModel.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        #UPDATE carts SET ... WHERE id = :id AND version = :old_version
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def close_cart(self, cart_id: int, user_id: str | None = None) -> None:
        values = {"status": "closed", "version": CartModel.version + 1}
        if user_id:
            values["user_id"] = user_id
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )

    #lines
    def get_lines(self, cart_id: int) -> List[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(CartLineModel.cart_id == cart_id)
                .order_by(CartLineModel.id)
            ).scalars().all()
        )

    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, cart_id: int, line_id: int) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(CartLineModel.cart_id == cart_id, CartLineModel.id == line_id)
        )
        return result.rowcount

    def subtotal_cents(self, cart_id: int) -> int:
        #one aggregate in SQL, lines without a stored total fall back to qty * unit
        line_total = func.coalesce(
            CartLineModel.line_total_cents,
            CartLineModel.quantity * CartLineModel.unit_price_cents,
        )
        total = self.db.execute(
            select(func.coalesce(func.sum(line_total), 0)).where(CartLineModel.cart_id == cart_id)
        ).scalar_one()
        return int(total or 0)

    #credits
    def credits_cents(self, cart_id: int) -> int:
        total = self.db.execute(
            select(func.coalesce(func.sum(CartCreditModel.amount_cents), 0))
            .where(CartCreditModel.cart_id == cart_id)
        ).scalar_one()
        return int(total or 0)

    def replace_credit(self, cart_id: int, reason: str, amount_cents: int, note: str | None = None) -> None:
        #one row per reason keeps repeated redemptions deterministic
        self.db.execute(
            delete(CartCreditModel).where(CartCreditModel.cart_id == cart_id, CartCreditModel.reason == reason)
        )
        if amount_cents > 0:
            self.db.add(CartCreditModel(cart_id=cart_id, amount_cents=amount_cents, reason=reason, note=note))
        self.db.flush()

    def add_credit(self, cart_id: int, amount_cents: int, reason: str, note: str | None = None) -> CartCreditModel:
        credit = CartCreditModel(cart_id=cart_id, amount_cents=amount_cents, reason=reason, note=note)
        self.db.add(credit)
        self.db.flush()
        return credit

    def delete_credits(self, cart_id: int) -> int:
        result = self.db.execute(delete(CartCreditModel).where(CartCreditModel.cart_id == cart_id))
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

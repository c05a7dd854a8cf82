# printcart/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from printcart.data.models.order import OrderModel
from printcart.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def get_order_id_by_reference(self, provider_reference: str) -> int | None:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.provider_reference == provider_reference).limit(1)
        ).scalar_one_or_none()

    def get_order_id_by_cart(self, cart_id: int) -> int | None:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.cart_id == cart_id).limit(1)
        ).scalar_one_or_none()

    def add_order(self, order: OrderModel) -> OrderModel:
        #flush only, the caller owns the transaction
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        return item

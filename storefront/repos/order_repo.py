# storefront/repos/order_repo.py
from typing import Iterable

from sqlalchemy import or_, select

from storefront.data.models.order import CLOSED_STATUSES, OrderItemModel, OrderModel
from storefront.repos.base import BaseRepo


class OrderRepo(BaseRepo):
    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.order_id == order_id)
        ).scalar_one_or_none()

    def get_by_transaction_id(self, transaction_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.transaction_id == transaction_id)
        ).scalar_one_or_none()

    def find_existing(self, transaction_id: str, order_id: str | None = None) -> OrderModel | None:
        """Order already settled for this payment reference (or client order id)."""
        clauses = [OrderModel.transaction_id == transaction_id]
        if order_id:
            clauses.append(OrderModel.order_id == order_id)
        return self.db.execute(
            select(OrderModel).where(or_(*clauses)).order_by(OrderModel.id).limit(1)
        ).scalar_one_or_none()

    def list_for_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def get_items(self, order_pk: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel).where(OrderItemModel.order_id == order_pk).order_by(OrderItemModel.id)
            ).scalars()
        )

    def insert_order(self, order: OrderModel) -> OrderModel:
        # flush now so unique violations surface before the items are written
        self.db.add(order)
        self.db.flush()
        return order

    def add_items(self, items: Iterable[OrderItemModel]) -> list[OrderItemModel]:
        items = list(items)
        self.db.add_all(items)
        self.db.flush()
        return items

    def open_order_ids_for_product(self, product_id: int) -> list[str]:
        rows = self.db.execute(
            select(OrderModel.order_id)
            .join(OrderItemModel, OrderItemModel.order_id == OrderModel.id)
            .where(
                OrderItemModel.product_id == product_id,
                OrderModel.status.not_in([s.value for s in CLOSED_STATUSES]),
            )
            .distinct()
            .order_by(OrderModel.order_id)
        )
        return list(rows.scalars())

    def order_ids_for_user(self, user_id: int) -> list[str]:
        return list(
            self.db.execute(
                select(OrderModel.order_id).where(OrderModel.user_id == user_id).order_by(OrderModel.order_id)
            ).scalars()
        )

    def update_order_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.commit()
        self.db.refresh(order)
        return order

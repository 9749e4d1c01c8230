# storefront/services/order_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderStatus
from storefront.domain.errors import ForbiddenError, InvalidStatusError, NotFoundError
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCT_UNAVAILABLE = "product no longer available"


class OrderService:
    """
    Serwis odpowiedzialny za odczyt zamowien i zmiane statusu.
    Zamowienie po utworzeniu jest niemutowalne poza statusem.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)

    def present(self, order: OrderModel) -> Dict[str, Any]:
        """Order with its line items. Deleted products stay in the history, unresolved."""
        items = self.repo.get_items(order.id)
        names = self.products.get_names(i.product_id for i in items)

        return {
            "order_id": order.order_id,
            "user_id": order.user_id,
            "full_name": f"{order.first_name} {order.last_name}",
            "first_name": order.first_name,
            "last_name": order.last_name,
            "email": order.email,
            "address": order.address,
            "phone": order.phone,
            "amount": order.amount,
            "transaction_id": order.transaction_id,
            "status": order.status,
            "created_at": order.created_at,
            "items": [
                {
                    "product_id": i.product_id,
                    "product_name": names.get(i.product_id, PRODUCT_UNAVAILABLE),
                    "product_available": i.product_id in names,
                    "quantity": i.quantity,
                    "amount": i.amount,
                    "paid": i.paid,
                }
                for i in items
            ],
        }

    def get_order(self, order_id: str, user_id: int | None = None) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if user_id is not None and order.user_id != user_id:
            raise ForbiddenError("No access to this order")

        return self.present(order)

    def order_history(self, user_id: int) -> List[Dict[str, Any]]:
        return [self.present(o) for o in self.repo.list_for_user(user_id)]

    def update_status(self, order_id: str, status: OrderStatus | str) -> Dict[str, Any]:
        try:
            status = OrderStatus(status)
        except ValueError:
            valid = ", ".join(s.value for s in OrderStatus)
            raise InvalidStatusError(f"Status must be one of: {valid}")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        previous = order.status
        order = self.repo.update_order_status(order, status.value)
        logger.info(f"Order {order.order_id} status {previous} -> {order.status}")
        return self.present(order)

# storefront/data/models/order.py
import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# payment confirmed; settlement always lands here
SETTLED_STATUS = OrderStatus.DELIVERED
CLOSED_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_id = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # payer snapshot, copied from the gateway metadata at settlement
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    amount = Column(Numeric(12, 2), nullable=False)
    transaction_id = Column(String, nullable=False, unique=True)
    status = Column(String, nullable=False, default=SETTLED_STATUS.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.id",
    )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    # no FK: history outlives the product
    product_id = Column(Integer, nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    amount = Column(Integer, nullable=False)
    paid = Column(Boolean, nullable=False, default=False)

    order = relationship("OrderModel", back_populates="items")

# storefront/data/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    # one cart per user
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        order_by="CartItemModel.id",
    )

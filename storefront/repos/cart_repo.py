# storefront/repos/cart_repo.py
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.repos.base import BaseRepo


class CartRepo(BaseRepo):
    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_or_create_cart(self, user_id: int) -> CartModel:
        """Lazily create the user's cart. Must be the first write of the unit of work."""
        cart = self.get_cart_by_user(user_id)
        if cart:
            return cart

        # carts.user_id is unique, a concurrent first add loses here and reads the winner
        try:
            cart = CartModel(user_id=user_id)
            self.db.add(cart)
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            cart = self.get_cart_by_user(user_id)
        return cart

    def get_cart_items(self, cart_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel).where(CartItemModel.cart_id == cart_id).order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def items_for_product(self, product_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(select(CartItemModel).where(CartItemModel.product_id == product_id)).scalars()
        )

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount

    def delete_cart_items(self, item_ids: Iterable[int]) -> int:
        return self.delete_where(CartItemModel, CartItemModel.id, item_ids)

    def clear_cart_items(self, cart_id: int) -> int:
        return self.delete_where(CartItemModel, CartItemModel.cart_id, [cart_id])

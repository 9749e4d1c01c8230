from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.database import atomic
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import ClientError, NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk uzytkownika, jeden na usera, tworzony leniwie przy pierwszym dodaniu.
    commands (add, update, remove, clear, reprice) modyfikuja stan
    query (get) tylko odczyt
    amount pozycji zawsze liczony jako quantity * cena produktu
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return {"cart_id": None, "user_id": user_id, "items": [], "total": 0}

        items = self.repo.get_cart_items(cart.id)
        names = self.products.get_names(i.product_id for i in items)

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "product_name": names.get(i.product_id),
                    "quantity": i.quantity,
                    "amount": i.amount,
                }
                for i in items
            ],
            "total": sum(i.amount for i in items),
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ClientError("Quantity must be greater than 0")

        if not self.users.get_user(user_id):
            raise NotFoundError("User not found")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        with atomic(self.db):
            cart = self.repo.get_or_create_cart(user_id)
            existing_item = self.repo.get_cart_item(cart.id, product_id)

            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
                )
                existing_item.quantity += quantity
                existing_item.amount = existing_item.quantity * product.price
            else:
                logger.info(f"Adding product {product_id} to cart {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=quantity,
                        amount=quantity * product.price,
                    )
                )

        return self.get_cart(user_id)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ClientError("Quantity must be greater than 0")

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise NotFoundError("Product not in cart")

        product = self.products.get_product(product_id)
        with atomic(self.db):
            item.quantity = quantity
            item.amount = quantity * product.price

        logger.info(f"Cart {cart.id}: product {product_id} quantity set to {quantity}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        with atomic(self.db):
            removed = self.repo.delete_cart_item(cart.id, product_id)
        if not removed:
            raise NotFoundError("Product not in cart")

        logger.info(f"Product {product_id} removed from cart {cart.id}")
        return self.get_cart(user_id)

    def clear(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        with atomic(self.db):
            removed = self.repo.clear_cart_items(cart.id)

        logger.info(f"Cart {cart.id} cleared, {removed} items removed")
        return self.get_cart(user_id)

    def reprice_product(self, product_id: int, price: int) -> Dict[str, Any]:
        """
        Zmiana ceny produktu + przeliczenie amount we wszystkich koszykach.
        Pozycje zamowien to snapshot, nie sa ruszane.
        """
        if price <= 0:
            raise ClientError("Price must be greater than 0")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        with atomic(self.db):
            product.price = price
            items = self.repo.items_for_product(product_id)
            for item in items:
                item.amount = item.quantity * price

        logger.info(f"Product {product_id} repriced to {price}, {len(items)} cart items recomputed")
        return {"id": product.id, "name": product.name, "price": product.price, "cart_items_updated": len(items)}

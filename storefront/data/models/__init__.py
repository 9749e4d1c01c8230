# import all models so SQLAlchemy registers them in Base.metadata

from storefront.data.models.user import UserModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel, ProductFeatureModel, ProductImageModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel, OrderItemModel, OrderStatus

__all__ = [
    "UserModel",
    "CategoryModel",
    "ProductModel",
    "ProductFeatureModel",
    "ProductImageModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "OrderStatus",
]

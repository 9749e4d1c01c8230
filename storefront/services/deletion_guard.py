# storefront/services/deletion_guard.py
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.database import atomic
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.order import OrderItemModel, OrderModel
from storefront.data.models.product import ProductFeatureModel, ProductImageModel, ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import ClientError, DeletionBlockedError, NotFoundError
from storefront.repos.base import BaseRepo
from storefront.repos.category_repo import CategoryRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class EntityKind(str, enum.Enum):
    PRODUCT = "product"
    CATEGORY = "category"
    USER = "user"


_MODELS = {
    EntityKind.PRODUCT: ProductModel,
    EntityKind.CATEGORY: CategoryModel,
    EntityKind.USER: UserModel,
}

# owner -> rows it owns, (model, foreign key column). Owned rows die with the owner.
OWNERSHIP = {
    UserModel: [(CartModel, CartModel.user_id)],
    CartModel: [(CartItemModel, CartItemModel.cart_id)],
    ProductModel: [
        (ProductFeatureModel, ProductFeatureModel.product_id),
        (ProductImageModel, ProductImageModel.product_id),
    ],
    OrderModel: [(OrderItemModel, OrderItemModel.order_id)],
}

# rows that only reference the entity and are dropped with it.
# OrderItems are history and deliberately absent: their product_id is left dangling.
REFERENCES = {
    ProductModel: [(CartItemModel, CartItemModel.product_id)],
}


@dataclass
class DeletionCheck:
    allowed: bool
    exists: bool = True
    # order ids (product/user) or product ids (category) that hold the entity
    blocked_by: List[Any] = field(default_factory=list)


class DeletionGuard:
    """
    Pilnuje, zeby usuwanie produktu / kategorii / usera nie osierocilo zamowien.
    - produkt: blokuje zamowienie w toku (status poza DELIVERED/CANCELLED)
    - kategoria: blokuje dowolny produkt
    - user: blokuje dowolne zamowienie
    Sprawdzenie i kaskada w jednej transakcji, wszystko albo nic.
    """

    def __init__(self, db: Session):
        self.db = db
        self.rows = BaseRepo(db)
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.categories = CategoryRepo(db)

    def can_delete(self, kind: EntityKind | str, entity_id: int) -> DeletionCheck:
        kind = self._kind(kind)
        if self.db.get(_MODELS[kind], entity_id) is None:
            return DeletionCheck(allowed=False, exists=False)

        if kind is EntityKind.PRODUCT:
            blocked_by = self.orders.open_order_ids_for_product(entity_id)
        elif kind is EntityKind.CATEGORY:
            blocked_by = self.categories.product_ids(entity_id)
        else:
            blocked_by = self.orders.order_ids_for_user(entity_id)

        return DeletionCheck(allowed=not blocked_by, blocked_by=blocked_by)

    def delete_cascade(self, kind: EntityKind | str, entity_id: int) -> Dict[str, Any]:
        kind = self._kind(kind)

        with atomic(self.db):
            check = self.can_delete(kind, entity_id)
            if not check.exists:
                raise NotFoundError(f"{kind.value.capitalize()} not found")
            if not check.allowed:
                logger.info(f"Delete {kind.value} {entity_id} blocked by {check.blocked_by}")
                raise DeletionBlockedError(
                    self._blocked_message(kind),
                    blocked={str(entity_id): check.blocked_by},
                )
            self._cascade(_MODELS[kind], [entity_id])

        logger.info(f"Deleted {kind.value} {entity_id}")
        return {"deleted": [entity_id], "blocked": {}, "missing": []}

    def bulk_delete_products(self, product_ids: Iterable[int]) -> Dict[str, Any]:
        """All or nothing: any missing or blocked id keeps the whole batch."""
        ids = list(dict.fromkeys(int(pid) for pid in product_ids))
        if not ids:
            raise ClientError("Product IDs required")

        with atomic(self.db):
            found = {p.id for p in self.products.get_products(ids)}
            missing = [pid for pid in ids if pid not in found]

            blocked = {}
            for pid in ids:
                if pid in found:
                    open_orders = self.orders.open_order_ids_for_product(pid)
                    if open_orders:
                        blocked[str(pid)] = open_orders

            if missing or blocked:
                logger.info(f"Bulk delete refused: missing={missing} blocked={blocked}")
                message = "Some products in active orders" if blocked else "Some products not found"
                raise DeletionBlockedError(message, blocked=blocked, missing=missing)

            self._cascade(ProductModel, ids)

        logger.info(f"Bulk deleted products {ids}")
        return {"deleted": ids, "blocked": {}, "missing": []}

    def _cascade(self, model, ids: List[int]) -> None:
        """Delete `ids` of `model` after everything it owns, depth first."""
        if not ids:
            return

        for owned, fk in OWNERSHIP.get(model, []):
            owned_ids = list(self.db.execute(select(owned.id).where(fk.in_(ids))).scalars())
            self._cascade(owned, owned_ids)

        for referencing, fk in REFERENCES.get(model, []):
            removed = self.rows.delete_where(referencing, fk, ids)
            if removed:
                logger.info(f"Removed {removed} {referencing.__tablename__} rows referencing {model.__tablename__} {ids}")

        self.rows.delete_where(model, model.id, ids)

    @staticmethod
    def _kind(kind: EntityKind | str) -> EntityKind:
        try:
            return EntityKind(kind)
        except ValueError:
            raise ClientError(f"Unknown entity kind: {kind}")

    @staticmethod
    def _blocked_message(kind: EntityKind) -> str:
        return {
            EntityKind.PRODUCT: "Cannot delete product in active orders",
            EntityKind.CATEGORY: "Cannot delete category with associated products",
            EntityKind.USER: "Cannot delete user with associated orders",
        }[kind]

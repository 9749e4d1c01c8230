# storefront/repos/product_repo.py
from typing import Iterable

from sqlalchemy import select

from storefront.data.models.product import ProductModel
from storefront.repos.base import BaseRepo


class ProductRepo(BaseRepo):
    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids: Iterable[int]) -> list[ProductModel]:
        ids = list(product_ids)
        if not ids:
            return []
        return list(self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars())

    def get_names(self, product_ids: Iterable[int]) -> dict[int, str]:
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(ProductModel.id, ProductModel.name).where(ProductModel.id.in_(ids)))
        return {pid: name for pid, name in rows}

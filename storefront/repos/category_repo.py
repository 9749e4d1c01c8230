from sqlalchemy import select

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.repos.base import BaseRepo


class CategoryRepo(BaseRepo):
    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def product_ids(self, category_id: int) -> list[int]:
        return list(
            self.db.execute(
                select(ProductModel.id).where(ProductModel.category_id == category_id).order_by(ProductModel.id)
            ).scalars()
        )

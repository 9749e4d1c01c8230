# storefront/repos/base.py
from typing import Iterable

from sqlalchemy import delete
from sqlalchemy.orm import Session


class BaseRepo:
    def __init__(self, db: Session):
        self.db = db

    def delete_where(self, model, column, values: Iterable) -> int:
        values = list(values)
        if not values:
            return 0
        result = self.db.execute(delete(model).where(column.in_(values)))
        return result.rowcount

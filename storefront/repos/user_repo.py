from storefront.data.models.user import UserModel
from storefront.repos.base import BaseRepo


class UserRepo(BaseRepo):
    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

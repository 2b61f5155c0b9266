from sqlalchemy import update
from sqlalchemy.orm import Session
from freshcart.data.models.user import UserModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id, populate_existing=True)

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def add_loyalty_points(self, user_id: int, points: int) -> bool:
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(loyalty_points=UserModel.loyalty_points + points)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_transactions(self, user_id: int) -> bool:
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(completed_transactions=UserModel.completed_transactions + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

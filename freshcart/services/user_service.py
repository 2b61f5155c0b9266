from sqlalchemy.orm import Session
from freshcart.data.models.user import UserModel
from freshcart.domain.context import Role, SessionContext, STORE_REGION
from freshcart.domain.errors import NotFoundError
from freshcart.domain.schemas import UserCreate, UserRead
from freshcart.repos.region_repo import RegionRepo
from freshcart.repos.user_repo import UserRepo
from freshcart.services.loyalty_service import LoyaltyService


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)
        self.regions = RegionRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        if payload.region_id is not None and not self.regions.get_region(payload.region_id):
            raise NotFoundError(f"Region {payload.region_id} does not exist")

        user = UserModel(
            id=payload.id,
            name=payload.name,
            role=payload.role.value,
            region_id=payload.region_id,
        )
        created = self.repo.create_user(user)
        self.db.commit()
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def session_context(self, user_id: int, region_id: int | None = None) -> SessionContext:
        """
        Identity, region and loyalty discount for one session.
        region_id overrides the user's saved region.
        """
        user = self.get_user(user_id)

        region = STORE_REGION
        region_id = region_id if region_id is not None else user.region_id
        if region_id is not None:
            model = self.regions.get_region(region_id)
            if not model:
                raise NotFoundError(f"Region {region_id} does not exist")
            region = self.regions.to_domain(model)

        return SessionContext(
            user_id=user.id,
            role=Role(user.role),
            region=region,
            loyalty_discount_pct=LoyaltyService(self.db).discount_for_user(user.id),
        )

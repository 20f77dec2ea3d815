from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.domain.exceptions import ConflictError, NotFoundError
from src.infrastructure.db.models import User
from src.infrastructure.db.session import unit_of_work
from src.infrastructure.repositories.user_repository import UserRepository


class UserService:

    def __init__(self, db: Session):
        self.db = db
        self.user_repository = UserRepository(db)

    def create_user(self, name: str, email: str) -> User:
        if self.user_repository.get_by_email(email):
            raise ConflictError("User already exists")
        try:
            with unit_of_work(self.db):
                user = self.user_repository.create_user(name=name, email=email)
        except IntegrityError as exc:
            raise ConflictError("User already exists") from exc
        return user

    def get_user(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

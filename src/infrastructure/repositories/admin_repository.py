from sqlalchemy.orm import Session
from sqlalchemy import select

from src.infrastructure.db.models import Admin


class AdminRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, admin_id: str) -> Admin | None:
        stmt = select(Admin).where(Admin.id == admin_id)
        return self.db.execute(stmt).scalar_one_or_none()

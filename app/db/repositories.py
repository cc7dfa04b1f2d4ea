from __future__ import annotations

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import models

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity


class UserRepository(BaseRepository[models.User]):
    model = models.User

    def get_by_username(self, username: str) -> models.User | None:
        stmt = select(models.User).where(models.User.username == username)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_email(self, email: str) -> models.User | None:
        stmt = select(models.User).where(models.User.email == email)
        return self.db.execute(stmt).scalar_one_or_none()


class DistributionRepository(BaseRepository[models.DistributionRecord]):
    model = models.DistributionRecord

    def list_for_user(self, user_id: UUID) -> list[models.DistributionRecord]:
        stmt = (
            select(models.DistributionRecord)
            .where(models.DistributionRecord.user_id == user_id)
            .order_by(models.DistributionRecord.created_at, models.DistributionRecord.id)
        )
        return self.db.execute(stmt).scalars().all()

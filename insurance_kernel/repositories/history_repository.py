"""SQLAlchemy repository for the append-only operation history."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from insurance_kernel.domain.parties import OperationRecord
from insurance_kernel.models.history import OperationHistoryModel
from insurance_kernel.repositories.base import SqlAlchemyRepository


class SqlAlchemyOperationHistoryRepository(SqlAlchemyRepository[OperationHistoryModel]):
    """Insert-only: there is no update or delete."""

    model = OperationHistoryModel

    def add(self, record: OperationRecord) -> None:
        self.session.add(OperationHistoryModel.from_entity(record))
        self.session.flush()

    def get_by_user_id(self, user_id: UUID) -> list[OperationRecord]:
        stmt = (
            select(OperationHistoryModel)
            .where(OperationHistoryModel.user_id == user_id)
            .order_by(OperationHistoryModel.created_at.desc())
        )
        return [m.to_entity() for m in self.session.scalars(stmt).all()]

    def get_by_entity_id(self, entity_id: UUID) -> list[OperationRecord]:
        stmt = (
            select(OperationHistoryModel)
            .where(OperationHistoryModel.related_entity_id == entity_id)
            .order_by(OperationHistoryModel.created_at)
        )
        return [m.to_entity() for m in self.session.scalars(stmt).all()]

"""ORM persistence for the append-only operation history."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from insurance_kernel.db.base import Base, UUIDString
from insurance_kernel.domain.parties import OperationRecord


class OperationHistoryModel(Base):
    """One history line.  Rows are inserted, never updated."""

    __tablename__ = "operation_history"

    __table_args__ = (
        Index("idx_history_user", "user_id"),
        Index("idx_history_entity", "related_entity_id"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    operation_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    related_entity_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    related_entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def to_entity(self) -> OperationRecord:
        return OperationRecord(
            id=self.id,
            user_id=self.user_id,
            operation_type=self.operation_type,
            description=self.description,
            related_entity_id=self.related_entity_id,
            related_entity_type=self.related_entity_type,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, record: OperationRecord) -> OperationHistoryModel:
        return cls(
            id=record.id,
            user_id=record.user_id,
            operation_type=record.operation_type,
            description=record.description,
            related_entity_id=record.related_entity_id,
            related_entity_type=record.related_entity_type,
            created_at=record.created_at,
        )

"""
OperationHistoryService -- read and append the flat operation log.

The log answers "who did what, to which entity, when".  It is never
replayed and no state machine reads it.
"""

from __future__ import annotations

from uuid import UUID

from insurance_kernel.domain.parties import OperationRecord
from insurance_kernel.services.base import BaseService
from insurance_kernel.services.results import OperationResult


class OperationHistoryService(BaseService):
    def record(
        self,
        user_id: UUID | None,
        operation_type: str,
        description: str,
        related_entity_id: UUID | None = None,
        related_entity_type: str | None = None,
    ) -> OperationResult[OperationRecord]:
        def work() -> OperationRecord:
            record = OperationRecord.create(
                user_id=user_id,
                operation_type=operation_type,
                description=description,
                related_entity_id=related_entity_id,
                related_entity_type=related_entity_type,
                now=self._now(),
            )
            self._repos.history.add(record)
            self._save()
            return record

        return self._execute("record_operation", work, operation_type=operation_type)

    def for_user(self, user_id: UUID) -> list[OperationRecord]:
        """Newest first."""
        return self._repos.history.get_by_user_id(user_id)

    def for_entity(self, entity_id: UUID) -> list[OperationRecord]:
        return self._repos.history.get_by_entity_id(entity_id)

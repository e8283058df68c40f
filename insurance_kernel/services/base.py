"""
BaseService -- common shell for the orchestration services.

Responsibility:
    Holds the repositories (one unit of work), the injected clock and the
    ``_execute`` boundary that turns kernel exceptions into
    ``OperationResult`` values.

Architecture position:
    Kernel > Services -- imperative shell.  Services load entities through
    repositories, call the entity transitions, and persist with
    ``save_changes`` after each step.

Invariants enforced:
    - Every ``InsuranceKernelError`` raised inside an operation is caught at
      this boundary, the pending (uncommitted) writes are discarded and a
      failure result is returned.  Steps already committed stay committed.
    - Any other exception discards pending writes, is logged and re-raised.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from insurance_kernel.domain.clock import Clock, SystemClock
from insurance_kernel.domain.parties import OperationRecord
from insurance_kernel.exceptions import InsuranceKernelError
from insurance_kernel.logging_config import LogContext, get_logger
from insurance_kernel.repositories import Repositories
from insurance_kernel.services.results import OperationResult

T = TypeVar("T")

logger = get_logger("services")


class BaseService:
    """
    Base class for services that mutate the insurance domain.

    Guarantees:
        - ``_execute`` never lets an ``InsuranceKernelError`` escape.
    """

    def __init__(self, repositories: Repositories, clock: Clock | None = None):
        self._repos = repositories
        self._clock = clock or SystemClock()

    @classmethod
    def for_session(cls, session: Session, clock: Clock | None = None, **kwargs: Any):
        """Build the service over SQLAlchemy repositories bound to ``session``."""
        return cls(Repositories.for_session(session), clock=clock, **kwargs)

    @property
    def clock(self) -> Clock:
        return self._clock

    def _now(self):
        return self._clock.now_utc()

    def _save(self) -> None:
        self._repos.contracts.save_changes()

    def _record(
        self,
        actor_id: UUID | None,
        operation_type: str,
        description: str,
        entity_id: UUID | None = None,
        entity_type: str | None = None,
    ) -> None:
        """Append to the operation history when the acting user is known."""
        if actor_id is None:
            return
        self._repos.history.add(
            OperationRecord.create(
                user_id=actor_id,
                operation_type=operation_type,
                description=description,
                related_entity_id=entity_id,
                related_entity_type=entity_type,
                now=self._now(),
            )
        )

    def _execute(
        self,
        operation: str,
        work: Callable[[], T | OperationResult[T]],
        **context: Any,
    ) -> OperationResult[T]:
        """
        Run ``work`` and convert its outcome into an ``OperationResult``.

        An ``actor_id`` in ``context`` is bound to the log scope for the call.
        """
        actor_id = context.pop("actor_id", None)
        log_context = {k: str(v) if isinstance(v, UUID) else v for k, v in context.items()}
        with LogContext.bind(actor_id=actor_id):
            try:
                outcome = work()
            except InsuranceKernelError as exc:
                self._repos.contracts.discard_changes()
                logger.warning(
                    f"{operation}_rejected",
                    extra={**log_context, "error_code": exc.code, "reason": str(exc)},
                )
                return OperationResult.failure(exc)
            except Exception:
                self._repos.contracts.discard_changes()
                logger.exception(f"{operation}_failed", extra=log_context)
                raise

            if isinstance(outcome, OperationResult):
                return outcome
            logger.info(f"{operation}_succeeded", extra=log_context)
            return OperationResult.success(outcome)

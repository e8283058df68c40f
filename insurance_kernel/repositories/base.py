"""
Module: insurance_kernel.repositories.base
Responsibility: Shared base for the SQLAlchemy repositories.
Architecture position: Kernel > Repositories.  May import from db/, models/
    and domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Session ownership: repositories accept a Session from the caller and
      never open their own.  Repositories sharing a session share one unit
      of work, so ``save_changes`` on any of them commits all pending writes.
    - Entity return convention: repositories return domain entities, never
      ORM rows.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from insurance_kernel.db.base import Base
from insurance_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("repositories")


class SqlAlchemyRepository(ABC, Generic[ModelType]):
    """
    Base class for all SQLAlchemy repositories.

    Non-goals:
        Defines no queries; subclasses implement the entity-specific ones.
    """

    model: type[ModelType]

    def __init__(self, session: Session):
        self.session = session

    def _get_model(self, entity_id) -> ModelType | None:
        return self.session.get(self.model, entity_id)

    def save_changes(self) -> None:
        self.session.commit()

    def discard_changes(self) -> None:
        self.session.rollback()
        logger.debug("changes_discarded", extra={"repository": type(self).__name__})

"""SQLAlchemy repositories for document verifications and contract applications."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from insurance_kernel.domain.application import ApplicationStatus, ContractApplication
from insurance_kernel.domain.verification import DocumentVerification
from insurance_kernel.exceptions import ApplicationNotFoundError, VerificationNotFoundError
from insurance_kernel.models.verification import (
    ContractApplicationModel,
    DocumentVerificationModel,
)
from insurance_kernel.repositories.base import SqlAlchemyRepository


class SqlAlchemyVerificationRepository(SqlAlchemyRepository[DocumentVerificationModel]):
    model = DocumentVerificationModel

    def add(self, verification: DocumentVerification) -> None:
        self.session.add(DocumentVerificationModel.from_entity(verification))
        self.session.flush()

    def update(self, verification: DocumentVerification) -> None:
        model = self._get_model(verification.id)
        if model is None:
            raise VerificationNotFoundError(str(verification.id))
        model.apply(verification)
        self.session.flush()

    def get_by_id(self, verification_id: UUID) -> DocumentVerification | None:
        model = self._get_model(verification_id)
        return model.to_entity() if model is not None else None

    def get_by_client_id(self, client_id: UUID) -> list[DocumentVerification]:
        stmt = (
            select(DocumentVerificationModel)
            .where(DocumentVerificationModel.client_id == client_id)
            .order_by(DocumentVerificationModel.created_at)
        )
        return [m.to_entity() for m in self.session.scalars(stmt).all()]


class SqlAlchemyApplicationRepository(SqlAlchemyRepository[ContractApplicationModel]):
    model = ContractApplicationModel

    def add(self, application: ContractApplication) -> None:
        self.session.add(ContractApplicationModel.from_entity(application))
        self.session.flush()

    def update(self, application: ContractApplication) -> None:
        model = self._get_model(application.id)
        if model is None:
            raise ApplicationNotFoundError(str(application.id))
        model.apply(application)
        self.session.flush()

    def get_by_id(self, application_id: UUID) -> ContractApplication | None:
        model = self._get_model(application_id)
        return model.to_entity() if model is not None else None

    def list_all(self) -> list[ContractApplication]:
        stmt = select(ContractApplicationModel).order_by(ContractApplicationModel.created_at)
        return [m.to_entity() for m in self.session.scalars(stmt).all()]

    def get_by_status(self, status: ApplicationStatus) -> list[ContractApplication]:
        stmt = (
            select(ContractApplicationModel)
            .where(ContractApplicationModel.status == status.value)
            .order_by(ContractApplicationModel.created_at)
        )
        return [m.to_entity() for m in self.session.scalars(stmt).all()]

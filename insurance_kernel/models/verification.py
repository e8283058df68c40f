"""
Module: insurance_kernel.models.verification
Responsibility: ORM persistence for document verifications and contract
    applications (the two client-initiated records reviewed by agents).
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from insurance_kernel.db.base import Base, UUIDString
from insurance_kernel.domain.application import ApplicationStatus, ContractApplication
from insurance_kernel.domain.verification import DocumentVerification, VerificationStatus


class DocumentVerificationModel(Base):
    __tablename__ = "document_verifications"

    __table_args__ = (
        Index("idx_verification_client", "client_id"),
        Index("idx_verification_status", "status"),
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("clients.id"), nullable=False,
    )
    verified_by_agent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("agents.id"), nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VerificationStatus.PENDING.value,
    )
    document_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    document_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def to_entity(self) -> DocumentVerification:
        return DocumentVerification(
            id=self.id,
            client_id=self.client_id,
            status=VerificationStatus(self.status),
            document_type=self.document_type,
            document_number=self.document_number,
            notes=self.notes,
            verified_by_agent_id=self.verified_by_agent_id,
            verified_at=self.verified_at,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, verification: DocumentVerification) -> DocumentVerificationModel:
        model = cls(id=verification.id)
        model.apply(verification)
        return model

    def apply(self, verification: DocumentVerification) -> None:
        self.client_id = verification.client_id
        self.verified_by_agent_id = verification.verified_by_agent_id
        self.status = verification.status.value
        self.document_type = verification.document_type
        self.document_number = verification.document_number
        self.notes = verification.notes
        self.verified_at = verification.verified_at
        self.created_at = verification.created_at


class ContractApplicationModel(Base):
    __tablename__ = "contract_applications"

    __table_args__ = (
        Index("idx_application_status", "status"),
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("clients.id"), nullable=False,
    )
    service_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("insurance_services.id"), nullable=False,
    )
    desired_start_date: Mapped[datetime] = mapped_column(nullable=False)
    desired_end_date: Mapped[datetime] = mapped_column(nullable=False)
    desired_premium: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApplicationStatus.PENDING.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_by_agent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("agents.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def to_entity(self) -> ContractApplication:
        return ContractApplication(
            id=self.id,
            client_id=self.client_id,
            service_id=self.service_id,
            desired_start_date=self.desired_start_date,
            desired_end_date=self.desired_end_date,
            desired_premium=self.desired_premium,
            status=ApplicationStatus(self.status),
            notes=self.notes,
            processed_by_agent_id=self.processed_by_agent_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, application: ContractApplication) -> ContractApplicationModel:
        model = cls(id=application.id)
        model.apply(application)
        return model

    def apply(self, application: ContractApplication) -> None:
        self.client_id = application.client_id
        self.service_id = application.service_id
        self.desired_start_date = application.desired_start_date
        self.desired_end_date = application.desired_end_date
        self.desired_premium = application.desired_premium
        self.status = application.status.value
        self.notes = application.notes
        self.processed_by_agent_id = application.processed_by_agent_id
        self.created_at = application.created_at
        self.updated_at = application.updated_at

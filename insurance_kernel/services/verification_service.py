"""
VerificationService -- intake and review of clients' personal data.

Clients (or agents on their behalf) submit an item of personal data; an
agent approves or rejects it.  Only supported types are accepted at intake
(case-insensitive, stored trimmed).  ``evaluate_activation_gate`` exposes
the contract activation gate for a client without touching any contract.
"""

from __future__ import annotations

from uuid import UUID

from insurance_kernel.domain.dtos import VerificationInfo
from insurance_kernel.domain.verification import DocumentVerification
from insurance_kernel.domain.verification_policy import (
    SUPPORTED_PERSONAL_DATA_TYPES,
    ActivationGateResult,
    evaluate_activation_gate,
    is_supported_type,
)
from insurance_kernel.exceptions import (
    AgentNotFoundError,
    ClientNotFoundError,
    UnsupportedDocumentTypeError,
    VerificationNotFoundError,
)
from insurance_kernel.services.base import BaseService
from insurance_kernel.services.results import OperationResult


class VerificationService(BaseService):
    def _load(self, verification_id: UUID) -> DocumentVerification:
        verification = self._repos.verifications.get_by_id(verification_id)
        if verification is None:
            raise VerificationNotFoundError(str(verification_id))
        return verification

    def _require_agent(self, agent_id: UUID | None) -> None:
        if agent_id is not None and self._repos.agents.get_by_id(agent_id) is None:
            raise AgentNotFoundError(str(agent_id))

    def _persist(self, verification: DocumentVerification) -> VerificationInfo:
        self._repos.verifications.update(verification)
        self._save()
        return VerificationInfo.from_entity(verification)

    def submit_verification(
        self,
        client_id: UUID,
        document_type: str,
        document_number: str | None = None,
        notes: str | None = None,
        agent_id: UUID | None = None,
    ) -> OperationResult[VerificationInfo]:
        """Record a new Pending verification.  ``agent_id`` is None for self-submission."""

        def work() -> VerificationInfo:
            if self._repos.clients.get_by_id(client_id) is None:
                raise ClientNotFoundError(str(client_id))
            if not is_supported_type(document_type):
                raise UnsupportedDocumentTypeError(
                    document_type, SUPPORTED_PERSONAL_DATA_TYPES,
                )
            self._require_agent(agent_id)
            verification = DocumentVerification.create(
                client_id=client_id,
                document_type=document_type.strip(),
                document_number=document_number,
                notes=notes,
                verified_by_agent_id=agent_id,
                now=self._now(),
            )
            self._repos.verifications.add(verification)
            self._record(
                agent_id, "SubmitVerification",
                f"Submitted {verification.document_type} for review",
                verification.id, "DocumentVerification",
            )
            self._save()
            return VerificationInfo.from_entity(verification)

        return self._execute(
            "submit_verification", work, client_id=client_id, document_type=document_type,
        )

    def approve_verification(
        self,
        verification_id: UUID,
        agent_id: UUID,
        notes: str | None = None,
    ) -> OperationResult[VerificationInfo]:
        def work() -> VerificationInfo:
            verification = self._load(verification_id)
            self._require_agent(agent_id)
            verification.approve(agent_id, notes, now=self._now())
            self._record(
                agent_id, "ApproveVerification",
                f"Approved {verification.document_type}",
                verification.id, "DocumentVerification",
            )
            return self._persist(verification)

        return self._execute("approve_verification", work, verification_id=verification_id)

    def reject_verification(
        self,
        verification_id: UUID,
        agent_id: UUID,
        reason: str,
    ) -> OperationResult[VerificationInfo]:
        def work() -> VerificationInfo:
            verification = self._load(verification_id)
            self._require_agent(agent_id)
            verification.reject(agent_id, reason, now=self._now())
            self._record(
                agent_id, "RejectVerification",
                f"Rejected {verification.document_type}: {reason}",
                verification.id, "DocumentVerification",
            )
            return self._persist(verification)

        return self._execute("reject_verification", work, verification_id=verification_id)

    def assign_agent(
        self,
        verification_id: UUID,
        agent_id: UUID,
    ) -> OperationResult[VerificationInfo]:
        def work() -> VerificationInfo:
            verification = self._load(verification_id)
            self._require_agent(agent_id)
            verification.assign_agent(agent_id)
            return self._persist(verification)

        return self._execute("assign_verification_agent", work, verification_id=verification_id)

    def list_for_client(self, client_id: UUID) -> list[VerificationInfo]:
        return [
            VerificationInfo.from_entity(v)
            for v in self._repos.verifications.get_by_client_id(client_id)
        ]

    def evaluate_activation_gate(self, client_id: UUID) -> ActivationGateResult:
        return evaluate_activation_gate(self._repos.verifications.get_by_client_id(client_id))

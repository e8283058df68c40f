"""Orchestration services of the insurance kernel."""

from insurance_kernel.services.application_service import ApplicationService
from insurance_kernel.services.contract_service import (
    ContractService,
    generate_contract_number,
)
from insurance_kernel.services.history import OperationHistoryService
from insurance_kernel.services.payment_service import PaymentService
from insurance_kernel.services.results import OperationResult, OperationStatus
from insurance_kernel.services.verification_service import VerificationService

__all__ = [
    "ApplicationService",
    "ContractService",
    "OperationHistoryService",
    "OperationResult",
    "OperationStatus",
    "PaymentService",
    "VerificationService",
    "generate_contract_number",
]

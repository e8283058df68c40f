"""
Pure domain layer of the insurance kernel: entities, value objects,
state-machine tables and the verification policy.  Nothing here performs
I/O; time is passed in by callers.
"""

from insurance_kernel.domain.application import (
    APPLICATION_WORKFLOW,
    ApplicationStatus,
    ContractApplication,
)
from insurance_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from insurance_kernel.domain.contract import (
    CONTRACT_WORKFLOW,
    TERMINAL_CONTRACT_STATUSES,
    Contract,
    ContractStatus,
)
from insurance_kernel.domain.parties import (
    Agent,
    Client,
    InsuranceService,
    OperationRecord,
)
from insurance_kernel.domain.payment import PAYMENT_WORKFLOW, Payment, PaymentStatus
from insurance_kernel.domain.values import DateRange, Money
from insurance_kernel.domain.verification import (
    VERIFICATION_WORKFLOW,
    DocumentType,
    DocumentVerification,
    VerificationStatus,
)
from insurance_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "APPLICATION_WORKFLOW",
    "CONTRACT_WORKFLOW",
    "PAYMENT_WORKFLOW",
    "TERMINAL_CONTRACT_STATUSES",
    "VERIFICATION_WORKFLOW",
    "Agent",
    "ApplicationStatus",
    "Client",
    "Clock",
    "Contract",
    "ContractApplication",
    "ContractStatus",
    "DateRange",
    "DeterministicClock",
    "DocumentType",
    "DocumentVerification",
    "Guard",
    "InsuranceService",
    "Money",
    "OperationRecord",
    "Payment",
    "PaymentStatus",
    "SystemClock",
    "Transition",
    "VerificationStatus",
    "Workflow",
]

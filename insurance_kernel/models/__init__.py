"""SQLAlchemy ORM models.  Importing this package registers every table."""

from insurance_kernel.models.contract import ContractModel, PaymentModel
from insurance_kernel.models.history import OperationHistoryModel
from insurance_kernel.models.party import AgentModel, ClientModel, InsuranceServiceModel
from insurance_kernel.models.verification import (
    ContractApplicationModel,
    DocumentVerificationModel,
)

__all__ = [
    "AgentModel",
    "ClientModel",
    "ContractApplicationModel",
    "ContractModel",
    "DocumentVerificationModel",
    "InsuranceServiceModel",
    "OperationHistoryModel",
    "PaymentModel",
]

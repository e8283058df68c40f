"""Repository protocols and their SQLAlchemy implementations."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from insurance_kernel.repositories.contract_repository import (
    SqlAlchemyContractRepository,
    SqlAlchemyPaymentRepository,
)
from insurance_kernel.repositories.history_repository import (
    SqlAlchemyOperationHistoryRepository,
)
from insurance_kernel.repositories.party_repository import (
    SqlAlchemyAgentRepository,
    SqlAlchemyClientRepository,
    SqlAlchemyInsuranceServiceRepository,
)
from insurance_kernel.repositories.protocols import (
    AgentRepository,
    ApplicationRepository,
    ClientRepository,
    ContractRepository,
    InsuranceServiceRepository,
    OperationHistoryRepository,
    PaymentRepository,
    UnitOfWork,
    VerificationRepository,
)
from insurance_kernel.repositories.verification_repository import (
    SqlAlchemyApplicationRepository,
    SqlAlchemyVerificationRepository,
)


@dataclass(frozen=True)
class Repositories:
    """Every repository bound to one session, i.e. one unit of work."""

    contracts: ContractRepository
    payments: PaymentRepository
    clients: ClientRepository
    agents: AgentRepository
    services: InsuranceServiceRepository
    verifications: VerificationRepository
    applications: ApplicationRepository
    history: OperationHistoryRepository

    @classmethod
    def for_session(cls, session: Session) -> "Repositories":
        return cls(
            contracts=SqlAlchemyContractRepository(session),
            payments=SqlAlchemyPaymentRepository(session),
            clients=SqlAlchemyClientRepository(session),
            agents=SqlAlchemyAgentRepository(session),
            services=SqlAlchemyInsuranceServiceRepository(session),
            verifications=SqlAlchemyVerificationRepository(session),
            applications=SqlAlchemyApplicationRepository(session),
            history=SqlAlchemyOperationHistoryRepository(session),
        )


__all__ = [
    "AgentRepository",
    "ApplicationRepository",
    "ClientRepository",
    "ContractRepository",
    "InsuranceServiceRepository",
    "OperationHistoryRepository",
    "PaymentRepository",
    "Repositories",
    "SqlAlchemyAgentRepository",
    "SqlAlchemyApplicationRepository",
    "SqlAlchemyClientRepository",
    "SqlAlchemyContractRepository",
    "SqlAlchemyInsuranceServiceRepository",
    "SqlAlchemyOperationHistoryRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyVerificationRepository",
    "UnitOfWork",
    "VerificationRepository",
]

"""
Module: insurance_kernel.models.party
Responsibility: ORM persistence for the shared lookup entities: clients,
    agents and insurance services (products).
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ (for the entity converters) only.

Failure modes:
    - IntegrityError on a duplicate client or agent email.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from insurance_kernel.db.base import Base
from insurance_kernel.domain.parties import Agent, Client, InsuranceService
from insurance_kernel.domain.values import Money


class ClientModel(Base):
    """A client row.  ``email`` is where reconciliation notices go."""

    __tablename__ = "clients"

    __table_args__ = (
        UniqueConstraint("email", name="uq_client_email"),
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    passport: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def to_entity(self) -> Client:
        return Client(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            phone=self.phone,
            passport=self.passport,
        )

    @classmethod
    def from_entity(cls, client: Client) -> ClientModel:
        return cls(
            id=client.id,
            full_name=client.full_name,
            email=client.email,
            phone=client.phone,
            passport=client.passport,
        )

    def apply(self, client: Client) -> None:
        self.full_name = client.full_name
        self.email = client.email
        self.phone = client.phone
        self.passport = client.passport

    def __repr__(self) -> str:
        return f"<Client {self.full_name} <{self.email}>>"


class AgentModel(Base):
    __tablename__ = "agents"

    __table_args__ = (
        UniqueConstraint("email", name="uq_agent_email"),
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def to_entity(self) -> Agent:
        return Agent(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            employee_number=self.employee_number,
        )

    @classmethod
    def from_entity(cls, agent: Agent) -> AgentModel:
        return cls(
            id=agent.id,
            full_name=agent.full_name,
            email=agent.email,
            employee_number=agent.employee_number,
        )

    def __repr__(self) -> str:
        return f"<Agent {self.full_name}>"


class InsuranceServiceModel(Base):
    """An insurance product and its default premium."""

    __tablename__ = "insurance_services"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_premium_amount: Mapped[Decimal] = mapped_column(nullable=False)
    default_premium_currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="RUB",
    )

    def to_entity(self) -> InsuranceService:
        return InsuranceService(
            id=self.id,
            name=self.name,
            default_premium=Money(self.default_premium_amount, self.default_premium_currency),
            description=self.description,
        )

    @classmethod
    def from_entity(cls, service: InsuranceService) -> InsuranceServiceModel:
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            default_premium_amount=service.default_premium.amount,
            default_premium_currency=service.default_premium.currency,
        )

    def __repr__(self) -> str:
        return f"<InsuranceService {self.name}>"

"""SQLAlchemy repositories for clients, agents and insurance services."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from insurance_kernel.domain.parties import Agent, Client, InsuranceService
from insurance_kernel.exceptions import ClientNotFoundError
from insurance_kernel.models.party import AgentModel, ClientModel, InsuranceServiceModel
from insurance_kernel.repositories.base import SqlAlchemyRepository


class SqlAlchemyClientRepository(SqlAlchemyRepository[ClientModel]):
    model = ClientModel

    def add(self, client: Client) -> None:
        self.session.add(ClientModel.from_entity(client))
        self.session.flush()

    def update(self, client: Client) -> None:
        model = self._get_model(client.id)
        if model is None:
            raise ClientNotFoundError(str(client.id))
        model.apply(client)
        self.session.flush()

    def get_by_id(self, client_id: UUID) -> Client | None:
        model = self._get_model(client_id)
        return model.to_entity() if model is not None else None

    def get_by_email(self, email: str) -> Client | None:
        stmt = select(ClientModel).where(
            func.lower(ClientModel.email) == email.strip().lower()
        )
        model = self.session.scalars(stmt).first()
        return model.to_entity() if model is not None else None

    def list_all(self) -> list[Client]:
        stmt = select(ClientModel).order_by(ClientModel.full_name)
        return [m.to_entity() for m in self.session.scalars(stmt).all()]


class SqlAlchemyAgentRepository(SqlAlchemyRepository[AgentModel]):
    model = AgentModel

    def add(self, agent: Agent) -> None:
        self.session.add(AgentModel.from_entity(agent))
        self.session.flush()

    def get_by_id(self, agent_id: UUID) -> Agent | None:
        model = self._get_model(agent_id)
        return model.to_entity() if model is not None else None

    def list_all(self) -> list[Agent]:
        stmt = select(AgentModel).order_by(AgentModel.full_name)
        return [m.to_entity() for m in self.session.scalars(stmt).all()]


class SqlAlchemyInsuranceServiceRepository(SqlAlchemyRepository[InsuranceServiceModel]):
    model = InsuranceServiceModel

    def add(self, service: InsuranceService) -> None:
        self.session.add(InsuranceServiceModel.from_entity(service))
        self.session.flush()

    def get_by_id(self, service_id: UUID) -> InsuranceService | None:
        model = self._get_model(service_id)
        return model.to_entity() if model is not None else None

    def list_all(self) -> list[InsuranceService]:
        stmt = select(InsuranceServiceModel).order_by(InsuranceServiceModel.name)
        return [m.to_entity() for m in self.session.scalars(stmt).all()]

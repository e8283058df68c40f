"""
ApplicationService -- client applications for a contract.

A client submits an application for an insurance service; an agent
approves or rejects it.  Processing an approved application creates the
contract through ``ContractService.create_contract`` (so it is registered
with a fresh number under the processing agent) and marks the application
Processed.  If contract creation fails, the application stays Approved.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from insurance_kernel.domain.application import (
    APPLICATION_WORKFLOW,
    ApplicationStatus,
    ContractApplication,
)
from insurance_kernel.domain.clock import Clock
from insurance_kernel.domain.dtos import ApplicationInfo, ContractInfo
from insurance_kernel.domain.workflow import require_transition
from insurance_kernel.exceptions import (
    AgentNotFoundError,
    ApplicationNotFoundError,
    ClientNotFoundError,
    InsuranceServiceNotFoundError,
)
from insurance_kernel.repositories import Repositories
from insurance_kernel.services.base import BaseService
from insurance_kernel.services.contract_service import ContractService
from insurance_kernel.services.results import OperationResult


class ApplicationService(BaseService):
    def __init__(
        self,
        repositories: Repositories,
        clock: Clock | None = None,
        contract_service: ContractService | None = None,
    ):
        super().__init__(repositories, clock=clock)
        self._contracts = contract_service or ContractService(repositories, clock=self._clock)

    def _load(self, application_id: UUID) -> ContractApplication:
        application = self._repos.applications.get_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundError(str(application_id))
        return application

    def _require_agent(self, agent_id: UUID) -> None:
        if self._repos.agents.get_by_id(agent_id) is None:
            raise AgentNotFoundError(str(agent_id))

    def _persist(self, application: ContractApplication) -> ApplicationInfo:
        self._repos.applications.update(application)
        self._save()
        return ApplicationInfo.from_entity(application)

    def submit_application(
        self,
        client_id: UUID,
        service_id: UUID,
        desired_start_date: datetime,
        desired_end_date: datetime,
        desired_premium: Decimal | str | int,
        notes: str | None = None,
    ) -> OperationResult[ApplicationInfo]:
        def work() -> ApplicationInfo:
            if self._repos.clients.get_by_id(client_id) is None:
                raise ClientNotFoundError(str(client_id))
            if self._repos.services.get_by_id(service_id) is None:
                raise InsuranceServiceNotFoundError(str(service_id))
            application = ContractApplication.create(
                client_id=client_id,
                service_id=service_id,
                desired_start_date=desired_start_date,
                desired_end_date=desired_end_date,
                desired_premium=desired_premium,
                notes=notes,
                now=self._now(),
            )
            self._repos.applications.add(application)
            self._save()
            return ApplicationInfo.from_entity(application)

        return self._execute("submit_application", work, client_id=client_id)

    def approve_application(
        self,
        application_id: UUID,
        agent_id: UUID,
    ) -> OperationResult[ApplicationInfo]:
        def work() -> ApplicationInfo:
            application = self._load(application_id)
            self._require_agent(agent_id)
            application.approve(agent_id, now=self._now())
            self._record(
                agent_id, "ApproveApplication", "Approved contract application",
                application.id, "ContractApplication",
            )
            return self._persist(application)

        return self._execute("approve_application", work, application_id=application_id)

    def reject_application(
        self,
        application_id: UUID,
        reason: str,
        agent_id: UUID | None = None,
    ) -> OperationResult[ApplicationInfo]:
        def work() -> ApplicationInfo:
            application = self._load(application_id)
            application.reject(reason, now=self._now())
            self._record(
                agent_id, "RejectApplication", f"Rejected contract application: {reason}",
                application.id, "ContractApplication",
            )
            return self._persist(application)

        return self._execute("reject_application", work, application_id=application_id)

    def process_application(
        self,
        application_id: UUID,
        agent_id: UUID,
    ) -> OperationResult[ContractInfo]:
        """Turn an Approved application into a registered contract."""

        def work() -> ContractInfo | OperationResult[ContractInfo]:
            application = self._load(application_id)
            self._require_agent(agent_id)
            # Checked before the contract exists so a refusal creates nothing.
            require_transition(
                APPLICATION_WORKFLOW, "Application", "process", application.status.value,
            )

            created = self._contracts.create_contract(
                client_id=application.client_id,
                service_id=application.service_id,
                start_date=application.desired_start_date.date(),
                end_date=application.desired_end_date.date(),
                premium_amount=application.desired_premium,
                agent_id=agent_id,
                notes=application.notes,
            )
            if not created.is_success:
                return created

            application.process(agent_id, now=self._now())
            self._persist(application)
            return created.value

        return self._execute("process_application", work, application_id=application_id)

    def list_applications(
        self,
        status: ApplicationStatus | None = None,
    ) -> list[ApplicationInfo]:
        applications = (
            self._repos.applications.get_by_status(status)
            if status is not None
            else self._repos.applications.list_all()
        )
        return [ApplicationInfo.from_entity(a) for a in applications]

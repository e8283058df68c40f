"""
ProblematicContractsChecker -- the reconciliation engine.

Contract:
    ``run()`` executes every registered pass in order against one reference
    instant taken from the injected clock, and returns a
    ``ReconciliationReport`` whose ``total`` is the sum of the per-pass
    counts.

Architecture: insurance_batch/services.  Depends on the repository
    protocols and the notification port only, so it runs against
    SQLAlchemy repositories in production and fakes in tests, with or
    without ``ReconciliationScheduler`` around it.

Invariants enforced:
    - Per-contract isolation: an exception while handling one contract is
      logged, the pending unit of work is discarded, and the pass moves on
      to the next contract.  Later passes still run.
    - Cancellation (``stop_event``) is honoured between contracts and
      between passes, never in the middle of one contract.
    - Idempotent flagging: a contract is flagged problematic at most once,
      however many runs see it.
    - All timestamps come from the injected Clock.

Failure modes:
    - A failing selection query (the pass cannot even list its contracts)
      aborts the run: ``reconciliation_failed`` is logged and the exception
      propagates to the caller.
"""

from __future__ import annotations

import threading
from uuid import uuid4

from sqlalchemy.orm import Session

from insurance_kernel.domain.clock import Clock, SystemClock
from insurance_kernel.exceptions import InsuranceKernelError
from insurance_kernel.external.notifications import (
    LoggingNotificationSender,
    NotificationSender,
)
from insurance_kernel.logging_config import LogContext, get_logger
from insurance_kernel.repositories import Repositories
from insurance_kernel.repositories.protocols import (
    ClientRepository,
    ContractRepository,
    VerificationRepository,
)

from insurance_batch.domain.types import (
    ContractCheckResult,
    ContractOutcome,
    PassResult,
    ReconciliationPolicy,
    ReconciliationReport,
)
from insurance_batch.passes.base import (
    PassContext,
    PassRegistry,
    ReconciliationPass,
    default_pass_registry,
)

logger = get_logger("batch.reconciliation")


class ProblematicContractsChecker:
    """Finds contracts that need attention and acts on them.

    Non-goals:
        - Does NOT guard against overlapping runs; run it from one worker.
        - Does NOT retry failed contracts; the next run sees them again.
    """

    def __init__(
        self,
        contracts: ContractRepository,
        clients: ClientRepository,
        verifications: VerificationRepository,
        notifier: NotificationSender | None = None,
        clock: Clock | None = None,
        policy: ReconciliationPolicy | None = None,
        registry: PassRegistry | None = None,
    ):
        self._contracts = contracts
        self._clients = clients
        self._verifications = verifications
        self._notifier = notifier or LoggingNotificationSender()
        self._clock = clock or SystemClock()
        self._policy = policy or ReconciliationPolicy()
        self._registry = registry or default_pass_registry()

    @classmethod
    def for_session(
        cls,
        session: Session,
        notifier: NotificationSender | None = None,
        clock: Clock | None = None,
        policy: ReconciliationPolicy | None = None,
        registry: PassRegistry | None = None,
    ) -> "ProblematicContractsChecker":
        repos = Repositories.for_session(session)
        return cls(
            repos.contracts,
            repos.clients,
            repos.verifications,
            notifier=notifier,
            clock=clock,
            policy=policy,
            registry=registry,
        )

    @property
    def policy(self) -> ReconciliationPolicy:
        return self._policy

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def run(self, stop_event: threading.Event | None = None) -> ReconciliationReport:
        """Run all passes once and report what was found."""
        run_id = uuid4()
        started_at = self._clock.now_utc()
        context = PassContext(
            now=started_at,
            today=started_at.date(),
            policy=self._policy,
            contracts=self._contracts,
            clients=self._clients,
            verifications=self._verifications,
            notifier=self._notifier,
        )

        with LogContext.bind(run_id=str(run_id)):
            logger.info(
                "reconciliation_started",
                extra={
                    "passes": list(self._registry.names()),
                    "today": context.today.isoformat(),
                },
            )

            pass_results: list[PassResult] = []
            cancelled = False
            try:
                for reconciliation_pass in self._registry.passes():
                    if _stopped(stop_event):
                        cancelled = True
                        break
                    result = self._run_pass(reconciliation_pass, context, stop_event)
                    pass_results.append(result)
                    if result.cancelled:
                        cancelled = True
                        break
            except Exception:
                logger.exception("reconciliation_failed")
                raise

            report = ReconciliationReport(
                run_id=run_id,
                started_at=started_at,
                completed_at=self._clock.now_utc(),
                passes=tuple(pass_results),
                cancelled=cancelled,
            )
            logger.info(
                "reconciliation_completed",
                extra={
                    "total": report.total,
                    "counts": {p.pass_name: p.count for p in report.passes},
                    "failed": sum(p.failed for p in report.passes),
                    "notifications_sent": report.notifications_sent,
                    "cancelled": cancelled,
                },
            )
            return report

    def run_pass(self, name: str) -> PassResult:
        """Run a single registered pass on its own (on-demand trigger)."""
        started_at = self._clock.now_utc()
        context = PassContext(
            now=started_at,
            today=started_at.date(),
            policy=self._policy,
            contracts=self._contracts,
            clients=self._clients,
            verifications=self._verifications,
            notifier=self._notifier,
        )
        return self._run_pass(self._registry.get(name), context, None)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_pass(
        self,
        reconciliation_pass: ReconciliationPass,
        context: PassContext,
        stop_event: threading.Event | None,
    ) -> PassResult:
        name = reconciliation_pass.name
        with LogContext.bind(pass_name=name):
            results, cancelled = self._check_contracts(reconciliation_pass, context, stop_event)

        return PassResult(
            pass_name=name,
            examined=len(results),
            results=tuple(results),
            cancelled=cancelled,
        )

    def _check_contracts(
        self,
        reconciliation_pass: ReconciliationPass,
        context: PassContext,
        stop_event: threading.Event | None,
    ) -> tuple[list[ContractCheckResult], bool]:
        name = reconciliation_pass.name
        contracts = reconciliation_pass.select_contracts(context)
        results: list[ContractCheckResult] = []
        cancelled = False

        for contract in contracts:
            if _stopped(stop_event):
                cancelled = True
                logger.info(
                    f"{name}_pass_cancelled",
                    extra={"remaining": len(contracts) - len(results)},
                )
                break

            with LogContext.contract(contract):
                try:
                    result = reconciliation_pass.check_contract(contract, context)
                except Exception as exc:
                    self._contracts.discard_changes()
                    logger.exception(f"{name}_contract_failed")
                    result = ContractCheckResult(
                        contract_id=contract.id,
                        number=contract.number,
                        status=contract.status.value,
                        outcome=ContractOutcome.FAILED,
                        error_code=(
                            exc.code
                            if isinstance(exc, InsuranceKernelError)
                            else "UNHANDLED_EXCEPTION"
                        ),
                        error_message=str(exc),
                    )
                else:
                    _log_result(name, result)
            results.append(result)

        return results, cancelled


def _stopped(stop_event: threading.Event | None) -> bool:
    return stop_event is not None and stop_event.is_set()


def _log_result(pass_name: str, result: ContractCheckResult) -> None:
    extra = {
        "status": result.status,
        "outcome": result.outcome.value,
        "reason": result.reason,
        "notified": result.notified,
    }
    if result.outcome == ContractOutcome.PROBLEM:
        logger.warning(f"{pass_name}_contract_found", extra=extra)
    elif result.outcome in (ContractOutcome.EXPIRED, ContractOutcome.REMINDED):
        logger.info(f"{pass_name}_contract_found", extra=extra)
    elif result.outcome == ContractOutcome.SKIPPED:
        logger.debug(f"{pass_name}_contract_skipped", extra=extra)

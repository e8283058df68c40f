"""
Pytest fixtures for the insurance kernel test suite.

Provides:
- An in-memory SQLite database per test (StaticPool, so every session of
  the test sees the same data)
- A deterministic clock fixed at 2024-06-01 12:00 UTC
- A seeded client, agent and insurance service
- A recording notification sender and a scripted payment gateway
- Factories for contracts and verifications that bypass the validated
  constructors, so damaged rows can be stored too
- Structured-logging fixtures (``captured_logs``)
"""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy.orm import sessionmaker

from insurance_kernel.db.engine import build_engine, create_tables
from insurance_kernel.domain.clock import DeterministicClock
from insurance_kernel.domain.contract import Contract, ContractStatus
from insurance_kernel.domain.parties import Agent, Client, InsuranceService
from insurance_kernel.domain.values import Money
from insurance_kernel.domain.verification import DocumentVerification, VerificationStatus
from insurance_kernel.external.payment_gateway import GatewayResult
from insurance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from insurance_kernel.repositories import Repositories

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
TODAY = FIXED_NOW.date()

_UNSET = object()


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture insurance_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, checker):
            checker.run()
            logs = captured_logs()
            assert any(r["message"] == "reconciliation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("insurance_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def repos(session) -> Repositories:
    return Repositories.for_session(session)


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock.on(TODAY)


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@pytest.fixture
def client(repos) -> Client:
    c = Client.create(
        full_name="Иванов Иван Иванович",
        email="ivanov@example.com",
        phone="+7 900 000-00-00",
        passport="4510 123456",
    )
    repos.clients.add(c)
    repos.clients.save_changes()
    return c


@pytest.fixture
def agent(repos) -> Agent:
    a = Agent.create(
        full_name="Петрова Анна",
        email="petrova@agency.example.com",
        employee_number="A-001",
    )
    repos.agents.add(a)
    repos.agents.save_changes()
    return a


@pytest.fixture
def insurance_service(repos) -> InsuranceService:
    s = InsuranceService.create(
        name="ОСАГО",
        default_premium=Money.of("10000.00"),
        description="Compulsory motor liability",
    )
    repos.services.add(s)
    repos.services.save_changes()
    return s


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class RecordingNotifier:
    """NotificationSender that keeps every notice in ``sent``."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def send(self, recipient_email: str, subject: str, body: str) -> None:
        self.sent.append((recipient_email, subject, body))

    @property
    def subjects(self) -> list[str]:
        return [subject for _, subject, _ in self.sent]


class ScriptedGateway:
    """
    PaymentGateway that succeeds with ``TX-<n>`` unless told to decline.

    ``calls`` records every (amount, currency, idempotency_key).
    """

    def __init__(self):
        self.calls: list[tuple[Decimal, str, str]] = []
        self._declines: list[str] = []

    def decline_next(self, error: str) -> None:
        self._declines.append(error)

    def process_payment(self, amount, currency, idempotency_key) -> GatewayResult:
        self.calls.append((amount, currency, idempotency_key))
        if self._declines:
            return GatewayResult.declined(self._declines.pop(0))
        return GatewayResult.ok(f"TX-{len(self.calls)}")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_contract(repos, client, insurance_service, agent):
    """
    Store a contract built with the plain constructor (no validation).

    ``client_id`` / ``service_id`` default to the seeded client and service;
    pass ``None`` explicitly to store a contract without one.
    """

    def _make(
        status: ContractStatus = ContractStatus.REGISTERED,
        start_date: date = TODAY - timedelta(days=30),
        end_date: date = TODAY + timedelta(days=335),
        premium: Money | str = "10000.00",
        number=_UNSET,
        client_id=_UNSET,
        service_id=_UNSET,
        is_paid: bool = False,
        is_flagged_problem: bool = False,
        created_at: datetime = FIXED_NOW - timedelta(days=1),
        notes: str | None = None,
    ) -> Contract:
        contract = Contract(
            id=uuid4(),
            client_id=client.id if client_id is _UNSET else client_id,
            service_id=insurance_service.id if service_id is _UNSET else service_id,
            start_date=start_date,
            end_date=end_date,
            premium=premium if isinstance(premium, Money) else Money.of(premium),
            status=status,
            number=f"CTR-20240601-{uuid4().hex[:6]}" if number is _UNSET else number,
            agent_id=agent.id,
            is_paid=is_paid,
            is_flagged_problem=is_flagged_problem,
            notes=notes,
            created_at=created_at,
            updated_at=created_at,
        )
        repos.contracts.add(contract)
        repos.contracts.save_changes()
        return contract

    return _make


@pytest.fixture
def add_verification(repos):
    """Store a verification of ``document_type`` in the given status."""

    def _add(
        client_id,
        document_type: str,
        status: VerificationStatus = VerificationStatus.APPROVED,
    ) -> DocumentVerification:
        verification = DocumentVerification.create(
            client_id=client_id,
            document_type=document_type,
            document_number="N-1",
            now=FIXED_NOW - timedelta(days=2),
        )
        verification.status = status
        repos.verifications.add(verification)
        repos.verifications.save_changes()
        return verification

    return _add


@pytest.fixture
def verified_client(client, add_verification) -> Client:
    """The seeded client with FullName and Passport approved."""
    add_verification(client.id, "FullName")
    add_verification(client.id, "Passport")
    return client

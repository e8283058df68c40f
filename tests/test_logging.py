"""
Structured logging: JSON rendering of domain values and the scope the
services and the reconciliation checker attach to their records.
"""

import json
import logging
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from insurance_batch import ProblematicContractsChecker
from insurance_kernel.domain.contract import ContractStatus
from insurance_kernel.domain.values import Money
from insurance_kernel.exceptions import ContractNotFoundError, InvalidTransitionError
from insurance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from insurance_kernel.services import ContractService, PaymentService


def _format(message: str, *, exc: BaseException | None = None, **extra) -> dict:
    """Render one record through StructuredFormatter and parse it back."""
    record = logging.LogRecord(
        "insurance_kernel.batch.reconciliation", logging.WARNING, __file__, 1,
        message, (), (type(exc), exc, exc.__traceback__) if exc else None,
    )
    record.__dict__.update(extra)
    return json.loads(StructuredFormatter().format(record))


class TestRecordRendering:

    def test_envelope(self):
        line = _format("overdue_contract_found")
        assert line["message"] == "overdue_contract_found"
        assert line["level"] == "WARNING"
        assert line["component"] == "batch.reconciliation"
        assert "ts" in line

    def test_domain_values_rendered(self):
        payment_id = uuid4()
        line = _format(
            "payment_processing",
            payment_id=payment_id,
            amount=Money.of("10000"),
            status=ContractStatus.OVERDUE,
            counts={"overdue": 1, "premium": Decimal("1.50")},
        )
        assert line["payment_id"] == str(payment_id)
        assert line["amount"] == "10000.00 RUB"
        assert line["status"] == "overdue"
        assert line["counts"] == {"overdue": 1, "premium": "1.50"}

    def test_cyrillic_kept_readable(self):
        formatted = StructuredFormatter().format(
            logging.LogRecord("insurance_kernel.x", logging.INFO, "", 0, "Договор истек", (), None)
        )
        assert "Договор истек" in formatted

    def test_kernel_error_code_and_fields(self):
        try:
            raise InvalidTransitionError("Contract", "activate", "draft", ("paid",))
        except InvalidTransitionError as exc:
            line = _format("activate_contract_failed", exc=exc)

        assert line["exc_type"] == "InvalidTransitionError"
        assert line["error_code"] == "INVALID_TRANSITION"
        assert line["error_fields"]["current_state"] == "draft"
        assert line["error_fields"]["action"] == "activate"
        assert "traceback" in line

    def test_not_found_carries_entity_id(self):
        missing = str(uuid4())
        line = _format("lookup_failed", exc=ContractNotFoundError(missing))
        assert line["error_code"] == "CONTRACT_NOT_FOUND"
        assert line["error_fields"]["entity_id"] == missing

    def test_foreign_exception_has_no_code(self):
        line = _format("tick_failed", exc=RuntimeError("boom"))
        assert line["exc_message"] == "boom"
        assert "error_code" not in line


class TestLogContext:

    def test_bind_restores_outer_scope(self):
        with LogContext.bind(run_id="run-1", pass_name="overdue"):
            with LogContext.bind(pass_name="expired", contract_id="c1"):
                assert LogContext.current() == {
                    "run_id": "run-1", "pass_name": "expired", "contract_id": "c1",
                }
            assert LogContext.current() == {"run_id": "run-1", "pass_name": "overdue"}
        assert LogContext.current() == {}

    def test_none_values_ignored(self):
        with LogContext.bind(actor_id=None, run_id="r"):
            assert LogContext.current() == {"run_id": "r"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="contract_nmber"):
            with LogContext.bind(contract_nmber="X"):
                pass

    def test_contract_scope(self, make_contract):
        registered = make_contract(number="CTR-20240601-ABC123")
        unregistered = make_contract(number=None)

        with LogContext.contract(registered):
            assert LogContext.current() == {
                "contract_id": str(registered.id),
                "contract_number": "CTR-20240601-ABC123",
            }
        with LogContext.contract(unregistered):
            assert LogContext.current() == {"contract_id": str(unregistered.id)}


class TestEmittedScope:

    def test_reconciliation_records_carry_run_pass_and_contract(
        self, repos, clock, notifier, make_contract, captured_logs,
    ):
        contract = make_contract(
            status=ContractStatus.ACTIVE,
            end_date=clock.today() - timedelta(days=3),
        )
        checker = ProblematicContractsChecker(
            repos.contracts, repos.clients, repos.verifications,
            notifier=notifier, clock=clock,
        )

        report = checker.run()

        logs = captured_logs()
        found = next(r for r in logs if r["message"] == "overdue_contract_found")
        assert found["run_id"] == str(report.run_id)
        assert found["pass_name"] == "overdue"
        assert found["contract_id"] == str(contract.id)
        assert found["contract_number"] == contract.number

        completed = next(r for r in logs if r["message"] == "reconciliation_completed")
        assert completed["run_id"] == str(report.run_id)
        assert "pass_name" not in completed
        assert "contract_id" not in completed

    def test_payment_records_carry_actor_and_amount(
        self, repos, clock, gateway, agent, verified_client, make_contract, captured_logs,
    ):
        contract = make_contract(status=ContractStatus.REGISTERED)

        PaymentService(repos, clock=clock, gateway=gateway).initiate_payment(
            contract.id, "10000", actor_id=agent.id,
        ).unwrap()

        processing = next(r for r in captured_logs() if r["message"] == "payment_processing")
        assert processing["actor_id"] == str(agent.id)
        assert processing["contract_number"] == contract.number
        assert processing["amount"] == "10000.00 RUB"
        assert processing["component"] == "services.payment"

    def test_rejected_operation_keeps_actor(self, repos, clock, agent, captured_logs):
        missing = uuid4()

        ContractService(repos, clock=clock).cancel_contract(missing, actor_id=agent.id)

        rejected = next(r for r in captured_logs() if r["message"] == "cancel_contract_rejected")
        assert rejected["actor_id"] == str(agent.id)
        assert rejected["contract_id"] == str(missing)
        assert rejected["error_code"] == "CONTRACT_NOT_FOUND"


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def _unconfigured(self):
        reset_logging()
        yield
        reset_logging()

    def test_single_handler_and_level_update(self):
        stream = StringIO()
        configure_logging(stream=stream)
        configure_logging(level="warning", stream=StringIO())

        root = logging.getLogger("insurance_kernel")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

        get_logger("services").info("hidden")
        get_logger("services").warning("shown")
        assert [json.loads(line)["message"] for line in stream.getvalue().splitlines()] == [
            "shown",
        ]

    def test_reset_restores_propagation(self):
        configure_logging(stream=StringIO())
        reset_logging()
        root = logging.getLogger("insurance_kernel")
        assert root.handlers == []
        assert root.propagate is True

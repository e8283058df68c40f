"""
Tests for the Contract aggregate and its state machine.

Verifies:
- Validated construction (dates, premium, ids)
- Guarded transitions: register, activate, resume
- Unconditional transitions and their notes
- mark_as_paid idempotence, renew resetting the flag, add_payment dedup
"""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from insurance_kernel.domain.contract import Contract, ContractStatus
from insurance_kernel.domain.payment import Payment
from insurance_kernel.domain.values import Money
from insurance_kernel.exceptions import (
    DomainStateError,
    InvalidTransitionError,
    ValidationError,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(hours=1)


def _contract(**overrides) -> Contract:
    kwargs = dict(
        client_id=uuid4(),
        service_id=uuid4(),
        start_date=date(2024, 6, 1),
        end_date=date(2025, 5, 31),
        premium=Money.of("10000"),
        now=NOW,
    )
    kwargs.update(overrides)
    return Contract.create(**kwargs)


def _in_status(status: ContractStatus) -> Contract:
    contract = _contract()
    contract.status = status
    return contract


class TestContractCreate:

    def test_starts_in_draft(self):
        contract = _contract()
        assert contract.status == ContractStatus.DRAFT
        assert contract.number is None
        assert not contract.is_paid
        assert not contract.is_flagged_problem
        assert contract.created_at == NOW == contract.updated_at

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _contract(start_date=date(2024, 6, 2), end_date=date(2024, 6, 1))
        assert exc_info.value.field == "end_date"

    def test_same_day_allowed(self):
        contract = _contract(start_date=date(2024, 6, 1), end_date=date(2024, 6, 1))
        assert contract.start_date == contract.end_date

    @pytest.mark.parametrize("amount", ["0", "0.00", "0.004"])
    def test_non_positive_premium_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            _contract(premium=Money.of(amount))
        assert exc_info.value.field == "premium"

    def test_missing_client_rejected(self):
        with pytest.raises(ValidationError):
            _contract(client_id=None)

    def test_missing_service_rejected(self):
        with pytest.raises(ValidationError):
            _contract(service_id=None)

    def test_blank_notes_dropped(self):
        assert _contract(notes="   ").notes is None

    def test_display_number_falls_back_to_id(self):
        contract = _contract()
        assert contract.display_number == str(contract.id)


class TestRegister:

    @pytest.mark.parametrize("source", [ContractStatus.DRAFT, ContractStatus.SUSPENDED])
    def test_from_draft_or_suspended(self, source):
        contract = _in_status(source)
        agent_id = uuid4()
        contract.register("CTR-1", agent_id, now=LATER)

        assert contract.status == ContractStatus.REGISTERED
        assert contract.number == "CTR-1"
        assert contract.agent_id == agent_id
        assert contract.updated_at == LATER

    @pytest.mark.parametrize("status", list(ContractStatus))
    @pytest.mark.parametrize("number", ["", "   ", None])
    def test_empty_number_always_rejected(self, status, number):
        contract = _in_status(status)
        with pytest.raises(ValidationError):
            contract.register(number, uuid4())
        assert contract.status == status

    @pytest.mark.parametrize(
        "status",
        [s for s in ContractStatus if s not in (ContractStatus.DRAFT, ContractStatus.SUSPENDED)],
    )
    def test_other_sources_refused(self, status):
        contract = _in_status(status)
        with pytest.raises(InvalidTransitionError):
            contract.register("CTR-1", uuid4())


class TestMarkAsPaid:

    @pytest.mark.parametrize("source", [ContractStatus.REGISTERED, ContractStatus.PENDING_PAYMENT])
    def test_awaiting_payment_moves_to_paid(self, source):
        contract = _in_status(source)
        contract.mark_as_paid(now=LATER)
        assert contract.is_paid
        assert contract.status == ContractStatus.PAID

    def test_other_status_only_sets_flag(self):
        contract = _in_status(ContractStatus.SUSPENDED)
        contract.mark_as_paid()
        assert contract.is_paid
        assert contract.status == ContractStatus.SUSPENDED

    def test_idempotent(self):
        contract = _in_status(ContractStatus.REGISTERED)
        contract.mark_as_paid(now=NOW)
        contract.mark_as_paid(now=LATER)

        assert contract.is_paid
        assert contract.status == ContractStatus.PAID
        assert contract.updated_at == NOW


class TestActivate:

    def test_from_paid(self):
        contract = _in_status(ContractStatus.PAID)
        contract.activate(now=LATER)
        assert contract.status == ContractStatus.ACTIVE

    @pytest.mark.parametrize("status", [s for s in ContractStatus if s != ContractStatus.PAID])
    def test_refused_elsewhere_naming_state(self, status):
        contract = _in_status(status)
        with pytest.raises(DomainStateError) as exc_info:
            contract.activate()

        assert exc_info.value.current_state == status.value
        assert status.value in str(exc_info.value)
        assert contract.status == status


class TestUnconditionalTransitions:

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_mark_overdue(self, status):
        contract = _in_status(status)
        contract.mark_overdue(now=LATER)
        assert contract.status == ContractStatus.OVERDUE
        assert contract.updated_at == LATER

    def test_suspend_with_reason(self):
        contract = _in_status(ContractStatus.ACTIVE)
        contract.suspend("client request")
        assert contract.status == ContractStatus.SUSPENDED
        assert contract.notes == "Suspended: client request"

    def test_suspend_without_reason(self):
        contract = _in_status(ContractStatus.ACTIVE)
        contract.suspend()
        assert contract.notes == "Suspended"

    def test_resume_returns_to_registered(self):
        contract = _in_status(ContractStatus.SUSPENDED)
        contract.resume()
        assert contract.status == ContractStatus.REGISTERED

    def test_resume_refused_when_not_suspended(self):
        contract = _in_status(ContractStatus.ACTIVE)
        with pytest.raises(InvalidTransitionError):
            contract.resume()

    def test_mark_problematic_flags_and_notes(self):
        contract = _in_status(ContractStatus.ACTIVE)
        contract.mark_problematic("Contract is overdue")

        assert contract.status == ContractStatus.PROBLEMATIC
        assert contract.is_flagged_problem
        assert contract.notes == "Problem: Contract is overdue"

    def test_notes_append_with_separator(self):
        contract = _contract(notes="created by agent")
        contract.suspend("a")
        contract.mark_problematic("b")
        assert contract.notes == "created by agent | Suspended: a | Problem: b"

    def test_cancel(self):
        contract = _in_status(ContractStatus.ACTIVE)
        contract.cancel("fraud")
        assert contract.status == ContractStatus.CANCELLED
        assert contract.is_terminal
        assert contract.notes == "Cancelled: fraud"

    def test_expire(self):
        contract = _in_status(ContractStatus.OVERDUE)
        contract.expire()
        assert contract.status == ContractStatus.EXPIRED
        assert contract.is_terminal

    def test_can(self):
        assert _in_status(ContractStatus.PAID).can("activate")
        assert not _in_status(ContractStatus.DRAFT).can("activate")


class TestRenew:

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_resets_flag_and_status(self, status):
        contract = _in_status(status)
        contract.is_flagged_problem = True
        contract.renew(date(2025, 6, 1), date(2026, 5, 31), Money.of("12000"))

        assert contract.status == ContractStatus.REGISTERED
        assert not contract.is_flagged_problem
        assert contract.start_date == date(2025, 6, 1)
        assert contract.end_date == date(2026, 5, 31)
        assert contract.premium == Money.of("12000")

    def test_invalid_dates_leave_contract_unchanged(self):
        contract = _in_status(ContractStatus.EXPIRED)
        contract.is_flagged_problem = True
        with pytest.raises(ValidationError):
            contract.renew(date(2025, 6, 1), date(2025, 5, 1), Money.of("1"))

        assert contract.status == ContractStatus.EXPIRED
        assert contract.is_flagged_problem


class TestAddPayment:

    def test_deduplicates_by_id(self):
        contract = _contract()
        payment = Payment.create(contract.id, "100", now=NOW)
        contract.add_payment(payment)
        contract.add_payment(Payment(
            id=payment.id, contract_id=contract.id, amount=payment.amount, currency="RUB",
        ))
        assert contract.payments == [payment]

    def test_touches_updated_at_even_on_duplicate(self):
        contract = _contract()
        payment = Payment.create(contract.id, "100", now=NOW)
        contract.add_payment(payment, now=NOW)
        contract.add_payment(payment, now=LATER)
        assert len(contract.payments) == 1
        assert contract.updated_at == LATER

    def test_none_rejected(self):
        with pytest.raises(ValidationError):
            _contract().add_payment(None)

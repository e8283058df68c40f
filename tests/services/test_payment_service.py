"""
Tests for PaymentService.initiate_payment and refunds.

Verifies:
- The gateway receives the configured currency and the payment id as
  idempotency key
- Confirmation marks the contract paid and auto-activates it only when
  the start date has arrived and FullName / Passport are approved
- A declined payment is persisted as Failed and returned as GATEWAY_FAILED
"""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest

from insurance_kernel.domain.contract import ContractStatus
from insurance_kernel.domain.payment import PaymentStatus
from insurance_kernel.domain.verification import VerificationStatus
from insurance_kernel.services import OperationStatus, PaymentService


@pytest.fixture
def payment_service(repos, clock, gateway):
    return PaymentService(repos, clock=clock, gateway=gateway)


class TestInitiatePayment:

    def test_confirmed_payment_activates_verified_contract(
        self, payment_service, make_contract, verified_client, gateway, repos,
    ):
        contract = make_contract(status=ContractStatus.REGISTERED)

        result = payment_service.initiate_payment(contract.id, "10000")

        assert result.is_success
        outcome = result.value
        assert outcome.payment_status == "confirmed"
        assert outcome.transaction_id == "TX-1"
        assert outcome.contract_activated
        assert outcome.contract_status == "active"

        stored = repos.contracts.get_by_id(contract.id)
        assert stored.is_paid
        assert stored.status == ContractStatus.ACTIVE
        assert [p.id for p in stored.payments] == [outcome.payment_id]

    def test_gateway_receives_currency_and_payment_id(
        self, payment_service, make_contract, gateway,
    ):
        contract = make_contract()
        outcome = payment_service.initiate_payment(contract.id, "10000").value

        amount, currency, key = gateway.calls[0]
        assert str(amount) == "10000.00"
        assert currency == "RUB"
        assert UUID(key) == outcome.payment_id

    def test_configured_currency(self, repos, clock, gateway, make_contract):
        service = PaymentService(repos, clock=clock, gateway=gateway, currency="USD")
        service.initiate_payment(make_contract().id, "10")
        assert gateway.calls[0][1] == "USD"

    def test_unverified_client_stays_paid(self, payment_service, make_contract, repos):
        contract = make_contract(status=ContractStatus.REGISTERED)

        outcome = payment_service.initiate_payment(contract.id, "10000").value

        assert not outcome.contract_activated
        assert outcome.contract_status == "paid"
        stored = repos.contracts.get_by_id(contract.id)
        assert stored.is_paid
        assert stored.status == ContractStatus.PAID

    def test_future_start_stays_paid(self, payment_service, make_contract, verified_client, clock):
        contract = make_contract(start_date=clock.today() + timedelta(days=1))
        outcome = payment_service.initiate_payment(contract.id, "10000").value
        assert outcome.contract_status == "paid"

    def test_start_today_activates(self, payment_service, make_contract, verified_client, clock):
        contract = make_contract(start_date=clock.today())
        assert payment_service.initiate_payment(contract.id, "10000").value.contract_activated

    def test_pending_extra_passport_does_not_block_auto_activation(
        self, payment_service, make_contract, verified_client, add_verification,
    ):
        """Auto-activation uses the missing check only, not the full gate."""
        add_verification(verified_client.id, "Passport", VerificationStatus.PENDING)
        contract = make_contract()
        assert payment_service.initiate_payment(contract.id, "10000").value.contract_activated

    def test_suspended_contract_only_flagged_paid(
        self, payment_service, make_contract, verified_client, repos,
    ):
        contract = make_contract(status=ContractStatus.SUSPENDED)
        outcome = payment_service.initiate_payment(contract.id, "10000").value

        assert not outcome.contract_activated
        stored = repos.contracts.get_by_id(contract.id)
        assert stored.is_paid
        assert stored.status == ContractStatus.SUSPENDED

    def test_declined(self, payment_service, make_contract, gateway, repos):
        contract = make_contract()
        gateway.decline_next("Insufficient funds")

        result = payment_service.initiate_payment(contract.id, "10000")

        assert result.status == OperationStatus.GATEWAY_FAILED
        assert result.error_code == "GATEWAY_ERROR"
        assert result.message == "Insufficient funds"
        assert result.value.payment_status == "failed"

        payment = repos.payments.get_by_id(result.value.payment_id)
        assert payment.status == PaymentStatus.FAILED
        assert payment.attempts == 1
        assert payment.last_error == "Insufficient funds"

        stored = repos.contracts.get_by_id(contract.id)
        assert not stored.is_paid
        assert stored.status == ContractStatus.REGISTERED

    def test_missing_contract(self, payment_service, gateway):
        result = payment_service.initiate_payment(uuid4(), "10000")
        assert result.status == OperationStatus.NOT_FOUND
        assert result.message.endswith("not found")
        assert gateway.calls == []

    def test_non_positive_amount(self, payment_service, make_contract, gateway, repos):
        contract = make_contract()
        result = payment_service.initiate_payment(contract.id, "0")

        assert result.status == OperationStatus.VALIDATION_FAILED
        assert gateway.calls == []
        assert repos.payments.get_by_contract_id(contract.id) == []

    def test_payment_history_recorded_for_actor(self, payment_service, make_contract, agent, repos):
        outcome = payment_service.initiate_payment(make_contract().id, "10000", actor_id=agent.id).value
        records = repos.history.get_by_entity_id(outcome.payment_id)
        assert [r.operation_type for r in records] == ["Payment"]

    def test_gateway_transport_error_leaves_processing(
        self, repos, clock, make_contract,
    ):
        """No compensation: the committed Processing step stays."""

        class BrokenGateway:
            def process_payment(self, amount, currency, idempotency_key):
                raise ConnectionError("gateway unreachable")

        contract = make_contract()
        service = PaymentService(repos, clock=clock, gateway=BrokenGateway())

        with pytest.raises(ConnectionError):
            service.initiate_payment(contract.id, "10000")

        payments = repos.payments.get_by_contract_id(contract.id)
        assert [p.status for p in payments] == [PaymentStatus.PROCESSING]
        assert not repos.contracts.get_by_id(contract.id).is_paid


class TestRefundAndQueries:

    def test_refund_confirmed(self, payment_service, make_contract, repos):
        outcome = payment_service.initiate_payment(make_contract().id, "10000").value

        result = payment_service.refund_payment(outcome.payment_id)

        assert result.is_success
        assert result.value.status == "refunded"
        assert repos.payments.get_by_id(outcome.payment_id).status == PaymentStatus.REFUNDED

    def test_refund_failed_payment_refused(self, payment_service, make_contract, gateway):
        gateway.decline_next("declined")
        outcome = payment_service.initiate_payment(make_contract().id, "10000").value

        result = payment_service.refund_payment(outcome.payment_id)
        assert result.error_code == "INVALID_TRANSITION"

    def test_refund_missing(self, payment_service):
        assert payment_service.refund_payment(uuid4()).error_code == "PAYMENT_NOT_FOUND"

    def test_list_for_contract(self, payment_service, make_contract, gateway):
        contract = make_contract()
        gateway.decline_next("declined")
        payment_service.initiate_payment(contract.id, "10000")
        payment_service.initiate_payment(contract.id, "10000")

        statuses = sorted(p.status for p in payment_service.list_for_contract(contract.id))
        assert statuses == ["confirmed", "failed"]

"""
PaymentService -- premium payment protocol.

Responsibility:
    Drives ``initiate_payment``: create the payment, move it to Processing,
    call the gateway with the payment id as idempotency key, record the
    outcome, then mark the contract paid and auto-activate it when its
    start date has arrived and the client's mandatory data is approved.

Architecture position:
    Kernel > Services -- imperative shell over the Payment and Contract
    state machines and ``verification_policy``.

Invariants enforced:
    - The gateway always receives the configured currency and
      ``str(payment.id)`` as the idempotency key.
    - Every step is committed as it completes:
      Created -> Processing -> Confirmed / Failed -> contract update.
    - Auto-activation uses the simple "no required type missing" check,
      not the full three-stage activation gate, and only fires for a
      contract that is Paid after ``mark_as_paid``.
    - The contract is persisted after confirmation whether or not it was
      activated.

Failure modes:
    - NOT_FOUND result when the contract (or payment, for refunds) is missing.
    - GATEWAY_FAILED result when the gateway declines; the payment is
      persisted as Failed before returning.
    - No compensation: an exception between steps (gateway transport
      error, database failure) leaves the already-committed steps in place,
      e.g. a payment stuck in Processing with the contract unchanged.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from insurance_kernel.domain.clock import Clock
from insurance_kernel.domain.contract import ContractStatus
from insurance_kernel.domain.dtos import PaymentInfo, PaymentOutcome
from insurance_kernel.domain.payment import Payment
from insurance_kernel.domain.verification_policy import mandatory_data_verified
from insurance_kernel.exceptions import (
    ContractNotFoundError,
    GatewayError,
    PaymentNotFoundError,
)
from insurance_kernel.external.payment_gateway import MockPaymentGateway, PaymentGateway
from insurance_kernel.logging_config import LogContext, get_logger
from insurance_kernel.repositories import Repositories
from insurance_kernel.services.base import BaseService
from insurance_kernel.services.results import OperationResult

logger = get_logger("services.payment")


class PaymentService(BaseService):
    def __init__(
        self,
        repositories: Repositories,
        clock: Clock | None = None,
        gateway: PaymentGateway | None = None,
        currency: str = "RUB",
    ):
        super().__init__(repositories, clock=clock)
        self._gateway = gateway or MockPaymentGateway()
        self._currency = currency

    def initiate_payment(
        self,
        contract_id: UUID,
        amount: Decimal | str | int,
        actor_id: UUID | None = None,
    ) -> OperationResult[PaymentOutcome]:
        def work() -> PaymentOutcome | OperationResult[PaymentOutcome]:
            contract = self._repos.contracts.get_by_id(contract_id)
            if contract is None:
                raise ContractNotFoundError(str(contract_id))

            payment_id = uuid4()
            payment = Payment.create(
                contract.id,
                amount,
                currency=self._currency,
                idempotency_key=str(payment_id),
                payment_id=payment_id,
                now=self._now(),
            )
            self._repos.payments.add(payment)
            self._save()

            with LogContext.contract(contract):
                payment.mark_processing(now=self._now())
                self._repos.payments.update(payment)
                self._save()

                logger.info(
                    "payment_processing",
                    extra={
                        "payment_id": str(payment.id),
                        "amount": payment.money,
                        "attempt": payment.attempts,
                    },
                )
                result = self._gateway.process_payment(
                    payment.amount, payment.currency, str(payment.id),
                )

                if not result.success:
                    payment.mark_failed(result.error, now=self._now())
                    self._repos.payments.update(payment)
                    self._save()
                    error = GatewayError(result.error or "Payment failed", str(payment.id))
                    logger.warning(
                        "payment_declined",
                        extra={"payment_id": str(payment.id), "reason": str(error)},
                    )
                    return OperationResult.failure(
                        error,
                        value=PaymentOutcome(
                            payment_id=payment.id,
                            contract_id=contract.id,
                            payment_status=payment.status.value,
                            contract_status=contract.status.value,
                        ),
                    )

                payment.mark_confirmed(result.transaction_id or "", now=self._now())
                self._repos.payments.update(payment)
                self._save()

                now = self._now()
                contract.add_payment(payment, now=now)
                contract.mark_as_paid(now=now)

                activated = False
                if (
                    contract.start_date <= self._clock.today()
                    and contract.status == ContractStatus.PAID
                    and contract.client_id is not None
                    and mandatory_data_verified(
                        self._repos.verifications.get_by_client_id(contract.client_id)
                    )
                ):
                    contract.activate(now=now)
                    activated = True

                self._repos.contracts.update(contract)
                self._record(
                    actor_id, "Payment",
                    f"Paid {payment.money} for contract {contract.display_number}",
                    payment.id, "Payment",
                )
                self._save()

                logger.info(
                    "payment_confirmed",
                    extra={
                        "payment_id": str(payment.id),
                        "transaction_id": result.transaction_id,
                        "contract_status": contract.status.value,
                        "contract_activated": activated,
                    },
                )
                return PaymentOutcome(
                    payment_id=payment.id,
                    contract_id=contract.id,
                    payment_status=payment.status.value,
                    transaction_id=payment.psp_transaction_id,
                    contract_status=contract.status.value,
                    contract_activated=activated,
                )

        return self._execute("initiate_payment", work, contract_id=contract_id, actor_id=actor_id)

    def refund_payment(
        self,
        payment_id: UUID,
        actor_id: UUID | None = None,
    ) -> OperationResult[PaymentInfo]:
        """Refund a confirmed payment.  The contract is left as it is."""

        def work() -> PaymentInfo:
            payment = self._repos.payments.get_by_id(payment_id)
            if payment is None:
                raise PaymentNotFoundError(str(payment_id))
            payment.mark_refunded(now=self._now())
            self._repos.payments.update(payment)
            self._record(
                actor_id, "RefundPayment", f"Refunded {payment.money}",
                payment.id, "Payment",
            )
            self._save()
            return PaymentInfo.from_entity(payment)

        return self._execute("refund_payment", work, payment_id=payment_id, actor_id=actor_id)

    def list_for_contract(self, contract_id: UUID) -> list[PaymentInfo]:
        return [
            PaymentInfo.from_entity(p)
            for p in self._repos.payments.get_by_contract_id(contract_id)
        ]

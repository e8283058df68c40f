"""
Payment gateway port and the mock gateway.

Responsibility:
    ``PaymentGateway`` is the black-box contract the payment service calls:
    ``process_payment(amount, currency, idempotency_key)`` returns a
    ``GatewayResult``.  ``MockPaymentGateway`` always succeeds with a
    ``MOCK-<hex>`` transaction id; no real provider is integrated.

Architecture position:
    Kernel > External.  May import from domain/ and logging_config only.

Failure modes:
    A declined payment is reported in the result (``success=False`` and an
    error message), never raised.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable
from uuid import uuid4

from insurance_kernel.logging_config import get_logger

logger = get_logger("external.payment_gateway")


@dataclass(frozen=True)
class GatewayResult:
    success: bool
    transaction_id: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, transaction_id: str) -> GatewayResult:
        return cls(success=True, transaction_id=transaction_id)

    @classmethod
    def declined(cls, error: str) -> GatewayResult:
        return cls(success=False, error=error)


@runtime_checkable
class PaymentGateway(Protocol):
    def process_payment(
        self,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
    ) -> GatewayResult:
        """Charge ``amount``; repeated calls with one key charge at most once."""
        ...


class MockPaymentGateway:
    """
    Development gateway: every payment succeeds.

    Honours the idempotency key: a repeated key returns the transaction id
    issued the first time. Only the latest ``max_keys`` keys are remembered;
    an older key is treated as new.
    """

    def __init__(self, max_keys: int = 10_000) -> None:
        if max_keys < 1:
            raise ValueError("max_keys must be positive")
        self._max_keys = max_keys
        self._issued: OrderedDict[str, str] = OrderedDict()

    def process_payment(
        self,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
    ) -> GatewayResult:
        transaction_id = self._issued.get(idempotency_key)
        if transaction_id is None:
            transaction_id = f"MOCK-{uuid4().hex}"
            self._issued[idempotency_key] = transaction_id
            if len(self._issued) > self._max_keys:
                self._issued.popitem(last=False)
        else:
            self._issued.move_to_end(idempotency_key)
        logger.info(
            "mock_payment_processed",
            extra={
                "amount": amount,
                "currency": currency,
                "idempotency_key": idempotency_key,
                "transaction_id": transaction_id,
            },
        )
        return GatewayResult.ok(transaction_id)

"""
Typed Exception Hierarchy for the Insurance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to tell "contract not found" from "contract cannot be
activated yet" without parsing message strings. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        contract.activate(now=clock.now_utc())
    except InvalidTransitionError as e:
        log.warning("activation_refused", extra={"state": e.current_state})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InsuranceKernelError (base)
    |
    +-- NotFoundError
    |   +-- ContractNotFoundError
    |   +-- ClientNotFoundError
    |   +-- AgentNotFoundError
    |   +-- InsuranceServiceNotFoundError
    |   +-- PaymentNotFoundError
    |   +-- VerificationNotFoundError
    |   +-- ApplicationNotFoundError
    |
    +-- ValidationError
    |   +-- CurrencyMismatchError
    |   +-- NegativeMoneyError
    |   +-- UnsupportedDocumentTypeError
    |
    +-- DomainStateError
    |   +-- InvalidTransitionError
    |   +-- VerificationGateError
    |
    +-- GatewayError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|-----------------------------------
Not found    | NOT_FOUND                   | Referenced entity is absent
             | CONTRACT_NOT_FOUND          | Contract id doesn't exist
             | CLIENT_NOT_FOUND            | Client id doesn't exist
             | AGENT_NOT_FOUND             | Agent id doesn't exist
             | INSURANCE_SERVICE_NOT_FOUND | Insurance service id doesn't exist
             | PAYMENT_NOT_FOUND           | Payment id doesn't exist
             | VERIFICATION_NOT_FOUND      | Verification id doesn't exist
             | APPLICATION_NOT_FOUND       | Application id doesn't exist
-------------|-----------------------------|-----------------------------------
Validation   | VALIDATION_ERROR            | Malformed constructor/transition input
             | CURRENCY_MISMATCH           | Money arithmetic across currencies
             | NEGATIVE_MONEY              | Money would become negative
             | UNSUPPORTED_DOCUMENT_TYPE   | Unknown personal data type at intake
-------------|-----------------------------|-----------------------------------
State        | DOMAIN_STATE_ERROR          | Business rule refused the operation
             | INVALID_TRANSITION          | Transition illegal from current state
             | VERIFICATION_REQUIRED       | Mandatory documents not approved
-------------|-----------------------------|-----------------------------------
Gateway      | GATEWAY_ERROR               | Payment gateway reported failure

===============================================================================
HANDLING PATTERNS
===============================================================================

Entities RAISE these exceptions. Orchestration services catch
``InsuranceKernelError`` at their boundary and hand back an
``OperationResult`` whose status is derived from the category:

    NotFoundError     -> NOT_FOUND
    ValidationError   -> VALIDATION_FAILED
    DomainStateError  -> DOMAIN_REJECTED
    GatewayError      -> GATEWAY_FAILED

``GatewayError`` is never raised by the kernel: a declined payment is an
expected business outcome, so it is only ever carried inside a result.
"""

from __future__ import annotations

from typing import Sequence


class InsuranceKernelError(Exception):
    """
    Base exception for all insurance kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INSURANCE_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(InsuranceKernelError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"
    entity_type: str = "Entity"

    def __init__(self, entity_id: str, entity_type: str | None = None):
        self.entity_id = entity_id
        if entity_type is not None:
            self.entity_type = entity_type
        super().__init__(f"{self.entity_type} {entity_id} not found")


class ContractNotFoundError(NotFoundError):
    """Contract with given ID was not found."""

    code: str = "CONTRACT_NOT_FOUND"
    entity_type: str = "Contract"


class ClientNotFoundError(NotFoundError):
    """Client with given ID was not found."""

    code: str = "CLIENT_NOT_FOUND"
    entity_type: str = "Client"


class AgentNotFoundError(NotFoundError):
    """Agent with given ID was not found."""

    code: str = "AGENT_NOT_FOUND"
    entity_type: str = "Agent"


class InsuranceServiceNotFoundError(NotFoundError):
    """Insurance service (product) with given ID was not found."""

    code: str = "INSURANCE_SERVICE_NOT_FOUND"
    entity_type: str = "Insurance service"


class PaymentNotFoundError(NotFoundError):
    """Payment with given ID was not found."""

    code: str = "PAYMENT_NOT_FOUND"
    entity_type: str = "Payment"


class VerificationNotFoundError(NotFoundError):
    """Document verification with given ID was not found."""

    code: str = "VERIFICATION_NOT_FOUND"
    entity_type: str = "Document verification"


class ApplicationNotFoundError(NotFoundError):
    """Contract application with given ID was not found."""

    code: str = "APPLICATION_NOT_FOUND"
    entity_type: str = "Contract application"


# Validation exceptions


class ValidationError(InsuranceKernelError):
    """
    Malformed input to a constructor or transition.

    Carries the offending field name when one can be identified.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class CurrencyMismatchError(ValidationError):
    """Arithmetic attempted on Money values of different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, left_currency: str, right_currency: str):
        self.left_currency = left_currency
        self.right_currency = right_currency
        super().__init__(
            f"Currency mismatch: {left_currency} and {right_currency}",
            field="currency",
        )


class NegativeMoneyError(ValidationError):
    """A Money amount is, or would become, negative."""

    code: str = "NEGATIVE_MONEY"

    def __init__(self, amount: str, currency: str | None = None):
        self.amount = amount
        self.currency = currency
        super().__init__(f"Amount cannot be negative: {amount}", field="amount")


class UnsupportedDocumentTypeError(ValidationError):
    """Personal data type is not accepted for verification intake."""

    code: str = "UNSUPPORTED_DOCUMENT_TYPE"

    def __init__(self, document_type: str | None, supported: Sequence[str]):
        self.document_type = document_type
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported personal data type: {document_type!r}. "
            f"Supported: {', '.join(self.supported)}",
            field="document_type",
        )


# State exceptions


class DomainStateError(InsuranceKernelError):
    """An operation is refused by the entity's current state or a business gate."""

    code: str = "DOMAIN_STATE_ERROR"


class InvalidTransitionError(DomainStateError):
    """
    Transition is not legal from the entity's current state.

    The message always names the current state; ``required_states`` lists
    the states the action is legal from, when that set is known.
    """

    code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        action: str,
        current_state: str,
        required_states: Sequence[str] = (),
    ):
        self.entity_type = entity_type
        self.action = action
        self.current_state = current_state
        self.required_states = tuple(required_states)
        message = f"Cannot {action} {entity_type.lower()} from state {current_state}"
        if self.required_states:
            message += f". {entity_type} must be {' or '.join(self.required_states)}."
        super().__init__(message)


class VerificationGateError(DomainStateError):
    """
    Mandatory personal data of the client is not verified.

    ``reason`` is the user-facing message; ``pending_types`` and
    ``missing_types`` carry the structured cause.
    """

    code: str = "VERIFICATION_REQUIRED"

    def __init__(
        self,
        reason: str,
        pending_types: Sequence[str] = (),
        missing_types: Sequence[str] = (),
    ):
        self.reason = reason
        self.pending_types = tuple(pending_types)
        self.missing_types = tuple(missing_types)
        super().__init__(reason)


# Gateway


class GatewayError(InsuranceKernelError):
    """
    Payment gateway reported a failure.

    Not raised by the kernel; carried as the error value of a failed
    payment result.
    """

    code: str = "GATEWAY_ERROR"

    def __init__(self, message: str, payment_id: str | None = None):
        self.payment_id = payment_id
        super().__init__(message)

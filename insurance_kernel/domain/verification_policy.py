"""
Verification policy -- mandatory personal data rules.

Responsibility:
    Pure functions that evaluate a client's set of DocumentVerifications
    against the agency's mandatory personal data list.  Used by contract
    activation (full three-stage gate), by payment auto-activation (missing
    check only), by the data-integrity reconciliation pass and by
    verification intake (supported-type check).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The type lists are
    process-wide immutable constants.

Invariants enforced:
    - Type comparisons are case-insensitive and ignore surrounding blanks.
    - The activation gate runs its checks in a fixed order (pending
      required, missing required, no approved documents at all) and
      reports only the first failing check.

Failure modes:
    - ``require_activation_allowed`` raises VerificationGateError carrying the
      user-facing Russian message of the failing check.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from insurance_kernel.domain.verification import (
    DocumentType,
    DocumentVerification,
    VerificationStatus,
)
from insurance_kernel.exceptions import VerificationGateError

REQUIRED_PERSONAL_DATA_TYPES: tuple[str, ...] = (
    DocumentType.FULL_NAME.value,
    DocumentType.PASSPORT.value,
)

SUPPORTED_PERSONAL_DATA_TYPES: tuple[str, ...] = tuple(t.value for t in DocumentType)

PENDING_REQUIRED_MESSAGE = (
    "Нельзя активировать договор: ожидает верификации обязательные данные ({types})"
)
MISSING_REQUIRED_MESSAGE = (
    "Нельзя активировать договор: нет одобренных обязательных данных ({types})"
)
NO_APPROVED_DOCUMENTS_MESSAGE = (
    "Нельзя активировать договор: нет одобренных документов клиента"
)


def _key(document_type: str | None) -> str:
    return (document_type or "").strip().casefold()


def is_same_type(a: str | None, b: str | None) -> bool:
    """Case-insensitive equality; False when either side is blank."""
    if not a or not a.strip() or not b or not b.strip():
        return False
    return _key(a) == _key(b)


def is_required_type(document_type: str | None) -> bool:
    return any(is_same_type(document_type, t) for t in REQUIRED_PERSONAL_DATA_TYPES)


def normalize_document_type(document_type: str | None) -> str | None:
    """Canonical spelling of a supported type, or None when unsupported."""
    for supported in SUPPORTED_PERSONAL_DATA_TYPES:
        if is_same_type(document_type, supported):
            return supported
    return None


def is_supported_type(document_type: str | None) -> bool:
    return normalize_document_type(document_type) is not None


def pending_required(verifications: Iterable[DocumentVerification]) -> tuple[str, ...]:
    """Document types of required verifications still awaiting review."""
    return tuple(
        v.document_type or ""
        for v in verifications
        if v.status == VerificationStatus.PENDING and is_required_type(v.document_type)
    )


def missing_required(verifications: Iterable[DocumentVerification]) -> tuple[str, ...]:
    """Required types with no approved verification, in policy order."""
    approved = [v for v in verifications if v.status == VerificationStatus.APPROVED]
    return tuple(
        required
        for required in REQUIRED_PERSONAL_DATA_TYPES
        if not any(is_same_type(v.document_type, required) for v in approved)
    )


def has_approved_documents(verifications: Iterable[DocumentVerification]) -> bool:
    return any(v.status == VerificationStatus.APPROVED for v in verifications)


def mandatory_data_verified(verifications: Iterable[DocumentVerification]) -> bool:
    """The simpler check used for auto-activation after payment."""
    return not missing_required(verifications)


@dataclass(frozen=True)
class ActivationGateResult:
    """Outcome of the three-stage activation gate."""

    passed: bool
    reason: str | None = None
    pending_types: tuple[str, ...] = ()
    missing_types: tuple[str, ...] = ()

    def to_error(self) -> VerificationGateError:
        return VerificationGateError(
            self.reason or "",
            pending_types=self.pending_types,
            missing_types=self.missing_types,
        )


def evaluate_activation_gate(
    verifications: Iterable[DocumentVerification],
) -> ActivationGateResult:
    items = list(verifications)

    pending = pending_required(items)
    if pending:
        return ActivationGateResult(
            passed=False,
            reason=PENDING_REQUIRED_MESSAGE.format(types=", ".join(pending)),
            pending_types=pending,
        )

    missing = missing_required(items)
    if missing:
        return ActivationGateResult(
            passed=False,
            reason=MISSING_REQUIRED_MESSAGE.format(types=", ".join(missing)),
            missing_types=missing,
        )

    if not has_approved_documents(items):
        return ActivationGateResult(passed=False, reason=NO_APPROVED_DOCUMENTS_MESSAGE)

    return ActivationGateResult(passed=True)


def require_activation_allowed(verifications: Iterable[DocumentVerification]) -> None:
    """
    Raise unless the client's verifications allow contract activation.

    Raises:
        VerificationGateError: the first failing check of the gate.
    """
    result = evaluate_activation_gate(verifications)
    if not result.passed:
        raise result.to_error()


def describe_verification_problems(
    verifications: Iterable[DocumentVerification],
) -> list[str]:
    """Problem descriptions for the data-integrity reconciliation pass."""
    items = list(verifications)
    problems: list[str] = []
    pending = pending_required(items)
    if pending:
        problems.append(f"Pending verification for: {', '.join(pending)}")
    missing = missing_required(items)
    if missing:
        problems.append(f"No approved verification for: {', '.join(missing)}")
    return problems

"""
OperationResult -- the tagged outcome returned by every orchestration call.

Expected business outcomes (entity not found, malformed input, refused
transition or verification gate, declined payment) come back as a frozen
``OperationResult`` whose ``status`` is derived from the exception
category.  Only programmer errors and infrastructure failures propagate as
exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from insurance_kernel.exceptions import (
    DomainStateError,
    GatewayError,
    InsuranceKernelError,
    NotFoundError,
    ValidationError,
)

T = TypeVar("T")


class OperationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    DOMAIN_REJECTED = "domain_rejected"
    GATEWAY_FAILED = "gateway_failed"


def status_for(error: InsuranceKernelError) -> OperationStatus:
    """Map an exception category onto a result status."""
    if isinstance(error, NotFoundError):
        return OperationStatus.NOT_FOUND
    if isinstance(error, ValidationError):
        return OperationStatus.VALIDATION_FAILED
    if isinstance(error, GatewayError):
        return OperationStatus.GATEWAY_FAILED
    if isinstance(error, DomainStateError):
        return OperationStatus.DOMAIN_REJECTED
    return OperationStatus.DOMAIN_REJECTED


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Result of an orchestration operation."""

    status: OperationStatus
    value: T | None = None
    error: InsuranceKernelError | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T | None = None, message: str | None = None) -> OperationResult[T]:
        return cls(status=OperationStatus.SUCCEEDED, value=value, message=message)

    @classmethod
    def failure(cls, error: InsuranceKernelError, value: T | None = None) -> OperationResult[T]:
        return cls(status=status_for(error), value=value, error=error, message=str(error))

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCEEDED

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

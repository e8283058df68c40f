"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the value types used by contracts and applications: Money
    (premium amounts), DateRange (date-only coverage periods) and the
    append-only notes helper shared by contracts, verifications and
    applications.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every entity module.  No outward dependencies except
    insurance_kernel.exceptions.

Invariants enforced:
    - Money amount is a Decimal, never float, and never negative.
    - Money amount is always rounded to 2 decimal places, ROUND_HALF_UP
      (10.005 -> 10.01).
    - Money currency is a non-empty, upper-cased code.
    - Addition and subtraction never mix currencies; subtraction never
      produces a negative amount.
    - DateRange end is never before start.

Failure modes:
    - ValidationError on construction with an unparseable amount or an empty
      currency.
    - NegativeMoneyError on a negative amount or a negative subtraction result.
    - CurrencyMismatchError when arithmetic mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from insurance_kernel.exceptions import (
    CurrencyMismatchError,
    NegativeMoneyError,
    ValidationError,
)

MONEY_QUANTUM = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its currency code -- they are NEVER
        separated.  Equality is value-based (amount and currency).

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - amount is a Decimal rounded to 2 places, ROUND_HALF_UP, >= 0
        - currency is a stripped, upper-cased, non-empty code

    Non-goals:
        - Does NOT perform currency conversion
        - Does NOT validate against an ISO 4217 registry
    """

    amount: Decimal
    currency: str = "RUB"

    def __post_init__(self) -> None:
        amount = self.amount
        if not isinstance(amount, Decimal):
            try:
                amount = Decimal(str(amount))
            except (InvalidOperation, ValueError) as e:
                raise ValidationError(f"Invalid amount: {self.amount}", field="amount") from e
        if not amount.is_finite():
            raise ValidationError(f"Invalid amount: {self.amount}", field="amount")

        currency = self.currency.strip().upper() if isinstance(self.currency, str) else ""
        if not currency:
            raise ValidationError("Currency required", field="currency")

        if amount < 0:
            raise NegativeMoneyError(str(amount), currency)
        rounded = amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)

        object.__setattr__(self, "amount", rounded)
        object.__setattr__(self, "currency", currency)

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str = "RUB") -> Money:
        """Factory method for creating Money from a Decimal, string or int."""
        return cls(amount=amount, currency=currency)  # type: ignore[arg-type]

    @classmethod
    def zero(cls, currency: str = "RUB") -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    def _require_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def add(self, other: Money) -> Money:
        """Add two Money values. Must be same currency."""
        self._require_same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def subtract(self, other: Money) -> Money:
        """
        Subtract ``other`` from this amount.

        Raises:
            CurrencyMismatchError: currencies differ.
            NegativeMoneyError: the result would be negative.
        """
        self._require_same_currency(other)
        result = self.amount - other.amount
        if result < 0:
            raise NegativeMoneyError(str(result), self.currency)
        return Money(amount=result, currency=self.currency)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    def __repr__(self) -> str:
        return f"Money({self.amount}, {self.currency!r})"


NOTE_SEPARATOR = " | "


def append_note(existing: str | None, note: str | None) -> str | None:
    """Join ``note`` onto an append-only notes log; empty notes are ignored."""
    if not note or not note.strip():
        return existing
    if not existing:
        return note
    return f"{existing}{NOTE_SEPARATOR}{note}"


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive date-only range; ``end`` is never before ``start``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("End must be >= Start", field="end")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1

"""
Canonical workflow types (``insurance_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for workflow state machines.  Contract, Payment,
DocumentVerification and ContractApplication each declare their lifecycle
as a ``Workflow`` table and move between states only through
``require_transition`` on that table, so Guard, Transition and Workflow are
defined once.  Guards are descriptive: the entity does not evaluate them.
The ``mandatory_data_verified`` guard on contract activation is checked by
the contract service (``verification_policy``) before the entity moves.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/``, ``services/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* ``require_transition`` raises ``InvalidTransitionError`` naming the
  current state and the states the action is legal from.
"""

from __future__ import annotations

from dataclasses import dataclass

from insurance_kernel.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owning service does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for an entity lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    ``terminal_states`` are logical ends (they may still accept the
    unconditional administrative transitions).
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state!r} not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action} "
                    f"{t.from_state}->{t.to_state} references an unknown state"
                )

    def find(self, action: str, from_state: str) -> Transition | None:
        """Return the transition for ``action`` out of ``from_state``, if any."""
        for t in self.transitions:
            if t.action == action and t.from_state == from_state:
                return t
        return None

    def sources_for(self, action: str) -> tuple[str, ...]:
        """States from which ``action`` is legal, in declaration order."""
        seen: list[str] = []
        for t in self.transitions:
            if t.action == action and t.from_state not in seen:
                seen.append(t.from_state)
        return tuple(seen)

    def actions(self) -> tuple[str, ...]:
        seen: list[str] = []
        for t in self.transitions:
            if t.action not in seen:
                seen.append(t.action)
        return tuple(seen)


def from_every_state(
    states: tuple[str, ...],
    to_state: str,
    action: str,
    guard: Guard | None = None,
) -> tuple[Transition, ...]:
    """Declare an unconditional action: one transition out of each state."""
    return tuple(Transition(s, to_state, action=action, guard=guard) for s in states)


def require_transition(
    workflow: Workflow,
    entity_type: str,
    action: str,
    current_state: str,
) -> Transition:
    """
    Look up the transition for ``action`` from ``current_state``.

    Raises:
        InvalidTransitionError: no such transition is declared.
    """
    transition = workflow.find(action, current_state)
    if transition is None:
        raise InvalidTransitionError(
            entity_type,
            action,
            current_state,
            required_states=workflow.sources_for(action),
        )
    return transition

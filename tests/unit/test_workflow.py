"""
Unit tests for the workflow tables.

Verifies:
- Workflow construction rejects unknown states
- The declared contract, payment, verification and application graphs
- InvalidTransitionError names the current and the required states
"""

import pytest

from insurance_kernel.domain.application import APPLICATION_WORKFLOW
from insurance_kernel.domain.contract import CONTRACT_WORKFLOW, ContractStatus
from insurance_kernel.domain.payment import PAYMENT_WORKFLOW
from insurance_kernel.domain.verification import VERIFICATION_WORKFLOW
from insurance_kernel.domain.workflow import (
    Transition,
    Workflow,
    from_every_state,
    require_transition,
)
from insurance_kernel.exceptions import DomainStateError, InvalidTransitionError


class TestWorkflowDefinition:

    def test_initial_state_must_be_known(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="w", description="", initial_state="x",
                states=("a",), transitions=(),
            )

    def test_transition_states_must_be_known(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="w", description="", initial_state="a",
                states=("a",), transitions=(Transition("a", "b", action="go"),),
            )

    def test_from_every_state(self):
        transitions = from_every_state(("a", "b"), "c", "close")
        assert [(t.from_state, t.to_state) for t in transitions] == [("a", "c"), ("b", "c")]

    def test_sources_and_actions_deduplicated(self):
        assert CONTRACT_WORKFLOW.sources_for("register") == ("draft", "suspended")
        assert CONTRACT_WORKFLOW.actions().count("mark_overdue") == 1


class TestContractWorkflow:

    def test_activate_only_from_paid(self):
        assert CONTRACT_WORKFLOW.sources_for("activate") == ("paid",)

    def test_activate_is_guarded_by_verification(self):
        transition = CONTRACT_WORKFLOW.find("activate", "paid")
        assert transition.guard is not None
        assert transition.guard.name == "mandatory_data_verified"

    def test_resume_only_from_suspended(self):
        assert CONTRACT_WORKFLOW.sources_for("resume") == ("suspended",)

    @pytest.mark.parametrize("action", ["mark_overdue", "suspend", "mark_problematic", "cancel", "expire", "renew"])
    def test_unconditional_actions_legal_everywhere(self, action):
        assert set(CONTRACT_WORKFLOW.sources_for(action)) == {s.value for s in ContractStatus}

    def test_terminal_states(self):
        assert set(CONTRACT_WORKFLOW.terminal_states) == {"cancelled", "expired", "completed"}


class TestOtherWorkflows:

    def test_payment_processing_sources(self):
        assert PAYMENT_WORKFLOW.sources_for("mark_processing") == ("created", "failed", "timeout")

    def test_payment_refund_only_from_confirmed(self):
        assert PAYMENT_WORKFLOW.sources_for("mark_refunded") == ("confirmed",)

    def test_verification_reviews_can_be_revised(self):
        assert VERIFICATION_WORKFLOW.find("reject", "approved") is not None
        assert VERIFICATION_WORKFLOW.find("approve", "rejected") is not None

    def test_application_graph(self):
        assert APPLICATION_WORKFLOW.sources_for("approve") == ("pending",)
        assert APPLICATION_WORKFLOW.sources_for("reject") == ("pending",)
        assert APPLICATION_WORKFLOW.sources_for("process") == ("approved",)


class TestRequireTransition:

    def test_returns_transition(self):
        transition = require_transition(CONTRACT_WORKFLOW, "Contract", "activate", "paid")
        assert transition.to_state == "active"

    def test_error_names_current_and_required_states(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            require_transition(CONTRACT_WORKFLOW, "Contract", "activate", "draft")

        error = exc_info.value
        assert isinstance(error, DomainStateError)
        assert error.current_state == "draft"
        assert error.required_states == ("paid",)
        assert str(error) == "Cannot activate contract from state draft. Contract must be paid."

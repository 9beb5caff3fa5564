"""
Tests for workflow value objects and the ledger workflow declaration.
"""

import pytest

from erp_engines.ledger import RECORD_PAYMENT, REVERSE_ALL_PAYMENTS, LedgerStatus
from erp_kernel.domain.workflow import Transition, Workflow
from erp_modules.ledger.workflows import LEDGER_WORKFLOW


class TestWorkflowValidation:

    def test_initial_state_must_be_declared(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="w",
                description="",
                initial_state="missing",
                states=("a",),
                transitions=(),
            )

    def test_transition_states_must_be_declared(self):
        with pytest.raises(ValueError, match="undeclared state"):
            Workflow(
                name="w",
                description="",
                initial_state="a",
                states=("a",),
                transitions=(Transition("a", "b", action="go"),),
            )

    def test_terminal_state_cannot_have_outgoing_transitions(self):
        with pytest.raises(ValueError, match="terminal state"):
            Workflow(
                name="w",
                description="",
                initial_state="a",
                states=("a", "b"),
                transitions=(Transition("b", "a", action="back"),),
                terminal_states=("b",),
            )

    def test_find_transition(self):
        wf = Workflow(
            name="w",
            description="",
            initial_state="a",
            states=("a", "b"),
            transitions=(Transition("a", "b", action="go"),),
        )
        assert wf.find_transition("a", "b", "go") is not None
        assert wf.find_transition("b", "a", "go") is None
        assert wf.actions_from("a") == frozenset({"go"})


class TestLedgerWorkflow:
    """The lifecycle shared by payables and receivables."""

    P = LedgerStatus.PENDING.value
    PP = LedgerStatus.PARTIALLY_PAID.value
    PAID = LedgerStatus.PAID.value

    def test_states_are_lifecycle_states_only(self):
        assert set(LEDGER_WORKFLOW.states) == {self.P, self.PP, self.PAID}
        assert LedgerStatus.OVERDUE.value not in LEDGER_WORKFLOW.states

    def test_initial_state_is_pending(self):
        assert LEDGER_WORKFLOW.initial_state == self.P

    def test_no_terminal_state(self):
        assert LEDGER_WORKFLOW.terminal_states == ()

    @pytest.mark.parametrize("src,dst", [
        ("Pending", "PartiallyPaid"),
        ("Pending", "Paid"),
        ("PartiallyPaid", "PartiallyPaid"),
        ("PartiallyPaid", "Paid"),
    ])
    def test_payment_transitions(self, src, dst):
        assert LEDGER_WORKFLOW.find_transition(src, dst, RECORD_PAYMENT) is not None

    @pytest.mark.parametrize("src", ["Paid", "PartiallyPaid"])
    def test_reversal_transitions(self, src):
        assert LEDGER_WORKFLOW.find_transition(src, self.P, REVERSE_ALL_PAYMENTS) is not None

    def test_no_payment_from_paid(self):
        assert RECORD_PAYMENT not in LEDGER_WORKFLOW.actions_from(self.PAID)

    def test_no_reversal_from_pending(self):
        assert REVERSE_ALL_PAYMENTS not in LEDGER_WORKFLOW.actions_from(self.P)

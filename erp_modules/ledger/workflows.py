"""
Ledger Workflows (``erp_modules.ledger.workflows``).

Responsibility
--------------
Declares the single lifecycle shared by payable and receivable
documents.  ``LedgerStateMachine`` looks transitions up here; a payment
or reversal whose target state is not declared from the current state is
rejected with ``InvalidTransitionError``.

Architecture position
---------------------
**Modules layer** -- declarative workflow definitions.  Imports canonical
Guard, Transition, Workflow from ``erp_kernel.domain.workflow``.

Invariants enforced
-------------------
* State names are the ``LedgerStatus`` values of the three lifecycle
  states; ``Overdue`` is a display overlay and never a workflow state.
* No terminal state: a Paid document can always be reversed.

Audit relevance
---------------
Workflow definitions logged at module-load time with state and transition
counts.
"""

from erp_engines.ledger import RECORD_PAYMENT, REVERSE_ALL_PAYMENTS, LedgerStatus
from erp_kernel.domain.workflow import Guard, Transition, Workflow
from erp_kernel.logging_config import get_logger

logger = get_logger("modules.ledger.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

WITHIN_REMAINING_BALANCE = Guard(
    name="within_remaining_balance",
    description="Payment does not exceed the remaining balance unless over-payment is allowed",
)

HAS_PAYMENTS = Guard(
    name="has_payments",
    description="Document has at least one recorded payment to reverse",
)


# -----------------------------------------------------------------------------
# Ledger Workflow
# -----------------------------------------------------------------------------

_PENDING = LedgerStatus.PENDING.value
_PARTIALLY_PAID = LedgerStatus.PARTIALLY_PAID.value
_PAID = LedgerStatus.PAID.value

LEDGER_WORKFLOW = Workflow(
    name="ledger_document",
    description="Payable and receivable payment lifecycle",
    initial_state=_PENDING,
    states=(_PENDING, _PARTIALLY_PAID, _PAID),
    transitions=(
        Transition(_PENDING, _PARTIALLY_PAID, action=RECORD_PAYMENT, guard=WITHIN_REMAINING_BALANCE),
        Transition(_PENDING, _PAID, action=RECORD_PAYMENT, guard=WITHIN_REMAINING_BALANCE),
        Transition(_PARTIALLY_PAID, _PARTIALLY_PAID, action=RECORD_PAYMENT, guard=WITHIN_REMAINING_BALANCE),
        Transition(_PARTIALLY_PAID, _PAID, action=RECORD_PAYMENT, guard=WITHIN_REMAINING_BALANCE),
        Transition(_PAID, _PENDING, action=REVERSE_ALL_PAYMENTS, guard=HAS_PAYMENTS),
        Transition(_PARTIALLY_PAID, _PENDING, action=REVERSE_ALL_PAYMENTS, guard=HAS_PAYMENTS),
    ),
)

logger.info(
    "ledger_workflow_registered",
    extra={
        "workflow_name": LEDGER_WORKFLOW.name,
        "state_count": len(LEDGER_WORKFLOW.states),
        "transition_count": len(LEDGER_WORKFLOW.transitions),
    },
)

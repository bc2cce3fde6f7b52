"""Approval step states and transitions.

State Machine Diagram:

    ┌──────────┐
    │ PENDING  │ ← Initial state (created at submission)
    └────┬─────┘
         │
         ├──────────────┬──────────────┐
         │              │              │
    ┌────▼─────┐  ┌─────▼────┐  ┌──────▼───┐
    │ APPROVED │  │ REJECTED │  │ SKIPPED  │ (a lower level was rejected)
    └──────────┘  └──────────┘  └──────────┘

Every state except PENDING is terminal.
"""

from enum import Enum
from typing import Set, Dict, Optional, NamedTuple


class StepStatus(str, Enum):
    """States of a single approval step."""

    PENDING = "pending"      # Awaiting a decision
    APPROVED = "approved"    # Approved by an authorized employee
    REJECTED = "rejected"    # Rejected by an authorized employee
    SKIPPED = "skipped"      # Closed because a lower level was rejected


class StepAction(str, Enum):
    """Actions that move a step out of PENDING."""

    APPROVE = "approve"
    REJECT = "reject"
    SKIP = "skip"


class ApprovalAction(str, Enum):
    """Decisions an approver can submit for a document."""

    APPROVE = "approve"
    REJECT = "reject"


class DocumentStatus(str, Enum):
    """Document statuses written by the approval engine."""

    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalEvent(str, Enum):
    """Event names emitted after committed approval transitions."""

    REQUESTED = "approval:requested"
    LEVEL_APPROVED = "approval:level_approved"
    APPROVED = "approval:approved"
    REJECTED = "approval:rejected"
    DOCUMENT_STATUS = "document:status"


class TransitionRule(NamedTuple):
    """Defines a valid step transition."""
    from_state: StepStatus
    to_state: StepStatus
    action: StepAction


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(StepStatus.PENDING, StepStatus.APPROVED, StepAction.APPROVE),
    TransitionRule(StepStatus.PENDING, StepStatus.REJECTED, StepAction.REJECT),
    TransitionRule(StepStatus.PENDING, StepStatus.SKIPPED, StepAction.SKIP),
]

VALID_TRANSITIONS: Dict[StepStatus, Set[StepAction]] = {}
TRANSITION_TARGETS: Dict[tuple[StepStatus, StepAction], StepStatus] = {}

for rule in TRANSITION_RULES:
    VALID_TRANSITIONS.setdefault(rule.from_state, set()).add(rule.action)
    TRANSITION_TARGETS[(rule.from_state, rule.action)] = rule.to_state


TERMINAL_STATES: Set[StepStatus] = {
    StepStatus.APPROVED,
    StepStatus.REJECTED,
    StepStatus.SKIPPED,
}


def can_transition(from_state: StepStatus, action: StepAction) -> bool:
    """Check if an action is valid from the given state."""
    return action in VALID_TRANSITIONS.get(from_state, set())


def get_target_state(from_state: StepStatus, action: StepAction) -> Optional[StepStatus]:
    """Get the target state for an action, or None if the action is invalid."""
    return TRANSITION_TARGETS.get((from_state, action))

"""Approval workflow engine for LogiFlow.

Resolves multi-level approval chains, authorizes approvers (including
delegated authority) and drives each document's steps through their
state machine.
"""

from .states import (
    StepStatus,
    StepAction,
    ApprovalAction,
    ApprovalEvent,
    DocumentStatus,
    TERMINAL_STATES,
)
from .errors import (
    AlreadyDecidedError,
    ApprovalError,
    NoWorkflowConfiguredError,
    NoActionableStepError,
    UnauthorizedError,
    ConflictError,
    NotFoundError,
)
from .chain import ApprovalLevel, ChainResolver
from .delegation import DelegationAuthorizer
from .sla import SLAClock
from .machine import StepStateMachine
from .hooks import PostCommitHooks
from .documents import DocumentRegistry, DocumentStore, get_document_registry
from .service import ApprovalOrchestrator, DecisionResult, SubmissionResult

__all__ = [
    "StepStatus",
    "StepAction",
    "ApprovalAction",
    "ApprovalEvent",
    "DocumentStatus",
    "TERMINAL_STATES",
    "AlreadyDecidedError",
    "ApprovalError",
    "NoWorkflowConfiguredError",
    "NoActionableStepError",
    "UnauthorizedError",
    "ConflictError",
    "NotFoundError",
    "ApprovalLevel",
    "ChainResolver",
    "DelegationAuthorizer",
    "SLAClock",
    "StepStateMachine",
    "PostCommitHooks",
    "DocumentRegistry",
    "DocumentStore",
    "get_document_registry",
    "ApprovalOrchestrator",
    "DecisionResult",
    "SubmissionResult",
]

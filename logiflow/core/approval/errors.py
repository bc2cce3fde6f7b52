"""Errors raised by the approval engine.

Every pre-mutation check raises before anything is written, so callers
never observe a partially created or partially decided chain.
"""

from typing import Any, Optional


class ApprovalError(Exception):
    """Base class for approval engine errors."""

    code = "approval_error"


class NoWorkflowConfiguredError(ApprovalError):
    """No workflow rule matches the document type and amount."""

    code = "no_workflow_configured"

    def __init__(self, document_type: str, amount: float):
        super().__init__(
            f"No approval workflow configured for {document_type} with amount {amount}"
        )
        self.document_type = document_type
        self.amount = amount


class NoActionableStepError(ApprovalError):
    """The document has no pending step (never submitted or already resolved)."""

    code = "no_actionable_step"

    def __init__(self, document_type: str, document_id: Any):
        super().__init__(f"No pending approval step for {document_type} {document_id}")
        self.document_type = document_type
        self.document_id = document_id


class UnauthorizedError(ApprovalError):
    """The actor holds neither the required role nor a qualifying delegation."""

    code = "unauthorized"

    def __init__(self, required_role: str, actor_id: Any = None, action: Optional[str] = None):
        verb = action or "decide"
        super().__init__(
            f"User is not authorized to {verb} this document. Required role: {required_role}"
        )
        self.required_role = required_role
        self.actor_id = actor_id


class ConflictError(ApprovalError):
    """The step was decided by someone else between read and write."""

    code = "conflict"

    def __init__(self, step_id: Any, current_status: Optional[str] = None):
        message = f"Approval step {step_id} is no longer pending"
        if current_status:
            message += f" (now {current_status})"
        super().__init__(message)
        self.step_id = step_id
        self.current_status = current_status


class NotFoundError(ApprovalError):
    """An unknown document type, document, step or employee was referenced."""

    code = "not_found"

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class AlreadyDecidedError(ApprovalError):
    """Submit was called for a document whose chain is already resolved."""

    code = "already_decided"

    def __init__(self, document_type: str, document_id: Any, chain_status: str):
        super().__init__(
            f"{document_type} {document_id} cannot be resubmitted: approval chain already {chain_status}"
        )
        self.document_type = document_type
        self.document_id = document_id
        self.chain_status = chain_status

"""Approval workflow API endpoints."""

from dataclasses import asdict
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from logiflow.api.deps import get_current_employee, get_orchestrator
from logiflow.db.models import Employee
from logiflow.core.approval import ApprovalAction, ApprovalOrchestrator

router = APIRouter(prefix="/approvals", tags=["approvals"])


# Schemas
class SubmitRequest(BaseModel):
    amount: float = Field(..., ge=0)


class DecideRequest(BaseModel):
    action: ApprovalAction
    notes: Optional[str] = None


class SubmissionResponse(BaseModel):
    document_type: str
    document_id: UUID
    level: int
    approver_role: str
    sla_hours: int
    sla_due_date: datetime
    total_levels: int
    created_levels: int


class DecisionResponse(BaseModel):
    outcome: str
    document_type: str
    document_id: UUID
    decided_level: int
    document_status: str
    next_level: Optional[int] = None
    next_approver_role: Optional[str] = None
    sla_due_date: Optional[datetime] = None
    skipped_levels: int = 0


class ApprovalStepResponse(BaseModel):
    id: UUID
    document_type: str
    document_id: UUID
    level: int
    approver_role: str
    status: str
    approver_id: Optional[UUID]
    notes: Optional[str]
    decided_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


# Endpoints
@router.get("/pending", response_model=List[ApprovalStepResponse])
def list_pending_approvals(
    current_employee: Employee = Depends(get_current_employee),
    orchestrator: ApprovalOrchestrator = Depends(get_orchestrator),
):
    """List the steps the calling employee can act on."""
    steps = orchestrator.get_pending_for_actor(current_employee.id)
    return [ApprovalStepResponse.model_validate(s) for s in steps]


@router.post("/{document_type}/{document_id}/submit", response_model=SubmissionResponse)
def submit_for_approval(
    document_type: str,
    document_id: UUID,
    body: SubmitRequest,
    current_employee: Employee = Depends(get_current_employee),
    orchestrator: ApprovalOrchestrator = Depends(get_orchestrator),
):
    """Open the approval chain of a document."""
    result = orchestrator.submit(document_type, document_id, body.amount, current_employee.id)
    return SubmissionResponse(**asdict(result))


@router.post("/{document_type}/{document_id}/decide", response_model=DecisionResponse)
def decide(
    document_type: str,
    document_id: UUID,
    body: DecideRequest,
    current_employee: Employee = Depends(get_current_employee),
    orchestrator: ApprovalOrchestrator = Depends(get_orchestrator),
):
    """Approve or reject the document's current approval level."""
    result = orchestrator.decide(document_type, document_id, body.action, current_employee.id, body.notes)
    return DecisionResponse(**asdict(result))


@router.get("/{document_type}/{document_id}/steps", response_model=List[ApprovalStepResponse])
def get_approval_steps(
    document_type: str,
    document_id: UUID,
    current_employee: Employee = Depends(get_current_employee),
    orchestrator: ApprovalOrchestrator = Depends(get_orchestrator),
):
    """Get every approval step of a document, ordered by level."""
    steps = orchestrator.get_steps(document_type, document_id)
    return [ApprovalStepResponse.model_validate(s) for s in steps]

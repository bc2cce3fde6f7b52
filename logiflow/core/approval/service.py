"""Approval orchestrator: the public entry point of the approval engine.

Submit resolves the chain for a document and opens its first pending
level. Decide approves or rejects the actionable step on behalf of an
authorized employee and either advances the chain, finalizes the
document, or closes it as rejected.

Each call commits its core writes (steps and document fields) in a single
transaction. Audit records, notifications and bus events are queued as
post-commit hooks and cannot undo a committed decision.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from logiflow.core.config import Settings, get_settings
from logiflow.db.models import ApprovalStep, Employee
from logiflow.services.audit import AuditService
from logiflow.services.events import EventBus, SystemEvent, event_bus
from logiflow.services.notifications import NotificationService
from .chain import ApprovalLevel, ChainResolver
from .delegation import DelegationAuthorizer, grant_covers
from .documents import DocumentRegistry, DocumentStore, get_document_registry
from .errors import (
    AlreadyDecidedError,
    NoActionableStepError,
    NoWorkflowConfiguredError,
    NotFoundError,
    UnauthorizedError,
)
from .hooks import PostCommitHooks
from .machine import StepStateMachine
from .sla import SLAClock
from .states import ApprovalAction, ApprovalEvent, DocumentStatus, StepStatus

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """The step a submitted chain is waiting on (level 1 on first submission)."""

    document_type: str
    document_id: UUID
    level: int
    approver_role: str
    sla_hours: int
    sla_due_date: datetime
    total_levels: int
    created_levels: int


@dataclass
class DecisionResult:
    """Outcome of a committed decision."""

    outcome: str  # "advanced", "approved" or "rejected"
    document_type: str
    document_id: UUID
    decided_level: int
    document_status: str
    next_level: Optional[int] = None
    next_approver_role: Optional[str] = None
    sla_due_date: Optional[datetime] = None
    skipped_levels: int = 0


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class ApprovalOrchestrator:
    """
    Runs the approval workflow of business documents.

    Collaborators are injectable so tests can pin the clock, swap the event
    bus or simulate failing side effects.
    """

    def __init__(
        self,
        db: Session,
        *,
        documents: Optional[DocumentRegistry] = None,
        resolver: Optional[ChainResolver] = None,
        authorizer: Optional[DelegationAuthorizer] = None,
        clock: Optional[SLAClock] = None,
        audit: Optional[AuditService] = None,
        notifier: Optional[NotificationService] = None,
        events: Optional[EventBus] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.documents = documents or get_document_registry()
        self.clock = clock or SLAClock()
        self.resolver = resolver or ChainResolver(db)
        self.authorizer = authorizer or DelegationAuthorizer(db, admin_role=self.settings.admin_role)
        self.machine = StepStateMachine(db, clock=self.clock.now)
        self.audit = audit or AuditService(db)
        self.notifier = notifier or NotificationService(db, self.documents)
        self.events = events or event_bus

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def submit(
        self,
        document_type: str,
        document_id: UUID,
        amount: float,
        submitted_by_id: UUID,
    ) -> SubmissionResult:
        """
        Open the approval chain of a document.

        Re-submitting a document never duplicates levels that already exist,
        and is only accepted while its chain still has a pending step.

        Raises:
            NotFoundError: If the document type or document is unknown
            NoWorkflowConfiguredError: If no workflow rule matches
            AlreadyDecidedError: If the chain is already approved or rejected
        """
        store = self.documents.get(document_type)
        document = store.get(self.db, document_id)

        levels = self.resolver.resolve(document_type, amount)
        if not levels:
            raise NoWorkflowConfiguredError(document_type, amount)

        self._ensure_open_chain(document_type, document_id)
        old_status = document.status

        try:
            created = self.machine.create_levels(document_type, document_id, levels)
            actionable = self.machine.find_actionable_step(document_type, document_id)
            if actionable is None:
                raise AlreadyDecidedError(document_type, document_id, "resolved")
            level, role = actionable.level, actionable.approver_role
            sla_hours = self._submission_sla_hours(document_type, levels, level, role)
            sla_due_date = self.clock.due_date(sla_hours)
            store.mark_pending_approval(self.db, document, sla_due_date)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        chain = [item.to_dict() for item in levels]
        payload = self._payload(
            store,
            document_id,
            amount=amount,
            level=level,
            approver_role=role,
            total_levels=len(levels),
            sla_due_date=_iso(sla_due_date),
        )

        hooks = PostCommitHooks(f"submit {document_type} {document_id}")
        hooks.add(
            "audit", self.audit.record,
            document_type, document_id, "update",
            {"status": old_status},
            {
                "status": DocumentStatus.PENDING_APPROVAL.value,
                "sla_due_date": _iso(sla_due_date),
                "approval_chain": chain,
            },
            submitted_by_id,
        )
        hooks.add("notify_role", self.notifier.notify_role, role, ApprovalEvent.REQUESTED.value, payload)
        hooks.add(
            "notify_watchers", self.notifier.notify_document_watchers,
            document_id, ApprovalEvent.DOCUMENT_STATUS.value,
            {**payload, "status": DocumentStatus.PENDING_APPROVAL.value, "current_level": level},
        )
        hooks.add(
            "publish", self._publish,
            ApprovalEvent.REQUESTED, document_type, document_id, "submit_for_approval",
            {
                "amount": amount,
                "approval_chain": chain,
                "current_level": level,
                "sla_due_date": _iso(sla_due_date),
            },
            submitted_by_id,
        )

        logger.info(
            "%s %s submitted for %d-level approval (%d new steps, waiting on level %d)",
            document_type, document_id, len(levels), created, level,
        )
        hooks.run()

        return SubmissionResult(
            document_type=document_type,
            document_id=document_id,
            level=level,
            approver_role=role,
            sla_hours=sla_hours,
            sla_due_date=sla_due_date,
            total_levels=len(levels),
            created_levels=created,
        )

    def _ensure_open_chain(self, document_type: str, document_id: UUID) -> None:
        """Refuse re-submission once a chain has been rejected or fully approved."""
        statuses = {
            StepStatus(step.status)
            for step in self.machine.get_steps(document_type, document_id)
        }
        if not statuses:
            return
        if statuses & {StepStatus.REJECTED, StepStatus.SKIPPED}:
            raise AlreadyDecidedError(document_type, document_id, DocumentStatus.REJECTED.value)
        if StepStatus.PENDING not in statuses:
            raise AlreadyDecidedError(document_type, document_id, DocumentStatus.APPROVED.value)

    def _submission_sla_hours(
        self,
        document_type: str,
        levels: List[ApprovalLevel],
        level: int,
        role: str,
    ) -> int:
        """SLA hours of the step a (re-)submitted document is waiting on."""
        for item in levels:
            if item.position == level and item.approver_role == role:
                return item.sla_hours

        sla_hours = self.resolver.sla_hours_for_role(document_type, role)
        if sla_hours is None:
            logger.warning(
                "No workflow rule for role %s on %s; using level 1 SLA",
                role, document_type,
            )
            return levels[0].sla_hours
        return sla_hours

    # ------------------------------------------------------------------
    # Decide
    # ------------------------------------------------------------------

    def decide(
        self,
        document_type: str,
        document_id: UUID,
        action: Union[ApprovalAction, str],
        actor_id: UUID,
        notes: Optional[str] = None,
    ) -> DecisionResult:
        """
        Approve or reject the actionable step of a document.

        Raises:
            ValueError: If the action is neither approve nor reject
            NotFoundError: If the document type or document is unknown
            NoActionableStepError: If nothing is pending for the document
            UnauthorizedError: If the actor may not act for the step's role
            ConflictError: If another decision on the step committed first
        """
        action = ApprovalAction(action)
        store = self.documents.get(document_type)
        document = store.get(self.db, document_id)

        step = self.machine.find_actionable_step(document_type, document_id)
        if step is None:
            raise NoActionableStepError(document_type, document_id)

        if not self.authorizer.is_authorized(actor_id, step.approver_role, document_type, self.clock.now()):
            logger.warning(
                "Employee %s denied %s on %s %s (requires %s)",
                actor_id, action.value, document_type, document_id, step.approver_role,
            )
            raise UnauthorizedError(step.approver_role, actor_id, action.value)

        if action is ApprovalAction.REJECT:
            return self._reject(store, document, step, actor_id, notes)
        return self._approve(store, document, step, actor_id, notes)

    def _approve(
        self,
        store: DocumentStore,
        document,
        step: ApprovalStep,
        actor_id: UUID,
        notes: Optional[str],
    ) -> DecisionResult:
        document_type, document_id = store.document_type, document.id
        step_id, level = step.id, step.level
        old_status = document.status
        old_due_date = document.sla_due_date

        try:
            next_step = self.machine.approve(step_id, actor_id, notes)
            if next_step is not None:
                next_level, next_role = next_step.level, next_step.approver_role
                due_date = self._advance_sla(store, document, next_role)
            else:
                approved_at = self.clock.now()
                store.mark_approved(self.db, document, actor_id, approved_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        hooks = PostCommitHooks(f"approve {document_type} {document_id} L{level}")

        if next_step is not None:
            hooks.add(
                "audit", self.audit.record,
                document_type, document_id, "update",
                {"sla_due_date": _iso(old_due_date)},
                {
                    "approved_level": level,
                    "next_level": next_level,
                    "next_approver_role": next_role,
                    "sla_due_date": _iso(due_date),
                    "comments": notes,
                },
                actor_id,
            )
            hooks.add(
                "notify_role", self.notifier.notify_role,
                next_role, ApprovalEvent.REQUESTED.value,
                self._payload(
                    store, document_id,
                    level=next_level,
                    approver_role=next_role,
                    previously_approved_by=str(actor_id),
                    sla_due_date=_iso(due_date),
                ),
            )
            hooks.add(
                "notify_watchers", self.notifier.notify_document_watchers,
                document_id, ApprovalEvent.LEVEL_APPROVED.value,
                self._payload(
                    store, document_id,
                    approved_level=level,
                    next_level=next_level,
                    next_approver_role=next_role,
                    approved_by_id=str(actor_id),
                ),
            )
            hooks.add(
                "publish", self._publish,
                ApprovalEvent.LEVEL_APPROVED, document_type, document_id, "approve_level",
                {
                    "approved_level": level,
                    "next_level": next_level,
                    "approved_by_id": str(actor_id),
                    "comments": notes,
                },
                actor_id,
            )
            logger.info(
                "%s %s level %d approved by %s, advancing to level %d",
                document_type, document_id, level, actor_id, next_level,
            )
            hooks.run()
            return DecisionResult(
                outcome="advanced",
                document_type=document_type,
                document_id=document_id,
                decided_level=level,
                document_status=old_status,
                next_level=next_level,
                next_approver_role=next_role,
                sla_due_date=due_date,
            )

        hooks.add(
            "audit", self.audit.record,
            document_type, document_id, "update",
            {"status": old_status},
            {
                "status": DocumentStatus.APPROVED.value,
                "approved_by_id": str(actor_id),
                "comments": notes,
                "final_level": level,
            },
            actor_id,
        )
        hooks.add(
            "notify_watchers", self.notifier.notify_document_watchers,
            document_id, ApprovalEvent.APPROVED.value,
            self._payload(store, document_id, approved_by_id=str(actor_id), total_levels=level, comments=notes),
        )
        hooks.add(
            "publish", self._publish,
            ApprovalEvent.APPROVED, document_type, document_id, "approve",
            {"approved_by_id": str(actor_id), "comments": notes, "total_levels": level},
            actor_id,
        )
        logger.info("%s %s fully approved (%d levels) by %s", document_type, document_id, level, actor_id)
        hooks.run()
        return DecisionResult(
            outcome="approved",
            document_type=document_type,
            document_id=document_id,
            decided_level=level,
            document_status=DocumentStatus.APPROVED.value,
        )

    def _reject(
        self,
        store: DocumentStore,
        document,
        step: ApprovalStep,
        actor_id: UUID,
        notes: Optional[str],
    ) -> DecisionResult:
        document_type, document_id = store.document_type, document.id
        step_id, level = step.id, step.level
        old_status = document.status
        reason = notes or self.settings.default_rejection_reason

        try:
            skipped = self.machine.reject(step_id, actor_id, reason)
            store.mark_rejected(self.db, document, reason)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        hooks = PostCommitHooks(f"reject {document_type} {document_id} L{level}")
        hooks.add(
            "audit", self.audit.record,
            document_type, document_id, "update",
            {"status": old_status},
            {
                "status": DocumentStatus.REJECTED.value,
                "rejected_at_level": level,
                "rejection_reason": reason,
            },
            actor_id,
        )
        hooks.add(
            "notify_watchers", self.notifier.notify_document_watchers,
            document_id, ApprovalEvent.REJECTED.value,
            self._payload(
                store, document_id,
                rejected_by_id=str(actor_id),
                rejected_at_level=level,
                reason=notes,
            ),
        )
        hooks.add(
            "publish", self._publish,
            ApprovalEvent.REJECTED, document_type, document_id, "reject",
            {"rejected_by_id": str(actor_id), "rejected_at_level": level, "reason": notes},
            actor_id,
        )
        logger.info("%s %s rejected at level %d by %s", document_type, document_id, level, actor_id)
        hooks.run()

        return DecisionResult(
            outcome="rejected",
            document_type=document_type,
            document_id=document_id,
            decided_level=level,
            document_status=DocumentStatus.REJECTED.value,
            skipped_levels=skipped,
        )

    def _advance_sla(self, store: DocumentStore, document, next_role: str) -> Optional[datetime]:
        """Restart the SLA clock for the level that just became actionable."""
        sla_hours = self.resolver.sla_hours_for_role(store.document_type, next_role)
        if sla_hours is None:
            logger.warning(
                "No workflow rule for role %s on %s; SLA due date left unchanged",
                next_role, store.document_type,
            )
            return None

        due_date = self.clock.due_date(sla_hours)
        store.update_sla_due_date(self.db, document, due_date)
        return due_date

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_steps(self, document_type: str, document_id: UUID) -> List[ApprovalStep]:
        """Get the approval record of a document, ordered by level."""
        self.documents.get(document_type)
        return self.machine.get_steps(document_type, document_id)

    def get_pending_for_actor(self, actor_id: UUID) -> List[ApprovalStep]:
        """
        Get the steps an employee can act on.

        Administrators see every pending step. Everyone else sees the
        actionable step of each document whose role they hold directly or
        through an active delegation covering the document type.
        """
        actor = self.db.get(Employee, actor_id)
        if actor is None:
            raise NotFoundError("Employee", actor_id)
        if not actor.is_active:
            return []

        if actor.system_role == self.settings.admin_role:
            return self.db.query(ApprovalStep).filter(
                ApprovalStep.status == StepStatus.PENDING.value
            ).order_by(ApprovalStep.created_at.desc(), ApprovalStep.level.asc()).all()

        grants = self.authorizer.reachable_grants(actor, self.clock.now())

        actionable = self.db.query(
            ApprovalStep.document_type.label("document_type"),
            ApprovalStep.document_id.label("document_id"),
            func.min(ApprovalStep.level).label("level"),
        ).filter(
            ApprovalStep.status == StepStatus.PENDING.value
        ).group_by(
            ApprovalStep.document_type, ApprovalStep.document_id
        ).subquery()

        steps = self.db.query(ApprovalStep).join(
            actionable,
            and_(
                ApprovalStep.document_type == actionable.c.document_type,
                ApprovalStep.document_id == actionable.c.document_id,
                ApprovalStep.level == actionable.c.level,
            ),
        ).filter(
            ApprovalStep.approver_role.in_(list(grants))
        ).order_by(ApprovalStep.created_at.desc()).all()

        return [step for step in steps if grant_covers(grants, step.approver_role, step.document_type)]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _payload(self, store: DocumentStore, document_id: UUID, **extra: Any) -> Dict[str, Any]:
        return {
            "document_type": store.document_type,
            "document_label": store.label,
            "document_id": str(document_id),
            **extra,
        }

    def _publish(
        self,
        event: ApprovalEvent,
        document_type: str,
        document_id: UUID,
        action: str,
        payload: Dict[str, Any],
        performed_by_id: UUID,
    ) -> int:
        return self.events.publish(SystemEvent(
            type=event.value,
            entity_type=document_type,
            entity_id=str(document_id),
            action=action,
            payload=payload,
            performed_by_id=str(performed_by_id),
            timestamp=self.clock.now().isoformat(),
        ))

"""Approval step state machine.

Owns the set of approval steps of each document and the legal transitions
between their states. Transitions are written as conditional updates
(``WHERE status = 'pending'``) so that two concurrent decisions on the same
step cannot both succeed: the loser sees zero affected rows and gets a
``ConflictError``.

Nothing here commits; the caller owns the transaction.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from logiflow.db.models import ApprovalStep
from .chain import ApprovalLevel
from .errors import ConflictError, NotFoundError
from .states import StepStatus, StepAction, can_transition, get_target_state

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class StepStateMachine:
    """
    State machine over the approval steps of documents.

    Invariants kept by this class:
    - at most one step of a document is actionable: the pending step with
      the lowest level;
    - a step leaves PENDING exactly once and never returns to it;
    - rejecting a level skips every pending step above it in the same
      transaction.
    """

    def __init__(self, db: Session, *, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self._clock = clock or datetime.utcnow

    def create_levels(
        self,
        document_type: str,
        document_id: UUID,
        levels: Iterable[ApprovalLevel],
    ) -> int:
        """
        Insert a pending step for every level not already present.

        Existing levels are left untouched, which makes re-submission
        idempotent. Returns the number of steps actually inserted.
        """
        created = 0
        now = self._clock()
        for level in levels:
            values = {
                "id": uuid.uuid4(),
                "document_type": document_type,
                "document_id": document_id,
                "level": level.position,
                "approver_role": level.approver_role,
                "status": StepStatus.PENDING.value,
                "created_at": now,
            }
            if self._insert_if_absent(values):
                created += 1

        return created

    def get_steps(self, document_type: str, document_id: UUID) -> List[ApprovalStep]:
        """Get every step of a document ordered by level."""
        return self.db.query(ApprovalStep).filter(
            and_(
                ApprovalStep.document_type == document_type,
                ApprovalStep.document_id == document_id,
            )
        ).order_by(ApprovalStep.level.asc()).all()

    def get_step(self, step_id: UUID) -> ApprovalStep:
        step = self.db.get(ApprovalStep, step_id)
        if step is None:
            raise NotFoundError("Approval step", step_id)
        return step

    def find_actionable_step(self, document_type: str, document_id: UUID) -> Optional[ApprovalStep]:
        """Get the lowest pending step of a document, if any."""
        return self.db.query(ApprovalStep).filter(
            and_(
                ApprovalStep.document_type == document_type,
                ApprovalStep.document_id == document_id,
                ApprovalStep.status == StepStatus.PENDING.value,
            )
        ).order_by(ApprovalStep.level.asc()).first()

    def approve(
        self,
        step_id: UUID,
        actor_id: UUID,
        notes: Optional[str] = None,
    ) -> Optional[ApprovalStep]:
        """
        Approve a pending step.

        Returns:
            The next actionable step, or None when this was the last level.

        Raises:
            NotFoundError: If the step does not exist
            ConflictError: If the step is no longer pending
        """
        step = self.get_step(step_id)
        self._transition(step, StepAction.APPROVE, actor_id=actor_id, notes=notes)
        return self.find_actionable_step(step.document_type, step.document_id)

    def reject(
        self,
        step_id: UUID,
        actor_id: UUID,
        notes: Optional[str] = None,
    ) -> int:
        """
        Reject a pending step and skip every pending step above it.

        Returns:
            Number of steps skipped.

        Raises:
            NotFoundError: If the step does not exist
            ConflictError: If the step is no longer pending
        """
        step = self.get_step(step_id)
        document_type, document_id, level = step.document_type, step.document_id, step.level
        self._transition(step, StepAction.REJECT, actor_id=actor_id, notes=notes)

        result = self.db.execute(
            update(ApprovalStep)
            .where(
                and_(
                    ApprovalStep.document_type == document_type,
                    ApprovalStep.document_id == document_id,
                    ApprovalStep.level > level,
                    ApprovalStep.status == StepStatus.PENDING.value,
                )
            )
            .values(status=get_target_state(StepStatus.PENDING, StepAction.SKIP).value)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def _transition(
        self,
        step: ApprovalStep,
        action: StepAction,
        *,
        actor_id: UUID,
        notes: Optional[str],
    ) -> StepStatus:
        """Move a step out of PENDING with a conditional update."""
        current = StepStatus(step.status)
        if not can_transition(current, action):
            raise ConflictError(step.id, step.status)
        target = get_target_state(current, action)

        result = self.db.execute(
            update(ApprovalStep)
            .where(
                and_(
                    ApprovalStep.id == step.id,
                    ApprovalStep.status == StepStatus.PENDING.value,
                )
            )
            .values(
                status=target.value,
                approver_id=actor_id,
                notes=notes,
                decided_at=self._clock(),
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            self.db.expire(step)
            logger.warning("Conflict: approval step %s was decided concurrently", step.id)
            raise ConflictError(step.id)

        self.db.expire(step)
        return target

    def _insert_if_absent(self, values: dict) -> bool:
        """Insert one step unless its (document, level) key already exists."""
        dialect = self.db.get_bind().dialect.name
        insert_factory = _UPSERT_INSERTS.get(dialect)

        if insert_factory is not None:
            stmt = insert_factory(ApprovalStep).values(**values).on_conflict_do_nothing(
                index_elements=["document_type", "document_id", "level"]
            )
            return self.db.execute(stmt).rowcount > 0

        try:
            with self.db.begin_nested():
                self.db.add(ApprovalStep(**values))
        except IntegrityError:
            return False
        return True

"""Approval chain resolution from workflow rules."""

from dataclasses import dataclass, asdict
from typing import Optional, List

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from logiflow.db.models import WorkflowRule


@dataclass(frozen=True)
class ApprovalLevel:
    """One position in an approval chain."""

    position: int
    approver_role: str
    sla_hours: int

    def to_dict(self) -> dict:
        return asdict(self)


class ChainResolver:
    """
    Builds the ordered approval chain for a document type and amount.

    Every workflow rule whose amount band contains the amount becomes one
    level; levels are ordered by the rule's ``min_amount`` ascending.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, document_type: str, amount: float) -> List[ApprovalLevel]:
        """Return levels 1..N for the amount; an empty list means nothing is configured."""
        rules = self.db.query(WorkflowRule).filter(
            and_(
                WorkflowRule.document_type == document_type,
                WorkflowRule.min_amount <= amount,
                or_(
                    WorkflowRule.max_amount.is_(None),
                    WorkflowRule.max_amount >= amount,
                ),
            )
        ).order_by(WorkflowRule.min_amount.asc(), WorkflowRule.created_at.asc()).all()

        return [
            ApprovalLevel(position=index, approver_role=rule.approver_role, sla_hours=rule.sla_hours)
            for index, rule in enumerate(rules, start=1)
        ]

    def required_approval(self, document_type: str, amount: float) -> Optional[ApprovalLevel]:
        """Legacy single-level lookup: the highest level of the chain."""
        levels = self.resolve(document_type, amount)
        return levels[-1] if levels else None

    def sla_hours_for_role(self, document_type: str, approver_role: str) -> Optional[int]:
        """
        SLA hours used when a chain advances to a level held by ``approver_role``.

        Picks the rule with the highest ``min_amount`` for that role,
        independent of the document's amount.
        """
        rule = self.db.query(WorkflowRule).filter(
            and_(
                WorkflowRule.document_type == document_type,
                WorkflowRule.approver_role == approver_role,
            )
        ).order_by(WorkflowRule.min_amount.desc()).first()

        return rule.sla_hours if rule else None

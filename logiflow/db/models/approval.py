"""Approval step model.

Stores the per-document progress of each approval level.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, DateTime, Integer, Text, ForeignKey, Uuid,
    UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship

from logiflow.db.base import Base


class ApprovalStep(Base):
    """
    Progress of one approval level for one document.

    Steps are created in bulk when a document is submitted and each one is
    decided exactly once (approved, rejected or skipped).
    """
    __tablename__ = "approval_steps"
    __table_args__ = (
        UniqueConstraint("document_type", "document_id", "level", name="uq_approval_steps_document_level"),
        Index("ix_approval_steps_document_status", "document_type", "document_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Document identification
    document_type = Column(String(50), nullable=False)
    document_id = Column(Uuid, nullable=False)

    # Chain position
    level = Column(Integer, nullable=False)
    approver_role = Column(String(50), nullable=False, index=True)

    # Workflow state
    status = Column(String(20), nullable=False, default="pending", index=True)

    # Decision
    approver_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    decided_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    approver = relationship("Employee")

    def __repr__(self) -> str:
        return f"<ApprovalStep {self.document_type}/{self.document_id} L{self.level} [{self.status}]>"

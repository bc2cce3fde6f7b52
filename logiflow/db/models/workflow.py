"""Workflow rule reference data.

Rows are authored by the workflow configuration feature; the approval
engine only reads them.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Numeric, Uuid

from logiflow.db.base import Base


class WorkflowRule(Base):
    """
    One approval level for a document type within an amount band.

    A NULL ``max_amount`` means the band is open-ended.
    """
    __tablename__ = "approval_workflows"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_type = Column(String(50), nullable=False, index=True)
    min_amount = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    max_amount = Column(Numeric(15, 2, asdecimal=False), nullable=True)
    approver_role = Column(String(50), nullable=False)
    sla_hours = Column(Integer, nullable=False, default=24)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        upper = self.max_amount if self.max_amount is not None else "inf"
        return f"<WorkflowRule {self.document_type} {self.min_amount}-{upper} {self.approver_role}>"

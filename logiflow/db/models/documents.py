"""Approvable business documents.

Each document type owns its own table. The approval engine touches only
the columns declared by ``ApprovableDocumentMixin``.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Numeric, Text, ForeignKey, Uuid
from sqlalchemy.orm import declared_attr

from logiflow.db.base import Base


class ApprovableDocumentMixin:
    """Columns shared by every document that goes through approval."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_number = Column(String(50), nullable=False, index=True)
    status = Column(String(50), nullable=False, default="draft", index=True)
    amount = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)

    # Approval fields
    sla_due_date = Column(DateTime, nullable=True)
    approved_date = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def created_by_id(cls):
        return Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def approved_by_id(cls):
        return Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.document_number} [{self.status}]>"


class MaterialRequisition(ApprovableDocumentMixin, Base):
    __tablename__ = "material_requisitions"

    project_code = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)


class MaterialIssue(ApprovableDocumentMixin, Base):
    __tablename__ = "material_issues"

    warehouse_code = Column(String(50), nullable=True)
    project_code = Column(String(50), nullable=True)


class JobOrder(ApprovableDocumentMixin, Base):
    __tablename__ = "job_orders"

    job_type = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)


class StockTransfer(ApprovableDocumentMixin, Base):
    __tablename__ = "stock_transfers"

    from_warehouse_code = Column(String(50), nullable=True)
    to_warehouse_code = Column(String(50), nullable=True)

"""Database models for LogiFlow."""

from logiflow.db.models.employee import Employee
from logiflow.db.models.workflow import WorkflowRule
from logiflow.db.models.approval import ApprovalStep
from logiflow.db.models.delegation import DelegationRule
from logiflow.db.models.audit import AuditLog, AuditSeverity
from logiflow.db.models.notification import Notification
from logiflow.db.models.documents import (
    ApprovableDocumentMixin,
    MaterialRequisition,
    MaterialIssue,
    JobOrder,
    StockTransfer,
)

__all__ = [
    "Employee",
    "WorkflowRule",
    "ApprovalStep",
    "DelegationRule",
    "AuditLog",
    "AuditSeverity",
    "Notification",
    "ApprovableDocumentMixin",
    "MaterialRequisition",
    "MaterialIssue",
    "JobOrder",
    "StockTransfer",
]

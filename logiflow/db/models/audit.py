"""Audit log model for LogiFlow.

Entries are append-only: the engine inserts them after each committed
approval transition and never updates or deletes them.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from logiflow.db.base import Base


class AuditSeverity(str, Enum):
    """Severity levels for audit log entries."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AuditLog(Base):
    """
    Append-only audit log entry.

    Records who changed which record of which table, with the values before
    and after the change.
    """
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Target record
    table_name = Column(String(100), nullable=False, index=True)
    record_id = Column(Uuid, nullable=False, index=True)

    # Action details
    action = Column(String(50), nullable=False, index=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)

    # Actor
    performed_by_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True)

    severity = Column(String(20), nullable=False, default="info")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    performed_by = relationship("Employee")

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} on {self.table_name}/{self.record_id}>"

    @classmethod
    def create_entry(
        cls,
        table_name: str,
        record_id: uuid.UUID,
        action: str,
        *,
        new_values: Optional[Dict[str, Any]] = None,
        old_values: Optional[Dict[str, Any]] = None,
        performed_by_id: Optional[uuid.UUID] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> "AuditLog":
        """
        Factory method to create a new audit log entry.

        Args:
            table_name: Table (document type) the record belongs to
            record_id: ID of the affected record
            action: Action performed (e.g. 'create', 'update')
            new_values: New values
            old_values: Previous values
            performed_by_id: ID of the employee performing the action
            severity: Log severity level
        """
        return cls(
            table_name=table_name,
            record_id=record_id,
            action=action,
            old_values=old_values,
            new_values=new_values,
            performed_by_id=performed_by_id,
            severity=severity.value if isinstance(severity, AuditSeverity) else severity,
        )

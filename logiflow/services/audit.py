"""Audit sink backed by the audit_logs table."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from logiflow.db.models import AuditLog, AuditSeverity

logger = logging.getLogger(__name__)


class AuditService:
    """Writes audit entries in their own short transaction."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        table_name: str,
        record_id: UUID,
        action: str,
        old_values: Optional[Dict[str, Any]],
        new_values: Dict[str, Any],
        performed_by_id: Optional[UUID],
        *,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> AuditLog:
        entry = AuditLog.create_entry(
            table_name,
            record_id,
            action,
            old_values=old_values,
            new_values=new_values,
            performed_by_id=performed_by_id,
            severity=severity,
        )
        self.db.add(entry)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return entry

    def list_for_record(self, table_name: str, record_id: UUID) -> list[AuditLog]:
        return self.db.query(AuditLog).filter(
            AuditLog.table_name == table_name,
            AuditLog.record_id == record_id,
        ).order_by(AuditLog.created_at.asc()).all()

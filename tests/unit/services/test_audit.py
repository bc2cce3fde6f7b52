"""Tests for the audit service."""

import uuid

from logiflow.db.models import AuditLog, AuditSeverity
from logiflow.services.audit import AuditService
from tests.factories import create_employee


def test_record_persists_entry(db_session):
    actor = create_employee(db_session)
    record_id = uuid.uuid4()

    entry = AuditService(db_session).record(
        "mirv", record_id, "update",
        {"status": "draft"}, {"status": "pending_approval"}, actor.id,
    )

    stored = db_session.get(AuditLog, entry.id)
    assert stored.table_name == "mirv"
    assert stored.old_values == {"status": "draft"}
    assert stored.new_values == {"status": "pending_approval"}
    assert stored.severity == "info"


def test_list_for_record(db_session):
    service = AuditService(db_session)
    record_id = uuid.uuid4()
    service.record("jo", record_id, "update", None, {"status": "pending_approval"}, None)
    service.record("jo", record_id, "update", {"status": "pending_approval"}, {"status": "approved"}, None,
                   severity=AuditSeverity.WARNING)
    service.record("jo", uuid.uuid4(), "update", None, {"status": "rejected"}, None)

    entries = service.list_for_record("jo", record_id)

    assert len(entries) == 2
    assert {e.severity for e in entries} == {"info", "warning"}

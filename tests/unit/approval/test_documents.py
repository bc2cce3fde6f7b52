"""Tests for the document store registry."""

import uuid
from datetime import datetime

import pytest

from logiflow.core.approval.documents import (
    DocumentRegistry, JobOrderStore, MaterialIssueStore,
    MaterialRequisitionStore, StockTransferStore,
    doc_label, get_document_registry,
)
from logiflow.core.approval.errors import NotFoundError
from logiflow.db.models import JobOrder, MaterialIssue, MaterialRequisition, StockTransfer
from tests.factories import create_document, create_employee


class TestRegistry:

    def test_default_registry_types(self):
        registry = get_document_registry()
        assert registry.document_types == ["jo", "mirv", "mrf", "stock_transfer"]

    @pytest.mark.parametrize("document_type,model", [
        ("mrf", MaterialRequisition),
        ("mirv", MaterialIssue),
        ("jo", JobOrder),
        ("stock_transfer", StockTransfer),
    ])
    def test_store_per_type(self, document_type, model):
        store = get_document_registry().get(document_type)
        assert store.document_type == document_type
        assert store.model is model

    def test_unknown_type_raises_not_found(self):
        with pytest.raises(NotFoundError, match="Document type gate_pass not found"):
            get_document_registry().get("gate_pass")

    def test_find_and_contains(self):
        registry = get_document_registry()
        assert registry.find("gate_pass") is None
        assert "mrf" in registry
        assert "gate_pass" not in registry

    def test_duplicate_store_rejected(self):
        with pytest.raises(ValueError):
            DocumentRegistry([MaterialIssueStore(), MaterialIssueStore()])


class TestLabels:

    def test_known_labels(self):
        assert doc_label("mirv") == "MI"
        assert doc_label("mrf") == "MR"
        assert doc_label("jo") == "Job Order"
        assert StockTransferStore().label == "WT"

    def test_unknown_label_falls_back_to_upper_case(self):
        assert doc_label("lot") == "LOT"


class TestSQLAlchemyStore:

    def test_get_missing_document(self, db_session):
        with pytest.raises(NotFoundError):
            JobOrderStore().get(db_session, uuid.uuid4())

    def test_approval_field_updates(self, db_session):
        store = MaterialRequisitionStore()
        approver = create_employee(db_session, role="manager")
        document = create_document(db_session, "mrf", amount=1500)
        due = datetime(2026, 3, 11, 9, 0)

        store.mark_pending_approval(db_session, document, due)
        assert (document.status, document.sla_due_date) == ("pending_approval", due)

        store.update_sla_due_date(db_session, document, datetime(2026, 3, 12, 9, 0))
        assert document.sla_due_date == datetime(2026, 3, 12, 9, 0)

        store.mark_approved(db_session, document, approver.id, datetime(2026, 3, 12, 10, 0))
        assert document.status == "approved"
        assert document.approved_by_id == approver.id
        assert document.approved_date == datetime(2026, 3, 12, 10, 0)

    def test_mark_rejected(self, db_session):
        store = MaterialIssueStore()
        document = create_document(db_session, "mirv")

        store.mark_rejected(db_session, document, "Wrong warehouse")

        assert document.status == "rejected"
        assert document.rejection_reason == "Wrong warehouse"

    def test_watchers_are_the_creator(self, db_session):
        creator = create_employee(db_session)
        document = create_document(db_session, "jo", created_by=creator)
        orphan = create_document(db_session, "jo")

        store = JobOrderStore()
        assert store.watcher_ids(db_session, document.id) == [creator.id]
        assert store.watcher_ids(db_session, orphan.id) == []
        assert store.watcher_ids(db_session, uuid.uuid4()) == []

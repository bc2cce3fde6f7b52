"""Document stores for approvable document types.

The approval engine never touches document tables directly. It asks the
store registered for a document type to read a document and to write the
few approval-owned fields (status, SLA due date, approver, rejection
reason). The registry is a fixed lookup table built once at startup.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Type
from uuid import UUID

from sqlalchemy.orm import Session

from logiflow.db.models import (
    ApprovableDocumentMixin,
    JobOrder,
    MaterialIssue,
    MaterialRequisition,
    StockTransfer,
)
from .errors import NotFoundError
from .states import DocumentStatus


# Display names shown to users (internal type -> label)
DOC_LABELS: Dict[str, str] = {
    "mrrv": "GRN",
    "mirv": "MI",
    "mrv": "MRN",
    "rfim": "QCI",
    "osd": "DR",
    "mrf": "MR",
    "stock_transfer": "WT",
    "jo": "Job Order",
    "gate_pass": "Gate Pass",
    "shipment": "Shipment",
    "imsf": "IMSF",
    "scrap": "Scrap",
    "surplus": "Surplus",
}


def doc_label(document_type: str) -> str:
    return DOC_LABELS.get(document_type, document_type.upper())


class DocumentStore(ABC):
    """Approval-facing contract of one document type."""

    document_type: str

    @property
    def label(self) -> str:
        return doc_label(self.document_type)

    @abstractmethod
    def get(self, db: Session, document_id: UUID) -> ApprovableDocumentMixin:
        """Load a document or raise NotFoundError."""

    @abstractmethod
    def mark_pending_approval(self, db: Session, document: ApprovableDocumentMixin, sla_due_date: datetime) -> None:
        ...

    @abstractmethod
    def update_sla_due_date(self, db: Session, document: ApprovableDocumentMixin, sla_due_date: datetime) -> None:
        ...

    @abstractmethod
    def mark_approved(
        self, db: Session, document: ApprovableDocumentMixin, approved_by_id: UUID, approved_at: datetime
    ) -> None:
        ...

    @abstractmethod
    def mark_rejected(self, db: Session, document: ApprovableDocumentMixin, reason: str) -> None:
        ...

    @abstractmethod
    def watcher_ids(self, db: Session, document_id: UUID) -> List[UUID]:
        """Employees to keep informed about the document's approval."""


class SQLAlchemyDocumentStore(DocumentStore):
    """Store backed by an ORM model that uses ApprovableDocumentMixin."""

    model: Type[ApprovableDocumentMixin]

    def get(self, db: Session, document_id: UUID) -> ApprovableDocumentMixin:
        document = db.get(self.model, document_id)
        if document is None:
            raise NotFoundError(f"{self.label} document", document_id)
        return document

    def mark_pending_approval(self, db, document, sla_due_date):
        document.status = DocumentStatus.PENDING_APPROVAL.value
        document.sla_due_date = sla_due_date
        db.flush()

    def update_sla_due_date(self, db, document, sla_due_date):
        document.sla_due_date = sla_due_date
        db.flush()

    def mark_approved(self, db, document, approved_by_id, approved_at):
        document.status = DocumentStatus.APPROVED.value
        document.approved_by_id = approved_by_id
        document.approved_date = approved_at
        db.flush()

    def mark_rejected(self, db, document, reason):
        document.status = DocumentStatus.REJECTED.value
        document.rejection_reason = reason
        db.flush()

    def watcher_ids(self, db, document_id):
        document = db.get(self.model, document_id)
        if document is None or document.created_by_id is None:
            return []
        return [document.created_by_id]


class MaterialRequisitionStore(SQLAlchemyDocumentStore):
    document_type = "mrf"
    model = MaterialRequisition


class MaterialIssueStore(SQLAlchemyDocumentStore):
    document_type = "mirv"
    model = MaterialIssue


class JobOrderStore(SQLAlchemyDocumentStore):
    document_type = "jo"
    model = JobOrder


class StockTransferStore(SQLAlchemyDocumentStore):
    document_type = "stock_transfer"
    model = StockTransfer


class DocumentRegistry:
    """Lookup table from document type to its store."""

    def __init__(self, stores: Iterable[DocumentStore]):
        self._stores: Dict[str, DocumentStore] = {}
        for store in stores:
            if store.document_type in self._stores:
                raise ValueError(f"Duplicate document store for {store.document_type}")
            self._stores[store.document_type] = store

    def get(self, document_type: str) -> DocumentStore:
        store = self._stores.get(document_type)
        if store is None:
            raise NotFoundError("Document type", document_type)
        return store

    def find(self, document_type: str) -> Optional[DocumentStore]:
        return self._stores.get(document_type)

    def __contains__(self, document_type: str) -> bool:
        return document_type in self._stores

    @property
    def document_types(self) -> List[str]:
        return sorted(self._stores)


DEFAULT_STORES: List[Type[DocumentStore]] = [
    MaterialRequisitionStore,
    MaterialIssueStore,
    JobOrderStore,
    StockTransferStore,
]


@lru_cache
def get_document_registry() -> DocumentRegistry:
    return DocumentRegistry(store_cls() for store_cls in DEFAULT_STORES)

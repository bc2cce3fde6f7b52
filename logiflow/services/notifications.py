"""Notification service for approval events.

Handles:
- Persistent in-app notifications for every active holder of a role
- Notifications to the watchers of a document (its creator)
- Optional webhook delivery through the Celery notification queue
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from jinja2 import Template
from sqlalchemy import and_
from sqlalchemy.orm import Session

from logiflow.core.config import get_settings
from logiflow.db.models import Employee, Notification
from logiflow.workers.notification_tasks import deliver_webhook

logger = logging.getLogger(__name__)


NOTIFICATION_TEMPLATES = {
    "approval:requested": {
        "title": (
            "{% if level > 1 %}{{ label }} Awaiting L{{ level }} Approval"
            "{% else %}{{ label }} Pending Approval{% endif %}"
        ),
        "body": (
            "{% if previously_approved_by %}Level {{ level - 1 }} approved. "
            "Your Level {{ level }} approval is required."
            "{% else %}A {{ label }} requires your Level {{ level }} approval.{% endif %}"
        ),
    },
    "document:status": {
        "title": "{{ label }} Submitted for Approval",
        "body": "Your {{ label }} is now pending {{ total_levels }}-level approval.",
    },
    "approval:level_approved": {
        "title": "{{ label }} Level {{ approved_level }} Approved",
        "body": "Level {{ approved_level }} approved. Awaiting Level {{ next_level }} ({{ next_approver_role }}).",
    },
    "approval:approved": {
        "title": "{{ label }} Approved",
        "body": "Your {{ label }} has been fully approved.",
    },
    "approval:rejected": {
        "title": "{{ label }} Rejected",
        "body": (
            "Your {{ label }} was rejected at Level {{ rejected_at_level }}."
            "{% if reason %} Reason: {{ reason }}{% endif %}"
        ),
    },
}

_COMPILED = {
    event: {part: Template(source) for part, source in parts.items()}
    for event, parts in NOTIFICATION_TEMPLATES.items()
}


def render_notification(event_name: str, payload: Dict[str, Any]) -> Tuple[str, str]:
    """Render the title and body for an event."""
    document_type = payload.get("document_type") or "document"
    context = dict(payload)
    context.setdefault("label", payload.get("document_label") or document_type.upper())
    context.setdefault("level", 1)

    templates = _COMPILED.get(event_name)
    if templates is None:
        logger.warning(f"No notification template for event: {event_name}")
        return f"{context['label']}: {event_name}", ""

    return templates["title"].render(**context), templates["body"].render(**context)


class NotificationService:
    """
    Creates notifications for approval events.

    Each call writes and commits its own rows, so it can run after the
    approval transaction has committed.
    """

    def __init__(self, db: Session, documents=None):
        """
        Initialize notification service.

        Args:
            db: Database session
            documents: Document registry used to find document watchers
        """
        if documents is None:
            from logiflow.core.approval.documents import get_document_registry
            documents = get_document_registry()

        self.db = db
        self.documents = documents
        self.settings = get_settings()

    def notify_role(self, role: str, event_name: str, payload: Dict[str, Any]) -> List[UUID]:
        """Notify every active employee holding ``role``."""
        recipients = [
            row.id for row in self.db.query(Employee.id).filter(
                and_(
                    Employee.system_role == role,
                    Employee.is_active.is_(True),
                )
            ).all()
        ]
        if not recipients:
            logger.info("No active employees with role %s to notify for %s", role, event_name)

        return self._send(recipients, event_name, payload, audience=f"role:{role}")

    def notify_document_watchers(
        self,
        document_id: UUID,
        event_name: str,
        payload: Dict[str, Any],
    ) -> List[UUID]:
        """Notify the employees watching a document."""
        store = self.documents.find(payload.get("document_type"))
        if store is None:
            logger.warning(f"No document store for {payload.get('document_type')}; watchers not notified")
            return []

        return self._send(
            store.watcher_ids(self.db, document_id),
            event_name,
            payload,
            audience=f"document:{document_id}",
        )

    def list_for_recipient(self, recipient_id: UUID, *, unread_only: bool = False) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.recipient_id == recipient_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc()).all()

    def _send(
        self,
        recipient_ids: List[UUID],
        event_name: str,
        payload: Dict[str, Any],
        *,
        audience: str,
    ) -> List[UUID]:
        title, body = render_notification(event_name, payload)
        reference_id = payload.get("document_id")

        notifications = [
            Notification(
                recipient_id=recipient_id,
                title=title,
                body=body,
                notification_type="approval",
                event_name=event_name,
                reference_table=payload.get("document_type"),
                reference_id=UUID(str(reference_id)) if reference_id else None,
                payload=payload,
            )
            for recipient_id in recipient_ids
        ]
        self.db.add_all(notifications)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._dispatch_webhook(event_name, title, body, payload, audience)
        return [n.id for n in notifications]

    def _dispatch_webhook(
        self,
        event_name: str,
        title: str,
        body: str,
        payload: Dict[str, Any],
        audience: str,
    ) -> Optional[str]:
        url = self.settings.notification_webhook_url
        if not url:
            return None

        result = deliver_webhook.delay(url, {
            "event": event_name,
            "audience": audience,
            "title": title,
            "body": body,
            "timestamp": datetime.utcnow().isoformat(),
            "data": payload,
        })
        return result.id

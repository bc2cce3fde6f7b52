"""Collaborator services used by the approval engine."""

from logiflow.services.audit import AuditService
from logiflow.services.events import EventBus, SystemEvent, event_bus
from logiflow.services.notifications import NotificationService

__all__ = [
    "AuditService",
    "EventBus",
    "SystemEvent",
    "event_bus",
    "NotificationService",
]

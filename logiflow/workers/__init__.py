"""Celery workers for LogiFlow."""

from logiflow.workers.notification_tasks import celery_app, deliver_webhook

__all__ = ["celery_app", "deliver_webhook"]

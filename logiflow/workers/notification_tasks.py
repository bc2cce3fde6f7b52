"""Celery tasks for outbound notification delivery.

Webhook calls run outside the request that produced them so a slow or
failing receiver never delays an approval decision.
"""

from typing import Any, Dict
import logging

import httpx
from celery import Celery, shared_task, signals

from logiflow.core.config import get_settings
from logiflow.core.logger import setup_from_settings

logger = logging.getLogger(__name__)
settings = get_settings()

celery_app = Celery(
    'logiflow',
    broker=settings.celery_broker,
    backend=settings.celery_backend,
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_routes={
        'logiflow.workers.notification_tasks.deliver_webhook': {'queue': 'notifications'},
    },
    task_default_queue='default',
)


@signals.worker_process_init.connect
def configure_worker_logging(**kwargs) -> None:
    setup_from_settings(settings)


@shared_task(bind=True, max_retries=settings.webhook_max_retries, default_retry_delay=settings.webhook_retry_delay)
def deliver_webhook(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    POST a notification payload to a webhook receiver.

    Args:
        url: Receiver URL
        payload: JSON body

    Returns:
        Delivery summary
    """
    try:
        response = httpx.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.webhook_timeout,
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Webhook delivery to %s failed: %s", url, exc)
        raise self.retry(exc=exc)

    return {"status": "sent", "status_code": response.status_code, "event": payload.get("event")}

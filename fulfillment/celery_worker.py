"""
Celery Worker Configuration

Background delivery of stock alerts, with Redis as message broker and
result backend.

Start a worker from the project root:
    celery -A fulfillment.celery_worker worker --loglevel=info
"""

from celery import Celery

from fulfillment.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    'fulfillment_worker',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['fulfillment.tasks']
)

celery_app.conf.update(
    # Task settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_default_queue='fulfillment',

    # Alert SMS calls are short; a hung provider call must not block the worker
    task_soft_time_limit=20,
    task_time_limit=30,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,

    # Alerts are fire-and-forget for the API; keep results only briefly
    result_expires=900,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    broker_connection_retry_on_startup=True,
)


if __name__ == '__main__':
    celery_app.start()

"""
Celery Worker Configuration
Sets up Celery with Redis as message broker and result backend.

Run a worker with:
    celery -A digital_menu.celery_worker worker --loglevel=info
"""

from celery import Celery

from digital_menu.core.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery(
    'digital_menu_worker',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['digital_menu.tasks']  # Module containing our tasks
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,

    # Inline execution for tests and single-process development
    task_always_eager=settings.celery_task_always_eager,
    task_eager_propagates=True,

    # Worker settings
    worker_prefetch_multiplier=1,  # Process one task at a time
    worker_concurrency=4,  # Number of worker processes

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Task execution settings
    task_acks_late=True,  # Acknowledge task after completion
    task_reject_on_worker_lost=True,  # Requeue task if worker dies

    broker_connection_retry_on_startup=True,
)


if __name__ == '__main__':
    celery_app.start()

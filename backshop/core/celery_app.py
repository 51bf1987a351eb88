"""Celery application configuration"""

from celery import Celery
from kombu import Exchange, Queue
from backshop.core.config import settings

# Create Celery app
celery_app = Celery(
    "backshop",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "backshop.tasks.cleanup_tasks"
    ]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.CELERY_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    task_acks_late=True,
    worker_prefetch_multiplier=1,

    # Task routing
    task_routes={
        "purge_expired_carts": {"queue": "cleanup"}
    },

    # Result backend configuration
    result_expires=3600,  # 1 hour
)

# Define queues
celery_app.conf.task_queues = (
    Queue("default", Exchange("default"), routing_key="default"),
    Queue("cleanup", Exchange("cleanup"), routing_key="cleanup"),
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "purge-expired-carts": {
        "task": "purge_expired_carts",
        "schedule": settings.CART_CLEANUP_INTERVAL_SECONDS,
        "options": {"queue": "cleanup"}
    },
}

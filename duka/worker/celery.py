"""
Celery configuration for background task processing.
"""
from celery import Celery
from duka.core.config import settings

# Create Celery app
celery = Celery(
    "duka",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["duka.worker.tasks"]
)

# Celery configuration
celery.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.shop_timezone,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    result_expires=3600,  # 1 hour
    beat_schedule={
        "generate-daily-report": {
            "task": "duka.worker.tasks.generate_daily_report",
            "schedule": 86400.0,  # Every 24 hours
        },
        "check-low-stock": {
            "task": "duka.worker.tasks.check_low_stock",
            "schedule": 3600.0,  # Every hour
        }
    }
)

if __name__ == "__main__":
    celery.start()

from celery import Celery

from phone_cleaner.config import settings
from phone_cleaner.logging_config import configure_logging

configure_logging(settings.LOG_LEVEL)

celery_app = Celery(
    "phone_cleaner",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["phone_cleaner.tasks.clean_text"],
)

celery_app.conf.update(
    task_track_started=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    result_expires=3600,  # 1 hour
)

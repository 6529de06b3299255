from celery import Celery
from celery.signals import setup_logging

from storeledger.core.config import settings
from storeledger.core.logging import configure_logging

celery_app = Celery(
    "storeledger_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["storeledger.worker.tasks"],
)

celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
celery_app.conf.task_default_queue = "default"
celery_app.conf.task_acks_late = True
celery_app.conf.task_ignore_result = True
celery_app.conf.worker_max_tasks_per_child = 100
celery_app.conf.task_routes = {
    "storeledger.worker.tasks.*": {"queue": "printing"},
}


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging()

# bookstore/celery_worker.py
from celery import Celery

from bookstore.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, REPORT_INTERVAL_SECONDS

celery_app = Celery(
    "bookstore",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "bookstore.tasks.reports",
)

celery_app.conf.beat_schedule = {
    "generate-sales-report": {
        "task": "bookstore.tasks.reports.generate_sales_report_task",
        "schedule": float(REPORT_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"

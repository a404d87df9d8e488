# bookstore/tasks/reports.py
import threading
from datetime import timedelta

from bookstore.celery_worker import celery_app
from bookstore.services.container import Container
from bookstore.services.report_service import ReportService
from bookstore.utils.settings import REPORT_INTERVAL_SECONDS, REPORT_WINDOW_SECONDS
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class ReportScheduler:
    """
    Background thread generating a sales report every `interval` seconds,
    sharing the store instances of the running app.
    """

    def __init__(
        self,
        service: ReportService,
        interval: float = REPORT_INTERVAL_SECONDS,
        window: timedelta = timedelta(seconds=REPORT_WINDOW_SECONDS),
    ):
        self.service = service
        self.interval = interval
        self.window = window
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="sales-report-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Sales report generation scheduled every {self.interval}s")

    def stop(self, timeout: float | None = 5.0):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
        logger.info("Sales report generation stopped.")

    def run_once(self):
        try:
            return self.service.generate(self.window)
        except Exception as e:
            logger.error(f"Error generating sales report: {e}")
            return None

    def _run(self):
        # first report after one full interval
        while not self._stop.wait(self.interval):
            self.run_once()


@celery_app.task(name="bookstore.tasks.reports.generate_sales_report_task")
def generate_sales_report_task(window_seconds: int = REPORT_WINDOW_SECONDS):
    """
    Out-of-process variant: rebuilds the stores from the persisted snapshots
    and appends a report to the same backend.
    """
    logger.info("Generate sales report task started")

    container = Container.build()
    container.load_all()
    report = container.report_service.generate(timedelta(seconds=window_seconds))

    return report.model_dump(mode="json")

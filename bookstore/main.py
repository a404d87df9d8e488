# bookstore/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from bookstore.api.errors import register_error_handlers
from bookstore.api.routers import auth, authors, books, customers, health, orders, reports
from bookstore.services.container import Container
from bookstore.tasks.reports import ReportScheduler
from bookstore.utils import settings
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    container: Container | None = None,
    load_snapshots: bool = True,
    start_scheduler: bool | None = None,
) -> FastAPI:
    container = container or Container.build()
    if start_scheduler is None:
        start_scheduler = settings.REPORTS_ENABLED

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if load_snapshots:
            container.load_all()

        scheduler = None
        if start_scheduler:
            scheduler = ReportScheduler(container.report_service)
            scheduler.start()

        logger.info("Bookstore service started")
        yield

        if scheduler:
            scheduler.stop()
        logger.info("Bookstore service stopped")

    app = FastAPI(
        title="Bookstore Service",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(books.router)
    app.include_router(authors.router)
    app.include_router(customers.router)
    app.include_router(orders.router)
    app.include_router(reports.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8080)

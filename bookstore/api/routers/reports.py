# bookstore/api/routers/reports.py
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, Query

from bookstore.api.security import get_cancel_token, get_container, require_permission, require_role
from bookstore.domain.roles import Role
from bookstore.domain.schemas import SalesReport
from bookstore.services.container import Container
from bookstore.utils.cancellation import CancelToken
from bookstore.utils.settings import REPORT_WINDOW_SECONDS

router = APIRouter(prefix="/sales-reports", tags=["reports"])


@router.get("", response_model=List[SalesReport], dependencies=[Depends(require_role(Role.MANAGER))])
def list_reports(
    limit: int = Query(default=10, ge=1, le=100),
    container: Container = Depends(get_container),
):
    """Latest reports, newest first."""
    return container.reports.recent(limit)


@router.post(
    "",
    response_model=SalesReport,
    status_code=201,
    dependencies=[Depends(require_permission("generate:reports"))],
)
def generate_report(
    window_seconds: int = Query(default=REPORT_WINDOW_SECONDS, gt=0),
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.report_service.generate(timedelta(seconds=window_seconds), cancel)

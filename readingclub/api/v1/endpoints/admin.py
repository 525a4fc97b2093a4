"""
Admin console rollups — clients, reading stats, dashboard counters, finance.

Every figure is recomputed from the stores on each request.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from readingclub.api.v1.deps import get_admin_service, require_admin
from readingclub.models.finance import Expense
from readingclub.models.user import User
from readingclub.schemas.admin import (DashboardResponse, DeleteResponse,
                                       ExpenseCreate, ExpenseRead,
                                       FinanceSummaryResponse, StatsResponse)
from readingclub.schemas.user import ClientRead
from readingclub.services.aggregation import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.get("/users", response_model=list[ClientRead])
async def list_clients(
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> list[User]:
    """Client accounts, newest first, with a display label for their subscription."""
    return await admin_service.clients()


@router.get("/stats", response_model=StatsResponse)
async def reading_stats(
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> StatsResponse:
    return StatsResponse.model_validate(await admin_service.stats())


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> DashboardResponse:
    return DashboardResponse(**await admin_service.dashboard())


# ── Finance ─────────────────────────────────────────────────────────
@router.get("/finance/summary", response_model=FinanceSummaryResponse)
async def finance_summary(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> FinanceSummaryResponse:
    """Revenue, expenses, VAT buckets and net result for one month (default: current)."""
    now = datetime.now(timezone.utc)
    summary = await admin_service.finance_summary(year or now.year, month or now.month)
    return FinanceSummaryResponse.model_validate(summary)


@router.get("/finance/expenses", response_model=list[ExpenseRead])
async def list_expenses(
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> list[Expense]:
    return await admin_service.list_expenses()


@router.post("/finance/expenses", response_model=ExpenseRead, status_code=201)
async def create_expense(
    body: ExpenseCreate,
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> Expense:
    return await admin_service.create_expense(body.model_dump())


@router.delete("/finance/expenses/{expense_id}", response_model=DeleteResponse)
async def delete_expense(
    expense_id: int,
    admin_service: AdminService = Depends(get_admin_service),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    await admin_service.delete_expense(expense_id)
    return DeleteResponse(success=True, message="Expense deleted")

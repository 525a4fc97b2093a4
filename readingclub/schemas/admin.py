"""Pydantic schemas for admin rollups and finance bookkeeping."""

from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")

VALID_EXPENSE_CATEGORIES = [
    "outils",
    "marketing",
    "hebergement",
    "droits",
    "services",
    "autre",
]


# ── Reading stats ──────────────────────────────────────────────────
class GlobalStats(BaseModel):
    total_books: int
    total_started: int
    total_completed: int


class GenreStats(BaseModel):
    genre: str
    started: int
    completed: int
    completion_rate: float
    avg_days_to_complete: float | None


class TopBook(BaseModel):
    rank: int
    book_id: int
    title: str
    genre: str | None
    reads: int
    completion_rate: float


class StatsResponse(BaseModel):
    global_: GlobalStats = Field(alias="global")
    genres: list[GenreStats]
    top_books: list[TopBook]

    model_config = {"populate_by_name": True}


class DashboardResponse(BaseModel):
    total_users: int
    active_subscriptions: int
    unread_messages: int
    published_books: int


# ── Finance ────────────────────────────────────────────────────────
class ExpenseCreate(BaseModel):
    amount: float = Field(gt=0)
    currency: str = "EUR"
    date: str
    category: str
    country: str
    vat_amount: float = Field(default=0.0, ge=0, alias="vatAmount")
    description: str | None = Field(default=None, max_length=500)

    model_config = {"populate_by_name": True}

    @field_validator("currency")
    @classmethod
    def _currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not _CURRENCY_RE.match(v):
            raise ValueError("Currency must be a 3-letter code")
        return v

    @field_validator("country")
    @classmethod
    def _country(cls, v: str) -> str:
        v = v.strip().upper()
        if not _COUNTRY_RE.match(v):
            raise ValueError("Country must be a 2-letter code")
        return v

    @field_validator("date")
    @classmethod
    def _date(cls, v: str) -> str:
        try:
            return date.fromisoformat(v.strip()).isoformat()
        except ValueError:
            raise ValueError("Date must be YYYY-MM-DD") from None

    @field_validator("category")
    @classmethod
    def _category(cls, v: str) -> str:
        if v not in VALID_EXPENSE_CATEGORIES:
            raise ValueError(f"Category must be one of: {VALID_EXPENSE_CATEGORIES}")
        return v


class ExpenseRead(BaseModel):
    id: int
    amount: float
    currency: str
    date: str
    category: str
    country: str
    vat_amount: float
    description: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class RevenueSummary(BaseModel):
    billing_active: bool
    by_currency: dict[str, float]
    total_eur: float
    subscribers: int


class ExpenseSummary(BaseModel):
    total: float
    count: int


class TaxSummary(BaseModel):
    collected: dict[str, float]
    deductible: dict[str, float]


class FinanceSummaryResponse(BaseModel):
    year: int
    month: int
    revenue: RevenueSummary
    expenses: ExpenseSummary
    taxes: TaxSummary
    net_profit: float


# ── Generic ────────────────────────────────────────────────────────
class DeleteResponse(BaseModel):
    success: bool
    message: str

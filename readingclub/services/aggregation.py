"""
Admin rollups — reading stats, client list, finance summary.

The arithmetic lives in plain functions that take already-fetched rows, so it
can be exercised without a database. ``AdminService`` only runs the queries
and hands the rows over.
"""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.core.config import settings
from readingclub.core.exceptions import NotFound, ValidationError
from readingclub.core.pricing import tier_for
from readingclub.models.book import COMPLETED, GENRES, NOT_STARTED, Book, ReadingProgress
from readingclub.models.finance import Expense
from readingclub.models.messaging import ContactMessage
from readingclub.models.user import User

logger = logging.getLogger(__name__)

TOP_BOOKS_LIMIT = 10


# ── Helpers ─────────────────────────────────────────────────────────
def _ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def net_profit(
    revenue: float,
    expenses: float,
    tax_collected: float,
    tax_deductible: float,
) -> float:
    """Cash-basis monthly result.

    ``revenue`` is tax-inclusive subscription income, ``expenses`` are
    tax-inclusive costs. VAT collected on sales is owed to the state (minus);
    VAT paid on expenses is recoverable (plus)::

        net = revenue - expenses - tax_collected + tax_deductible
    """
    return round(revenue - expenses - tax_collected + tax_deductible, 2)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    if not 1 <= month <= 12:
        raise ValidationError("month: must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def to_eur(amount: float, currency: str, fx: Mapping[str, float]) -> float:
    rate = fx.get(currency)
    if rate is None:
        raise ValidationError(f"No exchange rate configured for {currency}")
    return amount * rate


# ── Finance ────────────────────────────────────────────────────────
def subscription_revenue(
    subscribers: Iterable[tuple[str | None, datetime | None]],
    year: int,
    month: int,
    cutover: date,
    fx: Mapping[str, float],
) -> dict[str, Any]:
    """Monthly revenue from active subscribers.

    ``subscribers`` yields ``(country, created_at)`` per active account. Nothing
    is billed for months that end before the cutover date; from then on every
    subscriber who joined by month end pays their tier's price in their tier's
    currency.
    """
    _, last = month_bounds(year, month)
    billing_active = last >= cutover
    by_currency: dict[str, float] = defaultdict(float)
    collected: dict[str, float] = defaultdict(float)
    count = 0

    if billing_active:
        month_end = datetime(last.year, last.month, last.day, 23, 59, 59, tzinfo=timezone.utc)
        for country, created_at in subscribers:
            tier = tier_for(country or "")
            if tier is None:
                continue
            joined = _ensure_utc(created_at)
            if joined is not None and joined > month_end:
                continue
            count += 1
            by_currency[tier.currency] += tier.monthly_price
            collected[tier.code] += to_eur(tier.vat_per_month, tier.currency, fx)

    total_eur = sum(to_eur(amount, cur, fx) for cur, amount in by_currency.items())
    return {
        "billing_active": billing_active,
        "by_currency": {k: round(v, 2) for k, v in by_currency.items()},
        "total_eur": round(total_eur, 2),
        "subscribers": count,
        "collected": {k: round(v, 2) for k, v in collected.items()},
    }


def expense_totals(expenses: Iterable[Expense], fx: Mapping[str, float]) -> dict[str, Any]:
    """Total spend (EUR) and recoverable VAT per country bucket."""
    total = 0.0
    count = 0
    deductible: dict[str, float] = defaultdict(float)
    for exp in expenses:
        count += 1
        total += to_eur(exp.amount, exp.currency, fx)
        deductible[exp.country] += to_eur(exp.vat_amount or 0.0, exp.currency, fx)
    return {
        "total": round(total, 2),
        "count": count,
        "deductible": {k: round(v, 2) for k, v in deductible.items()},
    }


def finance_summary(
    subscribers: Iterable[tuple[str | None, datetime | None]],
    expenses: Iterable[Expense],
    year: int,
    month: int,
    cutover: date,
    fx: Mapping[str, float],
) -> dict[str, Any]:
    revenue = subscription_revenue(subscribers, year, month, cutover, fx)
    spent = expense_totals(expenses, fx)
    collected = revenue.pop("collected")
    return {
        "year": year,
        "month": month,
        "revenue": revenue,
        "expenses": {"total": spent["total"], "count": spent["count"]},
        "taxes": {"collected": collected, "deductible": spent["deductible"]},
        "net_profit": net_profit(
            revenue["total_eur"],
            spent["total"],
            sum(collected.values()),
            sum(spent["deductible"].values()),
        ),
    }


# ── Reading stats ──────────────────────────────────────────────────
def reading_stats(books: Iterable[Book], rows: Iterable[ReadingProgress]) -> dict[str, Any]:
    books_by_id = {b.id: b for b in books}
    started: dict[int, int] = defaultdict(int)
    completed: dict[int, int] = defaultdict(int)
    durations: dict[str, list[float]] = defaultdict(list)

    for row in rows:
        if row.status == NOT_STARTED:
            continue
        started[row.book_id] += 1
        if row.status != COMPLETED:
            continue
        completed[row.book_id] += 1
        book = books_by_id.get(row.book_id)
        begin, end = _ensure_utc(row.started_at), _ensure_utc(row.completed_at)
        if book is not None and book.genre and begin and end:
            durations[book.genre].append((end - begin).total_seconds() / 86400)

    def _rate(done: int, total: int) -> float:
        return round(done / total * 100, 1) if total else 0.0

    genres = []
    for genre in GENRES:
        ids = [b.id for b in books_by_id.values() if b.genre == genre]
        g_started = sum(started[i] for i in ids)
        g_completed = sum(completed[i] for i in ids)
        days = durations.get(genre)
        genres.append(
            {
                "genre": genre,
                "started": g_started,
                "completed": g_completed,
                "completion_rate": _rate(g_completed, g_started),
                "avg_days_to_complete": round(sum(days) / len(days), 1) if days else None,
            }
        )

    ranked = sorted(
        (b for b in books_by_id.values() if started[b.id]),
        key=lambda b: (-started[b.id], b.title),
    )[:TOP_BOOKS_LIMIT]
    top_books = [
        {
            "rank": i,
            "book_id": b.id,
            "title": b.title,
            "genre": b.genre,
            "reads": started[b.id],
            "completion_rate": _rate(completed[b.id], started[b.id]),
        }
        for i, b in enumerate(ranked, start=1)
    ]

    return {
        "global": {
            "total_books": len(books_by_id),
            "total_started": sum(started.values()),
            "total_completed": sum(completed.values()),
        },
        "genres": genres,
        "top_books": top_books,
    }


# ── Queries ────────────────────────────────────────────────────────
class AdminService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def clients(self) -> list[User]:
        result = await self.db.execute(
            select(User).where(User.role == "user").order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def stats(self) -> dict[str, Any]:
        books = (await self.db.execute(select(Book))).scalars().all()
        rows = (await self.db.execute(select(ReadingProgress))).scalars().all()
        return reading_stats(books, rows)

    async def dashboard(self) -> dict[str, int]:
        async def _count(query) -> int:
            return int((await self.db.execute(query)).scalar_one())

        return {
            "total_users": await _count(select(func.count(User.id)).where(User.role == "user")),
            "active_subscriptions": await _count(
                select(func.count(User.id)).where(
                    User.role == "user", User.subscription_status == "active"
                )
            ),
            "unread_messages": await _count(
                select(func.count(ContactMessage.id)).where(ContactMessage.is_read.is_(False))
            ),
            "published_books": await _count(
                select(func.count(Book.id)).where(Book.is_published.is_(True))
            ),
        }

    # ── Finance ─────────────────────────────────────────────────────
    async def finance_summary(self, year: int, month: int) -> dict[str, Any]:
        first, last = month_bounds(year, month)
        subs = await self.db.execute(
            select(User.country, User.created_at).where(
                User.role == "user", User.subscription_status == "active"
            )
        )
        expenses = await self.db.execute(
            select(Expense).where(
                Expense.date >= first.isoformat(), Expense.date <= last.isoformat()
            )
        )
        return finance_summary(
            subs.all(),
            expenses.scalars().all(),
            year,
            month,
            settings.BILLING_CUTOVER_DATE,
            settings.FX_TO_EUR,
        )

    async def list_expenses(self) -> list[Expense]:
        result = await self.db.execute(
            select(Expense).order_by(Expense.date.desc(), Expense.id.desc())
        )
        return list(result.scalars().all())

    async def create_expense(self, data: dict[str, Any]) -> Expense:
        if data.get("currency") not in settings.FX_TO_EUR:
            raise ValidationError(f"currency: no exchange rate configured for {data.get('currency')}")
        expense = Expense(**data)
        self.db.add(expense)
        await self.db.commit()
        await self.db.refresh(expense)
        logger.info("Recorded expense %d (%.2f %s)", expense.id, expense.amount, expense.currency)
        return expense

    async def delete_expense(self, expense_id: int) -> None:
        result = await self.db.execute(select(Expense).where(Expense.id == expense_id))
        expense = result.scalar_one_or_none()
        if expense is None:
            raise NotFound("Expense not found")
        await self.db.delete(expense)
        await self.db.commit()
        logger.info("Deleted expense %d", expense_id)

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Iterable

from store_commissions.domain.constants import (
    METRIC_ACCESSORIES,
    METRIC_AMOUNT,
    METRIC_APPAREL,
    METRIC_FOOTWEAR,
    METRIC_SHIRTS,
    METRIC_SOCKS,
    METRIC_TICKETS,
    METRIC_UNITS,
    ROLE_SELLER,
    SALE_CATEGORY_METRICS,
    WORKDAY_END_HOUR,
    WORKDAY_START_HOUR,
)
from store_commissions.domain.goals import Goal
from store_commissions.services.achievement import achievement
from store_commissions.services.aggregation import aggregate_progress, records_in_month
from store_commissions.services.months import days_in_month

SELLER_CATEGORY_METRICS: tuple[str, ...] = (
    METRIC_FOOTWEAR,
    METRIC_APPAREL,
    METRIC_ACCESSORIES,
    METRIC_SHIRTS,
)
TEAM_CATEGORY_METRICS: tuple[str, ...] = SELLER_CATEGORY_METRICS + (METRIC_SOCKS,)

CATEGORY_LABELS: dict[str, str] = {metric: label for label, metric in SALE_CATEGORY_METRICS.items()}


def store_summary(store_records: Iterable[dict[str, Any]], month: str) -> dict[str, float]:
    totals = aggregate_progress(store_records, month, (METRIC_AMOUNT, METRIC_UNITS, METRIC_TICKETS))
    tickets = totals[METRIC_TICKETS]
    return {
        "total_revenue": totals[METRIC_AMOUNT],
        "total_units": totals[METRIC_UNITS],
        "total_tickets": tickets,
        "avg_ticket": totals[METRIC_AMOUNT] / tickets if tickets > 0 else 0.0,
        "units_per_ticket": totals[METRIC_UNITS] / tickets if tickets > 0 else 0.0,
    }


def daily_pace(
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    today: date,
    current_hour: int,
    workday_start: int = WORKDAY_START_HOUR,
    workday_end: int = WORKDAY_END_HOUR,
) -> dict[str, float]:
    """What the store still needs to sell today to stay on the monthly money goal."""
    month = today.strftime("%Y-%m")
    monthly_goal = goal.team_goal.amount if goal else 0
    daily_goal = monthly_goal / days_in_month(month) if monthly_goal > 0 else 0.0

    today_key = today.isoformat()
    today_amount = 0.0
    for record in store_records:
        if record.get("date") == today_key:
            today_amount = float(record.get(METRIC_AMOUNT) or 0)
            break

    remaining_for_day = daily_goal - today_amount if daily_goal > 0 else 0.0
    remaining_hours = max(0, workday_end - max(current_hour, workday_start))
    hourly_rate = (
        remaining_for_day / remaining_hours
        if remaining_for_day > 0 and remaining_hours > 0
        else 0.0
    )
    return {
        "daily_goal": daily_goal,
        "today_amount": today_amount,
        "remaining_for_day": remaining_for_day,
        "remaining_hours": remaining_hours,
        "hourly_rate_needed": hourly_rate,
    }


def seller_sales_ranking(
    sales: Iterable[dict[str, Any]],
    month: str,
    limit: int = 5,
) -> list[dict[str, Any]]:
    totals: dict[str, dict[str, Any]] = {}
    for sale in records_in_month(sales, month):
        entry = totals.setdefault(
            sale["seller_id"],
            {"seller_id": sale["seller_id"], "name": sale.get("seller_name") or "", "total": 0.0},
        )
        entry["total"] += float(sale.get("amount") or 0)
    ranking = sorted(totals.values(), key=lambda row: row["total"], reverse=True)
    return ranking[:limit]


def seller_progress(
    users: Iterable[dict[str, Any]],
    sales: Iterable[dict[str, Any]],
    goal: Goal | None,
    month: str,
) -> list[dict[str, Any]]:
    sales_month = records_in_month(sales, month)
    rows: list[dict[str, Any]] = []
    for user in users:
        if user.get("role") != ROLE_SELLER:
            continue
        total = sum(
            float(sale.get("amount") or 0) for sale in sales_month if sale.get("seller_id") == user["id"]
        )
        goal_set = goal.goal_set_for(user["id"]) if goal else None
        target = goal_set.get(METRIC_AMOUNT) if goal_set else 0
        rows.append({"id": user["id"], "name": user.get("name"), "total": total, "goal": target})
    return rows


def units_by_category(
    sales: Iterable[dict[str, Any]],
    month: str,
    seller_id: str | None = None,
) -> dict[str, float]:
    units: dict[str, float] = defaultdict(float)
    for sale in records_in_month(sales, month):
        if seller_id is not None and sale.get("seller_id") != seller_id:
            continue
        metric = SALE_CATEGORY_METRICS.get(sale.get("category") or "")
        if metric:
            units[metric] += float(sale.get("units") or 0)
    return dict(units)


def ranked_unit_goals(
    goal_set: Any,
    sold_units: dict[str, float],
    metrics: Iterable[str],
) -> list[dict[str, Any]]:
    """Per-category unit goals with progress, weakest first; categories without a goal are skipped."""
    if goal_set is None:
        return []
    rows: list[dict[str, Any]] = []
    for metric in metrics:
        target = goal_set.get(metric)
        if not target or target <= 0:
            continue
        sold = sold_units.get(metric, 0)
        rows.append(
            {
                "metric": metric,
                "name": CATEGORY_LABELS.get(metric, metric),
                "sold": sold,
                "goal": target,
                "progress": achievement(sold, target) * 100,
            }
        )
    rows.sort(key=lambda row: row["progress"])
    return rows


def personal_sales_summary(
    sales: Iterable[dict[str, Any]],
    user_id: str,
    month: str,
) -> dict[str, float]:
    own = [sale for sale in records_in_month(sales, month) if sale.get("seller_id") == user_id]
    revenue = sum(float(sale.get("amount") or 0) for sale in own)
    units = sum(float(sale.get("units") or 0) for sale in own)
    count = len(own)
    return {
        "total_revenue": revenue,
        "total_units": units,
        "sales_count": count,
        "avg_ticket": revenue / count if revenue > 0 and count else 0.0,
        "units_per_ticket": units / count if count else 0.0,
    }

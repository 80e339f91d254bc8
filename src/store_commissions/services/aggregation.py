from __future__ import annotations

from typing import Any, Iterable, Sequence

from store_commissions.domain.constants import STORE_METRICS
from store_commissions.services.months import in_month


def _to_amount(value: Any) -> float:
    if value in (None, ""):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:
        return 0
    return number


def records_in_month(records: Iterable[dict[str, Any]], month: str) -> list[dict[str, Any]]:
    return [record for record in records if in_month(record.get("date"), month)]


def aggregate_progress(
    records: Iterable[dict[str, Any]],
    month: str,
    metrics: Sequence[str] = STORE_METRICS,
) -> dict[str, float]:
    """Sum each metric over the records dated within ``month``.

    Missing or empty values count as zero, so an empty log yields an
    all-zero mapping over ``metrics``.
    """
    totals: dict[str, float] = {metric: 0 for metric in metrics}
    for record in records_in_month(records, month):
        for metric in metrics:
            totals[metric] += _to_amount(record.get(metric))
    return totals


def aggregate_user_progress(
    records: Iterable[dict[str, Any]],
    user_id: str,
    month: str,
    metrics: Sequence[str],
) -> dict[str, float]:
    own = [record for record in records if record.get("user_id") == user_id]
    return aggregate_progress(own, month, metrics)

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Any

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def month_key(value: date | datetime) -> str:
    return value.strftime("%Y-%m")


def current_month(today: date | None = None) -> str:
    return month_key(today or date.today())


def parse_month(value: str | None) -> str:
    text = (value or "").strip()
    if not _MONTH_RE.match(text):
        raise ValueError(f"Mes inválido {value!r}, se espera el formato YYYY-MM.")
    return text


def parse_day(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def day_key(value: Any) -> str | None:
    parsed = parse_day(value)
    return parsed.isoformat() if parsed else None


def in_month(day: Any, month: str) -> bool:
    if day in (None, ""):
        return False
    if isinstance(day, (date, datetime)):
        day = day.isoformat()
    return str(day).startswith(month)


def days_in_month(month: str) -> int:
    year, month_number = (int(part) for part in parse_month(month).split("-"))
    return calendar.monthrange(year, month_number)[1]


def month_label(month: str) -> str:
    names = [
        "enero",
        "febrero",
        "marzo",
        "abril",
        "mayo",
        "junio",
        "julio",
        "agosto",
        "septiembre",
        "octubre",
        "noviembre",
        "diciembre",
    ]
    year, month_number = parse_month(month).split("-")
    return f"{names[int(month_number) - 1]} de {year}"

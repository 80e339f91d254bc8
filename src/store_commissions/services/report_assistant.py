from __future__ import annotations

import json
import logging
import os
from http.client import HTTPException
from typing import Any, Iterable
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from store_commissions.domain.constants import ROLE_LABELS
from store_commissions.domain.goals import Goal
from store_commissions.services.aggregation import records_in_month
from store_commissions.services.commissions import TeamCommissions
from store_commissions.services.months import month_label

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT_S = 30
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

EMPTY_OBJECTIVE_MESSAGE = "Por favor, introduce un objetivo para empezar."
COACHING_ERROR_MESSAGE = (
    "Lo siento, encontré un error al analizar los datos. "
    "Por favor, revisa los registros para más detalles e inténtalo de nuevo."
)
REPORT_ERROR_MESSAGE = (
    "Lo siento, encontré un error al generar el análisis del informe. "
    "Por favor, revisa los registros para más detalles."
)

USER_FIELDS = ("id", "name", "role", "assigned_hours")


def load_ai_config() -> dict[str, Any]:
    timeout_raw = os.getenv("STORE_COMMISSIONS_AI_TIMEOUT_S")
    try:
        timeout_s = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_S
    except ValueError:
        LOGGER.warning("Invalid STORE_COMMISSIONS_AI_TIMEOUT_S=%r, using %s", timeout_raw, DEFAULT_TIMEOUT_S)
        timeout_s = DEFAULT_TIMEOUT_S
    return {
        "api_key": os.getenv("STORE_COMMISSIONS_GEMINI_API_KEY") or "",
        "model": os.getenv("STORE_COMMISSIONS_GEMINI_MODEL") or DEFAULT_MODEL,
        "timeout_s": timeout_s,
    }


def build_month_payload(
    users: Iterable[dict[str, Any]],
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    sales: Iterable[dict[str, Any]],
    month: str,
) -> dict[str, Any]:
    """Structured summary of one month handed to the text service."""
    return {
        "month": month,
        "team": [{key: user.get(key) for key in USER_FIELDS} for user in users],
        "goals": goal.to_dict() if goal else None,
        "store_progress": [
            {key: value for key, value in record.items() if key != "id"}
            for record in records_in_month(store_records, month)
        ],
        "sales": [
            {key: value for key, value in sale.items() if key != "id"}
            for sale in records_in_month(sales, month)
        ],
    }


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2, default=str)


def build_coaching_prompt(objective: str, payload: dict[str, Any]) -> str:
    goals = payload.get("goals") or {}
    return f"""
Eres un coach de ventas experto y estratega comercial para un equipo minorista.
Tu tono debe ser profesional, basado en datos y muy accionable.
Con los siguientes datos JSON, propone un plan de acción conciso para que el encargado
alcance el objetivo indicado.

**Integrantes del equipo:**
{_dump(payload.get("team"))}

**Ventas del mes ({payload.get("month")}):**
{_dump(payload.get("sales"))}

**Metas del mes:**
{_dump(goals.get("team_goal"))}

**Progreso diario agregado del local:**
{_dump(payload.get("store_progress"))}

**Objetivo del encargado:**
"{objective.strip()}"

Estructura la respuesta en español con estas secciones:
1. **Análisis General de Rendimiento**
2. **Áreas Clave de Mejora** (2-3 áreas críticas)
3. **Pasos Accionables** (quién hace qué, de forma concreta)
4. **Consejo de Coaching**

Usa Markdown con negritas y viñetas. No inventes datos; basa el análisis solo en el JSON.
""".strip()


def build_report_prompt(payload: dict[str, Any]) -> str:
    return f"""
Eres un analista experto en rendimiento de ventas minoristas.
Con los datos JSON de un equipo de ventas para el mes {payload.get("month")}, genera un
informe de rendimiento completo en español con dos secciones:
1. **Análisis de Puntos Débiles:** áreas en las que el equipo rinde por debajo de sus metas,
   con porcentajes concretos.
2. **Plan de Mejora Accionable:** pasos concretos para el encargado y el equipo.

**DATOS JSON:**
Miembros del equipo:
{_dump(payload.get("team"))}

Metas mensuales:
{_dump(payload.get("goals"))}

Progreso diario agregado del local:
{_dump(payload.get("store_progress"))}

Ventas individuales del mes:
{_dump(payload.get("sales"))}

Formatea la respuesta en Markdown. No inventes datos.
""".strip()


def generate_text(
    prompt: str,
    api_key: str,
    model: str = DEFAULT_MODEL,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> str:
    if not api_key:
        raise ValueError("Missing Gemini API key")
    body = {"contents": [{"parts": [{"text": prompt}]}]}
    req = Request(
        GEMINI_URL.format(model=quote(model, safe="")),
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
        method="POST",
    )
    with urlopen(req, timeout=timeout_s) as response:
        data = json.loads(response.read().decode("utf-8"))

    parts = data["candidates"][0]["content"]["parts"]
    text = "".join((part.get("text") or "") if isinstance(part, dict) else "" for part in parts).strip()
    if not text:
        raise ValueError("Empty response from text service")
    return text


def _generate_or_fallback(prompt: str, fallback: str, config: dict[str, Any] | None) -> str:
    config = config or load_ai_config()
    try:
        return generate_text(
            prompt,
            api_key=config.get("api_key") or "",
            model=config.get("model") or DEFAULT_MODEL,
            timeout_s=config.get("timeout_s") or DEFAULT_TIMEOUT_S,
        )
    except (
        HTTPError,
        URLError,
        HTTPException,
        TimeoutError,
        OSError,
        ValueError,
        KeyError,
        IndexError,
        TypeError,
        AttributeError,
    ) as exc:
        LOGGER.error("Text service call failed: %s", exc)
        return fallback


def get_coaching_plan(
    objective: str,
    payload: dict[str, Any],
    config: dict[str, Any] | None = None,
) -> str:
    if not (objective or "").strip():
        return EMPTY_OBJECTIVE_MESSAGE
    return _generate_or_fallback(build_coaching_prompt(objective, payload), COACHING_ERROR_MESSAGE, config)


def get_report_analysis(payload: dict[str, Any], config: dict[str, Any] | None = None) -> str:
    return _generate_or_fallback(build_report_prompt(payload), REPORT_ERROR_MESSAGE, config)


def build_report_markdown(
    month: str,
    summary: dict[str, float],
    team: TeamCommissions | None,
    analysis: str,
) -> str:
    """Monthly report as Markdown: store totals, member scores and the written analysis."""
    lines = [
        f"# Informe de rendimiento · {month_label(month)}",
        "",
        "## Resumen del local",
        "",
        f"- Facturación: {summary.get('total_revenue', 0):,.0f}",
        f"- Tickets: {summary.get('total_tickets', 0):,.0f}",
        f"- Unidades: {summary.get('total_units', 0):,.0f}",
        f"- Ticket promedio: {summary.get('avg_ticket', 0):,.0f}",
        f"- Unidades por ticket: {summary.get('units_per_ticket', 0):.2f}",
        "",
        "## Integrantes",
        "",
    ]
    if team is None:
        lines.append("_No hay metas definidas para este mes._")
    else:
        lines.append("| Integrante | Rol | Puntaje | Comisión |")
        lines.append("|---|---|---:|---:|")
        for result in team.results:
            lines.append(
                f"| {result.user_name} | {ROLE_LABELS.get(result.role, result.role)} "
                f"| {result.final_score * 100:.1f}% | {result.commission:,.0f} |"
            )
        for user in team.missing_goal_users:
            lines.append(f"| {user.get('name')} | {ROLE_LABELS.get(user.get('role'), user.get('role'))} | - | - |")
    lines.extend(["", "## Análisis", "", analysis.strip() or "_Sin análisis._", ""])
    return "\n".join(lines)

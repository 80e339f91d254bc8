from __future__ import annotations

import sqlite3
from typing import Any

import streamlit as st

from store_commissions.data.repositories import (
    GoalRepository,
    IndividualProgressRepository,
    SaleRepository,
    StoreProgressRepository,
    UserRepository,
)
from store_commissions.services import report_assistant
from store_commissions.services.commissions import team_commissions
from store_commissions.services.dashboard import store_summary
from store_commissions.services.months import month_label


def _month_payload(con: sqlite3.Connection, month: str) -> dict[str, Any]:
    return report_assistant.build_month_payload(
        UserRepository(con).list_users(),
        GoalRepository(con).get_goal(month),
        StoreProgressRepository(con).list_progress(month=month),
        SaleRepository(con).list_sales(month=month),
        month,
    )


def _render_coaching(con: sqlite3.Connection, month: str, config: dict[str, Any]) -> None:
    st.subheader("Plan de coaching")
    with st.form("coaching_form"):
        objective = st.text_area(
            "Objetivo",
            placeholder="Ej.: aumentar la venta de accesorios un 15% esta semana",
        )
        submitted = st.form_submit_button("Generar plan")
    if submitted:
        with st.spinner("Analizando los datos del mes..."):
            plan = report_assistant.get_coaching_plan(objective, _month_payload(con, month), config)
        st.session_state[f"coaching_plan_{month}"] = plan

    plan = st.session_state.get(f"coaching_plan_{month}")
    if plan:
        st.markdown(plan)


def _render_report(con: sqlite3.Connection, month: str, config: dict[str, Any]) -> None:
    st.subheader("Informe mensual")
    store_records = StoreProgressRepository(con).list_progress(month=month)
    summary = store_summary(store_records, month)
    team = team_commissions(
        UserRepository(con).list_users(),
        GoalRepository(con).get_goal(month),
        store_records,
        IndividualProgressRepository(con).list_progress(month=month),
        month,
    )

    analysis_key = f"report_analysis_{month}"
    if st.button("Generar análisis"):
        with st.spinner("Generando el análisis del informe..."):
            st.session_state[analysis_key] = report_assistant.get_report_analysis(
                _month_payload(con, month),
                config,
            )

    markdown = report_assistant.build_report_markdown(
        month,
        summary,
        team,
        st.session_state.get(analysis_key) or "",
    )
    st.markdown(markdown)
    st.download_button(
        "Descargar informe (.md)",
        data=markdown.encode("utf-8"),
        file_name=f"informe_{month}.md",
        mime="text/markdown",
    )


def render(con: sqlite3.Connection, month: str) -> None:
    st.header(f"Informes · {month_label(month)}")
    config = report_assistant.load_ai_config()
    if not config.get("api_key"):
        st.warning(
            "No hay clave de API configurada (STORE_COMMISSIONS_GEMINI_API_KEY). "
            "El análisis automático no estará disponible."
        )

    coaching_tab, report_tab = st.tabs(["Coaching", "Informe"])
    with coaching_tab:
        _render_coaching(con, month, config)
    with report_tab:
        _render_report(con, month, config)

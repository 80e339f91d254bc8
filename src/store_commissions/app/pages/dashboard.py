from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any

import pandas as pd
import streamlit as st

from store_commissions.data.repositories import (
    GoalRepository,
    MessageRepository,
    SaleRepository,
    StoreProgressRepository,
    UserRepository,
)
from store_commissions.domain.constants import ROLE_MANAGER, ROLE_SELLER
from store_commissions.services.achievement import display_progress
from store_commissions.services.dashboard import (
    SELLER_CATEGORY_METRICS,
    TEAM_CATEGORY_METRICS,
    daily_pace,
    personal_sales_summary,
    ranked_unit_goals,
    seller_progress,
    seller_sales_ranking,
    store_summary,
    units_by_category,
)
from store_commissions.services.months import current_month, month_label


def _money(value: float) -> str:
    return f"$ {value:,.0f}".replace(",", ".")


def _progress_bar(label: str, actual: float, goal: float) -> None:
    progress = display_progress(actual, goal)
    st.caption(f"{label}: {_money(actual)} / {_money(goal)} ({progress['label']})")
    st.progress(progress["width_pct"] / 100)


def _render_messages(con: sqlite3.Connection, current_user: dict[str, Any]) -> None:
    st.subheader("Novedades")
    repo = MessageRepository(con)
    if current_user.get("role") == ROLE_MANAGER:
        with st.form("message_form", clear_on_submit=True):
            content = st.text_area("Nuevo mensaje para el equipo")
            submitted = st.form_submit_button("Publicar")
        if submitted:
            try:
                repo.add_message(content)
            except ValueError as exc:
                st.error(str(exc))
            else:
                st.rerun()

    messages = repo.list_messages()
    if not messages:
        st.caption("No hay mensajes publicados.")
        return
    for message in messages:
        cols = st.columns([6, 1])
        cols[0].info(f"{message['content']}\n\n_{message['created_at'][:16].replace('T', ' ')}_")
        if current_user.get("role") == ROLE_MANAGER:
            if cols[1].button("Borrar", key=f"del_msg_{message['id']}"):
                repo.delete_message(message["id"])
                st.rerun()


def _render_manager(con: sqlite3.Connection, month: str) -> None:
    users = UserRepository(con).list_users()
    goal = GoalRepository(con).get_goal(month)
    store_records = StoreProgressRepository(con).list_progress(month=month)
    sales = SaleRepository(con).list_sales(month=month)

    summary = store_summary(store_records, month)
    cols = st.columns(4)
    cols[0].metric("Facturación", _money(summary["total_revenue"]))
    cols[1].metric("Tickets", f"{summary['total_tickets']:,.0f}")
    cols[2].metric("Ticket promedio", _money(summary["avg_ticket"]))
    cols[3].metric("Unidades por ticket", f"{summary['units_per_ticket']:.2f}")

    if goal is None:
        st.warning("Todavía no hay metas cargadas para este mes.")
    else:
        _progress_bar("Meta de facturación", summary["total_revenue"], goal.team_goal.amount)

    if month == current_month():
        now = datetime.now()
        pace = daily_pace(goal, store_records, now.date(), now.hour)
        st.subheader("Ritmo del día")
        pace_cols = st.columns(3)
        pace_cols[0].metric("Meta diaria", _money(pace["daily_goal"]))
        pace_cols[1].metric("Falta hoy", _money(max(pace["remaining_for_day"], 0)))
        pace_cols[2].metric("Necesario por hora", _money(pace["hourly_rate_needed"]))

    st.subheader("Ranking de vendedores")
    ranking = seller_sales_ranking(sales, month)
    if ranking:
        df = pd.DataFrame(ranking)[["name", "total"]].rename(columns={"name": "Vendedor", "total": "Total"})
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.caption("Sin ventas registradas en el mes.")

    st.subheader("Avance de vendedores")
    for row in seller_progress(users, sales, goal, month):
        _progress_bar(row["name"], row["total"], row["goal"])

    if goal is not None:
        st.subheader("Metas por categoría (unidades)")
        ranked = ranked_unit_goals(
            goal.team_goal,
            units_by_category(sales, month),
            TEAM_CATEGORY_METRICS,
        )
        for row in ranked:
            st.caption(f"{row['name']}: {row['sold']:,.0f} / {row['goal']:,.0f} ({row['progress']:.1f}%)")
            st.progress(min(row["progress"], 100) / 100)


def _render_personal(con: sqlite3.Connection, current_user: dict[str, Any], month: str) -> None:
    goal = GoalRepository(con).get_goal(month)
    sales = SaleRepository(con).list_sales(month=month, seller_id=current_user["id"])
    summary = personal_sales_summary(sales, current_user["id"], month)

    cols = st.columns(4)
    cols[0].metric("Mis ventas", _money(summary["total_revenue"]))
    cols[1].metric("Operaciones", f"{summary['sales_count']}")
    cols[2].metric("Ticket promedio", _money(summary["avg_ticket"]))
    cols[3].metric("Unidades por ticket", f"{summary['units_per_ticket']:.2f}")

    goal_set = goal.goal_set_for(current_user["id"]) if goal else None
    if goal_set is None:
        st.info("Todavía no tenés metas asignadas para este mes.")
        return

    if current_user.get("role") != ROLE_SELLER:
        st.caption("El detalle de tus metas de crédito y medias está en Mis comisiones.")
        return

    _progress_bar("Meta de facturación", summary["total_revenue"], goal_set.get("amount"))
    ranked = ranked_unit_goals(
        goal_set,
        units_by_category(sales, month, seller_id=current_user["id"]),
        SELLER_CATEGORY_METRICS,
    )
    if ranked:
        weakest = ranked[0]
        st.warning(f"Foco del mes: {weakest['name']} ({weakest['progress']:.1f}% de la meta).")
    for row in ranked:
        st.caption(f"{row['name']}: {row['sold']:,.0f} / {row['goal']:,.0f} ({row['progress']:.1f}%)")
        st.progress(min(row["progress"], 100) / 100)


def render(con: sqlite3.Connection, current_user: dict[str, Any], month: str) -> None:
    st.header(f"Inicio · {month_label(month)}")
    st.caption(f"Hola, {current_user.get('name')}.")

    if current_user.get("role") == ROLE_MANAGER:
        _render_manager(con, month)
    else:
        _render_personal(con, current_user, month)

    st.divider()
    _render_messages(con, current_user)

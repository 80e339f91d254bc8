from __future__ import annotations

import sqlite3
from typing import Any

import pandas as pd
import streamlit as st

from store_commissions.data.repositories import (
    GoalRepository,
    IndividualProgressRepository,
    StoreProgressRepository,
    UserRepository,
)
from store_commissions.domain.constants import METRIC_LABELS, ROLE_LABELS, ROLE_MANAGER, TIER_LABELS
from store_commissions.services.achievement import display_progress
from store_commissions.services.commissions import CommissionResult, team_commissions, user_commission
from store_commissions.services.months import month_label


def _money(value: float) -> str:
    return f"$ {value:,.0f}".replace(",", ".")


def _render_detail(result: CommissionResult) -> None:
    cols = st.columns(3)
    cols[0].metric("Comisión", _money(result.commission))
    cols[1].metric("Puntaje final", f"{result.final_score * 100:.1f}%")
    cols[2].metric("Escala", TIER_LABELS.get(result.tier.name, result.tier.name))

    for group in result.score.groups:
        st.markdown(f"**{group.label}** · aporte {group.score * 100:.1f} pts")
        for term in group.result.terms:
            progress = display_progress(term.actual, term.goal)
            st.caption(
                f"{METRIC_LABELS.get(term.metric, term.metric)}: "
                f"{term.actual:,.0f} / {term.goal:,.0f} ({progress['label']}) · peso {term.weight * 100:.1f}%"
            )
            st.progress(progress["width_pct"] / 100)
    if result.score.store_score is not None:
        st.caption(
            f"Desempeño propio {result.score.own_score * 100:.1f}% · "
            f"desempeño del local {result.score.store_score * 100:.1f}%"
        )


def _load(con: sqlite3.Connection, month: str) -> tuple[Any, list[dict[str, Any]], list[dict[str, Any]]]:
    goal = GoalRepository(con).get_goal(month)
    store_records = StoreProgressRepository(con).list_progress(month=month)
    individual_records = IndividualProgressRepository(con).list_progress(month=month)
    return goal, store_records, individual_records


def _render_team(con: sqlite3.Connection, month: str) -> None:
    goal, store_records, individual_records = _load(con, month)
    users = UserRepository(con).list_users()
    team = team_commissions(users, goal, store_records, individual_records, month)
    if team is None:
        st.warning("No hay metas definidas para este mes. Cargalas en la sección Metas.")
        return

    rows = [
        {
            "Integrante": result.user_name,
            "Rol": ROLE_LABELS.get(result.role, result.role),
            "Escala": TIER_LABELS.get(result.tier.name, result.tier.name),
            "Puntaje": round(result.final_score * 100, 1),
            "Comisión": round(result.commission, 2),
        }
        for result in team.results
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    st.metric("Total de comisiones", _money(team.total_commission))

    if team.missing_goal_users:
        names = ", ".join(user["name"] for user in team.missing_goal_users)
        st.info(f"Sin metas individuales este mes: {names}.")

    for result in team.results:
        with st.expander(f"{result.user_name} · {_money(result.commission)}"):
            _render_detail(result)


def _render_own(con: sqlite3.Connection, current_user: dict[str, Any], month: str) -> None:
    goal, store_records, individual_records = _load(con, month)
    result = user_commission(current_user, goal, store_records, individual_records, month)
    if result is None:
        st.info("Todavía no tenés metas asignadas para este mes.")
        return
    _render_detail(result)


def render(con: sqlite3.Connection, current_user: dict[str, Any], month: str) -> None:
    st.header(f"Comisiones · {month_label(month)}")
    if current_user.get("role") == ROLE_MANAGER:
        team_tab, own_tab = st.tabs(["Equipo", "Mi comisión"])
        with team_tab:
            _render_team(con, month)
        with own_tab:
            _render_own(con, current_user, month)
    else:
        _render_own(con, current_user, month)

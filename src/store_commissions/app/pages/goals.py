from __future__ import annotations

import sqlite3
from dataclasses import fields
from typing import Any

import pandas as pd
import streamlit as st

from store_commissions.data.repositories import GoalRepository, UserRepository
from store_commissions.domain.constants import METRIC_LABELS, MONETARY_METRICS, ROLE_CASHIER, ROLE_SELLER
from store_commissions.domain.goals import CashierGoalSet, Goal, SellerGoalSet, TeamGoalSet
from store_commissions.services.goal_distribution import distribute_team_goal, participation_weights
from store_commissions.services.months import month_label


def _team_goal_form(current: TeamGoalSet) -> tuple[bool, TeamGoalSet]:
    with st.form("team_goal_form"):
        values: dict[str, Any] = {}
        cols = st.columns(3)
        for index, f in enumerate(fields(TeamGoalSet)):
            step = 10000.0 if f.name in MONETARY_METRICS else 1.0
            values[f.name] = cols[index % 3].number_input(
                METRIC_LABELS[f.name],
                min_value=0.0,
                step=step,
                value=float(current.get(f.name)),
                key=f"team_goal_{f.name}",
            )
        submitted = st.form_submit_button("Calcular distribución")
    return submitted, TeamGoalSet.from_dict(values)


def _goal_sets_frame(goal: Goal, users: list[dict[str, Any]], goal_type: type) -> pd.DataFrame:
    rows = []
    for user in users:
        goal_set = goal.goal_set_for(user["id"])
        if not isinstance(goal_set, goal_type):
            continue
        rows.append({"id": user["id"], "Nombre": user["name"], **goal_set.as_goals()})
    return pd.DataFrame(rows)


def _frame_to_goal_sets(df: pd.DataFrame, goal_type: type) -> dict[str, Any]:
    if df.empty:
        return {}
    return {
        str(row["id"]): goal_type.from_dict(row)
        for row in df.to_dict(orient="records")
    }


def render(con: sqlite3.Connection, month: str) -> None:
    st.header(f"Metas · {month_label(month)}")
    goal_repo = GoalRepository(con)
    users = UserRepository(con).list_users()
    stored = goal_repo.get_goal(month)

    if stored is None:
        st.info("Este mes todavía no tiene metas guardadas.")
    else:
        st.caption("Hay metas guardadas para este mes. Guardar nuevamente las reemplaza por completo.")

    draft_key = f"goal_draft_{month}"
    submitted, team_goal = _team_goal_form(stored.team_goal if stored else TeamGoalSet())
    if submitted:
        st.session_state[draft_key] = distribute_team_goal(month, team_goal, users)

    draft: Goal | None = st.session_state.get(draft_key) or stored
    if draft is None:
        return

    sellers = [u for u in users if u["role"] == ROLE_SELLER]
    cashiers = [u for u in users if u["role"] == ROLE_CASHIER]

    st.subheader("Vendedores")
    weights = participation_weights(sellers)
    if sellers:
        st.caption(
            " · ".join(f"{s['name']}: {weights.get(s['id'], 0) * 100:.1f}% de participación" for s in sellers)
        )
    seller_df = st.data_editor(
        _goal_sets_frame(draft, sellers, SellerGoalSet),
        disabled=["id", "Nombre"],
        column_config={"id": None, **{k: METRIC_LABELS[k] for k in METRIC_LABELS}},
        hide_index=True,
        key=f"seller_goals_{month}",
    )

    st.subheader("Cajeros")
    cashier_df = st.data_editor(
        _goal_sets_frame(draft, cashiers, CashierGoalSet),
        disabled=["id", "Nombre"],
        column_config={"id": None, **{k: METRIC_LABELS[k] for k in METRIC_LABELS}},
        hide_index=True,
        key=f"cashier_goals_{month}",
    )

    missing = [u["name"] for u in sellers + cashiers if draft.goal_set_for(u["id"]) is None]
    if missing:
        st.warning("Sin metas individuales: " + ", ".join(missing) + ". Recalculá la distribución.")

    if st.button("Guardar metas", type="primary"):
        try:
            user_goals = {
                **_frame_to_goal_sets(seller_df, SellerGoalSet),
                **_frame_to_goal_sets(cashier_df, CashierGoalSet),
            }
            goal_repo.set_goal(Goal(month=month, team_goal=draft.team_goal, user_goals=user_goals))
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.session_state.pop(draft_key, None)
            st.success("Metas guardadas.")
            st.rerun()

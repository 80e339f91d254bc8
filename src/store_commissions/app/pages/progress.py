from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any

import pandas as pd
import streamlit as st

from store_commissions.data.repositories import (
    IndividualProgressRepository,
    StoreProgressRepository,
    UserRepository,
)
from store_commissions.domain.constants import (
    CASHIER_METRICS,
    METRIC_LABELS,
    MONETARY_METRICS,
    ROLE_CASHIER,
    ROLE_LABELS,
    ROLE_MANAGER,
    SELLER_METRICS,
    STORE_METRICS,
)
from store_commissions.services.months import month_label


def _metric_inputs(metrics: tuple[str, ...], key_prefix: str, current: dict[str, Any] | None = None) -> dict[str, float]:
    current = current or {}
    values: dict[str, float] = {}
    cols = st.columns(3)
    for index, metric in enumerate(metrics):
        step = 1000.0 if metric in MONETARY_METRICS else 1.0
        values[metric] = cols[index % 3].number_input(
            METRIC_LABELS[metric],
            min_value=0.0,
            step=step,
            value=float(current.get(metric) or 0),
            key=f"{key_prefix}_{metric}",
        )
    return values


def _records_table(records: list[dict[str, Any]], metrics: tuple[str, ...]) -> pd.DataFrame:
    df = pd.DataFrame(records)
    columns = ["date"] + [m for m in metrics if m in df.columns]
    return df[columns].rename(columns={"date": "Fecha", **METRIC_LABELS})


def _render_store_progress(con: sqlite3.Connection, month: str) -> None:
    repo = StoreProgressRepository(con)
    st.subheader("Progreso diario del local")

    with st.form("store_progress_form", clear_on_submit=True):
        day = st.date_input("Fecha", value=date.today(), key="store_progress_date")
        values = _metric_inputs(STORE_METRICS, "store_progress")
        submitted = st.form_submit_button("Guardar registro")
    if submitted:
        try:
            repo.create_progress({"date": day.isoformat(), **values})
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Registro guardado.")
            st.rerun()

    records = repo.list_progress(month=month)
    if not records:
        st.caption(f"Sin registros para {month_label(month)}.")
        return
    st.dataframe(_records_table(records, STORE_METRICS), use_container_width=True, hide_index=True)

    labels = {record["id"]: record["date"] for record in records}
    record_id = st.selectbox(
        "Registro a editar o eliminar",
        list(labels),
        format_func=lambda rid: labels[rid],
        key="store_progress_pick",
    )
    selected = next(record for record in records if record["id"] == record_id)
    with st.expander("Editar registro"):
        with st.form("store_progress_edit"):
            edited = _metric_inputs(STORE_METRICS, f"store_edit_{record_id}", selected)
            save = st.form_submit_button("Actualizar")
        if save:
            try:
                repo.update_progress(record_id, edited)
            except ValueError as exc:
                st.error(str(exc))
            else:
                st.rerun()
    if st.button("Eliminar registro", key="store_progress_delete"):
        repo.delete_progress(record_id)
        st.rerun()


def _render_individual_progress(
    con: sqlite3.Connection,
    current_user: dict[str, Any],
    month: str,
) -> None:
    repo = IndividualProgressRepository(con)
    st.subheader("Progreso individual")

    if current_user.get("role") == ROLE_MANAGER:
        members = [u for u in UserRepository(con).list_users() if u["role"] != ROLE_MANAGER]
        if not members:
            st.info("No hay vendedores ni cajeros cargados.")
            return
        owner = st.selectbox(
            "Integrante",
            members,
            format_func=lambda u: f"{u['name']} ({ROLE_LABELS[u['role']]})",
            key="individual_owner",
        )
    else:
        owner = current_user

    metrics = CASHIER_METRICS if owner["role"] == ROLE_CASHIER else SELLER_METRICS
    with st.form("individual_progress_form", clear_on_submit=True):
        day = st.date_input("Fecha", value=date.today(), key="individual_date")
        values = _metric_inputs(metrics, f"individual_{owner['id']}")
        submitted = st.form_submit_button("Guardar registro")
    if submitted:
        try:
            repo.create_progress(owner["id"], {"date": day.isoformat(), **values})
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Registro guardado.")
            st.rerun()

    records = repo.list_progress(user_id=owner["id"], month=month)
    if not records:
        st.caption(f"Sin registros para {month_label(month)}.")
        return
    st.dataframe(_records_table(records, metrics), use_container_width=True, hide_index=True)
    labels = {record["id"]: record["date"] for record in records}
    record_id = st.selectbox(
        "Registro a eliminar",
        list(labels),
        format_func=lambda rid: labels[rid],
        key="individual_pick",
    )
    if st.button("Eliminar registro", key="individual_delete"):
        repo.delete_progress(record_id)
        st.rerun()


def render(con: sqlite3.Connection, current_user: dict[str, Any], month: str) -> None:
    st.header("Carga de progreso")
    if current_user.get("role") == ROLE_MANAGER:
        store_tab, individual_tab = st.tabs(["Local", "Individual"])
        with store_tab:
            _render_store_progress(con, month)
        with individual_tab:
            _render_individual_progress(con, current_user, month)
    else:
        _render_individual_progress(con, current_user, month)

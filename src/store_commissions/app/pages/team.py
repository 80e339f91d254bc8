from __future__ import annotations

import sqlite3
from typing import Any

import pandas as pd
import streamlit as st

from store_commissions.data.repositories import UserRepository
from store_commissions.domain.constants import MAX_ASSIGNED_HOURS, ROLE_LABELS, ROLE_SELLER, ROLES


def _user_form(form_key: str, current: dict[str, Any] | None = None) -> tuple[bool, dict[str, Any]]:
    current = current or {}
    with st.form(form_key, clear_on_submit=current == {}):
        name = st.text_input("Nombre", value=current.get("name") or "")
        role = st.selectbox(
            "Rol",
            ROLES,
            index=ROLES.index(current["role"]) if current.get("role") in ROLES else ROLES.index(ROLE_SELLER),
            format_func=lambda r: ROLE_LABELS[r],
        )
        hours = st.number_input(
            "Horas semanales asignadas",
            min_value=0.0,
            max_value=float(MAX_ASSIGNED_HOURS),
            step=1.0,
            value=min(float(current.get("assigned_hours") or 0), float(MAX_ASSIGNED_HOURS)),
            help="Define la participación en las metas y el tramo de comisión (≤ 20 h: medio tiempo).",
        )
        avatar_url = st.text_input("URL de avatar", value=current.get("avatar_url") or "")
        submitted = st.form_submit_button("Guardar")
    payload = {
        "name": name,
        "role": role,
        "assigned_hours": hours or None,
        "avatar_url": avatar_url,
    }
    return submitted, payload


def render(con: sqlite3.Connection) -> None:
    st.header("Equipo")
    repo = UserRepository(con)
    users = repo.list_users()

    if users:
        df = pd.DataFrame(users)
        df["role"] = df["role"].map(ROLE_LABELS)
        st.dataframe(
            df[["name", "role", "assigned_hours"]].rename(
                columns={"name": "Nombre", "role": "Rol", "assigned_hours": "Horas"}
            ),
            use_container_width=True,
            hide_index=True,
        )

    st.subheader("Nuevo integrante")
    submitted, payload = _user_form("user_create")
    if submitted:
        try:
            repo.create_user(payload)
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Integrante creado.")
            st.rerun()

    if not users:
        return

    st.subheader("Editar integrante")
    selected = st.selectbox("Integrante", users, format_func=lambda u: f"{u['name']} ({ROLE_LABELS[u['role']]})")
    submitted, payload = _user_form(f"user_edit_{selected['id']}", selected)
    if submitted:
        try:
            repo.update_user(selected["id"], payload)
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Integrante actualizado.")
            st.rerun()

    if st.button("Eliminar integrante", type="secondary"):
        try:
            repo.delete_user(selected["id"])
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Integrante eliminado.")
            st.rerun()

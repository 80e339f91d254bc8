from __future__ import annotations

import os
import sqlite3
from typing import Any

import streamlit as st

from store_commissions.data.repositories import UserRepository
from store_commissions.domain.constants import ROLE_LABELS, ROLE_MANAGER, TIER_LABELS
from store_commissions.services.commission import tier_for_user


def render(con: sqlite3.Connection, current_user: dict[str, Any]) -> None:
    st.header("Mi perfil")
    repo = UserRepository(con)

    cols = st.columns([1, 3])
    if current_user.get("avatar_url"):
        cols[0].image(current_user["avatar_url"], width=96)
    cols[1].markdown(
        "\n".join(
            [
                f"- Nombre: {current_user.get('name')}",
                f"- Rol: {ROLE_LABELS.get(current_user.get('role'), current_user.get('role'))}",
                f"- Horas semanales: {current_user.get('assigned_hours') or '-'}",
                f"- Escala de comisión: {TIER_LABELS.get(tier_for_user(current_user).name)}",
            ]
        )
    )

    with st.form("avatar_form"):
        avatar_url = st.text_input("URL de avatar", value=current_user.get("avatar_url") or "")
        submitted = st.form_submit_button("Actualizar avatar")
    if submitted:
        try:
            repo.update_user(current_user["id"], {"avatar_url": avatar_url})
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Avatar actualizado.")
            st.rerun()

    if current_user.get("role") == ROLE_MANAGER:
        st.divider()
        st.subheader("Configuración")
        db_path = os.getenv("STORE_COMMISSIONS_DB_PATH") or os.getenv("STORE_COMMISSIONS_DATA_DIR", "./data")
        st.caption(f"Base de datos: {db_path}")
        if os.getenv("STORE_COMMISSIONS_GEMINI_API_KEY"):
            st.success("Servicio de análisis configurado.")
        else:
            st.warning("Servicio de análisis sin configurar (STORE_COMMISSIONS_GEMINI_API_KEY).")

from __future__ import annotations

import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import streamlit as st

import store_commissions
from store_commissions.app.pages import (
    commissions,
    dashboard,
    goals,
    progress,
    reports,
    sales,
    settings,
    team,
)
from store_commissions.data.db import connect, init_db
from store_commissions.data.repositories import UserRepository
from store_commissions.domain.constants import ROLE_LABELS, ROLE_MANAGER, ROLE_SELLER
from store_commissions.services.months import current_month, parse_month

st.set_page_config(page_title="Comisiones del local", layout="wide")


def _truthy_env(value: str | None, default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


# --- DB init (once per app start) ---
DATA_DIR = Path(os.getenv("STORE_COMMISSIONS_DATA_DIR", "./data"))
DB_PATH = Path(os.getenv("STORE_COMMISSIONS_DB_PATH", DATA_DIR / "app.db"))

con = connect(DB_PATH)
init_db(con, seed_defaults=_truthy_env(os.getenv("STORE_COMMISSIONS_SEED_DEFAULTS")))

user_repo = UserRepository(con)


def _render_login() -> None:
    st.title("Comisiones del local")
    st.caption("Elegí tu perfil para ingresar.")
    users = user_repo.list_users()
    if not users:
        st.warning("No hay usuarios cargados.")
        return
    cols = st.columns(min(len(users), 4))
    for index, user in enumerate(users):
        col = cols[index % len(cols)]
        if user.get("avatar_url"):
            col.image(user["avatar_url"], width=80)
        if col.button(f"{user['name']} · {ROLE_LABELS[user['role']]}", key=f"login_{user['id']}"):
            st.session_state["current_user_id"] = user["id"]
            st.session_state.pop("sidebar_page", None)
            st.rerun()


current_user_id = st.session_state.get("current_user_id")
current_user = user_repo.get_user(current_user_id) if current_user_id else None
if current_user is None:
    st.session_state.pop("current_user_id", None)
    _render_login()
    st.stop()

# --- Sidebar navigation ---
st.sidebar.title("Comisiones del local")
st.sidebar.caption(f"{current_user['name']} · {ROLE_LABELS[current_user['role']]}")
if st.sidebar.button("Cambiar de perfil"):
    st.session_state.pop("current_user_id", None)
    st.rerun()

month_input = st.sidebar.text_input("Mes (YYYY-MM)", value=st.session_state.get("month") or current_month())
try:
    month = parse_month(month_input)
except ValueError as exc:
    st.sidebar.error(str(exc))
    month = current_month()
st.session_state["month"] = month

build_number = os.getenv("APP_BUILD") or os.getenv("BUILD_NUMBER") or store_commissions.__version__
st.sidebar.markdown(
    f"""
    <style>
    [data-testid="stSidebar"] .build-info {{
        position: fixed;
        bottom: 0.5rem;
        left: 1rem;
        color: #6c757d;
        font-size: 0.75rem;
    }}
    </style>
    <div class="build-info">Build: {build_number}</div>
    """,
    unsafe_allow_html=True,
)

PAGES = {
    "Inicio": lambda: dashboard.render(con, current_user, month),
    "Comisiones": lambda: commissions.render(con, current_user, month),
    "Progreso": lambda: progress.render(con, current_user, month),
}
if current_user["role"] in (ROLE_MANAGER, ROLE_SELLER):
    PAGES["Ventas"] = lambda: sales.render(con, current_user, month)
if current_user["role"] == ROLE_MANAGER:
    PAGES["Metas"] = lambda: goals.render(con, month)
    PAGES["Equipo"] = lambda: team.render(con)
    PAGES["Informes"] = lambda: reports.render(con, month)
PAGES["Mi perfil"] = lambda: settings.render(con, current_user)

selected = st.sidebar.radio("Secciones", list(PAGES.keys()), key="sidebar_page")

# --- Render selected page ---
PAGES[selected]()

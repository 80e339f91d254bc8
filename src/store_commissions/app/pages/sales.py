from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any

import pandas as pd
import streamlit as st

from store_commissions.data.repositories import SaleRepository, UserRepository
from store_commissions.domain.constants import ROLE_MANAGER, ROLE_SELLER, SALE_CATEGORIES, SALE_TYPES
from store_commissions.services.months import month_label


def render(con: sqlite3.Connection, current_user: dict[str, Any], month: str) -> None:
    st.header("Ventas")
    repo = SaleRepository(con)
    is_manager = current_user.get("role") == ROLE_MANAGER

    if is_manager:
        sellers = UserRepository(con).list_users(role=ROLE_SELLER)
    else:
        sellers = [current_user]

    if sellers:
        with st.form("sale_form", clear_on_submit=True):
            seller = st.selectbox("Vendedor", sellers, format_func=lambda u: u["name"], disabled=not is_manager)
            col1, col2 = st.columns(2)
            amount = col1.number_input("Monto", min_value=0.0, step=1000.0)
            units = col2.number_input("Unidades", min_value=1, step=1)
            col3, col4, col5 = st.columns(3)
            category = col3.selectbox("Categoría", SALE_CATEGORIES)
            sale_type = col4.selectbox("Tipo de venta", SALE_TYPES)
            day = col5.date_input("Fecha", value=date.today())
            submitted = st.form_submit_button("Registrar venta")
        if submitted:
            try:
                repo.create_sale(
                    {
                        "seller_id": seller["id"],
                        "amount": amount,
                        "units": units,
                        "category": category,
                        "sale_type": sale_type,
                        "date": day.isoformat(),
                    }
                )
            except ValueError as exc:
                st.error(str(exc))
            else:
                st.success("Venta registrada.")
                st.rerun()
    else:
        st.info("No hay vendedores cargados.")

    sales = repo.list_sales(month=month, seller_id=None if is_manager else current_user["id"])
    st.subheader(f"Ventas de {month_label(month)}")
    if not sales:
        st.caption("Sin ventas registradas.")
        return

    df = pd.DataFrame(sales)[["date", "seller_name", "category", "sale_type", "units", "amount"]]
    st.dataframe(
        df.rename(
            columns={
                "date": "Fecha",
                "seller_name": "Vendedor",
                "category": "Categoría",
                "sale_type": "Tipo",
                "units": "Unidades",
                "amount": "Monto",
            }
        ),
        use_container_width=True,
        hide_index=True,
    )

    labels = {
        sale["id"]: f"{sale['date']} · {sale['seller_name']} · {sale['category']} · {sale['amount']:,.0f}"
        for sale in sales
    }
    sale_id = st.selectbox("Venta a eliminar", list(labels), format_func=lambda sid: labels[sid])
    if st.button("Eliminar venta"):
        repo.delete_sale(sale_id)
        st.rerun()

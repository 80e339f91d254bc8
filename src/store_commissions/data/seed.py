from __future__ import annotations

from pathlib import Path
import sqlite3

import pandas as pd

from store_commissions.domain.constants import (
    CASHIER_METRICS,
    MAX_ASSIGNED_HOURS,
    ROLE_CASHIER,
    ROLES,
    SELLER_METRICS,
    STORE_METRICS,
)

TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "users": ("id", "name", "role", "avatar_url", "assigned_hours"),
    "sales": ("id", "seller_id", "seller_name", "amount", "units", "category", "sale_type", "date"),
    "store_progress": ("id", "date") + STORE_METRICS,
    "individual_progress": ("id", "user_id", "date") + STORE_METRICS,
}


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        return pd.DataFrame()
    df = pd.read_csv(path, sep=None, engine="python", dtype={"id": str, "user_id": str, "seller_id": str})
    df.columns = [c.strip().lstrip("\ufeff") for c in df.columns]
    return df


def _prepare(table: str, df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    allowed = TABLE_COLUMNS[table]
    df = df[[c for c in df.columns if c in allowed]].copy()
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.strftime("%Y-%m-%d")
        df = df[df["date"].notna()]
    if table == "users":
        df = df[df["role"].isin(ROLES)]
    numeric = [c for c in df.columns if c in STORE_METRICS or c in ("assigned_hours", "units")]
    for column in numeric:
        df[column] = pd.to_numeric(df[column], errors="coerce")
        if (df[column] < 0).any():
            raise ValueError(f"Seed for {table}: negative values in '{column}'")
        if column == "assigned_hours" and (df[column] > MAX_ASSIGNED_HOURS).any():
            raise ValueError(f"Seed for {table}: '{column}' above {MAX_ASSIGNED_HOURS}")
        if table == "store_progress":
            df[column] = df[column].fillna(0)
    return df


def _mask_individual_metrics(con: sqlite3.Connection, df: pd.DataFrame) -> pd.DataFrame:
    """Blank out the metrics that do not belong to each row owner's role."""
    if df.empty or "user_id" not in df.columns:
        return df
    roles = {row["id"]: row["role"] for row in con.execute("SELECT id, role FROM users").fetchall()}
    is_cashier = df["user_id"].map(roles) == ROLE_CASHIER
    for metric in [c for c in df.columns if c in STORE_METRICS]:
        if metric not in CASHIER_METRICS:
            df.loc[is_cashier, metric] = None
        if metric not in SELLER_METRICS:
            df.loc[~is_cashier, metric] = None
    return df


def _upsert_df(con: sqlite3.Connection, table: str, df: pd.DataFrame, key: str = "id") -> None:
    if df.empty:
        return
    if key not in df.columns:
        raise ValueError(f"Seed for {table} requires column '{key}'")

    cols = list(df.columns)
    placeholders = ", ".join(["?"] * len(cols))
    col_list = ", ".join(cols)

    update_cols = [c for c in cols if c != key]
    set_clause = ", ".join([f"{c}=excluded.{c}" for c in update_cols])

    sql = f"""
    INSERT INTO {table} ({col_list})
    VALUES ({placeholders})
    ON CONFLICT({key}) DO UPDATE SET {set_clause};
    """

    rows = [
        tuple(None if pd.isna(v) else (v.item() if hasattr(v, "item") else v) for v in row)
        for row in df[cols].itertuples(index=False, name=None)
    ]
    con.executemany(sql, rows)
    con.commit()


def seed_from_csv(con: sqlite3.Connection, sample_dir: Path) -> dict[str, int]:
    counts: dict[str, int] = {}
    # order matters (FK)
    for table in ("users", "sales", "store_progress", "individual_progress"):
        df = _prepare(table, _read_csv(sample_dir / f"{table}.csv"))
        if table == "individual_progress":
            df = _mask_individual_metrics(con, df)
        _upsert_df(con, table, df)
        counts[table] = len(df)
    return counts

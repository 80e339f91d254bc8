from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from store_commissions.domain.constants import (
    CASHIER_METRICS,
    MAX_ASSIGNED_HOURS,
    ROLE_CASHIER,
    ROLES,
    SALE_CATEGORIES,
    SALE_TYPES,
    SELLER_METRICS,
    STORE_METRICS,
)
from store_commissions.domain.goals import Goal, TeamGoalSet, user_goal_set_from_dict
from store_commissions.services.months import day_key, parse_month


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _table_exists(con: sqlite3.Connection, table: str) -> bool:
    cur = con.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table' AND name = ?
        """,
        (table,),
    )
    return cur.fetchone() is not None


def _clean_amount(value: Any, label: str, required: bool = True) -> float | None:
    if value in (None, ""):
        if required:
            return 0.0
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Valor inválido para {label}.") from exc
    if number != number:
        raise ValueError(f"Valor inválido para {label}.")
    if number < 0:
        raise ValueError(f"{label} no puede ser negativo.")
    return number


def _clean_date(value: Any) -> str:
    cleaned = day_key(value)
    if not cleaned:
        raise ValueError("La fecha es obligatoria (YYYY-MM-DD).")
    return cleaned


class UserRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_users(self, role: str | None = None) -> list[dict[str, Any]]:
        query = """
            SELECT id, name, role, avatar_url, assigned_hours
            FROM users
        """
        params: list[Any] = []
        if role:
            query += " WHERE role = ?"
            params.append(role)
        query += " ORDER BY CASE role WHEN 'manager' THEN 0 WHEN 'seller' THEN 1 ELSE 2 END, name"
        cur = self.con.execute(query, params)
        return [dict(r) for r in cur.fetchall()]

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        cur = self.con.execute(
            """
            SELECT id, name, role, avatar_url, assigned_hours
            FROM users
            WHERE id = ?
            """,
            (user_id,),
        )
        row = cur.fetchone()
        return dict(row) if row else None

    def create_user(self, payload: dict[str, Any]) -> str:
        data = self._normalize_payload(payload)
        user_id = str(payload.get("id") or uuid4())
        self.con.execute(
            """
            INSERT INTO users (id, name, role, avatar_url, assigned_hours, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                data["name"],
                data["role"],
                data["avatar_url"] or f"https://i.pravatar.cc/150?u={user_id}",
                data["assigned_hours"],
                _now(),
            ),
        )
        self.con.commit()
        return user_id

    def update_user(self, user_id: str, payload: dict[str, Any]) -> None:
        current = self.get_user(user_id)
        if current is None:
            raise ValueError("El usuario no existe.")
        data = self._normalize_payload({**current, **payload})
        self.con.execute(
            """
            UPDATE users
            SET name = ?, role = ?, avatar_url = ?, assigned_hours = ?
            WHERE id = ?
            """,
            (data["name"], data["role"], data["avatar_url"], data["assigned_hours"], user_id),
        )
        self.con.commit()

    def delete_user(self, user_id: str) -> None:
        if self.has_sales(user_id):
            raise ValueError("No se puede eliminar un usuario con ventas asociadas.")
        self.con.execute("DELETE FROM users WHERE id = ?", (user_id,))
        self.con.commit()

    def has_sales(self, user_id: str) -> bool:
        cur = self.con.execute("SELECT 1 FROM sales WHERE seller_id = ? LIMIT 1", (user_id,))
        return cur.fetchone() is not None

    def _normalize_payload(self, payload: dict[str, Any]) -> dict[str, Any]:
        name = (payload.get("name") or "").strip()
        if not name:
            raise ValueError("El nombre es obligatorio.")
        role = payload.get("role")
        if role not in ROLES:
            raise ValueError(f"Rol inválido: {role!r}")
        hours = _clean_amount(payload.get("assigned_hours"), "Horas asignadas", required=False)
        if hours is not None and hours > MAX_ASSIGNED_HOURS:
            raise ValueError(f"Horas asignadas no puede superar {MAX_ASSIGNED_HOURS}.")
        return {
            "name": name,
            "role": role,
            "avatar_url": (payload.get("avatar_url") or "").strip() or None,
            "assigned_hours": hours,
        }


class SaleRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_sales(self, month: str | None = None, seller_id: str | None = None) -> list[dict[str, Any]]:
        query = """
            SELECT id, seller_id, seller_name, amount, units, category, sale_type, date
            FROM sales
            WHERE 1 = 1
        """
        params: list[Any] = []
        if month:
            query += " AND date LIKE ?"
            params.append(f"{parse_month(month)}%")
        if seller_id:
            query += " AND seller_id = ?"
            params.append(seller_id)
        query += " ORDER BY date DESC, created_at DESC"
        cur = self.con.execute(query, params)
        return [dict(r) for r in cur.fetchall()]

    def create_sale(self, payload: dict[str, Any]) -> str:
        seller = UserRepository(self.con).get_user(payload.get("seller_id") or "")
        if seller is None:
            raise ValueError("El vendedor no existe.")
        category = payload.get("category")
        if category not in SALE_CATEGORIES:
            raise ValueError(f"Categoría inválida: {category!r}")
        sale_type = payload.get("sale_type")
        if sale_type not in SALE_TYPES:
            raise ValueError(f"Tipo de venta inválido: {sale_type!r}")
        sale_id = str(payload.get("id") or uuid4())
        self.con.execute(
            """
            INSERT INTO sales (id, seller_id, seller_name, amount, units, category, sale_type, date, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                sale_id,
                seller["id"],
                seller["name"],
                _clean_amount(payload.get("amount"), "Monto"),
                int(_clean_amount(payload.get("units"), "Unidades") or 0),
                category,
                sale_type,
                _clean_date(payload.get("date")),
                _now(),
            ),
        )
        self.con.commit()
        return sale_id

    def delete_sale(self, sale_id: str) -> None:
        self.con.execute("DELETE FROM sales WHERE id = ?", (sale_id,))
        self.con.commit()


class GoalRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def get_goal(self, month: str) -> Goal | None:
        cur = self.con.execute(
            """
            SELECT month, team_goal_json, user_goals_json
            FROM goals
            WHERE month = ?
            """,
            (parse_month(month),),
        )
        row = cur.fetchone()
        return self._row_to_goal(dict(row)) if row else None

    def list_goals(self) -> list[Goal]:
        cur = self.con.execute(
            """
            SELECT month, team_goal_json, user_goals_json
            FROM goals
            ORDER BY month DESC
            """
        )
        return [self._row_to_goal(dict(r)) for r in cur.fetchall()]

    def set_goal(self, goal: Goal) -> None:
        """Store ``goal``, replacing whatever was stored for its month."""
        month = parse_month(goal.month)
        user_goals = {user_id: goal_set.to_dict() for user_id, goal_set in goal.user_goals.items()}
        self.con.execute(
            """
            INSERT INTO goals (month, team_goal_json, user_goals_json, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(month) DO UPDATE SET
                team_goal_json = excluded.team_goal_json,
                user_goals_json = excluded.user_goals_json,
                updated_at = excluded.updated_at
            """,
            (
                month,
                json.dumps(goal.team_goal.to_dict(), ensure_ascii=False),
                json.dumps(user_goals, ensure_ascii=False),
                _now(),
            ),
        )
        self.con.commit()

    def _row_to_goal(self, row: dict[str, Any]) -> Goal:
        user_goals = json.loads(row.get("user_goals_json") or "{}")
        return Goal(
            month=row["month"],
            team_goal=TeamGoalSet.from_dict(json.loads(row.get("team_goal_json") or "{}")),
            user_goals={
                user_id: user_goal_set_from_dict(payload) for user_id, payload in user_goals.items()
            },
        )


class StoreProgressRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_progress(self, month: str | None = None) -> list[dict[str, Any]]:
        columns = ", ".join(("id", "date") + STORE_METRICS)
        query = f"SELECT {columns} FROM store_progress"
        params: list[Any] = []
        if month:
            query += " WHERE date LIKE ?"
            params.append(f"{parse_month(month)}%")
        query += " ORDER BY date DESC"
        cur = self.con.execute(query, params)
        return [dict(r) for r in cur.fetchall()]

    def create_progress(self, payload: dict[str, Any]) -> str:
        record_id = str(payload.get("id") or uuid4())
        values = self._normalize_payload(payload)
        columns = ("id", "date") + STORE_METRICS + ("created_at",)
        placeholders = ", ".join(["?"] * len(columns))
        self.con.execute(
            f"INSERT INTO store_progress ({', '.join(columns)}) VALUES ({placeholders})",
            (record_id, values["date"], *[values[m] for m in STORE_METRICS], _now()),
        )
        self.con.commit()
        return record_id

    def update_progress(self, record_id: str, payload: dict[str, Any]) -> None:
        cur = self.con.execute("SELECT * FROM store_progress WHERE id = ?", (record_id,))
        row = cur.fetchone()
        if row is None:
            raise ValueError("El registro de progreso no existe.")
        values = self._normalize_payload({**dict(row), **payload})
        set_clause = ", ".join(f"{column} = ?" for column in ("date",) + STORE_METRICS)
        self.con.execute(
            f"UPDATE store_progress SET {set_clause} WHERE id = ?",
            (values["date"], *[values[m] for m in STORE_METRICS], record_id),
        )
        self.con.commit()

    def delete_progress(self, record_id: str) -> None:
        self.con.execute("DELETE FROM store_progress WHERE id = ?", (record_id,))
        self.con.commit()

    def _normalize_payload(self, payload: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {"date": _clean_date(payload.get("date"))}
        for metric in STORE_METRICS:
            values[metric] = _clean_amount(payload.get(metric), metric)
        return values


class IndividualProgressRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_progress(
        self,
        user_id: str | None = None,
        month: str | None = None,
    ) -> list[dict[str, Any]]:
        columns = ", ".join(("id", "user_id", "date") + STORE_METRICS)
        query = f"SELECT {columns} FROM individual_progress WHERE 1 = 1"
        params: list[Any] = []
        if user_id:
            query += " AND user_id = ?"
            params.append(user_id)
        if month:
            query += " AND date LIKE ?"
            params.append(f"{parse_month(month)}%")
        query += " ORDER BY date DESC, created_at DESC"
        cur = self.con.execute(query, params)
        return [dict(r) for r in cur.fetchall()]

    def create_progress(self, user_id: str, payload: dict[str, Any]) -> str:
        owner = UserRepository(self.con).get_user(user_id)
        if owner is None:
            raise ValueError("El usuario no existe.")
        record_id = str(payload.get("id") or uuid4())
        values = self._normalize_payload(owner, payload)
        columns = ("id", "user_id", "date") + STORE_METRICS + ("created_at",)
        placeholders = ", ".join(["?"] * len(columns))
        self.con.execute(
            f"INSERT INTO individual_progress ({', '.join(columns)}) VALUES ({placeholders})",
            (record_id, user_id, values["date"], *[values[m] for m in STORE_METRICS], _now()),
        )
        self.con.commit()
        return record_id

    def update_progress(self, record_id: str, payload: dict[str, Any]) -> None:
        cur = self.con.execute("SELECT * FROM individual_progress WHERE id = ?", (record_id,))
        row = cur.fetchone()
        if row is None:
            raise ValueError("El registro de progreso no existe.")
        current = dict(row)
        owner = UserRepository(self.con).get_user(current["user_id"]) or {"role": None}
        values = self._normalize_payload(owner, {**current, **payload})
        set_clause = ", ".join(f"{column} = ?" for column in ("date",) + STORE_METRICS)
        self.con.execute(
            f"UPDATE individual_progress SET {set_clause} WHERE id = ?",
            (values["date"], *[values[m] for m in STORE_METRICS], record_id),
        )
        self.con.commit()

    def delete_progress(self, record_id: str) -> None:
        self.con.execute("DELETE FROM individual_progress WHERE id = ?", (record_id,))
        self.con.commit()

    def _normalize_payload(self, owner: dict[str, Any], payload: dict[str, Any]) -> dict[str, Any]:
        allowed = CASHIER_METRICS if owner.get("role") == ROLE_CASHIER else SELLER_METRICS
        values: dict[str, Any] = {"date": _clean_date(payload.get("date"))}
        for metric in STORE_METRICS:
            if metric in allowed:
                values[metric] = _clean_amount(payload.get(metric), metric, required=False)
            else:
                values[metric] = None
        return values


class MessageRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_messages(self, limit: int = 50) -> list[dict[str, Any]]:
        try:
            cur = self.con.execute(
                """
                SELECT id, content, created_at
                FROM messages
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (limit,),
            )
            return [dict(row) for row in cur.fetchall()]
        except sqlite3.Error:
            return []

    def add_message(self, content: str) -> str:
        clean = (content or "").strip()
        if not clean:
            raise ValueError("El mensaje no puede estar vacío.")
        message_id = str(uuid4())
        self.con.execute(
            "INSERT INTO messages (id, content, created_at) VALUES (?, ?, ?)",
            (message_id, clean, _now()),
        )
        self.con.commit()
        return message_id

    def delete_message(self, message_id: str) -> None:
        if not _table_exists(self.con, "messages"):
            return
        self.con.execute("DELETE FROM messages WHERE id = ?", (message_id,))
        self.con.commit()

from __future__ import annotations

from pathlib import Path
import sqlite3

SCHEMA_VERSION = 1

SCHEMA_SQL = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS users (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  role TEXT NOT NULL CHECK (role IN ('manager', 'seller', 'cashier')),
  avatar_url TEXT,
  assigned_hours REAL,
  created_at TEXT
);

CREATE TABLE IF NOT EXISTS sales (
  id TEXT PRIMARY KEY,
  seller_id TEXT NOT NULL,
  seller_name TEXT NOT NULL,
  amount REAL NOT NULL,
  units INTEGER NOT NULL,
  category TEXT NOT NULL,
  sale_type TEXT NOT NULL,
  date TEXT NOT NULL,
  created_at TEXT,
  FOREIGN KEY(seller_id) REFERENCES users(id)
);

CREATE INDEX IF NOT EXISTS idx_sales_date ON sales (date);

CREATE TABLE IF NOT EXISTS goals (
  month TEXT PRIMARY KEY,
  team_goal_json TEXT NOT NULL,
  user_goals_json TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS store_progress (
  id TEXT PRIMARY KEY,
  date TEXT NOT NULL,
  amount REAL NOT NULL DEFAULT 0,
  tickets REAL NOT NULL DEFAULT 0,
  units REAL NOT NULL DEFAULT 0,
  footwear REAL NOT NULL DEFAULT 0,
  apparel REAL NOT NULL DEFAULT 0,
  shirts REAL NOT NULL DEFAULT 0,
  accessories REAL NOT NULL DEFAULT 0,
  socks REAL NOT NULL DEFAULT 0,
  credit_amount REAL NOT NULL DEFAULT 0,
  credit_units REAL NOT NULL DEFAULT 0,
  created_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_store_progress_date ON store_progress (date);

CREATE TABLE IF NOT EXISTS individual_progress (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  date TEXT NOT NULL,
  amount REAL,
  tickets REAL,
  units REAL,
  footwear REAL,
  apparel REAL,
  shirts REAL,
  accessories REAL,
  socks REAL,
  credit_amount REAL,
  credit_units REAL,
  created_at TEXT,
  FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_individual_progress_user_date
  ON individual_progress (user_id, date);

CREATE TABLE IF NOT EXISTS messages (
  id TEXT PRIMARY KEY,
  content TEXT NOT NULL,
  created_at TEXT NOT NULL
);
"""

DEFAULT_USERS = [
    ("user-1", "Admin", "manager", "https://i.pravatar.cc/150?u=admin", 40),
    ("user-2", "Ana", "seller", "https://i.pravatar.cc/150?u=ana", 35),
    ("user-3", "Juan", "seller", "https://i.pravatar.cc/150?u=juan", 20),
    ("user-4", "Luis", "cashier", "https://i.pravatar.cc/150?u=luis", 30),
]


def connect(db_path: Path | str) -> sqlite3.Connection:
    if str(db_path) != ":memory:":
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        db_path = db_path.as_posix()
    con = sqlite3.connect(db_path, check_same_thread=False)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys=ON;")
    return con


def _get_user_version(con: sqlite3.Connection) -> int:
    row = con.execute("PRAGMA user_version;").fetchone()
    return int(row[0]) if row else 0


def _set_user_version(con: sqlite3.Connection, version: int) -> None:
    con.execute(f"PRAGMA user_version = {version};")


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


def seed_default_users(con: sqlite3.Connection) -> None:
    if not _table_exists(con, "users"):
        return
    row = con.execute("SELECT COUNT(1) AS n FROM users").fetchone()
    if row and int(row["n"]) > 0:
        return
    con.executemany(
        """
        INSERT INTO users (id, name, role, avatar_url, assigned_hours)
        VALUES (?, ?, ?, ?, ?)
        """,
        DEFAULT_USERS,
    )


def init_db(con: sqlite3.Connection, seed_defaults: bool = True) -> None:
    con.executescript(SCHEMA_SQL)
    if _get_user_version(con) < SCHEMA_VERSION:
        _set_user_version(con, SCHEMA_VERSION)
    if seed_defaults:
        seed_default_users(con)
    con.commit()


def table_count(con: sqlite3.Connection, table: str) -> int:
    cur = con.execute(f"SELECT COUNT(1) AS n FROM {table}")
    return int(cur.fetchone()["n"])

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any

import pandas as pd

from store_commissions.data.db import connect, init_db
from store_commissions.data.repositories import (
    GoalRepository,
    IndividualProgressRepository,
    StoreProgressRepository,
    UserRepository,
)
from store_commissions.data.seed import seed_from_csv
from store_commissions.domain.constants import ROLE_LABELS, TIER_LABELS
from store_commissions.services.commissions import TeamCommissions, team_commissions
from store_commissions.services.months import current_month, parse_month

LOGGER = logging.getLogger(__name__)


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_db_connection() -> Any:
    data_dir = Path(os.getenv("STORE_COMMISSIONS_DATA_DIR", "./data"))
    db_path = Path(os.getenv("STORE_COMMISSIONS_DB_PATH", data_dir / "app.db"))
    con = connect(db_path)
    init_db(con, seed_defaults=_parse_bool(os.getenv("STORE_COMMISSIONS_SEED_DEFAULTS"), default=True))
    return con


def _month_arg(value: str) -> str:
    try:
        return parse_month(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_rows(team: TeamCommissions) -> list[dict[str, Any]]:
    rows = []
    for result in team.results:
        rows.append(
            {
                "user_id": result.user_id,
                "name": result.user_name,
                "role": ROLE_LABELS.get(result.role, result.role),
                "tier": TIER_LABELS.get(result.tier.name, result.tier.name),
                "own_score": round(result.score.own_score, 4),
                "store_score": (
                    round(result.score.store_score, 4) if result.score.store_score is not None else None
                ),
                "final_score": round(result.final_score, 4),
                "commission": round(result.commission, 2),
            }
        )
    return rows


def run_statement(con, month: str, output_format: str) -> int:
    users = UserRepository(con).list_users()
    goal = GoalRepository(con).get_goal(month)
    store_records = StoreProgressRepository(con).list_progress(month=month)
    individual_records = IndividualProgressRepository(con).list_progress(month=month)

    team = team_commissions(users, goal, store_records, individual_records, month)
    if team is None:
        LOGGER.warning("No goals defined for %s; set the team goals first.", month)
        print(f"No hay metas definidas para {month}. El encargado debe cargar las metas del equipo.")
        return 1

    for user in team.missing_goal_users:
        LOGGER.info("No goal set for %s (%s) in %s", user.get("name"), user.get("id"), month)

    rows = build_rows(team)
    if output_format == "json":
        print(json.dumps({"month": month, "commissions": rows}, ensure_ascii=False, indent=2))
    else:
        if rows:
            print(pd.DataFrame(rows).to_string(index=False))
        print(f"\nTotal comisiones {month}: {team.total_commission:,.2f}")
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description="Print the monthly commission statement.")
    parser.add_argument("--month", type=_month_arg, help="Month to score (YYYY-MM). Defaults to the current month.")
    parser.add_argument("--format", choices=["table", "json"], default="table", dest="output_format")
    parser.add_argument("--seed-dir", type=Path, help="Import users/sales/progress CSV files before scoring.")
    args = parser.parse_args(argv)

    month = args.month or current_month()
    con = _get_db_connection()

    if args.seed_dir:
        counts = seed_from_csv(con, args.seed_dir)
        LOGGER.info("Imported: %s", counts)

    return run_statement(con, month, args.output_format)


if __name__ == "__main__":
    raise SystemExit(main())

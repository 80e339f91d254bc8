import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from store_commissions.cli import commissions as cli
from store_commissions.data.db import connect, init_db
from store_commissions.data.repositories import (
    GoalRepository,
    IndividualProgressRepository,
    SaleRepository,
    StoreProgressRepository,
    UserRepository,
)
from store_commissions.data.seed import seed_from_csv
from store_commissions.domain.goals import Goal, SellerGoalSet, TeamGoalSet


class SeedTests(unittest.TestCase):
    def setUp(self) -> None:
        self.con = connect(":memory:")
        init_db(self.con, seed_defaults=False)
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.con.close()
        self.tmp.cleanup()

    def _write(self, name: str, text: str) -> None:
        (self.dir / name).write_text(text, encoding="utf-8")

    def test_seed_loads_tables_in_order(self) -> None:
        self._write(
            "users.csv",
            "id,name,role,assigned_hours\nu1,Ana,seller,35\nu2,Luis,cashier,30\nu3,Bob,owner,10\n",
        )
        self._write(
            "sales.csv",
            "id,seller_id,seller_name,amount,units,category,sale_type,date\n"
            "v1,u1,Ana,25000,1,Calzado,Contado,2024-05-03\n",
        )
        self._write("store_progress.csv", "id,date,amount,tickets\nr1,2024-05-03,25000,\n")

        counts = seed_from_csv(self.con, self.dir)

        self.assertEqual(counts, {"users": 2, "sales": 1, "store_progress": 1, "individual_progress": 0})
        self.assertEqual([u["id"] for u in UserRepository(self.con).list_users()], ["u1", "u2"])
        self.assertEqual(SaleRepository(self.con).list_sales(month="2024-05")[0]["amount"], 25000)
        record = StoreProgressRepository(self.con).list_progress(month="2024-05")[0]
        self.assertEqual((record["amount"], record["tickets"]), (25000, 0))

    def test_seed_rejects_negative_values(self) -> None:
        self._write("users.csv", "id,name,role,assigned_hours\nu1,Ana,seller,35\n")
        self._write("store_progress.csv", "id,date,amount,tickets\nr1,2024-05-03,-5,1\n")
        with self.assertRaises(ValueError):
            seed_from_csv(self.con, self.dir)

    def test_seed_rejects_hours_above_maximum(self) -> None:
        self._write("users.csv", "id,name,role,assigned_hours\nu1,Ana,seller,70\n")
        with self.assertRaises(ValueError):
            seed_from_csv(self.con, self.dir)

    def test_seed_keeps_only_role_metrics_for_individual_progress(self) -> None:
        self._write("users.csv", "id,name,role,assigned_hours\nu1,Ana,seller,35\nu2,Luis,cashier,30\n")
        self._write(
            "individual_progress.csv",
            "id,user_id,date,amount,footwear,socks,credit_units\n"
            "p1,u2,2024-05-03,5000,4,3,1\n"
            "p2,u1,2024-05-03,8000,2,6,\n",
        )

        seed_from_csv(self.con, self.dir)

        repo = IndividualProgressRepository(self.con)
        cashier = repo.list_progress(user_id="u2", month="2024-05")[0]
        seller = repo.list_progress(user_id="u1", month="2024-05")[0]
        self.assertEqual((cashier["amount"], cashier["footwear"]), (None, None))
        self.assertEqual((cashier["socks"], cashier["credit_units"]), (3, 1))
        self.assertIsNone(seller["socks"])
        self.assertEqual((seller["amount"], seller["footwear"]), (8000, 2))


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.con = connect(":memory:")
        init_db(self.con)

    def tearDown(self) -> None:
        self.con.close()

    def _run(self, month: str, output_format: str) -> tuple[int, str]:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = cli.run_statement(self.con, month, output_format)
        return code, buffer.getvalue()

    def test_statement_without_goal_prints_guidance(self) -> None:
        code, output = self._run("2024-05", "table")
        self.assertEqual(code, 1)
        self.assertIn("No hay metas definidas para 2024-05", output)

    def test_statement_json(self) -> None:
        GoalRepository(self.con).set_goal(
            Goal(
                month="2024-05",
                team_goal=TeamGoalSet(amount=100000),
                user_goals={"user-2": SellerGoalSet(amount=50000)},
            )
        )
        code, output = self._run("2024-05", "json")
        self.assertEqual(code, 0)
        data = json.loads(output)
        rows = {row["user_id"]: row for row in data["commissions"]}
        self.assertEqual(set(rows), {"user-1", "user-2"})
        self.assertEqual(rows["user-1"]["commission"], 170000)
        self.assertEqual(rows["user-2"]["tier"], "Vendedor/a")
        self.assertIsNone(rows["user-1"]["store_score"])

    def test_statement_table(self) -> None:
        GoalRepository(self.con).set_goal(Goal(month="2024-05", team_goal=TeamGoalSet(amount=100000)))
        code, output = self._run("2024-05", "table")
        self.assertEqual(code, 0)
        self.assertIn("Admin", output)
        self.assertIn("Total comisiones 2024-05: 170,000.00", output)

    def test_invalid_month_is_rejected(self) -> None:
        with redirect_stdout(io.StringIO()), self.assertRaises(SystemExit):
            with mock.patch("sys.stderr", io.StringIO()):
                cli.main(["--month", "2024-13"])


if __name__ == "__main__":
    unittest.main()

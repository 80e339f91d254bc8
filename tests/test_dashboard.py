import sys
import unittest
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from store_commissions.domain.goals import Goal, SellerGoalSet, TeamGoalSet
from store_commissions.services import dashboard
from store_commissions.services.months import days_in_month, month_label, parse_month


def _sale(seller_id, name, amount, units=1, category="Calzado", day="2024-05-10"):
    return {
        "seller_id": seller_id,
        "seller_name": name,
        "amount": amount,
        "units": units,
        "category": category,
        "sale_type": "Contado",
        "date": day,
    }


class MonthHelperTests(unittest.TestCase):
    def test_parse_month(self) -> None:
        self.assertEqual(parse_month(" 2024-05 "), "2024-05")
        for bad in ("2024-13", "2024-5", "mayo", None):
            with self.subTest(value=bad):
                with self.assertRaises(ValueError):
                    parse_month(bad)

    def test_days_and_label(self) -> None:
        self.assertEqual(days_in_month("2024-02"), 29)
        self.assertEqual(month_label("2024-05"), "mayo de 2024")


class DashboardTests(unittest.TestCase):
    def test_store_summary_ratios(self) -> None:
        records = [
            {"date": "2024-05-01", "amount": 30000, "units": 6, "tickets": 3},
            {"date": "2024-05-02", "amount": 10000, "units": 2, "tickets": 1},
        ]
        summary = dashboard.store_summary(records, "2024-05")
        self.assertEqual(summary["total_revenue"], 40000)
        self.assertEqual(summary["avg_ticket"], 10000)
        self.assertEqual(summary["units_per_ticket"], 2)
        self.assertEqual(dashboard.store_summary([], "2024-05")["avg_ticket"], 0.0)

    def test_daily_pace(self) -> None:
        goal = Goal(month="2024-05", team_goal=TeamGoalSet(amount=310000))
        records = [{"date": "2024-05-10", "amount": 4000}]
        pace = dashboard.daily_pace(goal, records, date(2024, 5, 10), current_hour=15)
        self.assertAlmostEqual(pace["daily_goal"], 10000)
        self.assertAlmostEqual(pace["remaining_for_day"], 6000)
        self.assertEqual(pace["remaining_hours"], 3)
        self.assertAlmostEqual(pace["hourly_rate_needed"], 2000)

    def test_daily_pace_before_opening_counts_the_whole_workday(self) -> None:
        goal = Goal(month="2024-05", team_goal=TeamGoalSet(amount=310000))
        early = dashboard.daily_pace(goal, [], date(2024, 5, 10), current_hour=6)
        self.assertEqual(early["remaining_hours"], 9)
        self.assertAlmostEqual(early["hourly_rate_needed"], 10000 / 9)

    def test_daily_pace_after_closing_or_without_goal(self) -> None:
        goal = Goal(month="2024-05", team_goal=TeamGoalSet(amount=310000))
        late = dashboard.daily_pace(goal, [], date(2024, 5, 10), current_hour=20)
        self.assertEqual(late["remaining_hours"], 0)
        self.assertEqual(late["hourly_rate_needed"], 0.0)
        self.assertEqual(dashboard.daily_pace(None, [], date(2024, 5, 10), 10)["daily_goal"], 0.0)

    def test_seller_ranking_top_five(self) -> None:
        sales = [_sale(f"s{i}", f"S{i}", 1000 * i) for i in range(1, 8)]
        sales.append(_sale("s1", "S1", 50000))
        sales.append(_sale("s2", "S2", 99999, day="2024-04-30"))
        ranking = dashboard.seller_sales_ranking(sales, "2024-05")
        self.assertEqual(len(ranking), 5)
        self.assertEqual(ranking[0]["seller_id"], "s1")
        self.assertEqual(ranking[0]["total"], 51000)
        self.assertEqual([row["seller_id"] for row in ranking[1:]], ["s7", "s6", "s5", "s4"])

    def test_ranked_unit_goals_weakest_first(self) -> None:
        goal_set = SellerGoalSet(footwear=10, apparel=4, shirts=0, accessories=5)
        sales = [
            _sale("a", "Ana", 1, units=8, category="Calzado"),
            _sale("a", "Ana", 1, units=1, category="Indumentaria"),
            _sale("a", "Ana", 1, units=3, category="Camisetas"),
            _sale("b", "Bea", 1, units=9, category="Accesorios"),
        ]
        sold = dashboard.units_by_category(sales, "2024-05", seller_id="a")
        ranked = dashboard.ranked_unit_goals(goal_set, sold, dashboard.SELLER_CATEGORY_METRICS)
        self.assertEqual([row["metric"] for row in ranked], ["accessories", "apparel", "footwear"])
        self.assertEqual(ranked[0]["progress"], 0)
        self.assertEqual(ranked[2]["name"], "Calzado")
        self.assertEqual(dashboard.ranked_unit_goals(None, sold, dashboard.SELLER_CATEGORY_METRICS), [])

    def test_personal_summary_and_seller_progress(self) -> None:
        sales = [_sale("a", "Ana", 3000, units=2), _sale("a", "Ana", 1000, units=2), _sale("b", "Bea", 500)]
        summary = dashboard.personal_sales_summary(sales, "a", "2024-05")
        self.assertEqual(summary["sales_count"], 2)
        self.assertEqual(summary["avg_ticket"], 2000)
        self.assertEqual(summary["units_per_ticket"], 2)

        users = [{"id": "a", "name": "Ana", "role": "seller"}, {"id": "m", "name": "Admin", "role": "manager"}]
        goal = Goal(month="2024-05", user_goals={"a": SellerGoalSet(amount=8000)})
        rows = dashboard.seller_progress(users, sales, goal, "2024-05")
        self.assertEqual(rows, [{"id": "a", "name": "Ana", "total": 4000.0, "goal": 8000}])


if __name__ == "__main__":
    unittest.main()

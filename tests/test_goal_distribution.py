import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from store_commissions.domain.goals import CashierGoalSet, Goal, SellerGoalSet, TeamGoalSet
from store_commissions.services.goal_distribution import (
    distribute_team_goal,
    participation_weights,
    round_half_up,
)

USERS = [
    {"id": "m", "name": "Admin", "role": "manager", "assigned_hours": 40},
    {"id": "ana", "name": "Ana", "role": "seller", "assigned_hours": 35},
    {"id": "juan", "name": "Juan", "role": "seller", "assigned_hours": 20},
    {"id": "luis", "name": "Luis", "role": "cashier", "assigned_hours": 30},
]


class GoalDistributionTests(unittest.TestCase):
    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(2.49), 2)

    def test_sellers_split_by_hours(self) -> None:
        team = TeamGoalSet(amount=150000, footwear=11, socks=40, credit_amount=30000, credit_units=6)
        goal = distribute_team_goal("2024-05", team, USERS)

        ana = goal.goal_set_for("ana")
        juan = goal.goal_set_for("juan")
        self.assertIsInstance(ana, SellerGoalSet)
        self.assertEqual(ana.amount, 95455)
        self.assertEqual(juan.amount, 54545)
        self.assertEqual(ana.footwear, 7)
        self.assertEqual(juan.footwear, 4)
        self.assertFalse(hasattr(ana, "socks"))
        self.assertLessEqual(abs(ana.amount + juan.amount - 150000), 2)
        self.assertLessEqual(abs(ana.footwear + juan.footwear - 11), 2)

    def test_cashier_gets_team_credit_and_socks(self) -> None:
        team = TeamGoalSet(amount=150000, socks=40, credit_amount=30000, credit_units=6)
        goal = distribute_team_goal("2024-05", team, USERS)
        self.assertEqual(goal.goal_set_for("luis"), CashierGoalSet(credit_amount=30000, credit_units=6, socks=40))
        self.assertIsNone(goal.goal_set_for("m"))

    def test_sellers_without_hours_get_zero_goals(self) -> None:
        sellers = [{"id": "a", "role": "seller", "assigned_hours": None}, {"id": "b", "role": "seller"}]
        self.assertEqual(participation_weights(sellers), {"a": 0.0, "b": 0.0})
        goal = distribute_team_goal("2024-05", TeamGoalSet(amount=1000), sellers)
        self.assertEqual(goal.goal_set_for("a").amount, 0)

    def test_goal_round_trips_through_dict(self) -> None:
        goal = distribute_team_goal("2024-05", TeamGoalSet(amount=1000, socks=5), USERS)
        restored = Goal.from_dict(goal.to_dict())
        self.assertEqual(restored, goal)
        self.assertEqual(goal.to_dict()["user_goals"]["luis"]["kind"], "cashier")

    def test_negative_goal_values_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            SellerGoalSet.from_dict({"amount": -5})
        with self.assertRaises(ValueError):
            TeamGoalSet.from_dict({"socks": "-1"})
        self.assertEqual(SellerGoalSet.from_dict({"amount": float("nan"), "footwear": ""}), SellerGoalSet())


if __name__ == "__main__":
    unittest.main()

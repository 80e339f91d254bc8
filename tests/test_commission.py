import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from store_commissions.domain.constants import COMMISSION_TIERS
from store_commissions.services.commission import (
    commission_for_score,
    get_tier,
    tier_name_for_user,
)


class CommissionTierTests(unittest.TestCase):
    def test_breakpoints_for_every_tier(self) -> None:
        for name, anchors in COMMISSION_TIERS.items():
            tier = get_tier(name)
            with self.subTest(tier=name):
                self.assertEqual(commission_for_score(0.0, tier), anchors["min"])
                self.assertEqual(commission_for_score(0.79, tier), anchors["min"])
                self.assertAlmostEqual(commission_for_score(0.8, tier), anchors["min"])
                self.assertAlmostEqual(commission_for_score(1.0, tier), anchors["theo"])
                self.assertEqual(commission_for_score(1.2, tier), anchors["max"])
                self.assertEqual(commission_for_score(5.0, tier), anchors["max"])

    def test_linear_between_floor_and_target(self) -> None:
        tier = get_tier("seller")
        self.assertAlmostEqual(commission_for_score(0.9, tier), 90000)

    def test_growth_above_target_uses_max_minus_min_span(self) -> None:
        tier = get_tier("seller")
        self.assertAlmostEqual(commission_for_score(1.1, tier), 140000 + 0.5 * (192000 - 40000))

    def test_non_decreasing_below_ceiling(self) -> None:
        for name in COMMISSION_TIERS:
            tier = get_tier(name)
            previous = None
            for step in range(0, 120):
                value = commission_for_score(step / 100, tier)
                if previous is not None:
                    self.assertGreaterEqual(value, previous - 1e-6, msg=f"{name} at {step / 100}")
                previous = value

    def test_unknown_tier(self) -> None:
        with self.assertRaises(ValueError):
            get_tier("intern")

    def test_tier_selection_by_role_and_hours(self) -> None:
        self.assertEqual(tier_name_for_user({"role": "manager"}), "manager")
        self.assertEqual(tier_name_for_user({"role": "cashier", "assigned_hours": 10}), "cashier")
        self.assertEqual(tier_name_for_user({"role": "seller", "assigned_hours": 20}), "seller_part_time")
        self.assertEqual(tier_name_for_user({"role": "seller", "assigned_hours": 21}), "seller")
        self.assertEqual(tier_name_for_user({"role": "seller", "assigned_hours": None}), "seller")
        self.assertEqual(tier_name_for_user({"role": "seller", "assigned_hours": 0}), "seller")
        with self.assertRaises(ValueError):
            tier_name_for_user({"role": "owner"})


if __name__ == "__main__":
    unittest.main()

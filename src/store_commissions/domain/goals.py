from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Union

from store_commissions.domain.constants import ROLE_CASHIER, ROLE_SELLER


def _to_goal_value(value: Any) -> float:
    if value in (None, ""):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    if number < 0:
        raise ValueError("Las metas no pueden ser negativas.")
    return int(number) if number.is_integer() else number


class _GoalSetMixin:
    kind: ClassVar[str]

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None):
        payload = payload or {}
        values = {f.name: _to_goal_value(payload.get(f.name)) for f in fields(cls)}
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind
        return data

    def get(self, metric: str) -> float:
        return getattr(self, metric, 0) or 0

    def as_goals(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TeamGoalSet(_GoalSetMixin):
    kind: ClassVar[str] = "team"

    amount: float = 0
    tickets: float = 0
    units: float = 0
    credit_amount: float = 0
    credit_units: float = 0
    footwear: float = 0
    apparel: float = 0
    accessories: float = 0
    shirts: float = 0
    socks: float = 0


@dataclass(frozen=True)
class SellerGoalSet(_GoalSetMixin):
    kind: ClassVar[str] = ROLE_SELLER

    amount: float = 0
    tickets: float = 0
    units: float = 0
    credit_amount: float = 0
    credit_units: float = 0
    footwear: float = 0
    apparel: float = 0
    shirts: float = 0
    accessories: float = 0


@dataclass(frozen=True)
class CashierGoalSet(_GoalSetMixin):
    kind: ClassVar[str] = ROLE_CASHIER

    credit_amount: float = 0
    credit_units: float = 0
    socks: float = 0


UserGoalSet = Union[SellerGoalSet, CashierGoalSet]

USER_GOAL_SET_TYPES: dict[str, type] = {
    ROLE_SELLER: SellerGoalSet,
    ROLE_CASHIER: CashierGoalSet,
}


def user_goal_set_from_dict(payload: dict[str, Any]) -> UserGoalSet:
    kind = (payload or {}).get("kind")
    goal_type = USER_GOAL_SET_TYPES.get(kind)
    if goal_type is None:
        raise ValueError(f"Tipo de meta desconocido: {kind!r}")
    return goal_type.from_dict(payload)


@dataclass(frozen=True)
class Goal:
    """Goals for one calendar month: the store-wide set plus one set per seller/cashier."""

    month: str
    team_goal: TeamGoalSet = field(default_factory=TeamGoalSet)
    user_goals: dict[str, UserGoalSet] = field(default_factory=dict)

    def goal_set_for(self, user_id: str) -> UserGoalSet | None:
        return self.user_goals.get(user_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "team_goal": self.team_goal.to_dict(),
            "user_goals": {user_id: goal.to_dict() for user_id, goal in self.user_goals.items()},
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Goal":
        user_goals = {
            str(user_id): user_goal_set_from_dict(goal)
            for user_id, goal in (payload.get("user_goals") or {}).items()
        }
        return cls(
            month=str(payload["month"]),
            team_goal=TeamGoalSet.from_dict(payload.get("team_goal")),
            user_goals=user_goals,
        )

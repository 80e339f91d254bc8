from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from store_commissions.domain.constants import (
    CASHIER_METRICS,
    ROLE_CASHIER,
    ROLE_MANAGER,
    ROLE_SELLER,
    SELLER_METRICS,
    STORE_METRICS,
)
from store_commissions.domain.goals import CashierGoalSet, Goal, SellerGoalSet
from store_commissions.services.aggregation import aggregate_progress, aggregate_user_progress
from store_commissions.services.commission import (
    CommissionTier,
    commission_for_score,
    tier_for_user,
)
from store_commissions.services.scoring import (
    RoleScore,
    cashier_score,
    manager_score,
    seller_score,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommissionResult:
    user_id: str
    user_name: str
    role: str
    month: str
    tier: CommissionTier
    score: RoleScore
    commission: float

    @property
    def final_score(self) -> float:
        return self.score.final_score


@dataclass
class TeamCommissions:
    month: str
    manager: CommissionResult | None = None
    sellers: list[CommissionResult] = field(default_factory=list)
    cashiers: list[CommissionResult] = field(default_factory=list)
    missing_goal_users: list[dict[str, Any]] = field(default_factory=list)

    @property
    def results(self) -> list[CommissionResult]:
        head = [self.manager] if self.manager else []
        return head + self.sellers + self.cashiers

    @property
    def total_commission(self) -> float:
        return sum(result.commission for result in self.results)


def _result(user: dict[str, Any], month: str, score: RoleScore) -> CommissionResult:
    tier = tier_for_user(user)
    return CommissionResult(
        user_id=str(user["id"]),
        user_name=user.get("name") or str(user["id"]),
        role=user["role"],
        month=month,
        tier=tier,
        score=score,
        commission=commission_for_score(score.final_score, tier),
    )


def manager_commission(
    manager: dict[str, Any],
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    month: str,
) -> CommissionResult | None:
    if goal is None:
        return None
    store_totals = aggregate_progress(store_records, month, STORE_METRICS)
    score = manager_score(store_totals, goal.team_goal.as_goals())
    return _result(manager, month, score)


def seller_commission(
    seller: dict[str, Any],
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    individual_records: Iterable[dict[str, Any]],
    month: str,
) -> CommissionResult | None:
    if goal is None:
        return None
    goal_set = goal.goal_set_for(str(seller["id"]))
    if not isinstance(goal_set, SellerGoalSet):
        return None
    own = aggregate_user_progress(individual_records, str(seller["id"]), month, SELLER_METRICS)
    store_totals = aggregate_progress(store_records, month, STORE_METRICS)
    score = seller_score(own, goal_set.as_goals(), store_totals, goal.team_goal.as_goals())
    return _result(seller, month, score)


def cashier_commission(
    cashier: dict[str, Any],
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    individual_records: Iterable[dict[str, Any]],
    month: str,
) -> CommissionResult | None:
    if goal is None:
        return None
    goal_set = goal.goal_set_for(str(cashier["id"]))
    if not isinstance(goal_set, CashierGoalSet):
        return None
    own = aggregate_user_progress(individual_records, str(cashier["id"]), month, CASHIER_METRICS)
    store_totals = aggregate_progress(store_records, month, STORE_METRICS)
    score = cashier_score(own, goal_set.as_goals(), store_totals, goal.team_goal.as_goals())
    return _result(cashier, month, score)


def user_commission(
    user: dict[str, Any],
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    individual_records: Iterable[dict[str, Any]],
    month: str,
) -> CommissionResult | None:
    role = user.get("role")
    if role == ROLE_MANAGER:
        return manager_commission(user, goal, store_records, month)
    if role == ROLE_SELLER:
        return seller_commission(user, goal, store_records, individual_records, month)
    if role == ROLE_CASHIER:
        return cashier_commission(user, goal, store_records, individual_records, month)
    raise ValueError(f"Rol desconocido: {role!r}")


def team_commissions(
    users: Iterable[dict[str, Any]],
    goal: Goal | None,
    store_records: Iterable[dict[str, Any]],
    individual_records: Iterable[dict[str, Any]],
    month: str,
) -> TeamCommissions | None:
    """Commissions for the whole roster, or ``None`` when the month has no Goal."""
    if goal is None:
        return None
    store_records = list(store_records)
    individual_records = list(individual_records)
    team = TeamCommissions(month=month)
    for user in users:
        result = user_commission(user, goal, store_records, individual_records, month)
        if result is None:
            team.missing_goal_users.append(user)
            continue
        if user["role"] == ROLE_MANAGER:
            if team.manager is None:
                team.manager = result
            else:
                LOGGER.warning("More than one manager on the roster, ignoring %s", user["id"])
        elif user["role"] == ROLE_SELLER:
            team.sellers.append(result)
        else:
            team.cashiers.append(result)
    return team

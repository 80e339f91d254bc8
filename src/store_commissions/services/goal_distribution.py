from __future__ import annotations

import math
from dataclasses import fields
from typing import Any, Iterable

from store_commissions.domain.constants import ROLE_CASHIER, ROLE_SELLER
from store_commissions.domain.goals import CashierGoalSet, Goal, SellerGoalSet, TeamGoalSet


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def participation_weights(sellers: Iterable[dict[str, Any]]) -> dict[str, float]:
    sellers = list(sellers)
    total_hours = sum(float(seller.get("assigned_hours") or 0) for seller in sellers)
    if total_hours <= 0:
        return {seller["id"]: 0.0 for seller in sellers}
    return {
        seller["id"]: float(seller.get("assigned_hours") or 0) / total_hours
        for seller in sellers
    }


def seller_goal_share(team_goal: TeamGoalSet, participation: float) -> SellerGoalSet:
    values = {
        f.name: round_half_up(team_goal.get(f.name) * participation)
        for f in fields(SellerGoalSet)
    }
    return SellerGoalSet(**values)


def cashier_goal_copy(team_goal: TeamGoalSet) -> CashierGoalSet:
    return CashierGoalSet(
        credit_amount=team_goal.credit_amount,
        credit_units=team_goal.credit_units,
        socks=team_goal.socks,
    )


def distribute_team_goal(
    month: str,
    team_goal: TeamGoalSet,
    users: Iterable[dict[str, Any]],
) -> Goal:
    """Build the month's Goal, splitting the team targets across the roster.

    Sellers share every seller metric in proportion to their assigned hours.
    Cashiers all receive the team credit and socks targets unchanged. The
    manager gets no per-user set.
    """
    users = list(users)
    sellers = [user for user in users if user.get("role") == ROLE_SELLER]
    cashiers = [user for user in users if user.get("role") == ROLE_CASHIER]

    user_goals: dict[str, SellerGoalSet | CashierGoalSet] = {}
    for seller_id, participation in participation_weights(sellers).items():
        user_goals[seller_id] = seller_goal_share(team_goal, participation)
    for cashier in cashiers:
        user_goals[cashier["id"]] = cashier_goal_copy(team_goal)

    return Goal(month=month, team_goal=team_goal, user_goals=user_goals)

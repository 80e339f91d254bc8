from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from store_commissions.domain.constants import (
    CASHIER_OWN_GROUPS,
    MANAGER_WEIGHTS,
    METRIC_AMOUNT,
    OWN_PERFORMANCE_WEIGHT,
    SELLER_OWN_GROUPS,
    STORE_PERFORMANCE_WEIGHT,
)
from store_commissions.services.achievement import achievement, capped_achievement


@dataclass(frozen=True)
class MetricTerm:
    metric: str
    actual: float
    goal: float
    achievement: float
    capped: float
    weight: float
    weighted: float


@dataclass(frozen=True)
class WeightedScore:
    terms: tuple[MetricTerm, ...]
    score: float

    @property
    def total_weight(self) -> float:
        return sum(term.weight for term in self.terms)

    @property
    def achievement(self) -> float:
        """Score normalised by the group's own weight."""
        total = self.total_weight
        return self.score / total if total > 0 else 0.0


@dataclass(frozen=True)
class GroupScore:
    key: str
    label: str
    result: WeightedScore

    @property
    def score(self) -> float:
        return self.result.score


@dataclass(frozen=True)
class RoleScore:
    """Composite for one person: own-performance groups, store term and final score."""

    groups: tuple[GroupScore, ...]
    own_score: float
    store_score: float | None
    final_score: float

    def group(self, key: str) -> GroupScore | None:
        for group in self.groups:
            if group.key == key:
                return group
        return None


def weighted_sum(
    actuals: Mapping[str, Any],
    goals: Mapping[str, Any],
    weights: Mapping[str, float],
) -> WeightedScore:
    terms: list[MetricTerm] = []
    for metric, weight in weights.items():
        actual = float(actuals.get(metric) or 0)
        goal = float(goals.get(metric) or 0)
        capped = capped_achievement(actual, goal)
        terms.append(
            MetricTerm(
                metric=metric,
                actual=actual,
                goal=goal,
                achievement=achievement(actual, goal),
                capped=capped,
                weight=weight,
                weighted=capped * weight,
            )
        )
    return WeightedScore(terms=tuple(terms), score=sum(term.weighted for term in terms))


def grouped_score(
    actuals: Mapping[str, Any],
    goals: Mapping[str, Any],
    groups: Sequence[tuple[str, str, Mapping[str, float]]],
) -> tuple[GroupScore, ...]:
    return tuple(
        GroupScore(key=key, label=label, result=weighted_sum(actuals, goals, weights))
        for key, label, weights in groups
    )


def store_performance(store_totals: Mapping[str, Any], team_goals: Mapping[str, Any]) -> float:
    return capped_achievement(store_totals.get(METRIC_AMOUNT), team_goals.get(METRIC_AMOUNT))


def manager_score(store_totals: Mapping[str, Any], team_goals: Mapping[str, Any]) -> RoleScore:
    store = GroupScore(
        key="store",
        label="Rendimiento del local",
        result=weighted_sum(store_totals, team_goals, MANAGER_WEIGHTS),
    )
    return RoleScore(
        groups=(store,),
        own_score=store.score,
        store_score=None,
        final_score=store.score,
    )


def _two_tier_score(
    own_actuals: Mapping[str, Any],
    own_goals: Mapping[str, Any],
    groups: Sequence[tuple[str, str, Mapping[str, float]]],
    store_totals: Mapping[str, Any],
    team_goals: Mapping[str, Any],
) -> RoleScore:
    own_groups = grouped_score(own_actuals, own_goals, groups)
    own = sum(group.score for group in own_groups)
    store = store_performance(store_totals, team_goals)
    return RoleScore(
        groups=own_groups,
        own_score=own,
        store_score=store,
        final_score=own * OWN_PERFORMANCE_WEIGHT + store * STORE_PERFORMANCE_WEIGHT,
    )


def seller_score(
    own_actuals: Mapping[str, Any],
    own_goals: Mapping[str, Any],
    store_totals: Mapping[str, Any],
    team_goals: Mapping[str, Any],
) -> RoleScore:
    return _two_tier_score(own_actuals, own_goals, SELLER_OWN_GROUPS, store_totals, team_goals)


def cashier_score(
    own_actuals: Mapping[str, Any],
    own_goals: Mapping[str, Any],
    store_totals: Mapping[str, Any],
    team_goals: Mapping[str, Any],
) -> RoleScore:
    return _two_tier_score(own_actuals, own_goals, CASHIER_OWN_GROUPS, store_totals, team_goals)

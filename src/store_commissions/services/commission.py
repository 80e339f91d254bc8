from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from store_commissions.domain.constants import (
    COMMISSION_TIERS,
    DEFAULT_ASSIGNED_HOURS,
    PART_TIME_MAX_HOURS,
    ROLE_CASHIER,
    ROLE_MANAGER,
    ROLE_SELLER,
    SCORE_CEILING,
    SCORE_FLOOR,
    SCORE_TARGET,
    TIER_CASHIER,
    TIER_MANAGER,
    TIER_SELLER,
    TIER_SELLER_PART_TIME,
)


@dataclass(frozen=True)
class CommissionTier:
    name: str
    minimum: float
    target: float
    maximum: float


def get_tier(name: str) -> CommissionTier:
    try:
        anchors = COMMISSION_TIERS[name]
    except KeyError as exc:
        raise ValueError(f"Escala de comisión desconocida: {name!r}") from exc
    return CommissionTier(
        name=name,
        minimum=anchors["min"],
        target=anchors["theo"],
        maximum=anchors["max"],
    )


def seller_hours(user: dict[str, Any]) -> float:
    # Unset or zero hours count as a full-time seller.
    return float(user.get("assigned_hours") or DEFAULT_ASSIGNED_HOURS)


def tier_name_for_user(user: dict[str, Any]) -> str:
    role = user.get("role")
    if role == ROLE_MANAGER:
        return TIER_MANAGER
    if role == ROLE_CASHIER:
        return TIER_CASHIER
    if role == ROLE_SELLER:
        if seller_hours(user) <= PART_TIME_MAX_HOURS:
            return TIER_SELLER_PART_TIME
        return TIER_SELLER
    raise ValueError(f"Rol desconocido: {role!r}")


def tier_for_user(user: dict[str, Any]) -> CommissionTier:
    return get_tier(tier_name_for_user(user))


def commission_for_score(score: float, tier: CommissionTier) -> float:
    """Map a composite score to a payout.

    Below 0.8 pays the minimum, from 1.2 up pays the maximum. Between 0.8
    and 1.0 the payout moves linearly from minimum to target. From 1.0 the
    payout grows from target over a span of ``maximum - minimum``.
    """
    if score < SCORE_FLOOR:
        return tier.minimum
    if score >= SCORE_CEILING:
        return tier.maximum
    if score < SCORE_TARGET:
        fraction = (score - SCORE_FLOOR) / (SCORE_TARGET - SCORE_FLOOR)
        return tier.minimum + fraction * (tier.target - tier.minimum)
    fraction = (score - SCORE_TARGET) / (SCORE_CEILING - SCORE_TARGET)
    return tier.target + fraction * (tier.maximum - tier.minimum)

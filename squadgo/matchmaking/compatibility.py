"""Pairing rules for matchmaking tickets.

Every function here is pure. ``compatible`` assumes both tickets already
share a group key; the callers partition or query by it first.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from squadgo.core.constants import ANY, MAX_SKILL_TIER_DISTANCE, SKILL_TIERS

GroupKey = tuple[str, str, str]


def skill_tier_ordinal(skill_tier: str | None) -> int:
    """Map a tier name to 1..8. Unknown tiers rank lowest."""
    if not skill_tier:
        return 1
    return SKILL_TIERS.get(skill_tier.lower(), 1)


def skill_compatible(tier_a: str | None, tier_b: str | None) -> bool:
    """Tiers may be at most one step apart."""
    distance = abs(skill_tier_ordinal(tier_a) - skill_tier_ordinal(tier_b))
    return distance <= MAX_SKILL_TIER_DISTANCE


def language_compatible(language_a: str | None, language_b: str | None) -> bool:
    """Same language, or either side accepts any."""
    return language_a == language_b or ANY in (language_a, language_b)


def mic_compatible(mic_a: bool, mic_b: bool) -> bool:
    """Either both players require a mic or neither does."""
    return bool(mic_a) == bool(mic_b)


def roles_compatible(roles_a: Iterable[str], roles_b: Iterable[str]) -> bool:
    """Players should not compete for the same role.

    No preference on either side always pairs. Otherwise the role sets must
    be disjoint, unless one side is open to "any" role.
    """
    set_a = set(roles_a or ())
    set_b = set(roles_b or ())
    if not set_a or not set_b:
        return True
    if ANY in set_a or ANY in set_b:
        return True
    return set_a.isdisjoint(set_b)


def compatible(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    """Decide whether two tickets in the same group can be paired."""
    return (
        skill_compatible(a.get("skillTier"), b.get("skillTier"))
        and language_compatible(a.get("language"), b.get("language"))
        and mic_compatible(a.get("micRequired", False), b.get("micRequired", False))
        and roles_compatible(a.get("preferredRoles", []), b.get("preferredRoles", []))
    )


def group_key(ticket: Mapping[str, Any]) -> GroupKey:
    """The (game, region, gameMode) tuple tickets are partitioned by."""
    return (ticket.get("game", ""), ticket.get("region", ""), ticket.get("gameMode", ""))


def group_tickets(tickets: Iterable[dict[str, Any]]) -> dict[GroupKey, list[dict[str, Any]]]:
    """Partition tickets by group key, keeping their order within each group."""
    groups: dict[GroupKey, list[dict[str, Any]]] = {}
    for ticket in tickets:
        groups.setdefault(group_key(ticket), []).append(ticket)
    return groups

"""Template selection — pick one template for a tag via relaxed matching tiers.

The tag narrows the pool first, but it is a preference rather than a filter:
a tag no template carries falls back to the whole pool. The tiers below are
then tried in order and the first one with any match wins:

1. goal + equipment + difficulty
2. goal + equipment
3. goal
4. equipment + difficulty
5. equipment
6. difficulty
7. anything in the (tag-narrowed) pool

Within the winning tier the slot index picks ``candidates[slot % n]``, so the
same slot always gets the same template while consecutive slots sharing a tag
rotate through the candidates. Selection never raises; an empty pool is the
only way to get None.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, TypeVar

from fitarc.services.keys import normalize_key

EQUIPMENT_RANK: dict[str, int] = {
    "bodyweight": 0,
    "dumbbells": 1,
    "full_gym": 2,
}

_EQUIPMENT_ALIASES: dict[str, str] = {
    "bodyweight": "bodyweight",
    "body_weight": "bodyweight",
    "dumbbells": "dumbbells",
    "dumbbell": "dumbbells",
    "full_gym": "full_gym",
    "gym": "full_gym",
}

EXPERIENCE_RANK: dict[str, int] = {
    "beginner": 0,
    "intermediate": 1,
    "advanced": 2,
}

GOAL_ALIASES: dict[str, tuple[str, ...]] = {
    "hypertrophy": ("hypertrophy", "build_muscle", "muscle", "general"),
    "strength": ("strength", "get_stronger", "power", "general"),
    "fat_loss": ("fat_loss", "lose_fat", "conditioning", "general_fitness", "general"),
    "endurance": ("endurance", "conditioning", "general_fitness"),
    "general": ("general", "general_fitness", "conditioning", "full_body"),
}


class Selectable(Protocol):
    id: str
    goal_tags: list[str]
    difficulty: Optional[str]
    equipment_level: Optional[str]


T = TypeVar("T", bound=Selectable)
Predicate = Callable[[Selectable], bool]


def normalize_equipment(value: Optional[str]) -> Optional[str]:
    return _EQUIPMENT_ALIASES.get(normalize_key(value))


def goal_aliases(goal: Optional[str]) -> tuple[str, ...]:
    return GOAL_ALIASES.get(normalize_key(goal), GOAL_ALIASES["general"])


def _matchers(
    goal: Optional[str],
    equipment_level: Optional[str],
    experience_level: Optional[str],
) -> tuple[Predicate, Predicate, Predicate]:
    aliases = set(goal_aliases(goal))
    user_equipment = normalize_equipment(equipment_level)
    user_experience = normalize_key(experience_level)

    def goal_ok(t: Selectable) -> bool:
        return not aliases or any(tag in aliases for tag in t.goal_tags or [])

    def equipment_ok(t: Selectable) -> bool:
        if user_equipment is None:
            return True
        required = normalize_equipment(t.equipment_level)
        if required is None:
            return True
        return EQUIPMENT_RANK[required] <= EQUIPMENT_RANK[user_equipment]

    def difficulty_ok(t: Selectable) -> bool:
        if user_experience not in EXPERIENCE_RANK:
            return True
        level = normalize_key(t.difficulty)
        if level not in EXPERIENCE_RANK:
            return True
        return abs(EXPERIENCE_RANK[level] - EXPERIENCE_RANK[user_experience]) <= 1

    return goal_ok, equipment_ok, difficulty_ok


def build_tiers(
    goal: Optional[str],
    equipment_level: Optional[str],
    experience_level: Optional[str],
) -> list[Predicate]:
    """Match predicates in strict priority order (the unrestricted tier is implicit)."""
    goal_ok, equipment_ok, difficulty_ok = _matchers(goal, equipment_level, experience_level)
    return [
        lambda t: goal_ok(t) and equipment_ok(t) and difficulty_ok(t),
        lambda t: goal_ok(t) and equipment_ok(t),
        goal_ok,
        lambda t: equipment_ok(t) and difficulty_ok(t),
        equipment_ok,
        difficulty_ok,
    ]


def candidates_for_tag(
    tag: Optional[str],
    pool: Sequence[T],
    goal: Optional[str] = None,
    equipment_level: Optional[str] = None,
    experience_level: Optional[str] = None,
) -> list[T]:
    """Templates of the first tier with at least one match, in pool order."""
    key = normalize_key(tag)
    tagged = [t for t in pool if key and key in (t.goal_tags or [])]
    base = tagged or list(pool)

    for tier in build_tiers(goal, equipment_level, experience_level):
        matched = [t for t in base if tier(t)]
        if matched:
            return matched
    return base


def select_template(
    tag: Optional[str],
    pool: Sequence[T],
    goal: Optional[str],
    equipment_level: Optional[str],
    experience_level: Optional[str],
    slot_index: int,
    pinned: Optional[dict[str, str]] = None,
) -> Optional[T]:
    """Pick the template for one slot.

    A template pinned for the tag wins as long as it is still in the pool;
    otherwise the live tiered selection runs.
    """
    if not pool:
        return None

    pinned_id = (pinned or {}).get(normalize_key(tag))
    if pinned_id:
        for template in pool:
            if template.id == pinned_id:
                return template

    candidates = candidates_for_tag(tag, pool, goal, equipment_level, experience_level)
    if not candidates:
        return None
    return candidates[slot_index % len(candidates)]


def build_template_map(
    tags: Sequence[str],
    pool: Sequence[T],
    goal: Optional[str],
    equipment_level: Optional[str],
    experience_level: Optional[str],
) -> Optional[dict[str, str]]:
    """Freeze the first candidate of every tag in the split's rotation."""
    mapping: dict[str, str] = {}
    for tag in tags:
        candidates = candidates_for_tag(tag, pool, goal, equipment_level, experience_level)
        if candidates:
            mapping[normalize_key(tag)] = candidates[0].id
    return mapping or None

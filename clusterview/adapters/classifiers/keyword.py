"""Classifier adapter: ordered keyword rules (regular expressions)."""

from __future__ import annotations

import re
from typing import Any

from clusterview.ports.classifier import GroupClassifierPort

# First matching rule wins; order matters.
DEFAULT_RULES: list[tuple[str, str]] = [
    ("Food", r"tummy|hunger|apple|soup|bread|thirst|water|milk|juice|snack|cake|candy|nut|egg"),
    ("Health", r"hurt|scrape|bleed|doctor|medicine|fever|therm|rash|allergy|epipen|sick|recover"),
    ("Emotion", r"scary|dream|hug|mom|dad|comfort|cry|happy|laugh|smile|lonely|shy"),
    ("Play", r"toy|ball|game|puzzle|block|lego|run|jump|slide|swing|splash|dance|music|prize|balloon"),
    ("Safety", r"hot|stove|fire|sharp|knife|traffic|helmet|seatbelt|stranger|safe|umbrella|coat|boot"),
    ("Learning", r"school|book|story|color|learn|question|why|homework|pencil|notebook|teacher|practice"),
    ("Body", r"potty|toilet|wash|soap|bath|shower|towel|brush|comb|shoes|laces|hair|dress"),
    ("Rest", r"nap|bed|sleep|rest|quiet|dark|lullaby|yawn|pillow|routine"),
    ("Social", r"birthday|party|friend|share|invite|brother|sister|playmate|grandma|grandpa|visit"),
]

DEFAULT_FALLBACK = "Routine"

DEFAULT_GROUP_ORDER = [
    "Food", "Health", "Emotion", "Play", "Safety",
    "Learning", "Body", "Routine", "Social", "Rest",
]


class KeywordClassifier(GroupClassifierPort):
    """Case-insensitive substring rules checked in order."""

    def __init__(
        self,
        rules: list[tuple[str, str]] | None = None,
        fallback: str = DEFAULT_FALLBACK,
        group_order: list[str] | None = None,
    ):
        raw = DEFAULT_RULES if rules is None else rules
        self._rules = [(group, re.compile(pattern, re.IGNORECASE)) for group, pattern in raw]
        self._fallback = fallback

        if group_order is None:
            group_order = DEFAULT_GROUP_ORDER if rules is None else [g for g, _ in raw]
        order = list(dict.fromkeys(group_order))
        for g in [g for g, _ in raw] + [fallback]:
            if g not in order:
                order.append(g)
        self._groups = order

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "KeywordClassifier":
        """Build from a config section with optional ``rules`` / ``fallback`` / ``order``.

        ``rules`` is a list of ``{group: ..., pattern: ...}`` mappings.
        """
        rules = cfg.get("rules")
        if rules is not None:
            rules = [(r["group"], r["pattern"]) for r in rules]
        return cls(
            rules=rules,
            fallback=cfg.get("fallback", DEFAULT_FALLBACK),
            group_order=cfg.get("order"),
        )

    @property
    def groups(self) -> list[str]:
        return list(self._groups)

    def classify(self, text: str) -> str:
        for group, pattern in self._rules:
            if pattern.search(text):
                return group
        return self._fallback

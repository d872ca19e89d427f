# validation.py
"""Field rules shared by command option models.

Each rule raises ``ValueError`` with the human-readable message that ends up
in the ``field: rule`` list of a ValidationError.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator

from Loreweaver.models import KINDS
from Loreweaver.search_index import PROJECTIONS

LOCATION_TYPES = (
    "world",
    "continent",
    "region",
    "territory",
    "settlement",
    "district",
    "building",
    "room",
    "landmark",
    "wilderness",
)

ORG_TYPES = (
    "government",
    "guild",
    "religion",
    "military",
    "criminal",
    "mercantile",
    "academic",
    "secret_society",
    "family",
    "other",
)

QUEST_STATUS = ("planned", "available", "active", "completed", "failed", "abandoned")

PLOT_TYPES = ("main", "secondary", "side", "background")

ENTITY_TYPES = tuple(KINDS)
SEARCHABLE_TYPES = tuple(PROJECTIONS)

NAME_MAX = 200
SHORT_TEXT_MAX = 200
LONG_TEXT_MAX = 50_000


def _length(min_len: int, max_len: int) -> AfterValidator:
    def check(value: str) -> str:
        if min_len and not (min_len <= len(value) <= max_len):
            raise ValueError(f"must be {min_len}-{max_len} characters")
        if len(value) > max_len:
            raise ValueError(f"too long (max {max_len} chars)")
        return value

    return AfterValidator(check)


def _one_of(allowed: tuple[str, ...]) -> AfterValidator:
    def check(value: str) -> str:
        if value not in allowed:
            raise ValueError(f"must be one of: {', '.join(allowed)}")
        return value

    return AfterValidator(check)


Name = Annotated[str, _length(1, NAME_MAX)]
ShortText = Annotated[str, _length(0, SHORT_TEXT_MAX)]
LongText = Annotated[str, _length(0, LONG_TEXT_MAX)]
ContextType = Annotated[str, _length(1, 32)]

LocationType = Annotated[str, _one_of(LOCATION_TYPES)]
OrgType = Annotated[str, _one_of(ORG_TYPES)]
QuestStatus = Annotated[str, _one_of(QUEST_STATUS)]
PlotType = Annotated[str, _one_of(PLOT_TYPES)]
EntityType = Annotated[str, _one_of(ENTITY_TYPES)]
SearchableType = Annotated[str, _one_of(SEARCHABLE_TYPES)]

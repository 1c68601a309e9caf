from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from stream_panel.errors import UnmappableColumnsError


@dataclass(frozen=True)
class CanonicalColumns:
    date: str = "date"
    category: str = "category"
    value: str = "value"
    other: str = "other"


REQUIRED_FIELDS = ["date", "category", "value"]

# Role order matters: a column claimed by an earlier role is not offered to later ones.
ROLE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "date": ("date", "time", "year", "month", "day"),
    "category": ("category", "group", "type", "class", "name"),
    "secondary": ("sex", "gender", "other", "secondary", "subgroup"),
    "value": ("value", "amount", "count", "number", "prop", "rate", "percent"),
}

# Host field names seen in published dashboards that the keyword lists miss.
HOST_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "category": ("industry",),
    "value": ("unemployed",),
}

ROLE_TO_CANONICAL = {
    "date": CanonicalColumns.date,
    "category": CanonicalColumns.category,
    "secondary": CanonicalColumns.other,
    "value": CanonicalColumns.value,
}


@dataclass(frozen=True)
class ColumnMapping:
    date: str
    category: str
    value: str
    secondary: str | None = None

    def as_rename_map(self) -> dict[str, str]:
        rename = {
            self.date: CanonicalColumns.date,
            self.category: CanonicalColumns.category,
            self.value: CanonicalColumns.value,
        }
        if self.secondary is not None:
            rename[self.secondary] = CanonicalColumns.other
        return rename


def _keyword_rank(column: str, keywords: Sequence[str]) -> int | None:
    lowered = column.lower()
    for rank, keyword in enumerate(keywords):
        if keyword in lowered:
            return rank
    return None


def match_role(
    column: str,
    *,
    include_aliases: bool = False,
) -> str | None:
    """Return the first role (in priority order) whose keywords appear in *column*."""
    for role, keywords in ROLE_KEYWORDS.items():
        candidates = keywords
        if include_aliases:
            candidates = keywords + HOST_FIELD_ALIASES.get(role, ())
        if _keyword_rank(column, candidates) is not None:
            return role
    return None


def infer_column_roles(columns: Iterable[str]) -> dict[str, str | None]:
    """Assign at most one column to each role.

    Within a role the column whose best keyword ranks earliest wins, with ties
    broken by column name, so the result does not depend on column order.
    """
    available = sorted(set(columns))
    claimed: set[str] = set()
    roles: dict[str, str | None] = {}
    for role, keywords in ROLE_KEYWORDS.items():
        ranked = []
        for column in available:
            if column in claimed:
                continue
            rank = _keyword_rank(column, keywords)
            if rank is not None:
                ranked.append((rank, column))
        if ranked:
            _, chosen = min(ranked)
            roles[role] = chosen
            claimed.add(chosen)
        else:
            roles[role] = None
    return roles


def resolve_column_mapping(columns: Sequence[str]) -> ColumnMapping:
    roles = infer_column_roles(columns)
    missing = [role for role in ("date", "category", "value") if roles.get(role) is None]
    if missing:
        raise UnmappableColumnsError(missing_roles=missing, columns=list(columns))
    return ColumnMapping(
        date=str(roles["date"]),
        category=str(roles["category"]),
        value=str(roles["value"]),
        secondary=roles.get("secondary"),
    )


def missing_required_fields(record: Mapping[str, object]) -> list[str]:
    return [field for field in REQUIRED_FIELDS if field not in record]

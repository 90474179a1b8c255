"""Query Parameter Parsing: pure translation of loosely-typed list parameters into a QuerySpec.

Invariants:
    - where/sort/select that are not JSON raise InvalidQueryJSONError (one fixed message)
    - Parsed-but-unusable values raise UnsupportedQueryError (a different message)
    - Non-numeric skip/limit are ignored; negative ones are rejected
    - count is only enabled by the literal string "true"
    - Projections are all-inclusion or all-exclusion; "_id" may be excluded from either

Design Decisions:
    - Parsing split from SQL compilation: this module knows nothing about columns,
      services/query_translator.py validates field names (ADR: functional core)
    - Leading-integer parsing mirrors what existing clients send ("10", "10abc")
"""

import json
import re
from dataclasses import dataclass, field

from tasklink.core.domain_types import SortDirection
from tasklink.core.errors import InvalidQueryJSONError, UnsupportedQueryError

ID_FIELD = "_id"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

_DIRECTIONS = {
    1: SortDirection.ASCENDING,
    -1: SortDirection.DESCENDING,
    "1": SortDirection.ASCENDING,
    "-1": SortDirection.DESCENDING,
    "asc": SortDirection.ASCENDING,
    "ascending": SortDirection.ASCENDING,
    "desc": SortDirection.DESCENDING,
    "descending": SortDirection.DESCENDING,
}


@dataclass(frozen=True)
class Projection:
    """Normalized select: which document keys survive."""
    include: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()
    include_id: bool = True

    @property
    def is_inclusion(self) -> bool:
        return bool(self.include)

    @property
    def is_empty(self) -> bool:
        return not self.include and not self.exclude and self.include_id


@dataclass
class QuerySpec:
    """Everything a list read needs, already validated."""
    where: dict = field(default_factory=dict)
    sort: list[tuple[str, SortDirection]] = field(default_factory=list)
    projection: Projection = field(default_factory=Projection)
    skip: int | None = None
    limit: int | None = None
    count: bool = False


# ─── Raw parameter parsing ───────────────────────────────────────

def parse_json_param(name: str, raw: str | None) -> dict:
    """Parse a JSON object parameter. Absent parameter -> {}."""
    if raw is None:
        return {}
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        raise InvalidQueryJSONError(name)
    if not isinstance(value, dict):
        raise UnsupportedQueryError(f"{name} must be a JSON object")
    return value


def parse_int_param(name: str, raw: str | None) -> int | None:
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    value = int(match.group(1))
    if value < 0:
        raise UnsupportedQueryError(f"{name} must be a non-negative integer")
    return value


def parse_count_flag(raw: str | None) -> bool:
    return raw == "true"


# ─── Normalization ───────────────────────────────────────────────

def normalize_sort(sort: dict) -> list[tuple[str, SortDirection]]:
    """Map {"field": 1 | -1 | "asc" | "desc"} to ordered (field, direction) pairs."""
    pairs = []
    for key, raw in sort.items():
        lookup = raw.lower() if isinstance(raw, str) else raw
        # bool is an int subclass; True would silently mean ascending
        if isinstance(lookup, bool) or lookup not in _DIRECTIONS:
            raise UnsupportedQueryError(f"invalid sort direction for '{key}'")
        pairs.append((key, _DIRECTIONS[lookup]))
    return pairs


def _projection_flag(key: str, raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    raise UnsupportedQueryError(f"invalid projection value for '{key}'")


def normalize_projection(select: dict) -> Projection:
    include, exclude = set(), set()
    include_id = True
    for key, raw in select.items():
        flag = _projection_flag(key, raw)
        if key == ID_FIELD:
            include_id = flag
        elif flag:
            include.add(key)
        else:
            exclude.add(key)
    if include and exclude:
        raise UnsupportedQueryError(
            "projection cannot mix inclusion and exclusion",
        )
    return Projection(frozenset(include), frozenset(exclude), include_id)


def apply_projection(document: dict, projection: Projection) -> dict:
    """Filter one rendered document. Pure: returns a new dict."""
    if projection.is_empty:
        return dict(document)
    if projection.is_inclusion:
        kept = {k: v for k, v in document.items() if k in projection.include}
    else:
        kept = {
            k: v for k, v in document.items()
            if k not in projection.exclude and k != ID_FIELD
        }
    if projection.include_id and ID_FIELD in document:
        kept = {ID_FIELD: document[ID_FIELD], **kept}
    return kept


def build_query_spec(
    where: str | None = None,
    sort: str | None = None,
    select: str | None = None,
    skip: str | None = None,
    limit: str | None = None,
    count: str | None = None,
) -> QuerySpec:
    """Parse the raw list query parameters into a QuerySpec."""
    return QuerySpec(
        where=parse_json_param("where", where),
        sort=normalize_sort(parse_json_param("sort", sort)),
        projection=normalize_projection(parse_json_param("select", select)),
        skip=parse_int_param("skip", skip),
        limit=parse_int_param("limit", limit),
        count=parse_count_flag(count),
    )

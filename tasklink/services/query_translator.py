"""Query Translator: compiles a QuerySpec (Mongo-style filter/sort) into SQLAlchemy statements.

Invariants:
    - Only fields listed in a CollectionSchema are queryable; anything else is UnsupportedQueryError
    - Array fields (pendingTasks) can be projected but never filtered or sorted on
    - Count statements apply the filter only (skip/limit/sort are ignored)
    - Values are coerced per field before binding (deadline strings -> UTC datetimes,
      "true" -> True, ids -> canonical form); values that cannot be coerced, including
      objects and arrays outside an operator, are UnsupportedQueryError

Design Decisions:
    - Explicit operator table over getattr on operator names (ADR: no convention-over-config)
    - Projection is applied to rendered documents (core/query_params.apply_projection),
      not in SQL: the row count is small and documents keep one rendering path
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy import Select, and_, false, func, not_, or_, select, true
from sqlalchemy.orm import InstrumentedAttribute

from tasklink.core.domain_types import NO_OWNER, SortDirection, canonical_id
from tasklink.core.errors import UnsupportedQueryError
from tasklink.core.query_params import QuerySpec
from tasklink.models.task import Task
from tasklink.models.user import User


# ─── Value coercion ──────────────────────────────────────────────
# Coercers raise ValueError; CollectionSchema.coerce turns it into a 400.
# None passes through: it compiles to IS NULL, which matches no row.

_BOOLEANS = {True: True, False: False, "true": True, "false": False,
             1: True, 0: False, "1": True, "0": False}


def _coerce_string(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError("expected a string")


def _coerce_bool(value: Any) -> Any:
    if value is None:
        return value
    key = value.lower() if isinstance(value, str) else value
    if isinstance(key, (dict, list)) or key not in _BOOLEANS:
        raise ValueError("expected true or false")
    return _BOOLEANS[key]


def _coerce_id(value: Any) -> Any:
    if value is None:
        return value
    canonical = canonical_id(value)
    if canonical is None:
        raise ValueError("expected an id")
    return canonical


def _coerce_owner(value: Any) -> Any:
    """Like _coerce_id, but "" (no owner) is a valid value."""
    if value == NO_OWNER:
        return value
    return _coerce_id(value)


def _coerce_datetime(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError("expected an ISO-8601 date")
    if parsed is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc) if parsed is not None else None


@dataclass(frozen=True)
class QueryField:
    column: InstrumentedAttribute
    coerce: Callable[[Any], Any]


@dataclass(frozen=True)
class CollectionSchema:
    """Wire field name -> column and value coercer, for one collection."""
    model: type
    fields: dict[str, QueryField]
    array_fields: frozenset[str] = frozenset()

    def _field(self, name: str) -> QueryField:
        if name in self.array_fields:
            raise UnsupportedQueryError(f"'{name}' is an array field")
        if name not in self.fields:
            raise UnsupportedQueryError(f"unknown field '{name}'")
        return self.fields[name]

    def column(self, name: str) -> InstrumentedAttribute:
        return self._field(name).column

    def coerce(self, name: str, value: Any) -> Any:
        try:
            return self._field(name).coerce(value)
        except ValueError as e:
            raise UnsupportedQueryError(f"invalid value for '{name}': {e}")


USERS = CollectionSchema(
    model=User,
    fields={
        "_id": QueryField(User.id, _coerce_id),
        "name": QueryField(User.name, _coerce_string),
        "email": QueryField(User.email, _coerce_string),
    },
    array_fields=frozenset({"pendingTasks"}),
)

TASKS = CollectionSchema(
    model=Task,
    fields={
        "_id": QueryField(Task.id, _coerce_id),
        "name": QueryField(Task.name, _coerce_string),
        "description": QueryField(Task.description, _coerce_string),
        "deadline": QueryField(Task.deadline, _coerce_datetime),
        "completed": QueryField(Task.completed, _coerce_bool),
        "assignedUser": QueryField(Task.assigned_user, _coerce_owner),
        "assignedUserName": QueryField(Task.assigned_user_name, _coerce_string),
    },
)


# ─── Filter compilation ──────────────────────────────────────────

def _as_list(op: str, value: Any) -> list:
    if not isinstance(value, list):
        raise UnsupportedQueryError(f"{op} requires an array")
    return value


_OPERATORS: dict[str, Callable[[InstrumentedAttribute, Any], Any]] = {
    "$eq": lambda col, v: col == v,
    "$ne": lambda col, v: col != v,
    "$gt": lambda col, v: col > v,
    "$gte": lambda col, v: col >= v,
    "$lt": lambda col, v: col < v,
    "$lte": lambda col, v: col <= v,
}


def _compile_operator(
    schema: CollectionSchema, name: str, op: str, arg: Any,
):
    col = schema.column(name)
    if op in _OPERATORS:
        return _OPERATORS[op](col, schema.coerce(name, arg))
    if op == "$in":
        return col.in_([schema.coerce(name, v) for v in _as_list(op, arg)])
    if op == "$nin":
        return col.not_in([schema.coerce(name, v) for v in _as_list(op, arg)])
    if op == "$exists":
        # every known column is non-nullable
        return true() if arg else false()
    raise UnsupportedQueryError(f"operator '{op}'")


def _is_operator_doc(value: Any) -> bool:
    return (
        isinstance(value, dict) and bool(value)
        and all(isinstance(k, str) and k.startswith("$") for k in value)
    )


def _compile_field(schema: CollectionSchema, name: str, value: Any):
    if _is_operator_doc(value):
        return and_(*(
            _compile_operator(schema, name, op, arg)
            for op, arg in value.items()
        ))
    return schema.column(name) == schema.coerce(name, value)


def _compile_branches(schema: CollectionSchema, op: str, value: Any) -> list:
    branches = _as_list(op, value)
    if not branches or not all(isinstance(b, dict) for b in branches):
        raise UnsupportedQueryError(f"{op} requires a non-empty array of objects")
    return [compile_filter(schema, b) for b in branches]


def compile_filter(schema: CollectionSchema, where: dict):
    """Compile a Mongo-style filter document into one SQL boolean expression."""
    clauses = []
    for key, value in where.items():
        if key == "$and":
            clauses.append(and_(*_compile_branches(schema, key, value)))
        elif key == "$or":
            clauses.append(or_(*_compile_branches(schema, key, value)))
        elif key == "$nor":
            clauses.append(not_(or_(*_compile_branches(schema, key, value))))
        elif key.startswith("$"):
            raise UnsupportedQueryError(f"operator '{key}'")
        else:
            clauses.append(_compile_field(schema, key, value))
    return and_(true(), *clauses)


# ─── Statement builders ──────────────────────────────────────────

def build_select(schema: CollectionSchema, spec: QuerySpec) -> Select:
    stmt = select(schema.model).where(compile_filter(schema, spec.where))
    for name, direction in spec.sort:
        col = schema.column(name)
        stmt = stmt.order_by(
            col.desc() if direction is SortDirection.DESCENDING else col.asc(),
        )
    if spec.skip:
        stmt = stmt.offset(spec.skip)
    # limit=0 means "no limit", as in the document store it replaces
    if spec.limit:
        stmt = stmt.limit(spec.limit)
    return stmt


def build_count(schema: CollectionSchema, spec: QuerySpec) -> Select:
    return (
        select(func.count())
        .select_from(schema.model)
        .where(compile_filter(schema, spec.where))
    )

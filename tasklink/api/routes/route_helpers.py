"""Route Helpers: list query dependency, projection rendering, and the server-error boundary.

Invariants:
    - List parameters are parsed once, by list_query_spec, before any store access
    - Unexpected failures inside a boundary surface as ServerError("Server Error while <action>")
    - TaskLinkError and SQLAlchemyError pass through a boundary unchanged; the
      session manager maps the latter to DatabaseError (503)

Design Decisions:
    - Query params read as raw strings: malformed skip/limit are ignored, not 422-rejected
      (ADR: lenient parsing matches existing clients)
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator

from fastapi import Query
from sqlalchemy.exc import SQLAlchemyError

from tasklink.core.errors import ServerError, TaskLinkError
from tasklink.core.query_params import (
    Projection, QuerySpec, apply_projection, build_query_spec,
    normalize_projection, parse_json_param,
)

logger = logging.getLogger(__name__)


def list_query_spec(
    where: str | None = Query(None),
    sort: str | None = Query(None),
    select: str | None = Query(None),
    skip: str | None = Query(None),
    limit: str | None = Query(None),
    count: str | None = Query(None),
) -> QuerySpec:
    """FastAPI dependency: parse where/sort/select/skip/limit/count."""
    return build_query_spec(where, sort, select, skip, limit, count)


def item_projection(select: str | None = Query(None)) -> Projection:
    """FastAPI dependency: parse select for single-document reads."""
    return normalize_projection(parse_json_param("select", select))


def render_many(
    items: Iterable, render: Callable[[object], dict], projection: Projection,
) -> list[dict]:
    return [apply_projection(render(item), projection) for item in items]


@contextmanager
def server_error_boundary(action: str) -> Iterator[None]:
    """Convert anything that is neither a TaskLinkError nor a database error into a ServerError."""
    try:
        yield
    except (TaskLinkError, SQLAlchemyError):
        # database failures are mapped by DatabaseSessionManager.session()
        raise
    except Exception as e:
        logger.error(
            f"Server Error while {action}: {e}",
            exc_info=True,
            extra={"operation": action, "error_code": "INTERNAL_ERROR"},
        )
        raise ServerError(f"Server Error while {action}") from e

"""Heuristic pagination detection for read operations.

Classifies an operation as cursor, offset/limit or page-number paginated
from its query parameter names and the shape of its response. Name tables
are ordered: when several names match, the first one listed wins.
"""

import logging

from api_ir.parser.base import ApiSpec, ApiType, Operation, PaginationInfo, is_read_operation

logger = logging.getLogger(__name__)

CURSOR_PARAM_NAMES = (
    "cursor",
    "after",
    "before",
    "page_token",
    "pageToken",
    "next_token",
    "nextToken",
    "starting_after",
    "startingAfter",
    "ending_before",
    "endingBefore",
)

OFFSET_PARAM_NAMES = ("offset", "skip")

LIMIT_PARAM_NAMES = ("limit", "count", "size", "per_page", "perPage", "page_size", "pageSize")

PAGE_NUMBER_PARAM_NAMES = ("page", "page_number", "pageNumber", "p")

CURSOR_RESPONSE_FIELDS = frozenset({
    "next_cursor", "nextCursor", "cursor",
    "next_page_token", "nextPageToken",
    "next_token", "nextToken",
    "endCursor", "end_cursor",
    "has_more", "hasMore",
})

PAGE_COUNT_FIELDS = frozenset({
    "total_pages", "totalPages",
    "total_count", "totalCount", "total",
    "page_count", "pageCount",
    "last_page", "lastPage",
})

ITEMS_FIELDS = frozenset({
    "items", "data", "results", "records", "edges", "nodes",
    "entries", "list", "rows", "content", "hits",
})

CURSOR_CONTAINERS = frozenset({"pagination", "meta", "page_info", "pageInfo"})
PAGE_COUNT_CONTAINERS = frozenset({"pagination", "meta"})


def find_items_path(response_type: ApiType) -> list[str] | None:
    """First top-level array property with a conventional items name."""
    if response_type.kind != "object":
        return None
    for prop in response_type.properties:
        if prop.name in ITEMS_FIELDS and prop.type.kind == "array":
            return [prop.name]
    return None


def _find_field_path(response_type: ApiType, fields: frozenset, containers: frozenset) -> list[str] | None:
    if response_type.kind != "object":
        return None
    for prop in response_type.properties:
        if prop.name in fields:
            return [prop.name]
        if prop.name in containers and prop.type.kind == "object":
            for nested in prop.type.properties:
                if nested.name in fields:
                    return [prop.name, nested.name]
    return None


def find_next_page_path(response_type: ApiType) -> list[str] | None:
    """Path to a next-cursor style field, one level into pagination/meta objects."""
    return _find_field_path(response_type, CURSOR_RESPONSE_FIELDS, CURSOR_CONTAINERS)


def find_page_count_path(response_type: ApiType) -> list[str] | None:
    """Path to a total-pages / total-count style field."""
    return _find_field_path(response_type, PAGE_COUNT_FIELDS, PAGE_COUNT_CONTAINERS)


def _first_present(names: tuple[str, ...], present: set[str]) -> str | None:
    return next((name for name in names if name in present), None)


def detect_pagination(op: Operation) -> PaginationInfo | None:
    """Infer the pagination strategy of a read operation, or None."""
    if not is_read_operation(op):
        return None

    param_names = {p.name for p in op.query_params}
    response_type = op.response.type
    items_path = find_items_path(response_type)

    cursor_param = _first_present(CURSOR_PARAM_NAMES, param_names)
    if cursor_param:
        return PaginationInfo(
            strategy="cursor",
            page_param=cursor_param,
            next_page_path=find_next_page_path(response_type) or [cursor_param],
            items_path=items_path or [],
        )

    offset_param = _first_present(OFFSET_PARAM_NAMES, param_names)
    if offset_param and _first_present(LIMIT_PARAM_NAMES, param_names):
        return PaginationInfo(
            strategy="offset-limit",
            page_param=offset_param,
            next_page_path=[offset_param],
            items_path=items_path or [],
        )

    page_param = _first_present(PAGE_NUMBER_PARAM_NAMES, param_names)
    if page_param:
        return PaginationInfo(
            strategy="page-number",
            page_param=page_param,
            next_page_path=find_page_count_path(response_type) or [page_param],
            items_path=items_path or [],
        )

    # Shape-only fallback: a cursor field and an items array in the response
    if response_type.kind == "object":
        cursor_path = find_next_page_path(response_type)
        if cursor_path and items_path:
            guessed = _first_present(CURSOR_PARAM_NAMES, param_names) or _first_present(
                PAGE_NUMBER_PARAM_NAMES, param_names
            )
            if guessed:
                return PaginationInfo(
                    strategy="cursor",
                    page_param=guessed,
                    next_page_path=cursor_path,
                    items_path=items_path,
                )

    return None


def apply_pagination_detection(spec: ApiSpec) -> ApiSpec:
    """Return a copy of ``spec`` with detected pagination attached.

    Operations that already carry pagination (for example from an
    ``x-pagination`` extension) are left untouched.
    """
    operations = []
    for op in spec.operations:
        if op.pagination is None and is_read_operation(op):
            pagination = detect_pagination(op)
            if pagination is not None:
                logger.debug("%s: %s pagination on %r", op.operation_id, pagination.strategy, pagination.page_param)
                op = op.model_copy(update={"pagination": pagination})
        operations.append(op)
    return spec.model_copy(update={"operations": operations})

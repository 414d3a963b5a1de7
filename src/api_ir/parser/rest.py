"""Conventions shared by the OpenAPI 3 and Swagger 2 normalizers."""

import logging

from pydantic import ValidationError

from .base import PaginationInfo

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options")

SUCCESS_CODES = ("200", "201")


SCALAR_TYPES = (str, int, float, bool)


def is_ref(node) -> bool:
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def text(value) -> str | None:
    """A documentation string (description, title, format, summary), or None."""
    return value if isinstance(value, str) else None


def scalar_values(values: list) -> list:
    """Enum values that the IR can carry; objects and lists are dropped."""
    return [v for v in values if v is None or isinstance(v, SCALAR_TYPES)]


def required_names(required) -> set[str]:
    if not isinstance(required, list):
        return set()
    return {name for name in required if isinstance(name, str)}


def usable_parameters(params) -> list[dict]:
    """Drop malformed entries and unresolved references from a parameter list."""
    if not isinstance(params, list):
        return []
    return [
        p for p in params
        if isinstance(p, dict) and not is_ref(p) and isinstance(p.get("name"), str) and isinstance(p.get("in"), str)
    ]


def merge_parameters(path_level: list[dict], op_level: list[dict]) -> list[dict]:
    """Operation-level parameters override path-level ones with the same (in, name)."""
    overridden = {(p["in"], p["name"]) for p in op_level}
    kept = [p for p in path_level if (p["in"], p["name"]) not in overridden]
    return kept + op_level


def select_success_response(responses) -> tuple[int | str, dict | None]:
    """Pick the success response: 200, then 201, then the first 2xx, then default."""
    if not isinstance(responses, dict):
        return 200, None
    responses = {str(code): value for code, value in responses.items()}

    for code in SUCCESS_CODES:
        candidate = responses.get(code)
        if isinstance(candidate, dict) and not is_ref(candidate):
            return int(code), candidate

    for code, candidate in responses.items():
        if code.startswith("2") and isinstance(candidate, dict) and not is_ref(candidate):
            return _status_code(code), candidate

    candidate = responses.get("default")
    if isinstance(candidate, dict) and not is_ref(candidate):
        return "default", candidate

    return 200, None


def _status_code(code: str) -> int | str:
    # "2XX" range keys are legal in OpenAPI 3
    return int(code) if code.isdigit() else code


def operation_tags(operation: dict) -> list[str]:
    tags = operation.get("tags")
    if not isinstance(tags, list):
        return ["default"]
    return [str(t) for t in tags if isinstance(t, SCALAR_TYPES)] or ["default"]


def _as_path(value) -> list[str]:
    if isinstance(value, str):
        return [part for part in value.split(".") if part]
    if isinstance(value, list):
        return [str(part) for part in value]
    return []


def parse_pagination_extension(operation: dict, operation_id: str) -> PaginationInfo | None:
    """Read caller-supplied pagination from the ``x-pagination`` vendor extension.

    Paths may be dot-separated strings (``meta.nextToken``) or lists.
    """
    raw = operation.get("x-pagination")
    if raw is None:
        return None
    if not isinstance(raw, dict):
        logger.warning("Ignoring non-object x-pagination on %s", operation_id)
        return None

    try:
        return PaginationInfo(
            strategy=raw.get("strategy"),
            page_param=raw.get("pageParam", raw.get("page_param")),
            next_page_path=_as_path(raw.get("nextPagePath", raw.get("next_page_path"))),
            items_path=_as_path(raw.get("itemsPath", raw.get("items_path"))),
        )
    except ValidationError as e:
        logger.warning("Ignoring invalid x-pagination on %s: %s", operation_id, e)
        return None

"""Group read operations by resource for query-cache key factories.

Each resource gets one factory descriptor recording whether list and/or
detail endpoints exist for it, e.g. ``/pets`` and ``/pets/{petId}``
yield a single ``pets`` factory with both shapes.
"""

from pydantic import BaseModel

from api_ir.naming import (
    extract_resource,
    is_detail_endpoint,
    pluralize,
    singularize,
    to_camel_case,
)
from api_ir.parser.base import Operation, is_read_operation


class CacheKeyFactory(BaseModel):
    """Key-namespace descriptor for one resource."""

    resource: str  # raw path segment, e.g. "pets"
    singular: str  # "pet"
    plural: str  # "pets"
    variable_name: str  # "petsKeys"
    root_key: list[str]  # ["pets"]
    has_list: bool = False
    has_detail: bool = False


def derive_cache_key_factories(operations: list[Operation]) -> list[CacheKeyFactory]:
    """One factory per resource of the read operations, in first-seen order."""
    shapes: dict[str, dict[str, bool]] = {}

    for op in operations:
        if not is_read_operation(op):
            continue
        entry = shapes.setdefault(extract_resource(op.path), {"has_list": False, "has_detail": False})
        if is_detail_endpoint(op.path):
            entry["has_detail"] = True
        else:
            entry["has_list"] = True

    factories = []
    for resource, entry in shapes.items():
        singular = singularize(resource)
        factories.append(
            CacheKeyFactory(
                resource=resource,
                singular=to_camel_case(singular),
                plural=to_camel_case(pluralize(singular)),
                variable_name=f"{to_camel_case(resource)}Keys",
                root_key=[resource],
                **entry,
            )
        )
    return factories


def query_key_parts(op: Operation) -> list[str]:
    """Structural cache key of an operation.

    ``GET /pets/{petId}`` -> ``["pets", "detail", "petId"]``;
    ``GET /pets?limit=`` -> ``["pets", "list", "params"]``.
    """
    parts = [extract_resource(op.path)]
    if is_detail_endpoint(op.path):
        parts.append("detail")
        parts.extend(p.name for p in op.path_params)
    else:
        parts.append("list")
        if op.query_params:
            parts.append("params")
    return parts

"""GraphQL schema normalizer.

Accepts SDL source text or an introspection result (``{"__schema": ...}``
or ``{"data": {"__schema": ...}}``), builds a schema with graphql-core and
maps Query / Mutation / Subscription fields to operations.
"""

import logging
import re

from graphql import (
    GraphQLError,
    GraphQLSchema,
    build_client_schema,
    build_schema,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
)

from api_ir.analysis.circular import collect_refs
from api_ir.errors import ErrorKind, ParseError
from .base import (
    ApiSpec,
    ApiType,
    ArrayType,
    EnumType,
    ObjectType,
    Operation,
    OperationMethod,
    Param,
    ParseOptions,
    PrimitiveType,
    Property,
    RefType,
    RequestBody,
    Response,
    UnionType,
    unknown_type,
)

logger = logging.getLogger(__name__)

# Leading "#" comment lines are skipped before the keyword
SDL_KEYWORDS = re.compile(
    r"^(?:\s*#[^\n]*\n)*\s*(type |schema |input |enum |union |interface |scalar |directive |extend )"
)

SCALAR_TYPES: dict[str, tuple[str, str | None]] = {
    "String": ("string", None),
    "Int": ("integer", "int32"),
    "Float": ("number", "float"),
    "Boolean": ("boolean", None),
    "ID": ("string", "id"),
    "DateTime": ("string", "date-time"),
    "Date": ("string", "date"),
    "JSON": ("unknown", None),
    "JSONObject": ("unknown", None),
}

ROOT_OPERATIONS: tuple[tuple[str, OperationMethod, str], ...] = (
    ("query_type", "QUERY", "queries"),
    ("mutation_type", "MUTATION", "mutations"),
    ("subscription_type", "SUBSCRIPTION", "subscriptions"),
)


def is_introspection(document) -> bool:
    if not isinstance(document, dict):
        return False
    if "__schema" in document:
        return True
    data = document.get("data")
    return isinstance(data, dict) and "__schema" in data


def is_sdl(document) -> bool:
    return isinstance(document, str) and bool(SDL_KEYWORDS.match(document))


def build_graphql_schema(document) -> GraphQLSchema:
    """Build a graphql-core schema from SDL text or an introspection result."""
    try:
        if isinstance(document, str):
            return build_schema(document)
        if "__schema" in document:
            return build_client_schema(document)
        return build_client_schema(document["data"])
    except (GraphQLError, TypeError, KeyError) as e:
        raise ParseError(ErrorKind.INVALID_DOCUMENT, f"Invalid GraphQL schema: {e}") from e


class GraphQLTypeConverter:
    """Converts graphql-core types to ``ApiType`` for one normalization call.

    ``in_progress`` holds the object types currently being expanded; a
    type met again while it is still expanding becomes a ``ref``.
    """

    def __init__(self):
        self.in_progress: set[str] = set()

    def convert_field_type(self, graphql_type) -> tuple[ApiType, bool]:
        """Unwrap an outer non-null into ``required`` and convert the rest."""
        if is_non_null_type(graphql_type):
            return self.convert(graphql_type.of_type), True
        return self.convert(graphql_type), False

    def convert(self, graphql_type) -> ApiType:
        if is_non_null_type(graphql_type):
            return self.convert(graphql_type.of_type)

        if is_list_type(graphql_type):
            return ArrayType(items=self.convert(graphql_type.of_type))

        if is_scalar_type(graphql_type):
            kind, fmt = SCALAR_TYPES.get(graphql_type.name, ("string", None))
            return PrimitiveType(type=kind, format=fmt, description=graphql_type.description)

        if is_enum_type(graphql_type):
            return EnumType(
                name=graphql_type.name,
                values=list(graphql_type.values),
                description=graphql_type.description,
            )

        if is_union_type(graphql_type):
            return UnionType(
                variants=[self.convert(member) for member in graphql_type.types],
                description=graphql_type.description,
            )

        if is_object_type(graphql_type) or is_interface_type(graphql_type) or is_input_object_type(graphql_type):
            return self.convert_object(graphql_type)

        return unknown_type()

    def convert_object(self, graphql_type) -> ApiType:
        name = graphql_type.name
        if name in self.in_progress:
            return RefType(name=name)

        self.in_progress.add(name)
        try:
            properties = []
            for field_name, field in graphql_type.fields.items():
                field_type, required = self.convert_field_type(field.type)
                properties.append(
                    Property(name=field_name, type=field_type, required=required, description=field.description)
                )
            return ObjectType(name=name, properties=properties, description=graphql_type.description)
        finally:
            self.in_progress.discard(name)


def _root_types(schema: GraphQLSchema) -> list:
    return [getattr(schema, attr) for attr, _, _ in ROOT_OPERATIONS if getattr(schema, attr) is not None]


def _build_operations(converter: GraphQLTypeConverter, root_type, method: OperationMethod, tag: str) -> list[Operation]:
    if root_type is None:
        return []

    operations = []
    for field_name, field in root_type.fields.items():
        query_params = []
        arg_properties = []
        for arg_name, arg in field.args.items():
            arg_type, required = converter.convert_field_type(arg.type)
            query_params.append(
                Param(name=arg_name, location="query", required=required, type=arg_type, description=arg.description)
            )
            arg_properties.append(
                Property(name=arg_name, type=arg_type, required=required, description=arg.description)
            )

        request_body = None
        if arg_properties:
            request_body = RequestBody(
                required=any(p.required for p in arg_properties),
                type=ObjectType(properties=arg_properties),
            )

        response_type, _ = converter.convert_field_type(field.type)
        operations.append(
            Operation(
                operation_id=field_name,
                summary=field.description,
                method=method,
                path=field_name,
                tags=[tag],
                query_params=query_params,
                request_body=request_body,
                response=Response(status_code=200, type=response_type, description=field.description),
                deprecated=field.deprecation_reason is not None,
            )
        )
    return operations


def _extract_named_types(converter: GraphQLTypeConverter, schema: GraphQLSchema) -> dict[str, ApiType]:
    roots = _root_types(schema)
    types: dict[str, ApiType] = {}

    for name, graphql_type in schema.type_map.items():
        if name.startswith("__"):
            continue
        if is_object_type(graphql_type) and any(graphql_type is root for root in roots):
            continue
        if (
            is_object_type(graphql_type)
            or is_interface_type(graphql_type)
            or is_input_object_type(graphql_type)
            or is_enum_type(graphql_type)
            or is_union_type(graphql_type)
        ):
            types[name] = converter.convert(graphql_type)

    return types


def _register_ref_targets(
    converter: GraphQLTypeConverter, schema: GraphQLSchema, types: dict[str, ApiType], roots: list[ApiType]
) -> None:
    """Register root types that were re-entered while expanding and became refs."""
    pending = [*roots, *types.values()]
    while pending:
        for ref in collect_refs(pending.pop()):
            if ref in types:
                continue
            graphql_type = schema.type_map.get(ref)
            types[ref] = converter.convert(graphql_type) if graphql_type is not None else unknown_type()
            pending.append(types[ref])


def normalize_graphql(document, options: ParseOptions | None = None) -> ApiSpec:
    """Normalize a GraphQL SDL string or introspection result into the IR."""
    options = options or ParseOptions()
    schema = build_graphql_schema(document)
    converter = GraphQLTypeConverter()

    operations = []
    for attr, method, tag in ROOT_OPERATIONS:
        operations.extend(_build_operations(converter, getattr(schema, attr), method, tag))

    types = _extract_named_types(converter, schema)
    _register_ref_targets(
        converter,
        schema,
        types,
        [op.response.type for op in operations] + [p.type for op in operations for p in op.query_params],
    )

    logger.debug("GraphQL schema: %d operations, %d named types", len(operations), len(types))
    return ApiSpec(
        title="GraphQL API",
        base_url=options.base_url if options.base_url is not None else "/graphql",
        version="0.0.0",
        operations=operations,
        types=types,
    )

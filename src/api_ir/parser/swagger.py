"""Swagger 2.0 document normalizer.

Schemas come from ``definitions``, ``in: body`` parameters become the
request body, other parameters carry ``type``/``format``/``items`` inline,
and ``scheme://host + basePath`` forms the base URL.
"""

import logging

from api_ir.naming import generate_operation_id
from .base import (
    ApiSpec,
    ApiType,
    ArrayType,
    EnumType,
    ObjectType,
    Operation,
    Param,
    ParseOptions,
    PrimitiveKind,
    PrimitiveType,
    Property,
    RefType,
    RequestBody,
    Response,
    UnionType,
    unknown_type,
)
from .deref import dereference, ref_name
from .rest import (
    HTTP_METHODS,
    is_ref,
    merge_parameters,
    operation_tags,
    parse_pagination_extension,
    required_names,
    scalar_values,
    select_success_response,
    text,
    usable_parameters,
)

logger = logging.getLogger(__name__)

DEFINITION_REF_PREFIX = "#/definitions/"

SWAGGER_TYPES: dict[str, PrimitiveKind] = {
    "string": "string",
    "number": "number",
    "float": "number",
    "double": "number",
    "integer": "integer",
    "long": "integer",
    "boolean": "boolean",
    "null": "null",
}


def map_swagger_type(name) -> PrimitiveKind:
    return SWAGGER_TYPES.get(name, "unknown") if isinstance(name, str) else "unknown"


class DefinitionConverter:
    """Converts Swagger 2.0 schema objects into ``ApiType`` for one document."""

    def __init__(self, definition_names: set[str]):
        self.definition_names = definition_names

    def convert(self, schema) -> ApiType:
        if not isinstance(schema, dict):
            return unknown_type()
        if is_ref(schema):
            name = ref_name(schema["$ref"])
            if schema["$ref"].startswith(DEFINITION_REF_PREFIX) and name in self.definition_names:
                return RefType(name=name)
            return unknown_type()

        description = text(schema.get("description"))

        for keyword in ("oneOf", "anyOf"):
            variants = schema.get(keyword)
            if isinstance(variants, list) and variants:
                return UnionType(
                    variants=[self.convert(v) for v in variants if isinstance(v, dict) and not is_ref(v)],
                    description=description,
                )

        all_of = schema.get("allOf")
        if isinstance(all_of, list) and all_of:
            parts = [s for s in all_of if isinstance(s, dict) and not is_ref(s)]
            result = self.convert(_merge_all_of(parts))
            if description and result.kind == "object":
                return result.model_copy(update={"description": description})
            return result

        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return EnumType(values=scalar_values(enum), name=text(schema.get("title")), description=description)

        schema_type = schema.get("type") if isinstance(schema.get("type"), str) else None

        if schema_type == "array":
            return ArrayType(items=self.convert(schema.get("items")), description=description)

        if schema_type == "object" or "properties" in schema or (
            schema_type is None and "additionalProperties" in schema
        ):
            return self._convert_object(schema)

        kind = map_swagger_type(schema_type)
        if kind != "unknown":
            return PrimitiveType(type=kind, format=text(schema.get("format")), description=description)

        return unknown_type(description)

    def _convert_object(self, schema: dict) -> ObjectType:
        required = required_names(schema.get("required"))
        properties = schema.get("properties") if isinstance(schema.get("properties"), dict) else {}

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            additional = self.convert(additional)
        elif not isinstance(additional, bool):
            additional = None

        return ObjectType(
            name=text(schema.get("title")),
            properties=[
                Property(
                    name=str(name),
                    type=self.convert(prop),
                    required=name in required,
                    description=text(prop.get("description")) if isinstance(prop, dict) else None,
                )
                for name, prop in properties.items()
            ],
            additional_properties=additional,
            description=text(schema.get("description")),
        )

    def convert_items(self, items) -> ApiType:
        """Convert the ``items`` object of a non-body parameter."""
        if not isinstance(items, dict) or is_ref(items):
            return unknown_type()
        if isinstance(items.get("enum"), list) and items["enum"]:
            return EnumType(values=scalar_values(items["enum"]))
        if items.get("type") == "array":
            return ArrayType(items=self.convert_items(items.get("items")))
        return PrimitiveType(type=map_swagger_type(items.get("type")), format=text(items.get("format")))


def _merge_all_of(schemas: list[dict]) -> dict:
    merged: dict = {"type": "object", "properties": {}, "required": []}
    for schema in schemas:
        if isinstance(schema.get("properties"), dict):
            merged["properties"].update(schema["properties"])
        if isinstance(schema.get("required"), list):
            merged["required"] += [r for r in schema["required"] if isinstance(r, str) and r not in merged["required"]]
        if text(schema.get("description")) and "description" not in merged:
            merged["description"] = schema["description"]
    return merged


def normalize_swagger(doc: dict, options: ParseOptions | None = None) -> ApiSpec:
    """Normalize a Swagger 2.0 document into the IR."""
    options = options or ParseOptions()
    doc = dereference(doc, options.file_path)

    definitions = doc.get("definitions") if isinstance(doc.get("definitions"), dict) else {}
    converter = DefinitionConverter(set(definitions))

    types: dict[str, ApiType] = {}
    for name, schema in definitions.items():
        converted = converter.convert(schema)
        if converted.kind in ("object", "enum") and not converted.name:
            converted = converted.model_copy(update={"name": name})
        types[name] = converted

    global_produces = doc.get("produces") if isinstance(doc.get("produces"), list) else ["application/json"]

    operations = []
    paths = doc.get("paths") if isinstance(doc.get("paths"), dict) else {}
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        path_level = usable_parameters(path_item.get("parameters"))

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            produces = operation.get("produces") if isinstance(operation.get("produces"), list) else global_produces
            operations.append(_parse_operation(converter, method, str(path), operation, path_level, produces))

    info = doc.get("info") if isinstance(doc.get("info"), dict) else {}
    logger.debug("Swagger document: %d operations, %d definitions", len(operations), len(types))
    return ApiSpec(
        title=str(info.get("title") or "Untitled API"),
        base_url=options.base_url if options.base_url is not None else _base_url(doc),
        version=str(info.get("version") or "0.0.0"),
        operations=operations,
        types=types,
    )


def _base_url(doc: dict) -> str:
    schemes = doc.get("schemes")
    scheme = schemes[0] if isinstance(schemes, list) and schemes else "https"
    host = doc.get("host") or ""
    base_path = doc.get("basePath") or ""
    if host:
        return f"{scheme}://{host}{base_path}"
    return base_path


def _content_type(produces: list) -> str:
    if "application/json" in produces:
        return "application/json"
    return str(produces[0]) if produces else "application/json"


def _parse_operation(
    converter: DefinitionConverter,
    method: str,
    path: str,
    operation: dict,
    path_level: list[dict],
    produces: list,
) -> Operation:
    params = merge_parameters(path_level, usable_parameters(operation.get("parameters")))

    grouped: dict[str, list[Param]] = {"path": [], "query": [], "header": []}
    request_body = None
    for p in params:
        if p["in"] == "body":
            request_body = RequestBody(
                required=bool(p.get("required", False)),
                content_type=_content_type(produces),
                type=converter.convert(p.get("schema")),
                description=text(p.get("description")),
            )
        elif p["in"] in grouped:
            # formData parameters have no IR location
            grouped[p["in"]].append(_parse_parameter(converter, p))

    operation_id = str(operation.get("operationId") or generate_operation_id(method, path))

    return Operation(
        operation_id=operation_id,
        summary=text(operation.get("summary")),
        method=method.upper(),
        path=path,
        tags=operation_tags(operation),
        path_params=grouped["path"],
        query_params=grouped["query"],
        header_params=grouped["header"],
        request_body=request_body,
        response=_parse_response(converter, operation.get("responses"), produces),
        pagination=parse_pagination_extension(operation, operation_id),
        deprecated=bool(operation.get("deprecated", False)),
    )


def _parse_parameter(converter: DefinitionConverter, p: dict) -> Param:
    if isinstance(p.get("enum"), list) and p["enum"]:
        param_type = EnumType(values=scalar_values(p["enum"]))
    elif p.get("type") == "array" and p.get("items") is not None:
        param_type = ArrayType(items=converter.convert_items(p["items"]))
    else:
        param_type = PrimitiveType(type=map_swagger_type(p.get("type")), format=text(p.get("format")))

    return Param(
        name=p["name"],
        location=p["in"],
        required=bool(p.get("required", p["in"] == "path")),
        type=param_type,
        description=text(p.get("description")),
    )


def _parse_response(converter: DefinitionConverter, responses, produces: list) -> Response:
    status_code, response = select_success_response(responses)
    if response is None or not isinstance(response.get("schema"), dict):
        return Response(
            status_code=status_code,
            content_type=str(produces[0]) if produces else "application/json",
            type=unknown_type(),
            description=text(response.get("description")) if response else None,
        )

    return Response(
        status_code=status_code,
        content_type=_content_type(produces),
        type=converter.convert(response["schema"]),
        description=text(response.get("description")),
    )

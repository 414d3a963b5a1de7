"""OpenAPI 3.x document normalizer.

Dereferences the document, converts ``components.schemas`` into named
types and every path operation into an ``Operation``.
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

SCHEMA_REF_PREFIX = "#/components/schemas/"
PRIMITIVE_TYPES = ("string", "number", "integer", "boolean", "null")
PREFERRED_CONTENT_TYPES = ("application/json", "*/*")


class SchemaConverter:
    """Converts JSON Schema nodes into ``ApiType`` for one document."""

    def __init__(self, type_names: set[str]):
        self.type_names = type_names

    def convert(self, schema) -> ApiType:
        if not isinstance(schema, dict):
            return unknown_type()
        description = text(schema.get("description"))

        if is_ref(schema):
            return self._convert_ref(schema["$ref"])

        for keyword in ("oneOf", "anyOf"):
            variants = schema.get(keyword)
            if isinstance(variants, list) and variants:
                return UnionType(
                    variants=[self.convert(v) for v in variants if isinstance(v, dict) and not is_ref(v)],
                    description=description,
                )

        all_of = schema.get("allOf")
        if isinstance(all_of, list) and all_of:
            result = self.convert(merge_all_of([s for s in all_of if isinstance(s, dict) and not is_ref(s)]))
            if description and result.kind == "object":
                return result.model_copy(update={"description": description})
            return result

        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return EnumType(values=scalar_values(enum), name=text(schema.get("title")), description=description)

        schema_type = schema.get("type")

        # OpenAPI 3.1: type: [string, "null"]
        if isinstance(schema_type, list):
            branches = [self.convert({**schema, "type": t}) for t in schema_type]
            if len(branches) == 1:
                return branches[0]
            return UnionType(variants=branches, description=description)

        if schema_type == "array":
            return ArrayType(items=self.convert(schema.get("items")), description=description)

        if schema_type == "object" or "properties" in schema or (
            schema_type is None and "additionalProperties" in schema
        ):
            return self._convert_object(schema)

        if schema_type in PRIMITIVE_TYPES:
            return PrimitiveType(type=schema_type, format=text(schema.get("format")), description=description)

        # OpenAPI 3.0 nullable shorthand on an otherwise unrecognized type
        if schema.get("nullable") and schema_type:
            inner = self.convert({k: v for k, v in schema.items() if k != "nullable"})
            return UnionType(variants=[inner, PrimitiveType(type="null")], description=description)

        return unknown_type(description)

    def _convert_ref(self, ref: str) -> ApiType:
        # Only cycles survive dereferencing
        name = ref_name(ref)
        if ref.startswith(SCHEMA_REF_PREFIX) and name in self.type_names:
            return RefType(name=name)
        logger.debug("Unresolved $ref %r degraded to unknown", ref)
        return unknown_type()

    def _convert_object(self, schema: dict) -> ObjectType:
        required = required_names(schema.get("required"))
        raw_properties = schema.get("properties")
        if not isinstance(raw_properties, dict):
            raw_properties = {}

        properties = []
        for name, prop_schema in raw_properties.items():
            properties.append(
                Property(
                    name=str(name),
                    type=self.convert(prop_schema),
                    required=name in required,
                    description=text(prop_schema.get("description")) if isinstance(prop_schema, dict) else None,
                )
            )

        additional = schema.get("additionalProperties")
        if isinstance(additional, bool):
            additional_properties = additional
        elif isinstance(additional, dict):
            additional_properties = self.convert(additional)
        else:
            additional_properties = None

        return ObjectType(
            name=text(schema.get("title")),
            properties=properties,
            additional_properties=additional_properties,
            description=text(schema.get("description")),
        )


def merge_all_of(schemas: list[dict]) -> dict:
    """Merge allOf components into one object schema.

    Required names are unioned, later properties win, the first description wins.
    """
    merged: dict = {"type": "object", "properties": {}, "required": []}
    for schema in schemas:
        properties = schema.get("properties")
        if isinstance(properties, dict):
            merged["properties"].update(properties)
        required = schema.get("required")
        if isinstance(required, list):
            merged["required"].extend(r for r in required if isinstance(r, str) and r not in merged["required"])
        if text(schema.get("description")) and "description" not in merged:
            merged["description"] = schema["description"]
    return merged


def _with_type_name(converted: ApiType, name: str) -> ApiType:
    if converted.kind in ("object", "enum") and not converted.name:
        return converted.model_copy(update={"name": name})
    return converted


def normalize_openapi(doc: dict, options: ParseOptions | None = None) -> ApiSpec:
    """Normalize an OpenAPI 3.x document into the IR."""
    options = options or ParseOptions()
    doc = dereference(doc, options.file_path)

    components = doc.get("components") if isinstance(doc.get("components"), dict) else {}
    schemas = components.get("schemas") if isinstance(components.get("schemas"), dict) else {}
    converter = SchemaConverter(set(schemas))

    types: dict[str, ApiType] = {}
    for name, schema in schemas.items():
        types[name] = _with_type_name(converter.convert(schema), name)

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
            operations.append(
                _parse_operation(converter, method, str(path), operation, path_level)
            )

    info = doc.get("info") if isinstance(doc.get("info"), dict) else {}
    logger.debug("OpenAPI document: %d operations, %d named types", len(operations), len(types))
    return ApiSpec(
        title=str(info.get("title") or "Untitled API"),
        base_url=options.base_url if options.base_url is not None else _server_url(doc),
        version=str(info.get("version") or "0.0.0"),
        operations=operations,
        types=types,
    )


def _server_url(doc: dict) -> str:
    servers = doc.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        return str(servers[0].get("url", ""))
    return ""


def _parse_operation(
    converter: SchemaConverter, method: str, path: str, operation: dict, path_level: list[dict]
) -> Operation:
    params = merge_parameters(path_level, usable_parameters(operation.get("parameters")))
    grouped: dict[str, list[Param]] = {"path": [], "query": [], "header": []}
    for p in params:
        if p["in"] in grouped:
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
        request_body=_parse_request_body(converter, operation.get("requestBody")),
        response=_parse_response(converter, operation.get("responses")),
        pagination=parse_pagination_extension(operation, operation_id),
        deprecated=bool(operation.get("deprecated", False)),
    )


def _parse_parameter(converter: SchemaConverter, p: dict) -> Param:
    schema = p.get("schema")
    if schema is None and isinstance(p.get("content"), dict):
        _, media = _pick_media(p["content"])
        schema = media.get("schema")
    return Param(
        name=p["name"],
        location=p["in"],
        required=bool(p.get("required", p["in"] == "path")),
        type=converter.convert(schema),
        description=text(p.get("description")),
    )


def _pick_media(content: dict) -> tuple[str, dict]:
    for content_type in PREFERRED_CONTENT_TYPES:
        if isinstance(content.get(content_type), dict):
            # */* bodies are reported as JSON
            return "application/json", content[content_type]
    for content_type, media in content.items():
        if isinstance(media, dict):
            return str(content_type), media
    return "application/json", {}


def _parse_request_body(converter: SchemaConverter, body) -> RequestBody | None:
    if not isinstance(body, dict) or is_ref(body):
        return None
    content = body.get("content")
    if not isinstance(content, dict) or not content:
        return None
    content_type, media = _pick_media(content)
    return RequestBody(
        required=bool(body.get("required", False)),
        content_type=content_type,
        type=converter.convert(media.get("schema")),
        description=text(body.get("description")),
    )


def _parse_response(converter: SchemaConverter, responses) -> Response:
    status_code, response = select_success_response(responses)
    if response is None:
        return Response(status_code=status_code, type=unknown_type())

    content = response.get("content")
    if not isinstance(content, dict) or not content:
        return Response(status_code=status_code, type=unknown_type(), description=text(response.get("description")))

    content_type, media = _pick_media(content)
    return Response(
        status_code=status_code,
        content_type=content_type,
        type=converter.convert(media.get("schema")),
        description=text(response.get("description")),
    )

"""Unified intermediate representation (IR) for parsed API documents.

All normalizers (OpenAPI 3, Swagger 2, GraphQL) convert their input
into these models; analysis passes and downstream emitters only read them.
Models are frozen: passes that annotate the IR produce copies.
"""

from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

_FROZEN = ConfigDict(frozen=True)

PrimitiveKind = Literal["string", "number", "integer", "boolean", "null", "unknown"]
OperationMethod = Literal[
    "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    "QUERY", "MUTATION", "SUBSCRIPTION",
]
ParamLocation = Literal["path", "query", "header"]
PaginationStrategy = Literal["cursor", "offset-limit", "page-number"]
EnumValue = Union[str, int, float, bool, None]

READ_METHODS = frozenset({"GET", "QUERY"})


# ---------------------------------------------------------------------------
# Type system: a closed set of variants discriminated on ``kind``
# ---------------------------------------------------------------------------


class PrimitiveType(BaseModel):
    model_config = _FROZEN

    kind: Literal["primitive"] = "primitive"
    type: PrimitiveKind = "unknown"
    format: str | None = None  # date-time / email / uuid / uri / int32 ...
    description: str | None = None


class Property(BaseModel):
    """An object property. List order is the declared field order."""

    model_config = _FROZEN

    name: str
    type: "ApiType"
    required: bool = False
    description: str | None = None


class ObjectType(BaseModel):
    model_config = _FROZEN

    kind: Literal["object"] = "object"
    name: str | None = None
    properties: list[Property] = []
    additional_properties: Union[bool, "ApiType", None] = None
    description: str | None = None


class ArrayType(BaseModel):
    model_config = _FROZEN

    kind: Literal["array"] = "array"
    items: "ApiType"
    description: str | None = None


class EnumType(BaseModel):
    model_config = _FROZEN

    kind: Literal["enum"] = "enum"
    name: str | None = None
    values: list[EnumValue] = []
    description: str | None = None


class UnionType(BaseModel):
    model_config = _FROZEN

    kind: Literal["union"] = "union"
    variants: list["ApiType"] = []
    description: str | None = None


class RefType(BaseModel):
    """Points at an entry of ``ApiSpec.types`` instead of embedding it."""

    model_config = _FROZEN

    kind: Literal["ref"] = "ref"
    name: str


ApiType = Annotated[
    Union[PrimitiveType, ObjectType, ArrayType, EnumType, UnionType, RefType],
    Field(discriminator="kind"),
]

for _model in (Property, ObjectType, ArrayType, UnionType):
    _model.model_rebuild()


def unknown_type(description: str | None = None) -> PrimitiveType:
    return PrimitiveType(type="unknown", description=description)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class Param(BaseModel):
    """A single path, query or header parameter."""

    model_config = _FROZEN

    name: str
    location: ParamLocation
    required: bool
    type: ApiType
    description: str | None = None


class RequestBody(BaseModel):
    model_config = _FROZEN

    required: bool = False
    content_type: str = "application/json"
    type: ApiType
    description: str | None = None


class Response(BaseModel):
    """The success response of an operation."""

    model_config = _FROZEN

    status_code: int | str = 200  # "default" or an OpenAPI range key such as "2XX"
    content_type: str = "application/json"
    type: ApiType
    description: str | None = None


class PaginationInfo(BaseModel):
    model_config = _FROZEN

    strategy: PaginationStrategy
    page_param: str  # query param carrying the cursor / offset / page
    next_page_path: list[str]  # path in the response to the next-page value
    items_path: list[str]  # path in the response to the items array


class Operation(BaseModel):
    """One callable unit: a REST endpoint or a GraphQL root field."""

    model_config = _FROZEN

    operation_id: str
    summary: str | None = None
    method: OperationMethod
    path: str  # /users/{id}, or the field name for GraphQL
    tags: list[str] = []
    path_params: list[Param] = []
    query_params: list[Param] = []
    header_params: list[Param] = []
    request_body: RequestBody | None = None
    response: Response
    pagination: PaginationInfo | None = None
    deprecated: bool = False


def is_read_operation(op: Operation) -> bool:
    """GET endpoints and GraphQL queries are the only read operations."""
    return op.method in READ_METHODS


class ApiSpec(BaseModel):
    """The complete normalized API document."""

    model_config = _FROZEN

    title: str
    base_url: str
    version: str
    operations: list[Operation] = []
    types: dict[str, ApiType] = {}


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class ParseOptions(BaseModel):
    model_config = _FROZEN

    base_url: str | None = None  # overrides the document's own base URL
    file_path: Path | None = None  # set by the loader to resolve relative $refs

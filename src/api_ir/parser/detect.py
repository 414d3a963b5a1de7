"""Auto-detect the format of an already-loaded API document."""

import logging
from typing import Callable

from api_ir.errors import ErrorKind, ParseError
from .base import ApiSpec, ParseOptions
from .graphql import is_introspection, is_sdl, normalize_graphql
from .openapi import normalize_openapi
from .swagger import normalize_swagger

logger = logging.getLogger(__name__)

Normalizer = Callable[..., ApiSpec]

NORMALIZERS: dict[str, Normalizer] = {
    "openapi": normalize_openapi,
    "swagger": normalize_swagger,
    "graphql": normalize_graphql,
}

PREVIEW_KEYS = 5
PREVIEW_CHARS = 80


def _is_openapi(document) -> bool:
    return isinstance(document, dict) and isinstance(document.get("openapi"), str) and document["openapi"].startswith("3")


def _is_swagger(document) -> bool:
    return isinstance(document, dict) and str(document.get("swagger")) == "2.0"


def detect_format(document) -> str:
    """Detect the format of a loaded document.

    Returns: 'openapi', 'swagger', or 'graphql'.
    Raises ParseError(FORMAT_UNRECOGNIZED) when nothing matches.
    """
    if _is_openapi(document):
        fmt = "openapi"
    elif _is_swagger(document):
        fmt = "swagger"
    elif is_introspection(document) or is_sdl(document):
        fmt = "graphql"
    else:
        raise ParseError(
            ErrorKind.FORMAT_UNRECOGNIZED,
            f"Unable to detect API specification format.{_preview(document)} "
            'Expected an OpenAPI 3.x document (with "openapi" field starting with "3"), '
            'a Swagger 2.0 document (with "swagger": "2.0"), '
            'or a GraphQL schema (introspection JSON with "__schema", or SDL string).',
        )
    logger.debug("Detected %s document", fmt)
    return fmt


def _preview(document) -> str:
    if isinstance(document, dict):
        keys = ", ".join(str(k) for k in list(document)[:PREVIEW_KEYS])
        return f" Object keys: [{keys}]."
    if isinstance(document, str):
        return f' String starts with: "{document[:PREVIEW_CHARS]}...".'
    return f" Got {type(document).__name__}."


def get_normalizer(document) -> Normalizer:
    """Normalizer for the detected format of ``document``."""
    return NORMALIZERS[detect_format(document)]


def normalize(document, options: ParseOptions | None = None, fmt: str = "auto") -> ApiSpec:
    """Run the normalizer for ``fmt``, detecting it first when ``fmt`` is 'auto'."""
    if fmt == "auto":
        fmt = detect_format(document)
    elif not _accepts(fmt, document):
        raise ParseError(ErrorKind.FORMAT_UNRECOGNIZED, f"Input is not a {fmt} document.{_preview(document)}")
    return NORMALIZERS[fmt](document, options)


def _accepts(fmt: str, document) -> bool:
    if fmt == "graphql":
        return isinstance(document, str) or is_introspection(document)
    return fmt in NORMALIZERS and isinstance(document, dict)

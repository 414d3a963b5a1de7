"""Load an API document from a path, a string or an object and normalize it."""

import json
import logging
import re
from pathlib import Path

import yaml

from api_ir.analysis.pagination import apply_pagination_detection
from api_ir.errors import ErrorKind, ParseError
from api_ir.parser.base import ApiSpec, ParseOptions
from api_ir.parser.detect import normalize
from api_ir.parser.graphql import is_sdl

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = (".yaml", ".yml")
JSON_EXTENSIONS = (".json",)
GRAPHQL_EXTENSIONS = (".graphql", ".gql")

_FILE_LIKE = re.compile(r"\.[a-z]{2,10}$", re.IGNORECASE)


def looks_like_file(source) -> bool:
    if isinstance(source, Path):
        return True
    return isinstance(source, str) and "\n" not in source and bool(_FILE_LIKE.search(source))


def load_file(file_path: Path):
    """Read a document file: YAML/JSON are decoded, GraphQL SDL is returned as text."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(ErrorKind.SOURCE_UNREADABLE, f'Failed to read API document "{file_path}": {e}') from e

    ext = file_path.suffix.lower()
    try:
        if ext in YAML_EXTENSIONS:
            return yaml.safe_load(text)
        if ext in JSON_EXTENSIONS:
            return json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ParseError(ErrorKind.SOURCE_UNREADABLE, f'Failed to decode API document "{file_path}": {e}') from e
    if ext in GRAPHQL_EXTENSIONS:
        return text
    return decode_text(text)


def decode_text(text: str):
    """Decode inline content: JSON, then GraphQL SDL, then YAML, else the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    if is_sdl(text):
        return text

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        return text
    # Plain scalars (e.g. SDL with a leading comment) stay raw text
    return data if isinstance(data, dict) else text


def load_input(source):
    """Turn a path, inline string or object into a loaded document."""
    if looks_like_file(source):
        return load_file(Path(source))
    if isinstance(source, str):
        return decode_text(source)
    return source


def parse_spec(source, options: ParseOptions | None = None, fmt: str = "auto") -> ApiSpec:
    """Parse an API document into the IR and attach detected pagination.

    ``source`` may be a file path (.yaml/.yml/.json/.graphql/.gql), an
    inline JSON/YAML/SDL string, or an already-loaded dict.
    """
    options = options or ParseOptions()
    document = load_input(source)
    if looks_like_file(source) and options.file_path is None:
        options = options.model_copy(update={"file_path": Path(source).resolve()})

    spec = normalize(document, options, fmt)
    logger.debug("Parsed %r: %d operations", spec.title, len(spec.operations))
    return apply_pagination_detection(spec)

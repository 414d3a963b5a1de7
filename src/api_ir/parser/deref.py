"""Inline ``$ref`` pointers of an OpenAPI / Swagger document.

Local (``#/components/schemas/Pet``) and relative-file
(``common.yaml#/definitions/Error``) references are replaced by the node
they point to. A reference whose target is already being expanded is left
in place as ``{"$ref": ...}`` so recursive schemas stay finite; the
normalizers turn those leftovers into ``ref`` types.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def split_ref(ref: str) -> tuple[str, str]:
    """``"common.yaml#/a/b"`` -> ``("common.yaml", "/a/b")``."""
    if "#" not in ref:
        return ref, ""
    path, fragment = ref.split("#", 1)
    return path, fragment


def ref_name(ref: str) -> str:
    """Last JSON-pointer token of a reference: the referenced type's name."""
    _, fragment = split_ref(ref)
    token = fragment.rstrip("/").rsplit("/", 1)[-1]
    return _decode_token(token)


def _decode_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _encode_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _pointer_get(document: Any, pointer: str) -> Any:
    if pointer in ("", "/"):
        return document
    current = document
    for raw in pointer.lstrip("/").split("/"):
        token = _decode_token(raw)
        if isinstance(current, list):
            current = current[int(token)]
        elif isinstance(current, dict):
            current = current[token]
        else:
            raise KeyError(token)
    return current


def _load_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


class _Resolver:
    """Per-call dereferencing state."""

    def __init__(self, root: Any, root_path: Path | None):
        self.root_key = str(root_path.resolve()) if root_path else ""
        self.documents: dict[str, Any] = {self.root_key: root}
        self.active: set[tuple[str, str]] = set()
        self.cache: dict[tuple[str, str], Any] = {}
        self.cycles = 0

    def resolve(self, node: Any, doc_key: str, pointer: str) -> Any:
        if isinstance(node, list):
            return [self.resolve(item, doc_key, f"{pointer}/{i}") for i, item in enumerate(node)]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str):
            return self._follow(ref, doc_key)

        location = (doc_key, pointer)
        self.active.add(location)
        try:
            return {
                key: self.resolve(value, doc_key, f"{pointer}/{_encode_token(str(key))}")
                for key, value in node.items()
            }
        finally:
            self.active.discard(location)

    def _follow(self, ref: str, doc_key: str) -> Any:
        path_part, fragment = split_ref(ref)
        target_key = self._document_key(path_part, doc_key)
        location = (target_key, fragment.rstrip("/") if fragment != "/" else "")

        if location in self.active:
            self.cycles += 1
            return {"$ref": ref}
        if location in self.cache:
            return self.cache[location]

        try:
            target = _pointer_get(self._document(target_key), location[1])
        except (KeyError, IndexError, ValueError, OSError, yaml.YAMLError) as e:
            logger.warning("Unresolvable $ref %r: %s", ref, e)
            return {}

        cycles_before = self.cycles
        result = self.resolve(target, target_key, location[1])
        if self.cycles == cycles_before:
            self.cache[location] = result
        return result

    def _document_key(self, path_part: str, doc_key: str) -> str:
        if not path_part:
            return doc_key
        base = Path(doc_key).parent if doc_key else Path.cwd()
        return str((base / path_part).resolve())

    def _document(self, key: str) -> Any:
        if key not in self.documents:
            self.documents[key] = _load_document(Path(key))
        return self.documents[key]


def dereference(document: Any, base_path: Path | None = None) -> Any:
    """Return a copy of ``document`` with ``$ref`` pointers inlined.

    ``base_path`` is the file the document was read from; relative file
    references resolve against its directory.
    """
    resolver = _Resolver(document, base_path)
    return resolver.resolve(document, resolver.root_key, "")

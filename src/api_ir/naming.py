"""Naming rules shared by normalizers and analysis passes.

Case conversion, singular/plural forms for resource names, and
resource extraction from URL paths. All functions are pure.
"""

import re

IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "analysis": "analyses",
    "status": "statuses",
}

IRREGULAR_SINGULARS = {plural: singular for singular, plural in IRREGULAR_PLURALS.items()}

_VERSION_SEGMENT = re.compile(r"^(api|v\d+)$", re.IGNORECASE)


def to_pascal_case(text: str) -> str:
    """Capitalize every word delimited by non-alphanumerics and drop the delimiters."""
    result = re.sub(r"[^a-zA-Z0-9]+(.)", lambda m: m.group(1).upper(), text)
    result = re.sub(r"^[a-z]", lambda m: m.group(0).upper(), result)
    return re.sub(r"[^a-zA-Z0-9]", "", result)


def to_camel_case(text: str) -> str:
    pascal = to_pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def to_kebab_case(text: str) -> str:
    """File-safe hyphenated lowercase: ``listPetTags`` -> ``list-pet-tags``."""
    result = re.sub(r"([a-z])([A-Z])", r"\1-\2", text)
    result = re.sub(r"[^a-zA-Z0-9]+", "-", result)
    return result.strip("-").lower()


def _preserve_case(original: str, replacement: str) -> str:
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def singularize(word: str) -> str:
    lower = word.lower()
    if lower in IRREGULAR_SINGULARS:
        return _preserve_case(word, IRREGULAR_SINGULARS[lower])
    if lower.endswith("ies") and len(lower) > 4:
        return word[:-3] + "y"
    if lower.endswith(("ses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith(("ss", "us")) and len(lower) > 2:
        return word[:-1]
    return word


def pluralize(word: str) -> str:
    lower = word.lower()
    if lower in IRREGULAR_PLURALS:
        return _preserve_case(word, IRREGULAR_PLURALS[lower])
    if lower in IRREGULAR_SINGULARS:
        return word
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def _is_placeholder(segment: str) -> bool:
    return segment.startswith("{")


def extract_resource(path: str) -> str:
    """Primary resource noun of a path.

    ``/api/v1/users/{id}/posts`` -> ``posts``; ``/users/{id}`` -> ``users``.
    """
    segments = [s for s in path.split("/") if s and not _is_placeholder(s)]
    meaningful = [s for s in segments if not _VERSION_SEGMENT.match(s)]
    if meaningful:
        return meaningful[-1]
    if segments:
        return segments[-1]
    return "unknown"


def is_detail_endpoint(path: str) -> bool:
    """True when the last path segment is a parameter placeholder."""
    segments = [s for s in path.split("/") if s]
    return bool(segments) and _is_placeholder(segments[-1])


def generate_operation_id(method: str, path: str) -> str:
    """``get`` + ``/users/{id}/posts`` -> ``getUsersIdPosts``."""
    parts = []
    for segment in path.split("/"):
        clean = segment.replace("{", "").replace("}", "")
        if clean:
            parts.append(clean[:1].upper() + clean[1:])
    return method.lower() + "".join(parts)

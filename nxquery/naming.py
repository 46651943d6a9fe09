"""Identifier and path helpers for generated TypeScript."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path

from .models import CANONICAL_FACTORIES, SOURCE_SUFFIX, OperationKind

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$", re.ASCII)
_SEGMENT_SPLIT_RE = re.compile(r"[^A-Za-z0-9]+")


def is_valid_identifier(value: str) -> bool:
    return bool(_IDENTIFIER_RE.match(value))


def to_pascal_case(value: str) -> str:
    """``user-profile`` -> ``UserProfile``; only the first letter of each segment changes."""
    segments = [segment for segment in _SEGMENT_SPLIT_RE.split(value) if segment]
    return "".join(segment[0].upper() + segment[1:] for segment in segments)


def to_camel_case(value: str) -> str:
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def safe_identifier(value: str) -> str:
    if value and value[0].isdigit():
        return f"_{value}"
    return value


def format_property_key(name: str) -> str:
    """Object literal key: bare when possible, computed ``["..."]`` otherwise."""
    return name if is_valid_identifier(name) else f"[{json.dumps(name)}]"


def property_accessor(object_name: str, key: str) -> str:
    if is_valid_identifier(key):
        return f"{object_name}.{key}"
    return f"{object_name}[{json.dumps(key)}]"


def quote(value: str) -> str:
    """Render a single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_alias(namespace: str, name: str, kind: OperationKind, factory_name: str) -> str:
    prefix = "create" if factory_name in CANONICAL_FACTORIES else ""
    alias = f"{prefix}{to_pascal_case(namespace)}{to_pascal_case(name)}{kind.alias_suffix}"
    return safe_identifier(alias)


def namespace_keys_alias(namespace: str) -> str:
    return safe_identifier(f"{to_camel_case(namespace)}QueryKeys")


def relative_import(from_file: Path, to_file: Path) -> str:
    """Module specifier for ``to_file`` as imported from ``from_file``."""
    relative = Path(os.path.relpath(to_file, from_file.parent)).as_posix()
    if not relative.startswith("."):
        relative = f"./{relative}"
    if relative.endswith(SOURCE_SUFFIX):
        relative = relative[: -len(SOURCE_SUFFIX)]
    return relative


__all__ = [
    "build_alias",
    "format_property_key",
    "is_valid_identifier",
    "namespace_keys_alias",
    "property_accessor",
    "quote",
    "relative_import",
    "safe_identifier",
    "to_camel_case",
    "to_pascal_case",
]

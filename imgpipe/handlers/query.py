"""Query-string parsing for the transform endpoint.

Two spellings are accepted and may be mixed in one request:

    nested   size[width]=100&watermarks[0][filename]=logo&watermarks[0][position][x]=10
    legacy   w=100&wm_file=logo&wm_px=10

Nested watermarks keep the order of their index; a legacy watermark is
appended after them. Unknown keys are ignored.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, Tuple

from pydantic import ValidationError

from imgpipe.config import Settings
from imgpipe.models import TransformParams

logger = logging.getLogger(__name__)

_SIZE_KEY = re.compile(r"^size\[(width|height)\]$")
_WATERMARK_KEY = re.compile(r"^watermarks\[(\d+)\]\[(\w+)\](?:\[(\w+)\])?$")

_LEGACY_SIZE = {"w": "width", "h": "height"}
_LEGACY_WATERMARK = {
    "wm_file": ("filename", None),
    "wm_alpha": ("alpha", None),
    "wm_position": ("origin", None),
    "wm_px": ("position", "x"),
    "wm_py": ("position", "y"),
    "wm_w": ("size", "width"),
    "wm_h": ("size", "height"),
}
_NESTED_FIELDS = {"size": {"width", "height"}, "position": {"x", "y"}}
_SCALAR_FIELDS = {"filename", "alpha", "origin"}


def _assign(target: Dict[str, Any], field: str, sub: str | None, value: str) -> None:
    if sub is None:
        target[field] = value
    else:
        target.setdefault(field, {})[sub] = value


def _is_watermark_field(field: str, sub: str | None) -> bool:
    if field in _NESTED_FIELDS:
        return sub in _NESTED_FIELDS[field]
    return field in _SCALAR_FIELDS and sub is None


def _with_defaults(watermark: Dict[str, Any], settings: Settings) -> Dict[str, Any]:
    watermark.setdefault("origin", settings.default_origin)
    watermark.setdefault("alpha", settings.default_watermark_alpha)
    return watermark


def parse_transform_query(
    filename: str,
    items: Iterable[Tuple[str, str]],
    settings: Settings,
) -> TransformParams:
    """Build ``TransformParams`` for ``filename`` from raw query items.

    Raises
    ------
    pydantic.ValidationError
        If a value cannot be converted (bad enum name, non-numeric size...).
    """

    root: Dict[str, Any] = {
        "filename": filename,
        "format": settings.default_format,
        "quality": settings.default_quality,
    }
    size: Dict[str, str] = {}
    nested: Dict[int, Dict[str, Any]] = {}
    legacy: Dict[str, Any] = {}

    for key, value in items:
        size_match = _SIZE_KEY.match(key)
        watermark_match = _WATERMARK_KEY.match(key)
        if key in ("format", "quality"):
            root[key] = value
        elif key in ("rotation", "r"):
            root["rotation"] = value
        elif key in _LEGACY_SIZE:
            size[_LEGACY_SIZE[key]] = value
        elif key in _LEGACY_WATERMARK:
            _assign(legacy, *_LEGACY_WATERMARK[key], value)
        elif size_match:
            size[size_match.group(1)] = value
        elif watermark_match and _is_watermark_field(watermark_match.group(2), watermark_match.group(3)):
            index = int(watermark_match.group(1))
            _assign(nested.setdefault(index, {}), watermark_match.group(2), watermark_match.group(3), value)
        else:
            logger.debug("Ignoring query key %s", key)

    watermarks = [_with_defaults(nested[index], settings) for index in sorted(nested)]
    if "filename" in legacy:
        watermarks.append(_with_defaults(legacy, settings))

    root["size"] = size
    root["watermarks"] = watermarks
    return TransformParams.model_validate(root)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into a single human readable line."""

    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)

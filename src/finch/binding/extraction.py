"""Typed extraction of structured body data into dataclasses.

Populates a dataclass instance from a decoded body mapping, converting
each present field to its annotated type with ``coerce``. Nested
dataclass fields are extracted recursively.

Missing keys use the dataclass field default; a missing key without a
default, or a value that cannot be converted, raises ``ValueError``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, get_type_hints

from finch.binding.convert import coerce


def is_extractable_dataclass(annotation: Any) -> bool:
    """Return True if *annotation* is a user-defined dataclass type.

    Excludes finch's own dataclass types (``Request``, ``Response``, etc.)
    which are never populated from request bodies.
    """
    if not isinstance(annotation, type) or not dataclasses.is_dataclass(annotation):
        return False

    module = getattr(annotation, "__module__", "") or ""
    return not module.startswith("finch.")


def extract_dataclass[T](cls: type[T], data: Mapping[str, Any]) -> T:
    """Create a dataclass instance from a decoded body mapping.

    Args:
        cls: A dataclass type to instantiate.
        data: Parsed JSON object or form fields.

    Raises:
        ValueError: A field failed to convert or a required field is absent.
        TypeError: An annotation names a type that cannot be resolved.
    """
    try:
        hints = get_type_hints(cls)
    except NameError as exc:
        msg = f"{cls.__name__} has an unresolvable annotation: {exc}"
        raise TypeError(msg) from exc

    kwargs: dict[str, Any] = {}
    missing: list[str] = []

    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if not f.init:
            continue
        if f.name not in data:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                missing.append(f.name)
            continue
        try:
            kwargs[f.name] = coerce(data[f.name], hints.get(f.name, f.type))
        except (ValueError, TypeError) as exc:
            msg = f"field {f.name!r}: {exc}"
            raise ValueError(msg) from exc

    if missing:
        msg = f"missing field(s): {', '.join(missing)}"
        raise ValueError(msg)
    return cls(**kwargs)

"""Type hints and value coercion for bound parameters.

Declarations may name types as Python types (``int``) or as the names a
metadata extractor emits (``"integer"``, ``"boolean"``). Both normalize
to the same small set: ``str``, ``int``, ``float``, ``bool``, ``dict``,
``list``, a dataclass, or ``None`` (pass the value through untouched).
"""

import types
from collections.abc import Mapping
from typing import Any, Union, get_args, get_origin

_NAMED_TYPES: dict[str, type | None] = {
    "str": str,
    "string": str,
    "int": int,
    "integer": int,
    "long": int,
    "float": float,
    "double": float,
    "number": float,
    "bool": bool,
    "boolean": bool,
    "dict": dict,
    "object": dict,
    "map": dict,
    "list": list,
    "array": list,
    "any": None,
}

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def normalize_hint(hint: Any) -> Any:
    """Reduce *hint* to one of the supported targets.

    ``Optional[X]`` and ``X | None`` become ``X``; ``list[str]`` becomes
    ``list``; unknown names and ``Any`` become ``None``.
    """
    if hint is None or hint is Any or hint is object:
        return None
    if isinstance(hint, str):
        return _NAMED_TYPES.get(hint.strip().lower())
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(hint) if a is not type(None)]
        return normalize_hint(members[0]) if len(members) == 1 else None
    if origin is not None:
        return normalize_hint(origin)
    if hint in (str, int, float, bool):
        return hint
    if isinstance(hint, type) and issubclass(hint, Mapping):
        return dict
    if isinstance(hint, type) and issubclass(hint, (list, tuple, set, frozenset)):
        return list
    return hint


def type_name(hint: Any) -> str:
    """Name of *hint* as shown in binding failure messages."""
    target = normalize_hint(hint)
    if target is None:
        return "any"
    return getattr(target, "__name__", str(target))


def coerce(value: Any, hint: Any) -> Any:
    """Convert *value* to *hint*.

    Raises:
        ValueError: If the value cannot be represented as the target type.
    """
    target = normalize_hint(hint)
    if target is None:
        return value

    if target is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
        elif isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise ValueError(f"{value!r} is not a boolean")

    if target is int:
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            return int(value.strip())
        raise ValueError(f"{value!r} is not an integer")

    if target is float:
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not a number")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            return float(value.strip())
        raise ValueError(f"{value!r} is not a number")

    if target is str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ValueError(f"{value!r} is not a string")

    if target is dict:
        if isinstance(value, Mapping):
            return dict(value)
        raise ValueError(f"{type(value).__name__} is not an object")

    if target is list:
        if isinstance(value, (list, tuple)):
            return list(value)
        raise ValueError(f"{type(value).__name__} is not a list")

    from finch.binding.extraction import extract_dataclass, is_extractable_dataclass

    if is_extractable_dataclass(target):
        if isinstance(value, target):
            return value
        if isinstance(value, Mapping):
            return extract_dataclass(target, value)
        raise ValueError(f"{type(value).__name__} is not an object")

    if isinstance(target, type) and isinstance(value, target):
        return value
    raise ValueError(f"{value!r} is not a {type_name(target)}")


def empty_value(hint: Any) -> Any:
    """The value an absent optional parameter gets when no default is declared."""
    target = normalize_hint(hint)
    if target is bool:
        return False
    if target is int:
        return 0
    if target is float:
        return 0.0
    if target is str:
        return ""
    if target is dict:
        return {}
    if target is list:
        return []
    return None

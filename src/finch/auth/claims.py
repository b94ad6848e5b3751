"""Claims — the decoded payload of a caller's credential.

``Claims`` is an immutable mapping with typed accessors so validators
never have to guess at the shape of a free-form dict. ``NO_CLAIMS`` is
the sentinel for requests without a credential: it is an empty, falsy
``Claims`` whose ``is_present`` is False, so no code path needs a
``None`` check.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

_TRUE = frozenset({"true", "1", "yes", "on"})


class Claims(Mapping[str, Any]):
    """An immutable, string-keyed claim bag.

    Usage::

        claims = Claims({"sub": "u1", "role": "admin", "permissions": ["read"]})
        claims.role                   # "admin"
        claims.get_int("clearance")   # None
        "read" in claims.permissions  # True
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_data", dict(data or {}))

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "Claims are immutable"
        raise AttributeError(msg)

    @property
    def is_present(self) -> bool:
        """True when a credential was presented and decoded."""
        return True

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return self.is_present

    def __repr__(self) -> str:
        return f"Claims({self._data!r})"

    # -- Typed accessors --

    def get_str(self, key: str, default: str | None = None) -> str | None:
        """Return the claim as a string, or *default* if missing or not a string."""
        value = self._data.get(key)
        return value if isinstance(value, str) else default

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return the claim as an int.

        Numeric strings are accepted; booleans and floats with a fractional
        part are not.
        """
        value = self._data.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return default
        return default

    def get_float(self, key: str, default: float | None = None) -> float | None:
        """Return the claim as a float (ints and numeric strings accepted)."""
        value = self._data.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return default
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Return the claim as a bool (``true``/``1``/``yes``/``on`` strings → True)."""
        value = self._data.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in _TRUE
        return default

    def get_list(self, key: str) -> list[Any]:
        """Return the claim as a list.

        A scalar string is treated as a single-element list; a
        space-separated ``scope`` style string is split.
        """
        value = self._data.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        return [value]

    # -- Conventional claims --

    @property
    def subject(self) -> str | None:
        """The ``sub`` claim, falling back to ``user_id``."""
        return self.get_str("sub") or self.get_str("user_id")

    @property
    def role(self) -> str | None:
        """The ``role`` claim."""
        return self.get_str("role")

    @property
    def permissions(self) -> frozenset[str]:
        """The ``permissions`` claim as a set of strings."""
        return frozenset(str(p) for p in self.get_list("permissions"))

    def to_dict(self) -> dict[str, Any]:
        """A shallow copy of the underlying claims."""
        return dict(self._data)


class _NoClaims(Claims):
    """Sentinel claim bag for requests without a credential."""

    __slots__ = ()

    @property
    def is_present(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CLAIMS"


NO_CLAIMS: Claims = _NoClaims()
"""The "no credential" sentinel. Falsy, empty, ``is_present`` is False."""


def as_claims(value: Mapping[str, Any] | None) -> Claims:
    """Normalize a decoded payload (or its absence) into a ``Claims`` bag.

    ``None`` becomes ``NO_CLAIMS``. An existing ``Claims`` is returned as is.
    """
    if value is None:
        return NO_CLAIMS
    if isinstance(value, Claims):
        return value
    return Claims(value)

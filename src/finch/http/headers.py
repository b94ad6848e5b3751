"""Case-insensitive HTTP headers.

Decoded once from the ASGI byte pairs. Names are stored lower-cased, so
``X-Request-ID`` and ``x-request-id`` are the same key.
"""

from __future__ import annotations

from collections.abc import Mapping

from finch._internal.multimap import MultiValueMapping


class Headers(MultiValueMapping):
    """Request headers. Iteration yields lower-cased names, once each."""

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        decoded: dict[str, list[str]] = {}
        for name, value in raw:
            decoded.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        super().__init__(decoded)
        self._raw = tuple(raw)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> Headers:
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def _key(self, key: str) -> str:
        return key.lower()

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The undecoded header pairs as received."""
        return self._raw

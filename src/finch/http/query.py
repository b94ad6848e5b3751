"""Query string parameters.

Blank values are kept (``?page=`` is present with value ``""``), so the
binder can tell "sent empty" from "not sent" and report the former as a
type error rather than a missing parameter.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import parse_qs, urlencode

from finch._internal.multimap import MultiValueMapping


class QueryParams(MultiValueMapping):
    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        super().__init__(parse_qs(query_string.decode("latin-1"), keep_blank_values=True))
        self._raw = query_string

    @classmethod
    def from_mapping(cls, params: Mapping[str, str]) -> QueryParams:
        return cls(urlencode(dict(params)).encode("latin-1"))

    @property
    def raw(self) -> bytes:
        return self._raw

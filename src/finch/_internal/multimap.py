"""Shared base for Headers, QueryParams, and FormData.

Each source decodes its input once into ``{key: [values...]}``; lookups
return the first value, ``get_list`` returns all of them. Subclasses that
compare keys case-insensitively override ``_key``.
"""

from collections.abc import Iterator, Mapping


class MultiValueMapping(Mapping[str, str]):
    """A read-only string mapping where keys can have multiple values."""

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = data or {}

    def _key(self, key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        values = self._data.get(self._key(key))
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.to_dict().items())
        return f"{type(self).__name__}({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(self._key(key))
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order."""
        return list(self._data.get(self._key(key), ()))

    def to_dict(self) -> dict[str, str]:
        """First value per key; the shape handed to handlers binding a whole source."""
        return {key: values[0] for key, values in self._data.items() if values}

"""Form bodies: URL-encoded and multipart.

URL-encoded forms use stdlib ``urllib.parse``; multipart bodies are
parsed with ``python-multipart``. Either way the binder receives a
``FormData`` and flattens it with ``to_dict()``, uploads included.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header

from finch._internal.multimap import MultiValueMapping

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file, held in memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(MultiValueMapping):
    """Parsed form fields plus uploaded files by field name."""

    __slots__ = ("_files",)

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        super().__init__(data)
        self._files = files or {}

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def to_dict(self) -> dict[str, Any]:  # type: ignore[override]
        """First value per field, with uploads under their field names."""
        result: dict[str, Any] = dict(super().to_dict())
        result.update(self._files)
        return result


def media_type(content_type: str) -> str:
    """The bare media type of a Content-Type value, lower-cased."""
    return content_type.lower().split(";")[0].strip()


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body.

    Raises:
        ValueError: The content type is not a form encoding, or the
            multipart payload is malformed.
    """
    kind = media_type(content_type)
    if kind == "application/x-www-form-urlencoded":
        return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))
    if kind == "multipart/form-data":
        return _MultipartCollector(content_type).parse(body)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


class _MultipartCollector:
    """Accumulates ``MultipartParser`` callbacks into a ``FormData``."""

    def __init__(self, content_type: str) -> None:
        _, options = parse_options_header(content_type.encode("latin-1"))
        boundary = options.get(b"boundary")
        if boundary is None:
            msg = "Multipart form data missing boundary parameter"
            raise ValueError(msg)
        self.boundary = boundary
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self._reset()

    def _reset(self) -> None:
        self.part_headers: dict[str, str] = {}
        self.pending_header = ""
        self.chunks = bytearray()

    def parse(self, body: bytes) -> FormData:
        parser = MultipartParser(
            self.boundary,
            {
                "on_part_begin": self._reset,
                "on_part_data": self.on_part_data,
                "on_part_end": self.on_part_end,
                "on_header_field": self.on_header_field,
                "on_header_value": self.on_header_value,
            },
        )
        parser.write(body)
        parser.finalize()
        return FormData(self.fields, self.files)

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self.pending_header = data[start:end].decode("latin-1").lower()

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self.part_headers[self.pending_header] = data[start:end].decode("latin-1")

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self.chunks.extend(data[start:end])

    def on_part_end(self) -> None:
        disposition = self.part_headers.get("content-disposition")
        if disposition is None:
            return
        _, params = parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is None:
            return

        field = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is None:
            self.fields.setdefault(field, []).append(self.chunks.decode("utf-8", errors="replace"))
            return
        self.files[field] = UploadFile(
            filename=filename.decode("utf-8"),
            content_type=self.part_headers.get("content-type", "application/octet-stream"),
            content=bytes(self.chunks),
        )

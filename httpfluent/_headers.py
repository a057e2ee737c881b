from __future__ import annotations

import re
import typing
from urllib.parse import unquote

from ._exceptions import HeaderParseError

__all__ = [
    "APPLICATION_JSON",
    "APPLICATION_OCTET_STREAM",
    "ContentDisposition",
    "MediaType",
    "TEXT_PLAIN",
    "TEXT_XML",
]

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_QUOTED_STRING = r'"(?:[^"\\]|\\.)*"'

TOKEN_REGEX = re.compile(_TOKEN)
MEDIA_RANGE_REGEX = re.compile(rf"\s*(?P<type>{_TOKEN})/(?P<subtype>{_TOKEN})\s*")
DISPOSITION_TYPE_REGEX = re.compile(rf"\s*(?P<type>{_TOKEN})\s*")
PARAMETER_REGEX = re.compile(
    rf";\s*(?P<name>{_TOKEN})\s*=\s*(?P<value>{_TOKEN}|{_QUOTED_STRING})\s*"
)
TRAILING_REGEX = re.compile(r"[\s;]*")
QUOTED_PAIR_REGEX = re.compile(r"\\(.)")


def _parse_parameters(value: str, pos: int, label: str) -> tuple[tuple[str, str], ...]:
    parameters: list[tuple[str, str]] = []
    while pos < len(value):
        match = PARAMETER_REGEX.match(value, pos)
        if match is None:
            trailing = TRAILING_REGEX.fullmatch(value, pos)
            if trailing is not None:
                break
            raise HeaderParseError(
                f"Invalid {label} parameter at position {pos}: {value!r}", value=value
            )
        raw = match.group("value")
        if raw.startswith('"'):
            raw = QUOTED_PAIR_REGEX.sub(r"\1", raw[1:-1])
        parameters.append((match.group("name").lower(), raw))
        pos = match.end()
    return tuple(parameters)


def _format_parameters(parameters: typing.Iterable[tuple[str, str]]) -> str:
    rendered = []
    for name, value in parameters:
        if not TOKEN_REGEX.fullmatch(value):
            value = '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
        rendered.append(f"; {name}={value}")
    return "".join(rendered)


def _get(parameters: tuple[tuple[str, str], ...], name: str) -> str | None:
    for key, value in parameters:
        if key == name:
            return value
    return None


class MediaType(typing.NamedTuple):
    """A parsed ``type/subtype; name=value`` header value."""

    media_type: str
    parameters: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: str) -> MediaType:
        if value is None:
            raise HeaderParseError("Media type must not be None.")
        match = MEDIA_RANGE_REGEX.match(value)
        if match is None:
            raise HeaderParseError(f"Invalid media type: {value!r}", value=value)
        media_type = f"{match.group('type')}/{match.group('subtype')}".lower()
        return cls(media_type, _parse_parameters(value, match.end(), "media type"))

    @property
    def charset(self) -> str | None:
        return _get(self.parameters, "charset")

    @property
    def quality(self) -> float | None:
        q = _get(self.parameters, "q")
        if q is None:
            return None
        try:
            return float(q)
        except ValueError:
            raise HeaderParseError(f"Invalid quality value: {q!r}", value=q)

    def get_parameter(self, name: str) -> str | None:
        return _get(self.parameters, name.lower())

    def __str__(self) -> str:
        return self.media_type + _format_parameters(self.parameters)


class ContentDisposition(typing.NamedTuple):
    """A parsed ``Content-Disposition`` header value.

    ``filename*`` (RFC 5987) takes precedence over ``filename`` when both are
    present.
    """

    disposition_type: str
    parameters: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: str) -> ContentDisposition:
        if value is None:
            raise HeaderParseError("Content disposition must not be None.")
        match = DISPOSITION_TYPE_REGEX.match(value)
        if match is None:
            raise HeaderParseError(f"Invalid content disposition: {value!r}", value=value)
        parameters = _parse_parameters(value, match.end(), "content disposition")
        return cls(match.group("type").lower(), parameters)

    @property
    def is_attachment(self) -> bool:
        return self.disposition_type == "attachment"

    @property
    def name(self) -> str | None:
        return _get(self.parameters, "name")

    @property
    def filename(self) -> str | None:
        extended = _get(self.parameters, "filename*")
        if extended is not None:
            return _decode_extended_value(extended)
        return _get(self.parameters, "filename")

    @property
    def size(self) -> int | None:
        size = _get(self.parameters, "size")
        return int(size) if size is not None and size.isdigit() else None

    def __str__(self) -> str:
        return self.disposition_type + _format_parameters(self.parameters)


def _decode_extended_value(value: str) -> str:
    charset, sep, rest = value.partition("'")
    if not sep:
        raise HeaderParseError(f"Invalid extended parameter value: {value!r}", value=value)
    _, sep, encoded = rest.partition("'")
    if not sep:
        raise HeaderParseError(f"Invalid extended parameter value: {value!r}", value=value)
    try:
        return unquote(encoded, encoding=charset or "utf-8", errors="strict")
    except (LookupError, UnicodeDecodeError) as exc:
        raise HeaderParseError(
            f"Cannot decode extended parameter value: {value!r}", value=value
        ) from exc


APPLICATION_OCTET_STREAM = MediaType.parse("application/octet-stream")
APPLICATION_JSON = MediaType.parse("application/json")
TEXT_XML = MediaType.parse("text/xml")
TEXT_PLAIN = MediaType.parse("text/plain")

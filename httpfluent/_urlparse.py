from __future__ import annotations

import ipaddress
import re
import typing

import idna

from ._exceptions import InvalidArgumentError

UNRESERVED_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
SUB_DELIMS = "!$&'()*+,;="

PERCENT_ENCODED_REGEX = re.compile("%[A-Fa-f0-9]{2}")

_ALWAYS_EXCLUDED = (0x20, 0x22, 0x3C, 0x3E)
_PATH_EXCLUDED = _ALWAYS_EXCLUDED + (0x23, 0x3F, 0x60, 0x7B, 0x7D)


def _safe_chars(*excluded: int) -> str:
    excluded_set = set(excluded)
    return "".join(chr(i) for i in range(0x20, 0x7F) if i not in excluded_set)


FRAG_SAFE = _safe_chars(*_ALWAYS_EXCLUDED, 0x60)
PATH_SAFE = _safe_chars(*_PATH_EXCLUDED)

URL_REGEX = re.compile(
    r"(?:(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*):(?=//))?"
    r"(?://(?P<authority>[^/?#]*))?"
    r"(?P<path>[^?#]*)"
    r"(?:\?(?P<query>[^#]*))?"
    r"(?:#(?P<fragment>.*))?"
)

AUTHORITY_REGEX = re.compile(
    r"(?:(?P<userinfo>.*)@)?(?P<host>(\[.*\]|[^:@]*)):?(?P<port>.*)?"
)

IPv4_STYLE_HOSTNAME = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")
IPv6_STYLE_HOSTNAME = re.compile(r"^\[.*\]$")


class SplitResult(typing.NamedTuple):
    """Raw URL components. Nothing is quoted or normalized."""

    scheme: str
    userinfo: str
    host: str
    port: int | None
    path: str
    query: str | None
    fragment: str | None


def split_url(url: str) -> SplitResult:
    """Split ``url`` into its components, leaving the text of each untouched.

    Unlike a full parse, placeholders such as ``{id}`` survive in the path so
    that they can be replaced later.
    """
    url_dict = URL_REGEX.match(url).groupdict()  # type: ignore[union-attr]
    authority = url_dict["authority"] or ""
    authority_dict = AUTHORITY_REGEX.match(authority).groupdict()  # type: ignore[union-attr]

    host = authority_dict["host"] or ""
    if IPv6_STYLE_HOSTNAME.match(host):
        host = host[1:-1]

    return SplitResult(
        scheme=(url_dict["scheme"] or "").lower(),
        userinfo=authority_dict["userinfo"] or "",
        host=host,
        port=parse_port(authority_dict["port"]),
        path=url_dict["path"] or "",
        query=url_dict["query"],
        fragment=url_dict["fragment"],
    )


def parse_port(port: str | int | None) -> int | None:
    if not port and port != 0:
        return None
    try:
        return int(port)  # type: ignore[arg-type]
    except ValueError:
        raise InvalidArgumentError(f"Invalid port: {port!r}", argument="port")


def encode_host(host: str) -> str:
    if not host:
        return ""

    if IPv4_STYLE_HOSTNAME.match(host):
        try:
            ipaddress.IPv4Address(host)
        except ipaddress.AddressValueError:
            raise InvalidArgumentError(f"Invalid IPv4 address: {host!r}", argument="host")
        return host

    if ":" in host:
        try:
            ipaddress.IPv6Address(host.strip("[]"))
        except ipaddress.AddressValueError:
            raise InvalidArgumentError(f"Invalid IPv6 address: {host!r}", argument="host")
        return f"[{host.strip('[]')}]"

    if host.isascii():
        return quote(host.lower(), safe=SUB_DELIMS)

    try:
        return idna.encode(host.lower()).decode("ascii")
    except idna.IDNAError:
        raise InvalidArgumentError(f"Invalid IDNA hostname: {host!r}", argument="host")


def _percent_encode(string: str) -> str:
    return "".join(f"%{byte:02X}" for byte in string.encode("utf-8"))


def percent_encoded(string: str, safe: str) -> str:
    non_escaped = UNRESERVED_CHARACTERS + safe
    if not string.rstrip(non_escaped):
        return string
    return "".join(c if c in non_escaped else _percent_encode(c) for c in string)


def escape_data_string(string: str) -> str:
    """Escape every character outside the RFC 3986 unreserved set.

    Existing ``%XX`` sequences are escaped too, so the value round-trips.
    """
    return percent_encoded(string, safe="")


def quote(string: str, safe: str) -> str:
    parts: list[str] = []
    pos = 0
    for match in re.finditer(PERCENT_ENCODED_REGEX, string):
        start, end = match.start(), match.end()
        if start != pos:
            parts.append(percent_encoded(string[pos:start], safe=safe))
        parts.append(match.group(0))
        pos = end
    if pos != len(string):
        parts.append(percent_encoded(string[pos:], safe=safe))
    return "".join(parts)

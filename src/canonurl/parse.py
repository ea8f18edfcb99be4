"""canonurl.parse
Splits a URI into its components without decoding any of them.
The split is deliberately forgiving about what appears inside a component;
only the delimiters, the scheme, and the port are checked.
"""

import dataclasses
import logging
import re

from typing import Self

from .errors import ParseError

logger = logging.getLogger(__name__)

# ALPHA = %x41-5A / %x61-7A
_ALPHA: str = r"[A-Za-z]"

# DIGIT = %x30-39
_DIGIT: str = r"[0-9]"

# scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME: str = rf"(?P<scheme>{_ALPHA}(?:{_ALPHA}|{_DIGIT}|[+\-.])*)"
_SCHEME_PAT: re.Pattern[str] = re.compile(rf"\A{_SCHEME}:")

# port = *DIGIT
# (an empty port is rejected here, so this is 1*DIGIT)
_PORT_PAT: re.Pattern[str] = re.compile(rf"\A{_DIGIT}+\Z")

_MAX_PORT: int = 0xFFFF
_MAX_PORT_DIGITS: int = len(str(_MAX_PORT))

# authority ends at the first "/", "?", or "#"; path ends at the first "?" or "#"
_AUTHORITY_END_PAT: re.Pattern[str] = re.compile(r"[/?#]")
_PATH_END_PAT: re.Pattern[str] = re.compile(r"[?#]")


@dataclasses.dataclass(frozen=True)
class Encoded:
    """Component text as it appeared in the input. May contain %XX escapes."""

    text: str

    @property
    def is_empty(self: Self) -> bool:
        return len(self.text) == 0


@dataclasses.dataclass(frozen=True)
class Raw:
    """Fully decoded component bytes. Nothing in here is an escape."""

    data: bytes

    @property
    def is_empty(self: Self) -> bool:
        return len(self.data) == 0


Component = Encoded | Raw


@dataclasses.dataclass(frozen=True)
class ParsedURI:
    """A URI split into components. Absent components are None; present-but-empty ones are not."""

    scheme: str
    user: Component | None = None
    password: Component | None = None
    host: Component | None = None
    port: int | None = None
    path: Component | None = None
    query: Component | None = None
    fragment: Component | None = None

    @property
    def components(self: Self) -> tuple[Component | None, ...]:
        return (self.user, self.password, self.host, self.path, self.query, self.fragment)

    @property
    def is_raw(self: Self) -> bool:
        """True when no present component still needs decoding."""
        return not any(isinstance(c, Encoded) for c in self.components)


def _find_end(pattern: re.Pattern[str], data: str, start: int) -> int:
    m: re.Match[str] | None = pattern.search(data, start)
    return m.start() if m is not None else len(data)


def _parse_port(port: str) -> int:
    if _PORT_PAT.match(port) is None:
        raise ParseError(f"invalid port: {port!r}")
    # Leading zeros are fine; bound the length before int() sees it.
    digits: str = port.lstrip("0")
    if len(digits) > _MAX_PORT_DIGITS:
        raise ParseError(f"port out of range: {port!r}")
    result: int = int(digits or "0", base=10)
    if result > _MAX_PORT:
        raise ParseError(f"port out of range: {result}")
    return result


def _parse_authority(authority: str) -> dict[str, Component | int | None]:
    """userinfo@host:port"""
    result: dict[str, Component | int | None] = {}

    start_of_host: int = 0
    userinfo, at, _ = authority.partition("@")
    if len(at) > 0:
        start_of_host = len(userinfo) + 1
        user, colon, password = userinfo.partition(":")
        result["user"] = Encoded(user)
        # "user:@host" has no password, same as "user@host"
        if len(colon) > 0 and len(password) > 0:
            result["password"] = Encoded(password)

    # Nothing but "userinfo@"
    if start_of_host >= len(authority):
        return result

    end_of_host: int = len(authority)
    if authority[start_of_host] == "]":
        raise ParseError("unexpected ']' at start of host")

    if authority[start_of_host] == "[":
        close: int = authority.rfind("]", start_of_host)
        if close == -1:
            raise ParseError("unterminated IP-literal")
        end_of_host = close + 1
        colon_idx: int = -1
        if end_of_host < len(authority):
            if authority[end_of_host] != ":":
                raise ParseError("unexpected characters after IP-literal")
            colon_idx = end_of_host
    else:
        colon_idx = authority.rfind(":", start_of_host)

    if colon_idx != -1:
        end_of_host = min(end_of_host, colon_idx)
        result["port"] = _parse_port(authority[colon_idx + 1 :])

    if start_of_host >= end_of_host:
        raise ParseError("empty host")
    result["host"] = Encoded(authority[start_of_host:end_of_host])
    return result


def parse_after_scheme(scheme: str, data: str) -> ParsedURI:
    """Parses everything that follows "scheme:".
    hier-part [ "?" query ] [ "#" fragment ]
    """
    fields: dict[str, Component | int | None] = {}
    i: int = 0

    if data.startswith("//"):
        i = _find_end(_AUTHORITY_END_PAT, data, 2)
        authority: str = data[2:i]
        if len(authority) == 0:
            # "scheme:///path" is fine, "scheme://?q" is not
            if not data[2:].startswith("/"):
                raise ParseError("empty authority")
        else:
            fields.update(_parse_authority(authority))

    path_start: int = i
    i = _find_end(_PATH_END_PAT, data, path_start)
    fields["path"] = Encoded(data[path_start:i])

    if i < len(data) and data[i] == "?":
        query_start: int = i + 1
        i = data.find("#", query_start)
        if i == -1:
            i = len(data)
        fields["query"] = Encoded(data[query_start:i])

    if i < len(data):
        fields["fragment"] = Encoded(data[i + 1 :])

    return ParsedURI(scheme=scheme, **fields)


def parse_uri(data: str) -> ParsedURI:
    """Splits an absolute URI into its components.
    Percent-escapes are left alone; every component comes back Encoded.
    Raises ParseError if there is no valid scheme or the authority is malformed.
    """
    m: re.Match[str] | None = _SCHEME_PAT.match(data)
    if m is None:
        raise ParseError("missing or invalid scheme")
    try:
        return parse_after_scheme(m["scheme"], data[m.end() :])
    except ParseError as e:
        logger.debug("parse of %r failed: %s", data, e)
        raise


def parse_reference(data: str, scheme: str) -> ParsedURI:
    """Parses a relative reference (e.g. "/a b?x#y") as though it followed "scheme:".
    If even that fails, the whole input is treated as a path. Never raises.
    """
    try:
        return parse_after_scheme(scheme, data)
    except ParseError:
        logger.debug("treating %r as an opaque path", data)
    return ParsedURI(scheme=scheme, path=Encoded(data))

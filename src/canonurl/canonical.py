"""canonurl.canonical
Canonical form for URIs used as attribute values.

The input may be unencoded, already percent-encoded, or a mix of the two.
Every component is decoded to bytes and then re-encoded against its own safe
set, so all of those spellings end up as the same string.
"""

import io
import logging

from typing import Self, TextIO

from urllib.parse import quote_from_bytes, unquote_to_bytes

from .errors import ParseError, WriteError
from .parse import Component, Encoded, ParsedURI, Raw, parse_reference, parse_uri

logger = logging.getLogger(__name__)

_DEFAULT_ENCODING: str = "utf-8"

# Scheme assumed for relative references. It is never written out.
_FALLBACK_SCHEME: str = "https"

# unreserved = ALPHA / DIGIT / "-" / "." / "_" / "~"
# quote_from_bytes never escapes these, so the tables below leave them out.

# sub-delims = "!" / "$" / "&" / "'" / "(" / ")" / "*" / "+" / "," / ";" / "="
_SUB_DELIMS: str = "!$&'()*+,;="

USER_SAFE: str = _SUB_DELIMS
PASSWORD_SAFE: str = USER_SAFE + ":"
# reg-name = *( unreserved / pct-encoded / sub-delims )
HOST_SAFE: str = _SUB_DELIMS
# IP-literal = "[" ( IPv6address / IPvFuture  ) "]"
IP_LITERAL_SAFE: str = HOST_SAFE + ":[]"
PATH_SAFE: str = USER_SAFE + "/:@"
QUERY_SAFE: str = PATH_SAFE + "?"
FRAGMENT_SAFE: str = QUERY_SAFE


class Scratch:
    """Holds the decoded component buffers for one canonicalization.
    Use as a context manager; everything is released together on exit.
    """

    def __init__(self: Self) -> None:
        self._buffers: list[bytes] = []

    def __enter__(self: Self) -> Self:
        return self

    def __exit__(self: Self, *exc_info: object) -> None:
        self.release()

    @property
    def allocated(self: Self) -> int:
        return sum(len(b) for b in self._buffers)

    def decode(self: Self, text: str) -> bytes:
        """Percent-decodes text. A "%" not followed by two hex digits is kept as-is."""
        data: bytes = unquote_to_bytes(_encode(text))
        self._buffers.append(data)
        return data

    def release(self: Self) -> None:
        self._buffers.clear()


def _encode(text: str) -> bytes:
    try:
        # Undecodable bytes from argv or a file come back as the original bytes
        return text.encode(_DEFAULT_ENCODING, errors="surrogateescape")
    except UnicodeEncodeError:
        return text.encode(_DEFAULT_ENCODING, errors="surrogatepass")


def _component_to_raw(scratch: Scratch, component: Component | None) -> Raw | None:
    if component is None:
        return None
    if isinstance(component, Raw):
        return component
    return Raw(scratch.decode(component.text))


def to_raw(scratch: Scratch, uri: ParsedURI) -> ParsedURI:
    """Returns a copy of uri in which every component is Raw.
    Existing percent-encoding is decoded, so it will be re-applied uniformly when formatted.
    """
    path: Raw | None = None
    if uri.path is not None and not uri.path.is_empty:
        path = _component_to_raw(scratch, uri.path)

    return ParsedURI(
        scheme=uri.scheme,
        user=_component_to_raw(scratch, uri.user),
        password=_component_to_raw(scratch, uri.password),
        host=_component_to_raw(scratch, uri.host),
        port=uri.port,
        path=path,
        query=_component_to_raw(scratch, uri.query),
        fragment=_component_to_raw(scratch, uri.fragment),
    )


def _format_component(component: Component, safe: str) -> str:
    if isinstance(component, Encoded):
        return component.text
    return quote_from_bytes(component.data, safe=safe)


def _host_safe(host: Component) -> str:
    # ":" and the brackets only mean something inside an IP-literal; a decoded
    # ":" in a reg-name would otherwise be read back as a port.
    if isinstance(host, Raw) and host.data.startswith(b"[") and host.data.endswith(b"]"):
        return IP_LITERAL_SAFE
    return HOST_SAFE


def _format_path(path: Component, has_host: bool) -> str:
    # Without an authority, a path starting with "//" would be read back as one.
    if not has_host and isinstance(path, Raw) and path.data.startswith(b"//"):
        return f"/%2F{quote_from_bytes(path.data[2:], safe=PATH_SAFE)}"
    return _format_component(path, PATH_SAFE)


def _format(uri: ParsedURI, out: TextIO, include_scheme: bool) -> None:
    if include_scheme:
        out.write(f"{uri.scheme}:")
    if uri.host is not None:
        out.write("//")
        if uri.user is not None:
            out.write(_format_component(uri.user, USER_SAFE))
            if uri.password is not None:
                out.write(f":{_format_component(uri.password, PASSWORD_SAFE)}")
            out.write("@")
        out.write(_format_component(uri.host, _host_safe(uri.host)))
        if uri.port is not None:
            out.write(f":{uri.port}")
    # No "/" for an empty path; "https://foo.com" stays as it is.
    if uri.path is not None:
        out.write(_format_path(uri.path, has_host=uri.host is not None))
    if uri.query is not None:
        out.write(f"?{_format_component(uri.query, QUERY_SAFE)}")
    if uri.fragment is not None:
        out.write(f"#{_format_component(uri.fragment, FRAGMENT_SAFE)}")


def format_uri(uri: ParsedURI, out: TextIO, include_scheme: bool = True) -> None:
    """Writes uri to out, percent-encoding (uppercase hex) every byte outside each component's safe set.
    Encoded components are written verbatim; pass the result of to_raw() to get the canonical form.
    """
    try:
        _format(uri, out, include_scheme)
    except (OSError, ValueError) as e:
        raise WriteError(f"failed to write URI: {e}") from e


def normalize(data: str, lenient: bool = False) -> str:
    """Canonicalizes a URI for use as an attribute value.
    Raises ParseError for input that is not an absolute URI, unless lenient is set,
    in which case the input is treated as a relative reference and no scheme is written.
    """
    if len(data) == 0:
        return data

    include_scheme: bool = True
    try:
        uri: ParsedURI = parse_uri(data)
    except ParseError:
        if not lenient:
            raise
        logger.debug("%r is not an absolute URI, normalizing as a relative reference", data)
        include_scheme = False
        uri = parse_reference(data, _FALLBACK_SCHEME)

    out: io.StringIO = io.StringIO()
    with Scratch() as scratch:
        format_uri(to_raw(scratch, uri), out, include_scheme=include_scheme)
    return out.getvalue()


def normalize_reference(data: str) -> str:
    """Canonicalizes a link or image destination, which may be absolute or relative."""
    return normalize(data, lenient=True)

__version__ = "0.1"

from .canonical import FRAGMENT_SAFE, HOST_SAFE, IP_LITERAL_SAFE, PASSWORD_SAFE, PATH_SAFE, QUERY_SAFE, USER_SAFE, Scratch, format_uri, normalize, normalize_reference, to_raw
from .errors import ParseError, URIError, WriteError
from .parse import Component, Encoded, ParsedURI, Raw, parse_after_scheme, parse_reference, parse_uri

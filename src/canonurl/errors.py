"""canonurl.errors
Exceptions raised while canonicalizing a URI.
"""


class URIError(ValueError):
    """Base class. Subclasses ValueError so `except ValueError` keeps working the way it does for urllib.parse."""


class ParseError(URIError):
    """The input is not syntactically a URI: bad scheme, bad port, or a malformed authority."""


class WriteError(URIError):
    """Writing the canonical form to the output stream failed."""

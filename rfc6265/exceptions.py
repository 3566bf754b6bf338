# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
Exceptions.

Rejections of cookies by policy are *not* signalled via exceptions; see
the InsertOutcome type in the jar module.
"""

__all__ = ['CookieError', 'ParseError', 'UsageError']

class CookieError(Exception):
    """
    Base class for all exceptions.
    """

class ParseError(CookieError, ValueError):
    """
    A Set-Cookie header value could not be parsed into a cookie.

    The "reason" attribute contains one of the PARSE_* constants from the
    constants module.
    """

    def __init__(self, message, reason):
        """
        __init__(message, reason) -> None

        Initialize a ParseError instance. message is passed to the
        superclass constructor, reason is stored in the same-named
        attribute.
        """
        CookieError.__init__(self, message)
        self.reason = reason

class UsageError(CookieError, ValueError):
    """
    Raised when the library is called in violation of its contract (such
    as with an empty request host). These indicate a broken integration
    rather than a malformed header.
    """

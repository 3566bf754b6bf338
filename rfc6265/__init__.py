# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
HTTP cookie library

This is a small stand-alone implementation of the HTTP cookie mechanism
of RFC 6265. It parses Set-Cookie header values into cookie records,
stores them in a thread-safe cookie jar with configurable capacity limits,
and selects and formats the cookies to be sent back with each request.
Servers can use the same machinery to read Cookie headers and to issue
well-formed Set-Cookie headers.

The transport is the caller's business: the library only consumes header
values and a description of the request (see RequestContext), and only
produces header values.

For reference documentation, see the grammar, matching, cookies, and jar
modules.
"""

__version__ = '1.0'

# Auxiliary modules
from . import constants, exceptions, tools
# Main modules
from . import grammar, matching, cookies, jar

__all__ = constants.__all__ + exceptions.__all__
__all__ += ['RequestContext', 'Cookie', 'ResponseCookies', 'CookieJar',
            'InsertOutcome', 'check_cookie', 'parse_set_cookie',
            'parse_cookie_header', 'format_set_cookie', 'format_cookie_header',
            'domain_match', 'path_match', 'can_set_domain']

from .constants import *
from .exceptions import *
from .grammar import parse_set_cookie, parse_cookie_header
from .matching import domain_match, path_match, can_set_domain
from .cookies import (RequestContext, Cookie, ResponseCookies, check_cookie,
                      format_set_cookie, format_cookie_header)
from .jar import CookieJar, InsertOutcome

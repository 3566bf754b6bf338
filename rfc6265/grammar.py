# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
The cookie header grammar.

parse_set_cookie() tokenizes a single Set-Cookie header value into its
name-value pair and attributes, following the lenient algorithm of
RFC 6265, Section 5.2: unknown attributes are retained as extensions,
malformed attributes are dropped individually, and only a missing or
malformed name-value pair fails the whole header.

Note that a response carrying multiple Set-Cookie headers must be parsed
one header value at a time; they cannot be joined with commas since
cookie attributes (in particular, Expires) may contain commas.
"""

import re
import logging

from . import tools
from .constants import (PARSE_EMPTY, PARSE_INVALID_NAME, PARSE_INVALID_VALUE,
                        ATTRIBUTES, SAMESITE_VALUES)
from .exceptions import ParseError

__all__ = ['CandidateCookie', 'is_token', 'is_cookie_value',
           'parse_set_cookie', 'parse_cookie_header']

log = logging.getLogger(__name__)

# Separators of RFC 2616, Section 2.2; tokens may not contain them.
SEPARATORS = frozenset('()<>@,;:\\"/[]?={} \t')

# Linear whitespace trimmed around names, values, and attributes.
WHITESPACE = ' \t'

MAX_AGE_RE = re.compile(r'^-?[0-9]+$')

def is_token(s):
    """
    is_token(s) -> bool

    Return whether s is a non-empty RFC 2616 token, i.e. consists of
    printable ASCII characters other than separators.
    """
    return bool(s) and all(0x20 < ord(c) < 0x7F and c not in SEPARATORS
                           for c in s)

def _is_cookie_octet(c):
    "Test a single character against the cookie-octet production."
    o = ord(c)
    return 0x20 < o < 0x7F and c not in '",;\\'

def is_cookie_value(s):
    """
    is_cookie_value(s) -> bool

    Return whether s matches the cookie-value production of RFC 6265,
    Section 4.1.1: any number of cookie-octets (printable ASCII other than
    whitespace, double quotes, commas, semicolons, and backslashes),
    optionally enclosed in double quotes. The empty string is valid.
    """
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        s = s[1:-1]
    return all(_is_cookie_octet(c) for c in s)

class CandidateCookie:
    """
    CandidateCookie(name, value) -> new instance

    The result of parsing a Set-Cookie header value, before the cookie is
    resolved against the request it was received in.

    Instance members are:
    name      : The name of the cookie.
    value     : The value of the cookie (including enclosing quotes, if
                any).
    expires   : The Expires attribute as a UNIX timestamp, or None.
    max_age   : The Max-Age attribute as an integer amount of seconds, or
                None.
    domain    : The Domain attribute, lower-cased and with a leading dot
                removed, or None.
    path      : The Path attribute, or None if absent or invalid (not
                starting with a slash).
    secure    : Whether the Secure attribute was present.
    http_only : Whether the HttpOnly attribute was present.
    same_site : One of the SAMESITE_* constants, or None if the SameSite
                attribute was absent or unrecognized.
    extensions: A CaseDict of unrecognized attributes, mapping their names
                to their values (None for attributes without a value).
    """

    def __init__(self, name, value):
        """
        __init__(name, value) -> None

        See class docstring for details.
        """
        self.name = name
        self.value = value
        self.expires = None
        self.max_age = None
        self.domain = None
        self.path = None
        self.secure = False
        self.http_only = False
        self.same_site = None
        self.extensions = tools.CaseDict()

    def __repr__(self):
        """
        repr(self) -> str

        Return a programmer-friendly string representation of self.
        """
        return '<%s %s=%s>' % (self.__class__.__name__, self.name,
                               self.value)

    def set_attribute(self, key, value):
        """
        set_attribute(key, value) -> bool

        Incorporate the given attribute into self. key is the attribute
        name (with surrounding whitespace removed); value is its value
        (similarly stripped), or None if the attribute had no equals sign.
        Returns whether the attribute was taken into account; malformed
        attributes are ignored. Later attributes override earlier ones.
        """
        lkey = key.lower()
        if lkey == 'expires':
            if not value: return False
            try:
                self.expires = tools.parse_http_date(value)
            except ValueError:
                return False
        elif lkey == 'max-age':
            if not value or not MAX_AGE_RE.match(value): return False
            self.max_age = int(value, 10)
        elif lkey == 'domain':
            if not value: return False
            domain = value[1:] if value.startswith('.') else value
            if not domain: return False
            self.domain = domain.lower()
        elif lkey == 'path':
            if value and value.startswith('/'):
                self.path = value
            else:
                # Reverts to the default path.
                self.path = None
        elif lkey == 'secure':
            self.secure = True
        elif lkey == 'httponly':
            self.http_only = True
        elif lkey == 'samesite':
            same_site = SAMESITE_VALUES.get((value or '').lower())
            if same_site is None: return False
            self.same_site = same_site
        else:
            self.extensions[key] = value
        return True

def parse_set_cookie(string):
    """
    parse_set_cookie(string) -> CandidateCookie

    Parse the given Set-Cookie header value. Raises a ParseError if there
    is no name-value pair, or if the name or the value contain forbidden
    characters; malformed attributes are silently dropped.
    """
    if not string or not string.strip(WHITESPACE):
        raise ParseError('Empty Set-Cookie header value', PARSE_EMPTY)
    # Neither names nor (even quoted) values may contain semicolons, so the
    # first one always terminates the name-value pair.
    tokens = string.split(';')
    name, sep, value = tokens[0].partition('=')
    if not sep:
        raise ParseError('No name-value pair in %r' % (string,), PARSE_EMPTY)
    name, value = name.strip(WHITESPACE), value.strip(WHITESPACE)
    if not is_token(name):
        raise ParseError('Invalid cookie name %r' % (name,),
                         PARSE_INVALID_NAME)
    if not is_cookie_value(value):
        raise ParseError('Invalid value for cookie %r' % (name,),
                         PARSE_INVALID_VALUE)
    ret = CandidateCookie(name, value)
    for token in tokens[1:]:
        k, sep, v = token.partition('=')
        k = k.strip(WHITESPACE)
        if not k: continue
        v = v.strip(WHITESPACE) if sep else None
        if not ret.set_attribute(k, v):
            log.debug('Ignoring malformed %s attribute of cookie %r',
                      ATTRIBUTES.get(k.lower(), k), name)
    return ret

def parse_cookie_header(string):
    """
    parse_cookie_header(string) -> list

    Parse the given Cookie header value (as sent by a client) and return a
    list of (name, value) pairs in the order of appearance. Pairs without
    an equals sign or with an empty name are skipped. Since a client may
    send multiple cookies with the same name (e.g. for different paths),
    this does not return a mapping.
    """
    ret = []
    if not string: return ret
    for el in string.split(';'):
        n, sep, v = el.partition('=')
        n = n.strip(WHITESPACE)
        if not sep or not n: continue
        ret.append((n, v.strip(WHITESPACE)))
    return ret

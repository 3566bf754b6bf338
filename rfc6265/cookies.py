# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
Cookie records and header formatting.

(Mostly) compliant to RFC 6265, with the SameSite, Secure-overwrite, and
cookie name prefix rules of its successor drafts. The alternatives present
in the Python standard library are too tightly coupled to be used outside
it.

The classes in this module are *not* thread-safe; CookieJar (from the jar
module) is.
"""

import copy
import math
import time
import logging
import collections
from urllib.parse import urlsplit

from . import grammar, matching
from .constants import (SECURE_SCHEMES, HTTP_SCHEMES, MAX_TIMESTAMP,
                        SAMESITE_DEFAULT, SAMESITE_LAX, SAMESITE_NONE,
                        PREFIX_SECURE, PREFIX_HOST, REJECT_CROSS_DOMAIN,
                        REJECT_INSECURE_SAMESITE, REJECT_SECURE_OVERWRITE,
                        REJECT_INVALID_ATTRIBUTE, REJECT_NON_HTTP_API,
                        PARSE_INVALID_NAME, PARSE_INVALID_VALUE)
from .exceptions import ParseError, UsageError
from .tools import CaseDict, format_http_date

__all__ = ['RequestContext', 'Cookie', 'resolve', 'check_cookie', 'parse',
           'format_set_cookie', 'format_cookie_header', 'ResponseCookies']

log = logging.getLogger(__name__)

def _canonical_request_host(host, what):
    "Canonicalize a host name given by the caller or raise a UsageError."
    if not host:
        raise UsageError('%s must not be empty' % what)
    try:
        return matching.canonical_host(host)
    except UnicodeError as exc:
        raise UsageError('Invalid %s %r: %s' % (what.lower(), host, exc))

class RequestContext(collections.namedtuple('RequestContext',
        'host path secure http site navigation')):
    """
    RequestContext(host, path='/', secure=False, http=True, site=None,
                   navigation=False) -> new instance

    The request-side information cookie processing depends upon. host is
    the host name of the request (canonicalized upon construction), path
    the path of the request URI (without the query string), secure
    whether the request is made over a secure channel (the trust decision
    is the caller's), and http whether the cookies are processed on behalf
    of an HTTP API (as opposed to, e.g., a scripting interface; only the
    former may see or set HttpOnly cookies).

    site is the host name of the document that initiated the request (the
    "site for cookies"), or None if the request was initiated by the user
    directly. navigation tells whether the request is a top-level
    navigation using a safe method. These two determine which SameSite
    cookies are sent; see the cross_site property.

    Raises a UsageError if host is empty or cannot be canonicalized, or if
    path is not absolute.
    """

    __slots__ = ()

    def __new__(cls, host, path='/', secure=False, http=True, site=None,
                navigation=False):
        """
        __new__(cls, host, path='/', secure=False, http=True, site=None,
                navigation=False) -> new instance

        See class docstring for details.
        """
        host = _canonical_request_host(host, 'Request host')
        if site is not None:
            site = _canonical_request_host(site, 'Site host')
        if not path:
            path = '/'
        elif not path.startswith('/'):
            raise UsageError('Request path must be absolute: %r' % (path,))
        return super().__new__(cls, host, path, bool(secure), bool(http),
                               site, bool(navigation))

    @classmethod
    def from_url(cls, url, site=None, navigation=False):
        """
        from_url(url, site=None, navigation=False) -> new instance

        Derive a request context from the given URL. The scheme determines
        the secure and http attributes; site and navigation are passed on
        as they are.
        """
        purl = urlsplit(url)
        scheme = purl.scheme.lower()
        return cls(purl.hostname or '', purl.path or '/',
                   scheme in SECURE_SCHEMES, scheme in HTTP_SCHEMES, site,
                   navigation)

    @property
    def cross_site(self):
        """
        Whether the request is cross-site, i.e. site is given and neither
        equal to host nor related to it as a subdomain or superdomain.

        Without a public suffix list, registrable domains are approximated
        by the domain-match relation.
        """
        if self.site is None or self.site == self.host:
            return False
        return not (matching.domain_match(self.site, self.host) or
                    matching.domain_match(self.host, self.site))

class Cookie:
    """
    Cookie(name, value, domain, path='/', expires=None, host_only=True,
           secure=False, http_only=False, same_site='Lax',
           extensions=None, created=None, last_access=None)
        -> new instance

    A single stored HTTP cookie. The constructor performs no validation;
    use the create() class method or the parse() function to obtain
    cookies from untrusted input, or check_cookie() to validate a cookie
    constructed directly. CookieJar.insert() performs the latter.

    WARNING: Make sure to choose only appropriate names/values; Cookie
             does not employ any means of automatic escaping.

    Instance members are:
    name       : The name of the cookie.
    value      : The value of the cookie.
    domain     : The canonical domain of the cookie, without a leading
                 dot. Never empty.
    host_only  : Whether the cookie is only to be sent to domain itself
                 (as opposed to subdomains as well). True for cookies that
                 had no Domain attribute.
    path       : The path of the cookie. Always starts with a slash.
    expires    : The expiry time as a UNIX timestamp, or None for session
                 cookies.
    secure     : Whether the cookie is only to be sent over secure
                 channels.
    http_only  : Whether the cookie is hidden from non-HTTP APIs.
    same_site  : One of the SAMESITE_* constants.
    extensions : A CaseDict of unrecognized attributes, which are
                 reproduced when formatting the cookie.
    created    : The creation time of the cookie as a UNIX timestamp.
    last_access: The time the cookie was last retrieved (or stored).
    key        : A (domain, name, path) tuple identifying the cookie in a
                 jar. Read-only.
    """

    @classmethod
    def create(cls, name, value, context, domain=None, path=None,
               max_age=None, expires=None, secure=None, http_only=False,
               same_site=None, extensions=None, now=None,
               is_public_suffix=None):
        """
        create(name, value, context, domain=None, path=None, max_age=None,
               expires=None, secure=None, http_only=False, same_site=None,
               extensions=None, now=None, is_public_suffix=None)
            -> new instance

        Create a cookie to be issued in the response to the request
        described by context (a RequestContext), subjecting it to the same
        checks as a cookie received in a Set-Cookie header. max_age is in
        seconds, expires is a UNIX timestamp; secure defaults to whether
        context is secure. now is the current time (defaulting to the
        system clock).

        Raises a ParseError if the name or the value are malformed, and a
        UsageError if the attributes are rejected.
        """
        if not grammar.is_token(name):
            raise ParseError('Invalid cookie name %r' % (name,),
                             PARSE_INVALID_NAME)
        if not grammar.is_cookie_value(value):
            raise ParseError('Invalid value for cookie %r' % (name,),
                             PARSE_INVALID_VALUE)
        if secure is None: secure = context.secure
        candidate = grammar.CandidateCookie(name, value)
        if domain:
            candidate.set_attribute('Domain', domain)
        if path:
            candidate.set_attribute('Path', path)
        candidate.max_age = max_age
        if expires is not None:
            candidate.expires = min(math.floor(expires), MAX_TIMESTAMP)
        candidate.secure = secure
        candidate.http_only = http_only
        candidate.same_site = same_site
        if extensions: candidate.extensions.update(extensions)
        cookie, reason = resolve(candidate, context, now, is_public_suffix)
        if cookie is None:
            raise UsageError('Cannot create cookie %r: %s' % (name, reason))
        return cookie

    def __init__(self, name, value, domain, path='/', expires=None,
                 host_only=True, secure=False, http_only=False,
                 same_site=SAMESITE_DEFAULT, extensions=None, created=None,
                 last_access=None):
        """
        __init__(name, value, domain, path='/', expires=None, ...) -> None

        See class docstring for details.
        """
        if created is None: created = time.time()
        if last_access is None: last_access = created
        self.name = name
        self.value = value
        self.domain = domain
        self.path = path
        self.expires = expires
        self.host_only = host_only
        self.secure = secure
        self.http_only = http_only
        self.same_site = same_site
        self.extensions = CaseDict(extensions or ())
        self.created = created
        self.last_access = last_access
        # Tie-breakers for equal timestamps; managed by CookieJar.
        self._created_seq = 0
        self._access_seq = 0

    def __repr__(self):
        """
        repr(self) -> str

        Return a programmer-friendly string representation of self.
        """
        return '<%s %s%s>' % (self.__class__.__name__, self.format('set'),
            '; _host_only' if self.host_only else '')

    def __eq__(self, other):
        """
        self == other -> bool

        Return whether self and other are equivalent cookies; the
        (store-owned) creation and access times are not compared.
        """
        if not isinstance(other, Cookie):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None

    def _state(self):
        "Return a tuple of the attributes relevant for comparisons."
        return (self.name, self.value, self.domain, self.host_only,
                self.path, self.expires, self.secure, self.http_only,
                self.same_site, dict((k.lower(), v) for k, v in
                                     self.extensions.items()))

    @property
    def key(self):
        """
        The (domain, name, path) tuple identifying this cookie in a jar.
        """
        return (self.domain, self.name, self.path)

    @property
    def persistent(self):
        """
        Whether this cookie has an expiry time (i.e. is not a session
        cookie).
        """
        return self.expires is not None

    def is_expired(self, now=None):
        """
        is_expired(now=None) -> bool

        Return whether this cookie has expired as of now (which defaults
        to the current time). Session cookies never expire by time.
        """
        if self.expires is None: return False
        if now is None: now = time.time()
        return self.expires <= now

    def copy(self):
        """
        copy() -> Cookie

        Return an independent copy of self.
        """
        ret = copy.copy(self)
        ret.extensions = self.extensions.copy()
        return ret

    def matches(self, context):
        """
        matches(context) -> bool

        Test whether this cookie would be sent in the request described by
        context (a RequestContext), disregarding expiry. Cross-site
        requests only carry SameSite=None cookies, and SameSite=Lax ones
        if the request is a top-level navigation.
        """
        if self.host_only:
            if context.host != self.domain: return False
        elif not matching.domain_match(self.domain, context.host):
            return False
        if not matching.path_match(self.path, context.path): return False
        if self.secure and not context.secure: return False
        if self.http_only and not context.http: return False
        if self.same_site == SAMESITE_NONE:
            return self.secure
        if context.cross_site:
            # Lax cookies accompany top-level navigations only; Strict ones
            # are never sent cross-site.
            return self.same_site == SAMESITE_LAX and context.navigation
        return True

    def format(self, mode='set'):
        """
        format(mode='set') -> str

        Return a textual representation of the cookie, suitable for
        inclusion into a HTTP header, with details depending on mode:
        'set'   : All attributes are included; the result can be used as a
                  Set-Cookie: header value. Attributes at their default
                  values (Domain for host-only cookies, Expires for
                  session cookies, SameSite=Lax) are omitted; Path is
                  always included.
        'return': No attributes are included at all; result can be
                  included in a Cookie: header.
        """
        if mode == 'return':
            return '%s=%s' % (self.name, self.value)
        elif mode != 'set':
            raise ValueError('Bad cookie formatting mode.')
        ret = ['%s=%s' % (self.name, self.value)]
        if self.expires is not None:
            ret.append('Expires=%s' % format_http_date(self.expires))
        if not self.host_only:
            ret.append('Domain=%s' % self.domain)
        ret.append('Path=%s' % self.path)
        if self.secure: ret.append('Secure')
        if self.http_only: ret.append('HttpOnly')
        if self.same_site != SAMESITE_DEFAULT:
            ret.append('SameSite=%s' % self.same_site)
        for k, v in self.extensions.items():
            ret.append(k if v is None else '%s=%s' % (k, v))
        return '; '.join(ret)

def _check_prefixes(candidate, host_only):
    "Return whether candidate satisfies the rules of its name prefix."
    if candidate.name.startswith(PREFIX_SECURE):
        return candidate.secure
    elif candidate.name.startswith(PREFIX_HOST):
        return candidate.secure and host_only and candidate.path == '/'
    return True

def resolve(candidate, context, now=None, is_public_suffix=None):
    """
    resolve(candidate, context, now=None, is_public_suffix=None)
        -> (Cookie, None) or (None, reason)

    Turn a CandidateCookie received in the response to the request
    described by context into a Cookie: domain, path, and expiry are
    resolved, and the candidate is checked against the policies that do
    not depend on other stored cookies. now is the current time
    (defaulting to the system clock); is_public_suffix is as for
    matching.can_set_domain().

    Returns a (cookie, None) pair on success, or (None, reason) if the
    cookie must be ignored, where reason is one of the REJECT_*
    constants.
    """
    if now is None: now = time.time()
    # Domain.
    domain, host_only = candidate.domain, False
    if domain:
        try:
            domain = matching.canonical_host(domain)
        except UnicodeError:
            return (None, REJECT_INVALID_ATTRIBUTE)
        if is_public_suffix is not None and is_public_suffix(domain):
            if domain != context.host:
                return (None, REJECT_CROSS_DOMAIN)
            domain = None
        elif not matching.can_set_domain(domain, context.host):
            return (None, REJECT_CROSS_DOMAIN)
    if not domain:
        domain, host_only = context.host, True
    # Path.
    path = candidate.path or matching.default_path(context.path)
    # Expiry; Max-Age takes precedence over Expires. Expiry times are whole
    # seconds, as the Expires attribute cannot convey more.
    if candidate.max_age is not None:
        if candidate.max_age <= 0:
            expires = min(math.floor(now), 0)
        else:
            expires = min(math.floor(now) + candidate.max_age, MAX_TIMESTAMP)
    else:
        expires = candidate.expires
    # Security policies.
    same_site = candidate.same_site or SAMESITE_DEFAULT
    if same_site == SAMESITE_NONE and not candidate.secure:
        return (None, REJECT_INSECURE_SAMESITE)
    if candidate.secure and not context.secure:
        return (None, REJECT_SECURE_OVERWRITE)
    if candidate.http_only and not context.http:
        return (None, REJECT_NON_HTTP_API)
    if not _check_prefixes(candidate, host_only):
        return (None, REJECT_INVALID_ATTRIBUTE)
    return (Cookie(candidate.name, candidate.value, domain, path, expires,
                   host_only, candidate.secure, candidate.http_only,
                   same_site, candidate.extensions, now, now), None)

def check_cookie(cookie, context, is_public_suffix=None):
    """
    check_cookie(cookie, context, is_public_suffix=None) -> reason or None

    Validate an already constructed Cookie as if it had been received in
    the response to the request described by context: the name and value
    must be well-formed, the domain must be one the request's host may
    set cookies for, and the same-context policies as in resolve() apply.
    Returns None if the cookie is acceptable, and one of the PARSE_* or
    REJECT_* constants otherwise.
    """
    if not grammar.is_token(cookie.name):
        return PARSE_INVALID_NAME
    if not grammar.is_cookie_value(cookie.value):
        return PARSE_INVALID_VALUE
    if not cookie.domain or not cookie.path.startswith('/'):
        return REJECT_INVALID_ATTRIBUTE
    if cookie.host_only:
        if cookie.domain != context.host:
            return REJECT_CROSS_DOMAIN
    elif ((is_public_suffix is not None and is_public_suffix(cookie.domain))
            or not matching.can_set_domain(cookie.domain, context.host)):
        return REJECT_CROSS_DOMAIN
    if cookie.same_site == SAMESITE_NONE and not cookie.secure:
        return REJECT_INSECURE_SAMESITE
    if cookie.secure and not context.secure:
        return REJECT_SECURE_OVERWRITE
    if cookie.http_only and not context.http:
        return REJECT_NON_HTTP_API
    if not _check_prefixes(cookie, cookie.host_only):
        return REJECT_INVALID_ATTRIBUTE
    return None

def parse(string, context, now=None, is_public_suffix=None):
    """
    parse(string, context, now=None, is_public_suffix=None)
        -> (Cookie, None) or (None, reason)

    Parse the given Set-Cookie header value, received in the response to
    the request described by context, and resolve it into a Cookie. The
    result is as for resolve(); parse errors are reported as (None,
    reason) with reason being one of the PARSE_* constants.
    """
    try:
        candidate = grammar.parse_set_cookie(string)
    except ParseError as exc:
        log.debug('Declining cookie from %s: %s', context.host, exc)
        return (None, exc.reason)
    cookie, reason = resolve(candidate, context, now, is_public_suffix)
    if cookie is None:
        log.debug('Rejecting cookie %r from %s: %s', candidate.name,
                  context.host, reason)
    return (cookie, reason)

def format_set_cookie(cookie):
    """
    format_set_cookie(cookie) -> str

    Format the given cookie suitable for a Set-Cookie: header value.
    A convenience wrapper around cookie.format('set').
    """
    return cookie.format('set')

def format_cookie_header(cookies):
    """
    format_cookie_header(cookies) -> str

    Format the given cookies (Cookie instances or (name, value) pairs)
    into a Cookie: header value, preserving their order. Only names and
    values are included. An empty string is returned if there are no
    cookies; the header should be omitted in that case.
    """
    pairs = ((c.name, c.value) if isinstance(c, Cookie) else c
             for c in cookies)
    return '; '.join('%s=%s' % p for p in pairs)

class ResponseCookies:
    """
    ResponseCookies(context, defaults=None) -> new instance

    This class automates the server side of cookie handling for a single
    request-response exchange: it collects the cookies the client sent
    and the cookies to be issued in the response. context is the
    RequestContext of the request being answered. defaults is a mapping
    of keyword arguments for Cookie.create() applied to every cookie
    issued through set() (such as {'http_only': True, 'path': '/'});
    explicitly passed attributes override them.

    Instance attributes are:
    context : The context passed to the constructor.
    defaults: The defaults passed to the constructor (as a dict).
    received: A list of (name, value) pairs sent by the client.
    issued  : A mapping from cookie names to the Cookie instances to be
              sent to the client.
    """

    def __init__(self, context, defaults=None):
        """
        __init__(context, defaults=None) -> None

        See class docstring for details.
        """
        self.context = context
        self.defaults = dict(defaults or ())
        self.received = []
        self.issued = {}

    def __contains__(self, name):
        """
        name in self -> bool

        Return whether the client sent a cookie with the given name.
        """
        return any(n == name for n, v in self.received)

    def load(self, header_values):
        """
        load(header_values) -> None

        Incorporate the cookies from the given Cookie: request header
        values (an iterable of strings).
        """
        for v in header_values:
            self.received.extend(grammar.parse_cookie_header(v))

    def get_all(self, name):
        """
        get_all(name) -> list

        Return the values of all received cookies with the given name, in
        the order the client sent them (which is most specific first).
        """
        return [v for n, v in self.received if n == name]

    def get(self, name, default=None):
        """
        get(name, default=None) -> str

        Return the value of the first received cookie with the given name,
        or default if there is none.
        """
        for n, v in self.received:
            if n == name: return v
        return default

    def set(self, name, value, **attrs):
        """
        set(name, value, **attrs) -> Cookie

        Create a cookie with the given name, value, and attributes (see
        Cookie.create() for the available ones), schedule it for issuing,
        and return it.
        """
        kwds = dict(self.defaults, **attrs)
        cookie = Cookie.create(name, value, self.context, **kwds)
        self.issued[name] = cookie
        return cookie

    def delete(self, name, **attrs):
        """
        delete(name, **attrs) -> Cookie

        Schedule an instruction for the client to delete the cookie with
        the given name (i.e. an already-expired cookie with an empty value)
        and return it. The domain and path must match those the cookie was
        issued with; they are taken from the defaults unless given.
        """
        attrs['max_age'] = 0
        attrs.pop('expires', None)
        return self.set(name, '', **attrs)

    def header_values(self):
        """
        header_values() -> list

        Return the Set-Cookie: header values for the issued cookies; each
        must be sent as a header of its own.
        """
        return [format_set_cookie(c) for c in self.issued.values()]

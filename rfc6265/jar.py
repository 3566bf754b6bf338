# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
Cookie storage.

A CookieJar holds the cookies received by a client, decides which
Set-Cookie headers are honored, and selects and orders the cookies to be
sent back with each request (RFC 6265, Sections 5.3 and 5.4).
"""

import time
import logging
import threading
import collections

from . import cookies as _cookies
from . import grammar, matching
from .constants import (CREATED, UPDATED, DELETED, REJECTED, SAMESITE_NONE,
                        REJECT_SECURE_OVERWRITE, REJECT_NON_HTTP_API,
                        REJECT_CAPACITY, DEFAULT_MAX_COOKIES,
                        DEFAULT_MAX_PER_DOMAIN)
from .exceptions import UsageError
from .tools import AtomicSequence

__all__ = ['InsertOutcome', 'CookieJar']

log = logging.getLogger(__name__)

class InsertOutcome(collections.namedtuple('InsertOutcome',
                                           'status reason cookie')):
    """
    InsertOutcome(status, reason=None, cookie=None) -> new instance

    The result of offering a cookie to a CookieJar. status is one of the
    CREATED, UPDATED, DELETED, or REJECTED constants; reason is one of
    the REJECT_* or PARSE_* constants if status is REJECTED, and None
    otherwise. cookie is a copy of the stored cookie for CREATED and
    UPDATED, a copy of the removed cookie (if any) for DELETED, and None
    for REJECTED.
    """

    __slots__ = ()

    def __new__(cls, status, reason=None, cookie=None):
        """
        __new__(cls, status, reason=None, cookie=None) -> new instance

        See class docstring for details.
        """
        return super().__new__(cls, status, reason, cookie)

    @property
    def accepted(self):
        """
        Whether the jar acted upon the cookie (i.e. did not reject it).
        """
        return self.status != REJECTED

def _lru_key(cookie):
    "Sorting key placing the least recently accessed cookies first."
    return (cookie.last_access, cookie._access_seq)

def _order_key(cookie):
    "Sorting key for the Cookie: header order of RFC 6265, Section 5.4."
    return (-len(cookie.path), cookie.created, cookie._created_seq)

def _restorable(cookie):
    "Test the request-independent invariants of a stored cookie."
    if cookie.same_site == SAMESITE_NONE and not cookie.secure:
        return False
    return bool(cookie.domain and cookie.path.startswith('/') and
                grammar.is_token(cookie.name) and
                grammar.is_cookie_value(cookie.value))

class CookieJar:
    """
    CookieJar(max_cookies=3000, max_per_domain=50, is_public_suffix=None,
              clock=None) -> new instance

    A cookie jar contains cookies. This class implements the storage,
    management, and retrieval of cookies, providing a dedicated interface
    for that.

    max_cookies and max_per_domain limit the total amount of cookies and
    the amount of cookies per (canonical) domain, respectively; None
    disables the corresponding limit. When a limit is exceeded, the least
    recently accessed cookies are evicted. is_public_suffix is a function
    determining whether a domain is a public suffix (see
    matching.can_set_domain()), or None to accept any domain. clock is a
    function returning the current time as a UNIX timestamp; it defaults
    to time.time().

    Instance attributes are:
    lock: The reentrant lock protecting this instance.
    The constructor arguments are stored in same-named attributes. The
    stored cookies themselves are private; use snapshot() or iteration to
    inspect them.

    Every public method is atomic with respect to the others. CookieJar
    additionally implements the context manager protocol, asserting its
    lock while "entered", to make sequences of calls atomic. Cookies
    returned by the methods are copies; modifying them does not affect
    the jar.
    """

    def __init__(self, max_cookies=DEFAULT_MAX_COOKIES,
                 max_per_domain=DEFAULT_MAX_PER_DOMAIN, is_public_suffix=None,
                 clock=None):
        """
        __init__(max_cookies=3000, max_per_domain=50, is_public_suffix=None,
                 clock=None) -> None

        See the class docstring for details.
        """
        for name, value in (('max_cookies', max_cookies),
                            ('max_per_domain', max_per_domain)):
            if value is not None and (not isinstance(value, int) or
                                      value < 0):
                raise UsageError('Invalid %s: %r' % (name, value))
        if clock is None: clock = time.time
        self.max_cookies = max_cookies
        self.max_per_domain = max_per_domain
        self.is_public_suffix = is_public_suffix
        self.clock = clock
        self._cookies = {}
        self.lock = threading.RLock()
        self._domains = {}
        self._sequence = AtomicSequence(lock=self.lock)

    def __enter__(self):
        "Context manager entry; see class docstring for details."
        return self.lock.__enter__()
    def __exit__(self, *args):
        "Context manager exit; see class docstring for details."
        self.lock.__exit__(*args)

    def __repr__(self):
        """
        repr(self) -> str

        Return a programmer-friendly string representation of self.
        """
        with self:
            return '<%s%s>' % (self.__class__.__name__,
                               list(self._cookies.values()))

    def __len__(self):
        """
        len(self) -> int

        Return the amount of cookies stored in self.
        """
        with self:
            return len(self._cookies)

    def __contains__(self, obj):
        """
        obj in self -> bool

        Return whether a cookie with the given key (or the key of the given
        cookie) is contained in self.
        """
        if isinstance(obj, _cookies.Cookie): obj = obj.key
        with self:
            return obj in self._cookies

    def __iter__(self):
        """
        iter(self) -> iter

        Return an iterator over copies of all cookies in self.
        """
        return iter(self.snapshot())

    def _store(self, cookie):
        "Add cookie to the internal data structures."
        self._cookies[cookie.key] = cookie
        self._domains.setdefault(cookie.domain, set()).add(cookie.key)

    def _remove(self, key):
        "Remove the cookie with the given key and return it."
        cookie = self._cookies.pop(key)
        bucket = self._domains[key[0]]
        bucket.discard(key)
        if not bucket: del self._domains[key[0]]
        return cookie

    def _shadows_secure(self, cookie, now):
        """
        Return whether cookie would overwrite or shadow a secure cookie,
        i.e. there is a fresh secure cookie with the same name, a domain
        domain-matching cookie's (or vice versa), and a path cookie's path
        path-matches.
        """
        for c in self._cookies.values():
            if not c.secure or c.name != cookie.name: continue
            if c.is_expired(now): continue
            if not (matching.domain_match(c.domain, cookie.domain) or
                    matching.domain_match(cookie.domain, c.domain)):
                continue
            if matching.path_match(c.path, cookie.path):
                return True
        return False

    def _evict_lru(self, keys, excess, protect):
        """
        Evict the excess least recently accessed cookies from keys, sparing
        protect unless there are not enough other cookies. Return whether
        protect has been evicted.
        """
        victims = sorted((self._cookies[k] for k in keys if k != protect),
                         key=_lru_key)
        for c in victims[:excess]:
            log.debug('Evicting cookie %r for %s', c.name, c.domain)
            self._remove(c.key)
        if excess > len(victims) and protect in self._cookies:
            log.debug('Evicting just-stored cookie %r for %s', protect[1],
                      protect[0])
            self._remove(protect)
            return True
        return False

    def _evict(self, now, protect=None):
        """
        Back-end of evict_if_over_capacity(); see there. Returns whether
        protect (a key) has been evicted.
        """
        evicted = False
        if self.max_per_domain is not None:
            for domain in list(self._domains):
                if len(self._domains[domain]) <= self.max_per_domain:
                    continue
                self._purge(lambda c: c.domain == domain and
                            c.is_expired(now))
                bucket = self._domains.get(domain, ())
                excess = len(bucket) - self.max_per_domain
                if excess <= 0: continue
                evicted |= self._evict_lru(list(bucket), excess, protect)
        if self.max_cookies is not None:
            excess = len(self._cookies) - self.max_cookies
            if excess > 0:
                self._purge(lambda c: c.is_expired(now))
                excess = len(self._cookies) - self.max_cookies
            if excess > 0:
                evicted |= self._evict_lru(list(self._cookies), excess,
                                           protect)
        return evicted

    def _purge(self, predicate):
        "Remove every cookie matching predicate; return the amount."
        keys = [k for k, c in self._cookies.items() if predicate(c)]
        for k in keys:
            self._remove(k)
        return len(keys)

    def _insert(self, cookie, context, now):
        """
        Back-end of insert() and process_set_cookie(). cookie is owned by
        the jar from this point on.
        """
        key = cookie.key
        old = self._cookies.get(key)
        if not context.secure and self._shadows_secure(cookie, now):
            log.debug('Rejecting cookie %r from %s: would overwrite a '
                      'secure cookie', cookie.name, context.host)
            return InsertOutcome(REJECTED, REJECT_SECURE_OVERWRITE)
        if old is not None and old.http_only and not context.http:
            log.debug('Rejecting cookie %r from non-HTTP API: would '
                      'overwrite an HttpOnly cookie', cookie.name)
            return InsertOutcome(REJECTED, REJECT_NON_HTTP_API)
        if cookie.is_expired(now):
            if old is not None:
                log.debug('Deleting cookie %r for %s', cookie.name,
                          cookie.domain)
                self._remove(key)
                old = old.copy()
            return InsertOutcome(DELETED, None, old)
        if old is None:
            status = CREATED
            cookie.created = now
            cookie._created_seq = self._sequence()
        else:
            # Updates preserve the creation time (RFC 6265, Section 5.3,
            # step 11.3).
            status = UPDATED
            cookie.created = old.created
            cookie._created_seq = old._created_seq
        cookie.last_access = now
        cookie._access_seq = self._sequence()
        self._store(cookie)
        if self._evict(now, key):
            return InsertOutcome(REJECTED, REJECT_CAPACITY)
        return InsertOutcome(status, None, cookie.copy())

    def insert(self, cookie, context):
        """
        insert(cookie, context) -> InsertOutcome

        Offer the given cookie (as obtained from cookies.resolve() or
        cookies.parse()), which has been received in the response to the
        request described by context, to the jar. The cookie is first
        validated against context as by cookies.check_cookie(), and
        rejected with the corresponding reason if that fails. If the
        cookie has already expired, any stored cookie with the same key is
        removed. Otherwise, the cookie is stored, replacing any cookie with
        the same key (while retaining its creation time); then, capacity
        limits are enforced. An insecure context may not overwrite (or
        shadow) secure cookies, and a non-HTTP context may not overwrite
        HttpOnly ones.
        """
        reason = _cookies.check_cookie(cookie, context, self.is_public_suffix)
        if reason is not None:
            log.debug('Rejecting cookie %r from %s: %s', cookie.name,
                      context.host, reason)
            return InsertOutcome(REJECTED, reason)
        with self:
            return self._insert(cookie.copy(), context, self.clock())

    def process_set_cookie(self, context, string):
        """
        process_set_cookie(context, string) -> InsertOutcome

        Parse the given Set-Cookie: header value and update the cookie
        jar as necessary.
        context is the RequestContext of the request in whose response the
        cookie was received; string is the actual Set-Cookie header value.
        Parse errors and policy violations are reported via the outcome's
        status and reason; this never raises for malformed input.
        """
        with self:
            now = self.clock()
            cookie, reason = _cookies.parse(string, context, now,
                                            self.is_public_suffix)
            if cookie is None:
                return InsertOutcome(REJECTED, reason)
            return self._insert(cookie, context, now)

    def retrieve(self, context):
        """
        retrieve(context) -> list

        Return copies of the cookies to be sent in the request described
        by context, in the order they should appear in the Cookie: header:
        cookies with longer paths first, and among equal paths, earlier
        created cookies first. The last access time of the returned
        cookies is updated; expired cookies encountered are removed.
        """
        with self:
            now = self.clock()
            ret = []
            for key, c in list(self._cookies.items()):
                if not c.matches(context): continue
                if c.is_expired(now):
                    self._remove(key)
                    continue
                ret.append(c)
            ret.sort(key=_order_key)
            for c in ret:
                c.last_access = now
                c._access_seq = self._sequence()
            return [c.copy() for c in ret]

    def format_cookie(self, context):
        """
        format_cookie(context) -> str

        Format a ready-to-use Cookie: header value for sending in the
        request described by context; an empty string means that the
        header should be omitted.
        """
        return _cookies.format_cookie_header(self.retrieve(context))

    def evict_if_over_capacity(self):
        """
        evict_if_over_capacity() -> int

        Enforce the capacity limits: expired cookies are removed from the
        domains (or the jar) over the limits, then the least recently
        accessed cookies of every domain exceeding max_per_domain, then
        the least recently accessed cookies overall until at most
        max_cookies remain. Returns the amount of cookies evicted.
        """
        with self:
            count = len(self._cookies)
            self._evict(self.clock())
            return count - len(self._cookies)

    def remove(self, key):
        """
        remove(key) -> bool

        Remove the cookie with the given (domain, name, path) key, or the
        cookie with the same key as the given cookie. Returns whether such
        a cookie was present.
        """
        if isinstance(key, _cookies.Cookie): key = key.key
        with self:
            if key not in self._cookies: return False
            self._remove(key)
            return True

    def clear(self, domain=None):
        """
        clear(domain=None) -> int

        Evict some or all cookies from the jar and return their amount.
        If domain is not None, only cookies whose domain domain-matches
        it are removed.

        NOTE that the matching relation is reversed in comparison to
             querying, i.e., evicting cookies for "example.com" will
             also remove such for "test.example.com".
        """
        with self:
            if domain is None:
                count = len(self._cookies)
                self._cookies.clear()
                self._domains.clear()
                return count
            try:
                domain = matching.canonical_host(domain.lstrip('.'))
            except UnicodeError as exc:
                raise UsageError('Invalid domain %r: %s' % (domain, exc))
            return self._purge(lambda c: matching.domain_match(domain,
                                                               c.domain))

    def purge_expired(self):
        """
        purge_expired() -> int

        Remove expired cookies from the jar and return their amount.
        Expired cookies are never returned by retrieve() in any case.
        """
        with self:
            now = self.clock()
            return self._purge(lambda c: c.is_expired(now))

    def purge_session_cookies(self):
        """
        purge_session_cookies() -> int

        Remove all session cookies (i.e. those without an expiry time)
        from the jar and return their amount. The embedding application
        should call this when its "session" ends.
        """
        with self:
            return self._purge(lambda c: not c.persistent)

    def snapshot(self):
        """
        snapshot() -> list

        Return copies of all cookies in the jar, ordered by creation. This
        is suitable for persisting the jar; see restore().
        """
        with self:
            ret = sorted(self._cookies.values(),
                         key=lambda c: (c.created, c._created_seq))
            return [c.copy() for c in ret]

    def restore(self, cookies):
        """
        restore(cookies) -> int

        Store the given cookies (e.g. as returned by snapshot()),
        preserving their creation and access times, and replacing stored
        cookies with the same keys. No request-dependent policy checks are
        performed; expired cookies are skipped, as are cookies that could
        never have been stored (such as SameSite=None cookies lacking the
        Secure attribute). Capacity limits are enforced afterwards.
        Returns the amount of cookies stored.
        """
        with self:
            now = self.clock()
            count = 0
            for c in sorted(cookies, key=lambda c: c.created):
                if c.is_expired(now): continue
                if not _restorable(c):
                    log.debug('Not restoring invalid cookie %r for %s',
                              c.name, c.domain)
                    continue
                c = c.copy()
                c._created_seq = self._sequence()
                c._access_seq = c._created_seq
                if c.key in self._cookies: self._remove(c.key)
                self._store(c)
                count += 1
            self._evict(now)
            return count

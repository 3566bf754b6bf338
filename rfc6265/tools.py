# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
Various tools and utilities.
"""

import re
import threading
import calendar
import collections.abc
import email.utils

from .constants import MAX_TIMESTAMP

__all__ = ['MONTH_NAMES', 'format_http_date', 'parse_http_date',
           'CaseDict', 'AtomicSequence']

# The English month names as three-letter abbreviations.
MONTH_NAMES = {1: 'Jan',  2: 'Feb',  3: 'Mar',  4: 'Apr',
               5: 'May',  6: 'Jun',  7: 'Jul',  8: 'Aug',
               9: 'Sep', 10: 'Oct', 11: 'Nov', 12: 'Dec'}

# Reverse mapping for parsing; keys are lower-case.
MONTH_NUMBERS = dict((v.lower(), k) for k, v in MONTH_NAMES.items())

# Productions of the cookie-date grammar (RFC 6265, Section 5.1.1).
DATE_DELIMITER_RE = re.compile(r'[\x09\x20-\x2f\x3b-\x40\x5b-\x60\x7b-\x7e]+')
DATE_TIME_RE = re.compile(r'^(\d{1,2}):(\d{1,2}):(\d{1,2})(?:\D.*)?$', re.S)
DATE_DAY_RE = re.compile(r'^(\d{1,2})(?:\D.*)?$', re.S)
DATE_YEAR_RE = re.compile(r'^(\d{2,4})(?:\D.*)?$', re.S)

def format_http_date(t):
    """
    format_http_date(t) -> str

    Return a string represententing the given UNIX timestamp in the
    RFC 1123 format, suitable for inclusion into HTTP headers (in
    particular, into the Expires attribute of Set-Cookie).
    """
    return email.utils.formatdate(min(t, MAX_TIMESTAMP), usegmt=True)

def parse_http_date(s):
    """
    parse_http_date(s) -> int

    Parse a timestamp as it occurs in the Expires cookie attribute and
    return the corresponding UNIX time. Implements the lenient algorithm
    of RFC 6265, Section 5.1.1, which accepts the RFC 1123, RFC 850, and
    asctime() formats (among a lot of garbage). Raises a ValueError if s
    cannot be parsed.
    """
    time_, day, month, year = None, None, None, None
    for token in DATE_DELIMITER_RE.split(s):
        if not token: continue
        if time_ is None:
            m = DATE_TIME_RE.match(token)
            if m:
                time_ = tuple(int(n, 10) for n in m.groups())
                continue
        if day is None:
            m = DATE_DAY_RE.match(token)
            if m:
                day = int(m.group(1), 10)
                continue
        if month is None:
            month = MONTH_NUMBERS.get(token[:3].lower())
            if month is not None:
                continue
        if year is None:
            m = DATE_YEAR_RE.match(token)
            if m:
                year = int(m.group(1), 10)
                continue
    if None in (time_, day, month, year):
        raise ValueError('Unrecognized date-time string: %r' % (s,))
    if 70 <= year <= 99:
        year += 1900
    elif 0 <= year <= 69:
        year += 2000
    hour, minute, second = time_
    if (year < 1601 or hour > 23 or minute > 59 or second > 59 or
            not 1 <= day <= calendar.monthrange(year, month)[1]):
        raise ValueError('Invalid date-time: %r' % (s,))
    ret = calendar.timegm((year, month, day, hour, minute, second, 0, 0, 0))
    return min(ret, MAX_TIMESTAMP)

class CaseDict(collections.abc.MutableMapping):
    """
    CaseDict(source=(), **update) -> new instance

    A mapping with case-insensitive (string) keys (the class name is
    abbreviated from CaseInsensitiveDict). See the dict constructor for
    the meanings of the arguments. Iteration preserves the case of the
    keys at the time of insertion.
    """

    def __init__(_self, _source=(), **_update):
        """
        __init__(source=(), **update) -> None

        See class docstring for details.
        """
        super().__init__()
        _self._data = {}
        _self._keys = {}
        _self.update(_source, **_update)

    def __repr__(self):
        """
        repr(self) -> str

        Return a programmer-friendly string representation of self.
        """
        return '%s(%r)' % (self.__class__.__name__, self._data)

    def __eq__(self, other):
        """
        self == other -> bool

        Compare the lower-cased items of self and other.
        """
        if not isinstance(other, collections.abc.Mapping):
            return NotImplemented
        return (dict((k.lower(), v) for k, v in self.items()) ==
                dict((k.lower(), v) for k, v in other.items()))

    def __iter__(self):
        """
        iter(self) -> iter

        Return an iterator over self.
        """
        return iter(self._data)

    def __len__(self):
        """
        len(self) -> int

        Return the length of self.
        """
        return len(self._data)

    def __contains__(self, key):
        """
        key in self -> bool

        Check whether the given key is contained in self.
        """
        return (key.lower() in self._keys)

    def __getitem__(self, key):
        """
        self[key] -> value

        Return the value associated with the given key.
        """
        return self._data[self._keys[key.lower()]]

    def __setitem__(self, key, value):
        """
        self[key] = value

        Assign the given value to the given key.
        """
        self._data[self._keys.setdefault(key.lower(), key)] = value

    def __delitem__(self, key):
        """
        del self[key]

        Remove the given key from self.
        """
        lower_key = key.lower()
        del self._data[self._keys[lower_key]]
        del self._keys[lower_key]

    def copy(self):
        """
        copy() -> CaseDict

        Return a shallow copy of self.
        """
        return self.__class__(self._data)

class AtomicSequence:
    """
    AtomicSequence(start=0, lock=None) -> new instance

    A thread-safe counter. Each time an instance is called it returns the
    current value of an internal counter (which is initialized with start)
    and increments the counter. lock specifies the lock to synchonize on;
    if None is passed, a new lock is created internally.

    Cookie jars use these to order cookies whose timestamps coincide.
    """

    def __init__(self, start=0, lock=None):
        """
        __init__(start=0, lock=None) -> None

        Instance initializer; see the class docstring for details.
        """
        if lock is None: lock = threading.RLock()
        self.counter = start
        self.lock = lock

    def __call__(self):
        """
        __call__() -> int

        Increment the internal counter and return its value *before* the
        increment.
        """
        with self.lock:
            ret = self.counter
            self.counter += 1
            return ret

    def advance(self, value):
        """
        advance(value) -> None

        Ensure that subsequently returned values are greater than value.
        Used when restoring previously issued sequence numbers.
        """
        with self.lock:
            if value >= self.counter:
                self.counter = value + 1

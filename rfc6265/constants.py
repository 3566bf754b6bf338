# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
Various constants.
"""

# Outcomes of inserting a cookie into a jar.

CREATED  = 'Created'  # A new record was stored
UPDATED  = 'Updated'  # An existing record was replaced
DELETED  = 'Deleted'  # An expired cookie removed its stored counterpart
REJECTED = 'Rejected' # Nothing was stored; see the reason

OUTCOMES = (CREATED, UPDATED, DELETED, REJECTED)

# Grammar-level failures (reasons carried by ParseError).

PARSE_EMPTY         = 'Empty'        # No name=value pair at all
PARSE_INVALID_NAME  = 'InvalidName'  # Empty name or forbidden octets
PARSE_INVALID_VALUE = 'InvalidValue' # Forbidden octets in the value

PARSE_ERRORS = (PARSE_EMPTY, PARSE_INVALID_NAME, PARSE_INVALID_VALUE)

# Policy-level rejections.

REJECT_CROSS_DOMAIN       = 'CrossDomain'
REJECT_INSECURE_SAMESITE  = 'InsecureSameSiteNone'
REJECT_SECURE_OVERWRITE   = 'SecureOverwriteBlocked'
REJECT_CAPACITY           = 'CapacityExceeded'
REJECT_INVALID_ATTRIBUTE  = 'InvalidAttribute'
REJECT_NON_HTTP_API       = 'NonHttpApi'

REJECT_REASONS = (REJECT_CROSS_DOMAIN, REJECT_INSECURE_SAMESITE,
                  REJECT_SECURE_OVERWRITE, REJECT_CAPACITY,
                  REJECT_INVALID_ATTRIBUTE, REJECT_NON_HTTP_API)

# SameSite attribute values.

SAMESITE_STRICT = 'Strict'
SAMESITE_LAX    = 'Lax'
SAMESITE_NONE   = 'None'

# Lower-case-to-canonical mapping
SAMESITE_VALUES = {'strict': SAMESITE_STRICT, 'lax': SAMESITE_LAX,
                   'none': SAMESITE_NONE}

SAMESITE_DEFAULT = SAMESITE_LAX

# Recognized attribute names, lower-case-to-canonical.
ATTRIBUTES = {'expires': 'Expires', 'max-age': 'Max-Age',
              'domain': 'Domain', 'path': 'Path', 'secure': 'Secure',
              'httponly': 'HttpOnly', 'samesite': 'SameSite'}

# Cookie name prefixes with extra requirements.
PREFIX_SECURE = '__Secure-'
PREFIX_HOST   = '__Host-'

# Storage limits (RFC 6265, Section 6.1 gives the minimums).

DEFAULT_MAX_COOKIES    = 3000
DEFAULT_MAX_PER_DOMAIN = 50

# Latest representable expiry (9999-12-31 23:59:59 UTC); later ones are
# clamped to it.
MAX_TIMESTAMP = 253402300799

# URL schemes.

SECURE_SCHEMES = ('https', 'wss')
HTTP_SCHEMES   = ('http', 'https', 'ws', 'wss')

# Values interesting for an import *.
__all__ = (['CREATED', 'UPDATED', 'DELETED', 'REJECTED', 'OUTCOMES',
            'PARSE_ERRORS', 'REJECT_REASONS', 'SAMESITE_VALUES',
            'SAMESITE_DEFAULT', 'DEFAULT_MAX_COOKIES',
            'DEFAULT_MAX_PER_DOMAIN'] +
           ['PARSE_%s' % i for i in ('EMPTY', 'INVALID_NAME',
                                     'INVALID_VALUE')] +
           ['REJECT_%s' % i for i in ('CROSS_DOMAIN', 'INSECURE_SAMESITE',
                                      'SECURE_OVERWRITE', 'CAPACITY',
                                      'INVALID_ATTRIBUTE', 'NON_HTTP_API')] +
           ['SAMESITE_%s' % i for i in ('STRICT', 'LAX', 'NONE')])

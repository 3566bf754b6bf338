# rfc6265 -- HTTP cookie parsing, matching, and storage

"""
Domain and path matching.

All functions in this module are pure. Domains passed to them are
expected to be canonical (see canonical_host()).
"""

import ipaddress

__all__ = ['canonical_host', 'is_ip_address', 'domain_match', 'path_match',
           'default_path', 'can_set_domain', 'single_label_suffix']

def canonical_host(host):
    """
    canonical_host(host) -> str

    Canonicalize the given host name as described in RFC 6265, Section
    5.1.2: convert it to lower case, and non-ASCII labels to their
    IDNA ("xn--") form. Brackets around IPv6 literals are removed.
    Raises a UnicodeError if host cannot be IDNA-encoded.
    """
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    if not host.isascii():
        host = host.encode('idna').decode('ascii')
    return host.lower()

def is_ip_address(host):
    """
    is_ip_address(host) -> bool

    Return whether host is an IPv4 or IPv6 address literal.
    """
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True

def domain_match(cookie_domain, request_host):
    """
    domain_match(cookie_domain, request_host) -> bool

    Return whether request_host "domain-matches" cookie_domain as defined
    by RFC 6265, Section 5.1.3: either both are identical, or
    cookie_domain is a suffix of request_host preceded by a dot, and
    request_host is not an IP address.
    """
    if cookie_domain == request_host:
        # Equal domains always match.
        return True
    if not request_host.endswith('.' + cookie_domain):
        # request_host must have cookie_domain as a dot-separated suffix.
        return False
    # IP addresses only match themselves.
    return not is_ip_address(request_host)

def path_match(cookie_path, request_path):
    """
    path_match(cookie_path, request_path) -> bool

    Return whether request_path "path-matches" cookie_path as defined by
    RFC 6265, Section 5.1.4.
    """
    if request_path == cookie_path:
        return True
    if not request_path.startswith(cookie_path):
        return False
    return (cookie_path.endswith('/') or
            request_path[len(cookie_path)] == '/')

def default_path(request_path):
    """
    default_path(request_path) -> str

    Compute the default cookie path from the path of the request URI as
    described in RFC 6265, Section 5.1.4: everything up to (but not
    including) the last slash, or "/" if there is at most one slash (or
    request_path is not absolute).
    """
    if not request_path.startswith('/') or request_path.count('/') <= 1:
        return '/'
    return request_path[:request_path.rindex('/')]

def can_set_domain(candidate_domain, issuing_host, is_public_suffix=None):
    """
    can_set_domain(candidate_domain, issuing_host, is_public_suffix=None)
        -> bool

    Return whether a response from issuing_host may set a cookie whose
    Domain attribute is candidate_domain: the latter must be equal to
    issuing_host or a superdomain of it. is_public_suffix, if not None, is
    a function taking a domain name and returning whether it is a public
    suffix (such as "com" or "co.uk"); cookies for public suffixes are
    only permitted if they equal issuing_host.
    """
    if candidate_domain == issuing_host:
        return True
    if not domain_match(candidate_domain, issuing_host):
        return False
    if is_public_suffix is not None and is_public_suffix(candidate_domain):
        return False
    return True

def single_label_suffix(domain):
    """
    single_label_suffix(domain) -> bool

    A conservative stand-in for a public suffix list: consider every
    domain consisting of a single label (e.g. "com", but also "localhost")
    a public suffix. Suitable as the is_public_suffix argument of
    can_set_domain() and CookieJar.
    """
    return '.' not in domain and not is_ip_address(domain)

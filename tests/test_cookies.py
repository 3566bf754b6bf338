"""Tests for rfc6265.cookies -- record construction and header codecs."""

import pytest

from rfc6265.constants import (PARSE_EMPTY, PARSE_INVALID_NAME,
                               PARSE_INVALID_VALUE, REJECT_CROSS_DOMAIN,
                               REJECT_INSECURE_SAMESITE,
                               REJECT_INVALID_ATTRIBUTE, REJECT_NON_HTTP_API,
                               REJECT_SECURE_OVERWRITE, SAMESITE_LAX,
                               SAMESITE_NONE, SAMESITE_STRICT)
from rfc6265.cookies import (Cookie, RequestContext, ResponseCookies,
                             check_cookie, format_cookie_header,
                             format_set_cookie, parse)
from rfc6265.exceptions import ParseError, UsageError
from rfc6265.matching import single_label_suffix

NOW = 1000

WWW = RequestContext("www.example.com", "/dir/page", secure=False)
WWW_TLS = RequestContext("www.example.com", "/dir/page", secure=True)


def accept(string, context=WWW, **kwds):
    cookie, reason = parse(string, context, NOW, **kwds)
    assert reason is None, reason
    return cookie


def reject(string, context=WWW, **kwds):
    cookie, reason = parse(string, context, NOW, **kwds)
    assert cookie is None
    return reason


class TestRequestContext:
    def test_canonicalizes_host(self) -> None:
        assert RequestContext("WWW.Example.COM").host == "www.example.com"

    def test_defaults(self) -> None:
        ctx = RequestContext("example.com")
        assert (ctx.path, ctx.secure, ctx.http) == ("/", False, True)

    def test_empty_path(self) -> None:
        assert RequestContext("example.com", "").path == "/"

    def test_empty_host_is_usage_error(self) -> None:
        with pytest.raises(UsageError):
            RequestContext("")

    def test_relative_path_is_usage_error(self) -> None:
        with pytest.raises(UsageError):
            RequestContext("example.com", "relative")

    def test_from_url(self) -> None:
        ctx = RequestContext.from_url("https://WWW.Example.com:8443/a/b?q=1")
        assert (ctx.host, ctx.path, ctx.secure, ctx.http) == (
            "www.example.com", "/a/b", True, True)
        assert ctx.site is None
        assert not ctx.navigation

    def test_from_url_schemes(self) -> None:
        assert not RequestContext.from_url("http://example.com").secure
        assert RequestContext.from_url("wss://example.com/").secure
        assert not RequestContext.from_url("ftp://example.com/").http

    def test_from_url_without_host(self) -> None:
        with pytest.raises(UsageError):
            RequestContext.from_url("/just/a/path")

    def test_from_url_site(self) -> None:
        ctx = RequestContext.from_url("https://example.com/", site="Other.ORG",
                                      navigation=True)
        assert (ctx.site, ctx.navigation) == ("other.org", True)

    @pytest.mark.parametrize(
        ("site", "cross_site"),
        [
            (None, False),
            ("www.example.com", False),
            ("example.com", False),
            ("api.www.example.com", False),
            ("example.org", True),
            ("other.example.com", True),
        ],
    )
    def test_cross_site(self, site, cross_site) -> None:
        ctx = RequestContext("www.example.com", site=site)
        assert ctx.cross_site is cross_site

    def test_empty_site_is_usage_error(self) -> None:
        with pytest.raises(UsageError):
            RequestContext("example.com", site="")


class TestResolveDomain:
    def test_host_only_by_default(self) -> None:
        c = accept("a=b")
        assert c.domain == "www.example.com"
        assert c.host_only

    def test_domain_attribute(self) -> None:
        c = accept("a=b; Domain=.Example.com")
        assert c.domain == "example.com"
        assert not c.host_only

    def test_domain_equal_to_host(self) -> None:
        c = accept("a=b; Domain=www.example.com")
        assert c.domain == "www.example.com"
        assert not c.host_only

    def test_cross_domain(self) -> None:
        assert reject("a=b; Domain=other.com") == REJECT_CROSS_DOMAIN
        assert reject("a=b; Domain=sub.www.example.com") == REJECT_CROSS_DOMAIN

    def test_public_suffix(self) -> None:
        reason = reject("a=b; Domain=com", is_public_suffix=single_label_suffix)
        assert reason == REJECT_CROSS_DOMAIN

    def test_public_suffix_equal_to_host_is_host_only(self) -> None:
        ctx = RequestContext("localhost")
        c = accept("a=b; Domain=localhost", ctx,
                   is_public_suffix=single_label_suffix)
        assert c.host_only
        assert c.domain == "localhost"

    def test_ip_host_cannot_widen(self) -> None:
        ctx = RequestContext("192.168.1.1")
        assert reject("a=b; Domain=1.1", ctx) == REJECT_CROSS_DOMAIN

    def test_undecodable_domain(self) -> None:
        header = "a=b; Domain=%s.example.com" % ("\u00fc" * 64)
        assert reject(header) == REJECT_INVALID_ATTRIBUTE


class TestResolvePath:
    def test_default_path(self) -> None:
        assert accept("a=b").path == "/dir"

    def test_explicit_path(self) -> None:
        assert accept("a=b; Path=/other").path == "/other"

    def test_invalid_path_uses_default(self) -> None:
        assert accept("a=b; Path=other").path == "/dir"


class TestResolveExpiry:
    def test_session(self) -> None:
        c = accept("a=b")
        assert c.expires is None
        assert not c.persistent

    def test_max_age(self) -> None:
        c = accept("a=b; Max-Age=100")
        assert c.expires == NOW + 100
        assert c.persistent

    def test_max_age_precedes_expires(self) -> None:
        c = accept("a=b; Max-Age=100; Expires=Wed, 21 Oct 2015 07:28:00 GMT")
        assert c.expires == NOW + 100
        c = accept("a=b; Expires=Wed, 21 Oct 2015 07:28:00 GMT; Max-Age=100")
        assert c.expires == NOW + 100

    def test_expires(self) -> None:
        c = accept("a=b; Expires=Sun, 06 Nov 1994 08:49:37 GMT")
        assert c.expires == 784111777
        assert c.is_expired(NOW + 784111777)

    @pytest.mark.parametrize("max_age", ["0", "-1"])
    def test_non_positive_max_age_is_elapsed(self, max_age) -> None:
        c = accept("a=b; Max-Age=%s" % max_age)
        assert c.is_expired(NOW)

    def test_timestamps(self) -> None:
        c = accept("a=b")
        assert c.created == NOW
        assert c.last_access == NOW

    def test_max_age_with_fractional_now(self) -> None:
        c, reason = parse("a=b; Max-Age=100", WWW, NOW + 0.75)
        assert c.expires == NOW + 100
        assert isinstance(c.expires, int)


class TestResolvePolicies:
    def test_same_site_default(self) -> None:
        assert accept("a=b").same_site == SAMESITE_LAX

    def test_same_site_none_requires_secure(self) -> None:
        assert reject("id=1; SameSite=None") == REJECT_INSECURE_SAMESITE
        assert reject("id=1; SameSite=None", WWW_TLS) == REJECT_INSECURE_SAMESITE
        c = accept("id=1; SameSite=None; Secure", WWW_TLS)
        assert c.same_site == SAMESITE_NONE

    def test_secure_from_insecure_context(self) -> None:
        assert reject("id=1; Secure") == REJECT_SECURE_OVERWRITE
        assert accept("id=1; Secure", WWW_TLS).secure

    def test_http_only_from_non_http_api(self) -> None:
        ctx = RequestContext("www.example.com", "/", http=False)
        assert reject("id=1; HttpOnly", ctx) == REJECT_NON_HTTP_API
        assert not accept("id=1", ctx).http_only

    def test_secure_prefix(self) -> None:
        assert reject("__Secure-id=1", WWW_TLS) == REJECT_INVALID_ATTRIBUTE
        assert accept("__Secure-id=1; Secure", WWW_TLS).secure

    def test_host_prefix(self) -> None:
        assert accept("__Host-id=1; Secure; Path=/", WWW_TLS).host_only
        for header in ("__Host-id=1; Secure",
                       "__Host-id=1; Path=/",
                       "__Host-id=1; Secure; Path=/; Domain=example.com"):
            assert reject(header, WWW_TLS) == REJECT_INVALID_ATTRIBUTE

    def test_parse_errors_are_reasons(self) -> None:
        assert reject("") == PARSE_EMPTY
        assert reject("a b=c") == PARSE_INVALID_NAME


class TestFormatSetCookie:
    def test_all_attributes(self) -> None:
        c = Cookie("id", "1", "example.com", "/", expires=784111777,
                   host_only=False, secure=True, http_only=True,
                   same_site=SAMESITE_STRICT)
        assert format_set_cookie(c) == (
            "id=1; Expires=Sun, 06 Nov 1994 08:49:37 GMT; Domain=example.com; "
            "Path=/; Secure; HttpOnly; SameSite=Strict"
        )

    def test_defaults_omitted(self) -> None:
        c = Cookie("a", "b", "example.com", "/app")
        assert format_set_cookie(c) == "a=b; Path=/app"

    def test_extensions(self) -> None:
        c = accept("a=b; Priority=High; Partitioned")
        assert format_set_cookie(c) == "a=b; Path=/dir; Priority=High; Partitioned"

    def test_return_mode(self) -> None:
        c = accept("a=b; Path=/; Secure", WWW_TLS)
        assert c.format("return") == "a=b"

    def test_bad_mode(self) -> None:
        with pytest.raises(ValueError):
            Cookie("a", "b", "example.com").format("bogus")

    @pytest.mark.parametrize(
        ("header", "context"),
        [
            ("a=b", WWW),
            ("sid=xyz; Domain=Example.com; Path=/app; Max-Age=3600; Secure; "
             "HttpOnly; SameSite=None; Priority=High", WWW_TLS),
            ("gone=; Max-Age=0", WWW),
            ('q="v"; Expires=Sun, 06 Nov 1994 08:49:37 GMT; SameSite=Strict',
             WWW),
        ],
    )
    def test_round_trip(self, header, context) -> None:
        original = accept(header, context)
        reparsed, reason = parse(format_set_cookie(original), context, NOW + 50)
        assert reason is None
        assert reparsed == original

    def test_round_trip_with_fractional_clock(self) -> None:
        original, _ = parse("a=b; Max-Age=100", WWW, NOW + 0.25)
        reparsed, reason = parse(format_set_cookie(original), WWW, NOW + 1.5)
        assert reason is None
        assert reparsed == original


class TestFormatCookieHeader:
    def test_pairs_in_order(self) -> None:
        cookies = [Cookie("b", "2", "example.com"), ("a", "1")]
        assert format_cookie_header(cookies) == "b=2; a=1"

    def test_no_attributes(self) -> None:
        c = accept("a=b; Path=/; Max-Age=10; Secure; HttpOnly", WWW_TLS)
        assert format_cookie_header([c]) == "a=b"

    def test_empty(self) -> None:
        assert format_cookie_header([]) == ""


class TestCookieRecord:
    def test_key(self) -> None:
        c = Cookie("n", "v", "example.com", "/p")
        assert c.key == ("example.com", "n", "/p")

    def test_copy_is_independent(self) -> None:
        c = accept("a=b; Priority=High")
        d = c.copy()
        d.value = "changed"
        d.extensions["Other"] = None
        assert c.value == "b"
        assert "Other" not in c.extensions

    def test_equality_ignores_timestamps(self) -> None:
        a = Cookie("n", "v", "example.com", created=1)
        b = Cookie("n", "v", "example.com", created=2)
        assert a == b
        assert a != Cookie("n", "w", "example.com")

    def test_matches(self) -> None:
        c = accept("a=b; Domain=example.com; Path=/dir")
        assert c.matches(RequestContext("sub.example.com", "/dir/x"))
        assert not c.matches(RequestContext("sub.example.com", "/other"))
        assert not c.matches(RequestContext("example.org", "/dir"))

    def test_host_only_matches_exact_host(self) -> None:
        c = accept("a=b; Path=/")
        assert c.matches(RequestContext("www.example.com"))
        assert not c.matches(RequestContext("sub.www.example.com"))


class TestSameSiteMatching:
    @pytest.mark.parametrize(
        ("same_site", "navigation", "sent"),
        [
            (SAMESITE_STRICT, False, False),
            (SAMESITE_STRICT, True, False),
            (SAMESITE_LAX, False, False),
            (SAMESITE_LAX, True, True),
            (SAMESITE_NONE, False, True),
        ],
    )
    def test_cross_site_request(self, same_site, navigation, sent) -> None:
        c = Cookie("a", "b", "example.com", secure=True, same_site=same_site)
        ctx = RequestContext("example.com", secure=True, site="evil.com",
                             navigation=navigation)
        assert c.matches(ctx) is sent

    @pytest.mark.parametrize("same_site", [SAMESITE_STRICT, SAMESITE_LAX,
                                           SAMESITE_NONE])
    def test_same_site_request(self, same_site) -> None:
        c = Cookie("a", "b", "example.com", host_only=False, secure=True,
                   same_site=same_site)
        ctx = RequestContext("www.example.com", secure=True,
                             site="example.com")
        assert c.matches(ctx)

    def test_insecure_none_never_sent(self) -> None:
        c = Cookie("a", "b", "example.com", same_site=SAMESITE_NONE)
        assert not c.matches(RequestContext("example.com"))


class TestCheckCookie:
    def test_acceptable(self) -> None:
        c = accept("a=b; Domain=example.com")
        assert check_cookie(c, WWW) is None

    @pytest.mark.parametrize(
        ("cookie", "context", "reason"),
        [
            (Cookie("bad name", "v", "www.example.com"), WWW,
             PARSE_INVALID_NAME),
            (Cookie("n", "bad value", "www.example.com"), WWW,
             PARSE_INVALID_VALUE),
            (Cookie("n", "v", "www.example.com", path="rel"), WWW,
             REJECT_INVALID_ATTRIBUTE),
            (Cookie("n", "v", "other.example.com"), WWW,
             REJECT_CROSS_DOMAIN),
            (Cookie("n", "v", "bank.com", host_only=False), WWW,
             REJECT_CROSS_DOMAIN),
            (Cookie("n", "v", "www.example.com", same_site=SAMESITE_NONE),
             WWW_TLS, REJECT_INSECURE_SAMESITE),
            (Cookie("n", "v", "www.example.com", secure=True), WWW,
             REJECT_SECURE_OVERWRITE),
            (Cookie("n", "v", "www.example.com", http_only=True),
             RequestContext("www.example.com", http=False),
             REJECT_NON_HTTP_API),
            (Cookie("__Secure-n", "v", "www.example.com"), WWW,
             REJECT_INVALID_ATTRIBUTE),
        ],
    )
    def test_rejected(self, cookie, context, reason) -> None:
        assert check_cookie(cookie, context) == reason

    def test_public_suffix(self) -> None:
        c = Cookie("n", "v", "com", host_only=False)
        ctx = RequestContext("example.com")
        assert check_cookie(c, ctx) is None
        assert check_cookie(c, ctx, single_label_suffix) == REJECT_CROSS_DOMAIN


class TestCreate:
    def test_defaults_from_context(self) -> None:
        c = Cookie.create("sid", "abc", WWW_TLS, max_age=60, http_only=True,
                          now=100)
        assert c.expires == 160
        assert c.secure
        assert c.host_only
        assert c.path == "/dir"

    def test_explicit_attributes(self) -> None:
        c = Cookie.create("sid", "abc", WWW, domain="example.com", path="/",
                          same_site=SAMESITE_STRICT, now=100)
        assert format_set_cookie(c) == (
            "sid=abc; Domain=example.com; Path=/; SameSite=Strict")

    def test_invalid_name(self) -> None:
        with pytest.raises(ParseError):
            Cookie.create("bad name", "v", WWW)

    def test_invalid_value(self) -> None:
        with pytest.raises(ParseError):
            Cookie.create("n", "bad value", WWW)

    def test_rejected_attributes(self) -> None:
        with pytest.raises(UsageError):
            Cookie.create("n", "v", WWW, domain="other.com")
        with pytest.raises(UsageError):
            Cookie.create("n", "v", WWW, same_site=SAMESITE_NONE)


class TestResponseCookies:
    def test_load(self) -> None:
        rc = ResponseCookies(WWW_TLS)
        rc.load(["a=1; b=2", "a=3"])
        assert "b" in rc
        assert "c" not in rc
        assert rc.get("a") == "1"
        assert rc.get_all("a") == ["1", "3"]
        assert rc.get("c", "default") == "default"

    def test_set_uses_defaults(self) -> None:
        rc = ResponseCookies(WWW_TLS, {"path": "/", "http_only": True})
        c = rc.set("sid", "abc", same_site=SAMESITE_STRICT)
        assert c.path == "/"
        assert rc.header_values() == [
            "sid=abc; Path=/; Secure; HttpOnly; SameSite=Strict"
        ]

    def test_set_overrides_defaults(self) -> None:
        rc = ResponseCookies(WWW_TLS, {"path": "/"})
        assert rc.set("sid", "abc", path="/app").path == "/app"

    def test_delete(self) -> None:
        rc = ResponseCookies(WWW_TLS, {"path": "/"})
        rc.set("sid", "abc")
        c = rc.delete("sid")
        assert c.value == ""
        assert rc.header_values() == [
            "sid=; Expires=Thu, 01 Jan 1970 00:00:00 GMT; Path=/; Secure"
        ]

    def test_one_header_per_cookie(self) -> None:
        rc = ResponseCookies(WWW_TLS)
        rc.set("a", "1", path="/")
        rc.set("b", "2", path="/")
        assert len(rc.header_values()) == 2

import pytest

from canonurl import Encoded, ParsedURI, ParseError, parse_after_scheme, parse_reference, parse_uri


def test_parse_full_uri():
    uri = parse_uri("https://user:pw@foo.com:8080/a/b?q=1#frag")
    assert uri == ParsedURI(
        scheme="https",
        user=Encoded("user"),
        password=Encoded("pw"),
        host=Encoded("foo.com"),
        port=8080,
        path=Encoded("/a/b"),
        query=Encoded("q=1"),
        fragment=Encoded("frag"),
    )


def test_parse_leaves_escapes_alone():
    uri = parse_uri("https://foo.com/a%20b?x=%5B%5D")
    assert uri.path == Encoded("/a%20b")
    assert uri.query == Encoded("x=%5B%5D")
    assert not uri.is_raw


def test_parse_scheme_case_preserved():
    assert parse_uri("HTTPS://foo.com").scheme == "HTTPS"


def test_parse_no_path():
    uri = parse_uri("https://foo.com")
    assert uri.host == Encoded("foo.com")
    assert uri.path == Encoded("")
    assert uri.query is None
    assert uri.fragment is None


def test_parse_without_authority():
    uri = parse_uri("mailto:user@host")
    assert uri.host is None
    assert uri.user is None
    assert uri.path == Encoded("user@host")


def test_parse_empty_authority_before_path():
    uri = parse_uri("file:///etc/hosts")
    assert uri.host is None
    assert uri.path == Encoded("/etc/hosts")


def test_parse_empty_password_is_no_password():
    uri = parse_uri("https://user:@foo.com")
    assert uri.user == Encoded("user")
    assert uri.password is None


def test_parse_userinfo_without_host():
    uri = parse_uri("http://user@/x")
    assert uri.user == Encoded("user")
    assert uri.host is None
    assert uri.path == Encoded("/x")


def test_parse_ip_literal():
    uri = parse_uri("http://[::1]:8080/")
    assert uri.host == Encoded("[::1]")
    assert uri.port == 8080

    uri = parse_uri("http://[fe80::1]")
    assert uri.host == Encoded("[fe80::1]")
    assert uri.port is None


def test_parse_port_leading_zeros():
    assert parse_uri("http://foo.com:0080/").port == 80


def test_parse_empty_query_and_fragment_are_present():
    uri = parse_uri("https://foo.com/?#")
    assert uri.query == Encoded("")
    assert uri.fragment == Encoded("")


def test_parse_question_mark_in_fragment():
    uri = parse_uri("https://foo.com/a#b?c")
    assert uri.query is None
    assert uri.fragment == Encoded("b?c")


@pytest.mark.parametrize(
    "data",
    [
        "",
        "https",
        "foo bar",
        "/foo/bar",
        "1http://foo.com",
        "ht tp://foo.com",
        "http://foo.com:abc/",
        "http://foo.com:/",
        "http://foo.com:70000/",
        "http://foo.com:-1/",
        "http://:80/",
        "http://?q",
        "http://",
        "http://[::1/",
        "http://]x/",
        "http://[::1]x/",
    ],
)
def test_parse_errors(data):
    with pytest.raises(ParseError):
        parse_uri(data)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_uri("no scheme here")


def test_parse_after_scheme():
    uri = parse_after_scheme("https", "//foo.com/x")
    assert uri.scheme == "https"
    assert uri.host == Encoded("foo.com")
    assert uri.path == Encoded("/x")


def test_parse_reference_relative():
    uri = parse_reference("/foo bar?x=1#y", "https")
    assert uri.scheme == "https"
    assert uri.host is None
    assert uri.path == Encoded("/foo bar")
    assert uri.query == Encoded("x=1")
    assert uri.fragment == Encoded("y")


def test_parse_reference_falls_back_to_opaque_path():
    uri = parse_reference("//:80", "https")
    assert uri == ParsedURI(scheme="https", path=Encoded("//:80"))


def test_parse_long_zero_padded_port():
    assert parse_uri("http://a:" + "0" * 5000 + "80/").port == 80


def test_parse_huge_port_is_parse_error():
    with pytest.raises(ParseError):
        parse_uri("http://a:" + "9" * 5000 + "/")


def test_parse_reference_huge_port_never_raises():
    data = "//a:" + "1" * 5000
    assert parse_reference(data, "https") == ParsedURI(scheme="https", path=Encoded(data))

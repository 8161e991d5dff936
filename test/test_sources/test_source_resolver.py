"""
Test suite for SourceResolver.
Tests locator schemes, file formats and the FIRST / MERGE load policies.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from hotprops.core.enums import LoadType
from hotprops.core.exceptions import SourceLoadError
from hotprops.sources.expander import VariablesExpander
from hotprops.sources.resolver import SourceResolver


@pytest.fixture
def resolver(tmp_path):
    return SourceResolver(search_path=[str(tmp_path / "cp")])


def test_bare_path_and_file_url(resolver, write_source):
    path = write_source("a.properties", "k=v\n")

    assert resolver.load_source(str(path)) == {"k": "v"}
    assert resolver.load_source(f"file:{path}") == {"k": "v"}
    assert resolver.load_source(f"file://{path}") == {"k": "v"}


def test_missing_source_is_none(resolver, tmp_path):
    assert resolver.load_source(f"file:{tmp_path}/missing.properties") is None
    assert resolver.load_source("classpath:missing.properties") is None


def test_classpath_searches_roots(tmp_path, write_source):
    write_source("second/conf/app.properties", "root=second\n")
    resolver = SourceResolver(search_path=[str(tmp_path / "first"), str(tmp_path / "second")])

    assert resolver.load_source("classpath:conf/app.properties") == {"root": "second"}
    assert resolver.load_source("classpath:/conf/app.properties") == {"root": "second"}
    assert resolver.local_file("classpath:conf/app.properties") == tmp_path / "second" / "conf" / "app.properties"


def test_yaml_is_flattened(resolver, write_source):
    path = write_source("app.yaml", "server:\n  host: localhost\n  port: 8080\n  tls: false\nnames: [a, b]\nnone: null\n")

    table = resolver.load_source(str(path))

    assert table == {
        "server.host": "localhost",
        "server.port": "8080",
        "server.tls": "false",
        "names": "a,b"
    }


def test_empty_yaml(resolver, write_source):
    assert resolver.load_source(str(write_source("empty.yml", ""))) == {}


def test_json_is_flattened(resolver, write_source):
    path = write_source("app.json", '{"db": {"url": "sqlite://", "pool": 5}}')
    assert resolver.load_source(str(path)) == {"db.url": "sqlite://", "db.pool": "5"}


def test_xml_properties(resolver, write_source):
    path = write_source("app.xml", (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">\n'
        '<properties>\n'
        '  <comment>example</comment>\n'
        '  <entry key="server.port">8080</entry>\n'
        '  <entry key="empty"></entry>\n'
        '</properties>\n'
    ))
    assert resolver.load_source(str(path)) == {"server.port": "8080", "empty": ""}


@pytest.mark.parametrize("name,text", [
    ("bad.yaml", "key: [unclosed"),
    ("list.yaml", "- a\n- b\n"),
    ("bad.json", "{not json"),
    ("bad.xml", "<properties><entry>"),
    ("wrong.xml", "<settings/>"),
    ("nokey.xml", "<properties><entry>v</entry></properties>"),
    ("bad.properties", "k=\\u12zz\n"),
])
def test_parse_failures_raise_source_load_error(resolver, write_source, name, text):
    path = write_source(name, text)
    with pytest.raises(SourceLoadError) as info:
        resolver.load_source(str(path))
    assert str(path) in info.value.locator
    assert info.value.__cause__ is not None


def test_unreadable_source_raises(resolver, write_source):
    path = write_source("locked.properties", "k=v\n")
    with patch("pathlib.Path.read_bytes", side_effect=PermissionError("denied")):
        with pytest.raises(SourceLoadError, match="denied"):
            resolver.load_source(str(path))


def test_first_policy_uses_first_existing(resolver, write_source, tmp_path):
    first = write_source("first.properties", "a=1\nb=1\n")
    second = write_source("second.properties", "b=2\nc=2\n")

    table = resolver.resolve([f"{tmp_path}/missing.properties", str(first), str(second)], LoadType.FIRST)

    assert table == {"a": "1", "b": "1"}


def test_first_policy_nothing_found(resolver, tmp_path):
    assert resolver.resolve([f"{tmp_path}/x.properties"], LoadType.FIRST) == {}


def test_merge_policy_later_overrides(resolver, write_source, tmp_path):
    first = write_source("first.properties", "a=1\nb=1\n")
    second = write_source("second.yaml", "b: 2\nc: 2\n")

    table = resolver.resolve([str(first), f"{tmp_path}/missing.properties", str(second)], LoadType.MERGE)

    assert table == {"a": "1", "b": "2", "c": "2"}


def test_failure_aborts_resolution(resolver, write_source):
    good = write_source("good.properties", "a=1\n")
    bad = write_source("bad.json", "{")
    with pytest.raises(SourceLoadError):
        resolver.resolve([str(good), str(bad)], LoadType.MERGE)


def test_resolve_does_not_mutate_specs(resolver, write_source):
    specs = [str(write_source("a.properties", "a=1\n"))]
    resolver.resolve(specs, LoadType.MERGE)
    assert len(specs) == 1


def test_locators_are_expanded(tmp_path, write_source):
    write_source("conf/app.properties", "k=v\n")
    resolver = SourceResolver(expander=VariablesExpander({"conf.dir": str(tmp_path / "conf")}))

    assert resolver.load_source("file:${conf.dir}/app.properties") == {"k": "v"}
    assert resolver.local_file("${conf.dir}/app.properties") == tmp_path / "conf" / "app.properties"


def test_http_source(resolver):
    response = Mock(status_code=200, content=b"remote=yes\n")
    with patch("hotprops.sources.resolver.requests.get", return_value=response) as get:
        table = resolver.load_source("https://config.example.org/app.properties")

    get.assert_called_once_with("https://config.example.org/app.properties", timeout=resolver.timeout)
    assert table == {"remote": "yes"}


def test_http_yaml_source_uses_url_suffix(resolver):
    response = Mock(status_code=200, content=b"a:\n  b: c\n")
    with patch("hotprops.sources.resolver.requests.get", return_value=response):
        assert resolver.load_source("http://config.example.org/app.yaml?v=2") == {"a.b": "c"}


def test_http_not_found_is_missing(resolver):
    with patch("hotprops.sources.resolver.requests.get", return_value=Mock(status_code=404)):
        assert resolver.load_source("http://config.example.org/app.properties") is None


def test_http_error_raises(resolver):
    with patch("hotprops.sources.resolver.requests.get",
               side_effect=requests.ConnectionError("refused")):
        with pytest.raises(SourceLoadError, match="refused"):
            resolver.load_source("http://config.example.org/app.properties")


def test_http_server_error_raises(resolver):
    response = Mock(status_code=500)
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    with patch("hotprops.sources.resolver.requests.get", return_value=response):
        with pytest.raises(SourceLoadError, match="500"):
            resolver.load_source("http://config.example.org/app.properties")


def test_network_sources_are_not_local(resolver, tmp_path):
    assert resolver.local_file("https://config.example.org/app.properties") is None
    assert resolver.local_file(f"file:{tmp_path}/app.properties") == tmp_path / "app.properties"

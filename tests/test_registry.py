import pytest

from etu.core.errors import FormatDetectionError, UnsupportedFormatError
from etu.core.models import FormatType
from etu.parsers.etcdctl import EtcdctlParser
from etu.parsers.json_tree import JSONTreeParser
from etu.parsers.registry import ParserRegistry
from etu.parsers.yaml_tree import YAMLTreeParser


@pytest.fixture
def registry():
    return ParserRegistry()


@pytest.mark.parametrize("path, expected", [
    ("config.json", FormatType.JSON),
    ("config.JSON", FormatType.JSON),
    ("config.yaml", FormatType.YAML),
    ("config.yml", FormatType.YAML),
    ("dump.txt", FormatType.ETCDCTL),
])
def test_extension_wins(registry, path, expected):
    # content deliberately disagrees with the extension
    assert registry.detect_format(path, b"/a\n1\n") is expected


@pytest.mark.parametrize("content, expected", [
    (b'{"a": {"b": 1}}', FormatType.JSON),
    (b'\n\n  {"a": 1}\n', FormatType.JSON),
    (b"/app/name\nmyapp\n", FormatType.ETCDCTL),
    (b"app:\n  name: myapp\n", FormatType.YAML),
    (b"a: 1\na: 2\n", FormatType.YAML),
    (b"", FormatType.ETCDCTL),
    (b"\n  \n", FormatType.ETCDCTL),
])
def test_content_sniffing(registry, content, expected):
    assert registry.detect_format("config", content) is expected


@pytest.mark.parametrize("content", [b"just some words", b"- a\n- b\n", b"\xff\xfe\x00"])
def test_undetectable_content_raises(registry, content):
    with pytest.raises(FormatDetectionError, match="'config'"):
        registry.detect_format("config", content)


def test_explicit_format_skips_detection(registry):
    fmt, parser = registry.select("config.json", b"/a\n1\n", explicit="etcdctl")

    assert fmt is FormatType.ETCDCTL
    assert isinstance(parser, EtcdctlParser)


@pytest.mark.parametrize("token, parser_type", [
    (None, YAMLTreeParser),
    ("", YAMLTreeParser),
    ("auto", YAMLTreeParser),
    ("JSON", JSONTreeParser),
])
def test_select_resolves_tokens(registry, token, parser_type):
    content = b'{"a": 1}' if parser_type is JSONTreeParser else b"a: 1\n"
    _, parser = registry.select("config", content, explicit=token)

    assert isinstance(parser, parser_type)


def test_unknown_token_lists_supported_formats(registry):
    with pytest.raises(UnsupportedFormatError) as exc:
        registry.resolve_format("toml")

    assert exc.value.token == "toml"
    assert exc.value.supported == ["auto", "etcdctl", "json", "yaml"]
    assert "toml" in str(exc.value)

import pytest

from etu.core.errors import ParseError
from etu.core.models import ScalarKind
from etu.parsers.etcdctl import EtcdctlParser


def parse(text):
    data = text.encode("utf-8") if isinstance(text, str) else text
    return EtcdctlParser().parse(data, source="dump.txt")


def test_basic_blocks_are_string_pairs():
    pairs = parse("/app/name\nmyapp\n\n/app/port\n8080\n")

    assert [(p.key, p.display_value()) for p in pairs] == [
        ("/app/name", "myapp"),
        ("/app/port", "8080"),
    ]
    # The store holds no types: '8080' stays a string
    assert all(p.value.kind is ScalarKind.STRING for p in pairs)


def test_multiline_value_is_joined_verbatim():
    pairs = parse("/app/banner\nline one\n  line two\nline three\n")

    assert len(pairs) == 1
    assert pairs[0].display_value() == "line one\n  line two\nline three"


def test_duplicate_key_last_value_first_position():
    pairs = parse("/a\n1\n\n/b\n2\n\n/a\n3\n")

    assert [(p.key, p.display_value()) for p in pairs] == [("/a", "3"), ("/b", "2")]


def test_trailing_key_without_value_is_empty():
    pairs = parse("/app/name\nmyapp\n\n/app/empty\n")

    assert pairs[-1].key == "/app/empty"
    assert pairs[-1].display_value() == ""
    assert pairs[-1].value.kind is ScalarKind.STRING


@pytest.mark.parametrize("text", ["", "\n\n", "   \n\t\n"])
def test_blank_input_yields_no_pairs(text):
    assert parse(text) == []


def test_crlf_and_bom_are_normalized():
    pairs = parse(b"\xef\xbb\xbf/a\r\nx\r\n\r\n/b\r\ny\r\n")

    assert [(p.key, p.display_value()) for p in pairs] == [("/a", "x"), ("/b", "y")]


def test_extra_blank_lines_between_blocks():
    pairs = parse("\n\n/a\n1\n\n\n\n/b\n2\n\n")

    assert [p.key for p in pairs] == ["/a", "/b"]


def test_indented_key_line_reports_line_number():
    with pytest.raises(ParseError) as exc:
        parse("/a\n1\n\n  orphan value\n")

    assert exc.value.line == 4
    assert "dump.txt:4" in str(exc.value)


def test_invalid_utf8_is_a_parse_error():
    with pytest.raises(ParseError, match="UTF-8"):
        parse(b"/a\n\xff\xfe\n")

import pytest

from etu.core.models import ConfigPair, Issue, Severity
from etu.validator.validator import (
    MAX_KEY_DEPTH, MAX_KEY_LENGTH, WARN_VALUE_SIZE, ConfigValidator, validate,
)


def rules_of(result):
    return [(i.rule, i.level) for i in result.issues]


def test_clean_pairs_are_valid(pair_factory):
    result = validate(pair_factory({"/app/name": "myapp", "/app/port": 8080, "/app/url": "https://x.io"}))

    assert result.valid is True
    assert result.issues == []


def test_key_without_leading_slash_is_an_error(pair_factory):
    result = validate(pair_factory({"app/name": "myapp"}))

    assert result.valid is False
    assert result.errors[0].key == "app/name"
    assert "must start with '/'" in result.errors[0].message


def test_key_length_limit(pair_factory):
    at_limit = "/" + "k" * (MAX_KEY_LENGTH - 1)
    too_long = "/" + "k" * MAX_KEY_LENGTH

    assert validate(pair_factory({at_limit: "v"})).valid is True
    result = validate(pair_factory({too_long: "v"}))
    assert result.valid is False
    assert "exceeds maximum" in result.errors[0].message


def test_key_depth_limit(pair_factory):
    deep_ok = "/" + "/".join(["d"] * MAX_KEY_DEPTH)
    too_deep = "/" + "/".join(["d"] * (MAX_KEY_DEPTH + 1))

    assert validate(pair_factory({deep_ok: "v"})).valid is True
    result = validate(pair_factory({too_deep: "v"}))
    assert result.valid is False
    assert "depth" in result.errors[0].message


@pytest.mark.parametrize("key", ["/app//name", "/app/na\tme", "/app/\x00"])
def test_suspicious_key_characters_warn(pair_factory, key):
    result = validate(pair_factory({key: "v"}))

    assert result.valid is True
    assert ("key-characters", Severity.WARNING) in rules_of(result)


def test_null_value_is_an_error(pair_factory):
    result = validate(pair_factory({"/app/name": None}))

    assert result.valid is False
    assert result.errors[0].message == "value cannot be null"


def test_empty_string_value_is_fine(pair_factory):
    assert validate(pair_factory({"/app/name": ""})).issues == []


def test_large_value_warns_and_strict_flips_verdict(pair_factory):
    pairs = pair_factory({"/app/blob": "x" * (WARN_VALUE_SIZE + 1)})

    lenient = validate(pairs, strict=False)
    strict = validate(pairs, strict=True)

    assert lenient.valid is True
    assert strict.valid is False
    # strictness changes the verdict, never the findings
    assert lenient.issues == strict.issues
    assert strict.strict is True
    assert lenient.warnings[0].rule == "value"


@pytest.mark.parametrize("value, warns", [
    ("http://api.example.com", True),
    ("  HTTP://api.example.com/v1", True),
    ("https://api.example.com", False),
    ("http:relative", False),
    ("not a url", False),
])
def test_insecure_url_scheme(pair_factory, value, warns):
    result = validate(pair_factory({"/app/api_url": value}))

    assert (("url-scheme", Severity.WARNING) in rules_of(result)) is warns


def test_url_rule_only_checks_url_keys(pair_factory):
    assert validate(pair_factory({"/app/endpoint": "http://api.example.com"})).issues == []


@pytest.mark.parametrize("value, warns", [
    ('{"a": 1}', False),
    ("[1, 2, 3]", False),
    ("{a: 1}", False),
    ('{"a": 1', True),
    ("[unclosed", True),
    ("plain text", False),
])
def test_structured_data_values(pair_factory, value, warns):
    result = validate(pair_factory({"/app/data": value}))

    assert (("structured-data", Severity.WARNING) in rules_of(result)) is warns


def test_duplicate_keys_are_reported_once_with_count():
    pairs = [ConfigPair.of("/a", "1"), ConfigPair.of("/b", "2"), ConfigPair.of("/a", "3"), ConfigPair.of("/a", "4")]

    result = validate(pairs)

    duplicates = [i for i in result.issues if i.rule == "duplicate-key"]
    assert len(duplicates) == 1
    assert duplicates[0].key == "/a"
    assert "3 occurrences" in duplicates[0].message
    assert result.valid is False


def test_issues_are_ordered_rule_by_rule(pair_factory):
    pairs = pair_factory({"bad1": None, "bad2": "v"})

    result = validate(pairs)

    assert [(i.rule, i.key) for i in result.issues] == [
        ("key-format", "bad1"),
        ("key-format", "bad2"),
        ("value", "bad1"),
    ]


def test_extra_rules_run_after_builtin_rules(pair_factory):
    def no_secrets(pair):
        if "password" in pair.key:
            return [Issue(key=pair.key, message="plaintext secret", level=Severity.WARNING, rule="secrets")]
        return []

    validator = ConfigValidator(extra_rules=[no_secrets])
    result = validator.validate(pair_factory({"/db/password": "hunter2", "/db/url": "http://db"}))

    assert [i.rule for i in result.issues] == ["url-scheme", "secrets"]
    assert validator.validate(pair_factory({"/db/password": "x"}), strict=True).valid is False


def test_empty_input_is_valid():
    result = validate([])

    assert result.valid is True
    assert not result.has_errors()
    assert not result.has_warnings()

#!/usr/bin/env python3
"""
ETU VALIDATOR - The Judge
-------------------------
Checks a list of ConfigPairs against structural and semantic rules before
anything is written to the store. Every rule runs over every pair so the
caller gets the complete report in one pass; issues are ordered rule by
rule, then in discovery order.

Rules never look at the strict flag. Strictness is applied once, when the
final verdict is computed.

Author: etu Team
Date: 2026-10-19
"""

import json
import logging
import unicodedata
from collections import Counter
from typing import Callable, Iterable, List, Optional, Sequence
from urllib.parse import urlsplit

from ruamel.yaml import YAML, YAMLError

from etu.core.models import ConfigPair, Issue, ScalarKind, Severity, ValidationResult

# Standardized logging for audit trails
logger = logging.getLogger("etu.validator")

MAX_KEY_LENGTH = 1536          # bytes
MAX_KEY_DEPTH = 20             # path segments
WARN_VALUE_SIZE = 10 * 1024    # bytes

Rule = Callable[[ConfigPair], List[Issue]]


def _error(pair: ConfigPair, rule: str, message: str) -> Issue:
    return Issue(key=pair.key, message=message, level=Severity.ERROR, rule=rule)


def _warning(pair: ConfigPair, rule: str, message: str) -> Issue:
    return Issue(key=pair.key, message=message, level=Severity.WARNING, rule=rule)


class ConfigValidator:
    """
    Pure function object: (pairs, strict) -> ValidationResult.

    Extra rules receive one pair and return a list of Issues. They run
    after the built-in per-pair rules and before duplicate detection.
    """

    def __init__(self, extra_rules: Optional[Sequence[Rule]] = None):
        self.active_rules: List[Rule] = [
            self._rule_key_format,
            self._rule_key_characters,
            self._rule_value,
            self._rule_url_scheme,
            self._rule_structured_data,
        ]
        self.active_rules.extend(extra_rules or [])

    def validate(self, pairs: Iterable[ConfigPair], strict: bool = False) -> ValidationResult:
        pairs = list(pairs)
        issues: List[Issue] = []

        for rule in self.active_rules:
            for pair in pairs:
                issues.extend(rule(pair))
        issues.extend(self._rule_duplicates(pairs))

        has_errors = any(i.level is Severity.ERROR for i in issues)
        has_warnings = any(i.level is Severity.WARNING for i in issues)
        valid = not has_errors and not (strict and has_warnings)

        logger.debug(f"Validated {len(pairs)} pairs: {len(issues)} issues, valid={valid} (strict={strict})")
        return ValidationResult(valid=valid, issues=issues, strict=strict)

    # --- Built-in rules ---

    def _rule_key_format(self, pair: ConfigPair) -> List[Issue]:
        issues = []
        key = pair.key
        if not key.startswith("/"):
            issues.append(_error(pair, "key-format", "key must start with '/'"))

        size = len(key.encode("utf-8"))
        if size > MAX_KEY_LENGTH:
            issues.append(_error(pair, "key-format",
                                 f"key length ({size} bytes) exceeds maximum of {MAX_KEY_LENGTH} bytes"))

        depth = len([part for part in key.split("/") if part])
        if depth > MAX_KEY_DEPTH:
            issues.append(_error(pair, "key-format",
                                 f"key depth ({depth}) exceeds maximum of {MAX_KEY_DEPTH} levels"))
        return issues

    def _rule_key_characters(self, pair: ConfigPair) -> List[Issue]:
        issues = []
        if any(unicodedata.category(ch) == "Cc" for ch in pair.key):
            issues.append(_warning(pair, "key-characters", "key contains control characters"))
        if "//" in pair.key:
            issues.append(_warning(pair, "key-characters", "key contains consecutive '//'"))
        return issues

    def _rule_value(self, pair: ConfigPair) -> List[Issue]:
        if pair.value.is_null:
            return [_error(pair, "value", "value cannot be null")]

        size = len(pair.display_value().encode("utf-8"))
        if size > WARN_VALUE_SIZE:
            return [_warning(pair, "value",
                             f"value size ({size} bytes) exceeds recommended size of {WARN_VALUE_SIZE} bytes")]
        return []

    def _rule_url_scheme(self, pair: ConfigPair) -> List[Issue]:
        if "url" not in pair.key.lower() or pair.value.kind is not ScalarKind.STRING:
            return []

        try:
            parts = urlsplit(pair.value.value.strip())
        except ValueError:
            # Not a URL at all: the check is best-effort only
            return []

        if parts.scheme.lower() == "http" and parts.netloc:
            return [_warning(pair, "url-scheme", "URL uses insecure scheme http:// (https:// recommended)")]
        return []

    def _rule_structured_data(self, pair: ConfigPair) -> List[Issue]:
        if pair.value.kind is not ScalarKind.STRING:
            return []

        text = pair.value.value.strip()
        if not text.startswith(("{", "[")):
            return []
        if _is_structured(text):
            return []
        return [_warning(pair, "structured-data",
                         "value looks like structured data but is not valid JSON or YAML")]

    def _rule_duplicates(self, pairs: List[ConfigPair]) -> List[Issue]:
        counts = Counter(p.key for p in pairs)
        issues = []
        for key, count in counts.items():
            if count > 1:
                issues.append(Issue(key=key, message=f"duplicate key found ({count} occurrences)",
                                    level=Severity.ERROR, rule="duplicate-key"))
        return issues


def _is_structured(text: str) -> bool:
    try:
        json.loads(text)
        return True
    except ValueError:
        pass
    try:
        YAML(typ="safe", pure=True).load(text)
        return True
    except YAMLError:
        return False


def validate(pairs: Iterable[ConfigPair], strict: bool = False) -> ValidationResult:
    """Runs the default rule set."""
    return ConfigValidator().validate(pairs, strict=strict)

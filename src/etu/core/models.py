#!/usr/bin/env python3
"""
ETU CORE MODELS
---------------
Defines the fundamental data structures used across the etu engine.
Every parser produces ConfigPairs, every consumer (validator, diff,
exporter, renderer) reads them. All models are immutable value objects.

Author: etu Team
Date: 2026-10-19
"""

import datetime
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from etu.core.errors import StructuralError


class ScalarKind(Enum):
    """Closed set of value types a configuration leaf may carry."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class Scalar:
    """
    A typed leaf value.

    The store itself is untyped, so `display()` is the one place where a
    typed value becomes the text the store would hold.
    """
    kind: ScalarKind
    value: Any = None

    @classmethod
    def of(cls, native: Any) -> "Scalar":
        """Classifies a native Python value into the closed variant."""
        if isinstance(native, Scalar):
            return native
        if native is None:
            return cls(ScalarKind.NULL, None)
        # bool is a subclass of int, so it must be checked first
        if isinstance(native, bool):
            return cls(ScalarKind.BOOLEAN, native)
        if isinstance(native, int):
            return cls(ScalarKind.INTEGER, native)
        if isinstance(native, float):
            return cls(ScalarKind.FLOAT, native)
        if isinstance(native, str):
            return cls(ScalarKind.STRING, native)
        if isinstance(native, (datetime.date, datetime.time)):
            # YAML timestamps are ambiguous, keep the text form
            return cls(ScalarKind.STRING, native.isoformat())
        raise StructuralError(f"unsupported value type '{type(native).__name__}'")

    @classmethod
    def string(cls, text: str) -> "Scalar":
        return cls(ScalarKind.STRING, text)

    @classmethod
    def null(cls) -> "Scalar":
        return cls(ScalarKind.NULL, None)

    @property
    def is_null(self) -> bool:
        return self.kind is ScalarKind.NULL

    def display(self) -> str:
        """Canonical display-string conversion (exhaustive over ScalarKind)."""
        if self.kind is ScalarKind.STRING:
            return self.value
        if self.kind is ScalarKind.INTEGER:
            return str(self.value)
        if self.kind is ScalarKind.FLOAT:
            return _format_float(self.value)
        if self.kind is ScalarKind.BOOLEAN:
            return "true" if self.value else "false"
        return ""

    def __str__(self) -> str:
        return self.display()


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text


@dataclass(frozen=True)
class ConfigPair:
    """
    The atomic unit of configuration: one absolute key and its typed value.
    Keys use '/' as separator (e.g. '/app/config/host').
    """
    key: str
    value: Scalar

    @classmethod
    def of(cls, key: str, native: Any) -> "ConfigPair":
        return cls(key=key, value=Scalar.of(native))

    @property
    def native(self) -> Any:
        """The plain Python value, as it would appear in a JSON/YAML tree."""
        return self.value.value

    def display_value(self) -> str:
        return self.value.display()

    def __str__(self) -> str:
        return f"{self.key}: {self.value.display()}"


class FormatType(Enum):
    """Input format tokens understood by the parser registry."""
    AUTO = "auto"
    ETCDCTL = "etcdctl"
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def tokens(cls) -> List[str]:
        return [f.value for f in cls]


@dataclass(frozen=True)
class ParseOptions:
    """Options for turning a file into pairs. `format=None` means auto-detect."""
    format: Optional[str] = None


# --- Validation ---

class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Issue:
    """A single validation finding."""
    message: str
    level: Severity
    key: Optional[str] = None
    rule: str = ""


@dataclass(frozen=True)
class ValidationResult:
    """
    Complete report of one validation run. `valid` is decided once, at
    verdict time, from the accumulated issues and the strict flag.
    """
    valid: bool
    issues: List[Issue] = field(default_factory=list)
    strict: bool = False

    @property
    def errors(self) -> List[Issue]:
        return [i for i in self.issues if i.level is Severity.ERROR]

    @property
    def warnings(self) -> List[Issue]:
        return [i for i in self.issues if i.level is Severity.WARNING]

    def has_errors(self) -> bool:
        return any(i.level is Severity.ERROR for i in self.issues)

    def has_warnings(self) -> bool:
        return any(i.level is Severity.WARNING for i in self.issues)


# --- Diff ---

class DiffStatus(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNCHANGED = "unchanged"

    @property
    def symbol(self) -> str:
        return _DIFF_SYMBOLS[self]


_DIFF_SYMBOLS = {
    DiffStatus.ADDED: "+",
    DiffStatus.MODIFIED: "~",
    DiffStatus.DELETED: "-",
    DiffStatus.UNCHANGED: "=",
}


class DiffScope(Enum):
    """FILE_SCOPED ignores remote-only keys, FULL reports them as deleted."""
    FILE_SCOPED = "file"
    FULL = "full"


@dataclass(frozen=True)
class DiffOptions:
    scope: DiffScope = DiffScope.FILE_SCOPED
    prefix: Optional[str] = None
    show_unchanged: bool = False


@dataclass(frozen=True)
class DiffEntry:
    key: str
    status: DiffStatus
    old_value: Optional[str] = None
    new_value: Optional[str] = None


@dataclass(frozen=True)
class DiffResult:
    """Entries sorted by key plus counts over the full classification."""
    entries: List[DiffEntry] = field(default_factory=list)
    added: int = 0
    modified: int = 0
    deleted: int = 0
    unchanged: int = 0

    @property
    def total(self) -> int:
        return self.added + self.modified + self.deleted + self.unchanged

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.deleted)

    def by_status(self, status: DiffStatus) -> List[DiffEntry]:
        return [e for e in self.entries if e.status is status]

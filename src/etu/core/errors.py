#!/usr/bin/env python3
"""
ETU ERRORS
----------
Exception hierarchy for the parsing, transform and configuration layers.
Every error names the offending file, key or token in its message.
Validation findings are NOT exceptions; see core.models.ValidationResult.

Author: etu Team
Date: 2026-10-19
"""

from typing import Iterable, Optional


class EtuError(Exception):
    """Base class for every failure raised by etu."""


class SourceNotFoundError(EtuError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"file not found: {path}")


class FormatDetectionError(EtuError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"unable to detect configuration format of '{path}'")


class UnsupportedFormatError(EtuError):
    def __init__(self, token: str, supported: Iterable[str]):
        self.token = token
        self.supported = list(supported)
        super().__init__(
            f"unsupported format '{token}' (supported: {', '.join(self.supported)})"
        )


class ParseError(EtuError):
    """Malformed input structure."""

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        self.source = source
        self.line = line
        location = ""
        if source:
            location = f"{source}:{line}: " if line else f"{source}: "
        super().__init__(f"{location}{message}")


class KeyCollisionError(EtuError):
    """A path is used both as a value and as a parent of another path."""

    def __init__(self, existing: str, incoming: str, detail: str = ""):
        self.existing = existing
        self.incoming = incoming
        if existing == incoming:
            message = f"key collision: '{existing}' is defined more than once"
        else:
            message = f"key collision: '{existing}' holds a value and cannot contain '{incoming}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class StructuralError(EtuError):
    """Tree input uses a construct the flat key space cannot represent."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{message} at '{path}'" if path else message)


class ConfigFileError(EtuError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"failed to load config file {path}: {reason}")

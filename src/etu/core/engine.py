#!/usr/bin/env python3
"""
ETU ENGINE - The Orchestrator
-----------------------------
Wires the collaborators around the pure core: reads file bytes once,
lets the registry pick a parser, and hands pairs to the validator and
the diff engine. The remote side of a diff comes from a SnapshotSource.

Author: etu Team
Date: 2026-10-19
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from etu.core.errors import SourceNotFoundError
from etu.core.models import (
    ConfigPair, DiffOptions, DiffResult, FormatType, ParseOptions, ValidationResult,
)
from etu.diff.engine import compute_diff, key_under_prefix
from etu.parsers.registry import ParserRegistry
from etu.validator.validator import ConfigValidator

logger = logging.getLogger("etu.core.engine")

STDIN_PATH = "-"


def read_source(path: str) -> bytes:
    """Byte source: a file path, or '-' for standard input."""
    if path == STDIN_PATH:
        return sys.stdin.buffer.read()
    target = Path(path)
    if not target.is_file():
        raise SourceNotFoundError(path)
    return target.read_bytes()


def extract_prefixes(pairs: Iterable[ConfigPair]) -> List[str]:
    """Top-level prefixes of the given keys ('/app/db/host' -> '/app')."""
    prefixes = set()
    for pair in pairs:
        head = pair.key.strip("/").split("/")[0]
        if head:
            prefixes.add("/" + head)
    return sorted(prefixes)


@dataclass(frozen=True)
class LoadedConfig:
    path: str
    format: FormatType
    pairs: List[ConfigPair]


class SnapshotSource(ABC):
    """Supplies the remote side of a diff."""

    @abstractmethod
    def fetch_pairs(self, prefixes: Sequence[str]) -> List[ConfigPair]:
        """Returns every pair under any of `prefixes` (all pairs when empty)."""


class FileSnapshotSource(SnapshotSource):
    """A store dump on disk (for example `etcdctl get / --prefix > dump.txt`)."""

    def __init__(self, path: str, engine: "ConfigEngine", fmt: Optional[str] = None):
        self.path = path
        self.engine = engine
        self.fmt = fmt

    def fetch_pairs(self, prefixes: Sequence[str]) -> List[ConfigPair]:
        loaded = self.engine.load(self.path, ParseOptions(format=self.fmt))
        if not prefixes:
            return loaded.pairs
        return [p for p in loaded.pairs if any(key_under_prefix(p.key, pre) for pre in prefixes)]


class ConfigEngine:
    """
    Principal orchestrator. Holds only read-only collaborators, so one
    instance may serve independent calls concurrently.
    """

    def __init__(self, registry: Optional[ParserRegistry] = None,
                 validator: Optional[ConfigValidator] = None):
        self.registry = registry or ParserRegistry()
        self.validator = validator or ConfigValidator()

    def load(self, path: str, options: Optional[ParseOptions] = None) -> LoadedConfig:
        options = options or ParseOptions()
        content = read_source(path)
        fmt, parser = self.registry.select(path, content, options.format)

        logger.info(f"Parsing configuration file={path} format={fmt.value}")
        pairs = parser.parse(content, source=path)
        logger.info(f"Parsed {len(pairs)} configuration items")
        return LoadedConfig(path=path, format=fmt, pairs=pairs)

    def validate(self, pairs: Iterable[ConfigPair], strict: bool = False) -> ValidationResult:
        return self.validator.validate(pairs, strict=strict)

    def diff(self, local: Sequence[ConfigPair], source: SnapshotSource,
             options: Optional[DiffOptions] = None) -> DiffResult:
        """
        Fetches the remote snapshot for `local` and diffs the two sides.
        With a prefix, local keys outside it take no part in the diff.
        """
        options = options or DiffOptions()
        if options.prefix:
            # remote is fetched only under the prefix, so local must match it
            local = [p for p in local if key_under_prefix(p.key, options.prefix)]
            logger.info(f"Filtered to {len(local)} local items under prefix {options.prefix}")
        prefixes = [options.prefix] if options.prefix else extract_prefixes(local)

        remote = source.fetch_pairs(prefixes)
        logger.info(f"Fetched {len(remote)} remote items for prefixes {prefixes or ['/']}")
        return compute_diff(local, remote, options)

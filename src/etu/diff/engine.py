#!/usr/bin/env python3
"""
ETU DIFF ENGINE
---------------
Classifies the difference between a local (file) snapshot and a remote
(store) snapshot.

Values are compared by their display string: the store holds only strings,
so a local integer 8080 and a remote "8080" are the same value.

Scopes:
    FILE_SCOPED  only keys present locally are reported (default)
    FULL         remote-only keys under the prefix are reported as deleted

Author: etu Team
Date: 2026-10-19
"""

import logging
from typing import Dict, Iterable, List, Optional

from etu.core.models import (
    ConfigPair, DiffEntry, DiffOptions, DiffResult, DiffScope, DiffStatus,
)

logger = logging.getLogger("etu.diff")


def key_under_prefix(key: str, prefix: Optional[str]) -> bool:
    """Path-aware prefix match: '/a/config' covers '/a/config/x', not '/a/configx'."""
    if not prefix:
        return True
    base = prefix.rstrip("/")
    if not base:
        return True
    return key == base or key.startswith(base + "/")


def _display_map(pairs: Iterable[ConfigPair]) -> Dict[str, str]:
    # last write wins if duplicates slipped through upstream
    return {p.key: p.display_value() for p in pairs}


def compute_diff(local: Iterable[ConfigPair], remote: Iterable[ConfigPair],
                 options: Optional[DiffOptions] = None) -> DiffResult:
    """
    Pure in-memory comparison. Entries are sorted by key (byte-wise);
    counts cover every classified key, including hidden unchanged ones.
    """
    options = options or DiffOptions()
    local_map = _display_map(local)
    remote_map = _display_map(remote)

    classified: List[DiffEntry] = []
    for key, new_value in local_map.items():
        if key not in remote_map:
            classified.append(DiffEntry(key, DiffStatus.ADDED, new_value=new_value))
        elif remote_map[key] != new_value:
            classified.append(DiffEntry(key, DiffStatus.MODIFIED,
                                        old_value=remote_map[key], new_value=new_value))
        else:
            classified.append(DiffEntry(key, DiffStatus.UNCHANGED,
                                        old_value=new_value, new_value=new_value))

    if options.scope is DiffScope.FULL:
        for key, old_value in remote_map.items():
            if key not in local_map and key_under_prefix(key, options.prefix):
                classified.append(DiffEntry(key, DiffStatus.DELETED, old_value=old_value))

    classified.sort(key=lambda e: e.key.encode("utf-8"))
    counts = {status: 0 for status in DiffStatus}
    for entry in classified:
        counts[entry.status] += 1

    entries = [
        e for e in classified
        if options.show_unchanged or e.status is not DiffStatus.UNCHANGED
    ]

    logger.debug(
        f"Diff: +{counts[DiffStatus.ADDED]} ~{counts[DiffStatus.MODIFIED]} "
        f"-{counts[DiffStatus.DELETED]} ={counts[DiffStatus.UNCHANGED]} (scope={options.scope.value})"
    )
    return DiffResult(
        entries=entries,
        added=counts[DiffStatus.ADDED],
        modified=counts[DiffStatus.MODIFIED],
        deleted=counts[DiffStatus.DELETED],
        unchanged=counts[DiffStatus.UNCHANGED],
    )

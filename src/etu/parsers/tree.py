#!/usr/bin/env python3
"""
ETU TREE TRANSFORM - Flatten / Unflatten
----------------------------------------
Bidirectional conversion between a nested tree (map of maps) and the flat
list of ConfigPairs keyed by '/'-joined paths.

    {"app": {"db": {"host": "x"}}}  <->  [/app/db/host = "x"]

Arrays have no place in the flat key space and are rejected. A path that
is both a leaf and a parent is a KeyCollisionError in both directions.

Author: etu Team
Date: 2026-10-19
"""

from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from etu.core.errors import KeyCollisionError, ParseError, StructuralError
from etu.core.models import ConfigPair, Scalar, ScalarKind


class Members(list):
    """
    Ordered object members as (name, value) tuples, duplicates preserved.
    Used as the JSON `object_pairs_hook` so repeated member names reach
    the collision check instead of being silently overwritten.
    """


Tree = Union[Mapping[str, Any], Members]


class _PathTracker:
    """Records emitted leaf paths and the parent prefixes they imply."""

    def __init__(self):
        self.leaves = set()
        # parent prefix -> first leaf path found beneath it
        self.branches: Dict[str, str] = {}

    def add(self, path: str):
        if path in self.leaves:
            raise KeyCollisionError(path, path)
        if path in self.branches:
            raise KeyCollisionError(path, self.branches[path])

        segments = path.split("/")[1:]
        for depth in range(1, len(segments)):
            prefix = "/" + "/".join(segments[:depth])
            if prefix in self.leaves:
                raise KeyCollisionError(prefix, path)
            self.branches.setdefault(prefix, path)

        self.leaves.add(path)


def _is_mapping(node: Any) -> bool:
    return isinstance(node, (Mapping, Members))


def _members(node: Tree) -> Iterable[Tuple[Any, Any]]:
    return node if isinstance(node, Members) else node.items()


def _segment(name: Any, parent: str) -> str:
    """Converts a member name into one or more path segments."""
    if not isinstance(name, str):
        name = Scalar.of(name).display()
    if not name or "" in name.split("/"):
        raise ParseError(f"empty path segment in member name '{name}' under '{parent or '/'}'")
    return name


def flatten(tree: Tree, prefix: str = "") -> List[ConfigPair]:
    """
    Depth-first flatten of `tree` into pairs, in member order.
    Leaf values keep their native type (string/number/bool/null).
    """
    pairs: List[ConfigPair] = []
    tracker = _PathTracker()
    _flatten_into(tree, prefix, pairs, tracker)
    return pairs


def _flatten_into(node: Tree, prefix: str, pairs: List[ConfigPair], tracker: _PathTracker):
    for name, value in _members(node):
        path = f"{prefix}/{_segment(name, prefix)}"

        if _is_mapping(value):
            _flatten_into(value, path, pairs, tracker)
        elif isinstance(value, (list, tuple, set)):
            raise StructuralError("arrays are not supported in configuration trees", path)
        else:
            tracker.add(path)
            pairs.append(ConfigPair(path, Scalar.of(value)))


def _split_key(key: str) -> List[str]:
    if not key.startswith("/") or key == "/":
        raise ParseError(f"malformed key '{key}': expected an absolute '/'-separated path")
    parts = key[1:].split("/")
    if "" in parts:
        raise ParseError(f"malformed key '{key}': empty path segment")
    return parts


def _first_leaf(node: Dict[str, Any], path: str) -> str:
    for name, value in node.items():
        child = f"{path}/{name}"
        if isinstance(value, dict):
            found = _first_leaf(value, child)
            if found:
                return found
        else:
            return child
    return path


def unflatten(pairs: Iterable[ConfigPair], drop_empty: bool = False) -> Dict[str, Any]:
    """
    Builds a nested dict from pairs. Scalar over scalar is last-wins;
    scalar over a branch (or the reverse) raises KeyCollisionError.

    `drop_empty` skips empty-string values. It exists for tree display
    only and must stay off when the result feeds validation or diff.
    """
    root: Dict[str, Any] = {}

    for pair in pairs:
        if drop_empty and pair.value.kind is ScalarKind.STRING and pair.value.value == "":
            continue

        parts = _split_key(pair.key)
        current = root
        for depth, part in enumerate(parts[:-1]):
            existing = current.get(part)
            if existing is None and part not in current:
                existing = current[part] = {}
            elif not isinstance(existing, dict):
                path = "/" + "/".join(parts[:depth + 1])
                raise KeyCollisionError(path, pair.key)
            current = existing

        leaf = parts[-1]
        existing = current.get(leaf)
        if isinstance(existing, dict):
            raise KeyCollisionError(pair.key, _first_leaf(existing, pair.key))
        current[leaf] = pair.native

    return root


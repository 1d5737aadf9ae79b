#!/usr/bin/env python3
"""
ETU EXPORTER - Hierarchical Output
----------------------------------
Author: etu Team
Date: 2026-10-19
"""

import io
import json
from typing import Any, Dict, Iterable

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from etu.core.errors import UnsupportedFormatError
from etu.core.models import ConfigPair
from etu.parsers.tree import unflatten

EXPORT_FORMATS = ("yaml", "json")


def yaml_emitter() -> YAML:
    """Round-trip emitter producing block style with 2-space mappings."""
    yaml = YAML(typ="rt")
    yaml.indent(mapping=2, sequence=4, offset=2)
    yaml.width = 4096
    return yaml


class TreeExporter:
    """
    The Reconstructor: converts pairs into nested YAML/JSON text.
    Empty-string values are dropped, since this output is for display
    and conversion, never for validation or diff.
    """

    def __init__(self, sort_keys: bool = False):
        self.sort_keys = sort_keys
        self.yaml = yaml_emitter()

    def build_tree(self, pairs: Iterable[ConfigPair]) -> Dict[str, Any]:
        return unflatten(pairs, drop_empty=True)

    def _to_commented_map(self, data: Dict[str, Any]) -> CommentedMap:
        """Recursive rebuild so ruamel emits block style in a stable key order."""
        keys = sorted(data) if self.sort_keys else list(data)
        result = CommentedMap()
        for key in keys:
            value = data[key]
            result[key] = self._to_commented_map(value) if isinstance(value, dict) else value
        return result

    def export(self, pairs: Iterable[ConfigPair], fmt: str = "yaml") -> str:
        tree = self.build_tree(pairs)
        if fmt == "json":
            return json.dumps(tree, indent=2, sort_keys=self.sort_keys, ensure_ascii=False) + "\n"
        if fmt != "yaml":
            raise UnsupportedFormatError(fmt, EXPORT_FORMATS)

        if not tree:
            return "{}\n"
        stream = io.StringIO()
        self.yaml.dump(self._to_commented_map(tree), stream)
        return stream.getvalue()

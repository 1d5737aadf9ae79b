"""JSON tree parser: one JSON object, flattened into '/'-joined keys."""

import json
from typing import List

from etu.core.errors import ParseError
from etu.core.models import ConfigPair, FormatType
from etu.parsers.base import ConfigParser
from etu.parsers.tree import Members, flatten


class JSONTreeParser(ConfigParser):

    format_name = FormatType.JSON.value

    def parse(self, content: bytes, source: str = "<input>") -> List[ConfigPair]:
        text = self.decode(content, source)
        if not text.strip():
            return []

        try:
            root = json.loads(text, object_pairs_hook=Members)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid JSON: {e.msg} (column {e.colno})", source, e.lineno)

        if not isinstance(root, Members):
            raise ParseError("JSON root must be an object, not an array or scalar", source)
        return flatten(root)

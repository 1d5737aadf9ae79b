#!/usr/bin/env python3
"""
ETU ETCDCTL PARSER - Flat Block Format
--------------------------------------
Parses the output format of `etcdctl get --prefix`: blocks separated by
blank lines, where the first line of a block is the key and the remaining
lines are the value.

    /app/name
    myapp

    /app/banner
    line one
    line two

Values are kept verbatim (no escaping, no type inference) because the
store itself only holds strings.

Author: etu Team
Date: 2026-10-19
"""

import logging
from typing import Dict, List, Tuple

from etu.core.errors import ParseError
from etu.core.models import ConfigPair, FormatType, Scalar
from etu.parsers.base import ConfigParser

logger = logging.getLogger("etu.parsers.etcdctl")

Block = Tuple[int, List[str]]


class EtcdctlParser(ConfigParser):
    """
    Block parser with last-wins duplicate handling. A duplicated key keeps
    the position of its first occurrence and the value of its last one.
    """

    format_name = FormatType.ETCDCTL.value

    def parse(self, content: bytes, source: str = "<input>") -> List[ConfigPair]:
        text = self.decode(content, source)
        values: Dict[str, str] = {}

        for line_no, lines in self._split_blocks(text):
            key_line = lines[0]
            if key_line[:1].isspace():
                raise ParseError("value block found without a key line", source, line_no)

            # A lone key at EOF yields an empty value
            value = "\n".join(lines[1:])
            if key_line in values:
                logger.debug(f"Duplicate key {key_line} at line {line_no}: last value wins")
            values[key_line] = value

        return [ConfigPair(key, Scalar.string(value)) for key, value in values.items()]

    def _split_blocks(self, text: str) -> List[Block]:
        """Groups lines into (first_line_no, lines) blocks at blank lines."""
        blocks: List[Block] = []
        current: List[str] = []
        start = 0

        for i, line in enumerate(text.split("\n"), 1):
            if not line.strip():
                if current:
                    blocks.append((start, current))
                    current = []
                continue
            if not current:
                start = i
            current.append(line)

        if current:
            blocks.append((start, current))
        return blocks

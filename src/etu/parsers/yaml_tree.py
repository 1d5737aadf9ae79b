#!/usr/bin/env python3
"""
ETU YAML PARSER
---------------
Loads a YAML mapping with ruamel.yaml and flattens it into ConfigPairs.
Scalars keep the type ruamel resolves (YAML 1.2 rules). Only the first
document of a multi-document stream is used.

Author: etu Team
Date: 2026-10-19
"""

import io
import logging
import re
from typing import Any, List, Mapping

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.constructor import DuplicateKeyError

from etu.core.errors import KeyCollisionError, ParseError
from etu.core.models import ConfigPair, FormatType
from etu.parsers.base import ConfigParser
from etu.parsers.tree import flatten

logger = logging.getLogger("etu.parsers.yaml")

DUPLICATE_KEY_PATTERN = re.compile(r'duplicate key "(.*?)"')


def load_first_document(text: str) -> Any:
    """
    Returns the first YAML document of `text` (None when empty). The
    stream is read lazily: a second document is only probed for, and an
    error inside it is logged instead of failing the load.
    """
    yaml = YAML(typ="safe", pure=True)
    documents = yaml.load_all(io.StringIO(text))
    try:
        first = next(documents, None)
        try:
            has_more = next(documents, None) is not None
        except YAMLError as e:
            logger.warning(f"Ignoring invalid YAML after the first document: {getattr(e, 'problem', None) or e}")
            has_more = True
        if has_more:
            logger.warning("YAML stream contains more than one document, only the first is parsed")
    finally:
        documents.close()
    return first


class YAMLTreeParser(ConfigParser):

    format_name = FormatType.YAML.value

    def parse(self, content: bytes, source: str = "<input>") -> List[ConfigPair]:
        text = self.decode(content, source)

        try:
            root = load_first_document(text)
        except DuplicateKeyError as e:
            match = DUPLICATE_KEY_PATTERN.search(str(e.problem))
            key = match.group(1) if match else "?"
            line = e.problem_mark.line + 1 if e.problem_mark else None
            raise KeyCollisionError(key, key, detail=f"{source} line {line}")
        except YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            line = mark.line + 1 if mark is not None else None
            raise ParseError(f"invalid YAML: {getattr(e, 'problem', None) or e}", source, line)

        if root is None:
            return []
        if not isinstance(root, Mapping):
            raise ParseError("YAML root must be a mapping, not a sequence or scalar", source)
        return flatten(root)

#!/usr/bin/env python3
"""
ETU PARSER REGISTRY - Format Detection & Dispatch
-------------------------------------------------
Maps a file (path + already-read content) and an optional explicit format
token to the parser that understands it.

Detection order in auto mode:
    1. Extension: .json, .yaml/.yml, .txt
    2. Content: JSON object -> json, leading '/' key line -> etcdctl,
       YAML mapping -> yaml
Detection never consumes a stream: callers read the bytes once and hand
the same buffer to the selected parser.

Author: etu Team
Date: 2026-10-19
"""

import json
import logging
import os
from typing import Dict, List, Optional, Tuple

from ruamel.yaml import YAMLError
from ruamel.yaml.constructor import DuplicateKeyError

from etu.core.errors import FormatDetectionError, UnsupportedFormatError
from etu.core.models import FormatType
from etu.parsers.base import ConfigParser
from etu.parsers.etcdctl import EtcdctlParser
from etu.parsers.json_tree import JSONTreeParser
from etu.parsers.yaml_tree import YAMLTreeParser, load_first_document

logger = logging.getLogger("etu.parsers.registry")

EXTENSION_FORMATS = {
    ".json": FormatType.JSON,
    ".yaml": FormatType.YAML,
    ".yml": FormatType.YAML,
    ".txt": FormatType.ETCDCTL,
}


class ParserRegistry:
    """Read-only table of format -> parser, plus the auto-detector."""

    def __init__(self):
        self.parsers: Dict[FormatType, ConfigParser] = {
            FormatType.ETCDCTL: EtcdctlParser(),
            FormatType.JSON: JSONTreeParser(),
            FormatType.YAML: YAMLTreeParser(),
        }

    def supported_formats(self) -> List[str]:
        return [FormatType.AUTO.value] + [f.value for f in self.parsers]

    def resolve_format(self, token: Optional[str]) -> FormatType:
        """Turns a user supplied token into a FormatType (None -> AUTO)."""
        if token is None or token == "":
            return FormatType.AUTO
        try:
            fmt = FormatType(token.lower())
        except ValueError:
            raise UnsupportedFormatError(token, self.supported_formats())
        if fmt is not FormatType.AUTO and fmt not in self.parsers:
            raise UnsupportedFormatError(token, self.supported_formats())
        return fmt

    def get_parser(self, fmt: FormatType) -> ConfigParser:
        parser = self.parsers.get(fmt)
        if parser is None:
            raise UnsupportedFormatError(fmt.value, self.supported_formats())
        return parser

    def select(self, path: str, content: bytes,
               explicit: Optional[str] = None) -> Tuple[FormatType, ConfigParser]:
        """
        Picks the parser for `path`. An explicit token is used verbatim and
        skips detection entirely.
        """
        fmt = self.resolve_format(explicit)
        if fmt is FormatType.AUTO:
            fmt = self.detect_format(path, content)
            logger.debug(f"Auto-detected format '{fmt.value}' for {path}")
        return fmt, self.get_parser(fmt)

    def detect_format(self, path: str, content: bytes) -> FormatType:
        fmt = self.detect_by_extension(path)
        if fmt is not None:
            return fmt

        fmt = self.detect_by_content(content)
        if fmt is None:
            raise FormatDetectionError(path)
        return fmt

    def detect_by_extension(self, path: str) -> Optional[FormatType]:
        _, ext = os.path.splitext(path)
        return EXTENSION_FORMATS.get(ext.lower())

    def detect_by_content(self, content: bytes) -> Optional[FormatType]:
        try:
            text = content.decode("utf-8").lstrip("\ufeff")
        except UnicodeDecodeError:
            return None

        first_line = next((line.strip() for line in text.splitlines() if line.strip()), "")
        if not first_line:
            # Nothing to parse: the flat parser yields zero pairs
            return FormatType.ETCDCTL

        if first_line.startswith("{"):
            try:
                if isinstance(json.loads(text), dict):
                    return FormatType.JSON
            except ValueError:
                pass

        if first_line.startswith("/"):
            return FormatType.ETCDCTL

        try:
            if isinstance(load_first_document(text), dict):
                return FormatType.YAML
        except DuplicateKeyError:
            # Still a mapping; the YAML parser reports the collision
            return FormatType.YAML
        except YAMLError:
            pass
        return None

"""Parser interface shared by every input format."""

from abc import ABC, abstractmethod
from typing import List

from etu.core.errors import ParseError
from etu.core.models import ConfigPair


class ConfigParser(ABC):
    """Turns the raw bytes of one file into canonical pairs."""

    format_name: str = ""

    @abstractmethod
    def parse(self, content: bytes, source: str = "<input>") -> List[ConfigPair]:
        """Parses `content`; `source` is only used in error messages."""

    def decode(self, content: bytes, source: str) -> str:
        """UTF-8 decode with BOM removal and LF line endings."""
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"input is not valid UTF-8 ({e.reason} at byte {e.start})", source)
        text = text.lstrip("\ufeff")
        return text.replace("\r\n", "\n").replace("\r", "\n")

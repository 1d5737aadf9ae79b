#!/usr/bin/env python3
"""
ETU SETTINGS
------------
Loads user defaults from a YAML config file:

    # ~/.config/etu/config.yaml  (or $ETUCONFIG)
    log-level: info
    default-format: yaml
    strict: true

Precedence is always: command-line flag > config file > built-in default.

Author: etu Team
Date: 2026-10-19
"""

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML, YAMLError

from etu.core.errors import ConfigFileError, UnsupportedFormatError
from etu.core.models import FormatType

logger = logging.getLogger("etu.core.settings")

CONFIG_ENV_VAR = "ETUCONFIG"
LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class Settings:
    log_level: str = "warning"
    default_format: str = FormatType.AUTO.value
    strict: bool = False

    def resolve_format(self, flag: Optional[str]) -> str:
        return flag if flag else self.default_format

    def resolve_strict(self, flag: Optional[bool]) -> bool:
        return self.strict if flag is None else flag

    def resolve_log_level(self, flag: Optional[str]) -> str:
        return flag if flag else self.log_level


def config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "etu" / "config.yaml"


def load_settings(path: Optional[Path] = None) -> Settings:
    """Returns defaults when the file does not exist."""
    path = Path(path) if path else config_path()
    if not path.exists():
        return Settings()

    mode = stat.S_IMODE(path.stat().st_mode)
    if mode & 0o077:
        logger.warning(f"Config file {path} has permissions {oct(mode)}. Consider changing to 0600.")

    try:
        data = YAML(typ="safe", pure=True).load(path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(str(path), str(e))
    except YAMLError as e:
        raise ConfigFileError(str(path), f"invalid YAML: {e}")

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigFileError(str(path), "top level must be a mapping")
    return _settings_from_mapping(data, path)


def _settings_from_mapping(data: Dict[str, Any], path: Path) -> Settings:
    log_level = str(data.get("log-level", Settings.log_level)).lower()
    if log_level not in LOG_LEVELS:
        raise ConfigFileError(str(path), f"unknown log-level '{log_level}' (use {', '.join(LOG_LEVELS)})")

    default_format = str(data.get("default-format", Settings.default_format)).lower()
    if default_format not in FormatType.tokens():
        raise UnsupportedFormatError(default_format, FormatType.tokens())

    strict = data.get("strict", Settings.strict)
    if not isinstance(strict, bool):
        raise ConfigFileError(str(path), "'strict' must be true or false")

    return Settings(log_level=log_level, default_format=default_format, strict=strict)

"""Shared test fixtures and configuration."""

import sys
from pathlib import Path

# Ensure the 'src' directory is in the python path so we can import etu
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

import pytest

from etu.core.models import ConfigPair


@pytest.fixture
def write_file(tmp_path):
    """Writes `content` (str or bytes) to tmp_path/name and returns the path as str."""
    def _write(name, content):
        target = tmp_path / name
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        return str(target)
    return _write


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Points ETUCONFIG at a file that does not exist unless a test writes it."""
    path = tmp_path / "etu-config.yaml"
    monkeypatch.setenv("ETUCONFIG", str(path))
    return path


def make_pairs(mapping):
    return [ConfigPair.of(key, value) for key, value in mapping.items()]


@pytest.fixture
def pair_factory():
    return make_pairs

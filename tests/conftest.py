"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Generator

FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def clock():
    """A clock frozen at 2024-06-15 12:00 local time."""
    return lambda: FIXED_NOW


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[parser]
operators_allowed = []
operators_disallowed = ["body"]
case_sensitive = false
max_depth = 8

[display]
colored_output = false

[[operators]]
name = "priority"
aliases = ["p", "prio"]
value_type = "string"

[[operators]]
name = "received"
kind = "received"
aliases = ["rcvd"]
value_type = "date"
allow_negation = false
""")
    return config_path

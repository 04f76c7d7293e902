"""Common test fixtures."""

from pathlib import Path
from typing import Callable, Generator

import pytest
from rich.console import Console

from lshdedup.index import LSHIndex
from lshdedup.logging import setup_logging
from lshdedup.minhash import Sketcher


@pytest.fixture
def test_console() -> Console:
    """Create a test console with consistent settings."""
    return Console(force_terminal=True, no_color=True, width=100)


@pytest.fixture
def sketcher() -> Sketcher:
    """Seeded sketcher with 2-token shingles and 64 hash functions."""
    return Sketcher(tokens_in_word=2, num_hash_functions=64, seed=1234)


@pytest.fixture
def small_index() -> LSHIndex:
    """Tiny index: 2 bands of 2 rows, threshold 0.5."""
    return LSHIndex(
        threshold=0.5, tokens_in_word=2, num_hash_functions=4, bands=2, rows=2, seed=42
    )


@pytest.fixture
def create_file_with_content(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create a file with given content."""

    def _create(name: str, content: str) -> Path:
        file_path = tmp_path / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path

    return _create


@pytest.fixture
def reset_logging() -> Generator[None, None, None]:
    """Restore console-only logging after a test reconfigures it."""
    yield
    setup_logging()

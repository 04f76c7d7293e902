"""Configuration models for the command line."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from lshdedup.exceptions import IllegalConfigurationError
from lshdedup.index import (
    DEFAULT_BANDS,
    DEFAULT_NUM_HASH_FUNCTIONS,
    DEFAULT_ROWS,
    DEFAULT_TOKENS_IN_WORD,
    IndexConfig,
)


@dataclass
class CLIConfig:
    """Configuration for CLI operation."""

    paths: List[str]
    threshold: float = 0.9
    tokens_in_word: int = DEFAULT_TOKENS_IN_WORD
    num_hash_functions: int = DEFAULT_NUM_HASH_FUNCTIONS
    bands: int = DEFAULT_BANDS
    rows: int = DEFAULT_ROWS
    seed: Optional[int] = None
    per_line: bool = False
    min_printable_ratio: float = 0.8
    log_file: Optional[Path] = None
    json_log: bool = False
    verbose: bool = False
    show_unique: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.paths:
            raise IllegalConfigurationError(
                "paths", self.paths, "at least one path must be provided"
            )
        if self.min_printable_ratio <= 0 or self.min_printable_ratio > 1:
            raise IllegalConfigurationError(
                "min_printable_ratio",
                self.min_printable_ratio,
                "must be between 0 and 1",
            )
        # Surface index parameter errors before any file is read
        _ = self.index_config

    @property
    def index_config(self) -> IndexConfig:
        """Create IndexConfig from settings."""
        return IndexConfig(
            threshold=self.threshold,
            tokens_in_word=self.tokens_in_word,
            num_hash_functions=self.num_hash_functions,
            bands=self.bands,
            rows=self.rows,
            seed=self.seed,
        )

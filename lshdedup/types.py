"""Type definitions for lshdedup."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, TypeAlias

# One minimum hash value per hash function
Sketch: TypeAlias = Tuple[int, ...]

# (band index, row values...) for one band of a sketch
BandKey: TypeAlias = Tuple[int, ...]

TokenSequence: TypeAlias = Sequence[str]

# Common type aliases
JsonDict: TypeAlias = Dict[str, Any]
FileIterator: TypeAlias = Iterator[Path]


@dataclass(frozen=True)
class SimilarDocument:
    """A previously indexed document that matched a lookup."""

    doc_id: int
    similarity: float
    key: Optional[str] = None


@dataclass(frozen=True)
class DuplicatePair:
    """A document found to be a near-duplicate of an earlier one."""

    duplicate: str
    original: str
    similarity: float


@dataclass
class DuplicateGroup:
    """Documents connected through near-duplicate matches."""

    id: int
    keys: List[str]
    similarity: float

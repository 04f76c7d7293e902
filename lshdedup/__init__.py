"""Near-duplicate detection with MinHash sketches and LSH banding."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__: str = _pkg_version("lshdedup")
except PackageNotFoundError:
    __version__ = "0.1.0"

from lshdedup.exceptions import IllegalConfigurationError, LshDedupError
from lshdedup.hashing import HashFamily, HashFunction
from lshdedup.index import (
    IndexConfig,
    LSHIndex,
    SynchronizedLSHIndex,
    collision_probability,
    s_curve_threshold,
)
from lshdedup.minhash import Sketcher, tokenize

__all__ = [
    "__version__",
    "HashFamily",
    "HashFunction",
    "IllegalConfigurationError",
    "IndexConfig",
    "LSHIndex",
    "LshDedupError",
    "Sketcher",
    "SynchronizedLSHIndex",
    "collision_probability",
    "s_curve_threshold",
    "tokenize",
]

"""LSH banding index for streaming near-duplicate detection.

Each sketch is cut into ``bands`` slices of ``rows`` values. Documents that
agree on a whole slice land in the same bucket and are compared directly;
documents that share no slice are never compared. With ``bands`` bands of
``rows`` rows, two documents of Jaccard similarity ``s`` share a bucket with
probability ``1 - (1 - s**rows) ** bands``. For the default 20 x 20 banding:

    J(A,B)   Probability of being compared
    0.70     0.016
    0.80     0.206
    0.85     0.546
    0.861    0.642   (steepest point, (1/bands) ** (1/rows))
    0.87     0.720
    0.90     0.925
    0.95     0.999

More bands raise recall (and false positives), more rows raise precision (and
false negatives).
"""

import random
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from lshdedup.exceptions import IllegalConfigurationError
from lshdedup.logging import get_logger
from lshdedup.minhash import Sketcher, tokenize
from lshdedup.types import BandKey, SimilarDocument, Sketch

logger = get_logger()

DEFAULT_TOKENS_IN_WORD = 5
DEFAULT_NUM_HASH_FUNCTIONS = 400
DEFAULT_BANDS = 20
DEFAULT_ROWS = 20


def collision_probability(similarity: float, bands: int, rows: int) -> float:
    """Probability that two documents of the given similarity share a band."""
    return 1.0 - (1.0 - similarity**rows) ** bands


def s_curve_threshold(bands: int, rows: int) -> float:
    """Similarity at which the banding S-curve is steepest."""
    return float((1.0 / bands) ** (1.0 / rows))


@dataclass
class IndexConfig:
    """Configuration for an LSH index."""

    threshold: float = 0.9
    tokens_in_word: int = DEFAULT_TOKENS_IN_WORD
    num_hash_functions: int = DEFAULT_NUM_HASH_FUNCTIONS
    bands: int = DEFAULT_BANDS
    rows: int = DEFAULT_ROWS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0 <= self.threshold <= 1:
            raise IllegalConfigurationError(
                "threshold", self.threshold, "must be between 0 and 1"
            )
        if self.tokens_in_word <= 0:
            raise IllegalConfigurationError(
                "tokens_in_word", self.tokens_in_word, "must be positive"
            )
        if self.num_hash_functions <= 0:
            raise IllegalConfigurationError(
                "num_hash_functions", self.num_hash_functions, "must be positive"
            )
        if self.bands <= 0:
            raise IllegalConfigurationError("bands", self.bands, "must be positive")
        if self.rows <= 0:
            raise IllegalConfigurationError("rows", self.rows, "must be positive")
        if self.bands * self.rows != self.num_hash_functions:
            raise IllegalConfigurationError(
                "bands * rows",
                self.bands * self.rows,
                f"must equal num_hash_functions ({self.num_hash_functions})",
            )


@dataclass
class IndexStats:
    """Snapshot of index size and work done."""

    documents: int
    buckets: int
    largest_bucket: int
    comparisons: int


class LSHIndex:
    """Decides whether a document is a near-duplicate of one seen before."""

    def __init__(
        self,
        threshold: float,
        tokens_in_word: int = DEFAULT_TOKENS_IN_WORD,
        num_hash_functions: int = DEFAULT_NUM_HASH_FUNCTIONS,
        bands: int = DEFAULT_BANDS,
        rows: int = DEFAULT_ROWS,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = IndexConfig(
            threshold=threshold,
            tokens_in_word=tokens_in_word,
            num_hash_functions=num_hash_functions,
            bands=bands,
            rows=rows,
            seed=seed,
        )
        self.threshold = threshold
        self.bands = bands
        self.rows = rows
        self.sketcher = Sketcher(tokens_in_word, num_hash_functions, rng=rng, seed=seed)

        # Stored sketches, indexed by document id
        self._sketches: List[Sketch] = []
        self._keys: List[Optional[str]] = []
        self._buckets: Dict[BandKey, List[int]] = {}
        self._comparisons = 0

        logger.debug_with_fields(
            "Created LSH index",
            operation="index_init",
            threshold=threshold,
            tokens_in_word=tokens_in_word,
            num_hash_functions=num_hash_functions,
            bands=bands,
            rows=rows,
        )

    @classmethod
    def from_config(
        cls, config: IndexConfig, rng: Optional[random.Random] = None
    ) -> "LSHIndex":
        """Create an index from an IndexConfig."""
        return cls(
            threshold=config.threshold,
            tokens_in_word=config.tokens_in_word,
            num_hash_functions=config.num_hash_functions,
            bands=config.bands,
            rows=config.rows,
            rng=rng,
            seed=config.seed,
        )

    def __len__(self) -> int:
        return len(self._sketches)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def candidate_probability(self, similarity: float) -> float:
        """Probability that a document of *similarity* is compared at all."""
        return collision_probability(similarity, self.bands, self.rows)

    def band_keys(self, sketch: Sketch) -> List[BandKey]:
        """Bucket key of every band of *sketch*."""
        rows = self.rows
        return [
            (band,) + tuple(sketch[band * rows : band * rows + rows])
            for band in range(self.bands)
        ]

    def look_for_similar_document(self, doc: str, key: Optional[str] = None) -> bool:
        """Return True if a similar document was already seen.

        A document with no match is added to the index; a matching one is not.
        """
        return self.check_document(doc, key=key) is not None

    def check_document(
        self, doc: str, key: Optional[str] = None
    ) -> Optional[SimilarDocument]:
        """Look up *doc* and insert it when nothing similar is stored.

        Returns:
            The first stored document meeting the threshold, or None if the
            document was new (and has now been indexed)
        """
        sketch = self.sketcher.compute_sketch(tokenize(doc))
        band_keys = self.band_keys(sketch)

        match = self._find_match(sketch, band_keys)
        if match is not None:
            logger.debug_with_fields(
                "Found similar document",
                operation="lookup",
                key=key,
                matched_id=match.doc_id,
                matched_key=match.key,
                similarity=match.similarity,
            )
            return match

        doc_id = self._insert(sketch, band_keys, key)
        logger.debug_with_fields(
            "Indexed new document", operation="insert", key=key, doc_id=doc_id
        )
        return None

    def find_similar(self, doc: str) -> Optional[SimilarDocument]:
        """Look up *doc* without ever inserting it."""
        return self.query_sketch(self.sketcher.compute_sketch(tokenize(doc)))

    def query_sketch(self, sketch: Sketch) -> Optional[SimilarDocument]:
        """Look up a precomputed sketch without inserting it."""
        self.sketcher.check_sketch(sketch)
        return self._find_match(sketch, self.band_keys(sketch))

    def add_sketch(self, sketch: Sketch, key: Optional[str] = None) -> int:
        """Insert a precomputed sketch unconditionally and return its id."""
        self.sketcher.check_sketch(sketch)
        sketch = tuple(sketch)
        return self._insert(sketch, self.band_keys(sketch), key)

    def clear_documents(self) -> None:
        """Forget every stored document."""
        logger.debug_with_fields(
            "Clearing index",
            operation="clear",
            documents=len(self._sketches),
            buckets=len(self._buckets),
        )
        self._buckets.clear()
        self._sketches.clear()
        self._keys.clear()
        self._comparisons = 0

    def stats(self) -> IndexStats:
        return IndexStats(
            documents=len(self._sketches),
            buckets=len(self._buckets),
            largest_bucket=max((len(b) for b in self._buckets.values()), default=0),
            comparisons=self._comparisons,
        )

    def _find_match(
        self, sketch: Sketch, band_keys: List[BandKey]
    ) -> Optional[SimilarDocument]:
        # A candidate can sit in several shared buckets; compare it only once
        compared: Set[int] = set()
        for band_key in band_keys:
            for doc_id in self._buckets.get(band_key, ()):
                if doc_id in compared:
                    continue
                compared.add(doc_id)
                self._comparisons += 1
                similarity = self.sketcher.compare_sketches(
                    sketch, self._sketches[doc_id]
                )
                if similarity >= self.threshold:
                    return SimilarDocument(
                        doc_id=doc_id, similarity=similarity, key=self._keys[doc_id]
                    )
        return None

    def _insert(
        self, sketch: Sketch, band_keys: List[BandKey], key: Optional[str]
    ) -> int:
        doc_id = len(self._sketches)
        self._sketches.append(sketch)
        self._keys.append(key)
        for band_key in band_keys:
            self._buckets.setdefault(band_key, []).append(doc_id)
        return doc_id


class SynchronizedLSHIndex(LSHIndex):
    """LSHIndex whose lookups and inserts are serialized by a lock.

    A lookup reads the buckets and then conditionally inserts; without the lock
    two concurrent lookups of near-identical documents could both insert.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._lock = threading.RLock()
        super().__init__(*args, **kwargs)

    def check_document(
        self, doc: str, key: Optional[str] = None
    ) -> Optional[SimilarDocument]:
        with self._lock:
            return super().check_document(doc, key=key)

    def query_sketch(self, sketch: Sketch) -> Optional[SimilarDocument]:
        with self._lock:
            return super().query_sketch(sketch)

    def add_sketch(self, sketch: Sketch, key: Optional[str] = None) -> int:
        with self._lock:
            return super().add_sketch(sketch, key=key)

    def clear_documents(self) -> None:
        with self._lock:
            super().clear_documents()

    def stats(self) -> IndexStats:
        with self._lock:
            return super().stats()

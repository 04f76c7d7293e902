"""MinHash implementation for near-duplicate detection."""

import random
from typing import Iterator, List, Optional

import xxhash
from datasketch import LeanMinHash

from lshdedup.exceptions import IllegalConfigurationError
from lshdedup.hashing import UNIVERSE_SIZE, HashFamily
from lshdedup.types import Sketch, TokenSequence

# Every sketch slot starts here, so an empty document sketches to all-max
MAX_HASH_VALUE = UNIVERSE_SIZE

# Byte order used for serialized sketches
SERIALIZATION_BYTEORDER = "<"

# datasketch permutation scheme recorded on exported sketches
LEAN_SCHEME = "legacy"


def tokenize(doc: str) -> List[str]:
    """Split a document on runs of whitespace."""
    return doc.split()


def fingerprint(shingle: str) -> int:
    """Stable 32-bit fingerprint of a shingle string."""
    return xxhash.xxh32_intdigest(shingle.encode("utf-8"))


class Sketcher:
    """Turns token sequences into fixed-length MinHash sketches."""

    def __init__(
        self,
        tokens_in_word: int,
        num_hash_functions: int,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        """Build the hash family for this sketcher.

        Args:
            tokens_in_word: Number of tokens per shingle
            num_hash_functions: Sketch length
            rng: Random source for the hash family coefficients
            seed: Seed used when rng is not given

        Raises:
            IllegalConfigurationError: If either size is not positive
        """
        if tokens_in_word <= 0:
            raise IllegalConfigurationError(
                "tokens_in_word", tokens_in_word, "must be positive"
            )
        if num_hash_functions <= 0:
            raise IllegalConfigurationError(
                "num_hash_functions", num_hash_functions, "must be positive"
            )

        self.tokens_in_word = tokens_in_word
        self.num_hash_functions = num_hash_functions
        self.seed = seed if rng is None else None
        self.hash_family = HashFamily(num_hash_functions, rng=rng, seed=seed)

    def empty_sketch(self) -> Sketch:
        """Sketch of a document with no tokens."""
        return (MAX_HASH_VALUE,) * self.num_hash_functions

    def shingles(self, tokens: TokenSequence) -> Iterator[str]:
        """Yield one shingle per start position.

        Shingles near the end of the sequence hold fewer tokens; they are
        kept rather than dropped.
        """
        for start in range(len(tokens)):
            yield "".join(tokens[start : start + self.tokens_in_word])

    def compute_sketch(self, tokens: Optional[TokenSequence]) -> Sketch:
        """Compute the MinHash sketch of a token sequence."""
        if not tokens:
            return self.empty_sketch()

        minimums = [MAX_HASH_VALUE] * self.num_hash_functions
        for shingle in self.shingles(tokens):
            hash_values = self.hash_family.hash_all(fingerprint(shingle))
            minimums = [min(m, h) for m, h in zip(minimums, hash_values)]

        return tuple(minimums)

    def compute_sketch_from_text(self, doc: str) -> Sketch:
        """Tokenize *doc* on whitespace and sketch the tokens."""
        return self.compute_sketch(tokenize(doc))

    def compare_sketches(self, first: Sketch, second: Sketch) -> float:
        """Estimate Jaccard similarity as the fraction of equal positions.

        Raises:
            ValueError: If either sketch was not produced with this sketch length
        """
        self.check_sketch(first)
        self.check_sketch(second)
        equal_hashes = sum(1 for x, y in zip(first, second) if x == y)
        return equal_hashes / self.num_hash_functions

    def check_sketch(self, sketch: Sketch) -> None:
        """Fail fast on a sketch of the wrong length."""
        if len(sketch) != self.num_hash_functions:
            raise ValueError(
                f"Sketch has {len(sketch)} values, "
                f"expected {self.num_hash_functions}"
            )


def to_lean_minhash(sketch: Sketch, seed: int = 0) -> LeanMinHash:
    """Wrap a sketch as a datasketch LeanMinHash.

    Two exported sketches compare with ``LeanMinHash.jaccard`` exactly as with
    :meth:`Sketcher.compare_sketches`, provided they share *seed*.
    """
    # Sketch values are 31-bit, so they fit the legacy uint32 layout
    return LeanMinHash(seed=seed, hashvalues=list(sketch), scheme=LEAN_SCHEME)


def from_lean_minhash(lean: LeanMinHash) -> Sketch:
    """Recover a sketch from a LeanMinHash."""
    return tuple(int(value) for value in lean.hashvalues)


def serialize_sketch(sketch: Sketch, seed: int = 0) -> bytes:
    """Serialize a sketch to bytes using the datasketch wire layout."""
    lean = to_lean_minhash(sketch, seed=seed)
    buf = bytearray(lean.bytesize(byteorder=SERIALIZATION_BYTEORDER))
    lean.serialize(buf, byteorder=SERIALIZATION_BYTEORDER)
    return bytes(buf)


def deserialize_sketch(data: bytes) -> Sketch:
    """Inverse of :func:`serialize_sketch`."""
    lean = LeanMinHash.deserialize(data, byteorder=SERIALIZATION_BYTEORDER)
    return from_lean_minhash(lean)

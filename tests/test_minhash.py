import statistics
from typing import List, Optional

import pytest
from datasketch import LeanMinHash

from lshdedup.exceptions import IllegalConfigurationError
from lshdedup.hashing import HashFamily
from lshdedup.minhash import (
    MAX_HASH_VALUE,
    Sketcher,
    deserialize_sketch,
    fingerprint,
    from_lean_minhash,
    serialize_sketch,
    to_lean_minhash,
    tokenize,
)


def make_tokens(start: int, stop: int) -> List[str]:
    return [f"tok{i}" for i in range(start, stop)]


@pytest.mark.parametrize(
    "tokens_in_word,num_hash_functions,parameter",
    [
        (0, 10, "tokens_in_word"),
        (-3, 10, "tokens_in_word"),
        (5, 0, "num_hash_functions"),
        (5, -1, "num_hash_functions"),
    ],
)
def test_sketcher_rejects_bad_sizes(
    tokens_in_word: int, num_hash_functions: int, parameter: str
) -> None:
    with pytest.raises(IllegalConfigurationError) as exc_info:
        Sketcher(tokens_in_word, num_hash_functions)
    assert exc_info.value.parameter == parameter


def test_tokenize_splits_on_whitespace_runs() -> None:
    assert tokenize("the  quick\tbrown\r\nfox ") == ["the", "quick", "brown", "fox"]
    assert tokenize("   ") == []
    assert tokenize("") == []


def test_shingles_keep_short_trailing_words() -> None:
    sketcher = Sketcher(tokens_in_word=2, num_hash_functions=4, seed=0)
    assert list(sketcher.shingles(["a", "b", "c"])) == ["ab", "bc", "c"]


def test_shingles_longer_than_document() -> None:
    sketcher = Sketcher(tokens_in_word=5, num_hash_functions=4, seed=0)
    assert list(sketcher.shingles(["a", "b"])) == ["ab", "b"]


@pytest.mark.parametrize("tokens", [[], None])
def test_empty_input_gives_sentinel_sketch(
    sketcher: Sketcher, tokens: Optional[List[str]]
) -> None:
    sketch = sketcher.compute_sketch(tokens)
    assert sketch == (MAX_HASH_VALUE,) * 64
    assert sketch == sketcher.empty_sketch()


def test_sketch_length_and_bound(sketcher: Sketcher) -> None:
    sketch = sketcher.compute_sketch(make_tokens(0, 30))

    assert len(sketch) == sketcher.num_hash_functions
    assert all(0 <= value <= MAX_HASH_VALUE for value in sketch)


def test_sketch_is_minimum_of_hashed_shingles(sketcher: Sketcher) -> None:
    tokens = ["a", "rose", "is", "a", "rose"]
    sketch = sketcher.compute_sketch(tokens)

    fingerprints = [fingerprint(s) for s in sketcher.shingles(tokens)]
    expected = tuple(
        min(function.calculate_hash(fp) for fp in fingerprints)
        for function in sketcher.hash_family
    )
    assert sketch == expected


def test_sketch_follows_hash_family() -> None:
    sketcher = Sketcher(tokens_in_word=2, num_hash_functions=4, seed=1)
    sketcher.hash_family = HashFamily(4, seed=99)
    tokens = ["a", "b", "c"]

    fingerprints = [fingerprint(s) for s in sketcher.shingles(tokens)]
    expected = tuple(
        min(sketcher.hash_family.calculate_hash(index, fp) for fp in fingerprints)
        for index in range(4)
    )
    assert sketcher.compute_sketch(tokens) == expected


def test_sketch_is_reproducible_with_seed() -> None:
    tokens = make_tokens(0, 40)
    first = Sketcher(3, 32, seed=99).compute_sketch(tokens)
    second = Sketcher(3, 32, seed=99).compute_sketch(tokens)
    assert first == second


def test_compute_sketch_from_text(sketcher: Sketcher) -> None:
    doc = "the quick brown fox\njumps over\tthe lazy dog"
    assert sketcher.compute_sketch_from_text(doc) == sketcher.compute_sketch(
        tokenize(doc)
    )


def test_self_similarity_is_exact(sketcher: Sketcher) -> None:
    sketch = sketcher.compute_sketch(make_tokens(0, 25))
    assert sketcher.compare_sketches(sketch, sketch) == 1.0

    empty = sketcher.empty_sketch()
    assert sketcher.compare_sketches(empty, empty) == 1.0


def test_compare_is_symmetric(sketcher: Sketcher) -> None:
    a = sketcher.compute_sketch(make_tokens(0, 40))
    b = sketcher.compute_sketch(make_tokens(20, 60))
    assert sketcher.compare_sketches(a, b) == sketcher.compare_sketches(b, a)
    assert 0.0 <= sketcher.compare_sketches(a, b) <= 1.0


def test_compare_counts_equal_positions() -> None:
    sketcher = Sketcher(tokens_in_word=1, num_hash_functions=4, seed=0)
    assert sketcher.compare_sketches((1, 2, 3, 4), (1, 2, 0, 0)) == 0.5
    assert sketcher.compare_sketches((1, 2, 3, 4), (4, 3, 2, 1)) == 0.0


def test_compare_rejects_length_mismatch(sketcher: Sketcher) -> None:
    sketch = sketcher.compute_sketch(make_tokens(0, 10))
    with pytest.raises(ValueError):
        sketcher.compare_sketches(sketch, sketch[:-1])


def test_estimate_tracks_jaccard() -> None:
    """Single-token shingles over overlapping ranges have Jaccard 1/3."""
    tokens_a = make_tokens(0, 100)
    tokens_b = make_tokens(50, 150)
    true_jaccard = 50 / 150

    estimates = []
    for seed in range(5):
        sketcher = Sketcher(tokens_in_word=1, num_hash_functions=400, seed=seed)
        estimates.append(
            sketcher.compare_sketches(
                sketcher.compute_sketch(tokens_a), sketcher.compute_sketch(tokens_b)
            )
        )

    assert abs(statistics.mean(estimates) - true_jaccard) < 0.1


def test_error_shrinks_with_more_hash_functions() -> None:
    tokens_a = make_tokens(0, 100)
    tokens_b = make_tokens(50, 150)
    true_jaccard = 50 / 150

    def mean_error(num_hash_functions: int) -> float:
        errors = []
        for seed in range(10):
            sketcher = Sketcher(1, num_hash_functions, seed=seed)
            estimate = sketcher.compare_sketches(
                sketcher.compute_sketch(tokens_a), sketcher.compute_sketch(tokens_b)
            )
            errors.append(abs(estimate - true_jaccard))
        return statistics.mean(errors)

    assert mean_error(400) < mean_error(8)


def test_similar_text_higher_similarity(sketcher: Sketcher) -> None:
    base = "this is a test document about similarity measurement in practice"
    similar = "this is a test document about similarity testing in practice"
    different = "something completely different is written right here"

    base_sig = sketcher.compute_sketch_from_text(base)
    similar_score = sketcher.compare_sketches(
        base_sig, sketcher.compute_sketch_from_text(similar)
    )
    different_score = sketcher.compare_sketches(
        base_sig, sketcher.compute_sketch_from_text(different)
    )

    assert similar_score > different_score


def test_lean_minhash_agrees_with_compare(sketcher: Sketcher) -> None:
    a = sketcher.compute_sketch(make_tokens(0, 40))
    b = sketcher.compute_sketch(make_tokens(10, 50))

    lean_a = to_lean_minhash(a, seed=1234)
    lean_b = to_lean_minhash(b, seed=1234)

    assert isinstance(lean_a, LeanMinHash)
    assert lean_a.scheme == "legacy"
    assert lean_a.jaccard(lean_b) == sketcher.compare_sketches(a, b)
    assert from_lean_minhash(lean_a) == a


def test_serialized_sketch_round_trip(sketcher: Sketcher) -> None:
    sketch = sketcher.compute_sketch(make_tokens(0, 20))

    data = serialize_sketch(sketch)

    assert isinstance(data, bytes)
    assert deserialize_sketch(data) == sketch

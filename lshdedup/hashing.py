"""Random hash family used to permute shingle fingerprints."""

import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from lshdedup.exceptions import IllegalConfigurationError

# 2^31 - 1 is a Mersenne prime; it bounds every hash value
UNIVERSE_SIZE = 2**31 - 1


@dataclass(frozen=True)
class HashFunction:
    """One member of the hash family, fixed by its coefficients."""

    a: int
    b: int
    c: int
    universe_size: int = UNIVERSE_SIZE

    def calculate_hash(self, x: int) -> int:
        """Hash *x* into ``[0, universe_size]``.

        The mask keeps the low 31 bits, so the result matches the same
        formula evaluated with wrapping 32-bit integers.
        """
        x &= self.universe_size
        hash_value = (self.a * (x >> 4) + self.b * x + self.c) & self.universe_size
        return abs(hash_value)


class HashFamily:
    """A fixed set of independently drawn hash functions."""

    def __init__(
        self,
        num_hash_functions: int,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        universe_size: int = UNIVERSE_SIZE,
    ) -> None:
        """Draw the coefficients of every function.

        Args:
            num_hash_functions: Number of functions in the family
            rng: Random source for the coefficients (takes precedence over seed)
            seed: Seed for a private random source when rng is not given

        Raises:
            IllegalConfigurationError: If num_hash_functions is not positive
        """
        if num_hash_functions <= 0:
            raise IllegalConfigurationError(
                "num_hash_functions", num_hash_functions, "must be positive"
            )

        if rng is None:
            rng = random.Random(seed)

        self.universe_size = universe_size
        self.functions: Tuple[HashFunction, ...] = tuple(
            HashFunction(
                a=rng.randrange(universe_size),
                b=rng.randrange(universe_size),
                c=rng.randrange(universe_size),
                universe_size=universe_size,
            )
            for _ in range(num_hash_functions)
        )

    def __len__(self) -> int:
        return len(self.functions)

    def __iter__(self) -> Iterator[HashFunction]:
        return iter(self.functions)

    def calculate_hash(self, index: int, x: int) -> int:
        """Hash *x* with the function at *index*."""
        return self.functions[index].calculate_hash(x)

    def hash_all(self, x: int) -> List[int]:
        """Hash *x* with every function in the family, in order."""
        return [function.calculate_hash(x) for function in self.functions]

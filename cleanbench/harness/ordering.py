"""Per-fixture randomization of contender execution order.

Running contenders in a fixed order on every fixture lets drift (frequency
scaling, cache state left by the previous contender) favour the same
contender each time. Shuffling independently per fixture turns that bias into
noise that averages out across fixtures.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def draw_seed() -> int:
    """Fresh seed from the OS entropy source."""
    return random.SystemRandom().randrange(2**32)


class ContenderOrdering:
    """Seedable uniform permutation source.

    Args:
        seed: Seed for the underlying ``random.Random``; drawn fresh when None
            and exposed as ``self.seed`` so a session can be replayed.
        enabled: When False, ``shuffle`` returns the input order.
    """

    def __init__(self, seed: Optional[int] = None, enabled: bool = True):
        self.seed = seed if seed is not None else draw_seed()
        self.enabled = enabled
        self._rng = random.Random(self.seed)

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a uniformly permuted copy of ``items`` (Fisher-Yates)."""
        ordered = list(items)
        if self.enabled:
            self._rng.shuffle(ordered)
        return ordered

"""
Golden top-3 comparison.

Class indices must match exactly; scores must match within epsilon.
"""

from typing import List, NamedTuple, Sequence, Tuple

from .errors import ClassIndexMismatch, ScoreToleranceExceeded
from .topk import ScoreIndexPair, select_top_k


class GoldenEntry(NamedTuple):
    index: int
    score: float


# SqueezeNet v1.1 on the 227x227 BGR logo, full precision reference backend
GOLDEN_TOP3: Tuple[GoldenEntry, ...] = (
    GoldenEntry(532, 0.189459),
    GoldenEntry(920, 0.082801),
    GoldenEntry(716, 0.034684),
)

DEFAULT_EPSILON = 0.001


def nearly_equal(actual: float, golden: float, epsilon: float) -> bool:
    """True iff ``|actual - golden| <= epsilon``."""
    return abs(actual - golden) <= epsilon


def check_top3(
    scores: Sequence[float],
    epsilon: float = DEFAULT_EPSILON,
    golden: Sequence[GoldenEntry] = GOLDEN_TOP3
) -> List[ScoreIndexPair]:
    """
    Check the top-ranked classes of ``scores`` against golden data.

    Args:
        scores: Class score vector
        epsilon: Absolute score tolerance
        golden: Expected (index, score) per rank, highest first

    Returns:
        The selected top pairs when every rank matches

    Raises:
        ClassIndexMismatch: A rank predicts a different class
        ScoreToleranceExceeded: A rank's score is outside tolerance
    """
    top = select_top_k(scores, k=len(golden))

    for rank, (pair, expect) in enumerate(zip(top, golden)):
        if pair.index != expect.index:
            raise ClassIndexMismatch(rank, expect.index, pair.index)

        if not nearly_equal(pair.score, expect.score, epsilon):
            raise ScoreToleranceExceeded(rank, expect.score, pair.score, epsilon)

    return top

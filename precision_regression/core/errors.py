"""
Failure types raised while checking classifier output.
"""


class RegressionCheckError(AssertionError):
    """A top-k rank did not match its golden entry."""

    kind = "check"

    def __init__(self, rank: int, expected, actual, message: str):
        super().__init__(message)
        self.rank = rank
        self.expected = expected
        self.actual = actual


class ClassIndexMismatch(RegressionCheckError):
    """Predicted class id differs from the golden class id at a rank."""

    kind = "index"

    def __init__(self, rank: int, expected: int, actual: int):
        super().__init__(
            rank, expected, actual,
            f"top {rank} index not match  expect {expected} but got {actual}"
        )


class ScoreToleranceExceeded(RegressionCheckError):
    """Predicted score is further than epsilon from the golden score."""

    kind = "score"

    def __init__(self, rank: int, expected: float, actual: float, epsilon: float):
        super().__init__(
            rank, expected, actual,
            f"top {rank} score not match  expect {expected:f} but got {actual:f}"
        )
        self.epsilon = epsilon


class EngineFailure(RuntimeError):
    """The inference engine could not load a model or produce an output."""

"""
Core module initialization.
"""

from .adapter import Extractor, InferenceEngine, RunConfig
from .comparison import GOLDEN_TOP3, GoldenEntry, check_top3, nearly_equal
from .config_matrix import (
    CANONICAL_CONFIGS,
    Backend,
    PrecisionConfig,
    derive_epsilon,
    get_config,
    iter_matrix,
)
from .errors import ClassIndexMismatch, EngineFailure, RegressionCheckError, ScoreToleranceExceeded
from .logo import LOGO_PATTERN, PixelLayout, SyntheticImage, generate_logo, resize_nearest
from .orchestrator import OrchestratorState, TestOrchestrator, TestOutcome
from .topk import ScoreIndexPair, select_top_k

__all__ = [
    "Extractor",
    "InferenceEngine",
    "RunConfig",
    "GOLDEN_TOP3",
    "GoldenEntry",
    "check_top3",
    "nearly_equal",
    "CANONICAL_CONFIGS",
    "Backend",
    "PrecisionConfig",
    "derive_epsilon",
    "get_config",
    "iter_matrix",
    "ClassIndexMismatch",
    "EngineFailure",
    "RegressionCheckError",
    "ScoreToleranceExceeded",
    "LOGO_PATTERN",
    "PixelLayout",
    "SyntheticImage",
    "generate_logo",
    "resize_nearest",
    "OrchestratorState",
    "TestOrchestrator",
    "TestOutcome",
    "ScoreIndexPair",
    "select_top_k",
]

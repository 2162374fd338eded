"""
Precision Regression Framework
Checks a classifier's top-3 output on a fixed synthetic input across
precision and backend configurations.
"""

__version__ = "0.1.0"

from .core.adapter import InferenceEngine, RunConfig
from .core.comparison import GOLDEN_TOP3, check_top3, nearly_equal
from .core.config_matrix import CANONICAL_CONFIGS, PrecisionConfig, derive_epsilon
from .core.logo import PixelLayout, generate_logo
from .core.orchestrator import TestOrchestrator, TestOutcome
from .core.topk import select_top_k

__all__ = [
    "InferenceEngine",
    "RunConfig",
    "GOLDEN_TOP3",
    "check_top3",
    "nearly_equal",
    "CANONICAL_CONFIGS",
    "PrecisionConfig",
    "derive_epsilon",
    "PixelLayout",
    "generate_logo",
    "TestOrchestrator",
    "TestOutcome",
    "select_top_k",
]

"""
Shared fixtures: a torch-backed fake engine that replays scripted scores.
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
import torch

# Ensure repository root is on sys.path when running pytest without installing.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from precision_regression.core.adapter import Extractor, InferenceEngine
from precision_regression.core.comparison import GOLDEN_TOP3
from precision_regression.core.config_matrix import Backend, PrecisionConfig
from precision_regression.core.logo import subtract_mean

NUM_CLASSES = 1000


def build_golden_scores() -> torch.Tensor:
    """Score vector whose top 3 is exactly GOLDEN_TOP3."""
    # Distinct small background values keep the ranking deterministic
    scores = torch.arange(NUM_CLASSES, dtype=torch.float32) * 1e-6
    for entry in GOLDEN_TOP3:
        scores[entry.index] = entry.score
    return scores


class FakeExtractor(Extractor):
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine
        self.inputs = {}

    def input(self, name, tensor):
        self.inputs[name] = tensor
        self.engine.seen_inputs.append((name, tensor))

    def extract(self, name):
        assert self.inputs, "extract called before input"
        return self.engine.scores_for_cell().clone()


class FakeEngine(InferenceEngine):
    """Base fake; subclasses are produced by the ``make_engine`` fixture."""

    name = "fake"
    accelerated = False
    mutate: Optional[Callable[[torch.Tensor, PrecisionConfig, Backend], None]] = None
    instances: List["FakeEngine"] = []

    def __init__(self, config, backend=Backend.REFERENCE):
        super().__init__(config, backend)
        self.loaded_from = None
        self.closed = False
        self.seen_inputs = []
        type(self).instances.append(self)

    @classmethod
    def has_accelerated_backend(cls):
        return cls.accelerated

    def load(self, param_path, model_path):
        self.loaded_from = (param_path, model_path)

    def create_extractor(self):
        assert self.loaded_from is not None, "extractor created before load"
        return FakeExtractor(self)

    def prepare_input(self, image, mean_vals):
        self.image = image
        return subtract_mean(image, mean_vals)

    def scores_for_cell(self) -> torch.Tensor:
        scores = build_golden_scores()
        if type(self).mutate is not None:
            type(self).mutate(scores, self.config, self.backend)
        return scores

    def close(self):
        self.closed = True


@pytest.fixture
def make_engine():
    """Build a FakeEngine subclass with its own instance log."""
    def _make(mutate=None, accelerated: bool = False):
        attrs: Dict = {
            "accelerated": accelerated,
            "mutate": staticmethod(mutate) if mutate is not None else None,
            "instances": [],
        }
        return type("ScriptedEngine", (FakeEngine,), attrs)
    return _make


@pytest.fixture
def golden_scores() -> torch.Tensor:
    """Fresh score vector matching GOLDEN_TOP3; safe to mutate."""
    return build_golden_scores()

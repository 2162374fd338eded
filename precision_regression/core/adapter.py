"""
Inference engine adapter interface.

The verifier never computes network math itself. Each engine (ncnn,
TorchScript, test fakes) implements this interface so the orchestrator can
drive it the same way under every precision configuration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Tuple

import torch

from .config_matrix import Backend, PrecisionConfig
from .logo import PixelLayout, SyntheticImage


@dataclass
class RunConfig:
    """Configuration for a verification run.

    Attributes:
        param_path: Network structure file handed to the engine
        model_path: Weight file handed to the engine
        input_name: Name of the network input blob
        output_name: Name of the class score output blob
        input_size: Square input resolution expected by the model
        pixel_layout: Pixel layout expected by the model
        mean_vals: Per-channel means subtracted from the input
        verbose: Print progress for every matrix cell
    """
    param_path: str = "examples/squeezenet_v1.1.param"
    model_path: str = "examples/squeezenet_v1.1.bin"
    input_name: str = "data"
    output_name: str = "prob"
    input_size: int = 227
    pixel_layout: PixelLayout = PixelLayout.BGR
    mean_vals: Tuple[float, float, float] = (104.0, 117.0, 123.0)
    verbose: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if len(self.mean_vals) != 3:
            raise ValueError(f"mean_vals needs 3 values, got {len(self.mean_vals)}")
        if self.input_size < 1:
            raise ValueError(f"input_size must be positive, got {self.input_size}")
        self.mean_vals = tuple(float(v) for v in self.mean_vals)


class Extractor(ABC):
    """A single inference pass bound to one engine instance."""

    @abstractmethod
    def input(self, name: str, tensor: Any) -> None:
        """Bind ``tensor`` to the input blob ``name``."""
        pass

    @abstractmethod
    def extract(self, name: str) -> Any:
        """Run the network as far as blob ``name`` and return it."""
        pass


class InferenceEngine(ABC):
    """
    Abstract base class for inference engine adapters.

    An instance is created for exactly one (config, backend) cell, loads
    the model once and is closed after its output has been extracted.
    """

    name = "engine"

    def __init__(self, config: PrecisionConfig, backend: Backend):
        """
        Args:
            config: Precision flags to apply to the engine
            backend: Execution target for this instance
        """
        self.config = config
        self.backend = backend

    @classmethod
    @abstractmethod
    def has_accelerated_backend(cls) -> bool:
        """Whether an accelerated backend is usable in this process."""
        pass

    @abstractmethod
    def load(self, param_path: str, model_path: str) -> None:
        """
        Load the network.

        Raises:
            EngineFailure: If either file cannot be loaded
        """
        pass

    @abstractmethod
    def create_extractor(self) -> Extractor:
        pass

    @abstractmethod
    def prepare_input(self, image: SyntheticImage, mean_vals: Tuple[float, float, float]) -> Any:
        """Import ``image`` into the engine's tensor type and subtract means."""
        pass

    def close(self) -> None:
        """Release engine resources. Default does nothing."""
        pass

    def classify(self, image: SyntheticImage, run_config: RunConfig) -> torch.Tensor:
        """
        Run one forward pass over ``image``.

        Returns:
            Flat float32 tensor of class scores
        """
        blob = self.prepare_input(image, run_config.mean_vals)

        extractor = self.create_extractor()
        extractor.input(run_config.input_name, blob)
        out = extractor.extract(run_config.output_name)

        return torch.as_tensor(out).detach().cpu().reshape(-1).to(torch.float32)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

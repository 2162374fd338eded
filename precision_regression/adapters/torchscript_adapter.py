"""
TorchScript adapter.
Runs a scripted classifier with torch, mapping precision flags onto tensor
dtypes and memory format.
"""

import os
from typing import Optional, Tuple

import torch

from ..core.adapter import Extractor, InferenceEngine
from ..core.config_matrix import Backend, PrecisionConfig
from ..core.errors import EngineFailure
from ..core.logo import SyntheticImage, subtract_mean


def storage_dtype(config: PrecisionConfig) -> torch.dtype:
    """Parameter/activation dtype for ``config``."""
    if config.use_bf16_storage:
        return torch.bfloat16
    if config.use_fp16_storage or config.use_fp16_packed:
        return torch.float16
    return torch.float32


class TorchScriptExtractor(Extractor):
    def __init__(self, module: torch.jit.ScriptModule):
        self.module = module
        self.inputs = {}

    def input(self, name: str, tensor: torch.Tensor) -> None:
        self.inputs[name] = tensor

    def extract(self, name: str) -> torch.Tensor:
        # Scripted modules expose no named blobs; the forward output is the
        # only extractable one.
        if not self.inputs:
            raise EngineFailure(f"No input bound before extracting '{name}'")
        with torch.no_grad():
            out = self.module(*self.inputs.values())
        return out.float()


class TorchScriptEngine(InferenceEngine):
    """
    TorchScript network for one (config, backend) cell.

    ``param_path`` is the scripted module archive; ``model_path`` is an
    optional state dict applied on top of it. Packed layout maps to
    channels_last; 8-wide packing and image storage have no torch equivalent
    and are ignored.
    """

    name = "torchscript"

    def __init__(self, config: PrecisionConfig, backend: Backend = Backend.REFERENCE):
        super().__init__(config, backend)

        if backend == Backend.ACCELERATED and not torch.cuda.is_available():
            raise RuntimeError("CUDA required for the accelerated TorchScript backend")

        self.device = torch.device("cuda" if backend == Backend.ACCELERATED else "cpu")
        self.dtype = storage_dtype(config)
        self.memory_format = (
            torch.channels_last if config.use_packing_layout else torch.contiguous_format
        )
        self.module: Optional[torch.jit.ScriptModule] = None

    @classmethod
    def has_accelerated_backend(cls) -> bool:
        return torch.cuda.is_available()

    def load(self, param_path: str, model_path: str) -> None:
        try:
            module = torch.jit.load(param_path, map_location=self.device)
            if model_path and os.path.abspath(model_path) != os.path.abspath(param_path):
                state = torch.load(model_path, map_location=self.device)
                module.load_state_dict(state)
        except (RuntimeError, OSError, ValueError) as e:
            raise EngineFailure(f"TorchScript failed to load {param_path}: {e}") from e

        module.eval()
        self.module = module.to(device=self.device, dtype=self.dtype)

    def create_extractor(self) -> TorchScriptExtractor:
        if self.module is None:
            raise EngineFailure("Model not loaded")
        return TorchScriptExtractor(self.module)

    def prepare_input(self, image: SyntheticImage, mean_vals: Tuple[float, float, float]) -> torch.Tensor:
        blob = subtract_mean(image, mean_vals).unsqueeze(0)
        blob = blob.to(device=self.device, dtype=self.dtype)
        return blob.contiguous(memory_format=self.memory_format)

    def close(self) -> None:
        self.module = None
        if self.device.type == "cuda":
            torch.cuda.empty_cache()

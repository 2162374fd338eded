"""
Adapter module initialization.
"""

from .ncnn_adapter import NcnnEngine, check_ncnn_availability, get_ncnn_version
from .torchscript_adapter import TorchScriptEngine

ENGINES = {
    NcnnEngine.name: NcnnEngine,
    TorchScriptEngine.name: TorchScriptEngine,
}

__all__ = [
    "ENGINES",
    "NcnnEngine",
    "TorchScriptEngine",
    "check_ncnn_availability",
    "get_ncnn_version",
]

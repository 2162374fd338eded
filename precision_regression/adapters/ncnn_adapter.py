"""
ncnn adapter.
Runs the classifier through the ncnn Python binding, mapping each precision
configuration onto ncnn.Option flags.
"""

from typing import Optional, Tuple

import numpy as np

from ..core.adapter import Extractor, InferenceEngine
from ..core.config_matrix import Backend, PrecisionConfig
from ..core.errors import EngineFailure
from ..core.logo import PixelLayout, SyntheticImage

# Try to import ncnn
try:
    import ncnn
    NCNN_AVAILABLE = True
except ImportError:
    NCNN_AVAILABLE = False
    print("Warning: ncnn not installed. ncnn engine tests will be skipped.")


def _pixel_type(layout: PixelLayout) -> int:
    pixel_types = {
        PixelLayout.GRAY: ncnn.Mat.PixelType.PIXEL_GRAY,
        PixelLayout.RGB: ncnn.Mat.PixelType.PIXEL_RGB,
        PixelLayout.BGR: ncnn.Mat.PixelType.PIXEL_BGR,
        PixelLayout.RGBA: ncnn.Mat.PixelType.PIXEL_RGBA,
        PixelLayout.BGRA: ncnn.Mat.PixelType.PIXEL_BGRA,
    }
    return pixel_types[layout]


class NcnnExtractor(Extractor):
    def __init__(self, extractor):
        self._extractor = extractor

    def input(self, name: str, tensor) -> None:
        ret = self._extractor.input(name, tensor)
        if ret != 0:
            raise EngineFailure(f"ncnn input '{name}' failed with code {ret}")

    def extract(self, name: str) -> np.ndarray:
        ret, out = self._extractor.extract(name)
        if ret != 0:
            raise EngineFailure(f"ncnn extract '{name}' failed with code {ret}")
        return np.array(out, dtype=np.float32)


class NcnnEngine(InferenceEngine):
    """
    ncnn network for one (config, backend) cell.

    The reference backend is the ncnn CPU path; the accelerated backend is
    Vulkan compute.
    """

    name = "ncnn"

    def __init__(self, config: PrecisionConfig, backend: Backend = Backend.REFERENCE):
        super().__init__(config, backend)

        if not NCNN_AVAILABLE:
            raise RuntimeError("ncnn not available")

        self.net: Optional["ncnn.Net"] = ncnn.Net()
        self._apply_options()

    def _apply_options(self):
        # Options must be set before the param file is loaded
        opt = self.net.opt
        opt.use_packing_layout = self.config.use_packing_layout
        opt.use_fp16_packed = self.config.use_fp16_packed
        opt.use_fp16_storage = self.config.use_fp16_storage
        opt.use_bf16_storage = self.config.use_bf16_storage
        opt.use_shader_pack8 = self.config.use_shader_pack8
        opt.use_image_storage = self.config.use_image_storage
        opt.use_vulkan_compute = self.backend == Backend.ACCELERATED

    @classmethod
    def has_accelerated_backend(cls) -> bool:
        if not NCNN_AVAILABLE:
            return False
        get_gpu_count = getattr(ncnn, "get_gpu_count", None)
        return get_gpu_count is not None and get_gpu_count() > 0

    def load(self, param_path: str, model_path: str) -> None:
        ret = self.net.load_param(param_path)
        if ret != 0:
            raise EngineFailure(f"ncnn failed to load param file {param_path} (code {ret})")

        ret = self.net.load_model(model_path)
        if ret != 0:
            raise EngineFailure(f"ncnn failed to load model file {model_path} (code {ret})")

    def create_extractor(self) -> NcnnExtractor:
        return NcnnExtractor(self.net.create_extractor())

    def prepare_input(self, image: SyntheticImage, mean_vals: Tuple[float, float, float]):
        pixels = np.ascontiguousarray(image.data.numpy())
        mat = ncnn.Mat.from_pixels(pixels, _pixel_type(image.layout), image.width, image.height)
        mat.substract_mean_normalize(list(mean_vals), [])
        return mat

    def close(self) -> None:
        if self.net is not None:
            self.net.clear()
            self.net = None


def check_ncnn_availability() -> bool:
    """Check if the ncnn binding is importable."""
    return NCNN_AVAILABLE


def get_ncnn_version() -> Optional[str]:
    """Get ncnn binding version."""
    if not NCNN_AVAILABLE:
        return None
    try:
        return ncnn.__version__
    except AttributeError:
        return "unknown"

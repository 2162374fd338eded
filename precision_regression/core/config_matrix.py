"""
Precision configuration matrix.

Each configuration is a set of independent precision and layout flags. Its
score tolerance follows from the flags alone: any reduced precision path
(fp16 arithmetic, fp16 storage, bf16 storage) widens it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence, Tuple


FULL_PRECISION_EPSILON = 0.01
REDUCED_PRECISION_EPSILON = 0.1

FLAG_NAMES = (
    "use_packing_layout",
    "use_fp16_packed",
    "use_fp16_storage",
    "use_shader_pack8",
    "use_bf16_storage",
    "use_image_storage",
)


class Backend(Enum):
    REFERENCE = "cpu"
    ACCELERATED = "gpu"


@dataclass(frozen=True)
class PrecisionConfig:
    """Configuration for one pass over the model.

    Attributes:
        name: Short label used in logs
        use_packing_layout: Run with packed (vectorized) blob layout
        use_fp16_packed: Half precision arithmetic on packed data
        use_fp16_storage: Store intermediate blobs as fp16
        use_shader_pack8: Allow 8-wide packing on the accelerated backend
        use_bf16_storage: Store intermediate blobs as bfloat16
        use_image_storage: Back blobs with image memory on the accelerated backend
    """
    name: str = "baseline"
    use_packing_layout: bool = False
    use_fp16_packed: bool = False
    use_fp16_storage: bool = False
    use_shader_pack8: bool = False
    use_bf16_storage: bool = False
    use_image_storage: bool = False

    @property
    def reduced_precision(self) -> bool:
        return self.use_fp16_packed or self.use_fp16_storage or self.use_bf16_storage

    @property
    def epsilon(self) -> float:
        return derive_epsilon(self)

    def flags(self) -> dict:
        """Flag name to value, in a fixed order."""
        return {name: getattr(self, name) for name in FLAG_NAMES}

    def describe(self) -> str:
        return " ".join(f"{name}={int(value)}" for name, value in self.flags().items())


def derive_epsilon(config: PrecisionConfig) -> float:
    """Score tolerance for ``config``."""
    if config.reduced_precision:
        return REDUCED_PRECISION_EPSILON
    return FULL_PRECISION_EPSILON


CANONICAL_CONFIGS: Tuple[PrecisionConfig, ...] = (
    PrecisionConfig(name="baseline"),
    PrecisionConfig(
        name="packed-fp16",
        use_packing_layout=True,
        use_fp16_packed=True,
        use_shader_pack8=True,
    ),
    PrecisionConfig(
        name="all-reduced",
        use_packing_layout=True,
        use_fp16_packed=True,
        use_fp16_storage=True,
        use_shader_pack8=True,
        use_bf16_storage=True,
        use_image_storage=True,
    ),
    PrecisionConfig(
        name="fp16-no-bf16",
        use_packing_layout=True,
        use_fp16_packed=True,
        use_fp16_storage=True,
        use_shader_pack8=True,
        use_image_storage=True,
    ),
)


def get_config(name: str) -> PrecisionConfig:
    for config in CANONICAL_CONFIGS:
        if config.name == name:
            return config
    known = ", ".join(c.name for c in CANONICAL_CONFIGS)
    raise KeyError(f"Unknown configuration '{name}' (known: {known})")


def iter_matrix(
    configs: Sequence[PrecisionConfig],
    accelerated_available: bool
) -> Iterator[Tuple[PrecisionConfig, Backend]]:
    """
    Yield every (config, backend) cell in run order.

    The reference backend always runs first for a config; the accelerated
    backend follows only when present.
    """
    for config in configs:
        yield config, Backend.REFERENCE
        if accelerated_available:
            yield config, Backend.ACCELERATED

"""
Synthetic logo input generation.

Builds the fixed test image fed to every configuration: a 16x16 grayscale
pattern converted to the requested pixel layout and resampled with
nearest-neighbor mapping, so the input is bit-identical on every backend.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import torch


LOGO_SIZE = 16

# 16x16 grayscale logo, row-major
LOGO_PATTERN = bytes([
    245, 245,  33, 245, 245, 245, 245, 245, 245, 245, 245, 245, 245,  33, 245, 245,
    245,  33,  33,  33, 245, 245, 245, 245, 245, 245, 245, 245,  33,  33,  33, 245,
    245,  33, 158, 158,  33, 245, 245, 245, 245, 245, 245,  33, 158, 158,  33, 245,
     33, 117, 158, 224, 158,  33, 245, 245, 245, 245,  33, 158, 224, 158, 117,  33,
     33, 117, 224, 224, 224,  66,  33,  33,  33,  33,  66, 224, 224, 224, 117,  33,
     33, 189, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 189,  33,
     33, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224, 224,  33,
     33, 224, 224,  97,  97,  97,  97, 224, 224,  97,  97,  97,  97, 224, 224,  33,
     33, 224, 224,  97,  33,   0, 189, 224, 224,  97,   0,  33,  97, 224, 224,  33,
     33, 224, 224,  97,  33,   0, 189, 224, 224,  97,   0,  33,  97, 224, 224,  33,
     33, 224, 224,  97,  97,  97,  97, 224, 224,  97, 189, 189,  97, 224, 224,  33,
     33,  66,  66,  66, 224, 224, 224, 224, 224, 224, 224, 224,  66,  66,  66,  33,
     66, 158, 158,  66,  66, 224, 224, 224, 224, 224, 224,  66, 158, 158,  66,  66,
     66, 158, 158, 208,  66, 224, 224, 224, 224, 224, 224,  66, 158, 158, 208,  66,
     66, 224, 202, 158,  66, 224, 224, 224, 224, 224, 224,  66, 224, 202, 158,  66,
     66, 158, 224, 158,  66, 224, 224, 224, 224, 224, 224,  66, 158, 224, 158,  66,
])


class PixelLayout(Enum):
    """Pixel layouts the synthesizer can produce."""
    GRAY = "gray"
    RGB = "rgb"
    BGR = "bgr"
    RGBA = "rgba"
    BGRA = "bgra"

    @property
    def channels(self) -> int:
        return {"gray": 1, "rgb": 3, "bgr": 3, "rgba": 4, "bgra": 4}[self.value]


@dataclass(frozen=True)
class SyntheticImage:
    """
    Owned interleaved image buffer.

    Attributes:
        data: uint8 tensor of shape (height, width, channels)
        width: Image width in pixels
        height: Image height in pixels
        layout: Pixel layout of ``data``
    """
    data: torch.Tensor
    width: int
    height: int
    layout: PixelLayout

    def to_bytes(self) -> bytes:
        """Packed row-major pixel bytes."""
        return self.data.contiguous().numpy().tobytes()


def logo_tensor() -> torch.Tensor:
    """Return a fresh (16, 16, 1) uint8 tensor holding the logo pattern."""
    flat = torch.tensor(list(LOGO_PATTERN), dtype=torch.uint8)
    return flat.view(LOGO_SIZE, LOGO_SIZE, 1)


def convert_pixels(gray: torch.Tensor, layout: PixelLayout) -> torch.Tensor:
    """
    Convert a single-channel (H, W, 1) image into ``layout``.

    Color layouts replicate the gray channel; alpha layouts get an opaque
    alpha channel.
    """
    if gray.dim() != 3 or gray.shape[-1] != 1:
        raise ValueError(f"Expected (H, W, 1) gray image, got {tuple(gray.shape)}")

    if layout == PixelLayout.GRAY:
        return gray.clone()

    color = gray.expand(-1, -1, 3)
    if layout in (PixelLayout.RGBA, PixelLayout.BGRA):
        alpha = torch.full_like(gray, 255)
        color = torch.cat([color, alpha], dim=-1)
    return color.contiguous()


def nearest_indices(src_size: int, dst_size: int) -> torch.Tensor:
    """Source index for every destination index: floor(i * src / dst)."""
    return torch.div(
        torch.arange(dst_size, dtype=torch.int64) * src_size,
        dst_size,
        rounding_mode="floor",
    )


def resize_nearest(image: torch.Tensor, width: int, height: int) -> torch.Tensor:
    """
    Nearest-neighbor resize of an (H, W, C) image.

    Destination pixel (x, y) copies source pixel
    (floor(x * W / width), floor(y * H / height)). Index math is done in
    integers so no float rounding can move a sample.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Target size must be positive, got {width}x{height}")

    src_h, src_w = image.shape[0], image.shape[1]
    ys = nearest_indices(src_h, height)
    xs = nearest_indices(src_w, width)
    return image.index_select(0, ys).index_select(1, xs).contiguous()


def generate_logo(layout: PixelLayout, width: int, height: int) -> SyntheticImage:
    """
    Build the logo test image at the requested size and layout.

    Args:
        layout: Target pixel layout
        width: Target width (>= 1)
        height: Target height (>= 1)

    Returns:
        A new SyntheticImage; identical arguments give identical bytes.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Target size must be positive, got {width}x{height}")

    converted = convert_pixels(logo_tensor(), layout)
    resized = resize_nearest(converted, width, height)
    return SyntheticImage(data=resized, width=width, height=height, layout=layout)


def subtract_mean(image: SyntheticImage, mean_vals: Sequence[float]) -> torch.Tensor:
    """
    Planar float32 (C, H, W) copy of ``image`` with per-channel means removed.

    Used by engines that take tensors directly; ncnn does the equivalent in
    ``Mat.substract_mean_normalize``.
    """
    if len(mean_vals) != 3:
        raise ValueError(f"Expected exactly 3 mean values, got {len(mean_vals)}")
    if image.layout.channels != 3:
        raise ValueError(f"Mean subtraction needs a 3-channel image, got {image.layout.value}")

    planar = image.data.permute(2, 0, 1).to(torch.float32)
    means = torch.tensor(list(mean_vals), dtype=torch.float32).view(3, 1, 1)
    return planar - means

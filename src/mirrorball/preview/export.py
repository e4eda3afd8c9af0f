"""Image export utilities for rendered images.

Rendered colors are linear RGB and may fall outside [0, 1]. Export clamps
them to 8 bits without any gamma curve and tags the PNG as linear
(gAMA = 1.0) so viewers do not treat it as sRGB-encoded.

Example:
    >>> from src.mirrorball.preview.export import downscale, save_png, to_rgb8
    >>> rgb8 = to_rgb8(linear_image)
    >>> save_png(downscale(rgb8, 512), "output.png")
"""

from __future__ import annotations

import struct

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage
from PIL import PngImagePlugin

# PNG gAMA chunk value for gamma 1.0 (stored as gamma * 100000)
LINEAR_GAMMA = 100000


def to_rgb8(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit RGB.

    Each component is scaled by 255, truncated toward zero, and clamped to
    [0, 255]. NaN components become 0.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    scaled = np.nan_to_num(image.astype(np.float64) * 255.0, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(np.trunc(scaled), 0, 255).astype(np.uint8)


def downscale(image: npt.NDArray[np.uint8], resolution: int) -> npt.NDArray[np.uint8]:
    """Smoothly resize an 8-bit image to a square resolution.

    Args:
        image: 8-bit image of shape (H, W, 3).
        resolution: Side length of the output image.

    Returns:
        8-bit image of shape (resolution, resolution, 3). Returned as a copy
        when no resize is needed.
    """
    if image.shape[0] == resolution and image.shape[1] == resolution:
        return image.copy()

    pil_image = PILImage.fromarray(image)
    resized = pil_image.resize((resolution, resolution), PILImage.Resampling.BILINEAR)
    return np.array(resized, dtype=np.uint8)


def save_png(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image as a PNG tagged with linear gamma.

    Args:
        image: 8-bit image of shape (H, W, 3).
        filepath: Output file path (should end in .png).

    Raises:
        OSError: If the file cannot be written.
    """
    info = PngImagePlugin.PngInfo()
    info.add(b"gAMA", struct.pack(">I", LINEAR_GAMMA))

    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath, format="PNG", pnginfo=info)

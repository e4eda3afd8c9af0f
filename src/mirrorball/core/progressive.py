"""Multi-resolution progressive renderer.

This module drives the color caster over whole images. A render is a series
of square passes of doubling resolution, from coarse to the supersampled
target:

    preferred=512, msaa=2  ->  32, 64, 128, 256, 512, 1024

Each pass is cast pixel by pixel, clamped to 8-bit RGB, and smoothly
resized to the preferred resolution, so the final pass is a 2x2
supersampled image. When an output path is given the image is written after
every pass, letting a viewer watch it refine.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.core.progressive import ProgressiveRenderer
    >>> from src.mirrorball.scene.mirror_spheres import create_mirror_spheres_scene
    >>> from src.mirrorball.camera.orthographic import setup_camera
    >>>
    >>> scene, camera = create_mirror_spheres_scene()
    >>> setup_camera(camera)
    >>> renderer = ProgressiveRenderer(preferred_resolution=128)
    >>> renderer.render(output_path="output.png")
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from src.mirrorball.core.integrator import (
    COLOR_ON_FULL_SHADE,
    COLOR_ON_MISS,
    MAX_RESOLUTION,
    get_image_numpy,
    render_pass,
    setup_render_target,
)
from src.mirrorball.preview.export import downscale, save_png, to_rgb8

# Type alias for progress callback
# Callback receives (completed_passes, total_passes, pass_resolution)
ProgressCallback = Callable[[int, int, int], None]

# Defaults matching the demo render
PREFERRED_RESOLUTION = 512
MSAA_MULTIPLIER = 2

# Passes at or below this size are skipped
MIN_PASS_RESOLUTION = 16


def pass_resolutions(
    preferred_resolution: int = PREFERRED_RESOLUTION,
    msaa_multiplier: int = MSAA_MULTIPLIER,
) -> list[int]:
    """Compute the pass resolutions for a render, smallest first.

    Starts at preferred_resolution * msaa_multiplier and halves while the
    value stays above MIN_PASS_RESOLUTION.

    Args:
        preferred_resolution: Side length of the output image.
        msaa_multiplier: Supersampling factor of the final pass.

    Returns:
        Ascending list of pass resolutions. Empty if the largest pass is
        already at or below MIN_PASS_RESOLUTION.
    """
    resolutions: list[int] = []
    resolution = preferred_resolution * msaa_multiplier
    while resolution > MIN_PASS_RESOLUTION:
        resolutions.insert(0, resolution)
        resolution //= 2
    return resolutions


class ProgressiveRenderer:
    """A renderer that refines an image over passes of growing resolution.

    Attributes:
        preferred_resolution: Side length of the output image.
        msaa_multiplier: Supersampling factor of the final pass.
        color_on_miss: Color for rays that meet nothing.
        color_on_full_shade: Light mask floor for unlit points.
    """

    def __init__(
        self,
        preferred_resolution: int = PREFERRED_RESOLUTION,
        msaa_multiplier: int = MSAA_MULTIPLIER,
        color_on_miss: tuple[float, float, float] = COLOR_ON_MISS,
        color_on_full_shade: tuple[float, float, float] = COLOR_ON_FULL_SHADE,
    ) -> None:
        """Initialize the renderer.

        Args:
            preferred_resolution: Side length of the output image.
            msaa_multiplier: Supersampling factor of the final pass.
            color_on_miss: Color for rays that meet nothing.
            color_on_full_shade: Light mask floor for unlit points.

        Raises:
            ValueError: If the resolution or multiplier is not positive, or
                the final pass would exceed MAX_RESOLUTION.
        """
        if preferred_resolution <= 0 or msaa_multiplier <= 0:
            raise ValueError(
                f"Resolution and multiplier must be positive, got "
                f"{preferred_resolution} and {msaa_multiplier}"
            )
        if preferred_resolution * msaa_multiplier > MAX_RESOLUTION:
            raise ValueError(
                f"Final pass {preferred_resolution * msaa_multiplier} would exceed "
                f"maximum supported resolution {MAX_RESOLUTION}"
            )

        self.preferred_resolution = preferred_resolution
        self.msaa_multiplier = msaa_multiplier
        self.color_on_miss = color_on_miss
        self.color_on_full_shade = color_on_full_shade
        self._image: npt.NDArray[np.uint8] | None = None
        self._passes_done = 0

    @property
    def resolutions(self) -> list[int]:
        """Get the pass resolutions this renderer will use, smallest first."""
        return pass_resolutions(self.preferred_resolution, self.msaa_multiplier)

    @property
    def passes_done(self) -> int:
        """Get the number of passes completed by the last render."""
        return self._passes_done

    def render_pass(self, resolution: int) -> npt.NDArray[np.uint8]:
        """Render one pass and resize it to the preferred resolution.

        Args:
            resolution: Side length of the pass in pixels.

        Returns:
            8-bit image of shape (preferred, preferred, 3).
        """
        setup_render_target(resolution, self.color_on_miss, self.color_on_full_shade)
        render_pass()
        rgb8 = to_rgb8(get_image_numpy())
        self._image = downscale(rgb8, self.preferred_resolution)
        return self._image

    def render(
        self,
        output_path: str | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8] | None:
        """Render every pass, coarse to fine.

        Args:
            output_path: If given, the image is saved as PNG after each pass.
            callback: Optional callback called after each pass with
                (completed_passes, total_passes, pass_resolution).

        Returns:
            The final 8-bit image, or None if there were no passes.

        Raises:
            OSError: If the image cannot be saved.
        """
        resolutions = self.resolutions
        self._passes_done = 0

        for index, resolution in enumerate(resolutions):
            image = self.render_pass(resolution)
            if output_path is not None:
                save_png(image, output_path)
            self._passes_done = index + 1

            if callback is not None:
                callback(index + 1, len(resolutions), resolution)

        return self._image

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the most recently rendered image.

        Returns:
            8-bit image of shape (preferred, preferred, 3).

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if self._image is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return self._image

    def save_image(self, filepath: str) -> None:
        """Save the most recently rendered image as a linear PNG.

        Args:
            filepath: Path to save the image (e.g., "output.png").
        """
        save_png(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(preferred_resolution={self.preferred_resolution}, "
            f"msaa_multiplier={self.msaa_multiplier}, passes_done={self.passes_done})"
        )

"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: 8-bit clamping, downscaling and linear PNG export

Example:
    >>> from src.mirrorball.preview import save_png, show_preview
    >>> from src.mirrorball.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(preferred_resolution=256)
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer.get_image_uint8(), "output.png")
"""

from src.mirrorball.preview.display import (
    apply_gamma,
    process_image_for_display,
    show_preview,
)
from src.mirrorball.preview.export import (
    downscale,
    save_png,
    to_rgb8,
)

__all__ = [
    # Display functions
    "show_preview",
    "apply_gamma",
    "process_image_for_display",
    # Export functions
    "to_rgb8",
    "downscale",
    "save_png",
]

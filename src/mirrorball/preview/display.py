"""Matplotlib-based preview display for rendered images.

Rendered images are linear. Monitors expect sRGB-encoded values, so the
preview can apply a display gamma before showing them. Exported PNGs are
left linear (see export.py).

Example:
    >>> from src.mirrorball.preview.display import show_preview
    >>> from src.mirrorball.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(preferred_resolution=256)
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.mirrorball.core.progressive import ProgressiveRenderer


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Encode a linear image with a display gamma curve.

    Args:
        image: Linear float image of shape (H, W, 3).
        gamma: Display gamma. 2.2 approximates an sRGB monitor.

    Returns:
        The encoded image, values in [0, 1]. Returned unchanged when gamma
        is 1.0.
    """
    if gamma == 1.0:
        return image

    # Negative inputs have no real power
    encoded = np.clip(image, 0.0, 1.0) ** (1.0 / gamma)
    return encoded.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.uint8],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Convert an 8-bit linear render into a float image ready to show.

    Args:
        image: 8-bit linear image of shape (H, W, 3).
        gamma: Display gamma. The default 1.0 shows the stored values as-is.

    Returns:
        Float image in [0, 1] range.
    """
    result = image.astype(np.float32) / 255.0
    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display the most recent render as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer whose image should be shown.
        gamma: Display gamma (default 1.0, linear).
        title: Custom title (default shows the pass count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.

    Raises:
        RuntimeError: If the renderer has not rendered anything yet.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(renderer.get_image_uint8(), gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = (
            f"Render Preview - {renderer.passes_done}/{len(renderer.resolutions)} passes"
        )
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)

"""Tests for the preview module.

This module tests the preview/display and preview/export functionality including:
- 8-bit conversion of linear colors
- Smooth downscaling
- PNG export tagged with linear gamma
- Gamma correction for display

Note: Tests avoid displaying actual windows by not calling show_preview
in automated tests. The processing functions are tested directly.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestToRgb8:
    """Test linear float to 8-bit conversion."""

    def test_scales_and_truncates(self):
        """Test values are scaled by 255 and truncated."""
        from src.mirrorball.preview.export import to_rgb8

        image = np.array([[[0.0, 0.5, 1.0]]], dtype=np.float32)
        result = to_rgb8(image)

        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 127, 255]]]

    def test_clamps_out_of_range(self):
        """Test negative and overbright values clamp instead of wrapping."""
        from src.mirrorball.preview.export import to_rgb8

        image = np.array([[[-0.2, 1.5, 100.0]]], dtype=np.float32)
        assert to_rgb8(image).tolist() == [[[0, 255, 255]]]

    def test_nan_becomes_zero(self):
        """Test NaN components encode as black."""
        from src.mirrorball.preview.export import to_rgb8

        image = np.array([[[np.nan, np.inf, -np.inf]]], dtype=np.float32)
        assert to_rgb8(image).tolist() == [[[0, 255, 0]]]

    def test_preserves_shape(self):
        """Test the output shape matches the input."""
        from src.mirrorball.preview.export import to_rgb8

        image = np.random.rand(7, 5, 3).astype(np.float32)
        assert to_rgb8(image).shape == (7, 5, 3)


class TestDownscale:
    """Test smooth resizing."""

    def test_halves_resolution(self):
        """Test a supersampled image is resized to the target."""
        from src.mirrorball.preview.export import downscale

        image = np.zeros((32, 32, 3), dtype=np.uint8)
        assert downscale(image, 16).shape == (16, 16, 3)

    def test_uniform_image_unchanged(self):
        """Test resizing a flat color keeps the color."""
        from src.mirrorball.preview.export import downscale

        image = np.full((64, 64, 3), (10, 120, 250), dtype=np.uint8)
        result = downscale(image, 32)

        assert np.all(result == np.array([10, 120, 250], dtype=np.uint8))

    def test_same_size_returns_copy(self):
        """Test no resize returns an independent copy."""
        from src.mirrorball.preview.export import downscale

        image = np.zeros((8, 8, 3), dtype=np.uint8)
        result = downscale(image, 8)
        result[0, 0, 0] = 255

        assert image[0, 0, 0] == 0

    def test_upscales_coarse_pass(self):
        """Test a coarse pass is stretched up to the target."""
        from src.mirrorball.preview.export import downscale

        image = np.zeros((4, 4, 3), dtype=np.uint8)
        assert downscale(image, 16).shape == (16, 16, 3)


class TestSavePng:
    """Test PNG export."""

    def test_save_creates_file(self, tmp_path):
        """Test saving creates a readable PNG with the same pixels."""
        from src.mirrorball.preview.export import save_png

        image = np.zeros((8, 8, 3), dtype=np.uint8)
        image[2, 5] = (200, 100, 50)
        filepath = tmp_path / "test.png"
        save_png(image, str(filepath))

        with PILImage.open(filepath) as saved:
            assert saved.format == "PNG"
            np.testing.assert_array_equal(np.asarray(saved.convert("RGB")), image)

    def test_gamma_tag_is_linear(self, tmp_path):
        """Test the gAMA chunk marks the data as linear."""
        from src.mirrorball.preview.export import save_png

        filepath = tmp_path / "linear.png"
        save_png(np.zeros((4, 4, 3), dtype=np.uint8), str(filepath))

        with PILImage.open(filepath) as saved:
            assert saved.info["gamma"] == pytest.approx(1.0)

    def test_overwrites_existing_file(self, tmp_path):
        """Test a second save replaces the first."""
        from src.mirrorball.preview.export import save_png

        filepath = tmp_path / "pass.png"
        save_png(np.zeros((4, 4, 3), dtype=np.uint8), str(filepath))
        save_png(np.full((8, 8, 3), 255, dtype=np.uint8), str(filepath))

        with PILImage.open(filepath) as saved:
            assert saved.size == (8, 8)


class TestDisplayProcessing:
    """Test display-side image processing."""

    def test_apply_gamma_identity(self):
        """Test gamma 1.0 leaves the image untouched."""
        from src.mirrorball.preview.display import apply_gamma

        image = np.array([[[0.25, 0.5, 1.0]]], dtype=np.float32)
        np.testing.assert_array_equal(apply_gamma(image, 1.0), image)

    def test_apply_gamma_brightens(self):
        """Test gamma 2.2 brightens mid tones."""
        from src.mirrorball.preview.display import apply_gamma

        image = np.array([[[0.0, 0.5, 1.0]]], dtype=np.float32)
        result = apply_gamma(image, 2.2)

        assert result[0, 0, 0] == pytest.approx(0.0)
        assert result[0, 0, 1] == pytest.approx(0.5 ** (1.0 / 2.2), rel=1e-5)
        assert result[0, 0, 2] == pytest.approx(1.0)

    def test_process_for_display_normalizes(self):
        """Test 8-bit images become floats in [0, 1]."""
        from src.mirrorball.preview.display import process_image_for_display

        image = np.array([[[0, 51, 255]]], dtype=np.uint8)
        result = process_image_for_display(image)

        assert result.dtype == np.float32
        np.testing.assert_allclose(result, [[[0.0, 0.2, 1.0]]], atol=1e-6)

    def test_show_preview_requires_render(self):
        """Test showing a renderer with no image raises before plotting."""
        from src.mirrorball.core.progressive import ProgressiveRenderer
        from src.mirrorball.preview.display import show_preview

        with pytest.raises(RuntimeError):
            show_preview(ProgressiveRenderer(32, 2), block=False)

"""Tests for the ProgressiveRenderer."""

import numpy as np
import pytest


@pytest.fixture
def showcase_renderer():
    """A small renderer over the material showcase scene."""
    from weekend_tracer.camera.thin_lens import setup_camera
    from weekend_tracer.core.progressive import ProgressiveRenderer
    from weekend_tracer.scene.presets import create_material_showcase_scene

    _, camera = create_material_showcase_scene(aspect_ratio=2.0)
    setup_camera(camera)
    return ProgressiveRenderer(16, 8, max_depth=5)


class TestProgressiveRenderer:
    """Tests for sample accumulation and progress reporting."""

    def test_initial_state(self, showcase_renderer):
        assert showcase_renderer.width == 16
        assert showcase_renderer.height == 8
        assert showcase_renderer.max_depth == 5
        assert showcase_renderer.sample_count == 0

    def test_render_accumulates(self, showcase_renderer):
        showcase_renderer.render(3)
        showcase_renderer.render(2, batch_size=2)
        assert showcase_renderer.sample_count == 5

    def test_callback_reports_batches(self, showcase_renderer):
        calls = []
        showcase_renderer.render(7, batch_size=3, callback=lambda c, t: calls.append((c, t)))
        assert calls == [(3, 7), (6, 7), (7, 7)]

    def test_generator_yields_progress(self, showcase_renderer):
        showcase_renderer.render(2)
        progress = list(showcase_renderer.render_progressive(4, batch_size=2))
        assert progress == [(4, 6), (6, 6)]

    def test_zero_samples_is_noop(self, showcase_renderer):
        showcase_renderer.render(0)
        assert showcase_renderer.sample_count == 0

    def test_invalid_batch_size(self, showcase_renderer):
        with pytest.raises(ValueError, match="batch_size"):
            showcase_renderer.render(4, batch_size=0)

    def test_negative_max_depth(self):
        from weekend_tracer.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="max_depth"):
            ProgressiveRenderer(8, 8, max_depth=-1)

    def test_reset(self, showcase_renderer):
        showcase_renderer.render(2)
        showcase_renderer.reset()
        assert showcase_renderer.sample_count == 0
        assert (showcase_renderer.get_summed_image() == 0.0).all()

    def test_resize(self, showcase_renderer):
        showcase_renderer.render(1)
        showcase_renderer.resize(10, 5)
        assert (showcase_renderer.width, showcase_renderer.height) == (10, 5)
        assert showcase_renderer.sample_count == 0

        showcase_renderer.render(1)
        assert showcase_renderer.get_summed_image().shape == (5, 10, 3)

    def test_resize_rejects_oversize_and_keeps_state(self, showcase_renderer):
        with pytest.raises(ValueError):
            showcase_renderer.resize(4096, 4096)
        assert showcase_renderer.width == 16

    def test_image_uint8(self, showcase_renderer):
        showcase_renderer.render(4, batch_size=2)
        image = showcase_renderer.get_image_uint8()

        assert image.shape == (8, 16, 3)
        assert image.dtype == np.uint8
        # Upper rows see sky; the whole image is not black
        assert image.max() > 0

    def test_independent_sky_renders_agree(self, showcase_renderer):
        """Two separate passes over an empty scene converge to the same sky."""
        from weekend_tracer.output.export import compute_rmse
        from weekend_tracer.scene.manager import SceneManager

        SceneManager()  # sky only

        showcase_renderer.render(4)
        first = showcase_renderer.get_summed_image() / showcase_renderer.sample_count
        showcase_renderer.reset()
        showcase_renderer.render(4)
        second = showcase_renderer.get_summed_image() / showcase_renderer.sample_count

        assert compute_rmse(first, second) < 0.02
        # The sky is far brighter than black
        assert compute_rmse(first, np.zeros_like(first)) > 0.5

    def test_image_uint8_requires_samples(self, showcase_renderer):
        with pytest.raises(RuntimeError, match="No samples"):
            showcase_renderer.get_image_uint8()

    @pytest.mark.parametrize("suffix", [".ppm", ".png"])
    def test_save_image(self, showcase_renderer, tmp_path, suffix):
        showcase_renderer.render(2)
        path = tmp_path / f"render{suffix}"
        showcase_renderer.save_image(path)
        assert path.exists()
        assert path.stat().st_size > 0

    def test_repr(self, showcase_renderer):
        assert repr(showcase_renderer) == (
            "ProgressiveRenderer(width=16, height=8, max_depth=5, samples=0)"
        )

# Third-party imports
import pytest

# floorgraph imports
from floorgraph import config
from floorgraph.transform import (
    Viewport,
    canvas_to_image,
    clamp_zoom,
    compute_display_scale,
    image_to_canvas,
    to_model,
    to_screen,
)


ZOOMS = [0.25, 0.5, 1.0, 1.75, 2.5, 4.0]
PANS = [(0.0, 0.0), (37.5, -12.0), (-400.0, 250.25)]
POINTS = [(0.0, 0.0), (123.4, 56.7), (-8.0, 1024.0)]


class TestScreenModelTransform:
    """Tests for to_model / to_screen"""

    def test_to_model_subtracts_pan_then_divides_by_zoom(self):
        """(screen - pan) / zoom"""
        assert to_model((110.0, 70.0), 2.0, (10.0, 10.0)) == (50.0, 30.0)

    def test_to_screen_is_inverse_formula(self):
        """model * zoom + pan"""
        assert to_screen((50.0, 30.0), 2.0, (10.0, 10.0)) == (110.0, 70.0)

    @pytest.mark.parametrize("zoom", ZOOMS)
    @pytest.mark.parametrize("pan", PANS)
    def test_round_trip_returns_original_point(self, zoom, pan):
        """to_model(to_screen(p)) == p over the whole zoom range"""
        for p in POINTS:
            assert to_model(to_screen(p, zoom, pan), zoom, pan) == pytest.approx(p)


class TestDisplayScale:
    """Tests for compute_display_scale and the image/canvas conversion"""

    def test_wide_image_limited_by_container_width(self):
        assert compute_display_scale(800, 700, 1600, 700) == pytest.approx(0.5)

    def test_tall_image_limited_by_max_height(self):
        assert compute_display_scale(800, 700, 1000, 1400) == pytest.approx(0.5)

    def test_small_image_never_enlarged(self):
        assert compute_display_scale(800, 700, 400, 300) == 1.0

    @pytest.mark.parametrize("size", [(0, 100), (100, 0), (-5, 10)])
    def test_non_positive_image_size_raises(self, size):
        with pytest.raises(ValueError):
            compute_display_scale(800, 700, *size)

    def test_canvas_image_conversion(self):
        assert canvas_to_image((50.0, 25.0), 0.5) == (100.0, 50.0)
        assert image_to_canvas((100.0, 50.0), 0.5) == (50.0, 25.0)


class TestViewport:
    """Tests for the mutable Viewport"""

    def test_zoom_clamped_on_construction(self):
        assert Viewport(zoom=10.0).zoom == config.ZOOM_MAX
        assert Viewport(zoom=0.01).zoom == config.ZOOM_MIN

    def test_zoom_in_steps_and_clamps(self):
        vp = Viewport()
        assert vp.zoom_in() == pytest.approx(1.25)
        vp = Viewport(zoom=4.0)
        assert vp.zoom_in() == 4.0

    def test_zoom_out_steps_and_clamps(self):
        vp = Viewport()
        assert vp.zoom_out() == pytest.approx(0.75)
        vp = Viewport(zoom=0.25)
        assert vp.zoom_out() == 0.25

    def test_continuous_zoom_is_clamped(self):
        vp = Viewport()
        assert vp.zoom_by(0.1) == pytest.approx(1.1)
        for _ in range(100):
            vp.zoom_by(0.1)
        assert vp.zoom == config.ZOOM_MAX
        for _ in range(100):
            vp.zoom_by(-0.1)
        assert vp.zoom == config.ZOOM_MIN

    def test_clamp_zoom(self):
        assert clamp_zoom(2.0) == 2.0
        assert clamp_zoom(100.0) == config.ZOOM_MAX

    def test_reset_restores_identity_view(self):
        vp = Viewport(zoom=3.0, pan=(40.0, 60.0))
        vp.reset()
        assert vp.zoom == 1.0
        assert vp.pan == (0.0, 0.0)

    def test_bound_transforms_use_current_state(self):
        vp = Viewport(zoom=2.0, pan=(10.0, 20.0), display_scale=0.5)
        assert vp.to_model((30.0, 40.0)) == (10.0, 10.0)
        assert vp.to_screen((10.0, 10.0)) == (30.0, 40.0)
        assert vp.to_image((10.0, 10.0)) == (20.0, 20.0)
        assert vp.from_image((20.0, 20.0)) == (10.0, 10.0)

    def test_rescale_updates_scale_and_canvas_size(self):
        vp = Viewport()
        assert vp.rescale(800, 700, 1600, 1400) == pytest.approx(0.5)
        assert vp.display_scale == pytest.approx(0.5)
        assert vp.canvas_width == pytest.approx(800)
        assert vp.canvas_height == pytest.approx(700)

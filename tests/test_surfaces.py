# Third-party imports
import pytest
from PIL import Image

# floorgraph imports
from floorgraph.surfaces import DrawSurface, PillowSurface, RecordingSurface, dash_polyline


class TestDashPolyline:
    """Tests for dash_polyline"""

    def test_single_segment(self):
        assert dash_polyline([(0, 0), (30, 0)], (10, 5)) == [((0, 0), (10, 0)), ((15, 0), (25, 0))]

    def test_phase_carries_across_vertices(self):
        pieces = dash_polyline([(0, 0), (6, 0), (6, 6)], (4, 4))
        assert pieces == [((0, 0), (4, 0)), ((6, 2), (6, 6))]

    def test_empty_pattern_returns_plain_segments(self):
        points = [(0, 0), (5, 0), (5, 5)]
        assert dash_polyline(points, ()) == [((0, 0), (5, 0)), ((5, 0), (5, 5))]

    def test_non_positive_pattern_returns_plain_segments(self):
        assert dash_polyline([(0, 0), (5, 0)], (0, 3)) == [((0, 0), (5, 0))]

    def test_zero_length_segment_skipped(self):
        assert dash_polyline([(0, 0), (0, 0), (4, 0)], (2, 2)) == [((0, 0), (2, 0))]


class TestPillowSurface:
    """Rasterisation checks on a small PillowSurface"""

    @pytest.fixture
    def surface(self):
        return PillowSurface(60, 40, background="white")

    def test_is_a_draw_surface(self, surface):
        assert isinstance(surface, DrawSurface)
        assert isinstance(RecordingSurface(), DrawSurface)

    def test_clear_fills_background(self, surface):
        assert surface.to_array().shape == (40, 60, 4)
        assert tuple(surface.to_array()[0, 0]) == (255, 255, 255, 255)

    def test_line_pixels(self, surface):
        surface.line((5, 10), (55, 10), "#FF0000", width=3)
        assert tuple(surface.to_array()[10, 30]) == (255, 0, 0, 255)
        assert tuple(surface.to_array()[30, 30]) == (255, 255, 255, 255)

    def test_transform_applied_to_circle(self, surface):
        surface.set_transform(2.0, (10, 5))
        surface.circle((10, 5), 3, fill="#0000FF")
        assert tuple(surface.to_array()[15, 30]) == (0, 0, 255, 255)
        assert tuple(surface.to_array()[5, 10]) == (255, 255, 255, 255)

    def test_clear_resets_transform(self, surface):
        surface.set_transform(3.0, (7, 7))
        surface.clear()
        assert surface.zoom == 1.0
        assert surface.pan == (0.0, 0.0)

    def test_draw_image_is_scaled_and_placed_at_pan(self, surface):
        plan = Image.new("RGB", (10, 10), (0, 128, 0))
        surface.set_transform(1.0, (20, 10))
        surface.draw_image(plan, 20, 20)
        assert tuple(surface.to_array()[20, 30]) == (0, 128, 0, 255)
        assert tuple(surface.to_array()[5, 5]) == (255, 255, 255, 255)

    def test_translucent_rect_blends(self, surface):
        surface.rect((0, 0), (20, 20), "#000000", alpha=0.5)
        r, g, b, _ = surface.to_array()[10, 10]
        assert 100 < r < 160

    def test_translucent_line_mixes_with_floor_plan(self, surface):
        surface.draw_image(Image.new("RGB", (60, 40), (0, 128, 0)), 60, 40)
        surface.polyline([(0, 20), (60, 20)], "#0000FF", width=6, alpha=0.5)
        r, g, b, a = surface.to_array()[20, 30]
        assert a == 255
        assert 40 < g < 90
        assert 100 < b < 160

    def test_opaque_pixels_stay_opaque_under_translucent_circle(self, surface):
        surface.circle((30, 20), 8, fill="#FF0000", outline="#000000", width=2, alpha=0.3)
        assert (surface.to_array()[..., 3] == 255).all()

    def test_non_positive_ring_dash_draws_solid_ring(self, surface):
        surface.circle((30, 20), 10, outline="#FF0000", dash=(0, 4))
        assert (surface.to_array()[..., 1] < 255).any()

    def test_text_size_positive(self, surface):
        width, height = surface.text_size("Room 101")
        assert width > 0 and height > 0
        assert surface.text_size("Room 101 East")[0] > width

    def test_save_creates_parent_dirs(self, surface, tmp_path):
        path = surface.save(tmp_path / "nested" / "frame.png")
        assert path.exists()
        assert Image.open(path).size == (60, 40)


class TestRecordingSurface:
    """Tests for RecordingSurface"""

    def test_clear_restarts_recording(self):
        surface = RecordingSurface()
        surface.line((0, 0), (1, 1), "red")
        surface.clear()
        assert surface.ops == [("clear", (), {})]

    def test_of_kind(self):
        surface = RecordingSurface()
        surface.circle((1, 2), 3, fill="red")
        surface.text((1, 2), "A", "white")
        (_, args, style), = surface.of_kind("circle")
        assert args == ((1, 2), 3)
        assert style["fill"] == "red"
        assert surface.of_kind("text")[0][1] == ((1, 2), "A")

"""
Coordinate transforms between screen, canvas and floor plan image space.

Three coordinate systems are in play:

    screen  pixels on the widget, after pan and zoom
    canvas  zoom-free display pixels: ``(screen - pan) / zoom``
    image   authored floor plan units: ``canvas / display_scale``

Every pointer event is converted with ``to_model`` exactly once, at the top
of the handler, and everything downstream works in canvas space.
"""

# floorgraph imports
from floorgraph import config

# Standard library imports
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]


def to_model(screen_point: Point, zoom: float, pan: Point) -> Point:
    """Map a screen point to zoom-free canvas space."""
    return ((screen_point[0] - pan[0]) / zoom,
            (screen_point[1] - pan[1]) / zoom)


def to_screen(model_point: Point, zoom: float, pan: Point) -> Point:
    """Exact inverse of ``to_model``."""
    return (model_point[0] * zoom + pan[0],
            model_point[1] * zoom + pan[1])


def compute_display_scale(container_width: float, max_height: float,
                          image_width: float, image_height: float) -> float:
    """Scale that fits an image inside the container without enlarging it."""
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Invalid image size {image_width}x{image_height}")
    return min(container_width / image_width, max_height / image_height, 1.0)


def canvas_to_image(point: Point, display_scale: float) -> Point:
    return point[0] / display_scale, point[1] / display_scale


def image_to_canvas(point: Point, display_scale: float) -> Point:
    return point[0] * display_scale, point[1] * display_scale


def clamp_zoom(zoom: float) -> float:
    return max(config.ZOOM_MIN, min(config.ZOOM_MAX, zoom))


@dataclass
class Viewport:
    """Pan/zoom state of the canvas plus the per-image display scale.

    Attributes:
        zoom: Zoom level, clamped to [ZOOM_MIN, ZOOM_MAX].
        pan: Screen offset of the canvas origin.
        display_scale: Factor from authored image units to canvas pixels.
            Fixed per image load; only ``rescale`` changes it.
        canvas_width, canvas_height: Zoom-free size of the displayed plan.
    """
    zoom:           float   = 1.0
    pan:            Point   = (0.0, 0.0)
    display_scale:  float   = 1.0
    canvas_width:   float   = config.DEFAULT_CONTAINER_WIDTH
    canvas_height:  float   = config.DEFAULT_MAX_HEIGHT

    def __post_init__(self):
        self.zoom = clamp_zoom(self.zoom)

    def to_model(self, screen_point: Point) -> Point:
        return to_model(screen_point, self.zoom, self.pan)

    def to_screen(self, model_point: Point) -> Point:
        return to_screen(model_point, self.zoom, self.pan)

    def to_image(self, canvas_point: Point) -> Point:
        return canvas_to_image(canvas_point, self.display_scale)

    def from_image(self, image_point: Point) -> Point:
        return image_to_canvas(image_point, self.display_scale)

    def zoom_in(self) -> float:
        self.zoom = clamp_zoom(self.zoom + config.ZOOM_STEP)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = clamp_zoom(self.zoom - config.ZOOM_STEP)
        return self.zoom

    def zoom_by(self, delta: float) -> float:
        """Continuous zoom (scroll wheel), rounded to avoid float drift."""
        self.zoom = clamp_zoom(round(self.zoom + delta, 4))
        return self.zoom

    def reset(self) -> None:
        self.zoom = 1.0
        self.pan = (0.0, 0.0)

    def pan_to(self, offset: Point) -> None:
        self.pan = (float(offset[0]), float(offset[1]))

    def rescale(self, container_width: float, max_height: float,
                image_width: float, image_height: float) -> float:
        """Recompute the display scale after an image load, resize or fullscreen toggle."""
        self.display_scale = compute_display_scale(container_width, max_height, image_width, image_height)
        self.canvas_width = image_width * self.display_scale
        self.canvas_height = image_height * self.display_scale
        return self.display_scale

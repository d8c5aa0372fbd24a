"""
Drawing surfaces used by the renderer.

The renderer issues primitives in canvas space; a surface applies the pan/zoom
transform and rasterises or records them.

This module contains:
- DrawSurface: the protocol every surface implements
- PillowSurface: RGBA raster built with PIL ImageDraw (used by the editor window)
- RecordingSurface: keeps an ordered list of primitives, for inspection in tests
"""

# floorgraph imports
from floorgraph import config

# Standard library imports
import math
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

# Third-party imports
import numpy as np
from matplotlib import font_manager
from PIL import Image, ImageColor, ImageDraw, ImageFont

Point = Tuple[float, float]
Color = Union[str, Tuple[int, ...]]


@runtime_checkable
class DrawSurface(Protocol):
    """Primitive drawing interface; all coordinates and sizes are in canvas space."""

    def clear(self) -> None:
        ...

    def set_transform(self, zoom: float, pan: Point) -> None:
        ...

    def draw_image(self, image: Image.Image, width: float, height: float) -> None:
        ...

    def line(self, p1: Point, p2: Point, color: Color, width: float = 1.0,
             dash: Sequence[float] = (), alpha: float = 1.0) -> None:
        ...

    def polyline(self, points: Sequence[Point], color: Color, width: float = 1.0,
                 dash: Sequence[float] = (), alpha: float = 1.0) -> None:
        ...

    def circle(self, center: Point, radius: float, fill: Optional[Color] = None,
               outline: Optional[Color] = None, width: float = 1.0,
               dash: Sequence[float] = (), alpha: float = 1.0) -> None:
        ...

    def rect(self, p0: Point, p1: Point, fill: Color, alpha: float = 1.0) -> None:
        ...

    def text(self, center: Point, text: str, color: Color, size: float = config.LABEL_FONT_SIZE,
             bold: bool = False) -> None:
        ...

    def text_size(self, text: str, size: float = config.LABEL_FONT_SIZE,
                  bold: bool = False) -> Tuple[float, float]:
        ...


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _rgba(color: Color, alpha: float = 1.0) -> Tuple[int, int, int, int]:
    """Resolve a colour name/hex/tuple to RGBA, scaling its alpha channel."""
    rgb = ImageColor.getrgb(color) if isinstance(color, str) else tuple(color)
    base_alpha = rgb[3] if len(rgb) == 4 else 255
    return rgb[0], rgb[1], rgb[2], int(round(base_alpha * max(0.0, min(1.0, alpha))))


@lru_cache(maxsize=64)
def _load_font(font_size: int, bold: bool = False):
    """Load DejaVu Sans (shipped with matplotlib) or fall back to PIL's default font."""
    try:
        props = font_manager.FontProperties(family="DejaVu Sans", weight="bold" if bold else "normal")
        return ImageFont.truetype(font_manager.findfont(props, fallback_to_default=True), font_size)
    except (OSError, IOError, ValueError):
        return ImageFont.load_default()


def dash_polyline(points: Sequence[Point], dash: Sequence[float]) -> List[Tuple[Point, Point]]:
    """Split a polyline into the visible pieces of a dash pattern.

    The pattern phase carries over from one segment to the next, as a canvas
    line dash does. An empty or non-positive pattern yields the plain segments.
    """
    segments = list(zip(points[:-1], points[1:]))
    if not dash or any(d <= 0 for d in dash):
        return segments

    pieces       = []
    idx          = 0
    remaining    = dash[0]
    on           = True
    for (x1, y1), (x2, y2) in segments:
        length = math.hypot(x2 - x1, y2 - y1)
        if length == 0:
            continue
        ux, uy = (x2 - x1) / length, (y2 - y1) / length
        pos = 0.0
        while pos < length:
            step = min(remaining, length - pos)
            if on:
                pieces.append(((x1 + ux*pos, y1 + uy*pos), (x1 + ux*(pos + step), y1 + uy*(pos + step))))
            pos       += step
            remaining -= step
            if remaining <= 1e-9:
                idx       = (idx + 1) % len(dash)
                remaining = dash[idx]
                on        = not on
    return pieces


# -----------------------------------------------------------------------------
# Pillow raster surface
# -----------------------------------------------------------------------------

class PillowSurface:
    """RGBA raster surface backed by PIL ImageDraw.

    Args:
        width, height: Raster size in screen pixels.
        background: Fill colour used by ``clear``.
    """

    def __init__(self, width: int, height: int, background: Color = config.BACKGROUND_COLOR):
        self.width      = int(width)
        self.height     = int(height)
        self.background = background
        self.zoom       = 1.0
        self.pan        = (0.0, 0.0)
        self.image      = Image.new("RGBA", (self.width, self.height), _rgba(background))
        self._draw      = ImageDraw.Draw(self.image, "RGBA")

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = int(width), int(height)
        self.clear()

    def clear(self) -> None:
        self.image = Image.new("RGBA", (self.width, self.height), _rgba(self.background))
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        self.zoom, self.pan = 1.0, (0.0, 0.0)

    def set_transform(self, zoom: float, pan: Point) -> None:
        self.zoom, self.pan = float(zoom), (float(pan[0]), float(pan[1]))

    def _xy(self, p: Point) -> Point:
        return p[0] * self.zoom + self.pan[0], p[1] * self.zoom + self.pan[1]

    def _w(self, width: float) -> int:
        return max(1, int(round(width * self.zoom)))

    @contextmanager
    def _painter(self, rgba: Tuple[int, int, int, int]):
        """Yield an ImageDraw for ``rgba``.

        ImageDraw writes translucent ink straight into an RGBA image, alpha
        included, so translucent shapes go onto a transparent overlay that is
        merged with ``Image.alpha_composite`` once drawn.
        """
        if rgba[3] >= 255:
            yield self._draw
            return
        overlay = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        yield ImageDraw.Draw(overlay)
        self.image = Image.alpha_composite(self.image, overlay)
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def draw_image(self, image: Image.Image, width: float, height: float) -> None:
        w, h = int(round(width * self.zoom)), int(round(height * self.zoom))
        if w <= 0 or h <= 0:
            return
        scaled = image.convert("RGBA").resize((w, h), Image.BILINEAR)
        self.image.paste(scaled, (int(round(self.pan[0])), int(round(self.pan[1]))), scaled)

    def line(self, p1, p2, color, width=1.0, dash=(), alpha=1.0) -> None:
        self.polyline([p1, p2], color, width, dash, alpha)

    def polyline(self, points, color, width=1.0, dash=(), alpha=1.0) -> None:
        if len(points) < 2:
            return
        fill = _rgba(color, alpha)
        w    = self._w(width)
        xy   = [self._xy(p) for p in points]
        with self._painter(fill) as draw:
            if dash:
                scaled = [d * self.zoom for d in dash]
                for a, b in dash_polyline(xy, scaled):
                    draw.line([a, b], fill=fill, width=w)
                return
            draw.line(xy, fill=fill, width=w, joint="curve")
            if w > 2:
                r = w / 2
                for cx, cy in (xy[0], xy[-1]):
                    draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=fill)

    def circle(self, center, radius, fill=None, outline=None, width=1.0, dash=(), alpha=1.0) -> None:
        cx, cy = self._xy(center)
        r      = radius * self.zoom
        box    = [cx - r, cy - r, cx + r, cy + r]
        w      = self._w(width)
        if fill is not None:
            with self._painter(_rgba(fill, alpha)) as draw:
                draw.ellipse(box, fill=_rgba(fill, alpha))
        if outline is None:
            return
        stroke = _rgba(outline, alpha)
        with self._painter(stroke) as draw:
            if not dash or any(d <= 0 for d in dash) or r <= 0:
                draw.ellipse(box, outline=stroke, width=w)
                return
            # Dashed ring drawn as arcs, pattern measured along the circumference
            deg_per_px = 360.0 / (2 * math.pi * r)
            angle, idx, on = 0.0, 0, True
            while angle < 360.0:
                sweep = dash[idx % len(dash)] * self.zoom * deg_per_px
                if on:
                    draw.arc(box, angle, min(angle + sweep, 360.0), fill=stroke, width=w)
                angle += sweep
                idx   += 1
                on     = not on

    def rect(self, p0, p1, fill, alpha=1.0) -> None:
        (x0, y0), (x1, y1) = self._xy(p0), self._xy(p1)
        color = _rgba(fill, alpha)
        with self._painter(color) as draw:
            draw.rectangle([min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)], fill=color)

    def text(self, center, text, color, size=config.LABEL_FONT_SIZE, bold=False) -> None:
        font = _load_font(max(1, int(round(size * self.zoom))), bold)
        bbox = self._draw.textbbox((0, 0), text, font=font)
        tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
        cx, cy = self._xy(center)
        self._draw.text((cx - tw / 2 - bbox[0], cy - th / 2 - bbox[1]), text, font=font, fill=_rgba(color))

    def text_size(self, text, size=config.LABEL_FONT_SIZE, bold=False) -> Tuple[float, float]:
        font = _load_font(max(1, int(round(size))), bold)
        bbox = self._draw.textbbox((0, 0), text, font=font)
        return float(bbox[2] - bbox[0]), float(bbox[3] - bbox[1])

    def to_array(self) -> np.ndarray:
        return np.asarray(self.image)

    def save(self, path: Union[Path, str]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.image.save(path)
        return path


# -----------------------------------------------------------------------------
# Recording surface
# -----------------------------------------------------------------------------

class RecordingSurface:
    """Surface that records primitives instead of drawing them.

    Each entry in ``ops`` is ``(kind, args, style)`` with coordinates left in
    canvas space. ``text_size`` uses a fixed-width estimate.
    """

    def __init__(self):
        self.ops: List[tuple] = []
        self.zoom = 1.0
        self.pan  = (0.0, 0.0)

    def _add(self, kind: str, *args, **style) -> None:
        self.ops.append((kind, args, style))

    def clear(self) -> None:
        self.ops.clear()
        self._add("clear")

    def set_transform(self, zoom, pan) -> None:
        self.zoom, self.pan = zoom, tuple(pan)
        self._add("transform", zoom, tuple(pan))

    def draw_image(self, image, width, height) -> None:
        self._add("image", width, height)

    def line(self, p1, p2, color, width=1.0, dash=(), alpha=1.0) -> None:
        self._add("line", tuple(p1), tuple(p2), color=color, width=width, dash=tuple(dash), alpha=alpha)

    def polyline(self, points, color, width=1.0, dash=(), alpha=1.0) -> None:
        self._add("polyline", tuple(tuple(p) for p in points), color=color, width=width,
                  dash=tuple(dash), alpha=alpha)

    def circle(self, center, radius, fill=None, outline=None, width=1.0, dash=(), alpha=1.0) -> None:
        self._add("circle", tuple(center), radius, fill=fill, outline=outline, width=width,
                  dash=tuple(dash), alpha=alpha)

    def rect(self, p0, p1, fill, alpha=1.0) -> None:
        self._add("rect", tuple(p0), tuple(p1), fill=fill, alpha=alpha)

    def text(self, center, text, color, size=config.LABEL_FONT_SIZE, bold=False) -> None:
        self._add("text", tuple(center), text, color=color, size=size, bold=bold)

    def text_size(self, text, size=config.LABEL_FONT_SIZE, bold=False) -> Tuple[float, float]:
        return len(text) * size * 0.6, size * 1.2

    def of_kind(self, kind: str) -> List[tuple]:
        return [op for op in self.ops if op[0] == kind]

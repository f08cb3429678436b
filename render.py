#!/usr/bin/python3
"""
Draws decoded map geometry to an image with Pillow.

One-sided walls (no left sidedef) are drawn in one colour, two-sided lines
in another, and every line end gets a small dot.  Coordinates are expected
to be normalized already, so they start at zero.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from wad import Linedef, Vertex

DEFAULT_SCALE = 5


@dataclass(frozen=True)
class RenderConfig:
    scale: int = DEFAULT_SCALE
    margin: int = 10
    one_sided_color: str = "black"
    two_sided_color: str = "red"
    vertex_color: str = "black"
    background: str = "white"
    vertex_radius: int = 2
    line_width: int = 1
    flip_y: bool = False

    def __post_init__(self):
        if self.scale < 1:
            raise ValueError(f"scale must be at least 1, got {self.scale}")


def canvas_size(vertexes: Sequence[Vertex], config: RenderConfig) -> Tuple[int, int]:
    """Image size that fits every scaled vertex plus the margin on each side."""
    width = max((v.x // config.scale for v in vertexes), default=0)
    height = max((v.y // config.scale for v in vertexes), default=0)
    return width + 2 * config.margin + 1, height + 2 * config.margin + 1


def render_map(vertexes: Sequence[Vertex], linedefs: Sequence[Linedef],
               config: Optional[RenderConfig] = None) -> Image.Image:
    config = config or RenderConfig()
    size = canvas_size(vertexes, config)
    bottom = size[1] - 1

    def transform(v: Vertex) -> Tuple[int, int]:
        x = v.x // config.scale + config.margin
        y = v.y // config.scale + config.margin
        if config.flip_y:
            y = bottom - y
        return x, y

    image = Image.new("RGB", size, config.background)
    draw = ImageDraw.Draw(image)
    r = config.vertex_radius

    for line in linedefs:
        p1 = transform(vertexes[line.v1])
        p2 = transform(vertexes[line.v2])
        color = config.one_sided_color if line.one_sided else config.two_sided_color
        draw.line([p1, p2], fill=color, width=config.line_width)

        if r > 0:
            for x, y in (p1, p2):
                draw.ellipse([x - r, y - r, x + r, y + r], fill=config.vertex_color)

    return image


def can_save(destination) -> bool:
    """True if Pillow knows an image format for the destination's suffix."""
    return Path(destination).suffix.lower() in Image.registered_extensions()


def save_map(vertexes: Sequence[Vertex], linedefs: Sequence[Linedef],
             destination: Path, config: Optional[RenderConfig] = None) -> Path:
    destination = Path(destination)
    image = render_map(vertexes, linedefs, config)
    destination.parent.mkdir(parents=True, exist_ok=True)
    image.save(destination)
    return destination

import pytest

from PIL import Image

import render
from wad import Linedef, Vertex


def square():
    vertexes = [Vertex(0, 0), Vertex(100, 0), Vertex(100, 100), Vertex(0, 100)]
    linedefs = [
        Linedef(0, 1, 1, 0, 0, 0, -1),
        Linedef(1, 2, 1, 0, 0, 1, -1),
        Linedef(2, 3, 4, 0, 0, 2, 3),
        Linedef(3, 0, 1, 0, 0, 4, -1),
    ]
    return vertexes, linedefs


def test_canvas_size():
    vertexes, _ = square()
    config = render.RenderConfig(scale=5, margin=10)
    assert render.canvas_size(vertexes, config) == (41, 41)


def test_canvas_size_no_vertexes():
    assert render.canvas_size([], render.RenderConfig(margin=3)) == (7, 7)


def test_line_colours():
    vertexes, linedefs = square()
    config = render.RenderConfig(scale=5, margin=10, vertex_radius=0)
    image = render.render_map(vertexes, linedefs, config)

    # Midpoint of the bottom wall (one-sided) and the top line (two-sided)
    assert image.getpixel((20, 10)) == (0, 0, 0)
    assert image.getpixel((20, 30)) == (255, 0, 0)
    # Inside the square
    assert image.getpixel((20, 20)) == (255, 255, 255)


def test_flip_y():
    vertexes, linedefs = square()
    config = render.RenderConfig(scale=5, margin=10, vertex_radius=0, flip_y=True)
    image = render.render_map(vertexes, linedefs, config)

    assert image.getpixel((20, 30)) == (0, 0, 0)
    assert image.getpixel((20, 10)) == (255, 0, 0)


def test_vertex_dots():
    vertexes, linedefs = square()
    config = render.RenderConfig(scale=5, margin=10, vertex_radius=2,
                                 vertex_color="blue")
    image = render.render_map(vertexes, linedefs, config)
    assert image.getpixel((10, 10)) == (0, 0, 255)


def test_invalid_scale():
    with pytest.raises(ValueError):
        render.RenderConfig(scale=0)


def test_save_map(tmp_path):
    vertexes, linedefs = square()
    destination = tmp_path / "out" / "map.png"
    path = render.save_map(vertexes, linedefs, destination)

    assert path == destination
    with Image.open(destination) as image:
        assert image.size == (41, 41)

"""
Helpers for building small synthetic WAD files in memory.
"""

import struct

import pytest


def pack_vertexes(points):
    return b''.join(struct.pack('<hh', x, y) for x, y in points)


def pack_linedefs(lines):
    return b''.join(struct.pack('<7h', *line) for line in lines)


def build_wad(lumps, tag=b'PWAD'):
    """
    Build a WAD buffer from a list of (name, data) pairs.

    Lump data follows the header directly and the directory comes last,
    which is how most tools lay the file out.
    """
    body = b''
    entries = []
    offset = 12
    for name, data in lumps:
        entries.append((offset if data else 0, len(data), name))
        body += data
        offset += len(data)

    directory = b''.join(
        struct.pack('<II8s', pos, size, name.encode('ascii'))
        for pos, size, name in entries
    )
    header = struct.pack('<4sII', tag, len(lumps), 12 + len(body))
    return header + body + directory


@pytest.fixture
def square_points():
    return [(-64, -64), (64, -64), (64, 64), (-64, 64)]


@pytest.fixture
def square_lines():
    # Three one-sided walls and one two-sided line
    return [
        (0, 1, 1, 0, 0, 0, -1),
        (1, 2, 1, 0, 0, 1, -1),
        (2, 3, 4, 11, 7, 2, 3),
        (3, 0, 1, 0, 0, 4, -1),
    ]


@pytest.fixture
def square_wad(square_points, square_lines):
    return build_wad([
        ("E1M1", b''),
        ("THINGS", b'\x00' * 10),
        ("LINEDEFS", pack_linedefs(square_lines)),
        ("SIDEDEFS", b''),
        ("VERTEXES", pack_vertexes(square_points)),
    ], tag=b'IWAD')

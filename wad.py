#!/usr/bin/python3
"""
Read-only decoder for DOOM WAD archives.

A WAD is a 12-byte header, a directory of named lumps and the lumps
themselves.  Only the map geometry lumps (VERTEXES and LINEDEFS) are
decoded into records; everything else is reachable as raw bytes.
"""

import struct
import sys

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

# Accepted identification tags when strict header checking is on
WAD_SIGNATURES = ("IWAD", "PWAD")

HEADER_SIZE = 12
DIRECTORY_ENTRY_SIZE = 16
LUMP_NAME_SIZE = 8

VERTEX_SIZE = 4
LINEDEF_SIZE = 14

# Lumps that follow a map marker such as E1M1 or MAP01
MAP_LUMPS = (
    "THINGS", "LINEDEFS", "SIDEDEFS", "VERTEXES", "SEGS", "SSECTORS",
    "NODES", "SECTORS", "REJECT", "BLOCKMAP", "BEHAVIOR",
)

_U32 = struct.Struct('<I')
_I16 = struct.Struct('<h')

R = TypeVar('R')


class WadError(ValueError):
    """Base class for everything that can go wrong decoding a WAD."""


class OutOfBounds(WadError):
    def __init__(self, offset: int, wanted: int, available: int):
        self.offset = offset
        self.wanted = wanted
        self.available = available
        super().__init__(
            f"Read of {wanted} bytes at offset {offset} runs past the end "
            f"of the buffer ({available} bytes)."
        )


class InvalidHeader(WadError):
    pass


class EmptyInput(WadError):
    pass


class MapNotFound(WadError):
    pass


class BadVertexIndex(WadError):
    pass


@dataclass(frozen=True)
class WadHeader:
    identification: str
    lump_count: int
    directory_offset: int


@dataclass(frozen=True)
class Lump:
    file_position: int
    size: int
    name: str


@dataclass(frozen=True)
class Vertex:
    x: int
    y: int


@dataclass(frozen=True)
class Linedef:
    v1: int
    v2: int
    flags: int
    special: int
    tag: int
    right_sidedef: int
    left_sidedef: int

    @property
    def one_sided(self) -> bool:
        # -1 means there is no sidedef on the left
        return self.left_sidedef == -1


@dataclass(frozen=True)
class MapData:
    header: WadHeader
    directory: List[Lump]
    vertexes: List[Vertex]
    linedefs: List[Linedef]


class ByteReader:
    """
    Cursor over an in-memory buffer.  Every read checks that enough bytes
    remain before touching the buffer and raises OutOfBounds otherwise.
    All integers are little-endian.
    """
    def __init__(self, buffer: bytes, position: int = 0):
        self.buffer = buffer
        self.position = position

    @property
    def remaining(self) -> int:
        return max(len(self.buffer) - self.position, 0)

    def tell(self) -> int:
        return self.position

    def seek(self, position: int) -> None:
        self.position = position

    def require(self, count: int) -> None:
        """Raise OutOfBounds unless count bytes are available at the cursor."""
        if self.position < 0 or self.position + count > len(self.buffer):
            raise OutOfBounds(self.position, count, len(self.buffer))

    def read_bytes(self, count: int) -> bytes:
        self.require(count)
        data = bytes(self.buffer[self.position:self.position + count])
        self.position += count
        return data

    def read_u32_le(self) -> int:
        self.require(_U32.size)
        value, = _U32.unpack_from(self.buffer, self.position)
        self.position += _U32.size
        return value

    def read_i16_le(self) -> int:
        self.require(_I16.size)
        value, = _I16.unpack_from(self.buffer, self.position)
        self.position += _I16.size
        return value

    def read_fixed_string(self, length: int) -> str:
        """Read a NUL-padded text field of exactly length bytes."""
        raw = self.read_bytes(length)
        # Non-ASCII bytes show up as U+FFFD rather than vanishing
        return raw.rstrip(b'\x00').decode('ascii', errors='replace')


def read_header(reader: ByteReader, strict: bool = False) -> WadHeader:
    reader.require(HEADER_SIZE)
    identification = reader.read_fixed_string(4)
    lump_count = reader.read_u32_le()
    directory_offset = reader.read_u32_le()

    if strict and identification not in WAD_SIGNATURES:
        raise InvalidHeader(
            f"Not a valid WAD file. Identification is {identification!r}."
        )

    return WadHeader(identification, lump_count, directory_offset)


def read_lump_entry(reader: ByteReader) -> Lump:
    file_position = reader.read_u32_le()
    size = reader.read_u32_le()
    name = reader.read_fixed_string(LUMP_NAME_SIZE)
    return Lump(file_position, size, name)


def check_extent(buffer: bytes, lump: Lump) -> None:
    """Raise OutOfBounds if the lump's bytes do not lie inside the buffer."""
    if lump.file_position + lump.size > len(buffer):
        raise OutOfBounds(lump.file_position, lump.size, len(buffer))


def read_directory(buffer: bytes, header: WadHeader) -> List[Lump]:
    reader = ByteReader(buffer, header.directory_offset)

    # The whole table must fit before any entry is read
    reader.require(header.lump_count * DIRECTORY_ENTRY_SIZE)

    directory = []
    for _ in range(header.lump_count):
        lump = read_lump_entry(reader)
        check_extent(buffer, lump)
        directory.append(lump)
    return directory


def decode(buffer: bytes, strict: bool = False) -> Tuple[WadHeader, List[Lump]]:
    """
    Decode the header and directory of a WAD held in memory.

    The directory keeps on-disk order.  With strict=True the identification
    tag must be IWAD or PWAD; otherwise any 4-byte tag is accepted.
    """
    header = read_header(ByteReader(buffer), strict)
    return header, read_directory(buffer, header)


def find_lump(directory: Sequence[Lump], name: str) -> Optional[Lump]:
    """Return the first lump called name (exact match), or None."""
    for lump in directory:
        if lump.name == name:
            return lump
    return None


def decode_records(buffer: bytes, lump: Lump, record_width: int,
                   read_record: Callable[[ByteReader], R]) -> List[R]:
    """
    Decode lump.size // record_width fixed-width records starting at the
    lump's file position.  Trailing bytes that do not make up a whole
    record are ignored.
    """
    check_extent(buffer, lump)

    reader = ByteReader(buffer, lump.file_position)
    count = lump.size // record_width
    return [read_record(reader) for _ in range(count)]


def read_vertex(reader: ByteReader) -> Vertex:
    x = reader.read_i16_le()
    y = reader.read_i16_le()
    return Vertex(x, y)


def read_linedef(reader: ByteReader) -> Linedef:
    # v1, v2, flags, special, tag, right sidedef, left sidedef
    fields = [reader.read_i16_le() for _ in range(7)]
    return Linedef(*fields)


def read_vertexes(buffer: bytes, directory: Sequence[Lump]) -> List[Vertex]:
    lump = find_lump(directory, "VERTEXES")
    if lump is None:
        return []
    return decode_records(buffer, lump, VERTEX_SIZE, read_vertex)


def read_linedefs(buffer: bytes, directory: Sequence[Lump]) -> List[Linedef]:
    lump = find_lump(directory, "LINEDEFS")
    if lump is None:
        return []
    return decode_records(buffer, lump, LINEDEF_SIZE, read_linedef)


def normalize(vertexes: Sequence[Vertex]) -> List[Vertex]:
    """
    Shift every vertex so the smallest x and the smallest y become zero.

    Map coordinates may be negative.  The result can exceed the signed
    16-bit range (up to 65535), which Python ints hold without loss.
    """
    if not vertexes:
        raise EmptyInput("Cannot normalize an empty vertex list.")

    min_x = min(v.x for v in vertexes)
    min_y = min(v.y for v in vertexes)
    return [Vertex(v.x - min_x, v.y - min_y) for v in vertexes]


def is_map_marker(directory: Sequence[Lump], index: int) -> bool:
    """True if the entry at index is a map marker followed by map lumps."""
    return (directory[index].name not in MAP_LUMPS
            and index + 1 < len(directory)
            and directory[index + 1].name in MAP_LUMPS)


def map_names(directory: Sequence[Lump]) -> List[str]:
    """Names of the map markers, in the order they appear."""
    return [lump.name for i, lump in enumerate(directory)
            if is_map_marker(directory, i)]


def map_directory(directory: Sequence[Lump], map_name: str) -> List[Lump]:
    """The lumps belonging to the first map marker called map_name."""
    for i, lump in enumerate(directory):
        if lump.name == map_name and is_map_marker(directory, i):
            break
    else:
        raise MapNotFound(f"No map called {map_name!r} in the WAD.")

    lumps = []
    for lump in directory[i + 1:]:
        if lump.name not in MAP_LUMPS:
            break
        lumps.append(lump)
    return lumps


def check_linedefs(linedefs: Sequence[Linedef], vertex_count: int) -> None:
    for i, line in enumerate(linedefs):
        for v in (line.v1, line.v2):
            if not 0 <= v < vertex_count:
                raise BadVertexIndex(
                    f"Linedef {i} references vertex {v}, "
                    f"but there are only {vertex_count} vertexes."
                )


def load(buffer: bytes, map_name: Optional[str] = None,
         strict: bool = False) -> MapData:
    """
    Decode a whole WAD buffer into a MapData.

    Without map_name the first VERTEXES and LINEDEFS lumps in the file are
    used.  Vertexes come back normalized.  Raises a WadError subclass on
    any failure; nothing is returned half-decoded.
    """
    header, directory = decode(buffer, strict)

    lumps = directory if map_name is None else map_directory(directory, map_name)
    vertexes = read_vertexes(buffer, lumps)
    linedefs = read_linedefs(buffer, lumps)
    check_linedefs(linedefs, len(vertexes))

    if vertexes:
        vertexes = normalize(vertexes)

    return MapData(header, directory, vertexes, linedefs)


class Wad:
    def __init__(self, filename, strict=True, verbose=False):
        with open(filename, 'rb') as f:
            self.data = f.read()

        self.filename = filename
        self.strict = strict
        self.header, self.directory = decode(self.data, strict)

        if verbose:
            print(self.header)
            for i, lump in enumerate(self.directory):
                print(f"[{i}] {lump}")

    def lump_data(self, name: str) -> bytes:
        lump = find_lump(self.directory, name)
        if lump is None:
            raise KeyError(f"Lump not found: {name!r}")
        return self.data[lump.file_position:lump.file_position + lump.size]

    def map_names(self) -> List[str]:
        return map_names(self.directory)

    def read_map(self, map_name: Optional[str] = None) -> MapData:
        return load(self.data, map_name, self.strict)


if __name__ == '__main__':
    wad_filepath = sys.argv[1] if len(sys.argv) > 1 else 'doom1.wad'
    m = Wad(wad_filepath).read_map()
    print(f"{len(m.vertexes)} vertexes, {len(m.linedefs)} linedefs")

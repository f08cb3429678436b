#!/usr/bin/env python3
"""
Command line front end for the WAD map decoder.
Prints the header and directory of a DOOM WAD and renders a map to PNG.
"""

import argparse
import os
import sys

from typing import List, Optional

import render
import wad

# Constants
DEFAULT_WAD = "doom1.wad"
DEFAULT_SCALE = render.DEFAULT_SCALE


def print_directory(directory: List[wad.Lump]) -> None:
    for i, lump in enumerate(directory):
        print(f"{i:5d}  {lump.name:<8}  pos={lump.file_position:<10d} size={lump.size}")


def print_summary(header: wad.WadHeader, map_name: Optional[str], m: wad.MapData) -> None:
    print(f"{header.identification}: {header.lump_count} lumps, "
          f"directory at {header.directory_offset}")
    print(f"Map {map_name or '(first in file)'}: "
          f"{len(m.vertexes)} vertexes, {len(m.linedefs)} linedefs")

    one_sided = sum(1 for line in m.linedefs if line.one_sided)
    print(f"  {one_sided} one-sided, {len(m.linedefs) - one_sided} two-sided")


def run(args: argparse.Namespace) -> int:
    w = wad.Wad(args.wad, strict=not args.any_tag, verbose=args.verbose)

    if args.list:
        print_directory(w.directory)

    if args.maps:
        for name in w.map_names():
            print(name)

    m = w.read_map(args.map)
    print_summary(w.header, args.map, m)

    if args.output:
        config = render.RenderConfig(scale=args.scale, flip_y=args.flip)
        path = render.save_map(m.vertexes, m.linedefs, args.output, config)
        print(f"Wrote {path}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Decode the map geometry of a DOOM WAD file"
    )
    parser.add_argument(
        "-w", "--wad",
        default=DEFAULT_WAD,
        help=f"Specify the DOOM WAD file (default: {DEFAULT_WAD})"
    )
    parser.add_argument(
        "-m", "--map",
        default=None,
        help="Map marker to decode, e.g. E1M1 or MAP01 (default: first in file)"
    )
    parser.add_argument(
        "-l", "--list",
        action="store_true",
        help="List every lump in the directory"
    )
    parser.add_argument(
        "--maps",
        action="store_true",
        help="List the map markers in the WAD"
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Render the map to this PNG file"
    )
    parser.add_argument(
        "-s", "--scale",
        type=int,
        default=DEFAULT_SCALE,
        help=f"Divide map coordinates by this when rendering (default: {DEFAULT_SCALE})"
    )
    parser.add_argument(
        "--flip",
        action="store_true",
        help="Draw with y pointing up, as in the game"
    )
    parser.add_argument(
        "--any-tag",
        action="store_true",
        help="Accept any identification tag, not only IWAD and PWAD"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args(argv)

    # Check if the WAD exists
    if not os.path.exists(args.wad):
        print(f"Error: WAD file '{args.wad}' does not exist", file=sys.stderr)
        return 1

    # Check if we have read permission
    if not os.access(args.wad, os.R_OK):
        print(f"Error: No read permission for WAD file '{args.wad}'", file=sys.stderr)
        return 1

    if args.scale < 1:
        print(f"Error: Scale must be at least 1, got {args.scale}", file=sys.stderr)
        return 1

    if args.output and not render.can_save(args.output):
        print(f"Error: Unknown image format for '{args.output}'", file=sys.stderr)
        return 1

    try:
        return run(args)
    except wad.WadError as e:
        print(f"Error: {args.wad}: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

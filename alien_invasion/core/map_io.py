"""
Map file reader/writer for the Alien Invasion Simulator.

Line-oriented format, one city per non-blank line:

    Foo north=Bar west=Baz south=Qu-ux
    Bar south=Foo west=Bee

Malformed directives, unknown directions and duplicate city declarations
are reported as `MapFormatWarning` and skipped; loading never aborts on
content errors.
"""

from __future__ import annotations

import sys
import warnings
from pathlib import Path
from typing import Iterable, Optional, TextIO

from alien_invasion.core.world_map import City, Direction, WorldMap


class MapFormatWarning(UserWarning):
    """Non-fatal problem found while reading a map file."""


def _warn(message: str, line_number: int) -> None:
    warnings.warn(f"{message}, at line={line_number}", MapFormatWarning, stacklevel=3)


def parse_directive(token: str) -> tuple[Direction, str]:
    """
    Parse a single `direction=Neighbor` token.

    Raises:
        ValueError: If the token is malformed or names an unknown direction.
    """
    parts = token.split("=")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"Invalid direction format! found:{token}, expected:dirname=city"
        )
    return Direction.from_token(parts[0]), parts[1]


def parse_map(lines: Iterable[str], world_map: Optional[WorldMap] = None) -> WorldMap:
    """
    Build a WorldMap from map-file lines.

    Args:
        lines: Text lines (trailing newlines allowed).
        world_map: Existing map to extend. None = start from an empty map.

    Returns:
        The populated WorldMap.
    """
    if world_map is None:
        world_map = WorldMap()

    for line_number, raw in enumerate(lines, start=1):
        tokens = raw.split()
        if not tokens:
            continue

        city_name, directives = tokens[0], tokens[1:]
        edges: list[tuple[Direction, str]] = []
        for token in directives:
            try:
                edges.append(parse_directive(token))
            except ValueError as exc:
                _warn(str(exc), line_number)

        if not world_map.add_city(city_name, edges):
            _warn(f"Duplicated city! name={city_name}", line_number)

    return world_map


def load_map(path: str | Path) -> WorldMap:
    """
    Load a map file.

    Raises:
        FileNotFoundError: If path doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Map file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return parse_map(f)


def format_city(world_map: WorldMap, city: City) -> str:
    """One map-file line for a city, skipping edges into destroyed cities."""
    parts = [city.name]
    for direction, neighbor_name in city.edges():
        if world_map.lookup(neighbor_name) is not None:
            parts.append(f"{direction.token}={neighbor_name}")
    return " ".join(parts)


def format_map(world_map: WorldMap) -> list[str]:
    """
    Render the surviving part of a map in map-file format.

    Destroyed cities are omitted, as are edges pointing at them.
    """
    return [format_city(world_map, city) for city in world_map if not city.destroyed]


def write_map(world_map: WorldMap, stream: Optional[TextIO] = None) -> None:
    """Write `format_map()` output to a stream (stdout by default)."""
    if stream is None:
        stream = sys.stdout
    for line in format_map(world_map):
        stream.write(line + "\n")


def save_map(world_map: WorldMap, path: str | Path) -> None:
    """Save the surviving map to a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        write_map(world_map, f)

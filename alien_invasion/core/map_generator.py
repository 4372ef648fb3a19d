"""
Random map generator for the Alien Invasion Simulator.

Produces map-file lines with approximately the requested number of
cities. Each generated city gets one to four neighbors in distinct
directions, and every neighbor is emitted with the reverse edge back,
so generated maps are always symmetric.
"""

from __future__ import annotations

import string
from typing import Optional

import numpy as np

from alien_invasion.core.world_map import Direction


class MapGenerationError(RuntimeError):
    """Raised when a unique city name cannot be found."""


def random_city_name(
    rng: np.random.Generator,
    min_length: int = 3,
    max_length: int = 6,
) -> str:
    """Random capitalised name, length uniform in [min_length, max_length]."""
    length = int(rng.integers(min_length, max_length + 1))
    letters = rng.integers(0, 26, size=length)
    name = "".join(string.ascii_lowercase[int(k)] for k in letters)
    return name.capitalize()


def unique_city_name(
    taken: set[str],
    rng: np.random.Generator,
    min_length: int = 3,
    max_length: int = 6,
    max_attempts: int = 1000,
) -> str:
    """
    Draw a name not in `taken` and add it there.

    Raises:
        MapGenerationError: If `max_attempts` draws all collide.
    """
    for _ in range(max_attempts):
        name = random_city_name(rng, min_length, max_length)
        if name not in taken:
            taken.add(name)
            return name
    raise MapGenerationError(
        "Can't generate a unique city name (perhaps city_count is too big?)"
    )


def generate_map_lines(
    city_count: int,
    rng: Optional[np.random.Generator] = None,
    min_name_length: int = 3,
    max_name_length: int = 6,
    max_name_attempts: int = 1000,
) -> list[str]:
    """
    Generate a random symmetric map.

    Args:
        city_count: Approximate number of cities.
        rng: Random generator. None = fresh unseeded generator.
        min_name_length, max_name_length: City name length bounds.
        max_name_attempts: Draws allowed per unique name.

    Returns:
        Map-file lines (no trailing newlines).
    """
    if rng is None:
        rng = np.random.default_rng()

    taken: set[str] = set()
    lines: list[str] = []
    remaining = city_count

    def new_name() -> str:
        return unique_city_name(
            taken, rng, min_name_length, max_name_length, max_name_attempts,
        )

    while remaining > 0:
        city = new_name()
        remaining -= 1

        n_neighbors = 1
        if remaining >= 4:
            n_neighbors = 1 + int(rng.integers(0, 4))
        remaining -= n_neighbors

        directions = [Direction(int(i)) for i in rng.permutation(len(Direction))[:n_neighbors]]
        parts = [city]
        reverse_lines = []
        for direction in directions:
            neighbor = new_name()
            parts.append(f"{direction.token}={neighbor}")
            reverse_lines.append(f"{neighbor} {direction.opposite.token}={city}")

        lines.append(" ".join(parts))
        lines.extend(reverse_lines)

    return lines

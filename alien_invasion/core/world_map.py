"""
World Map for the Alien Invasion Simulator.

Holds the directed city graph: every city has four fixed directional slots
(north, south, west, east), each either empty or naming a neighbor city.
Edges are directional and need not be symmetric.

Cities are stored in an arena keyed by name and neighbor slots hold names,
never object references. The only mutation after loading is destruction,
which is one-way. Destroyed cities stay in the arena but are invisible to
`lookup()` and neighbor queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Iterator, Optional

import numpy as np


class Direction(IntEnum):
    """Directional edge slot. Values index into `City.neighbors`."""
    NORTH = 0
    SOUTH = 1
    WEST = 2
    EAST = 3

    @property
    def token(self) -> str:
        """Map-file spelling of this direction."""
        return self.name.lower()

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @classmethod
    def from_token(cls, token: str) -> Direction:
        """
        Parse a map-file direction token.

        Raises:
            ValueError: If the token is not one of north/south/west/east.
        """
        for direction in cls:
            if direction.token == token:
                return direction
        raise ValueError(f"Invalid direction: '{token}'")


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.WEST: Direction.EAST,
    Direction.EAST: Direction.WEST,
}

N_DIRECTIONS = len(Direction)


@dataclass
class City:
    """
    A named node of the world map.

    Attributes:
        name: Unique city name.
        neighbors: Four slots indexed by Direction; None = no edge.
        destroyed: One-way destruction flag.
        declared: False while the city is only known as someone's neighbor.
    """
    name: str
    neighbors: list[Optional[str]] = field(default_factory=lambda: [None] * N_DIRECTIONS)
    destroyed: bool = False
    declared: bool = False

    def neighbor(self, direction: Direction) -> Optional[str]:
        """Name of the neighbor in a given direction, or None."""
        return self.neighbors[direction]

    def edges(self) -> list[tuple[Direction, str]]:
        """All (direction, neighbor name) pairs, in direction order."""
        return [
            (Direction(i), name)
            for i, name in enumerate(self.neighbors)
            if name is not None
        ]


class WorldMap:
    """
    The directed city graph.

    Attributes:
        cities: Dict of city name → City (destroyed ones included).
        city_names: Every registered name, in first-seen order.
    """

    def __init__(self):
        self.cities: dict[str, City] = {}
        self.city_names: list[str] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _register(self, name: str) -> City:
        city = self.cities.get(name)
        if city is None:
            city = City(name=name)
            self.cities[name] = city
            self.city_names.append(name)
        return city

    def add_city(
        self,
        name: str,
        edges: Iterable[tuple[Direction, str]] = (),
    ) -> bool:
        """
        Register a primary city declaration and its outgoing edges.

        Neighbors not yet known are registered as stubs. A stub declared
        later is promoted in place. A second primary declaration of the
        same name is rejected and leaves the map untouched.

        Args:
            name: Source city name.
            edges: (direction, neighbor name) pairs. A later pair for the
                same direction replaces an earlier one.

        Returns:
            True if the declaration was recorded, False if it was a duplicate.
        """
        existing = self.cities.get(name)
        if existing is not None and existing.declared:
            return False

        city = self._register(name)
        city.declared = True
        for direction, neighbor_name in edges:
            city.neighbors[direction] = neighbor_name
            self._register(neighbor_name)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> Optional[City]:
        """Get a city by name if it exists and is not destroyed, else None."""
        city = self.cities.get(name)
        if city is None or city.destroyed:
            return None
        return city

    def all_city_names(self) -> list[str]:
        """All names ever registered (destroyed ones included), first-seen order."""
        return list(self.city_names)

    def is_destroyed(self, name: str) -> bool:
        """True if the named city exists and has been destroyed."""
        city = self.cities.get(name)
        return city is not None and city.destroyed

    def reachable_neighbors(self, city: City) -> list[City]:
        """Non-destroyed neighbors of a city, in direction order."""
        reachable = []
        for neighbor_name in city.neighbors:
            if neighbor_name is None:
                continue
            neighbor = self.lookup(neighbor_name)
            if neighbor is not None:
                reachable.append(neighbor)
        return reachable

    def random_reachable_neighbor(
        self,
        city: City,
        rng: np.random.Generator,
    ) -> Optional[City]:
        """
        Pick one non-destroyed neighbor uniformly at random.

        Args:
            city: The city to move out of.
            rng: Random generator.

        Returns:
            The chosen neighbor City, or None if no neighbor is reachable.
        """
        candidates = self.reachable_neighbors(city)
        if not candidates:
            return None
        return candidates[int(rng.integers(0, len(candidates)))]

    def surviving_city_names(self) -> list[str]:
        return [n for n in self.city_names if not self.cities[n].destroyed]

    def destroyed_city_names(self) -> list[str]:
        return [n for n in self.city_names if self.cities[n].destroyed]

    # ------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------

    def destroy(self, name: str) -> None:
        """Mark a city destroyed. No-op for unknown names; idempotent."""
        city = self.cities.get(name)
        if city is not None:
            city.destroyed = True

    def is_fully_destroyed(self) -> bool:
        """True iff every registered city is destroyed (an empty map counts)."""
        return all(city.destroyed for city in self.cities.values())

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self.cities

    def __len__(self) -> int:
        return len(self.city_names)

    def __iter__(self) -> Iterator[City]:
        return (self.cities[n] for n in self.city_names)

    def __repr__(self) -> str:
        destroyed = len(self.destroyed_city_names())
        return f"WorldMap(cities={len(self)}, destroyed={destroyed})"

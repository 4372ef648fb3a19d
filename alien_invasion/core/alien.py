"""
Alien (Agent) for the Alien Invasion Simulator.

An alien occupies exactly one city at a time, referenced by name, and
counts how many times it has successfully moved. Stalled attempts
(no reachable neighbor) are not counted.
"""

from __future__ import annotations


class Alien:
    """
    A mobile invader.

    Attributes:
        id: Unique identifier, assigned by the engine, never reused.
        city: Name of the city the alien currently occupies.
        moves: Number of successful moves performed so far.
    """

    __slots__ = ("id", "city", "moves")

    def __init__(self, alien_id: int, city: str, moves: int = 0):
        self.id = alien_id
        self.city = city
        self.moves = moves

    def move_to(self, city: str) -> int:
        """
        Relocate to another city and count the move.

        Returns:
            The move counter after the increment.
        """
        self.city = city
        self.moves += 1
        return self.moves

    @property
    def label(self) -> str:
        return f"Alien#{self.id}"

    def to_dict(self) -> dict:
        """Serialize alien state for reporting."""
        return {"id": self.id, "city": self.city, "moves": self.moves}

    def __repr__(self) -> str:
        return f"Alien(id={self.id}, city='{self.city}', moves={self.moves})"

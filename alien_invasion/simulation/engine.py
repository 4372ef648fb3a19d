"""
Invasion Engine — Round loop for the Alien Invasion Simulator.

Owns the alien population and drives synchronous rounds over a shared
WorldMap. Each round is executed in two passes:
  1. every alien picks and performs its move against the map as it stood
     at the start of the round, arrivals are collected per city;
  2. cities with two or more arrivals are destroyed together with every
     alien that arrived there.

Only arriving aliens collide: an alien that could not move is never
destroyed by others landing on its city in the same round.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from alien_invasion.core.alien import Alien
from alien_invasion.core.world_map import WorldMap

logger = logging.getLogger(__name__)

MAX_MOVES_PER_ALIEN = 10_000


class InvalidPopulationError(ValueError):
    """Raised when an engine cannot distribute the requested population."""


# ---------------------------------------------------------------------------
# Round statistics — lightweight counters for one round
# ---------------------------------------------------------------------------

@dataclass
class RoundStats:
    """Statistics collected during a single round."""
    round_number: int = 0
    moved: int = 0
    immobile: int = 0
    perished: int = 0
    aliens_destroyed: int = 0
    cities_destroyed: list[str] = field(default_factory=list)
    stalled: bool = True
    alive_after: int = 0

    @property
    def collisions(self) -> int:
        return len(self.cities_destroyed)


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------

OUTCOME_ALL_DESTROYED = "all_aliens_destroyed"
OUTCOME_DEADLOCKED = "deadlocked"
OUTCOME_ROUND_LIMIT = "round_limit"


@dataclass
class RunResult:
    """Result of a complete invasion run."""
    seed: Optional[int]
    initial_alien_count: int = 0
    total_rounds: int = 0
    outcome: str = OUTCOME_DEADLOCKED
    final_alive_count: int = 0
    world_destroyed: bool = False
    surviving_cities: list[str] = field(default_factory=list)
    destroyed_cities: list[str] = field(default_factory=list)
    round_stats_history: list[RoundStats] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Invasion Engine
# ---------------------------------------------------------------------------

class InvasionEngine:
    """
    Core invasion engine.

    Attributes:
        world_map: The shared map. The engine only ever destroys cities.
        rng: Random generator used for distribution and movement.
        seed: Seed the generator was created from (None if unknown).
        max_moves: Move count at which an alien no longer counts as progress.
        round_stats: Statistics for the most recent round.
        on_round: Optional callback invoked after each round(round_number, engine).
    """

    def __init__(
        self,
        world_map: WorldMap,
        population: int,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        max_moves: int = MAX_MOVES_PER_ALIEN,
    ):
        """
        Create an engine and drop the aliens onto the map.

        Args:
            world_map: Map to invade.
            population: Number of aliens, must be > 0.
            rng: Random generator. None = np.random.default_rng(seed).
            seed: Seed for a new generator when rng is None.
            max_moves: Per-alien move threshold.

        Raises:
            InvalidPopulationError: If population <= 0, or the map has no cities.
        """
        if population <= 0:
            raise InvalidPopulationError(
                f"No aliens, no simulation (population={population})"
            )
        if len(world_map) == 0:
            raise InvalidPopulationError(
                f"Cannot drop {population} aliens onto a map with no cities"
            )

        self.world_map = world_map
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.max_moves = max_moves

        self._aliens: dict[int, Alien] = {}
        self._ids = itertools.count(1)
        self.initial_alien_count = population
        self.current_round = 0

        self.round_stats = RoundStats()
        self._history: list[RoundStats] = []

        self.on_round: Optional[Callable[[int, "InvasionEngine"], None]] = None

        self._distribute(population)

    # ------------------------------------------------------------------
    # Initial distribution
    # ------------------------------------------------------------------

    def _spawn(self, city: str) -> Alien:
        alien = Alien(next(self._ids), city)
        self._aliens[alien.id] = alien
        return alien

    def _distribute(self, population: int) -> None:
        """
        Spread the aliens over the map.

        Cities are visited once in shuffled order, each receiving
        max(1, population // n_cities) aliens while aliens remain. Any
        surplus is then placed one by one into uniformly chosen cities.
        """
        shuffled = [self.world_map.city_names[int(i)]
                    for i in self.rng.permutation(len(self.world_map))]
        per_city = max(1, population // len(shuffled))

        remaining = population
        for city in shuffled:
            if remaining <= 0:
                break
            for _ in range(min(per_city, remaining)):
                self._spawn(city)
            remaining -= per_city

        while remaining > 0:
            self._spawn(shuffled[int(self.rng.integers(0, len(shuffled)))])
            remaining -= 1

        logger.debug("Dropped %d aliens over %d cities", self.alive_count, len(shuffled))

    # ------------------------------------------------------------------
    # Core round
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """
        Execute one synchronous round.

        Processing order:
          1. Stop if no aliens remain
          2. Remove aliens whose city has fallen
          3. Move every other alien to a random reachable neighbor
          4. Destroy cities with 2+ arrivals, and the arriving aliens
          5. Fire callback

        Returns:
            False when no further progress is possible (all aliens gone,
            or every moving alien has reached the move threshold and the
            rest are trapped), True otherwise.
        """
        if not self._aliens:
            logger.info("All aliens were mutually destroyed!")
            return False

        world_map = self.world_map
        stats = RoundStats(round_number=self.current_round + 1)
        arrivals: dict[str, list[Alien]] = defaultdict(list)

        # --- Pass 1: moves ---
        for alien in list(self._aliens.values()):
            if alien.city not in world_map:
                logger.error(
                    "%s references unknown city '%s'; stopping simulation",
                    alien.label, alien.city,
                )
                return False

            city = world_map.lookup(alien.city)
            if city is None:
                del self._aliens[alien.id]
                stats.perished += 1
                continue

            target = world_map.random_reachable_neighbor(city, self.rng)
            if target is None:
                stats.immobile += 1
                continue

            if alien.move_to(target.name) < self.max_moves:
                stats.stalled = False
            stats.moved += 1
            arrivals[target.name].append(alien)

        # --- Pass 2: collisions ---
        for city_name, landed in arrivals.items():
            if len(landed) < 2:
                continue
            logger.info(
                "%s has been destroyed due to an alien conflict between %s",
                city_name, " and ".join(a.label for a in landed),
            )
            for alien in landed:
                del self._aliens[alien.id]
            world_map.destroy(city_name)
            stats.aliens_destroyed += len(landed)
            stats.cities_destroyed.append(city_name)

        if stats.stalled and self._aliens:
            logger.info("All remaining aliens are trapped! /%d", len(self._aliens))

        self.current_round += 1
        stats.alive_after = len(self._aliens)
        self.round_stats = stats
        self._history.append(stats)

        if self.on_round is not None:
            self.on_round(self.current_round, self)

        return not stats.stalled

    # ------------------------------------------------------------------
    # Driver loop
    # ------------------------------------------------------------------

    def run(self, max_rounds: Optional[int] = None) -> RunResult:
        """
        Step until the engine reports no further progress.

        Args:
            max_rounds: Optional cap on rounds executed by this call.

        Returns:
            RunResult with summary statistics.
        """
        outcome = OUTCOME_DEADLOCKED
        rounds_run = 0
        while True:
            if max_rounds is not None and rounds_run >= max_rounds:
                outcome = OUTCOME_ROUND_LIMIT
                break
            if not self.step():
                break
            rounds_run += 1

        if not self._aliens:
            outcome = OUTCOME_ALL_DESTROYED

        return RunResult(
            seed=self.seed,
            initial_alien_count=self.initial_alien_count,
            total_rounds=self.current_round,
            outcome=outcome,
            final_alive_count=self.alive_count,
            world_destroyed=self.world_map.is_fully_destroyed(),
            surviving_cities=self.world_map.surviving_city_names(),
            destroyed_cities=self.world_map.destroyed_city_names(),
            round_stats_history=list(self._history),
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def aliens(self) -> dict[int, Alien]:
        """Snapshot of the live population, alien id → Alien."""
        return dict(self._aliens)

    @property
    def alive_count(self) -> int:
        return len(self._aliens)

    @property
    def is_extinct(self) -> bool:
        return not self._aliens

    @property
    def history(self) -> list[RoundStats]:
        return list(self._history)

    def __repr__(self) -> str:
        return (
            f"InvasionEngine(round={self.current_round}, "
            f"alive={self.alive_count}, "
            f"cities={len(self.world_map)}, "
            f"destroyed={len(self.world_map.destroyed_city_names())})"
        )

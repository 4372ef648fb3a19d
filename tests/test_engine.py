"""
Unit tests for the Invasion Engine (round loop).

Tests cover:
- Construction errors (no aliens, no cities)
- Initial distribution (exact population, per-city spread, ids)
- Single round mechanics:
  - Collision destroys city and every arriving alien
  - Aliens in a fallen city perish next round
  - Resident immobile aliens are not part of a collision
- Termination:
  - All aliens destroyed
  - Stall because no neighbor is reachable
  - Stall because the move threshold is reached
- Driver loop results and outcomes
- Monotonic destruction and bounded termination on random maps
- Statistical scenarios (two-city and star maps)
- Deterministic replay (same seed → same result)
- Logging and callbacks
"""

import logging

import numpy as np
import pytest

from alien_invasion.core.map_generator import generate_map_lines
from alien_invasion.core.map_io import parse_map
from alien_invasion.simulation.engine import (
    MAX_MOVES_PER_ALIEN,
    OUTCOME_ALL_DESTROYED,
    OUTCOME_DEADLOCKED,
    OUTCOME_ROUND_LIMIT,
    InvalidPopulationError,
    InvasionEngine,
    RoundStats,
)
from alien_invasion.core.world_map import WorldMap


ENGINE_LOGGER = "alien_invasion.simulation.engine"

TWO_CITIES = ["Foo north=Bar", "Bar south=Foo"]
STAR = ["Foo north=Bar west=Jamaica south=Peru"]
FUNNEL = ["Left north=Hub", "Right north=Hub"]  # Hub is a dead end


def make_map(lines: list[str]) -> WorldMap:
    return parse_map(lines)


def city_counts(engine: InvasionEngine) -> dict[str, int]:
    counts: dict[str, int] = {}
    for alien in engine.aliens.values():
        counts[alien.city] = counts.get(alien.city, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestEngineInit:
    def test_zero_population_rejected(self):
        with pytest.raises(InvalidPopulationError):
            InvasionEngine(make_map(TWO_CITIES), 0, seed=1)

    def test_negative_population_rejected(self):
        with pytest.raises(InvalidPopulationError):
            InvasionEngine(make_map(TWO_CITIES), -3, seed=1)

    def test_empty_map_rejected(self):
        with pytest.raises(InvalidPopulationError):
            InvasionEngine(WorldMap(), 5, seed=1)

    def test_invalid_population_is_value_error(self):
        assert issubclass(InvalidPopulationError, ValueError)

    def test_rejection_leaves_map_untouched(self):
        wm = make_map(TWO_CITIES)
        with pytest.raises(InvalidPopulationError):
            InvasionEngine(wm, 0)
        assert wm.destroyed_city_names() == []

    def test_starts_at_round_zero(self):
        engine = InvasionEngine(make_map(TWO_CITIES), 2, seed=1)
        assert engine.current_round == 0
        assert engine.is_extinct is False
        assert "InvasionEngine" in repr(engine)

    def test_accepts_external_rng(self):
        rng = np.random.default_rng(5)
        engine = InvasionEngine(make_map(TWO_CITIES), 2, rng=rng)
        assert engine.rng is rng


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------

class TestDistribution:
    @pytest.mark.parametrize("population", [1, 2, 3, 4, 5, 7, 8, 9, 13, 100])
    def test_exact_population_small_map(self, population):
        engine = InvasionEngine(make_map(STAR), population, seed=population)
        assert engine.alive_count == population

    @pytest.mark.parametrize("population", [1, 17, 40, 41, 999])
    def test_exact_population_generated_map(self, population):
        wm = parse_map(generate_map_lines(40, np.random.default_rng(0)))
        engine = InvasionEngine(wm, population, seed=7)
        assert engine.alive_count == population

    def test_one_per_city_when_fewer_aliens_than_cities(self):
        engine = InvasionEngine(make_map(STAR), 3, seed=2)
        counts = city_counts(engine)
        assert len(counts) == 3
        assert set(counts.values()) == {1}

    def test_even_split(self):
        engine = InvasionEngine(make_map(STAR), 8, seed=3)
        assert city_counts(engine) == {"Foo": 2, "Bar": 2, "Jamaica": 2, "Peru": 2}

    def test_surplus_on_top_of_even_split(self):
        engine = InvasionEngine(make_map(STAR), 11, seed=4)
        counts = city_counts(engine)
        assert len(counts) == 4
        assert min(counts.values()) >= 2
        assert sum(counts.values()) == 11

    def test_ids_unique_and_increasing(self):
        engine = InvasionEngine(make_map(STAR), 10, seed=5)
        assert sorted(engine.aliens) == list(range(1, 11))

    def test_move_counters_start_at_zero(self):
        engine = InvasionEngine(make_map(STAR), 10, seed=5)
        assert all(a.moves == 0 for a in engine.aliens.values())

    def test_shuffle_varies_with_seed(self):
        placements = set()
        for seed in range(60):
            engine = InvasionEngine(make_map(STAR), 1, seed=seed)
            placements.add(next(iter(engine.aliens.values())).city)
        assert placements == {"Foo", "Bar", "Jamaica", "Peru"}


# ---------------------------------------------------------------------------
# Single round mechanics
# ---------------------------------------------------------------------------

class TestCollision:
    def test_head_on_swap_destroys_both_cities(self):
        wm = make_map(TWO_CITIES)
        engine = InvasionEngine(wm, 4, seed=0)
        assert engine.step() is True
        assert engine.alive_count == 0
        assert wm.is_fully_destroyed()
        stats = engine.round_stats
        assert stats.moved == 4
        assert stats.aliens_destroyed == 4
        assert sorted(stats.cities_destroyed) == ["Bar", "Foo"]
        assert stats.collisions == 2

    def test_single_arrivals_do_not_collide(self):
        wm = make_map(TWO_CITIES)
        engine = InvasionEngine(wm, 2, seed=0)
        assert engine.step() is True
        assert engine.alive_count == 2
        assert wm.destroyed_city_names() == []
        assert all(a.moves == 1 for a in engine.aliens.values())

    def test_resident_immobile_alien_survives_collision(self):
        wm = make_map(FUNNEL)
        engine = InvasionEngine(wm, 3, seed=0)
        hub_alien = next(a for a in engine.aliens.values() if a.city == "Hub")

        assert engine.step() is True
        assert wm.destroyed_city_names() == ["Hub"]
        assert list(engine.aliens) == [hub_alien.id]
        assert engine.round_stats.immobile == 1
        assert engine.round_stats.aliens_destroyed == 2

    def test_alien_in_fallen_city_perishes_next_round(self):
        wm = make_map(FUNNEL)
        engine = InvasionEngine(wm, 3, seed=0)
        engine.step()

        assert engine.step() is False
        assert engine.alive_count == 0
        stats = engine.round_stats
        assert stats.perished == 1
        assert stats.moved == 0
        assert stats.aliens_destroyed == 0
        assert wm.surviving_city_names() == ["Left", "Right"]

    def test_destroyed_city_is_not_a_target(self):
        wm = make_map(["A east=B west=C", "B west=A", "C east=A"])
        wm.destroy("B")
        engine = InvasionEngine(wm, 1, rng=np.random.default_rng(0))
        alien = next(iter(engine.aliens.values()))
        alien.city = "A"
        for _ in range(20):
            engine.step()
            assert alien.city in ("A", "C")


# ---------------------------------------------------------------------------
# Termination
# ---------------------------------------------------------------------------

class TestTermination:
    def test_empty_population_is_terminal(self):
        engine = InvasionEngine(make_map(TWO_CITIES), 4, seed=0)
        engine.step()
        rounds = engine.current_round
        assert engine.step() is False
        assert engine.current_round == rounds

    def test_stall_no_reachable_neighbor(self):
        engine = InvasionEngine(make_map(["Foo"]), 3, seed=0)
        assert engine.step() is False
        assert engine.alive_count == 3
        assert engine.round_stats.immobile == 3
        assert engine.round_stats.stalled is True

    def test_stall_move_threshold(self):
        engine = InvasionEngine(make_map(TWO_CITIES), 2, seed=0, max_moves=5)
        results = [engine.step() for _ in range(5)]
        assert results == [True, True, True, True, False]
        assert engine.alive_count == 2
        assert all(a.moves == 5 for a in engine.aliens.values())

    def test_both_stall_causes_end_the_same_way(self):
        trapped = InvasionEngine(make_map(["Foo"]), 2, seed=0).run()
        exhausted = InvasionEngine(make_map(TWO_CITIES), 2, seed=0, max_moves=3).run()
        for result in (trapped, exhausted):
            assert result.outcome == OUTCOME_DEADLOCKED
            assert result.final_alive_count == 2
            assert result.world_destroyed is False

    def test_default_threshold(self):
        assert MAX_MOVES_PER_ALIEN == 10_000
        engine = InvasionEngine(make_map(TWO_CITIES), 2, seed=0)
        assert engine.max_moves == 10_000

    def test_trapped_message_logged(self, caplog):
        engine = InvasionEngine(make_map(["Foo"]), 2, seed=0)
        with caplog.at_level(logging.INFO, logger=ENGINE_LOGGER):
            engine.step()
        assert "All remaining aliens are trapped! /2" in caplog.text


# ---------------------------------------------------------------------------
# Driver loop
# ---------------------------------------------------------------------------

class TestRun:
    def test_run_all_destroyed(self):
        wm = make_map(TWO_CITIES)
        result = InvasionEngine(wm, 4, seed=0).run()
        assert result.outcome == OUTCOME_ALL_DESTROYED
        assert result.total_rounds == 1
        assert result.world_destroyed is True
        assert result.surviving_cities == []
        assert sorted(result.destroyed_cities) == ["Bar", "Foo"]
        assert result.initial_alien_count == 4

    def test_run_round_limit(self):
        result = InvasionEngine(make_map(TWO_CITIES), 2, seed=0).run(max_rounds=3)
        assert result.outcome == OUTCOME_ROUND_LIMIT
        assert result.total_rounds == 3
        assert len(result.round_stats_history) == 3

    def test_history_records_every_round(self):
        engine = InvasionEngine(make_map(FUNNEL), 3, seed=0)
        result = engine.run()
        assert [s.round_number for s in result.round_stats_history] == [1, 2]
        assert [s.alive_after for s in result.round_stats_history] == [1, 0]
        assert result.outcome == OUTCOME_ALL_DESTROYED
        assert result.world_destroyed is False

    def test_seed_recorded(self):
        result = InvasionEngine(make_map(TWO_CITIES), 4, seed=99).run()
        assert result.seed == 99


class TestInvariants:
    @pytest.mark.parametrize("seed", range(5))
    def test_destruction_is_monotonic(self, seed):
        wm = parse_map(generate_map_lines(60, np.random.default_rng(seed)))
        engine = InvasionEngine(wm, 80, seed=seed, max_moves=200)
        destroyed: set[str] = set()
        while engine.step():
            now = set(wm.destroyed_city_names())
            assert destroyed <= now
            destroyed = now
        assert destroyed <= set(wm.destroyed_city_names())

    @pytest.mark.parametrize("seed", range(5))
    def test_terminates_within_bound(self, seed):
        wm = parse_map(generate_map_lines(30, np.random.default_rng(seed)))
        population, max_moves = 12, 50
        engine = InvasionEngine(wm, population, seed=seed, max_moves=max_moves)
        result = engine.run()
        assert result.total_rounds <= max_moves * population + 1

    def test_move_counter_counts_only_successful_moves(self):
        engine = InvasionEngine(make_map(FUNNEL), 3, seed=0)
        hub_alien = next(a for a in engine.aliens.values() if a.city == "Hub")
        engine.step()
        assert hub_alien.moves == 0


class TestScenarios:
    @pytest.mark.parametrize("seed", range(25))
    def test_two_cities_four_aliens_world_destroyed(self, seed):
        wm = make_map(TWO_CITIES)
        assert wm.is_fully_destroyed() is False
        engine = InvasionEngine(wm, 4, seed=seed)
        while engine.step():
            pass
        assert wm.is_fully_destroyed() is True

    def test_star_two_aliens_world_resists(self):
        survived = 0
        for seed in range(50):
            wm = make_map(STAR)
            engine = InvasionEngine(wm, 2, seed=seed)
            while engine.step():
                pass
            if not wm.is_fully_destroyed():
                survived += 1
        assert survived >= 45


class TestDeterminism:
    def test_same_seed_same_result(self):
        lines = generate_map_lines(50, np.random.default_rng(1))
        a = InvasionEngine(parse_map(lines), 30, seed=17, max_moves=300).run()
        b = InvasionEngine(parse_map(lines), 30, seed=17, max_moves=300).run()
        assert a.round_stats_history == b.round_stats_history
        assert a.destroyed_cities == b.destroyed_cities

    def test_round_stats_defaults(self):
        stats = RoundStats()
        assert stats.collisions == 0
        assert stats.stalled is True


# ---------------------------------------------------------------------------
# Logging, callbacks, faults
# ---------------------------------------------------------------------------

class TestReporting:
    def test_collision_logged(self, caplog):
        engine = InvasionEngine(make_map(TWO_CITIES), 4, seed=0)
        with caplog.at_level(logging.INFO, logger=ENGINE_LOGGER):
            engine.step()
            engine.step()
        assert "Foo has been destroyed due to an alien conflict between Alien#" in caplog.text
        assert "Bar has been destroyed due to an alien conflict between Alien#" in caplog.text
        assert "All aliens were mutually destroyed!" in caplog.text

    def test_on_round_callback(self):
        engine = InvasionEngine(make_map(TWO_CITIES), 2, seed=0)
        seen = []
        engine.on_round = lambda n, eng: seen.append((n, eng.alive_count))
        engine.run(max_rounds=3)
        assert seen == [(1, 2), (2, 2), (3, 2)]

    def test_unknown_city_stops_simulation(self, caplog):
        engine = InvasionEngine(make_map(TWO_CITIES), 2, seed=0)
        next(iter(engine.aliens.values())).city = "Atlantis"
        with caplog.at_level(logging.ERROR, logger=ENGINE_LOGGER):
            assert engine.step() is False
        assert "unknown city 'Atlantis'" in caplog.text

    def test_aliens_snapshot_is_a_copy(self):
        engine = InvasionEngine(make_map(TWO_CITIES), 2, seed=0)
        snapshot = engine.aliens
        snapshot.clear()
        assert engine.alive_count == 2

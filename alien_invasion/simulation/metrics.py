"""
KPI metrics for the Alien Invasion Simulator.

Turns the per-round statistics of a run into a pandas DataFrame (one row
per round) and condenses a RunResult into a flat KPI dict for the CLI
and the UI.
"""

from __future__ import annotations

import pandas as pd

from alien_invasion.simulation.engine import RoundStats, RunResult


ROUND_COLUMNS = [
    "round",
    "moved",
    "immobile",
    "perished",
    "aliens_destroyed",
    "cities_destroyed",
    "alive_after",
    "stalled",
]


def rounds_to_frame(history: list[RoundStats]) -> pd.DataFrame:
    """
    One row per round, plus a running total of destroyed cities.

    Args:
        history: RoundStats in execution order.

    Returns:
        DataFrame with ROUND_COLUMNS and `cities_destroyed_total`.
    """
    rows = [
        {
            "round": s.round_number,
            "moved": s.moved,
            "immobile": s.immobile,
            "perished": s.perished,
            "aliens_destroyed": s.aliens_destroyed,
            "cities_destroyed": s.collisions,
            "alive_after": s.alive_after,
            "stalled": s.stalled,
        }
        for s in history
    ]
    df = pd.DataFrame(rows, columns=ROUND_COLUMNS)
    df["cities_destroyed_total"] = df["cities_destroyed"].cumsum()
    return df


def summarize(result: RunResult) -> dict:
    """
    Flat KPI dict for a finished run.

    Keys: rounds, outcome, initial_aliens, final_alive, aliens_destroyed,
    aliens_perished, total_cities, surviving_cities, destroyed_cities,
    survival_rate, world_destroyed, seed.
    """
    total_cities = len(result.surviving_cities) + len(result.destroyed_cities)
    survival_rate = (
        len(result.surviving_cities) / total_cities if total_cities > 0 else 0.0
    )
    return {
        "rounds": result.total_rounds,
        "outcome": result.outcome,
        "initial_aliens": result.initial_alien_count,
        "final_alive": result.final_alive_count,
        "aliens_destroyed": sum(s.aliens_destroyed for s in result.round_stats_history),
        "aliens_perished": sum(s.perished for s in result.round_stats_history),
        "total_cities": total_cities,
        "surviving_cities": len(result.surviving_cities),
        "destroyed_cities": len(result.destroyed_cities),
        "survival_rate": survival_rate,
        "world_destroyed": result.world_destroyed,
        "seed": result.seed,
    }

"""
Reusable chart components for the Alien Invasion UI.

Provides helper functions that return Plotly figures for:
  - Alien population over rounds
  - Cumulative city destruction over rounds
"""

import plotly.graph_objects as go
import pandas as pd


def population_over_rounds(
    df: pd.DataFrame,
    title: str = "Aliens Over Rounds",
) -> go.Figure:
    """
    Line chart of alive / moved / immobile aliens per round.

    Args:
        df: DataFrame from `rounds_to_frame()`.
        title: Chart title.

    Returns:
        Plotly figure.
    """
    fig = go.Figure()

    pop_cols = {
        "alive_after": ("Alive", "#2ecc71"),
        "moved": ("Moved", "#3498db"),
        "immobile": ("Trapped", "#95a5a6"),
    }

    x = df.index if "round" not in df.columns else df["round"]

    for col, (label, color) in pop_cols.items():
        if col in df.columns:
            fig.add_trace(go.Scatter(
                x=x,
                y=df[col],
                mode="lines",
                name=label,
                line=dict(color=color, width=2),
            ))

    fig.update_layout(
        title=title,
        xaxis_title="Round",
        yaxis_title="Aliens",
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def destruction_over_rounds(
    df: pd.DataFrame,
    total_cities: int,
    title: str = "Cities Destroyed",
) -> go.Figure:
    """
    Step chart of cumulative destroyed cities, with the map size as a ceiling line.

    Args:
        df: DataFrame from `rounds_to_frame()`.
        total_cities: Number of cities on the map.
        title: Chart title.

    Returns:
        Plotly figure.
    """
    fig = go.Figure()

    x = df.index if "round" not in df.columns else df["round"]

    if "cities_destroyed_total" in df.columns:
        fig.add_trace(go.Scatter(
            x=x,
            y=df["cities_destroyed_total"],
            mode="lines",
            line_shape="hv",
            name="Destroyed",
            line=dict(color="#e74c3c", width=2),
        ))

    fig.add_hline(
        y=total_cities,
        line_dash="dash",
        line_color="#7f8c8d",
        annotation_text="All cities",
    )

    fig.update_layout(
        title=title,
        xaxis_title="Round",
        yaxis_title="Cities",
        template="plotly_white",
    )
    return fig

"""
Alien Invasion Simulator — Streamlit Web UI

Single page:
  - pick a map (upload a map file, or generate a random one)
  - choose the number of aliens and a seed
  - run the invasion and inspect per-round KPIs and the surviving map
"""

import io
import warnings

import numpy as np
import streamlit as st

from alien_invasion.core.config import get_default_config
from alien_invasion.core.map_generator import MapGenerationError, generate_map_lines
from alien_invasion.core.map_io import MapFormatWarning, format_map, parse_map
from alien_invasion.simulation.engine import InvasionEngine, InvalidPopulationError
from alien_invasion.simulation.metrics import rounds_to_frame, summarize
from alien_invasion.ui.components.charts import destruction_over_rounds, population_over_rounds

# Must be the very first Streamlit command
st.set_page_config(
    page_title="Alien Invasion Simulator",
    page_icon="👽",
    layout="wide",
)


def _init_session_state() -> None:
    defaults = {
        "map_text": "",
        "run_summary": None,
        "run_frame": None,
        "run_survivors": [],
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def _render_map_source(config) -> None:
    """Sidebar controls that fill `st.session_state.map_text`."""
    st.sidebar.subheader("🗺️ Map")
    source = st.sidebar.radio("Source", options=["Upload", "Generate"], index=1)

    if source == "Upload":
        uploaded = st.sidebar.file_uploader("Map file", type=["txt", "map"])
        if uploaded is not None:
            st.session_state.map_text = uploaded.getvalue().decode("utf-8")
        return

    city_count = st.sidebar.number_input(
        "Cities (approx.)", min_value=1, max_value=5000,
        value=config.mapgen.city_count, step=5,
    )
    map_seed = st.sidebar.number_input("Map seed", min_value=0, value=0, step=1)
    if st.sidebar.button("🎲 Generate map"):
        try:
            lines = generate_map_lines(
                int(city_count),
                np.random.default_rng(int(map_seed)),
                min_name_length=config.mapgen.min_name_length,
                max_name_length=config.mapgen.max_name_length,
                max_name_attempts=config.mapgen.max_name_attempts,
            )
        except MapGenerationError as e:
            st.sidebar.error(str(e))
            return
        st.session_state.map_text = "\n".join(lines)


def _run(map_text: str, alien_count: int, seed: int) -> None:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", MapFormatWarning)
        world_map = parse_map(io.StringIO(map_text))
    for w in caught:
        st.warning(str(w.message))

    try:
        engine = InvasionEngine(world_map, alien_count, seed=seed)
    except InvalidPopulationError as e:
        st.error(str(e))
        return

    result = engine.run()
    st.session_state.run_summary = summarize(result)
    st.session_state.run_frame = rounds_to_frame(result.round_stats_history)
    st.session_state.run_survivors = format_map(world_map)


def _display_results() -> None:
    summary = st.session_state.run_summary
    df = st.session_state.run_frame

    st.markdown("---")
    st.subheader("📋 Run Summary")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Rounds", summary["rounds"])
    col2.metric("Aliens left", f"{summary['final_alive']}/{summary['initial_aliens']}")
    col3.metric("Cities left", f"{summary['surviving_cities']}/{summary['total_cities']}")
    col4.metric("Outcome", summary["outcome"].replace("_", " "))

    if summary["world_destroyed"]:
        st.error("💀 The world was totally destroyed by the aliens.")
    else:
        st.success("🎉 Some cities survived the alien attack!")

    if df is not None and not df.empty:
        tab_aliens, tab_cities, tab_raw = st.tabs(["Aliens", "Cities", "Raw Data"])
        with tab_aliens:
            st.plotly_chart(population_over_rounds(df), use_container_width=True)
        with tab_cities:
            st.plotly_chart(
                destruction_over_rounds(df, summary["total_cities"]),
                use_container_width=True,
            )
        with tab_raw:
            st.dataframe(df, use_container_width=True)

    with st.expander("🗺️ Surviving map"):
        st.code("\n".join(st.session_state.run_survivors) or "(nothing left)")


def main() -> None:
    """Main entry point for the Streamlit app."""
    _init_session_state()
    config = get_default_config()

    st.sidebar.title("👽 Alien Invasion")
    st.sidebar.markdown("---")
    _render_map_source(config)

    st.title("👽 Alien Invasion Simulator")
    st.session_state.map_text = st.text_area(
        "Map", value=st.session_state.map_text, height=200,
        help="One city per line: Name north=A south=B west=C east=D",
    )

    col1, col2 = st.columns(2)
    with col1:
        alien_count = st.number_input(
            "Aliens", min_value=1, max_value=1_000_000,
            value=config.population.alien_count, step=1,
        )
    with col2:
        seed = st.number_input("Seed", min_value=0, value=42, step=1)

    if st.button("🚀 Invade", disabled=not st.session_state.map_text.strip()):
        _run(st.session_state.map_text, int(alien_count), int(seed))

    if st.session_state.run_summary is not None:
        _display_results()


if __name__ == "__main__":
    main()

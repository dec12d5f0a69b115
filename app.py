import atexit
import logging
from datetime import timedelta

import streamlit as st

from greenhouse.charts import METRICS, build_metric_chart, to_frame
from greenhouse.config import Settings, load_settings
from greenhouse.feed import FirebaseFeed
from greenhouse.store import SensorStore
from greenhouse.windows import WINDOWS, TimeWindow


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _window_label(window: TimeWindow) -> str:
    return WINDOWS[window].title


def _start_feed(settings: Settings, store: SensorStore) -> FirebaseFeed:
    feed = FirebaseFeed(
        url=settings.feed_url,
        path=settings.feed_path,
        auth=settings.feed_auth,
        poll_interval_secs=settings.poll_interval_secs,
        timeout_secs=settings.request_timeout_secs,
        user_agent=settings.user_agent,
    )
    feed.start(store.replace_snapshot)
    # Unsubscribe when the server process shuts down
    atexit.register(feed.stop)
    return feed


@st.cache_resource(show_spinner=False)
def _live_store(_settings: Settings) -> SensorStore:
    """One store per server process, fed by a background poller."""
    store = SensorStore(window=_settings.default_window, tz=_settings.tz)
    _start_feed(_settings, store)
    return store


def _render_charts(store: SensorStore, window: TimeWindow, settings: Settings) -> None:
    view = store.view(window)
    if view.empty:
        st.info("No data for the selected window.")
        return

    frame = to_frame(view.readings, settings.tz)
    st.caption(f"{len(frame)} buckets, {_window_label(window)}")
    for metric, style in METRICS.items():
        st.subheader(style.title)
        fig = build_metric_chart(frame, metric, window, settings.tz)
        st.plotly_chart(
            fig,
            use_container_width=True,
            config={"scrollZoom": False, "displaylogo": False},
        )


def main() -> None:
    st.set_page_config(page_title="Greenhouse Dashboard", layout="wide")
    try:
        settings = load_settings()
    except Exception as exc:  # surface helpful errors (e.g., FEED_URL missing)
        st.error(str(exc))
        return
    _setup_logging(settings.log_level)

    st.title("AgRo Greenhouse")

    store = _live_store(settings)

    options = list(TimeWindow)
    window = st.selectbox(
        "Time range",
        options=options,
        index=options.index(settings.default_window),
        format_func=_window_label,
    )

    # The store is shared by every session; the window is passed per render
    @st.fragment(run_every=timedelta(seconds=settings.poll_interval_secs))
    def _live_charts() -> None:
        _render_charts(store, window, settings)

    _live_charts()


if __name__ == "__main__":
    main()

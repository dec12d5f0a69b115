from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import datetime, tzinfo
from typing import Final

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from .labels import format_label, format_tooltip
from .models import METRIC_FIELDS, Reading
from .windows import TimeWindow

COLUMNS: Final[list[str]] = ["time", *METRIC_FIELDS]


@dataclass(frozen=True)
class MetricStyle:
    title: str
    unit: str
    color: str


METRICS: Final[dict[str, MetricStyle]] = {
    "humidity": MetricStyle("Humidity", "%", "#8884d8"),
    "light": MetricStyle("Light", "lux", "#82ca9d"),
    "temperature": MetricStyle("Temperature", "°C", "#ff7300"),
}


def to_frame(readings: Sequence[Reading], tz: tzinfo | None = None) -> pd.DataFrame:
    """Readings as a DataFrame with columns time, humidity, light, temperature, dt.

    ``dt`` is the timezone-aware datetime of ``time`` (host local time when tz is None).
    """
    if not readings:
        return pd.DataFrame(columns=[*COLUMNS, "dt"]).astype({"time": "int64"})

    df = pd.DataFrame([asdict(r) for r in readings], columns=COLUMNS)
    df[list(METRIC_FIELDS)] = df[list(METRIC_FIELDS)].astype(float)
    if tz is not None:
        ts = pd.to_datetime(df["time"], unit="ms", utc=True)
        df["dt"] = ts.dt.tz_convert(tz)
    else:
        # Host offset can differ per timestamp across DST changes
        df["dt"] = [datetime.fromtimestamp(t / 1000).astimezone() for t in df["time"]]
    return df


def tick_values(frame: pd.DataFrame, max_ticks: int = 8) -> list[int]:
    """Evenly spaced subset of the frame's bucket times for axis ticks."""
    if frame is None or frame.empty or max_ticks <= 0:
        return []
    times = frame["time"].to_numpy(dtype="int64")
    if len(times) <= max_ticks:
        return [int(t) for t in times]
    idx = np.linspace(0, len(times) - 1, num=max_ticks).round().astype(int)
    return [int(times[i]) for i in sorted(set(idx.tolist()))]


def build_metric_chart(
    frame: pd.DataFrame,
    metric: str,
    window: TimeWindow | str,
    tz: tzinfo | None = None,
) -> go.Figure:
    style = METRICS[metric]
    fig = go.Figure()

    if frame is not None and not frame.empty:
        hover = [format_tooltip(int(t), tz) for t in frame["time"]]
        fig.add_trace(
            go.Scatter(
                x=frame["time"],
                y=frame[metric],
                mode="lines",
                name=f"{style.title} ({style.unit})",
                line=dict(color=style.color, shape="spline"),
                hovertext=hover,
                hovertemplate="%{hovertext}<br>%{y}<extra></extra>",
            )
        )

    ticks = tick_values(frame)
    fig.update_layout(
        xaxis=dict(
            title="Time",
            tickmode="array",
            tickvals=ticks,
            ticktext=[format_label(t, window, tz) for t in ticks],
            tickfont=dict(size=10),
            showgrid=True,
            griddash="dash",
            fixedrange=True,
        ),
        yaxis=dict(title=f"{style.title} ({style.unit})", showgrid=True, griddash="dash", fixedrange=True),
        showlegend=False,
        margin=dict(l=40, r=40, t=30, b=60),
        height=300,
    )
    return fig

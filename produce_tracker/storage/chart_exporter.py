# produce_tracker/storage/chart_exporter.py

"""Generate interactive Plotly HTML charts from produce price history."""

import importlib
import logging
import webbrowser
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

from produce_tracker.config.settings import Settings
from produce_tracker.filters.classifiers import display_name, slugify
from produce_tracker.models.analytics_row import PriceHistory, PricePoint

logger = logging.getLogger("produce_tracker.chart")

_CHARTS_DIR: Path = Settings.CHARTS_DIR


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily."""
    return importlib.import_module("plotly.graph_objects")


def _ensure_charts_dir() -> Path:
    """Create charts directory if it doesn't exist."""
    _CHARTS_DIR.mkdir(parents=True, exist_ok=True)
    return _CHARTS_DIR


def _trace(go: ModuleType, points: list[PricePoint], label: str) -> Any:
    return go.Scatter(
        x=[p.date for p in points],
        y=[p.price for p in points],
        mode="lines+markers",
        name=label[:50],
        hovertemplate=(
            "%{x}<br>"
            "Price: $%{y:.2f}"
            "<extra></extra>"
        ),
    )


def _write(fig: Any, stem: str, open_browser: bool) -> Path:
    charts_dir = _ensure_charts_dir()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = charts_dir / f"{stem}_{stamp}.html"
    fig.write_html(str(filepath))
    logger.info("Chart saved to %s", filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())

    return filepath


def export_price_chart(
    name: str,
    history: PriceHistory,
    open_browser: bool = True,
) -> Path | None:
    """Export one variant's price chart as HTML."""
    points = history.for_name(name)
    if len(points) < 2:
        logger.warning("Not enough data points for chart: %s", name)
        return None

    go = _get_plotly_go()
    label = display_name(name)
    fig: Any = go.Figure()
    fig.add_trace(_trace(go, points, label))

    prices = [p.price for p in points]
    low = min(prices)
    high = max(prices)
    fig.add_annotation(
        x=points[prices.index(low)].date, y=low,
        text=f"Low: ${low:.2f}",
        showarrow=True, arrowhead=2,
    )
    fig.add_annotation(
        x=points[prices.index(high)].date, y=high,
        text=f"High: ${high:.2f}",
        showarrow=True, arrowhead=2,
    )

    fig.update_layout(
        title=f"Price History: {label[:60]}",
        xaxis_title="Date",
        yaxis_title="Price ($)",
        hovermode="x unified",
        template="plotly_white",
    )
    return _write(fig, slugify(name)[:30] or "item", open_browser)


def export_comparison_chart(
    names: list[str],
    history: PriceHistory,
    open_browser: bool = True,
) -> Path | None:
    """Export an overlay chart comparing several variants."""
    go = _get_plotly_go()
    fig: Any = go.Figure()
    for name in names:
        points = history.for_name(name)
        if len(points) < 2:
            continue
        fig.add_trace(_trace(go, points, name))

    if not fig.data:
        logger.warning("No trend data for comparison chart")
        return None

    fig.update_layout(
        title="Produce Price Comparison",
        xaxis_title="Date",
        yaxis_title="Price ($)",
        hovermode="x unified",
        template="plotly_white",
        legend={"orientation": "h", "y": -0.15},
    )
    return _write(fig, "comparison", open_browser)

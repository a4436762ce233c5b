"""
Plotly figure builder for dashboard charts.

Responsibilities:
- Creating traces for bar, line, area and pie charts from chart rows
- Applying layout and colour scheme
- Rendering the styled empty state

This module encapsulates all Plotly-specific figure construction logic,
allowing ChartService to focus on orchestration.
"""

import logging
from itertools import cycle
from typing import Any, Dict, List

import plotly.graph_objects as go

logger = logging.getLogger(__name__)

NAME_KEY = "name"
VALUE_KEY = "value"


def series_keys(rows: List[Dict[str, Any]]) -> List[str]:
    """Series names: every key of the first row except the label."""
    if not rows:
        return []
    return [key for key in rows[0] if key != NAME_KEY]


class ChartFigureBuilder:
    """
    Builder for Plotly figures from stored chart documents.

    Usage:
        builder = ChartFigureBuilder()
        fig = builder.create_figure()
        builder.add_traces(fig, "bar", rows, palette)
        builder.apply_layout(fig, "Visits per month")
    """

    def create_figure(self) -> go.Figure:
        """Create a new empty Plotly figure."""
        return go.Figure()

    def add_traces(self, fig: go.Figure, chart_type: str, rows: List[Dict[str, Any]], palette: List[str]) -> None:
        """
        Add one trace per series, or a single pie trace.

        Pie charts read `name`/`value`; the other types plot every
        non-`name` key of the first row against the row names.
        """
        labels = [row.get(NAME_KEY, "") for row in rows]

        if chart_type == "pie":
            fig.add_trace(go.Pie(
                labels=labels,
                values=[row.get(VALUE_KEY, 0) for row in rows],
                marker=dict(colors=list(palette)),
                hole=0.35,
                sort=False,
                hovertemplate="<b>%{label}</b><br>%{value} (%{percent})<extra></extra>",
            ))
            return

        colors = cycle(palette)
        for key in series_keys(rows):
            color = next(colors)
            values = [row.get(key) for row in rows]
            if chart_type == "bar":
                trace = go.Bar(x=labels, y=values, name=key, marker=dict(color=color))
            else:
                trace = go.Scatter(
                    x=labels,
                    y=values,
                    name=key,
                    mode="lines+markers",
                    line=dict(width=2.5, color=color, shape="spline"),
                    marker=dict(size=7, color=color, line=dict(width=1, color="white")),
                    fill="tozeroy" if chart_type == "area" else None,
                    connectgaps=True,
                )
            fig.add_trace(trace)

    def apply_layout(self, fig: go.Figure, title: str, description: str = "") -> None:
        """Shared layout: centred title, horizontal legend, white template."""
        subtitle = f"<br><sup style='color:#757575'>{description}</sup>" if description else ""
        fig.update_layout(
            title=dict(text=f"<b>{title}</b>{subtitle}", font=dict(size=18), x=0.5, xanchor="center"),
            legend=dict(
                orientation="h",
                x=0.5, xanchor="center",
                y=-0.15, yanchor="top",
                font=dict(size=11, color="#424242"),
            ),
            barmode="group",
            hovermode="x unified",
            height=480,
            margin=dict(l=50, r=30, t=80, b=90),
            template="plotly_white",
            paper_bgcolor="#FAFAFA",
            plot_bgcolor="#FFFFFF",
        )

    def apply_empty_layout(self, fig: go.Figure, title: str) -> None:
        """Apply layout for a chart without data rows."""
        fig.update_layout(
            title=dict(text=f"<b>{title}</b>", font=dict(size=18), x=0.5, xanchor="center"),
            xaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
            yaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
            height=360,
            template="plotly_white",
            paper_bgcolor="#FAFAFA",
            plot_bgcolor="#FFFFFF",
            annotations=[
                dict(text="<b>No data yet</b>", xref="paper", yref="paper",
                     x=0.5, y=0.5, showarrow=False, font=dict(size=16, color="#757575")),
            ],
        )

    def get_config(self) -> Dict[str, Any]:
        """Plotly config for embedding in the dashboard."""
        return {
            "displayModeBar": True,
            "displaylogo": False,
            "modeBarButtonsToRemove": ["lasso2d", "select2d", "autoScale2d"],
            "responsive": True,
            "toImageButtonOptions": {"format": "png", "filename": "clinic_chart", "scale": 2},
        }

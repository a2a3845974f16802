"""Plotly visualisation helpers for the family budget dashboard.

The functions here only render what :mod:`family_budget.aggregation`
computes; they never aggregate or classify. Month-indexed series are
drawn segment by segment so that spans without new data appear dashed,
and a target line, when present, is drawn as a thin dashed red line.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Sequence

import plotly.graph_objects as go

from .aggregation import SOLID, Dashboard, segment_styles
from .models import CumulativeSeries, TransactionSeries, Window

TARGET_COLOR = "#e53935"
EXPENSE_COLOR = "#e53935"
INCOME_COLOR = "#43a047"

PALETTE = [
    "#26a69a", "#ff7043", "#8d6e63", "#42a5f5", "#d4e157", "#ab47bc",
    "#ec407a", "#ffa726", "#789262", "#bdbdbd", "#29b6f6", "#757575",
]


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def _add_series_traces(fig: go.Figure, result: CumulativeSeries, window: Window, name: str, color: str) -> None:
    months = window.month_starts()
    values = result.values
    for i, style in enumerate(segment_styles(result.series)):
        fig.add_trace(
            go.Scatter(
                x=[months[i], months[i + 1]],
                y=[values[i], values[i + 1]],
                mode="lines",
                line=dict(color=color, width=2, dash="solid" if style == SOLID else "dash"),
                name=name,
                legendgroup=name,
                showlegend=i == 0,
                hoverinfo="skip",
            )
        )
    fig.add_trace(
        go.Scatter(
            x=months,
            y=values,
            mode="markers",
            marker=dict(color=color, size=4),
            name=name,
            legendgroup=name,
            showlegend=False,
            hovertemplate="%{x|%b %Y}: €%{y:.2f}<extra>" + name + "</extra>",
        )
    )


def _add_target_trace(fig: go.Figure, target_line: Sequence[float], target_dates: Sequence[date]) -> None:
    if not target_line:
        return
    fig.add_trace(
        go.Scatter(
            x=list(target_dates),
            y=list(target_line),
            mode="lines",
            line=dict(color=TARGET_COLOR, width=1, dash="dash"),
            name="Target Progress",
        )
    )


def create_cumulative_chart(
    result: CumulativeSeries,
    window: Window,
    title: str,
    color: Optional[str] = None,
) -> go.Figure:
    """Create the cumulative chart of a single category.

    Parameters
    ----------
    result : CumulativeSeries
        Output of :func:`family_budget.aggregation.aggregate`.
    window : Window
        The window ``result`` was aggregated over; supplies the x axis.
    title : str
        Chart title, usually the category name.
    color : str, optional
        Line colour. Defaults to the first palette entry.

    Returns
    -------
    plotly.graph_objects.Figure
        Line chart, or an empty "No data to display" figure when the
        series never started.
    """
    if not result.started:
        return _empty_figure()
    fig = go.Figure()
    _add_series_traces(fig, result, window, f"{title} (YTD)", color or PALETTE[0])
    _add_target_trace(fig, result.target_line, result.target_dates)
    fig.update_layout(
        title=title,
        xaxis_title="Month",
        yaxis_title="Cumulative Expense (€)",
        legend=dict(orientation="h"),
    )
    fig.update_yaxes(rangemode="tozero")
    return fig


def create_income_expense_chart(dashboard: Dashboard) -> go.Figure:
    """Create the combined cumulative income vs. expenses chart."""
    if not (dashboard.expenses.started or dashboard.income.started):
        return _empty_figure()
    fig = go.Figure()
    _add_series_traces(fig, dashboard.expenses, dashboard.window, "Total Expenses", EXPENSE_COLOR)
    _add_series_traces(fig, dashboard.income, dashboard.window, "Total Income", INCOME_COLOR)
    fig.update_layout(
        title="Cumulative Total Income vs. Total Expenses (YTD)",
        xaxis_title="Month",
        yaxis_title="Cumulative Amount (€)",
        legend=dict(orientation="h"),
    )
    fig.update_yaxes(rangemode="tozero")
    return fig


def create_transaction_chart(result: TransactionSeries, title: str, color: Optional[str] = None) -> go.Figure:
    """Create a per-transaction cumulative chart with one marker per transaction.

    Hovering a marker shows the transaction's date, description and raw amount.
    """
    if not result.points:
        return _empty_figure()
    fig = go.Figure(
        go.Scatter(
            x=[point.date for point in result.points],
            y=result.values,
            mode="lines+markers",
            line=dict(color=color or PALETTE[0], width=2, shape="hv"),
            name=title,
            customdata=[[point.description, point.amount] for point in result.points],
            hovertemplate=(
                "%{x|%d.%m.%Y}<br>%{customdata[0]}<br>"
                "Amount: €%{customdata[1]:.2f}<br>Total: €%{y:.2f}<extra></extra>"
            ),
        )
    )
    _add_target_trace(fig, result.target_line, result.target_dates)
    fig.update_layout(title=title, xaxis_title="Date", yaxis_title="Cumulative Amount (€)")
    fig.update_yaxes(rangemode="tozero")
    return fig


def create_category_charts(dashboard: Dashboard) -> Dict[str, go.Figure]:
    """Create one cumulative chart per expense category, in template order."""
    return {
        category: create_cumulative_chart(
            chart.result,
            dashboard.window,
            category,
            PALETTE[i % len(PALETTE)],
        )
        for i, (category, chart) in enumerate(dashboard.categories.items())
    }

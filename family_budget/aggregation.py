"""Cumulative time series of classified transactions.

Expenses accumulate as positive magnitudes (``abs(amount)``) whatever the
sign in the bank export; income accumulates its amounts as-is. A
month-indexed series stays in the "not started" state (zero, no data)
until the first month with a nonzero sum. From then on every month adds
its sum, and ``has_data`` reports whether the month had any transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from . import config
from .config import TargetLineMode
from .models import (
    CategoryConfig,
    CumulativeSeries,
    SeriesPoint,
    Transaction,
    TransactionPoint,
    TransactionSeries,
    Window,
    is_income_category,
    transactions_to_frame,
)

logger = logging.getLogger(__name__)

SOLID = 'solid'
DASHED = 'dashed'


def _category_mask(frame: pd.DataFrame, category: str) -> pd.Series:
    income_mask = frame['Category'].map(is_income_category).astype(bool)
    if category == config.ALL_EXPENSE:
        return ~income_mask
    if category == config.ALL_INCOME:
        return income_mask
    return frame['Category'] == category


def _qualifying_frame(
    transactions: Sequence[Transaction],
    category: str,
    window: Optional[Window],
) -> pd.DataFrame:
    """Return the transactions of ``category`` inside ``window`` with a 'Delta' column."""
    frame = transactions_to_frame(transactions)
    if frame.empty:
        frame['Delta'] = pd.Series(dtype=float)
        return frame

    frame = frame[_category_mask(frame, category)]
    if window is not None:
        dates = frame['Transaction Date'].dt.date
        frame = frame[(dates >= window.start) & (dates <= window.end)]
    frame = frame.copy()

    income = frame['Category'].map(is_income_category).astype(bool)
    frame['Delta'] = np.where(income, frame['Amount'], frame['Amount'].abs())
    logger.debug("%d transactions qualify for %s in %s", len(frame), category, window)
    return frame


def linear_target_line(target: float, months: int = 12) -> List[float]:
    """Return the expected cumulative value at the end of each month.

    Point ``i`` is ``target * (i + 1) / 12``: a yearly target accrued
    evenly per month. Empty when there is no target.
    """
    if target <= 0:
        return []
    return [target * (i + 1) / 12 for i in range(months)]


def endpoint_target_line(target: float, first: date, last: date) -> Tuple[List[float], List[date]]:
    """Return a two-point target line from ``(first, 0)`` to ``(last, target)``."""
    if target <= 0:
        return [], []
    return [0.0, float(target)], [first, last]


def _target_line(
    frame: pd.DataFrame,
    target: float,
    window: Window,
    mode: TargetLineMode,
) -> Tuple[List[float], List[date]]:
    if frame.empty or target <= 0:
        return [], []
    if mode is TargetLineMode.ENDPOINT:
        dates = frame['Transaction Date']
        return endpoint_target_line(target, dates.min().date(), dates.max().date())
    return linear_target_line(target, len(window)), window.month_starts()


def aggregate(
    transactions: Sequence[Transaction],
    category: str,
    window: Window,
    *,
    target: float = 0.0,
    target_line_mode: Optional[TargetLineMode] = None,
) -> CumulativeSeries:
    """Build the month-by-month cumulative series of a category.

    Args:
        transactions: Classified transactions
        category: A category name, ``config.ALL_EXPENSE`` or ``config.ALL_INCOME``
        window: Months to aggregate over, see :meth:`Window.for_year`
        target: Yearly target for the category, 0 for none
        target_line_mode: Defaults to ``config.get_target_line_mode()``

    Returns:
        One :class:`SeriesPoint` per window month plus the target line. With
        no qualifying transactions every point is zero without data and the
        target line is empty.
    """
    if target_line_mode is None:
        target_line_mode = config.get_target_line_mode()

    frame = _qualifying_frame(transactions, category, window)
    month_index = frame['Transaction Date'].dt.date.map(window.month_index) if not frame.empty else None
    sums = frame.groupby(month_index)['Delta'].sum() if not frame.empty else pd.Series(dtype=float)
    counts = frame.groupby(month_index).size() if not frame.empty else pd.Series(dtype=int)

    series: List[SeriesPoint] = []
    cumulative = 0.0
    started = False
    for i in range(len(window)):
        month_sum = float(sums.get(i, 0.0))
        if not started and month_sum != 0:
            started = True
        if started:
            cumulative += month_sum
            series.append(SeriesPoint(i, cumulative, bool(counts.get(i, 0) > 0)))
        else:
            series.append(SeriesPoint(i, 0.0, False))

    target_line, target_dates = _target_line(frame, target, window, target_line_mode)
    return CumulativeSeries(series=series, target_line=target_line, target_dates=target_dates)


def aggregate_transactions(
    transactions: Sequence[Transaction],
    category: str,
    window: Optional[Window] = None,
    *,
    target: float = 0.0,
    target_line_mode: Optional[TargetLineMode] = None,
) -> TransactionSeries:
    """Build the per-transaction cumulative series of a category.

    Qualifying transactions are walked in date order (ties keep their input
    order) and each one becomes a point carrying its own normalized delta,
    the running total, and its original date, description and amount.
    Without ``window`` the calendar year of the category's latest
    transaction is used.
    """
    if target_line_mode is None:
        target_line_mode = config.get_target_line_mode()

    if window is None:
        frame = _qualifying_frame(transactions, category, None)
        if frame.empty:
            return TransactionSeries(points=[])
        window = Window.for_year(frame['Transaction Date'].max().year)

    frame = _qualifying_frame(transactions, category, window)
    if frame.empty:
        return TransactionSeries(points=[])

    frame = frame.sort_values('Transaction Date', kind='mergesort')
    frame['Cumulative'] = frame['Delta'].cumsum()
    points = [
        TransactionPoint(
            date=row['Transaction Date'].date(),
            delta=float(row['Delta']),
            cumulative=float(row['Cumulative']),
            description=row['Description'],
            amount=float(row['Amount']),
        )
        for _, row in frame.iterrows()
    ]

    target_line, target_dates = _target_line(frame, target, window, target_line_mode)
    return TransactionSeries(points=points, target_line=target_line, target_dates=target_dates)


def segment_style(left: SeriesPoint, right: SeriesPoint) -> str:
    """Return how to draw the segment between two points of a monthly series.

    Solid only when both points have data and are adjacent months.
    """
    if left.has_data and right.has_data and right.month_index - left.month_index == 1:
        return SOLID
    return DASHED


def segment_styles(series: Sequence[SeriesPoint]) -> List[str]:
    """Return the style of every segment between consecutive points."""
    return [segment_style(left, right) for left, right in zip(series, series[1:])]


def monthly_deltas(series: Sequence[SeriesPoint]) -> List[float]:
    """Recover the per-month sums from a cumulative series."""
    values = [point.cumulative for point in series]
    return [float(delta) for delta in np.diff(values, prepend=0.0)] if values else []


@dataclass
class CategoryChart:
    """Cumulative series of one expense category with its template details."""

    category: str
    result: CumulativeSeries
    target: float = 0.0
    remark: str = ''


@dataclass
class Dashboard:
    """All series shown for one window."""

    window: Window
    expenses: CumulativeSeries
    income: CumulativeSeries
    categories: Dict[str, CategoryChart] = field(default_factory=dict)


def build_dashboard(
    transactions: Sequence[Transaction],
    category_config: CategoryConfig,
    window: Window,
    *,
    target_line_mode: Optional[TargetLineMode] = None,
) -> Dashboard:
    """Compute the combined income/expense series and one series per expense category."""
    if target_line_mode is None:
        target_line_mode = config.get_target_line_mode()

    expenses = aggregate(transactions, config.ALL_EXPENSE, window, target_line_mode=target_line_mode)
    income = aggregate(transactions, config.ALL_INCOME, window, target_line_mode=target_line_mode)

    charts: Dict[str, CategoryChart] = {}
    for category in category_config.expense_categories:
        target = category_config.target_for(category)
        charts[category] = CategoryChart(
            category=category,
            result=aggregate(
                transactions,
                category,
                window,
                target=target,
                target_line_mode=target_line_mode,
            ),
            target=target,
            remark=category_config.remark_for(category),
        )
    return Dashboard(window=window, expenses=expenses, income=income, categories=charts)

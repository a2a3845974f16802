"""Overspend flagging against the year-to-date monthly average."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Mapping, Optional, Sequence, Set

from . import config
from .models import CategoryConfig, Transaction, Window, transactions_to_frame

logger = logging.getLogger(__name__)


def flag(
    category_totals_ytd: Mapping[str, float],
    months_active_this_year: int,
    this_month_totals: Mapping[str, float],
) -> Set[str]:
    """Return the categories whose spend this month looks excessive.

    A category is flagged when ``abs(this month)`` exceeds
    ``config.OVERSPEND_FACTOR`` times its average per active month,
    ``abs(YTD total) / max(months_active_this_year, 1)``. The month count
    is shared by all categories. A category missing from the YTD totals
    counts as zero so far.
    """
    months = max(months_active_this_year, 1)
    flagged = set()
    for category in set(category_totals_ytd) | set(this_month_totals):
        average_per_month = abs(category_totals_ytd.get(category, 0.0)) / months
        if abs(this_month_totals.get(category, 0.0)) > average_per_month * config.OVERSPEND_FACTOR:
            flagged.add(category)
    return flagged


def months_active(
    transactions: Sequence[Transaction],
    year: int,
    *,
    through: Optional[date] = None,
) -> int:
    """Count the distinct months of ``year`` with at least one transaction of any category."""
    frame = transactions_to_frame(transactions)
    if frame.empty:
        return 0
    dates = frame['Transaction Date']
    mask = dates.dt.year == year
    if through is not None:
        mask &= dates.dt.date <= through
    return int(dates[mask].dt.month.nunique())


def category_totals(
    transactions: Sequence[Transaction],
    categories: Sequence[str],
    window: Window,
) -> Dict[str, float]:
    """Sum the raw signed amounts per category inside ``window``."""
    frame = transactions_to_frame(transactions)
    totals = {category: 0.0 for category in categories}
    if frame.empty:
        return totals
    dates = frame['Transaction Date'].dt.date
    frame = frame[(dates >= window.start) & (dates <= window.end) & frame['Category'].isin(categories)]
    for category, total in frame.groupby('Category')['Amount'].sum().items():
        totals[category] = float(total)
    return totals


def overspend_report(
    transactions: Sequence[Transaction],
    category_config: CategoryConfig,
    as_of: date,
) -> Set[str]:
    """Flag overspent expense categories as of a reference date.

    Year-to-date covers ``as_of``'s year up to and including ``as_of``;
    the current month is ``as_of``'s calendar month up to ``as_of``.
    """
    categories = category_config.expense_categories
    ytd = category_totals(transactions, categories, Window(date(as_of.year, 1, 1), as_of))
    this_month = category_totals(transactions, categories, Window(as_of.replace(day=1), as_of))
    active = months_active(transactions, as_of.year, through=as_of)

    flagged = flag(ytd, active, this_month)
    logger.debug("Overspend check as of %s over %d active months flagged %s",
                 as_of, active, sorted(flagged))
    return flagged

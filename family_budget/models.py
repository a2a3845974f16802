"""Data models shared by the classifier, aggregator and overspend evaluator."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from . import config

FRAME_COLUMNS = ['Transaction Date', 'Description', 'Amount', 'Category']


def is_income_category(name: Optional[str]) -> bool:
    """Return True if ``name`` designates the income category."""
    return bool(name) and name.strip().lower() == config.INCOME_CATEGORY


@dataclass(frozen=True)
class Transaction:
    """A bank transaction. Positive amounts are credits, negative debits."""

    date: date
    description: str
    amount: float
    category: str = ''


@dataclass(frozen=True)
class CategoryConfig:
    """Ordered categories with their patterns, yearly targets and remarks.

    Category order is rule-evaluation priority. Patterns are kept in their
    configured order as well; the first matching one wins.
    """

    categories: Tuple[str, ...]
    patterns: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    targets: Dict[str, float] = field(default_factory=dict)
    remarks: Dict[str, str] = field(default_factory=dict)

    # holds dicts, so instances are not hashable
    __hash__ = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'categories', tuple(self.categories))
        object.__setattr__(
            self, 'patterns', {cat: tuple(pats) for cat, pats in self.patterns.items()}
        )
        known = set(self.categories)
        if len(known) != len(self.categories):
            raise ValueError("Category names must be unique")
        for label, mapping in (('patterns', self.patterns), ('targets', self.targets), ('remarks', self.remarks)):
            unknown = [cat for cat in mapping if cat not in known]
            if unknown:
                raise ValueError(f"{label} reference unknown categories: {', '.join(sorted(unknown))}")
        negative = [cat for cat, value in self.targets.items() if value < 0]
        if negative:
            raise ValueError(f"Targets must be >= 0: {', '.join(sorted(negative))}")
        if sum(1 for cat in self.categories if is_income_category(cat)) > 1:
            raise ValueError("At most one income category may be configured")

    @property
    def income_category(self) -> Optional[str]:
        return next((cat for cat in self.categories if is_income_category(cat)), None)

    @property
    def expense_categories(self) -> List[str]:
        return [cat for cat in self.categories if not is_income_category(cat)]

    @property
    def targetable_categories(self) -> List[str]:
        """Categories offered for target editing (income is excluded)."""
        return self.expense_categories

    def patterns_for(self, category: str) -> Tuple[str, ...]:
        return self.patterns.get(category, ())

    def target_for(self, category: str) -> float:
        return float(self.targets.get(category, 0.0))

    def remark_for(self, category: str) -> str:
        return self.remarks.get(category, '')


@dataclass(frozen=True)
class Window:
    """An aggregation window spanning whole calendar months.

    Only transactions with ``start <= date <= end`` are considered; the
    month buckets run from ``start``'s month through ``end``'s month.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Window start {self.start} is after end {self.end}")

    @classmethod
    def for_year(cls, year: int) -> 'Window':
        return cls(date(year, 1, 1), date(year, 12, 31))

    @classmethod
    def for_month(cls, year: int, month: int) -> 'Window':
        last_day = calendar.monthrange(year, month)[1]
        return cls(date(year, month, 1), date(year, month, last_day))

    def months(self) -> List[Tuple[int, int]]:
        """Return ``(year, month)`` for every calendar month in the window."""
        months = []
        year, month = self.start.year, self.start.month
        while (year, month) <= (self.end.year, self.end.month):
            months.append((year, month))
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return months

    def month_starts(self) -> List[date]:
        return [date(year, month, 1) for year, month in self.months()]

    def month_index(self, day: date) -> int:
        return (day.year - self.start.year) * 12 + day.month - self.start.month

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __len__(self) -> int:
        return len(self.months())


@dataclass(frozen=True)
class SeriesPoint:
    """A month bucket of a cumulative series."""

    month_index: int
    cumulative: float
    has_data: bool


@dataclass(frozen=True)
class TransactionPoint:
    """One transaction of a per-transaction cumulative series."""

    date: date
    delta: float
    cumulative: float
    description: str
    amount: float


@dataclass
class CumulativeSeries:
    """Month-indexed cumulative series plus its target-progress line."""

    series: List[SeriesPoint]
    target_line: List[float] = field(default_factory=list)
    target_dates: List[date] = field(default_factory=list)

    @property
    def values(self) -> List[float]:
        return [point.cumulative for point in self.series]

    @property
    def has_data(self) -> List[bool]:
        return [point.has_data for point in self.series]

    @property
    def started(self) -> bool:
        return any(self.has_data)

    def to_frame(self, window: Window) -> pd.DataFrame:
        """Return the series as a DataFrame indexed by month start."""
        return pd.DataFrame(
            {
                'Cumulative': self.values,
                'Has Data': self.has_data,
            },
            index=pd.DatetimeIndex(window.month_starts(), name='Month'),
        )


@dataclass
class TransactionSeries:
    """Per-transaction cumulative series plus its target-progress line."""

    points: List[TransactionPoint]
    target_line: List[float] = field(default_factory=list)
    target_dates: List[date] = field(default_factory=list)

    @property
    def values(self) -> List[float]:
        return [point.cumulative for point in self.points]


def transactions_to_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Convert transactions into a DataFrame with the dashboard's column names."""
    if not transactions:
        frame = pd.DataFrame(columns=FRAME_COLUMNS)
        frame['Transaction Date'] = pd.to_datetime(frame['Transaction Date'])
        frame['Amount'] = frame['Amount'].astype(float)
        return frame
    frame = pd.DataFrame(
        {
            'Transaction Date': pd.to_datetime([t.date for t in transactions]),
            'Description': [t.description for t in transactions],
            'Amount': [float(t.amount) for t in transactions],
            'Category': [t.category for t in transactions],
        }
    )
    return frame

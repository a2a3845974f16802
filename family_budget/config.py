"""Configuration management for the family budget engine.

This module centralizes configuration values including paths, category
names with special meaning, and the environment variable overrides that
pick between the two income-detection and target-line variants.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in family_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FAMILY_BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))

# Category template imported by the dashboard
TEMPLATE_PATH = Path(
    os.getenv("FAMILY_BUDGET_TEMPLATE", DATA_DIR / "category_template.json")
).resolve()

# Category names with special meaning
INCOME_CATEGORY = "income"
OTHER_CATEGORY = "Other"

# Pseudo categories for the combined series
ALL_EXPENSE = "ALL_EXPENSE"
ALL_INCOME = "ALL_INCOME"

# This month counts as overspent above 120% of the YTD monthly average
OVERSPEND_FACTOR = 1.2


class IncomeMode(str, Enum):
    """How the classifier recognises income."""

    SIGN = "sign"  # positive amount short-circuits to the income category
    PATTERN = "pattern"  # income is matched by its patterns like any category


class TargetLineMode(str, Enum):
    """Shape of the target-progress line."""

    LINEAR = "linear"  # one point per month, T * (i + 1) / 12
    ENDPOINT = "endpoint"  # (first transaction, 0) to (last transaction, T)


def _parse_mode(enum_cls, value: str, env_name: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{env_name} must be one of: {allowed} (got {value!r})") from None


def get_income_mode(value: Optional[str] = None) -> IncomeMode:
    """Return the configured income-detection mode.

    ``value`` overrides the ``FAMILY_BUDGET_INCOME_MODE`` environment variable.
    """
    raw = value if value is not None else os.getenv("FAMILY_BUDGET_INCOME_MODE", IncomeMode.SIGN.value)
    return _parse_mode(IncomeMode, raw, "FAMILY_BUDGET_INCOME_MODE")


def get_target_line_mode(value: Optional[str] = None) -> TargetLineMode:
    """Return the configured target-line mode.

    ``value`` overrides the ``FAMILY_BUDGET_TARGET_LINE`` environment variable.
    """
    raw = value if value is not None else os.getenv("FAMILY_BUDGET_TARGET_LINE", TargetLineMode.LINEAR.value)
    return _parse_mode(TargetLineMode, raw, "FAMILY_BUDGET_TARGET_LINE")


def get_template_path() -> str:
    """Get the template path as a string."""
    return str(TEMPLATE_PATH)

"""Category Rules - pattern-based categorization of transactions.

Every transaction is assigned to exactly one category of the imported
template. Categories are tried in their configured order and, within a
category, patterns in their configured order; the first pattern found as
a substring of the lowercased description wins. Descriptions matching
nothing fall back to "Other", then to the first configured category.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Sequence

import pandas as pd

from . import config
from .config import IncomeMode
from .models import CategoryConfig, Transaction

logger = logging.getLogger(__name__)


def _match_category(description: str, category_config: CategoryConfig, skip_income: bool) -> Optional[str]:
    desc = description.lower()
    for category in category_config.categories:
        if skip_income and category == category_config.income_category:
            continue
        for pattern in category_config.patterns_for(category):
            pattern = pattern.lower().strip()
            if pattern and pattern in desc:
                return category
    return None


def fallback_category(category_config: CategoryConfig) -> str:
    """Return the category used when no rule matches.

    Returns "Other" if configured, else the first category, else an empty
    string meaning the transaction is unclassifiable.
    """
    if config.OTHER_CATEGORY in category_config.categories:
        return config.OTHER_CATEGORY
    if category_config.categories:
        return category_config.categories[0]
    return ''


def classify(
    description: str,
    amount: float,
    category_config: CategoryConfig,
    *,
    income_mode: Optional[IncomeMode] = None,
) -> str:
    """Return the category for a transaction.

    Args:
        description: Transaction description text
        amount: Signed amount, positive for money received
        category_config: Imported category template
        income_mode: ``IncomeMode.SIGN`` sends every positive amount to the
            income category before any pattern is tried; ``IncomeMode.PATTERN``
            matches the income category by its patterns at its configured
            position. Defaults to ``config.get_income_mode()``.

    Returns:
        Category name, or '' when no category is configured
    """
    if income_mode is None:
        income_mode = config.get_income_mode()
    income = category_config.income_category
    short_circuit = income_mode is IncomeMode.SIGN

    if short_circuit and income is not None and amount > 0:
        return income

    matched = _match_category(description or '', category_config, skip_income=short_circuit)
    if matched is not None:
        return matched

    fallback = fallback_category(category_config)
    logger.debug("No pattern matched %r, falling back to %r", description, fallback)
    return fallback


def classify_transactions(
    transactions: Sequence[Transaction],
    category_config: CategoryConfig,
    *,
    income_mode: Optional[IncomeMode] = None,
) -> List[Transaction]:
    """Return copies of ``transactions`` with their category assigned."""
    if income_mode is None:
        income_mode = config.get_income_mode()
    return [
        dataclasses.replace(
            txn,
            category=classify(txn.description, txn.amount, category_config, income_mode=income_mode),
        )
        for txn in transactions
    ]


def reclassify(
    transactions: Sequence[Transaction],
    category_config: CategoryConfig,
    *,
    income_mode: Optional[IncomeMode] = None,
) -> List[Transaction]:
    """Reclassify transactions after a template import replaced the configuration.

    Existing categories are discarded; every transaction is classified
    again against the new patterns.
    """
    logger.debug("Reclassifying %d transactions against %d categories",
                 len(transactions), len(category_config.categories))
    return classify_transactions(transactions, category_config, income_mode=income_mode)


def apply_rules_to_dataframe(
    df: pd.DataFrame,
    category_config: CategoryConfig,
    *,
    income_mode: Optional[IncomeMode] = None,
) -> pd.DataFrame:
    """Apply category rules to a DataFrame of transactions.

    Args:
        df: DataFrame with 'Description' and 'Amount' columns
        category_config: Imported category template
        income_mode: See :func:`classify`

    Returns:
        Copy of ``df`` with the 'Category' column filled for every row
    """
    if income_mode is None:
        income_mode = config.get_income_mode()
    df = df.copy()
    if df.empty:
        df['Category'] = pd.Series(dtype='object')
        return df

    descriptions = df['Description'].fillna('').astype(str)
    amounts = pd.to_numeric(df['Amount'], errors='coerce').fillna(0.0)
    df['Category'] = [
        classify(desc, amount, category_config, income_mode=income_mode)
        for desc, amount in zip(descriptions, amounts)
    ]
    return df


def unmatched_descriptions(
    transactions: Sequence[Transaction],
    category_config: CategoryConfig,
    limit: int = 20,
    *,
    income_mode: Optional[IncomeMode] = None,
) -> pd.Series:
    """Return the most frequent descriptions no pattern matched.

    Transactions sent to the income category by the sign rule are not
    counted. Useful when writing new patterns for a template.
    """
    if income_mode is None:
        income_mode = config.get_income_mode()
    income = category_config.income_category
    unmatched = []
    for txn in transactions:
        if income_mode is IncomeMode.SIGN and income is not None and txn.amount > 0:
            continue
        if _match_category(txn.description or '', category_config,
                           skip_income=income_mode is IncomeMode.SIGN) is None:
            unmatched.append(txn.description)
    if not unmatched:
        return pd.Series(dtype='int64', name='count')
    return pd.Series(unmatched, dtype='object').value_counts().head(limit)

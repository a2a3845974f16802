"""Top‑level package for the family budget engine.

The package classifies bank transactions into the categories of an
imported template and turns them into cumulative month-by-month series
against yearly targets. The primary modules are:

* ``template`` – import of the category template (patterns, targets, remarks)
* ``category_rules`` – pattern-based classification of transactions
* ``aggregation`` – cumulative series, target lines and segment styles
* ``overspend`` – flags categories spending above their monthly average
* ``visualization`` – functions that render the series as Plotly figures

Everything is computed from in-memory transactions; reading bank exports
is left to the caller.
"""

from .aggregation import aggregate, aggregate_transactions, build_dashboard, segment_styles  # noqa: F401
from .category_rules import classify, classify_transactions, reclassify  # noqa: F401
from .models import CategoryConfig, Transaction, Window  # noqa: F401
from .overspend import flag, overspend_report  # noqa: F401
from .template import TemplateError, load_template, parse_template  # noqa: F401

__all__ = [
    "CategoryConfig",
    "TemplateError",
    "Transaction",
    "Window",
    "aggregate",
    "aggregate_transactions",
    "build_dashboard",
    "classify",
    "classify_transactions",
    "flag",
    "load_template",
    "overspend_report",
    "parse_template",
    "reclassify",
    "segment_styles",
]

"""Category template import.

A template lists the categories in priority order together with their
description patterns, yearly targets and remarks. Importing a template
fully replaces the previous configuration, so transactions classified
against the old one have to be reclassified (see
:func:`family_budget.category_rules.reclassify`).

Two JSON shapes are accepted. The entry list::

    {"categories": [{"name": "Groceries", "patterns": ["rewe"], "target": 4800,
                     "remark": "weekly shop"}, ...]}

and the mapping form::

    {"categories": ["income", "Groceries", "Other"],
     "patterns": {"Groceries": ["rewe"]},
     "targets": {"Groceries": 4800},
     "remarks": {"Groceries": "weekly shop"}}
"""

from __future__ import annotations

import json
import logging
import numbers
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .models import CategoryConfig

logger = logging.getLogger(__name__)


class TemplateError(ValueError):
    """Raised when a category template cannot be turned into a configuration."""


def _clean_patterns(category: str, patterns: Any) -> Tuple[str, ...]:
    if patterns is None:
        return ()
    if not isinstance(patterns, (list, tuple)):
        raise TemplateError(f"Patterns for '{category}' must be a list of strings")
    cleaned = []
    for pattern in patterns:
        if not isinstance(pattern, str):
            raise TemplateError(f"Pattern {pattern!r} for '{category}' is not a string")
        pattern = pattern.strip().lower()
        if pattern:
            cleaned.append(pattern)
    return tuple(cleaned)


def _clean_target(category: str, target: Any) -> float:
    if target is None or target == '':
        return 0.0
    if isinstance(target, bool) or not isinstance(target, numbers.Real):
        raise TemplateError(f"Target for '{category}' must be a number, got {target!r}")
    if target < 0:
        raise TemplateError(f"Target for '{category}' must be >= 0, got {target}")
    return float(target)


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise TemplateError(f"Category names must be non-empty strings, got {name!r}")
    return name.strip()


def _from_entries(entries: List[Dict[str, Any]]) -> Tuple[List[str], Dict, Dict, Dict]:
    names: List[str] = []
    patterns: Dict[str, Tuple[str, ...]] = {}
    targets: Dict[str, float] = {}
    remarks: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise TemplateError(f"Category entry must be an object, got {entry!r}")
        name = _clean_name(entry.get('name'))
        names.append(name)
        patterns[name] = _clean_patterns(name, entry.get('patterns'))
        targets[name] = _clean_target(name, entry.get('target'))
        remark = entry.get('remark') or ''
        if remark:
            remarks[name] = str(remark)
    return names, patterns, targets, remarks


def _from_mapping(data: Dict[str, Any]) -> Tuple[List[str], Dict, Dict, Dict]:
    names = [_clean_name(name) for name in data.get('categories', [])]
    known = set(names)
    sections = {key: data.get(key) or {} for key in ('patterns', 'targets', 'remarks')}
    for key, section in sections.items():
        if not isinstance(section, dict):
            raise TemplateError(f"'{key}' must be an object keyed by category")
        unknown = sorted(cat for cat in section if cat not in known)
        if unknown:
            raise TemplateError(f"'{key}' references unknown categories: {', '.join(unknown)}")
    patterns = {cat: _clean_patterns(cat, pats) for cat, pats in sections['patterns'].items()}
    targets = {cat: _clean_target(cat, value) for cat, value in sections['targets'].items()}
    remarks = {cat: str(text) for cat, text in sections['remarks'].items() if text}
    return names, patterns, targets, remarks


def parse_template(data: Dict[str, Any]) -> CategoryConfig:
    """Build a :class:`CategoryConfig` from a decoded template document.

    Raises:
        TemplateError: if the document is malformed or inconsistent
    """
    if not isinstance(data, dict):
        raise TemplateError("Template must be a JSON object")
    entries = data.get('categories', [])
    if not isinstance(entries, list):
        raise TemplateError("'categories' must be a list")

    if entries and all(isinstance(entry, dict) for entry in entries):
        names, patterns, targets, remarks = _from_entries(entries)
    else:
        names, patterns, targets, remarks = _from_mapping(data)

    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise TemplateError(f"Duplicate categories: {', '.join(duplicates)}")

    try:
        category_config = CategoryConfig(
            categories=tuple(names),
            patterns=patterns,
            targets=targets,
            remarks=remarks,
        )
    except ValueError as e:
        raise TemplateError(str(e)) from e

    if not names:
        logger.warning("Template defines no categories; every transaction will be unclassifiable")
    logger.debug(
        "Imported template with %d categories and %d patterns",
        len(names),
        sum(len(p) for p in patterns.values()),
    )
    return category_config


def load_template(path: Optional[Path] = None) -> CategoryConfig:
    """Load a category template from a JSON file.

    Args:
        path: Template file. Defaults to ``config.TEMPLATE_PATH``.

    Raises:
        FileNotFoundError: if the template file doesn't exist
        json.JSONDecodeError: if the file is not valid JSON
        TemplateError: if the document is malformed or inconsistent
    """
    template_path = Path(path) if path is not None else config.TEMPLATE_PATH
    if not template_path.exists():
        raise FileNotFoundError(f"Category template not found: {template_path}")

    with template_path.open('r', encoding='utf-8') as f:
        data = json.load(f)

    logger.debug("Loading category template from %s", template_path)
    return parse_template(data)

#!/usr/bin/env python3
"""Lightweight validator for category template JSON files."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from family_budget import config
from family_budget.template import TemplateError, load_template


def validate_template(path: Path) -> Optional[str]:
    """Return an error message for ``path``, or None if it imports cleanly."""
    try:
        category_config = load_template(path)
    except (OSError, json.JSONDecodeError, TemplateError) as e:
        return str(e)
    if not category_config.categories:
        return "no categories defined"
    return None


def main(paths: List[Path]) -> int:
    issues = []
    for path in paths:
        message = validate_template(path)
        if message:
            issues.append((path.name, message))

    if issues:
        print("Template validation failed:")
        for filename, message in issues:
            print(f"  - {filename}: {message}")
        return 1

    print("All templates validated successfully.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Validate category template files.")
    parser.add_argument("paths", nargs="*", type=Path, help="Template files (default: configured template)")
    args = parser.parse_args()
    raise SystemExit(main(args.paths or [config.TEMPLATE_PATH]))

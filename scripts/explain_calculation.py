#!/usr/bin/env python3
"""Print a step-by-step breakdown of a calculation request stored as JSON."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from uncertainincome.backend.app.services.errors import InvalidInputError  # noqa: E402
from uncertainincome.backend.app.services.explain import (  # noqa: E402
    explain_request,
    format_explanation,
)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("payload", type=Path, help="Path to a JSON request payload")
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Evaluate future-date rules against this YYYY-MM-DD date",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the breakdown as JSON instead of indented text",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_argument_parser().parse_args(argv)

    try:
        payload = json.loads(args.payload.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        print(f"failed to read payload: {error}")
        return 1

    try:
        explanation = explain_request(payload, today=args.today)
    except InvalidInputError as error:
        print(f"request rejected: {error.message}")
        for detail in error.errors:
            print(f"  - [{detail.code}] {detail.field}: {detail.message}")
        return 1

    if args.json:
        print(json.dumps(explanation, indent=2))
    else:
        print(format_explanation(explanation))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

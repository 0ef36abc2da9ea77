"""Compute metrics and insights from a CSV/JSON task snapshot."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from productivity_analytics.adapters import csv_adapter, json_adapter
from productivity_analytics.clock import parse_timestamp
from productivity_analytics.config import load_config
from productivity_analytics.engine import recompute, report_to_dict


def _load_tasks(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse_tasks(str(path))
    if suffix == ".json":
        return json_adapter.parse_tasks(str(path))
    raise ValueError("Unsupported input format, expected .csv or .json")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run productivity analytics over a task snapshot")
    parser.add_argument("--tasks", required=True, help="Path to CSV/JSON tasks file")
    parser.add_argument("--habits", help="Path to JSON habits file")
    parser.add_argument("--now", help="ISO timestamp to use as the current instant")
    parser.add_argument("--config", help="Path to a TOML config file")
    parser.add_argument("--max-insights", type=int, help="Maximum number of insights to return")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.max_insights is not None:
        config = replace(config, max_insights=max(0, args.max_insights))

    now = None
    if args.now:
        now = parse_timestamp(args.now)
        if now is None:
            parser.error(f"Invalid --now timestamp: {args.now}")

    tasks = _load_tasks(Path(args.tasks))
    habits = json_adapter.parse_habits(args.habits) if args.habits else []
    report = recompute(tasks, habits, now=now, config=config)

    print(json.dumps(report_to_dict(report), indent=2))


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Greenhouse quantum-yield pipeline.

1. Convert logger workbooks to CSV when .xlsx files are given.
2. Align the light/yield logger with the climate logger on a 15-minute grid,
   drop night-time rows and incomplete joined rows.
3. Derive calendar fields, daily light integrals and replicate means.
4. Write the merged wide CSV (and optionally the long CSV).
5. Optionally fit OLS and elastic-net models predicting qy on the long table,
   or fit them straight from a long CSV written by an earlier run.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from data_processing.logging_config import configure_logging
from data_processing.preprocessing import (
    DaytimeWindow,
    PipelineConfig,
    SchemaError,
    build_merged_dataset,
)
from data_processing.preprocessing.config import GRID_INTERVAL_SECONDS
from data_processing.xlsx_to_csv import convert_workbook, is_workbook
from models.config import LONG_DATA_PATH, RANDOM_SEED
from models.datasets import load_long_dataset
from models.eval import run_models

logger = logging.getLogger("main")


def _as_csv(path: Path, work_dir: Path, source: str) -> Path:
    if is_workbook(path):
        return convert_workbook(path, work_dir / f"{path.stem}_{source}.csv")
    return path


def build_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig(
        grid_interval_seconds=args.grid_seconds,
        duplicate_policy=args.duplicate_policy,
    )
    if args.window_a:
        config = replace(config, window_a=DaytimeWindow.parse(args.window_a))
    if args.window_b:
        config = replace(config, window_b=DaytimeWindow.parse(args.window_b))
    return config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Align greenhouse sensor logs, derive light integrals and model quantum yield."
    )
    parser.add_argument("source_a", type=Path, nargs="?", help="Light/yield logger export (.csv or .xlsx).")
    parser.add_argument("source_b", type=Path, nargs="?", help="Climate logger export (.csv or .xlsx).")
    parser.add_argument("--long-input", type=Path, nargs="?", const=LONG_DATA_PATH, default=None,
                        help="Skip preprocessing and fit models on a saved long CSV "
                             f"(default path: {LONG_DATA_PATH}).")
    parser.add_argument("--output", type=Path, default=Path("processed-data/merged.csv"),
                        help="Path of the merged wide CSV.")
    parser.add_argument("--long-output", type=Path, default=None,
                        help="Also write the long (timestamp x replicate) CSV here.")
    parser.add_argument("--grid-seconds", type=int, default=GRID_INTERVAL_SECONDS,
                        help="Grid interval in seconds (default: 900).")
    parser.add_argument("--window-a", type=str, default=None,
                        help="Daytime window for source A, HH:MM-HH:MM.")
    parser.add_argument("--window-b", type=str, default=None,
                        help="Daytime window for source B, HH:MM-HH:MM.")
    parser.add_argument("--duplicate-policy", choices=["first", "last"], default="first",
                        help="Which reading to keep when two round to the same slot.")
    parser.add_argument("--fit-models", action="store_true",
                        help="Fit OLS and elastic-net models on the long table.")
    parser.add_argument("--bayes", action="store_true",
                        help="Also tune elastic net with Bayesian search.")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Seed for the train/test split and CV folds.")
    parser.add_argument("--results-dir", type=Path, default=Path("artifacts/results"),
                        help="Where model artifacts are written.")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: LOG_LEVEL or INFO).")

    args = parser.parse_args(argv)
    if args.long_input is None and (args.source_a is None or args.source_b is None):
        parser.error("source_a and source_b are required unless --long-input is given")
    return args


def fit_saved_long(args: argparse.Namespace) -> int:
    try:
        long_df = load_long_dataset(args.long_input)
    except FileNotFoundError as exc:
        logger.error("Model fit aborted: %s", exc)
        return 1

    print(f"Loaded {len(long_df)} replicate rows from {args.long_input}.")
    metrics = run_models(long_df, results_dir=args.results_dir, use_bayes=args.bayes, seed=args.seed)
    print(metrics.to_string(index=False, float_format="%.4f"))
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.long_input is not None:
        return fit_saved_long(args)

    try:
        config = build_config(args)
        work_dir = args.output.parent
        source_a = _as_csv(args.source_a, work_dir, "a")
        source_b = _as_csv(args.source_b, work_dir, "b")

        result = build_merged_dataset(
            source_a,
            source_b,
            output_path=args.output,
            long_output_path=args.long_output,
            config=config,
        )
    except (SchemaError, FileNotFoundError) as exc:
        logger.error("Pipeline aborted: %s", exc)
        return 1

    comparison = result.alignment.comparison
    print(f"Merged {len(result.wide)} timestamps into {len(result.long)} replicate rows.")
    print(f"Timestamp sets identical: {comparison.identical} "
          f"(only in A: {len(comparison.only_in_a)}, only in B: {len(comparison.only_in_b)})")
    print(f"Dropped incomplete rows: {result.alignment.dropped_rows} "
          f"({result.alignment.drop_rate:.1%})")

    if args.fit_models:
        metrics = run_models(result.long, results_dir=args.results_dir, use_bayes=args.bayes, seed=args.seed)
        print(metrics.to_string(index=False, float_format="%.4f"))

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command-line entry point: run a market, then inspect its outcome tables."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .analysis import correlation_report, count_rows
from .config import ScenarioConfig, load_config
from .core import MatchSimError
from .engine import MarketEngine
from .records import export_outcomes, load_agents, load_table

logger = logging.getLogger(__name__)

# CLI flag -> ScenarioConfig field
RUN_OVERRIDES = {
    "proposers": "n_proposers",
    "reviewers": "n_reviewers",
    "periods": "n_periods",
    "view_cap": "proposer_view_cap",
    "proposer_like_cap": "proposer_like_cap",
    "reviewer_like_cap": "reviewer_like_cap",
    "review_cap": "reviewer_review_cap",
    "proposer_beta": "proposer_beta",
    "reviewer_beta": "reviewer_beta",
    "observation_form": "observation_form",
    "exposure_exponent": "exposure_exponent",
    "fatigue_rate": "fatigue_rate",
}


def setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _coerce_value(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        if "." in value or "e" in lowered:
            return float(value)
        return int(value)
    except ValueError:
        return value


def build_config(args: argparse.Namespace) -> ScenarioConfig:
    cfg = load_config(args.config) if args.config else ScenarioConfig()
    overrides: Dict[str, Any] = {}
    for flag, field_name in RUN_OVERRIDES.items():
        value = getattr(args, flag, None)
        if value is not None:
            overrides[field_name] = value
    if args.adapt_thresholds:
        overrides["threshold_adaptation"] = True
    if args.no_ranking:
        overrides["review_ranking"] = False
    if args.daily_counts:
        overrides["record_daily_counts"] = True
    return cfg.copy_with_overrides(overrides)


def cmd_run(args: argparse.Namespace) -> int:
    cfg = build_config(args)
    proposers = reviewers = None
    if args.proposers_csv or args.reviewers_csv:
        if not (args.proposers_csv and args.reviewers_csv):
            raise MatchSimError("--proposers-csv and --reviewers-csv must be given together")
        proposers = load_agents(args.proposers_csv, "proposer", cfg.proposer_beta, cfg.proposer_threshold)
        reviewers = load_agents(args.reviewers_csv, "reviewer", cfg.reviewer_beta, cfg.reviewer_threshold)
    engine = MarketEngine(cfg, seed=args.seed, proposers=proposers, reviewers=reviewers)
    logger.info(
        "Simulation start: %d proposers, %d reviewers, %d periods",
        len(engine.proposers), len(engine.reviewers), cfg.n_periods,
    )
    engine.run()

    out_dir = Path(args.output_dir)
    export_outcomes(engine.proposer_table(), out_dir / "proposers.csv")
    export_outcomes(engine.reviewer_table(), out_dir / "reviewers.csv")
    if args.periods_csv:
        engine.metrics.period_df().to_csv(out_dir / "periods.csv", index=False)
    with (out_dir / "config.json").open("w", encoding="utf-8") as handle:
        json.dump(cfg.snapshot(), handle, indent=2)
    return 0


def cmd_correlate(args: argparse.Namespace) -> int:
    df = load_table(args.table)
    report = correlation_report(df, target=args.target, factors=args.factors)
    print(f"=== {Path(args.table).name} ===")
    for col, value in report.items():
        print(f"corr({col}, {args.target}) = {value:.6f}")
    return 0


def cmd_count(args: argparse.Namespace) -> int:
    df = load_table(args.table)
    value = _coerce_value(args.value)
    print(f"{args.column} == {value}: {count_rows(df, args.column, value)}")
    return 0


def _parse_cli_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Two-sided matching market simulator")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    runp = sub.add_parser("run", help="simulate a market and export outcome tables")
    runp.add_argument("--config", help="JSON file of ScenarioConfig overrides")
    runp.add_argument("--output-dir", default="results", help="directory for CSV outputs")
    runp.add_argument("--seed", type=int, default=None, help="seed the generator (default: unseeded)")
    runp.add_argument("--proposers", type=int)
    runp.add_argument("--reviewers", type=int)
    runp.add_argument("--periods", type=int)
    runp.add_argument("--view-cap", dest="view_cap", type=int)
    runp.add_argument("--proposer-like-cap", type=int)
    runp.add_argument("--reviewer-like-cap", type=int)
    runp.add_argument("--review-cap", dest="review_cap", type=int)
    runp.add_argument("--proposer-beta", type=float)
    runp.add_argument("--reviewer-beta", type=float)
    runp.add_argument("--observation-form", choices=("constant", "linear", "uniform", "convex"))
    runp.add_argument("--exposure-exponent", type=float)
    runp.add_argument("--fatigue-rate", type=float)
    runp.add_argument("--adapt-thresholds", action="store_true", help="enable between-period threshold feedback")
    runp.add_argument("--no-ranking", action="store_true", help="review inboxes in arrival order")
    runp.add_argument("--daily-counts", action="store_true", help="append final daily counters to outputs")
    runp.add_argument("--periods-csv", action="store_true", help="also write per-period market summary")
    runp.add_argument("--proposers-csv", help="import proposers from an agent-record CSV")
    runp.add_argument("--reviewers-csv", help="import reviewers from an agent-record CSV")
    runp.set_defaults(func=cmd_run)

    corrp = sub.add_parser("correlate", help="Pearson correlations against an outcome column")
    corrp.add_argument("table")
    corrp.add_argument("--target", default="matches")
    corrp.add_argument("--factors", nargs="+", default=["true_attr", "disclosure", "threshold"])
    corrp.set_defaults(func=cmd_correlate)

    countp = sub.add_parser("count", help="count rows where a column equals a value")
    countp.add_argument("table")
    countp.add_argument("--column", default="true_satisfaction")
    countp.add_argument("--value", default="0")
    countp.set_defaults(func=cmd_count)

    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = _parse_cli_args(argv)
    setup_logging(args.log_level)
    try:
        return args.func(args)
    except (MatchSimError, KeyError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())

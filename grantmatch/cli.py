"""
Grant matching CLI - rank a grant catalog against an organization profile.

Usage:
    # Rank all grants, best first
    python -m grantmatch rank --profile profile.json --grants grants.json

    # Only strong matches under 500k, closing before year end, as JSON
    python -m grantmatch rank --profile profile.json --grants grants.json \
        --level high --max-amount 500000 --deadline-until 2026-12-31 --json

    # Full breakdown for one grant
    python -m grantmatch score --profile profile.json --grants grants.json --grant-id EI-2026-01

    # Show active weights
    python -m grantmatch weights

Profile files hold one JSON object; grant files hold a JSON list (or an
object with a "grants" list). camelCase and snake_case keys are accepted.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from grantmatch.config import get_log_level
from grantmatch.constants import FILTER_LEVEL_THRESHOLDS
from grantmatch.ranking import BatchRanker, SortMode
from grantmatch.schemas.enums import Factor
from grantmatch.schemas.inputs import Grant, OrganizationProfile
from grantmatch.scorers.match_scorer import MatchScorer
from grantmatch.scorers.scoring_registry import get_scoring_config
from grantmatch.utils.logger import configure_global_logging

console = Console()


class InputError(Exception):
    """Raised when an input file cannot be read or validated."""


def _read_json(path: Path):
    if not path.exists():
        raise InputError(f"File not found: {path}")
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}") from e


def load_profile(path: Path) -> OrganizationProfile:
    """Load and validate an organization profile from JSON."""
    try:
        return OrganizationProfile.model_validate(_read_json(path))
    except ValidationError as e:
        raise InputError(f"Invalid profile in {path}:\n{e}") from e


def load_grants(path: Path) -> list[Grant]:
    """Load and validate a grant catalog from JSON."""
    raw = _read_json(path)
    if isinstance(raw, dict):
        raw = raw.get("grants", [])
    if not isinstance(raw, list):
        raise InputError(f"Expected a list of grants in {path}")
    grants = []
    for index, item in enumerate(raw):
        try:
            grants.append(Grant.model_validate(item))
        except ValidationError as e:
            raise InputError(f"Invalid grant #{index} in {path}:\n{e}") from e
    return grants


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid ISO date: {value}") from e


def cmd_rank(args: argparse.Namespace) -> int:
    """Rank a grant catalog and print the shortlist."""
    profile = load_profile(args.profile)
    grants = load_grants(args.grants)

    result = BatchRanker(max_workers=args.workers).rank(profile, grants)
    result = result.filter(
        min_score=args.min_score,
        level=args.level,
        min_amount=args.min_amount,
        max_amount=args.max_amount,
        deadline_until=args.deadline_until,
    ).sort_by(args.sort)
    if args.limit:
        result = result.top(args.limit)

    if args.json:
        payload = {
            "summary": result.summary(),
            "matches": [ranked.match.model_dump(mode="json") for ranked in result],
        }
        print(json.dumps(payload, indent=2))
        return 0

    if not len(result):
        console.print("[yellow]No grants match the given filters[/yellow]")
        return 0

    table = Table(title=f"{len(result)} of {len(grants)} grants")
    table.add_column("#", justify="right")
    table.add_column("Grant")
    table.add_column("Score", justify="right")
    table.add_column("Match")
    table.add_column("Confidence", justify="right")
    table.add_column("Deadline")
    for position, ranked in enumerate(result, start=1):
        table.add_row(
            str(position),
            escape(ranked.grant.title or ranked.grant.id),
            str(ranked.score),
            ranked.match.label,
            f"{ranked.match.confidence}%",
            ranked.grant.deadline.date().isoformat(),
        )
    console.print(table)
    return 0


def cmd_score(args: argparse.Namespace) -> int:
    """Print the full breakdown for a single grant."""
    profile = load_profile(args.profile)
    grants = {grant.id: grant for grant in load_grants(args.grants)}
    grant = grants.get(args.grant_id)
    if grant is None:
        console.print(f"[red]Error: Grant not found: {escape(args.grant_id)}[/red]")
        return 1

    match = MatchScorer().evaluate(profile, grant)

    if args.json:
        print(json.dumps(match.model_dump(mode="json"), indent=2))
        return 0

    console.print(f"[bold]{escape(grant.title or grant.id)}[/bold]: {match.overall_score}/100 ({match.label})")
    console.print(f"Confidence: {match.confidence}%")
    for factor in Factor:
        console.print(f"  {factor.label:<26} {match.breakdown.get(factor):>3}")
    for heading, lines, style in (
        ("Reasoning", match.reasoning, "green"),
        ("Recommendations", match.recommendations, "cyan"),
        ("Risk factors", match.risk_factors, "red"),
    ):
        if lines:
            console.print(f"\n[{style}]{heading}[/{style}]")
            for line in lines:
                console.print(f"  - {line}")
    return 0


def cmd_weights(args: argparse.Namespace) -> int:
    """Print the active scoring weights."""
    config = get_scoring_config()
    if args.json:
        payload = {
            "weights": config.fractional_weights,
            "historical_multiplier": config.historical_multiplier,
        }
        print(json.dumps(payload, indent=2))
        return 0

    for factor in Factor:
        console.print(f"{factor.label:<26} {config.weight(factor):.2f}")
    console.print(f"{'Historical multiplier':<26} {config.historical_multiplier:g}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Grant-to-organization match scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: GRANTMATCH_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # rank command
    rank_parser = subparsers.add_parser("rank", help="Rank a grant catalog for a profile")
    rank_parser.add_argument("--profile", type=Path, required=True, help="Organization profile JSON")
    rank_parser.add_argument("--grants", type=Path, required=True, help="Grant catalog JSON")
    rank_parser.add_argument("--min-score", type=int, help="Minimum overall score")
    rank_parser.add_argument("--level", choices=list(FILTER_LEVEL_THRESHOLDS), help="Named score threshold")
    rank_parser.add_argument("--sort", choices=[m.value for m in SortMode], default=SortMode.SCORE.value)
    rank_parser.add_argument("--min-amount", type=float, help="Keep grants offering at least this amount")
    rank_parser.add_argument("--max-amount", type=float, help="Keep grants starting at or below this amount")
    rank_parser.add_argument("--deadline-until", type=_parse_datetime, help="Latest deadline (ISO date)")
    rank_parser.add_argument("--limit", type=int, help="Maximum grants to show")
    rank_parser.add_argument("--workers", type=int, default=1, help="Scoring threads (default: 1)")
    rank_parser.add_argument("--json", action="store_true", help="Output JSON")

    # score command
    score_parser = subparsers.add_parser("score", help="Show the full breakdown for one grant")
    score_parser.add_argument("--profile", type=Path, required=True, help="Organization profile JSON")
    score_parser.add_argument("--grants", type=Path, required=True, help="Grant catalog JSON")
    score_parser.add_argument("--grant-id", required=True, help="Grant ID to score")
    score_parser.add_argument("--json", action="store_true", help="Output JSON")

    # weights command
    weights_parser = subparsers.add_parser("weights", help="Show active scoring weights")
    weights_parser.add_argument("--json", action="store_true", help="Output JSON")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    # Logs go to stderr so --json output on stdout stays parseable
    configure_global_logging(args.log_level or get_log_level(), phase=args.command, stream=sys.stderr)

    commands = {
        "rank": cmd_rank,
        "score": cmd_score,
        "weights": cmd_weights,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args)
    except (InputError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
tri-pacer CLI.

Triathlon race-pace planning on the terminal.

Usage:
    tri-pacer courses
    tri-pacer plan --course olympic --goal 2:30:00 --t1 2 --t2 3
    tri-pacer plan --course olympic --goal 2:30:00 --t1 2 --t2 3 --swim 1:50 --bike 32 --run 5:00
    tri-pacer plan --course ironman --goal 11:00:00 --tcx race.tcx --start 2025-06-01T07:00:00
    tri-pacer improve --course olympic --swim 1:50 --bike 32 --run 5:00 --gap 150
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .exceptions import TriPacerError
from .export.tcx import TCXEncoder, build_race_laps
from .metrics.formatting import format_clock, format_clock_localized
from .metrics.improvement import suggest_improvement
from .metrics.pacing import calculate_paces
from .models.course import COURSE_DISTANCES, WORLD_RECORDS, course_distances
from .models.pacing import (
    ComparisonStatus,
    CurrentPaceInput,
    CurrentStats,
    GoalTime,
    ImprovementSuggestion,
    PaceResult,
    PacingMode,
)

console = Console()


def parse_clock(time_str: str) -> Tuple[int, int, int]:
    """Parse H:MM:SS or MM:SS into (hours, minutes, seconds)."""
    parts = time_str.strip().split(":")
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid time format: {time_str}") from None

    if len(numbers) == 3:
        hours, minutes, seconds = numbers
    elif len(numbers) == 2:
        hours, (minutes, seconds) = 0, numbers
    else:
        raise argparse.ArgumentTypeError(f"Invalid time format: {time_str}")
    if min(numbers) < 0:
        raise argparse.ArgumentTypeError(f"Time cannot be negative: {time_str}")
    return hours, minutes, seconds


def parse_pace(pace_str: str) -> Tuple[int, int]:
    """Parse a M:SS pace into (minutes, seconds)."""
    hours, minutes, seconds = parse_clock(pace_str)
    if hours:
        raise argparse.ArgumentTypeError(f"Pace must be M:SS: {pace_str}")
    return minutes, seconds


def get_status_color(status: ComparisonStatus) -> str:
    """Get rich color for a comparison status."""
    colors = {
        ComparisonStatus.SLOWER: "red",
        ComparisonStatus.FASTER: "green",
        ComparisonStatus.SAME: "yellow",
    }
    return colors.get(status, "white")


def _clock(seconds: int, locale: str) -> str:
    return format_clock_localized(seconds) if locale == "ko" else format_clock(seconds)


def _pace_inputs(args) -> CurrentPaceInput:
    swim = args.swim or (0, 0)
    run = args.run or (0, 0)
    return CurrentPaceInput(
        swim_minutes=swim[0],
        swim_seconds=swim[1],
        bike_kmh=args.bike or 0,
        run_minutes=run[0],
        run_seconds=run[1],
    )


def render_pace_result(result: PaceResult, goal: GoalTime, locale: str = "en") -> None:
    """Print a pace result as tables."""
    title = f"{result.course.value.title()} - goal {format_clock(result.total_goal_seconds)}"
    console.print(Panel(f"[bold]{title}[/bold]"))

    if result.is_world_record:
        console.print("[bold yellow]Goal is faster than the world record![/bold yellow]")

    table = Table(title="Race Plan", box=box.ROUNDED)
    table.add_column("Segment", style="cyan")
    table.add_column("Pace", style="white")
    table.add_column("Time", style="white", justify="right")

    table.add_row("Swim", f"{result.swim_pace.formatted} /100m", _clock(result.swim_time, locale))
    table.add_row("T1", "", _clock(goal.t1_minutes * 60, locale))
    table.add_row("Bike", f"{result.bike_speed_kmh} km/h", _clock(result.bike_time, locale))
    table.add_row("T2", "", _clock(goal.t2_minutes * 60, locale))
    table.add_row("Run", f"{result.run_pace.formatted} /km", _clock(result.run_time, locale))

    label = "Predicted" if result.mode == PacingMode.PACE_TO_TIME else "Total"
    table.add_row(f"[bold]{label}[/bold]", "", f"[bold]{_clock(result.total_predict_seconds, locale)}[/bold]")
    console.print(table)

    comparison = result.comparison
    if comparison is None:
        return

    console.print()
    console.print(Text(
        f"Total vs goal: {comparison.total_difference_formatted}",
        style=get_status_color(comparison.total_status),
    ))
    console.print(Text(
        f"Race time vs goal: {comparison.race_time_difference_formatted}",
        style=get_status_color(comparison.race_time_status),
    ))

    if comparison.improvement is not None:
        console.print()
        render_improvement(comparison.improvement)


def render_improvement(suggestion: ImprovementSuggestion) -> None:
    """Print an improvement allocation."""
    table = Table(title="Where to Find the Time", box=box.ROUNDED)
    table.add_column("Discipline", style="cyan")
    table.add_column("Shave", style="white")
    table.add_column("New Target", style="green")

    table.add_row("Swim", suggestion.swim.reduce_formatted, f"{suggestion.swim.new_pace_formatted} /100m")
    table.add_row("Bike", suggestion.bike.reduce_formatted,
                  f"{suggestion.bike.new_speed_kmh:.2f} km/h (+{suggestion.bike.speed_increase_kmh:.2f})")
    table.add_row("Run", suggestion.run.reduce_formatted, f"{suggestion.run.new_pace_formatted} /km")
    console.print(table)

    for message in suggestion.messages:
        console.print(f"[dim]{message}[/dim]")


def cmd_courses(args) -> None:
    """Show course distances and world records."""
    table = Table(title="Courses", box=box.ROUNDED)
    table.add_column("Course", style="cyan")
    table.add_column("Swim", justify="right")
    table.add_column("Bike", justify="right")
    table.add_column("Run", justify="right")
    table.add_column("WR Men", justify="right")
    table.add_column("WR Women", justify="right")

    for course, distances in COURSE_DISTANCES.items():
        record = WORLD_RECORDS[course]
        table.add_row(
            course.value,
            f"{distances.swim_km} km",
            f"{distances.bike_km} km",
            f"{distances.run_km} km",
            format_clock(record.men),
            format_clock(record.women),
        )
    console.print(table)


def cmd_plan(args) -> None:
    """Calculate paces for a goal time, optionally against current paces."""
    hours, minutes, seconds = args.goal
    goal = GoalTime(hours=hours, minutes=minutes, seconds=seconds, t1_minutes=args.t1, t2_minutes=args.t2)
    mode = PacingMode(args.mode) if args.mode else None

    result = calculate_paces(args.course, goal, _pace_inputs(args), mode=mode, locale=args.locale)
    render_pace_result(result, goal, locale=args.locale)

    if args.tcx:
        start = datetime.fromisoformat(args.start) if args.start else datetime.now()
        laps = build_race_laps(result, goal.t1_minutes, goal.t2_minutes)
        path = TCXEncoder().encode_to_file(start, laps, Path(args.tcx))
        console.print(f"\n[green]Wrote training log to {path}[/green]")


def cmd_improve(args) -> None:
    """Allocate a time gap across disciplines from current paces."""
    stats = CurrentStats.from_paces(course_distances(args.course), _pace_inputs(args))
    render_improvement(suggest_improvement(stats, args.gap))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tri-pacer",
        description="tri-pacer - triathlon race-pace planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tri-pacer courses
  tri-pacer plan --course olympic --goal 2:30:00 --t1 2 --t2 3
  tri-pacer plan --course olympic --goal 2:30:00 --swim 1:50 --bike 32 --run 5:00
  tri-pacer improve --course olympic --swim 1:50 --bike 32 --run 5:00 --gap 150
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("courses", help="Show course distances and world records")

    def add_pace_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--swim", type=parse_pace, help="Swim pace per 100 m (M:SS)")
        p.add_argument("--bike", type=float, help="Bike speed in km/h")
        p.add_argument("--run", type=parse_pace, help="Run pace per km (M:SS)")

    plan_p = subparsers.add_parser("plan", help="Calculate paces for a goal time")
    plan_p.add_argument("--course", "-c", default="olympic", help="olympic or ironman")
    plan_p.add_argument("--goal", "-g", type=parse_clock, required=True, help="Goal time (H:MM:SS)")
    plan_p.add_argument("--t1", type=int, default=0, help="T1 minutes")
    plan_p.add_argument("--t2", type=int, default=0, help="T2 minutes")
    add_pace_args(plan_p)
    plan_p.add_argument("--mode", choices=[m.value for m in PacingMode], help="Force a pacing mode")
    plan_p.add_argument("--locale", choices=["en", "ko"], default="en", help="Output language")
    plan_p.add_argument("--tcx", type=str, help="Write the plan as a TCX training log")
    plan_p.add_argument("--start", type=str, help="Race start for the TCX log (ISO 8601)")

    improve_p = subparsers.add_parser("improve", help="Allocate a time gap across disciplines")
    improve_p.add_argument("--course", "-c", default="olympic", help="olympic or ironman")
    add_pace_args(improve_p)
    improve_p.add_argument("--gap", type=float, required=True, help="Seconds to find")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "courses": cmd_courses,
        "plan": cmd_plan,
        "improve": cmd_improve,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        command(args)
    except (TriPacerError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

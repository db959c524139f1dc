"""Finesse trainer CLI: table lookups, finesse checks, progress and drills."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any

import typer

from finesse_trainer.application.config import AppConfig, resolve_config
from finesse_trainer.application.factory import get_practice_session, get_progress_service
from finesse_trainer.application.finesse.comparator import compare_moves, is_valid_move_prefix
from finesse_trainer.application.finesse.table import default_table
from finesse_trainer.application.practice import PracticeMode
from finesse_trainer.application.progress.service import LearningProgressService
from finesse_trainer.domain.models import DropEvent, FinesseTarget
from finesse_trainer.domain.pieces import (
    MoveSequenceSet,
    PieceType,
    create_pattern_id,
    format_moves,
    parse_moves,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="finesse: Tetris finesse trainer with spaced-repetition practice.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage finesse trainer configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _set_verbosity(verbose: int) -> None:
    if verbose > 0:
        logging.getLogger().setLevel(logging.DEBUG)


def _resolve(ctx: typer.Context, **overrides: Any) -> AppConfig:
    base = dict((ctx.obj or {}).get("overrides", {}))
    base.update(overrides)
    config = resolve_config(base)
    _set_verbosity(config.verbose)
    logger.debug(f"Using progress file {config.progress_file}")
    return config


def _service(ctx: typer.Context) -> LearningProgressService:
    return get_progress_service(_resolve(ctx))


def _format_set(moves: MoveSequenceSet) -> str:
    return " | ".join(format_moves(seq) for seq in moves)


def _describe(target: FinesseTarget) -> str:
    return (
        f"{target.piece.value} at column {target.column}, rotation {target.rotation} "
        f"({create_pattern_id(target.piece, target.column, target.rotation)})"
    )


def _parse_moves_arg(tokens: list[str]):
    try:
        return parse_moves(tokens)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding progress data.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for reproducible selection.")] = None,
):
    """Global settings for finesse."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"data_dir": data_dir, "seed": seed, "verbose": verbose or None}
    _set_verbosity(verbose)


# ---------------------------------------------------------------------------
# Finesse table commands
# ---------------------------------------------------------------------------


@app.command()
def table(
    piece: Annotated[PieceType, typer.Argument(case_sensitive=False, help="Piece type.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the optimal finesse for every placement of a piece."""
    layers = default_table().layers(piece)

    if json_output:
        data = [
            {
                "rotation": layer.rotation,
                "columns": [[[m.value for m in seq] for seq in col] for col in layer.columns],
            }
            for layer in layers
        ]
        typer.echo(json.dumps({"piece": piece.value, "layers": data}, indent=2))
        return

    for layer in layers:
        typer.secho(f"{piece.value} rotation {layer.rotation}", bold=True)
        for column, moves in enumerate(layer.columns):
            typer.echo(f"  col {column}: {_format_set(moves)}")


@app.command()
def check(
    piece: Annotated[PieceType, typer.Argument(case_sensitive=False, help="Piece type.")],
    column: Annotated[int, typer.Argument(help="Target column (leftmost filled cell).")],
    rotation: Annotated[int, typer.Argument(help="Target rotation (0-3).")],
    moves: Annotated[list[str], typer.Argument(help="Played moves, e.g. DL DROP.")],
    prefix: Annotated[
        bool, typer.Option("--prefix", help="Check that the moves can still be optimal.")
    ] = False,
):
    """Check whether played moves are finesse-correct for a placement."""
    target = default_table().resolve_pattern(create_pattern_id(piece, column, rotation))
    if target is None:
        raise typer.BadParameter(
            f"No finesse entry for {piece.value} column {column} rotation {rotation}"
        )

    played = _parse_moves_arg(moves)
    ok = is_valid_move_prefix(played, target.moves) if prefix else compare_moves(played, target.moves)

    if ok:
        typer.secho("Correct" if not prefix else "Valid prefix", fg="green")
        return

    typer.secho("Incorrect" if not prefix else "Not a valid prefix", fg="red")
    typer.echo(f"Optimal: {_format_set(target.moves)}")
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Learning progress commands
# ---------------------------------------------------------------------------


@app.command("next")
def next_pattern(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the pattern the scheduler would practice next."""
    target = _service(ctx).select_next_learning_pattern()
    if target is None:
        typer.secho("Nothing to practice.", fg="yellow")
        return

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "piece": target.piece.value,
                    "column": target.column,
                    "rotation": target.rotation,
                    "moves": [[m.value for m in seq] for seq in target.moves],
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Next: {_describe(target)}")
    typer.echo(f"Optimal: {_format_set(target.moves)}")


@app.command()
def record(
    ctx: typer.Context,
    piece: Annotated[PieceType, typer.Argument(case_sensitive=False, help="Piece type.")],
    column: Annotated[int, typer.Argument(help="Target column.")],
    rotation: Annotated[int, typer.Argument(help="Target rotation.")],
    correct: Annotated[
        bool, typer.Option("--correct/--wrong", help="Whether the placement was correct.")
    ],
):
    """Record the outcome of a placement."""
    service = _service(ctx)
    try:
        card = service.record_result(piece, column, rotation, correct)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    stats = service.get_pattern_stats(card.pattern_id)
    typer.echo(
        f"{card.pattern_id}: {card.success_count}/{card.attempts} correct, "
        f"next due at repetition {card.next_due_at}"
        + (" (mastered)" if stats and stats.mastered else "")
    )


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show overall mastery statistics."""
    overall = _service(ctx).get_overall_stats()

    if json_output:
        typer.echo(json.dumps(asdict(overall), indent=2))
        return

    typer.echo(f"Patterns: {overall.total_patterns}")
    typer.secho(f"  Mastered:    {overall.mastered_count}", fg="green")
    typer.secho(f"  In progress: {overall.in_progress_count}", fg="yellow")
    typer.echo(f"  Not started: {overall.not_started_count}")
    typer.echo(
        f"Accuracy: {overall.overall_accuracy:.1%} over {overall.total_attempts} attempts"
    )


@app.command()
def grid(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show accuracy per piece, rotation and column."""
    mastery = _service(ctx).get_mastery_grid()

    if json_output:
        typer.echo(json.dumps(asdict(mastery), indent=2))
        return

    for piece in mastery.pieces:
        for rot in piece.rotations:
            cells = []
            for cell in rot.columns:
                if cell.accuracy < 0:
                    cells.append("  -- ")
                else:
                    mark = "*" if cell.mastered else " "
                    cells.append(f"{cell.accuracy * 100:4.0f}{mark}")
            typer.echo(f"{piece.piece.value} r{rot.rotation} " + "".join(cells))


@app.command()
def history(ctx: typer.Context):
    """List finished practice sessions, newest first."""
    sessions = _service(ctx).progress.session_history
    if not sessions:
        typer.echo("No sessions recorded.")
        return

    for rec in sessions:
        typer.echo(
            f"{rec.timestamp}: {rec.correct_attempts}/{rec.total_attempts} "
            f"({rec.accuracy:.0%}), {rec.patterns_reviewed} patterns, "
            f"{rec.new_patterns_mastered} newly mastered"
        )


@app.command()
def drill(
    ctx: typer.Context,
    count: Annotated[int, typer.Option(help="Number of drops to practice.", min=1)] = 10,
    mode: Annotated[PracticeMode | None, typer.Option(help="Practice mode.")] = None,
    retry_on_fault: Annotated[
        bool | None,
        typer.Option("--retry-on-fault/--no-retry-on-fault", help="Repeat failed targets."),
    ] = None,
    master_mode: Annotated[
        bool | None,
        typer.Option("--master-mode/--no-master-mode", help="Hide the optimal moves."),
    ] = None,
):
    """Practice from the terminal by typing the inputs for each target."""
    config = _resolve(
        ctx,
        mode=mode.value if mode else None,
        retry_on_fault=retry_on_fault,
        master_mode=master_mode,
    )
    if config.mode == PracticeMode.FREE_STACK.value:
        typer.secho("Free stacking has no targets to drill.", fg="yellow")
        raise typer.Exit(2)

    session = get_practice_session(config)

    for _ in range(count):
        target = session.target or session.next_target()
        if target is None:
            typer.secho("Nothing to practice.", fg="yellow")
            break

        typer.secho(f"\nPlace {_describe(target)}", bold=True)
        while True:
            raw = typer.prompt("Moves")
            try:
                played = parse_moves(raw)
                break
            except ValueError as e:
                typer.secho(str(e), fg="red")

        outcome = session.handle_drop(
            DropEvent(
                piece=target.piece,
                landing_column=target.column,
                landing_rotation=target.rotation,
                moves=played,
            )
        )
        if outcome.correct:
            typer.secho(f"Correct (combo {session.score.combo})", fg="green")
        else:
            if config.master_mode:
                typer.secho("Incorrect.", fg="red")
            else:
                typer.secho(f"Incorrect. Optimal: {_format_set(target.moves)}", fg="red")
            if outcome.retry:
                typer.echo("Retrying the same target.")

    score = session.score
    typer.echo(
        f"\n{score.correct}/{score.total} correct, top combo {score.top_combo}, "
        f"{score.keys_per_piece:.2f} keys per piece"
    )
    perf = session.difficulty.state
    typer.echo(f"Difficulty: {perf.current_difficulty} ({perf.difficulty_tier.value})")

    rec = session.progress.end_session()
    if rec is not None:
        typer.echo(f"Session saved: {rec.patterns_reviewed} patterns reviewed")


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Erase all learning progress."""
    if not force:
        typer.confirm("Erase all learning progress?", abort=True)
    _service(ctx).reset_progress()
    typer.secho("Progress reset.", fg="green")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()

"""CLI entry points: chat-sessions dir, list, load, chat-save, chat-load, status."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from .config import Config
from .errors import SessionError


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Record, list, and replay chat session transcripts."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", Config())


def _report(error: SessionError) -> None:
    click.echo(f"Error: {error}", err=True)


@cli.command("dir")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def set_dir(ctx: click.Context, path: Path) -> None:
    """Set the sessions directory."""
    config = ctx.obj["config"]

    path = path.expanduser()
    if not path.is_dir():
        click.echo("Error: The specified path is not a valid directory.", err=True)
        return

    resolved = path.resolve()
    try:
        config.save_session_dir(resolved)
    except OSError as exc:
        click.echo(f"Error: Could not save the sessions directory: {exc}", err=True)
        return
    click.echo(f"Session directory set to: {resolved}")


@cli.command("list")
@click.pass_context
def list_sessions(ctx: click.Context) -> None:
    """List all sessions in chronological order."""
    from .store import list_session_files, resolve_directory

    config = ctx.obj["config"]

    try:
        directory = resolve_directory(config)
        sessions = list_session_files(directory, config.session_suffix)
    except SessionError as e:
        _report(e)
        return
    except OSError as e:
        click.echo(f"Error: Could not list sessions: {e}", err=True)
        return

    if not sessions:
        click.echo("No sessions found in the directory.")
        return

    click.echo("Available sessions:")
    for session in sessions:
        modified = session.modified.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        click.echo(f"- {session.name} ({modified})")


def _show_session(config: Config, filename: str) -> None:
    from .render import TranscriptRenderer
    from .store import read_session, resolve_directory
    from .transcripts.normalize import load_transcript

    try:
        directory = resolve_directory(config)
        raw = read_session(directory, filename)
        transcript = load_transcript(raw, source=Path(filename).name)
    except SessionError as e:
        _report(e)
        return

    for line in TranscriptRenderer(transcript):
        click.echo(line)


@cli.command()
@click.argument("filename")
@click.pass_context
def load(ctx: click.Context, filename: str) -> None:
    """Load and display a session."""
    _show_session(ctx.obj["config"], filename)


@cli.command("chat-load")
@click.argument("filename")
@click.pass_context
def chat_load(ctx: click.Context, filename: str) -> None:
    """Load and display a saved chat session."""
    _show_session(ctx.obj["config"], filename)


@cli.command("chat-save")
@click.option(
    "--script",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON array of [role, text] pairs to record instead of prompting",
)
@click.pass_context
def chat_save(ctx: click.Context, script: Path | None) -> None:
    """Interactively record and save a new chat session.

    Turns alternate between USER and GEMINI, starting with USER. Type DONE
    (any case) or send end-of-input to finish. Nothing is written until
    collection ends, and nothing at all if no turns were entered.
    """
    from .record import Recorder, record_pairs, save_recording
    from .store import resolve_directory

    config = ctx.obj["config"]

    try:
        directory = resolve_directory(config)
    except SessionError as e:
        _report(e)
        return

    if script:
        try:
            pairs = _load_script(script)
        except (OSError, ValueError) as e:
            click.echo(f"Error: Invalid script {script}: {e}", err=True)
            return
        transcript = record_pairs(pairs)
    else:
        stdin = click.get_text_stream("stdin")

        def read_line() -> str | None:
            line = stdin.readline()
            if not line:
                return None
            return line.rstrip("\r\n")

        recorder = Recorder()
        transcript = recorder.run_interactive(read_line, click.echo)

    if transcript is None:
        click.echo("\nNo messages were entered. Save operation cancelled.")
        return

    try:
        path = save_recording(directory, transcript)
    except SessionError as e:
        _report(e)
        return
    click.echo(f"\nSession saved successfully to: {path.name}")


def _load_script(path: Path) -> list[tuple[str, str]]:
    """Read ``[[role, text], ...]`` from a JSON file."""
    data = json.loads(path.read_text())
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")

    pairs = []
    for index, item in enumerate(data):
        if (
            not isinstance(item, list)
            or len(item) != 2
            or not all(isinstance(value, str) for value in item)
        ):
            raise ValueError(f"entry {index} is not a [role, text] pair")
        pairs.append((item[0], item[1]))
    return pairs


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show where configuration lives and the state of the sessions directory."""
    from .store import list_session_files

    config = ctx.obj["config"]

    click.echo("Chat Sessions Status")
    click.echo("=" * 40)

    click.echo(f"\nConfig file: {config.config_path}")
    click.echo(f"  Exists: {config.config_path.exists()}")

    directory = config.load_session_dir()
    if directory is None:
        click.echo("\nSessions dir: not configured (run 'chat-sessions dir <path>')")
        return

    click.echo(f"\nSessions dir: {directory}")
    if not directory.is_dir():
        click.echo("  Exists: False")
        return
    try:
        sessions = list_session_files(directory, config.session_suffix)
    except OSError as e:
        click.echo(f"Error: Could not list sessions: {e}", err=True)
        return
    click.echo(f"  Sessions: {len(sessions)}")
    if sessions:
        click.echo(f"  Latest: {sessions[-1].name}")

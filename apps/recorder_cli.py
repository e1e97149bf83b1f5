from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from config.paths import get_paths
from core.engine import GestureEngine
from core.formatting import describe_sources, format_duration
from core.sanitizer import is_number
from core.timing import NS_PER_MS
from data_collection.event_writer import JsonlWriter, iter_jsonl
from sdk import events as topics
from sdk.config import AppConfig
from sdk.logging import configure_logging, get_logger
from sdk.runtime import build_engine, make_parameters, make_store

logger = get_logger("cli")

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Record, manage and replay control gestures.")


def _fail(message: str) -> None:
    typer.echo(f"[gesturedeck] {message}", err=True)
    raise typer.Exit(code=1)


def _engine(ctx: typer.Context, **kwargs: Any) -> GestureEngine:
    opts: Dict[str, Any] = ctx.obj
    config: AppConfig = opts["config"]
    return build_engine(
        config,
        store=make_store(config, path=opts["store"]),
        parameters=make_parameters(opts["parameters"], config=config),
        **kwargs,
    )


@app.callback()
def main(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(None, "--store", help="Library file (defaults to the data root store)"),
    parameters: Optional[Path] = typer.Option(
        None, "--parameters", help="JSON file of parameter definitions: {id: {min, max, type}}"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING..."),
) -> None:
    """Entry point for the gesture library CLI."""

    config = AppConfig()
    paths = get_paths(force_refresh=True)
    configure_logging(log_level or config.log_level, paths.log_file)
    ctx.obj = {"config": config, "paths": paths, "store": store, "parameters": parameters}


@app.command("list")
def list_gestures(ctx: typer.Context) -> None:
    """List takes, newest first; the selected one is starred."""

    engine = _engine(ctx)
    if not engine.recordings:
        typer.echo("No gestures recorded")
        return
    for summary in engine.summaries():
        mark = "*" if summary.id == engine.selected_id else " "
        typer.echo(
            f"{mark} {summary.id}  {summary.name}  {format_duration(summary.duration)}  "
            f"{summary.event_count} events  {describe_sources(summary.sources)}"
        )


@app.command()
def show(ctx: typer.Context, recording_id: str = typer.Argument(..., help="Take id")) -> None:
    """Print one take as JSON."""

    recording = _engine(ctx).library.get(recording_id)
    if recording is None:
        _fail(f"No gesture {recording_id!r}")
    typer.echo(json.dumps(recording.to_dict(), indent=2))


@app.command()
def rename(ctx: typer.Context, recording_id: str, name: str) -> None:
    engine = _engine(ctx)
    if not engine.rename(recording_id, name):
        _fail(f"Could not rename {recording_id!r}")
    typer.echo(engine.status_message)


@app.command()
def duplicate(ctx: typer.Context, recording_id: str) -> None:
    copy = _engine(ctx).duplicate(recording_id)
    if copy is None:
        _fail(f"No gesture {recording_id!r}")
    typer.echo(f"{copy.id}  {copy.name}")


@app.command()
def delete(ctx: typer.Context, recording_id: str) -> None:
    removed = _engine(ctx).delete(recording_id)
    if removed is None:
        _fail(f"No gesture {recording_id!r}")
    typer.echo(f"Deleted {removed.name}")


@app.command()
def clear(ctx: typer.Context, yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation")) -> None:
    """Remove every take."""

    engine = _engine(ctx)
    if not engine.recordings:
        typer.echo("Library already empty")
        return
    if not yes:
        typer.confirm(f"Delete all {len(engine.recordings)} gestures?", abort=True)
    engine.clear()
    typer.echo(engine.status_message)


@app.command()
def export(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(None, help="Target file or directory (defaults to the exports folder)"),
) -> None:
    """Write the library as {"gestures": [...]} JSON."""

    target = _engine(ctx).export_to_path(path or ctx.obj["paths"].export_path())
    if target is None:
        _fail("Nothing to export")
    typer.echo(str(target))


@app.command("import")
def import_gestures(ctx: typer.Context, path: Path = typer.Argument(..., help="Exported library JSON")) -> None:
    """Replace the library with an exported document."""

    engine = _engine(ctx)
    if not engine.import_path(path):
        _fail(f"Failed to import gestures from {path}")
    typer.echo(f"Imported {len(engine.recordings)} gestures")


@app.command()
def record(
    ctx: typer.Context,
    source: Path = typer.Option(..., "--from", help="JSONL file of {time, type, payload} lines"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Name for the new take"),
) -> None:
    """Build a take by replaying captured events through a capture session."""

    lines = []
    for obj in iter_jsonl(source):
        time = obj.get("time")
        lines.append((float(time) if is_number(time) and time > 0 else 0.0, obj))
    lines.sort(key=lambda item: item[0])

    # the capture clock follows the file's timestamps
    cursor = {"ns": 0}
    engine = _engine(ctx, clock=lambda: cursor["ns"])
    before = {recording.id for recording in engine.recordings}
    engine.start_recording()
    for time, obj in lines:
        cursor["ns"] = int(time * NS_PER_MS)
        if not engine.capture_event(obj.get("type") or "custom", obj.get("payload")):
            break
    if engine.is_recording:
        engine.stop_recording()

    take = engine.library.selected
    if take is None or take.id in before:
        _fail(f"No events captured from {source}")
    if name:
        engine.rename(take.id, name)
        take = engine.library.get(take.id)
    logger.info("Recorded %s from %s", take.id, source)
    typer.echo(f"{take.id}  {take.name}  {take.event_count} events  {format_duration(take.duration)}")


async def _run_playback(engine: GestureEngine, recording_id: str, log: Optional[JsonlWriter]) -> bool:
    finished = asyncio.Event()
    outcome = {"completed": False}

    def _on_event(payload: Any) -> None:
        event = payload.get("event", {})
        typer.echo(f"{event.get('time', 0):>9.1f}ms  {event.get('type')}  {json.dumps(event.get('payload', {}))}")
        if log is not None:
            log.write(payload)

    def _on_complete(_payload: Any) -> None:
        outcome["completed"] = True
        finished.set()

    engine.bus.on(topics.PLAYBACK_EVENT, _on_event)
    engine.bus.on(topics.PLAYBACK_COMPLETE, _on_complete)
    engine.bus.on(topics.PLAYBACK_STOP, lambda _payload: finished.set())

    if not engine.play(recording_id):
        return False
    try:
        await finished.wait()
    finally:
        engine.stop_playback()
    return outcome["completed"]


@app.command()
def play(
    ctx: typer.Context,
    recording_id: str = typer.Argument(..., help="Take id"),
    log: Optional[Path] = typer.Option(None, "--log", help="Append applied playback events to this JSONL file"),
) -> None:
    """Replay a take in real time against the parameter registry."""

    engine = _engine(ctx)
    recording = engine.library.get(recording_id)
    if recording is None or not recording.events:
        _fail(f"Nothing to play for {recording_id!r}")
    typer.echo(f"Playing {recording.name} ({format_duration(recording.duration)})")

    writer = JsonlWriter(log, flush_every=25) if log else None
    try:
        completed = asyncio.run(_run_playback(engine, recording_id, writer))
    except KeyboardInterrupt:
        logger.info("Playback of %s interrupted", recording_id)
        completed = False
    finally:
        if writer is not None:
            writer.close()
        engine.destroy()
    typer.echo("Playback finished" if completed else "Playback stopped")


if __name__ == "__main__":
    app()

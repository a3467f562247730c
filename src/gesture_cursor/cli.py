"""gesture-cursor CLI.

Usage:
    gesture-cursor serve         - Start the WebSocket tick server
    gesture-cursor replay        - Run a landmark recording through a session
    gesture-cursor inspect       - Summarize a landmark recording
    gesture-cursor init-config   - Write the default tracker config as YAML
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from gesture_cursor.config import TrackerConfig

app = typer.Typer(
    name="gesture-cursor",
    help="Hand gesture classification and cursor smoothing.",
    add_completion=False,
)


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Optional[str]) -> TrackerConfig:
    if not path:
        return TrackerConfig()
    try:
        return TrackerConfig.from_yaml(path)
    except (OSError, ValueError) as e:
        typer.echo(f"Invalid config {path}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8765, help="Port"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to tracker YAML config"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Start the WebSocket tick server."""
    import uvicorn
    from gesture_cursor.server import app as fastapi_app, state

    _setup_logging(log_level)
    state.config = _load_config(config)
    if config:
        typer.echo(f"Loaded config: {config}")

    typer.echo(f"Starting gesture-cursor server on {host}:{port}")
    uvicorn.run(fastapi_app, host=host, port=port, log_level=log_level)


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Recording file (.json or .npz)"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to tracker YAML config"),
    realtime: bool = typer.Option(False, help="Replay at recorded speed"),
    speed: float = typer.Option(1.0, help="Speed multiplier for --realtime"),
    as_json: bool = typer.Option(False, "--json", help="Print every tick as a JSON line"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Run a recorded session through the tracker and report gesture changes."""
    from gesture_cursor.pipeline import GestureSession
    from gesture_cursor.recorder import SessionPlayer

    _setup_logging(log_level)
    path = Path(recording)
    if not path.exists():
        typer.echo(f"Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    player = SessionPlayer.load(path)
    session = GestureSession(_load_config(config))
    frames = player.play_realtime(speed) if realtime else player.play()

    for frame in frames:
        result = session.process_tick(frame.landmarks)
        if as_json:
            typer.echo(json.dumps({"timestamp": frame.timestamp, **result.to_dict()}))
        elif result.event.changed:
            pos = result.cursor.position
            where = f" at ({pos.x:.3f}, {pos.y:.3f})" if pos else ""
            typer.echo(
                f"[{frame.timestamp:7.3f}s] tick {result.event.tick}: "
                f"{result.event.previous.value} -> {result.event.gesture.value}{where}"
            )

    if not as_json:
        stats = session.stats
        typer.echo(f"\n{stats.total_ticks} ticks, {stats.gesture_changes} gesture changes, "
                   f"{stats.missing_frames} frames without a hand")
        for name, count in sorted(stats.gesture_counts.items()):
            typer.echo(f"   {name:<10} {count}")


@app.command()
def inspect(
    recording: str = typer.Argument(..., help="Recording file (.json or .npz)"),
):
    """Summarize a recording."""
    from gesture_cursor.recorder import SessionPlayer

    path = Path(recording)
    if not path.exists():
        typer.echo(f"Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    player = SessionPlayer.load(path)
    typer.echo(f"Frames:    {player.frame_count}")
    typer.echo(f"Duration:  {player.duration:.2f}s")
    typer.echo(f"Hand seen: {player.presence_rate:.1%}")


@app.command("init-config")
def init_config(
    path: str = typer.Argument("tracker.yml", help="Where to write the config"),
    force: bool = typer.Option(False, help="Overwrite an existing file"),
):
    """Write the default tracker configuration as YAML."""
    target = Path(path)
    if target.exists() and not force:
        typer.echo(f"{path} already exists (use --force to overwrite)", err=True)
        raise typer.Exit(1)
    TrackerConfig().to_yaml(target)
    typer.echo(f"Wrote default config to {path}")


def main():
    app()


if __name__ == "__main__":
    main()

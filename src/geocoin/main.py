"""CLI startup entrypoint for geocoin."""

from __future__ import annotations

from pathlib import Path

import typer
from rich import print

from geocoin.adapters import (
    FixedGeolocationProvider,
    GeolocationProvider,
    JsonFileKeyValueStore,
    UnavailableGeolocationProvider,
)
from geocoin.cli import CommandDispatcher, CommandParser, CommandType
from geocoin.config import settings
from geocoin.exceptions import SessionLoadError, UnknownCacheError
from geocoin.models import Direction
from geocoin.session import GameSession
from geocoin.telemetry.logging import configure_logging

app = typer.Typer(help="geocoin world engine entrypoint")


@app.callback()
def _setup() -> None:
    configure_logging(settings.log_level)


def _build_geolocation() -> GeolocationProvider:
    if settings.sensor_lat is not None and settings.sensor_lng is not None:
        return FixedGeolocationProvider(lat=settings.sensor_lat, lng=settings.sensor_lng)
    return UnavailableGeolocationProvider("No sensor position configured (set GEOCOIN_SENSOR_LAT/LNG).")


def _open_session(*, load: bool = True) -> GameSession:
    session = GameSession.from_settings(settings, store=JsonFileKeyValueStore(Path(settings.state_path)))
    if not load:
        return session
    try:
        session.load()
    except SessionLoadError as exc:
        print({"error": str(exc), "hint": "Run `geocoin reset --yes` to start over."})
        raise typer.Exit(code=1)
    return session


def _build_dispatcher(session: GameSession) -> CommandDispatcher:
    return CommandDispatcher(
        session,
        geolocation=_build_geolocation(),
        preview_size=settings.cache_preview_size,
    )


def _summary(session: GameSession) -> dict:
    return {
        "status": session.status_text(),
        "position": {"lat": session.position.lat, "lng": session.position.lng},
        "cell": session.grid.cell_for_point(session.position).key,
        "nearby_caches": len(session.active_caches),
    }


@app.command("config")
def show_config() -> None:
    """Show runtime configuration."""
    print(settings.model_dump())


@app.command()
def status() -> None:
    """Show the player's points and position."""
    print(_summary(_open_session()))


@app.command()
def caches() -> None:
    """List caches in view with their newest tokens."""
    session = _open_session()
    print(_build_dispatcher(session).describe_caches())


@app.command()
def move(direction: Direction = typer.Argument(..., help="north/south/east/west")) -> None:
    """Step one tile and save."""
    session = _open_session()
    session.move(direction)
    session.save()
    print(_summary(session))


@app.command()
def goto(
    lat: float = typer.Argument(..., help="Latitude in degrees"),
    lng: float = typer.Argument(..., help="Longitude in degrees"),
) -> None:
    """Jump to a position and save."""
    session = _open_session()
    session.set_position(lat, lng, dramatic=True)
    session.save()
    print(_summary(session))


@app.command()
def sensor() -> None:
    """Move to the position reported by the configured sensor."""
    session = _open_session()
    if not session.locate(_build_geolocation()):
        print({"error": "Geolocation unavailable; position unchanged."})
        raise typer.Exit(code=1)
    session.save()
    print(_summary(session))


def _transfer(command: CommandType, cache_key: str) -> None:
    session = _open_session()
    try:
        result = session.collect(cache_key) if command == CommandType.COLLECT else session.deposit(cache_key)
    except UnknownCacheError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    session.save()
    print(
        {
            "cache": result.cache_key,
            "moved": result.moved,
            "token": result.token.key if result.token else None,
            "reason": result.reason,
            "status": session.status_text(),
        }
    )


@app.command()
def collect(cache_key: str = typer.Argument(..., help='Cache key, e.g. "3,-4"')) -> None:
    """Take the top token from a nearby cache."""
    _transfer(CommandType.COLLECT, cache_key)


@app.command()
def deposit(cache_key: str = typer.Argument(..., help='Cache key, e.g. "3,-4"')) -> None:
    """Put your top token into a nearby cache."""
    _transfer(CommandType.DEPOSIT, cache_key)


@app.command()
def reset(yes: bool = typer.Option(False, "--yes", help="Confirm wiping all progress")) -> None:
    """Wipe the saved game and return to the origin."""
    if not yes:
        print({"error": "Reset not confirmed; pass --yes."})
        raise typer.Exit(code=1)
    session = _open_session(load=False)
    session.reset()
    print(_summary(session))


@app.command()
def play() -> None:
    """Run an interactive command loop; progress is saved on exit."""
    session = _open_session()
    dispatcher = _build_dispatcher(session)
    parser = CommandParser()
    print({"play": "started", "hint": "Type north/south/east/west, collect <i,j>, deposit <i,j>, caches, quit."})
    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            command = parser.parse(line)
            print(dispatcher.handle(command))
            if command.type == CommandType.QUIT:
                break
    finally:
        session.save()


if __name__ == "__main__":
    app()

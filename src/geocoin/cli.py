"""Text command parsing and dispatch onto a game session."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum

from geocoin.adapters.geolocation import GeolocationProvider, UnavailableGeolocationProvider
from geocoin.exceptions import InvalidDirectionError, SessionLoadError, UnknownCacheError
from geocoin.models import Direction
from geocoin.session import GameSession


class CommandType(str, Enum):
    MOVE = "move"
    GOTO = "goto"
    SENSOR = "sensor"
    COLLECT = "collect"
    DEPOSIT = "deposit"
    STATUS = "status"
    CACHES = "caches"
    RESET = "reset"
    SAVE = "save"
    LOAD = "load"
    QUIT = "quit"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class ParsedCommand:
    type: CommandType
    arguments: tuple[str, ...] = ()


_DIRECTION_ALIASES = {
    "n": Direction.NORTH,
    "s": Direction.SOUTH,
    "e": Direction.EAST,
    "w": Direction.WEST,
    "north": Direction.NORTH,
    "south": Direction.SOUTH,
    "east": Direction.EAST,
    "west": Direction.WEST,
}
_CACHE_KEY = re.compile(r"^-?\d+\s*,\s*-?\d+$")
_BARE_COMMANDS = {
    CommandType.SENSOR,
    CommandType.STATUS,
    CommandType.CACHES,
    CommandType.RESET,
    CommandType.SAVE,
    CommandType.LOAD,
}


def _is_coordinate(value: str) -> bool:
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


class CommandParser:
    """Turns one line such as ``collect 3,-4`` or ``n`` into a ``ParsedCommand``."""

    def parse(self, line: str) -> ParsedCommand:
        words = line.strip().lower().split()
        if not words:
            return ParsedCommand(CommandType.UNKNOWN)

        head, rest = words[0], words[1:]
        if head in _DIRECTION_ALIASES and not rest:
            return ParsedCommand(CommandType.MOVE, (_DIRECTION_ALIASES[head].value,))
        if head == "move" and len(rest) == 1:
            return ParsedCommand(CommandType.MOVE, (rest[0],))
        if head in ("collect", "deposit"):
            key = "".join(rest)
            if _CACHE_KEY.match(key):
                return ParsedCommand(CommandType(head), (key.replace(" ", ""),))
            return ParsedCommand(CommandType.UNKNOWN, tuple(words))
        if head == "goto":
            coords = [word.strip(",") for word in rest]
            if len(coords) == 2 and all(_is_coordinate(value) for value in coords):
                return ParsedCommand(CommandType.GOTO, tuple(coords))
            return ParsedCommand(CommandType.UNKNOWN, tuple(words))
        if head in ("quit", "exit"):
            return ParsedCommand(CommandType.QUIT)
        if not rest and head in {member.value for member in _BARE_COMMANDS}:
            return ParsedCommand(CommandType(head))
        return ParsedCommand(CommandType.UNKNOWN, tuple(words))


class CommandDispatcher:
    """Applies parsed commands to a session and returns a one-line reply."""

    def __init__(
        self,
        session: GameSession,
        *,
        geolocation: GeolocationProvider | None = None,
        parser: CommandParser | None = None,
        preview_size: int = 5,
    ) -> None:
        self._session = session
        self._geolocation = geolocation or UnavailableGeolocationProvider()
        self._parser = parser or CommandParser()
        self._preview_size = preview_size

    def handle_line(self, line: str) -> str:
        return self.handle(self._parser.parse(line))

    def handle(self, command: ParsedCommand) -> str:
        session = self._session
        if command.type == CommandType.MOVE:
            try:
                session.move(command.arguments[0])
            except InvalidDirectionError:
                return f"Unknown direction {command.arguments[0]!r}; use north, south, east or west."
            return self._describe_position()

        if command.type == CommandType.GOTO:
            lat, lng = (float(value) for value in command.arguments)
            session.set_position(lat, lng, dramatic=True)
            return self._describe_position()

        if command.type == CommandType.SENSOR:
            if not session.locate(self._geolocation):
                return "Could not read your location; position unchanged."
            return self._describe_position()

        if command.type in (CommandType.COLLECT, CommandType.DEPOSIT):
            key = command.arguments[0]
            try:
                if command.type == CommandType.COLLECT:
                    result = session.collect(key)
                else:
                    result = session.deposit(key)
            except UnknownCacheError as exc:
                return str(exc)
            if not result.moved:
                return f"Nothing to {command.type.value}: {result.reason}."
            return f"{command.type.value.capitalize()}ed {result.token.key}. {session.status_text()}"

        if command.type == CommandType.STATUS:
            return f"{session.status_text()} at {session.position.lat:.6f}, {session.position.lng:.6f}"

        if command.type == CommandType.CACHES:
            return self.describe_caches()

        if command.type == CommandType.RESET:
            session.reset()
            return "Game reset."

        if command.type == CommandType.SAVE:
            session.save()
            return "Game saved."

        if command.type == CommandType.LOAD:
            try:
                loaded = session.load()
            except SessionLoadError as exc:
                return f"Saved game is unreadable; nothing changed. {exc}"
            return "Game loaded." if loaded else "No saved game found."

        if command.type == CommandType.QUIT:
            return "Bye."

        return "Unknown command. Try north/south/east/west, collect <i,j>, deposit <i,j>, caches, status."

    def describe_caches(self) -> str:
        caches = self._session.active_caches
        if not caches:
            return "No caches nearby."
        lines = []
        for key, cache in caches.items():
            preview = ", ".join(token.key for token in cache.preview(self._preview_size))
            lines.append(f'Cache at "{key}" has value {len(cache)}' + (f": {preview}" if preview else ""))
        return "\n".join(lines)

    def _describe_position(self) -> str:
        position = self._session.position
        return f"Now at {position.lat:.6f}, {position.lng:.6f} with {len(self._session.active_caches)} caches nearby."

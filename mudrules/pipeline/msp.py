"""MUD Sound Protocol: `!!SOUND(...)` and `!!MUSIC(...)` tokens in inbound text.

A token names a sound file followed by optional `key=value` parameters:

    !!SOUND(thunder.wav V=80 L=1 P=50 U=http://example.com/sounds/)

Volume is a percentage; a repeat count of -1 or 0 loops the sound. Music
always loops.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from mudrules.sandbox import Capabilities

logger = logging.getLogger(__name__)

_SOUND_TOKEN = re.compile(r"!!(SOUND|MUSIC)\(([^)]+)\)", re.IGNORECASE)

_VOLUME_KEYS = frozenset({"v", "vol", "volume"})
_REPEAT_KEYS = frozenset({"l", "loop", "repeat"})
_PRIORITY_KEYS = frozenset({"p", "priority"})
_URL_KEYS = frozenset({"u", "url"})


@dataclass
class SoundCommand:
    """One sound or music request parsed from a line."""

    kind: str  # "sound" or "music"
    name: str
    volume: Optional[float] = None
    repeat: Optional[int] = None
    priority: Optional[int] = None
    url: Optional[str] = None

    @property
    def loops(self) -> bool:
        return self.kind == "music" or self.repeat in (-1, 0)


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def parse_sound_params(kind: str, params: str) -> Optional[SoundCommand]:
    """Build a command from the text between the parentheses of a token."""
    parts = params.split()
    if not parts:
        return None

    command = SoundCommand(kind=kind, name=parts[0])
    for part in parts[1:]:
        key, _, value = part.partition("=")
        key = key.lower()
        if key in _VOLUME_KEYS:
            volume = _parse_int(value)
            command.volume = volume / 100 if volume is not None else None
        elif key in _REPEAT_KEYS:
            command.repeat = _parse_int(value)
        elif key in _PRIORITY_KEYS:
            command.priority = _parse_int(value)
        elif key in _URL_KEYS:
            command.url = value
    return command


def parse_msp(line: str) -> tuple[str, list[SoundCommand]]:
    """Remove sound tokens from a line.

    Returns:
        The line without its tokens (trimmed) and the commands, in line order
    """
    commands: list[SoundCommand] = []

    def _collect(found: re.Match[str]) -> str:
        command = parse_sound_params(found.group(1).lower(), found.group(2))
        if command is not None:
            commands.append(command)
        return ""

    clean_line, count = _SOUND_TOKEN.subn(_collect, line)
    if not count:
        return line, commands
    return clean_line.strip(), commands


def play_sound_commands(commands: list[SoundCommand], capabilities: Capabilities) -> None:
    """Hand parsed commands to the host's sound capabilities."""
    for command in commands:
        volume = command.volume if command.volume is not None else 1.0
        try:
            if command.loops:
                capabilities.loop_sound(command.name, volume)
            else:
                capabilities.play_sound(command.name, volume, False)
        except Exception as exc:
            logger.error("Sound %s could not be played: %s", command.name, exc)

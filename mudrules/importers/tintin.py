"""TinTin++ configuration import.

Recognized directives (case-insensitive, abbreviable to three letters):

    #action {pattern} {commands} [{priority}]
    #alias  {name} {commands}
    #ticker {name} {commands} {seconds}
    #delay  {seconds} {commands}    or  #delay {name} {commands} {seconds}
    #class  {name} {open|close}

`%0`..`%9` are positional captures, `%*` and `*` are wildcards, and
`#system {player file.wav}` inside a command list plays a sound.
"""

import logging
import re
from typing import Callable, Optional

from mudrules.models import Alias, Timer, Trigger, TriggerType

from .braces import extract_fields
from .context import ParseContext
from .scripts import argument_alias_pattern, build_send, split_commands

logger = logging.getLogger(__name__)

SOURCE_NAME = "TinTin++"

_DIRECTIVE = re.compile(r"^#(\w+)\s*(.*)$", re.DOTALL)
_POSITIONAL = re.compile(r"%(\d)")
_PATTERN_TOKEN = re.compile(r"%\d|%\*|\*")

SOUND_EXTENSIONS = frozenset({".wav", ".mp3", ".ogg", ".flac", ".m4a", ".aac", ".mid", ".midi"})
_SYSTEM_COMMAND = re.compile(r"^#system\s*(?:\{(.+)\}|(.+))$", re.IGNORECASE)
_SOUND_PLAYER = re.compile(
    r"^(?:aplay|play|paplay|mpv|mplayer|vlc|ffplay|sox|afplay|cvlc|powershell.*?SoundPlayer)\s+(.+)",
    re.IGNORECASE,
)


def sound_from_command(command: str) -> Optional[str]:
    """Sound name played by a `#system` command, if it runs a sound player."""
    system = _SYSTEM_COMMAND.match(command.strip())
    if not system:
        return None
    player = _SOUND_PLAYER.match((system.group(1) or system.group(2)).strip())
    if not player:
        return None

    file_path = re.sub(r"\s*[&>|].*$", "", player.group(1)).strip()
    file_path = re.sub(r"^[\"']|[\"']$", "", file_path)
    file_name = file_path.replace("\\", "/").split("/")[-1]
    stem, dot, extension = file_name.rpartition(".")
    if not dot or f".{extension.lower()}" not in SOUND_EXTENSIONS:
        return None
    return stem


def convert_pattern(pattern: str) -> str:
    """Rewrite a TinTin++ pattern as a regex; positional markers become groups."""
    start = "^" if pattern.startswith("^") else ""
    body = pattern[len(start) :]
    end = "$" if body.endswith("$") else ""
    body = body[: len(body) - len(end)]

    parts: list[str] = []
    last = 0
    for token in _PATTERN_TOKEN.finditer(body):
        parts.append(re.escape(body[last : token.start()]))
        parts.append("(.+)" if token.group(0)[1:].isdigit() else ".*")
        last = token.end()
    parts.append(re.escape(body[last:]))
    return start + "".join(parts) + end


def _convert_commands(
    context: ParseContext,
    commands: list[str],
    positional: Optional[Callable[[int], str]],
) -> list[str]:
    writer = context.writer
    statements = []
    for command in commands:
        sound = sound_from_command(command)
        if sound is not None:
            context.add_sound(sound)
            statements.append(writer.play_sound(sound))
        elif positional is not None and _POSITIONAL.search(command):
            statements.append(
                build_send(writer, command, _POSITIONAL, lambda found: positional(int(found.group(1))))
            )
        else:
            statements.append(writer.send_literal(command))
    return statements


def _script(context: ParseContext, original: str, statements: list[str], dynamic: bool) -> str:
    writer = context.writer
    if dynamic:
        statements = [writer.comment(f"Original: {original}"), *statements]
    return writer.script(f"Converted from {SOURCE_NAME}", statements)


def _parse_action(arguments: str, context: ParseContext) -> None:
    fields = extract_fields(arguments, 2)
    if len(fields) < 2:
        return
    pattern, command = fields
    commands = split_commands(command.content)
    writer = context.writer

    statements = _convert_commands(
        context,
        commands,
        lambda index: writer.line() if index == 0 else writer.match(index),
    )
    dynamic = bool(_POSITIONAL.search(command.content)) or any(
        sound_from_command(c) for c in commands
    )
    context.bundle.triggers.append(
        Trigger(
            pattern=convert_pattern(pattern.content),
            type=TriggerType.REGEX,
            script=_script(context, command.content, statements, dynamic),
            class_id=context.current_class_id,
        )
    )


def _parse_alias(arguments: str, context: ParseContext) -> None:
    fields = extract_fields(arguments, 2)
    if len(fields) < 2:
        return
    name, command = fields
    alias_name = name.content.strip()
    if not alias_name:
        return

    commands = split_commands(command.content)
    max_index = max((int(index) for index in _POSITIONAL.findall(command.content)), default=0)
    pattern = argument_alias_pattern(alias_name, max_index)

    if any(sound_from_command(c) for c in commands):
        writer = context.writer
        statements = _convert_commands(context, commands, lambda index: writer.match(index + 1))
        alias = Alias(
            pattern=pattern,
            command=_script(context, command.content, statements, True),
            is_script=True,
            class_id=context.current_class_id,
        )
    else:
        # %0 is the whole argument text (group 1), %N is word N (group N+1)
        template = "\n".join(
            _POSITIONAL.sub(lambda found: f"${int(found.group(1)) + 1}", c) for c in commands
        )
        alias = Alias(
            pattern=pattern,
            command=template,
            is_script=False,
            class_id=context.current_class_id,
        )
    context.bundle.aliases.append(alias)


def _seconds_to_interval(text: Optional[str], default_seconds: int) -> int:
    try:
        seconds = float(text) if text is not None else float(default_seconds)
    except ValueError:
        seconds = float(default_seconds)
    if seconds <= 0:
        seconds = float(default_seconds)
    return max(1, round(seconds * 1000))


def _add_timer(
    context: ParseContext,
    name: str,
    command: str,
    seconds: Optional[str],
    one_shot: bool,
) -> None:
    commands = split_commands(command)
    statements = _convert_commands(context, commands, None)
    context.bundle.timers.append(
        Timer(
            name=name,
            interval=_seconds_to_interval(seconds, context.default_ticker_seconds),
            one_shot=one_shot,
            script=_script(context, command, statements, False),
            class_id=context.current_class_id,
        )
    )


def _parse_ticker(arguments: str, context: ParseContext) -> None:
    fields = extract_fields(arguments, 3)
    if len(fields) < 2:
        return
    seconds = fields[2].content.strip() if len(fields) > 2 else None
    _add_timer(context, fields[0].content.strip(), fields[1].content, seconds, one_shot=False)


def _parse_delay(arguments: str, context: ParseContext) -> None:
    fields = extract_fields(arguments, 3)
    if len(fields) == 2:
        seconds, command = fields
        _add_timer(context, f"delay {seconds.content.strip()}", command.content, seconds.content.strip(), True)
    elif len(fields) == 3:
        name, command, seconds = fields
        _add_timer(context, name.content.strip(), command.content, seconds.content.strip(), True)


def _parse_class(arguments: str, context: ParseContext) -> None:
    fields = extract_fields(arguments, 2)
    if not fields:
        return
    name = fields[0].content.strip()
    mode = fields[1].content.strip().lower() if len(fields) > 1 else ""
    if not name:
        return
    if mode == "open":
        context.current_class_id = context.class_id_for(name)
    elif mode == "close" and context.current_class_id == context.class_ids.get(name):
        context.current_class_id = None


_HANDLERS: dict[str, Callable[[str, ParseContext], None]] = {
    "action": _parse_action,
    "alias": _parse_alias,
    "ticker": _parse_ticker,
    "delay": _parse_delay,
    "class": _parse_class,
}


def _resolve_directive(word: str) -> Optional[Callable[[str, ParseContext], None]]:
    word = word.lower()
    if len(word) < 3:
        return None
    for name, handler in _HANDLERS.items():
        if name.startswith(word):
            return handler
    return None


def parse_tintin_line(line: str, context: ParseContext) -> None:
    """Convert one TinTin++ line into rules on the context; ignore anything else."""
    stripped = line.strip()
    if not stripped or stripped.startswith("//") or stripped.startswith("/*"):
        return
    directive = _DIRECTIVE.match(stripped)
    if not directive:
        return
    handler = _resolve_directive(directive.group(1))
    if handler is not None:
        handler(directive.group(2), context)

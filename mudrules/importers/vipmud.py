"""VIPMud configuration import.

Recognized directives (case-insensitive):

    #TRIGGER {pattern} {commands} [{class}]
    #ALIAS name {commands} [{class}]     or  #ALIAS name commands
    #KEY key {commands} [{class}]        or  #KEY key commands

`@name` reads a stored variable, `%1`..`%9` are positional captures and `*`
is a wildcard.
"""

import re
from typing import Callable, Optional

from mudrules.models import Alias, Keybinding, Trigger, TriggerType
from mudrules.pipeline.keybindings import canonical_key

from .braces import BraceField, extract_fields
from .context import ParseContext
from .scripts import argument_alias_pattern, build_send, split_commands

SOURCE_NAME = "VIPMud"

_DIRECTIVE = re.compile(r"^#(\w+)\s*(.*)$", re.DOTALL)
_MARKER = re.compile(r"@(\w+)|%(\d)")
_VARIABLE = re.compile(r"@\w+")
_POSITIONAL = re.compile(r"%(\d)")
_PATTERN_TOKEN = re.compile(r"@\w+|%\d|\*")

KEY_NAMES = {
    **{f"F{number}": f"F{number}" for number in range(1, 13)},
    **{f"NUMPAD{number}": f"Numpad{number}" for number in range(10)},
}


def convert_pattern(pattern: str) -> str:
    """Rewrite a VIPMud pattern as a regex; variable and positional markers become groups."""
    start = "^" if pattern.startswith("^") else ""
    body = pattern[len(start) :]
    end = "$" if body.endswith("$") else ""
    body = body[: len(body) - len(end)]

    parts: list[str] = []
    last = 0
    for token in _PATTERN_TOKEN.finditer(body):
        parts.append(re.escape(body[last : token.start()]))
        parts.append(".*" if token.group(0) == "*" else "(.+)")
        last = token.end()
    parts.append(re.escape(body[last:]))
    return start + "".join(parts) + end


def convert_key(name: str) -> str:
    """Map a VIPMud key name such as 'CTRL-F1' or 'numpad5' to a canonical combination."""
    tokens = [token for token in re.split(r"[-+]", name.strip()) if token]
    if not tokens:
        return name
    base = tokens[-1]
    base = KEY_NAMES.get(base.upper(), base)
    return canonical_key("+".join([*tokens[:-1], base]))


def _statements(context: ParseContext, content: str, positional: Callable[[int], str]) -> list[str]:
    writer = context.writer

    def replace(found: re.Match[str]) -> str:
        if found.group(1) is not None:
            return writer.variable(found.group(1))
        return positional(int(found.group(2)))

    return [build_send(writer, command, _MARKER, replace) for command in split_commands(content)]


def _script(context: ParseContext, content: str, statements: list[str]) -> str:
    writer = context.writer
    return writer.script(
        f"Converted from {SOURCE_NAME}",
        [writer.comment(f"Original: {content}"), *statements],
    )


def _class_id(context: ParseContext, field: Optional[BraceField]) -> Optional[str]:
    if field is None or not field.content.strip():
        return None
    return context.class_id_for(field.content.strip())


def _name_and_fields(arguments: str) -> Optional[tuple[str, str, Optional[BraceField]]]:
    """Split `name {commands} [{class}]`, `{name} {commands} [{class}]` or `name commands`."""
    arguments = arguments.strip()
    if arguments.startswith("{"):
        fields = extract_fields(arguments, 3)
        if len(fields) < 2:
            return None
        return fields[0].content.strip(), fields[1].content, fields[2] if len(fields) > 2 else None

    brace = arguments.find("{")
    if brace < 0:
        name, _, content = arguments.partition(" ")
        return name.strip(), content.strip(), None

    fields = extract_fields(arguments[brace:], 2)
    if not fields:
        return None
    return arguments[:brace].strip(), fields[0].content, fields[1] if len(fields) > 1 else None


def _parse_trigger(arguments: str, context: ParseContext) -> None:
    fields = extract_fields(arguments, 3)
    if len(fields) < 2:
        return
    pattern, command = fields[0], fields[1]
    writer = context.writer

    if _MARKER.search(command.content):
        statements = _statements(context, command.content, writer.match)
        script = _script(context, command.content, statements)
    else:
        script = writer.script(
            f"Converted from {SOURCE_NAME}",
            [writer.send_literal(c) for c in split_commands(command.content)],
        )

    context.bundle.triggers.append(
        Trigger(
            pattern=convert_pattern(pattern.content),
            type=TriggerType.REGEX,
            script=script,
            class_id=_class_id(context, fields[2] if len(fields) > 2 else None),
        )
    )


def _literal_or_script(
    context: ParseContext,
    content: str,
    positional: Callable[[int], str],
    literal_positional: Callable[[int], str],
) -> tuple[str, bool]:
    """Command text for an alias or key, and whether it is a script."""
    if _VARIABLE.search(content):
        return _script(context, content, _statements(context, content, positional)), True
    template = "\n".join(
        _POSITIONAL.sub(lambda found: literal_positional(int(found.group(1))), c)
        for c in split_commands(content)
    )
    return template, False


def _parse_alias(arguments: str, context: ParseContext) -> None:
    parsed = _name_and_fields(arguments)
    if parsed is None:
        return
    name, content, class_field = parsed
    if not name:
        return

    max_index = max((int(index) for index in _POSITIONAL.findall(content)), default=0)
    command, is_script = _literal_or_script(
        context,
        content,
        lambda index: context.writer.match(index + 1),
        lambda index: f"${index + 1}",
    )
    context.bundle.aliases.append(
        Alias(
            pattern=argument_alias_pattern(name, max_index),
            command=command,
            is_script=is_script,
            class_id=_class_id(context, class_field),
        )
    )


def _parse_key(arguments: str, context: ParseContext) -> None:
    parsed = _name_and_fields(arguments)
    if parsed is None:
        return
    key_name, content, class_field = parsed
    if not key_name:
        return

    # keys have no captures
    command, is_script = _literal_or_script(context, content, lambda index: '""', lambda index: "")
    context.bundle.keybindings.append(
        Keybinding(
            key=convert_key(key_name),
            command=command,
            is_script=is_script,
            class_id=_class_id(context, class_field),
        )
    )


_HANDLERS: dict[str, Callable[[str, ParseContext], None]] = {
    "trigger": _parse_trigger,
    "alias": _parse_alias,
    "key": _parse_key,
}


def parse_vipmud_line(line: str, context: ParseContext) -> None:
    """Convert one VIPMud line into rules on the context; ignore anything else."""
    stripped = line.strip()
    if not stripped or stripped.startswith("//") or stripped.startswith("'"):
        return
    directive = _DIRECTIVE.match(stripped)
    if not directive:
        return
    handler = _HANDLERS.get(directive.group(1).lower())
    if handler is not None:
        handler(directive.group(2), context)

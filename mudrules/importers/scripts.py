"""Script text generation for converted legacy commands.

Converted rules are emitted in the language of the session's script
back-end. Each writer knows its language's string literals, concatenation
operator, comment syntax and how to read match groups and variables.
"""

import re
from abc import ABC, abstractmethod
from typing import Callable, Sequence

from mudrules.config import ScriptLanguage


def quote(text: str) -> str:
    """Double-quoted string literal valid in both Lua and Python."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class ScriptWriter(ABC):
    """Builds script statements for one target language."""

    language: ScriptLanguage
    comment_prefix: str
    concat: str

    def comment(self, text: str) -> str:
        return f"{self.comment_prefix} {text.replace(chr(10), ' ')}"

    @abstractmethod
    def match(self, index: int) -> str:
        """Expression for match group `index`, empty string when absent."""

    @abstractmethod
    def line(self) -> str:
        """Expression for the triggering line."""

    @abstractmethod
    def variable(self, name: str) -> str:
        """Expression for a stored variable as a string."""

    def send(self, parts: Sequence[str]) -> str:
        if not parts:
            return 'send("")'
        return f"send({self.concat.join(parts)})"

    def send_literal(self, command: str) -> str:
        return f"send({quote(command)})"

    def play_sound(self, name: str) -> str:
        return f"playSound({quote(name)})"

    def script(self, header: str, statements: Sequence[str]) -> str:
        return "\n".join([self.comment(header), *statements])


class LuaScriptWriter(ScriptWriter):
    language = ScriptLanguage.LUA
    comment_prefix = "--"
    concat = " .. "

    def match(self, index: int) -> str:
        return f'(matches[{index}] or "")'

    def line(self) -> str:
        return '(line or "")'

    def variable(self, name: str) -> str:
        return f'tostring(getVariable({quote(name)}) or "")'


class PythonScriptWriter(ScriptWriter):
    language = ScriptLanguage.PYTHON
    comment_prefix = "#"
    concat = " + "

    def match(self, index: int) -> str:
        return f'((matches[{index}] if len(matches) > {index} else None) or "")'

    def line(self) -> str:
        return "line"

    def variable(self, name: str) -> str:
        return f'("" if getVariable({quote(name)}) is None else str(getVariable({quote(name)})))'


def get_writer(language: ScriptLanguage) -> ScriptWriter:
    if language == ScriptLanguage.PYTHON:
        return PythonScriptWriter()
    return LuaScriptWriter()


def build_send(
    writer: ScriptWriter,
    command: str,
    marker: re.Pattern[str],
    replace: Callable[[re.Match[str]], str],
) -> str:
    """Turn a command with placeholder markers into one send() statement.

    Literal text between markers becomes string literals; each marker becomes
    the expression returned by `replace`.
    """
    parts: list[str] = []
    last = 0
    for found in marker.finditer(command):
        if found.start() > last:
            parts.append(quote(command[last : found.start()]))
        parts.append(replace(found))
        last = found.end()
    if last < len(command):
        parts.append(quote(command[last:]))
    return writer.send(parts)


def split_commands(content: str) -> list[str]:
    """Split a `;`-separated command list, dropping empty entries."""
    return [part.strip() for part in content.split(";") if part.strip()]


def argument_alias_pattern(name: str, max_index: int) -> str:
    """Regex for a legacy alias name followed by optional arguments.

    Group 1 always holds the whole argument text. When the command refers to
    positional arguments 1..max_index, groups 2.. hold those words, the last
    one taking the rest of the input.
    """
    head = f"^{re.escape(name)}"
    if max_index <= 0:
        return f"{head}(?:\\s+(.*))?$"
    if max_index == 1:
        return f"{head}(?:\\s+((.+)))?$"
    words = "(\\S+)" + "(?:\\s+(\\S+))?" * (max_index - 2) + "(?:\\s+(.+))?"
    return f"{head}(?:\\s+({words}))?$"

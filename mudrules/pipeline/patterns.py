"""Pattern helpers shared by triggers and aliases."""

import re
from functools import lru_cache

from mudrules.errors import PatternCompileError

# CSI (colours, cursor movement), OSC (titles, hyperlinks), escapes with
# intermediate bytes (charset selection) and two-byte escapes
_CONTROL_SEQUENCE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[ -/]+[0-~]"
    r"|\x1b[@-Z\\-_]"
)


def strip_control_sequences(line: str) -> str:
    """Remove terminal control/escape sequences from a line."""
    return _CONTROL_SEQUENCE.sub("", line)


@lru_cache(maxsize=1024)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a rule pattern case-insensitively.

    Raises:
        PatternCompileError: If the pattern is not a valid regular expression
    """
    try:
        return _compile(pattern)
    except re.error as exc:
        raise PatternCompileError(pattern, str(exc)) from exc

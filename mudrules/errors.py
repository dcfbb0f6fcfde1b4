"""Exceptions raised inside the automation engine."""


class AutomationError(Exception):
    """Base class for automation engine errors."""

    pass


class PatternCompileError(AutomationError):
    """Raised when a rule pattern cannot be compiled as a regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class ScriptRuntimeError(AutomationError):
    """Raised when a script fails inside a sandbox back-end."""

    pass


class SandboxUnavailable(AutomationError):
    """Raised when the interpreter back-end is not (yet) initialized."""

    pass

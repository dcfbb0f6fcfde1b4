"""Common contract for script back-ends.

Every back-end exposes the same capability surface to scripts:

- send(command), echo(text), print(text)
- setVariable(name, value), getVariable(name)
- playSound(name, volume, loop), stopSound(name), loopSound(name, volume),
  setSoundPosition(name, x, y, z)
- enableClass(name), disableClass(name)

and binds `line`, `rawLine` and `matches` for text-triggered invocations.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from mudrules.config import ScriptLanguage
from mudrules.errors import SandboxUnavailable, ScriptRuntimeError
from mudrules.models import VariableStore

logger = logging.getLogger(__name__)


def _ignore(*args: Any) -> None:
    return None


@dataclass
class Capabilities:
    """Host callables the sandbox forwards script calls to."""

    send: Callable[[str], None]
    echo: Callable[[str], None]
    play_sound: Callable[[str, Optional[float], bool], None] = _ignore
    stop_sound: Callable[[str], None] = _ignore
    loop_sound: Callable[[str, Optional[float]], None] = _ignore
    set_sound_position: Callable[[str, float, float, float], None] = _ignore
    enable_class: Callable[[str], None] = _ignore
    disable_class: Callable[[str], None] = _ignore


@dataclass
class ScriptResult:
    """Outcome of one script invocation."""

    ok: bool
    value: Any = None
    error: Optional[str] = None


class ScriptSandbox(ABC):
    """Runs rule scripts against a fixed capability surface."""

    language: ScriptLanguage

    def __init__(
        self,
        variables: VariableStore,
        capabilities: Capabilities,
        *,
        echo_errors: bool = True,
    ):
        self.variables = variables
        self.capabilities = capabilities
        self.echo_errors = echo_errors

    @property
    def ready(self) -> bool:
        """True once the back-end can run scripts without initializing."""
        return True

    async def start(self) -> None:
        """Initialize the back-end ahead of the first script."""
        return None

    async def close(self) -> None:
        """Release the back-end at session end."""
        return None

    async def run(
        self,
        script: str,
        line: Optional[str] = None,
        matches: Optional[Sequence[Optional[str]]] = None,
        raw_line: Optional[str] = None,
    ) -> ScriptResult:
        """Run a script body and report the outcome.

        `line` is bound for the script as `line`, `raw_line` (control sequences
        intact, defaulting to `line`) as `rawLine`, and `matches` as `matches`.

        Script failures are echoed and returned as a failed result; they never
        propagate. SandboxUnavailable does propagate so callers can retry.
        """
        if not script.strip():
            return ScriptResult(ok=True)
        try:
            value = await self._execute(script, line, matches, raw_line)
        except SandboxUnavailable:
            raise
        except ScriptRuntimeError as exc:
            return self._report_failure(exc)
        return ScriptResult(ok=True, value=value)

    @abstractmethod
    async def _execute(
        self,
        script: str,
        line: Optional[str],
        matches: Optional[Sequence[Optional[str]]],
        raw_line: Optional[str],
    ) -> Any:
        """Execute the script; raise ScriptRuntimeError on failure."""

    def _report_failure(self, exc: ScriptRuntimeError) -> ScriptResult:
        message = str(exc)
        logger.warning("Script error (%s): %s", self.language.value, message)
        if self.echo_errors:
            try:
                self.capabilities.echo(f"[Script Error] {message}")
            except Exception as echo_exc:
                logger.error("Failed to echo script error: %s", echo_exc)
        return ScriptResult(ok=False, error=message)

    def _coerce_variable(self, value: Any) -> Any:
        return value

    def script_functions(self) -> dict[str, Callable[..., Any]]:
        """Map script-visible names to host callables."""
        caps = self.capabilities

        def set_variable(name: str, value: Any = None) -> None:
            self.variables.set(str(name), self._coerce_variable(value))

        def get_variable(name: str) -> Any:
            return self.variables.get(str(name))

        def debug_print(text: Any = "") -> None:
            caps.echo(f"[debug] {text}")

        def play_sound(name: str, volume: Optional[float] = None, loop: bool = False) -> None:
            caps.play_sound(str(name), volume, bool(loop))

        def loop_sound(name: str, volume: Optional[float] = None) -> None:
            caps.loop_sound(str(name), volume)

        def set_sound_position(name: str, x: float, y: float, z: Optional[float] = None) -> None:
            caps.set_sound_position(str(name), x, y, 0 if z is None else z)

        return {
            "send": lambda command: caps.send(str(command)),
            "echo": lambda text: caps.echo(str(text)),
            "print": debug_print,
            "setVariable": set_variable,
            "getVariable": get_variable,
            "playSound": play_sound,
            "stopSound": lambda name: caps.stop_sound(str(name)),
            "loopSound": loop_sound,
            "setSoundPosition": set_sound_position,
            "enableClass": lambda name: caps.enable_class(str(name)),
            "disableClass": lambda name: caps.disable_class(str(name)),
        }

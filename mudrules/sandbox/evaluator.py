"""General evaluator back-end: Python script bodies run in-process."""

import ast
import builtins
import logging
from functools import lru_cache
from types import FunctionType
from typing import Any, Optional, Sequence

from mudrules.config import ScriptLanguage
from mudrules.errors import ScriptRuntimeError

from .base import ScriptSandbox

logger = logging.getLogger(__name__)

_ENTRY_POINT = "__rule_script__"

_PARAMETERS = (
    "send",
    "echo",
    "print",
    "setVariable",
    "getVariable",
    "playSound",
    "stopSound",
    "loopSound",
    "setSoundPosition",
    "enableClass",
    "disableClass",
    "line",
    "rawLine",
    "matches",
)

_FILENAME = "<rule script>"


@lru_cache(maxsize=512)
def _compile_script(script: str) -> FunctionType:
    """Compile a script body into a function taking the capabilities as parameters.

    The body's statements are grafted into the function node as parsed, so
    string literals spanning lines keep their exact contents.
    """
    try:
        body = ast.parse(script, filename=_FILENAME).body
    except SyntaxError as exc:
        raise ScriptRuntimeError(f"SyntaxError: {exc.msg} (line {exc.lineno})") from exc

    module = ast.parse(f"def {_ENTRY_POINT}({', '.join(_PARAMETERS)}):\n    pass\n")
    function_node = module.body[0]
    if body:
        function_node.body = body
    ast.fix_missing_locations(module)

    try:
        code = compile(module, _FILENAME, "exec")
    except SyntaxError as exc:
        raise ScriptRuntimeError(f"SyntaxError: {exc.msg} (line {exc.lineno})") from exc

    namespace: dict[str, Any] = {"__builtins__": builtins}
    exec(code, namespace)
    return namespace[_ENTRY_POINT]


class EvaluatorSandbox(ScriptSandbox):
    """Runs a script as the body of a function taking the capabilities as parameters.

    Scripts may `return` a value, which becomes the result value. Execution is
    synchronous and blocks the event loop for its duration.
    """

    language = ScriptLanguage.PYTHON

    async def _execute(
        self,
        script: str,
        line: Optional[str],
        matches: Optional[Sequence[Optional[str]]],
        raw_line: Optional[str],
    ) -> Any:
        function = _compile_script(script)
        arguments = dict(self.script_functions())
        arguments["line"] = line or ""
        arguments["rawLine"] = raw_line if raw_line is not None else (line or "")
        arguments["matches"] = list(matches or [])
        try:
            return function(**arguments)
        except Exception as exc:
            raise ScriptRuntimeError(f"{type(exc).__name__}: {exc}") from exc

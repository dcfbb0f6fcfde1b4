"""Interpreter back-end: an embedded Lua VM provided by lupa.

One LuaRuntime is shared by the whole session. It is created on first use,
capability functions are installed as globals once, and `line` / `matches`
are refreshed right before each call. Calls are serialized with a lock so a
second request waits for the first to finish.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Sequence

import lupa
from lupa import LuaError, LuaRuntime

from mudrules.config import ScriptLanguage
from mudrules.errors import SandboxUnavailable, ScriptRuntimeError

from .base import ScriptSandbox

logger = logging.getLogger(__name__)


class LuaSandbox(ScriptSandbox):
    """Lua-compatible script back-end."""

    language = ScriptLanguage.LUA

    def __init__(
        self,
        *args: Any,
        unpack_returned_tuples: bool = True,
        runtime_factory: Optional[Callable[[], LuaRuntime]] = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._unpack_returned_tuples = unpack_returned_tuples
        self._runtime_factory = runtime_factory or self._default_runtime
        self._runtime: Optional[LuaRuntime] = None
        self._init_task: Optional[asyncio.Task[None]] = None
        self._lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self._runtime is not None

    def _default_runtime(self) -> LuaRuntime:
        return LuaRuntime(
            unpack_returned_tuples=self._unpack_returned_tuples,
            register_eval=False,
        )

    async def _initialize(self) -> None:
        runtime = self._runtime_factory()
        lua_globals = runtime.globals()
        for name, function in self.script_functions().items():
            lua_globals[name] = function
        self._runtime = runtime
        logger.info("Lua engine initialized")

    async def start(self) -> None:
        """Create the VM, sharing one initialization between concurrent callers."""
        if self._runtime is not None:
            return
        if self._init_task is None:
            self._init_task = asyncio.create_task(self._initialize())
        task = self._init_task
        try:
            await task
        except Exception as exc:
            if self._init_task is task:
                self._init_task = None
            raise SandboxUnavailable(f"Lua engine failed to initialize: {exc}") from exc

    async def close(self) -> None:
        async with self._lock:
            self._runtime = None
            self._init_task = None
        logger.info("Lua engine closed")

    def _coerce_variable(self, value: Any) -> Any:
        if lupa.lua_type(value) is not None:
            return str(value)
        return value

    def _refresh_bindings(
        self,
        runtime: LuaRuntime,
        line: Optional[str],
        matches: Optional[Sequence[Optional[str]]],
        raw_line: Optional[str],
    ) -> None:
        lua_globals = runtime.globals()
        lua_globals["line"] = line or ""
        lua_globals["rawLine"] = raw_line if raw_line is not None else (line or "")
        # 0-based like the match vector: matches[0] is the full match
        indexed = {index: value for index, value in enumerate(matches or []) if value is not None}
        lua_globals["matches"] = runtime.table_from(indexed)

    async def _execute(
        self,
        script: str,
        line: Optional[str],
        matches: Optional[Sequence[Optional[str]]],
        raw_line: Optional[str],
    ) -> Any:
        if self._runtime is None:
            await self.start()
        async with self._lock:
            runtime = self._runtime
            if runtime is None:
                raise SandboxUnavailable("Lua engine is not running")
            self._refresh_bindings(runtime, line, matches, raw_line)
            try:
                return runtime.execute(script)
            except LuaError as exc:
                raise ScriptRuntimeError(str(exc)) from exc
            except Exception as exc:
                raise ScriptRuntimeError(f"{type(exc).__name__}: {exc}") from exc

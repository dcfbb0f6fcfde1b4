"""One profile session: rule lists, variables, sandbox and scheduler wired together."""

import asyncio
import dataclasses
import logging
from typing import Callable, Optional

from mudrules.config import EngineSettings, get_settings
from mudrules.models import KeyEvent, RuleBundle, VariableStore
from mudrules.pipeline import (
    AliasExpander,
    ButtonDispatcher,
    KeybindingDispatcher,
    TimerHandle,
    TimerScheduler,
    TriggerMatch,
    TriggerMatcher,
)
from mudrules.rulebook import Rulebook
from mudrules.sandbox import Capabilities, ScriptResult, build_sandbox

logger = logging.getLogger(__name__)


class AutomationSession:
    """Routes inbound lines, outbound input, key presses and ticks through the rules.

    The host supplies the transport `send` sink and the other capabilities;
    class toggles requested by scripts are handled by the session itself.
    """

    def __init__(
        self,
        capabilities: Capabilities,
        rulebook: Optional[Rulebook] = None,
        variables: Optional[VariableStore] = None,
        settings: Optional[EngineSettings] = None,
        on_timer_deactivated: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings or get_settings()
        self.rulebook = rulebook or Rulebook()
        self.variables = variables or VariableStore()
        self.on_timer_deactivated = on_timer_deactivated

        self.capabilities = dataclasses.replace(
            capabilities,
            enable_class=lambda name: self._toggle_from_script(name, True),
            disable_class=lambda name: self._toggle_from_script(name, False),
        )
        self.sandbox = build_sandbox(
            self.settings.sandbox,
            self.variables,
            self.capabilities,
            echo_errors=self.settings.automation.echo_script_errors,
        )
        self.trigger_matcher = TriggerMatcher(
            self.sandbox, sound_protocol=self.settings.automation.sound_protocol_enabled
        )
        self.alias_expander = AliasExpander(self.sandbox)
        self.keybinding_dispatcher = KeybindingDispatcher(self.sandbox, self.capabilities.send)
        self.button_dispatcher = ButtonDispatcher(self.sandbox, self.capabilities.send)
        self.scheduler = TimerScheduler(self.sandbox, on_deactivate=self._timer_deactivated)
        self._timer_handle: Optional[TimerHandle] = None
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Initialize the sandbox and schedule timers."""
        await self.sandbox.start()
        self._started = True
        self.reinstall_timers()
        logger.info("Automation session started (%s back-end)", self.sandbox.language.value)

    async def close(self) -> None:
        """Cancel timers and tear down the sandbox."""
        self._started = False
        await self.scheduler.shutdown(self._timer_handle)
        self._timer_handle = None
        await self.sandbox.close()
        logger.info("Automation session closed")

    async def __aenter__(self) -> "AutomationSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def reinstall_timers(self) -> None:
        """Cancel and reschedule every timer from the current rule lists."""
        if not self._started:
            return
        if not self.settings.automation.timers_enabled:
            self.scheduler.cancel_all()
            return
        self._timer_handle = self.scheduler.install(
            self.rulebook.timers, self.rulebook.classes_by_id()
        )

    async def handle_line(self, line: str) -> list[TriggerMatch]:
        """Run triggers for one inbound line; sound tokens play even with triggers off."""
        if not self.settings.automation.triggers_enabled:
            self.trigger_matcher.prepare_line(line)
            return []
        return await self.trigger_matcher.evaluate(
            line, self.rulebook.triggers, self.rulebook.classes_by_id()
        )

    async def handle_input(self, text: str) -> Optional[str]:
        """Expand outbound input and send the result.

        Returns:
            The command that was sent, or None if a script alias handled it
        """
        if self.settings.automation.aliases_enabled:
            resolution = await self.alias_expander.resolve(
                text, self.rulebook.aliases, self.rulebook.classes_by_id()
            )
            if resolution.matched:
                if resolution.command is not None:
                    self.capabilities.send(resolution.command)
                return resolution.command
        self.capabilities.send(text)
        return text

    async def handle_key(self, event: KeyEvent) -> bool:
        """Dispatch a key-down event; True if a keybinding handled it."""
        if not self.settings.automation.keybindings_enabled:
            return False
        return await self.keybinding_dispatcher.handle(
            event, self.rulebook.keybindings, self.rulebook.classes_by_id()
        )

    async def press_button(self, button_id: str) -> bool:
        return await self.button_dispatcher.press(
            button_id, self.rulebook.buttons, self.rulebook.classes_by_id()
        )

    async def run_script(self, script: str) -> ScriptResult:
        """Run an ad-hoc script in the session's sandbox."""
        return await self.sandbox.run(script)

    def replace_rules(self, bundle: RuleBundle) -> None:
        """Swap in new rule lists and reinstall timers."""
        self.rulebook.replace(bundle)
        self.reinstall_timers()

    def set_class_active(self, name_or_id: str, active: bool) -> bool:
        """Switch a class on or off; False if the class does not exist."""
        if self.rulebook.set_class_active(name_or_id, active) is None:
            return False
        self.reinstall_timers()
        return True

    def _toggle_from_script(self, name: str, active: bool) -> None:
        if self.rulebook.set_class_active(name, active) is None:
            return
        # a timer script may be the caller; reschedule once it has returned
        try:
            asyncio.get_running_loop().call_soon(self.reinstall_timers)
        except RuntimeError:
            self.reinstall_timers()

    def _timer_deactivated(self, timer_id: str) -> None:
        logger.info("One-shot timer %s finished", timer_id)
        if self.on_timer_deactivated is not None:
            self.on_timer_deactivated(timer_id)

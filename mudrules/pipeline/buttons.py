"""Button presses: the same command dispatch as keybindings."""

import logging
from typing import Callable, Mapping, Sequence

from mudrules.models import Button, RuleClass
from mudrules.sandbox import ScriptSandbox

from .class_gate import enabled
from .commands import dispatch_command

logger = logging.getLogger(__name__)


class ButtonDispatcher:
    def __init__(self, sandbox: ScriptSandbox, send: Callable[[str], None]):
        self.sandbox = sandbox
        self.send = send

    async def press(
        self,
        button_id: str,
        buttons: Sequence[Button],
        classes_by_id: Mapping[str, RuleClass],
    ) -> bool:
        """Run a button's command; False if it is unknown or disabled."""
        button = next((b for b in buttons if b.id == button_id), None)
        if button is None:
            logger.warning("Unknown button %s", button_id)
            return False
        if not enabled(button, classes_by_id):
            return False
        await dispatch_command(button, self.sandbox, self.send)
        return True

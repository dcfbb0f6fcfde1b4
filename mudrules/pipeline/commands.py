"""Running a rule's command: either a script or a literal send."""

import logging
from typing import Callable, Protocol

from mudrules.errors import SandboxUnavailable
from mudrules.sandbox import ScriptSandbox

logger = logging.getLogger(__name__)


class CommandRule(Protocol):
    id: str
    command: str
    is_script: bool


async def dispatch_command(
    rule: CommandRule,
    sandbox: ScriptSandbox,
    send: Callable[[str], None],
) -> None:
    """Run the rule's command as a script, or forward it verbatim."""
    if not rule.is_script:
        send(rule.command)
        return
    try:
        await sandbox.run(rule.command)
    except SandboxUnavailable as exc:
        logger.error("Command of rule %s not run: %s", rule.id, exc)

"""Trigger evaluation for inbound text.

Each line is stripped of control sequences and, optionally, of MUD Sound
Protocol tokens (which are played), then every enabled trigger is tested in
list order. All matching triggers fire; a bad pattern or a failing
script only affects its own trigger.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from mudrules.errors import PatternCompileError, SandboxUnavailable
from mudrules.models import RuleClass, Trigger, TriggerType
from mudrules.sandbox import ScriptResult, ScriptSandbox

from .class_gate import enabled
from .msp import parse_msp, play_sound_commands
from .patterns import compile_pattern, strip_control_sequences

logger = logging.getLogger(__name__)


@dataclass
class TriggerMatch:
    """A trigger that fired for a line."""

    trigger: Trigger
    line: str
    raw_line: str
    matches: list[Optional[str]]
    result: Optional[ScriptResult] = None


def match_trigger(trigger: Trigger, clean_line: str) -> Optional[list[Optional[str]]]:
    """Test one trigger against a clean line.

    Returns:
        The match vector, or None if the trigger does not match

    Raises:
        PatternCompileError: If a regex trigger has an invalid pattern
    """
    if trigger.type == TriggerType.REGEX:
        found = compile_pattern(trigger.pattern).search(clean_line)
        if found is None:
            return None
        return [found.group(0), *found.groups()]

    if trigger.pattern.lower() in clean_line.lower():
        return [trigger.pattern]
    return None


class TriggerMatcher:
    """Evaluates inbound lines against triggers and runs their scripts."""

    def __init__(self, sandbox: ScriptSandbox, *, sound_protocol: bool = True):
        self.sandbox = sandbox
        self.sound_protocol = sound_protocol

    def prepare_line(self, line: str) -> str:
        """Clean matching surface for a raw line, playing any sound tokens it carries."""
        clean_line = strip_control_sequences(line)
        if self.sound_protocol:
            clean_line, sounds = parse_msp(clean_line)
            play_sound_commands(sounds, self.sandbox.capabilities)
        return clean_line

    async def evaluate(
        self,
        line: str,
        triggers: Sequence[Trigger],
        classes_by_id: Mapping[str, RuleClass],
    ) -> list[TriggerMatch]:
        """Fire every enabled trigger matching the line, in list order.

        Args:
            line: Raw inbound line, control sequences intact
            triggers: Triggers in rule-list order
            classes_by_id: Class lookup for the enablement gate

        Returns:
            The triggers that matched, with their script results
        """
        clean_line = self.prepare_line(line)
        fired: list[TriggerMatch] = []

        for trigger in triggers:
            if not enabled(trigger, classes_by_id):
                continue
            try:
                matches = match_trigger(trigger, clean_line)
            except PatternCompileError as exc:
                logger.warning("Skipping trigger %s: %s", trigger.id, exc)
                continue
            if matches is None:
                continue

            logger.debug("Trigger %s matched %r", trigger.id, clean_line)
            match = TriggerMatch(trigger=trigger, line=clean_line, raw_line=line, matches=matches)
            try:
                match.result = await self.sandbox.run(
                    trigger.script, line=clean_line, matches=matches, raw_line=line
                )
            except SandboxUnavailable as exc:
                logger.error("Trigger %s not run: %s", trigger.id, exc)
            fired.append(match)

        return fired

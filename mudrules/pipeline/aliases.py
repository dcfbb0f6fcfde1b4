"""Alias expansion for outbound input (first match wins)."""

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from mudrules.errors import PatternCompileError, SandboxUnavailable
from mudrules.models import Alias, RuleClass
from mudrules.sandbox import ScriptSandbox

from .class_gate import enabled
from .patterns import compile_pattern

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")


def substitute_placeholders(template: str, groups: Sequence[Optional[str]]) -> str:
    """Replace $1..$n with captured groups.

    `groups[0]` is the full match. A placeholder for a group that did not take
    part in the match, or that does not exist, becomes an empty string. The
    whole number after `$` is read, so `$10` is group ten.
    """

    def _replace(found: re.Match[str]) -> str:
        index = int(found.group(1))
        if index == 0:
            return found.group(0)
        if index < len(groups):
            return groups[index] or ""
        return ""

    return _PLACEHOLDER.sub(_replace, template)


@dataclass
class AliasResolution:
    """Outcome of resolving one input line."""

    alias: Optional[Alias] = None
    command: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.alias is not None


class AliasExpander:
    """Resolves outbound input against aliases."""

    def __init__(self, sandbox: ScriptSandbox):
        self.sandbox = sandbox

    async def expand(
        self,
        text: str,
        aliases: Sequence[Alias],
        classes_by_id: Mapping[str, RuleClass],
    ) -> Optional[str]:
        """Expand input with the first matching enabled alias.

        Returns:
            The command to send for a literal alias; None when a script alias
            ran (the script sends for itself) or when nothing matched
        """
        resolution = await self.resolve(text, aliases, classes_by_id)
        return resolution.command

    async def resolve(
        self,
        text: str,
        aliases: Sequence[Alias],
        classes_by_id: Mapping[str, RuleClass],
    ) -> AliasResolution:
        """Like `expand`, but also reports which alias matched."""
        found = self.find_alias(text, aliases, classes_by_id)
        if found is None:
            return AliasResolution()

        alias, groups = found
        if not alias.is_script:
            return AliasResolution(alias=alias, command=substitute_placeholders(alias.command, groups))

        try:
            await self.sandbox.run(alias.command, line=text, matches=groups)
        except SandboxUnavailable as exc:
            logger.error("Alias %s not run: %s", alias.id, exc)
        return AliasResolution(alias=alias)

    def find_alias(
        self,
        text: str,
        aliases: Sequence[Alias],
        classes_by_id: Mapping[str, RuleClass],
    ) -> Optional[tuple[Alias, list[Optional[str]]]]:
        """Find the first enabled alias matching the input and its capture vector."""
        for alias in aliases:
            if not enabled(alias, classes_by_id):
                continue
            try:
                found = compile_pattern(alias.pattern).search(text)
            except PatternCompileError as exc:
                logger.warning("Skipping alias %s: %s", alias.id, exc)
                continue
            if found is not None:
                logger.debug("Alias %s matched %r", alias.id, text)
                return alias, [found.group(0), *found.groups()]
        return None

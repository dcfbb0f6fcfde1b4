"""Import of legacy client configurations into the canonical rule bundle."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from mudrules.config import ImportSettings, get_settings
from mudrules.models import RuleBundle

from .braces import BraceField, extract_braces, extract_fields
from .context import ParseContext
from .scripts import get_writer
from .tintin import parse_tintin_line
from .vipmud import parse_vipmud_line

logger = logging.getLogger(__name__)


class ImportFormat(str, Enum):
    """Supported legacy dialects."""

    TINTIN = "tintin"
    VIPMUD = "vipmud"


@dataclass
class ImportResult:
    """A parsed bundle plus the sound names its scripts refer to."""

    bundle: RuleBundle
    referenced_sounds: list[str] = field(default_factory=list)


_LINE_PARSERS: dict[ImportFormat, Callable[[str, ParseContext], None]] = {
    ImportFormat.TINTIN: parse_tintin_line,
    ImportFormat.VIPMUD: parse_vipmud_line,
}


def parse_with_report(
    format: ImportFormat | str,
    raw_text: str,
    settings: Optional[ImportSettings] = None,
) -> ImportResult:
    """Parse a legacy configuration, line by line.

    Unrecognized or malformed lines are skipped; the parse as a whole never
    fails because of them.

    Args:
        format: Dialect of the input
        raw_text: Whole configuration text
        settings: Import settings (defaults to the global settings)

    Returns:
        The bundle and the sounds referenced by converted commands

    Raises:
        ValueError: If the format is not supported
    """
    import_format = ImportFormat(format.lower() if isinstance(format, str) else format)
    settings = settings or get_settings().importer
    context = ParseContext(
        writer=get_writer(settings.script_language),
        default_ticker_seconds=settings.default_ticker_seconds,
    )
    parse_line = _LINE_PARSERS[import_format]

    for line_number, line in enumerate(raw_text.splitlines(), 1):
        try:
            parse_line(line, context)
        except ValueError as exc:
            logger.debug("Skipping line %d: %s", line_number, exc)

    logger.info("Imported %s config: %s", import_format.value, import_summary(context.bundle))
    return ImportResult(bundle=context.bundle, referenced_sounds=list(context.referenced_sounds))


def parse(
    format: ImportFormat | str,
    raw_text: str,
    settings: Optional[ImportSettings] = None,
) -> RuleBundle:
    """Parse a legacy configuration into a rule bundle."""
    return parse_with_report(format, raw_text, settings).bundle


def import_summary(bundle: RuleBundle, sound_count: int = 0) -> str:
    """Human-readable count of what a bundle holds."""
    counts = [
        (len(bundle.triggers), "triggers"),
        (len(bundle.aliases), "aliases"),
        (len(bundle.timers), "timers"),
        (len(bundle.keybindings), "keybindings"),
        (len(bundle.buttons), "buttons"),
        (len(bundle.classes), "classes"),
        (sound_count, "sound files"),
    ]
    parts = [f"{count} {label}" for count, label in counts if count]
    return ", ".join(parts) or "No items found"


__all__ = [
    "BraceField",
    "ImportFormat",
    "ImportResult",
    "extract_braces",
    "extract_fields",
    "import_summary",
    "parse",
    "parse_with_report",
]

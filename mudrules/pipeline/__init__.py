"""Rule consumers: triggers, aliases, timers, keybindings and buttons."""

from .aliases import AliasExpander, AliasResolution, substitute_placeholders
from .buttons import ButtonDispatcher
from .class_gate import enabled, enabled_rules, index_classes
from .keybindings import KeybindingDispatcher, canonical_key, normalize_key_combo
from .msp import SoundCommand, parse_msp, parse_sound_params, play_sound_commands
from .patterns import compile_pattern, strip_control_sequences
from .timers import TimerHandle, TimerScheduler
from .triggers import TriggerMatch, TriggerMatcher, match_trigger

__all__ = [
    "AliasExpander",
    "AliasResolution",
    "ButtonDispatcher",
    "KeybindingDispatcher",
    "SoundCommand",
    "TimerHandle",
    "TimerScheduler",
    "TriggerMatch",
    "TriggerMatcher",
    "canonical_key",
    "compile_pattern",
    "enabled",
    "enabled_rules",
    "index_classes",
    "match_trigger",
    "normalize_key_combo",
    "parse_msp",
    "parse_sound_params",
    "play_sound_commands",
    "strip_control_sequences",
    "substitute_placeholders",
]

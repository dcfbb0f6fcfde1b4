"""Data models for automation rules."""

from .events import KeyEvent
from .rules import (
    Alias,
    Button,
    Keybinding,
    RuleBundle,
    RuleClass,
    Timer,
    Trigger,
    TriggerType,
    new_rule_id,
)
from .variables import VariableStore

__all__ = [
    "Alias",
    "Button",
    "KeyEvent",
    "Keybinding",
    "RuleBundle",
    "RuleClass",
    "Timer",
    "Trigger",
    "TriggerType",
    "VariableStore",
    "new_rule_id",
]

"""Automation and scripting engine for text-based game sessions."""

from mudrules.models import (
    Alias,
    Button,
    KeyEvent,
    Keybinding,
    RuleBundle,
    RuleClass,
    Timer,
    Trigger,
    TriggerType,
    VariableStore,
)
from mudrules.rulebook import Rulebook
from mudrules.sandbox import Capabilities, ScriptResult, ScriptSandbox
from mudrules.session import AutomationSession

__all__ = [
    "Alias",
    "AutomationSession",
    "Button",
    "Capabilities",
    "KeyEvent",
    "Keybinding",
    "RuleBundle",
    "RuleClass",
    "Rulebook",
    "ScriptResult",
    "ScriptSandbox",
    "Timer",
    "Trigger",
    "TriggerType",
    "VariableStore",
]

"""Key combination normalization and keybinding dispatch."""

import logging
from typing import Callable, Mapping, Optional, Sequence

from mudrules.models import KeyEvent, Keybinding, RuleClass
from mudrules.sandbox import ScriptSandbox

from .class_gate import enabled
from .commands import dispatch_command

logger = logging.getLogger(__name__)

MODIFIER_ORDER = ("Ctrl", "Alt", "Shift", "Meta")

_MODIFIER_NAMES = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "alt": "Alt",
    "option": "Alt",
    "shift": "Shift",
    "meta": "Meta",
    "cmd": "Meta",
    "command": "Meta",
    "win": "Meta",
}


def _base_key(key: str) -> str:
    if key in (" ", "Spacebar") or key.lower() == "space":
        return "Space"
    if len(key) == 1:
        return key.upper()
    return key


def normalize_key_combo(event: KeyEvent) -> str:
    """Build the canonical combination string for a key event.

    Modifiers come first in a fixed order, then the base key. Pressing a bare
    modifier yields only the modifier tokens.
    """
    parts = [
        name
        for name, pressed in zip(MODIFIER_ORDER, (event.ctrl, event.alt, event.shift, event.meta))
        if pressed
    ]
    if event.key.lower() not in _MODIFIER_NAMES:
        parts.append(_base_key(event.key))
    return "+".join(parts)


def canonical_key(text: str) -> str:
    """Normalize a stored combination such as 'shift+ctrl+a' to 'Ctrl+Shift+A'."""
    text = text.strip()
    if text == "+":
        tokens, base = [], "+"
    elif text.endswith("++"):
        tokens, base = text[:-2].split("+"), "+"
    else:
        *tokens, base = text.split("+")

    modifiers = set()
    for token in tokens:
        name = _MODIFIER_NAMES.get(token.strip().lower())
        if name:
            modifiers.add(name)

    base = base.strip()
    name = _MODIFIER_NAMES.get(base.lower())
    if name:
        modifiers.add(name)
        base = ""

    parts = [modifier for modifier in MODIFIER_ORDER if modifier in modifiers]
    if base:
        parts.append(_base_key(base))
    return "+".join(parts)


class KeybindingDispatcher:
    """Resolves key events to keybinding actions."""

    def __init__(self, sandbox: ScriptSandbox, send: Callable[[str], None]):
        self.sandbox = sandbox
        self.send = send

    def find_binding(
        self,
        combo: str,
        keybindings: Sequence[Keybinding],
        classes_by_id: Mapping[str, RuleClass],
    ) -> Optional[Keybinding]:
        """First enabled binding whose key equals the combination, ignoring case."""
        wanted = combo.lower()
        for binding in keybindings:
            if enabled(binding, classes_by_id) and canonical_key(binding.key).lower() == wanted:
                return binding
        return None

    async def handle(
        self,
        event: KeyEvent,
        keybindings: Sequence[Keybinding],
        classes_by_id: Mapping[str, RuleClass],
    ) -> bool:
        """Dispatch a key event.

        Returns:
            True if a keybinding handled the event
        """
        if event.targets_text_input:
            return False

        combo = normalize_key_combo(event)
        if not combo:
            return False
        binding = self.find_binding(combo, keybindings, classes_by_id)
        if binding is None:
            return False

        event.prevent_default()
        event.stop_propagation()
        logger.debug("Key %s -> keybinding %s", combo, binding.id)
        await dispatch_command(binding, self.sandbox, self.send)
        return True

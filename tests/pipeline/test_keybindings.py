"""Tests for key normalization and keybinding dispatch."""

import pytest

from mudrules.models import KeyEvent, Keybinding, RuleClass
from mudrules.pipeline import KeybindingDispatcher, canonical_key, index_classes, normalize_key_combo


class TestNormalizeKeyCombo:
    """Tests for building the combination from an event."""

    def test_modifier_order(self):
        event = KeyEvent(key="a", shift=True, ctrl=True, meta=True, alt=True)
        assert normalize_key_combo(event) == "Ctrl+Alt+Shift+Meta+A"

    def test_single_character_is_upper_cased(self):
        assert normalize_key_combo(KeyEvent(key="q")) == "Q"

    def test_space(self):
        assert normalize_key_combo(KeyEvent(key=" ", ctrl=True)) == "Ctrl+Space"

    def test_named_key_kept(self):
        assert normalize_key_combo(KeyEvent(key="F5", alt=True)) == "Alt+F5"

    def test_bare_modifier(self):
        assert normalize_key_combo(KeyEvent(key="Control", ctrl=True)) == "Ctrl"


class TestCanonicalKey:
    """Tests for normalizing stored combinations."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("shift+ctrl+a", "Ctrl+Shift+A"),
            ("Control+F1", "Ctrl+F1"),
            ("cmd+k", "Meta+K"),
            ("ctrl++", "Ctrl++"),
            ("+", "+"),
            ("space", "Space"),
        ],
    )
    def test_canonical_forms(self, text, expected):
        assert canonical_key(text) == expected


class TestKeybindingDispatcher:
    """Tests for dispatching key events."""

    @pytest.mark.asyncio
    async def test_literal_command_is_sent(self, evaluator, recorder):
        dispatcher = KeybindingDispatcher(evaluator, recorder.sent.append)
        binding = Keybinding(key="ctrl+shift+a", command="attack")
        event = KeyEvent(key="A", ctrl=True, shift=True)

        assert await dispatcher.handle(event, [binding], {})
        assert recorder.sent == ["attack"]
        assert event.default_prevented
        assert event.propagation_stopped

    @pytest.mark.asyncio
    async def test_script_command_runs(self, evaluator, recorder):
        dispatcher = KeybindingDispatcher(evaluator, recorder.sent.append)
        binding = Keybinding(key="F2", command='send("flee")\nsend("north")', is_script=True)
        assert await dispatcher.handle(KeyEvent(key="F2"), [binding], {})
        assert recorder.sent == ["flee", "north"]

    @pytest.mark.asyncio
    async def test_text_input_target_is_ignored(self, evaluator, recorder):
        """Test that typing into an input control never triggers bindings."""
        dispatcher = KeybindingDispatcher(evaluator, recorder.sent.append)
        binding = Keybinding(key="A", command="attack")
        event = KeyEvent(key="a", target="input")

        assert not await dispatcher.handle(event, [binding], {})
        assert not event.default_prevented
        assert recorder.sent == []

    @pytest.mark.asyncio
    async def test_unbound_key_is_not_handled(self, evaluator, recorder):
        dispatcher = KeybindingDispatcher(evaluator, recorder.sent.append)
        event = KeyEvent(key="b")
        assert not await dispatcher.handle(event, [Keybinding(key="A", command="x")], {})
        assert not event.default_prevented

    @pytest.mark.asyncio
    async def test_first_enabled_binding_wins(self, evaluator, recorder):
        off = RuleClass(name="off", active=False)
        bindings = [
            Keybinding(key="F1", command="one", class_id=off.id),
            Keybinding(key="f1", command="two"),
            Keybinding(key="F1", command="three"),
        ]
        dispatcher = KeybindingDispatcher(evaluator, recorder.sent.append)
        await dispatcher.handle(KeyEvent(key="F1"), bindings, index_classes([off]))
        assert recorder.sent == ["two"]

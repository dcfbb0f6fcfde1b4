"""Tests for button presses."""

import pytest

from mudrules.models import Button, RuleClass
from mudrules.pipeline import ButtonDispatcher, index_classes


class TestButtonDispatcher:
    @pytest.mark.asyncio
    async def test_literal_button(self, evaluator, recorder):
        button = Button(label="Look", command="look")
        pressed = await ButtonDispatcher(evaluator, recorder.sent.append).press(button.id, [button], {})
        assert pressed
        assert recorder.sent == ["look"]

    @pytest.mark.asyncio
    async def test_script_button(self, lua, recorder):
        button = Button(label="Heal", command='send("cast heal")', is_script=True)
        await ButtonDispatcher(lua, recorder.sent.append).press(button.id, [button], {})
        assert recorder.sent == ["cast heal"]

    @pytest.mark.asyncio
    async def test_unknown_button(self, evaluator, recorder):
        assert not await ButtonDispatcher(evaluator, recorder.sent.append).press("nope", [], {})

    @pytest.mark.asyncio
    async def test_disabled_class_blocks_button(self, evaluator, recorder):
        off = RuleClass(name="off", active=False)
        button = Button(label="Look", command="look", class_id=off.id)
        dispatcher = ButtonDispatcher(evaluator, recorder.sent.append)
        assert not await dispatcher.press(button.id, [button], index_classes([off]))
        assert recorder.sent == []

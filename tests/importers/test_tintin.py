"""Tests for TinTin++ import."""

import re

import pytest

from mudrules.config import ImportSettings, ScriptLanguage
from mudrules.importers import import_summary, parse, parse_with_report
from mudrules.importers.tintin import convert_pattern, sound_from_command
from mudrules.models import TriggerType
from mudrules.pipeline import AliasExpander, TriggerMatcher


def _parse(text: str, language: ScriptLanguage = ScriptLanguage.LUA):
    return parse("tintin", text, ImportSettings(script_language=language))


class TestConvertPattern:
    """Tests for TinTin++ pattern conversion."""

    def test_positional_becomes_group(self):
        pattern = convert_pattern("%1 arrives")
        assert re.compile(pattern).groups == 1
        assert re.search(pattern, "Bob arrives").group(1) == "Bob"

    def test_wildcards_do_not_capture(self):
        pattern = convert_pattern("%* tells you *")
        assert re.compile(pattern).groups == 0
        assert re.search(pattern, "Bob tells you hi")

    def test_anchors_kept(self):
        pattern = convert_pattern("^You are hungry.$")
        assert pattern.startswith("^") and pattern.endswith("$")
        assert re.search(pattern, "You are hungry.")
        assert not re.search(pattern, "You are hungryX")

    def test_literal_text_is_escaped(self):
        assert re.search(convert_pattern("[HP] (%1)"), "[HP] (42)").group(1) == "42"


class TestSoundFromCommand:
    @pytest.mark.parametrize(
        "command, expected",
        [
            ("#system {aplay /sounds/ding.wav}", "ding"),
            ("#system afplay 'C:\\sounds\\bell.mp3' &", "bell"),
            ("#system {ls -la}", None),
            ("#system {aplay notes.txt}", None),
            ("say hello", None),
        ],
    )
    def test_sound_detection(self, command, expected):
        assert sound_from_command(command) == expected


class TestTinTinActions:
    """Tests for #action."""

    def test_single_placeholder_literal_response(self):
        """Test an action with one placeholder and a literal response."""
        bundle = _parse("#action {%1 arrives} {bow}")
        assert len(bundle.triggers) == 1
        trigger = bundle.triggers[0]
        assert trigger.type == TriggerType.REGEX
        assert re.compile(trigger.pattern).groups == 1
        assert 'send("bow")' in trigger.script

    @pytest.mark.asyncio
    async def test_converted_action_runs_in_lua(self, lua, recorder):
        bundle = _parse("#action {%1 tells you %2} {tell %1 got it;bow}")
        await TriggerMatcher(lua).evaluate("Bob tells you hello", bundle.triggers, {})
        assert recorder.sent == ["tell Bob got it", "bow"]

    @pytest.mark.asyncio
    async def test_converted_action_runs_in_python(self, evaluator, recorder):
        bundle = _parse("#action {%1 arrives} {bow %1}", ScriptLanguage.PYTHON)
        assert bundle.triggers[0].script.startswith("# Converted from TinTin++")
        await TriggerMatcher(evaluator).evaluate("Bob arrives", bundle.triggers, {})
        assert recorder.sent == ["bow Bob"]

    def test_dynamic_script_keeps_original(self):
        script = _parse("#action {%1 arrives} {bow %1}").triggers[0].script
        assert script.splitlines()[0] == "-- Converted from TinTin++"
        assert "-- Original: bow %1" in script

    def test_sound_command(self):
        result = parse_with_report("tintin", "#action {bell} {#system {aplay /sounds/ding.wav}}")
        assert 'playSound("ding")' in result.bundle.triggers[0].script
        assert result.referenced_sounds == ["ding"]

    def test_abbreviated_and_case_insensitive(self):
        bundle = _parse("#ACT {rat} {kill rat}\n#act {bat} {kill bat}")
        assert len(bundle.triggers) == 2

    def test_too_short_abbreviation_is_ignored(self):
        assert _parse("#ac {rat} {kill rat}").is_empty


class TestTinTinAliases:
    """Tests for #alias."""

    @pytest.mark.asyncio
    async def test_literal_alias_with_argument(self, evaluator):
        bundle = _parse("#alias {k} {kill %1}")
        alias = bundle.aliases[0]
        assert not alias.is_script
        assert await AliasExpander(evaluator).expand("k rat", bundle.aliases, {}) == "kill rat"

    @pytest.mark.asyncio
    async def test_whole_argument_text(self, evaluator):
        bundle = _parse("#alias {ss} {say %0}")
        assert await AliasExpander(evaluator).expand("ss hi there", bundle.aliases, {}) == "say hi there"

    @pytest.mark.asyncio
    async def test_last_argument_takes_the_rest(self, evaluator):
        bundle = _parse("#alias {tt} {tell %1 %2}")
        result = await AliasExpander(evaluator).expand("tt bob how are you", bundle.aliases, {})
        assert result == "tell bob how are you"

    @pytest.mark.asyncio
    async def test_alias_name_must_be_whole_word(self, evaluator):
        bundle = _parse("#alias {k} {kill %1}")
        assert await AliasExpander(evaluator).expand("kick", bundle.aliases, {}) is None

    def test_command_list_joined_by_newline(self):
        assert _parse("#alias {gg} {get all;put all in bag}").aliases[0].command == (
            "get all\nput all in bag"
        )

    @pytest.mark.asyncio
    async def test_alias_with_sound_is_a_script(self, lua, recorder):
        bundle = _parse("#alias {alarm} {#system {play alarm.ogg};say %1}")
        alias = bundle.aliases[0]
        assert alias.is_script
        await AliasExpander(lua).expand("alarm fire", bundle.aliases, {})
        assert recorder.sounds == [("alarm", None, False)]
        assert recorder.sent == ["say fire"]


class TestTinTinTimers:
    """Tests for #ticker and #delay."""

    def test_ticker(self):
        timer = _parse("#ticker {heal} {cast heal} {30}").timers[0]
        assert timer.name == "heal"
        assert timer.interval == 30000
        assert not timer.one_shot
        assert 'send("cast heal")' in timer.script

    def test_ticker_default_interval(self):
        assert _parse("#ticker {t} {save}").timers[0].interval == 60000

    def test_ticker_default_from_settings(self):
        settings = ImportSettings(default_ticker_seconds=5)
        assert parse("tintin", "#tick {t} {save}", settings).timers[0].interval == 5000

    def test_delay_two_fields(self):
        timer = _parse("#delay {5} {say hi}").timers[0]
        assert timer.one_shot
        assert timer.interval == 5000

    def test_delay_named(self):
        timer = _parse("#delay {d} {say hi} {2.5}").timers[0]
        assert timer.name == "d"
        assert timer.interval == 2500
        assert timer.one_shot


class TestTinTinClasses:
    def test_open_and_close(self):
        bundle = _parse(
            "#class {combat} {open}\n"
            "#action {rat} {kill rat}\n"
            "#class {combat} {close}\n"
            "#action {bob} {wave}\n"
        )
        assert [c.name for c in bundle.classes] == ["combat"]
        assert bundle.triggers[0].class_id == bundle.classes[0].id
        assert bundle.triggers[1].class_id is None

    def test_reopened_class_reuses_id(self):
        bundle = _parse(
            "#class {combat} {open}\n#alias {a} {b}\n#class {combat} {close}\n"
            "#class {combat} {open}\n#alias {c} {d}\n"
        )
        assert len(bundle.classes) == 1
        assert bundle.aliases[0].class_id == bundle.aliases[1].class_id


class TestTinTinRobustness:
    def test_malformed_lines_are_skipped(self):
        bundle = _parse(
            "#action {unclosed\n"
            "just some text\n"
            "// a comment\n"
            "#nonsense {x} {y}\n"
            "#action {ok} {fine}\n"
        )
        assert len(bundle.triggers) == 1

    def test_empty_input(self):
        bundle = _parse("")
        assert bundle.is_empty
        assert import_summary(bundle) == "No items found"

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            parse("zmud", "#action {a} {b}")

    def test_summary(self):
        result = parse_with_report(
            "tintin", "#action {a} {b}\n#action {c} {d}\n#alias {e} {#system {aplay f.wav}}"
        )
        assert import_summary(result.bundle, len(result.referenced_sounds)) == (
            "2 triggers, 1 aliases, 1 sound files"
        )

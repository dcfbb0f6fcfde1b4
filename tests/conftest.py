from dataclasses import dataclass, field
from typing import Optional

import pytest

from mudrules.config import EngineSettings, ScriptLanguage, get_settings, set_settings
from mudrules.models import VariableStore
from mudrules.sandbox import Capabilities, EvaluatorSandbox, LuaSandbox


@dataclass
class Recorder:
    """Collects everything scripts hand to the host."""

    sent: list[str] = field(default_factory=list)
    echoed: list[str] = field(default_factory=list)
    sounds: list[tuple[str, Optional[float], bool]] = field(default_factory=list)
    stopped: list[str] = field(default_factory=list)
    looped: list[tuple[str, Optional[float]]] = field(default_factory=list)
    positions: list[tuple[str, float, float, float]] = field(default_factory=list)

    def capabilities(self) -> Capabilities:
        return Capabilities(
            send=self.sent.append,
            echo=self.echoed.append,
            play_sound=lambda name, volume, loop: self.sounds.append((name, volume, loop)),
            stop_sound=self.stopped.append,
            loop_sound=lambda name, volume: self.looped.append((name, volume)),
            set_sound_position=lambda name, x, y, z: self.positions.append((name, x, y, z)),
        )


def make_settings(backend: ScriptLanguage = ScriptLanguage.PYTHON) -> EngineSettings:
    """Settings independent of the test environment."""
    settings = EngineSettings()
    settings.sandbox.backend = backend
    settings.automation.triggers_enabled = True
    settings.automation.aliases_enabled = True
    settings.automation.timers_enabled = True
    settings.automation.keybindings_enabled = True
    settings.automation.echo_script_errors = True
    settings.importer.script_language = ScriptLanguage.LUA
    settings.importer.default_ticker_seconds = 60
    return settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Give every test its own global settings, restored afterwards."""
    original_settings = get_settings()
    set_settings(make_settings())

    yield

    set_settings(original_settings)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def variables() -> VariableStore:
    return VariableStore()


@pytest.fixture
def evaluator(recorder, variables) -> EvaluatorSandbox:
    return EvaluatorSandbox(variables, recorder.capabilities())


@pytest.fixture
def lua(recorder, variables) -> LuaSandbox:
    return LuaSandbox(variables, recorder.capabilities())


@pytest.fixture
def settings() -> EngineSettings:
    return get_settings()

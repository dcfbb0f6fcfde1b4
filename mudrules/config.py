"""Configuration for the automation engine using pydantic-settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScriptLanguage(str, Enum):
    """Script back-ends a session can run."""

    LUA = "lua"
    PYTHON = "python"


class SandboxSettings(BaseSettings):
    """Settings for script execution."""

    model_config = SettingsConfigDict(
        env_prefix="MUDRULES_SANDBOX_",
    )

    backend: ScriptLanguage = Field(
        default=ScriptLanguage.LUA,
        description="Script back-end for the session (lua or python)",
    )
    lua_unpack_returned_tuples: bool = Field(
        default=True,
        description="Return multiple Lua results as a Python tuple",
    )


class AutomationSettings(BaseSettings):
    """Engine-wide switches for each rule consumer."""

    model_config = SettingsConfigDict(
        env_prefix="MUDRULES_AUTOMATION_",
    )

    triggers_enabled: bool = Field(default=True, description="Evaluate triggers on inbound lines")
    aliases_enabled: bool = Field(default=True, description="Expand aliases on outbound input")
    timers_enabled: bool = Field(default=True, description="Schedule timers")
    keybindings_enabled: bool = Field(default=True, description="Dispatch keybindings")
    sound_protocol_enabled: bool = Field(
        default=True,
        description="Play and strip MUD Sound Protocol tokens in inbound lines",
    )
    echo_script_errors: bool = Field(
        default=True,
        description="Echo script errors to the session output",
    )


class ImportSettings(BaseSettings):
    """Settings for legacy configuration import."""

    model_config = SettingsConfigDict(
        env_prefix="MUDRULES_IMPORT_",
    )

    script_language: ScriptLanguage = Field(
        default=ScriptLanguage.LUA,
        description="Language of scripts generated from legacy directives",
    )
    default_ticker_seconds: int = Field(
        default=60,
        ge=1,
        description="Interval used when a ticker directive omits one",
    )


class EngineSettings(BaseSettings):
    """Global settings for the whole engine."""

    model_config = SettingsConfigDict(
        env_prefix="MUDRULES_",
    )

    sandbox: SandboxSettings = Field(default_factory=SandboxSettings)
    automation: AutomationSettings = Field(default_factory=AutomationSettings)
    importer: ImportSettings = Field(default_factory=ImportSettings)


# Global settings instance that can be accessed throughout the application
_settings: EngineSettings | None = None


def get_settings() -> EngineSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings


def set_settings(settings: EngineSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings

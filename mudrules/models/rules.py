"""Rule entities and the canonical rule bundle."""

import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def new_rule_id() -> str:
    """Generate a fresh rule identifier."""
    return uuid.uuid4().hex[:12]


class TriggerType(str, Enum):
    """How a trigger pattern is matched against inbound text."""

    SUBSTRING = "substring"
    REGEX = "regex"


class RuleModel(BaseModel):
    """Base for all rule entities.

    Attributes are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=new_rule_id, frozen=True, description="Immutable identifier")


class GroupedRule(RuleModel):
    """A rule that can be switched on/off and optionally belongs to a class."""

    active: bool = Field(default=True, description="Per-rule enable flag")
    class_id: Optional[str] = Field(default=None, description="Weak reference to a RuleClass id")


class Trigger(GroupedRule):
    """Runs a script when inbound text matches."""

    pattern: str = Field(description="Substring or regular expression")
    type: TriggerType = Field(default=TriggerType.SUBSTRING, description="Match semantics")
    script: str = Field(default="", description="Script body run on match")

    @field_validator("type", mode="before")
    @classmethod
    def _accept_plain(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() == "plain":
            return TriggerType.SUBSTRING
        return value


class Alias(GroupedRule):
    """Rewrites or scripts outbound input."""

    pattern: str = Field(description="Regular expression tested against the input")
    command: str = Field(default="", description="Command template ($1..$n) or script body")
    is_script: bool = Field(default=False, description="Treat command as a script")


class Timer(GroupedRule):
    """Runs a script on a fixed interval."""

    name: str = Field(default="", description="Display name")
    interval: int = Field(ge=1, description="Interval in milliseconds")
    one_shot: bool = Field(default=False, description="Fire once, then report for deactivation")
    script: str = Field(default="", description="Script body run on each fire")


class Keybinding(GroupedRule):
    """Maps a key combination to a command or script."""

    key: str = Field(description="Canonical combination, e.g. 'Ctrl+Shift+A'")
    command: str = Field(default="", description="Command or script body")
    is_script: bool = Field(default=False, description="Treat command as a script")


class Button(GroupedRule):
    """An on-screen button bound to a command or script."""

    label: str = Field(default="", description="Text shown on the button")
    command: str = Field(default="", description="Command or script body")
    is_script: bool = Field(default=False, description="Treat command as a script")
    color: Optional[str] = Field(default=None, description="Optional styling hint")
    icon: Optional[str] = Field(default=None, description="Optional icon name")


class RuleClass(RuleModel):
    """A named on/off group referenced by other rules."""

    name: str = Field(description="Group name")
    active: bool = Field(default=True, description="Group enable flag")


class RuleBundle(BaseModel):
    """Aggregate of every rule kind; the export/import/persistence shape."""

    model_config = ConfigDict(extra="ignore")

    triggers: list[Trigger] = Field(default_factory=list)
    aliases: list[Alias] = Field(default_factory=list)
    timers: list[Timer] = Field(default_factory=list)
    keybindings: list[Keybinding] = Field(default_factory=list)
    buttons: list[Button] = Field(default_factory=list)
    classes: list[RuleClass] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_empty(self) -> bool:
        """True if the bundle holds no entities at all."""
        return not any(
            (self.triggers, self.aliases, self.timers, self.keybindings, self.buttons, self.classes)
        )

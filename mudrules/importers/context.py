"""State shared by the directives of one import pass."""

from dataclasses import dataclass, field
from typing import Optional

from mudrules.models import RuleBundle, RuleClass

from .scripts import ScriptWriter


@dataclass
class ParseContext:
    """Accumulates rules and class names across the lines of one input."""

    writer: ScriptWriter
    default_ticker_seconds: int = 60
    bundle: RuleBundle = field(default_factory=RuleBundle)
    class_ids: dict[str, str] = field(default_factory=dict)
    current_class_id: Optional[str] = None
    referenced_sounds: list[str] = field(default_factory=list)

    def class_id_for(self, name: str) -> str:
        """Id of the class with this name, creating it on first sight."""
        existing = self.class_ids.get(name)
        if existing is not None:
            return existing
        rule_class = RuleClass(name=name, active=True)
        self.bundle.classes.append(rule_class)
        self.class_ids[name] = rule_class.id
        return rule_class.id

    def add_sound(self, name: str) -> None:
        if name not in self.referenced_sounds:
            self.referenced_sounds.append(name)

"""Rule lists of one profile and their add/update/delete lifecycle.

Updates replace whole fields of an entity and never touch its id. Deleting a
class leaves its members in place; their class reference simply dangles and
is treated as no class.
"""

import logging
from typing import Any, Optional, TypeVar

from mudrules.models import (
    Alias,
    Button,
    Keybinding,
    RuleBundle,
    RuleClass,
    Timer,
    Trigger,
)
from mudrules.models.rules import RuleModel
from mudrules.pipeline.class_gate import index_classes

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RuleModel)

_KINDS = ("triggers", "aliases", "timers", "keybindings", "buttons", "classes")


class Rulebook:
    """Mutable holder of every rule list for one profile."""

    def __init__(self, bundle: Optional[RuleBundle] = None):
        self._bundle = RuleBundle()
        if bundle is not None:
            self.replace(bundle)

    @property
    def triggers(self) -> list[Trigger]:
        return self._bundle.triggers

    @property
    def aliases(self) -> list[Alias]:
        return self._bundle.aliases

    @property
    def timers(self) -> list[Timer]:
        return self._bundle.timers

    @property
    def keybindings(self) -> list[Keybinding]:
        return self._bundle.keybindings

    @property
    def buttons(self) -> list[Button]:
        return self._bundle.buttons

    @property
    def classes(self) -> list[RuleClass]:
        return self._bundle.classes

    def classes_by_id(self) -> dict[str, RuleClass]:
        return index_classes(self._bundle.classes)

    def to_bundle(self) -> RuleBundle:
        """Copy of every list, for export or persistence."""
        return self._bundle.model_copy(deep=True)

    def replace(self, bundle: RuleBundle) -> None:
        """Replace every list at once (last write wins)."""
        self._bundle = bundle.model_copy(deep=True)
        logger.debug("Rulebook replaced: %d trigger(s), %d alias(es), %d timer(s)",
                     len(self.triggers), len(self.aliases), len(self.timers))

    def _add(self, kind: str, entity: R) -> R:
        rules: list[Any] = getattr(self._bundle, kind)
        if any(existing.id == entity.id for existing in rules):
            raise ValueError(f"Duplicate id '{entity.id}' in {kind}")
        rules.append(entity)
        return entity

    def _update(self, kind: str, entity_id: str, changes: dict[str, Any]) -> Any:
        if "id" in changes:
            raise ValueError("Rule ids cannot be changed")
        rules: list[Any] = getattr(self._bundle, kind)
        for index, existing in enumerate(rules):
            if existing.id == entity_id:
                updated = type(existing).model_validate(
                    {**existing.model_dump(), **changes, "id": entity_id}
                )
                rules[index] = updated
                return updated
        raise KeyError(f"No entry '{entity_id}' in {kind}")

    def _delete(self, kind: str, entity_id: str) -> bool:
        rules: list[Any] = getattr(self._bundle, kind)
        for index, existing in enumerate(rules):
            if existing.id == entity_id:
                del rules[index]
                return True
        return False

    def add_trigger(self, trigger: Trigger) -> Trigger:
        return self._add("triggers", trigger)

    def update_trigger(self, trigger_id: str, **changes: Any) -> Trigger:
        return self._update("triggers", trigger_id, changes)

    def delete_trigger(self, trigger_id: str) -> bool:
        return self._delete("triggers", trigger_id)

    def add_alias(self, alias: Alias) -> Alias:
        return self._add("aliases", alias)

    def update_alias(self, alias_id: str, **changes: Any) -> Alias:
        return self._update("aliases", alias_id, changes)

    def delete_alias(self, alias_id: str) -> bool:
        return self._delete("aliases", alias_id)

    def add_timer(self, timer: Timer) -> Timer:
        return self._add("timers", timer)

    def update_timer(self, timer_id: str, **changes: Any) -> Timer:
        return self._update("timers", timer_id, changes)

    def delete_timer(self, timer_id: str) -> bool:
        return self._delete("timers", timer_id)

    def add_keybinding(self, keybinding: Keybinding) -> Keybinding:
        return self._add("keybindings", keybinding)

    def update_keybinding(self, keybinding_id: str, **changes: Any) -> Keybinding:
        return self._update("keybindings", keybinding_id, changes)

    def delete_keybinding(self, keybinding_id: str) -> bool:
        return self._delete("keybindings", keybinding_id)

    def add_button(self, button: Button) -> Button:
        return self._add("buttons", button)

    def update_button(self, button_id: str, **changes: Any) -> Button:
        return self._update("buttons", button_id, changes)

    def delete_button(self, button_id: str) -> bool:
        return self._delete("buttons", button_id)

    def add_class(self, rule_class: RuleClass) -> RuleClass:
        return self._add("classes", rule_class)

    def update_class(self, class_id: str, **changes: Any) -> RuleClass:
        return self._update("classes", class_id, changes)

    def delete_class(self, class_id: str) -> bool:
        """Remove a class; members keep their (now dangling) reference."""
        return self._delete("classes", class_id)

    def find_class(self, name_or_id: str) -> Optional[RuleClass]:
        for rule_class in self.classes:
            if rule_class.id == name_or_id:
                return rule_class
        lowered = name_or_id.lower()
        for rule_class in self.classes:
            if rule_class.name.lower() == lowered:
                return rule_class
        return None

    def set_class_active(self, name_or_id: str, active: bool) -> Optional[RuleClass]:
        """Switch a class on or off by id or name; None if there is no such class."""
        rule_class = self.find_class(name_or_id)
        if rule_class is None:
            logger.warning("No class named '%s'", name_or_id)
            return None
        return self.update_class(rule_class.id, active=active)

    def counts(self) -> dict[str, int]:
        return {kind: len(getattr(self._bundle, kind)) for kind in _KINDS}

"""Enablement predicate shared by every rule consumer."""

from typing import Iterable, Mapping, Protocol, TypeVar

from mudrules.models import RuleClass


class Gated(Protocol):
    active: bool
    class_id: str | None


G = TypeVar("G", bound=Gated)


def enabled(entity: Gated, classes_by_id: Mapping[str, RuleClass]) -> bool:
    """Check whether a rule may fire.

    A rule fires only when its own flag is set and, if it names a class that
    still exists, that class is active too. A dangling class reference counts
    as no class.
    """
    if not entity.active:
        return False
    if entity.class_id is None:
        return True
    rule_class = classes_by_id.get(entity.class_id)
    return rule_class is None or rule_class.active


def enabled_rules(rules: Iterable[G], classes_by_id: Mapping[str, RuleClass]) -> list[G]:
    """Filter rules down to those passing the gate, keeping list order."""
    return [rule for rule in rules if enabled(rule, classes_by_id)]


def index_classes(classes: Iterable[RuleClass]) -> dict[str, RuleClass]:
    """Build the id -> class lookup used by `enabled`."""
    return {rule_class.id: rule_class for rule_class in classes}

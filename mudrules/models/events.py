"""Input events consumed by the dispatchers."""

from dataclasses import dataclass

FREE_TEXT_TARGETS = frozenset({"input", "textarea"})


@dataclass
class KeyEvent:
    """A key-down event as delivered by the host UI layer."""

    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False
    target: str = "body"  # element type that had focus
    default_prevented: bool = False
    propagation_stopped: bool = False

    @property
    def targets_text_input(self) -> bool:
        """True if the event was aimed at a free-text input control."""
        return self.target.lower() in FREE_TEXT_TARGETS

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

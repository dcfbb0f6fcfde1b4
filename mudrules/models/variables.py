"""Per-session variable store exposed to scripts."""

import logging
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

Scalar = Union[str, int, float, bool, None]

_SCALAR_TYPES = (str, int, float, bool, type(None))


class VariableStore:
    """Name -> scalar mapping owned by one profile session.

    Scripts read and write it through the sandbox capabilities only. The
    engine never iterates it; `snapshot` and `replace` exist for the
    persistence collaborator.
    """

    def __init__(self, initial: Optional[Mapping[str, Scalar]] = None):
        self._values: dict[str, Scalar] = {}
        if initial:
            self.replace(initial)

    def get(self, name: str) -> Scalar:
        return self._values.get(name)

    def set(self, name: str, value: Scalar) -> None:
        if not isinstance(value, _SCALAR_TYPES):
            raise TypeError(
                f"Variable '{name}' must be a string, number, boolean or None, "
                f"got {type(value).__name__}"
            )
        self._values[name] = value
        logger.debug("Variable %s = %r", name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def snapshot(self) -> dict[str, Scalar]:
        """Return a copy of all variables."""
        return dict(self._values)

    def replace(self, values: Mapping[str, Scalar]) -> None:
        """Replace the whole store (last write wins)."""
        new_values: dict[str, Scalar] = {}
        for name, value in values.items():
            if not isinstance(value, _SCALAR_TYPES):
                raise TypeError(f"Variable '{name}' has non-scalar value {value!r}")
            new_values[name] = value
        self._values = new_values

"""JSON export and import of the canonical rule bundle."""

import json
from pathlib import Path
from typing import Any

from mudrules.models import RuleBundle


def bundle_to_dict(bundle: RuleBundle) -> dict[str, Any]:
    """Convert a bundle to its wire shape (camelCase keys, unset optionals omitted)."""
    return bundle.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_bundle_as_json(bundle: RuleBundle, *, pretty: bool = True) -> str:
    """Format a rule bundle as JSON.

    Args:
        bundle: The bundle to export
        pretty: If True, format with indentation for readability

    Returns:
        JSON-formatted string
    """
    data = bundle_to_dict(bundle)
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def load_bundle(text: str) -> RuleBundle:
    """Load a bundle from JSON text.

    Raises:
        pydantic.ValidationError: If the JSON does not describe a bundle
    """
    return RuleBundle.model_validate_json(text)


def load_bundle_file(path: Path) -> RuleBundle:
    """Load a bundle from a JSON file."""
    return load_bundle(Path(path).read_text(encoding="utf-8"))


def write_bundle_file(bundle: RuleBundle, path: Path, *, pretty: bool = True) -> None:
    """Write a bundle to a JSON file."""
    Path(path).write_text(format_bundle_as_json(bundle, pretty=pretty) + "\n", encoding="utf-8")

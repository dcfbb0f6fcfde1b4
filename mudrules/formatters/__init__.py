"""Output formatters for rule bundles."""

from .json import (
    bundle_to_dict,
    format_bundle_as_json,
    load_bundle,
    load_bundle_file,
    write_bundle_file,
)

__all__ = [
    "bundle_to_dict",
    "format_bundle_as_json",
    "load_bundle",
    "load_bundle_file",
    "write_bundle_file",
]

"""Schema validation helpers for generated manifests."""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Mapping

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema bundled in the package."""
    with resources.files("mapgen.schemas").joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_manifest(manifest: Mapping[str, Any]) -> None:
    """Validate a merged manifest against the schema."""
    schema = _load_schema("manifest.schema.json")
    jsonschema.validate(manifest, schema)

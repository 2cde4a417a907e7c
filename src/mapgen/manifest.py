"""Merge generator summaries into map info documents."""

from __future__ import annotations

import json
from typing import Any, Mapping

from mapgen.contracts import validate_manifest
from mapgen.terrain.models import GenerationResult, TerrainVariant

VARIANT_KEYS = ("map", "map4x", "map16x")


def variant_summary(variant: TerrainVariant) -> dict[str, int]:
    """Return the manifest summary block for a terrain variant."""
    return {
        "width": variant.width,
        "height": variant.height,
        "num_land_tiles": variant.num_land_tiles,
    }


def _reject_constant(token: str) -> Any:
    raise ValueError(f"invalid JSON constant {token!r}")


def load_manifest_document(raw: bytes) -> dict[str, Any]:
    """Parse an info.json payload; the top level must be a JSON object.

    NaN and Infinity tokens are rejected. Nesting too deep for the decoder
    is reported as a ValueError.
    """
    try:
        payload = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except RecursionError as exc:
        raise ValueError("document is nested too deeply") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def merge_manifest(document: Mapping[str, Any], result: GenerationResult) -> dict[str, Any]:
    """Return a copy of ``document`` with the three variant summaries set.

    Keys already in the document keep their position and value; only the
    summary keys are added or replaced.
    """
    merged = dict(document)
    variants = result.variants()
    for key in VARIANT_KEYS:
        merged[key] = variant_summary(variants[key])
    return merged


def dump_manifest(manifest: Mapping[str, Any]) -> str:
    """Validate and serialize a manifest as indented JSON."""
    validate_manifest(manifest)
    return json.dumps(manifest, indent=2, ensure_ascii=False, allow_nan=False)

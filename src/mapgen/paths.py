"""Input and output locations for map assets."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from mapgen.errors import PathResolutionError
from mapgen.registry import MapDescriptor

ENV_ROOT = "MAPGEN_ROOT"

IMAGE_FILENAME = "image.png"
INFO_FILENAME = "info.json"
MANIFEST_FILENAME = "manifest.json"
THUMBNAIL_FILENAME = "thumbnail.webp"
VARIANT_FILENAMES = {
    "map": "map.bin",
    "map4x": "map4x.bin",
    "map16x": "map16x.bin",
}


def _working_directory() -> Path:
    try:
        return Path.cwd()
    except OSError as exc:
        raise PathResolutionError(f"failed to get working directory: {exc}") from exc


@dataclass(frozen=True)
class AssetLocator:
    """Resolve asset roots relative to the generator working directory.

    Sources live under ``<root>/assets``; outputs are written next to the
    generator, into the repository's ``resources`` and ``tests/testdata``
    trees. Test and production maps never share a directory.
    """

    root: Path

    @classmethod
    def from_environment(cls, root: Path | str | None = None) -> "AssetLocator":
        """Build a locator from an explicit root, MAPGEN_ROOT, or the cwd."""
        if root is None:
            env_root = os.environ.get(ENV_ROOT)
            root = Path(env_root) if env_root else _working_directory()
        root_path = Path(root)
        if not root_path.is_absolute():
            root_path = _working_directory() / root_path
        return cls(root=Path(os.path.normpath(root_path)))

    def input_dir(self, is_test: bool) -> Path:
        """Return the directory containing source map folders."""
        if is_test:
            return self.root / "assets" / "test_maps"
        return self.root / "assets" / "maps"

    def output_dir(self, is_test: bool) -> Path:
        """Return the directory generated map folders are written to."""
        parent = self.root.parent
        if is_test:
            return parent / "tests" / "testdata" / "maps"
        return parent / "resources" / "maps"

    def map_input_dir(self, descriptor: MapDescriptor) -> Path:
        return self.input_dir(descriptor.is_test) / descriptor.name

    def map_output_dir(self, descriptor: MapDescriptor) -> Path:
        return self.output_dir(descriptor.is_test) / descriptor.name


def input_map_dir(is_test: bool) -> Path:
    """Return the input root for the current environment."""
    return AssetLocator.from_environment().input_dir(is_test)


def output_map_dir(is_test: bool) -> Path:
    """Return the output root for the current environment."""
    return AssetLocator.from_environment().output_dir(is_test)

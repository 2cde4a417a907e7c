"""Error types raised by map builds."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ConfigurationError(ValueError):
    """Raised when a build request names maps that are not registered."""

    pass


class PathResolutionError(RuntimeError):
    """Raised when the working directory for asset paths cannot be determined."""

    pass


class MapBuildError(RuntimeError):
    """Base class for failures scoped to a single map build."""

    step = "build"

    def __init__(self, map_name: str, message: str, *, path: Path | None = None) -> None:
        self.map_name = map_name
        self.path = path
        self.detail = message
        super().__init__(f"{map_name}: {message}")


class InputReadError(MapBuildError):
    """Raised when a source image or info document cannot be read."""

    step = "read_inputs"


class ManifestParseError(MapBuildError):
    """Raised when info.json is not a JSON object."""

    step = "parse_manifest"


class GenerationError(MapBuildError):
    """Raised when the terrain generator fails for a map."""

    step = "generate"


class OutputWriteError(MapBuildError):
    """Raised when an output directory or artifact cannot be written."""

    step = "write_artifacts"

    def __init__(
        self,
        map_name: str,
        message: str,
        *,
        artifact: str,
        path: Path | None = None,
    ) -> None:
        self.artifact = artifact
        super().__init__(map_name, message, path=path)


class ManifestWriteError(MapBuildError):
    """Raised when the merged manifest cannot be serialized or written."""

    step = "write_manifest"


class BuildFailedError(RuntimeError):
    """Raised when one or more map builds failed."""

    def __init__(self, failures: Sequence[MapBuildError], *, report_all: bool = False) -> None:
        if not failures:
            raise ValueError("BuildFailedError requires at least one failure.")
        self.failures = tuple(failures)
        self.first = self.failures[0]
        if report_all and len(self.failures) > 1:
            lines = [f"{len(self.failures)} maps failed:"]
            lines.extend(f"  {failure}" for failure in self.failures)
            message = "\n".join(lines)
        else:
            message = str(self.first)
        super().__init__(message)

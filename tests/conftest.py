from __future__ import annotations

import os
import sys
from pathlib import Path


def _venv_python(root: Path) -> Path | None:
    if os.name == "nt":
        candidate = root / ".venv" / "Scripts" / "python.exe"
    else:
        candidate = root / ".venv" / "bin" / "python"
    return candidate if candidate.exists() else None


def _reexec_in_venv() -> None:
    if os.environ.get("MAPGEN_SKIP_VENV_REEXEC") == "1":
        return
    root = Path(__file__).resolve().parents[1]
    venv_python = _venv_python(root)
    if not venv_python:
        return
    if Path(sys.executable).resolve() == venv_python.resolve():
        return
    os.environ["MAPGEN_SKIP_VENV_REEXEC"] = "1"
    os.execv(
        str(venv_python),
        [str(venv_python), "-m", "pytest", *sys.argv[1:]],
    )


_reexec_in_venv()

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import pytest  # noqa: E402

from mapgen import paths, perf  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch) -> None:
    """Prevent local generator settings from bleeding into tests."""
    monkeypatch.delenv(paths.ENV_ROOT, raising=False)
    monkeypatch.delenv(perf.ENV_PROFILE_DIR, raising=False)


@pytest.fixture
def generator_root(tmp_path: Path) -> Path:
    """Working directory laid out like the generator inside a repository."""
    root = tmp_path / "repo" / "map-generator"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def locator(generator_root: Path) -> paths.AssetLocator:
    return paths.AssetLocator(root=generator_root)

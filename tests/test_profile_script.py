from __future__ import annotations

import importlib.util
import json
import sys
from pathlib import Path

from mapgen.paths import AssetLocator
from mapgen.registry import MapDescriptor
from tests.utils import write_map_source


def _load_script(name: str):
    module_path = Path(__file__).resolve().parents[1] / "scripts" / name
    spec = importlib.util.spec_from_file_location(name.replace(".py", ""), module_path)
    module = importlib.util.module_from_spec(spec)
    assert spec and spec.loader
    spec.loader.exec_module(module)
    return module


def test_selection_slug() -> None:
    module = _load_script("profile_build.py")
    assert module._selection_slug(None) == "all"
    assert module._selection_slug("world") == "world"
    assert module._selection_slug("world,plains") == "multi"


def test_profile_build_script(generator_root: Path, tmp_path: Path, monkeypatch) -> None:
    module = _load_script("profile_build.py")
    locator = AssetLocator(root=generator_root)
    write_map_source(locator, MapDescriptor("plains", is_test=True))
    profile_dir = tmp_path / "profiles"

    monkeypatch.setattr(
        sys,
        "argv",
        [
            "profile_build.py",
            "--maps",
            "plains",
            "--root",
            str(generator_root),
            "--profile-dir",
            str(profile_dir),
            "--summary",
        ],
    )

    assert module.main() == 0
    assert (profile_dir / "build_plains.pstats").exists()
    assert (profile_dir / "build_plains.txt").exists()
    metrics = json.loads((profile_dir / "build_plains.metrics.json").read_text(encoding="utf-8"))
    assert metrics["spans"]["generate"]["count"] == 1


def test_profile_build_defaults_to_single_worker(tmp_path: Path, monkeypatch) -> None:
    module = _load_script("profile_build.py")
    monkeypatch.setattr(sys, "argv", ["profile_build.py", "--maps", "world"])
    parser_args = None

    def fake_main(cli_args):
        nonlocal parser_args
        parser_args = cli_args
        return 0

    monkeypatch.setattr(module.cli, "main", fake_main)
    monkeypatch.chdir(tmp_path)

    assert module.main() == 0
    assert parser_args[parser_args.index("--jobs") + 1] == "1"

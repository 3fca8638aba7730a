"""Tests for runtime dependency parity between package imports and metadata."""

from __future__ import annotations

import ast
import re
import sys
import tomllib
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _requirement_name(requirement: str) -> str:
    match = re.match(r"[A-Za-z0-9_.-]+", requirement)
    assert match is not None
    return match.group(0).lower().replace("_", "-")


def _imported_top_level_names(package_dir: Path) -> set[str]:
    names: set[str] = set()
    for path in package_dir.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names.add(node.module.split(".")[0])
    return names


def test_pyproject_runtime_deps_cover_third_party_imports() -> None:
    """Every third-party import in live_filter should be a declared dependency."""
    repo_root = _repo_root()

    pyproject_data = tomllib.loads((repo_root / "pyproject.toml").read_text(encoding="utf-8"))
    dependency_names = {
        _requirement_name(requirement)
        for requirement in pyproject_data["project"]["dependencies"]
    }

    third_party = {
        name
        for name in _imported_top_level_names(repo_root / "live_filter")
        if name not in sys.stdlib_module_names and name != "live_filter"
    }

    for import_name in sorted(third_party):
        assert _requirement_name(import_name) in dependency_names, (
            f"'{import_name}' is imported by live_filter but missing "
            "from pyproject.toml dependencies."
        )

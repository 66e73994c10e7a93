"""
Shared fixtures for claude-archive tests.

Builds throwaway ~/.claude/projects-style trees under tmp_path.
"""

import json
from pathlib import Path

import pytest


def write_jsonl(path: Path, records: list, raw_lines: list[str] | None = None) -> Path:
    """Write records as JSON Lines, optionally followed by raw (possibly invalid) lines."""
    lines = [json.dumps(r) if not isinstance(r, str) else r for r in records]
    if raw_lines:
        lines.extend(raw_lines)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
    return path


def snapshot(root: Path) -> dict[str, bytes | None]:
    """Map every path under root to its bytes (None for directories)."""
    return {
        str(p.relative_to(root)): (p.read_bytes() if p.is_file() else None)
        for p in sorted(root.rglob("*"))
    }


@pytest.fixture
def projects_dir(tmp_path):
    """Empty projects base directory."""
    base = tmp_path / "projects"
    base.mkdir()
    return base


@pytest.fixture
def project_dir(projects_dir):
    """A single encoded project folder."""
    path = projects_dir / "-Users-alice-app"
    path.mkdir()
    return path


@pytest.fixture(name="write_jsonl")
def write_jsonl_fixture():
    return write_jsonl


@pytest.fixture(name="snapshot")
def snapshot_fixture():
    return snapshot

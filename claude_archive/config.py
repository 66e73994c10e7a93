"""
Configuration management for claude-archive.

Settings come from ~/.claude/claude-archive-config.json, then environment
variables (a project .env file is loaded first), then explicit arguments.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

CONFIG_PATH = Path.home() / ".claude" / "claude-archive-config.json"
DEFAULT_PROJECTS_DIR = Path.home() / ".claude" / "projects"

MODE_ENV_VAR = "CLAUDE_ARCHIVE_MODE"
PROJECTS_DIR_ENV_VAR = "CLAUDE_ARCHIVE_PROJECTS_DIR"


def _filter_dataclass_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter dict to only include fields that exist in the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


class RunMode(str, Enum):
    """
    Whether archive operations mutate the filesystem.

    Modes:
    - "normal": files are moved
    - "dry-run": read-only preview requested by the operator
    - "dev": destructive operations disabled for development
    """

    NORMAL = "normal"
    DRY_RUN = "dry-run"
    DEV = "dev"

    @classmethod
    def parse(cls, value: "str | RunMode") -> "RunMode":
        """Parse a mode name, raising ValueError for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown run mode {value!r} (expected one of: {valid})") from None

    @property
    def is_read_only(self) -> bool:
        return self is not RunMode.NORMAL

    @property
    def tag(self) -> str:
        """Prefix for simulated archive paths."""
        if self is RunMode.DRY_RUN:
            return "[DRY-RUN]"
        if self is RunMode.DEV:
            return "[DEV]"
        return ""

    @property
    def banner(self) -> str | None:
        """User-facing notice for read-only modes."""
        if self is RunMode.DRY_RUN:
            return "Read-only mode: no files will be moved"
        if self is RunMode.DEV:
            return "DEV MODE: destructive operations disabled"
        return None


@dataclass
class ArchiveConfig:
    """
    Complete claude-archive configuration.

    The run mode lives here and is handed to ArchiveEngine explicitly;
    nothing reads it from module state.
    """

    projects_dir: str = str(DEFAULT_PROJECTS_DIR)
    archive_folder: str = ".archived"
    mode: RunMode = RunMode.NORMAL
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        self.mode = RunMode.parse(self.mode)
        level = str(self.log_level).strip().upper()
        # getLevelName maps known names to ints and anything else to a string
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {self.log_level!r}")
        self.log_level = level
        self.projects_dir = str(Path(self.projects_dir).expanduser())

    @property
    def projects_path(self) -> Path:
        return Path(self.projects_dir)

    @classmethod
    def load(cls, path: Path | None = None, env_file: Path | None = None) -> "ArchiveConfig":
        """
        Load configuration from file, then apply environment overrides.

        Args:
            path: Optional config file path. Defaults to ~/.claude/claude-archive-config.json
            env_file: Optional .env file. Defaults to the nearest .env above the cwd

        Returns:
            ArchiveConfig with file values and env overrides applied
        """
        if path is None:
            path = CONFIG_PATH

        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = json.loads(path.read_text())
            except (json.JSONDecodeError, OSError):
                # Use defaults on error
                data = {}
            if not isinstance(data, dict):
                data = {}

        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv(find_dotenv(usecwd=True))

        env_mode = os.getenv(MODE_ENV_VAR)
        if env_mode:
            data["mode"] = env_mode
        env_dir = os.getenv(PROJECTS_DIR_ENV_VAR)
        if env_dir:
            data["projects_dir"] = env_dir

        return cls(**_filter_dataclass_fields(data, cls))

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_PATH

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(
                {
                    "projects_dir": self.projects_dir,
                    "archive_folder": self.archive_folder,
                    "mode": self.mode.value,
                    "log_level": self.log_level,
                },
                f,
                indent=2,
            )

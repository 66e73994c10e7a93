"""
Project discovery under ~/.claude/projects.

Every call re-scans the filesystem; nothing is cached or indexed.
"""

from __future__ import annotations

import json
import locale
import logging
from pathlib import Path

from .archive_schema import Project
from .config import ArchiveConfig
from .diagnostics import RecoveryStats, record
from .errors import DiscoveryError
from .path_codec import decode_folder_name, shorten_path
from .session_parser import TRANSCRIPT_SUFFIX

logger = logging.getLogger(__name__)

# Claude project folders start with "-"
PROJECT_MARKER = "-"


class ProjectScanner:
    """
    Enumerate Claude Code projects that contain at least one session.

    Implements discovery for the project picker: folder names are decoded
    for display, but the cwd recorded in the first transcript is preferred
    because the folder encoding is lossy.
    """

    def __init__(self, config: ArchiveConfig | None = None, stats: RecoveryStats | None = None):
        self.config = config or ArchiveConfig()
        self.stats = stats

    @property
    def base_dir(self) -> Path:
        return self.config.projects_path

    def scan(self) -> list[Project]:
        """
        Get all projects, sorted by readable path.

        Returns:
            Projects with at least one transcript

        Raises:
            DiscoveryError: If the projects folder is missing or unreadable
        """
        try:
            entries = sorted(self.base_dir.iterdir())
        except OSError as e:
            error = DiscoveryError.from_os_error(e, str(self.base_dir))
            logger.error(error.message)
            raise error from e

        projects = []
        for entry in entries:
            if not entry.name.startswith(PROJECT_MARKER):
                continue
            if not entry.is_dir():
                continue

            transcripts = self._list_transcripts(entry)
            # Skip empty projects
            if not transcripts:
                continue

            projects.append(
                Project(
                    folder_name=entry.name,
                    path=str(entry),
                    readable_path=self._readable_path(transcripts[0], entry.name),
                    session_count=len(transcripts),
                )
            )

        return sorted(projects, key=_readable_path_key())

    def _list_transcripts(self, project_path: Path) -> list[Path]:
        try:
            return sorted(p for p in project_path.iterdir() if p.name.endswith(TRANSCRIPT_SUFFIX))
        except OSError as e:
            record(self.stats, "unreadable_folders", project_path, e)
            return []

    def _readable_path(self, first_transcript: Path, folder_name: str) -> str:
        """Get human-readable path from the first transcript, or decode the folder name."""
        try:
            with open(first_transcript, encoding="utf-8") as f:
                first_line = f.readline()
            if first_line.strip():
                parsed = json.loads(first_line)
                if isinstance(parsed, dict) and isinstance(parsed.get("cwd"), str):
                    return shorten_path(parsed["cwd"])
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            record(self.stats, "unreadable_transcripts", first_transcript, e)

        return decode_folder_name(folder_name)


def _readable_path_key():
    """
    Sort key for display paths under the current LC_COLLATE.

    The C and POSIX locales collate by code point, which puts every
    uppercase path before every lowercase one, so they fall back to a
    case-insensitive key.
    """
    current = locale.setlocale(locale.LC_COLLATE)
    if current in ("C", "POSIX") or current.startswith("C."):
        return lambda p: (p.readable_path.casefold(), p.readable_path)
    return lambda p: (locale.strxfrm(p.readable_path), p.readable_path)


def get_projects(config: ArchiveConfig | None = None, stats: RecoveryStats | None = None) -> list[Project]:
    """Get all Claude Code projects (see ProjectScanner.scan)."""
    return ProjectScanner(config, stats).scan()


def projects_dir_exists(config: ArchiveConfig | None = None) -> bool:
    """Check if the Claude projects directory exists."""
    config = config or ArchiveConfig()
    try:
        return config.projects_path.is_dir()
    except OSError:
        return False


def find_project(projects: list[Project], name: str) -> Project | None:
    """Find a project by folder name, readable path or decoded path."""
    for project in projects:
        if name in (project.folder_name, project.readable_path, project.path):
            return project
    for project in projects:
        if name.rstrip("/") == decode_folder_name(project.folder_name):
            return project
    return None


__all__ = [
    "ProjectScanner",
    "find_project",
    "get_projects",
    "projects_dir_exists",
]

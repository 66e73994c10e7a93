"""
Data models for claude-archive.

Pydantic models shared by discovery, parsing, archiving and any
presentation layer. All models are frozen: a Project or Session is built
once per scan and never mutated afterwards.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .errors import ArchiveErrorKind


class Project(BaseModel):
    """A Claude Code project folder under ~/.claude/projects."""

    model_config = ConfigDict(frozen=True)

    folder_name: str  # e.g. "-Users-martin-Development-foo"
    path: str
    readable_path: str
    session_count: int


class Session(BaseModel):
    """One recorded conversation backed by a .jsonl transcript."""

    model_config = ConfigDict(frozen=True)

    id: str  # filename without .jsonl
    path: str
    project_path: str
    size: int
    summary: str | None = None
    has_custom_title: bool = False
    custom_title: str | None = None
    timestamp: datetime | None = None
    agent_count: int = 0


class ArchiveFileKind(str, Enum):
    """Role of an artifact within a session's archive footprint."""

    TRANSCRIPT = "transcript"
    COMPANION_FOLDER = "companion-folder"
    AGENT_TRANSCRIPT = "agent-transcript"
    AGENT_COMPANION_FOLDER = "agent-companion-folder"


class ArchiveFile(BaseModel):
    """A single file or folder that moves with a session."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    size: int
    kind: ArchiveFileKind


class ArchiveFileSet(BaseModel):
    """
    The complete archive footprint of one session.

    Files are in canonical order: transcript, companion folder, then each
    agent transcript followed by its own companion folder.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    files: list[ArchiveFile] = Field(default_factory=list)
    total_size: int = 0


class StrandedArtifact(BaseModel):
    """An artifact whose best-effort move failed and stayed in place."""

    model_config = ConfigDict(frozen=True)

    file: ArchiveFile
    error_kind: ArchiveErrorKind
    error: str


class ArchiveResult(BaseModel):
    """Outcome of archiving (or simulating the archive of) one session."""

    model_config = ConfigDict(frozen=True)

    session: Session
    success: bool
    archive_path: str | None = None
    error: str | None = None
    error_kind: ArchiveErrorKind | None = None
    moved: list[ArchiveFile] = Field(default_factory=list)
    stranded: list[StrandedArtifact] = Field(default_factory=list)
    simulated: bool = False


class ArchiveSummary(BaseModel):
    """Aggregate counts over a batch of ArchiveResults."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    total_size: int = 0


__all__ = [
    "ArchiveFile",
    "ArchiveFileKind",
    "ArchiveFileSet",
    "ArchiveResult",
    "ArchiveSummary",
    "Project",
    "Session",
    "StrandedArtifact",
]

"""
FileSetResolver - expand a Session into everything that moves with it.

A session's archive footprint is:
1. the transcript ({session_id}.jsonl)
2. its companion folder ({session_id}/), if it exists and is non-empty
3. each owned agent transcript (agent-*.jsonl whose first record has
   sessionId == session_id), followed by its own non-empty companion folder
"""

from __future__ import annotations

import os
from pathlib import Path

from .archive_schema import ArchiveFile, ArchiveFileKind, ArchiveFileSet, Session
from .diagnostics import RecoveryStats, record
from .session_parser import TRANSCRIPT_SUFFIX, agent_belongs_to_session, list_agent_transcripts


def get_folder_size(folder_path: Path, stats: RecoveryStats | None = None) -> int:
    """
    Get total size of a folder (0 if it doesn't exist).

    Depth-first walk summing regular file sizes. Symlinks to files count
    their target's size; symlinked directories are not descended into.
    Directories add nothing themselves. Unreadable or dangling entries
    count as 0.
    """
    try:
        entries = list(os.scandir(folder_path))
    except (FileNotFoundError, NotADirectoryError):
        return 0
    except OSError as e:
        record(stats, "unreadable_folders", folder_path, e)
        return 0

    total = 0
    for entry in entries:
        try:
            if entry.is_file():
                total += entry.stat().st_size
            elif entry.is_dir(follow_symlinks=False):
                total += get_folder_size(Path(entry.path), stats)
        except OSError as e:
            record(stats, "unreadable_folders", entry.path, e)
    return total


def companion_folder_path(transcript_path: Path) -> Path:
    """The same-named folder next to a transcript: foo.jsonl -> foo/."""
    name = transcript_path.name
    if name.endswith(TRANSCRIPT_SUFFIX):
        name = name[: -len(TRANSCRIPT_SUFFIX)]
    return transcript_path.parent / name


class FileSetResolver:
    """Resolve the archive footprint of sessions for preview and archiving."""

    def __init__(self, stats: RecoveryStats | None = None):
        self.stats = stats

    def find_owned_agents(self, session: Session) -> list[Path]:
        """Agent transcripts in the session's project owned by the session."""
        try:
            agents = list_agent_transcripts(Path(session.project_path))
        except OSError as e:
            record(self.stats, "unreadable_agents", session.project_path, e)
            return []
        return [a for a in agents if agent_belongs_to_session(a, session.id, self.stats)]

    def _folder_file(self, folder: Path, kind: ArchiveFileKind) -> ArchiveFile | None:
        size = get_folder_size(folder, self.stats)
        if size <= 0:
            return None
        return ArchiveFile(name=folder.name + "/", path=str(folder), size=size, kind=kind)

    def resolve(self, session: Session) -> ArchiveFileSet:
        """
        Get all files for a single session, in canonical order.

        Args:
            session: Session to resolve

        Returns:
            ArchiveFileSet with the transcript first
        """
        transcript = Path(session.path)
        files = [
            ArchiveFile(
                name=transcript.name,
                path=str(transcript),
                size=session.size,
                kind=ArchiveFileKind.TRANSCRIPT,
            )
        ]

        folder = self._folder_file(companion_folder_path(transcript), ArchiveFileKind.COMPANION_FOLDER)
        if folder is not None:
            files.append(folder)

        for agent_path in self.find_owned_agents(session):
            try:
                agent_size = agent_path.stat().st_size
            except OSError as e:
                record(self.stats, "unreadable_agents", agent_path, e)
                continue
            files.append(
                ArchiveFile(
                    name=agent_path.name,
                    path=str(agent_path),
                    size=agent_size,
                    kind=ArchiveFileKind.AGENT_TRANSCRIPT,
                )
            )
            agent_folder = self._folder_file(
                companion_folder_path(agent_path), ArchiveFileKind.AGENT_COMPANION_FOLDER
            )
            if agent_folder is not None:
                files.append(agent_folder)

        return ArchiveFileSet(
            session_id=session.id,
            files=files,
            total_size=sum(f.size for f in files),
        )

    def get_files_to_archive(self, sessions: list[Session]) -> list[ArchiveFileSet]:
        """Get all files that will be archived for a list of sessions."""
        return [self.resolve(session) for session in sessions]


def get_files_to_archive(
    sessions: list[Session], stats: RecoveryStats | None = None
) -> list[ArchiveFileSet]:
    """Convenience wrapper around FileSetResolver.get_files_to_archive."""
    return FileSetResolver(stats).get_files_to_archive(sessions)


__all__ = [
    "FileSetResolver",
    "companion_folder_path",
    "get_files_to_archive",
    "get_folder_size",
]

"""
Claude Code session parser.

Reads the JSONL transcripts Claude Code keeps at:
~/.claude/projects/{encoded_project}/{session_id}.jsonl

Only the metadata needed to pick sessions for archiving is extracted:
- custom titles ("custom-title" records, last one wins)
- summaries ("summary" records, first one wins)
- the first timestamp in file order
- the number of agent transcripts owned by the session
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from .archive_schema import Project, Session
from .diagnostics import RecoveryStats, record

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"


class SessionFilter(str, Enum):
    """Criteria for selecting sessions to archive."""

    UNNAMED = "unnamed"
    BY_TITLE = "by-title"
    OLDER_THAN = "older-than"
    BY_SIZE = "by-size"


ARCHIVE_TYPE_OPTIONS: list[dict[str, Any]] = [
    {
        "id": SessionFilter.UNNAMED,
        "label": "Unnamed sessions",
        "description": "Sessions without a custom title",
        "available": True,
    },
    {
        "id": SessionFilter.BY_TITLE,
        "label": "By title",
        "description": "Sessions whose custom title contains a pattern",
        "available": True,
    },
    {
        "id": SessionFilter.OLDER_THAN,
        "label": "Older than...",
        "description": "Sessions older than a given age",
        "available": False,
    },
    {
        "id": SessionFilter.BY_SIZE,
        "label": "By size",
        "description": "Sessions above a given size",
        "available": False,
    },
]


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 string into an aware datetime (naive -> UTC)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_agent_transcript(name: str) -> bool:
    return name.startswith(AGENT_PREFIX) and name.endswith(TRANSCRIPT_SUFFIX)


def list_agent_transcripts(project_path: Path) -> list[Path]:
    """
    List agent-*.jsonl files in a project folder, sorted by name.

    Raises:
        OSError: If the project folder cannot be listed
    """
    return sorted(
        p for p in project_path.iterdir()
        if is_agent_transcript(p.name) and p.is_file()
    )


def read_agent_session_id(agent_path: Path, stats: RecoveryStats | None = None) -> str | None:
    """
    Get the sessionId from the first line of an agent transcript.

    Only the first line is read. Any read or parse failure means the
    agent is treated as unowned.
    """
    try:
        with open(agent_path, encoding="utf-8") as f:
            first_line = f.readline()
    except (OSError, UnicodeDecodeError) as e:
        record(stats, "unreadable_agents", agent_path, e)
        return None

    if not first_line.strip():
        return None

    try:
        parsed = json.loads(first_line)
    except json.JSONDecodeError as e:
        record(stats, "unreadable_agents", agent_path, e)
        return None

    if not isinstance(parsed, dict):
        return None
    session_id = parsed.get("sessionId")
    return session_id if isinstance(session_id, str) else None


def agent_belongs_to_session(
    agent_path: Path, session_id: str, stats: RecoveryStats | None = None
) -> bool:
    """Check if an agent transcript is owned by ``session_id``."""
    return read_agent_session_id(agent_path, stats) == session_id


def _sort_key(session: Session) -> tuple[int, float]:
    # Newest first, sessions without a timestamp last
    if session.timestamp is None:
        return (1, 0.0)
    return (0, -session.timestamp.timestamp())


def sort_sessions(sessions: list[Session]) -> list[Session]:
    """Sort by timestamp descending; sessions without one go last."""
    return sorted(sessions, key=_sort_key)


class SessionParser:
    """
    Parse Claude Code transcripts into Session records.

    Parsing never raises for bad input: malformed lines are skipped and
    unreadable files are left out of the results. Each recovery is
    counted in ``stats``.
    """

    def __init__(self, stats: RecoveryStats | None = None):
        self.stats = stats

    def parse(
        self,
        transcript_path: str | Path,
        project_path: str | Path,
        agent_count: int | None = None,
    ) -> Session | None:
        """
        Parse a session file and extract metadata.

        Args:
            transcript_path: Path to the session .jsonl file
            project_path: Project folder containing the transcript
            agent_count: Precomputed agent count; scanned when None

        Returns:
            Session, or None if the transcript cannot be read
        """
        transcript_path = Path(transcript_path)
        project_path = Path(project_path)

        try:
            content = transcript_path.read_text(encoding="utf-8", errors="replace")
            size = transcript_path.stat().st_size
        except OSError as e:
            record(self.stats, "unreadable_transcripts", transcript_path, e)
            return None

        summary: str | None = None
        custom_title: str | None = None
        has_custom_title = False
        timestamp: datetime | None = None
        timestamp_seen = False

        for line in content.splitlines():
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                record(self.stats, "malformed_lines", transcript_path, e)
                continue
            if not isinstance(entry, dict):
                record(self.stats, "malformed_lines", transcript_path)
                continue

            entry_type = entry.get("type")

            if entry_type == "custom-title":
                has_custom_title = True
                value = entry.get("customTitle")
                custom_title = value if isinstance(value, str) else None

            if summary is None and entry_type == "summary":
                value = entry.get("summary")
                summary = value if isinstance(value, str) else None

            # Only the first string timestamp counts, even if it fails to parse
            if not timestamp_seen and isinstance(entry.get("timestamp"), str):
                timestamp_seen = True
                timestamp = parse_timestamp(entry["timestamp"])

        if agent_count is None:
            agent_count = self.count_agents(transcript_path.stem, project_path)

        return Session(
            id=transcript_path.stem,
            path=str(transcript_path),
            project_path=str(project_path),
            size=size,
            summary=summary,
            has_custom_title=has_custom_title,
            custom_title=custom_title,
            timestamp=timestamp,
            agent_count=agent_count,
        )

    def count_agents(self, session_id: str, project_path: Path) -> int:
        """Count agent transcripts in ``project_path`` owned by ``session_id``."""
        try:
            agents = list_agent_transcripts(project_path)
        except OSError as e:
            record(self.stats, "unreadable_agents", project_path, e)
            return 0
        return sum(1 for a in agents if agent_belongs_to_session(a, session_id, self.stats))

    def _count_agents_by_session(self, agents: list[Path]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for agent_path in agents:
            session_id = read_agent_session_id(agent_path, self.stats)
            if session_id:
                counts[session_id] = counts.get(session_id, 0) + 1
        return counts

    def get_sessions(self, project: Project) -> list[Session]:
        """
        Get all sessions from a project, newest first.

        Agent transcripts are not sessions of their own; they only
        contribute to their owner's agent_count.
        """
        project_path = Path(project.path)
        try:
            entries = sorted(project_path.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list project {project_path}: {e}")
            return []

        agents = [p for p in entries if is_agent_transcript(p.name) and p.is_file()]
        agent_counts = self._count_agents_by_session(agents)

        sessions = []
        for entry in entries:
            if not entry.name.endswith(TRANSCRIPT_SUFFIX) or entry.name.startswith(AGENT_PREFIX):
                continue
            if not entry.is_file():
                continue
            session = self.parse(entry, project_path, agent_counts.get(entry.stem, 0))
            if session is not None:
                sessions.append(session)

        return sort_sessions(sessions)

    def get_sessions_from_projects(self, projects: list[Project]) -> list[Session]:
        """Get sessions from multiple projects, each project sorted on its own."""
        all_sessions: list[Session] = []
        for project in projects:
            all_sessions.extend(self.get_sessions(project))
        return all_sessions


def get_sessions(project: Project, stats: RecoveryStats | None = None) -> list[Session]:
    """Convenience wrapper around SessionParser.get_sessions."""
    return SessionParser(stats).get_sessions(project)


def filter_sessions(
    sessions: list[Session],
    criterion: SessionFilter | str,
    pattern: str | None = None,
) -> list[Session]:
    """
    Filter sessions by archive criterion.

    Args:
        sessions: Sessions to filter
        criterion: A SessionFilter (or its string value)
        pattern: Title substring for BY_TITLE, matched case-insensitively

    Returns:
        Matching sessions in input order. Criteria without an
        implementation yet return an empty list.
    """
    try:
        criterion = SessionFilter(criterion)
    except ValueError:
        return []

    if criterion is SessionFilter.UNNAMED:
        return [s for s in sessions if not s.has_custom_title]

    if criterion is SessionFilter.BY_TITLE:
        if not pattern:
            return []
        needle = pattern.lower()
        return [
            s for s in sessions
            if s.has_custom_title and s.custom_title and needle in s.custom_title.lower()
        ]

    # OLDER_THAN and BY_SIZE are not implemented yet
    return []


__all__ = [
    "ARCHIVE_TYPE_OPTIONS",
    "SessionFilter",
    "SessionParser",
    "agent_belongs_to_session",
    "filter_sessions",
    "get_sessions",
    "list_agent_transcripts",
    "parse_timestamp",
    "read_agent_session_id",
    "sort_sessions",
]

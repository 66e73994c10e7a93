"""RecoveryStats - counters for locally recovered failures."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class RecoveryStats:
    """
    Counts every failure that is recovered without being surfaced.

    Malformed transcript lines, unreadable agent files and unreadable
    companion folders never abort parsing or archiving. They are tallied
    here so consistently bad input can still be detected.
    """

    malformed_lines: int = 0
    unreadable_transcripts: int = 0
    unreadable_agents: int = 0
    unreadable_folders: int = 0
    stranded_artifacts: int = 0
    paths: list[str] = field(default_factory=list)

    def record(self, counter: str, path: Path | str, exc: BaseException | None = None) -> None:
        """
        Increment ``counter`` and log the recovery at DEBUG.

        Args:
            counter: Name of one of the integer fields
            path: File or folder the failure relates to
            exc: Underlying exception, if any
        """
        setattr(self, counter, getattr(self, counter) + 1)
        self.paths.append(str(path))
        logger.debug(f"Recovered {counter} at {path}: {exc}")

    @property
    def total(self) -> int:
        return (
            self.malformed_lines
            + self.unreadable_transcripts
            + self.unreadable_agents
            + self.unreadable_folders
            + self.stranded_artifacts
        )


def record(stats: RecoveryStats | None, counter: str, path: Path | str, exc: BaseException | None = None) -> None:
    """Record into ``stats`` when given, otherwise only log."""
    if stats is None:
        logger.debug(f"Recovered {counter} at {path}: {exc}")
        return
    stats.record(counter, path, exc)


__all__ = ["RecoveryStats", "record"]

"""
ArchiveEngine - move sessions into their project's .archived folder.

Archiving one session is a saga with a single commit step:

    1. pre-check      .archived/{id}.jsonl must not exist yet
    2. mkdir          .archived/ (idempotent)
    3. COMMIT         rename {id}.jsonl -> .archived/{id}.jsonl
    4. best effort    rename {id}/ -> .archived/{id}/
    5. best effort    rename each owned agent-*.jsonl (and its folder)

Once step 3 succeeds the session counts as archived. Later failures do
not roll it back; the artifacts that stayed behind are reported in
ArchiveResult.stranded so they can be resolved by hand.

In dry-run and dev modes nothing is mutated and the reported archive
path is prefixed with the mode tag.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
from collections.abc import Callable
from pathlib import Path

from .archive_schema import (
    ArchiveFile,
    ArchiveFileKind,
    ArchiveResult,
    ArchiveSummary,
    Session,
    StrandedArtifact,
)
from .config import ArchiveConfig, RunMode
from .diagnostics import RecoveryStats, record
from .errors import ArchiveErrorKind, classify_error
from .file_set import FileSetResolver, companion_folder_path, get_folder_size

logger = logging.getLogger(__name__)

ARCHIVE_FOLDER = ".archived"

ProgressCallback = Callable[[int, int, Session], None]


def _rename_exclusive(src: Path, dest: Path) -> None:
    """Rename ``src`` to ``dest``, refusing to replace an existing entry."""
    if os.path.lexists(dest):
        raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(dest))
    os.rename(src, dest)


class ArchiveEngine:
    """
    Archive sessions one at a time.

    The run mode is fixed per engine instance, so independent callers
    (and tests) never share mode state.
    """

    def __init__(
        self,
        mode: RunMode | str = RunMode.NORMAL,
        *,
        archive_folder: str = ARCHIVE_FOLDER,
        resolver: FileSetResolver | None = None,
        stats: RecoveryStats | None = None,
    ):
        self.mode = RunMode.parse(mode)
        self.archive_folder = archive_folder
        self.stats = stats
        self.resolver = resolver or FileSetResolver(stats)

    @classmethod
    def from_config(cls, config: ArchiveConfig, stats: RecoveryStats | None = None) -> "ArchiveEngine":
        return cls(config.mode, archive_folder=config.archive_folder, stats=stats)

    def archive_dir_for(self, session: Session) -> Path:
        """Per-project archive directory."""
        return Path(session.project_path) / self.archive_folder

    async def archive_session(self, session: Session) -> ArchiveResult:
        """
        Archive a single session.

        Args:
            session: Session to archive

        Returns:
            ArchiveResult; failures are reported in the result, never raised
        """
        transcript = Path(session.path)
        archive_dir = self.archive_dir_for(session)
        dest = archive_dir / transcript.name

        if self.mode.is_read_only:
            return await self._simulate(session, dest)

        if await asyncio.to_thread(os.path.lexists, dest):
            logger.warning(f"Session {session.id} already archived at {dest}")
            return ArchiveResult(
                session=session,
                success=False,
                error=f"Already archived: {dest}",
                error_kind=ArchiveErrorKind.ALREADY_EXISTS,
            )

        try:
            await asyncio.to_thread(archive_dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(os.rename, transcript, dest)
        except OSError as e:
            kind = classify_error(e)
            logger.warning(f"Failed to archive session {session.id}: {e}")
            return ArchiveResult(
                session=session,
                success=False,
                error=e.strerror or str(e),
                error_kind=kind,
            )

        moved = [
            ArchiveFile(
                name=transcript.name,
                path=str(dest),
                size=session.size,
                kind=ArchiveFileKind.TRANSCRIPT,
            )
        ]
        stranded: list[StrandedArtifact] = []

        folder = companion_folder_path(transcript)
        await self._move_folder(folder, archive_dir, ArchiveFileKind.COMPANION_FOLDER, moved, stranded)

        agents = await asyncio.to_thread(self.resolver.find_owned_agents, session)
        for agent_path in agents:
            await self._move_agent(agent_path, archive_dir, moved, stranded)
            await self._move_folder(
                companion_folder_path(agent_path),
                archive_dir,
                ArchiveFileKind.AGENT_COMPANION_FOLDER,
                moved,
                stranded,
            )

        logger.info(f"Archived session {session.id} ({len(moved)} artifacts) to {archive_dir}")
        return ArchiveResult(
            session=session,
            success=True,
            archive_path=str(dest),
            moved=moved,
            stranded=stranded,
        )

    async def _simulate(self, session: Session, dest: Path) -> ArchiveResult:
        file_set = await asyncio.to_thread(self.resolver.resolve, session)
        logger.info(f"{self.mode.tag} Would archive: {session.id}")
        return ArchiveResult(
            session=session,
            success=True,
            archive_path=f"{self.mode.tag} {dest}",
            moved=file_set.files,
            simulated=True,
        )

    async def _move_folder(
        self,
        folder: Path,
        archive_dir: Path,
        kind: ArchiveFileKind,
        moved: list[ArchiveFile],
        stranded: list[StrandedArtifact],
    ) -> None:
        if not await asyncio.to_thread(folder.is_dir):
            return
        size = await asyncio.to_thread(get_folder_size, folder, self.stats)
        artifact = ArchiveFile(name=folder.name + "/", path=str(folder), size=size, kind=kind)
        await self._move_artifact(artifact, archive_dir, moved, stranded)

    async def _move_agent(
        self,
        agent_path: Path,
        archive_dir: Path,
        moved: list[ArchiveFile],
        stranded: list[StrandedArtifact],
    ) -> None:
        try:
            size = (await asyncio.to_thread(agent_path.stat)).st_size
        except OSError:
            size = 0
        artifact = ArchiveFile(
            name=agent_path.name,
            path=str(agent_path),
            size=size,
            kind=ArchiveFileKind.AGENT_TRANSCRIPT,
        )
        await self._move_artifact(artifact, archive_dir, moved, stranded)

    async def _move_artifact(
        self,
        artifact: ArchiveFile,
        archive_dir: Path,
        moved: list[ArchiveFile],
        stranded: list[StrandedArtifact],
    ) -> None:
        """Best-effort move; a failure strands the artifact instead of failing the session."""
        src = Path(artifact.path)
        dest = archive_dir / src.name
        try:
            await asyncio.to_thread(_rename_exclusive, src, dest)
        except OSError as e:
            logger.warning(f"Left {src} in place: {e}")
            record(self.stats, "stranded_artifacts", src, e)
            stranded.append(
                StrandedArtifact(
                    file=artifact,
                    error_kind=classify_error(e),
                    error=e.strerror or str(e),
                )
            )
            return
        moved.append(artifact.model_copy(update={"path": str(dest)}))

    async def archive_sessions(
        self,
        sessions: list[Session],
        on_progress: ProgressCallback | None = None,
    ) -> list[ArchiveResult]:
        """
        Archive multiple sessions sequentially with a progress callback.

        ``on_progress(completed, total, current)`` fires right before each
        session is attempted. A failed session never stops the batch.
        """
        results: list[ArchiveResult] = []
        total = len(sessions)

        for i, session in enumerate(sessions):
            if on_progress is not None:
                on_progress(i, total, session)

            try:
                result = await self.archive_session(session)
            except Exception as e:
                logger.exception(f"Unexpected error archiving session {session.id}")
                result = ArchiveResult(
                    session=session,
                    success=False,
                    error=str(e),
                    error_kind=classify_error(e),
                )
            results.append(result)

        return results


def summarize_results(results: list[ArchiveResult]) -> ArchiveSummary:
    """Success/failure counts and total archived bytes (successful results only)."""
    successful = [r for r in results if r.success]
    return ArchiveSummary(
        total=len(results),
        successful=len(successful),
        failed=len(results) - len(successful),
        total_size=sum(r.session.size for r in successful),
    )


__all__ = [
    "ARCHIVE_FOLDER",
    "ArchiveEngine",
    "ProgressCallback",
    "summarize_results",
]

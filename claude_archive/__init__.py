"""claude-archive: retire Claude Code sessions into per-project archives.

Discovery, parsing and archiving of the JSONL transcripts Claude Code
keeps under ~/.claude/projects:

- ProjectScanner: enumerate project folders
- SessionParser: extract session metadata from transcripts
- FileSetResolver: expand a session into every artifact that moves with it
- ArchiveEngine: move (or simulate moving) sessions into .archived/
"""

__version__ = "0.1.0"

from .archive_engine import ArchiveEngine, summarize_results
from .archive_schema import (
    ArchiveFile,
    ArchiveFileKind,
    ArchiveFileSet,
    ArchiveResult,
    ArchiveSummary,
    Project,
    Session,
    StrandedArtifact,
)
from .config import ArchiveConfig, RunMode
from .diagnostics import RecoveryStats
from .errors import ArchiveErrorKind, DiscoveryError, classify_error
from .file_set import FileSetResolver, get_files_to_archive, get_folder_size
from .path_codec import decode_folder_name, encode_project_path, shorten_path
from .projects import ProjectScanner, get_projects, projects_dir_exists
from .session_parser import SessionFilter, SessionParser, filter_sessions, get_sessions

__all__ = [
    # Engine
    "ArchiveEngine",
    "summarize_results",
    # Models
    "ArchiveFile",
    "ArchiveFileKind",
    "ArchiveFileSet",
    "ArchiveResult",
    "ArchiveSummary",
    "Project",
    "Session",
    "StrandedArtifact",
    # Discovery & parsing
    "ProjectScanner",
    "get_projects",
    "projects_dir_exists",
    "SessionFilter",
    "SessionParser",
    "filter_sessions",
    "get_sessions",
    "FileSetResolver",
    "get_files_to_archive",
    "get_folder_size",
    "decode_folder_name",
    "encode_project_path",
    "shorten_path",
    # Errors & config
    "ArchiveErrorKind",
    "DiscoveryError",
    "classify_error",
    "RecoveryStats",
    "ArchiveConfig",
    "RunMode",
]

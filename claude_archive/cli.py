#!/usr/bin/env python3
"""
claude-archive command line entry point.

Usage:
    claude-archive projects
    claude-archive sessions -p ~/Development/foo
    claude-archive preview -p -Users-me-Development-foo --filter unnamed
    claude-archive archive -p ~/Development/foo --filter by-title --title scratch --dry-run

Encoded folder names start with "-", so the -p value is passed through
as --project=VALUE before argparse sees it.

Run mode (normal / dry-run / dev) comes from --dry-run / --dev, then
CLAUDE_ARCHIVE_MODE, then ~/.claude/claude-archive-config.json.
"""

from __future__ import annotations

import argparse
import asyncio
import locale
import logging
import sys
from pathlib import Path

from .archive_engine import ArchiveEngine, summarize_results
from .archive_schema import Project, Session
from .config import ArchiveConfig, RunMode
from .diagnostics import RecoveryStats
from .errors import DiscoveryError
from .file_set import FileSetResolver
from .formatting import format_size, truncate, truncate_id
from .projects import ProjectScanner, find_project
from .session_parser import SessionFilter, SessionParser, filter_sessions


def _add_project_option(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument(
        "-p",
        "--project",
        required=True,
        help="Project folder name (e.g. -Users-me-app) or readable path",
    )


def _join_project_values(argv: list[str]) -> list[str]:
    """Rewrite ``-p VALUE`` as ``--project=VALUE`` so a leading "-" in VALUE is kept."""
    joined = []
    tokens = iter(argv)
    for token in tokens:
        if token in ("-p", "--project"):
            value = next(tokens, None)
            joined.append(token if value is None else f"--project={value}")
        else:
            joined.append(token)
    return joined


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claude-archive",
        description="Archive Claude Code sessions into each project's .archived folder",
    )
    parser.add_argument("--projects-dir", type=Path, help="Override ~/.claude/projects")
    parser.add_argument("--config", type=Path, help="Config file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("projects", help="List projects with sessions")

    sessions = sub.add_parser("sessions", help="List sessions in a project")
    _add_project_option(sessions)

    for name, help_text in (
        ("preview", "Show the files that would be archived"),
        ("archive", "Archive matching sessions"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        _add_project_option(cmd)
        cmd.add_argument(
            "--filter",
            dest="criterion",
            choices=[f.value for f in SessionFilter],
            default=SessionFilter.UNNAMED.value,
            help="Selection criterion (default: unnamed)",
        )
        cmd.add_argument("--title", help="Title substring for --filter by-title")

    archive = sub.choices["archive"]
    mode_group = archive.add_mutually_exclusive_group()
    mode_group.add_argument("--dry-run", action="store_true", help="Preview without moving files")
    mode_group.add_argument("--dev", action="store_true", help="Dev mode: destructive operations disabled")
    archive.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    return parser


def _load_config(args: argparse.Namespace) -> ArchiveConfig:
    config = ArchiveConfig.load(args.config)
    if args.projects_dir is not None:
        config.projects_dir = str(args.projects_dir.expanduser())
    if getattr(args, "dry_run", False):
        config.mode = RunMode.DRY_RUN
    elif getattr(args, "dev", False):
        config.mode = RunMode.DEV
    return config


def _resolve_project(config: ArchiveConfig, name: str, stats: RecoveryStats) -> Project | None:
    projects = ProjectScanner(config, stats).scan()
    project = find_project(projects, name)
    if project is None:
        print(f"Error: project not found: {name}", file=sys.stderr)
    return project


def _select_sessions(args: argparse.Namespace, project: Project, stats: RecoveryStats) -> list[Session]:
    sessions = SessionParser(stats).get_sessions(project)
    return filter_sessions(sessions, args.criterion, args.title)


def _session_label(session: Session) -> str:
    return session.custom_title or session.summary or "(untitled)"


def cmd_projects(args: argparse.Namespace, config: ArchiveConfig, stats: RecoveryStats) -> int:
    projects = ProjectScanner(config, stats).scan()
    if not projects:
        print("No projects with sessions found.")
        return 0
    for project in projects:
        print(f"{project.session_count:5d}  {project.readable_path}")
    return 0


def cmd_sessions(args: argparse.Namespace, config: ArchiveConfig, stats: RecoveryStats) -> int:
    project = _resolve_project(config, args.project, stats)
    if project is None:
        return 1
    for session in SessionParser(stats).get_sessions(project):
        when = session.timestamp.strftime("%Y-%m-%d %H:%M") if session.timestamp else "unknown"
        agents = f" +{session.agent_count} agents" if session.agent_count else ""
        print(
            f"{truncate_id(session.id)}  {when:16}  {format_size(session.size):>9}  "
            f"{truncate(_session_label(session), 60)}{agents}"
        )
    return 0


def cmd_preview(args: argparse.Namespace, config: ArchiveConfig, stats: RecoveryStats) -> int:
    project = _resolve_project(config, args.project, stats)
    if project is None:
        return 1
    sessions = _select_sessions(args, project, stats)
    file_sets = FileSetResolver(stats).get_files_to_archive(sessions)
    for file_set in file_sets:
        print(f"{file_set.session_id}  ({format_size(file_set.total_size)})")
        for f in file_set.files:
            print(f"    {f.name:50} {format_size(f.size):>9}  {f.kind.value}")
    total = sum(fs.total_size for fs in file_sets)
    print(f"\n{len(file_sets)} sessions, {format_size(total)}")
    return 0


async def cmd_archive(args: argparse.Namespace, config: ArchiveConfig, stats: RecoveryStats) -> int:
    project = _resolve_project(config, args.project, stats)
    if project is None:
        return 1
    sessions = _select_sessions(args, project, stats)
    if not sessions:
        print("No sessions match.")
        return 0

    if config.mode.banner:
        print(config.mode.banner)

    if not config.mode.is_read_only and not args.yes:
        answer = input(f"Archive {len(sessions)} sessions from {project.readable_path}? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return 0

    def on_progress(completed: int, total: int, current: Session) -> None:
        print(f"[{completed + 1}/{total}] {truncate_id(current.id)}", file=sys.stderr)

    engine = ArchiveEngine.from_config(config, stats)
    results = await engine.archive_sessions(sessions, on_progress)

    for result in results:
        if result.success:
            print(f"  ok    {result.session.id} -> {result.archive_path}")
            for stranded in result.stranded:
                print(f"        left behind {stranded.file.path} ({stranded.error_kind.value}: {stranded.error})")
        else:
            kind = result.error_kind.value if result.error_kind else "unknown"
            print(f"  FAIL  {result.session.id}: {kind}: {result.error}")

    summary = summarize_results(results)
    print(
        f"\n{summary.successful} archived, {summary.failed} failed, "
        f"{format_size(summary.total_size)} total"
    )
    if stats.total:
        print(f"{stats.total} recoverable issues skipped (use -v for details)", file=sys.stderr)
    return 0 if summary.failed == 0 else 2


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(_join_project_values(argv))
    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(levelname)s %(name)s - %(message)s",
    )

    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logging.getLogger(__name__).debug(f"Keeping default collation: {e}")

    stats = RecoveryStats()
    try:
        if args.command == "projects":
            return cmd_projects(args, config, stats)
        if args.command == "sessions":
            return cmd_sessions(args, config, stats)
        if args.command == "preview":
            return cmd_preview(args, config, stats)
        return asyncio.run(cmd_archive(args, config, stats))
    except DiscoveryError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

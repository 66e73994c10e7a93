"""Display helpers shared by front ends."""

from __future__ import annotations

from .archive_schema import Session


def get_total_size(sessions: list[Session]) -> int:
    """Calculate total size of sessions in bytes."""
    return sum(session.size for session in sessions)


def format_size(num_bytes: int) -> str:
    """Format bytes to a human-readable string."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 * 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.1f} MB"
    return f"{num_bytes / (1024 * 1024 * 1024):.1f} GB"


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def truncate_id(session_id: str) -> str:
    """First 8 characters of a session UUID."""
    return session_id[:8] + "..."


__all__ = ["format_size", "get_total_size", "truncate", "truncate_id"]

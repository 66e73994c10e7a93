"""
Error taxonomy for discovery and archive operations.

Classification uses ``OSError.errno`` only, never message text.
"""

from __future__ import annotations

import errno
from enum import Enum


class ArchiveErrorKind(str, Enum):
    """Semantic category of a filesystem failure."""

    PERMISSION_DENIED = "permission"
    NOT_FOUND = "not-found"
    ALREADY_EXISTS = "already-exists"
    DISK_FULL = "disk-full"
    UNKNOWN = "unknown"


_ERRNO_KINDS: dict[int, ArchiveErrorKind] = {
    errno.EACCES: ArchiveErrorKind.PERMISSION_DENIED,
    errno.EPERM: ArchiveErrorKind.PERMISSION_DENIED,
    errno.EROFS: ArchiveErrorKind.PERMISSION_DENIED,
    errno.ENOENT: ArchiveErrorKind.NOT_FOUND,
    errno.EEXIST: ArchiveErrorKind.ALREADY_EXISTS,
    errno.ENOTEMPTY: ArchiveErrorKind.ALREADY_EXISTS,
    errno.ENOSPC: ArchiveErrorKind.DISK_FULL,
}

# EDQUOT is missing on some platforms
if hasattr(errno, "EDQUOT"):
    _ERRNO_KINDS[errno.EDQUOT] = ArchiveErrorKind.DISK_FULL


def classify_error(exc: BaseException) -> ArchiveErrorKind:
    """
    Map a low-level failure to an ArchiveErrorKind.

    Args:
        exc: Exception raised by a filesystem call

    Returns:
        The matching kind, or UNKNOWN for non-OSError exceptions and
        unrecognised error codes
    """
    if not isinstance(exc, OSError) or exc.errno is None:
        return ArchiveErrorKind.UNKNOWN
    return _ERRNO_KINDS.get(exc.errno, ArchiveErrorKind.UNKNOWN)


class DiscoveryError(Exception):
    """Raised when the projects directory cannot be enumerated."""

    def __init__(self, kind: ArchiveErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @classmethod
    def from_os_error(cls, exc: OSError, base_dir: str) -> "DiscoveryError":
        """Build a DiscoveryError with a user-facing message for ``exc``."""
        kind = classify_error(exc)
        if kind is ArchiveErrorKind.NOT_FOUND:
            message = f"Claude projects folder not found: {base_dir}"
        elif kind is ArchiveErrorKind.PERMISSION_DENIED:
            message = f"Permission denied reading projects folder: {base_dir}"
        else:
            kind = ArchiveErrorKind.UNKNOWN
            message = str(exc)
        return cls(kind, message)


__all__ = [
    "ArchiveErrorKind",
    "DiscoveryError",
    "classify_error",
]

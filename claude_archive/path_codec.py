"""
Project folder name encoding.

Claude Code stores each project under a folder named after its working
directory, e.g. ``/Users/martin/.config`` -> ``-Users-martin--config``.
The grammar is not bijective when a path already contains dashes, so
decoded names are display labels only.
"""

from __future__ import annotations

from pathlib import Path


def encode_project_path(path: str) -> str:
    """Encode an absolute path into a project folder name."""
    return path.replace("/.", "--").replace("/", "-")


def decode_folder_name(folder_name: str) -> str:
    """
    Decode a project folder name back to a path.

    -Users-martin--config -> /Users/martin/.config
    """
    if folder_name.startswith("-"):
        folder_name = "/" + folder_name[1:]
    return folder_name.replace("--", "/.").replace("-", "/")


def shorten_path(path: str, home: str | None = None) -> str:
    """Replace the home directory prefix with ``~``."""
    home = home if home is not None else str(Path.home())
    if home and (path == home or path.startswith(home.rstrip("/") + "/")):
        return "~" + path[len(home.rstrip("/")):]
    return path


__all__ = ["decode_folder_name", "encode_project_path", "shorten_path"]

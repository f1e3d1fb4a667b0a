"""
=============================================================================
FILE RESOLVER
=============================================================================

Maps a request path onto the filesystem and reports whether there is a
regular file there to serve.

=============================================================================
RESOLUTION
=============================================================================

    docroot = "/srv/www"          request path = "/docs/a.txt"

        candidate = docroot + "/" + path   →  "/srv/www//docs/a.txt"
                        │
                        ▼
        ┌───────────────────────────────────────────────┐
        │  1. Containment: resolved candidate must lie  │
        │     inside the resolved docroot               │──── no ──► ok=False
        │                                               │
        │  2. lstat(candidate): does not follow a final │
        │     symlink                                   │──── error ► ok=False
        │                                               │
        │  3. S_ISREG(st_mode)?                         │──── no ──► ok=False
        └───────────────────────────────────────────────┘
                        │ yes
                        ▼
              FileInfo(path, size=st_size, ok=True)

The resolver never raises. Anything that is not a servable regular file
comes back with ok=False and the caller answers 404.

=============================================================================
SECURITY
=============================================================================

- "GET /../../etc/passwd" resolves outside the docroot → ok=False
- A symlink as the last path component is never a regular file → ok=False
- A directory symlink that leads out of the docroot fails step 1

=============================================================================
"""

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass
class FileInfo:
    """
    Resolved-file metadata for one response.

    Attributes:
        path: docroot + "/" + request path (as built, not normalized).
        size: File size in bytes; only meaningful when ok is True.
        ok: True iff path is a regular file inside the document root.
    """

    path: str
    size: int = 0
    ok: bool = False


def build_filepath(docroot: str, path: str) -> str:
    """Join docroot and a request path with a single "/" and nothing else."""
    return f"{docroot}/{path}"


class FileResolver:
    """
    Resolves request paths against one document root.

    Example:
        resolver = FileResolver("/srv/www")
        info = resolver.resolve("/index.html")
        if info.ok:
            ...
    """

    def __init__(self, docroot: str):
        self.docroot = docroot
        # Resolved once; containment is checked against this
        self.root_dir = Path(docroot).resolve()

    def resolve(self, path: str) -> FileInfo:
        """
        Build a FileInfo for `path`.

        Args:
            path: Raw request path from the request line.

        Returns:
            FileInfo with ok=True only for a regular file inside the root.
        """
        info = FileInfo(path=build_filepath(self.docroot, path))

        if "\x00" in path:
            logger.warning(f"NUL byte in request path: {path!r}")
            return info

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: PATH CONTAINMENT
        # ─────────────────────────────────────────────────────────────────
        if not self._is_contained(info.path):
            logger.warning(f"Path traversal attempt: {path}")
            return info

        # ─────────────────────────────────────────────────────────────────
        # NON-FOLLOWING STAT
        # ─────────────────────────────────────────────────────────────────
        try:
            st = os.lstat(info.path)
        except OSError:
            return info

        if not stat.S_ISREG(st.st_mode):
            return info

        info.size = st.st_size
        info.ok = True
        return info

    def _is_contained(self, candidate: str) -> bool:
        """
        Check that `candidate` stays inside the document root.

        The parent directory is resolved (following directory symlinks and
        collapsing ".."), then the final component is re-attached without
        following it, so a symlinked file is still caught by lstat.
        """
        try:
            parent, name = os.path.split(candidate)
            resolved = Path(parent).resolve() / name
            if name in ("", ".", ".."):
                resolved = resolved.resolve()
            resolved.relative_to(self.root_dir)
        except (OSError, ValueError, RuntimeError):
            return False
        return True


def get_fileinfo(docroot: str, path: str) -> FileInfo:
    """
    Resolve `path` against `docroot` in one call.

    Factory-style shortcut around FileResolver for single lookups.
    """
    return FileResolver(docroot).resolve(path)

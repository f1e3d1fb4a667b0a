"""
Request handlers.

    static.py - FileResolver: request path → FileInfo under the document root
"""

from .static import FileInfo, FileResolver, build_filepath, get_fileinfo

__all__ = ["FileInfo", "FileResolver", "build_filepath", "get_fileinfo"]

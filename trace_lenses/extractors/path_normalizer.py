"""
Document path normalization for matching trace records to source files.
"""

import os
from typing import Optional


class PathNormalizer:
    """Normalizes file paths to the forward-slash form used in trace records."""

    @staticmethod
    def normalize_slashes(path: str) -> str:
        """
        Replace backslashes with forward slashes.

        Args:
            path: File path as written by any platform

        Returns:
            Path using '/' as the only separator
        """
        return path.replace('\\', '/')

    @staticmethod
    def relative_document_path(workspace_root: str, document_path: str) -> Optional[str]:
        """
        Compute the workspace-relative, slash-normalized path of a document.

        Relative document paths are taken as relative to the workspace root.

        Args:
            workspace_root: Root directory of the workspace
            document_path: Absolute or workspace-relative path of the document

        Returns:
            Relative path such as 'tests/users.test.ts', or None when the
            document lies outside the workspace
        """
        root = os.path.abspath(workspace_root)
        if os.path.isabs(document_path):
            absolute = os.path.abspath(document_path)
        else:
            absolute = os.path.abspath(os.path.join(root, document_path))

        try:
            relative = os.path.relpath(absolute, root)
        except ValueError:
            # Different drives on Windows
            return None

        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return None
        return PathNormalizer.normalize_slashes(relative)

    @staticmethod
    def same_file(left: str, right: str) -> bool:
        return PathNormalizer.normalize_slashes(left) == PathNormalizer.normalize_slashes(right)

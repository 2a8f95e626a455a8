"""
Static file delivery for paths that are not part of the memory API.
"""
import os
from dataclasses import dataclass
from typing import Optional

from memtrack.utils import get_logger

logger = get_logger(__name__)

CONTENT_TYPES = {
    '.html': 'text/html',
    '.css': 'text/css',
    '.js': 'application/javascript',
}
DEFAULT_CONTENT_TYPE = 'text/plain'


@dataclass(frozen=True)
class StaticFile:
    content: bytes
    content_type: str


def guess_content_type(path: str) -> str:
    """Maps a file extension to its content type, ``text/plain`` when unknown."""
    extension = os.path.splitext(path)[1].lower()
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)


class StaticFileDelivery:
    """
    Serves files from a root directory.

    ``/`` and ``/index.html`` map to the configured index file, every other
    path is resolved relative to the root. Paths that escape the root are
    treated as missing.
    """

    def __init__(self, root: str = '.', index_file: str = 'index.html'):
        self.root = os.path.realpath(root)
        self.index_file = index_file
        logger.debug(f"StaticFileDelivery serving from {self.root} (index: {self.index_file})")

    def resolve(self, path: str) -> Optional[str]:
        """
        Translates a request path into a file system path below the root.

        :param path: Request path, e.g. ``/css/style.css``
        :type path: str
        :return: Absolute file path, or None if it falls outside the root
        :rtype: Optional[str]
        """
        if path in ('/', '/index.html'):
            relative = self.index_file
        else:
            relative = path.lstrip('/')

        if '\x00' in relative:
            logger.warning(f"Rejected static path containing a NUL byte: {path!r}")
            return None

        candidate = os.path.realpath(os.path.join(self.root, relative))
        try:
            inside_root = os.path.commonpath([self.root, candidate]) == self.root
        except ValueError:
            inside_root = False
        if not inside_root:
            logger.warning(f"Rejected static path outside of root: {path}")
            return None
        return candidate

    def fetch(self, path: str) -> Optional[StaticFile]:
        """
        Reads a static file for a request path.

        :param path: Request path
        :type path: str
        :return: File content and content type, or None if the file is not available
        :rtype: Optional[StaticFile]
        """
        file_path = self.resolve(path)
        if file_path is None or not os.path.isfile(file_path):
            logger.debug(f"Static file not found for path {path}")
            return None

        try:
            with open(file_path, 'rb') as f:
                content = f.read()
        except OSError as e:
            logger.warning(f"Could not read static file {file_path}: {e}")
            return None

        return StaticFile(content=content, content_type=guess_content_type(file_path))

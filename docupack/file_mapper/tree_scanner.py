"""Glob-based discovery of source documents and destination artifacts.

Patterns are matched against the POSIX-style path of each file relative to
the scanned root:

- ``**`` spans any number of directories (including none)
- ``*`` and ``?`` stay inside a single path segment
- an exclude pattern matching a directory prefix excludes its whole subtree
- exclude always wins over include
"""

import logging
import os
import re
from typing import Iterable, List, Optional, Pattern, Sequence

from .errors import FilesystemError

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSION = "md"
ARTIFACT_EXTENSION = "json"
INDEX_FILE_NAME = f"index.{ARTIFACT_EXTENSION}"

SOURCE_INCLUDE_PATTERNS = (f"**/*.{DOCUMENT_EXTENSION}",)
# Documents whose name starts with "_" are drafts and never converted
SOURCE_EXCLUDE_PATTERNS = ("tmp/*", "temp/*", f"**/_*.{DOCUMENT_EXTENSION}")

DESTINATION_INCLUDE_PATTERNS = (f"**/*.{ARTIFACT_EXTENSION}",)
DESTINATION_EXCLUDE_PATTERNS = ("tmp/*", "temp/*")


def index_exclude_patterns(destination: str, index_dir: Optional[str]) -> List[str]:
    """Return the exclude pattern hiding the aggregate index from destination scans.

    Only the index file actually written by the run is excluded, so an
    artifact converted from a document named index.md is diffed normally
    unless it lives at the same path as the aggregate.

    Args:
        destination: Destination directory
        index_dir: Directory receiving index.json, or None

    Returns:
        [relative POSIX path of index.json] when it lies inside destination,
        otherwise an empty list
    """
    if not index_dir:
        return []
    index_file = os.path.join(os.path.abspath(index_dir), INDEX_FILE_NAME)
    relative = os.path.relpath(index_file, os.path.abspath(destination))
    if relative.startswith(os.pardir + os.sep) or os.path.isabs(relative):
        return []
    return [relative.replace(os.sep, "/")]


def _glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a glob pattern into an anchored regular expression."""
    pattern = pattern.replace("\\", "/").lstrip("/")
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(parts) + "$")


class TreeScanner:
    """Lists files under a root matching include/exclude glob rules.

    Example:
        >>> scanner = TreeScanner()
        >>> scanner.scan("./docs", ["**/*.md"], ["tmp/*"])
        ['/abs/docs/guide.md', '/abs/docs/api/intro.md']
    """

    def scan(
        self,
        root: str,
        include_patterns: Sequence[str],
        exclude_patterns: Sequence[str] = (),
        create_missing: bool = False,
    ) -> List[str]:
        """Scan a directory tree.

        Args:
            root: Directory to scan
            include_patterns: Glob patterns a file must match to be listed
            exclude_patterns: Glob patterns that remove a file from the result
            create_missing: Create root instead of failing when it is absent

        Returns:
            Sorted list of absolute file paths

        Raises:
            FilesystemError: If root is missing (and not created) or unreadable
        """
        root = os.path.abspath(root)

        if not os.path.isdir(root):
            if not create_missing:
                raise FilesystemError(root, 'scan', 'Directory does not exist')
            logger.debug(f"create new directory: {root}")
            try:
                os.makedirs(root, exist_ok=True)
            except OSError as e:
                raise FilesystemError(root, 'create_directory', str(e)) from e

        includes = [_glob_to_regex(p) for p in include_patterns]
        excludes = [_glob_to_regex(p) for p in exclude_patterns]

        def on_error(error: OSError) -> None:
            raise FilesystemError(error.filename or root, 'scan', str(error)) from error

        results = []
        for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
            for filename in filenames:
                full_path = os.path.join(dirpath, filename)
                relative = os.path.relpath(full_path, root).replace(os.sep, "/")
                if not any(rx.match(relative) for rx in includes):
                    continue
                if self._is_excluded(relative, excludes):
                    continue
                results.append(full_path)

        results.sort()
        logger.debug(f"scan {root}: {len(results)} file(s) matched")
        return results

    @staticmethod
    def _is_excluded(relative: str, excludes: Iterable[Pattern[str]]) -> bool:
        segments = relative.split("/")
        candidates = ["/".join(segments[:i]) for i in range(1, len(segments) + 1)]
        return any(rx.match(candidate) for rx in excludes for candidate in candidates)

    def source_items(self, source: str) -> List[str]:
        """List the Markdown documents to convert.

        Args:
            source: A single document or a directory of documents

        Returns:
            [source] for a file, the scanned documents for a directory,
            and an empty list when the path does not exist
        """
        if os.path.isfile(source):
            logger.info(f"target source file: {source}")
            return [os.path.abspath(source)]

        if os.path.isdir(source):
            logger.info(f"target source directory: {source}")
            return self.scan(source, SOURCE_INCLUDE_PATTERNS, SOURCE_EXCLUDE_PATTERNS)

        return []

    def destination_items(
        self,
        destination: str,
        extra_excludes: Sequence[str] = (),
    ) -> List[str]:
        """List the JSON artifacts currently in the destination tree.

        The destination directory is created if it does not exist yet, as
        is expected on a first run. An index.json is listed like any other
        artifact unless it is excluded with index_exclude_patterns().

        Args:
            destination: Destination directory
            extra_excludes: Additional exclude patterns

        Returns:
            Sorted list of absolute artifact paths
        """
        return self.scan(
            destination,
            DESTINATION_INCLUDE_PATTERNS,
            tuple(DESTINATION_EXCLUDE_PATTERNS) + tuple(extra_excludes),
            create_missing=True,
        )

"""Markdown to JSON conversion.

This module turns a Markdown document with YAML frontmatter into a compact
JSON object (the header fields plus a ``body`` member) and serializes a set
of (reference, artifact) pairs into the aggregate index.
"""

import json
import logging
from datetime import date, datetime, time
from typing import Any, Iterable, Optional, Tuple

from .errors import MissingFrontmatterError
from .frontmatter_handler import build_header_record, split_frontmatter

logger = logging.getLogger(__name__)

BODY_FIELD = "body"
INDEX_REFERENCE_FIELD = "docRef"
INDEX_CONTENT_FIELD = "content"

_JSON_SEPARATORS = (',', ':')


def _to_json_compatible(value: Any) -> Any:
    """Coerce values produced by the YAML loader into JSON-serializable ones."""
    if isinstance(value, dict):
        return {str(k): _to_json_compatible(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_compatible(v) for v in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=_JSON_SEPARATORS)


class JsonConverter:
    """Converts Markdown documents to JSON artifacts and builds the index.

    Example:
        >>> converter = JsonConverter()
        >>> converter.convert("---\\ntitle: X\\n---\\nhello")
        '{"title":"X","body":"\\\\nhello"}'
    """

    def convert(self, markdown_text: str, file_path: str = "<unknown>") -> Optional[str]:
        """Convert a Markdown document to JSON text.

        Args:
            markdown_text: Full document text including frontmatter
            file_path: Path used in log and error messages

        Returns:
            Compact JSON text, or None when the document has no frontmatter
            block or the frontmatter has no fields (nothing to write)

        Raises:
            FrontmatterError: If the frontmatter is present but invalid
        """
        try:
            header, body = split_frontmatter(markdown_text, file_path)
        except MissingFrontmatterError:
            logger.debug(f"no frontmatter found, skipping: {file_path}")
            return None

        record = build_header_record(header, file_path)
        if record is None:
            logger.debug(f"frontmatter has no fields, skipping: {file_path}")
            return None

        result = _to_json_compatible(record)
        result[BODY_FIELD] = body
        return _dumps(result)

    def build_index(self, artifacts: Iterable[Tuple[str, str]]) -> str:
        """Serialize (reference, artifact text) pairs into index JSON.

        Pairs are gathered in parallel and therefore arrive in arbitrary
        order; they are sorted by reference so that identical inputs always
        produce byte-identical output.

        Args:
            artifacts: (reference, artifact text) pairs

        Returns:
            JSON array of {"docRef": ..., "content": ...} objects
        """
        entries = [
            (reference.replace("\\", "/"), content)
            for reference, content in artifacts
        ]
        entries.sort(key=lambda entry: entry[0])

        return _dumps([
            {INDEX_REFERENCE_FIELD: reference, INDEX_CONTENT_FIELD: content}
            for reference, content in entries
        ])

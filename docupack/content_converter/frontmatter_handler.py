"""YAML frontmatter splitting and parsing for Markdown documents.

A document is expected to start with a ``---`` delimiter, followed by a YAML
header and a second ``---`` delimiter; everything after that is the body.
Delimiters appearing inside the body do not split it again: the remaining
pieces are rejoined verbatim with ``---``.
"""

from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import FrontmatterError, MissingFrontmatterError

FRONTMATTER_DELIMITER = "---"

# Maximum allowed depth for YAML structures to prevent DoS attacks
MAX_YAML_DEPTH = 10

BYTE_ORDER_MARK = "\ufeff"


def split_frontmatter(text: str, file_path: str = "<unknown>") -> Tuple[str, str]:
    """Split a document into its header text and body text.

    The text is split on every delimiter. With exactly one header block the
    body is kept verbatim; when the body itself contains delimiters, all
    pieces after the header are rejoined with the delimiter and stripped.

    Args:
        text: Full document text
        file_path: Path used in error messages

    Returns:
        Tuple of (header, body)

    Raises:
        MissingFrontmatterError: If the text does not begin with the
                                 delimiter or has no closing delimiter
    """
    text = text.lstrip(BYTE_ORDER_MARK)
    if not text.startswith(FRONTMATTER_DELIMITER):
        raise MissingFrontmatterError(file_path)

    contents = text.split(FRONTMATTER_DELIMITER)
    if len(contents) < 3:
        raise MissingFrontmatterError(file_path)

    header = contents[1]
    if len(contents) == 3:
        body = contents[2]
    else:
        body = FRONTMATTER_DELIMITER.join(contents[2:]).strip()

    return header, body


def _validate_yaml_depth(obj, file_path: str, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
    """Validate that YAML structure depth doesn't exceed maximum.

    Raises:
        FrontmatterError: If depth exceeds maximum
    """
    if current_depth > max_depth:
        raise FrontmatterError(
            file_path,
            f"YAML structure exceeds maximum depth of {max_depth}"
        )

    if isinstance(obj, dict):
        for value in obj.values():
            _validate_yaml_depth(value, file_path, current_depth + 1, max_depth)
    elif isinstance(obj, list):
        for item in obj:
            _validate_yaml_depth(item, file_path, current_depth + 1, max_depth)


def build_header_record(header: str, file_path: str = "<unknown>") -> Optional[Dict[str, Any]]:
    """Parse header text into a record.

    Args:
        header: YAML text between the two delimiters
        file_path: Path used in error messages

    Returns:
        The parsed mapping, or None when the header has no fields

    Raises:
        FrontmatterError: If the YAML is invalid, is not a mapping, or is
                          nested too deeply
    """
    try:
        frontmatter = yaml.safe_load(header)
    except yaml.YAMLError as e:
        raise FrontmatterError(
            file_path,
            f"Invalid YAML syntax: {str(e)}"
        )

    if frontmatter is None:
        return None

    if not isinstance(frontmatter, dict):
        raise FrontmatterError(
            file_path,
            f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
        )

    if not frontmatter:
        return None

    _validate_yaml_depth(frontmatter, file_path)
    return frontmatter

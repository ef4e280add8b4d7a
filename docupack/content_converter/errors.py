"""Typed exception hierarchy for document conversion errors."""

from docupack.storage.errors import SyncError


class ConverterError(SyncError):
    """Base exception for all conversion errors."""
    pass


class FrontmatterError(ConverterError):
    """Raised when YAML frontmatter parsing or validation fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message


class MissingFrontmatterError(FrontmatterError):
    """Raised when a document does not start with a frontmatter block."""

    def __init__(self, file_path: str = "<unknown>"):
        super().__init__(
            file_path,
            "Document does not begin with a '---' delimited header"
        )

"""Markdown to JSON content conversion for docupack.

Provides the header/body splitter, the header record builder and the JSON
serializer for single artifacts and for the aggregate index.
"""

from .errors import ConverterError, FrontmatterError, MissingFrontmatterError
from .frontmatter_handler import split_frontmatter, build_header_record
from .json_converter import JsonConverter

__all__ = [
    'ConverterError',
    'FrontmatterError',
    'MissingFrontmatterError',
    'split_frontmatter',
    'build_header_record',
    'JsonConverter',
]

"""File mapper library for docupack.

This package discovers source documents and destination artifacts, maps
them to comparison records keyed by (relative directory, base name), and
loads run configuration.
"""

from .comparison_builder import build_comparison_records
from .config_loader import ConfigLoader, parse_changed_since
from .errors import FileMapperError, FilesystemError, ConfigError
from .models import ComparisonRecord, SyncConfig
from .tree_scanner import TreeScanner

__all__ = [
    'build_comparison_records',
    'ConfigLoader',
    'parse_changed_since',
    'FileMapperError',
    'FilesystemError',
    'ConfigError',
    'ComparisonRecord',
    'SyncConfig',
    'TreeScanner',
]

"""Command-line interface and synchronization pipeline for docupack.

This package provides the `docupack` CLI tool and the components it
sequences: change detection, deletion sweep, bounded-parallel conversion
and index aggregation.
"""

from .change_detector import ChangeDetector
from .conversion_pipeline import ConversionPipeline, default_max_workers
from .deletion_handler import DeletionHandler
from .errors import CLIError, UsageError
from .index_builder import IndexBuilder
from .models import (
    ExitCode,
    ConversionStatus,
    ConversionOutcome,
    ConversionTask,
    PipelineResult,
    SyncSummary,
)
from .sync_command import SyncCommand

__all__ = [
    'ChangeDetector',
    'ConversionPipeline',
    'default_max_workers',
    'DeletionHandler',
    'CLIError',
    'UsageError',
    'IndexBuilder',
    'ExitCode',
    'ConversionStatus',
    'ConversionOutcome',
    'ConversionTask',
    'PipelineResult',
    'SyncSummary',
    'SyncCommand',
]

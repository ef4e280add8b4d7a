"""Main CLI entry point for the docupack command.

This module provides the Typer application that serves as the entry point
for the docupack command-line tool. Options given on the command line
override values from the optional YAML configuration file.
"""

import logging
import os
import signal
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import typer

from docupack import __version__
from docupack.cli.models import ExitCode
from docupack.cli.output import OutputHandler
from docupack.cli.sync_command import SyncCommand
from docupack.file_mapper.config_loader import (
    DEFAULT_CONFIG_PATH,
    ConfigLoader,
    parse_changed_since,
)
from docupack.file_mapper.errors import ConfigError, FilesystemError
from docupack.file_mapper.models import SyncConfig
from docupack.storage.cancellation import CancellationToken
from docupack.storage.retry_logic import RetryPolicy

app = typer.Typer(
    name="docupack",
    help="""Convert Markdown files with YAML frontmatter into JSON files.

Only added, changed and removed documents are written on each run.

EXAMPLE:
  docupack ./docs --output ./json --index-dir ./json-index""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'docupack' namespace logger to avoid affecting
    third-party libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("docupack")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"docupack_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S")
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl-C into a cooperative cancellation request.

    A second Ctrl-C, once cancellation is already requested, interrupts
    the process immediately.
    """
    def handler(signum, frame):
        if token.is_cancelled:
            raise KeyboardInterrupt
        logger.warning("Cancellation requested, finishing in-flight file operations...")
        token.cancel()

    try:
        previous = signal.signal(signal.SIGINT, handler)
    except ValueError:
        # signal handlers can only be installed from the main thread
        yield
        return

    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _load_config(config_path: Optional[str]) -> SyncConfig:
    if config_path:
        return ConfigLoader.load(config_path)
    if os.path.exists(DEFAULT_CONFIG_PATH):
        logger.info(f"Loading configuration from {DEFAULT_CONFIG_PATH}")
        return ConfigLoader.load(DEFAULT_CONFIG_PATH)
    return SyncConfig()


@app.command()
def main_command(
    source: Optional[str] = typer.Argument(
        None,
        help="Markdown file or directory to convert",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory for converted JSON files",
        metavar="DIR",
    ),
    index_dir: Optional[str] = typer.Option(
        None,
        "--index-dir",
        "-i",
        help="Directory for index.json (omit to skip the index)",
        metavar="DIR",
    ),
    changed_since: Optional[str] = typer.Option(
        None,
        "--changed-since",
        help="Only re-check existing documents modified at/after this ISO 8601 time",
        metavar="TIMESTAMP",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"YAML configuration file (default: {DEFAULT_CONFIG_PATH} if present)",
        metavar="FILE",
    ),
    retries: Optional[int] = typer.Option(
        None,
        "--retries",
        help="Total attempts for each file operation",
    ),
    backoff_base: Optional[float] = typer.Option(
        None,
        "--backoff-base",
        help="Exponential backoff base in seconds between attempts",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Convert Markdown files with YAML frontmatter into JSON files.

    \b
    EXAMPLES:
      docupack ./docs --output ./json
      docupack ./docs --output ./json --index-dir ./json-index
      docupack ./docs/guide.md --output ./json
      docupack --config docupack.yaml --verbosity 1
    """
    if version:
        typer.echo(f"docupack version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    output = OutputHandler(no_color=no_color)

    try:
        config = _load_config(config_path)
    except (ConfigError, FilesystemError) as e:
        output.error(f"Failed to load config: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    try:
        if changed_since is not None:
            config.changed_since = parse_changed_since(changed_since)
        if retries is not None or backoff_base is not None:
            config.retry = RetryPolicy(
                max_attempts=retries if retries is not None else config.retry.max_attempts,
                backoff_base=backoff_base if backoff_base is not None else config.retry.backoff_base,
            )
    except (ConfigError, ValueError) as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.USAGE_ERROR)

    config.source = source or config.source
    config.output_dir = output_dir or config.output_dir
    config.index_dir = index_dir or config.index_dir

    token = CancellationToken()
    sync_cmd = SyncCommand(
        output_handler=output,
        retry_policy=config.retry,
        worker_ratio=config.worker_ratio,
        cancel_token=token,
    )

    with _cancel_on_interrupt(token):
        exit_code = sync_cmd.run(
            config.source,
            config.output_dir,
            index_dir=config.index_dir,
            changed_since=config.changed_since,
        )

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m docupack.cli.main
if __name__ == "__main__":
    main()

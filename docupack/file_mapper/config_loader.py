"""YAML configuration loading and validation.

This module loads run configuration from an optional YAML file. Every field
is optional; values given on the command line override the file.

Configuration file structure:
    source: ./docs
    output: ./json
    index_dir: ./json-index
    changed_since: 2024-01-01T00:00:00
    retry:
      max_attempts: 5
      backoff_base: 2.0
    worker_ratio: 0.75
"""

from datetime import date, datetime
from typing import Any, Dict, Optional, Union

import yaml

from docupack.storage.retry_logic import RetryPolicy

from .errors import ConfigError, FilesystemError
from .models import SyncConfig

DEFAULT_CONFIG_PATH = ".docupack.yaml"


def parse_changed_since(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Parse a changed-since value into a datetime.

    Accepts ISO 8601 strings (a trailing "Z" is understood as UTC), dates
    (interpreted as midnight local time) and datetimes.

    Raises:
        ConfigError: If the value cannot be parsed
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ConfigError(
            f"Invalid ISO 8601 timestamp: {value!r}",
            'changed_since'
        )


class ConfigLoader:
    """Handles configuration file loading and validation."""

    DEFAULTS = {
        'worker_ratio': 0.75,
    }

    @classmethod
    def load(cls, config_path: str) -> SyncConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            SyncConfig object with parsed configuration

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(
                config_path,
                'read',
                'Configuration file not found'
            )
        except PermissionError:
            raise FilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'read',
                str(e)
            )

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            return SyncConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> SyncConfig:
        """Parse and validate configuration dictionary.

        Raises:
            ConfigError: If configuration is invalid
        """
        paths = {}
        for field_name in ('source', 'output', 'index_dir'):
            value = config_dict.get(field_name)
            if value is None:
                paths[field_name] = None
                continue
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(
                    f"Field '{field_name}' must be a non-empty string",
                    field_name
                )
            paths[field_name] = value

        changed_since = parse_changed_since(config_dict.get('changed_since'))
        retry = cls._parse_retry(config_dict.get('retry'))

        worker_ratio = config_dict.get('worker_ratio', cls.DEFAULTS['worker_ratio'])
        try:
            worker_ratio = float(worker_ratio)
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid field type: {str(e)}",
                'worker_ratio'
            )
        if not 0 < worker_ratio <= 1:
            raise ConfigError(
                f"Field 'worker_ratio' must be in (0, 1], got {worker_ratio}",
                'worker_ratio'
            )

        return SyncConfig(
            source=paths['source'],
            output_dir=paths['output'],
            index_dir=paths['index_dir'],
            changed_since=changed_since,
            retry=retry,
            worker_ratio=worker_ratio,
        )

    @classmethod
    def _parse_retry(cls, retry_raw: Any) -> RetryPolicy:
        if retry_raw is None:
            return RetryPolicy()

        if not isinstance(retry_raw, dict):
            raise ConfigError(
                "Field 'retry' must be a dictionary",
                'retry'
            )

        defaults = RetryPolicy()
        try:
            max_attempts = int(retry_raw.get('max_attempts', defaults.max_attempts))
            backoff_base = float(retry_raw.get('backoff_base', defaults.backoff_base))
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid field type: {str(e)}",
                'retry'
            )

        try:
            return RetryPolicy(max_attempts=max_attempts, backoff_base=backoff_base)
        except ValueError as e:
            raise ConfigError(str(e), 'retry')

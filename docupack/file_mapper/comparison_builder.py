"""Builds comparison records from flat file lists."""

import os
from typing import Iterable, List

from .models import ComparisonRecord


def build_comparison_records(paths: Iterable[str], from_root: str) -> List[ComparisonRecord]:
    """Map file paths to comparison records keyed by (relative_dir, base_name).

    Args:
        paths: Absolute file paths discovered under from_root
        from_root: Root the paths were discovered under

    Returns:
        One ComparisonRecord per path, in input order

    Example:
        >>> build_comparison_records(["/src/api/intro.md"], "/src")[0].key
        ('api', 'intro')
    """
    root = os.path.abspath(from_root)
    records = []
    for full_path in paths:
        relative_path = os.path.relpath(os.path.abspath(full_path), root)
        file_name = os.path.basename(relative_path)
        records.append(ComparisonRecord(
            full_path=full_path,
            root_dir=root,
            relative_dir=os.path.dirname(relative_path),
            base_name=os.path.splitext(file_name)[0],
        ))
    return records

"""Change detection between the source and destination trees.

No state from previous runs is persisted. Instead, the destination tree
itself is the record of the last run: each comparison key is classified by
whether it exists in the source tree, the destination tree, or both.
Whether a matched artifact actually needs rewriting is decided later by the
conversion pipeline, which compares content hashes.
"""

import logging
import os
from datetime import datetime
from typing import List, Optional, Sequence

from docupack.cli.models import ConversionStatus, ConversionTask
from docupack.file_mapper.models import ComparisonRecord

logger = logging.getLogger(__name__)


def _modified_time(path: str, reference: datetime) -> datetime:
    """Return the mtime of path in the same timezone awareness as reference."""
    mtime = os.path.getmtime(path)
    if reference.tzinfo is None:
        return datetime.fromtimestamp(mtime)
    return datetime.fromtimestamp(mtime, tz=reference.tzinfo)


class ChangeDetector:
    """Classifies comparison keys as ADDED, DELETED or CONFIRMING.

    Matching is exact equality of (relative_dir, base_name); there is no
    fuzzy or case-insensitive matching.

    Example:
        >>> detector = ChangeDetector()
        >>> tasks = detector.detect_changes(current, updated, "/out")
        >>> added = [t for t in tasks if t.status is ConversionStatus.ADDED]
    """

    def detect_changes(
        self,
        current_records: Sequence[ComparisonRecord],
        updated_records: Sequence[ComparisonRecord],
        output_root: str,
        date_from: Optional[datetime] = None,
    ) -> List[ConversionTask]:
        """Diff destination records against source records.

        Args:
            current_records: Records of the artifacts in the destination tree
            updated_records: Records of the documents in the source tree
            output_root: Destination directory the tasks write to
            date_from: If set, a matched document modified strictly before
                       this instant produces no task (treated as up to date)

        Returns:
            DELETED tasks (destination order) followed by ADDED and
            CONFIRMING tasks (source order)
        """
        logger.info(
            f"Detecting changes for {len(updated_records)} source document(s), "
            f"{len(current_records)} destination artifact(s)"
        )

        source_keys = {record.key for record in updated_records}
        destination_keys = {record.key for record in current_records}

        tasks: List[ConversionTask] = []

        for record in current_records:
            if record.key not in source_keys:
                tasks.append(ConversionTask(
                    base_name=record.base_name,
                    relative_dir=record.relative_dir,
                    output_root=output_root,
                    status=ConversionStatus.DELETED,
                ))

        filtered = 0
        for record in updated_records:
            if record.key in destination_keys:
                if date_from is not None and _modified_time(record.full_path, date_from) < date_from:
                    filtered += 1
                    continue
                status = ConversionStatus.CONFIRMING
            else:
                status = ConversionStatus.ADDED

            tasks.append(ConversionTask(
                base_name=record.base_name,
                relative_dir=record.relative_dir,
                output_root=output_root,
                status=status,
                source_path=record.full_path,
            ))

        if filtered:
            logger.info(f"{filtered} matched document(s) older than {date_from.isoformat()} left as is")

        logger.debug(
            "Change detection complete: "
            + ", ".join(
                f"{status.value}={sum(1 for t in tasks if t.status is status)}"
                for status in ConversionStatus
            )
        )
        return tasks

import os
import logging
from dataclasses import dataclass
from typing import Iterable

from ..models import DuplicateGroup


@dataclass
class RemovalResult:
    removed: int = 0
    failed: int = 0
    skipped: int = 0   # records that point at the canonical file itself
    freed_bytes: int = 0


class DuplicateRemover:
    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, groups: Iterable[DuplicateGroup]) -> RemovalResult:
        """
        Deletes every non-canonical member of each duplicate group.
        The canonical member (first record) is never touched.
        """
        result = RemovalResult()

        for group in groups:
            if not group.is_duplicate:
                continue

            keep = group.canonical
            for record in group.redundant:
                if self._same_file(record.path, keep.path):
                    logging.warning(f"Not deleting {record.path}: it is the same file as {keep.path}")
                    result.skipped += 1
                    continue

                if self.dry_run:
                    logging.info(f"[DRY RUN] Delete {record.path} (duplicate of {keep.path})")
                    continue

                try:
                    os.remove(record.path)
                except OSError as e:
                    logging.error(f"Failed to delete {record.path}: {e}")
                    result.failed += 1
                    continue

                logging.info(f"Deleted {record.path} (duplicate of {keep.path})")
                result.removed += 1
                result.freed_bytes += record.size

        return result

    def _same_file(self, path: str, other: str) -> bool:
        try:
            return os.path.samefile(path, other)
        except OSError:
            return False

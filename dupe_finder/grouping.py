import os
from enum import Enum
from typing import Callable, Dict, Hashable, Iterator, List

from . import config
from .exceptions import ConfigurationError
from .models import DuplicateGroup, FileRecord, ReportLine, ScanSummary, Status

DIGEST_WIDTH = 64


class GroupBy(Enum):
    HASH = "hash"
    NAME = "name"

    @classmethod
    def parse(cls, value) -> "GroupBy":
        if isinstance(value, cls):
            return value
        name = (value or config.DEFAULT_GROUP_BY).lower()
        try:
            return cls(name)
        except ValueError:
            raise ConfigurationError(f"unsupported grouping value {value}") from None


def by_hash(record: FileRecord) -> Hashable:
    return record.digest


def by_name(record: FileRecord) -> Hashable:
    return os.path.basename(record.path)


def key_function(group_by: GroupBy) -> Callable[[FileRecord], Hashable]:
    return {GroupBy.HASH: by_hash, GroupBy.NAME: by_name}[group_by]


class GroupingEngine:
    """
    Buckets hashed records into equivalence classes.

    One engine per scan. It is the only owner of its map and is fed from a
    single thread, so it does no locking. Within a class, records keep the
    order they were added in unless `oldest_first` is set, in which case
    they are sorted by mtime and the oldest becomes the canonical member.
    """

    def __init__(self, group_by=GroupBy.HASH, oldest_first: bool = False):
        self.group_by = GroupBy.parse(group_by)
        self.oldest_first = oldest_first
        self._key = key_function(self.group_by)
        self._classes: Dict[Hashable, List[FileRecord]] = {}
        self.files_scanned = 0

    def add(self, record: FileRecord) -> None:
        if record.digest is None:
            raise ValueError(f"Record {record.path} has not been hashed")

        members = self._classes.setdefault(self._key(record), [])
        members.append(record)
        record.occurrences = len(members)
        self.files_scanned += 1

    def extend(self, records) -> None:
        for record in records:
            self.add(record)

    def groups(self) -> List[DuplicateGroup]:
        out = []
        for key, members in self._classes.items():
            if self.oldest_first:
                members = sorted(members, key=lambda r: r.mtime)
            out.append(DuplicateGroup(key=key, records=list(members)))
        return out

    def duplicate_groups(self) -> List[DuplicateGroup]:
        return [g for g in self.groups() if g.is_duplicate]

    def duplicate_count(self) -> int:
        return sum(len(m) - 1 for m in self._classes.values() if len(m) >= 2)

    def report(self, show_all: bool = False) -> Iterator[ReportLine]:
        for group in self.groups():
            if not group.is_duplicate and not show_all:
                continue
            status = Status.DUPLICATE if group.is_duplicate else Status.UNIQUE
            for record in group.records:
                yield ReportLine(
                    status=status,
                    fingerprint=record.digest,
                    width=DIGEST_WIDTH,
                    size=record.size,
                    path=record.path,
                )

    def summary(self, skipped: int = 0) -> ScanSummary:
        dupes = self.duplicate_groups()
        return ScanSummary(
            files_scanned=self.files_scanned,
            duplicates=self.duplicate_count(),
            groups=len(self._classes),
            wasted_bytes=sum(g.wasted_bytes for g in dupes),
            skipped=skipped,
        )

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Status(Enum):
    UNIQUE = "unique"
    DUPLICATE = "duplicate"
    SIMILAR = "similar"
    DISSIMILAR = "dissimilar"


@dataclass
class FileRecord:
    """
    Represents a regular file found during a scan.
    """
    path: str
    size: int
    mtime: float

    # Filled by the digest engine once the whole file has been read
    digest: Optional[int] = None
    simhash: Optional[int] = None

    # Records seen so far with the same grouping key (set by GroupingEngine)
    occurrences: int = 0


@dataclass
class DuplicateGroup:
    """
    An equivalence class of records sharing a grouping key.
    The first record is the canonical member.
    """
    key: object
    records: List[FileRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def is_duplicate(self) -> bool:
        return len(self.records) >= 2

    @property
    def duplicate_count(self) -> int:
        return max(len(self.records) - 1, 0)

    @property
    def canonical(self) -> Optional[FileRecord]:
        return self.records[0] if self.records else None

    @property
    def redundant(self) -> List[FileRecord]:
        return self.records[1:]

    @property
    def wasted_bytes(self) -> int:
        return sum(r.size for r in self.redundant)


@dataclass
class ReportLine:
    status: Status
    fingerprint: int
    width: int
    size: int
    path: str

    # Comparison mode only
    other_path: Optional[str] = None
    score: Optional[float] = None


@dataclass
class ScanSummary:
    files_scanned: int = 0
    duplicates: int = 0
    groups: int = 0
    wasted_bytes: int = 0
    skipped: int = 0

    def __str__(self) -> str:
        return f"{self.files_scanned} files scanned - found {self.duplicates} duplicates"

"""
Configuration constants and the per-run scan configuration.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .exceptions import ConfigurationError

# --- Hashing ---
# Read buffer for the digest engine. Simhash chunking is content-defined and does not depend on it.
HASH_CHUNK_SIZE = 4 * 1024  # 4 KB
DIGEST_SEED = 0

# --- Simhash ---
SIMHASH_WIDTHS = (32, 64)
DEFAULT_SIMHASH_WIDTH = 64
SIMHASH_SEED = 5381
SIMHASH_MULTIPLIER = 33
# Content-defined feature chunks: cut where the gear rolling hash has these low bits clear
SIMHASH_BOUNDARY_MASK = 0x3F  # ~64 bytes between candidate cuts
SIMHASH_MIN_CHUNK = 16
SIMHASH_MAX_CHUNK = 512

# --- Concurrency ---
DEFAULT_CONCURRENCY = 4
# In-flight hashing tasks per worker before the walk waits for results
PENDING_PER_WORKER = 2

# --- Progress ---
PROGRESS_INTERVAL = 0.75  # seconds between progress ticks
PROGRESS_QUEUE_SIZE = 100

# --- Grouping ---
DEFAULT_GROUP_BY = "hash"


@dataclass
class ScanConfig:
    """
    Options bundle for a single scan invocation.
    """
    roots: List[Path] = field(default_factory=list)
    group_by: str = DEFAULT_GROUP_BY  # "hash", "name" or a GroupBy member
    threshold: float = 0.0          # similarity percentage, 0 disables filtering
    delete_duplicates: bool = False
    show_all: bool = False          # report unique entries too
    concurrency_limit: int = DEFAULT_CONCURRENCY

    oldest_first: bool = False      # canonical member = earliest mtime
    skip_errors: bool = False       # log and skip unreadable files/dirs instead of aborting
    compare: bool = False           # pairwise simhash comparison mode
    simhash_width: int = DEFAULT_SIMHASH_WIDTH
    dry_run: bool = False
    progress: bool = True

    def validate(self) -> None:
        if not self.roots:
            raise ConfigurationError("At least one scan root is required")

        # Raises ConfigurationError for unknown modes; accepts GroupBy members too
        from .grouping import GroupBy
        group_by = GroupBy.parse(self.group_by)

        if not 0 <= self.threshold <= 100:
            raise ConfigurationError(f"Threshold must be between 0 and 100, got {self.threshold}")

        if self.concurrency_limit < 1:
            raise ConfigurationError(f"Concurrency limit must be at least 1, got {self.concurrency_limit}")

        if self.simhash_width not in SIMHASH_WIDTHS:
            raise ConfigurationError(f"Simhash width must be one of {SIMHASH_WIDTHS}, got {self.simhash_width}")

        if self.delete_duplicates and (self.compare or group_by is not GroupBy.HASH):
            # Name and similarity classes do not guarantee identical content
            raise ConfigurationError("Deleting duplicates requires grouping by hash")

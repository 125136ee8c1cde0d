import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import ScanConfig
from .grouping import GroupBy, GroupingEngine
from .models import ReportLine, ScanSummary
from .organization.remover import DuplicateRemover, RemovalResult
from .progress import ProgressReporter
from .scanning.filesystem import DiskScanner
from .scanning.hasher import FileHasher
from .similarity import SimilarityComparator


@dataclass
class ScanReport:
    lines: List[ReportLine] = field(default_factory=list)
    summary: ScanSummary = field(default_factory=ScanSummary)
    removal: Optional[RemovalResult] = None


class DupeFinderApp:
    def __init__(self, cfg: ScanConfig):
        self.cfg = cfg

    def run(self) -> ScanReport:
        """
        Executes one scan.
        1. Validate configuration (before touching the disk)
        2. Scan & hash
        3. Group (or pairwise compare)
        4. Optionally delete non-canonical duplicates

        Walk errors propagate and nothing is reported. All state is local to
        this call.
        """
        cfg = self.cfg
        cfg.validate()
        group_by = GroupBy.parse(cfg.group_by)

        hasher = FileHasher(simhash_width=cfg.simhash_width if cfg.compare else None)
        progress = ProgressReporter(enabled=cfg.progress)
        scanner = DiskScanner(
            hasher,
            max_workers=cfg.concurrency_limit,
            skip_errors=cfg.skip_errors,
            progress=progress,
        )

        roots = ", ".join(str(r) for r in cfg.roots)
        logging.info(f"Scanning {roots} (by={group_by.value}, compare={cfg.compare}, workers={cfg.concurrency_limit})")

        if cfg.compare:
            return self._run_compare(scanner, progress)
        return self._run_grouping(scanner, progress, group_by)

    def _run_grouping(self, scanner: DiskScanner, progress: ProgressReporter, group_by: GroupBy) -> ScanReport:
        cfg = self.cfg
        engine = GroupingEngine(group_by, oldest_first=cfg.oldest_first)

        with progress:
            engine.extend(scanner.scan(cfg.roots))

        report = ScanReport(
            lines=list(engine.report(show_all=cfg.show_all)),
            summary=engine.summary(skipped=scanner.skipped),
        )
        logging.info(f"Scan complete. {report.summary}")

        if cfg.delete_duplicates:
            remover = DuplicateRemover(dry_run=cfg.dry_run)
            report.removal = remover.execute(engine.duplicate_groups())
            logging.info(f"Removed {report.removal.removed} duplicates ({report.removal.failed} failed)")

        return report

    def _run_compare(self, scanner: DiskScanner, progress: ProgressReporter) -> ScanReport:
        cfg = self.cfg
        with progress:
            records = list(scanner.scan(cfg.roots))

        comparator = SimilarityComparator(cfg.simhash_width, threshold=cfg.threshold)
        lines = list(comparator.pairs(records, show_all=cfg.show_all))

        summary = ScanSummary(
            files_scanned=len(records),
            duplicates=comparator.similar_pairs,
            skipped=scanner.skipped,
        )
        logging.info(f"Comparison complete. {summary}")
        return ScanReport(lines=lines, summary=summary)

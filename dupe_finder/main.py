import argparse
import logging
import sys
from pathlib import Path

from . import config
from .config import ScanConfig
from .core import DupeFinderApp
from .exceptions import DupeFinderError
from .reporting import render, write_csv


def setup_logging(verbose: bool):
    """Logs go to stderr so stdout carries only the report."""
    log_level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Find duplicate and near-duplicate files")

    p.add_argument("roots", type=Path, nargs="+", help="Directories (or files) to scan")

    p.add_argument("-b", "--by", dest="group_by", default=config.DEFAULT_GROUP_BY,
                   help="Compare files by 'hash' (content) or 'name' (basename)")
    p.add_argument("--compare", action="store_true",
                   help="Pairwise near-duplicate comparison using simhash "
                        "(chunks and hashes every byte in pure Python, roughly 1-2 s per MB)")
    p.add_argument("--threshold", type=float, default=0.0,
                   help="Similarity percentage for --compare (0 reports every pair)")
    p.add_argument("--width", type=int, choices=config.SIMHASH_WIDTHS, default=config.DEFAULT_SIMHASH_WIDTH,
                   dest="simhash_width", help="Simhash width in bits")

    p.add_argument("--all", action="store_true", dest="show_all", help="Also list unique files")
    p.add_argument("--oldest-first", action="store_true", help="Keep the oldest file of each group as the original")
    p.add_argument("--delete", action="store_true", dest="delete_duplicates", help="Delete duplicates, keeping the original")
    p.add_argument("--dry-run", action="store_true", help="With --delete, only log what would be removed")

    p.add_argument("--workers", type=int, default=config.DEFAULT_CONCURRENCY, help="Parallel hashing workers")
    p.add_argument("--skip-errors", action="store_true", help="Skip unreadable files and directories instead of aborting")
    p.add_argument("--no-progress", action="store_false", dest="progress", help="Disable the progress counter")
    p.add_argument("--color", action="store_true", help="Colorize status tags")
    p.add_argument("--csv", type=Path, default=None, help="Also export the report to this CSV file")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)


def build_config(args) -> ScanConfig:
    return ScanConfig(
        roots=args.roots,
        group_by=args.group_by,
        threshold=args.threshold,
        delete_duplicates=args.delete_duplicates,
        show_all=args.show_all,
        concurrency_limit=args.workers,
        oldest_first=args.oldest_first,
        skip_errors=args.skip_errors,
        compare=args.compare,
        simhash_width=args.simhash_width,
        dry_run=args.dry_run,
        progress=args.progress,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    app = DupeFinderApp(build_config(args))

    try:
        report = app.run()
    except KeyboardInterrupt:
        logging.warning("Scan cancelled by user.")
        return 1
    except DupeFinderError as e:
        logging.debug("Scan failed", exc_info=True)
        print(e, file=sys.stderr)
        return 1

    for text in render(report.lines, report.summary, color=args.color):
        print(text)

    if args.csv:
        try:
            write_csv(report.lines, args.csv)
        except OSError as e:
            logging.error(f"Failed to write CSV report {args.csv}: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

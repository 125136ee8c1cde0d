import os
import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Deque, Iterable, Iterator, Optional

from .. import config
from ..exceptions import FileReadError, WalkError
from ..models import FileRecord
from ..progress import ProgressReporter
from .hasher import FileHasher


class DiskScanner:
    def __init__(self,
                 hasher: Optional[FileHasher] = None,
                 max_workers: int = config.DEFAULT_CONCURRENCY,
                 skip_errors: bool = False,
                 progress: Optional[ProgressReporter] = None):
        self.hasher = hasher or FileHasher()
        self.max_workers = max_workers
        self.skip_errors = skip_errors
        self.progress = progress

        # Files dropped because of read errors during the last scan (skip_errors only)
        self.skipped = 0

    def scan(self, roots: Iterable[Path]) -> Iterator[FileRecord]:
        """
        Generator that yields a hashed FileRecord for every regular file under roots.

        Records come out in walk order. Hashing runs on a pool of `max_workers`
        threads with at most `max_workers * PENDING_PER_WORKER` files in flight,
        which caps open descriptors and read buffers. The walk stops submitting
        work on the first fatal error; pending tasks are cancelled.
        """
        self.skipped = 0
        paths = self._iter_files([Path(r) for r in roots])

        if self.max_workers <= 1:
            yield from self._scan_sequential(paths)
        else:
            yield from self._scan_parallel(paths)

    def _scan_sequential(self, paths: Iterator[Path]) -> Iterator[FileRecord]:
        for path in paths:
            try:
                record = self._process_single_file(path)
            except FileReadError as e:
                self._handle_read_error(e)
                continue
            self._emit(record)
            yield record

    def _scan_parallel(self, paths: Iterator[Path]) -> Iterator[FileRecord]:
        limit = self.max_workers * config.PENDING_PER_WORKER
        pending: Deque[Future] = deque()

        logging.debug(f"Parallel scan: {self.max_workers} workers, {limit} files in flight")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            try:
                for path in paths:
                    pending.append(executor.submit(self._process_single_file, path))
                    if len(pending) >= limit:
                        record = self._collect(pending.popleft())
                        if record is not None:
                            yield record

                while pending:
                    record = self._collect(pending.popleft())
                    if record is not None:
                        yield record
            finally:
                for future in pending:
                    future.cancel()

    def _collect(self, future: Future) -> Optional[FileRecord]:
        try:
            record = future.result()
        except FileReadError as e:
            self._handle_read_error(e)
            return None
        self._emit(record)
        return record

    def _handle_read_error(self, err: FileReadError) -> None:
        if not self.skip_errors:
            raise err
        logging.warning(f"Skipping unreadable file: {err}")
        self.skipped += 1

    def _emit(self, record: FileRecord) -> None:
        if self.progress is not None:
            self.progress.notify(record.size)

    def _process_single_file(self, path: Path) -> FileRecord:
        """Stats and hashes one file. Raises FileReadError on any I/O failure."""
        try:
            st = os.stat(path)
        except OSError as e:
            raise FileReadError(path, f"Failed to stat {path}: {e}") from e

        res = self.hasher.compute(path)

        return FileRecord(
            path=str(path),
            size=st.st_size,
            mtime=st.st_mtime,
            digest=res.digest,
            simhash=res.simhash,
        )

    def _iter_files(self, roots: Iterable[Path]) -> Iterator[Path]:
        """
        Yields every regular file under roots exactly once, even when roots
        overlap or repeat. Symlinked roots are skipped like any other symlink.
        """
        seen = set()
        for root in roots:
            if root.is_symlink():
                logging.warning(f"Skipping symlinked scan root {root}")
                continue
            if root.is_file():
                paths = iter([root])
            elif root.is_dir():
                paths = self._walk(root)
            else:
                raise WalkError(f"Scan root {root} does not exist or is not a directory")

            for path in paths:
                key = os.path.realpath(path)
                if key in seen:
                    logging.debug(f"Already scanned {path}")
                    continue
                seen.add(key)
                yield path

    def _walk(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir. Symlinks and special files are ignored."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                if current == root or not self.skip_errors:
                    raise WalkError(f"Cannot list directory {current}: {e}") from e
                logging.warning(f"Skipping unreadable directory {current}: {e}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name)

            dirs = []
            files = []
            for e in entries:
                try:
                    if e.is_dir(follow_symlinks=False):
                        dirs.append(Path(e.path))
                    elif e.is_file(follow_symlinks=False):
                        files.append(Path(e.path))
                except OSError as err:
                    logging.debug(f"Cannot classify {e.path}: {err}")

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f

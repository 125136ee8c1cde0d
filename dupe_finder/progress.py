import logging
import queue
import threading
from typing import Optional

from tqdm import tqdm

from . import config


class ProgressReporter:
    """
    Best-effort scan progress.

    Producers call notify() which never blocks: when the bounded queue is full the
    notification is dropped. A background thread wakes every `interval` seconds,
    drains whatever is pending and refreshes a tqdm counter on stderr.
    Counts are therefore a lower bound, never a source of backpressure.
    """

    def __init__(self,
                 enabled: bool = True,
                 interval: float = config.PROGRESS_INTERVAL,
                 maxsize: int = config.PROGRESS_QUEUE_SIZE,
                 desc: str = "Scanning"):
        self.enabled = enabled
        self.interval = interval
        self.desc = desc

        self.files = 0
        self.bytes = 0
        self.dropped = 0

        self._queue: "queue.Queue[int]" = queue.Queue(maxsize=maxsize)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._bar: Optional[tqdm] = None

    def notify(self, size: int) -> None:
        if not self.enabled:
            return
        try:
            self._queue.put_nowait(size)
        except queue.Full:
            self.dropped += 1

    def start(self) -> "ProgressReporter":
        if not self.enabled or self._thread is not None:
            return self

        self._stop.clear()
        self._bar = tqdm(desc=self.desc, unit="file", leave=False)
        self._thread = threading.Thread(target=self._run, name="progress", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        if self._thread is None:
            return

        self._stop.set()
        self._thread.join()
        self._thread = None

        if self._bar is not None:
            self._bar.close()
            self._bar = None

        if self.dropped:
            logging.debug(f"Progress: {self.dropped} notifications dropped")

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self._drain()
        self._drain()

    def _drain(self) -> None:
        count = 0
        while True:
            try:
                size = self._queue.get_nowait()
            except queue.Empty:
                break
            count += 1
            self.bytes += size

        if not count:
            return

        self.files += count
        if self._bar is not None:
            self._bar.update(count)
            self._bar.set_postfix_str(f"{self.bytes >> 20}MB")

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()

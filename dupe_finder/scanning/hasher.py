from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import xxhash

from .. import config
from ..exceptions import FileReadError
from .simhash import SimhashAccumulator


@dataclass
class HashResult:
    digest: int                     # 64-bit xxh64 of the full content
    simhash: Optional[int] = None   # only when similarity mode is active


class FileHasher:
    def __init__(self, chunk_size: int = config.HASH_CHUNK_SIZE, simhash_width: Optional[int] = None):
        self.chunk_size = chunk_size
        self.simhash_width = simhash_width

    def compute(self, path: Path) -> HashResult:
        """
        Reads the whole file once, in `chunk_size` blocks, feeding every block
        into the exact digest and (optionally) the simhash accumulator.

        Accumulators are created per call so one hasher can be shared by
        worker threads. Raises FileReadError if the file cannot be opened or
        any read fails; no partial digest is ever returned.
        """
        digest = xxhash.xxh64(seed=config.DIGEST_SEED)
        simhash = SimhashAccumulator(self.simhash_width) if self.simhash_width else None

        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.chunk_size):
                    digest.update(chunk)
                    if simhash is not None:
                        simhash.write(chunk)
        except OSError as e:
            raise FileReadError(path, f"Failed to read {path}: {e}") from e

        return HashResult(
            digest=digest.intdigest(),
            simhash=simhash.digest_and_reset() if simhash is not None else None,
        )

from typing import List

import xxhash

from .. import config
from ..exceptions import ConfigurationError

# Gear table for the rolling boundary hash, fixed for every run
GEAR = tuple(xxhash.xxh64_intdigest(bytes([b]), seed=config.SIMHASH_SEED) for b in range(256))
GEAR_MASK = (1 << 64) - 1


class SimhashAccumulator:
    """
    Streaming simhash: a weighted majority vote over the bits of one feature hash
    per content-defined chunk.

    write() accepts the stream in arbitrary pieces. Chunk boundaries come from a
    gear rolling hash over the bytes themselves: a chunk ends where the low bits
    of the rolling value are zero (bounded by SIMHASH_MIN_CHUNK and
    SIMHASH_MAX_CHUNK). An insertion or substitution therefore only changes the
    chunks around it, and the fingerprint does not depend on the read buffer size.
    Every byte belongs to exactly one chunk; the unfinished tail is carried
    between writes and counted by sum().

    A single instance is not thread-safe; use one per file being hashed.
    """

    def __init__(self, width: int = config.DEFAULT_SIMHASH_WIDTH):
        if width not in config.SIMHASH_WIDTHS:
            raise ConfigurationError(f"Simhash width must be one of {config.SIMHASH_WIDTHS}, got {width}")
        self.width = width
        self._mask = (1 << width) - 1
        self.counters: List[int] = [0] * width
        self._pending = bytearray()
        self._gear = 0

    def write(self, data: bytes) -> int:
        """Feeds stream bytes, voting each chunk as its boundary is found. Returns bytes consumed."""
        pending = self._pending
        g = self._gear
        min_chunk = config.SIMHASH_MIN_CHUNK
        max_chunk = config.SIMHASH_MAX_CHUNK
        boundary = config.SIMHASH_BOUNDARY_MASK

        for b in data:
            pending.append(b)
            g = ((g << 1) + GEAR[b]) & GEAR_MASK
            n = len(pending)
            if n >= min_chunk and (not g & boundary or n >= max_chunk):
                self.vote(bytes(pending))
                pending.clear()

        self._gear = g
        return len(data)

    def vote(self, chunk: bytes) -> None:
        """Votes the feature hash of one chunk into the counters."""
        if chunk:
            self._apply(self.counters, chunk)

    def feature_hash(self, chunk: bytes) -> int:
        """Multiplicative string hash (h = h*33 + byte), truncated to the accumulator width."""
        h = config.SIMHASH_SEED
        mask = self._mask
        for b in chunk:
            h = (h * config.SIMHASH_MULTIPLIER + b) & mask
        return h

    def _apply(self, counters: List[int], chunk: bytes) -> None:
        h = self.feature_hash(chunk)
        for i in range(self.width):
            if (h >> i) & 1:
                counters[i] += 1
            else:
                counters[i] -= 1

    def sum(self) -> int:
        """Bit i is set iff counter i (including the pending tail chunk) is strictly positive."""
        counters = self.counters
        if self._pending:
            counters = list(counters)
            self._apply(counters, bytes(self._pending))

        value = 0
        for i, c in enumerate(counters):
            if c > 0:
                value |= 1 << i
        return value

    def reset(self) -> None:
        """Restores every counter to zero and drops the pending tail and rolling state."""
        self.counters = [0] * self.width
        self._pending = bytearray()
        self._gear = 0

    def digest_and_reset(self) -> int:
        value = self.sum()
        self.reset()
        return value

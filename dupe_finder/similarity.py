"""
Near-duplicate scoring on simhash fingerprints.

The score is 1 - hamming(a, b) / width: 1.0 for identical fingerprints,
0.0 when every bit differs.
"""
from itertools import combinations
from typing import Iterator, List

from .exceptions import ComparatorPreconditionError
from .models import FileRecord, ReportLine, Status


def distance(a: int, b: int, width: int) -> float:
    if width <= 0:
        raise ComparatorPreconditionError(f"Invalid fingerprint width {width}")
    limit = 1 << width
    for value in (a, b):
        if not 0 <= value < limit:
            raise ComparatorPreconditionError(f"Fingerprint {value:#x} does not fit in {width} bits")
    return 1 - bin(a ^ b).count("1") / width


def is_similar(score: float, threshold: float) -> bool:
    """A threshold of 0 (or less) disables filtering."""
    if threshold <= 0:
        return True
    return score * 100 >= threshold


class SimilarityComparator:
    def __init__(self, width: int, threshold: float = 0.0):
        self.width = width
        self.threshold = threshold
        self.similar_pairs = 0

    def compare(self, a: FileRecord, b: FileRecord) -> float:
        if a.simhash is None or b.simhash is None:
            raise ComparatorPreconditionError(
                f"Missing similarity fingerprint for {a.path if a.simhash is None else b.path}"
            )
        return distance(a.simhash, b.simhash, self.width)

    def pairs(self, records: List[FileRecord], show_all: bool = False) -> Iterator[ReportLine]:
        """
        Scores every unordered pair of records.

        Without a threshold every pair is reported as SIMILAR (display only).
        With one, pairs below it are DISSIMILAR and only shown with `show_all`.
        `similar_pairs` is updated as the generator is consumed.
        """
        self.similar_pairs = 0
        for a, b in combinations(records, 2):
            score = self.compare(a, b)
            similar = is_similar(score, self.threshold)
            # Display-only mode counts identical fingerprints
            if (similar if self.threshold > 0 else score == 1.0):
                self.similar_pairs += 1
            if not similar and not show_all:
                continue

            yield ReportLine(
                status=Status.SIMILAR if similar else Status.DISSIMILAR,
                fingerprint=a.simhash,
                width=self.width,
                size=a.size,
                path=a.path,
                other_path=b.path,
                score=score,
            )

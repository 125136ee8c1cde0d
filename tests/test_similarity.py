import random
import shutil

import pytest

from dupe_finder.exceptions import ComparatorPreconditionError
from dupe_finder.models import FileRecord, Status
from dupe_finder.scanning.hasher import FileHasher
from dupe_finder.similarity import SimilarityComparator, distance, is_similar


def _rec(path, simhash, size=1):
    return FileRecord(path=path, size=size, mtime=0.0, digest=0, simhash=simhash)


@pytest.mark.parametrize("a,b", [(0, 0), (0x0F, 0xF0), (0xDEADBEEF, 0x12345678), (2 ** 64 - 1, 1)])
def test_distance_is_symmetric(a, b):
    assert distance(a, b, 64) == distance(b, a, 64)


def test_distance_to_self_is_one():
    assert distance(0xCAFEBABE, 0xCAFEBABE, 32) == 1.0


def test_distance_all_bits_differ_is_zero():
    assert distance(0, 2 ** 32 - 1, 32) == 0.0


def test_distance_counts_differing_bits():
    # 8 of 64 bits differ
    assert distance(0xFF, 0, 64) == pytest.approx(1 - 8 / 64)


def test_distance_rejects_width_mismatch():
    with pytest.raises(ComparatorPreconditionError):
        distance(2 ** 40, 1, 32)
    with pytest.raises(ComparatorPreconditionError):
        distance(1, 1, 0)


@pytest.mark.parametrize("score,threshold,expected", [
    (0.9, 90, True),
    (0.89, 90, False),
    (0.1, 0, True),
    (1.0, 100, True),
])
def test_is_similar(score, threshold, expected):
    assert is_similar(score, threshold) is expected


def test_compare_requires_simhash():
    cmp = SimilarityComparator(64)
    with pytest.raises(ComparatorPreconditionError):
        cmp.compare(_rec("a", None), _rec("b", 1))


def test_pairs_without_threshold_reports_everything():
    cmp = SimilarityComparator(8)
    records = [_rec("a", 0x00), _rec("b", 0x00), _rec("c", 0xFF)]

    lines = list(cmp.pairs(records))

    assert [(l.path, l.other_path) for l in lines] == [("a", "b"), ("a", "c"), ("b", "c")]
    assert all(l.status is Status.SIMILAR for l in lines)
    # Only the identical pair counts
    assert cmp.similar_pairs == 1


def test_pairs_with_threshold_filters_dissimilar():
    cmp = SimilarityComparator(8, threshold=75)
    records = [_rec("a", 0b0000_0000), _rec("b", 0b0000_0011), _rec("c", 0xFF)]

    lines = list(cmp.pairs(records))
    assert [(l.path, l.other_path) for l in lines] == [("a", "b")]
    assert lines[0].score == pytest.approx(0.75)
    assert cmp.similar_pairs == 1

    lines = list(cmp.pairs(records, show_all=True))
    assert [l.status for l in lines] == [Status.SIMILAR, Status.DISSIMILAR, Status.DISSIMILAR]


@pytest.mark.parametrize("width,chunk_size", [(32, 3), (64, 4096)])
def test_copy_is_fully_similar(tmp_path, width, chunk_size):
    original = tmp_path / "original.txt"
    original.write_bytes(b"The quick brown fox jumps over the lazy dog.\n" * 500)
    copy = tmp_path / "copy.txt"
    shutil.copyfile(original, copy)

    hasher = FileHasher(chunk_size=chunk_size, simhash_width=width)
    a = _rec(str(original), hasher.compute(original).simhash)
    b = _rec(str(copy), hasher.compute(copy).simhash)

    assert SimilarityComparator(width).compare(a, b) == 1.0


def test_display_only_mode_never_filters():
    cmp = SimilarityComparator(8)
    records = [_rec("a", 0x00), _rec("b", 0x0F), _rec("c", 0xF0), _rec("d", 0xFF)]

    lines = list(cmp.pairs(records, show_all=False))

    assert len(lines) == 6
    assert {l.status for l in lines} == {Status.SIMILAR}
    assert cmp.similar_pairs == 0


WORDS = ("archive backup copy delta entry folder group hash index journal kernel "
         "ledger merge node object page query record stream table update volume").split()


def _text(size, seed=42):
    rng = random.Random(seed)
    out = []
    total = 0
    while total < size:
        line = " ".join(rng.choice(WORDS) for _ in range(rng.randint(4, 12))) + "\n"
        out.append(line)
        total += len(line)
    return "".join(out).encode("ascii")


def _score(tmp_path, original, edited, width=64):
    a_path = tmp_path / "a.txt"
    b_path = tmp_path / "b.txt"
    a_path.write_bytes(original)
    b_path.write_bytes(edited)

    hasher = FileHasher(simhash_width=width)
    a = _rec(str(a_path), hasher.compute(a_path).simhash)
    b = _rec(str(b_path), hasher.compute(b_path).simhash)
    return SimilarityComparator(width).compare(a, b)


def test_insertion_at_start_stays_similar(tmp_path):
    original = _text(21_000)
    assert _score(tmp_path, original, b"#" + original) > 0.85


def test_substitution_stays_similar(tmp_path):
    original = _text(21_000)
    mid = len(original) // 2
    edited = original[:mid] + b"X" + original[mid + 1:]
    assert _score(tmp_path, original, edited) > 0.85


def test_small_file_case_change_stays_similar(tmp_path):
    original = _text(1_500)
    idx = original.index(b"a")
    edited = original[:idx] + b"A" + original[idx + 1:]
    assert _score(tmp_path, original, edited) > 0.7


def test_fingerprint_independent_of_read_buffer(tmp_path):
    p = tmp_path / "doc.txt"
    p.write_bytes(_text(10_000))

    small = FileHasher(chunk_size=13, simhash_width=64).compute(p).simhash
    large = FileHasher(chunk_size=4096, simhash_width=64).compute(p).simhash
    assert small == large

import pytest
from dupe_finder.config import ScanConfig


@pytest.fixture
def make_files(tmp_path):
    """Writes {relative_path: bytes} under tmp_path and returns the root."""
    def _make(files):
        for rel, data in files.items():
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
        return tmp_path
    return _make


@pytest.fixture
def scan_config(tmp_path):
    """A ScanConfig rooted at tmp_path with the progress counter disabled."""
    return ScanConfig(roots=[tmp_path], progress=False)

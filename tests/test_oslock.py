"""Tests for the OS lock primitive."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from advlock.oslock import lock_exclusive, unlock


def test_exclusive_between_handles(tmp_path):
    f = tmp_path / "x.lock"
    f.write_bytes(b"")
    with open(f, "rb") as a, open(f, "rb") as b:
        assert lock_exclusive(a)
        assert not lock_exclusive(b)
        unlock(a)
        assert lock_exclusive(b)
        unlock(b)


def test_blocking_when_free(tmp_path):
    f = tmp_path / "x.lock"
    with open(f, "wb") as a:
        assert lock_exclusive(a, blocking=True)
        unlock(a)

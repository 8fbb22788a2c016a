"""Tests for lock path resolution."""

import hashlib
import sys
import tempfile
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from advlock.errors import InvalidPathError
from advlock.paths import resolve_lock_path, resolve_directory, temp_lock_name


class TestResolveDirectory:
    def test_absolute(self, tmp_path):
        directory, name = resolve_directory(tmp_path / "a.txt")
        assert directory == tmp_path.resolve()
        assert name == "a.txt"

    def test_relative_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        directory, name = resolve_directory("a.txt")
        assert directory == tmp_path.resolve()
        assert name == "a.txt"

    def test_follows_symlinks(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        directory, _ = resolve_directory(link / "a.txt")
        assert directory == real.resolve()

    def test_missing_directory(self, tmp_path):
        with pytest.raises(InvalidPathError, match="not valid"):
            resolve_directory(tmp_path / "missing" / "a.txt")

    def test_parent_is_a_file(self, tmp_path):
        f = tmp_path / "file"
        f.write_text("x")
        with pytest.raises(InvalidPathError):
            resolve_directory(f / "a.txt")

    def test_root_has_no_name(self):
        with pytest.raises(InvalidPathError):
            resolve_directory("/")


class TestResolveLockPath:
    def test_self(self, tmp_path):
        assert resolve_lock_path(tmp_path / "a.txt", external=False) == tmp_path.resolve() / "a.txt"

    def test_external_writable(self, tmp_path):
        assert resolve_lock_path(tmp_path / "a.txt", external=True) == tmp_path.resolve() / "a.txt.lock"

    def test_external_unwritable_default_temp(self, tmp_path, monkeypatch):
        monkeypatch.setattr("advlock.paths.os.access", lambda *a: False)
        digest = hashlib.sha1(str(tmp_path.resolve()).encode()).hexdigest()
        expected = Path(tempfile.gettempdir()) / f"{digest}_a.txt.lock"
        assert resolve_lock_path(tmp_path / "a.txt", external=True) == expected

    def test_external_unwritable_custom_temp(self, tmp_path, monkeypatch):
        monkeypatch.setattr("advlock.paths.os.access", lambda *a: False)
        path = resolve_lock_path(tmp_path / "a.txt", external=True, temp_dir=tmp_path / "t")
        assert path.parent == tmp_path / "t"

    def test_self_ignores_writability(self, tmp_path, monkeypatch):
        monkeypatch.setattr("advlock.paths.os.access", lambda *a: False)
        assert resolve_lock_path(tmp_path / "a.txt", external=False).parent == tmp_path.resolve()


def test_temp_name_is_per_directory(tmp_path):
    a = temp_lock_name(tmp_path / "one", "x")
    b = temp_lock_name(tmp_path / "two", "x")
    assert a != b
    assert a.endswith("_x.lock")
    assert temp_lock_name(tmp_path / "one", "x") == a

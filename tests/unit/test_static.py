"""
Unit tests for target → filesystem resolution.
"""

import os

import pytest

from staticserver.handlers.static import (
    ResolvedResource,
    inspect_path,
    read_file,
    resolve,
    resolve_path,
)


class TestResolvePath:
    """Tests for resolve_path()."""

    def test_file(self, site_root):
        assert resolve_path(site_root, "/a.html") == site_root + "/a.html"

    def test_directory_without_slash(self, site_root):
        """Test that a separator is added before index.html."""
        assert resolve_path(site_root, "/sub") == site_root + "/sub/index.html"

    def test_directory_with_slash(self, site_root):
        """Test that no double slash is produced."""
        assert resolve_path(site_root, "/sub/") == site_root + "/sub/index.html"

    def test_missing_path_left_alone(self, site_root):
        assert resolve_path(site_root, "/missing.html") == site_root + "/missing.html"

    def test_dot_dot_not_normalized(self, site_root):
        """Test that '..' segments pass through untouched."""
        assert resolve_path(site_root, "/sub/../a.html") == site_root + "/sub/../a.html"


class TestInspectPath:
    """Tests for inspect_path() and resolve()."""

    def test_regular_file(self, site_root, file_mtime):
        resource = resolve(site_root, "/a.html")

        assert resource.exists
        assert resource.is_file
        assert resource.servable
        assert int(resource.last_modified) == file_mtime

    def test_missing(self, site_root):
        resource = resolve(site_root, "/missing.html")

        assert resource == ResolvedResource(path=site_root + "/missing.html")
        assert not resource.servable
        assert resource.last_modified is None

    def test_embedded_nul_byte(self, site_root):
        """Test that a path the OS cannot represent reports as missing."""
        resource = inspect_path(site_root + "/a\x00b.html")

        assert not resource.exists
        assert not resource.servable

    def test_directory_without_index(self, site_root):
        """Test that a directory with no index.html is not servable."""
        resource = resolve(site_root, "/empty/")
        assert resource.path == site_root + "/empty/index.html"
        assert not resource.exists

    def test_directory_itself(self, site_root):
        """Test that a directory exists but is not a regular file."""
        resource = inspect_path(site_root + "/empty")
        assert resource.exists
        assert not resource.is_file
        assert resource.last_modified is None

    def test_not_cached(self, site_root, file_mtime):
        """Test that a changed mtime is seen on the next lookup."""
        path = site_root + "/a.html"
        before = inspect_path(path)
        os.utime(path, (file_mtime + 60, file_mtime + 60))
        after = inspect_path(path)

        assert int(after.last_modified) == int(before.last_modified) + 60


class TestReadFile:
    """Tests for read_file()."""

    def test_reads_whole_file(self, site_root):
        assert read_file(resolve(site_root, "/a.html")) == b"hi"

    def test_vanished_file_raises(self, site_root):
        """Test that a file removed after inspection raises OSError."""
        resource = resolve(site_root, "/a.html")
        os.remove(resource.path)

        with pytest.raises(OSError):
            read_file(resource)

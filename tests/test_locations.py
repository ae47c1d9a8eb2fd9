"""Tests for physical locations and resource URL parsing."""

import pytest

from package_loader.errors import InvalidArgumentError
from package_loader.locations import ArchiveLocation
from package_loader.locations import DirectoryLocation
from package_loader.locations import parse_location


class TestDirectoryLocation:
    def test_equality_ignores_resolver(self, tmp_path):
        a = DirectoryLocation(tmp_path, resolver=object())
        b = DirectoryLocation(tmp_path, resolver=object())
        assert a == b
        assert hash(a) == hash(b)
        assert a.identity == b.identity

    def test_root_is_normalized(self, tmp_path):
        (tmp_path / "p").mkdir()
        location = DirectoryLocation(tmp_path / "p" / ".." / "p")
        assert location.root == (tmp_path / "p").resolve()
        assert location == DirectoryLocation(tmp_path / "p")


class TestArchiveLocation:
    def test_prefix_normalized(self, tmp_path):
        location = ArchiveLocation(tmp_path / "x.zip", "/p/q")
        assert location.prefix == "p/q/"

    def test_distinct_prefixes_are_distinct(self, tmp_path):
        assert ArchiveLocation(tmp_path / "x.zip", "p/") != ArchiveLocation(tmp_path / "x.zip", "q/")

    def test_archive_never_equals_directory(self, tmp_path):
        assert ArchiveLocation(tmp_path, "p/") != DirectoryLocation(tmp_path)


class TestParseLocation:
    def test_file_url_with_percent_escapes(self, tmp_path):
        root = tmp_path / "with space" / "p"
        root.mkdir(parents=True)
        resolver = object()

        location = parse_location(root.as_uri(), resolver)

        assert isinstance(location, DirectoryLocation)
        assert location.root == root.resolve()
        assert location.resolver is resolver

    @pytest.mark.parametrize("scheme", ["zip", "jar"])
    def test_archive_url(self, tmp_path, scheme):
        container = tmp_path / "lib dir" / "x.zip"
        url = f"{scheme}:{container.as_uri()}!/p/q"

        location = parse_location(url)

        assert isinstance(location, ArchiveLocation)
        assert location.container == container.resolve()
        assert location.prefix == "p/q/"

    def test_archive_url_reparses_to_same_location(self, tmp_path):
        location = ArchiveLocation(tmp_path / "x.zip", "p/")
        assert parse_location(location.url) == location

    @pytest.mark.parametrize(
        "url",
        ["", "http://example.com/p", "zip:file:///x.zip", "file://remote-host/p"],
    )
    def test_rejects_unsupported(self, url):
        with pytest.raises(InvalidArgumentError):
            parse_location(url)

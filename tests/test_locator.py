"""Tests for ResourceLocator ordering and de-duplication."""

from unittest.mock import MagicMock

import pytest

from conftest import make_tree
from conftest import make_zip
from package_loader.errors import InvalidArgumentError
from package_loader.locations import ArchiveLocation
from package_loader.locations import DirectoryLocation
from package_loader.locator import ResourceLocator
from package_loader.resolvers import PathResolver


@pytest.fixture
def roots(tmp_path):
    root1 = make_tree(tmp_path / "root1", {"p/X.py": ""})
    root2 = make_zip(tmp_path / "root2.zip", {"p/Y.py": ""})
    return root1, root2


def test_preserves_scope_order(roots):
    root1, root2 = roots
    first = PathResolver([root1])
    second = PathResolver([root2])

    locations = ResourceLocator().locate("p", [first, second])

    assert [type(loc) for loc in locations] == [DirectoryLocation, ArchiveLocation]
    assert locations[0].resolver is first
    assert locations[1].resolver is second


def test_same_root_through_parent_and_child_is_reported_once(roots):
    root1, _ = roots
    parent = PathResolver([root1], name="parent")
    child = PathResolver([root1], parent=parent, name="child")

    locations = ResourceLocator().locate("p", [child, parent])

    assert len(locations) == 1
    # Delegation reports the parent's view first
    assert locations[0].resolver is parent


def test_same_root_in_two_unrelated_resolvers_is_reported_once(roots):
    root1, _ = roots
    a = PathResolver([root1])
    b = PathResolver([root1])

    locations = ResourceLocator().locate("p", [a, b])

    assert len(locations) == 1
    assert locations[0].resolver is a


def test_failing_resolver_is_skipped(roots):
    root1, _ = roots
    broken = MagicMock()
    broken.find_locations.side_effect = OSError("disk on fire")
    good = PathResolver([root1])

    locations = ResourceLocator().locate("p", [broken, good])

    assert len(locations) == 1
    assert locations[0].resolver is good


def test_nothing_found_returns_empty(roots):
    root1, root2 = roots
    assert ResourceLocator().locate("missing", [PathResolver([root1, root2])]) == []


def test_empty_logical_path_rejected(roots):
    with pytest.raises(InvalidArgumentError):
        ResourceLocator().locate("", [PathResolver([roots[0]])])

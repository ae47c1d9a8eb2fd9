"""Tests for CLI error message formatting."""

from package_loader.errors import PackageNotFoundError
from package_loader.utils.error_format import escape_markup
from package_loader.utils.error_format import format_error_message


def test_prefixes_type_name():
    assert format_error_message(PackageNotFoundError("p")) == "PackageNotFoundError: Package 'p' not found"


def test_type_already_in_message_not_repeated():
    assert format_error_message(ValueError("ValueError: bad")) == "ValueError: bad"


def test_empty_message_falls_back_to_type():
    assert format_error_message(TimeoutError()) == "TimeoutError"


def test_without_type():
    assert format_error_message(ValueError("bad"), include_type=False) == "bad"


def test_escape_markup_keeps_brackets_literal():
    assert escape_markup("[red]x[/red]") == "\\[red]x\\[/red]"

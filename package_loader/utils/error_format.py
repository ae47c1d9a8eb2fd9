"""Safe error message formatting for CLI output.

Ensures exceptions always have a useful display message, even when their
str() is empty, and that Rich markup in messages is not interpreted.
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a non-empty display message.

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'

        >>> format_error_message(KeyError())
        'KeyError'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    return error_type


def escape_markup(text: str) -> str:
    """Escape Rich markup so paths like '[tool]' print literally."""
    return _escape_markup(text)

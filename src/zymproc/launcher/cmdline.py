"""Command-line construction for platforms that take one string, not an argv."""

from collections.abc import Iterable

_NEEDS_QUOTES = (" ", "\t", '"')


def quote_argument(arg: str) -> str:
    """Quote one argument following the MSVCRT parsing rules.

    Arguments that are empty or contain a space, tab or double quote are
    wrapped in quotes. Backslashes are literal unless they precede a quote,
    in which case they are doubled and the quote itself is escaped.
    """
    if arg and not any(ch in arg for ch in _NEEDS_QUOTES):
        return arg

    parts = ['"']
    backslashes = 0
    for ch in arg:
        if ch == "\\":
            backslashes += 1
            continue
        if ch == '"':
            parts.append("\\" * (backslashes * 2 + 1))
        else:
            parts.append("\\" * backslashes)
        parts.append(ch)
        backslashes = 0
    parts.append("\\" * (backslashes * 2))
    parts.append('"')
    return "".join(parts)


def build_command_line(argv: Iterable[str]) -> str:
    """Join argv into a single escaped command line."""
    return " ".join(quote_argument(arg) for arg in argv)

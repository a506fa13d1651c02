"""POSIX single-quote escaping."""

_SINGLE_QUOTE_ESCAPE = "'\"'\"'"


def shell_quote(value: str) -> str:
    """
    Escape a string for use inside single quotes.

    Every ``'`` becomes ``'"'"'`` (close quote, double-quoted quote, reopen
    quote). Nothing else needs escaping inside single quotes, so backslashes,
    ``$``, backticks and spaces pass through untouched.

    Args:
        value: Arbitrary string.

    Returns:
        Escaped string; the caller supplies the surrounding quotes.

    Example:
        >>> shell_quote("foo'bar")
        'foo\\'"\\'"\\'bar'
    """
    return value.replace("'", _SINGLE_QUOTE_ESCAPE)


def single_quoted(value: str) -> str:
    """Return ``value`` as a complete single-quoted shell word."""
    return f"'{shell_quote(value)}'"

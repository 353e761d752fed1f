"""
Converters for :py:meth:`argument <combargs.named.NamedArg.argument>` and
:py:func:`positional <combargs.named.positional>` with short, stable error messages.
"""

DIGITS = "0123456789"


def integer(s: str) -> int:
    """
    >>> integer("-12")
    -12
    >>> integer("x12")
    Traceback (most recent call last):
    ...
    ValueError: invalid digit found in string
    """
    if not s:
        raise ValueError("cannot parse integer from empty string")
    digits = s[1:] if s[0] in "+-" else s
    if not digits or any(c not in DIGITS for c in digits):
        raise ValueError("invalid digit found in string")
    return int(s)


def unsigned(s: str) -> int:
    """
    >>> unsigned("7")
    7
    >>> unsigned("-7")
    Traceback (most recent call last):
    ...
    ValueError: invalid digit found in string
    """
    if s.startswith("-"):
        raise ValueError("invalid digit found in string")
    return integer(s)

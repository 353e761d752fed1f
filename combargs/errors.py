"""
Defines errors which can be produced by parsers.

Errors travel inside :py:class:`Result <combargs.result.Result>` values rather than being
raised through the parser tree. Only the top-level driver turns them into output.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from combargs.meta import Item


@dataclass
class ArgumentError(Exception):
    """
    Base class. A plain ``ArgumentError`` carries a finished, user-facing message.
    """

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class MissingError(ArgumentError):
    """
    The value is absent. This is not necessarily fatal: ``optional``, ``many`` and
    ``fallback`` recover from it. ``message`` overrides the default "expected ..."
    rendering when it is not empty.
    """

    missing: List["Item"] = field(default_factory=list)

    def __or__(self, other: "MissingError") -> "MissingError":
        return MissingError(
            message=self.message or other.message,
            missing=[*self.missing, *other.missing],
        )


@dataclass
class RequirementError(ArgumentError):
    """
    A member of a product never matched although its siblings consumed input.
    """

    missing: List["Item"] = field(default_factory=list)


@dataclass
class ParseError(ArgumentError):
    """
    A token was present but failed conversion or validation.
    """


@dataclass
class ConflictError(ArgumentError):
    loser: str = ""
    winner: str = ""


@dataclass
class UnexpectedError(ArgumentError):
    unexpected: str = ""


@dataclass
class HelpError(ArgumentError):
    """
    Help or version was requested. ``message`` goes to stdout.
    """


@dataclass
class ParseFailure(Exception):
    """
    What the top-level driver reports: the text for one of the two channels.
    """

    message: str

    def __str__(self) -> str:
        return self.message

    @property
    def exit_code(self) -> int:
        raise NotImplementedError


class Stdout(ParseFailure):
    @property
    def exit_code(self) -> int:
        return 0


class Stderr(ParseFailure):
    @property
    def exit_code(self) -> int:
        return 1

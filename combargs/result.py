"""
Defines the :py:class:`Result` dataclass, representing the outcome of running a parser.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Type, TypeVar

from pytypeclass import Monad, MonadPlus

from combargs.errors import (
    ArgumentError,
    MissingError,
    ParseFailure,
    Stderr,
    Stdout,
)

A_co = TypeVar("A_co", covariant=True)
A = TypeVar("A")
B = TypeVar("B")


@dataclass
class Result(MonadPlus[A_co]):
    """
    Either a value or an :py:exc:`ArgumentError <combargs.errors.ArgumentError>`.

    >>> Result.return_(1) >= (lambda x: Result.return_(x + 1))
    Result(get=2)
    >>> Result.zero() >= (lambda x: Result.return_(x + 1))
    Result(get=MissingError(message='', missing=[]))
    >>> Result.zero() | Result.return_(3)
    Result(get=3)
    """

    get: "A_co | ArgumentError | ParseFailure"

    def __or__(self, other: "Result[B]") -> "Result[A_co | B]":  # type: ignore[override]
        for result in (self, other):
            if not result.failed:
                return result
        for result in (self, other):
            if not isinstance(result.get, MissingError):
                return result
        return self

    def __ge__(self, f: Callable[[A_co], Monad[B]]) -> "Result[B]":  # type: ignore[override]
        return self.bind(f)

    def bind(self, f: Callable[[A_co], Monad[B]]) -> "Result[B]":  # type: ignore[override]
        if self.failed:
            return Result(self.get)
        y = f(self.get)  # type: ignore[arg-type]
        assert isinstance(y, Result), y
        return y

    @property
    def failed(self) -> bool:
        return isinstance(self.get, (ArgumentError, ParseFailure))

    @property
    def missing(self) -> bool:
        return isinstance(self.get, MissingError)

    @classmethod
    def return_(cls: "Type[Result[A]]", a: A) -> "Result[A]":  # type: ignore[override]
        return Result(a)

    @classmethod
    def zero(cls, error: Optional[ArgumentError] = None) -> "Result":  # type: ignore[override]
        return Result(MissingError("") if error is None else error)

    def unwrap(self) -> A_co:
        """
        Returns the value, raising the error if there is none.
        """
        if isinstance(self.get, Exception):
            raise self.get
        return self.get

    def unwrap_stdout(self) -> str:
        if isinstance(self.get, Stdout):
            return self.get.message
        raise AssertionError(f"Expected a message for stdout, got {self.get!r}")

    def unwrap_stderr(self) -> str:
        if isinstance(self.get, Stderr):
            return self.get.message
        raise AssertionError(f"Expected a message for stderr, got {self.get!r}")

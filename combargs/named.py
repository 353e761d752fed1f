"""
Defines the builders for the leaves of a parser: flags, option arguments and
positional items.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, TypeVar

from combargs import meta
from combargs.args import PosWord, Short, State, Word
from combargs.errors import ArgumentError, MissingError
from combargs.parsers import Parser
from combargs.result import Result

A = TypeVar("A")


@dataclass(frozen=True)
class NamedArg:
    """
    The names and help of a flag under construction. Start one with :py:func:`short`,
    :py:func:`long` or :py:func:`env`, add more names by chaining, and finish it
    with :py:meth:`switch`, :py:meth:`flag`, :py:meth:`req_flag` or :py:meth:`argument`.

    >>> short("v").long("verbose").help("say more").switch().to_options().run("--verbose")
    True
    """

    name: meta.Named = field(default_factory=meta.Named)
    help_text: Optional[str] = None

    def short(self, name: str) -> "NamedArg":
        return replace(self, name=replace(self.name, shorts=(*self.name.shorts, name)))

    def long(self, name: str) -> "NamedArg":
        return replace(self, name=replace(self.name, longs=(*self.name.longs, name)))

    def env(self, name: str) -> "NamedArg":
        """
        Falls back to the environment variable ``name`` when the flag is not on the
        command line.
        """
        return replace(self, name=replace(self.name, envs=(*self.name.envs, name)))

    def help(self, text: str) -> "NamedArg":
        return replace(self, help_text=text)

    def req_flag(self, present: A) -> Parser[A]:
        """
        Returns ``present`` if the flag is given, otherwise the value is missing.

        >>> p = short("f").req_flag("f").to_options()
        >>> p.run("-f")
        'f'
        >>> p.run()
        expected `-f`, pass `--help` for usage information
        """
        named = self.name
        item = meta.Flag(named, self.help_text)

        def f(state: State) -> Result[A]:
            ix = state.find_flag(named)
            if ix is not None:
                state.take(ix)
                return Result.return_(present)
            if state.take_env(named.envs) is not None:
                return Result.return_(present)
            return Result(MissingError("", missing=[item]))

        return Parser(f, item)

    def flag(self, present: A, absent: A) -> Parser[A]:
        """
        >>> long("color").flag("always", "auto").to_options().run()
        'auto'
        """
        return self.req_flag(present).fallback(absent)

    def switch(self) -> Parser[bool]:
        """
        >>> p = short("a").switch().to_options()
        >>> p.run("-a"), p.run()
        (True, False)
        """
        return self.flag(True, False)

    def argument(self, metavar: str, type: Callable[[str], Any] = str) -> Parser[Any]:
        """
        A flag followed by a value: ``-n 1``, ``-n=1``, ``-n1`` or ``--name=1``.

        Parameters
        ----------
        metavar : str
            How the value is called in usage lines and help.
        type : Callable[[str], Any]
            Converts the value. Any exception it raises is reported as a parse error.

        Examples
        --------

        >>> p = short("n").long("number").argument("N", type=int).to_options()
        >>> p.run("-n1"), p.run("--number=2"), p.run("-n", "3")
        (1, 2, 3)
        >>> p.run("-n")
        `-n` requires an argument `N`
        >>> p.run("--number", "--bar")
        `--number` requires an argument `N`, got a flag `--bar`, try `--number=--bar` to use it as an
        argument
        """
        named = self.name
        item = meta.Argument(named, metavar, self.help_text)

        def f(state: State) -> Result[str]:
            ix = state.find_flag(named)
            if ix is None:
                value = state.take_env(named.envs)
                if value is not None:
                    return Result.return_(value)
                if named.envs and not named.visible:
                    return Result(
                        ArgumentError(f"environment variable `{named.env}` is not set")
                    )
                return Result(MissingError("", missing=[item]))
            flag = state.items[ix]
            if isinstance(flag, Short) and flag.rest:
                state.take_cluster(ix)
                state.current = ix
                return Result.return_(flag.rest)
            state.take(ix)
            nxt = state.value_after(ix)
            if nxt is None:
                return Result(
                    ArgumentError(f"`{flag.display()}` requires an argument `{metavar}`")
                )
            value = state.items[nxt]
            if isinstance(value, (Word, PosWord)):
                state.take(nxt)
                state.current = nxt
                return Result.return_(value.raw)
            return Result(
                ArgumentError(
                    f"`{flag.display()}` requires an argument `{metavar}`, "
                    f"got a flag `{value.raw}`, "
                    f"try `{flag.display()}={value.raw}` to use it as an argument"
                )
            )

        parser = Parser(f, item)
        return parser if type is str else parser.parse(type)


def short(name: str) -> NamedArg:
    return NamedArg().short(name)


def long(name: str) -> NamedArg:
    return NamedArg().long(name)


def env(name: str) -> NamedArg:
    """
    A flag that can only be set through the environment.

    >>> env("USER_NAME").argument("NAME").to_options().run_inner(env={"USER_NAME": "alice"}).unwrap()
    'alice'
    >>> env("USER_NAME").argument("NAME").to_options().run_inner(env={}).unwrap_stderr()
    'environment variable `USER_NAME` is not set'
    """
    return NamedArg().env(name)


def positional(
    metavar: str, type: Callable[[str], Any] = str, help: Optional[str] = None
) -> Parser[Any]:
    """
    Takes the next word that is not a flag. Positionals are consumed in the order
    they are declared.

    >>> from combargs import construct
    >>> construct(positional("SRC"), positional("DST")).to_options().run("a", "b")
    ('a', 'b')
    >>> positional("N", type=int).many().to_options().run("1", "--", "-2")
    [1, -2]
    """
    item = meta.Positional(metavar, help)

    def f(state: State) -> Result[str]:
        ix = state.first_unconsumed()
        if ix is not None:
            value = state.items[ix]
            if isinstance(value, PosWord) or (
                isinstance(value, Word) and not value.attached
            ):
                state.take(ix)
                state.current = ix
                return Result.return_(value.raw)
        return Result(MissingError("", missing=[item]))

    parser = Parser(f, item)
    return parser if type is str else parser.parse(type)

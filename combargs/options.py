"""
Defines :py:class:`OptionParser`, the runnable top of a parser, and subcommands.
"""
from __future__ import annotations

import logging
import os
import sys
import textwrap
from dataclasses import dataclass, field, replace
from typing import Callable, Generic, Mapping, Optional, TypeVar

from combargs import help as help_
from combargs import meta, suggestions
from combargs.args import Long, State, Word
from combargs.errors import (
    ArgumentError,
    HelpError,
    MissingError,
    RequirementError,
    Stderr,
    Stdout,
)
from combargs.parsers import Parser
from combargs.result import Result

logger = logging.getLogger(__name__)

TESTING = os.environ.get("COMBARGS_TESTING", False)
PRINTING = os.environ.get("COMBARGS_PRINTING", True)
MAX_WIDTH = 100

A_co = TypeVar("A_co", covariant=True)

HELP = meta.Flag(meta.Named(("h",), ("help",)), "Prints help information")
VERSION = meta.Flag(meta.Named(("V",), ("version",)), "Prints version information")


def _take_flag(state: State, item: meta.Flag) -> bool:
    ix = state.find_flag(item.name)
    if ix is None:
        return False
    state.take(ix)
    return True


def _wrap(message: str) -> str:
    return "\n".join(
        textwrap.fill(line, width=MAX_WIDTH, break_long_words=False, break_on_hyphens=False)
        for line in message.split("\n")
    )


@dataclass
class OptionParser(Generic[A_co]):
    """
    A parser together with what its help says about it. Built with
    :py:meth:`Parser.to_options <combargs.parsers.Parser.to_options>`.

    >>> from combargs import short
    >>> p = short("a").long("AAAAA").switch() + short("b").switch()
    >>> p.to_options().descr("this is a test").run("--help")
    this is a test
    <BLANKLINE>
    Usage: [-a] [-b]
    <BLANKLINE>
    Available options:
        -a, --AAAAA
        -b
        -h, --help   Prints help information
    """

    parser: Parser[A_co]
    info: help_.Info = field(default_factory=help_.Info)
    usage_fn: Optional[Callable[[str], str]] = None

    def command(self, name: str) -> "CommandParser[A_co]":
        """
        Turns ``self`` into a subcommand, called ``name``, of an enclosing parser.
        Everything after the command word belongs to ``self``.

        >>> from combargs import short
        >>> inner = short("a").switch().to_options().descr("do the thing")
        >>> p = (inner.command("thing").short("t") | short("b").switch()).to_options()
        >>> p.run("t", "-a")
        True
        >>> p.run("thin")
        no such command or positional: `thin`, did you mean `thing`?
        """
        return CommandParser.make(self, meta.Command(name, help=self.info.descr))

    def descr(self, text: str) -> "OptionParser[A_co]":
        return replace(self, info=replace(self.info, descr=text))

    def header(self, text: str) -> "OptionParser[A_co]":
        return replace(self, info=replace(self.info, header=text))

    def footer(self, text: str) -> "OptionParser[A_co]":
        return replace(self, info=replace(self.info, footer=text))

    def version(self, text: str) -> "OptionParser[A_co]":
        """
        Enables ``-V`` / ``--version``.

        >>> from combargs import pure
        >>> pure(()).to_options().version("1.0").run("-V")
        Version: 1.0
        """
        return replace(self, info=replace(self.info, version=text))

    def usage(self, text: str) -> "OptionParser[A_co]":
        """
        Replaces the usage line of the help message with ``text``.
        """
        return replace(self, info=replace(self.info, usage=text))

    def with_usage(self, f: Callable[[str], str]) -> "OptionParser[A_co]":
        """
        Computes the usage line of the help message from the generated usage string.

        >>> from combargs import short
        >>> p = short("p").switch().to_options().with_usage(lambda u: f"Usage: hey {u}")
        >>> print(p.render_help(State.from_args([], env={})).splitlines()[0])
        Usage: hey [-p]
        """
        return replace(self, usage_fn=f)

    def meta(self) -> meta.Meta:
        """
        The parser's metadata including the built-in flags.
        """
        version = [meta.Optional(VERSION)] if self.info.version is not None else []
        return meta.And.make(self.parser.meta, meta.Optional(HELP), *version)

    def render_help(self, state: State) -> str:
        return help_.render(
            self.info,
            self.parser.meta,
            self.meta(),
            state.path,
            state.env,
            usage_fn=self.usage_fn,
        )

    def run_subparser(self, state: State) -> Result[A_co]:
        """
        Runs the parser against everything in ``state``'s scope and insists that all
        of it is used. Help and version requests take priority over errors.
        """
        result = self.parser.eval(state)
        if isinstance(result.get, HelpError):
            return result
        if _take_flag(state, HELP):
            return Result(HelpError(self.render_help(state)))
        if self.info.version is not None and _take_flag(state, VERSION):
            return Result(HelpError(f"Version: {self.info.version}\n"))
        error = result.get
        if isinstance(error, (MissingError, RequirementError)):
            if error.message:
                return Result(ArgumentError(error.message))
            return Result(suggestions.missing(state, error.missing, self.meta()))
        if result.failed:
            return result
        ix = state.first_unconsumed()
        if ix is not None:
            return Result(suggestions.unexpected(state, ix, self.meta()))
        return result

    def run_inner(
        self, *args: str, env: Optional[Mapping[str, str]] = None
    ) -> Result[A_co]:
        """
        Parses ``args`` and returns the value, or a :py:class:`Stdout <combargs.errors.Stdout>`
        or :py:class:`Stderr <combargs.errors.Stderr>` holding the message to print.

        >>> from combargs import short
        >>> p = short("n").argument("N", type=int).to_options()
        >>> p.run_inner("-n", "3")
        Result(get=3)
        >>> p.run_inner("-m")
        Result(get=Stderr(message='expected `-n=N`, got `-m`. Pass `--help` for usage information'))
        """
        state = State.from_args(args, env=env)
        result = self.run_subparser(state)
        logger.debug("parsed %r: %r", args, result.get)
        if isinstance(result.get, HelpError):
            return Result(Stdout(result.get.message))
        if isinstance(result.get, ArgumentError):
            return Result(Stderr(_wrap(result.get.message)))
        return result

    def run(self, *args: str) -> Optional[A_co]:
        """
        The main way to get the value out of a parser. Uses ``sys.argv[1:]`` when ``args``
        is empty. Help and version go to stdout and errors to stderr, exiting with
        status 0 or 1 respectively.

        >>> from combargs import short
        >>> short("a").switch().to_options().run("-b")
        `-b` is not expected in this context
        """
        _args = args if args or TESTING else sys.argv[1:]
        result = self.run_inner(*_args)
        output = result.get
        if isinstance(output, Stdout):
            self._print(output.message, end="")
        elif isinstance(output, Stderr):
            self._print(output.message, file=sys.stderr)
        else:
            return output
        if TESTING:
            return None
        sys.exit(output.exit_code)

    @staticmethod
    def _print(*args, file=None, **kwargs):
        if PRINTING:
            print(*args, file=None if TESTING else file, **kwargs)


@dataclass
class CommandParser(Parser[A_co]):
    """
    A subcommand. ``short`` and ``long`` add aliases; only the first short one is listed
    in help.
    """

    options: Optional[OptionParser[A_co]] = None
    item: Optional[meta.Command] = None

    @classmethod
    def make(
        cls, options: OptionParser[A_co], item: meta.Command
    ) -> "CommandParser[A_co]":
        def f(state: State) -> Result[A_co]:
            ix = state.first_unconsumed()
            if ix is not None:
                token = state.items[ix]
                if (
                    isinstance(token, (Word, Long))
                    and not getattr(token, "attached", False)
                    and token.raw in item.names
                ):
                    state.take(ix)
                    inner = state.enter_command(ix, item.name)
                    logger.debug("entering command %s", item.name)
                    result = options.run_subparser(inner)
                    state.leave_command(inner)
                    return result
            return Result(MissingError("", missing=[item]))

        return cls(f, item, options=options, item=item)

    def short(self, name: str) -> "CommandParser[A_co]":
        assert self.options is not None and self.item is not None
        return self.make(self.options, replace(self.item, shorts=(*self.item.shorts, name)))

    def long(self, name: str) -> "CommandParser[A_co]":
        assert self.options is not None and self.item is not None
        return self.make(self.options, replace(self.item, longs=(*self.item.longs, name)))

    def help(self, text: str) -> "CommandParser[A_co]":
        assert self.options is not None and self.item is not None
        return self.make(self.options, replace(self.item, help=text))

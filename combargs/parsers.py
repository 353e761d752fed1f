"""
Defines the :py:class:`Parser <combargs.parsers.Parser>` class and the combinators
that build parsers out of other parsers.
"""
# pyright: reportGeneralTypeIssues=false
from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, TypeVar

from pytypeclass import Monad, MonadPlus

from combargs import meta
from combargs.args import Long, Short, State, Word
from combargs.errors import (
    ArgumentError,
    HelpError,
    MissingError,
    ParseError,
    RequirementError,
)
from combargs.result import Result

if TYPE_CHECKING:
    from combargs.options import OptionParser

logger = logging.getLogger(__name__)

A_co = TypeVar("A_co", covariant=True)
A = TypeVar("A")
B = TypeVar("B")


def _token(state: State) -> Optional[str]:
    if state.current is None:
        return None
    item = state.items[state.current]
    if isinstance(item, Short) and item.rest:
        return item.rest
    return item.raw


@dataclass
class Parser(MonadPlus[A_co]):
    """
    Main class powering the argument parser. ``f`` consumes a
    :py:class:`State <combargs.args.State>` and ``meta`` describes what it accepts.
    """

    f: Callable[[State], Result[A_co]]
    meta: meta.Meta

    def __add__(self, other: "Parser[B]") -> "Parser[Tuple[A_co, B]]":
        """
        Sugar for ``construct(self, other)``.

        >>> from combargs import short
        >>> p = short("a").switch() + short("b").switch()
        >>> p.to_options().run("-b")
        (False, True)
        """
        return construct(self, other)

    def __ge__(self, f: Callable[[A_co], Monad[B]]) -> "Parser[B]":  # type: ignore[override]
        """Sugar for :py:meth:`Parser.bind <combargs.parsers.Parser.bind>`."""
        return self.bind(f)

    def __or__(self, other: "Parser[B]") -> "Parser[A_co | B]":  # type: ignore[override]
        """
        Tries both parsers against independent forks of the input and keeps one of them.

        >>> from combargs import short
        >>> p = short("a").req_flag("a") | short("b").req_flag("b")
        >>> p.to_options().run("-b")
        'b'

        Supplying both is reported, naming the flag that came second:

        >>> p.to_options().run("-a", "-b")
        `-b` cannot be used at the same time as `-a`

        See :py:func:`alt` for how the winner is chosen.
        """
        return alt(self, other)

    def adjacent(self) -> "Parser[A_co]":
        """
        Restricts ``self`` so that everything it consumes forms a single run of tokens,
        starting at a flag when ``self`` contains any flags.

        >>> from combargs import short, positional, construct
        >>> point = construct(short("p").req_flag(()), positional("X"), positional("Y"))
        >>> p = construct(point.adjacent().map(lambda t: t[1:]), positional("NAME"))
        >>> p.to_options().run("origin", "-p", "1", "2")
        (('1', '2'), 'origin')
        """
        leads_with_flag = any(
            isinstance(item, (meta.Flag, meta.Argument)) for item in self.meta.items()
        )

        def f(state: State) -> Result[A_co]:
            end = state.scope[1]
            for start in list(state.indices()):
                if leads_with_flag and not isinstance(state.items[start], (Short, Long)):
                    continue
                fork = state.fork()
                fork.scope = (start, end)
                result = self.eval(fork)
                taken = fork.progress(state)
                if not taken or taken[0] != start or result.missing:
                    continue
                contiguous = all(
                    ix in taken or state.removed[ix]
                    for ix in range(taken[0], taken[-1] + 1)
                )
                if contiguous:
                    fork.scope = state.scope
                    state.commit(fork)
                    return result
            fork = state.fork()
            fork.scope = (end, end)
            result = self.eval(fork)
            fork.scope = state.scope
            state.commit(fork)
            return result

        return Parser(f, meta.Adjacent(self.meta))

    def bind(self, f: Callable[[A_co], Monad[B]]) -> "Parser[B]":  # type: ignore[override]
        """
        Returns a new parser that

        1. applies ``self``;
        2. if this succeeds, applies ``f`` to the value and runs the parser it returns
           against the same input.

        >>> from combargs import short, positional
        >>> p = short("n").switch() >= (lambda n: positional("X").map(str.upper) if n else pure("none"))
        >>> p.to_options().run("-n", "x")
        'X'
        """

        def g(state: State) -> Result[B]:
            result = self.eval(state)
            if result.failed:
                return Result(result.get)
            parser = f(result.get)
            assert isinstance(parser, Parser), parser
            return parser.eval(state)

        return Parser(g, self.meta)

    def catch(self) -> "Parser[A_co]":
        """
        Turns a failed conversion back into an absent value so that another branch of an
        alternation can try the same tokens. Only conversion and validation failures are
        caught, and suggestions stay disabled afterwards.

        >>> from combargs import short, alt
        >>> from combargs.values import unsigned
        >>> number = short("a").argument("N", type=unsigned).optional().catch()
        >>> text = short("a").argument("S").optional().hide()
        >>> p = alt(number, text).to_options()
        >>> p.run("-a", "10")
        10
        >>> p.run("-a", "ten")
        'ten'
        """

        def f(state: State) -> Result[A_co]:
            fork = state.fork()
            result = self.eval(fork)
            if isinstance(result.get, ParseError):
                state.taint()
                return Result(MissingError("", missing=list(self.meta.items())))
            state.commit(fork)
            return result

        return Parser(f, self.meta)

    def eval(self, state: State) -> Result[A_co]:
        """
        Applies the parser to ``state``, consuming from it.
        """
        return self.f(state)

    def fallback(self, value: B) -> "Parser[A_co | B]":
        """
        Substitutes ``value`` when nothing was supplied. A supplied but invalid
        value is still an error.

        >>> from combargs import short
        >>> from combargs.values import integer
        >>> p = short("a").argument("ARG", type=integer).fallback(42).to_options()
        >>> p.run()
        42
        >>> p.run("-a", "x12")
        couldn't parse `x12`: invalid digit found in string
        """

        def f(state: State) -> Result[A_co | B]:
            result = self.eval(state)
            if result.missing:
                return Result.return_(value)
            return result

        return Parser(f, meta.Optional.make(self.meta))

    def fallback_with(self, thunk: Callable[[], B]) -> "Parser[A_co | B]":
        """
        Like :py:meth:`fallback`, but computes the value on demand. Anything ``thunk``
        raises becomes the error.

        >>> from combargs import short
        >>> def default():
        ...     raise LookupError("no default configured")
        >>> short("a").argument("ARG").fallback_with(default).to_options().run()
        no default configured
        """

        def f(state: State) -> Result[A_co | B]:
            result = self.eval(state)
            if result.missing:
                try:
                    return Result.return_(thunk())
                except Exception as e:
                    return Result(ArgumentError(str(e)))
            return result

        return Parser(f, meta.Optional.make(self.meta))

    def group_help(self, text: str) -> "Parser[A_co]":
        """
        Renders everything under ``self`` in its own help section headed by ``text``.
        """
        return Parser(self.f, meta.Decorated(self.meta, text))

    def guard(self, predicate: Callable[[A_co], bool], message: str) -> "Parser[A_co]":
        """
        Fails with ``message`` unless the parsed value satisfies ``predicate``.

        >>> from combargs import long
        >>> from combargs.values import integer
        >>> width = long("width").argument("W", type=integer).guard(lambda w: w > 0, "must be positive")
        >>> width.to_options().run("--width", "-3")
        `-3`: must be positive
        """

        def f(state: State) -> Result[A_co]:
            result = self.eval(state)
            if result.failed or predicate(result.get):
                return result
            state.taint()
            token = _token(state)
            if token is None:
                return Result(ParseError(f"check failed: {message}"))
            return Result(ParseError(f"`{token}`: {message}"))

        return Parser(f, self.meta)

    def hide(self) -> "Parser[A_co]":
        """
        Removes ``self`` from usage lines, help and suggestions. It still parses.
        """

        def f(state: State) -> Result[A_co]:
            result = self.eval(state)
            if result.missing:
                return Result(MissingError(result.get.message))
            return result

        return Parser(f, meta.Skip())

    def many(self) -> "Parser[List[A_co]]":
        """
        Applies ``self`` zero or more times, collecting the values in command line order.

        >>> from combargs import short
        >>> from combargs.values import unsigned
        >>> p = short("p").argument("N", type=unsigned).many().to_options()
        >>> p.run("-p", "1", "-p", "2")
        [1, 2]
        >>> p.run()
        []
        >>> p.run("-p", "1", "-p", "x")
        couldn't parse `x`: invalid digit found in string
        """

        def f(state: State) -> Result[List[A_co]]:
            return self._repeat(state)

        return Parser(f, meta.Many(meta.Optional.make(self.meta)))

    def map(self, f: Callable[[A_co], B]) -> "Parser[B]":
        """
        >>> from combargs import short
        >>> short("v").switch().many().map(len).to_options().run("-vvv")
        3
        """

        def g(state: State) -> Result[B]:
            return self.eval(state) >= (lambda a: Result.return_(f(a)))

        return Parser(g, self.meta)

    def optional(self) -> "Parser[Optional[A_co]]":
        """
        >>> from combargs import short
        >>> p = short("p").argument("P").optional().to_options()
        >>> print(p.run())
        None
        >>> p.run("-p", "3")
        '3'
        """

        def f(state: State) -> Result[Optional[A_co]]:
            result = self.eval(state)
            if result.missing:
                return Result.return_(None)
            return result

        return Parser(f, meta.Optional.make(self.meta))

    def parse(self, f: Callable[[A_co], B]) -> "Parser[B]":
        """
        Converts the parsed value with ``f``. Any exception ``f`` raises is reported
        against the token the value came from.

        >>> from combargs import short
        >>> p = short("n").argument("N").parse(float).to_options()
        >>> p.run("-n", "2.5")
        2.5
        >>> p.run("-n", "many")
        couldn't parse `many`: could not convert string to float: 'many'
        """

        def g(state: State) -> Result[B]:
            result = self.eval(state)
            if result.failed:
                return Result(result.get)
            try:
                value = f(result.get)
            except Exception as e:
                state.taint()
                token = _token(state)
                if token is None:
                    return Result(ParseError(f"couldn't parse: {e}"))
                return Result(ParseError(f"couldn't parse `{token}`: {e}"))
            return Result.return_(value)

        return Parser(g, self.meta)

    @classmethod
    def return_(cls, a: A) -> "Parser[A]":  # type: ignore[override]
        """
        This method is required to make :py:class:`Parser` a
        `Monad <https://github.com/ethanabrooks/pytypeclass>`_.
        It consumes none of the input and always returns ``a``.
        """
        return pure(a)

    def some(self, message: str) -> "Parser[List[A_co]]":
        """
        Applies ``self`` one or more times. ``message`` is the error when there is
        nothing to collect.

        >>> from combargs import positional
        >>> p = positional("FILE").some("give me at least one file").to_options()
        >>> p.run("a", "b")
        ['a', 'b']
        >>> p.run()
        give me at least one file
        """

        def f(state: State) -> Result[List[A_co]]:
            result = self._repeat(state)
            if not result.failed and not result.get:
                return Result(MissingError(message, missing=list(self.meta.items())))
            return result

        return Parser(f, meta.Many(self.meta))

    def to_options(self) -> "OptionParser[A_co]":
        """
        Wraps ``self`` into an :py:class:`OptionParser <combargs.options.OptionParser>`,
        which handles ``--help`` and can be run.
        """
        from combargs.options import OptionParser

        return OptionParser(self)

    @classmethod
    def zero(cls, error: Optional[ArgumentError] = None) -> "Parser[Any]":  # type: ignore[override]
        """
        This parser never produces a value. Without ``error``, its value is simply missing.

        >>> Parser.zero().fallback(0).to_options().run()
        0
        """
        return Parser(lambda _: Result.zero(error=error), meta.Skip())

    def _repeat(self, state: State) -> Result[List[A_co]]:
        values: List[A_co] = []
        while True:
            fork = state.fork()
            result = self.eval(fork)
            if result.missing:
                state.tainted = state.tainted or fork.tainted
                return Result.return_(values)
            if result.failed:
                state.commit(fork)
                return Result(result.get)
            if not fork.progress(state) and fork.env_used == state.env_used:
                return Result.return_(values)
            state.commit(fork)
            values.append(result.get)


def alt(*parsers: Parser[Any]) -> Parser[Any]:
    """
    Runs every parser against its own fork of the input and keeps one outcome:

    1. a success that consumed something beats one that consumed nothing, and among
       those that consumed, the one that consumed the leftmost token wins, ties going
       to declaration order. What only the losers consumed is remembered as conflicting
       with the winner;
    2. a failure that consumed at least as many tokens as that success wins instead,
       and among failures, the one that consumed the most;
    3. if every value is missing, so is the result, listing what each branch expected.

    >>> from combargs import short
    >>> p = alt(short("a").req_flag("a"), short("b").req_flag("b"), short("c").req_flag("c"))
    >>> p.to_options().run()
    expected `-a`, `-b`, or more, pass `--help` for usage information
    >>> p.to_options().run("-c", "-b", "-a")
    `-b` cannot be used at the same time as `-c`
    """

    def f(state: State) -> Result[Any]:
        outcomes = []
        for parser in parsers:
            fork = state.fork()
            result = parser.eval(fork)
            if isinstance(result.get, HelpError):
                state.commit(fork)
                return result
            outcomes.append((fork, result, fork.progress(state)))

        failures = [o for o in outcomes if o[1].failed and not o[1].missing]
        failure = max(failures, key=lambda o: len(o[2]), default=None)
        successes = [
            (i, o) for i, o in enumerate(outcomes) if not o[1].failed
        ]
        if successes:
            winner, (fork, result, taken) = min(
                successes, key=lambda s: (not s[1][2], s[1][2][0] if s[1][2] else 0)
            )
            if failure is None or not failure[2] or len(failure[2]) < len(taken):
                if taken:
                    for _, (_, _, other) in successes:
                        for ix in other:
                            if ix not in taken:
                                fork.conflicts[ix] = taken[0]
                logger.debug("alternative %d of %d wins", winner, len(outcomes))
                state.commit(fork)
                return result

        if failure is not None:
            fork, result, _ = failure
            state.commit(fork)
            return result

        state.tainted = state.tainted or any(fork.tainted for fork, _, _ in outcomes)
        if not outcomes:
            return Result.zero()
        return Result(reduce(operator.or_, [result.get for _, result, _ in outcomes]))

    return Parser(f, meta.Or.make(*[p.meta for p in parsers]))


def cargo_helper(name: str, parser: Parser[A]) -> Parser[A]:
    """
    Accepts an optional leading ``name``, the way cargo passes a subcommand its own name.

    >>> from combargs import short
    >>> p = cargo_helper("asm", short("v").switch()).to_options()
    >>> p.run("asm", "-v")
    True
    >>> p.run("-v")
    True
    """
    skip = literal(name).optional().hide()
    return construct(skip, parser).map(operator.itemgetter(1))


def construct(*parsers: Parser[Any], **named: Parser[Any]) -> Parser[Any]:
    """
    Runs each parser in turn against the same input and collects all values, as a
    tuple or, with keyword arguments, as a dict. Flags may appear in any order on
    the command line; positionals are taken in declaration order.

    >>> from combargs import short, long, positional
    >>> p = construct(verbose=short("v").switch(), name=positional("NAME"))
    >>> p.to_options().run("Dante", "-v")
    {'verbose': True, 'name': 'Dante'}

    If some of the parsers consumed input, the ones still missing are an error rather
    than an absent value:

    >>> p = construct(short("a").switch(), short("b").argument("B")).optional()
    >>> print(p.to_options().run())
    None
    >>> p.to_options().run("-a")
    expected `-b=B`, pass `--help` for usage information
    """
    if parsers and named:
        raise TypeError("construct takes either positional or keyword parsers, not both")
    keys = list(named)
    children = list(named.values()) if named else list(parsers)

    def finish(values: List[Any]) -> Any:
        return dict(zip(keys, values)) if named else tuple(values)

    def f(state: State) -> Result[Any]:
        before = state.fork()
        values = []
        missing: Optional[MissingError] = None
        for parser in children:
            if len(children) > 1:
                state.current = None
            result = parser.eval(state)
            if isinstance(result.get, MissingError):
                missing = missing or result.get
            elif result.failed:
                return result
            else:
                values.append(result.get)
        if len(children) > 1:
            state.current = None
        if missing is not None:
            if state.progress(before):
                return Result(RequirementError(missing.message, missing=missing.missing))
            return Result(missing)
        return Result.return_(finish(values))

    return Parser(f, meta.And.make(*[p.meta for p in children]))


def fail(message: str) -> Parser[Any]:
    """
    Always fails with ``message``.

    >>> fail("need more cheese").to_options().run()
    need more cheese
    """
    return Parser(lambda _: Result(ArgumentError(message)), meta.Skip())


def literal(word: str) -> Parser[str]:
    """
    Consumes the next positional item if it is exactly ``word``.
    """
    item = meta.Positional(word)

    def f(state: State) -> Result[str]:
        ix = state.first_unconsumed()
        if ix is not None:
            token = state.items[ix]
            if isinstance(token, Word) and not token.attached and token.raw == word:
                state.take(ix)
                return Result.return_(word)
        return Result(MissingError("", missing=[item]))

    return Parser(f, item)


def pure(a: A) -> Parser[A]:
    """
    Always returns ``a`` and consumes nothing.

    >>> pure(1).to_options().run()
    1
    """
    return Parser(lambda _: Result.return_(a), meta.Skip())

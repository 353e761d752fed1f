"""
Turns what is left over after parsing, or what is missing, into a diagnostic,
suggesting a correction where a known name is close enough.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from combargs import meta
from combargs.args import Long, Short, State, Word
from combargs.errors import ArgumentError, ConflictError, UnexpectedError

MAX_DISTANCE = 2
HELP_HINT = "pass `--help` for usage information"


def damerau_levenshtein(a: str, b: str) -> int:
    """
    Edit distance counting insertions, deletions, substitutions and
    transpositions of adjacent characters.

    >>> damerau_levenshtein("flag", "falg")
    1
    >>> damerau_levenshtein("comman", "command")
    1
    >>> damerau_levenshtein("", "abc")
    3
    """
    d = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) + 1):
        d[i][0] = i
    for j in range(len(b) + 1):
        d[0][j] = j
    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            d[i][j] = min(d[i - 1][j] + 1, d[i][j - 1] + 1, d[i - 1][j - 1] + cost)
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                d[i][j] = min(d[i][j], d[i - 2][j - 2] + 1)
    return d[len(a)][len(b)]


@dataclass
class Names:
    """
    The visible names of one option parser.
    """

    shorts: List[str] = field(default_factory=list)
    longs: List[str] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)

    @classmethod
    def of(cls, m: meta.Meta) -> "Names":
        names = cls()
        for item in m.items():
            if isinstance(item, (meta.Flag, meta.Argument)):
                names.shorts.extend(item.name.shorts)
                names.longs.extend(item.name.longs)
            elif isinstance(item, meta.Command):
                names.commands.extend(item.names)
        return names


def _nearest(name: str, candidates: Sequence[Tuple[str, str]]) -> Optional[str]:
    best: Optional[Tuple[int, str]] = None
    for candidate, display in candidates:
        distance = damerau_levenshtein(name, candidate)
        if distance <= MAX_DISTANCE and distance < len(name):
            if best is None or distance < best[0]:
                best = distance, display
    return None if best is None else best[1]


def suggest(state: State, ix: int, m: meta.Meta) -> Optional[ArgumentError]:
    """
    A "did you mean" diagnostic for the token at ``ix``, if one of the names in
    ``m`` is close to it.
    """
    token = state.items[ix]
    names = Names.of(m)
    if isinstance(token, Long):
        if len(token.name) == 1 and token.name in names.shorts:
            return UnexpectedError(
                f"no such flag: `--{token.name}` (with two dashes), did you mean `-{token.name}`?",
                unexpected=token.display(),
            )
        candidates = [(n, f"--{n}") for n in names.longs if n != token.name]
        candidates += [(n, n) for n in names.commands]
        best = _nearest(token.name, candidates)
        if best is not None:
            return UnexpectedError(
                f"no such flag: `{token.display()}`, did you mean `{best}`?",
                unexpected=token.display(),
            )
    elif isinstance(token, Word) and not token.attached:
        candidates = [(n, n) for n in names.commands if n != token.raw]
        candidates += [(n, f"--{n}") for n in names.longs]
        best = _nearest(token.raw, candidates)
        if best is not None:
            return UnexpectedError(
                f"no such command or positional: `{token.raw}`, did you mean `{best}`?",
                unexpected=token.raw,
            )
    return None


def _repeated(token: object, names: Names) -> bool:
    if isinstance(token, Short):
        return token.name in names.shorts
    if isinstance(token, Long):
        return token.name in names.longs
    return False


def unexpected(state: State, ix: int, m: meta.Meta) -> ArgumentError:
    """
    Explains why the token at ``ix`` was not consumed.
    """
    token = state.items[ix]
    if ix in state.conflicts:
        winner = state.items[state.conflicts[ix]]
        return ConflictError(
            f"`{token.display()}` cannot be used at the same time as `{winner.display()}`",
            loser=token.display(),
            winner=winner.display(),
        )
    if not state.tainted:
        if _repeated(token, Names.of(m)):
            return UnexpectedError(
                f"argument `{token.display()}` cannot be used multiple times in this context",
                unexpected=token.display(),
            )
        suggestion = suggest(state, ix, m)
        if suggestion is not None:
            return suggestion
    return UnexpectedError(
        f"`{token.display()}` is not expected in this context",
        unexpected=token.display(),
    )


def missing(state: State, items: Sequence[meta.Item], m: meta.Meta) -> ArgumentError:
    """
    Explains what the parser was still waiting for.
    """
    ix = state.first_unconsumed()
    if ix is not None and not state.tainted:
        suggestion = suggest(state, ix, m)
        if suggestion is not None:
            return suggestion
    expected: List[str] = []
    for item in items:
        u = item.usage()
        if u and u not in expected:
            expected.append(u)
    if not expected:
        if ix is not None:
            return unexpected(state, ix, m)
        return ArgumentError(
            f"parser requires an extra flag, argument or parameter, {HELP_HINT}"
        )
    listed = ", ".join(f"`{e}`" for e in expected[:2])
    if len(expected) > 2:
        listed += ", or more"
    if ix is None:
        return ArgumentError(f"expected {listed}, {HELP_HINT}")
    got = state.items[ix].display()
    return ArgumentError(
        f"expected {listed}, got `{got}`. {HELP_HINT[0].upper()}{HELP_HINT[1:]}"
    )

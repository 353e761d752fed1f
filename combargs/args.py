"""
Defines the tokens of a command line and :py:class:`State`, the cursor that parsers
consume them from.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Tuple

from combargs.meta import Named

NEGATIVE_NUMBER = re.compile(r"^-\d")


class Arg:
    raw: str

    def display(self) -> str:
        return self.raw


@dataclass(frozen=True)
class Short(Arg):
    """
    One letter of ``-abc``. ``rest`` is what follows it inside the same word, so an
    argument-taking flag can use it as its value.
    """

    name: str
    raw: str
    rest: str = ""
    cluster: Optional[int] = None

    def display(self) -> str:
        return f"-{self.name}"


@dataclass(frozen=True)
class Long(Arg):
    name: str
    raw: str

    def display(self) -> str:
        return f"--{self.name}"


@dataclass(frozen=True)
class Word(Arg):
    """
    ``attached`` is set for the value half of ``--name=value`` and ``-n=value``, and
    for what follows the letter in ``-n1``.
    """

    raw: str
    attached: bool = False


@dataclass(frozen=True)
class PosWord(Arg):
    """
    Anything after ``--``.
    """

    raw: str


def split(args: Sequence[str]) -> Tuple[Arg, ...]:
    """
    Classifies raw command line words.

    >>> split(["-ab", "--name=value", "-1", "--", "--", "-x"])  # doctest: +NORMALIZE_WHITESPACE
    (Short(name='a', raw='-ab', rest='b', cluster=0), Short(name='b', raw='-ab', rest='', cluster=0),
     Long(name='name', raw='--name=value'), Word(raw='value', attached=True), Word(raw='-1', attached=False),
     PosWord(raw='--'), PosWord(raw='-x'))
    """
    items: List[Arg] = []
    positional_only = False
    for ix, arg in enumerate(args):
        if positional_only:
            items.append(PosWord(arg))
        elif arg == "--":
            positional_only = True
        elif arg.startswith("--"):
            name, eq, value = arg[2:].partition("=")
            items.append(Long(name, arg))
            if eq:
                items.append(Word(value, attached=True))
        elif arg.startswith("-") and len(arg) > 1 and not NEGATIVE_NUMBER.match(arg):
            body = arg[1:]
            if len(body) > 1 and body[1] == "=":
                items.append(Short(body[0], arg))
                items.append(Word(body[2:], attached=True))
            elif len(body) == 1 or body.isalpha():
                for i, c in enumerate(body):
                    rest = body[i + 1 :]
                    cluster = ix if len(body) > 1 else None
                    items.append(Short(c, arg, rest=rest, cluster=cluster))
            else:
                items.append(Short(body[0], arg, rest=body[1:]))
                items.append(Word(body[1:], attached=True))
        else:
            items.append(Word(arg))
    return tuple(items)


@dataclass
class State:
    """
    The argument cursor. ``items`` is shared by every fork; the rest is copied
    by :py:meth:`fork` and written back by :py:meth:`commit`.

    >>> state = State.from_args(["-v", "file"])
    >>> state.take(state.find_flag(Named(shorts=("v",))))
    Short(name='v', raw='-v', rest='', cluster=None)
    >>> [item.raw for item in state.remaining()]
    ['file']
    """

    items: Tuple[Arg, ...]
    removed: List[bool]
    scope: Tuple[int, int]
    env: Mapping[str, str] = field(default_factory=dict)
    env_used: FrozenSet[str] = frozenset()
    tainted: bool = False
    current: Optional[int] = None
    path: Tuple[str, ...] = ()
    conflicts: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_args(
        cls, args: Sequence[str], env: Optional[Mapping[str, str]] = None
    ) -> "State":
        items = split(args)
        return cls(
            items=items,
            removed=[False] * len(items),
            scope=(0, len(items)),
            env=os.environ if env is None else env,
        )

    def fork(self) -> "State":
        return replace(self, removed=list(self.removed), conflicts=dict(self.conflicts))

    def commit(self, other: "State") -> None:
        """
        Accepts everything ``other`` (a fork of ``self``) did.
        """
        self.removed = other.removed
        self.env_used = other.env_used
        self.tainted = other.tainted
        self.current = other.current
        self.conflicts = other.conflicts

    def taint(self) -> None:
        self.tainted = True

    def indices(self) -> Iterator[int]:
        """
        Unconsumed positions within the current scope.
        """
        start, end = self.scope
        for ix in range(start, end):
            if not self.removed[ix]:
                yield ix

    def remaining(self) -> List[Arg]:
        return [self.items[ix] for ix in self.indices()]

    def first_unconsumed(self) -> Optional[int]:
        return next(self.indices(), None)

    def peek(self) -> Optional[Arg]:
        ix = self.first_unconsumed()
        return None if ix is None else self.items[ix]

    def take(self, ix: int) -> Arg:
        self.removed[ix] = True
        return self.items[ix]

    def progress(self, before: "State") -> List[int]:
        """
        Positions consumed by ``self`` that were still available in ``before``.
        """
        return [
            ix
            for ix, (a, b) in enumerate(zip(before.removed, self.removed))
            if b and not a
        ]

    def find_flag(self, named: Named) -> Optional[int]:
        for ix in self.indices():
            item = self.items[ix]
            if isinstance(item, Short) and item.name in named.shorts:
                return ix
            if isinstance(item, Long) and item.name in named.longs:
                return ix
        return None

    def value_after(self, ix: int) -> Optional[int]:
        nxt = ix + 1
        if nxt < self.scope[1] and not self.removed[nxt]:
            return nxt
        return None

    def take_cluster(self, ix: int) -> None:
        """
        Consumes the short flag at ``ix`` together with the rest of its word.
        """
        item = self.items[ix]
        self.take(ix)
        if isinstance(item, Short) and item.cluster is not None:
            nxt = ix + 1
            while nxt < len(self.items):
                other = self.items[nxt]
                if not (isinstance(other, Short) and other.cluster == item.cluster):
                    break
                self.take(nxt)
                nxt += 1
        elif isinstance(item, Short) and item.rest:
            nxt = ix + 1
            other = self.items[nxt] if nxt < len(self.items) else None
            if isinstance(other, Word) and other.attached:
                self.take(nxt)

    def take_env(self, names: Sequence[str]) -> Optional[str]:
        for name in names:
            if name not in self.env_used and name in self.env:
                self.env_used = self.env_used | {name}
                return self.env[name]
        return None

    def enter_command(self, ix: int, name: str) -> "State":
        """
        Returns a fork that sees only what follows the command word at ``ix``.
        """
        fork = self.fork()
        fork.scope = (ix + 1, self.scope[1])
        fork.path = (*self.path, name)
        fork.current = None
        fork.conflicts = {}
        return fork

    def leave_command(self, inner: "State") -> None:
        """
        Everything in the command's scope belongs to it, whatever it did with it.
        """
        start, end = inner.scope
        for ix in range(start, end):
            self.removed[ix] = True
        self.env_used = inner.env_used
        self.tainted = self.tainted or inner.tainted

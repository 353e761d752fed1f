"""
Defines the metadata tree: a structural description of what a parser accepts.

Metadata is pure data. The same tree drives flag lookup for diagnostics and the
layout of usage lines and help tables.
"""
from __future__ import annotations

import typing
from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class Named:
    """
    All the names a flag answers to. The first short and the first long name are
    the ones shown to the user.
    """

    shorts: Tuple[str, ...] = ()
    longs: Tuple[str, ...] = ()
    envs: Tuple[str, ...] = ()

    @property
    def short(self) -> typing.Optional[str]:
        return self.shorts[0] if self.shorts else None

    @property
    def long(self) -> typing.Optional[str]:
        return self.longs[0] if self.longs else None

    @property
    def env(self) -> typing.Optional[str]:
        return self.envs[0] if self.envs else None

    @property
    def visible(self) -> bool:
        return bool(self.shorts or self.longs)

    def display(self) -> str:
        if self.short is not None:
            return f"-{self.short}"
        if self.long is not None:
            return f"--{self.long}"
        return f"${self.env}"


class Meta:
    def items(self) -> Iterator["Item"]:
        """
        Yields the leaves, in declaration order.
        """
        yield from ()


class Item(Meta):
    help: typing.Optional[str]

    def items(self) -> Iterator["Item"]:
        yield self

    def usage(self) -> typing.Optional[str]:
        raise NotImplementedError


@dataclass(frozen=True)
class Flag(Item):
    name: Named
    help: typing.Optional[str] = None

    def usage(self) -> typing.Optional[str]:
        return self.name.display() if self.name.visible else None


@dataclass(frozen=True)
class Argument(Item):
    name: Named
    metavar: str
    help: typing.Optional[str] = None

    def usage(self) -> typing.Optional[str]:
        if not self.name.visible:
            return None
        return f"{self.name.display()}={self.metavar}"


@dataclass(frozen=True)
class Positional(Item):
    metavar: str
    help: typing.Optional[str] = None

    def usage(self) -> typing.Optional[str]:
        return self.metavar


@dataclass(frozen=True)
class Command(Item):
    name: str
    shorts: Tuple[str, ...] = ()
    longs: Tuple[str, ...] = ()
    help: typing.Optional[str] = None

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name, *self.shorts, *self.longs)

    def label(self) -> str:
        return ", ".join([self.name, *self.shorts[:1]])

    def usage(self) -> typing.Optional[str]:
        return "COMMAND ..."


@dataclass(frozen=True)
class And(Meta):
    children: Tuple[Meta, ...] = ()

    @classmethod
    def make(cls, *children: Meta) -> Meta:
        flat = []
        for child in children:
            if isinstance(child, And):
                flat.extend(child.children)
            elif not isinstance(child, Skip):
                flat.append(child)
        if len(flat) == 1:
            return flat[0]
        return cls(tuple(flat))

    def items(self) -> Iterator[Item]:
        for child in self.children:
            yield from child.items()


@dataclass(frozen=True)
class Or(Meta):
    children: Tuple[Meta, ...] = ()

    @classmethod
    def make(cls, *children: Meta) -> Meta:
        flat = []
        for child in children:
            if isinstance(child, Or):
                flat.extend(child.children)
            else:
                flat.append(child)
        return cls(tuple(flat))

    def items(self) -> Iterator[Item]:
        for child in self.children:
            yield from child.items()


@dataclass(frozen=True)
class Optional(Meta):
    child: Meta

    @classmethod
    def make(cls, child: Meta) -> Meta:
        if isinstance(child, (Optional, Skip)):
            return child
        return cls(child)

    def items(self) -> Iterator[Item]:
        yield from self.child.items()


@dataclass(frozen=True)
class Many(Meta):
    child: Meta

    def items(self) -> Iterator[Item]:
        yield from self.child.items()


@dataclass(frozen=True)
class Adjacent(Meta):
    child: Meta

    def items(self) -> Iterator[Item]:
        yield from self.child.items()


@dataclass(frozen=True)
class Decorated(Meta):
    """
    Everything under ``child`` is rendered in its own help section headed by ``group``.
    """

    child: Meta
    group: str

    def items(self) -> Iterator[Item]:
        yield from self.child.items()


@dataclass(frozen=True)
class Skip(Meta):
    """
    Hidden or empty: contributes nothing to usage, help or suggestions.
    """

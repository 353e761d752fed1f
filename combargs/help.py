"""
Renders usage lines and help tables from the metadata tree.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from combargs import meta

MAX_LABEL = 24
INDENT = "    "

POSITIONALS = "Available positional items:"
OPTIONS = "Available options:"
COMMANDS = "Available commands:"


@dataclass
class Info:
    """
    Everything an :py:class:`OptionParser <combargs.options.OptionParser>` says about
    itself besides its parser.
    """

    descr: Optional[str] = None
    header: Optional[str] = None
    footer: Optional[str] = None
    version: Optional[str] = None
    usage: Optional[str] = None


@dataclass
class Row:
    label: str
    help: List[str]


def _closes_at_end(s: str) -> bool:
    depth = 0
    for i, c in enumerate(s):
        if c in "([":
            depth += 1
        elif c in ")]":
            depth -= 1
            if depth == 0 and i < len(s) - 1:
                return False
    return True


def _wrapped(s: str, brackets: str) -> bool:
    return s[:1] == brackets[0] and s[-1:] == brackets[1] and _closes_at_end(s)


def usage(m: meta.Meta) -> Optional[str]:
    """
    The usage string of ``m``, or ``None`` if there is nothing to show.

    >>> from combargs import short, positional, construct
    >>> p = construct(short("a").switch(), short("b").argument("B") | short("c").switch(), positional("FILE").many())
    >>> usage(p.meta)
    '[-a] (-b=B | [-c]) [FILE]...'
    """
    if isinstance(m, meta.Item):
        return m.usage()
    if isinstance(m, meta.And):
        parts = [u for u in map(usage, m.children) if u]
        return " ".join(parts) or None
    if isinstance(m, meta.Or):
        parts = []
        for u in map(usage, m.children):
            if u and u not in parts:
                parts.append(u)
        if not parts:
            return None
        if len(parts) == 1:
            return parts[0]
        return f"({' | '.join(parts)})"
    if isinstance(m, meta.Optional):
        inner = usage(m.child)
        if not inner:
            return None
        if _wrapped(inner, "[]"):
            return inner
        if _wrapped(inner, "()"):
            inner = inner[1:-1]
        return f"[{inner}]"
    if isinstance(m, meta.Many):
        inner = usage(m.child)
        if not inner:
            return None
        if " " in inner and not (_wrapped(inner, "[]") or _wrapped(inner, "()")):
            inner = f"({inner})"
        return f"{inner}..."
    if isinstance(m, (meta.Adjacent, meta.Decorated)):
        return usage(m.child)
    return None


def help_lines(text: Optional[str]) -> List[str]:
    """
    Lines that start with whitespace begin a new line in the help column; the
    others continue the previous one.

    >>> help_lines("first\\nstill first\\n  second")
    ['first still first', 'second']
    """
    lines: List[str] = []
    for line in (text or "").split("\n"):
        if not line.strip():
            continue
        if lines and not line[0].isspace():
            lines[-1] = f"{lines[-1]} {line.strip()}"
        else:
            lines.append(line.strip())
    return lines


def _label(named: meta.Named) -> str:
    if named.short and named.long:
        return f"-{named.short}, --{named.long}"
    if named.short:
        return f"-{named.short}"
    return f"{INDENT}--{named.long}"


def _env_note(named: meta.Named, env: Mapping[str, str]) -> List[str]:
    if named.env is None:
        return []
    value = env.get(named.env)
    if value is None:
        return [f"[env:{named.env}: N/A]"]
    return [f'[env:{named.env} = "{value}"]']


def _row(item: meta.Item, env: Mapping[str, str]) -> Optional[Tuple[str, Row]]:
    if isinstance(item, meta.Positional):
        if item.help is None:
            return None
        return POSITIONALS, Row(item.metavar, help_lines(item.help))
    if isinstance(item, meta.Command):
        return COMMANDS, Row(item.label(), help_lines(item.help))
    if isinstance(item, (meta.Flag, meta.Argument)) and item.name.visible:
        label = _label(item.name)
        if isinstance(item, meta.Argument):
            label = f"{label}={item.metavar}"
        return OPTIONS, Row(label, help_lines(item.help) + _env_note(item.name, env))
    return None


def _walk(
    m: meta.Meta, env: Mapping[str, str], group: Optional[str] = None
) -> Iterator[Tuple[str, Row]]:
    if isinstance(m, meta.Decorated):
        yield from _walk(m.child, env, m.group)
    elif isinstance(m, meta.Item):
        row = _row(m, env)
        if row is not None:
            section, r = row
            yield (section if group is None else group), r
    elif isinstance(m, (meta.And, meta.Or)):
        for child in m.children:
            yield from _walk(child, env, group)
    elif isinstance(m, (meta.Optional, meta.Many, meta.Adjacent)):
        yield from _walk(m.child, env, group)


def _format(row: Row, width: int) -> List[str]:
    head = INDENT + row.label
    if not row.help:
        return [head]
    column = " " * (len(INDENT) + width + 2)
    if len(row.label) > width:
        lines = [head, column + row.help[0]]
    else:
        lines = [head.ljust(len(column)) + row.help[0]]
    lines.extend(column + line for line in row.help[1:])
    return lines


def table(m: meta.Meta, env: Mapping[str, str]) -> List[str]:
    """
    The sections of the help table: custom groups first, then positionals,
    options and commands.
    """
    sections: Dict[str, List[Row]] = {}
    for section, row in _walk(m, env):
        rows = sections.setdefault(section, [])
        if row not in rows:
            rows.append(row)
    order = [s for s in sections if s not in (POSITIONALS, OPTIONS, COMMANDS)]
    order += [s for s in (POSITIONALS, OPTIONS, COMMANDS) if s in sections]
    labels = [len(row.label) for rows in sections.values() for row in rows]
    width = max([n for n in labels if n <= MAX_LABEL], default=0)
    blocks = []
    for section in order:
        lines = [section]
        for row in sections[section]:
            lines.extend(_format(row, width))
        blocks.append("".join(line + "\n" for line in lines))
    return blocks


def render(
    info: Info,
    inner: meta.Meta,
    full: meta.Meta,
    path: Sequence[str],
    env: Mapping[str, str],
    usage_fn=None,
) -> str:
    """
    The complete help message. ``inner`` is the user's parser, ``full`` adds the
    built-in ``--help`` and ``--version`` flags.
    """
    generated = "".join(f"{p} " for p in path) + (usage(inner) or "")
    if info.usage is not None:
        line = info.usage
    elif usage_fn is not None:
        line = usage_fn(generated)
    else:
        line = f"Usage: {generated}"
    blocks = [f"{text}\n" for text in (info.descr, info.header) if text]
    blocks.append(f"{line}\n")
    blocks.extend(table(full, env))
    if info.footer:
        blocks.append(f"{info.footer}\n")
    return "\n".join(blocks)

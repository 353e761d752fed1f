import sys
from random import Random
from typing import Any, List, NamedTuple

from hypothesis import given, register_random, settings
from hypothesis import strategies as st

from combargs import alt, construct, options, positional, short
from combargs.errors import Stderr, Stdout
from combargs.parsers import Parser
from combargs.result import Result

MAX_RANDOM = 5
MAX_MANY = 3
MAX_LEAVES = 4
NAMES = "abcdefgijklmnopqrstuvwxyz"


class StOutput(NamedTuple):
    parser: Parser
    inputs: List[List[str]]
    expected: Any
    repr: str


st_value = st.text(alphabet="xyz0123456789", min_size=1, max_size=5)


@st.composite
def st_switch(draw, name: str) -> StOutput:
    present = draw(st.booleans())
    return StOutput(
        parser=short(name).switch(),
        inputs=[[f"-{name}"]] if present else [],
        expected=present,
        repr=f"short({name!r}).switch()",
    )


@st.composite
def st_argument(draw, name: str) -> StOutput:
    value = draw(st_value)
    attached = draw(st.booleans())
    return StOutput(
        parser=short(name).argument("ARG"),
        inputs=[[f"-{name}={value}"] if attached else [f"-{name}", value]],
        expected=value,
        repr=f"short({name!r}).argument('ARG')",
    )


@st.composite
def st_optional(draw, name: str) -> StOutput:
    value = draw(st.none() | st_value)
    return StOutput(
        parser=short(name).argument("ARG").optional(),
        inputs=[] if value is None else [[f"-{name}", value]],
        expected=value,
        repr=f"short({name!r}).argument('ARG').optional()",
    )


@st.composite
def st_many(draw, name: str) -> StOutput:
    values = draw(st.lists(st_value, max_size=MAX_MANY))
    return StOutput(
        parser=short(name).argument("ARG").many(),
        inputs=[[f"-{name}", v] for v in values],
        expected=values,
        repr=f"short({name!r}).argument('ARG').many()",
    )


def st_named(name: str):
    return st_switch(name) | st_argument(name) | st_optional(name) | st_many(name)


@st.composite
def st_construct(draw) -> StOutput:
    """
    A product of named leaves followed by positionals, with the inputs of the
    named leaves shuffled on the command line.
    """
    n = draw(st.integers(min_value=0, max_value=MAX_LEAVES))
    names = draw(st.permutations(list(NAMES)))[:n]
    leaves = [draw(st_named(name)) for name in names]
    values = draw(st.lists(st_value, max_size=2))
    positionals = [positional(f"P{i}") for i, _ in enumerate(values)]
    groups = draw(st.permutations([leaf.inputs for leaf in leaves]))
    chunks = [chunk for group in groups for chunk in group]
    parser = construct(*[leaf.parser for leaf in leaves], *positionals)
    return StOutput(
        parser=parser,
        inputs=[*chunks, *[[v] for v in values]],
        expected=(*[leaf.expected for leaf in leaves], *values),
        repr=f"construct({', '.join(leaf.repr for leaf in leaves)}, <{len(values)} positionals>)",
    )


@settings(deadline=2000)
@given(st_construct())
def test_happy(parser_with_input: StOutput):
    parser, inputs, expected, repr = parser_with_input
    args = [w for chunk in inputs for w in chunk]
    result = parser.to_options().run_inner(*args, env={})
    assert result == Result(expected), (repr, args, result)


@settings(deadline=300)
@given(st_construct(), st.lists(st.text(), max_size=MAX_RANDOM))
def test_sad(parser_with_input: StOutput, args: List[str]):
    parser = parser_with_input.parser
    result = parser.to_options().run_inner(*args, env={})
    if isinstance(result.get, (Stdout, Stderr)):
        assert result.get.message


@given(st.lists(st.sampled_from("abc"), max_size=6))
def test_many_alternatives_keep_order(letters: List[str]):
    p = alt(*[short(c).req_flag(c) for c in "abc"]).many()
    result = p.to_options().run_inner(*[f"-{c}" for c in letters], env={})
    assert result.unwrap() == letters


@given(st.permutations(list(NAMES)).map(lambda ns: ns[:2]))
def test_conflict_names_second_flag(names: List[str]):
    a, b = names
    p = (short(a).req_flag(a) | short(b).req_flag(b)).to_options()
    for first, second in [(a, b), (b, a)]:
        message = p.run_inner(f"-{first}", f"-{second}", env={}).unwrap_stderr()
        assert message == f"`-{second}` cannot be used at the same time as `-{first}`"


if __name__ == "__main__":
    options.TESTING = True
    options.PRINTING = False

    register_random(Random(0))

    if sys.argv[1] == "happy":
        test_happy()
    elif sys.argv[1] == "sad":
        test_sad()

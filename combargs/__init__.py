from combargs.errors import ArgumentError
from combargs.named import NamedArg, env, long, positional, short
from combargs.options import CommandParser, OptionParser
from combargs.parsers import Parser, alt, cargo_helper, construct, fail, literal, pure
from combargs.result import Result

__all__ = [
    "Parser",
    "OptionParser",
    "CommandParser",
    "NamedArg",
    "short",
    "long",
    "env",
    "positional",
    "pure",
    "fail",
    "construct",
    "alt",
    "literal",
    "cargo_helper",
    "ArgumentError",
    "Result",
]

#! /usr/bin/env python
import doctest
import io
import unittest
from abc import ABC, abstractmethod
from contextlib import redirect_stdout
from unittest import mock

import combargs
from combargs import (
    alt,
    args,
    construct,
    env,
    errors,
    fail,
    help,
    long,
    named,
    options,
    parsers,
    positional,
    pure,
    result,
    short,
    suggestions,
    values,
)
from combargs.errors import Stderr
from combargs.result import Result
from combargs.values import integer, unsigned


def load_tests(_, tests, __):

    options.TESTING = True
    for mod in [
        args,
        combargs,
        help,
        named,
        options,
        parsers,
        result,
        suggestions,
        values,
    ]:
        tests.addTests(doctest.DocTestSuite(mod))
    return tests


def ok(parser, *argv, **kwargs):
    return parser.to_options().run_inner(*argv, env=kwargs).unwrap()


def err(parser, *argv, **kwargs):
    return parser.to_options().run_inner(*argv, env=kwargs).unwrap_stderr()


class MonadLawTester(ABC):
    @abstractmethod
    def assertEqual(self, a, b):
        raise NotImplementedError

    def f1(self, x):
        return self.m(x + 1)

    def f2(self, x):
        return self.m(x * 2)

    @staticmethod
    @abstractmethod
    def m(a):
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def return_(a):
        raise NotImplementedError

    @staticmethod
    def unwrapped_values():
        return [1, 0, -3]

    def test_law1(self):
        for a in self.unwrapped_values():
            x1 = self.return_(a) >= self.f1
            x2 = self.f1(a)
            self.assertEqual(self.unwrap(x1), self.unwrap(x2))

    def test_law2(self):
        for a in self.unwrapped_values():
            p = self.m(a)
            x = p >= self.return_
            self.assertEqual(self.unwrap(x), self.unwrap(p))

    def test_law3(self):
        for a in self.unwrapped_values():
            p = self.m(a)
            x1 = p >= (lambda a: self.f1(a) >= self.f2)
            x2 = (p >= self.f1) >= self.f2
            self.assertEqual(self.unwrap(x1), self.unwrap(x2))

    @staticmethod
    @abstractmethod
    def unwrap(x):
        raise NotImplementedError


class TestResult(MonadLawTester, unittest.TestCase):
    @staticmethod
    def m(a):
        return Result.return_(a)

    @staticmethod
    def return_(a):
        return Result.return_(a)

    @staticmethod
    def unwrap(x):
        return x.get

    def test_or_prefers_success(self):
        self.assertEqual(Result.zero() | Result.return_(1), Result.return_(1))
        self.assertEqual(Result.return_(1) | Result.return_(2), Result.return_(1))

    def test_or_prefers_real_errors_to_missing(self):
        error = combargs.ArgumentError("boom")
        self.assertEqual((Result.zero() | Result(error)).get, error)


class TestParser(MonadLawTester, unittest.TestCase):
    @staticmethod
    def m(a):
        return pure(a)

    @staticmethod
    def return_(a):
        return parsers.Parser.return_(a)

    @staticmethod
    def unwrap(x):
        return x.to_options().run_inner(env={}).get


class TestTokens(unittest.TestCase):
    def test_double_dash(self):
        items = args.split(["-a", "--", "-b", "--"])
        self.assertEqual(
            items, (args.Short("a", "-a"), args.PosWord("-b"), args.PosWord("--"))
        )

    def test_fork_and_commit(self):
        state = args.State.from_args(["-a", "x"], env={})
        fork = state.fork()
        fork.take(0)
        self.assertEqual(state.peek(), args.Short("a", "-a"))
        state.commit(fork)
        self.assertEqual(state.peek(), args.Word("x"))

    def test_negative_number_is_a_word(self):
        self.assertEqual(args.split(["-10"]), (args.Word("-10"),))

    def test_non_alphabetic_cluster(self):
        self.assertEqual(
            args.split(["-Obits=2048"]),
            (
                args.Short("O", "-Obits=2048", rest="bits=2048"),
                args.Word("bits=2048", attached=True),
            ),
        )


class TestFlags(unittest.TestCase):
    def test_switch(self):
        p = short("a").long("all").switch()
        self.assertEqual(ok(p, "-a"), True)
        self.assertEqual(ok(p, "--all"), True)
        self.assertEqual(ok(p), False)

    def test_cluster(self):
        p = construct(short("a").switch(), short("b").switch(), short("c").switch())
        self.assertEqual(ok(p, "-ca"), (True, False, True))

    def test_repeated_cluster(self):
        self.assertEqual(ok(short("v").req_flag(()).many().map(len), "-vvv"), 3)

    def test_switch_leaves_rest_of_word(self):
        self.assertEqual(
            err(short("a").switch(), "-a1"), "`1` is not expected in this context"
        )
        self.assertEqual(
            err(construct(short("a").switch(), short("b").switch()), "-ab1"),
            "`b1` is not expected in this context",
        )

    def test_repeated_flag(self):
        self.assertEqual(
            err(short("a").switch(), "-a", "-a"),
            "argument `-a` cannot be used multiple times in this context",
        )

    def test_flag_values(self):
        p = long("color").flag("always", "never")
        self.assertEqual(ok(p, "--color"), "always")
        self.assertEqual(ok(p), "never")

    def test_req_flag_missing(self):
        self.assertEqual(
            err(long("force").req_flag(True)),
            "expected `--force`, pass `--help` for usage information",
        )

    def test_env_switch(self):
        p = short("d").env("DEBUG").switch()
        self.assertEqual(ok(p, DEBUG="1"), True)
        self.assertEqual(ok(p), False)

    def test_env_only_flag_is_missing(self):
        p = env("DEBUG").req_flag(True).optional()
        self.assertEqual(ok(p), None)


class TestArguments(unittest.TestCase):
    def test_value_forms(self):
        p = short("f").long("foo").argument("FOO")
        for argv in [["-fbar"], ["-f=bar"], ["-f", "bar"], ["--foo=bar"], ["--foo", "bar"]]:
            self.assertEqual(ok(p, *argv), "bar", argv)

    def test_rest_of_word(self):
        self.assertEqual(ok(short("O").argument("OPT"), "-Obits=2048"), "bits=2048")

    def test_cluster_with_value(self):
        p = construct(short("v").switch(), short("f").argument("F"))
        self.assertEqual(ok(p, "-vfbar"), (True, "bar"))

    def test_negative_value(self):
        p = short("a").argument("N", type=integer)
        self.assertEqual(ok(p, "-a", "-10"), -10)
        self.assertEqual(ok(p, "-a=-20"), -20)

    def test_missing_value(self):
        self.assertEqual(
            err(short("a").argument("ARG")), "expected `-a=ARG`, pass `--help` for usage information"
        )
        self.assertEqual(err(short("a").argument("ARG"), "-a"), "`-a` requires an argument `ARG`")

    def test_flag_instead_of_value(self):
        p = construct(short("p").argument("P"), long("bar").switch())
        self.assertEqual(
            err(p, "-p", "--bar"),
            "`-p` requires an argument `P`, got a flag `--bar`, try `-p=--bar` to use it as an argument",
        )
        self.assertEqual(ok(p, "-p=--bar"), ("--bar", False))

    def test_parse_failure(self):
        p = short("a").argument("N", type=integer)
        self.assertEqual(
            err(p, "-a", "x12"), "couldn't parse `x12`: invalid digit found in string"
        )

    def test_unsigned(self):
        p = short("a").argument("N", type=unsigned)
        self.assertEqual(
            err(p, "-a", "-1"), "couldn't parse `-1`: invalid digit found in string"
        )

    def test_env_fallback(self):
        p = short("a").long("aaa").env("AAA").argument("A")
        self.assertEqual(ok(p, AAA="x"), "x")
        self.assertEqual(ok(p, "-a", "y", AAA="x"), "y")

    def test_env_is_used_once(self):
        p = short("n").env("N").argument("N").many()
        self.assertEqual(ok(p, N="1"), ["1"])
        self.assertEqual(ok(p, "-n", "2", N="1"), ["2", "1"])

    def test_env_only_argument(self):
        p = env("TOKEN").argument("TOKEN")
        self.assertEqual(ok(p, TOKEN="t"), "t")
        self.assertEqual(err(p), "environment variable `TOKEN` is not set")


class TestPositionals(unittest.TestCase):
    def test_order(self):
        p = construct(positional("SRC"), positional("DST"))
        self.assertEqual(ok(p, "a", "b"), ("a", "b"))

    def test_after_double_dash(self):
        p = construct(short("x").switch(), positional("X").many())
        self.assertEqual(ok(p, "--", "-x", "--"), (False, ["-x", "--"]))

    def test_attached_value_is_not_positional(self):
        p = construct(long("flag").switch(), positional("X").optional())
        self.assertEqual(err(p, "--flag=x"), "`x` is not expected in this context")

    def test_missing(self):
        self.assertEqual(
            err(positional("FILE")), "expected `FILE`, pass `--help` for usage information"
        )

    def test_literal(self):
        p = combargs.literal("install")
        self.assertEqual(ok(p, "install"), "install")
        self.assertEqual(
            err(p, "remove"),
            "expected `install`, got `remove`. Pass `--help` for usage information",
        )


class TestConstruct(unittest.TestCase):
    def test_any_order(self):
        p = construct(short("a").switch(), short("b").argument("B"))
        self.assertEqual(ok(p, "-b", "1", "-a"), (True, "1"))

    def test_named(self):
        p = construct(a=short("a").switch(), b=short("b").switch())
        self.assertEqual(ok(p, "-b"), {"a": False, "b": True})

    def test_mixed_is_rejected(self):
        with self.assertRaises(TypeError):
            construct(short("a").switch(), b=short("b").switch())

    def test_plus(self):
        p = short("a").switch() + short("b").switch()
        self.assertEqual(ok(p, "-a"), (True, False))

    def test_partial_product_is_an_error(self):
        p = construct(short("a").switch(), short("b").argument("B")).optional()
        self.assertEqual(ok(p), None)
        self.assertEqual(
            err(p, "-a"), "expected `-b=B`, pass `--help` for usage information"
        )

    def test_unexpected_leftover(self):
        self.assertEqual(
            err(short("a").switch(), "-b"), "`-b` is not expected in this context"
        )


class TestAlternatives(unittest.TestCase):
    def setUp(self):
        self.p = short("a").req_flag("a") | short("b").req_flag("b")

    def test_picks_present_branch(self):
        self.assertEqual(ok(self.p, "-a"), "a")
        self.assertEqual(ok(self.p, "-b"), "b")

    def test_conflict(self):
        self.assertEqual(
            err(self.p, "-a", "-b"), "`-b` cannot be used at the same time as `-a`"
        )
        self.assertEqual(
            err(self.p, "-b", "-a"), "`-a` cannot be used at the same time as `-b`"
        )

    def test_missing_two(self):
        self.assertEqual(
            err(self.p), "expected `-a`, `-b`, pass `--help` for usage information"
        )

    def test_missing_many(self):
        p = alt(*[short(c).req_flag(c) for c in "abcd"])
        self.assertEqual(
            err(p), "expected `-a`, `-b`, or more, pass `--help` for usage information"
        )

    def test_many_keeps_command_line_order(self):
        self.assertEqual(ok(self.p.many(), "-b", "-a", "-b"), ["b", "a", "b"])

    def test_failure_that_consumed_wins(self):
        p = short("a").argument("A", type=integer) | short("b").switch()
        self.assertEqual(
            err(p, "-a", "x"), "couldn't parse `x`: invalid digit found in string"
        )

    def test_consuming_branch_beats_empty_success(self):
        p = short("a").switch().map(lambda a: ("a", a)) | short("b").req_flag(("b", True))
        self.assertEqual(ok(p, "-b"), ("b", True))

    def test_product_branches(self):
        p = construct(short("a").switch(), short("b").switch()) | short("c").req_flag("c")
        self.assertEqual(ok(p, "-b", "-a"), (True, True))
        self.assertEqual(
            err(p, "-a", "-c"), "`-c` cannot be used at the same time as `-a`"
        )


class TestRepetition(unittest.TestCase):
    def test_many(self):
        p = short("p").argument("N", type=integer).many()
        self.assertEqual(ok(p, "-p", "1", "-p", "2"), [1, 2])
        self.assertEqual(ok(p), [])

    def test_many_switch_terminates(self):
        self.assertEqual(ok(short("a").switch().many()), [])

    def test_many_failure_propagates(self):
        p = short("p").argument("N", type=integer).many()
        self.assertEqual(
            err(p, "-p", "1", "-p", "x"),
            "couldn't parse `x`: invalid digit found in string",
        )

    def test_some(self):
        p = positional("FILE").some("need at least one file")
        self.assertEqual(ok(p, "a"), ["a"])
        self.assertEqual(err(p), "need at least one file")


class TestFallback(unittest.TestCase):
    def test_fallback(self):
        p = short("a").argument("N", type=integer).fallback(42)
        self.assertEqual(ok(p), 42)
        self.assertEqual(ok(p, "-a", "1"), 1)

    def test_fallback_keeps_parse_errors(self):
        p = short("a").argument("N", type=integer).fallback(42)
        self.assertEqual(
            err(p, "-a", "x"), "couldn't parse `x`: invalid digit found in string"
        )

    def test_fallback_with(self):
        p = short("a").argument("N").fallback_with(lambda: "computed")
        self.assertEqual(ok(p), "computed")

    def test_fallback_with_error(self):
        def default():
            raise ValueError("no default")

        self.assertEqual(err(short("a").argument("N").fallback_with(default)), "no default")

    def test_optional(self):
        p = short("a").argument("N").optional()
        self.assertEqual(ok(p), None)
        self.assertEqual(ok(p, "-a", "1"), "1")


class TestParseAndGuard(unittest.TestCase):
    def test_parse_of_product(self):
        def check(_):
            raise ValueError("nope")

        self.assertEqual(err(pure(()).parse(check)), "couldn't parse: nope")

    def test_parse_after_product(self):
        p = construct(short("a").argument("A"), short("b").argument("B")).parse(
            lambda t: int(t[0]) + int(t[1])
        )
        self.assertEqual(ok(p, "-a", "1", "-b", "2"), 3)

    def test_guard_on_token(self):
        p = short("n").argument("N", type=integer).guard(lambda n: n < 10, "too big")
        self.assertEqual(ok(p, "-n", "3"), 3)
        self.assertEqual(err(p, "-n", "30"), "`30`: too big")

    def test_guard_on_product(self):
        p = construct(
            short("a").argument("A", type=integer), short("b").argument("B", type=integer)
        ).guard(lambda t: t[0] < t[1], "a must be less than b")
        self.assertEqual(ok(p, "-a", "1", "-b", "2"), (1, 2))
        self.assertEqual(
            err(p, "-a", "3", "-b", "2"), "check failed: a must be less than b"
        )

    def test_fail(self):
        self.assertEqual(err(fail("custom failure")), "custom failure")


class TestCatch(unittest.TestCase):
    def test_catch_lets_other_branch_parse(self):
        number = short("a").argument("N", type=unsigned).optional().catch()
        text = short("a").argument("S").optional().hide()
        p = alt(number, text).many()
        self.assertEqual(ok(p, "-a", "1", "-a", "x"), [1, "x"])

    def test_without_catch(self):
        number = short("a").argument("N", type=unsigned).optional()
        text = short("a").argument("S").optional().hide()
        self.assertEqual(
            err(alt(number, text), "-a", "x"),
            "couldn't parse `x`: invalid digit found in string",
        )

    def test_no_suggestions_after_caught_failure(self):
        p = construct(
            short("a").argument("N", type=unsigned).optional().catch(),
            long("flag").switch(),
        )
        self.assertEqual(
            err(p, "--fla", "-a", "x"),
            "expected `-a=N`, got `--fla`. Pass `--help` for usage information",
        )
        self.assertEqual(
            err(p, "--fla", "-a", "1"), "no such flag: `--fla`, did you mean `--flag`?"
        )


class TestAdjacent(unittest.TestCase):
    def setUp(self):
        block = construct(short("a").req_flag(()), positional("N", type=integer))
        self.p = construct(
            c=short("c").argument("C", type=integer),
            a=block.adjacent().map(lambda t: t[1]),
        )

    def test_block_after(self):
        self.assertEqual(ok(self.p, "-c", "110", "-a", "-10"), {"c": 110, "a": -10})

    def test_block_before(self):
        self.assertEqual(ok(self.p, "-a", "-10", "-c", "110"), {"c": 110, "a": -10})

    def test_optional_block(self):
        p = construct(short("a").switch(), short("b").switch()).adjacent()
        self.assertEqual(ok(p, "-b"), (False, True))


class TestCommands(unittest.TestCase):
    def setUp(self):
        inner = short("a").switch().to_options().descr("inner descr")
        self.p = inner.command("foo").short("f")

    def test_run(self):
        self.assertEqual(ok(self.p, "foo", "-a"), True)
        self.assertEqual(ok(self.p, "f"), False)

    def test_help(self):
        self.assertEqual(
            self.p.to_options().run_inner("--help", env={}).unwrap_stdout(),
            "Usage: COMMAND ...\n"
            "\n"
            "Available options:\n"
            "    -h, --help  Prints help information\n"
            "\n"
            "Available commands:\n"
            "    foo, f      inner descr\n",
        )

    def test_nested_help(self):
        self.assertEqual(
            self.p.to_options().run_inner("foo", "--help", env={}).unwrap_stdout(),
            "inner descr\n"
            "\n"
            "Usage: foo [-a]\n"
            "\n"
            "Available options:\n"
            "    -a\n"
            "    -h, --help  Prints help information\n",
        )

    def test_nested_error(self):
        self.assertEqual(err(self.p, "foo", "-b"), "`-b` is not expected in this context")

    def test_nested_missing(self):
        p = short("n").argument("N").to_options().command("set")
        self.assertEqual(
            err(p, "set"), "expected `-n=N`, pass `--help` for usage information"
        )

    def test_long_alias(self):
        p = self.p.long("make")
        self.assertEqual(ok(p, "make", "-a"), True)

    def test_help_text(self):
        p = self.p.help("other text")
        self.assertIn("foo, f      other text", p.to_options().run_inner("-h", env={}).unwrap_stdout())

    def test_suggestion(self):
        build = pure("build").to_options().command("build")
        check = pure("check").to_options().command("check")
        self.assertEqual(
            err(build | check, "biuld"),
            "no such command or positional: `biuld`, did you mean `build`?",
        )

    def test_flag_like_command(self):
        p = short("a").switch().to_options().command("--add")
        self.assertEqual(ok(p, "--add", "-a"), True)

    def test_with_sibling_flag(self):
        p = construct(short("v").switch(), self.p.optional())
        self.assertEqual(ok(p, "-v", "foo", "-a"), (True, True))
        self.assertEqual(ok(p, "-v"), (True, None))

    def test_cargo_helper(self):
        p = combargs.cargo_helper("asm", short("v").switch())
        self.assertEqual(ok(p, "asm", "-v"), True)
        self.assertEqual(ok(p, "-v"), True)

    def test_aliases(self):
        inner = pure(()).to_options().descr("inner descr")
        cmd = inner.command("foo").long("bar").short("f").short("b")
        p = cmd.to_options().descr("outer")
        self.assertEqual(
            p.run_inner("--help", env={}).unwrap_stdout(),
            "outer\n"
            "\n"
            "Usage: COMMAND ...\n"
            "\n"
            "Available options:\n"
            "    -h, --help  Prints help information\n"
            "\n"
            "Available commands:\n"
            "    foo, f      inner descr\n",
        )
        self.assertEqual(
            p.run_inner("f", "--help", env={}).unwrap_stdout(),
            "inner descr\n"
            "\n"
            "Usage: foo \n"
            "\n"
            "Available options:\n"
            "    -h, --help  Prints help information\n",
        )
        for word in ["foo", "f", "bar", "b"]:
            self.assertEqual(p.run_inner(word, env={}).unwrap(), (), word)
        self.assertIsInstance(p.run_inner("k", env={}).get, Stderr)


class TestCargoHelper(unittest.TestCase):
    def check(self, target, expected):
        p = combargs.cargo_helper("asm", construct(target, short("v").switch()))
        self.assertEqual(err(p, "asm", "-t", "x"), expected)
        self.assertEqual(err(p, "-t", "x"), expected)

    def test_guard(self):
        self.check(short("t").argument("T").guard(lambda _: False, "nope"), "`x`: nope")

    def test_conversion(self):
        self.check(
            short("t").argument("T", type=unsigned),
            "couldn't parse `x`: invalid digit found in string",
        )

    def test_parse(self):
        def nope(_):
            raise ValueError("nope")

        self.check(short("t").argument("T").parse(nope), "couldn't parse `x`: nope")

    def test_unknown_switch(self):
        p = combargs.cargo_helper("asm", construct(long("flag").switch(), short("v").switch()))
        for argv in [["asm", "--fla"], ["--fla"]]:
            self.assertEqual(
                err(p, *argv), "no such flag: `--fla`, did you mean `--flag`?", argv
            )


class TestSuggestions(unittest.TestCase):
    def test_long(self):
        self.assertEqual(
            err(long("flag").switch(), "--fla"),
            "no such flag: `--fla`, did you mean `--flag`?",
        )

    def test_two_dashes(self):
        self.assertEqual(
            err(short("p").switch(), "--p"),
            "no such flag: `--p` (with two dashes), did you mean `-p`?",
        )

    def test_help_flag(self):
        self.assertEqual(
            err(short("a").switch(), "--hepl"),
            "no such flag: `--hepl`, did you mean `--help`?",
        )

    def test_hidden_names_are_not_suggested(self):
        p = long("secret").switch().hide()
        self.assertEqual(ok(p, "--secret"), True)
        self.assertEqual(err(p, "--secre"), "`--secre` is not expected in this context")

    def test_too_far(self):
        self.assertEqual(
            err(long("verbose").switch(), "--quiet"),
            "`--quiet` is not expected in this context",
        )

    def test_distance(self):
        self.assertEqual(suggestions.damerau_levenshtein("build", "biuld"), 1)
        self.assertEqual(suggestions.damerau_levenshtein("kitten", "sitting"), 3)

    def test_error_fields(self):
        p = (short("a").req_flag("a") | short("b").req_flag("b")).to_options()
        error = p.run_subparser(args.State.from_args(["-a", "-b"], env={})).get
        self.assertIsInstance(error, errors.ConflictError)
        self.assertEqual((error.loser, error.winner), ("-b", "-a"))
        p = long("flag").switch().to_options()
        error = p.run_subparser(args.State.from_args(["--fla"], env={})).get
        self.assertIsInstance(error, errors.UnexpectedError)
        self.assertEqual(error.unexpected, "--fla")


class TestHelp(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(
            pure(()).to_options().run_inner("--help", env={}).unwrap_stdout(),
            "Usage: \n\nAvailable options:\n    -h, --help  Prints help information\n",
        )

    def test_full(self):
        p = (
            construct(
                short("v").long("verbose").help("Print more\n  and more").switch(),
                long("dry-run").switch(),
                short("n").env("COUNT").help("How many").argument("N"),
                positional("FILE", help="Input file"),
            )
            .to_options()
            .descr("Does things")
            .header("Header text")
            .footer("Footer text")
            .version("1.2")
        )
        self.assertEqual(
            p.run_inner("--help", env={"COUNT": "3"}).unwrap_stdout(),
            "Does things\n"
            "\n"
            "Header text\n"
            "\n"
            "Usage: [-v] [--dry-run] -n=N FILE\n"
            "\n"
            "Available positional items:\n"
            "    FILE           Input file\n"
            "\n"
            "Available options:\n"
            "    -v, --verbose  Print more\n"
            "                   and more\n"
            "        --dry-run\n"
            "    -n=N           How many\n"
            '                   [env:COUNT = "3"]\n'
            "    -h, --help     Prints help information\n"
            "    -V, --version  Prints version information\n"
            "\n"
            "Footer text\n",
        )
        self.assertIn("[env:COUNT: N/A]", p.run_inner("--help", env={}).unwrap_stdout())
        self.assertEqual(p.run_inner("-V", env={}).unwrap_stdout(), "Version: 1.2\n")

    def test_help_beats_errors(self):
        p = short("a").argument("A", type=integer).to_options()
        self.assertEqual(
            p.run_inner("-a", "x", "--help", env={}).unwrap_stdout(),
            p.run_inner("-h", env={}).unwrap_stdout(),
        )

    def test_group_help(self):
        p = construct(
            short("a").switch(),
            construct(short("b").help("B flag").switch(), short("c").switch()).group_help(
                "Group:"
            ),
        )
        self.assertEqual(
            p.to_options().run_inner("--help", env={}).unwrap_stdout(),
            "Usage: [-a] [-b] [-c]\n"
            "\n"
            "Group:\n"
            "    -b          B flag\n"
            "    -c\n"
            "\n"
            "Available options:\n"
            "    -a\n"
            "    -h, --help  Prints help information\n",
        )

    def test_long_label(self):
        p = long("a-very-long-flag-with").help("help").argument("ARG")
        self.assertEqual(
            p.to_options().run_inner("--help", env={}).unwrap_stdout(),
            "Usage: --a-very-long-flag-with=ARG\n"
            "\n"
            "Available options:\n"
            "        --a-very-long-flag-with=ARG\n"
            "                help\n"
            "    -h, --help  Prints help information\n",
        )

    def test_positional_without_help_is_not_listed(self):
        p = construct(positional("SRC"), positional("DST", help="where"))
        self.assertEqual(
            p.to_options().run_inner("--help", env={}).unwrap_stdout(),
            "Usage: SRC DST\n"
            "\n"
            "Available positional items:\n"
            "    DST         where\n"
            "\n"
            "Available options:\n"
            "    -h, --help  Prints help information\n",
        )

    def test_usage_override(self):
        p = short("p").switch().to_options().usage("Usage: hey [-p]")
        self.assertEqual(
            p.run_inner("--help", env={}).unwrap_stdout(),
            "Usage: hey [-p]\n\nAvailable options:\n    -p\n    -h, --help  Prints help information\n",
        )

    def test_with_usage(self):
        p = short("p").switch().to_options().with_usage(lambda u: f"Usage: hey {u}")
        self.assertTrue(
            p.run_inner("--help", env={}).unwrap_stdout().startswith("Usage: hey [-p]\n")
        )

    def test_usage_of_alternatives(self):
        p = construct(
            short("a").switch() | short("b").switch(), positional("FILE").many()
        )
        self.assertEqual(help.usage(p.meta), "([-a] | [-b]) [FILE]...")

    def test_hidden(self):
        p = construct(short("a").switch(), short("b").switch().hide())
        self.assertEqual(help.usage(p.meta), "[-a]")


class TestRun(unittest.TestCase):
    def test_value(self):
        self.assertEqual(short("a").switch().to_options().run("-a"), True)

    def test_testing_prints_to_stdout(self):
        out = io.StringIO()
        with redirect_stdout(out):
            returned = short("a").switch().to_options().run("-b")
        self.assertIsNone(returned)
        self.assertEqual(out.getvalue(), "`-b` is not expected in this context\n")

    def test_exit_codes(self):
        p = short("a").switch().to_options()
        with mock.patch.object(options, "TESTING", False), mock.patch.object(
            options, "PRINTING", False
        ):
            with self.assertRaises(SystemExit) as e:
                p.run("-b")
            self.assertEqual(e.exception.code, 1)
            with self.assertRaises(SystemExit) as e:
                p.run("--help")
            self.assertEqual(e.exception.code, 0)

    def test_long_message_is_wrapped(self):
        p = construct(short("p").long("par").argument("P"), long("bar").argument("B"))
        self.assertEqual(
            err(p, "--par", "--bar=baz"),
            "`--par` requires an argument `P`, got a flag `--bar=baz`, "
            "try `--par=--bar=baz` to use it as an\nargument",
        )


if __name__ == "__main__":
    unittest.main()

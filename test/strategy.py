"""
GNU strategy behavioral tests (token classification and option arguments).

Scope
- Validate name-shape validation of registries under GNU rules.
- Validate the token classes: empty tokens, lone '-', terminator, long and short
  options, residual arguments.
- Validate option arguments: inline values, clusters, arity windows, transform
  failures, the exceeded-maximum warning.
- Validate the error policy (skip and continue, or halt with strict=True),
  abbreviations, end-of-pass checks and async completion.

Conventions
- Test method names follow CamelCase per project convention.
- Parsers are built through the public API (Parser, ParserConfiguration, OptionSpec).
"""
import unittest
from unittest import TestCase

from gnuopts import (
    GNUParserStrategy,
    OptionRegistry,
    OptionSpec,
    Parser,
    ParserConfiguration,
    UnrecognizedOptionError,
    AmbiguousOptionError,
    InvalidFormatError,
    MissingRequiredArgumentsError,
    ExceededMaximumArgumentsWarning,
    TransformError,
    MissingRequiredOptionError,
    UnsatisfiedDependencyError,
    InvalidOptionShapeError,
    many,
    stream,
)


def build(*specs, **configuration):
    return Parser(specs, ParserConfiguration(**configuration))


class TestValidation(TestCase):

    def testValidRegistry(self):
        registry = OptionRegistry([
            OptionSpec("verbose", "-v", "--verbose", flag=True),
            OptionSpec("dry-run", "-n", "--dry-run", "--9lives", flag=True),
        ])
        self.assertTrue(GNUParserStrategy().validate(registry))

    def testShortNamesMustBeOneAlphanumeric(self):
        for alias in ("-ab", "-?", "-é"):
            with self.subTest(alias=alias):
                with self.assertRaises(InvalidOptionShapeError) as context:
                    build(OptionSpec("bad", alias, flag=True))
                self.assertEqual(context.exception.name, "bad")

    def testLongNamesMustMatchGNUCharacters(self):
        for alias in ("--a_b", "--a.b", "--a b"):
            with self.subTest(alias=alias):
                with self.assertRaises(InvalidOptionShapeError) as context:
                    build(OptionSpec("bad", alias, flag=True))
                self.assertEqual(context.exception.name, "bad")

    def testShapeErrorIsValueError(self):
        with self.assertRaises(ValueError):
            build(OptionSpec("bad", "-ab", flag=True))


class TestClassification(TestCase):

    def setUp(self) -> None:
        self.parser = build(
            OptionSpec("all", "-a", "--all", flag=True),
            OptionSpec("brief", "-b", "--brief", flag=True),
            OptionSpec("output", "-o", "--output"),
        )

    def testEmptyArguments(self):
        outcome = self.parser.parse([])
        self.assertEqual(outcome.residuals, ())
        self.assertEqual(outcome.faults, ())
        for entry in self.parser.registry.values():
            self.assertEqual(entry.accumulator.count, 0)

    def testEmptyTokensAreSkipped(self):
        outcome = self.parser.parse(["", "x", ""])
        self.assertEqual(outcome.residuals, ("x",))

    def testResidualsKeepInputOrder(self):
        outcome = self.parser.parse(["x", "-a", "y", "z"])
        self.assertEqual(outcome.residuals, ("x", "y", "z"))
        self.assertIs(self.parser.registry.value_of("all"), True)

    def testLoneDashIsResidual(self):
        outcome = self.parser.parse(["-", "x"])
        self.assertEqual(outcome.residuals, ("-", "x"))
        self.assertEqual(outcome.faults, ())

    def testTerminator(self):
        outcome = self.parser.parse(["x", "--", "-a", "--brief", "-o", "--", "y"])
        self.assertEqual(outcome.residuals, ("x", "-a", "--brief", "-o", "--", "y"))
        self.assertEqual(outcome.faults, ())
        self.assertIs(self.parser.registry.value_of("all"), False)
        self.assertIs(self.parser.registry.value_of("brief"), False)

    def testLongFlag(self):
        outcome = self.parser.parse(["--brief"])
        self.assertTrue(outcome.ok)
        self.assertIs(self.parser.registry.value_of("brief"), True)

    def testFlagDoesNotConsumeFollowingToken(self):
        outcome = self.parser.parse(["-a", "x"])
        self.assertEqual(outcome.residuals, ("x",))
        self.assertEqual(outcome.faults, ())


class TestShortOptions(TestCase):

    def setUp(self) -> None:
        self.order = []
        self.parser = build(*(
            OptionSpec(name, "-" + name, flag=True, accumulator=stream("flag", self.recorder(name)))
            for name in "abc"
        ), OptionSpec("output", "-o"))

    def recorder(self, name):
        return lambda value: self.order.append(name)

    def testClusterIsEquivalentToSeparateFlags(self):
        self.parser.parse(["-abc"])
        clustered = list(self.order)
        self.order.clear()

        separated = build(*(entry.spec for entry in self.parser.registry.values()))
        separated.parse(["-a", "-b", "-c"])

        self.assertEqual(clustered, ["a", "b", "c"])
        self.assertEqual(self.order, ["a", "b", "c"])
        for name in "abc":
            self.assertEqual(separated.registry[name].accumulator.count, 1)

    def testAttachedAndSeparateValues(self):
        for args in (["-ofoo"], ["-o", "foo"]):
            with self.subTest(args=args):
                parser = build(OptionSpec("output", "-o"))
                outcome = parser.parse(args)
                self.assertTrue(outcome.ok)
                self.assertEqual(parser.registry.value_of("output"), "foo")
                self.assertEqual(parser.registry.values_of("output"), ("foo",))

    def testClusterEndsWithValuedOption(self):
        outcome = self.parser.parse(["-abofoo", "x"])
        self.assertEqual(self.order, ["a", "b"])
        self.assertEqual(self.parser.registry.value_of("output"), "foo")
        self.assertEqual(outcome.residuals, ("x",))

    def testUnknownCharacterInClusterContinues(self):
        outcome = self.parser.parse(["-azc"])
        self.assertEqual(self.order, ["a", "c"])
        self.assertEqual(len(outcome.faults), 1)
        self.assertIsInstance(outcome.faults[0], UnrecognizedOptionError)
        self.assertEqual(outcome.faults[0].name, "z")

    def testLoneDashCanBeAValue(self):
        self.parser.parse(["-o", "-"])
        self.assertEqual(self.parser.registry.value_of("output"), "-")

    def testMissingValueAtEndOfInput(self):
        outcome = self.parser.parse(["-o"])
        self.assertEqual(len(outcome.faults), 1)
        fault = outcome.faults[0]
        self.assertIsInstance(fault, MissingRequiredArgumentsError)
        self.assertEqual((fault.name, fault.found, fault.minimum), ("output", 0, 1))

    def testValueDoesNotLookLikeOption(self):
        outcome = self.parser.parse(["-o", "-a"])
        self.assertIsInstance(outcome.faults[0], MissingRequiredArgumentsError)
        self.assertEqual(self.order, ["a"])


class TestLongOptions(TestCase):

    def setUp(self) -> None:
        self.parser = build(
            OptionSpec("name", "--name"),
            OptionSpec("verbose", "-v", "--verbose", flag=True),
            OptionSpec("define", "-D", "--define", accumulator=many(), nargs="+"),
        )

    def testInlineAndSeparateValues(self):
        for args in (["--name=value"], ["--name", "value"]):
            with self.subTest(args=args):
                parser = build(OptionSpec("name", "--name"))
                outcome = parser.parse(args)
                self.assertTrue(outcome.ok)
                self.assertEqual(parser.registry.value_of("name"), "value")

    def testInlineValueSplitsAtFirstEquals(self):
        self.parser.parse(["--name=a=b"])
        self.assertEqual(self.parser.registry.value_of("name"), "a=b")

    def testEmptyInlineValue(self):
        outcome = self.parser.parse(["--name="])
        self.assertTrue(outcome.ok)
        self.assertEqual(self.parser.registry.values_of("name"), ("",))

    def testNonFlagAloneIsInvalidFormat(self):
        outcome = self.parser.parse(["--name"])
        self.assertEqual(len(outcome.faults), 1)
        fault = outcome.faults[0]
        self.assertIsInstance(fault, InvalidFormatError)
        self.assertEqual(fault.name, "name")
        self.assertEqual(fault.index, 1)

    def testFlagWithValueIsInvalidFormat(self):
        outcome = self.parser.parse(["--verbose=yes", "x"])
        self.assertIsInstance(outcome.faults[0], InvalidFormatError)
        self.assertEqual(outcome.faults[0].name, "verbose")
        self.assertIs(self.parser.registry.value_of("verbose"), False)
        self.assertEqual(outcome.residuals, ("x",))

    def testTrailingValuesAfterInlineValue(self):
        outcome = self.parser.parse(["--define=a", "b", "c", "-v", "d"])
        self.assertEqual(self.parser.registry.values_of("define"), ("a", "b", "c"))
        self.assertEqual(outcome.residuals, ("d",))
        self.assertTrue(outcome.ok)

    def testConsumptionStopsAtDeclaredName(self):
        outcome = self.parser.parse(["--define", "a", "verbose", "b"])
        self.assertEqual(self.parser.registry.values_of("define"), ("a",))
        self.assertEqual(outcome.residuals, ("verbose", "b"))

    def testUnknownLongOptionContinues(self):
        outcome = self.parser.parse(["x", "--nope", "-v"])
        self.assertEqual(len(outcome.faults), 1)
        fault = outcome.faults[0]
        self.assertIsInstance(fault, UnrecognizedOptionError)
        self.assertEqual(fault.name, "nope")
        self.assertEqual(fault.index, 2)
        self.assertTrue(str(fault).endswith("at second position"))
        self.assertIs(self.parser.registry.value_of("verbose"), True)
        self.assertEqual(outcome.residuals, ("x",))


class TestArity(TestCase):

    def setUp(self) -> None:
        self.parser = build(
            OptionSpec("point", "-p", "--point", accumulator=many(), nargs=(2, 3)),
            OptionSpec("numbers", "-n", accumulator=many("int"), nargs="+"),
            OptionSpec("output", "-o"),
        )

    def testBelowMinimum(self):
        outcome = self.parser.parse(["-p", "1"])
        self.assertEqual(len(outcome.faults), 1)
        fault = outcome.faults[0]
        self.assertIsInstance(fault, MissingRequiredArgumentsError)
        self.assertEqual((fault.name, fault.found, fault.minimum), ("point", 1, 2))
        self.assertEqual(self.parser.registry.values_of("point"), ("1",))

    def testAboveMaximum(self):
        outcome = self.parser.parse(["-p", "1", "2", "3", "4"])
        self.assertEqual(self.parser.registry.values_of("point"), ("1", "2", "3"))
        self.assertEqual(outcome.residuals, ("4",))
        self.assertEqual(len(outcome.faults), 1)
        warning = outcome.faults[0]
        self.assertIsInstance(warning, ExceededMaximumArgumentsWarning)
        self.assertEqual((warning.name, warning.maximum), ("point", 3))
        self.assertEqual(warning.index, 5)
        self.assertEqual(outcome.warnings, (warning,))
        self.assertTrue(outcome.ok)

    def testExceededIsReportedOnce(self):
        outcome = self.parser.parse(["-o", "out", "a", "b"])
        self.assertEqual(len(outcome.warnings), 1)
        self.assertEqual(outcome.residuals, ("a", "b"))

    def testWithinWindow(self):
        outcome = self.parser.parse(["--point", "1", "2", "-o", "x"])
        self.assertEqual(outcome.faults, ())
        self.assertEqual(self.parser.registry.values_of("point"), ("1", "2"))
        self.assertEqual(self.parser.registry.value_of("output"), "x")

    def testTransformFailureDoesNotStopConsumption(self):
        outcome = self.parser.parse(["-n", "1", "x", "3"])
        self.assertEqual(self.parser.registry.values_of("numbers"), (1, 3))
        self.assertEqual(len(outcome.faults), 1)
        fault = outcome.faults[0]
        self.assertIsInstance(fault, TransformError)
        self.assertEqual((fault.raw, fault.typename, fault.name), ("x", "int", "numbers"))
        self.assertEqual(fault.index, 3)
        self.assertEqual(outcome.residuals, ())

    def testAttachedValueCountsTowardsWindow(self):
        outcome = self.parser.parse(["-p1", "2", "3", "4"])
        self.assertEqual(self.parser.registry.values_of("point"), ("1", "2", "3"))
        self.assertEqual(outcome.residuals, ("4",))


class TestErrorPolicy(TestCase):

    def specs(self):
        return (
            OptionSpec("verbose", "-v", "--verbose", flag=True),
            OptionSpec("output", "-o", "--output"),
        )

    def testSkipAndContinueByDefault(self):
        parser = build(*self.specs())
        outcome = parser.parse(["--nope", "-v", "x"])
        self.assertEqual(len(outcome.faults), 1)
        self.assertIs(parser.registry.value_of("verbose"), True)
        self.assertEqual(outcome.residuals, ("x",))

    def testStrictHaltsOnUnrecognizedLongOption(self):
        parser = build(*self.specs(), strict=True)
        outcome = parser.parse(["--nope", "-v", "x"])
        self.assertEqual(len(outcome.faults), 1)
        self.assertIs(parser.registry.value_of("verbose"), False)
        self.assertEqual(outcome.residuals, ("-v", "x"))

    def testStrictHaltsOnUnrecognizedShortOption(self):
        parser = build(*self.specs(), strict=True)
        outcome = parser.parse(["-zv", "-v", "x"])
        self.assertIs(parser.registry.value_of("verbose"), False)
        self.assertEqual(outcome.residuals, ("-v", "x"))

    def testStrictHaltsOnInvalidFormat(self):
        parser = build(*self.specs(), strict=True)
        outcome = parser.parse(["--output", "--verbose"])
        self.assertIsInstance(outcome.faults[0], InvalidFormatError)
        self.assertEqual(outcome.residuals, ("--verbose",))

    def testStrictKeepsGoingOnArityFaults(self):
        parser = build(*self.specs(), strict=True)
        outcome = parser.parse(["-o", "-v"])
        self.assertIsInstance(outcome.faults[0], MissingRequiredArgumentsError)
        self.assertIs(parser.registry.value_of("verbose"), True)


class TestAbbreviations(TestCase):

    def specs(self):
        return (
            OptionSpec("verbose", "--verbose", flag=True),
            OptionSpec("version", "--version", flag=True),
            OptionSpec("color", "--color", "--colour", flag=True),
            OptionSpec("in", "--in"),
            OptionSpec("input", "--input"),
        )

    def testUniquePrefix(self):
        parser = build(*self.specs(), abbreviations=True)
        outcome = parser.parse(["--verb"])
        self.assertTrue(outcome.ok)
        self.assertIs(parser.registry.value_of("verbose"), True)

    def testAmbiguousPrefix(self):
        parser = build(*self.specs(), abbreviations=True)
        outcome = parser.parse(["--ver"])
        fault = outcome.faults[0]
        self.assertIsInstance(fault, AmbiguousOptionError)
        self.assertEqual(fault.candidates, ("verbose", "version"))

    def testAliasesOfOneOptionAreNotAmbiguous(self):
        parser = build(*self.specs(), abbreviations=True)
        outcome = parser.parse(["--col"])
        self.assertTrue(outcome.ok)
        self.assertIs(parser.registry.value_of("color"), True)

    def testExactNameWins(self):
        parser = build(*self.specs(), abbreviations=True)
        parser.parse(["--in", "a"])
        self.assertEqual(parser.registry.value_of("in"), "a")
        self.assertEqual(parser.registry.values_of("input"), ())

    def testDisabledByDefault(self):
        parser = build(*self.specs())
        outcome = parser.parse(["--verb"])
        self.assertIsInstance(outcome.faults[0], UnrecognizedOptionError)

    def testAmbiguousHintUsesLongPrefix(self):
        parser = build(
            OptionSpec("verbose", "--verbose", flag=True),
            OptionSpec("version", "--version", flag=True),
            long_prefix="++",
            abbreviations=True,
        )
        fault = parser.parse(["++ver"]).faults[0]
        self.assertIsInstance(fault, AmbiguousOptionError)
        self.assertIn("++verbose", fault.hint)
        self.assertIn("++version", fault.hint)
        self.assertNotIn("--", fault.hint)


class TestEndOfPass(TestCase):

    def testMissingRequiredOption(self):
        parser = build(OptionSpec("output", "-o", required=True))
        outcome = parser.parse(["x"])
        self.assertEqual(len(outcome.faults), 1)
        fault = outcome.faults[0]
        self.assertIsInstance(fault, MissingRequiredOptionError)
        self.assertEqual(fault.name, "output")
        self.assertIsNone(fault.index)

    def testRequiredOptionGiven(self):
        parser = build(OptionSpec("output", "-o", required=True))
        self.assertTrue(parser.parse(["-o", "x"]).ok)

    def testUnsatisfiedDependency(self):
        parser = build(
            OptionSpec("user", "-u", dependencies=["password"]),
            OptionSpec("password", "-p"),
        )
        outcome = parser.parse(["-u", "root"])
        fault = outcome.faults[0]
        self.assertIsInstance(fault, UnsatisfiedDependencyError)
        self.assertEqual((fault.name, fault.dependency), ("user", "password"))
        self.assertTrue(parser.parse(["-u", "root", "-p", "secret"]).ok)

    def testAsyncCompletionAfterLastValue(self):
        events = []
        parser = build(
            OptionSpec("size", "-s", accumulator=stream("int", events.append, lambda: events.append("done"))),
            OptionSpec("verbose", "-v", flag=True),
        )
        parser.parse(["-s", "1", "-v", "-s", "2"])
        self.assertEqual(events, [1, 2, "done"])

        parser.parse(["-s", "3"])
        self.assertEqual(events, [1, 2, "done", 3, "done"])

    def testAsyncCompletionOnlyWhenMatched(self):
        events = []
        parser = build(OptionSpec("size", "-s", accumulator=stream("int", events.append, lambda: events.append("done"))))
        parser.parse(["x"])
        self.assertEqual(events, [])

    def testStreamIsLazy(self):
        events = []
        parser = build(OptionSpec("size", "-s", accumulator=stream("int", events.append, lambda: events.append("done"))))
        residuals = parser.stream(["a", "-s", "1", "b"])
        self.assertEqual(next(residuals), "a")
        self.assertEqual(events, [])
        self.assertEqual(next(residuals), "b")
        self.assertEqual(events, [1])
        self.assertEqual(list(residuals), [])
        self.assertEqual(events, [1, "done"])


if __name__ == "__main__":
    unittest.main()

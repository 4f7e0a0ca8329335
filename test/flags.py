"""
Flag set behavioral tests (spec validation, token grammar, queries, usage tables).

Scope
- Validate Option/Flag name and metadata checks.
- Validate the long/short/clustered token forms and the "--" terminator.
- Validate lenient handling of unknown flags.
- Validate typed getters, change tracking and persistence across calls.
- Validate the usage table layout.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
import warnings
from unittest import TestCase

from cflag import FlagSet, Option, Flag, ParseResult
from cflag.faults import (
    InvalidFlagError,
    DuplicateFlagError,
    UnknownFlagError,
    MissingValueError,
    InvalidValueError,
    FlagTypeError,
    DeprecatedFlagWarning,
    FaultCode,
)


class TestFlagSpecs(TestCase):
    """Construction-time validation of Option and Flag."""

    def testOptionSplitsNames(self):
        option = Option("-t", "--threads", type=int, default=1)
        self.assertEqual(option.name, "threads")
        self.assertEqual(option.shorthand, "t")
        self.assertEqual(option.names, {"-t", "--threads"})
        self.assertIs(option.type, int)
        self.assertEqual(option.default, 1)

    def testLongNameOnly(self):
        flag = Flag("--dry-run")
        self.assertEqual(flag.name, "dry-run")
        self.assertIsNone(flag.shorthand)
        self.assertIs(flag.type, bool)
        self.assertFalse(flag.default)

    def testMissingLongNameRaises(self):
        with self.assertRaises(InvalidFlagError) as context:
            Option("-t")
        self.assertEqual(context.exception.code, FaultCode.INVALID_FLAG)

    def testTwoLongNamesRaise(self):
        with self.assertRaises(InvalidFlagError):
            Flag("--verbose", "--loud")

    def testTwoShortNamesRaise(self):
        with self.assertRaises(InvalidFlagError):
            Flag("-v", "-l", "--verbose")

    def testMalformedNameRaises(self):
        for name in ("threads", "---threads", "--", "-tt", "--1st"):
            with self.subTest(name=name):
                with self.assertRaises(InvalidFlagError):
                    Option(name)

    def testNoNamesRaises(self):
        with self.assertRaises(TypeError):
            Flag()

    def testEmptyDescriptionRaises(self):
        with self.assertRaises(InvalidFlagError):
            Option("--name", descr="   ")

    def testNonCallableTypeRaises(self):
        with self.assertRaises(TypeError):
            Option("--name", type="int")

    def testFlagDefaultMustBeBoolean(self):
        with self.assertRaises(TypeError):
            Flag("--verbose", default=1)

    def testSpecsAreSealed(self):
        with self.assertRaises(TypeError):
            class Custom(Flag):
                pass

    def testOptionRepr(self):
        self.assertTrue(repr(Option("--name")).startswith("option(names={'--name'}, name='name'"))


class TestFlagSetParsing(TestCase):
    """Token grammar of FlagSet.parse()."""

    def setUp(self):
        self.flags = FlagSet("test")
        self.flags.option("-t", "--threads", type=int, default=1, descr="Worker threads.")
        self.flags.option("-o", "--output", descr="Output file.")
        self.flags.flag("-v", "--verbose", descr="Verbose output.")
        self.flags.flag("-q", "--quiet")

    def testLongForms(self):
        result = self.flags.parse(["--threads", "4", "--output=out.txt", "--verbose"])
        self.assertEqual(result, ParseResult(("threads", "output", "verbose"), (), ()))
        self.assertEqual(self.flags.get("threads"), 4)
        self.assertEqual(self.flags.get("output"), "out.txt")
        self.assertTrue(self.flags.get("verbose"))

    def testShortForms(self):
        self.flags.parse(["-t", "2", "-oout.txt"])
        self.assertEqual(self.flags.get_int("threads"), 2)
        self.assertEqual(self.flags.get_string("output"), "out.txt")

        self.flags.parse(["-t=3"])
        self.assertEqual(self.flags.get_int("threads"), 3)

    def testClusteredShorthands(self):
        result = self.flags.parse(["-vqt8"])
        self.assertEqual(result.recognized, ("verbose", "quiet", "threads"))
        self.assertTrue(self.flags.get_bool("verbose"))
        self.assertTrue(self.flags.get_bool("quiet"))
        self.assertEqual(self.flags.get_int("threads"), 8)

    def testInlineBooleanValues(self):
        self.flags.parse(["--verbose=false", "-q=1"])
        self.assertFalse(self.flags.get_bool("verbose"))
        self.assertTrue(self.flags.get_bool("quiet"))
        self.assertTrue(self.flags.changed("verbose"))

    def testInterspersedPositionals(self):
        result = self.flags.parse(["a.txt", "-v", "b.txt", "-", "--threads", "2", "c.txt"])
        self.assertEqual(result.args, ("a.txt", "b.txt", "-", "c.txt"))
        self.assertEqual(self.flags.args, ["a.txt", "b.txt", "-", "c.txt"])

    def testTerminator(self):
        result = self.flags.parse(["-v", "--", "--threads", "2"])
        self.assertEqual(result.args, ("--threads", "2"))
        self.assertEqual(self.flags.get_int("threads"), 1)
        self.assertFalse(self.flags.changed("threads"))

    def testUnknownFlagRaisesInStrictMode(self):
        with self.assertRaises(UnknownFlagError) as context:
            self.flags.parse(["--threds", "4"])
        self.assertIsInstance(context.exception, LookupError)
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_FLAG)

    def testUnknownLongFlagSkipsItsValueInLenientMode(self):
        result = self.flags.parse(["--color", "red", "file", "--size=2", "rest"], lenient=True)
        self.assertEqual(result.unknown, ("--color", "red", "--size=2"))
        self.assertEqual(result.args, ("file", "rest"))

    def testUnknownLongFlagBeforeFlagKeepsNextToken(self):
        result = self.flags.parse(["--color", "-v"], lenient=True)
        self.assertEqual(result.unknown, ("--color",))
        self.assertTrue(self.flags.get_bool("verbose"))

    def testUnknownShorthandInLenientMode(self):
        result = self.flags.parse(["-x", "value", "-y=1", "kept", "-vz"], lenient=True)
        self.assertEqual(result.unknown, ("-x", "value", "-y", "-z"))
        self.assertEqual(result.args, ("kept",))
        self.assertTrue(self.flags.get_bool("verbose"))

    def testLenientConstructorDefault(self):
        flags = FlagSet(lenient=True)
        self.assertEqual(flags.parse(["--anything"]).unknown, ("--anything",))
        with self.assertRaises(UnknownFlagError):
            flags.parse(["--anything"], lenient=False)

    def testMissingValueRaises(self):
        with self.assertRaises(MissingValueError):
            self.flags.parse(["--threads"])
        with self.assertRaises(MissingValueError):
            self.flags.parse(["-t"])

    def testValueMayStartWithDash(self):
        self.flags.parse(["--output", "-"])
        self.assertEqual(self.flags.get("output"), "-")

    def testInvalidValueRaises(self):
        with self.assertRaises(InvalidValueError) as context:
            self.flags.parse(["--threads", "many"])
        self.assertIsInstance(context.exception, ValueError)
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testInvalidBooleanRaises(self):
        with self.assertRaises(InvalidValueError):
            self.flags.parse(["--verbose=maybe"])

    def testValuesPersistAcrossCalls(self):
        self.flags.parse(["--threads", "4", "first"])
        self.flags.parse(["second"])
        self.assertEqual(self.flags.get_int("threads"), 4)
        self.assertEqual(self.flags.args, ["second"])

    def testNonStringTokensRaise(self):
        with self.assertRaises(TypeError):
            self.flags.parse(["--threads", 4])
        with self.assertRaises(TypeError):
            self.flags.parse("--verbose")

    def testReplayOnlyUpdatesValues(self):
        self.flags.flag("--legacy", deprecated=True)
        self.flags.parse(["kept", "--color", "red"], lenient=True)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = self.flags.parse(["--legacy", "-t", "6", "other", "--size", "2"], lenient=True, replay=True)
        self.assertEqual(caught, [])
        self.assertEqual(result.args, ("other",))
        self.assertTrue(self.flags.get_bool("legacy"))
        self.assertEqual(self.flags.get_int("threads"), 6)
        self.assertEqual(self.flags.args, ["kept"])
        self.assertEqual(self.flags.unknown, ["--color", "red"])

    def testDeprecatedFlagWarns(self):
        self.flags.flag("--legacy", deprecated=True)
        with self.assertWarns(DeprecatedFlagWarning):
            self.flags.parse(["--legacy"])
        self.assertTrue(self.flags.get_bool("legacy"))


class TestFlagSetQueries(TestCase):
    """Registration, lookups and typed getters."""

    def setUp(self):
        self.flags = FlagSet()
        self.flags.option("-r", "--ratio", type=float, default=0.5)
        self.flags.option("--name", default="anonymous")
        self.flags.flag("-f", "--force")

    def testDuplicateLongNameRaises(self):
        with self.assertRaises(DuplicateFlagError):
            self.flags.flag("--force")

    def testDuplicateShorthandRaises(self):
        with self.assertRaises(DuplicateFlagError):
            self.flags.flag("-f", "--fast")
        self.assertNotIn("fast", self.flags)

    def testAddRejectsNonSpecs(self):
        with self.assertRaises(TypeError):
            self.flags.add("--force")

    def testLookup(self):
        self.assertEqual(self.flags.lookup("ratio").shorthand, "r")
        self.assertIs(self.flags.shorthand("f"), self.flags.lookup("force"))
        self.assertIsNone(self.flags.lookup("missing"))
        self.assertIn("name", self.flags)
        self.assertEqual(len(self.flags), 3)
        self.assertEqual([spec.name for spec in self.flags], ["ratio", "name", "force"])

    def testDefaults(self):
        self.assertEqual(self.flags.get_float("ratio"), 0.5)
        self.assertEqual(self.flags.get_string("name"), "anonymous")
        self.assertFalse(self.flags.get_bool("force"))
        self.assertFalse(self.flags.changed("force"))

    def testUnknownNameRaises(self):
        with self.assertRaises(UnknownFlagError):
            self.flags.get("missing")
        with self.assertRaises(UnknownFlagError):
            self.flags.get_bool("missing")

    def testTypeMismatchRaises(self):
        with self.assertRaises(FlagTypeError) as context:
            self.flags.get_int("ratio")
        self.assertIsInstance(context.exception, TypeError)
        with self.assertRaises(FlagTypeError):
            self.flags.get_bool("name")

    def testSet(self):
        self.flags.set("ratio", "2.5")
        self.assertEqual(self.flags.get_float("ratio"), 2.5)
        self.assertTrue(self.flags.changed("ratio"))
        with self.assertRaises(TypeError):
            self.flags.set("ratio", 2.5)

    def testAvailableFlags(self):
        self.assertTrue(self.flags.has_available_flags())
        hidden = FlagSet()
        hidden.flag("--secret", hidden=True)
        hidden.flag("--old", deprecated=True)
        self.assertFalse(hidden.has_available_flags())
        self.assertFalse(FlagSet().has_available_flags())


class TestFlagUsages(TestCase):
    """Layout of FlagSet.flag_usages()."""

    def setUp(self):
        self.flags = FlagSet()
        self.flags.option("-t", "--threads", type=int, default=1, descr="Worker threads.")
        self.flags.flag("-v", "--verbose", descr="Verbose output.")
        self.flags.option("--name", default="x", descr="Name.")

    def testSortedTable(self):
        self.assertEqual(
            self.flags.flag_usages(),
            '      --name string   Name. (default "x")\n'
            "  -t, --threads int   Worker threads. (default 1)\n"
            "  -v, --verbose       Verbose output.\n",
        )

    def testDefinitionOrder(self):
        flags = FlagSet(sort=False)
        flags.flag("--zeta")
        flags.flag("--alpha")
        self.assertEqual(flags.flag_usages(), "      --zeta\n      --alpha\n")

    def testMetavarReplacesTypeName(self):
        flags = FlagSet()
        flags.option("-o", "--output", metavar="FILE")
        self.assertEqual(flags.flag_usages(), "  -o, --output FILE\n")

    def testZeroDefaultsAreOmitted(self):
        flags = FlagSet()
        flags.option("--count", type=int, default=0, descr="Count.")
        flags.flag("--on", default=True, descr="On.")
        self.assertEqual(
            flags.flag_usages(),
            "      --count int   Count.\n"
            "      --on          On. (default true)\n",
        )

    def testHiddenAndDeprecatedAreOmitted(self):
        self.flags.flag("--secret", hidden=True)
        self.flags.flag("--old", deprecated=True)
        self.assertNotIn("--secret", self.flags.flag_usages())
        self.assertNotIn("--old", self.flags.flag_usages())

    def testEmptyTable(self):
        self.assertEqual(FlagSet().flag_usages(), "")


if __name__ == "__main__":
    unittest.main()

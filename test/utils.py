"""
Tests for the shared helpers: the Unset sentinel, coalesce, mirror and wrap.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from cflag.utils import *


class UnsetTest(TestCase):
    """Sentinel semantics."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))


class MirrorTest(TestCase):
    """Read-only mirrored properties."""

    def testContainersAreCopied(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, {"a": [2]}]

        holder = Holder()
        items = holder.items
        items[1]["a"].append(3)
        self.assertEqual(holder.items, [1, {"a": [2]}])

        with self.assertRaises(AttributeError):
            holder.items = []


class WrapTest(TestCase):
    """Hanging-indent wrapping of usage text."""

    def testNoWrapReindentsNewlines(self):
        self.assertEqual(wrap(4, 0, "a\nb"), "a\n    b")

    def testWrapsOnBlanks(self):
        self.assertEqual(
            wrap(10, 40, "one two three four five six seven eight nine"),
            "one two three four five\n" + " " * 10 + "six seven eight nine",
        )

    def testShortTextIsKept(self):
        self.assertEqual(wrap(10, 80, "short"), "short")

    def testNarrowColumnsMoveTextBelow(self):
        self.assertEqual(wrap(20, 42, "abc"), "\n" + " " * 16 + "abc")

    def testTooNarrowDisablesWrapping(self):
        self.assertEqual(wrap(10, 30, "a\nb"), "a\n" + " " * 16 + "b")


if __name__ == "__main__":
    unittest.main()

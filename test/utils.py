"""
Tests for the internal helpers.

This module verifies semantic guarantees of `gnuopts.utils`:
- The `Unset` sentinel: singleton identity, falsy semantics, copying, pickling,
  union support in isinstance checks and finality.
- coalesce(): only Unset is replaced, other falsy values are preserved.
- rename(): function and decorator forms.
- mirror(): read-only properties returning immutable views of containers.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from gnuopts.utils import *


class TestUnset(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the module-level instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButNotNone(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        """
        copy() and deepcopy() preserve the identity of the singleton.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy({"key": Unset})["key"], Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionInIsinstance(self) -> None:
        """
        `str | Unset` can be used directly as an isinstance target.
        """
        self.assertTrue(isinstance("text", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance(Unset, Unset | str))
        self.assertFalse(isinstance(None, str | Unset))

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # noqa: F841
                pass


class TestCoalesce(TestCase):

    def testUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalsyValuesArePreserved(self):
        for value in (None, 0, "", [], False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class TestRename(TestCase):

    def testFunctionForm(self):
        renamed = rename(lambda: None, "to_thing")
        self.assertEqual(renamed.__name__, "to_thing")
        self.assertEqual(renamed.__qualname__, "to_thing")

    def testDecoratorForm(self):
        @rename("to_other")
        def function():
            pass

        self.assertEqual(function.__name__, "to_other")

    def testRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)

    def testRejectsWrongArity(self):
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):

    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")
            names = mirror("names")
            label = mirror("label")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._names = {"x"}
                self._label = "text"

        self.holder = Holder()

    def testSequenceBecomesTuple(self):
        self.assertEqual(self.holder.items, (1, 2))

    def testMappingBecomesProxy(self):
        self.assertIsInstance(self.holder.table, MappingProxyType)
        with self.assertRaises(TypeError):
            self.holder.table["b"] = 2  # type: ignore[index]

    def testSetBecomesFrozenset(self):
        self.assertEqual(self.holder.names, frozenset({"x"}))

    def testScalarsAreReturnedAsIs(self):
        self.assertEqual(self.holder.label, "text")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.holder.items = ()

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == '__main__':
    unittest.main()

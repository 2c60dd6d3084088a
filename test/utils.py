"""
Utility and internal machinery tests.

Scope
- Unset sentinel and coalesce().
- rename() decorator and mirror() read-only copies.
- tokenize() whitespace rule.
- settle()/asettle() step drivers.

Conventions
- Test method names follow CamelCase per project convention.
"""
import asyncio
import unittest
from unittest import TestCase, IsolatedAsyncioTestCase

from positional.internals import settle, asettle, drive
from positional.utils import Unset, UnsetType, coalesce, mirror, rename, tokenize


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testUnionForInstanceChecks(self):
        accepted = str | None | Unset
        self.assertIsInstance(Unset, accepted)
        self.assertIsInstance(None, accepted)
        self.assertNotIsInstance(3, accepted)

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class TestRename(TestCase):

    def testDecorator(self):
        @rename("described")
        def f():
            pass

        self.assertEqual((f.__name__, f.__qualname__), ("described", "described"))

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            rename(1)


class TestMirror(TestCase):

    def testReturnsCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [["a"], "b"]

        holder = Holder()
        holder.items.append("c")
        holder.items[0].append("z")
        self.assertEqual(holder.items, [["a"], "b"])
        with self.assertRaises(AttributeError):
            holder.items = []

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            mirror(3)


class TestTokenize(TestCase):

    def testSplitsOnWhitespaceRuns(self):
        self.assertEqual(tokenize("  roll \t 2d6\n"), ["roll", "2d6"])

    def testEmptyLine(self):
        self.assertEqual(tokenize(""), [])
        self.assertEqual(tokenize("   "), [])

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            tokenize(["a"])


def steps(values):
    received = []
    for value in values:
        try:
            received.append((yield value))
        except ValueError as error:
            received.append(f"caught {error}")
    return received


class TestSettle(TestCase):

    def testSendsValuesBack(self):
        self.assertEqual(settle(steps([1, 2, 3])), [1, 2, 3])

    def testNoSteps(self):
        self.assertEqual(settle(steps([])), [])

    def testDriveSynchronous(self):
        self.assertEqual(drive(steps(["a"]), False), ["a"])


class TestAsettle(IsolatedAsyncioTestCase):

    async def testAwaitsInOrder(self):
        async def later(value):
            await asyncio.sleep(0)
            return value * 10

        self.assertEqual(await asettle(steps([later(1), 2, later(3)])), [10, 2, 30])

    async def testFailuresAreThrownBack(self):
        async def failing():
            raise ValueError("nope")

        self.assertEqual(await asettle(steps([failing(), 1])), ["caught nope", 1])

    async def testUnhandledFailurePropagates(self):
        async def failing():
            raise KeyError("gone")

        with self.assertRaises(KeyError):
            await asettle(steps([failing()]))

    async def testDriveIsLazy(self):
        started = []

        def recording():
            started.append(True)
            return (yield 1)

        pending = drive(recording(), True)
        self.assertEqual(started, [])
        self.assertEqual(await pending, 1)
        self.assertEqual(started, [True])


if __name__ == "__main__":
    unittest.main()

"""
Faults module behavioral tests (error chaining, copying, codes and rendering).

Scope
- Validate CommandError message/nested/full_message semantics.
- Validate copy.replace() support used to tag errors with their command.
- Validate FaultCode normalization through the host __codes__ mapping.
- Validate rich rendering via report() on a captured stream.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import io
import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from positional import (
    Argument,
    Command,
    CommandError,
    FaultCode,
    MissingArgumentError,
    SetupError,
    report,
)


class TestCommandError(TestCase):
    """Message chaining and copying."""

    def testFullMessageWithoutNested(self):
        error = CommandError("top")
        self.assertEqual(error.full_message, "top")
        self.assertEqual(str(error), "top")
        self.assertIsNone(error.command)
        self.assertIsNone(error.nested)

    def testFullMessageChainsNestedErrors(self):
        error = CommandError("outer", nested=CommandError("inner", nested=ValueError("root")))
        self.assertEqual(error.full_message, "outer: inner: root")
        self.assertEqual(str(error), error.full_message)

    def testFullMessageWithNonExceptionNested(self):
        self.assertEqual(CommandError("outer", nested=404).full_message, "outer: 404")

    def testFullMessageWithEmptyNested(self):
        self.assertEqual(CommandError("outer", nested=ValueError()).full_message, "outer")

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            CommandError(42)

    def testReplaceKeepsTypeAndLeavesOriginalUntouched(self):
        command = Command("cmd")
        original = MissingArgumentError("Missing argument <a>", nested=KeyError("a"))
        tagged = copy.replace(original, command=command)
        self.assertIsInstance(tagged, MissingArgumentError)
        self.assertIs(tagged.command, command)
        self.assertIs(tagged.nested, original.nested)
        self.assertIsNone(original.command)

    def testReplaceRejectsUnknownFields(self):
        with self.assertRaises(TypeError):
            copy.replace(CommandError("x"), title="nope")

    def testSetupErrorIsNotACommandError(self):
        self.assertFalse(issubclass(SetupError, CommandError))


class TestFaultCode(TestCase):
    """Code normalization."""

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.MISSING_ARGUMENT.normalize(), "11125")

    def testNormalizeUsesHostCodes(self):
        with patch.object(sys.modules["__main__"], "__codes__", {FaultCode.BAD_VALUE: "E-BAD"}, create=True):
            self.assertEqual(FaultCode.BAD_VALUE.normalize(), "E-BAD")
            self.assertEqual(FaultCode.MISSING_ARGUMENT.normalize(), "11125")

    def testSubclassesCarryCodes(self):
        self.assertIs(MissingArgumentError.code, FaultCode.MISSING_ARGUMENT)
        self.assertIs(CommandError.code, FaultCode.COMMAND_ERROR)


class TestReport(TestCase):
    """Rich rendering of faults."""

    def capture(self, error, **options):
        stream = io.StringIO()
        report(error, file=stream, **options)
        return stream.getvalue()

    def failure(self):
        command = Command("greet").add_argset([Argument("who")])
        try:
            command.parse([])
        except CommandError as error:
            return error
        self.fail("parse() should have failed")

    def testPlainReport(self):
        output = self.capture(self.failure())
        self.assertIn("11125", output)
        self.assertIn("Missing Argument", output)
        self.assertIn("Missing argument <who>", output)
        self.assertIn("greet <who>", output)

    def testFancyReport(self):
        output = self.capture(self.failure(), fancy=True)
        self.assertIn("Missing argument <who>", output)
        self.assertIn("greet", output)

    def testColorfulReportOnPlainStream(self):
        self.assertIn("Missing argument <who>", self.capture(self.failure(), colorful=True))

    def testHostProgramName(self):
        with patch.object(sys.modules["__main__"], "__prog__", "bot", create=True):
            output = self.capture(CommandError("oops"))
        self.assertIn("[ bot", output)

    def testReportRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            report(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()

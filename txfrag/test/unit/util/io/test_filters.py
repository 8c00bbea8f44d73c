#!/usr/bin/env python
"""Tests for :py:mod:`txfrag.util.io.filters`"""
import re
import unittest
from io import StringIO

from txfrag.util.io.filters import SkipBlankReader, ColorWriter, NameDateWriter

TEXT = "\n".join([
    "# first comment",
    "line one",
    "",
    "   ",
    "  # indented comment",
    "line two # trailing text",
    "",
])


class TestReaders(unittest.TestCase):

    def test_skip_blank(self):
        found = list(SkipBlankReader(StringIO(TEXT)))
        self.assertEqual(found, ["# first comment\n", "line one\n", "  # indented comment\n",
                                 "line two # trailing text\n"])

    def test_read(self):
        reader = SkipBlankReader(StringIO(TEXT))
        self.assertEqual(reader.read(), "# first comment\nline one\n  # indented comment\nline two # trailing text\n")


class TestWriters(unittest.TestCase):

    def test_color_writer_plain_stream(self):
        buf = StringIO()
        writer = ColorWriter(buf)
        self.assertEqual(writer.color("text", color="red"), "text")
        writer.write("message")
        self.assertEqual(buf.getvalue(), "message")

    def test_name_date_writer(self):
        buf = StringIO()
        writer = NameDateWriter("myscript", stream=buf)
        writer.write("Opened files.\n")
        writer("Done.")
        lines = buf.getvalue().split("\n")
        pat = re.compile(r"^myscript \[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\]: (.*)$")
        self.assertEqual(pat.match(lines[0]).group(1), "Opened files.")
        self.assertEqual(pat.match(lines[1]).group(1), "Done.")
        self.assertEqual(lines[2], "")

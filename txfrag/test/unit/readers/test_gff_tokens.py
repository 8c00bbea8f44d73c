#!/usr/bin/env python
"""Tests for :py:mod:`txfrag.readers.gff_tokens`"""
import unittest
import warnings

from txfrag.readers.gff_tokens import parse_GTF2_tokens, unescape_GTF2
from txfrag.util.services.exceptions import FileFormatWarning, reset_filters


class TestParseGTF2Tokens(unittest.TestCase):

    def setUp(self):
        reset_filters()

    def test_simple(self):
        self.assertEqual(parse_GTF2_tokens('gene_id "mygene"; transcript_id "mytranscript";'),
                         {"gene_id": "mygene", "transcript_id": "mytranscript"})

    def test_unquoted_values(self):
        self.assertEqual(parse_GTF2_tokens('exon_number 3; gene_id "g";'),
                         {"exon_number": "3", "gene_id": "g"})

    def test_spaces_in_values(self):
        self.assertEqual(parse_GTF2_tokens('gene_id "g"; note "a note; with semicolon";'),
                         {"gene_id": "g", "note": "a note; with semicolon"})

    def test_escaped_characters(self):
        self.assertEqual(parse_GTF2_tokens('gene_id "a%3Bb";'), {"gene_id": "a;b"})
        self.assertEqual(unescape_GTF2("x%2Cy"), "x,y")

    def test_duplicate_keys_catenated(self):
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            found = parse_GTF2_tokens('gene_id "g"; tag "a"; tag "b";')
        self.assertEqual(found, {"gene_id": "g", "tag": "a,b"})
        self.assertTrue(any(issubclass(X.category, FileFormatWarning) for X in w))

    def test_unpaired_token(self):
        self.assertRaises(ValueError, parse_GTF2_tokens, 'gene_id "g"; orphan')

    def test_missing_semicolon(self):
        self.assertRaises(ValueError, parse_GTF2_tokens, 'gene_id "g" transcript_id "t";')

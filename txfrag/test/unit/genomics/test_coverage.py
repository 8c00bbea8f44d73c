#!/usr/bin/env python
"""Tests for :py:mod:`txfrag.genomics.coverage`"""
import os
import shutil
import tempfile
import unittest

import numpy.testing as npt

from txfrag.genomics.alignments import AlignedPair
from txfrag.genomics.compatibility import TranscriptFragment
from txfrag.genomics.coverage import fragment_coverage, inverse_rle, pair_coverage, read_coverage, rle
from txfrag.genomics.roitools import GenomicSegment
from txfrag.test.common import make_pair, standard_reads, write_bam


class TestFragmentCoverage(unittest.TestCase):

    def test_counts(self):
        frags = [TranscriptFragment("tx", 1, 3), TranscriptFragment("tx", 2, 5), TranscriptFragment("tx", 5, 5)]
        npt.assert_array_equal(fragment_coverage(frags, 6), [1, 2, 2, 1, 2, 0])

    def test_empty(self):
        npt.assert_array_equal(fragment_coverage([], 4), [0, 0, 0, 0])

    def test_fragment_past_end_raises(self):
        self.assertRaises(ValueError, fragment_coverage, [TranscriptFragment("tx", 1, 7)], 6)


class TestPairCoverage(unittest.TestCase):

    def test_blocks_counted_gaps_not(self):
        pair = AlignedPair(*make_pair("p", 2, "2M3N2M", 8, "2M"))
        counts = pair_coverage([pair], GenomicSegment("chrA", 0, 12, "+"))
        npt.assert_array_equal(counts, [0, 0, 1, 1, 0, 0, 0, 1, 1, 1, 0, 0])

    def test_overlapping_mates_counted_once(self):
        pair = AlignedPair(*make_pair("p", 0, "4M", 2, "4M"))
        npt.assert_array_equal(pair_coverage([pair], GenomicSegment("chrA", 0, 8, "+")), [1, 1, 1, 1, 1, 1, 0, 0])

    def test_clipped_to_segment_and_reversed(self):
        pair = AlignedPair(*make_pair("p", 0, "4M", 10, "4M"))
        segment = GenomicSegment("chrA", 2, 6, "-")
        npt.assert_array_equal(pair_coverage([pair], segment), [1, 1, 0, 0])
        npt.assert_array_equal(pair_coverage([pair], segment, stranded=True), [0, 0, 1, 1])

    def test_read_coverage(self):
        tmpdir = tempfile.mkdtemp(prefix="txfrag_coverage")
        try:
            bamfile = write_bam(os.path.join(tmpdir, "reads.bam"), standard_reads())
            # both mates must lie in the fetched region to be paired
            segment = GenomicSegment("chrA", 599, 900, "-")
            counts = read_coverage(bamfile, segment, stranded=True)
            self.assertEqual(len(counts), 301)
            self.assertEqual(counts.sum(), 60)
            self.assertEqual(counts[-1], 0)
        finally:
            shutil.rmtree(tmpdir)


class TestRLE(unittest.TestCase):

    def test_rle(self):
        values, lengths = rle([0, 0, 1, 1, 1, 0])
        npt.assert_array_equal(values, [0, 1, 0])
        npt.assert_array_equal(lengths, [2, 3, 1])

    def test_empty(self):
        values, lengths = rle([])
        self.assertEqual(len(values), 0)
        self.assertEqual(len(lengths), 0)

    def test_inverse(self):
        data = [3, 3, 0, 1, 1, 1, 2]
        npt.assert_array_equal(inverse_rle(*rle(data)), data)

#!/usr/bin/env python
"""Tests for data structures defined in :py:mod:`txfrag.genomics.roitools`"""
import unittest

from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from txfrag.genomics.roitools import GenomicSegment, SegmentChain, Transcript, merge_segments, \
                                     sort_segmentchains_lexically
from txfrag.util.services.exceptions import MappingOutOfRange
from txfrag.test.common import get_test_transcripts


#===============================================================================
# INDEX: GenomicSegment
#===============================================================================

class TestGenomicSegment(unittest.TestCase):

    def test_invalid_strand_raises_value_error(self):
        self.assertRaises(ValueError, GenomicSegment, "chrA", 0, 10, "x")

    def test_negative_start_raises_value_error(self):
        self.assertRaises(ValueError, GenomicSegment, "chrA", -1, 10, "+")

    def test_end_before_start_raises_value_error(self):
        self.assertRaises(ValueError, GenomicSegment, "chrA", 10, 9, "+")

    def test_zero_length_allowed(self):
        self.assertEqual(len(GenomicSegment("chrA", 10, 10, "+")), 0)

    def test_str_from_str_roundtrip(self):
        seg = GenomicSegment("chrA", 5, 100, "-")
        self.assertEqual(str(seg), "chrA:5-100(-)")
        self.assertEqual(GenomicSegment.from_str(str(seg)), seg)

    def test_equality_and_hash(self):
        a = GenomicSegment("chrA", 5, 100, "+")
        b = GenomicSegment("chrA", 5, 100, "+")
        c = GenomicSegment("chrA", 5, 100, "-")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, c)
        self.assertEqual(len(set([a, b, c])), 2)

    def test_immutable(self):
        seg = GenomicSegment("chrA", 5, 100, "+")
        with self.assertRaises(AttributeError):
            seg.start = 10

    def test_ordering(self):
        segs = [GenomicSegment("chrB", 0, 10, "+"),
                GenomicSegment("chrA", 50, 60, "+"),
                GenomicSegment("chrA", 5, 10, "+")]
        self.assertEqual(sorted(segs), [segs[2], segs[1], segs[0]])

    def test_contains(self):
        outer = GenomicSegment("chrA", 10, 100, "+")
        self.assertTrue(outer.contains(GenomicSegment("chrA", 10, 100, "+")))
        self.assertTrue(GenomicSegment("chrA", 20, 30, "+") in outer)
        self.assertFalse(outer.contains(GenomicSegment("chrA", 5, 30, "+")))
        self.assertFalse(outer.contains(GenomicSegment("chrA", 20, 30, "-")))
        self.assertTrue(outer.contains(GenomicSegment("chrA", 20, 30, "-"), stranded=False))
        self.assertFalse(outer.contains(GenomicSegment("chrB", 20, 30, "+")))

    def test_overlaps(self):
        seg = GenomicSegment("chrA", 10, 100, "+")
        self.assertTrue(seg.overlaps(GenomicSegment("chrA", 99, 200, "+")))
        self.assertFalse(seg.overlaps(GenomicSegment("chrA", 100, 200, "+")))
        self.assertFalse(seg.overlaps(GenomicSegment("chrA", 50, 60, "-")))
        self.assertTrue(seg.overlaps(GenomicSegment("chrA", 50, 60, "-"), stranded=False))


#===============================================================================
# INDEX: SegmentChain
#===============================================================================

class TestSegmentChain(unittest.TestCase):

    def setUp(self):
        self.plus = SegmentChain(GenomicSegment("chrA", 300, 400, "+"),
                                 GenomicSegment("chrA", 100, 200, "+"),
                                 ID="plus")
        self.minus = SegmentChain(GenomicSegment("chrA", 100, 200, "-"),
                                  GenomicSegment("chrA", 300, 400, "-"),
                                  ID="minus")

    def test_mixed_chromosomes_raise_value_error(self):
        self.assertRaises(ValueError, SegmentChain,
                          GenomicSegment("chrA", 0, 10, "+"), GenomicSegment("chrB", 20, 30, "+"))

    def test_mixed_strands_raise_value_error(self):
        self.assertRaises(ValueError, SegmentChain,
                          GenomicSegment("chrA", 0, 10, "+"), GenomicSegment("chrA", 20, 30, "-"))

    def test_segments_sorted_and_merged(self):
        chain = SegmentChain(GenomicSegment("chrA", 50, 60, "+"),
                             GenomicSegment("chrA", 0, 10, "+"),
                             GenomicSegment("chrA", 10, 20, "+"),
                             GenomicSegment("chrA", 55, 70, "+"))
        self.assertEqual(list(chain), [GenomicSegment("chrA", 0, 20, "+"), GenomicSegment("chrA", 50, 70, "+")])
        self.assertEqual(len(chain), 2)
        self.assertEqual(chain.get_length(), 40)

    def test_empty(self):
        chain = SegmentChain()
        self.assertEqual(len(chain), 0)
        self.assertEqual(chain.get_length(), 0)
        self.assertIsNone(chain.spanning_segment)
        self.assertEqual(str(chain), "na")

    def test_spanning_segment(self):
        self.assertEqual(self.plus.spanning_segment, GenomicSegment("chrA", 100, 400, "+"))

    def test_junctions(self):
        self.assertEqual(self.plus.get_junctions(), [GenomicSegment("chrA", 200, 300, "+")])

    def test_get_name(self):
        self.assertEqual(self.plus.get_name(), "plus")
        chain = SegmentChain(GenomicSegment("chrA", 0, 10, "+"))
        self.assertEqual(chain.get_name(), "chrA:0-10(+)")

    def test_str_from_str_roundtrip(self):
        self.assertEqual(str(self.plus), "chrA:100-200^300-400(+)")
        self.assertEqual(SegmentChain.from_str(str(self.plus)), self.plus)
        self.assertEqual(len(SegmentChain.from_str("na")), 0)

    def test_segmentchain_coordinate_plus(self):
        self.assertEqual(self.plus.get_segmentchain_coordinate("chrA", 100, "+"), 0)
        self.assertEqual(self.plus.get_segmentchain_coordinate("chrA", 199, "+"), 99)
        self.assertEqual(self.plus.get_segmentchain_coordinate("chrA", 300, "+"), 100)
        self.assertEqual(self.plus.get_segmentchain_coordinate("chrA", 399, "+"), 199)

    def test_segmentchain_coordinate_minus(self):
        self.assertEqual(self.minus.get_segmentchain_coordinate("chrA", 399, "-"), 0)
        self.assertEqual(self.minus.get_segmentchain_coordinate("chrA", 300, "-"), 99)
        self.assertEqual(self.minus.get_segmentchain_coordinate("chrA", 199, "-"), 100)
        self.assertEqual(self.minus.get_segmentchain_coordinate("chrA", 100, "-"), 199)
        self.assertEqual(self.minus.get_segmentchain_coordinate("chrA", 100, "-", stranded=False), 0)

    def test_segmentchain_coordinate_out_of_range(self):
        for x in (99, 200, 250, 299, 400, 1000):
            self.assertRaises(MappingOutOfRange, self.plus.get_segmentchain_coordinate, "chrA", x, "+")

    def test_segmentchain_coordinate_wrong_chrom(self):
        self.assertRaises(MappingOutOfRange, self.plus.get_segmentchain_coordinate, "chrB", 150, "+")

    def test_segmentchain_coordinate_wrong_strand(self):
        self.assertRaises(ValueError, self.plus.get_segmentchain_coordinate, "chrA", 150, "-")

    def test_mapping_out_of_range_is_key_error(self):
        with self.assertRaises(KeyError) as ctx:
            self.plus.get_segmentchain_coordinate("chrA", 250, "+")
        self.assertIn("chrA:250(+)", str(ctx.exception))
        self.assertIn("plus", str(ctx.exception))

    def test_genomic_coordinate_inverts_segmentchain_coordinate(self):
        for chain in (self.plus, self.minus):
            for x in range(chain.get_length()):
                chrom, pos, strand = chain.get_genomic_coordinate(x)
                self.assertEqual(chain.get_segmentchain_coordinate(chrom, pos, strand), x)

    def test_genomic_coordinate_out_of_bounds(self):
        self.assertRaises(IndexError, self.plus.get_genomic_coordinate, -1)
        self.assertRaises(IndexError, self.plus.get_genomic_coordinate, 200)

    def test_get_sequence(self):
        seq = "".join("ACGT"[i % 4] for i in range(500))
        expected = seq[100:200] + seq[300:400]
        for genome in ({"chrA": seq}, {"chrA": Seq(seq)}, {"chrA": SeqRecord(Seq(seq))}):
            self.assertEqual(self.plus.get_sequence(genome), expected)
            self.assertEqual(self.minus.get_sequence(genome), str(Seq(expected).reverse_complement()))
            self.assertEqual(self.minus.get_sequence(genome, stranded=False), expected)

    def test_equality_ignores_attributes(self):
        other = SegmentChain(*self.plus.segments, ID="other")
        self.assertEqual(other, self.plus)
        self.assertEqual(hash(other), hash(self.plus))


#===============================================================================
# INDEX: Transcript
#===============================================================================

class TestTranscript(unittest.TestCase):

    def test_overlapping_exons_raise_value_error(self):
        self.assertRaises(ValueError, Transcript,
                          GenomicSegment("chrA", 0, 100, "+"), GenomicSegment("chrA", 50, 150, "+"),
                          transcript_id="bad")

    def test_abutting_exons_merge(self):
        tx = Transcript(GenomicSegment("chrA", 0, 100, "+"), GenomicSegment("chrA", 100, 150, "+"))
        self.assertEqual(len(tx), 1)
        self.assertEqual(tx.get_length(), 150)
        self.assertEqual(tx.get_introns(), [])

    def test_attributes(self):
        txdict = get_test_transcripts()
        self.assertEqual(txdict["tx1"].transcript_id, "tx1")
        self.assertEqual(txdict["tx1"].gene_id, "g1")
        self.assertEqual(txdict["tx1"].gene_name, "GENE1")
        self.assertEqual(txdict["tx3"].gene_name, "g2")
        self.assertEqual(txdict["tx1"].attr["type"], "mRNA")

    def test_introns(self):
        tx = get_test_transcripts()["tx2"]
        self.assertEqual(tx.get_introns(), [GenomicSegment("chrA", 200, 349, "+")])

    def test_first_and_last_exonic_bases(self):
        for tx in get_test_transcripts().values():
            length = tx.get_length()
            first = tx.spanning_segment.start if tx.strand == "+" else tx.spanning_segment.end - 1
            last = tx.spanning_segment.end - 1 if tx.strand == "+" else tx.spanning_segment.start
            self.assertEqual(tx.get_segmentchain_coordinate(tx.chrom, first, tx.strand), 0)
            self.assertEqual(tx.get_segmentchain_coordinate(tx.chrom, last, tx.strand), length - 1)


class TestHelpers(unittest.TestCase):

    def test_merge_segments(self):
        segs = [GenomicSegment("chrA", 10, 20, "+"),
                GenomicSegment("chrA", 0, 5, "+"),
                GenomicSegment("chrA", 15, 30, "+"),
                GenomicSegment("chrA", 30, 35, "+")]
        self.assertEqual(merge_segments(segs), [GenomicSegment("chrA", 0, 5, "+"),
                                                GenomicSegment("chrA", 10, 35, "+")])

    def test_sort_segmentchains_lexically(self):
        txdict = get_test_transcripts()
        ordered = sorted([txdict["tx3"], txdict["tx2"], txdict["tx1"]], key=sort_segmentchains_lexically)
        # equal spans sort shorter chains first
        self.assertEqual([X.get_name() for X in ordered], ["tx2", "tx1", "tx3"])

#!/usr/bin/env python
"""Tests for :py:mod:`txfrag.readers.gff`"""
import unittest
import warnings
from io import StringIO

from txfrag.genomics.roitools import GenomicSegment
from txfrag.readers.gff import GTF2_Reader, GTF2_TranscriptAssembler
from txfrag.util.services.exceptions import DataWarning, MalformedFileError, reset_filters
from txfrag.test.common import TEST_GTF, get_test_transcripts, sup_data

BAD_STRAND_GTF = "\n".join([
    "chrA\ttest\texon\t100\t200\t.\t+\t.\tgene_id \"g\"; transcript_id \"mixed\";",
    "chrA\ttest\texon\t300\t400\t.\t-\t.\tgene_id \"g\"; transcript_id \"mixed\";",
    "chrA\ttest\texon\t500\t600\t.\t+\t.\tgene_id \"g\"; transcript_id \"overlap\";",
    "chrA\ttest\texon\t550\t650\t.\t+\t.\tgene_id \"g\"; transcript_id \"overlap\";",
    "chrA\ttest\texon\t700\t800\t.\t+\t.\tgene_id \"g\"; transcript_id \"good\";",
    "",
])


class TestGTF2Reader(unittest.TestCase):

    def test_features(self):
        reader = GTF2_Reader(StringIO(TEST_GTF))
        features = list(reader)
        self.assertEqual(len(features), 8)
        first = features[0]
        self.assertEqual(first.spanning_segment, GenomicSegment("chrA", 99, 200, "+"))
        self.assertEqual(first.attr["type"], "exon")
        self.assertEqual(first.attr["transcript_id"], "tx1")
        self.assertEqual(first.attr["source"], "test")
        self.assertEqual(first.attr["exon_number"], "1")

    def test_metadata(self):
        reader = GTF2_Reader(StringIO(TEST_GTF))
        list(reader)
        self.assertEqual(reader.metadata["gff-version"], "2")

    def test_too_few_columns(self):
        reader = GTF2_Reader(StringIO("chrA\ttest\texon\t100\t200\n"))
        self.assertRaises(MalformedFileError, list, reader)

    def test_bad_coordinates(self):
        reader = GTF2_Reader(StringIO("chrA\ttest\texon\t300\t200\t.\t+\t.\tgene_id \"g\";\n"))
        with self.assertRaises(MalformedFileError) as ctx:
            list(reader)
        self.assertIn("line 1", str(ctx.exception))


class TestGTF2TranscriptAssembler(unittest.TestCase):

    def setUp(self):
        reset_filters()

    def test_assemble(self):
        transcripts = list(GTF2_TranscriptAssembler(StringIO(TEST_GTF)))
        expected = get_test_transcripts()
        self.assertEqual([X.get_name() for X in transcripts], ["tx2", "tx1", "tx3"])
        for tx in transcripts:
            self.assertEqual(tx, expected[tx.get_name()])
            self.assertEqual(tx.attr["type"], "mRNA")
            self.assertNotIn("exon_number", tx.attr)

    def test_common_attributes_kept(self):
        tx = {X.get_name(): X for X in GTF2_TranscriptAssembler(StringIO(TEST_GTF))}["tx1"]
        self.assertEqual(tx.attr["gene_id"], "g1")
        self.assertEqual(tx.attr["gene_name"], "GENE1")

    def test_iterable_twice(self):
        assembler = GTF2_TranscriptAssembler(StringIO(TEST_GTF))
        self.assertEqual(len(list(assembler)), len(list(assembler)))

    def test_multiple_streams(self):
        assembler = GTF2_TranscriptAssembler(StringIO(TEST_GTF), StringIO(BAD_STRAND_GTF.split("\n")[4] + "\n"))
        with sup_data():
            names = sorted(X.get_name() for X in assembler)
        self.assertEqual(names, ["good", "tx1", "tx2", "tx3"])

    def test_rejected(self):
        assembler = GTF2_TranscriptAssembler(StringIO(BAD_STRAND_GTF))
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            transcripts = list(assembler)

        self.assertEqual([X.get_name() for X in transcripts], ["good"])
        self.assertEqual(sorted(assembler.rejected), ["mixed", "overlap"])
        messages = [str(X.message) for X in w if issubclass(X.category, DataWarning)]
        self.assertTrue(any("multiple chromosomes or strands" in X for X in messages))
        self.assertTrue(any("exons overlap" in X for X in messages))

    def test_cds_only_transcript(self):
        gtf = "chrA\ttest\tCDS\t100\t200\t.\t+\t0\tgene_id \"g\"; transcript_id \"cds_only\";\n"
        transcripts = list(GTF2_TranscriptAssembler(StringIO(gtf)))
        self.assertEqual(transcripts[0].spanning_segment, GenomicSegment("chrA", 99, 200, "+"))

    def test_missing_transcript_id_warns(self):
        gtf = "chrA\ttest\texon\t100\t200\t.\t+\t.\tgene_id \"g\";\n"
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            self.assertEqual(list(GTF2_TranscriptAssembler(StringIO(gtf))), [])
        self.assertTrue(any("no transcript_id" in str(X.message) for X in w))

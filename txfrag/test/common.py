#!/usr/bin/env python
"""Helpers shared by tests: warning suppression, fake alignment records,
and builders for small annotation, sequence, and `BAM`_ files.
"""
import os
import re
import warnings
from contextlib import contextmanager

import pysam

from txfrag.genomics.roitools import GenomicSegment, Transcript
from txfrag.util.services.exceptions import DataWarning

#===============================================================================
# Warnings suppression
#
# Use within bodies of test functions as e.g. `with sup_data(): foo`
#===============================================================================

@contextmanager
def sup_data():
    """Silence |DataWarnings| within a `with` block"""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DataWarning)
        yield


#===============================================================================
# INDEX: reference data
#===============================================================================

CHROM_LENGTH = 1000

# tx1 and tx2 share a donor, but use different acceptors
# tx3 is on the minus strand
TEST_GTF = "\n".join([
    "##gff-version 2",
    "# a comment",
    "chrA\ttest\texon\t100\t200\t.\t+\t.\tgene_id \"g1\"; gene_name \"GENE1\"; transcript_id \"tx1\"; exon_number \"1\";",
    "chrA\ttest\texon\t300\t400\t.\t+\t.\tgene_id \"g1\"; gene_name \"GENE1\"; transcript_id \"tx1\"; exon_number \"2\";",
    "chrA\ttest\tCDS\t150\t200\t.\t+\t0\tgene_id \"g1\"; gene_name \"GENE1\"; transcript_id \"tx1\";",
    "chrA\ttest\texon\t100\t200\t.\t+\t.\tgene_id \"g1\"; gene_name \"GENE1\"; transcript_id \"tx2\"; exon_number \"1\";",
    "chrA\ttest\texon\t350\t400\t.\t+\t.\tgene_id \"g1\"; gene_name \"GENE1\"; transcript_id \"tx2\"; exon_number \"2\";",
    "chrA\ttest\texon\t800\t900\t.\t-\t.\tgene_id \"g2\"; transcript_id \"tx3\"; exon_number \"1\";",
    "chrA\ttest\texon\t600\t700\t.\t-\t.\tgene_id \"g2\"; transcript_id \"tx3\"; exon_number \"2\";",
    "chrA\ttest\tgene\t100\t400\t.\t+\t.\tgene_id \"g1\";",
    "",
])


def get_test_transcripts():
    """Return the transcripts described in :data:`TEST_GTF`, keyed by ID"""
    return {
        "tx1": Transcript(GenomicSegment("chrA", 99, 200, "+"), GenomicSegment("chrA", 299, 400, "+"),
                          transcript_id="tx1", gene_id="g1", gene_name="GENE1"),
        "tx2": Transcript(GenomicSegment("chrA", 99, 200, "+"), GenomicSegment("chrA", 349, 400, "+"),
                          transcript_id="tx2", gene_id="g1", gene_name="GENE1"),
        "tx3": Transcript(GenomicSegment("chrA", 599, 700, "-"), GenomicSegment("chrA", 799, 900, "-"),
                          transcript_id="tx3", gene_id="g2"),
    }


def get_test_sequence():
    """Return a deterministic, non-repetitive sequence for chrA"""
    bases = "ACGT"
    return "".join(bases[(i * 7 + i // 5) % 4] for i in range(CHROM_LENGTH))


#===============================================================================
# INDEX: fake alignment records
#===============================================================================

_cigar_pat = re.compile(r"([0-9]+)([MIDNSHP=X])")
_CIGAR_OPS = "MIDNSHP=X"


def parse_cigar(cigar):
    """Convert a CIGAR string to a list of (operation, length) tuples"""
    return [(_CIGAR_OPS.index(op), int(length)) for length, op in _cigar_pat.findall(cigar)]


class FakeRead(object):
    """Stand-in for :class:`pysam.AlignedSegment`, with the attributes
    used in pairing. Flags are given as keyword arguments.
    """

    def __init__(self, query_name, reference_name, reference_start, cigar,
                 next_reference_start=None, is_read1=True, is_reverse=False,
                 mate_is_reverse=False, **flags):
        self.query_name = query_name
        self.reference_name = reference_name
        self.reference_start = reference_start
        self.cigartuples = parse_cigar(cigar)
        self.next_reference_start = next_reference_start
        self.is_read1 = is_read1
        self.is_read2 = not is_read1
        self.is_reverse = is_reverse
        self.mate_is_reverse = mate_is_reverse
        self.is_paired = flags.get("is_paired", True)
        self.is_unmapped = flags.get("is_unmapped", False)
        self.mate_is_unmapped = flags.get("mate_is_unmapped", False)
        self.is_secondary = flags.get("is_secondary", False)
        self.is_supplementary = flags.get("is_supplementary", False)
        self.is_qcfail = flags.get("is_qcfail", False)
        self.is_duplicate = flags.get("is_duplicate", False)

    @property
    def query_length(self):
        return sum(length for op, length in self.cigartuples if op in (0, 1, 4, 7, 8))

    @property
    def flag(self):
        flag = 0
        for bit, value in ((0x1, self.is_paired), (0x4, self.is_unmapped), (0x8, self.mate_is_unmapped),
                           (0x10, self.is_reverse), (0x20, self.mate_is_reverse),
                           (0x40, self.is_read1), (0x80, self.is_read2),
                           (0x100, self.is_secondary), (0x200, self.is_qcfail),
                           (0x400, self.is_duplicate), (0x800, self.is_supplementary)):
            if value:
                flag |= bit
        return flag


def make_pair(name, start1, cigar1, start2, cigar2, chrom="chrA", reverse=False, **flags):
    """Make two |FakeReads| that are mates of each other

    Parameters
    ----------
    name : str
        Query name

    start1, start2 : int
        0-indexed leftmost aligned positions of read 1 and read 2

    cigar1, cigar2 : str
        CIGAR strings of read 1 and read 2

    reverse : bool, optional
        If `True`, read 1 is on the reverse strand, and read 2 on the forward

    Returns
    -------
    list
        Read 1 and read 2
    """
    read1 = FakeRead(name, chrom, start1, cigar1, next_reference_start=start2, is_read1=True,
                     is_reverse=reverse, mate_is_reverse=not reverse, **flags)
    read2 = FakeRead(name, chrom, start2, cigar2, next_reference_start=start1, is_read1=False,
                     is_reverse=not reverse, mate_is_reverse=reverse, **flags)
    return [read1, read2]


#===============================================================================
# INDEX: file builders
#===============================================================================

def write_bam(filename, reads, references=(("chrA", CHROM_LENGTH),), index=True):
    """Write |FakeReads| to a coordinate-sorted `BAM`_ file

    Parameters
    ----------
    filename : str
        Output filename

    reads : iterable of |FakeRead|

    references : sequence of (str, int), optional
        Reference names and lengths for the header

    index : bool, optional
        If `True` (default), index the file with :func:`pysam.index`

    Returns
    -------
    str
        `filename`
    """
    ref_ids = {K: n for n, (K, _) in enumerate(references)}
    header = {"HD": {"VN": "1.0", "SO": "coordinate"},
              "SQ": [{"SN": K, "LN": V} for K, V in references]}

    with pysam.AlignmentFile(filename, "wb", header=header) as fout:
        for read in sorted(reads, key=lambda x: (ref_ids[x.reference_name], x.reference_start)):
            seg = pysam.AlignedSegment(fout.header)
            seg.query_name = read.query_name
            seg.query_sequence = "A" * read.query_length
            seg.query_qualities = pysam.qualitystring_to_array("I" * read.query_length)
            seg.flag = read.flag
            seg.reference_id = ref_ids[read.reference_name]
            seg.reference_start = read.reference_start
            seg.mapping_quality = 60
            seg.cigartuples = read.cigartuples
            seg.next_reference_id = ref_ids[read.reference_name]
            seg.next_reference_start = read.next_reference_start
            fout.write(seg)

    if index == True:
        pysam.index(filename)

    return filename


def write_text(filename, text):
    """Write `text` to `filename`, and return `filename`"""
    with open(filename, "w") as fh:
        fh.write(text)
    return filename


def write_fasta(filename, sequences):
    """Write a dictionary of sequences to a `FASTA`_ file"""
    with open(filename, "w") as fh:
        for name, seq in sequences.items():
            fh.write(">%s\n" % name)
            for i in range(0, len(seq), 60):
                fh.write(seq[i:i + 60] + "\n")
    return filename


def standard_reads():
    """Read pairs used across tests, relative to :func:`get_test_transcripts`

    Returns
    -------
    list of |FakeRead|
        Records, in no particular order
    """
    reads = []
    # ungapped, spans intron of tx1: compatible with tx1 and tx2
    reads += make_pair("ungapped", 149, "21M", 349, "21M")
    # spliced over tx1 intron: compatible with tx1 only
    reads += make_pair("spliced", 180, "20M99N10M", 330, "20M")
    # junction matches no intron
    reads += make_pair("badjunc", 180, "20M50N10M", 330, "20M")
    # read 2 ends in tx1 intron: compatible with tx1 by extent, but cannot be mapped
    reads += make_pair("intronic", 150, "20M", 250, "20M")
    # read 1 runs from exon 1 of tx1 and tx2 into the intron without a junction
    reads += make_pair("overhang", 190, "20M", 349, "21M")
    # minus-strand transcript
    reads += make_pair("minus", 620, "30M", 820, "30M", reverse=True)
    # orphan: mate outside of file
    reads += make_pair("orphan", 160, "20M", 300, "20M")[:1]
    # duplicate, filtered
    reads += make_pair("dup", 160, "20M", 360, "20M", is_duplicate=True)
    return reads


def path_in(dirname, name):
    return os.path.join(dirname, name)

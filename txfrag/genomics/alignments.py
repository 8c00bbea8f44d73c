#!/usr/bin/env python
"""Read paired-end alignments from sorted, indexed `BAM`_ files and assemble
them into |AlignedPair| objects, each describing one sequenced fragment.

Important classes & functions
-----------------------------
|AlignedPair|
    Two mates of a read pair, their aligned reference blocks, and the
    splice junctions implied by skipped regions (``N`` operations) within
    each mate

|ReadReport|
    Counts of pairs, orphans, filtered records, and ambiguous pairings
    seen during one pass over an alignment file

:func:`fetch_pairs`
    Yield |AlignedPairs| overlapping a region of a `BAM`_ file

:func:`pair_reads`
    Yield |AlignedPairs| from any iterable of :class:`pysam.AlignedSegment`
    like objects

:func:`blocks_from_cigar`
    Convert a CIGAR string into aligned reference blocks


Pairing rules
-------------
Records that are unmapped, whose mate is unmapped, that are secondary,
supplementary, QC-failed, duplicates, or not paired are skipped. Remaining
records are grouped by query name:

  - a name with exactly one read 1 and one read 2 on the same reference,
    whose mate positions agree, forms a pair

  - a name with a single record is an orphan. Its mate falls outside
    the region, or was skipped

  - any other combination raises |AmbiguousPairing|, which is handled
    according to the `errors` policy (see :func:`fetch_pairs`)
"""
from collections import OrderedDict

import pysam

from txfrag.genomics.roitools import GenomicSegment, SegmentChain, merge_segments
from txfrag.util.services.exceptions import AmbiguousPairing, MissingIndexError, \
                                            check_error_policy, handle_error

#===============================================================================
# INDEX: CIGAR operations
#===============================================================================

CIGAR_MATCH = 0
CIGAR_INS = 1
CIGAR_DEL = 2
CIGAR_REF_SKIP = 3
CIGAR_SOFT_CLIP = 4
CIGAR_HARD_CLIP = 5
CIGAR_PAD = 6
CIGAR_EQUAL = 7
CIGAR_DIFF = 8

_EXTENDS_BLOCK = (CIGAR_MATCH, CIGAR_DEL, CIGAR_EQUAL, CIGAR_DIFF)


def blocks_from_cigar(chrom, reference_start, cigartuples, strand="."):
    """Convert CIGAR operations into aligned reference blocks

    Matches (``M``, ``=``, ``X``) and deletions (``D``) extend the current
    block. Skipped regions (``N``) end the current block, and the next block
    begins after the skipped region. Insertions, clipping, and padding
    consume no reference sequence.

    Parameters
    ----------
    chrom : str
        Reference name

    reference_start : int
        0-indexed leftmost aligned position

    cigartuples : list of (int, int)
        CIGAR operations and lengths, as from :attr:`pysam.AlignedSegment.cigartuples`

    strand : str, optional
        Strand given to blocks (Default: `'.'`)

    Returns
    -------
    list of |GenomicSegment|
    """
    if cigartuples is None:
        raise ValueError("Alignment at %s:%s has no CIGAR string." % (chrom, reference_start))

    blocks = []
    pos = block_start = reference_start
    for op, length in cigartuples:
        if op in _EXTENDS_BLOCK:
            pos += length
        elif op == CIGAR_REF_SKIP:
            if pos > block_start:
                blocks.append(GenomicSegment(chrom, block_start, pos, strand))
            pos += length
            block_start = pos

    if pos > block_start:
        blocks.append(GenomicSegment(chrom, block_start, pos, strand))

    return blocks


#===============================================================================
# INDEX: AlignedPair
#===============================================================================

class AlignedPair(object):
    """Two mates of a read pair, representing one sequenced fragment

    Parameters
    ----------
    read1 : :class:`pysam.AlignedSegment`
        First mate. Any object with `reference_name`, `reference_start`,
        `cigartuples`, `is_reverse`, and `query_name` will do

    read2 : :class:`pysam.AlignedSegment`
        Second mate

    Attributes
    ----------
    name : str
        Query name of the pair

    chrom : str
        Reference name

    strand : str
        Strand of the fragment, taken from the orientation of `read1`

    blocks : tuple of |GenomicSegment|
        Merged aligned blocks of both mates, left to right

    junctions : tuple of |GenomicSegment|
        Skipped regions within either mate, left to right. The unsequenced
        gap between mates is never a junction

    start : int
        0-indexed leftmost aligned position of the fragment

    end : int
        0-indexed, half-open rightmost aligned position of the fragment
    """

    def __init__(self, read1, read2):
        if read1.reference_name != read2.reference_name:
            raise ValueError("Mates of '%s' align to different references." % read1.query_name)

        self.read1 = read1
        self.read2 = read2
        self.name = read1.query_name
        self.chrom = read1.reference_name
        self.strand = "-" if read1.is_reverse else "+"

        mate_blocks = [blocks_from_cigar(self.chrom, X.reference_start, X.cigartuples, self.strand)
                       for X in (read1, read2)]

        junctions = set()
        for blocks in mate_blocks:
            for seg1, seg2 in zip(blocks[:-1], blocks[1:]):
                junctions.add(GenomicSegment(self.chrom, seg1.end, seg2.start, self.strand))

        self.junctions = tuple(sorted(junctions))
        self.blocks = tuple(merge_segments(mate_blocks[0] + mate_blocks[1]))
        self.start = self.blocks[0].start
        self.end = self.blocks[-1].end

    def __repr__(self):
        return "<%s %s %s:%s-%s(%s) junctions=%s>" % (self.__class__.__name__, self.name, self.chrom,
                                                      self.start, self.end, self.strand,
                                                      len(self.junctions))

    def as_segmentchain(self):
        """Return the aligned blocks of the pair as a |SegmentChain|"""
        return SegmentChain(*self.blocks, ID=self.name)


#===============================================================================
# INDEX: Reporting
#===============================================================================

class ReadReport(object):
    """Tally of records seen during one pass over an alignment source

    Attributes
    ----------
    pairs : int
        Number of pairs yielded

    orphans : int
        Number of records whose mate was not found in the region

    filtered : int
        Number of records skipped by flag filters

    antisense : int
        Number of otherwise valid pairs dropped by strand filtering

    ambiguous : list of |AmbiguousPairing|
        Pairings that could not be resolved
    """

    def __init__(self):
        self.pairs = 0
        self.orphans = 0
        self.filtered = 0
        self.antisense = 0
        self.ambiguous = []

    def __repr__(self):
        return "<%s pairs=%s orphans=%s filtered=%s antisense=%s ambiguous=%s>" % (
            self.__class__.__name__, self.pairs, self.orphans, self.filtered,
            self.antisense, len(self.ambiguous))

    def as_dict(self):
        """Return counts as an ordered dictionary"""
        return OrderedDict([
            ("pairs", self.pairs),
            ("orphans", self.orphans),
            ("filtered", self.filtered),
            ("antisense", self.antisense),
            ("ambiguous", len(self.ambiguous)),
        ])


#===============================================================================
# INDEX: Pairing
#===============================================================================

def _is_usable(read):
    return read.is_paired \
           and not read.is_unmapped \
           and not read.mate_is_unmapped \
           and not read.is_secondary \
           and not read.is_supplementary \
           and not read.is_qcfail \
           and not read.is_duplicate


def _resolve(name, records):
    """Pair the records sharing query name `name`, or raise |AmbiguousPairing|"""
    read1s = [X for X in records if X.is_read1]
    read2s = [X for X in records if X.is_read2]
    if len(read1s) != 1 or len(read2s) != 1 or len(records) != 2:
        raise AmbiguousPairing(name, "found %s records (%s read 1, %s read 2)." % (
            len(records), len(read1s), len(read2s)))

    read1, read2 = read1s[0], read2s[0]
    if read1.reference_name != read2.reference_name:
        raise AmbiguousPairing(name, "mates align to different references (%s, %s)." % (
            read1.reference_name, read2.reference_name))

    if read1.next_reference_start != read2.reference_start \
       or read2.next_reference_start != read1.reference_start:
        raise AmbiguousPairing(name, "mate positions disagree (%s/%s vs %s/%s)." % (
            read1.reference_start, read1.next_reference_start,
            read2.reference_start, read2.next_reference_start))

    return AlignedPair(read1, read2)


def pair_reads(reads, strand=None, errors="warn", report=None):
    """Assemble read records into |AlignedPairs|

    All records are read before any pair is yielded, because a third record
    with the same name makes a pairing ambiguous. Pairs are yielded in the
    order in which their second mate was encountered.

    Parameters
    ----------
    reads : iterable of :class:`pysam.AlignedSegment`
        Alignment records

    strand : str or None, optional
        If `'+'` or `'-'`, only yield pairs on this strand. `None` or
        `'.'` yields pairs on both strands

    errors : str, optional
        Policy for |AmbiguousPairing|: `'warn'` (default) to skip the pairing
        and issue a |DataWarning|, `'ignore'` to skip it silently, or
        `'raise'` to raise it. Skipped pairings are always recorded on `report`

    report : |ReadReport| or None, optional
        Report to update. If `None`, a new one is created and discarded

    Yields
    ------
    |AlignedPair|
    """
    check_error_policy(errors)
    if report is None:
        report = ReadReport()

    groups = OrderedDict()
    for read in reads:
        if not _is_usable(read):
            report.filtered += 1
            continue

        name = read.query_name
        records = groups.pop(name, [])
        records.append(read)
        # re-insert so that groups stay ordered by their most recent record
        groups[name] = records

    for name, records in groups.items():
        if len(records) == 1:
            report.orphans += 1
            continue

        try:
            pair = _resolve(name, records)
        except AmbiguousPairing as exc:
            report.ambiguous.append(exc)
            handle_error(exc, errors, stacklevel=3)
            continue

        if strand in ("+", "-") and pair.strand != strand:
            report.antisense += 1
            continue

        report.pairs += 1
        yield pair


#===============================================================================
# INDEX: BAM access
#===============================================================================

def check_index(filename):
    """Raise |MissingIndexError| unless `filename` has a position index

    Parameters
    ----------
    filename : str
        Path to a coordinate-sorted `BAM`_ file
    """
    with pysam.AlignmentFile(filename, "rb") as bam:
        if not bam.has_index():
            raise MissingIndexError(filename)


def fetch_pairs(bamfile, segment, stranded=False, errors="warn", report=None):
    """Yield |AlignedPairs| with at least one mate overlapping `segment`

    The index is checked when this function is called, before any region
    is fetched. The file is opened when iteration begins, and closed when
    iteration ends or raises.

    Parameters
    ----------
    bamfile : str
        Path to a coordinate-sorted, indexed `BAM`_ file

    segment : |GenomicSegment|
        Region of interest

    stranded : bool, optional
        If `True`, only yield pairs whose strand matches `segment.strand`
        (Default: `False`). Ignored if `segment` is unstranded


    errors : str, optional
        Policy for |AmbiguousPairing| (see :func:`pair_reads`)

    report : |ReadReport| or None, optional
        Report to update

    Returns
    -------
    generator of |AlignedPair|

    Raises
    ------
    MissingIndexError
        If `bamfile` has no index
    """
    check_error_policy(errors)
    check_index(bamfile)
    strand = segment.strand if stranded == True else None
    return _fetch_pairs(bamfile, segment, strand, errors, report)


def _fetch_pairs(bamfile, segment, strand, errors, report):
    with pysam.AlignmentFile(bamfile, "rb") as bam:
        if segment.chrom not in bam.references:
            return

        reads = bam.fetch(segment.chrom, segment.start, segment.end)
        for pair in pair_reads(reads, strand=strand, errors=errors, report=report):
            yield pair

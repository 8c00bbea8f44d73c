#!/usr/bin/env python
"""This module defines value types that describe regions of interest in a genome,
and convert coordinates between genomic space and the spliced space of a
discontinuous feature.


Important classes
-----------------
|GenomicSegment|
    A single continuous region of a genome, specified by a chromosome name,
    a 0-indexed start coordinate, a half-open end coordinate, and a strand.
    |GenomicSegment| is immutable, hashable, and validated at construction.

|SegmentChain|
    An ordered set of |GenomicSegments| on one chromosome and strand,
    modeling discontinuous features such as spliced alignments. Abutting or
    overlapping segments are merged into blocks. |SegmentChain| converts
    coordinates between the genome and its own spliced space, and fetches
    spliced sequence.

|Transcript|
    Subclass of |SegmentChain| whose segments are exons. Exons may abut, but
    may not overlap. Carries `transcript_id`, `gene_id`, and `gene_name`.


Coordinates
-----------
All genomic coordinates are 0-indexed and half-open, in keeping with Python
conventions. Coordinates in the spliced space of a |SegmentChain| are also
0-indexed, and, if `stranded` is `True`, run from the 5' to the 3' end of the
chain. For reverse-strand chains this means position 0 corresponds to the
rightmost genomic position.

Examples
--------
Map a genomic position into transcript space and back::

    >>> tx = Transcript(GenomicSegment("chrA",99,200,"+"),
    >>>                 GenomicSegment("chrA",299,400,"+"),
    >>>                 transcript_id="tx1")
    >>> tx.get_segmentchain_coordinate("chrA",369,"+")
    171
    >>> tx.get_genomic_coordinate(171)
    ('chrA', 369, '+')
"""
import re
import bisect

import numpy
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from txfrag.util.services.exceptions import MappingOutOfRange

segpat = re.compile(r"([^:]*):([0-9]+)-([0-9]+)\(([+-.])\)")
chainpat = re.compile(r"([^:]*):([^(]+)\(([+-.])\)")

STRANDS = ("+", "-", ".")


#===============================================================================
# INDEX: helper functions
#===============================================================================

def sort_segments_lexically(seg):
    """Key function to sort |GenomicSegments| lexically by chromosome,
    start, end, and strand
    """
    return (seg.chrom, seg.start, seg.end, seg.strand)


def sort_segmentchains_lexically(chain):
    """Key function to sort |SegmentChains| lexically by genomic position,
    then by length and name

    Parameters
    ----------
    chain : |SegmentChain|

    Returns
    -------
    tuple
    """
    if len(chain) == 0:
        return ("", -1, -1, "", 0, chain.get_name())
    span = chain.spanning_segment
    return (span.chrom, span.start, span.end, span.strand, chain.get_length(), chain.get_name())


def merge_segments(segments):
    """Sort `segments` and merge any that overlap or abut

    Parameters
    ----------
    segments : iterable of |GenomicSegment|
        Segments on one chromosome and strand

    Returns
    -------
    list of |GenomicSegment|
    """
    merged = []
    for seg in sorted(segments, key=sort_segments_lexically):
        if len(merged) > 0 and seg.start <= merged[-1].end:
            last = merged[-1]
            if seg.end > last.end:
                merged[-1] = GenomicSegment(last.chrom, last.start, seg.end, last.strand)
        else:
            merged.append(seg)

    return merged


#===============================================================================
# INDEX: GenomicSegment
#===============================================================================

class GenomicSegment(object):
    """A continuous segment of the genome, defined by a chromosome name,
    a start coordinate, and end coordinate, and a strand.

    |GenomicSegments| are immutable and hashable.

    Parameters
    ----------
    chrom : str
        Chromosome name

    start : int
        0-indexed, leftmost coordinate of feature

    end : int
        0-indexed, half-open rightmost coordinate of feature.
        Must be >= `start`

    strand : str
        Chromosome strand (`'+'`, `'-'`, or `'.'`)

    Raises
    ------
    ValueError
        If `strand` is invalid, if `start` is negative, or if `end` < `start`
    """

    __slots__ = ("_chrom", "_start", "_end", "_strand")

    def __init__(self, chrom, start, end, strand):
        if strand not in STRANDS:
            raise ValueError("Strand must be one of '+', '-', or '.'. Got '%s'." % strand)
        start = int(start)
        end = int(end)
        if start < 0:
            raise ValueError("GenomicSegment start must be >= 0. Got %s." % start)
        if end < start:
            raise ValueError("GenomicSegment end (%s) must be >= start (%s)." % (end, start))

        self._chrom = chrom
        self._start = start
        self._end = end
        self._strand = strand

    @property
    def chrom(self):
        return self._chrom

    @property
    def start(self):
        return self._start

    @property
    def end(self):
        return self._end

    @property
    def strand(self):
        return self._strand

    def __repr__(self):
        return "<%s %s:%s-%s strand='%s'>" % (self.__class__.__name__, self.chrom,
                                              self.start, self.end, self.strand)

    def __str__(self):
        return "%s:%s-%s(%s)" % (self.chrom, self.start, self.end, self.strand)

    @staticmethod
    def from_str(inp):
        """Construct a |GenomicSegment| from its ``str()`` representation

        Parameters
        ----------
        inp : str
            String representation of |GenomicSegment| as `chrom:start-end(strand)`
            where `start` and `end` are in 0-indexed, half-open coordinates

        Returns
        -------
        |GenomicSegment|
        """
        match = segpat.search(inp)
        if match is None:
            raise ValueError("Could not parse '%s' as a GenomicSegment." % inp)
        chrom, start, end, strand = match.groups()
        return GenomicSegment(chrom, int(start), int(end), strand)

    def _key(self):
        return (self._chrom, self._start, self._end, self._strand)

    def __len__(self):
        """Length, in nucleotides, of |GenomicSegment|"""
        return self._end - self._start

    def __hash__(self):
        return hash(self._key())

    def __eq__(self, other):
        if not isinstance(other, GenomicSegment):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        if not isinstance(other, GenomicSegment):
            return NotImplemented
        return self._key() < other._key()

    def __contains__(self, other):
        return self.contains(other)

    def contains(self, other, stranded=True):
        """Test whether all positions in `other` lie within this segment,
        on the same chromosome (and, if `stranded`, the same strand)

        Parameters
        ----------
        other : |GenomicSegment|
            Query segment

        stranded : bool, optional
            If `True` (default), require strands to match

        Returns
        -------
        bool
        """
        return self.chrom == other.chrom \
               and (stranded == False or self.strand == other.strand) \
               and self.start <= other.start \
               and other.end <= self.end

    def overlaps(self, other, stranded=True):
        """Test whether this segment shares at least one position with `other`

        Parameters
        ----------
        other : |GenomicSegment|
            Query segment

        stranded : bool, optional
            If `True` (default), require strands to match

        Returns
        -------
        bool
        """
        return self.chrom == other.chrom \
               and (stranded == False or self.strand == other.strand) \
               and self.start < other.end \
               and other.start < self.end

    def get_name(self):
        """Alias for :meth:`GenomicSegment.__str__`"""
        return str(self)


#===============================================================================
# INDEX: SegmentChain
#===============================================================================

class SegmentChain(object):
    """Base class for discontinuous genomic features, such as spliced
    alignments or multi-exon transcripts.

    Segments are sorted from lowest to greatest starting coordinate regardless
    of strand, and abutting or overlapping segments are merged. Iteration
    yields segments from left to right in the genome.

    Parameters
    ----------
    *segments : |GenomicSegment|
        0 or more |GenomicSegments| on the same chromosome and strand

    **attr : dict
        Arbitrary attributes, e.g. ``ID``, ``transcript_id``, or ``gene_id``

    Attributes
    ----------
    spanning_segment : |GenomicSegment| or None
        A |GenomicSegment| spanning the endpoints of the |SegmentChain|

    chrom : str or None
        Chromosome on which the |SegmentChain| resides

    strand : str or None
        Chromosome strand (`'+'`, `'-'`, or `'.'`)

    attr : dict
        Miscellaneous attributes or annotation data

    Raises
    ------
    ValueError
        If segments lie on more than one chromosome or strand
    """

    def __init__(self, *segments, **attr):
        self.attr = attr
        if "type" not in attr:
            self.attr["type"] = "exon"

        self._set_segments(segments)

    def _set_segments(self, segments):
        chroms = set(X.chrom for X in segments)
        strands = set(X.strand for X in segments)
        if len(chroms) > 1 or len(strands) > 1:
            raise ValueError("All segments in a %s must share a chromosome and strand. Got %s." % (
                self.__class__.__name__, ", ".join(sorted(str(X) for X in segments))))

        self._segments = tuple(merge_segments(segments))
        if len(self._segments) > 0:
            self.chrom = self._segments[0].chrom
            self.strand = self._segments[0].strand
            self.spanning_segment = GenomicSegment(self.chrom, self._segments[0].start,
                                                   self._segments[-1].end, self.strand)
        else:
            self.chrom = None
            self.strand = None
            self.spanning_segment = None

        # cumulative length of all segments to the left of each segment
        self._offsets = numpy.concatenate([[0], numpy.cumsum([len(X) for X in self._segments])]).astype(int)
        self._starts = [X.start for X in self._segments]

    def __repr__(self):
        sout = "<%s segments=%s" % (self.__class__.__name__, len(self))
        if len(self) > 0:
            sout += " bounds=%s name=%s" % (self.spanning_segment, self.get_name())
        return sout + ">"

    def __str__(self):
        if len(self) == 0:
            return "na"
        return "%s:%s(%s)" % (self.chrom,
                              "^".join("%s-%s" % (X.start, X.end) for X in self),
                              self.strand)

    def __len__(self):
        """Number of blocks in the |SegmentChain|"""
        return len(self._segments)

    def __iter__(self):
        return iter(self._segments)

    def __getitem__(self, index):
        return self._segments[index]

    def __eq__(self, other):
        """Two |SegmentChains| are equal if they cover the same positions on the
        same chromosome and strand. Attributes are not compared.
        """
        if not isinstance(other, SegmentChain):
            return NotImplemented
        return self._segments == other._segments

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._segments)

    @property
    def segments(self):
        """Tuple of merged |GenomicSegments|, left to right"""
        return self._segments

    def get_name(self):
        """Return the name of this |SegmentChain|, from the attributes ``ID``,
        ``Name``, or ``name``, in that order. Falls back to ``str(self)``
        """
        return self.attr.get("ID", self.attr.get("Name", self.attr.get("name", str(self))))

    def get_length(self):
        """Length of the |SegmentChain|, in nucleotides, excluding gaps"""
        return int(self._offsets[-1])

    def get_junctions(self):
        """Return the gaps between consecutive blocks as |GenomicSegments|.
        For a transcript these are introns. For an alignment these are
        skipped regions of the reference.

        Returns
        -------
        list of |GenomicSegment|
        """
        return [GenomicSegment(self.chrom, seg1.end, seg2.start, self.strand)
                for seg1, seg2 in zip(self._segments[:-1], self._segments[1:])]

    def overlaps(self, other, stranded=True):
        """Test whether any block of this |SegmentChain| overlaps `other`

        Parameters
        ----------
        other : |GenomicSegment| or |SegmentChain|

        stranded : bool, optional
            If `True` (default), require strands to match

        Returns
        -------
        bool
        """
        others = [other] if isinstance(other, GenomicSegment) else list(other)
        return any(A.overlaps(B, stranded=stranded) for A in self for B in others)

    def get_segmentchain_coordinate(self, chrom, genomic_x, strand, stranded=True):
        """Find the |SegmentChain| coordinate corresponding to a genomic position

        Parameters
        ----------
        chrom : str
            Chromosome name

        genomic_x : int
            Genomic position, 0-indexed

        strand : str
            Chromosome strand. Must match the strand of the |SegmentChain|

        stranded : bool, optional
            If `True` (default) and the chain is on the minus strand, count
            from the chain's 3' genomic end, so that coordinate 0 is always
            the chain's 5' end

        Returns
        -------
        int
            0-indexed position in the |SegmentChain|

        Raises
        ------
        MappingOutOfRange
            If `genomic_x` is not within any block, e.g. in a gap, or outside
            the chain, or is on a different chromosome

        ValueError
            If `strand` does not match the strand of the chain
        """
        if strand != self.strand:
            raise ValueError("Strand '%s' does not match strand of %s ('%s')." % (strand, self.get_name(), self.strand))

        if chrom != self.chrom:
            raise MappingOutOfRange(chrom, genomic_x, strand, self.get_name())

        idx = bisect.bisect_right(self._starts, genomic_x) - 1
        if idx < 0 or genomic_x >= self._segments[idx].end:
            raise MappingOutOfRange(chrom, genomic_x, strand, self.get_name())

        x = int(self._offsets[idx]) + genomic_x - self._segments[idx].start
        if stranded == True and self.strand == "-":
            x = self.get_length() - x - 1

        return x

    def get_genomic_coordinate(self, x, stranded=True):
        """Find the genomic coordinate corresponding to position `x` in this |SegmentChain|

        Parameters
        ----------
        x : int
            0-indexed position in the |SegmentChain|

        stranded : bool, optional
            If `True` (default) and the chain is on the minus strand,
            `x` is counted from the chain's 3' genomic end

        Returns
        -------
        str
            Chromosome name

        int
            Genomic coordinate corresponding to `x`

        str
            Chromosome strand

        Raises
        ------
        IndexError
            If `x` is outside the bounds of the |SegmentChain|
        """
        length = self.get_length()
        if x < 0 or x >= length:
            raise IndexError("Position %s is outside %s, which has length %s." % (x, self.get_name(), length))

        if stranded == True and self.strand == "-":
            x = length - x - 1

        idx = bisect.bisect_right(self._offsets, x) - 1
        return self.chrom, self._segments[idx].start + x - int(self._offsets[idx]), self.strand

    def get_sequence(self, genome, stranded=True):
        """Return spliced genomic sequence of the |SegmentChain| as a string

        Parameters
        ----------
        genome : dict-like
            Dictionary mapping chromosome names to sequences.
            Sequences may be strings, :class:`Bio.Seq.Seq`, or
            :class:`Bio.SeqRecord.SeqRecord` objects

        stranded : bool, optional
            If `True` (default) and the |SegmentChain| is on the minus strand,
            sequence is reverse-complemented

        Returns
        -------
        str
            Nucleotide sequence, 5' to 3' if `stranded`
        """
        if len(self) == 0:
            return ""

        chromseq = genome[self.chrom]
        if isinstance(chromseq, SeqRecord):
            chromseq = chromseq.seq

        stmp = "".join(str(chromseq[X.start:X.end]) for X in self)
        if stranded == True and self.strand == "-":
            stmp = str(Seq(stmp).reverse_complement())

        return stmp

    @staticmethod
    def from_str(inp):
        """Create a |SegmentChain| from a string formatted as by ``str()``:

            chrom:start-end^start-end(strand)

        where '^' separates blocks. Coordinates are 0-indexed and half-open.

        Parameters
        ----------
        inp : str

        Returns
        -------
        |SegmentChain|
        """
        if inp in ("na", "nan", "None", None) or isinstance(inp, float) and numpy.isnan(inp):
            return SegmentChain()

        match = chainpat.search(inp)
        if match is None:
            raise ValueError("Could not parse '%s' as a SegmentChain." % inp)

        chrom, middle, strand = match.groups()
        segments = []
        for piece in middle.split("^"):
            start, end = piece.split("-")
            segments.append(GenomicSegment(chrom, int(start), int(end), strand))

        return SegmentChain(*segments)


#===============================================================================
# INDEX: Transcript
#===============================================================================

class Transcript(SegmentChain):
    """|SegmentChain| whose segments are the exons of a transcript

    Exons may be given in any order. Abutting exons are merged into one block;
    overlapping exons are an error.

    Parameters
    ----------
    *exons : |GenomicSegment|
        Exons, on one chromosome and strand

    **attr : dict
        Attributes. Typically includes ``transcript_id``, ``gene_id``,
        and ``gene_name``. ``type`` defaults to `'mRNA'`

    Raises
    ------
    ValueError
        If exons lie on more than one chromosome or strand, or overlap
    """

    def __init__(self, *exons, **attr):
        if "type" not in attr:
            attr["type"] = "mRNA"

        ordered = sorted(exons, key=sort_segments_lexically)
        for seg1, seg2 in zip(ordered[:-1], ordered[1:]):
            if seg1.chrom == seg2.chrom and seg2.start < seg1.end:
                raise ValueError("Exons %s and %s of transcript '%s' overlap." % (
                    seg1, seg2, attr.get("transcript_id", attr.get("ID"))))

        SegmentChain.__init__(self, *exons, **attr)

    def get_name(self):
        """Return the name of this |Transcript|, searching ``self.attr`` for
        ``transcript_id``, ``ID``, ``Name``, and ``name``, in that order
        """
        return self.attr.get("transcript_id", SegmentChain.get_name(self))

    @property
    def transcript_id(self):
        return self.get_name()

    @property
    def gene_id(self):
        return self.attr.get("gene_id")

    @property
    def gene_name(self):
        return self.attr.get("gene_name", self.gene_id)

    def get_introns(self):
        """Alias of :meth:`SegmentChain.get_junctions`"""
        return self.get_junctions()

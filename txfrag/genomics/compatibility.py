#!/usr/bin/env python
"""Classify read pairs by compatibility with transcript models, and map
compatible pairs into transcript coordinates.

A pair is *compatible* with a |Transcript| if and only if:

  #. every splice junction within either mate coincides exactly, at both
     ends, with an intron of the transcript, and

  #. the outer extent of the pair lies within the transcript's span, and

  #. no aligned block runs across an exon boundary, e.g. an unspliced read
     continuing from an exon into an intron

There is no tolerance for near misses. Strand is not considered, so that
unstranded libraries may be used.

Compatible pairs are converted to |TranscriptFragments|, whose coordinates are
1-indexed and end-inclusive, and run from the 5' to the 3' end of the
transcript on either strand.

Important classes & functions
-----------------------------
:func:`is_compatible`
    Test one pair against one transcript

:func:`classify_compatibility`
    Build the many-to-many |CompatibilityResult| relating pairs and transcripts

:func:`map_to_transcript_coordinates`
    Convert one pair to a |TranscriptFragment|

:func:`read_transcript_fragments`
    Lazily read, filter, and map all pairs overlapping a transcript in a `BAM`_ file

:func:`fragments_to_table`
    Convert |TranscriptFragments| to a :class:`pandas.DataFrame`
"""
from collections import OrderedDict, namedtuple

import pandas as pd

from txfrag.genomics.roitools import Transcript
from txfrag.genomics.alignments import ReadReport, fetch_pairs
from txfrag.util.services.exceptions import MappingOutOfRange, check_error_policy, handle_error


#===============================================================================
# INDEX: Compatibility
#===============================================================================

def is_compatible(pair, transcript, strict=False):
    """Test whether `pair` is compatible with `transcript`

    Parameters
    ----------
    pair : |AlignedPair|

    transcript : |Transcript|

    strict : bool, optional
        Blocks that cross an exon boundary are always rejected. If `True`,
        additionally reject pairs with blocks lying wholly within an intron.
        Otherwise such pairs are compatible, but fail in
        :func:`map_to_transcript_coordinates` (Default: `False`)

    Returns
    -------
    bool
    """
    if len(transcript) == 0 or pair.chrom != transcript.chrom:
        return False

    span = transcript.spanning_segment
    if pair.start < span.start or pair.end > span.end:
        return False

    introns = set((X.start, X.end) for X in transcript.get_junctions())
    for junction in pair.junctions:
        if (junction.start, junction.end) not in introns:
            return False

    for block in pair.blocks:
        if _block_in_exon(block, transcript):
            continue
        if strict == True or any(X.overlaps(block, stranded=False) for X in transcript):
            return False

    return True


def _block_in_exon(block, transcript):
    return any(X.contains(block, stranded=False) for X in transcript)


class CompatibilityResult(object):
    """Many-to-many relation between |AlignedPairs| and |Transcripts|

    Pairs are identified by their index in `pairs`, and transcripts by
    their names.

    Parameters
    ----------
    pairs : sequence of |AlignedPair|

    transcripts : sequence of |Transcript|

    links : iterable of (int, str)
        Compatible (pair index, transcript ID) tuples
    """

    def __init__(self, pairs, transcripts, links):
        self.pairs = tuple(pairs)
        self.transcripts = OrderedDict((X.get_name(), X) for X in transcripts)
        self.links = frozenset(links)

        self._by_pair = {}
        self._by_transcript = OrderedDict((K, []) for K in self.transcripts)
        for pair_index, txid in sorted(self.links):
            self._by_pair.setdefault(pair_index, []).append(txid)
            self._by_transcript[txid].append(pair_index)

    def __repr__(self):
        return "<%s pairs=%s transcripts=%s links=%s>" % (self.__class__.__name__, len(self.pairs),
                                                          len(self.transcripts), len(self.links))

    def __len__(self):
        """Number of (pair, transcript) links in the relation"""
        return len(self.links)

    def __iter__(self):
        return iter(sorted(self.links))

    def __contains__(self, link):
        return link in self.links

    def __eq__(self, other):
        if not isinstance(other, CompatibilityResult):
            return NotImplemented
        return self.links == other.links \
               and len(self.pairs) == len(other.pairs) \
               and list(self.transcripts) == list(other.transcripts)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def get_transcripts(self, pair_index):
        """Return IDs of transcripts compatible with the pair at `pair_index`"""
        return list(self._by_pair.get(pair_index, []))

    def get_pairs(self, transcript_id):
        """Return indices of pairs compatible with `transcript_id`

        Raises
        ------
        KeyError
            If `transcript_id` was not classified
        """
        return list(self._by_transcript[transcript_id])

    def compatible_pairs(self, transcript_id):
        """Return |AlignedPairs| compatible with `transcript_id`, in input order"""
        return [self.pairs[X] for X in self.get_pairs(transcript_id)]

    def equivalence_classes(self):
        """Group pairs by the set of transcripts they are compatible with

        Returns
        -------
        :class:`collections.OrderedDict`
            Dictionary mapping frozensets of transcript IDs to lists of pair
            indices, in order of first appearance. Pairs compatible with no
            transcript are grouped under the empty frozenset
        """
        dout = OrderedDict()
        for n in range(len(self.pairs)):
            key = frozenset(self._by_pair.get(n, []))
            dout.setdefault(key, []).append(n)

        return dout


def classify_compatibility(pairs, transcripts, strict=False):
    """Relate each pair to every transcript with which it is compatible

    Parameters
    ----------
    pairs : iterable of |AlignedPair|
        Pairs, typically overlapping the transcripts' span. Consumed and stored

    transcripts : |Transcript| or iterable of |Transcript|
        Transcript models. Names must be unique

    strict : bool, optional
        Passed to :func:`is_compatible`

    Returns
    -------
    |CompatibilityResult|
    """
    if isinstance(transcripts, Transcript):
        transcripts = [transcripts]
    transcripts = list(transcripts)
    pairs = list(pairs)

    names = [X.get_name() for X in transcripts]
    if len(set(names)) != len(names):
        raise ValueError("Transcript names must be unique to classify compatibility.")

    links = [(n, tx.get_name()) for n, pair in enumerate(pairs) for tx in transcripts
             if is_compatible(pair, tx, strict=strict)]

    return CompatibilityResult(pairs, transcripts, links)


#===============================================================================
# INDEX: Transcript coordinates
#===============================================================================

class TranscriptFragment(namedtuple("TranscriptFragment", ["transcript_id", "start", "end", "name"])):
    """A fragment in transcript coordinates

    Parameters
    ----------
    transcript_id : str
        Transcript in whose coordinates `start` and `end` are given

    start : int
        1-indexed position of the fragment's 5'-most base

    end : int
        1-indexed, end-inclusive position of the fragment's 3'-most base

    name : str or None, optional
        Query name of the originating read pair
    """
    __slots__ = ()

    def __new__(cls, transcript_id, start, end, name=None):
        start = int(start)
        end = int(end)
        if start < 1 or end < start:
            raise ValueError("TranscriptFragment requires 1 <= start <= end. Got start=%s, end=%s." % (start, end))
        return super(TranscriptFragment, cls).__new__(cls, transcript_id, start, end, name)

    @property
    def width(self):
        """Fragment length, in nucleotides"""
        return self.end - self.start + 1


def map_to_transcript_coordinates(pair, transcript):
    """Convert the outer boundaries of `pair` into transcript coordinates

    The leftmost and rightmost aligned genomic bases of the pair are mapped
    into the spliced space of `transcript`, 5' to 3'. On the minus strand the
    genomic-leftmost base maps to the larger coordinate, so the two mapped
    ends are ordered before the fragment is built. Every aligned block must
    lie within an exon, so that the fragment's width counts only bases that
    are present in the transcript.

    Parameters
    ----------
    pair : |AlignedPair|
        Pair, ideally compatible with `transcript`

    transcript : |Transcript|

    Returns
    -------
    |TranscriptFragment|

    Raises
    ------
    MappingOutOfRange
        If any aligned block lies in an intron or outside the transcript
    """
    strand = transcript.strand
    for block in pair.blocks:
        if not _block_in_exon(block, transcript):
            # report the first aligned position outside the exons
            x = block.start
            for exon in transcript:
                if exon.start <= x < exon.end:
                    x = exon.end
                    break
            raise MappingOutOfRange(pair.chrom, x, strand, transcript.get_name())

    left = transcript.get_segmentchain_coordinate(pair.chrom, pair.start, strand)
    right = transcript.get_segmentchain_coordinate(pair.chrom, pair.end - 1, strand)
    return TranscriptFragment(transcript.get_name(), min(left, right) + 1, max(left, right) + 1, pair.name)


class FragmentReport(object):
    """Tally of one call to :func:`read_transcript_fragments`

    Attributes
    ----------
    compatible : int
        Number of pairs compatible with the transcript

    incompatible : int
        Number of pairs rejected as incompatible

    mapped : int
        Number of fragments yielded

    out_of_range : list of |MappingOutOfRange|
        Mapping failures of compatible pairs

    reads : |ReadReport|
        Report from the underlying pass over the alignment file
    """

    def __init__(self):
        self.compatible = 0
        self.incompatible = 0
        self.mapped = 0
        self.out_of_range = []
        self.reads = ReadReport()

    def __repr__(self):
        return "<%s mapped=%s compatible=%s incompatible=%s out_of_range=%s>" % (
            self.__class__.__name__, self.mapped, self.compatible, self.incompatible,
            len(self.out_of_range))

    def as_dict(self):
        """Return counts, including those of `self.reads`, as an ordered dictionary"""
        dout = self.reads.as_dict()
        dout["compatible"] = self.compatible
        dout["incompatible"] = self.incompatible
        dout["mapped"] = self.mapped
        dout["out_of_range"] = len(self.out_of_range)
        return dout


def read_transcript_fragments(bamfile, transcript, stranded=False, errors="warn", report=None, strict=False):
    """Read pairs overlapping `transcript`, keep those compatible with it, and
    map them to transcript coordinates

    The alignment file's index is checked immediately. Reading is lazy, and
    calling this function again with the same inputs yields the same
    fragments in the same order.

    Parameters
    ----------
    bamfile : str
        Path to a coordinate-sorted, indexed `BAM`_ file

    transcript : |Transcript|

    stranded : bool, optional
        If `True`, ignore pairs on the opposite strand from `transcript`
        (Default: `False`)

    errors : str, optional
        Policy for recoverable errors (|AmbiguousPairing| and
        |MappingOutOfRange|): `'warn'` (default), `'ignore'`, or `'raise'`.
        Unless raised, errors are recorded on `report` and the offending
        pair is skipped

    report : |FragmentReport| or None, optional
        Report to update

    strict : bool, optional
        Passed to :func:`is_compatible`

    Returns
    -------
    generator of |TranscriptFragment|

    Raises
    ------
    MissingIndexError
        If `bamfile` has no index
    """
    if report is None:
        report = FragmentReport()

    pairs = fetch_pairs(bamfile, transcript.spanning_segment, stranded=stranded,
                        errors=errors, report=report.reads)
    return map_pairs(pairs, transcript, errors=errors, report=report, strict=strict)


def map_pairs(pairs, transcript, errors="warn", report=None, strict=False):
    """Filter `pairs` to those compatible with `transcript`, and map each
    into transcript coordinates. Parameters are as in
    :func:`read_transcript_fragments`

    Yields
    ------
    |TranscriptFragment|
    """
    check_error_policy(errors)
    if report is None:
        report = FragmentReport()

    for pair in pairs:
        if not is_compatible(pair, transcript, strict=strict):
            report.incompatible += 1
            continue

        report.compatible += 1
        try:
            fragment = map_to_transcript_coordinates(pair, transcript)
        except MappingOutOfRange as exc:
            report.out_of_range.append(exc)
            handle_error(exc, errors, stacklevel=3)
            continue

        report.mapped += 1
        yield fragment


def fragments_to_table(fragments):
    """Convert |TranscriptFragments| to a :class:`pandas.DataFrame` with columns
    `transcript_id`, `name`, `start`, `end`, and `width`
    """
    rows = [(X.transcript_id, X.name, X.start, X.end, X.width) for X in fragments]
    return pd.DataFrame(rows, columns=["transcript_id", "name", "start", "end", "width"])

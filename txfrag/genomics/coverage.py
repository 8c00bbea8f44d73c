#!/usr/bin/env python
"""Per-position coverage of fragments and read pairs, and run-length encoding
of coverage vectors.

:func:`fragment_coverage`
    Coverage of |TranscriptFragments| along a transcript

:func:`pair_coverage`
    Coverage of the aligned blocks of |AlignedPairs| over a genomic region

:func:`read_coverage`
    As :func:`pair_coverage`, reading pairs from a `BAM`_ file

:func:`rle`, :func:`inverse_rle`
    Run-length encode and decode 1D arrays
"""
import numpy

from txfrag.genomics.alignments import fetch_pairs


def fragment_coverage(fragments, length):
    """Count the fragments covering each position of a transcript

    Parameters
    ----------
    fragments : iterable of |TranscriptFragment|
        Fragments, in 1-indexed, end-inclusive transcript coordinates

    length : int
        Transcript length

    Returns
    -------
    :class:`numpy.ndarray`
        Array of length `length`. Element `i` holds the number of fragments
        covering transcript position `i + 1`

    Raises
    ------
    ValueError
        If a fragment extends beyond `length`
    """
    fragments = list(fragments)
    diff = numpy.zeros(length + 1, dtype=int)
    if len(fragments) == 0:
        return diff[:length]

    starts = numpy.array([X.start for X in fragments]) - 1
    ends = numpy.array([X.end for X in fragments])
    if ends.max() > length:
        raise ValueError("Fragment ends at %s, beyond transcript length %s." % (ends.max(), length))

    numpy.add.at(diff, starts, 1)
    numpy.add.at(diff, ends, -1)
    return numpy.cumsum(diff)[:length]


def pair_coverage(pairs, segment, stranded=False):
    """Count the aligned bases of `pairs` covering each position of `segment`.
    Junctions and the unsequenced gap between mates are not counted

    Parameters
    ----------
    pairs : iterable of |AlignedPair|

    segment : |GenomicSegment|
        Region of interest

    stranded : bool, optional
        If `True` and `segment` is on the minus strand, return the vector
        5' to 3', i.e. reversed relative to the genome (Default: `False`)

    Returns
    -------
    :class:`numpy.ndarray`
        Array of length ``len(segment)``
    """
    counts = numpy.zeros(len(segment), dtype=int)
    for pair in pairs:
        if pair.chrom != segment.chrom:
            continue
        for block in pair.blocks:
            start = max(block.start, segment.start) - segment.start
            end = min(block.end, segment.end) - segment.start
            if end > start:
                counts[start:end] += 1

    if stranded == True and segment.strand == "-":
        counts = counts[::-1]

    return counts


def read_coverage(bamfile, segment, stranded=False, errors="warn", report=None):
    """Count aligned bases of read pairs covering each position of `segment`
    in a `BAM`_ file. Parameters are as in :func:`pair_coverage` and
    :func:`~txfrag.genomics.alignments.fetch_pairs`

    Returns
    -------
    :class:`numpy.ndarray`
    """
    pairs = fetch_pairs(bamfile, segment, stranded=stranded, errors=errors, report=report)
    return pair_coverage(pairs, segment, stranded=stranded)


def rle(values):
    """Run-length encode a 1D array

    Parameters
    ----------
    values : array-like

    Returns
    -------
    :class:`numpy.ndarray`
        Value of each run

    :class:`numpy.ndarray`
        Length of each run

    Examples
    --------
    >>> rle([0,0,1,1,1,0])
    (array([0, 1, 0]), array([2, 3, 1]))
    """
    values = numpy.asarray(values)
    if len(values) == 0:
        return values[:0], numpy.zeros(0, dtype=int)

    breaks = numpy.flatnonzero(values[1:] != values[:-1]) + 1
    starts = numpy.concatenate([[0], breaks])
    lengths = numpy.diff(numpy.concatenate([starts, [len(values)]]))
    return values[starts], lengths


def inverse_rle(values, lengths):
    """Expand a run-length encoding produced by :func:`rle`"""
    return numpy.repeat(values, lengths)

#!/usr/bin/env python
"""Fetch reference sequence, and measure sequence content of fragments.

Sequence files
--------------
:func:`get_seqdict`
    Open a `FASTA`_, `GenBank`_, or `2bit`_ file as a dictionary mapping
    chromosome names to sequence

|TwoBitSeqRecordAdaptor|
    Make a :class:`twobitreader.TwoBitFile` behave like a dictionary of
    :class:`Bio.SeqRecord.SeqRecord` objects

Fragment sequence content
-------------------------
:func:`get_transcript_sequence`
    Spliced 5' to 3' sequence of a |Transcript|

:func:`gc_content`
    Fraction of G and C in each fragment

:func:`nucleotide_frequencies`
    Nucleotide frequencies at each position surrounding fragment 5' ends
"""
import numpy
import pandas as pd
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from twobitreader import TwoBitFile

NUCLEOTIDES = ("A", "C", "G", "T")


#===============================================================================
# INDEX: sequence files
#===============================================================================

class _TwoBitSeqProxy(object):
    """Lazily fetch sequence from a :class:`twobitreader.TwoBitSequence`.
    Slicing returns :class:`Bio.Seq.Seq` objects.
    """

    def __init__(self, twobitseq):
        self.twobitseq = twobitseq
        self._seq = None

    def __getitem__(self, slice_):
        return Seq(self.twobitseq.get_slice(min_=slice_.start, max_=slice_.stop))

    def __len__(self):
        return len(self.twobitseq)

    def __str__(self):
        return str(self.twobitseq)

    @property
    def seq(self):
        if self._seq is None:
            self._seq = Seq(str(self.twobitseq))
        return self._seq

    def reverse_complement(self):
        """Return the reverse complement of the sequence as a :class:`Bio.SeqRecord.SeqRecord`"""
        return SeqRecord(self.seq).reverse_complement()


class TwoBitSeqRecordAdaptor(object):
    """Adaptor that makes a :class:`twobitreader.TwoBitFile` behave
    like a dictionary of :class:`Bio.SeqRecord.SeqRecord` objects.

    Parameters
    ----------
    filename : str
        Path to `2bit`_ file
    """

    def __init__(self, filename):
        self.twobitfile = TwoBitFile(filename)
        self._chroms = {K: _TwoBitSeqProxy(V) for K, V in self.twobitfile.items()}

    def __getitem__(self, key):
        return self._chroms[key]

    def __contains__(self, key):
        return key in self._chroms

    def __iter__(self):
        return iter(self._chroms)

    def __len__(self):
        return len(self._chroms)

    def keys(self):
        return self._chroms.keys()


def get_seqdict(filename, format="fasta", index=True):
    """Open a sequence file as a dictionary-like object

    Parameters
    ----------
    filename : str
        Path to sequence file

    format : str, optional
        `'fasta'` (default), `'genbank'`, `'twobit'`, or any other format
        understood by :mod:`Bio.SeqIO`

    index : bool, optional
        For :mod:`Bio.SeqIO` formats, open lazily with :func:`Bio.SeqIO.index`
        instead of reading everything with :func:`Bio.SeqIO.to_dict`
        (Default: `True`)

    Returns
    -------
    dict-like
        Dictionary-like object mapping chromosome names to
        :class:`Bio.SeqRecord.SeqRecord`-like objects
    """
    if format == "twobit":
        return TwoBitSeqRecordAdaptor(filename)
    elif index == True:
        return SeqIO.index(filename, format)
    else:
        return SeqIO.to_dict(SeqIO.parse(filename, format))


#===============================================================================
# INDEX: fragment sequence content
#===============================================================================

def get_transcript_sequence(transcript, genome):
    """Return the spliced, 5' to 3' sequence of `transcript`, in upper case

    Parameters
    ----------
    transcript : |Transcript|

    genome : dict-like
        Dictionary mapping chromosome names to sequences, e.g. from :func:`get_seqdict`

    Returns
    -------
    str
    """
    return transcript.get_sequence(genome).upper()


def gc_content(fragments, transcript_seq):
    """Fraction of G and C in each fragment

    Parameters
    ----------
    fragments : iterable of |TranscriptFragment|

    transcript_seq : str
        Spliced sequence of the transcript, 5' to 3'

    Returns
    -------
    :class:`numpy.ndarray`
        GC fraction of each fragment, in input order
    """
    transcript_seq = str(transcript_seq).upper()
    out = []
    for frag in fragments:
        sub = transcript_seq[frag.start - 1:frag.end]
        out.append(float(sub.count("G") + sub.count("C")) / len(sub) if len(sub) > 0 else numpy.nan)

    return numpy.array(out, dtype=float)


def nucleotide_frequencies(fragments, transcript_seq, upstream=10, downstream=10):
    """Frequency of each nucleotide at positions surrounding fragment 5' ends

    Parameters
    ----------
    fragments : iterable of |TranscriptFragment|

    transcript_seq : str
        Spliced sequence of the transcript, 5' to 3'

    upstream : int, optional
        Number of positions to examine 5' of each fragment start (Default: 10)

    downstream : int, optional
        Number of positions to examine from the fragment start towards its
        3' end, including the first base (Default: 10)

    Returns
    -------
    :class:`pandas.DataFrame`
        Table indexed by offset from `-upstream` to `downstream - 1`, where 0
        is the first base of the fragment, with columns `A`, `C`, `G`, `T`,
        and `count`. Frequencies at each offset are computed from fragments
        whose window includes that offset. Offsets that no fragment reaches
        have NaN frequencies and a count of 0
    """
    transcript_seq = str(transcript_seq).upper()
    offsets = numpy.arange(-upstream, downstream)
    counts = numpy.zeros((len(offsets), len(NUCLEOTIDES)), dtype=int)
    totals = numpy.zeros(len(offsets), dtype=int)
    lookup = {K: n for n, K in enumerate(NUCLEOTIDES)}

    for frag in fragments:
        for row, offset in enumerate(offsets):
            pos = frag.start - 1 + offset
            if 0 <= pos < len(transcript_seq):
                totals[row] += 1
                idx = lookup.get(transcript_seq[pos])
                if idx is not None:
                    counts[row, idx] += 1

    with numpy.errstate(invalid="ignore", divide="ignore"):
        freqs = counts.astype(float) / totals[:, None]

    df = pd.DataFrame(freqs, index=pd.Index(offsets, name="offset"), columns=list(NUCLEOTIDES))
    df["count"] = totals
    return df

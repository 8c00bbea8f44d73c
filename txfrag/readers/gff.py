#!/usr/bin/env python
"""Read `GTF2`_ annotation files.

|GTF2_Reader|
    Parse `GTF2`_ streams line by line into |SegmentChain| objects, one per
    feature

|GTF2_TranscriptAssembler|
    Assemble exon features in one or more `GTF2`_ streams into |Transcript|
    objects, grouped by ``transcript_id``

Coordinates in `GTF2`_ files are 1-indexed and fully closed. All objects
returned by these readers are 0-indexed and half-open.

Examples
--------
Read transcripts from a `GTF2`_ file::

    >>> with open("annotation.gtf") as fh:
    >>>     transcripts = list(GTF2_TranscriptAssembler(fh))
"""
from collections import OrderedDict

from txfrag.genomics.roitools import GenomicSegment, SegmentChain, Transcript, \
                                     sort_segmentchains_lexically
from txfrag.readers.common import get_identical_attributes
from txfrag.readers.gff_tokens import parse_GTF2_tokens
from txfrag.util.io.filters import AbstractReader, SkipBlankReader
from txfrag.util.io.openers import NullWriter
from txfrag.util.services.exceptions import DataWarning, MalformedFileError, warn

EXON_TYPES = ("exon", "5UTR", "3UTR", "UTR", "five_prime_utr", "three_prime_utr")
"""Feature types considered to be exons"""

CDS_TYPES = ("CDS", "start_codon", "stop_codon")
"""Feature types used as exons for transcripts that have no exon features"""


class GTF2_Reader(AbstractReader):
    """Parse `GTF2`_ streams line by line into |SegmentChain| objects.

    Lines beginning with ``'#'`` and blank lines are skipped. Lines beginning
    with ``'##'`` are stored in `metadata`.

    Parameters
    ----------
    stream : file-like
        Input stream pointing to `GTF2`_ information

    Attributes
    ----------
    metadata : dict
        Dictionary of metadata found in file headers

    counter : int
        Number of lines read
    """

    def __init__(self, stream):
        AbstractReader.__init__(self, SkipBlankReader(stream))
        self.metadata = {}
        self.counter = 0
        self.name = getattr(stream, "name", repr(stream))

    def _parse_metatokens(self, inp):
        items = inp.rstrip().split()
        if len(items) > 0:
            key = items[0]
            if key in self.metadata:
                self.metadata[key] += ";" + " ".join(items[1:])
            else:
                self.metadata[key] = " ".join(items[1:])

    def _parse_genomic_feature(self, line):
        items = line.rstrip("\n").split("\t")
        if len(items) < 9:
            raise MalformedFileError(self.name, "Expected 9 tab-delimited columns, found %s." % len(items),
                                     line_num=self.counter)
        try:
            attr = parse_GTF2_tokens(items[8])
            segment = GenomicSegment(items[0], int(items[3]) - 1, int(items[4]), items[6])
        except ValueError as exc:
            raise MalformedFileError(self.name, str(exc), line_num=self.counter)

        attr["source"] = items[1]
        attr["type"] = items[2]
        attr["score"] = items[5]
        attr["phase"] = items[7]
        return SegmentChain(segment, **attr)

    def filter(self, line):
        """Parse the next line of `GTF2`_ into a |SegmentChain|

        Parameters
        ----------
        line : str
            Next line from `GTF2`_ stream

        Returns
        -------
        |SegmentChain|
        """
        self.counter += 1
        if line[0:2] == "##":
            self._parse_metatokens(line[2:])
            return self.__next__()
        elif line[0:1] == "#":
            return self.__next__()
        else:
            return self._parse_genomic_feature(line)


class GTF2_TranscriptAssembler(object):
    """Assemble features in one or more `GTF2`_ streams into |Transcript| objects,
    collecting exon features by shared ``transcript_id``. Transcripts with no
    exon features are built from their CDS, start codon, and stop codon features.

    Attributes that have common values for all exons within a transcript are
    propagated to the `attr` dict of the |Transcript|. Other attributes are
    discarded. Transcripts whose exons lie on more than one chromosome or strand,
    or overlap, are rejected with a |DataWarning|.

    Transcripts are returned sorted by genomic position.

    Parameters
    ----------
    *streams : file-like
        One or more open streams of `GTF2`_ data

    printer : file-like, optional
        Logger implementing a ``write()`` method (Default: |NullWriter|)

    Attributes
    ----------
    rejected : list
        IDs of transcripts that failed to assemble

    metadata : dict
        Metadata gleaned from the streams
    """

    def __init__(self, *streams, **kwargs):
        self.streams = streams
        self.printer = kwargs.get("printer", None) or NullWriter()
        self.rejected = []
        self.metadata = {}
        self._transcripts = None

    def __iter__(self):
        if self._transcripts is None:
            self._transcripts = self._assemble_transcripts(self._collect())
        return iter(self._transcripts)

    def _collect(self):
        """Group exon-like and CDS-like features by transcript ID

        Returns
        -------
        OrderedDict
            Maps transcript IDs to `(exons, cds)` tuples of lists
        """
        features = OrderedDict()
        for stream in self.streams:
            reader = GTF2_Reader(stream)
            for feature in reader:
                ftype = feature.attr["type"]
                if ftype not in EXON_TYPES and ftype not in CDS_TYPES:
                    continue

                tname = feature.attr.get("transcript_id")
                if tname is None:
                    warn("Ignoring %s feature at %s with no transcript_id." % (ftype, feature.spanning_segment),
                         DataWarning)
                    continue

                exons, cds = features.setdefault(tname, ([], []))
                if ftype in EXON_TYPES:
                    exons.append(feature)
                else:
                    cds.append(feature)

            self.metadata.update(reader.metadata)

        return features

    def _assemble_transcripts(self, features):
        self.printer.write("Assembling %s transcripts..." % len(features))
        transcripts = []
        for tname, (exons, cds) in features.items():
            parts = exons if len(exons) > 0 else cds
            segments = [X.spanning_segment for X in parts]
            if len(set((X.chrom, X.strand) for X in segments)) > 1:
                warn("Rejecting transcript '%s' because it contains exons on multiple chromosomes or strands." % tname,
                     DataWarning)
                self.rejected.append(tname)
                continue

            attr = get_identical_attributes(parts, exclude=("score", "phase", "exon_number", "exon_id"))
            attr["type"] = "mRNA"
            try:
                transcripts.append(Transcript(*segments, **attr))
            except ValueError:
                warn("Rejecting transcript '%s' because its exons overlap." % tname, DataWarning)
                self.rejected.append(tname)

        return sorted(transcripts, key=sort_segmentchains_lexically)

#!/usr/bin/env python
"""An in-memory repository of transcript models, queried by gene symbol,
transcript ID, or genomic region.

|AnnotationRepository| replaces global annotation catalogs: callers build one
explicitly, e.g. from `GTF2`_ files, and pass it to whatever needs to look up
transcripts.

Examples
--------
    >>> repo = AnnotationRepository.from_gtf("annotation.gtf")
    >>> repo.get_transcript_ids("SRSF1")
    ['tx1', 'tx2']
    >>> tx = repo.get_transcript("tx1")
"""
from collections import OrderedDict

from txfrag.genomics.roitools import sort_segmentchains_lexically
from txfrag.readers.gff import GTF2_TranscriptAssembler
from txfrag.util.io.openers import NullWriter, opener


class AnnotationRepository(object):
    """Collection of |Transcripts| indexed by transcript ID and gene symbol

    Gene symbols are matched against each transcript's ``gene_name``
    attribute first, then against ``gene_id``.

    Parameters
    ----------
    transcripts : iterable of |Transcript|, optional
        Transcripts to add
    """

    def __init__(self, transcripts=()):
        self._transcripts = OrderedDict()
        self._by_name = {}
        self._by_gene_id = {}
        for tx in transcripts:
            self.add(tx)

    @staticmethod
    def from_gtf(*files, **kwargs):
        """Build an |AnnotationRepository| from one or more `GTF2`_ files

        Parameters
        ----------
        *files : str or file-like
            Filenames (optionally gzipped or bzipped) or open streams

        printer : file-like, optional
            Logger implementing a ``write()`` method (Default: |NullWriter|)

        Returns
        -------
        |AnnotationRepository|
        """
        printer = kwargs.get("printer", None) or NullWriter()
        streams = [opener(X) if isinstance(X, str) else X for X in files]
        try:
            assembler = GTF2_TranscriptAssembler(*streams, printer=printer)
            repo = AnnotationRepository(assembler)
        finally:
            for name, stream in zip(files, streams):
                if isinstance(name, str):
                    stream.close()

        printer.write("Loaded %s transcripts (%s rejected)." % (len(repo), len(assembler.rejected)))
        return repo

    def add(self, transcript):
        """Add a |Transcript|

        Raises
        ------
        ValueError
            If a transcript with the same ID is already present
        """
        txid = transcript.get_name()
        if txid in self._transcripts:
            raise ValueError("Transcript '%s' is already in repository." % txid)

        self._transcripts[txid] = transcript
        if transcript.attr.get("gene_name") is not None:
            self._by_name.setdefault(transcript.attr["gene_name"], []).append(txid)
        if transcript.gene_id is not None:
            self._by_gene_id.setdefault(transcript.gene_id, []).append(txid)

    def __len__(self):
        return len(self._transcripts)

    def __iter__(self):
        return iter(self._transcripts.values())

    def __contains__(self, transcript_id):
        return transcript_id in self._transcripts

    def __repr__(self):
        return "<%s transcripts=%s genes=%s>" % (self.__class__.__name__, len(self),
                                                 len(set(self._by_gene_id) | set(self._by_name)))

    def get_transcript_ids(self, symbol):
        """Return sorted IDs of transcripts belonging to gene `symbol`

        Parameters
        ----------
        symbol : str
            Gene name or gene ID

        Returns
        -------
        list of str

        Raises
        ------
        KeyError
            If no transcript has `symbol` as its gene name or ID
        """
        if symbol in self._by_name:
            return sorted(self._by_name[symbol])
        elif symbol in self._by_gene_id:
            return sorted(self._by_gene_id[symbol])

        raise KeyError("No transcripts found for gene '%s'." % symbol)

    def get_transcript(self, transcript_id):
        """Return the |Transcript| with ID `transcript_id`

        Raises
        ------
        KeyError
            If `transcript_id` is unknown
        """
        try:
            return self._transcripts[transcript_id]
        except KeyError:
            raise KeyError("No transcript with ID '%s'." % transcript_id)

    def get_transcripts(self, symbol):
        """Return |Transcripts| belonging to gene `symbol`, sorted by ID"""
        return [self._transcripts[X] for X in self.get_transcript_ids(symbol)]

    def get_overlapping(self, segment, stranded=True):
        """Return |Transcripts| with an exon overlapping `segment`, sorted by position

        Parameters
        ----------
        segment : |GenomicSegment|

        stranded : bool, optional
            If `True` (default), require matching strands
        """
        out = [X for X in self if X.overlaps(segment, stranded=stranded)]
        return sorted(out, key=sort_segmentchains_lexically)

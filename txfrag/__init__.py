#!/usr/bin/env python
"""Welcome to txfrag!

This package maps paired-end RNA-seq fragments onto transcript models. Given a
set of read pairs and one or more candidate transcripts, it:

  #. Decides which pairs are compatible with which transcripts, i.e. whose
     splice junctions and extent agree with each transcript's exon structure
     (see |compatibility|)

  #. Converts each compatible pair into a fragment in 1-based transcript
     coordinates, suitable for studying fragment position, length, and
     sequence bias (see |compatibility| and |seqtools|)

  #. Provides command-line scripts that run these analyses over sample
     manifests and annotation files (see |bin|)


Package overview
----------------
txfrag is divided into the following subpackages:

    ==============    =========================================================
    Package           Contents
    --------------    ---------------------------------------------------------
    |bin|             Command-line scripts
    |genomics|        Transcript models, read pairing, compatibility, and coordinate mapping
    |plotting|        Tools for plotting
    |readers|         Parsers for annotation files and sample manifests
    |util|            Utilities (e.g. exceptions, progress printers, argument parsers)
    |test|            Unit and functional tests
    ==============    =========================================================

"""
__version__ = "0.1.0"
import matplotlib
matplotlib.use("agg")

from txfrag.genomics.roitools import GenomicSegment, SegmentChain, Transcript
from txfrag.genomics.alignments import AlignedPair, pair_reads, fetch_pairs
from txfrag.genomics.compatibility import CompatibilityResult, TranscriptFragment, classify_compatibility, \
                                          is_compatible, map_to_transcript_coordinates, read_transcript_fragments
from txfrag.genomics.annotation import AnnotationRepository

from txfrag.readers.gff import GTF2_Reader, GTF2_TranscriptAssembler

from txfrag.util.io.openers import read_pl_table

from txfrag.util.services.exceptions import formatwarning, MappingOutOfRange, AmbiguousPairing, MissingIndexError

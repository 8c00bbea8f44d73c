#!/usr/bin/env python
"""Command-line scripts for paired-end fragment analysis

    =========================   =============================================================================
    |tx_fragments|               Pair mates in one or more `BAM`_ files, keep pairs compatible with
                                 each selected transcript, and report their fragments in
                                 transcript coordinates

    |fragment_bias|              Measure nucleotide composition around fragment 5' ends, and
                                 GC content of fragments, from the output of |tx_fragments|
    =========================   =============================================================================
"""

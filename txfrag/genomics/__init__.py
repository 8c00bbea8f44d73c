#!/usr/bin/env python
"""Object types and functions for mapping paired-end fragments onto transcripts.

Package overview
================

    =============================================  ==================================================================
    **Submodule**                                   **Description**
    ---------------------------------------------  ------------------------------------------------------------------
    :py:mod:`~txfrag.genomics.roitools`              Genomic segments, segment chains, and transcript models, with
                                                     conversion between genomic and transcript coordinates

    :py:mod:`~txfrag.genomics.alignments`            Pair mates from `BAM`_ files into |AlignedPair| objects

    :py:mod:`~txfrag.genomics.compatibility`         Decide which pairs are compatible with which transcripts,
                                                     and map compatible pairs to |TranscriptFragments|

    :py:mod:`~txfrag.genomics.coverage`              Per-position coverage of fragments and pairs

    :py:mod:`~txfrag.genomics.annotation`            In-memory repository of transcripts, queried by gene or region

    :py:mod:`~txfrag.genomics.seqtools`              Reference sequence access and fragment sequence content
    =============================================  ==================================================================
"""

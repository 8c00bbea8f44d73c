#!/usr/bin/env python
"""
Package overview
================

Parsers for annotation and tabular input files. Annotation parsers behave as
iterators, and return features in 0-indexed, half-open coordinates, in keeping
with Python conventions.

    ======================================    =======================================
    **Module**                                **Contents**
    --------------------------------------    ---------------------------------------
    :py:mod:`txfrag.readers.gff`              `GTF2`_ feature reader and transcript assembler
    :py:mod:`txfrag.readers.gff_tokens`       Parse attributes in the ninth column of `GTF2`_ files
    :py:mod:`txfrag.readers.common`           Helper functions shared by annotation readers
    :py:mod:`txfrag.readers.manifest`         Sample manifests listing sequencing runs
    ======================================    =======================================
"""

#!/usr/bin/env python
"""Library components for writing command-line scripts

Package overview
================

    =================================================    =========================
    **Package module**                                   **Contents**
    -------------------------------------------------    -------------------------
    :py:mod:`~txfrag.util.scriptlib.argparsers`           :class:`~argparse.ArgumentParser` factories for alignments, annotations, sequences, and plots
    :py:mod:`~txfrag.util.scriptlib.help_formatters`      Utilities to reformat module docstrings for use as command-line help text
    =================================================    =========================
"""

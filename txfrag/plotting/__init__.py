#!/usr/bin/env python
"""Plots for exploring fragment positions, lengths, coverage, and sequence bias.

    ======================================    =========================================================
    **Submodule**                             **Contents**
    --------------------------------------    ---------------------------------------------------------
    :mod:`txfrag.plotting.colors`             Lighten and darken colors

    :mod:`txfrag.plotting.plots`              Kernel density estimates, fragment position and span
                                              plots, coverage tracks, and nucleotide bias plots

    :mod:`txfrag.plotting.plotutils`          Utility functions for preprocessing data or
                                              manipulating axes
    ======================================    =========================================================
"""
from txfrag.plotting.plots import kde_plot, \
                                  fragment_position_plot, \
                                  fragment_length_plot, \
                                  fragment_span_plot, \
                                  coverage_plot, \
                                  nucleotide_bias_plot, \
                                  gc_content_plot

#!/usr/bin/env python
"""Measure sequence bias of fragments mapped by |tx_fragments|.

Library preparation often favors fragments with particular sequence at their
ends, or with particular GC content. This script reads a fragment table made
by |tx_fragments|, fetches the spliced sequence of each transcript, and
reports, for each sample:

  - the frequency of each nucleotide at positions surrounding fragment 5' ends

  - the GC content of each fragment

Output files
------------
    OUTBASE_nt_frequencies.txt
        Nucleotide frequencies at each offset from fragment 5' ends, by sample.
        Offset 0 is the first base of each fragment

    OUTBASE_gc.txt
        GC content of each fragment

    OUTBASE_SAMPLE_nt_bias.[FIGFORMAT]
        Plot of nucleotide frequencies, for each sample

    OUTBASE_gc.[FIGFORMAT]
        Density of fragment GC content in each sample

    OUTBASE_lengths.[FIGFORMAT]
        Density of fragment lengths in each sample

where `OUTBASE` is supplied by the user.
"""
import argparse
import inspect
import sys
import warnings
from collections import OrderedDict

import numpy
import pandas as pd

from txfrag.genomics.compatibility import TranscriptFragment
from txfrag.genomics.seqtools import NUCLEOTIDES, gc_content, get_transcript_sequence, nucleotide_frequencies
from txfrag.plotting.plots import fragment_length_plot, gc_content_plot, nucleotide_bias_plot
from txfrag.util.io.filters import NameDateWriter
from txfrag.util.io.openers import argsopener, get_short_name, read_pl_table
from txfrag.util.scriptlib.argparsers import AnnotationParser, BaseParser, PlottingParser, SequenceParser
from txfrag.util.scriptlib.help_formatters import format_module_docstring
from txfrag.util.services.exceptions import DataWarning, warn

warnings.simplefilter("once")
printer = NameDateWriter(get_short_name(inspect.stack()[-1][1]))


def read_fragment_table(filename):
    """Read a fragment table written by |tx_fragments|

    Parameters
    ----------
    filename : str

    Returns
    -------
    :class:`pandas.DataFrame`
    """
    return read_pl_table(filename, dtype={"sample": str, "transcript_id": str, "name": str})


def table_to_fragments(df):
    """Convert rows of a fragment table to |TranscriptFragments|"""
    return [TranscriptFragment(X.transcript_id, int(X.start), int(X.end), X.name) for X in df.itertuples(index=False)]


def pool_frequencies(tables):
    """Combine nucleotide frequency tables, weighting each offset by its count

    Parameters
    ----------
    tables : list of :class:`pandas.DataFrame`
        Tables from :func:`~txfrag.genomics.seqtools.nucleotide_frequencies`,
        sharing the same index

    Returns
    -------
    :class:`pandas.DataFrame`
        Pooled table, with the same columns as the inputs
    """
    nucs = list(NUCLEOTIDES)
    counts = sum(X[nucs].fillna(0).mul(X["count"], axis=0) for X in tables)
    totals = sum(X["count"] for X in tables)
    with numpy.errstate(invalid="ignore", divide="ignore"):
        pooled = counts.div(totals.replace(0, numpy.nan), axis=0)
    pooled["count"] = totals
    return pooled


def main(argv=sys.argv[1:]):
    """Command-line program

    Parameters
    ----------
    argv : list, optional
        A list of command-line arguments, which will be processed
        as if the script were called from the command line if
        :py:func:`main` is called directly.

        Default: `sys.argv[1:]`. The command-line arguments, if the script is
        invoked from the command line
    """
    an = AnnotationParser(disabled=["gene", "transcript"])
    sp = SequenceParser()
    pp = PlottingParser()
    bp = BaseParser()

    parser = argparse.ArgumentParser(description=format_module_docstring(__doc__),
                                     formatter_class=argparse.RawDescriptionHelpFormatter,
                                     conflict_handler="resolve",
                                     parents=[bp.get_parser(),
                                              an.get_parser(),
                                              sp.get_parser(),
                                              pp.get_parser()])
    parser.add_argument("fragment_file", type=str, help="Fragment table made by tx_fragments")
    parser.add_argument("outbase", type=str, help="Required. Basename for output files")
    parser.add_argument("--upstream", type=int, default=10,
                        help="Positions to examine 5' of each fragment start (Default: %(default)s)")
    parser.add_argument("--downstream", type=int, default=10,
                        help="Positions to examine from each fragment start towards its 3' end (Default: %(default)s)")
    parser.add_argument("--noplot", default=False, action="store_true",
                        help="Do not make plots")

    args = parser.parse_args(argv)
    bp.get_base_ops_from_args(args)
    pp.set_style_from_args(args)

    printer.write("Reading fragments from '%s' ..." % args.fragment_file)
    fragments = read_fragment_table(args.fragment_file)
    samples = list(OrderedDict.fromkeys(fragments["sample"]))

    repository = an.get_repository_from_args(args, printer=printer)
    genome = sp.get_seqdict_from_args(args, printer=printer)

    sequences = {}
    for txid in fragments["transcript_id"].unique():
        if txid not in repository:
            warn("Skipping fragments on transcript '%s' because it has no annotation." % txid, DataWarning)
            continue
        sequences[txid] = get_transcript_sequence(repository.get_transcript(txid), genome)

    freq_tables = OrderedDict()
    gc_rows = []
    for sample in samples:
        printer.write("Processing sample '%s' ..." % sample)
        sub = fragments[fragments["sample"] == sample]
        tables = []
        for txid, df in sub.groupby("transcript_id", sort=False):
            if txid not in sequences:
                continue
            frags = table_to_fragments(df)
            tables.append(nucleotide_frequencies(frags, sequences[txid],
                                                 upstream=args.upstream, downstream=args.downstream))
            gc = gc_content(frags, sequences[txid])
            gc_rows.extend((sample, X.transcript_id, X.name, X.start, X.end, X.width, Y) for X, Y in zip(frags, gc))

        if len(tables) > 0:
            freq_tables[sample] = pool_frequencies(tables)

    fn = "%s_nt_frequencies.txt" % args.outbase
    printer.write("Saving nucleotide frequencies to %s ..." % fn)
    if len(freq_tables) > 0:
        freqs = pd.concat([V.reset_index().assign(sample=K) for K, V in freq_tables.items()], ignore_index=True)
    else:
        freqs = pd.DataFrame(columns=["offset"] + list(NUCLEOTIDES) + ["count", "sample"])
    freqs = freqs[["sample", "offset"] + list(NUCLEOTIDES) + ["count"]]
    with argsopener(fn, args) as fh:
        freqs.to_csv(fh, sep="\t", index=False, header=True, na_rep="nan", float_format="%.6f")

    fn = "%s_gc.txt" % args.outbase
    printer.write("Saving GC content to %s ..." % fn)
    gc_table = pd.DataFrame(gc_rows, columns=["sample", "transcript_id", "name", "start", "end", "width", "gc"])
    with argsopener(fn, args) as fh:
        gc_table.to_csv(fh, sep="\t", index=False, header=True, na_rep="nan", float_format="%.6f")

    if args.noplot == False:
        import matplotlib.pyplot as plt
        title = args.title if args.title is not None else args.outbase

        for sample, table in freq_tables.items():
            fig = pp.get_figure_from_args(args)
            nucleotide_bias_plot(table, axes=fig.add_subplot(111), title="%s: %s" % (sample, title))
            fn = "%s_%s_nt_bias.%s" % (args.outbase, sample, args.figformat)
            printer.write("Plotting to %s ..." % fn)
            fig.savefig(fn, dpi=args.dpi, bbox_inches="tight")
            plt.close(fig)

        gc_by_sample = OrderedDict((K, gc_table["gc"][gc_table["sample"] == K].dropna().values) for K in samples)
        widths = OrderedDict((K, fragments["width"][fragments["sample"] == K].values) for K in samples)
        for name, data, plot_fn in (("gc", gc_by_sample, gc_content_plot),
                                    ("lengths", widths, fragment_length_plot)):
            fig = pp.get_figure_from_args(args)
            fig, ax = plot_fn(data, axes=fig.add_subplot(111))
            ax.set_title(title)
            fn = "%s_%s.%s" % (args.outbase, name, args.figformat)
            printer.write("Plotting to %s ..." % fn)
            fig.savefig(fn, dpi=args.dpi, bbox_inches="tight")
            plt.close(fig)

    printer.write("Done.")


if __name__ == "__main__":
    main()

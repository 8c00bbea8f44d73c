#!/usr/bin/env python
"""Map paired-end fragments onto transcripts.

For each alignment file and each selected transcript, read pairs overlapping
the transcript are collected, and pairs compatible with its exon structure are
converted into fragments in 1-based transcript coordinates. A pair is
compatible with a transcript if each of its splice junctions matches an intron
of the transcript, it lies within the transcript's span, and none of its
aligned blocks runs across an exon boundary.

Alignment files must be sorted and indexed. They can be given directly with
``--count_files``, or listed by run in a sample manifest with ``--manifest``.

Output files
------------
    OUTBASE_fragments.txt
        One row per fragment, giving its sample, transcript, read name,
        start and end (1-based, inclusive), and width

    OUTBASE_summary.txt
        For each sample and transcript, counts of pairs read, compatible
        and incompatible pairs, mapped fragments, and skipped records

    OUTBASE_lengths.[FIGFORMAT]
        With ``--plot``, density of fragment lengths in each sample

    OUTBASE_TRANSCRIPT_positions.[FIGFORMAT]
        With ``--plot``, fragment coverage along each transcript

where `OUTBASE` is supplied by the user.
"""
import argparse
import inspect
import sys
import warnings
from collections import OrderedDict

import pandas as pd

from txfrag.genomics.compatibility import FragmentReport, read_transcript_fragments
from txfrag.plotting.plots import fragment_length_plot, fragment_position_plot
from txfrag.util.io.filters import NameDateWriter
from txfrag.util.io.openers import argsopener, get_short_name
from txfrag.util.scriptlib.argparsers import AlignmentParser, AnnotationParser, BaseParser, PlottingParser
from txfrag.util.scriptlib.help_formatters import format_module_docstring
from txfrag.util.services.exceptions import ERROR_POLICIES

warnings.simplefilter("once")
printer = NameDateWriter(get_short_name(inspect.stack()[-1][1]))

FRAGMENT_COLUMNS = ["sample", "transcript_id", "name", "start", "end", "width"]


def get_fragment_rows(sample, bamfile, transcript, stranded=False, errors="warn", strict=False):
    """Map fragments from one alignment file onto one transcript

    Parameters
    ----------
    sample : str
        Sample name

    bamfile : str
        Path to sorted, indexed `BAM`_ file

    transcript : |Transcript|

    stranded, errors, strict
        Passed to :func:`~txfrag.genomics.compatibility.read_transcript_fragments`

    Returns
    -------
    list of tuple
        Rows of fragment table

    OrderedDict
        Summary row
    """
    report = FragmentReport()
    fragments = read_transcript_fragments(bamfile, transcript, stranded=stranded,
                                          errors=errors, report=report, strict=strict)
    rows = [(sample, X.transcript_id, X.name, X.start, X.end, X.width) for X in fragments]

    summary = OrderedDict([("sample", sample),
                           ("transcript_id", transcript.get_name()),
                           ("length", transcript.get_length())])
    summary.update(report.as_dict())
    return rows, summary


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
    al = AlignmentParser()
    an = AnnotationParser()
    pp = PlottingParser()
    bp = BaseParser()

    parser = argparse.ArgumentParser(description=format_module_docstring(__doc__),
                                     formatter_class=argparse.RawDescriptionHelpFormatter,
                                     conflict_handler="resolve",
                                     parents=[bp.get_parser(),
                                              an.get_parser(),
                                              al.get_parser(),
                                              pp.get_parser()])
    parser.add_argument("outbase", type=str, help="Required. Basename for output files")
    parser.add_argument("--strict", default=False, action="store_true",
                        help="Count pairs with a block wholly inside an intron as incompatible, "
                             "rather than as mapping failures")
    parser.add_argument("--errors", default="warn", choices=ERROR_POLICIES,
                        help="What to do with ambiguous pairings and pairs that cannot be mapped: "
                             "warn and skip, silently skip, or stop (Default: %(default)s)")
    parser.add_argument("--plot", default=False, action="store_true",
                        help="Plot fragment length distributions and fragment positions")

    args = parser.parse_args(argv)
    bp.get_base_ops_from_args(args)
    pp.set_style_from_args(args)

    bam_files = al.get_alignment_files_from_args(args, printer=printer)
    transcripts = an.get_transcripts_from_args(args, printer=printer)
    if len(transcripts) == 0:
        printer.write("No transcripts to analyze. Exiting.")
        sys.exit(1)

    printer.write("Mapping fragments from %s samples onto %s transcripts..." % (len(bam_files), len(transcripts)))
    rows = []
    summaries = []
    for sample, bamfile in bam_files.items():
        printer.write("Processing sample '%s' ..." % sample)
        for n, transcript in enumerate(transcripts):
            if n % 1000 == 1:
                printer.write("    Processed %s transcripts ..." % n)
            frag_rows, summary = get_fragment_rows(sample, bamfile, transcript,
                                                   stranded=args.stranded, errors=args.errors,
                                                   strict=args.strict)
            rows.extend(frag_rows)
            summaries.append(summary)

        printer.write("    Mapped %s fragments." % sum(X["mapped"] for X in summaries if X["sample"] == sample))

    fragments = pd.DataFrame(rows, columns=FRAGMENT_COLUMNS)
    summary = pd.DataFrame(summaries)

    fn = "%s_fragments.txt" % args.outbase
    printer.write("Saving fragments to %s ..." % fn)
    with argsopener(fn, args) as fh:
        fragments.to_csv(fh, sep="\t", index=False, header=True, na_rep="nan")

    fn = "%s_summary.txt" % args.outbase
    printer.write("Saving summary to %s ..." % fn)
    with argsopener(fn, args) as fh:
        summary.to_csv(fh, sep="\t", index=False, header=True)

    if args.plot == True:
        import matplotlib.pyplot as plt
        colors = pp.get_colors_from_args(args, len(bam_files))
        title = args.title if args.title is not None else args.outbase

        widths = OrderedDict((K, fragments["width"][fragments["sample"] == K].values) for K in bam_files)
        fig = pp.get_figure_from_args(args)
        fig, ax = fragment_length_plot(widths, axes=fig.add_subplot(111))
        ax.set_title("Fragment lengths: %s" % title)
        fn = "%s_lengths.%s" % (args.outbase, args.figformat)
        printer.write("Plotting to %s ..." % fn)
        fig.savefig(fn, dpi=args.dpi, bbox_inches="tight")
        plt.close(fig)

        for transcript in transcripts:
            txid = transcript.get_name()
            fig = pp.get_figure_from_args(args)
            ax = fig.add_subplot(111)
            for color, sample in zip(colors, bam_files):
                sub = fragments[(fragments["sample"] == sample) & (fragments["transcript_id"] == txid)]
                fragment_position_plot(sub.itertuples(index=False), transcript.get_length(),
                                       axes=ax, color=color, label=sample)
            ax.legend(loc="upper right", frameon=False)
            ax.set_title("%s: %s" % (txid, title))
            fn = "%s_%s_positions.%s" % (args.outbase, txid, args.figformat)
            printer.write("Plotting to %s ..." % fn)
            fig.savefig(fn, dpi=args.dpi, bbox_inches="tight")
            plt.close(fig)

    printer.write("Done.")


if __name__ == "__main__":
    main()

#!/usr/bin/env python
"""This module contains classes that:

  - build :class:`argparse.ArgumentParser` objects for the inputs used in
    fragment analyses

  - parse those arguments into useful objects


Arguments are grouped into the following sets:

    ===========================================================   ======================================
    **Parameter/argument set**                                    **Parser building class**
    -----------------------------------------------------------   --------------------------------------
    Generic parameters (e.g. for warning control)                 :class:`BaseParser`

    Paired-end `BAM`_ files, given directly or by manifest        :class:`AlignmentParser`

    `GTF2`_ annotation, and genes or transcripts to analyze       :class:`AnnotationParser`

    Genomic sequence files                                        :class:`SequenceParser`

    Plotting parameters for charts                                :class:`PlottingParser`
    ===========================================================   ======================================


Example
-------
To use any of these in your own command line scripts, build a parser from
each factory and supply these as `parents` to your script's
:py:class:`~argparse.ArgumentParser`::

    >>> ap = AnnotationParser()
    >>> bp = AlignmentParser()
    >>> parser = argparse.ArgumentParser(parents=[ap.get_parser(), bp.get_parser()])
    >>> parser.add_argument("outbase", type=str)
    >>> args = parser.parse_args()

    >>> transcripts = ap.get_transcripts_from_args(args)
    >>> bam_files = bp.get_alignment_files_from_args(args)


See Also
--------
:py:mod:`argparse`
    Python documentation on argument parsing

:py:obj:`txfrag.bin`
    Source code of command-line scripts, for further examples
"""
import argparse
import sys
import warnings
from collections import OrderedDict

import numpy

from txfrag.genomics.alignments import check_index
from txfrag.genomics.annotation import AnnotationRepository
from txfrag.genomics.seqtools import get_seqdict
from txfrag.readers.manifest import get_alignment_filenames, read_sample_manifest
from txfrag.util.io.openers import NullWriter, get_short_name
from txfrag.util.services.exceptions import DataWarning, FileFormatWarning, MalformedFileError, \
                                            MissingIndexError, filterwarnings

#===============================================================================
# INDEX: Constants used in parsers below
#===============================================================================

_DEFAULT_ALIGNMENT_PARSER_TITLE = "alignment file options"
_DEFAULT_ALIGNMENT_PARSER_DESCRIPTION = \
"""Give paired-end BAM files with --count_files, or name them by run in a
sample manifest with --manifest. BAM files must be sorted and indexed."""

_DEFAULT_ANNOTATION_PARSER_TITLE = "annotation file options (one or more annotation files required)"
_DEFAULT_ANNOTATION_PARSER_DESCRIPTION = \
"""Open one or more GTF2 files. Restrict analysis to specific transcripts with
--transcript, or to all transcripts of specific genes with --gene."""

_DEFAULT_SEQUENCE_PARSER_TITLE = "sequence options"
_DEFAULT_SEQUENCE_PARSER_DESCRIPTION = ""

_DEFAULT_PLOTTING_TITLE = "Plotting options"

BAM_INDEX_MESSAGE = \
"""Input BAM file(s) not indexed. Please sort and index via:

    samtools sort -o sorted.bam %s
    samtools index sorted.bam
"""


#===============================================================================
# INDEX: Base class for parsers
#===============================================================================

class Parser(object):
    """Base class for argument parser factories used below

    Parameters
    ----------
    groupname : str, optional
        Name of argument group. If not `None`, an argument group with
        the specified name will be created and added to the parser.
        If not, arguments will be in the main group.

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self, groupname=None, prefix="", disabled=None):
        self.prefix = prefix
        self.disabled = [] if disabled is None else disabled
        self.groupname = groupname

        # define in __init__ of subclass
        self.arguments = []

    def get_parser(self, parser=None, groupname=None, arglist=None, title=None, description=None, **kwargs):
        """Create and populate an :class:`argparse.ArgumentParser` with arguments

        Parameters
        ----------
        parser : :class:`argparse.ArgumentParser` or None, optional
            If `None`, a new parser will be created, and arguments will be added
            to it. If not `None`, arguments will be added to `parser`.

        groupname : str or None, optional
            If `None`, default to `self.groupname`. If either is not `None`,
            arguments are added to an option group titled `title`
            instead of the main argument group of `parser`.

        arglist : list, optional
            List of tuples of ('argument_name', dict_of_options). If `None`,
            arguments are taken from `self.arguments`.

        title : str, optional
            Optional title for parser

        description : str, optional
            Optional description for parser

        kwargs : keyword arguments
            Additional arguments passed during creation of :class:`argparse.ArgumentParser`

        Returns
        -------
        :class:`argparse.ArgumentParser`
        """
        if groupname is None:
            groupname = self.groupname

        if parser is None:
            if groupname is None:
                parser = argparse.ArgumentParser(description=description, add_help=False, **kwargs)
            else:
                parser = argparse.ArgumentParser(add_help=False, **kwargs)

        addto = parser
        if groupname is not None:
            addto = parser.add_argument_group(title=title, description=description)

        arglist = self.arguments if arglist is None else arglist
        for arg_name, arg_opts in filter(lambda x: x[0] not in self.disabled, arglist):
            addto.add_argument("--%s%s" % (self.prefix, arg_name), **arg_opts)

        return parser


#===============================================================================
# INDEX: Alignment file parser
#===============================================================================

class AlignmentParser(Parser):
    """Parser for paired-end `BAM`_ files, given directly or listed in a
    sample manifest

    Parameters
    ----------
    groupname : str, optional
        Name of argument group

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self, groupname="alignment_options", prefix="", disabled=None):
        Parser.__init__(self, groupname=groupname, prefix=prefix, disabled=disabled)
        self.arguments = [
            ("count_files", dict(type=str, default=[], nargs="+", metavar="infile.bam",
                                 help="One or more sorted, indexed, paired-end BAM files")),
            ("manifest",    dict(type=str, default=None, metavar="manifest.csv",
                                 help="Sample manifest listing runs. BAM files are named "
                                      "after runs, as `BAM_DIR/RUN.bam`")),
            ("bam_dir",     dict(type=str, default=".",
                                 help="Folder containing BAM files named in manifest (Default: %(default)s)")),
            ("run_column",  dict(type=str, default="run",
                                 help="Manifest column holding run identifiers (Default: %(default)s)")),
            ("stranded",    dict(default=False, action="store_true",
                                 help="Only use pairs whose read 1 strand matches the transcript strand "
                                      "(Default: use pairs on either strand)")),
        ]

    def get_parser(self,
                   title=_DEFAULT_ALIGNMENT_PARSER_TITLE,
                   description=_DEFAULT_ALIGNMENT_PARSER_DESCRIPTION,
                   **kwargs):
        """Return an :py:class:`~argparse.ArgumentParser` that opens `BAM`_ files

        Parameters
        ----------
        title : str, optional
            title for option group (used in command-line help screen)

        description : str, optional
            description of parser (used in command-line help screen)

        kwargs : keyword arguments
            Additional arguments to pass to :meth:`Parser.get_parser`

        Returns
        -------
        :class:`argparse.ArgumentParser`
        """
        return Parser.get_parser(self, title=title, description=description, **kwargs)

    def get_alignment_files_from_args(self, args, printer=None):
        """Return paths to indexed `BAM`_ files, keyed by sample name

        Samples given with ``--count_files`` are named after their files,
        minus the `.bam` extension. Samples given in a manifest are named
        by run. Exits if no files were given, the manifest is malformed,
        or any file lacks an index.

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Arguments from the parser

        printer : file-like, optional
            A stream to which stderr-like info can be written (default: |NullWriter|)

        Returns
        -------
        :class:`collections.OrderedDict`
            Maps sample names to paths, in input order
        """
        if printer is None:
            printer = NullWriter()

        args = PrefixNamespaceWrapper(args, self.prefix)
        files = OrderedDict((get_short_name(X, terminator=".bam"), X) for X in args.count_files)
        if args.manifest is not None:
            try:
                manifest = read_sample_manifest(args.manifest, run_column=args.run_column)
            except MalformedFileError as exc:
                printer.write(str(exc))
                sys.exit(1)

            printer.write("Read %s runs from manifest '%s'." % (len(manifest), args.manifest))
            files.update(get_alignment_filenames(manifest, directory=args.bam_dir, run_column=args.run_column))

        if len(files) == 0:
            printer.write("Please include at least one input file, via --count_files or --manifest.")
            sys.exit(1)

        missing = []
        for fn in files.values():
            try:
                check_index(fn)
            except MissingIndexError:
                missing.append(fn)

        if len(missing) > 0:
            for fn in missing:
                printer.write(BAM_INDEX_MESSAGE % fn)
            printer.write("Exiting.")
            sys.exit(1)

        return files


#===============================================================================
# INDEX: Annotation file parser
#===============================================================================

class AnnotationParser(Parser):
    """Parser for `GTF2`_ annotation files, plus optional gene or transcript
    selections

    Parameters
    ----------
    groupname : str, optional
        Name of argument group

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self, groupname="annotation_options", prefix="", disabled=None):
        Parser.__init__(self, groupname=groupname, prefix=prefix, disabled=disabled)
        self.arguments = [
            ("annotation_files", dict(type=str, default=[], nargs="+", metavar="infile.gtf",
                                      help="Zero or more GTF2 annotation files (optionally gzipped)")),
            ("gene",             dict(type=str, default=[], nargs="+", metavar="SYMBOL",
                                      help="Analyze all transcripts of these genes, named by gene_name or gene_id")),
            ("transcript",       dict(type=str, default=[], nargs="+", metavar="ID",
                                      help="Analyze these transcripts")),
        ]

    def get_parser(self,
                   title=_DEFAULT_ANNOTATION_PARSER_TITLE,
                   description=_DEFAULT_ANNOTATION_PARSER_DESCRIPTION,
                   **kwargs):
        """Return an :class:`~argparse.ArgumentParser` that opens annotation files

        Returns
        -------
        :class:`argparse.ArgumentParser`
        """
        return Parser.get_parser(self, title=title, description=description, **kwargs)

    def get_repository_from_args(self, args, printer=None):
        """Return an |AnnotationRepository| built from the annotation files in `args`

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        printer : file-like, optional
            A stream to which stderr-like info can be written (Default: |NullWriter|)

        Returns
        -------
        |AnnotationRepository|
        """
        if printer is None:
            printer = NullWriter()

        args = PrefixNamespaceWrapper(args, self.prefix)
        if len(args.annotation_files) == 0:
            printer.write("Please include at least one annotation file.")
            sys.exit(1)

        printer.write("Opening annotation files: %s..." % ", ".join(args.annotation_files))
        try:
            return AnnotationRepository.from_gtf(*args.annotation_files, printer=printer)
        except MalformedFileError as exc:
            printer.write(str(exc))
            sys.exit(1)

    def get_transcripts_from_args(self, args, repository=None, printer=None):
        """Return the |Transcripts| selected by ``--gene`` and ``--transcript``,
        or all transcripts if neither was given

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        repository : |AnnotationRepository| or None, optional
            Repository to query. If `None`, one is built from `args`

        printer : file-like, optional
            A stream to which stderr-like info can be written (Default: |NullWriter|)

        Returns
        -------
        list of |Transcript|
            Selected transcripts, without duplicates, in the order requested
        """
        if printer is None:
            printer = NullWriter()

        if repository is None:
            repository = self.get_repository_from_args(args, printer=printer)

        args = PrefixNamespaceWrapper(args, self.prefix)
        if len(args.gene) == 0 and len(args.transcript) == 0:
            return list(repository)

        selected = OrderedDict()
        try:
            for symbol in args.gene:
                for tx in repository.get_transcripts(symbol):
                    selected[tx.get_name()] = tx
            for txid in args.transcript:
                selected[txid] = repository.get_transcript(txid)
        except KeyError as exc:
            printer.write(exc.args[0])
            sys.exit(1)

        return list(selected.values())


#===============================================================================
# INDEX: Sequence parser
#===============================================================================

class SequenceParser(Parser):
    """Parser for sequence files

    Parameters
    ----------
    groupname : str, optional
        Name of argument group

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes

    input_choices : list, optional
        list of permitted sequence file formats
    """

    def __init__(self, groupname="sequence_options", prefix="", disabled=None,
                 input_choices=("fasta", "genbank", "twobit")):
        Parser.__init__(self, groupname=groupname, prefix=prefix, disabled=disabled)
        self.input_choices = input_choices
        self.arguments = [
            ("sequence_file",   dict(metavar="infile.[%s]" % " | ".join(input_choices),
                                     type=str,
                                     help="A file of genomic DNA sequence")),
            ("sequence_format", dict(choices=input_choices,
                                     default="fasta",
                                     help="Format of %ssequence_file (Default: fasta)." % prefix)),
        ]

    def get_parser(self,
                   title=_DEFAULT_SEQUENCE_PARSER_TITLE,
                   description=_DEFAULT_SEQUENCE_PARSER_DESCRIPTION,
                   **kwargs):
        """Return an :py:class:`~argparse.ArgumentParser` that opens sequence files"""
        return Parser.get_parser(self, title=title, description=description, **kwargs)

    def get_seqdict_from_args(self, args, index=True, printer=None):
        """Retrieve a dictionary-like object of sequences

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        index : bool, optional
            If sequence format is anything other than twobit, open with
            lazily-evaluating :func:`Bio.SeqIO.index` instead of
            :func:`Bio.SeqIO.to_dict` (Default: `True`)

        printer : file-like
            A stream to which stderr-like info can be written (Default: |NullWriter|)

        Returns
        -------
        dict-like
            Dictionary-like object mapping chromosome names to
            :class:`Bio.SeqRecord.SeqRecord`-like objects
        """
        if printer is None:
            printer = NullWriter()

        args = PrefixNamespaceWrapper(args, self.prefix)
        if args.sequence_file is None:
            printer.write("Please specify a sequence file with --%ssequence_file." % self.prefix)
            sys.exit(1)

        printer.write("Opening sequence file '%s'." % args.sequence_file)
        return get_seqdict(args.sequence_file, format=args.sequence_format, index=index)


#===============================================================================
# INDEX: Plotting parser
#===============================================================================

class PlottingParser(Parser):
    """Parser for plotting options

    Parameters
    ----------
    groupname : str, optional
        Name of argument group

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self, groupname="plotting_options", prefix="", disabled=None):
        Parser.__init__(self, groupname=groupname, prefix=prefix, disabled=disabled)
        import matplotlib.style
        from matplotlib.backend_bases import FigureCanvasBase as fcb

        filetypes = sorted(fcb.get_supported_filetypes().keys())
        self.arguments = [
            ("figformat",  dict(default="png", type=str, choices=filetypes,
                                help="File format for figure(s); Default: %(default)s)")),
            ("figsize",    dict(nargs=2, default=None, type=float, metavar="N",
                                help="Figure width and height, in inches. (Default: use matplotlibrc params)")),
            ("title",      dict(type=str, default=None, help="Base title for plot(s).")),
            ("cmap",       dict(type=str, default=None,
                                help="Matplotlib color map from which palette will be made (e.g. 'Blues','autumn','Set1'; "
                                     "default: use color cycle in matplotlibrc or ``--stylesheet``)")),
            ("dpi",        dict(type=int, default=150,
                                help="Figure resolution (Default: %(default)s)")),
            ("stylesheet", dict(default=None, choices=matplotlib.style.available,
                                help="Use this matplotlib stylesheet instead of matplotlibrc params")),
        ]

    def get_parser(self, title=_DEFAULT_PLOTTING_TITLE, description=None):
        """Return an :py:class:`~argparse.ArgumentParser` to control plotting"""
        return Parser.get_parser(self, title=title, description=description)

    def set_style_from_args(self, args):
        """Apply the matplotlib stylesheet named in `args`, if any"""
        import matplotlib.style
        args = PrefixNamespaceWrapper(args, self.prefix)
        if getattr(args, "stylesheet", None) is not None:
            matplotlib.style.use(args.stylesheet)

    def get_figure_from_args(self, args, **kwargs):
        """Return a :class:`matplotlib.figure.Figure` following arguments from :meth:`get_parser`

        A new figure is created with parameters specified in `args`. If these are
        not found, values found in `**kwargs` will instead be used. If these are
        not found, we fall back to matplotlibrc values.

        Parameters
        ----------
        args : :class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        kwargs : keyword arguments
            Fallback arguments for items not defined in `args`, plus any other
            keyword arguments.

        Returns
        -------
        :class:`matplotlib.figure.Figure`
        """
        import matplotlib.pyplot as plt
        args = PrefixNamespaceWrapper(args, self.prefix)

        figsize = kwargs.get("figsize", getattr(args, "figsize", None))
        if figsize is not None:
            kwargs["figsize"] = figsize

        return plt.figure(**kwargs)

    def get_colors_from_args(self, args, num_colors):
        """Return a list of colors from arguments parsed by :meth:`get_parser`

        If a matplotlib colormap is specified in `args.cmap`, colors will be
        generated from that map. Otherwise, colors will be chosen from the
        color cycle of the active stylesheet or ``matplotlibrc``.

        Parameters
        ----------
        args : :class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        num_colors : int
            Number of colors to fetch

        Returns
        -------
        list
            List of matplotlib colors
        """
        import matplotlib
        from itertools import cycle

        args = PrefixNamespaceWrapper(args, self.prefix)
        cmap_name = getattr(args, "cmap", None)

        if cmap_name is not None:
            cmap = matplotlib.colormaps[cmap_name]
            if num_colors > 1:
                return list(cmap(numpy.linspace(0, 1.0, num_colors)))
            return [cmap(0.5)]

        color_cycle = cycle(matplotlib.rcParams["axes.prop_cycle"].by_key()["color"])
        return [next(color_cycle) for _ in range(num_colors)]


#===============================================================================
# INDEX: Parser for generic command-line options (e.g. warning control)
#===============================================================================

class BaseParser(Parser):
    """Parser for basic options, such as warning control

    Parameters
    ----------
    groupname : str, optional
        Name of argument group

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self, groupname="base_options", prefix="", disabled=None):
        Parser.__init__(self, groupname=groupname, prefix=prefix, disabled=disabled)
        self.arguments = []

    def get_parser(self, title=None, description=None):
        """Return an :py:class:`~argparse.ArgumentParser` with warning options"""
        p = Parser.get_parser(self)
        g = p.add_argument_group(title="warning/error options")

        g.add_argument("-q", "--quiet", dest="warnlevel", action="store_const", const=-1,
                       help="Suppress all warning messages. Cannot use with '-v'.")
        g.add_argument("-v", "--verbose", dest="warnlevel", action="count",
                       help="Increase verbosity. With '-v', show every warning. With '-vv', turn warnings "
                            "into exceptions. Cannot use with '-q'. (Default: show each type of warning once)")
        p.set_defaults(warnlevel=0)

        return p

    def get_base_ops_from_args(self, args):
        """Install warning filters for the verbosity level in `args`"""
        args = PrefixNamespaceWrapper(args, self.prefix)
        warnlevel = args.warnlevel
        actions = ["ignore",
                   "onceperfamily",
                   "always",
                   "error"]

        if warnlevel >= len(actions) - 1:
            warnlevel = len(actions) - 2
        try:
            action = actions[warnlevel + 1]
        except IndexError:
            warnings.warn("Invalid warning level. Expected -1 to 2, found %s. Defaulting to showing each type once." % warnlevel,
                          UserWarning)
            action = actions[1]

        for type_, msg in TXFRAG_WARNINGS:
            filterwarnings(action, message=msg, category=type_)

        return action


TXFRAG_WARNINGS = [

    # alignments
    (DataWarning, r".*Ambiguous pairing for read"),

    # compatibility
    (DataWarning, r".*is not within any exon"),

    # plots
    (DataWarning, r".*Skipping density estimate for sample"),

    # fragment_bias
    (DataWarning, r".*because it has no annotation"),

    # gff
    (DataWarning, r".*because it contains exons on multiple chromosomes or strands"),
    (DataWarning, r".*because its exons overlap"),
    (DataWarning, r".*with no transcript_id"),

    # gff_tokens
    (FileFormatWarning, r".*Found duplicate attribute key"),
]
"""Families of warnings, as `(category, message regex)`, controlled by `-q` and `-v`"""


#===============================================================================
# INDEX: Namespace helpers
#===============================================================================

class PrefixNamespaceWrapper(object):
    """Wrapper class to facilitate processing of :py:class:`~argparse.Namespace`
    objects created by parsers with non-empty ``prefix`` values, as if no
    prefix had been used.

    Attributes
    ----------
    namespace : :py:class:`~argparse.Namespace`
        Result of calling :py:meth:`argparse.ArgumentParser.parse_args`

    prefix : str
        Prefix that will be prepended to names of attributes of `self.namespace`
        before they are fetched
    """

    def __init__(self, namespace, prefix):
        self.namespace = namespace
        self.prefix = prefix

    def __getattr__(self, k):
        return getattr(self.namespace, "%s%s" % (self.prefix, k))

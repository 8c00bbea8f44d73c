#!/usr/bin/env python
"""Wrappers for opening, closing, and writing files.

Important methods
-----------------
:py:func:`argsopener`
    Opens a file for writing within a command-line script and writes to it
    all command-line arguments as a pretty-printed dictionary of metadata,
    commented out. The open file handle is then returned for subsequent
    writing

:py:func:`read_pl_table`
    Open a table written by one of :data:`txfrag`'s command-line scripts
    into a :class:`pandas.DataFrame`

:py:func:`opener`
    Guess whether a file is bzipped, gzipped, or uncompressed based upon
    file extension, and open it appropriately in text mode

:py:class:`NullWriter`
    Writer that discards everything written to it
"""
import sys
import os
import re
import bz2
import gzip
import datetime

import pandas as pd

from txfrag.util.io.filters import AbstractWriter


class NullWriter(AbstractWriter):
    """Writes to system-dependent null location.
    On Unix-like systems & OSX, this is typically /dev/null. On Windows, simply "nul"
    """

    def __init__(self):
        self.stream = open(os.devnull, "w")

    def filter(self, data):
        return data

    def __repr__(self):
        return "NullWriter()"

    def __str__(self):
        return self.__repr__()


def opener(filename, mode="r", **kwargs):
    """Open a file, detecting whether it is compressed based upon its extension:

       +----------------+------------------+
       | File ends with | Presumed to be   |
       +================+==================+
       | gz             |    gzipped       |
       +----------------+------------------+
       | bz2            |    bzipped       |
       +----------------+------------------+
       | anything else  |    uncompressed  |
       +----------------+------------------+

    Compressed files are opened in text mode unless `mode` contains ``'b'``.

    Parameters
    ----------
    filename : str
        Name of file to open

    mode : str
        Mode in which to open file (e.g. "r", "a, "w" with or without "b")

    **kwargs
        Other parameters to pass to appropriate file opener
    """
    if filename.endswith(".gz"):
        call_func = gzip.open
    elif filename.endswith(".bz2"):
        call_func = bz2.open
    else:
        return open(filename, mode, **kwargs)

    if "b" not in mode and "t" not in mode:
        mode += "t"
    return call_func(filename, mode, **kwargs)


def read_pl_table(filename, **kwargs):
    """Open a table saved by one of :data:`txfrag`'s command-line scripts,
    passing default arguments to :func:`pandas.read_csv`:

        ==========   =======
        Key          Value
        ----------   -------
        sep          `"\\t"`
        comment      `"#"`
        index_col    `None`
        header       `0`
        ==========   =======

    Parameters
    ----------
    filename : str
        Name of file. Can be gzipped or bzipped.

    kwargs : keyword arguments
        Other keyword arguments to pass to :func:`pandas.read_csv`.
        Will override defaults.

    Returns
    -------
    :class:`pandas.DataFrame`
    """
    args = {
        "sep": "\t",
        "comment": "#",
        "index_col": None,
        "header": 0,
    }
    args.update(kwargs)
    return pd.read_csv(filename, **args)


def get_short_name(inpt, separator=os.path.sep, terminator=""):
    """Give the basename of a filename or module name passed as a string.
    If the string doesn't match the pattern specified by the separator
    and terminator, it is returned unchanged.

    Examples
    --------
    >>> get_short_name("test.py",terminator=".py")
    'test'

    >>> get_short_name("/home/jdoe/test.py",terminator=".py")
    'test'

    >>> get_short_name("txfrag.bin.tx_fragments",separator=r"\\.")
    'tx_fragments'

    Parameters
    ----------
    inpt : str
        Input

    separator : str, optional
        Path separator, as a regex fragment (default: :obj:`os.path.sep`)

    terminator : str, optional
        Suffix to remove (default: "")

    Returns
    -------
    str
    """
    tlen = len(terminator)
    if tlen > 0 and inpt.endswith(terminator):
        inpt = inpt[:-tlen]

    pat = r"([^%s]+)+$" % separator
    match = re.search(pat, inpt)
    if match is None:
        return inpt

    return match.group(1)


def argsopener(filename, namespace, mode="w", **kwargs):
    """Open a file for writing, and write to it command-line arguments
    formatted as a pretty-printed dictionary in comment metadata.

    Parameters
    ----------
    filename : str
        Name of file to open. If it terminates in `'.gz'` or `'.bz2'`
        the filehandle will write to a gzipped or bzipped file

    namespace : :py:class:`argparse.Namespace`
        Namespace object from argparse.ArgumentParser

    mode : str
        Mode of writing (`'w'` or `'wt'`)

    **kwargs
        Other keyword arguments to pass to file opener

    Returns
    -------
    open filehandle
    """
    if "w" not in mode:
        mode += "w"
    fout = opener(filename, mode, **kwargs)
    fout.write(args_to_comment(namespace))
    return fout


def args_to_comment(namespace):
    """Format a :class:`argparse.Namespace` into a comment block
    for the header of an output file

    Parameters
    ----------
    namespace  : :py:class:`argparse.Namespace`
        Namespace object returned by argparse.ArgumentParser

    Returns
    -------
    str
    """
    ltmp = [
        "## date = '%s'" % datetime.datetime.today(),
        "## execstr = '%s'" % " ".join(sys.argv),
        "## args = {  ",
    ]
    ltmp2 = ["##" + X for X in pretty_print_dict(vars(namespace)).split("\n")[1:-2]]
    return "\n".join(ltmp) + "\n" + "\n".join(ltmp2) + "\n##        }\n"


def pretty_print_dict(dtmp):
    """Pretty print an un-nested dictionary

    Parameters
    ----------
    dtmp : dict

    Returns
    -------
    str
    """
    if len(dtmp) == 0:
        return "{\n\n}\n"

    maxlen = 2 + max(len(K) for K in dtmp)
    ltmp = []
    for k, v in sorted(dtmp.items(), key=lambda x: x[0]):
        if isinstance(v, str):
            v = "'%s'" % v
        new_k = "'%s'" % k
        ltmp.append(("          {0:<%s} : {1}," % maxlen).format(new_k, v))

    return "{\n%s\n}\n" % "\n".join(ltmp)

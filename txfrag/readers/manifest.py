#!/usr/bin/env python
"""Read sample manifests: tables listing sequencing runs, one per row.

A manifest has at least a run identifier column and a sequencing center
column. Other columns are kept. Comma- and tab-delimited manifests are
both accepted; the delimiter is chosen from the file extension unless
given explicitly::

    run,center
    SRR0000001,BI
    SRR0000002,UW
"""
import os
from collections import OrderedDict

import pandas as pd

from txfrag.util.services.exceptions import MalformedFileError

_TAB_EXTENSIONS = (".tsv", ".txt", ".tab")


def read_sample_manifest(filename, run_column="run", center_column="center", sep=None):
    """Read a sample manifest into a :class:`pandas.DataFrame`

    Parameters
    ----------
    filename : str
        Path to manifest. May be gzipped

    run_column : str, optional
        Name of column holding run identifiers (Default: `'run'`)

    center_column : str, optional
        Name of column holding sequencing centers (Default: `'center'`)

    sep : str or None, optional
        Column delimiter. If `None`, use a tab for files ending in
        `.tsv`, `.txt`, or `.tab` (optionally gzipped), otherwise a comma

    Returns
    -------
    :class:`pandas.DataFrame`
        Manifest, with run identifiers as strings, in file order

    Raises
    ------
    MalformedFileError
        If a required column is missing, or run identifiers are repeated
    """
    if sep is None:
        base = filename[:-3] if filename.endswith(".gz") else filename
        sep = "\t" if base.endswith(_TAB_EXTENSIONS) else ","

    df = pd.read_csv(filename, sep=sep, comment="#", dtype={run_column: str})
    df.columns = [str(X).strip() for X in df.columns]

    missing = [X for X in (run_column, center_column) if X not in df.columns]
    if len(missing) > 0:
        raise MalformedFileError(filename, "Missing required column(s): %s. Found: %s." % (
            ", ".join(missing), ", ".join(df.columns)))

    duplicated = df[run_column][df[run_column].duplicated()]
    if len(duplicated) > 0:
        raise MalformedFileError(filename, "Run identifier(s) appear more than once: %s." % (
            ", ".join(sorted(set(duplicated)))))

    return df


def get_alignment_filenames(manifest, directory=".", suffix=".bam", run_column="run"):
    """Build paths to alignment files named after each run in `manifest`

    Parameters
    ----------
    manifest : :class:`pandas.DataFrame`
        Manifest from :func:`read_sample_manifest`

    directory : str, optional
        Folder containing alignment files (Default: current directory)

    suffix : str, optional
        Suffix appended to run identifiers (Default: `'.bam'`)

    run_column : str, optional
        Name of column holding run identifiers

    Returns
    -------
    :class:`collections.OrderedDict`
        Maps run identifiers to paths, in manifest order
    """
    return OrderedDict((run, os.path.join(directory, "%s%s" % (run, suffix))) for run in manifest[run_column])

#!/usr/bin/env python
"""Exception and warning classes used by :data:`txfrag`, a custom warning
filter action called `"onceperfamily"`, and colorized warning output.

Contents:

.. contents::
   :local:


Exception types
---------------
|MalformedFileError|
    Raised when a file cannot be parsed as expected, and execution must halt

|MappingOutOfRange|
    Raised when a genomic position falls outside every exon of a
    |SegmentChain|, e.g. in an intron, or beyond a transcript's ends.
    Subclass of :class:`KeyError`

|AmbiguousPairing|
    Raised when the two mates of a read pair cannot be unambiguously
    associated. Recoverable: readers record these on their report objects
    and, by default, issue a |DataWarning| instead of raising

|MissingIndexError|
    Raised when an alignment file has no position index. Fatal for any
    region-restricted read, and raised before the read is attempted


Warning types
-------------
|ArgumentWarning|
    Nonsensical but recoverable command-line arguments

|FileFormatWarning|
    Slightly malformed but usable files

|DataWarning|
    Data with unexpected or out-of-domain values, when skipping
    the offending item is permissible


The `onceperfamily` action
--------------------------
`onceperfamily` groups warning messages into families by regular expression,
and only prints the first warning that matches a family's expression.
Python's native `once` action, in contrast, prints each distinct string once.

Use :func:`filterwarnings` to create the filter, and :func:`warn` or
:func:`warn_explicit` to issue warnings that respect it. All three are
drop-in replacements for their counterparts in :mod:`warnings`.


See also
--------
:mod:`warnings`
    Python's warnings module
"""
import re
import inspect
import linecache
import textwrap
import warnings

from txfrag.util.io.filters import colored

_wrapper = textwrap.TextWrapper(break_long_words=False, width=77)


#===============================================================================
# INDEX: Exception classes
#===============================================================================

class MalformedFileError(Exception):
    """Exception class for when files cannot be parsed as they should be

    Parameters
    ----------
    filename : str
        Name of file causing problem

    message : str
        Message explaining how the file is malformed.

    line_num : int or None, optional
        Number of line causing problems
    """

    def __init__(self, filename, message, line_num=None):
        Exception.__init__(self, filename, message, line_num)
        self.filename = filename
        self.msg = message
        self.line_num = line_num

    def __str__(self):
        if self.line_num is None:
            return "Error opening file '%s': %s" % (self.filename, self.msg)
        else:
            return "Error opening file '%s' at line %s: %s" % (self.filename, self.line_num, self.msg)


class MappingOutOfRange(KeyError):
    """Genomic position does not fall within any segment of a |SegmentChain|

    Parameters
    ----------
    chrom : str
        Chromosome of queried position

    position : int
        Queried position, 0-indexed

    strand : str
        Strand of queried position

    chain : str or None, optional
        Name of the chain that was queried
    """

    def __init__(self, chrom, position, strand, chain=None):
        KeyError.__init__(self, chrom, position, strand, chain)
        self.chrom = chrom
        self.position = position
        self.strand = strand
        self.chain = chain

    def __str__(self):
        stmp = "Position %s:%s(%s) is not within any exon" % (self.chrom, self.position, self.strand)
        if self.chain is not None:
            stmp += " of '%s'" % self.chain
        return stmp + "."


class AmbiguousPairing(ValueError):
    """Mates of a read pair could not be unambiguously associated

    Parameters
    ----------
    query_name : str
        Name of read pair

    reason : str
        Description of the problem
    """

    def __init__(self, query_name, reason):
        ValueError.__init__(self, query_name, reason)
        self.query_name = query_name
        self.reason = reason

    def __str__(self):
        return "Ambiguous pairing for read '%s': %s" % (self.query_name, self.reason)


class MissingIndexError(IOError):
    """Alignment file has no position index

    Parameters
    ----------
    filename : str
        Name of alignment file
    """

    def __init__(self, filename):
        IOError.__init__(self, filename)
        self.filename = filename

    def __str__(self):
        return "Alignment file '%s' has no index. Sort and index it with `samtools sort` and `samtools index`." % self.filename


#===============================================================================
# INDEX: Warning classes
#===============================================================================

class ArgumentWarning(Warning):
    """Warning for nonsensical but recoverable combinations of command-line arguments"""
    pass


class FileFormatWarning(Warning):
    """Warning for slightly malformed but usable files"""
    pass


class DataWarning(Warning):
    """Warning for unexpected attributes of data.
    Raised when:

      - data has nonsensical, but recoverable values
      - values are out of the domain of a given operation, but execution
        can continue if the offending item is skipped
    """
    pass


#===============================================================================
# INDEX: Error policies
#===============================================================================

ERROR_POLICIES = ("warn", "ignore", "raise")


def check_error_policy(errors):
    """Raise :class:`ValueError` if `errors` is not one of :data:`ERROR_POLICIES`"""
    if errors not in ERROR_POLICIES:
        raise ValueError("`errors` must be one of %s. Got '%s'." % (", ".join(ERROR_POLICIES), errors))


def handle_error(exc, errors, stacklevel=2):
    """Apply the recoverable-error policy `errors` to `exc`

    Parameters
    ----------
    exc : Exception
        Recoverable exception

    errors : str
        `'raise'` to raise `exc`, `'warn'` to issue it as a |DataWarning|,
        or `'ignore'` to do nothing.

    stacklevel : int, optional
        Stack level passed to :func:`warn`
    """
    if errors == "raise":
        raise exc
    elif errors == "warn":
        warn(str(exc), DataWarning, stacklevel=stacklevel)


#===============================================================================
# INDEX: onceperfamily filters
#===============================================================================

pl_once_registry = {}
"""Registry of `onceperfamily` warnings that have been seen in the current execution context"""

pl_filters = []
"""txfrag's own warnings filters, which allow additional actions compared to Python's"""


def filterwarnings(action, message="", category=Warning, module="", lineno=0, append=False):
    """Insert an entry into the warnings filter. Behaviors are as in
    :func:`warnings.filterwarnings`, except the additional action
    `'onceperfamily'` allows one warning per family of messages,
    where the family is given by the regex `message`.

    Parameters
    ----------
    action : str
        How the warning should be filtered. Accceptable values are "error",
        "ignore", "always", "default", "module", "once", and "onceperfamily"

    message : str, optional
        Regex used to detect warnings (Default: `""`, match any message)

    category : Warning or subclass, optional
        Type of warning. (Default: :class:`Warning`)

    module : str, optional
        Regex limiting the filter to matching modules (Default: `""`, all modules)

    lineno : int, optional
        If not 0, limit the filter to this line number

    append : bool, optional
        If `True`, add filter to end of filter list instead of to the beginning
    """
    if action == "onceperfamily":
        tup = (action, re.compile(message, re.I), category, re.compile(module), lineno)
        if tup in pl_filters:
            return
        if append:
            pl_filters.append(tup)
        else:
            pl_filters.insert(0, tup)
    else:
        warnings.filterwarnings(action, message=message, category=category,
                                module=module, lineno=lineno, append=append)


def reset_filters():
    """Clear `onceperfamily` filters and the registry of warnings already seen"""
    del pl_filters[:]
    pl_once_registry.clear()


def warn(message, category=None, stacklevel=1):
    """Issue a warning, respecting `onceperfamily` filters

    Parameters
    ----------
    message : str
        Message

    category: :class:`Warning`, or subclass, optional
        Type of warning (Default: :class:`UserWarning`)

    stacklevel : int
        Frame, relative to caller, to which warning is attributed
    """
    if category is None:
        category = UserWarning

    stack = inspect.stack()
    stacklevel = min(stacklevel, len(stack) - 1)
    _, filename, lineno, _, _, _ = stack[stacklevel]
    warn_explicit(message, category, filename, lineno, module=filename)


def warn_explicit(message, category, filename, lineno, module=None, registry=None, module_globals=None):
    """Low-level interface to issue warnings, respecting `onceperfamily` filters.
    Parameters are as in :func:`warnings.warn_explicit`.
    """
    if module is None:
        frame = inspect.currentframe()
        try:
            caller = inspect.getmodule(frame.f_back.f_code) if frame is not None else None
            module = __name__ if caller is None else caller.__name__
        finally:
            del frame

    for _, pat, filter_category, mod, filter_line in pl_filters:
        if pat.match(message) and issubclass(category, filter_category) \
           and mod.match(module) and (filter_line == 0 or filter_line == lineno):
            tup = (pat.pattern, filter_category, mod.pattern, filter_line)
            if tup in pl_once_registry:
                return

            pl_once_registry[tup] = 1
            break

    warnings.warn_explicit(message, category, filename, lineno, module=module,
                           registry=registry, module_globals=module_globals)


#===============================================================================
# INDEX: output formatting
#===============================================================================

def formatwarning(message, category, filename, lineno, file=None, line=None):
    """Colorize warnings for readability. Overrides :func:`warnings.formatwarning`

    Parameters
    ----------
    message : str
        Warning message

    category : Warning
        Class (not instance) of warning

    filename : str
        Name of file calling warning

    lineno : int
        Line in file calling warning

    line : str
        Text of line in file calling warning. If `None`, lines surrounding
        `lineno` are read from `filename`

    Returns
    -------
    str
        Pretty-printed warning message
    """
    sep = colored("-" * 75, color="cyan")
    message = str(message)
    if "\n" not in message:
        message = _wrapper.fill(message)

    message = colored(message, color="white", attrs=["bold"])
    name = colored(category.__name__, color="cyan", attrs=["bold"])

    if line is None:
        fmtstr = "{0: >%ss} {1}" % len(str(lineno + 3))
        lines = []
        for x in range(max(0, lineno - 2), lineno + 3):
            tmpline = linecache.getline(filename, x).strip("\n")
            if tmpline:
                attrs = ["bold"] if x == lineno else []
                lines.append(fmtstr.format(colored(x, color="green", attrs=attrs),
                                           colored(tmpline, attrs=attrs)))
        line = "\n".join(lines)

    where = "in %s, line %s:" % (colored(filename, color="cyan"), lineno)

    return "\n".join([sep, name, message, where, "", line, "", sep, ""])


warnings.formatwarning = formatwarning

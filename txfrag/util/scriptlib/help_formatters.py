#!/usr/bin/env python
"""Post-processors that reformat module docstrings for use as command-line
script help, by removing substitutions, `reStructuredText`_ roles and links,
and truncating at `numpydoc`_ section headers.
"""
import re

pyrst_pattern = re.compile(r"(?P<spacing>^|\s+)(?::(?P<domain>[^:`<>]+))?:(?P<role>[^:`]*):`(?P<argument>[^`<>]+)(?: +<(?P<pointer>[^`]+)>)?`")
"""Matches `reStructuredText`_ roles of the form ``:domain:role:`argument```
or ``:role:`argument```, when preceded by whitespace or at the start of a line"""

subst_pattern = re.compile(r"\|([^|]*)\|")
"""Matches `reStructuredText`_ substitution tokens of the form ``|substitution|``"""

link_pattern = re.compile(r"`([^`<>]+)( <[^`]+>)?`_")
"""Matches `reStructuredText`_ link references of forms ```Linkname`_``
and ```Link text <url>`_``"""

_separator = "\n" + (78 * "-") + "\n"

_NUMPYDOC_SECTIONS = ("Parameters", "Returns", "Yields", "Raises", "Attributes")


def shorten_help(inp):
    """Strip `reStructuredText`_ markup from a docstring, and truncate it at the
    first `numpydoc`_ section header

    Parameters
    ----------
    inp : str
        Docstring to format

    Returns
    -------
    str
        Cleaned help text
    """
    inp = pyrst_pattern.sub(r"\g<spacing>\g<argument>", inp)
    inp = subst_pattern.sub(r"\g<1>", inp)
    inp = link_pattern.sub(r"\g<1>", inp)

    indices = [inp.find(X) for X in _NUMPYDOC_SECTIONS]
    indices = [X for X in indices if X != -1]
    end = min(indices) if len(indices) > 0 else len(inp)

    return inp[:end].strip() + "\n"


def format_module_docstring(inp):
    """Format a module docstring as command-line help, surrounded by separators

    Parameters
    ----------
    inp : str
        Module docstring to format

    Returns
    -------
    str
    """
    return _separator + "\n" + shorten_help(inp) + "\n" + _separator

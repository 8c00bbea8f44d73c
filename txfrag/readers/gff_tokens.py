#!/usr/bin/env python
"""Parse attribute tokens from the ninth column of `GTF2`_ files.

See also
--------
`The Brent lab GTF2.2 specification <http://mblab.wustl.edu/GTF22.html>`_
"""
import shlex
from urllib.parse import unquote

from txfrag.util.services.exceptions import FileFormatWarning, warn


def unescape_GTF2(inp):
    """Unescape percent-encoded characters (e.g. *'%3B'* for *';'*) in a `GTF2`_ token"""
    return unquote(inp)


def parse_GTF2_tokens(inp):
    """Parse tokens in the final column of a `GTF2`_ file into a dictionary
    of attributes. All attributes are returned as unescaped strings.

    If duplicate keys are present (e.g. as in GENCODE `GTF2`_ files),
    their values are catenated, separated by a comma.

    Examples
    --------
        >>> parse_GTF2_tokens('gene_id "mygene"; transcript_id "mytranscript";')
        {'gene_id': 'mygene', 'transcript_id': 'mytranscript'}

        >>> parse_GTF2_tokens('gene_id "mygene"; tag "a"; tag "b";')
        {'gene_id': 'mygene', 'tag': 'a,b'}

    Parameters
    ----------
    inp : str
        Ninth column of `GTF2`_ entry

    Returns
    -------
    dict

    Raises
    ------
    ValueError
        If the column cannot be split into key-value pairs
    """
    d = {}
    items = shlex.split(inp.strip("\n"))
    if len(items) % 2 != 0:
        raise ValueError("GTF2 attribute column has an unpaired token: %s" % inp)

    for i in range(0, len(items), 2):
        key = unescape_GTF2(items[i])
        val = items[i + 1]
        if val.endswith(";"):
            val = val[:-1]
        elif i + 2 < len(items):
            raise ValueError("GTF2 attribute '%s' is not terminated by a semicolon: %s" % (key, inp))

        val = unescape_GTF2(val)
        if key in d:
            warn("Found duplicate attribute key '%s' in GTF2 line. Catenating value with previous value for key in attr dict:\n    %s" % (key, inp),
                 FileFormatWarning)
            d[key] = "%s,%s" % (d[key], val)
        else:
            d[key] = val

    return d

#!/usr/bin/env python
"""Utilities for lightening and darkening colors"""
import numpy
from matplotlib.colors import to_rgba_array

process_black = "#222222"


def lighten(data, amt=0.10):
    """Lighten a vector of colors by fraction `amt` of remaining possible intensity.

    New colors are calculated as::

        >>> new_colors = data + amt*(1.0-data)

    Parameters
    ----------
    data : matplotlib colorspec or sequence of colorspecs
        input color(s)

    amt : float, optional
        Fraction by which to lighten `r`, `g`, and `b`. `a` remains unchanged
        (Default: 0.10)

    Returns
    -------
    numpy.ndarray
        Array of RGBA colors, one row per input color
    """
    data = to_rgba_array(data)
    new_colors = data + amt * (1.0 - data)
    new_colors[:, -1] = data[:, -1]
    return numpy.clip(new_colors, 0.0, 1.0)


def darken(data, amt=0.10):
    """Darken a vector of colors by fraction `amt` of current intensity.
    Parameters and return values are as in :func:`lighten`
    """
    data = to_rgba_array(data)
    new_colors = (1.0 - amt) * data
    new_colors[:, -1] = data[:, -1]
    return new_colors

#!/usr/bin/env python
"""Utility functions for preprocessing data and managing axes"""
import itertools

import numpy
import scipy.stats
import matplotlib
import matplotlib.pyplot as plt


def get_fig_axes(axes=None):
    """Retrieve figure and axes from `axes`. If `axes` is None, create both.

    Parameters
    ----------
    axes : :class:`matplotlib.axes.Axes` or `None`
        Axes in which to place plot. If `None`, a new figure is generated.

    Returns
    -------
    :class:`matplotlib.figure.Figure`
        Parent figure of axes

    :class:`matplotlib.axes.Axes`
        Axes containing plot
    """
    if axes is None:
        fig = plt.figure()
        ax = fig.add_subplot(1, 1, 1)
    else:
        ax = axes
        fig = ax.figure

    return fig, ax


def get_color_cycle():
    """Return an infinite iterator over colors in the matplotlibrc color cycle"""
    return itertools.cycle(matplotlib.rcParams["axes.prop_cycle"].by_key()["color"])


def get_next_color(ax):
    """Return the color matplotlib would assign to the next line drawn on `ax`"""
    colors = matplotlib.rcParams["axes.prop_cycle"].by_key()["color"]
    return colors[len(ax.lines) % len(colors)]


def clean_invalid(x, y, min_x=-numpy.inf, min_y=-numpy.inf, max_x=numpy.inf, max_y=numpy.inf):
    """Remove corresponding values from x and y when one or both of those is `nan` or `inf`,
    and optionally truncate values to minima and maxima

    Parameters
    ----------
    x, y : :class:`numpy.ndarray` or list
        Pair arrays or lists of corresponding numbers

    min_x, min_y, max_x, max_y : number, optional
        If supplied, set values below `min_x` to `min_x`, values larger
        than `max_x` to `max_x` and so for `min_y` and `max_y`

    Returns
    -------
    :class:`numpy.ndarray`
        A shortened version of `x`, excluding invalid values

    :class:`numpy.ndarray`
        A shortened version of `y`, excluding invalid values
    """
    x = numpy.array(x).astype(float)
    y = numpy.array(y).astype(float)

    x[x < min_x] = min_x
    x[x > max_x] = max_x
    y[y < min_y] = min_y
    y[y > max_y] = max_y

    newmask = numpy.isinf(x) | numpy.isnan(x) | numpy.isinf(y) | numpy.isnan(y)
    return x[~newmask], y[~newmask]


def can_estimate_kde(data):
    """Return `True` if `data` has at least two distinct finite values, the
    minimum needed by :func:`get_kde`"""
    data = numpy.asarray(data, dtype=float)
    data = data[numpy.isfinite(data)]
    return len(numpy.unique(data)) > 1


def get_kde(data, log=False, base=10, points=100, bw_method="scott"):
    """Estimate a kernel density (kde) over `data`

    Parameters
    ----------
    data : :class:`numpy.ndarray`
        Data to build kde over. Non-finite values are removed

    log : bool, optional
        If `True`, `data` is log-transformed before the kde is estimated.
        Data are converted back to non-log space afterwards.

    base : 2, 10, or :obj:`numpy.e`, optional
        If `log` is `True`, this serves as the base of the log space.
        If `log` is `False`, this is ignored. (Default: 10)

    points : int
        Number of points over which to evaluate kde. (Default: 100)

    bw_method : str
        Bandwith estimation method. See documentation for
        :obj:`scipy.stats.gaussian_kde`. (Default: "scott")

    Returns
    -------
    :class:`numpy.ndarray`
        Points over which kde is evaluated (x-values), in non-log space

    :class:`numpy.ndarray`
        Value of kde (y-values)
    """
    data = numpy.asarray(data, dtype=float)
    data = data[numpy.isfinite(data)]
    if log == True:
        if base == 2:
            func = numpy.log2
        elif base == 10:
            func = numpy.log10
        elif base == numpy.e:
            func = numpy.log
        else:
            raise ValueError("kde: Base must be 2, 10, or numpy.e")

        data = func(data[data > 0])

    domain = numpy.linspace(data.min(), data.max(), points)
    kde = scipy.stats.gaussian_kde(data, bw_method=bw_method)
    curve = kde.evaluate(domain)

    if log == True:
        domain = base**domain

    return domain, curve

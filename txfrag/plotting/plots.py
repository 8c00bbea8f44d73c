#!/usr/bin/env python
"""Plots for exploratory analysis of transcript fragments.

General plots
-------------
    :func:`kde_plot`
        Plot a kernel density estimate (continuous histogram) of data

    :func:`coverage_plot`
        Plot a per-position coverage vector as a filled step track

Fragment plots
--------------
    :func:`fragment_position_plot`
        Coverage of |TranscriptFragments| along a transcript

    :func:`fragment_span_plot`
        Each fragment drawn as a horizontal bar, packed into rows

    :func:`fragment_length_plot`
        Kernel density estimates of fragment lengths, one per sample

    :func:`gc_content_plot`
        Kernel density estimates of fragment GC content, one per sample

    :func:`nucleotide_bias_plot`
        Nucleotide frequencies surrounding fragment 5' ends

All plotting functions accept an `axes` argument. If `None`, a new figure is
created. All return the figure and axes that were drawn on.
"""
import numpy

from txfrag.genomics.coverage import fragment_coverage
from txfrag.plotting.colors import lighten, process_black
from txfrag.plotting.plotutils import get_fig_axes, get_kde, get_next_color, get_color_cycle, \
                                      can_estimate_kde
from txfrag.util.services.exceptions import DataWarning, warn

NUCLEOTIDE_COLORS = {
    "A": "#2ca02c",
    "C": "#1f77b4",
    "G": "#ff7f0e",
    "T": "#d62728",
}


#==============================================================================
# INDEX: General plots
#==============================================================================

def kde_plot(data, axes=None, color=None, label=None, alpha=0.7, vert=False,
             log=False, base=10, points=500, bw_method="scott"):
    """Plot a kernel density estimate of `data` on `axes`.

    Parameters
    ----------
    data : :class:`numpy.ndarray`
        Array of data

    axes : :class:`matplotlib.axes.Axes` or `None`, optional
        Axes in which to place plot. If `None`, a new figure is generated.

    color : matplotlib colorspec, optional
        Color to use for plotting (Default: use next in matplotlibrc)

    label : str, optional
        Name of data series (used for legend; default: `None`)

    alpha : float, optional
        Amount of alpha transparency to use (Default: 0.7)

    vert : bool, optional
        If true, plot kde vertically

    log : bool, optional
        If `True`, `data` is log-transformed before the kde is estimated.

    base : 2, 10, or :obj:`numpy.e`, optional
        Base of the log space, if `log` is `True`. (Default: 10)

    points : int
        Number of points over which to evaluate kde. (Default: 500)

    bw_method : str
        Bandwith estimation method. See :obj:`scipy.stats.gaussian_kde`.

    Returns
    -------
    :class:`matplotlib.figure.Figure`
        Parent figure of axes

    :class:`matplotlib.axes.Axes`
        Axes containing plot
    """
    fig, axes = get_fig_axes(axes)

    if color is None:
        color = get_next_color(axes)

    a, b = get_kde(data, log=log, base=base, points=points, bw_method=bw_method)

    fbargs = {
        "alpha": alpha,
        "facecolor": lighten(color)[0],
        "edgecolor": color,
    }

    if vert == True:
        axes.fill_betweenx(a, b, 0, **fbargs)
        axes.plot(b, a, color=color, alpha=alpha, label=label)
        if log == True:
            axes.semilogy()
    else:
        axes.fill_between(a, b, 0, **fbargs)
        axes.plot(a, b, color=color, alpha=alpha, label=label)
        if log == True:
            axes.semilogx()

    return fig, axes


def coverage_plot(values, start=0, axes=None, color=None, label=None, alpha=0.7):
    """Plot a coverage vector as a filled step track

    Parameters
    ----------
    values : :class:`numpy.ndarray`
        Coverage at each position

    start : int, optional
        Coordinate of the first element of `values` (Default: 0)

    axes : :class:`matplotlib.axes.Axes` or `None`, optional
        Axes in which to place plot

    color : matplotlib colorspec, optional
        Color to use for plotting (Default: use next in matplotlibrc)

    label : str, optional
        Name of data series

    alpha : float, optional
        Transparency of fill (Default: 0.7)

    Returns
    -------
    :class:`matplotlib.figure.Figure`

    :class:`matplotlib.axes.Axes`
    """
    fig, ax = get_fig_axes(axes)
    if color is None:
        color = get_next_color(ax)

    values = numpy.asarray(values)
    x = numpy.arange(start, start + len(values))
    ax.fill_between(x, values, 0, step="mid", facecolor=lighten(color, 0.3)[0], alpha=alpha)
    ax.step(x, values, where="mid", color=color, label=label)
    ax.set_ylabel("Coverage")
    if len(values) > 0:
        ax.set_xlim(x[0] - 0.5, x[-1] + 0.5)

    return fig, ax


#==============================================================================
# INDEX: Fragment plots
#==============================================================================

def fragment_position_plot(fragments, length, axes=None, color=None, label=None, alpha=0.7):
    """Plot coverage of |TranscriptFragments| along a transcript

    Parameters
    ----------
    fragments : iterable of |TranscriptFragment|

    length : int
        Length of transcript

    Other parameters are as in :func:`coverage_plot`

    Returns
    -------
    :class:`matplotlib.figure.Figure`

    :class:`matplotlib.axes.Axes`
    """
    counts = fragment_coverage(fragments, length)
    fig, ax = coverage_plot(counts, start=1, axes=axes, color=color, label=label, alpha=alpha)
    ax.set_xlabel("Transcript position (nt)")
    ax.set_ylabel("Fragments")
    return fig, ax


def pack_rows(fragments, spacing=1):
    """Assign fragments to rows so that no two fragments in a row overlap

    Fragments are placed greedily, in order of start position, into the
    first row whose last fragment ends at least `spacing` positions earlier.

    Parameters
    ----------
    fragments : iterable of |TranscriptFragment|

    spacing : int, optional
        Minimum gap between fragments in a row (Default: 1)

    Returns
    -------
    list of list of |TranscriptFragment|
    """
    rows = []
    row_ends = []
    for frag in sorted(fragments, key=lambda x: (x.start, x.end)):
        for n, end in enumerate(row_ends):
            if frag.start > end + spacing - 1:
                rows[n].append(frag)
                row_ends[n] = frag.end
                break
        else:
            rows.append([frag])
            row_ends.append(frag.end)

    return rows


def fragment_span_plot(fragments, axes=None, color=None, linewidth=2, max_rows=None):
    """Draw each fragment as a horizontal bar spanning its transcript
    coordinates, packing fragments into non-overlapping rows

    Parameters
    ----------
    fragments : iterable of |TranscriptFragment|

    axes : :class:`matplotlib.axes.Axes` or `None`, optional
        Axes in which to place plot

    color : matplotlib colorspec, optional
        Bar color (Default: a near-black)

    linewidth : float, optional
        Width of bars (Default: 2)

    max_rows : int or None, optional
        If not `None`, draw only the first `max_rows` rows

    Returns
    -------
    :class:`matplotlib.figure.Figure`

    :class:`matplotlib.axes.Axes`
    """
    fig, ax = get_fig_axes(axes)
    color = process_black if color is None else color

    rows = pack_rows(fragments)
    if max_rows is not None:
        rows = rows[:max_rows]

    for y, row in enumerate(rows):
        ax.hlines([y] * len(row), [X.start for X in row], [X.end for X in row],
                  color=color, linewidth=linewidth)

    ax.set_xlabel("Transcript position (nt)")
    ax.set_ylabel("Fragment row")
    ax.set_ylim(-1, max(len(rows), 1))
    return fig, ax


def _kde_by_sample(data_by_sample, axes, xlabel, **kwargs):
    fig, ax = get_fig_axes(axes)
    colors = get_color_cycle()
    for label, data in data_by_sample.items():
        color = next(colors)
        if not can_estimate_kde(data):
            warn("Skipping density estimate for sample '%s' because it has fewer than two distinct values." % label,
                 DataWarning)
            continue
        kde_plot(data, axes=ax, color=color, label=label, **kwargs)

    ax.set_xlabel(xlabel)
    ax.set_ylabel("Density")
    if len(ax.lines) > 0:
        ax.legend(loc="upper right", frameon=False)
    return fig, ax


def fragment_length_plot(widths_by_sample, axes=None, log=False, points=500, bw_method="scott"):
    """Plot kernel density estimates of fragment lengths, one per sample

    Parameters
    ----------
    widths_by_sample : dict
        Maps sample names to arrays of fragment widths

    axes : :class:`matplotlib.axes.Axes` or `None`, optional
        Axes in which to place plot

    log : bool, optional
        If `True`, estimate densities in log10 space (Default: `False`)

    points, bw_method
        Passed to :func:`kde_plot`

    Returns
    -------
    :class:`matplotlib.figure.Figure`

    :class:`matplotlib.axes.Axes`
    """
    return _kde_by_sample(widths_by_sample, axes, "Fragment length (nt)",
                          log=log, points=points, bw_method=bw_method)


def gc_content_plot(gc_by_sample, axes=None, points=500, bw_method="scott"):
    """Plot kernel density estimates of fragment GC content, one per sample

    Parameters
    ----------
    gc_by_sample : dict
        Maps sample names to arrays of GC fractions

    Other parameters are as in :func:`fragment_length_plot`
    """
    fig, ax = _kde_by_sample(gc_by_sample, axes, "Fragment GC content", points=points, bw_method=bw_method)
    ax.set_xlim(0, 1)
    return fig, ax


def nucleotide_bias_plot(freq_table, axes=None, title=None):
    """Plot nucleotide frequencies at positions surrounding fragment 5' ends

    Parameters
    ----------
    freq_table : :class:`pandas.DataFrame`
        Table from :func:`~txfrag.genomics.seqtools.nucleotide_frequencies`,
        indexed by offset, with one column per nucleotide

    axes : :class:`matplotlib.axes.Axes` or `None`, optional
        Axes in which to place plot

    title : str or None, optional
        Plot title

    Returns
    -------
    :class:`matplotlib.figure.Figure`

    :class:`matplotlib.axes.Axes`
    """
    fig, ax = get_fig_axes(axes)
    for nuc, color in sorted(NUCLEOTIDE_COLORS.items()):
        if nuc in freq_table.columns:
            ax.plot(freq_table.index, freq_table[nuc], color=color, label=nuc, marker="o", markersize=3)

    ax.axvline(0, color=process_black, linestyle="dashed", linewidth=0.8)
    ax.axhline(0.25, color="#aaaaaa", linestyle="dotted", linewidth=0.8)
    ax.set_xlabel("Position relative to fragment 5' end (nt)")
    ax.set_ylabel("Frequency")
    ax.set_ylim(0, 1)
    ax.legend(loc="upper right", frameon=False, ncol=4)
    if title is not None:
        ax.set_title(title)

    return fig, ax

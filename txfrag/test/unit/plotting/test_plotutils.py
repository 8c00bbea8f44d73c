#!/usr/bin/env python
"""Tests for :py:mod:`txfrag.plotting.plotutils`"""
import unittest

import numpy
import numpy.testing as npt
import matplotlib.pyplot as plt

from txfrag.plotting.plotutils import get_fig_axes, get_next_color, clean_invalid, can_estimate_kde, get_kde


class TestPlotUtils(unittest.TestCase):

    def tearDown(self):
        plt.close("all")

    def test_get_fig_axes(self):
        fig, ax = get_fig_axes()
        fig2, ax2 = get_fig_axes(ax)
        self.assertIs(fig, fig2)
        self.assertIs(ax, ax2)

    def test_get_next_color(self):
        fig, ax = get_fig_axes()
        first = get_next_color(ax)
        ax.plot([0, 1], [0, 1], color=first)
        self.assertNotEqual(first, get_next_color(ax))

    def test_clean_invalid(self):
        x, y = clean_invalid([1, 2, numpy.nan, 4, 5], [1, numpy.inf, 3, 4, 50])
        npt.assert_equal(x, [1, 4, 5])
        npt.assert_equal(y, [1, 4, 50])
        _, y = clean_invalid([1, 2], [5, 50], max_y=10)
        npt.assert_equal(y, [5, 10])

    def test_can_estimate_kde(self):
        self.assertFalse(can_estimate_kde([]))
        self.assertFalse(can_estimate_kde([3, 3, 3, numpy.nan]))
        self.assertTrue(can_estimate_kde([3, 4]))

    def test_get_kde(self):
        x, y = get_kde(numpy.random.RandomState(1).normal(size=200), points=50)
        self.assertEqual(len(x), 50)
        self.assertEqual(len(y), 50)
        self.assertTrue((y >= 0).all())

    def test_get_kde_log(self):
        x, _ = get_kde([1, 10, 100, 1000], log=True, points=10)
        self.assertAlmostEqual(x[0], 1)
        self.assertAlmostEqual(x[-1], 1000)
        self.assertRaises(ValueError, get_kde, [1, 10], log=True, base=3)

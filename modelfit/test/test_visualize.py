import unittest

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np

from modelfit.core.model import ModelFit
from modelfit.visualize import plot_error_history, plot_fit


class TestVisualize(unittest.TestCase):

    def setUp(self):
        self.random_state = np.random.RandomState(1234)

    def tearDown(self):
        plt.close('all')

    def test_plot_fit(self):
        x = np.linspace(0, 10, 6)
        model = ModelFit(scale_factor=10, max_iters=5,
                         random_state=self.random_state)
        model.fit(x, 2 * x)

        ax = plot_fit(model, n_points=50)

        # the data and the model curve
        self.assertEqual(len(ax.collections), 1)
        self.assertEqual(len(ax.lines), 1)
        self.assertEqual(ax.lines[0].get_xdata().shape, (50,))

    def test_plot_error_history(self):
        fig, ax = plt.subplots()
        errors = np.exp(-np.linspace(0, 5, 20))

        result = plot_error_history(errors, ax=ax, min_network_error=0.01)

        self.assertIs(result, ax)
        self.assertEqual(ax.get_yscale(), 'log')
        self.assertEqual(len(ax.lines), 2)

        with self.assertRaises(TypeError):
            plot_error_history(np.ones((2, 2)))

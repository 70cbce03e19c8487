import unittest

import numpy as np

from modelfit.core.activation import ActivationKind, activate
from modelfit.core.network import NeuralNetwork
from modelfit.core.weighted_connection import WeightedConnection


class TestNeuralNetwork(unittest.TestCase):

    def setUp(self):
        self.random_state = np.random.RandomState(1234)

    def make_network(self, n_inputs=2, n_outputs=3, layers=(4, 6)):
        network = NeuralNetwork(random_state=self.random_state)
        network.set_num_inputs(n_inputs)
        network.set_num_outputs(n_outputs)
        network.set_output_unit_type(ActivationKind.UNIPOLAR)
        for n_units in layers:
            network.add_layer(n_units, ActivationKind.BIPOLAR)
        return network

    def test_empty_network(self):
        network = NeuralNetwork()

        self.assertEqual(network.n_inputs, 0)
        self.assertEqual(network.n_outputs, 0)
        self.assertEqual(network.n_layers, 0)
        self.assertEqual(network.n_connections, 0)
        self.assertEqual(network.output_unit_type, ActivationKind.THRESHOLD)
        self.assertIsNone(network.get_response([1.0]))

    def test_direct_connection(self):
        network = NeuralNetwork(random_state=self.random_state)

        network.set_num_inputs(2)
        self.assertEqual(network.n_connections, 0)

        network.set_num_outputs(3)
        self.assertEqual(network.n_connections, 1)

        connection = network.get_weighted_connection(0)
        self.assertEqual((connection.n_inputs, connection.n_outputs), (2, 3))
        self.assertLessEqual(np.abs(connection.weights).max(), 1.0)

    def test_invalid_widths_are_ignored(self):
        network = NeuralNetwork()

        self.assertFalse(network.set_num_inputs(0))
        self.assertFalse(network.set_num_inputs(-2))
        self.assertFalse(network.set_num_outputs(1.5))
        self.assertEqual(network.n_inputs, 0)
        self.assertEqual(network.n_outputs, 0)

    def test_width_change_after_layers(self):
        network = self.make_network()

        self.assertFalse(network.set_num_inputs(5))
        self.assertFalse(network.set_num_outputs(5))
        self.assertEqual(network.n_inputs, 2)
        self.assertEqual(network.n_outputs, 3)

        # Setting the current value is not a change
        self.assertTrue(network.set_num_inputs(2))

    def test_add_layer_rewiring(self):
        network = self.make_network(layers=())

        self.assertTrue(network.add_layer(4, ActivationKind.BIPOLAR))
        self.assertEqual(network.n_layers, 1)
        self.assertEqual(network.n_connections, 2)

        shapes = [(c.n_inputs, c.n_outputs) for c in
                  map(network.get_weighted_connection, range(2))]
        self.assertEqual(shapes, [(2, 4), (4, 3)])

        first = network.get_weighted_connection(0)

        self.assertTrue(network.add_layer(6, ActivationKind.TANH,
                                          slope=2.0, amplify=0.5))
        self.assertEqual(network.n_layers, 2)
        self.assertEqual(network.n_connections, 3)

        shapes = [(c.n_inputs, c.n_outputs) for c in
                  map(network.get_weighted_connection, range(3))]
        self.assertEqual(shapes, [(2, 4), (4, 6), (6, 3)])

        # The earlier connections into hidden layers are kept
        self.assertIs(network.get_weighted_connection(0), first)

        self.assertEqual(network.get_layer_details(0),
                         (ActivationKind.BIPOLAR, 1.0, 1.0))
        self.assertEqual(network.get_layer_details(1),
                         (ActivationKind.TANH, 2.0, 0.5))
        self.assertIsNone(network.get_layer_details(2))

    def test_add_layer_failures(self):
        network = self.make_network()
        connections = [network.get_weighted_connection(i) for i in range(3)]

        for args in [(0,), (-1,), (3, ActivationKind.TANH, 0.0),
                     (3, ActivationKind.TANH, 2.0, -1.0),
                     (3, ActivationKind.TANH, 2.0, 1.0, 0.0), (3, 99)]:
            self.assertFalse(network.add_layer(*args))
            self.assertEqual(network.n_layers, 2)
            self.assertEqual(network.n_connections, 3)
            for i, connection in enumerate(connections):
                self.assertIs(network.get_weighted_connection(i), connection)

        network = NeuralNetwork()
        self.assertFalse(network.add_layer(3))
        network.set_num_inputs(2)
        self.assertFalse(network.add_layer(3))
        self.assertEqual(network.n_layers, 0)

    def test_response(self):
        network = self.make_network(n_inputs=2, n_outputs=1, layers=(3,))

        hidden = network.get_weighted_connection(0)
        output = network.get_weighted_connection(1)

        inputs = np.array([0.5, -0.2])

        hidden_in = hidden.weights.dot(inputs)
        hidden_out = activate(ActivationKind.BIPOLAR, 1.0, 1.0, hidden_in)
        output_in = output.weights.dot(hidden_out)
        expected = activate(ActivationKind.UNIPOLAR, 1.0, 1.0, output_in)

        response = network.get_response(inputs)
        np.testing.assert_allclose(response, expected)

        np.testing.assert_allclose(network.get_pre_activations(0), hidden_in)
        np.testing.assert_allclose(network.get_post_activations(0),
                                   hidden_out)
        np.testing.assert_allclose(network.get_pre_activations(1), output_in)
        np.testing.assert_allclose(network.get_post_activations(1), expected)
        self.assertIsNone(network.get_pre_activations(2))
        self.assertIsNone(network.get_post_activations(-1))

    def test_response_with_output_settings(self):
        network = self.make_network(n_inputs=1, n_outputs=1, layers=())
        network.set_output_unit_type(ActivationKind.LINEAR)
        network.set_output_unit_slope(2.0)
        network.set_output_unit_amplify(3.0)

        weight = network.get_weighted_connection(0).weights[0, 0]

        np.testing.assert_allclose(network.get_response([0.5]),
                                   [6.0 * weight * 0.5])

    def test_response_with_layer_settings(self):
        network = self.make_network(n_inputs=2, n_outputs=1, layers=())
        network.add_layer(3, ActivationKind.TANH, slope=0.5, amplify=2.0)
        network.add_layer(2, ActivationKind.ELLIOT, slope=3.0, amplify=0.25)

        inputs = np.array([0.3, -0.7])

        values = inputs
        settings = [(ActivationKind.TANH, 0.5, 2.0),
                    (ActivationKind.ELLIOT, 3.0, 0.25),
                    (ActivationKind.UNIPOLAR, 1.0, 1.0)]
        for stage, (kind, slope, amplify) in enumerate(settings):
            weights = network.get_weighted_connection(stage).weights
            values = activate(kind, slope, amplify, weights.dot(values))

        np.testing.assert_allclose(network.get_response(inputs), values)

    def test_response_extra_and_missing_inputs(self):
        network = self.make_network()

        response = network.get_response([0.5, 0.2])
        self.assertEqual(response.shape, (3,))

        # Extra values are ignored
        np.testing.assert_array_equal(
            network.get_response([0.5, 0.2, 100.0, -4.0]), response)

        # Too few inputs give no response and leave the caches alone
        self.assertIsNone(network.get_response([0.5]))
        np.testing.assert_array_equal(network.get_post_activations(2),
                                      response)

    def test_response_is_deterministic(self):
        network = self.make_network()
        inputs = self.random_state.randn(2)

        first = network.get_response(inputs)
        second = network.get_response(inputs)

        np.testing.assert_array_equal(first, second)

    def test_seeded_networks_are_identical(self):
        first = NeuralNetwork(random_state=42)
        second = NeuralNetwork(random_state=42)

        for network in [first, second]:
            network.set_num_inputs(2)
            network.set_num_outputs(1)
            network.add_layer(5)

        for layer in range(2):
            np.testing.assert_array_equal(
                first.get_weighted_connection(layer).weights,
                second.get_weighted_connection(layer).weights)

    def test_set_weighted_connection(self):
        network = self.make_network()

        connection = WeightedConnection(4, 6, random_state=self.random_state)
        self.assertTrue(network.set_weighted_connection(connection, 1))

        stored = network.get_weighted_connection(1)
        self.assertIsNot(stored, connection)
        np.testing.assert_array_equal(stored.weights, connection.weights)

        wrong_shape = WeightedConnection(6, 4)
        self.assertFalse(network.set_weighted_connection(wrong_shape, 1))
        self.assertFalse(network.set_weighted_connection(connection, 3))
        self.assertIsNone(network.get_weighted_connection(3))

    def test_copy(self):
        network = self.make_network()
        response = network.get_response([0.1, 0.9])

        clone = network.copy()
        np.testing.assert_array_equal(clone.get_response([0.1, 0.9]),
                                      response)

        clone.get_weighted_connection(2).set_weight_row(0, np.zeros(6))
        np.testing.assert_array_equal(network.get_response([0.1, 0.9]),
                                      response)

        self.assertEqual(clone.get_layer_details(1),
                         network.get_layer_details(1))

    def test_clear(self):
        network = self.make_network()
        network.get_response([0.1, 0.9])

        network.clear()

        self.assertEqual(network.n_inputs, 0)
        self.assertEqual(network.n_layers, 0)
        self.assertEqual(network.n_connections, 0)
        self.assertEqual(network.output_unit_type, ActivationKind.THRESHOLD)
        self.assertIsNone(network.get_pre_activations(0))

    def test_output_settings_validation(self):
        network = NeuralNetwork()

        self.assertFalse(network.set_output_unit_slope(0.0))
        self.assertFalse(network.set_output_unit_amplify(-3))
        self.assertFalse(network.set_output_unit_type(42))

        self.assertEqual(network.output_unit_slope, 1.0)
        self.assertEqual(network.output_unit_amplify, 1.0)
        self.assertEqual(network.output_unit_type, ActivationKind.THRESHOLD)

        self.assertTrue(network.set_output_unit_type(3))
        self.assertEqual(network.output_unit_type, ActivationKind.TANH)

"""
Training of feed forward neural networks by backpropagation.

The trainer holds a training set of input vectors and corresponding target
vectors. Each call to :meth:`NetworkTrainer.run_epoch` presents every
example of the training set to the network, in a newly shuffled order, and
after each example adjusts the weights by gradient descent on the half
squared error between the network response and the target::

    trainer = NetworkTrainer(random_state=1)
    trainer.replace_training_set(input_vectors, target_vectors)
    trainer.set_learning_constant(0.05)
    trainer.set_momentum(0.25)

    for i in range(max_epochs):
        trainer.run_epoch(network)
        if trainer.network_error < tolerance:
            break
        trainer.reset_network_error()

The error signal of an output unit is the difference between the target
and response times the gradient of the unit's activation function at its
input. The error signal of a hidden unit is the gradient of its activation
function times the error signals of the next layer weighted by the
connections into that layer. The weight adjustment of a connection is the
learning constant times the error signal of the unit it feeds times the
value of the unit it comes from, plus the momentum times the previous
adjustment of the same weight.
"""
import logging

import numpy
from sklearn.utils import check_random_state

from modelfit.core.activation import gradient
from modelfit.score_functions import half_squared_error
from modelfit.util.validation import is_positive


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

DEFAULT_LEARNING_CONSTANT = 0.5
DEFAULT_MOMENTUM = 0.0


class NetworkTrainer:
    """ Trains a neural network by backpropagation with momentum """

    def __init__(self, learning_constant=DEFAULT_LEARNING_CONSTANT,
                 momentum=DEFAULT_MOMENTUM, random_state=None):
        """
        Parameters
        ----------
        learning_constant: float, default=0.5
            The size of the steps taken down the error surface. Must be
            positive; invalid values leave the default in place.

        momentum: float, default=0
            The fraction of the previous weight adjustment added to the
            next one. Zero disables the momentum term.

        random_state: numpy.random.RandomState, int, or None
            Used to shuffle the training set each epoch

        """
        self.random_state = check_random_state(random_state)

        self._learning_constant = DEFAULT_LEARNING_CONSTANT
        self._momentum = DEFAULT_MOMENTUM
        self._network_error = 0.0

        self._inputs = []
        self._targets = []

        self.reset_momentum_history()

        self.set_learning_constant(learning_constant)
        self.set_momentum(momentum)

    def __repr__(self):
        return ("<NetworkTrainer learning_constant={:g}, momentum={:g}, "
                "n_examples={}>").format(
                    self._learning_constant, self._momentum, self.n_examples)

    ##################################################################
    # Parameters

    @property
    def learning_constant(self):
        return self._learning_constant

    def set_learning_constant(self, learning_constant):
        """ Set the learning constant; non-positive values are ignored """
        if not is_positive(learning_constant):
            return False
        self._learning_constant = float(learning_constant)
        return True

    @property
    def momentum(self):
        return self._momentum

    def set_momentum(self, momentum):
        """ Set the momentum; non-positive values are ignored """
        if not is_positive(momentum):
            return False
        self._momentum = float(momentum)
        return True

    @property
    def network_error(self):
        """ The half squared error totalled over every example presented
        since the last call to :meth:`reset_network_error`
        """
        return self._network_error

    def reset_network_error(self):
        self._network_error = 0.0

    def reset_momentum_history(self):
        """ Forget the previous weight adjustments used by the momentum term.
        They are otherwise kept for the lifetime of the trainer.
        """
        self._previous_output_deltas = None
        self._previous_hidden_deltas = None

    ##################################################################
    # Training set

    @property
    def n_examples(self):
        return len(self._inputs)

    @property
    def training_set(self):
        """ Copies of the `(inputs, targets)` lists """
        return ([x.copy() for x in self._inputs],
                [y.copy() for y in self._targets])

    def add_training_example(self, inputs, targets):
        """ Append an input vector and its target vector to the training
        set
        """
        self._inputs.append(numpy.atleast_1d(
            numpy.array(inputs, dtype=float)))
        self._targets.append(numpy.atleast_1d(
            numpy.array(targets, dtype=float)))

    def replace_training_set(self, inputs, targets):
        """ Replace the training set

        Parameters
        ----------
        inputs: sequence of array-like
            The input vectors

        targets: sequence of array-like
            The target vector for each input vector

        Returns
        -------
        success: bool
            False, leaving the training set unchanged, if the number of
            input and target vectors differ

        """
        if len(inputs) != len(targets):
            msg = ("Training set not replaced: {} input vectors but "
                   "{} target vectors")
            logger.warning(msg.format(len(inputs), len(targets)))
            return False

        self._inputs = []
        self._targets = []

        for x, y in zip(inputs, targets):
            self.add_training_example(x, y)

        return True

    ##################################################################
    # Training

    def run_epoch(self, network):
        """ Present every example of the training set to the network, in a
        random order, adjusting the network weights in place after each
        one. The error of each example is added to :attr:`network_error`.
        """
        if self.n_examples == 0:
            logger.warning("The training set is empty")
            return

        for index in self.random_state.permutation(self.n_examples):
            self._train_example(network, index)

    def _train_example(self, network, index):
        inputs = self._inputs[index]
        targets = self._targets[index]

        response = network.get_response(inputs)

        if response is None:
            msg = ("Skipping training example {}: {} input values for a "
                   "network with {} inputs")
            logger.warning(msg.format(index, inputs.shape[0],
                                      network.n_inputs))
            return

        if response.shape != targets.shape:
            msg = ("Skipping training example {}: {} target values for a "
                   "network with {} outputs")
            logger.warning(msg.format(index, targets.shape[0],
                                      network.n_outputs))
            return

        self._network_error += half_squared_error(response, targets)

        output_errors = self._output_errors(network, response, targets)
        hidden_errors = self._hidden_errors(network, output_errors)

        self._adjust_output_weights(network, output_errors, inputs)
        self._adjust_hidden_weights(network, hidden_errors, inputs)

    def _output_errors(self, network, response, targets):
        """ The error signal of each output unit """
        unit_inputs = network.get_pre_activations(network.n_layers)

        slopes = gradient(network.output_unit_type,
                          network.output_unit_slope,
                          network.output_unit_amplify,
                          unit_inputs)

        return (targets - response) * slopes

    def _hidden_errors(self, network, output_errors):
        """ The error signals of each hidden layer, back propagated from
        the output layer

        Returns
        -------
        errors: dict
            Maps the hidden layer index to the error signal of each unit in
            that layer

        """
        errors = {}
        next_errors = output_errors

        # Start with the last hidden layer and work back to the first
        for layer in range(network.n_layers - 1, -1, -1):
            kind, slope, amplify = network.get_layer_details(layer)

            # The connection from this layer into the next one
            connection = network.get_weighted_connection(layer + 1)

            weighted_errors = numpy.zeros(connection.n_inputs)

            for node in range(connection.n_outputs):
                weighted_errors += (next_errors[node] *
                                    connection.get_weight_row(node))

            unit_inputs = network.get_pre_activations(layer)
            errors[layer] = weighted_errors * gradient(
                kind, slope, amplify, unit_inputs)

            next_errors = errors[layer]

        return errors

    def _layer_values(self, network, layer, inputs):
        """ The values feeding the connection into `layer` """
        if layer == 0:
            return inputs[:network.n_inputs]
        return network.get_post_activations(layer - 1)

    def _adjust_output_weights(self, network, output_errors, inputs):
        layer = network.n_layers
        connection = network.get_weighted_connection(layer)

        history = None
        if self._momentum > 0:
            n_weights = connection.n_inputs * connection.n_outputs
            self._previous_output_deltas = self._checked_history(
                self._previous_output_deltas, n_weights, "output")
            history = self._previous_output_deltas

        self._adjust_weights(
            connection, output_errors,
            self._layer_values(network, layer, inputs), history, 0)

    def _adjust_hidden_weights(self, network, hidden_errors, inputs):
        layers = range(network.n_layers - 1, -1, -1)

        history = None
        if self._momentum > 0:
            n_weights = sum(
                network.get_weighted_connection(layer).n_inputs *
                network.get_weighted_connection(layer).n_outputs
                for layer in layers)
            self._previous_hidden_deltas = self._checked_history(
                self._previous_hidden_deltas, n_weights, "hidden")
            history = self._previous_hidden_deltas

        # The history positions run through the connections from the last
        # hidden layer back to the first
        position = 0
        for layer in layers:
            position = self._adjust_weights(
                network.get_weighted_connection(layer),
                hidden_errors[layer],
                self._layer_values(network, layer, inputs),
                history, position)

    def _checked_history(self, history, n_weights, name):
        if history is not None and history.shape[0] == n_weights:
            return history

        if history is not None:
            msg = ("Network has {} {} weights but the momentum history has "
                   "{}; resetting the history")
            logger.debug(msg.format(n_weights, name, history.shape[0]))

        return numpy.zeros(n_weights)

    def _adjust_weights(self, connection, errors, values, history, position):
        """ Adjust the weights of `connection` in place, row by row

        Parameters
        ----------
        connection: WeightedConnection

        errors: ndarray, shape=(connection.n_outputs,)
            The error signals of the units fed by the connection

        values: ndarray, shape=(connection.n_inputs,)
            The values of the units feeding the connection

        history: ndarray or None
            The flat previous-adjustment history, updated in place; None
            when momentum is disabled

        position: int
            The history position of the connection's first weight

        Returns
        -------
        position: int
            The history position following the connection's last weight

        """
        n_inputs = connection.n_inputs

        for node in range(connection.n_outputs):
            deltas = self._learning_constant * errors[node] * values

            if history is not None:
                previous = slice(position, position + n_inputs)
                deltas += self._momentum * history[previous]
                history[previous] = deltas

            connection.set_weight_row(
                node, connection.get_weight_row(node) + deltas)

            position += n_inputs

        return position

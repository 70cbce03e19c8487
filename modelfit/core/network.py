"""
A feed forward neural network with any number of input and output units
and zero or more hidden layers.

Each hidden layer, and the output layer, uses a single activation
function (with its own slope and amplify settings) for all of its units.
Consecutive layers are linked by a :class:`WeightedConnection`, so a
network with `n` hidden layers has `n + 1` connections, the last of which
always feeds the output layer.

Example: 2 inputs, 3 unipolar outputs and two bipolar hidden layers of 4
and 6 units::

    net = NeuralNetwork(random_state=1)
    net.set_num_inputs(2)
    net.set_num_outputs(3)
    net.set_output_unit_type(ActivationKind.UNIPOLAR)
    net.add_layer(4, ActivationKind.BIPOLAR)
    net.add_layer(6, ActivationKind.BIPOLAR)

    outputs = net.get_response([0.5, 0.2])

"""
import copy
import logging
import numbers

import numpy
from sklearn.utils import check_random_state

from modelfit.core.activation import ActivationKind, activate
from modelfit.core.weighted_connection import (
    DEFAULT_INIT_RANGE, WeightedConnection)
from modelfit.util.validation import is_positive, is_positive_int


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

DEFAULT_OUTPUT_KIND = ActivationKind.THRESHOLD
DEFAULT_HIDDEN_KIND = ActivationKind.UNIPOLAR


class NeuralNetwork:
    """ A feed forward neural network """

    def __init__(self, random_state=None):
        """
        Parameters
        ----------
        random_state: numpy.random.RandomState, int, or None
            Used to randomly initialize the weights of every connection
            created by the network. Provide for reproducible results.

        """
        self.random_state = check_random_state(random_state)
        self.clear()

    def __repr__(self):
        return ("<NeuralNetwork n_inputs={}, n_outputs={}, "
                "n_layers={}>").format(
                    self._n_inputs, self._n_outputs, self._n_layers)

    def clear(self):
        """ Reset the network to its freshly constructed state """
        self._n_inputs = 0
        self._n_outputs = 0
        self._n_layers = 0

        self._output_kind = DEFAULT_OUTPUT_KIND
        self._output_slope = 1.0
        self._output_amplify = 1.0

        # `_connections[i]` links layer i-1 (the input layer for i = 0)
        # to layer i (the output layer for i = n_layers)
        self._connections = []

        self._layer_kinds = []
        self._layer_slopes = []
        self._layer_amplifies = []

        self._clear_caches()

    def _clear_caches(self):
        # The unit inputs (weighted sums) and activations of each layer
        # from the most recent forward pass, output layer last
        self._pre_activations = []
        self._post_activations = []

    ##################################################################
    # Configuration

    @property
    def n_inputs(self):
        return self._n_inputs

    @property
    def n_outputs(self):
        return self._n_outputs

    @property
    def n_layers(self):
        """ The number of hidden layers """
        return self._n_layers

    @property
    def n_connections(self):
        return len(self._connections)

    @property
    def output_unit_type(self):
        return self._output_kind

    @property
    def output_unit_slope(self):
        return self._output_slope

    @property
    def output_unit_amplify(self):
        return self._output_amplify

    def set_num_inputs(self, n_inputs):
        """ Set the number of input units. Non-positive values are ignored.
        The width cannot be changed once hidden layers have been added.
        """
        return self._set_width('_n_inputs', n_inputs, "inputs")

    def set_num_outputs(self, n_outputs):
        """ Set the number of output units. Non-positive values are
        ignored. The width cannot be changed once hidden layers have been
        added.
        """
        return self._set_width('_n_outputs', n_outputs, "outputs")

    def _set_width(self, attr, value, name):
        if not is_positive_int(value):
            return False

        if value == getattr(self, attr):
            return True

        if self._n_layers > 0:
            msg = ("Cannot change the number of {} ({} -> {}) after hidden "
                   "layers have been added")
            logger.error(msg.format(name, getattr(self, attr), value))
            return False

        setattr(self, attr, int(value))
        self._connect_input_to_output()

        return True

    def _connect_input_to_output(self):
        """ With no hidden layers the input layer feeds the output layer
        directly; (re)create that connection once both widths are known
        """
        self._connections = []
        self._clear_caches()

        if self._n_inputs > 0 and self._n_outputs > 0:
            self._connections.append(WeightedConnection(
                n_inputs=self._n_inputs, n_outputs=self._n_outputs,
                init_range=DEFAULT_INIT_RANGE,
                random_state=self.random_state))

    def set_output_unit_type(self, kind):
        """ Set the activation function of the output layer units """
        try:
            self._output_kind = ActivationKind(kind)
        except ValueError:
            logger.error("Unknown activation function: {}".format(kind))
            return False
        return True

    def set_output_unit_slope(self, slope):
        """ Set the output layer slope; non-positive values are ignored """
        if not is_positive(slope):
            return False
        self._output_slope = float(slope)
        return True

    def set_output_unit_amplify(self, amplify):
        """ Set the output layer amplify factor; non-positive values are
        ignored
        """
        if not is_positive(amplify):
            return False
        self._output_amplify = float(amplify)
        return True

    def add_layer(self, n_units, kind=DEFAULT_HIDDEN_KIND,
                  init_range=DEFAULT_INIT_RANGE, slope=1.0, amplify=1.0):
        """ Add a new hidden layer after the existing hidden layers

        The connection that fed the output layer is replaced by a
        connection into the new layer, and a new connection from the new
        layer to the output layer is appended.

        Parameters
        ----------
        n_units: int
            The number of units in the hidden layer

        kind: ActivationKind, default=ActivationKind.UNIPOLAR
            The activation function of the layer's units

        init_range: float, default=2.0
            The new weights are initialized uniformly at random over
            `[-init_range/2, init_range/2]`

        slope, amplify: float, default=1.0
            The activation function parameters of the layer's units

        Returns
        -------
        success: bool
            False, without changing the network, if any argument is
            invalid or the network widths have not been set

        """
        valid = (is_positive_int(n_units) and is_positive(init_range) and
                 is_positive(slope) and is_positive(amplify))

        if not valid:
            msg = ("Invalid hidden layer settings: n_units={}, "
                   "init_range={}, slope={}, amplify={}")
            logger.error(msg.format(n_units, init_range, slope, amplify))
            return False

        try:
            kind = ActivationKind(kind)
        except ValueError:
            logger.error("Unknown activation function: {}".format(kind))
            return False

        if self._n_layers == 0:
            if self._n_inputs <= 0:
                logger.error("The number of inputs must be set before "
                             "adding the first hidden layer")
                return False
            n_fan_in = self._n_inputs
        else:
            n_fan_in = self._connections[self._n_layers - 1].n_outputs

        if self._n_outputs <= 0:
            logger.error("The number of outputs must be set before "
                         "adding a hidden layer")
            return False

        connect = WeightedConnection(
            n_inputs=n_fan_in, n_outputs=n_units,
            init_range=init_range, random_state=self.random_state)

        output = WeightedConnection(
            n_inputs=n_units, n_outputs=self._n_outputs,
            init_range=init_range, random_state=self.random_state)

        # Overwrite the old output connection
        del self._connections[self._n_layers:]
        self._connections.append(connect)
        self._connections.append(output)

        self._layer_kinds.append(kind)
        self._layer_slopes.append(float(slope))
        self._layer_amplifies.append(float(amplify))

        self._n_layers += 1
        self._clear_caches()

        return True

    def get_layer_details(self, layer):
        """ The activation settings of a hidden layer

        Returns
        -------
        details: tuple or None
            `(kind, slope, amplify)`, or None if `layer` is not the index
            of a hidden layer

        """
        if not self._is_index(layer, self._n_layers):
            return None

        return (self._layer_kinds[layer],
                self._layer_slopes[layer],
                self._layer_amplifies[layer])

    def _stage_settings(self, stage):
        """ The `(kind, slope, amplify)` of the layer fed by connection
        `stage` """
        if stage < self._n_layers:
            return (self._layer_kinds[stage],
                    self._layer_slopes[stage],
                    self._layer_amplifies[stage])
        return self._output_kind, self._output_slope, self._output_amplify

    ##################################################################
    # Evaluation

    def get_response(self, inputs):
        """ Compute the response of the network to the given inputs

        Parameters
        ----------
        inputs: array-like, shape=(n,)
            The input values, `n >= n_inputs`. Values beyond the first
            `n_inputs` are ignored.

        Returns
        -------
        outputs: ndarray, shape=(n_outputs,) or None
            None when there are too few inputs or the network has no
            connections; the cached layer values are left as they were.

        """
        inputs = numpy.asarray(inputs, dtype=float)

        if (inputs.ndim != 1 or inputs.shape[0] < self._n_inputs or
                not self._connections):
            return None

        layer_values = inputs[:self._n_inputs]

        pre_activations = []
        post_activations = []

        for stage, connection in enumerate(self._connections):
            connection.set_inputs(layer_values)
            unit_inputs = connection.get_outputs()

            kind, slope, amplify = self._stage_settings(stage)
            layer_values = activate(kind, slope, amplify, unit_inputs)

            pre_activations.append(unit_inputs)
            post_activations.append(layer_values)

        self._pre_activations = pre_activations
        self._post_activations = post_activations

        return layer_values.copy()

    def get_pre_activations(self, layer):
        """ The unit input values of a layer from the last forward pass

        `layer` indexes the hidden layers `0 .. n_layers-1`, and the
        output layer is `n_layers`. Returns None for other indices or
        before the first forward pass.
        """
        if not self._is_index(layer, len(self._pre_activations)):
            return None
        return self._pre_activations[layer].copy()

    def get_post_activations(self, layer):
        """ The activation values of a layer from the last forward pass,
        indexed as for :meth:`get_pre_activations`
        """
        if not self._is_index(layer, len(self._post_activations)):
            return None
        return self._post_activations[layer].copy()

    ##################################################################
    # Connection access

    def get_weighted_connection(self, layer):
        """ The connection feeding layer `layer` (`n_layers` for the output
        layer), or None if there is no such connection. The connection is
        returned by reference so its weights can be adjusted in place.
        """
        if not self._is_index(layer, len(self._connections)):
            return None
        return self._connections[layer]

    def set_weighted_connection(self, connection, layer):
        """ Replace the connection feeding layer `layer` with a copy of
        `connection`. The node counts must match those of the connection
        being replaced.
        """
        if not self._is_index(layer, len(self._connections)):
            logger.error("No weighted connection at layer {}".format(layer))
            return False

        current = self._connections[layer]

        if (connection.n_inputs != current.n_inputs or
                connection.n_outputs != current.n_outputs):
            msg = ("Connection shape ({}, {}) does not match layer {} "
                   "shape ({}, {})")
            logger.error(msg.format(connection.n_inputs,
                                    connection.n_outputs, layer,
                                    current.n_inputs, current.n_outputs))
            return False

        self._connections[layer] = connection.copy()
        return True

    @staticmethod
    def _is_index(index, length):
        return (isinstance(index, numbers.Integral) and
                not isinstance(index, bool) and
                0 <= index < length)

    ##################################################################
    # Copying and persistence

    def copy(self):
        """ A deep copy of the network sharing the same random state """
        clone = copy.copy(self)

        clone._connections = [c.copy() for c in self._connections]
        clone._layer_kinds = list(self._layer_kinds)
        clone._layer_slopes = list(self._layer_slopes)
        clone._layer_amplifies = list(self._layer_amplifies)
        clone._pre_activations = [v.copy() for v in self._pre_activations]
        clone._post_activations = [v.copy() for v in self._post_activations]

        return clone

    def to_text(self):
        """ The text representation of the network; see
        :mod:`modelfit.core.model_io`
        """
        from modelfit.core.model_io import write_model
        return write_model(self)

    @classmethod
    def from_text(cls, text, random_state=None):
        from modelfit.core.model_io import read_model
        return read_model(text, random_state=random_state)

    def write_to_file(self, filename):
        from modelfit.core.model_io import write_model_file
        write_model_file(self, filename)

    @classmethod
    def read_from_file(cls, filename, random_state=None):
        from modelfit.core.model_io import read_model_file
        return read_model_file(filename, random_state=random_state)

    def _restore(self, n_inputs, n_outputs, output_details,
                 layer_details, connections):
        """ Rebuild the network from deserialized parts (used by
        :func:`modelfit.core.model_io.read_model`)
        """
        self.clear()

        self._n_inputs = n_inputs
        self._n_outputs = n_outputs
        self._n_layers = len(layer_details)

        (self._output_kind,
         self._output_slope,
         self._output_amplify) = output_details

        for kind, slope, amplify in layer_details:
            self._layer_kinds.append(kind)
            self._layer_slopes.append(slope)
            self._layer_amplifies.append(amplify)

        self._connections = list(connections)

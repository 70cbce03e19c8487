import copy
import numbers

import numpy
from sklearn.utils import check_random_state

from modelfit.util.validation import is_positive, is_positive_int


DEFAULT_INIT_RANGE = 2.0


class WeightedConnection:
    """ The weighted connections linking two layers of a network

    Every input node is connected to every output node. The value of an
    output node is the sum over the input nodes of the input node value
    times the weight of the connection between the two, so the weights
    are stored as a matrix `weights[i, j]` = weight from input node `j`
    into output node `i`. Each row is the weight vector of one output
    node.
    """

    def __init__(self, n_inputs=0, n_outputs=0,
                 init_range=DEFAULT_INIT_RANGE, random_state=None):
        """ Initialize a weighted connection

        Parameters
        ----------
        n_inputs, n_outputs: int, default=0
            The number of input and output nodes. If either is not
            positive then the connection is left empty and can be sized
            later with :meth:`set_node_counts`.

        init_range: float, default=2.0
            The weights are initialized uniformly at random over
            `[-init_range/2, init_range/2]`

        random_state: numpy.random.RandomState, int, or None
            Used for the random weight initialization

        """
        self.random_state = check_random_state(random_state)

        self.n_inputs = 0
        self.n_outputs = 0
        self.weights = numpy.zeros((0, 0))
        self._inputs = numpy.zeros(0)

        self.set_node_counts(n_inputs, n_outputs, init_range)

    def __repr__(self):
        return "<WeightedConnection n_inputs={}, n_outputs={}>".format(
            self.n_inputs, self.n_outputs)

    def set_node_counts(self, n_inputs, n_outputs,
                        init_range=DEFAULT_INIT_RANGE):
        """ Size the connection and randomly initialize the weights over
        `[-init_range/2, init_range/2]`. Invalid arguments are ignored.

        Returns
        -------
        success: bool

        """
        if not (is_positive_int(n_inputs) and is_positive_int(n_outputs) and
                is_positive(init_range)):
            return False

        self.n_inputs = int(n_inputs)
        self.n_outputs = int(n_outputs)
        self._inputs = numpy.zeros(self.n_inputs)
        self._initialize_weights(init_range)

        return True

    def _initialize_weights(self, init_range):
        half_range = 0.5 * init_range
        self.weights = self.random_state.uniform(
            low=-half_range, high=half_range,
            size=(self.n_outputs, self.n_inputs))

    def set_inputs(self, inputs):
        """ Set the input node values. The input vector must have exactly
        `n_inputs` values, otherwise it is ignored.
        """
        inputs = numpy.asarray(inputs, dtype=float)

        if inputs.shape != (self.n_inputs,):
            return False

        self._inputs = inputs.copy()
        return True

    @property
    def inputs(self):
        return self._inputs.copy()

    def get_outputs(self):
        """ The output node values computed from the current inputs

        Returns
        -------
        outputs: ndarray, shape=(n_outputs,)
            `outputs[i] = sum_j weights[i, j] * inputs[j]`

        """
        return self.weights.dot(self._inputs)

    def get_weight_row(self, node):
        """ Get a copy of the weight vector of the given output node, or
        None when `node` is out of range
        """
        if not self._is_node(node):
            return None
        return self.weights[node].copy()

    def set_weight_row(self, node, weights):
        """ Replace the weight vector of the given output node. Out of range
        nodes and vectors of the wrong length are ignored.
        """
        if not self._is_node(node):
            return False

        weights = numpy.asarray(weights, dtype=float)

        if weights.shape != (self.n_inputs,):
            return False

        self.weights[node] = weights
        return True

    def copy(self):
        """ An independent copy of the connection. The copy shares the
        random state of this connection.
        """
        clone = copy.copy(self)
        clone.weights = self.weights.copy()
        clone._inputs = self._inputs.copy()
        return clone

    def _is_node(self, node):
        return (isinstance(node, numbers.Integral) and
                not isinstance(node, bool) and
                0 <= node < self.n_outputs)

"""
Reading and writing networks in a whitespace delimited text format.

The format is::

    n_inputs n_outputs n_layers output_kind output_slope output_amplify

followed, for each of the `n_layers + 1` connections in order, by::

    L n_in n_out layer_kind layer_slope layer_amplify w_0_0 w_0_1 ...

where the weights are listed row by row (all the weights into output node
0, then node 1, and so on). The final connection feeds the output layer,
which has no hidden layer settings of its own, so its layer fields are
written as `0 0.0 0.0`. Activation kinds are written as the integer codes
of :class:`modelfit.core.activation.ActivationKind`.
"""
import logging

from modelfit.core.activation import ActivationKind
from modelfit.core.exception import ModelFormatError
from modelfit.core.network import NeuralNetwork
from modelfit.core.weighted_connection import WeightedConnection
from modelfit.util.validation import is_positive


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

LAYER_MARKER = 'L'
OUTPUT_LAYER_FIELDS = ('0', '0.0', '0.0')

# 17 significant digits reproduce any double exactly
FLOAT_FORMAT = '{:.17g}'


def _format_float(value):
    return FLOAT_FORMAT.format(float(value))


def write_model(network):
    """ Generate the text representation of a network

    Parameters
    ----------
    network: NeuralNetwork
        The network; it must have at least one connection, i.e., its input
        and output widths must be set

    Returns
    -------
    text: str

    """
    if network.n_connections == 0:
        msg = "Cannot serialize {}: the network has no connections"
        raise ModelFormatError(msg.format(network))

    tokens = [
        str(network.n_inputs),
        str(network.n_outputs),
        str(network.n_layers),
        str(int(network.output_unit_type)),
        _format_float(network.output_unit_slope),
        _format_float(network.output_unit_amplify),
    ]

    for layer in range(network.n_connections):
        connection = network.get_weighted_connection(layer)

        if layer < network.n_layers:
            kind, slope, amplify = network.get_layer_details(layer)
            layer_fields = (str(int(kind)), _format_float(slope),
                            _format_float(amplify))
        else:
            layer_fields = OUTPUT_LAYER_FIELDS

        tokens.append(LAYER_MARKER)
        tokens.append(str(connection.n_inputs))
        tokens.append(str(connection.n_outputs))
        tokens.extend(layer_fields)

        for node in range(connection.n_outputs):
            tokens.extend(_format_float(weight)
                          for weight in connection.get_weight_row(node))

    return ' '.join(tokens) + '\n'


class _TokenReader:
    """ Reads typed tokens from model text, raising ModelFormatError when
    a token is missing or malformed
    """

    def __init__(self, text):
        self.tokens = text.split()
        self.position = 0

    @property
    def exhausted(self):
        return self.position >= len(self.tokens)

    def next(self, what):
        if self.exhausted:
            msg = "Unexpected end of model text while reading {}"
            raise ModelFormatError(msg.format(what))

        token = self.tokens[self.position]
        self.position += 1

        return token

    def _convert(self, what, convert):
        token = self.next(what)
        try:
            return convert(token)
        except ValueError:
            msg = "Invalid {} at token {}: {!r}"
            raise ModelFormatError(
                msg.format(what, self.position - 1, token)) from None

    def next_int(self, what):
        return self._convert(what, int)

    def next_float(self, what):
        return self._convert(what, float)

    def next_kind(self, what):
        return self._convert(what, lambda token: ActivationKind(int(token)))


def _read_connection(reader, layer, n_expected_inputs, random_state):
    marker = reader.next("layer marker")
    if marker != LAYER_MARKER:
        msg = "Expected layer marker {!r} for layer {} but found {!r}"
        raise ModelFormatError(msg.format(LAYER_MARKER, layer, marker))

    n_in = reader.next_int("number of layer input nodes")
    n_out = reader.next_int("number of layer output nodes")
    kind_code = reader.next_int("layer activation kind")
    slope = reader.next_float("layer slope")
    amplify = reader.next_float("layer amplify")

    if n_in <= 0 or n_out <= 0:
        msg = "Layer {} has invalid node counts ({}, {})"
        raise ModelFormatError(msg.format(layer, n_in, n_out))

    if n_in != n_expected_inputs:
        msg = "Layer {} has {} input nodes but {} were expected"
        raise ModelFormatError(msg.format(layer, n_in, n_expected_inputs))

    connection = WeightedConnection(
        n_inputs=n_in, n_outputs=n_out, random_state=random_state)

    for node in range(n_out):
        weights = [reader.next_float("weight") for _ in range(n_in)]
        connection.set_weight_row(node, weights)

    return connection, (kind_code, slope, amplify)


def read_model(text, random_state=None):
    """ Instantiate a network from its text representation

    Parameters
    ----------
    text: str
        The text generated by :func:`write_model`

    random_state: numpy.random.RandomState, int, or None
        The random state given to the new network

    Returns
    -------
    network: NeuralNetwork

    Raises
    ------
    ModelFormatError
        If the text is malformed

    """
    try:
        return _read_model(text, random_state)
    except ModelFormatError as e:
        logger.error("Error deserializing network: {}".format(e))
        raise


def _read_model(text, random_state):
    reader = _TokenReader(text)

    n_inputs = reader.next_int("number of inputs")
    n_outputs = reader.next_int("number of outputs")
    n_layers = reader.next_int("number of hidden layers")
    output_kind = reader.next_kind("output activation kind")
    output_slope = reader.next_float("output slope")
    output_amplify = reader.next_float("output amplify")

    if n_inputs <= 0 or n_outputs <= 0 or n_layers < 0:
        msg = "Invalid network shape: inputs={}, outputs={}, layers={}"
        raise ModelFormatError(msg.format(n_inputs, n_outputs, n_layers))

    if not (is_positive(output_slope) and is_positive(output_amplify)):
        msg = "Invalid output layer settings: slope={}, amplify={}"
        raise ModelFormatError(msg.format(output_slope, output_amplify))

    network = NeuralNetwork(random_state=random_state)

    connections = []
    layer_details = []
    n_expected_inputs = n_inputs

    # n_layers + 1 to include the output layer
    for layer in range(n_layers + 1):
        connection, (kind_code, slope, amplify) = _read_connection(
            reader, layer, n_expected_inputs, network.random_state)

        if layer < n_layers:
            try:
                kind = ActivationKind(kind_code)
            except ValueError:
                msg = "Layer {} has unknown activation kind {}"
                raise ModelFormatError(msg.format(layer, kind_code)) from None

            if not (is_positive(slope) and is_positive(amplify)):
                msg = "Layer {} has invalid settings: slope={}, amplify={}"
                raise ModelFormatError(msg.format(layer, slope, amplify))

            layer_details.append((kind, slope, amplify))

        connections.append(connection)
        n_expected_inputs = connection.n_outputs

    if n_expected_inputs != n_outputs:
        msg = "The last layer has {} output nodes but {} were expected"
        raise ModelFormatError(msg.format(n_expected_inputs, n_outputs))

    if not reader.exhausted:
        msg = "Unexpected trailing data at token {}"
        raise ModelFormatError(msg.format(reader.position))

    network._restore(
        n_inputs=n_inputs,
        n_outputs=n_outputs,
        output_details=(output_kind, output_slope, output_amplify),
        layer_details=layer_details,
        connections=connections)

    return network


def write_model_file(network, filename):
    """ Serialize the network and write it to a file

    Raises
    ------
    OSError
        If the file cannot be opened or written

    """
    text = write_model(network)

    try:
        with open(filename, 'w') as f:
            f.write(text)
    except OSError as e:
        msg = "Unable to write network to {}: {}"
        logger.error(msg.format(filename, e))
        raise

    logger.info("Network written to {}".format(filename))


def read_model_file(filename, random_state=None):
    """ Read a network from a file written by :func:`write_model_file`

    Raises
    ------
    OSError
        If the file cannot be opened or read

    ModelFormatError
        If the file contents are malformed

    """
    try:
        with open(filename, 'r') as f:
            text = f.read()
    except OSError as e:
        msg = "Unable to read network from {}: {}"
        logger.error(msg.format(filename, e))
        raise

    return read_model(text, random_state=random_state)

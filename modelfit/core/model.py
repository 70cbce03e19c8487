import logging

import numpy
from sklearn.utils import check_random_state

from modelfit.core.activation import ActivationKind
from modelfit.core.exception import ModelNotFit
from modelfit.core.fit_job_handler import FitJobHandler, setup_logging
from modelfit.core.model_io import read_model_file, write_model_file
from modelfit.core.network import NeuralNetwork
from modelfit.core.trainer import NetworkTrainer
from modelfit.data.table import DataTable
from modelfit.util.validation import is_positive, is_positive_int


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

DEFAULT_N_HIDDEN_UNITS = 5
DEFAULT_HIDDEN_KIND = ActivationKind.UNIPOLAR
DEFAULT_OUTPUT_KIND = ActivationKind.LINEAR
DEFAULT_SCALE_FACTOR = 1000.0
DEFAULT_MAX_ITERS = 10000
DEFAULT_MIN_NETWORK_ERROR = 1e-3


class ModelFit:
    """ Fits a response variable as a function of one predictor variable
    with a neural network having a single hidden layer
    """

    def __init__(self, n_hidden_units=DEFAULT_N_HIDDEN_UNITS,
                 hidden_kind=DEFAULT_HIDDEN_KIND,
                 output_kind=DEFAULT_OUTPUT_KIND,
                 hidden_slope=1.0, hidden_amplify=1.0,
                 output_slope=1.0, output_amplify=1.0,
                 init_range=2.0, learning_constant=0.5, momentum=0.0,
                 scale_factor=DEFAULT_SCALE_FACTOR,
                 max_iters=DEFAULT_MAX_ITERS,
                 min_network_error=DEFAULT_MIN_NETWORK_ERROR,
                 random_state=None):
        """
        Initialize a model

        Parameters
        ----------
        n_hidden_units: int, default=5
            The number of units in the hidden layer

        hidden_kind, output_kind: ActivationKind
            The activation functions of the hidden and output layers. The
            defaults are unipolar hidden units and a linear output unit.

        hidden_slope, hidden_amplify, output_slope, output_amplify: float
            The activation function parameters of each layer

        init_range: float, default=2.0
            The network weights are initialized uniformly at random over
            `[-init_range/2, init_range/2]`

        learning_constant: float, default=0.5
            The backpropagation step size

        momentum: float, default=0
            The backpropagation momentum; zero disables it

        scale_factor: float, default=1000
            Both the predictor and response values are divided by this
            before training, and network outputs are multiplied by it

        max_iters: int, default=10000
            The maximum number of training epochs

        min_network_error: float, default=0.001
            Training stops once the epoch error, in the units of the
            unscaled data, is below this

        random_state: numpy.random.RandomState, int, or None
            Used for weight initialization and training set shuffling.
            Provide for reproducible results.

        """
        if not is_positive_int(n_hidden_units):
            msg = "`n_hidden_units` must be a positive integer (got {})"
            raise ValueError(msg.format(n_hidden_units))

        for name, value in (('hidden_slope', hidden_slope),
                            ('hidden_amplify', hidden_amplify),
                            ('output_slope', output_slope),
                            ('output_amplify', output_amplify),
                            ('init_range', init_range),
                            ('learning_constant', learning_constant),
                            ('scale_factor', scale_factor)):
            if not is_positive(value):
                msg = "`{}` must be positive (got {})"
                raise ValueError(msg.format(name, value))

        if momentum < 0:
            msg = "`momentum` must be non-negative (got {})"
            raise ValueError(msg.format(momentum))

        self.n_hidden_units = n_hidden_units
        self.hidden_kind = ActivationKind(hidden_kind)
        self.output_kind = ActivationKind(output_kind)
        self.hidden_slope = hidden_slope
        self.hidden_amplify = hidden_amplify
        self.output_slope = output_slope
        self.output_amplify = output_amplify
        self.init_range = init_range
        self.learning_constant = learning_constant
        self.momentum = momentum
        self.scale_factor = float(scale_factor)
        self.max_iters = max_iters
        self.min_network_error = min_network_error
        self.random_state = check_random_state(random_state)

        # These are filled in post fit
        self.network = None
        self.fit_result = None
        self.x = None
        self.y = None

        self._is_fitted = False

    def _build_network(self):
        network = NeuralNetwork(random_state=self.random_state)

        network.set_num_inputs(1)
        network.set_num_outputs(1)
        network.set_output_unit_type(self.output_kind)
        network.set_output_unit_slope(self.output_slope)
        network.set_output_unit_amplify(self.output_amplify)

        network.add_layer(self.n_hidden_units, kind=self.hidden_kind,
                          init_range=self.init_range,
                          slope=self.hidden_slope,
                          amplify=self.hidden_amplify)

        return network

    def fit(self, x, y, log_filename=None, log_interval=100):
        """ Fit the model to the predictor values `x` and response values
        `y`

        Parameters
        ----------
        x, y: array-like, shape=(n,)
            Finite predictor and response values

        log_filename: str, default=None
            If given, logging is set up to write to this file

        log_interval: int, default=100
            Fit progress is logged every `log_interval` epochs

        Returns
        -------
        result: FitResult

        Raises
        ------
        NetworkDivergedError
            If the training error becomes NaN or infinite

        """
        x = numpy.asarray(x, dtype=float).ravel()
        y = numpy.asarray(y, dtype=float).ravel()

        if x.shape != y.shape:
            msg = "Shape mismatch between `x` {} and `y` {}"
            raise ValueError(msg.format(x.shape, y.shape))

        if x.shape[0] == 0:
            raise ValueError("No data to fit")

        if not (numpy.isfinite(x).all() and numpy.isfinite(y).all()):
            raise ValueError("`x` and `y` must contain only finite values")

        if log_filename is not None:
            setup_logging(log_filename)

        network = self._build_network()

        trainer = NetworkTrainer(learning_constant=self.learning_constant,
                                 momentum=self.momentum,
                                 random_state=self.random_state)

        trainer.replace_training_set(
            [[value] for value in x / self.scale_factor],
            [[value] for value in y / self.scale_factor])

        fit_job_handler = FitJobHandler(
            network=network, trainer=trainer, max_iters=self.max_iters,
            min_network_error=self.min_network_error,
            error_scale=self.scale_factor, log_interval=log_interval)

        msg = "Fitting {} examples with {} {} hidden units"
        logger.info(msg.format(x.shape[0], self.n_hidden_units,
                               self.hidden_kind.label))

        self.fit_result = fit_job_handler.fit_network()

        self.network = network
        self.x = x
        self.y = y
        self._is_fitted = True

        return self.fit_result

    def save(self, filename):
        """ Write the fitted network to disk in the text model format
        """
        if not self._is_fitted:
            raise ModelNotFit("This model has not been fit yet")
        write_model_file(self.network, filename)

    @classmethod
    def load(cls, filename, scale_factor=DEFAULT_SCALE_FACTOR,
             random_state=None):
        """ Load a model from a network file written by :meth:`save`

        The network must have a single input and a single output. The
        scale factor is not stored with the network, so it must be given
        if it differs from the default. The training data are not stored
        either; methods that need them are unavailable on loaded models.
        """
        network = read_model_file(filename, random_state=random_state)

        if network.n_inputs != 1 or network.n_outputs != 1:
            msg = "Expected a network with 1 input and 1 output, not {}"
            raise ValueError(msg.format(network))

        model = cls(output_kind=network.output_unit_type,
                    output_slope=network.output_unit_slope,
                    output_amplify=network.output_unit_amplify,
                    scale_factor=scale_factor,
                    random_state=network.random_state)

        if network.n_layers > 0:
            kind, slope, amplify = network.get_layer_details(0)
            model.n_hidden_units = network.get_weighted_connection(0).n_outputs
            model.hidden_kind = kind
            model.hidden_slope = slope
            model.hidden_amplify = amplify

        model.network = network
        model._is_fitted = True

        return model

    #################################################################
    # Attributes / methods available after model fit
    #################################################################

    def _requires_fit(method):
        """ Decorator for methods that require a fitted model
        """
        def method_wrapped(self, *args, **kwargs):
            if not self._is_fitted:
                raise ModelNotFit("This model has not been fit yet")

            return method(self, *args, **kwargs)

        return method_wrapped

    @_requires_fit
    def predict(self, x):
        """ The modeled response at each predictor value

        Parameters
        ----------
        x: float or array-like

        Returns
        -------
        y: ndarray
            Same shape as `x`

        """
        x = numpy.asarray(x, dtype=float)
        scaled = x.ravel() / self.scale_factor

        y = numpy.array([self.network.get_response([value])[0]
                         for value in scaled])

        return (y * self.scale_factor).reshape(x.shape)

    @_requires_fit
    def response_table(self):
        """ The training data alongside the model response

        Returns
        -------
        table: ndarray, shape=(n, 3)
            Rows of `(x, y, model response at x)` in the units of the data

        """
        if self.x is None:
            raise ModelNotFit("The training data of a loaded model "
                              "are not available")

        return numpy.column_stack([self.x, self.y, self.predict(self.x)])

    @_requires_fit
    def write_response_csv(self, filename, predictor_name="predictor",
                           response_name="response"):
        """ Write the training data alongside the model response as comma
        delimited text

        The header row is `predictor_name,response_name,model`, followed by
        one row per training example. Values are written with 16
        significant digits.

        Raises
        ------
        ModelNotFit
            If the training data are unavailable
        OSError
            If the file cannot be written

        """
        table = DataTable(
            column_names=[predictor_name, response_name, "model"])

        for row in self.response_table():
            table.add_raw_row(['{:.16g}'.format(value) for value in row])

        table.write_csv(filename)

        msg = "Model response for {} examples written to {}"
        logger.info(msg.format(table.n_rows, filename))

import collections
import logging
import os

import numpy

from modelfit.core.exception import NetworkDivergedError
from modelfit.score_functions import is_diverged
from modelfit.util.validation import is_positive, is_positive_int


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

DEFAULT_LOG_FILENAME = "fit-log.txt"
DEFAULT_LOG_INTERVAL = 100


FitResult = collections.namedtuple(
    'FitResult', ['converged', 'iterations', 'network_error', 'errors'])
FitResult.__doc__ = """ The outcome of :meth:`FitJobHandler.fit_network`

converged: bool
    True if the error dropped below the requested minimum

iterations: int
    The number of epochs run

network_error: float
    The (scaled) error of the returned network; the final error when
    converged and the minimum error seen otherwise

errors: ndarray, shape=(iterations,)
    The (scaled) network error of each epoch
"""


def setup_logging(filename=DEFAULT_LOG_FILENAME, level=logging.DEBUG):
    """ Sets up logging formatting, etc

    Parameters
    ----------
    filename: str, default="fit-log.txt"
        The log file; an existing file of the same name is removed

    level: int, default=logging.DEBUG
        The root logger level

    """
    if os.path.exists(filename):
        os.remove(filename)

    line_fmt = ("[%(asctime)s] [%(name)s:%(lineno)d] "
                "%(levelname)-8s %(message)s")

    date_fmt = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        filename=filename, format=line_fmt,
        datefmt=date_fmt, level=level)


class FitJobHandler:
    """ Runs training epochs until the network error is small enough, the
    iteration limit is hit, or the error diverges
    """
    def __init__(self, network, trainer, max_iters, min_network_error,
                 error_scale=1.0, log_interval=DEFAULT_LOG_INTERVAL):
        """
        Parameters
        ----------
        network: NeuralNetwork
            The network to fit; its weights are modified in place

        trainer: NetworkTrainer
            A trainer holding the training set

        max_iters: int
            The maximum number of epochs

        min_network_error: float
            Training stops once the scaled epoch error falls below this

        error_scale: float, default=1.0
            The epoch error is multiplied by this before it is compared or
            reported, e.g., to express it in the units of unscaled data

        log_interval: int, default=100
            Progress is logged every `log_interval` epochs

        """
        if not is_positive_int(max_iters):
            msg = "`max_iters` must be a positive integer (got {})"
            raise ValueError(msg.format(max_iters))

        if not is_positive(min_network_error):
            msg = "`min_network_error` must be positive (got {})"
            raise ValueError(msg.format(min_network_error))

        if not is_positive(error_scale):
            msg = "`error_scale` must be positive (got {})"
            raise ValueError(msg.format(error_scale))

        if not is_positive_int(log_interval):
            msg = "`log_interval` must be a positive integer (got {})"
            raise ValueError(msg.format(log_interval))

        self.network = network
        self.trainer = trainer

        self.max_iters = max_iters
        self.min_network_error = min_network_error
        self.error_scale = error_scale
        self.log_interval = log_interval

        self.iteration = 0

    def _log_with_iter(self, msg, level='info'):
        """ Write to the logger with the current iteration number prepended
        to the log message
        """
        full_message = "(Iteration = {:05d}) {:s}".format(self.iteration, msg)

        if level == 'info':
            logger.info(full_message)
        elif level == 'debug':
            logger.debug(full_message)
        elif level == 'warning':
            logger.warning(full_message)
        elif level == 'error':
            logger.error(full_message)
        else:
            raise ValueError("Unknown log level: {}".format(level))

    def fit_network(self):
        """ Train the network

        If the error never falls below `min_network_error`, the network is
        left with the weights that gave the smallest epoch error.

        Returns
        -------
        result: FitResult

        Raises
        ------
        NetworkDivergedError
            If the epoch error becomes NaN or infinite. The network weights
            are left as they were at the failing epoch.

        """
        msg = "Fitting network ({} training examples, max {} iterations)"
        logger.info(msg.format(self.trainer.n_examples, self.max_iters))

        errors = []
        converged = False

        min_error = numpy.inf
        min_network = self.network.copy()

        self.trainer.reset_network_error()

        for self.iteration in range(1, self.max_iters + 1):

            self.trainer.run_epoch(self.network)

            error = self.trainer.network_error * self.error_scale
            errors.append(error)

            if is_diverged(error):
                msg = "Network error is {}; the fit failed".format(error)
                self._log_with_iter(msg, level='error')
                raise NetworkDivergedError(msg)

            if self.iteration % self.log_interval == 0:
                self._log_with_iter("Network error = {:.6g}".format(error))

            if error < self.min_network_error:
                converged = True
                break

            if error < min_error:
                min_error = error
                min_network = self.network.copy()

            self.trainer.reset_network_error()

        if converged:
            msg = "Converged with network error {:.6g}".format(error)
            self._log_with_iter(msg)
            network_error = error
        else:
            msg = ("Did not converge; restoring the network with the "
                   "minimum error {:.6g}")
            self._log_with_iter(msg.format(min_error), level='warning')
            self._restore(min_network)
            network_error = min_error

        return FitResult(converged=converged,
                         iterations=self.iteration,
                         network_error=network_error,
                         errors=numpy.array(errors))

    def _restore(self, snapshot):
        """ Copy the connection weights of `snapshot` into the network """
        for layer in range(snapshot.n_connections):
            self.network.set_weighted_connection(
                snapshot.get_weighted_connection(layer), layer)

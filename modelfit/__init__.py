# flake8: noqa

from ._version import version as __version__

from .core.activation import ActivationKind, NetworkUnit
from .core.model import ModelFit
from .core.network import NeuralNetwork
from .core.trainer import NetworkTrainer
from .core.weighted_connection import WeightedConnection

"""
Activation functions for the units of a feed forward neural network and
their analytic gradients.

Each activation function is modified by two parameters: the *slope* and
the *amplify* factor. The slope scales the argument of the function and so
adjusts its sensitivity, e.g., for the sigmoidal functions a larger slope
gives a steeper curve at the origin, for the periodic functions a larger
slope gives a shorter period and for the Gaussian a narrower bell. The
amplify factor scales the value of the function and so alters its range.
For the threshold function the slope sets the "on" value, so the unit
returns either 0 or slope * amplify.

The gradients are the derivatives with respect to the input, again scaled
by the amplify factor.
"""
import enum

import numpy
from scipy.special import expit

from modelfit.util.validation import is_positive


# Below this magnitude the sinc function is replaced by its limit at zero.
SINC_ORIGIN_TOLERANCE = 1e-5


class ActivationKind(enum.IntEnum):
    """ The available activation functions. The integer values are the
    codes used in the text representation of a network.
    """
    THRESHOLD = 0
    UNIPOLAR = 1
    BIPOLAR = 2
    TANH = 3
    GAUSSIAN = 4
    ARCTAN = 5
    SINE = 6
    COSINE = 7
    SINC = 8
    ELLIOT = 9
    LINEAR = 10
    ISRU = 11
    SOFT_SIGN = 12
    SOFT_PLUS = 13

    @property
    def label(self):
        return _LABELS[self]

    @classmethod
    def from_label(cls, label):
        """ Look up the kind from its display label, e.g., "Tanh" """
        for kind, kind_label in _LABELS.items():
            if kind_label.lower() == label.strip().lower():
                return kind
        raise ValueError("Unknown activation function: {}".format(label))


_LABELS = {
    ActivationKind.THRESHOLD: "Threshold",
    ActivationKind.UNIPOLAR: "Unipolar",
    ActivationKind.BIPOLAR: "Bipolar",
    ActivationKind.TANH: "Tanh",
    ActivationKind.GAUSSIAN: "Gauss",
    ActivationKind.ARCTAN: "Arctan",
    ActivationKind.SINE: "Sin",
    ActivationKind.COSINE: "Cos",
    ActivationKind.SINC: "SinC",
    ActivationKind.ELLIOT: "Elliot",
    ActivationKind.LINEAR: "Linear",
    ActivationKind.ISRU: "ISRU",
    ActivationKind.SOFT_SIGN: "SoftSign",
    ActivationKind.SOFT_PLUS: "SoftPlus",
}


#####################################################################
# Activation functions and gradients, before amplification.
#
# Each takes an ndarray `x` and the slope value `s`.

def _threshold(x, s):
    # range: 0 or s
    return numpy.where(x >= 0, s, 0.0)


def _threshold_gradient(x, s):
    # The derivative is undefined at the origin and zero elsewhere; the
    # slope value is returned at the origin.
    return numpy.where(x == 0, s, 0.0)


def _unipolar(x, s):
    # range: 0 to 1
    return expit(s * x)


def _unipolar_gradient(x, s):
    # s e^(-sx) / (1 + e^(-sx))^2
    sigma = expit(s * x)
    return s * sigma * (1.0 - sigma)


def _bipolar(x, s):
    # range: -1 to 1
    return 2.0 * expit(s * x) - 1.0


def _bipolar_gradient(x, s):
    sigma = expit(s * x)
    return 2.0 * s * sigma * (1.0 - sigma)


def _tanh(x, s):
    # range: -1 to 1
    return numpy.tanh(s * x)


def _tanh_gradient(x, s):
    tanh_sx = numpy.tanh(s * x)
    return s * (1.0 - tanh_sx * tanh_sx)


def _gaussian(x, s):
    # range: 0 to 1
    return numpy.exp(-s * x * x)


def _gaussian_gradient(x, s):
    return -2.0 * s * x * numpy.exp(-s * x * x)


def _arctan(x, s):
    # range: -pi/2 to pi/2
    return numpy.arctan(s * x)


def _arctan_gradient(x, s):
    return s / (1.0 + s * s * x * x)


def _sine(x, s):
    return numpy.sin(s * x)


def _sine_gradient(x, s):
    return s * numpy.cos(s * x)


def _cosine(x, s):
    return numpy.cos(s * x)


def _cosine_gradient(x, s):
    return -s * numpy.sin(s * x)


def _sinc(x, s):
    # range: ~ -0.217234 to 1
    near_origin = numpy.abs(x) < SINC_ORIGIN_TOLERANCE
    sx = s * numpy.where(near_origin, 1.0, x)
    return numpy.where(near_origin, 1.0, numpy.sin(sx) / sx)


def _sinc_gradient(x, s):
    near_origin = numpy.abs(x) < SINC_ORIGIN_TOLERANCE
    x_ = numpy.where(near_origin, 1.0, x)
    sx = s * x_
    value = (sx * numpy.cos(sx) - numpy.sin(sx)) / (s * x_ * x_)
    return numpy.where(near_origin, 0.0, value)


def _elliot(x, s):
    # range: 0 to 1
    sx = s * x
    return 0.5 * sx / (1.0 + numpy.abs(sx)) + 0.5


def _elliot_gradient(x, s):
    denominator = 1.0 + numpy.abs(s * x)
    return 0.5 * s / (denominator * denominator)


def _linear(x, s):
    return s * x


def _linear_gradient(x, s):
    return numpy.full_like(x, s)


def _isru(x, s):
    # range: -1/sqrt(s) to 1/sqrt(s)
    return x / numpy.sqrt(1.0 + s * x * x)


def _isru_gradient(x, s):
    return (1.0 + s * x * x) ** -1.5


def _soft_sign(x, s):
    # range: -1 to 1
    sx = s * x
    return sx / (1.0 + numpy.abs(sx))


def _soft_sign_gradient(x, s):
    denominator = 1.0 + numpy.abs(s * x)
    return s / (denominator * denominator)


def _soft_plus(x, s):
    # log(1 + e^(sx)), range: 0 to infinity
    return numpy.logaddexp(0.0, s * x)


def _soft_plus_gradient(x, s):
    # s e^(sx) / (1 + e^(sx))
    return s * expit(s * x)


_FUNCTIONS = {
    ActivationKind.THRESHOLD: (_threshold, _threshold_gradient),
    ActivationKind.UNIPOLAR: (_unipolar, _unipolar_gradient),
    ActivationKind.BIPOLAR: (_bipolar, _bipolar_gradient),
    ActivationKind.TANH: (_tanh, _tanh_gradient),
    ActivationKind.GAUSSIAN: (_gaussian, _gaussian_gradient),
    ActivationKind.ARCTAN: (_arctan, _arctan_gradient),
    ActivationKind.SINE: (_sine, _sine_gradient),
    ActivationKind.COSINE: (_cosine, _cosine_gradient),
    ActivationKind.SINC: (_sinc, _sinc_gradient),
    ActivationKind.ELLIOT: (_elliot, _elliot_gradient),
    ActivationKind.LINEAR: (_linear, _linear_gradient),
    ActivationKind.ISRU: (_isru, _isru_gradient),
    ActivationKind.SOFT_SIGN: (_soft_sign, _soft_sign_gradient),
    ActivationKind.SOFT_PLUS: (_soft_plus, _soft_plus_gradient),
}


def _evaluate(which, kind, slope, amplify, x):
    func = _FUNCTIONS[ActivationKind(kind)][which]
    x_arr = numpy.asarray(x, dtype=float)
    value = amplify * func(x_arr, float(slope))
    if x_arr.ndim == 0:
        return float(value)
    return value


def activate(kind, slope, amplify, x):
    """ Evaluate an activation function

    Parameters
    ----------
    kind: ActivationKind
        The activation function

    slope: float
        Scales the argument of the activation function

    amplify: float
        Scales the value of the activation function

    x: float or ndarray
        The unit input value(s); arrays are evaluated element-wise

    Returns
    -------
    activation: float or ndarray
        Same shape as `x`

    """
    return _evaluate(0, kind, slope, amplify, x)


def gradient(kind, slope, amplify, x):
    """ Evaluate the derivative of an activation function with respect to
    its input. See :func:`activate` for the parameters.
    """
    return _evaluate(1, kind, slope, amplify, x)


class NetworkUnit:
    """ A single unit, or neuron, of a neural network

    Invalid (non-positive) slope or amplify values are ignored and the
    previous value is kept.
    """

    def __init__(self, kind=ActivationKind.THRESHOLD, slope=1.0,
                 amplify=1.0):
        self.kind = ActivationKind(kind)
        self.input = -1.0

        self._slope = 1.0
        self._amplify = 1.0

        self.set_slope(slope)
        self.set_amplify(amplify)

    def __repr__(self):
        return "<NetworkUnit kind={}, slope={:g}, amplify={:g}>".format(
            self.kind.label, self._slope, self._amplify)

    @property
    def slope(self):
        return self._slope

    @property
    def amplify(self):
        return self._amplify

    def set_slope(self, slope):
        """ Set the slope parameter; returns False if it was ignored """
        if not is_positive(slope):
            return False
        self._slope = float(slope)
        return True

    def set_amplify(self, amplify):
        """ Set the amplify parameter; returns False if it was ignored """
        if not is_positive(amplify):
            return False
        self._amplify = float(amplify)
        return True

    @property
    def activation(self):
        """ The activation value for the current `input` """
        return activate(self.kind, self._slope, self._amplify, self.input)

    def activations(self, inputs):
        """ Element-wise activation values for a vector of unit inputs,
        i.e., the activations of a layer of units that share this unit's
        settings
        """
        return activate(self.kind, self._slope, self._amplify,
                        numpy.asarray(inputs, dtype=float))

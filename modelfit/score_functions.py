import numpy


def half_squared_error(response, target):
    """ Half the sum of squared differences between a network response and
    the corresponding target values, i.e., `sum 0.5 * (target - response)^2`
    over the output units
    """
    response = numpy.asarray(response, dtype=float)
    target = numpy.asarray(target, dtype=float)

    if response.shape != target.shape:
        msg = "`response` shape {} does not match `target` shape {}"
        raise ValueError(msg.format(response.shape, target.shape))

    diff = target - response
    return 0.5 * float(numpy.dot(diff, diff))


def is_diverged(network_error):
    """ Returns True when the network error is NaN or infinite, in which case
    the weights of the trained network can no longer be trusted
    """
    return not numpy.isfinite(network_error)

class ModelNotFit(Exception):
    """ Raised when trying access properties or methods that require a fitted
    model
    """


class ModelFormatError(ValueError):
    """ Raised when the text representation of a network cannot be parsed
    """


class NetworkDivergedError(RuntimeError):
    """ Raised when the total network error becomes NaN or infinite during
    fitting; the weights of the network can no longer be trusted
    """

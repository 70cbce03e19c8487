import numbers


def is_positive(value):
    """ Returns True when `value` is a real number strictly greater than
    zero. NaN, values <= 0 (including -inf), booleans and non-numeric
    values return False.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return value > 0


def is_positive_int(value):
    """ Returns True when `value` is an integer strictly greater than zero
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        return False
    return value > 0

import numpy as np
import matplotlib.pyplot as plt


def plot_fit(model, ax=None, n_points=200,
             data_kwargs=dict(c='b', marker='o', s=16, label='Data'),
             fit_kwargs=dict(c='r', ls='-', lw=2, label='Model')):
    """ Plot the training data of a fitted model along with the model
    response over the range of the data

    Parameters
    ----------
    model: ModelFit
        A fitted model

    ax: matplotlib.axes.Axes, default=None
        The axes to draw on; a new figure is created if None

    n_points: int, default=200
        The number of points at which the model curve is evaluated

    data_kwargs: args
        Any keyword arguments that can be passed to
        `matplotlib.pyplot.scatter`.

    fit_kwargs: args
        Any keyword arguments that can be passed to `matplotlib.pyplot.plot`.

    Returns
    -------
    ax: matplotlib.axes.Axes

    """
    table = model.response_table()
    x, y = table[:, 0], table[:, 1]

    if ax is None:
        fig = plt.figure(figsize=(6, 4))
        ax = fig.add_subplot(111)

    curve_x = np.linspace(x.min(), x.max(), n_points)

    ax.scatter(x, y, **data_kwargs)
    ax.plot(curve_x, model.predict(curve_x), **fit_kwargs)
    ax.legend()

    return ax


def plot_error_history(errors, ax=None, min_network_error=None):
    """ Plot the network error of each training epoch on a log scale

    Parameters
    ----------
    errors: ndarray, shape=(n_epochs,)
        e.g., :attr:`FitResult.errors`

    ax: matplotlib.axes.Axes, default=None
        The axes to draw on; a new figure is created if None

    min_network_error: float, default=None
        If given, the convergence threshold is drawn as a dashed line

    Returns
    -------
    ax: matplotlib.axes.Axes

    """
    errors = np.asarray(errors)

    if errors.ndim != 1:
        raise TypeError("`errors` must be 1d.")

    if ax is None:
        fig = plt.figure(figsize=(6, 4))
        ax = fig.add_subplot(111)

    ax.semilogy(np.arange(1, errors.shape[0] + 1), errors, '-b')

    if min_network_error is not None:
        ax.axhline(min_network_error, c='k', ls='--', lw=1)

    ax.set_xlabel('Epoch')
    ax.set_ylabel('Network error')

    return ax

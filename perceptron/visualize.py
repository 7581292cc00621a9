import matplotlib.pyplot as plt
import numpy as np


def plot_error_history(error_history, ax=None, log_scale=False,
                       line_kwargs=dict(c='b', ls='-', lw=2)):
    """ Plot the total error per training cycle

    Parameters
    ----------
    error_history: ndarray, shape=(ncycles+1,)
        The errors as returned by :func:`perceptron.core.training.train`;
        the first entry is the error before training.

    ax: matplotlib axis, default=None
        The axis to plot into. The default creates a new figure.

    log_scale: bool, default=False
        If True, the error axis is logarithmic.

    line_kwargs: args
        Any keyword arguments that can be passed to `matplotlib.pyplot.plot`.

    Returns
    -------
    ax: matplotlib axis
    """
    error_history = np.asarray(error_history, dtype=float)

    if error_history.ndim != 1:
        raise ValueError("`error_history` must be 1d.")

    if ax is None:
        fig = plt.figure(figsize=(6, 4))
        ax = fig.add_subplot(111)

    ax.plot(np.arange(error_history.shape[0]), error_history, **line_kwargs)

    if log_scale:
        ax.set_yscale('log')

    ax.set_xlabel('Training cycle')
    ax.set_ylabel('Total squared error')
    ax.grid(True)

    return ax

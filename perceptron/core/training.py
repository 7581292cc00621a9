""" Training loops built on the public operations of
:class:`perceptron.core.multilayer_perceptron.MultilayerPerceptron`
"""
import logging

import numpy


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

BATCH_MODE = 'batch'
ONLINE_MODE = 'online'
TRAINING_MODES = (BATCH_MODE, ONLINE_MODE)


def setup_logging(filename=None, level=logging.INFO):
    """ Sets up logging formatting, etc

    Parameters
    ----------
    filename: str, default=None
        If given, log messages are written to this file (replacing it);
        otherwise they go to standard error

    level: int, default=logging.INFO
        The logging level of the root logger
    """
    line_fmt = ("[%(asctime)s] [%(name)s:%(lineno)d] "
                "%(levelname)-8s %(message)s")

    date_fmt = "%Y-%m-%d %H:%M:%S"

    if filename is None:
        logging.basicConfig(format=line_fmt, datefmt=date_fmt, level=level)
    else:
        logging.basicConfig(
            filename=filename, filemode='w', format=line_fmt,
            datefmt=date_fmt, level=level)


def stop_early(error_history, history_len=100, tol=0.0):
    """ Returns True when the linear trend over the `history_len` most
    recent components of `error_history` is greater than or equal to `tol`,
    i.e., when the error has stopped decreasing
    """
    if history_len < 2:
        msg = "`history_len` ({}) must be at least 2"
        raise ValueError(msg.format(history_len))

    if len(error_history) < history_len:
        return False

    x = numpy.c_[numpy.ones(history_len), numpy.arange(history_len)+1]
    errors = numpy.array(error_history[-history_len:], dtype=float)
    (_, slope), _, _, _ = numpy.linalg.lstsq(x, errors, rcond=None)

    return slope >= tol


def collect_errors(task, error_list):
    """ Collects the total squared error over `task` after each training
    cycle. Errors are appended to :code:`error_list` and so an empty list
    should be provided. Usage::

        errors = []
        train(perceptron, task, 100, on_iterate=collect_errors(task, errors))
    """

    def on_iterate(i, perceptron):
        error_list.append(perceptron.total_squared_error(task))

    return on_iterate


def train(perceptron, task, iterations, mode=BATCH_MODE, on_iterate=None,
          stop_history_len=None, stop_tol=0.0, log_every=10):
    """ Run training cycles of `perceptron` on `task`

    Parameters
    ----------
    perceptron: MultilayerPerceptron
        The network to train

    task: LearningTask
        The learning examples

    iterations: int
        The (maximal) number of training cycles

    mode: str, default='batch'
        Either 'batch' (one weight update per cycle) or 'online' (one
        weight update per example)

    on_iterate: callable or list of callables, default=None
        Each is called as :code:`on_iterate(i, perceptron)` after the
        i'th cycle

    stop_history_len: int, default=None
        If given, training stops once :func:`stop_early` finds no
        decrease in the error over this many recent cycles

    stop_tol: float, default=0.0
        The slope tolerance passed to :func:`stop_early`

    log_every: int, default=10
        Log the error every `log_every` cycles

    Returns
    -------
    error_history: ndarray
        The total squared error over `task` before training and after each
        completed cycle; its length is one more than the number of cycles
        run
    """
    if mode not in TRAINING_MODES:
        msg = "Unknown training mode `{}`; should be one of {}"
        raise ValueError(msg.format(mode, TRAINING_MODES))

    if iterations < 0:
        msg = "`iterations` ({}) must be non-negative"
        raise ValueError(msg.format(iterations))

    if log_every < 1:
        msg = "`log_every` ({}) must be positive"
        raise ValueError(msg.format(log_every))

    if stop_history_len is not None and stop_history_len < 2:
        msg = "`stop_history_len` ({}) must be at least 2"
        raise ValueError(msg.format(stop_history_len))

    if on_iterate is None:
        on_iterate = []
    elif callable(on_iterate):
        on_iterate = [on_iterate]

    train_cycle = (perceptron.batch_train if mode == BATCH_MODE
                   else perceptron.online_train)

    error_history = [perceptron.total_squared_error(task)]
    logger.info("Initial error: {:.10f}".format(error_history[0]))

    for i in range(iterations):
        train_cycle(task)
        error_history.append(perceptron.total_squared_error(task))

        for func in on_iterate:
            func(i, perceptron)

        if (i+1) % log_every == 0 or i+1 == iterations:
            logger.info("({:0{width}d} / {:d}) {} training, error: {:.10f}"
                        .format(i+1, iterations, mode, error_history[-1],
                                width=len(str(iterations))))

        if (stop_history_len is not None and
                stop_early(error_history, stop_history_len, stop_tol)):
            msg = "Stopping early after {} cycles; error stopped decreasing"
            logger.info(msg.format(i+1))
            break

    return numpy.array(error_history)

import logging

import numpy

from perceptron.core.exception import ConfigurationError
from perceptron.strategy.strategy_base import (
    QuickPropState, UpdateStrategy, adapt_by_step_ranges,
    move_gradients_to_history)


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


class QuickPropagation(UpdateStrategy):
    """ Quick-propagation.

    Like :class:`Elastic`, every weight and bias carries a signed step
    range that is added to it once per training cycle. With current
    gradient `g`, previous gradient `p` and step range `s`:

    * :code:`g * p > 0`: `s` is kept (Manhattan-like descent);
    * :code:`g * p < 0`: a parabola is fitted through the two gradients.
      Its curvature is :code:`c = (p - g) / s`. If :code:`c < 0` and the
      step to the parabola's vertex, :code:`s * g / c`, is smaller than
      `max_step_range` in magnitude, that step is taken. Otherwise the
      step becomes :code:`-learn_rate * s`;
    * otherwise one of the gradients is zero and the sign of `s` is set
      against the non-zero one (`g` if possible, else `p`).

    A parameter whose current gradient is exactly zero is not changed.
    """

    def __init__(self, starting_step_range=0.1, max_step_range=1.0,
                 learn_rate=0.3):
        """
        Parameters
        ----------
        starting_step_range: float, default=0.1
            The (positive) initial step range of every weight and bias

        max_step_range: float, default=1.0
            The (positive) bound on the magnitude of a parabola step

        learn_rate: float, default=0.3
            The factor in (0, 1] applied to a step range when the parabola
            step is not taken
        """
        if starting_step_range <= 0:
            msg = "Starting step range ({}) must be positive"
            raise ConfigurationError(msg.format(starting_step_range))

        if max_step_range <= 0:
            msg = "Maximal step range ({}) must be positive"
            raise ConfigurationError(msg.format(max_step_range))

        if learn_rate <= 0 or learn_rate > 1:
            msg = "Learn rate ({}) must be in (0, 1]"
            raise ConfigurationError(msg.format(learn_rate))

        self.starting_step_range = float(starting_step_range)
        self.max_step_range = float(max_step_range)
        self.learn_rate = float(learn_rate)

        logger.debug("Created %r", self)

    def create_history(self, transition):
        return QuickPropState(
            transition, starting_step_range=self.starting_step_range)

    def next_step_range(self, step_range, gradient, previous_gradient):
        """ Compute the next step ranges from the current and previous
        gradients (all ndarrays of equal shape)

        Returns
        -------
        step_range, gradient, moved: ndarray, ndarray, ndarray (bool)
            See :func:`perceptron.strategy.strategy_base.adapt_by_step_ranges`
        """
        product = gradient * previous_gradient

        with numpy.errstate(divide='ignore', invalid='ignore'):
            curvature = (previous_gradient - gradient) / step_range
            vertex = step_range * gradient / curvature

        use_vertex = ((curvature < 0) &
                      (numpy.abs(vertex) < self.max_step_range))
        jumped = numpy.where(
            use_vertex, vertex, -self.learn_rate * step_range)

        nonzero = numpy.where(gradient != 0, gradient, previous_gradient)
        signed = numpy.where(
            nonzero != 0,
            -numpy.sign(nonzero) * numpy.abs(step_range), step_range)

        step_range = numpy.select(
            [product > 0, product < 0], [step_range, jumped], default=signed)

        return step_range, gradient, gradient != 0

    def adapt(self, transitions):
        adapt_by_step_ranges(transitions, self.next_step_range)

    def reset_gradients(self, transitions):
        move_gradients_to_history(transitions)
